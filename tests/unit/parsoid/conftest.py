"""Shared fixtures for Parsoid client tests."""

from __future__ import annotations

import pytest

from visualedit.parsoid.mock import MockParsoidClient
from visualedit.parsoid.models import (
    Authority,
    Language,
    PageIdentity,
    ParsoidResponse,
    RevisionRecord,
)


class StubFactory:
    """Factory handing out a fixed sequence of backend clients."""

    def __init__(self, *clients: MockParsoidClient) -> None:
        self._clients = list(clients)
        self.authorities: list[Authority] = []

    def create_parsoid_client_internal(self, authority: Authority) -> MockParsoidClient:
        self.authorities.append(authority)
        if len(self._clients) > 1:
            return self._clients.pop(0)
        return self._clients[0]


class FixedResponseClient(MockParsoidClient):
    """Mock client returning one canned response for every call."""

    def __init__(self, response: ParsoidResponse) -> None:
        super().__init__()
        self._response = response

    def _respond(self, body: str, rev_id: int | None) -> ParsoidResponse:
        return self._response


@pytest.fixture
def authority() -> Authority:
    return Authority(user_name="Example")


@pytest.fixture
def page() -> PageIdentity:
    return PageIdentity("Main Page", language=Language("de"))


@pytest.fixture
def revision(page: PageIdentity) -> RevisionRecord:
    return RevisionRecord(page=page, rev_id=1234)


@pytest.fixture
def mock_client() -> MockParsoidClient:
    return MockParsoidClient()


@pytest.fixture
def stub_factory(mock_client: MockParsoidClient) -> StubFactory:
    return StubFactory(mock_client)


@pytest.fixture
def make_fixed_client():
    """Build a client that answers every call with ``response``."""
    return FixedResponseClient


@pytest.fixture
def make_stub_factory():
    """Build a factory handing out the given clients in order."""
    return StubFactory
