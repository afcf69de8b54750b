"""Shared fixtures for save pipeline tests.

``FakeWiki`` stands in for ``api.php`` behind an httpx.MockTransport: it
hands out CSRF tokens and answers each post with the next queued reply.
"""

from __future__ import annotations

import json
from typing import Any

import httpx
import pytest

from visualedit.saver.api_client import ActionApiClient

API_URL = "http://wiki.test/w/api.php"


def _multipart_fields(request: httpx.Request) -> dict[str, str]:
    """Decode a multipart/form-data body into a field dict."""
    content_type = request.headers["content-type"]
    boundary = content_type.split("boundary=", 1)[1].encode()
    fields: dict[str, str] = {}
    for part in request.content.split(b"--" + boundary):
        if b"\r\n\r\n" not in part:
            continue
        head, _, value = part.partition(b"\r\n\r\n")
        name = head.split(b'name="', 1)[1].split(b'"', 1)[0].decode()
        fields[name] = value.removesuffix(b"\r\n").decode()
    return fields


class FakeWiki:
    """Fake action API.

    Attributes:
        posts: Decoded form fields of every POST, in order.
        token_requests: Number of token fetches.
    """

    def __init__(self) -> None:
        self.posts: list[dict[str, str]] = []
        self.token_requests = 0
        self._replies: list[httpx.Response | Exception] = []

    def reply(self, payload: dict[str, Any] | str, status: int = 200) -> None:
        """Queue the reply for the next POST."""
        text = payload if isinstance(payload, str) else json.dumps(payload)
        self._replies.append(httpx.Response(status, text=text))

    def fail(self, exc: Exception) -> None:
        """Queue a transport failure for the next POST."""
        self._replies.append(exc)

    def error(self, code: str) -> None:
        """Queue an API error reply in formatversion 2 / errorformat html shape."""
        self.reply({"errors": [{"code": code, "html": f"Error: {code}"}]})

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if request.method == "GET":
            self.token_requests += 1
            token = f"token-{self.token_requests}+\\"
            return httpx.Response(
                200, json={"query": {"tokens": {"csrftoken": token}}}
            )

        if request.headers["content-type"].startswith("multipart/form-data"):
            self.posts.append(_multipart_fields(request))
        else:
            self.posts.append(dict(httpx.QueryParams(request.content.decode())))

        reply = self._replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


@pytest.fixture
def wiki() -> FakeWiki:
    return FakeWiki()


@pytest.fixture
async def api(wiki: FakeWiki):
    client = ActionApiClient(
        API_URL,
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(wiki)),
    )
    yield client
    await client.aclose()
