"""Shared pytest fixtures for visualedit tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from visualedit.parsoid.factory import clear_config_cache

if TYPE_CHECKING:
    from collections.abc import Generator


@pytest.fixture(autouse=True)
def _reset_config_cache() -> Generator[None]:
    """Drop cached settings and the shared mock backend around every test."""
    clear_config_cache()
    yield
    clear_config_cache()
