"""Parsoid clients for converting between HTML and wikitext.

Usage:
    from visualedit.parsoid import get_parsoid_client

    client = get_parsoid_client(Authority(user_name="Example"))
    response = client.get_page_html(revision, Language("en"))

    # The ETag now records which backend served the HTML
    etag = response.etag
"""

from __future__ import annotations

from visualedit.parsoid.dual import (
    MODE_DIRECT,
    DualParsoidClient,
    inject_mode,
    strip_mode,
)
from visualedit.parsoid.factory import (
    ParsoidClientFactory,
    clear_config_cache,
    get_parsoid_client,
)
from visualedit.parsoid.models import (
    Authority,
    Language,
    PageIdentity,
    ParsoidResponse,
    RevisionRecord,
)
from visualedit.parsoid.protocol import ParsoidClientProtocol

__all__ = [
    "MODE_DIRECT",
    "Authority",
    "DualParsoidClient",
    "Language",
    "PageIdentity",
    "ParsoidClientFactory",
    "ParsoidClientProtocol",
    "ParsoidResponse",
    "RevisionRecord",
    "clear_config_cache",
    "get_parsoid_client",
    "inject_mode",
    "strip_mode",
]
