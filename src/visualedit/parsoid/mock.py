"""Mock Parsoid client for development and testing.

This module provides an in-memory implementation of the
ParsoidClientProtocol that can be used without a running Parsoid service.

Conversions are deliberately trivial: wikitext is wrapped in a paragraph
and HTML is reduced to its text. What matters is the envelope shape and
the ETag bookkeeping, which mirror the real service.
"""

from __future__ import annotations

import hashlib
import html as html_lib
import re
from typing import TYPE_CHECKING, Any

from visualedit.parsoid.models import ParsoidResponse

if TYPE_CHECKING:
    from visualedit.parsoid.models import Language, PageIdentity, RevisionRecord

_TAG_PATTERN = re.compile(r"<[^>]+>")


def _make_etag(rev_id: int | None, content: str) -> str:
    """Generate a deterministic weak ETag for a revision and its content."""
    digest = hashlib.md5(content.encode()).hexdigest()[:12]
    return f'W/"{rev_id or 0}/{digest}"'


class MockParsoidClient:
    """Mock implementation of ParsoidClientProtocol.

    Every call is recorded in ``calls`` as a dict holding the method name
    and its arguments, including the ETag received by ``transform_html``.

    Args:
        error: If set, every response carries this error.
        extra_headers: Headers added to every response (e.g. ``x-cache``).
    """

    def __init__(
        self,
        *,
        error: list[Any] | None = None,
        extra_headers: dict[str, str] | None = None,
    ) -> None:
        self.calls: list[dict[str, Any]] = []
        self._error = error
        self._extra_headers = dict(extra_headers or {})

    def _respond(self, body: str, rev_id: int | None) -> ParsoidResponse:
        if self._error:
            return ParsoidResponse(
                code=500,
                reason="Internal Server Error",
                headers=dict(self._extra_headers),
                error=list(self._error),
            )
        headers = {
            "content-type": "text/html; charset=utf-8",
            "etag": _make_etag(rev_id, body),
        }
        headers.update(self._extra_headers)
        return ParsoidResponse(code=200, reason="OK", headers=headers, body=body)

    def get_page_html(
        self,
        revision: RevisionRecord,
        target_language: Language | None,
    ) -> ParsoidResponse:
        self.calls.append(
            {
                "method": "get_page_html",
                "revision": revision,
                "target_language": target_language,
            }
        )
        body = (
            "<!DOCTYPE html><html><head></head><body>"
            f"<p>{html_lib.escape(revision.page.title)}</p>"
            "</body></html>"
        )
        return self._respond(body, revision.rev_id)

    def transform_html(
        self,
        page: PageIdentity,
        target_language: Language,
        html: str,
        oldid: int | None,
        etag: str | None,
    ) -> ParsoidResponse:
        self.calls.append(
            {
                "method": "transform_html",
                "page": page,
                "target_language": target_language,
                "html": html,
                "oldid": oldid,
                "etag": etag,
            }
        )
        wikitext = html_lib.unescape(_TAG_PATTERN.sub("", html)).strip()
        return self._respond(wikitext, oldid)

    def transform_wikitext(
        self,
        page: PageIdentity,
        target_language: Language,
        wikitext: str,
        body_only: bool,
        oldid: int | None,
        stash: bool,
    ) -> ParsoidResponse:
        self.calls.append(
            {
                "method": "transform_wikitext",
                "page": page,
                "target_language": target_language,
                "wikitext": wikitext,
                "body_only": body_only,
                "oldid": oldid,
                "stash": stash,
            }
        )
        body = f"<p>{html_lib.escape(wikitext)}</p>"
        if not body_only:
            body = f"<!DOCTYPE html><html><head></head><body>{body}</body></html>"
        return self._respond(body, oldid)
