"""Decorator ParsoidClient that keeps edit sessions on one backend.

The purpose of this decorator is to ensure that editing sessions that
loaded HTML from one ParsoidClient implementation use the same
implementation when saving the HTML, even when the preferred
implementation was changed on the server while the editor was open.

If the HTML submitted on save is not handled by the implementation that
originally provided it, the ETag will mismatch and the edit will fail.
The implementation is therefore recorded inside the ETag handed to the
client, and removed again before an ETag is passed back to a backend.
"""

from __future__ import annotations

import dataclasses
import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from visualedit.parsoid.factory import ParsoidClientFactory
    from visualedit.parsoid.models import (
        Authority,
        Language,
        PageIdentity,
        ParsoidResponse,
        RevisionRecord,
    )
    from visualedit.parsoid.protocol import ParsoidClientProtocol

# Backend reached directly. Further modes get their own identifier.
MODE_DIRECT = "direct"

_ETAG_PATTERN = re.compile(r'^(W/)?"(.*)"$')
_MODE_PREFIX_PATTERN = re.compile(r'"(\w+):', re.ASCII)


def inject_mode(response: ParsoidResponse, mode: str = MODE_DIRECT) -> ParsoidResponse:
    """Return ``response`` with ``mode`` recorded inside its ETag header.

    ``W/"abc"`` becomes ``W/"direct:abc"``. Responses without an ETag are
    returned unchanged.
    """
    etag = response.headers.get("etag")
    if etag is None:
        return response

    tagged = _ETAG_PATTERN.sub(
        lambda m: f'{m.group(1) or ""}"{mode}:{m.group(2)}"', etag
    )
    return dataclasses.replace(response, headers={**response.headers, "etag": tagged})


def strip_mode(etag: str) -> str:
    """Remove any mode prefix between a double-quote and a colon.

    Restores the ETag originally emitted by the backend. Untagged ETags
    are returned unchanged.
    """
    return _MODE_PREFIX_PATTERN.sub('"', etag)


class DualParsoidClient:
    """ParsoidClient that delegates to a backend chosen per call.

    The backend is created by the factory on every call and never cached
    here: configuration may differ between calls, and session continuity
    comes from the mode recorded in the ETag.

    Args:
        factory: Factory creating the concrete backend clients.
        authority: The user the requests are made for.
    """

    def __init__(self, factory: ParsoidClientFactory, authority: Authority) -> None:
        self._factory = factory
        self._authority = authority

    def _create_parsoid_client(self) -> ParsoidClientProtocol:
        return self._factory.create_parsoid_client_internal(self._authority)

    def get_page_html(
        self,
        revision: RevisionRecord,
        target_language: Language | None,
    ) -> ParsoidResponse:
        client = self._create_parsoid_client()
        result = client.get_page_html(revision, target_language)
        return inject_mode(result)

    def transform_html(
        self,
        page: PageIdentity,
        target_language: Language,
        html: str,
        oldid: int | None,
        etag: str | None,
    ) -> ParsoidResponse:
        client = self._create_parsoid_client()

        if etag:
            etag = strip_mode(etag)

        result = client.transform_html(page, target_language, html, oldid, etag)
        return inject_mode(result)

    def transform_wikitext(
        self,
        page: PageIdentity,
        target_language: Language,
        wikitext: str,
        body_only: bool,
        oldid: int | None,
        stash: bool,
    ) -> ParsoidResponse:
        client = self._create_parsoid_client()
        result = client.transform_wikitext(
            page, target_language, wikitext, body_only, oldid, stash
        )
        return inject_mode(result)
