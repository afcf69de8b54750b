"""Helpers for contacting Parsoid from the action API.

``ApiParsoidHandler`` is used by the editor's API modules: it resolves
the page language, calls the ParsoidClient and forwards backend errors
and cache headers to the API response.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from visualedit.errors import ApiUsageError
from visualedit.revisions import get_page_language
from visualedit.saver.deflate import inflate

if TYPE_CHECKING:
    from visualedit.parsoid.models import (
        Language,
        PageIdentity,
        ParsoidResponse,
        RevisionRecord,
    )
    from visualedit.parsoid.protocol import ParsoidClientProtocol

logger = logging.getLogger(__name__)

CACHED_RESPONSE_HEADER = "X-Cache: cached-response=true"


class ApiParsoidHandler:
    """Calls Parsoid on behalf of one API request.

    Args:
        parsoid_client: Client to use, normally a DualParsoidClient.
        content_language: The wiki's content language.
        response_headers: Raw ``Name: value`` header lines to send with
            the API response. Appended to in place.
        collab_pad_page: Name of the collaborative editing special page.
    """

    def __init__(
        self,
        parsoid_client: ParsoidClientProtocol,
        content_language: Language,
        response_headers: list[str] | None = None,
        *,
        collab_pad_page: str = "CollabPad",
    ) -> None:
        self._client = parsoid_client
        self._content_language = content_language
        self.response_headers = response_headers if response_headers is not None else []
        self._collab_pad_page = collab_pad_page

    def get_page_language(self, page: PageIdentity) -> Language:
        return get_page_language(page, self._content_language, self._collab_pad_page)

    def forward_errors_and_cache_headers(self, response: ParsoidResponse) -> None:
        """Abort on a backend error, else mirror an edge cache hit.

        Raises:
            ApiUsageError: If the response carries an error.
        """
        if response.error:
            logger.warning("Parsoid request failed: %s", response.error)
            raise ApiUsageError.from_message(response.error)

        # If the response was served from the edge cache, declare the
        # cache hit to the client.
        x_cache = response.headers.get("x-cache")
        if x_cache is not None and "hit" in x_cache:
            self.response_headers.append(CACHED_RESPONSE_HEADER)

    def request_page_html(self, revision: RevisionRecord) -> ParsoidResponse:
        """Request the HTML of a page revision."""
        lang = self.get_page_language(revision.page)

        response = self._client.get_page_html(revision, lang)

        self.forward_errors_and_cache_headers(response)
        return response

    def transform_html(
        self,
        page: PageIdentity,
        html: str,
        oldid: int | None = None,
        etag: str | None = None,
    ) -> ParsoidResponse:
        """Transform HTML to wikitext.

        Args:
            page: The page being edited.
            html: The edited HTML, optionally deflated.
            oldid: The revision the edit is based on, if any.
            etag: The ETag the HTML was originally served with.

        Returns:
            The backend response, with the wikitext in ``body``.

        Raises:
            ApiUsageError: If the HTML cannot be inflated or the backend
                reports an error.
        """
        try:
            html = inflate(html)
        except ValueError as e:
            raise ApiUsageError("apierror-visualeditor-badcompressed") from e

        lang = self.get_page_language(page)

        response = self._client.transform_html(page, lang, html, oldid, etag)

        self.forward_errors_and_cache_headers(response)
        return response

    def transform_wikitext(
        self,
        page: PageIdentity,
        wikitext: str,
        body_only: bool,
        oldid: int | None = None,
        stash: bool = False,
    ) -> ParsoidResponse:
        """Transform wikitext to HTML, using ``page`` as the parsing context."""
        lang = self.get_page_language(page)

        response = self._client.transform_wikitext(
            page, lang, wikitext, body_only, oldid, stash
        )

        self.forward_errors_and_cache_headers(response)
        return response
