"""Protocol defining the Parsoid client interface.

DirectParsoidClient, MockParsoidClient and the DualParsoidClient
decorator all implement this protocol, allowing them to be used
interchangeably.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from visualedit.parsoid.models import (
        Language,
        PageIdentity,
        ParsoidResponse,
        RevisionRecord,
    )


class ParsoidClientProtocol(Protocol):
    """Protocol for HTML/wikitext conversion clients."""

    def get_page_html(
        self,
        revision: RevisionRecord,
        target_language: Language | None,
    ) -> ParsoidResponse:
        """Request the HTML of a page revision.

        Args:
            revision: The revision to render.
            target_language: Language variant to convert to, if any.

        Returns:
            ParsoidResponse with the HTML in ``body`` and an ETag header.
        """
        ...

    def transform_html(
        self,
        page: PageIdentity,
        target_language: Language,
        html: str,
        oldid: int | None,
        etag: str | None,
    ) -> ParsoidResponse:
        """Transform edited HTML to wikitext.

        Args:
            page: The page being edited.
            target_language: The page's content language.
            html: The edited HTML document.
            oldid: The revision the edit is based on, if any.
            etag: The ETag of the HTML originally loaded for editing.

        Returns:
            ParsoidResponse with the wikitext in ``body``.
        """
        ...

    def transform_wikitext(
        self,
        page: PageIdentity,
        target_language: Language,
        wikitext: str,
        body_only: bool,
        oldid: int | None,
        stash: bool,
    ) -> ParsoidResponse:
        """Transform wikitext to HTML.

        Args:
            page: The page to use as the parsing context.
            target_language: The page's content language.
            wikitext: The wikitext to parse.
            body_only: Whether to return only the contents of ``<body>``.
            oldid: The revision to base the request on, if any.
            stash: Whether to stash the result in the server-side cache.

        Returns:
            ParsoidResponse with the HTML in ``body``.
        """
        ...
