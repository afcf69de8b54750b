"""HTTP client for a Parsoid REST service.

This module implements the ParsoidClientProtocol by talking directly to
a Parsoid service's v3 REST endpoints. Failures are reported inside the
returned ParsoidResponse rather than raised, so that callers can turn
them into API errors in one place.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

import httpx

from visualedit.parsoid.models import ParsoidResponse

if TYPE_CHECKING:
    from visualedit.parsoid.models import (
        Authority,
        Language,
        PageIdentity,
        RevisionRecord,
    )

logger = logging.getLogger(__name__)

USER_AGENT = "visualedit/0.1.0"


def _title_path(title: str) -> str:
    """Encode a page title as a URL path segment (spaces become underscores)."""
    return quote(title.replace(" ", "_"), safe=":")


def _to_envelope(response: httpx.Response) -> ParsoidResponse:
    """Convert an httpx response, mapping error statuses to an error envelope."""
    error = None
    if response.status_code >= 400:
        error = [
            "apierror-visualeditor-docserver-http",
            response.status_code,
            response.reason_phrase,
        ]
    return ParsoidResponse(
        code=response.status_code,
        reason=response.reason_phrase,
        headers=dict(response.headers),
        body=response.text,
        error=error,
    )


class DirectParsoidClient:
    """ParsoidClient that calls the Parsoid service over HTTP.

    Args:
        url: Base URL of the Parsoid service.
        domain: Wiki domain the service should render for.
        authority: The user the requests are made for.
        timeout: Request timeout in seconds.
        http_client: Optional pre-built client (tests pass one with a
            mock transport, the factory passes a shared one). When omitted,
            the client creates its own and closes it in ``close``.
    """

    def __init__(
        self,
        url: str,
        domain: str,
        authority: Authority,
        *,
        timeout: float = 100.0,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._base = f"{url.rstrip('/')}/{domain}/v3"
        self._authority = authority
        self._timeout = timeout
        self._owns_client = http_client is None
        self._client = http_client or httpx.Client(
            timeout=timeout,
            headers={"User-Agent": USER_AGENT},
        )

    def __enter__(self) -> DirectParsoidClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client:
            self._client.close()

    def _request(
        self,
        method: str,
        path: str,
        *,
        language: Language | None,
        headers: dict[str, str] | None = None,
        json: dict[str, Any] | None = None,
    ) -> ParsoidResponse:
        request_headers = dict(headers or {})
        if language is not None:
            request_headers["Accept-Language"] = language.code

        url = f"{self._base}/{path}"
        logger.debug(
            "Parsoid %s %s for %s", method, url, self._authority.user_name
        )
        try:
            response = self._client.request(
                method,
                url,
                headers=request_headers,
                json=json,
                timeout=self._timeout,
            )
        except httpx.HTTPError as e:
            logger.warning("Parsoid request failed: %s %s: %s", method, url, e)
            return ParsoidResponse(
                code=0,
                reason=type(e).__name__,
                error=["apierror-visualeditor-docserver-http-error", str(e)],
            )

        if response.status_code >= 400:
            logger.warning(
                "Parsoid returned HTTP %d for %s %s",
                response.status_code,
                method,
                url,
            )
        return _to_envelope(response)

    def get_page_html(
        self,
        revision: RevisionRecord,
        target_language: Language | None,
    ) -> ParsoidResponse:
        path = f"page/html/{_title_path(revision.page.title)}"
        if revision.rev_id:
            path += f"/{revision.rev_id}"
        return self._request("GET", path, language=target_language)

    def transform_html(
        self,
        page: PageIdentity,
        target_language: Language,
        html: str,
        oldid: int | None,
        etag: str | None,
    ) -> ParsoidResponse:
        path = f"transform/html/to/wikitext/{_title_path(page.title)}"
        if oldid:
            path += f"/{oldid}"

        headers = {}
        payload: dict[str, Any] = {"html": html}
        if etag:
            headers["If-Match"] = etag
            payload["original"] = {"etag": etag}

        return self._request(
            "POST", path, language=target_language, headers=headers, json=payload
        )

    def transform_wikitext(
        self,
        page: PageIdentity,
        target_language: Language,
        wikitext: str,
        body_only: bool,
        oldid: int | None,
        stash: bool,
    ) -> ParsoidResponse:
        path = f"transform/wikitext/to/html/{_title_path(page.title)}"
        if oldid:
            path += f"/{oldid}"

        payload = {
            "wikitext": wikitext,
            "body_only": body_only,
            "stash": stash,
        }
        return self._request("POST", path, language=target_language, json=payload)
