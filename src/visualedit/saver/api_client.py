"""Async client for the wiki action API.

Posts forms to ``api.php`` with a token of the requested type,
refreshing the token and retrying once when the server reports it as
expired (``badtoken``).
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from visualedit.errors import ActionApiError, InvalidResponseError

logger = logging.getLogger(__name__)


def _form_value(value: Any) -> str | None:
    """Encode a parameter the way the action API expects (booleans by presence)."""
    if value is None or value is False:
        return None
    if value is True:
        return "1"
    return str(value)


def _error_code(payload: dict[str, Any]) -> str | None:
    """Extract the first error code from an API response, if any."""
    errors = payload.get("errors")
    if isinstance(errors, list) and errors:
        first = errors[0]
        if isinstance(first, dict):
            return str(first.get("code", "unknown"))
        return "unknown"
    error = payload.get("error")
    if isinstance(error, dict):
        return str(error.get("code", "unknown"))
    return None


class ActionApiClient:
    """Client for one wiki's action API.

    Args:
        api_url: URL of the wiki's ``api.php``.
        http_client: Optional pre-built client (tests pass one with a
            mock transport). Cookies persist on it between requests.
    """

    def __init__(
        self,
        api_url: str,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_url = api_url
        self._client = http_client or httpx.AsyncClient(timeout=60)
        self._tokens: dict[str, str] = {}

    async def __aenter__(self) -> ActionApiClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def _decode(self, response: httpx.Response) -> tuple[dict[str, Any], str]:
        text = response.text
        if not response.is_success:
            raise ActionApiError(
                "http",
                {"status": response.status_code, "xhr": {"responseText": text}},
                raw_text=text,
            )
        if not text:
            raise ActionApiError("ok-but-empty", {"xhr": {"responseText": text}})
        try:
            payload = response.json()
        except ValueError as e:
            raise ActionApiError(
                "http",
                {"exception": "parsererror", "xhr": {"responseText": text}},
                raw_text=text,
            ) from e

        if not isinstance(payload, dict):
            raise InvalidResponseError(
                "invalidresponse", {"response": payload}, raw_text=text
            )

        code = _error_code(payload)
        if code is not None:
            raise ActionApiError(code, payload, raw_text=text)
        return payload, text

    async def get_token(self, token_type: str = "csrf") -> str:
        """Get a token of ``token_type``, fetching it on first use.

        Raises:
            ActionApiError: If the request fails or no token is returned.
        """
        if token_type in self._tokens:
            return self._tokens[token_type]

        params = {
            "action": "query",
            "meta": "tokens",
            "type": token_type,
            "format": "json",
            "formatversion": "2",
        }
        try:
            response = await self._client.get(self._api_url, params=params)
        except httpx.HTTPError as e:
            raise ActionApiError("http", {"exception": str(e)}) from e

        payload, _ = self._decode(response)
        token = payload.get("query", {}).get("tokens", {}).get(f"{token_type}token")
        if not token:
            raise ActionApiError("notoken", payload)

        self._tokens[token_type] = token
        return token

    async def _post(
        self, data: dict[str, Any], *, multipart: bool
    ) -> tuple[dict[str, Any], str]:
        fields = {
            name: encoded
            for name, value in data.items()
            if (encoded := _form_value(value)) is not None
        }
        try:
            if multipart:
                response = await self._client.post(
                    self._api_url,
                    files={name: (None, value) for name, value in fields.items()},
                )
            else:
                response = await self._client.post(self._api_url, data=fields)
        except httpx.HTTPError as e:
            raise ActionApiError("http", {"exception": str(e)}) from e
        return self._decode(response)

    async def post_with_token(
        self,
        token_type: str,
        data: dict[str, Any],
        *,
        multipart: bool = False,
    ) -> tuple[dict[str, Any], str]:
        """Post ``data`` with a token, retrying once if the token expired.

        Args:
            token_type: Token type, e.g. ``csrf``.
            data: Form fields. ``None``/``False`` values are omitted.
            multipart: Send as ``multipart/form-data`` instead of urlencoded.

        Returns:
            The decoded response payload and the raw response text.

        Raises:
            ActionApiError: With the API error code, or ``http`` for
                transport and HTTP-level failures.
        """
        token = await self.get_token(token_type)
        try:
            return await self._post({**data, "token": token}, multipart=multipart)
        except ActionApiError as e:
            if e.code != "badtoken":
                raise
            logger.info("%s token expired, fetching a new one", token_type)
            del self._tokens[token_type]

        token = await self.get_token(token_type)
        return await self._post({**data, "token": token}, multipart=multipart)
