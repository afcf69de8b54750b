"""Save pipeline for edited documents.

Sanitises and deflates an edited document, posts it to the edit API
module with a CSRF token and validates the response. A post that used a
server-side cache key is retried once with the full content if the
server no longer knows the key.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from visualedit.errors import (
    ActionApiError,
    InvalidResponseError,
    NoErrorNoSuccessError,
)
from visualedit.saver.deflate import deflate
from visualedit.saver.sanitize import get_html

if TYPE_CHECKING:
    from collections.abc import Callable

    from bs4 import BeautifulSoup

    from visualedit.saver.api_client import ActionApiClient

logger = logging.getLogger(__name__)

BAD_CACHE_KEY = "badcachekey"
INVALID_RESPONSE_HTML = "Invalid response from server."


class SaveState(Enum):
    """Stages of a save attempt."""

    PREPARING = "preparing"
    POSTING = "posting"
    RETRYING_WITHOUT_CACHE_KEY = "retrying-without-cache-key"
    SUCCESS = "success"
    FAILED = "failed"


@dataclass
class SaveOptions:
    """Per-save callbacks.

    Attributes:
        on_cache_key_fail: Called when the server rejects the cache key,
            before the retry, so the caller can forget the key.
        now: Returns the current time (e.g. milliseconds) for tracking.
        track: Receives ``(event_name, {"bytes", "duration"})`` events.
        event_name: Base name for tracking events. Tracking is disabled
            unless this, ``track`` and ``now`` are all set.
    """

    on_cache_key_fail: Callable[[], None] | None = None
    now: Callable[[], float] | None = None
    track: Callable[[str, dict[str, Any]], None] | None = None
    event_name: str | None = None

    @property
    def tracking(self) -> bool:
        return bool(self.track and self.event_name and self.now)


def _invalid_response(
    code: str, response: dict[str, Any], raw_text: str | None
) -> InvalidResponseError:
    # Same shape as API errors
    error = {"code": code, "html": INVALID_RESPONSE_HTML}
    return InvalidResponseError(
        code, {"errors": [error], "response": response}, raw_text=raw_text
    )


class TargetSaver:
    """Posts edited content to the wiki's edit API module.

    Args:
        api: Action API client used to post with a CSRF token.
        user_language: Language for error messages.
        action: API module to post to.
        deflate_level: Compression level for ``deflate``.

    Attributes:
        state: Stage of the current save attempt.
        state_history: Stages of the current save attempt, in order.
            Reset when a new attempt starts.
    """

    def __init__(
        self,
        api: ActionApiClient,
        *,
        user_language: str = "en",
        action: str = "visualeditoredit",
        deflate_level: int = 5,
    ) -> None:
        self._api = api
        self._user_language = user_language
        self._action = action
        self._deflate_level = deflate_level
        self.state: SaveState | None = None
        self.state_history: list[SaveState] = []

    def _begin(self) -> None:
        """Start a new save attempt with an empty state history."""
        self.state = None
        self.state_history = []

    def _set_state(self, state: SaveState) -> None:
        logger.debug("Save state: %s", state.value)
        self.state = state
        self.state_history.append(state)

    def deflate(self, html: str) -> str:
        return deflate(html, self._deflate_level)

    def deflate_doc(
        self, doc: BeautifulSoup, old_doc: BeautifulSoup | None = None
    ) -> str:
        """Serialise, sanitise and deflate a document. Modifies ``doc``."""
        self._begin()
        self._set_state(SaveState.PREPARING)
        return self.deflate(get_html(doc, old_doc))

    async def save_doc(
        self,
        doc: BeautifulSoup,
        extra_data: dict[str, Any] | None = None,
        options: SaveOptions | None = None,
    ) -> dict[str, Any]:
        """Post an HTML document to the API.

        Serialises the document, deflates it, then passes it to ``post_html``.
        """
        html = self.deflate_doc(doc)
        return await self._post_html(html, None, extra_data, options)

    async def post_wikitext(
        self,
        wikitext: str,
        extra_data: dict[str, Any] | None = None,
        options: SaveOptions | None = None,
    ) -> dict[str, Any]:
        """Post wikitext to the API. Deflating is optional but recommended."""
        data = {"wikitext": wikitext, **(extra_data or {})}
        return await self.post_content(data, options)

    async def post_html(
        self,
        html: str,
        cache_key: str | None = None,
        extra_data: dict[str, Any] | None = None,
        options: SaveOptions | None = None,
    ) -> dict[str, Any]:
        """Post HTML to the API.

        Args:
            html: HTML to post. Deflating is optional but recommended.
                Required even when ``cache_key`` is given, for the retry.
            cache_key: Cache key of HTML stashed on the server.
            extra_data: Extra fields to send.
            options: Callbacks.

        Returns:
            The action's response data.

        Raises:
            ActionApiError: If the save failed (after at most one retry).
        """
        self._begin()
        return await self._post_html(html, cache_key, extra_data, options)

    async def _post_html(
        self,
        html: str,
        cache_key: str | None,
        extra_data: dict[str, Any] | None,
        options: SaveOptions | None,
    ) -> dict[str, Any]:
        options = options or SaveOptions()
        extra_data = extra_data or {}

        if cache_key:
            data = {"cachekey": cache_key, **extra_data}
        else:
            data = {"html": html, **extra_data}

        try:
            return await self._post_content(data, options)
        except ActionApiError as e:
            if e.code != BAD_CACHE_KEY:
                # Failed for some other reason - let caller handle it.
                self._set_state(SaveState.FAILED)
                raise

        # This cache key is evidently bad, clear it
        if options.on_cache_key_fail:
            options.on_cache_key_fail()

        logger.info("Cache key rejected, retrying with full content")
        self._set_state(SaveState.RETRYING_WITHOUT_CACHE_KEY)
        try:
            return await self._post_content({"html": html, **extra_data}, options)
        except ActionApiError:
            self._set_state(SaveState.FAILED)
            raise

    async def post_content(
        self,
        data: dict[str, Any],
        options: SaveOptions | None = None,
    ) -> dict[str, Any]:
        """Post content to the API, retrying automatically on ``badtoken``.

        By default uses ``action=visualeditoredit``, ``paction=save``.

        Returns:
            The action's response data.

        Raises:
            InvalidResponseError: The response lacked the expected fields.
            NoErrorNoSuccessError: The response reported neither error
                nor success.
            ActionApiError: Any other API or transport failure.
        """
        self._begin()
        try:
            return await self._post_content(data, options or SaveOptions())
        except ActionApiError:
            self._set_state(SaveState.FAILED)
            raise

    async def _post_content(
        self, data: dict[str, Any], options: SaveOptions
    ) -> dict[str, Any]:
        start = options.now() if options.now else 0.0

        data = {
            "action": self._action,
            "paction": "save",
            "format": "json",
            "formatversion": 2,
            "errorformat": "html",
            "errorlang": self._user_language,
            "errorsuselocal": True,
            **data,
        }
        action = data["action"]

        self._set_state(SaveState.POSTING)
        try:
            response, raw_text = await self._api.post_with_token(
                "csrf", data, multipart=True
            )
        except ActionApiError as e:
            if e.raw_text and options.tracking:
                if e.code == BAD_CACHE_KEY:
                    suffix = ".badCacheKey"
                else:
                    suffix = ".withoutCacheKey"
                self._track(options, suffix, e.raw_text, start)
            raise

        response_data = response.get(action)

        if options.tracking:
            with_key = isinstance(response_data, dict) and response_data.get("cachekey")
            suffix = ".withCacheKey" if with_key else ".withoutCacheKey"
            self._track(options, suffix, raw_text, start)

        if not isinstance(response_data, dict):
            raise _invalid_response("invalidresponse", response, raw_text)

        if response_data.get("result") != "success":
            # Only happens when saving an edit and getting a CAPTCHA
            # (result 'error') from another extension.
            raise NoErrorNoSuccessError("no-error-no-success", response, raw_text)

        paction = response_data.get("paction")
        if paction in ("save", "serialize"):
            field = "content"
        elif paction == "diff":
            field = "diff"
        else:
            field = None
        if field and not isinstance(response_data.get(field), str):
            raise _invalid_response("invalidcontent", response, raw_text)

        self._set_state(SaveState.SUCCESS)
        return response_data

    def _track(
        self, options: SaveOptions, suffix: str, raw_text: str, start: float
    ) -> None:
        assert options.track is not None
        assert options.now is not None
        event = {
            "bytes": len(raw_text.encode("utf-8")),
            "duration": options.now() - start,
        }
        options.track(f"performance.system.{options.event_name}{suffix}", event)
