"""Exceptions raised on either side of the editor save protocol.

Server side, ``ApiUsageError`` is the action framework's abort signal:
handlers raise it with a message key and the framework turns it into a
user-facing API error.

Client side, every failed save attempt ends in an ``ActionApiError``
carrying the API error code and the raw response, so callers can inspect
what the server sent.
"""

from __future__ import annotations

from typing import Any


class ApiUsageError(Exception):
    """Fatal, user-facing API error.

    Attributes:
        message_key: Localisation key of the error message.
        params: Parameters substituted into the message.
        code: Machine-readable error code. Defaults to the message key
            without its ``apierror-`` prefix.
        http_code: HTTP status to respond with, if not the default.
    """

    def __init__(
        self,
        message_key: str,
        params: list[Any] | None = None,
        *,
        code: str | None = None,
        http_code: int | None = None,
    ) -> None:
        self.message_key = message_key
        self.params = list(params or [])
        self.code = code or message_key.removeprefix("apierror-")
        self.http_code = http_code
        super().__init__(self.message_key, *self.params)

    @classmethod
    def from_message(cls, message: str | list[Any] | tuple[Any, ...]) -> ApiUsageError:
        """Build from a message spec: a key, or a key followed by params."""
        if isinstance(message, str):
            return cls(message)
        key, *params = message
        return cls(str(key), params)


class ActionApiError(Exception):
    """A rejected action API request.

    Attributes:
        code: API error code (``badcachekey``, ``invalidresponse``, ``http``...).
        response: Decoded response payload, or error details for
            transport-level failures.
        raw_text: Raw response body, when one was received.
    """

    def __init__(
        self,
        code: str,
        response: dict[str, Any] | None = None,
        raw_text: str | None = None,
    ) -> None:
        self.code = code
        self.response = response or {}
        self.raw_text = raw_text
        super().__init__(code)


class InvalidResponseError(ActionApiError):
    """The response was missing an expected field or had the wrong shape."""


class NoErrorNoSuccessError(ActionApiError):
    """The response reported neither an error nor success.

    Raised when another server component (e.g. a CAPTCHA) interposes a
    challenge. Outer flows treat it as a hand-off rather than a failure.
    """
