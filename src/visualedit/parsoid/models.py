"""Data models shared by Parsoid clients and the request handlers.

These dataclasses describe pages, revisions and the response envelope
returned by every ParsoidClient implementation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Language:
    """A content language, identified by its code (e.g. ``en``)."""

    code: str


@dataclass(frozen=True)
class PageIdentity:
    """Identity of a wiki page.

    Attributes:
        title: Prefixed page title, e.g. ``Main Page`` or ``Special:CollabPad``.
        language: The page's own content language, if known.
    """

    title: str
    language: Language | None = None

    def is_special(self, name: str) -> bool:
        """Whether this is the special page ``name`` (or a subpage of it)."""
        if not self.title.startswith("Special:"):
            return False
        base = self.title.removeprefix("Special:").split("/", 1)[0]
        return base == name


@dataclass(frozen=True)
class Authority:
    """The user on whose behalf backend requests are made."""

    user_name: str
    rights: frozenset[str] = frozenset()


@dataclass(frozen=True)
class RevisionRecord:
    """An immutable reference to one revision of a page."""

    page: PageIdentity
    rev_id: int


@dataclass(frozen=True)
class ParsoidResponse:
    """Response envelope returned by Parsoid clients.

    Header names are lower-cased on construction.

    Attributes:
        code: HTTP status code of the backend response.
        reason: HTTP reason phrase.
        headers: Response headers, keyed by lower-case name.
        body: Response body.
        error: Message key, or key followed by parameters, when the request
            failed.
    """

    code: int
    reason: str = ""
    headers: dict[str, str] = field(default_factory=dict)
    body: str = ""
    error: str | list[Any] | None = None

    def __post_init__(self) -> None:
        lowered = {name.lower(): value for name, value in self.headers.items()}
        object.__setattr__(self, "headers", lowered)

    @property
    def etag(self) -> str | None:
        return self.headers.get("etag")
