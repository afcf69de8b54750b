"""Revision and page-language resolution for API request handlers."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from visualedit.errors import ApiUsageError

if TYPE_CHECKING:
    from visualedit.parsoid.models import Language, PageIdentity, RevisionRecord


class RevisionLookupProtocol(Protocol):
    """Read access to the wiki's revision storage."""

    def get_revision_by_title(self, page: PageIdentity) -> RevisionRecord | None:
        """Return the current revision of ``page``, or None if it has none."""
        ...

    def get_revision_by_id(self, rev_id: int) -> RevisionRecord | None:
        """Return the revision with id ``rev_id``, or None if there is none."""
        ...


def get_latest_revision(
    lookup: RevisionLookupProtocol, page: PageIdentity
) -> RevisionRecord:
    """Get the latest revision of a page.

    Raises:
        ApiUsageError: ``latestnotfound`` if the page has no revision.
    """
    latest = lookup.get_revision_by_title(page)
    if latest is not None:
        return latest
    raise ApiUsageError("apierror-visualeditor-latestnotfound", code="latestnotfound")


def _parse_oldid(oldid: int | str | None) -> int | None:
    """Normalise user input to a revision id; 0 and empty mean "latest"."""
    if oldid is None or isinstance(oldid, int):
        return oldid
    oldid = oldid.strip()
    if oldid == "":
        return 0
    if not (oldid.isascii() and oldid.isdigit()):
        raise ApiUsageError("apierror-nosuchrevid", [oldid], code="oldidnotfound")
    return int(oldid)


def get_valid_revision(
    lookup: RevisionLookupProtocol,
    page: PageIdentity | None = None,
    oldid: int | str | None = None,
) -> RevisionRecord:
    """Get a specific revision of a page.

    If ``oldid`` is omitted or 0, the latest revision of ``page`` is
    returned. Strings from user input are validated and converted.

    Raises:
        ApiUsageError: ``oldidnotfound`` (with the id as parameter) if
            ``oldid`` does not resolve, or ``latestnotfound``.
    """
    rev_id = _parse_oldid(oldid)
    if not rev_id:
        if page is None:
            msg = "A page is required when no revision id is given"
            raise ValueError(msg)
        return get_latest_revision(lookup, page)

    revision = lookup.get_revision_by_id(rev_id)
    if revision is not None:
        return revision
    raise ApiUsageError("apierror-nosuchrevid", [rev_id], code="oldidnotfound")


def get_page_language(
    page: PageIdentity,
    content_language: Language,
    collab_pad_page: str = "CollabPad",
) -> Language:
    """Get the content language of a page.

    The collaborative editing special page has no language of its own
    (special pages report the interface language), so the wiki's content
    language is used for it instead.
    """
    if page.is_special(collab_pad_page):
        # TODO: Let the user change the document language on multi-lingual sites.
        return content_language
    return page.language or content_language
