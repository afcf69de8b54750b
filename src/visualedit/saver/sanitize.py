"""Preparation of an edited HTML document for submission.

Removes elements that must never be saved (scripts, embedded objects,
tracking and trust-seal widgets injected by browser extensions), copies
document metadata from the originally loaded document and serialises
the result.
"""

from __future__ import annotations

import copy

from bs4 import BeautifulSoup, Doctype, Tag

# Junk that may have been added by browser plugins
_JUNK_SELECTORS = [
    "script",
    "noscript",
    "object",
    "style:not([data-mw])",  # allow <style data-mw> (e.g. TemplateStyles)
    "embed",
    'a[href^="javascript:"]',
    'img[src^="data:"]',
    'div[id="myEventWatcherDiv"]',
    'div[id="sendToInstapaperResults"]',
    'div[id="kloutify"]',
    'div[id^="mittoHidden"]',
    "div.hon.certificateLink",  # HON
    "div.donut-container",  # Web of Trust
    "div.shield-container",  # Web of Trust
]

_SECTION_ID_ATTR = "data-mw-section-id"


def parse_document(html: str) -> BeautifulSoup:
    """Parse an HTML document for use with ``get_html``."""
    return BeautifulSoup(html, "html.parser")


def _ensure_part(doc: BeautifulSoup, name: str) -> Tag:
    """Return the ``html``, ``head`` or ``body`` element, creating it if absent."""
    part = doc.find(name)
    if isinstance(part, Tag):
        return part

    tag = doc.new_tag(name)
    if name == "html":
        for node in list(doc.contents):
            if not isinstance(node, Doctype):
                tag.append(node.extract())
        doc.append(tag)
    else:
        root = _ensure_part(doc, "html")
        if name == "head":
            root.insert(0, tag)
        else:
            for node in list(root.contents):
                if not (isinstance(node, Tag) and node.name == "head"):
                    tag.append(node.extract())
            root.append(tag)
    return tag


def _copy_attributes(source: Tag, target: Tag) -> None:
    for name, value in source.attrs.items():
        target[name] = list(value) if isinstance(value, list) else value


def _copy_from_old_doc(new_doc: BeautifulSoup, old_doc: BeautifulSoup) -> None:
    """Transplant the head and html/head/body attributes of ``old_doc``."""
    new_head = _ensure_part(new_doc, "head")
    old_head = old_doc.find("head")
    if isinstance(old_head, Tag):
        for child in old_head.contents:
            new_head.append(copy.copy(child))

    for name in ("html", "head", "body"):
        old_part = old_doc.find(name)
        if isinstance(old_part, Tag):
            _copy_attributes(old_part, _ensure_part(new_doc, name))


def remove_junk(doc: BeautifulSoup) -> int:
    """Remove denylisted elements from ``doc``. Returns how many were removed."""
    removed = 0
    for element in doc.select(", ".join(_JUNK_SELECTORS)):
        # Descendants of an already removed element are gone too
        if element.decomposed:
            continue
        element.decompose()
        removed += 1
    return removed


def serialize(doc: BeautifulSoup) -> str:
    """Serialise a document, leaving out any doctype."""
    return "".join(str(node) for node in doc.contents if not isinstance(node, Doctype))


def get_html(new_doc: BeautifulSoup, old_doc: BeautifulSoup | None = None) -> str:
    """Get the HTML to send to Parsoid.

    If the document was generated from scratch, the source document can be
    passed in to transplant the head, as well as the attributes on the
    html, head and body tags.

    Args:
        new_doc: Document to save. Will be modified.
        old_doc: Old document to copy metadata from.

    Returns:
        The full HTML document, with doctype.
    """
    if old_doc is not None:
        _copy_from_old_doc(new_doc, old_doc)

    remove_junk(new_doc)

    # Section ids are copied to headings when sections are unwrapped.
    # Remove them so they don't count as modifications.
    for element in new_doc.select(f"[{_SECTION_ID_ATTR}]:not(section)"):
        del element[_SECTION_ID_ATTR]

    return "<!doctype html>" + serialize(new_doc)
