"""Client-side save pipeline.

Usage:
    from visualedit.saver import ActionApiClient, TargetSaver, parse_document

    async with ActionApiClient("https://wiki.example/w/api.php") as api:
        saver = TargetSaver(api)
        result = await saver.save_doc(
            parse_document(html),
            extra_data={"page": "Main Page", "etag": etag},
        )
"""

from __future__ import annotations

from visualedit.saver.api_client import ActionApiClient
from visualedit.saver.deflate import DEFLATE_PREFIX, deflate, inflate
from visualedit.saver.sanitize import get_html, parse_document
from visualedit.saver.target_saver import (
    BAD_CACHE_KEY,
    SaveOptions,
    SaveState,
    TargetSaver,
)

__all__ = [
    "BAD_CACHE_KEY",
    "DEFLATE_PREFIX",
    "ActionApiClient",
    "SaveOptions",
    "SaveState",
    "TargetSaver",
    "deflate",
    "get_html",
    "inflate",
    "parse_document",
]
