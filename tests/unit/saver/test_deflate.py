"""Tests for raw DEFLATE compression of submitted HTML."""

from __future__ import annotations

import base64
import zlib

import pytest

from visualedit.saver.deflate import DEFLATE_PREFIX, deflate, inflate


class TestDeflate:
    """Tests for deflate/inflate."""

    def test_prefix(self) -> None:
        assert deflate("<p>Hi</p>").startswith("rawdeflate,")

    def test_payload_is_raw_deflate(self) -> None:
        payload = base64.b64decode(deflate("<p>Hi</p>").removeprefix(DEFLATE_PREFIX))
        assert zlib.decompress(payload, -15) == b"<p>Hi</p>"

    def test_inflate_restores_unicode(self) -> None:
        html = "<p>Grüße, 世界 ✓</p>" * 50
        assert inflate(deflate(html, level=9)) == html

    def test_compresses_repetitive_content(self) -> None:
        html = "<p>same paragraph</p>" * 200
        assert len(deflate(html)) < len(html) / 5

    def test_inflate_passes_plain_content_through(self) -> None:
        assert inflate("<p>plain</p>") == "<p>plain</p>"

    @pytest.mark.parametrize(
        "content",
        ["rawdeflate,not base64!", "rawdeflate," + base64.b64encode(b"junk").decode()],
    )
    def test_inflate_rejects_invalid_payload(self, content: str) -> None:
        with pytest.raises(ValueError, match="Invalid deflated content"):
            inflate(content)
