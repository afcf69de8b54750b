"""Tests for recording the backend mode inside ETags."""

from __future__ import annotations

import pytest

from visualedit.parsoid.dual import MODE_DIRECT, inject_mode, strip_mode
from visualedit.parsoid.models import ParsoidResponse

ETAGS = [
    '"1234/abcd-ef01"',
    'W/"1234/abcd-ef01"',
    '"0/5f2b1c"',
    'W/"98765/8e1d0c7a-2c44-11ef-9f0d-1a2b3c4d5e6f"',
]


def _tag(etag: str) -> str:
    response = ParsoidResponse(code=200, headers={"ETag": etag})
    result = inject_mode(response).etag
    assert result is not None
    return result


class TestInjectMode:
    """Tests for inject_mode."""

    def test_injects_mode_after_quote(self) -> None:
        assert _tag('"1234/abc"') == '"direct:1234/abc"'

    def test_keeps_weak_prefix(self) -> None:
        assert _tag('W/"1234/abc"') == 'W/"direct:1234/abc"'

    @pytest.mark.parametrize("etag", ETAGS)
    def test_weak_prefix_unchanged(self, etag: str) -> None:
        assert _tag(etag).startswith("W/") == etag.startswith("W/")

    def test_response_without_etag_is_untouched(self) -> None:
        response = ParsoidResponse(code=200, headers={"content-type": "text/html"})
        assert inject_mode(response) is response

    def test_does_not_mutate_original_response(self) -> None:
        response = ParsoidResponse(code=200, headers={"etag": '"1/a"'})
        inject_mode(response)
        assert response.etag == '"1/a"'

    def test_other_fields_preserved(self) -> None:
        response = ParsoidResponse(
            code=200,
            reason="OK",
            headers={"etag": '"1/a"', "x-cache": "miss"},
            body="<p>x</p>",
        )
        tagged = inject_mode(response)
        assert tagged.body == "<p>x</p>"
        assert tagged.reason == "OK"
        assert tagged.headers["x-cache"] == "miss"

    def test_custom_mode(self) -> None:
        response = ParsoidResponse(code=200, headers={"etag": '"1/a"'})
        assert inject_mode(response, "other").etag == '"other:1/a"'

    def test_unquoted_etag_left_alone(self) -> None:
        response = ParsoidResponse(code=200, headers={"etag": "1/a"})
        assert inject_mode(response).etag == "1/a"


class TestStripMode:
    """Tests for strip_mode."""

    def test_strips_mode(self) -> None:
        assert strip_mode('"direct:1234/abc"') == '"1234/abc"'

    def test_strips_mode_from_weak_etag(self) -> None:
        assert strip_mode('W/"direct:1234/abc"') == 'W/"1234/abc"'

    @pytest.mark.parametrize("etag", ETAGS)
    def test_strip_reverses_tag(self, etag: str) -> None:
        assert strip_mode(_tag(etag)) == etag

    @pytest.mark.parametrize("etag", ETAGS)
    def test_untagged_etag_unchanged(self, etag: str) -> None:
        assert strip_mode(etag) == etag

    @pytest.mark.parametrize("etag", ETAGS)
    def test_idempotent(self, etag: str) -> None:
        once = strip_mode(_tag(etag))
        assert strip_mode(once) == once

    def test_strips_any_word_prefix(self) -> None:
        assert strip_mode('W/"restbase:1/a"') == 'W/"1/a"'

    def test_mode_constant(self) -> None:
        assert MODE_DIRECT == "direct"
