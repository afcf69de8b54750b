"""Tests for ActionApiClient token handling and error decoding."""

from __future__ import annotations

import httpx
import pytest

from visualedit.errors import ActionApiError, InvalidResponseError


class TestGetToken:
    """Tests for ActionApiClient.get_token."""

    async def test_fetches_and_caches_token(self, api, wiki) -> None:
        assert await api.get_token("csrf") == "token-1+\\"
        assert await api.get_token("csrf") == "token-1+\\"
        assert wiki.token_requests == 1

    async def test_missing_token_raises(self) -> None:
        from visualedit.saver.api_client import ActionApiClient

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"query": {"tokens": {}}})

        client = ActionApiClient(
            "http://wiki.test/w/api.php",
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        )
        async with client:
            with pytest.raises(ActionApiError) as exc_info:
                await client.get_token("csrf")

        assert exc_info.value.code == "notoken"


class TestPostWithToken:
    """Tests for ActionApiClient.post_with_token."""

    async def test_posts_multipart_with_token(self, api, wiki) -> None:
        wiki.reply({"visualeditoredit": {"result": "success"}})

        payload, raw = await api.post_with_token(
            "csrf",
            {"action": "visualeditoredit", "formatversion": 2, "flag": True},
            multipart=True,
        )

        assert payload == {"visualeditoredit": {"result": "success"}}
        assert raw == '{"visualeditoredit": {"result": "success"}}'
        assert wiki.posts == [
            {
                "action": "visualeditoredit",
                "formatversion": "2",
                "flag": "1",
                "token": "token-1+\\",
            }
        ]

    async def test_false_and_none_values_omitted(self, api, wiki) -> None:
        wiki.reply({"ok": True})

        await api.post_with_token("csrf", {"a": "x", "b": False, "c": None})

        assert wiki.posts == [{"a": "x", "token": "token-1+\\"}]

    async def test_badtoken_retried_with_fresh_token(self, api, wiki) -> None:
        wiki.error("badtoken")
        wiki.reply({"ok": True})

        payload, _ = await api.post_with_token("csrf", {"action": "edit"})

        assert payload == {"ok": True}
        assert [post["token"] for post in wiki.posts] == ["token-1+\\", "token-2+\\"]
        assert wiki.token_requests == 2

    async def test_badtoken_retried_only_once(self, api, wiki) -> None:
        wiki.error("badtoken")
        wiki.error("badtoken")

        with pytest.raises(ActionApiError) as exc_info:
            await api.post_with_token("csrf", {"action": "edit"})

        assert exc_info.value.code == "badtoken"
        assert len(wiki.posts) == 2

    async def test_api_error_code(self, api, wiki) -> None:
        wiki.error("badcachekey")

        with pytest.raises(ActionApiError) as exc_info:
            await api.post_with_token("csrf", {"action": "edit"})

        assert exc_info.value.code == "badcachekey"
        assert exc_info.value.response["errors"][0]["code"] == "badcachekey"
        assert exc_info.value.raw_text is not None
        assert len(wiki.posts) == 1

    async def test_legacy_error_format(self, api, wiki) -> None:
        wiki.reply({"error": {"code": "editconflict", "info": "Edit conflict"}})

        with pytest.raises(ActionApiError) as exc_info:
            await api.post_with_token("csrf", {"action": "edit"})

        assert exc_info.value.code == "editconflict"

    async def test_http_error_status(self, api, wiki) -> None:
        wiki.reply("Service Unavailable", status=503)

        with pytest.raises(ActionApiError) as exc_info:
            await api.post_with_token("csrf", {"action": "edit"})

        assert exc_info.value.code == "http"
        assert exc_info.value.response["status"] == 503
        assert exc_info.value.raw_text == "Service Unavailable"

    async def test_empty_response(self, api, wiki) -> None:
        wiki.reply("")

        with pytest.raises(ActionApiError) as exc_info:
            await api.post_with_token("csrf", {"action": "edit"})

        assert exc_info.value.code == "ok-but-empty"

    async def test_non_json_response(self, api, wiki) -> None:
        wiki.reply("<html>PHP fatal error</html>")

        with pytest.raises(ActionApiError) as exc_info:
            await api.post_with_token("csrf", {"action": "edit"})

        assert exc_info.value.code == "http"
        assert exc_info.value.response["exception"] == "parsererror"

    @pytest.mark.parametrize("body", ["[]", "null", '"oops"', "42"])
    async def test_non_object_json_is_invalid_response(self, api, wiki, body) -> None:
        wiki.reply(body)

        with pytest.raises(InvalidResponseError) as exc_info:
            await api.post_with_token("csrf", {"action": "edit"})

        assert exc_info.value.code == "invalidresponse"
        assert exc_info.value.raw_text == body

    async def test_non_object_error_entry(self, api, wiki) -> None:
        wiki.reply({"errors": ["badtoken"]})

        with pytest.raises(ActionApiError) as exc_info:
            await api.post_with_token("csrf", {"action": "edit"})

        assert exc_info.value.code == "unknown"
        assert len(wiki.posts) == 1

    async def test_transport_error(self, api, wiki) -> None:
        wiki.fail(httpx.ConnectError("connection reset"))

        with pytest.raises(ActionApiError) as exc_info:
            await api.post_with_token("csrf", {"action": "edit"})

        assert exc_info.value.code == "http"
        assert exc_info.value.raw_text is None
