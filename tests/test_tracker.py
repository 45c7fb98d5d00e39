"""Test the GitHub tracker client and issue decoding."""

import httpx
import pytest

from issuebot.core.errors import DecodeError, HttpStatusError, TransportError
from issuebot.issues.tracker import Assignee, IssueRecord, TrackerClient

ISSUE = {
    "number": 42,
    "title": "Fix the thing",
    "state": "open",
    "html_url": "https://github.com/bolt/bolt/issues/42",
    "assignee": None,
}


def make_client(handler, **kwargs) -> TrackerClient:
    return TrackerClient("bolt", "bolt", "s3cret", transport=httpx.MockTransport(handler), **kwargs)


class TestIssueRecordFromJson:
    def test_decodes_fields(self):
        issue = IssueRecord.from_json(ISSUE)
        assert issue.number == 42.0
        assert isinstance(issue.number, float)
        assert issue.title == "Fix the thing"
        assert issue.state == "open"
        assert issue.assignee is None

    def test_decodes_assignee(self):
        issue = IssueRecord.from_json({**ISSUE, "assignee": {"login": "bopp", "id": 1}})
        assert issue.assignee == Assignee("bopp")

    def test_missing_assignee_key(self):
        data = dict(ISSUE)
        del data["assignee"]
        assert IssueRecord.from_json(data).assignee is None

    def test_ignores_extra_fields(self):
        assert IssueRecord.from_json({**ISSUE, "labels": [], "body": "x"}).number == 42

    @pytest.mark.parametrize("field", ["number", "title", "state", "html_url"])
    def test_missing_field_raises(self, field):
        data = dict(ISSUE)
        del data[field]
        with pytest.raises(DecodeError) as exc_info:
            IssueRecord.from_json(data)
        assert exc_info.value.details == {"field": field}

    def test_string_number_raises(self):
        with pytest.raises(DecodeError):
            IssueRecord.from_json({**ISSUE, "number": "42"})

    def test_bool_number_raises(self):
        with pytest.raises(DecodeError):
            IssueRecord.from_json({**ISSUE, "number": True})

    def test_assignee_without_login_raises(self):
        with pytest.raises(DecodeError):
            IssueRecord.from_json({**ISSUE, "assignee": {"id": 1}})

    def test_number_beyond_float_range_raises(self):
        with pytest.raises(DecodeError) as exc_info:
            IssueRecord.from_json({**ISSUE, "number": 10**400})
        assert exc_info.value.details == {"field": "number"}

    def test_non_object_raises(self):
        with pytest.raises(DecodeError) as exc_info:
            IssueRecord.from_json([ISSUE])
        assert exc_info.value.code == "not_object"


class TestTrackerClient:
    @pytest.mark.asyncio
    async def test_request_shape(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=ISSUE)

        issue = await make_client(handler).fetch_issue("42")

        assert issue.number == 42
        assert len(seen) == 1
        request = seen[0]
        assert request.method == "GET"
        assert request.url.path == "/repos/bolt/bolt/issues/42"
        assert request.url.host == "api.github.com"
        assert request.url.params["access_token"] == "s3cret"

    @pytest.mark.asyncio
    async def test_custom_base_url(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=ISSUE)

        await make_client(handler, base_url="https://ghe.example.com/api/v3/").fetch_issue("7")
        expected = "https://ghe.example.com/api/v3/repos/bolt/bolt/issues/7?"
        assert str(seen[0].url).startswith(expected)

    @pytest.mark.asyncio
    async def test_no_cache(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200, json=ISSUE)

        client = make_client(handler)
        await client.fetch_issue("42")
        await client.fetch_issue("42")
        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_404_raises_http_status_error(self):
        client = make_client(lambda request: httpx.Response(404, json={"message": "Not Found"}))
        with pytest.raises(HttpStatusError) as exc_info:
            await client.fetch_issue("9999")
        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_5xx_is_not_retried(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(502)

        with pytest.raises(HttpStatusError):
            await make_client(handler).fetch_issue("1")
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_invalid_json_raises_decode_error(self):
        client = make_client(lambda request: httpx.Response(200, text="<html>oops</html>"))
        with pytest.raises(DecodeError) as exc_info:
            await client.fetch_issue("1")
        assert exc_info.value.code == "invalid_json"

    @pytest.mark.asyncio
    async def test_wrong_shape_raises_decode_error(self):
        client = make_client(lambda request: httpx.Response(200, json={"message": "hi"}))
        with pytest.raises(DecodeError):
            await client.fetch_issue("1")

    @pytest.mark.asyncio
    async def test_connect_error_raises_transport_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Connection refused", request=request)

        with pytest.raises(TransportError) as exc_info:
            await make_client(handler).fetch_issue("1")
        assert isinstance(exc_info.value.original_error, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_read_timeout_raises_transport_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("Read timed out", request=request)

        with pytest.raises(TransportError):
            await make_client(handler).fetch_issue("1")

    @pytest.mark.asyncio
    async def test_huge_number_in_body_raises_decode_error(self):
        body = '{"number": 1' + "0" * 400 + ', "title": "t", "state": "open", "html_url": "u"}'
        client = make_client(lambda request: httpx.Response(200, text=body))
        with pytest.raises(DecodeError) as exc_info:
            await client.fetch_issue("7")
        assert exc_info.value.code == "bad_field"

    @pytest.mark.asyncio
    async def test_broken_gzip_body_raises_decode_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, headers={"Content-Encoding": "gzip"}, content=b"not gzip")

        with pytest.raises(DecodeError) as exc_info:
            await make_client(handler).fetch_issue("7")
        assert exc_info.value.code == "bad_encoding"
        assert isinstance(exc_info.value.original_error, httpx.DecodingError)

    @pytest.mark.asyncio
    async def test_redirect_loop_raises_transport_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.TooManyRedirects("Exceeded maximum allowed redirects", request=request)

        with pytest.raises(TransportError) as exc_info:
            await make_client(handler).fetch_issue("7")
        assert exc_info.value.code == "request"
