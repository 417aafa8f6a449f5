"""Tests for warren.http — headers, request, and response value types."""

import pytest

from warren.http.headers import Headers
from warren.http.request import Request
from warren.http.response import JSON_CONTENT_TYPE, TEXT_CONTENT_TYPE, Response


class TestHeaders:
    def test_case_insensitive(self) -> None:
        headers = Headers({"Content-Type": "text/plain"})
        assert headers["content-type"] == "text/plain"
        assert "CONTENT-TYPE" in headers

    def test_set_replaces_all_values(self) -> None:
        headers = Headers([("Set-Cookie", "a=1"), ("Set-Cookie", "b=2")])
        headers["set-cookie"] = "c=3"
        assert headers.get_list("Set-Cookie") == ["c=3"]

    def test_append_keeps_values(self) -> None:
        headers = Headers()
        headers.append("Set-Cookie", "a=1")
        headers.append("Set-Cookie", "b=2")
        assert headers.get_list("set-cookie") == ["a=1", "b=2"]
        assert len(headers) == 1
        assert list(headers) == ["Set-Cookie"]

    def test_delete(self) -> None:
        headers = Headers({"X-A": "1"})
        del headers["x-a"]
        assert "X-A" not in headers
        with pytest.raises(KeyError):
            del headers["X-A"]

    def test_construction_copies(self) -> None:
        original = Headers({"Vary": "Accept"})
        copy = Headers(original)
        copy["Vary"] = "Origin"
        assert original["vary"] == "Accept"
        assert original.copy() == original
        assert original.copy() is not original

    def test_equality_ignores_case(self) -> None:
        assert Headers({"X-A": "1"}) == Headers({"x-a": "1"})

    def test_raw_round_trip(self) -> None:
        headers = Headers({"X-Trace-Id": "abc"})
        assert headers.raw == [(b"x-trace-id", b"abc")]
        assert Headers.from_raw(headers.raw)["X-Trace-Id"] == "abc"

    def test_values_stringified(self) -> None:
        headers = Headers()
        headers["Content-Length"] = 5
        assert headers["content-length"] == "5"


class TestRequest:
    def test_build_splits_query(self) -> None:
        request = Request.build("get", "/search?q=warren&page=2")
        assert request.method == "GET"
        assert request.path == "/search"
        assert request.query == {"q": "warren", "page": "2"}
        assert request.url == "/search?q=warren&page=2"

    def test_clone_has_own_headers(self) -> None:
        request = Request.build("GET", "/", headers={"X-A": "1"})
        clone = request.clone()
        assert clone == request
        assert clone.headers is not request.headers

    def test_with_helpers_leave_original(self) -> None:
        request = Request.build("GET", "/a")
        assert request.with_header("X-A", "1").headers["x-a"] == "1"
        assert request.with_method("post").method == "POST"
        assert request.with_path("/b").path == "/b"
        assert "X-A" not in request.headers
        assert request.method == "GET"
        assert request.path == "/a"

    def test_body_accessors(self) -> None:
        request = Request.build("POST", "/", body='{"a": 1}')
        assert request.text == '{"a": 1}'
        assert request.json() == {"a": 1}
        assert Request.build("POST", "/").json() is None

    async def test_from_asgi_reads_chunked_body(self) -> None:
        messages = iter(
            [
                {"type": "http.request", "body": b"hel", "more_body": True},
                {"type": "http.request", "body": b"lo", "more_body": False},
            ]
        )

        async def receive() -> dict[str, object]:
            return next(messages)

        scope = {
            "type": "http",
            "method": "post",
            "path": "/echo",
            "query_string": b"x=1",
            "headers": [(b"content-type", b"text/plain")],
            "client": ("127.0.0.1", 1234),
        }
        request = await Request.from_asgi(scope, receive)

        assert request.method == "POST"
        assert request.body == b"hello"
        assert request.query == {"x": "1"}
        assert request.headers["Content-Type"] == "text/plain"
        assert request.client == ("127.0.0.1", 1234)


class TestResponse:
    def test_text_response(self) -> None:
        response = Response.text_response("hi", status=201)
        assert response.status == 201
        assert response.content_type == TEXT_CONTENT_TYPE

    def test_json(self) -> None:
        response = Response.json({"a": [1]})
        assert response.content_type == JSON_CONTENT_TYPE
        assert response.json_body() == {"a": [1]}

    def test_json_keeps_explicit_content_type(self) -> None:
        response = Response.json({}, headers={"Content-Type": "application/problem+json"})
        assert response.content_type == "application/problem+json"

    def test_json_unserializable(self) -> None:
        with pytest.raises(TypeError):
            Response.json(object())

    def test_empty(self) -> None:
        response = Response.empty()
        assert response.status == 204
        assert response.body_bytes == b""

    def test_headers_coerced(self) -> None:
        assert isinstance(Response(headers={"X-A": "1"}).headers, Headers)
