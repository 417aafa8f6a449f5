"""Tests for warren.routing — patterns, registration order, dispatch."""

import pytest

from warren.errors import ConfigurationError
from warren.http.request import Request
from warren.http.response import Response
from warren.routing import Context, ExecutionContext, Router, compile_pattern
from warren.routing.pattern import normalize_path


class TestPathPattern:
    def test_static(self) -> None:
        pattern = compile_pattern("/api/hello")
        assert pattern.match("/api/hello") == {}
        assert pattern.match("/api/hello/") == {}
        assert pattern.match("/api") is None

    def test_root(self) -> None:
        pattern = compile_pattern("/")
        assert pattern.match("/") == {}
        assert pattern.match("/x") is None

    def test_named_param(self) -> None:
        pattern = compile_pattern("/blog/:slug")
        assert pattern.match("/blog/hello") == {"slug": "hello"}
        assert pattern.match("/blog/a/b") is None

    def test_custom_regex_param(self) -> None:
        pattern = compile_pattern("/docs/:rest{.+}")
        assert pattern.match("/docs/a/b/c") == {"rest": "a/b/c"}
        assert pattern.match("/docs") is None

    def test_subtree_wildcard(self) -> None:
        pattern = compile_pattern("/api/*")
        assert pattern.match("/api") == {}
        assert pattern.match("/api/users/1") == {}
        assert pattern.match("/apix") is None

    def test_global_wildcard(self) -> None:
        pattern = compile_pattern("/*")
        assert pattern.match("/") == {}
        assert pattern.match("/anything/at/all") == {}

    def test_wildcard_with_params(self) -> None:
        pattern = compile_pattern("/users/:id/*")
        assert pattern.match("/users/7/posts") == {"id": "7"}

    def test_depth(self) -> None:
        assert compile_pattern("/").depth == 0
        assert compile_pattern("/a/b").depth == 2
        assert compile_pattern("/a/*").depth == 2

    def test_duplicate_param_rejected(self) -> None:
        with pytest.raises(ConfigurationError, match="Duplicate parameter"):
            compile_pattern("/:id/:id")

    def test_invalid_regex_rejected(self) -> None:
        with pytest.raises(ConfigurationError, match="Invalid route pattern"):
            compile_pattern("/:id{[}")

    def test_normalize_path(self) -> None:
        assert normalize_path("") == "/"
        assert normalize_path("//a///b/") == "/a/b"


class TestRegistration:
    def test_entries_in_order(self) -> None:
        router = Router()

        async def handler(context, next):
            return None

        router.use("/*", handler)
        router.get("/a", handler)
        router.all("/b", handler)

        assert [(e.kind, e.method, e.pattern.source) for e in router.entries] == [
            ("middleware", "ALL", "/*"),
            ("handler", "GET", "/a"),
            ("handler", "ALL", "/b"),
        ]

    def test_unknown_method_rejected(self) -> None:
        router = Router()
        with pytest.raises(ConfigurationError, match="Unsupported HTTP method"):
            router.on("TRACE", "/a", lambda context, next: None)

    def test_frozen_router_rejects_registration(self) -> None:
        router = Router()
        router.freeze()
        assert router.frozen
        with pytest.raises(ConfigurationError, match="frozen"):
            router.get("/a", lambda context, next: None)


class TestDispatch:
    async def test_handler_response(self) -> None:
        router = Router()

        async def hello(context, next):
            return Response.text_response(f"hello {context.req.param('name')}")

        router.get("/hello/:name", hello)
        response = await router.dispatch(Request.build("GET", "/hello/ada"))
        assert response.status == 200
        assert response.text == "hello ada"

    async def test_no_match_is_404(self) -> None:
        response = await Router().dispatch(Request.build("GET", "/missing"))
        assert response.status == 404

    async def test_method_mismatch_is_404(self) -> None:
        router = Router()
        router.post("/a", lambda context, next: Response("posted"))
        response = await router.dispatch(Request.build("GET", "/a"))
        assert response.status == 404

    async def test_middleware_runs_in_registration_order(self) -> None:
        router = Router()
        order: list[str] = []

        def tracer(name: str):
            async def middleware(context, next):
                order.append(f"{name} in")
                response = await next()
                order.append(f"{name} out")
                return response

            return middleware

        router.use("/*", tracer("root"))
        router.use("/api/*", tracer("api"))
        router.get("/api/x", lambda context, next: Response("x"))

        response = await router.dispatch(Request.build("GET", "/api/x"))

        assert response.text == "x"
        assert order == ["root in", "api in", "api out", "root out"]

    async def test_middleware_sees_404_from_next(self) -> None:
        router = Router()
        seen: list[int] = []

        async def middleware(context, next):
            response = await next()
            seen.append(response.status)

        router.use("/*", middleware)
        response = await router.dispatch(Request.build("GET", "/nothing"))
        assert seen == [404]
        assert response.status == 404

    async def test_params_rebound_after_next(self) -> None:
        router = Router()
        seen: list[object] = []

        async def middleware(context, next):
            await next()
            seen.append(context.req.param())

        router.use("/users/:id/*", middleware)
        router.get("/users/:uid/posts", lambda context, next: Response("posts"))

        await router.dispatch(Request.build("GET", "/users/7/posts"))
        assert seen == [{"id": "7"}]

    async def test_next_twice_raises(self) -> None:
        router = Router()

        async def middleware(context, next):
            await next()
            await next()

        router.use("/*", middleware)
        with pytest.raises(RuntimeError, match="multiple times"):
            await router.dispatch(Request.build("GET", "/"))

    async def test_non_response_result_rejected(self) -> None:
        router = Router()
        router.get("/a", lambda context, next: {"not": "a response"})
        with pytest.raises(TypeError, match="expected Response"):
            await router.dispatch(Request.build("GET", "/a"))

    async def test_env_and_execution_ctx_passed(self) -> None:
        router = Router()
        execution_ctx = ExecutionContext()

        async def handler(context, next):
            assert context.execution_ctx is execution_ctx
            return Response(context.env["greeting"])

        router.get("/", handler)
        response = await router.dispatch(
            Request.build("GET", "/"), env={"greeting": "hi"}, execution_ctx=execution_ctx
        )
        assert response.text == "hi"


class TestHostContext:
    def test_staged_header_applied_to_later_response(self) -> None:
        context = Context(Request.build("GET", "/"))
        context.header("X-Trace-Id", "abc")
        context.res = Response("body")
        assert context.res.headers["X-Trace-Id"] == "abc"

    def test_header_applied_to_current_response(self) -> None:
        context = Context(Request.build("GET", "/"))
        context.res = Response("body")
        context.header("X-A", "1")
        assert context.res.headers["X-A"] == "1"

    def test_header_removal(self) -> None:
        context = Context(Request.build("GET", "/"))
        context.header("X-A", "1")
        context.res = Response("body")
        context.header("X-A", None)
        assert "X-A" not in context.res.headers
        context.res = Response("other")
        assert "X-A" not in context.res.headers

    def test_staged_values_survive_response_replacement(self) -> None:
        context = Context(Request.build("GET", "/"))
        context.header("Set-Cookie", ["a=1", "b=2"])
        context.res = Response("body", headers=[("Set-Cookie", "a=1"), ("Set-Cookie", "b=2")])
        assert context.res.headers.get_list("set-cookie") == ["a=1", "b=2"]
        context.res = Response("other")
        assert context.res.headers.get_list("set-cookie") == ["a=1", "b=2"]

    def test_staging_is_case_insensitive(self) -> None:
        context = Context(Request.build("GET", "/"))
        context.header("X-A", "1")
        context.header("x-a", "2")
        context.res = Response("body")
        assert context.res.headers.get_list("X-A") == ["2"]

    def test_finalized(self) -> None:
        context = Context(Request.build("GET", "/"))
        assert not context.finalized
        context.res = Response()
        assert context.finalized
