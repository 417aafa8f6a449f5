"""Tests for warren.functions.context — the handler-facing context."""

import re
from dataclasses import replace

import pytest

from warren.functions.context import (
    OVERRIDE_REQUEST_KEY,
    TRACE_ID_KEY,
    SharedStore,
    ensure_trace_id,
    make_context,
    resolve_params,
)
from warren.http.request import Request
from warren.routing.context import Context, ExecutionContext


def _host(path: str = "/", **kwargs) -> Context:
    return Context(Request.build("GET", path), **kwargs)


class TestSharedStore:
    def test_set_is_visible_on_host(self) -> None:
        host = _host()
        SharedStore(host).set("user", "alice")
        assert host.get("user") == "alice"

    def test_host_values_visible_in_store(self) -> None:
        host = _host()
        host.set("user", "alice")
        store = SharedStore(host)
        assert store.get("user") == "alice"
        assert store.has("user")

    def test_get_default(self) -> None:
        assert SharedStore(_host()).get("missing", 3) == 3

    def test_delete_stores_none(self) -> None:
        host = _host()
        store = SharedStore(host)
        store.set("user", "alice")
        store.delete("user")
        assert not store.has("user")
        assert host.get("user") is None


class TestTraceId:
    def test_generated_once(self) -> None:
        store = SharedStore(_host())
        first = ensure_trace_id(store)
        assert re.fullmatch(r"[0-9a-f]{8}", first)
        assert ensure_trace_id(store) == first
        assert store.get(TRACE_ID_KEY) == first

    def test_distinct_per_request(self) -> None:
        ids = {ensure_trace_id(SharedStore(_host())) for _ in range(20)}
        assert len(ids) > 1


class TestResolveParams:
    def test_plain_params_copied(self) -> None:
        assert resolve_params({"slug": "a"}) == {"slug": "a"}

    def test_array_param_split(self) -> None:
        assert resolve_params({"rest": "a/b/c"}, {"rest"}) == {"rest": ["a", "b", "c"]}

    def test_array_param_empty_pieces_dropped(self) -> None:
        assert resolve_params({"rest": "a//b/"}, {"rest"}) == {"rest": ["a", "b"]}

    def test_missing_array_param_is_empty_list(self) -> None:
        assert resolve_params({}, {"rest"}) == {"rest": []}

    def test_single_segment_array_param(self) -> None:
        assert resolve_params({"section": "intro"}, {"section"}) == {"section": ["intro"]}


class TestMakeContext:
    def test_fields(self) -> None:
        execution_ctx = ExecutionContext()
        host = _host("/blog/a", env={"DB": "db"}, execution_ctx=execution_ctx)
        host.req.bind({"slug": "a"})

        context = make_context(host)

        assert context.request is host.req.raw
        assert context.env == {"DB": "db"}
        assert context.params == {"slug": "a"}
        assert context.locals is context.data
        assert context.next is None
        assert context.trace_id == host.get(TRACE_ID_KEY)

    async def test_wait_until_registers_with_host(self) -> None:
        execution_ctx = ExecutionContext()
        context = make_context(_host(execution_ctx=execution_ctx))

        async def work() -> None:
            pass

        coro = work()
        context.wait_until(coro)
        assert execution_ctx.drain() == [coro]
        await coro

    def test_wait_until_rejects_non_awaitables(self) -> None:
        context = make_context(_host())
        with pytest.raises(TypeError):
            context.wait_until("not awaitable")

    def test_array_params_applied(self) -> None:
        host = _host("/docs/a/b")
        host.req.bind({"section": "a/b"})
        context = make_context(host, {"section"})
        assert context.params == {"section": ["a", "b"]}

    def test_override_request_used(self) -> None:
        host = _host("/original")
        override = Request.build("GET", "/override")
        host.set(OVERRIDE_REQUEST_KEY, override)

        context = make_context(host)

        assert context.request.path == "/override"
        assert context.request is not override
        assert context.request.headers is not override.headers

    def test_replace_keeps_base_untouched(self) -> None:
        context = make_context(_host())

        async def continuation() -> None:
            return None

        derived = replace(context, next=continuation)
        assert derived.next is continuation
        assert context.next is None
        assert derived.data is context.data
