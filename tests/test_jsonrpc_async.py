"""Unit tests for the async dispatch path."""
import asyncio
import json

import pytest

from src.jsonrpc.faults import MethodNotFound
from src.jsonrpc.handler import JSONRPCHandler
from src.jsonrpc.models import ErrorCode


@pytest.fixture
def handler():
    h = JSONRPCHandler()

    async def echo(params):
        return params

    async def sleep_then_return(params):
        delay, value = params
        await asyncio.sleep(delay)
        return value

    h.register_function("echo", echo, namespace="util")
    h.register_function("later", sleep_then_return)
    h.register_function("sync_add", lambda params: params[0] + params[1])
    return h


@pytest.mark.asyncio
async def test_async_successful_call(handler):
    raw = await handler.handle_async(
        '{"jsonrpc":"2.0","id":1,"method":"util.echo","params":["x"]}'
    )

    assert json.loads(raw) == {"jsonrpc": "2.0", "id": 1, "result": ["x"]}


@pytest.mark.asyncio
async def test_async_accepts_sync_callbacks(handler):
    raw = await handler.handle_async(
        '{"jsonrpc":"2.0","id":2,"method":"sync_add","params":[2,2]}'
    )

    assert json.loads(raw)["result"] == 4


@pytest.mark.asyncio
async def test_async_batch_keeps_input_order(handler):
    """Test that a slow first item still comes out first."""
    raw = await handler.handle_async(json.dumps([
        {"jsonrpc": "2.0", "id": 1, "method": "later", "params": [0.05, "slow"]},
        {"jsonrpc": "2.0", "method": "later", "params": [0, "ignored"]},
        {"jsonrpc": "2.0", "id": 3, "method": "later", "params": [0, "fast"]},
    ]))

    assert json.loads(raw) == [
        {"jsonrpc": "2.0", "id": 1, "result": "slow"},
        {"jsonrpc": "2.0", "id": 3, "result": "fast"},
    ]


@pytest.mark.asyncio
async def test_async_batch_runs_concurrently(handler):
    started = []
    release = asyncio.Event()

    async def wait_for_peer(params):
        started.append(params[0])
        if len(started) == 2:
            release.set()
        await asyncio.wait_for(release.wait(), timeout=1.0)
        return params[0]

    handler.register_function("wait_for_peer", wait_for_peer)

    raw = await handler.handle_async(json.dumps([
        {"jsonrpc": "2.0", "id": 1, "method": "wait_for_peer", "params": ["a"]},
        {"jsonrpc": "2.0", "id": 2, "method": "wait_for_peer", "params": ["b"]},
    ]))

    assert [r["result"] for r in json.loads(raw)] == ["a", "b"]


@pytest.mark.asyncio
async def test_async_notification(handler):
    assert await handler.handle_async('{"jsonrpc":"2.0","method":"util.echo"}') is None


@pytest.mark.asyncio
async def test_async_fault_mapping(handler):
    async def lookup(params):
        raise MethodNotFound(data="inner.lookup")

    async def crash(params):
        raise KeyError("secret-key")

    handler.register_function("lookup", lookup)
    handler.register_function("crash", crash)

    raw = await handler.handle_async(json.dumps([
        {"jsonrpc": "2.0", "id": 1, "method": "lookup"},
        {"jsonrpc": "2.0", "id": 2, "method": "crash"},
    ]))
    lookup_response, crash_response = json.loads(raw)

    assert lookup_response["error"]["code"] == ErrorCode.METHOD_NOT_FOUND
    assert lookup_response["error"]["data"] == "inner.lookup"
    assert crash_response["error"]["code"] == ErrorCode.INTERNAL_ERROR
    assert "secret-key" not in raw


@pytest.mark.asyncio
async def test_async_parse_error(handler):
    response = json.loads(await handler.handle_async("[1, 2"))

    assert response["id"] is None
    assert response["error"]["code"] == ErrorCode.PARSE_ERROR


@pytest.mark.asyncio
async def test_async_unexpected_batch_item_failure_keeps_siblings(handler, monkeypatch):
    """Test that one failing item is answered on its own and the others still run."""
    validate = handler.validator.validate

    def flaky_validate(message):
        if message.get("id") == "bad":
            raise RuntimeError("validator exploded")
        return validate(message)

    monkeypatch.setattr(handler.validator, "validate", flaky_validate)

    raw = await handler.handle_async(json.dumps([
        {"jsonrpc": "2.0", "id": 1, "method": "later", "params": [0.01, "first"]},
        {"jsonrpc": "2.0", "id": "bad", "method": "util.echo"},
        {"jsonrpc": "2.0", "id": 3, "method": "later", "params": [0, "third"]},
    ]))

    assert json.loads(raw) == [
        {"jsonrpc": "2.0", "id": 1, "result": "first"},
        {"jsonrpc": "2.0", "id": "bad", "error": {
            "code": ErrorCode.INTERNAL_ERROR, "message": "Internal error",
        }},
        {"jsonrpc": "2.0", "id": 3, "result": "third"},
    ]


@pytest.mark.asyncio
async def test_async_nan_result_is_internal_error(handler):
    async def nan(params):
        return float("nan")

    handler.register_function("nan", nan)

    raw = await handler.handle_async('{"jsonrpc": "2.0", "id": 1, "method": "nan"}')

    assert json.loads(raw)["error"]["code"] == ErrorCode.INTERNAL_ERROR
