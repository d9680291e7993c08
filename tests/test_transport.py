"""Tests for the OpenAI-compatible provider, using httpx.MockTransport."""

from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from orbit.errors import ProtocolError, RequestTimeoutError, TransportError
from orbit.llm.providers.openai_compat import OpenAICompatProvider
from orbit.llm.types import Message, StreamChunk, ToolCallRequest
from orbit.types import ErrorCode


def _provider(handler, api_key: str = "sk-test-key-1234567890") -> OpenAICompatProvider:
    return OpenAICompatProvider(
        url="https://llm.example.com",
        model="test-model",
        api_key=api_key,
        transport=httpx.MockTransport(handler),
    )


def _completion(content="hi", tool_calls=None, **extra) -> dict:
    message = {"role": "assistant", "content": content}
    if tool_calls is not None:
        message["tool_calls"] = tool_calls
    return {"choices": [{"message": message, "finish_reason": "stop"}], "model": "test-model", **extra}


MESSAGES = [Message(role="user", content="hello")]


class TestRequestBuilding:
    async def test_body_and_headers(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers.get("authorization")
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=_completion())

        tools = [{"type": "function", "function": {"name": "echo", "parameters": {}}}]
        await _provider(handler).send(MESSAGES, tools=tools, temperature=0.2, max_tokens=99)

        assert seen["url"] == "https://llm.example.com/v1/text/chatcompletion_v2"
        assert seen["auth"] == "Bearer sk-test-key-1234567890"
        body = seen["body"]
        assert body["model"] == "test-model"
        assert body["messages"] == [{"role": "user", "content": "hello"}]
        assert body["temperature"] == 0.2
        assert body["max_tokens"] == 99
        assert body["stream"] is False
        assert body["tools"] == tools

    async def test_tools_omitted_when_empty(self):
        seen = {}

        def handler(request):
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=_completion())

        await _provider(handler).send(MESSAGES, tools=[])
        assert "tools" not in seen["body"]

    async def test_no_auth_header_without_key(self):
        seen = {}

        def handler(request):
            seen["auth"] = request.headers.get("authorization")
            return httpx.Response(200, json=_completion())

        provider = _provider(handler, api_key="")
        await provider.send(MESSAGES)
        assert seen["auth"] is None
        assert provider.has_credentials is False

    async def test_tool_messages_serialized(self):
        seen = {}

        def handler(request):
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=_completion())

        messages = [
            Message(role="user", content="6*7?"),
            Message(
                role="assistant",
                tool_calls=[ToolCallRequest("c1", "calculator", '{"expression":"6*7"}')],
            ),
            Message(role="tool", content='{"result": 42}', tool_call_id="c1"),
        ]
        await _provider(handler).send(messages)
        wire = seen["body"]["messages"]
        assert wire[1]["tool_calls"][0] == {
            "id": "c1",
            "type": "function",
            "function": {"name": "calculator", "arguments": '{"expression":"6*7"}'},
        }
        assert wire[2] == {"role": "tool", "content": '{"result": 42}', "tool_call_id": "c1"}


class TestResponseParsing:
    async def test_text_response(self):
        result = await _provider(lambda r: httpx.Response(200, json=_completion("Hello"))).send(MESSAGES)
        assert result.content == "Hello"
        assert result.tool_calls == []
        assert result.finish_reason == "stop"

    async def test_null_content_becomes_empty(self):
        result = await _provider(lambda r: httpx.Response(200, json=_completion(None))).send(MESSAGES)
        assert result.content == ""

    async def test_tool_calls_parsed(self):
        tcs = [
            {"id": "a", "type": "function", "function": {"name": "calculator", "arguments": '{"expression":"1+1"}'}},
            {"id": "b", "type": "function", "function": {"name": "weather", "arguments": {"city": "Paris"}}},
        ]
        result = await _provider(lambda r: httpx.Response(200, json=_completion("", tcs))).send(MESSAGES)
        assert [tc.id for tc in result.tool_calls] == ["a", "b"]
        assert result.tool_calls[0].arguments_json == '{"expression":"1+1"}'
        assert json.loads(result.tool_calls[1].arguments_json) == {"city": "Paris"}

    async def test_duplicate_tool_call_ids_rejected(self):
        tc = {"id": "a", "type": "function", "function": {"name": "x", "arguments": "{}"}}
        with pytest.raises(ProtocolError, match="Duplicate"):
            await _provider(lambda r: httpx.Response(200, json=_completion("", [tc, tc]))).send(MESSAGES)

    async def test_missing_choices_is_protocol_error(self):
        with pytest.raises(ProtocolError) as exc_info:
            await _provider(lambda r: httpx.Response(200, json={"id": "x"})).send(MESSAGES)
        assert exc_info.value.code == ErrorCode.LLM_PROTOCOL_ERROR

    async def test_non_json_body_is_protocol_error(self):
        with pytest.raises(ProtocolError):
            await _provider(lambda r: httpx.Response(200, text="<html>")).send(MESSAGES)


class TestFailures:
    async def test_http_error_status(self):
        with pytest.raises(TransportError) as exc_info:
            await _provider(lambda r: httpx.Response(503, text="overloaded")).send(MESSAGES)
        assert exc_info.value.status == 503
        assert exc_info.value.body == "overloaded"
        assert "HTTP 503" in exc_info.value.message

    async def test_vendor_error_envelope(self):
        body = {"base_resp": {"status_code": 1004, "status_msg": "auth failed"}}
        with pytest.raises(TransportError, match="auth failed"):
            await _provider(lambda r: httpx.Response(200, json=body)).send(MESSAGES)

    async def test_zero_status_envelope_is_success(self):
        body = _completion("ok", base_resp={"status_code": 0, "status_msg": "success"})
        result = await _provider(lambda r: httpx.Response(200, json=body)).send(MESSAGES)
        assert result.content == "ok"

    async def test_network_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(TransportError) as exc_info:
            await _provider(handler).send(MESSAGES)
        assert exc_info.value.status is None

    async def test_httpx_timeout_mapped(self):
        def handler(request):
            raise httpx.ReadTimeout("read timed out", request=request)

        with pytest.raises(RequestTimeoutError) as exc_info:
            await _provider(handler).send(MESSAGES, timeout_ms=500)
        assert exc_info.value.timeout_ms == 500
        assert isinstance(exc_info.value, TimeoutError)

    async def test_slow_response_times_out(self):
        async def handler(request):
            await asyncio.sleep(1)
            return httpx.Response(200, json=_completion())

        with pytest.raises(RequestTimeoutError):
            await _provider(handler).send(MESSAGES, timeout_ms=20)


class TestStreaming:
    async def test_streamed_deltas(self):
        seen = {}
        payload = (
            'data: {"choices":[{"delta":{"content":"Hel"}}]}\n'
            'data: {"choices":[{"delta":{"content":"lo"}}]}\n'
            "data: [DONE]\n"
        )

        def handler(request):
            seen["body"] = json.loads(request.content)
            return httpx.Response(
                200, content=payload.encode(), headers={"content-type": "text/event-stream"}
            )

        chunks = [c async for c in _provider(handler).send_streaming(MESSAGES)]
        assert chunks == [StreamChunk(delta="Hel"), StreamChunk(delta="lo"), StreamChunk(done=True)]
        assert seen["body"]["stream"] is True
        assert "tools" not in seen["body"]

    async def test_stream_http_error(self):
        with pytest.raises(TransportError) as exc_info:
            async for _ in _provider(lambda r: httpx.Response(401, text="bad key")).send_streaming(MESSAGES):
                pass
        assert exc_info.value.status == 401

    async def test_stream_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("read timed out", request=request)

        with pytest.raises(RequestTimeoutError):
            async for _ in _provider(handler).send_streaming(MESSAGES, timeout_ms=100):
                pass
