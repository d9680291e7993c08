"""
OpenAI-compatible chat-completion provider.

Works with any endpoint that speaks the OpenAI chat-completion wire
protocol -- OpenAI itself, MiniMax (``/v1/text/chatcompletion_v2``), vLLM,
LM Studio, LocalAI, etc.

Dependencies: ``httpx`` (async HTTP client).  No vendor SDK needed.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import AsyncIterator

import httpx

from orbit.errors import ProtocolError, RequestTimeoutError, TransportError
from orbit.llm.providers.base import Provider
from orbit.llm.schemas import CHAT_RESPONSE_SCHEMA
from orbit.llm.stream_decoder import decode_stream
from orbit.llm.types import ChatResult, Message, StreamChunk, ToolCallRequest
from orbit.validation import validate

logger = logging.getLogger(__name__)


class OpenAICompatProvider(Provider):
    """
    Provider for any OpenAI-API-compatible endpoint.

    Parameters
    ----------
    url:
        Base URL of the API, e.g. ``"https://api.minimax.io"`` or
        ``"http://localhost:8080/v1"``.
    model:
        Model identifier sent in the ``model`` field.
    api_key:
        Bearer token.  Pass ``""`` for unauthenticated local endpoints.
    chat_path:
        Path of the chat-completion route, appended to *url*.
    transport:
        Optional ``httpx`` transport, used by tests to stub the network.
    """

    def __init__(
        self,
        url: str = "https://api.minimax.io",
        model: str = "MiniMax-M2.1",
        api_key: str = "",
        chat_path: str = "/v1/text/chatcompletion_v2",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._url = url.rstrip("/")
        self._model = model
        self._api_key = api_key
        self._chat_path = "/" + chat_path.lstrip("/")
        self._transport = transport

    # ------------------------------------------------------------------
    # Provider interface
    # ------------------------------------------------------------------

    @property
    def name(self) -> str:
        return "openai-compat"

    @property
    def model(self) -> str:
        return self._model

    @property
    def endpoint(self) -> str:
        return f"{self._url}{self._chat_path}"

    @property
    def has_credentials(self) -> bool:
        return bool(self._api_key)

    async def send(
        self,
        messages: list[Message],
        *,
        tools: list[dict] | None = None,
        temperature: float = 0.7,
        max_tokens: int = 4096,
        timeout_ms: int = 60_000,
    ) -> ChatResult:
        body = self._build_body(messages, tools, temperature, max_tokens, stream=False)
        try:
            data = await asyncio.wait_for(
                self._post(body, timeout_ms), timeout=timeout_ms / 1000
            )
        except asyncio.TimeoutError:
            raise RequestTimeoutError(timeout_ms) from None
        return self._parse_response(data)

    async def send_streaming(
        self,
        messages: list[Message],
        *,
        temperature: float = 0.7,
        max_tokens: int = 4096,
        timeout_ms: int = 60_000,
    ) -> AsyncIterator[StreamChunk]:
        body = self._build_body(messages, None, temperature, max_tokens, stream=True)
        headers = self._build_headers(stream=True)

        try:
            async with self._client(timeout_ms) as client:
                async with client.stream(
                    "POST", self.endpoint, json=body, headers=headers
                ) as response:
                    if not response.is_success:
                        # Read body so the connection is released.
                        await response.aread()
                        raise TransportError(response.status_code, response.text)

                    async for chunk in decode_stream(response.aiter_bytes()):
                        yield chunk
        except httpx.TimeoutException:
            raise RequestTimeoutError(timeout_ms) from None
        except httpx.TransportError as exc:
            raise TransportError(None, str(exc)) from exc

    # ------------------------------------------------------------------
    # Request building
    # ------------------------------------------------------------------

    def _client(self, timeout_ms: int) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=httpx.Timeout(timeout_ms / 1000), transport=self._transport
        )

    def _build_headers(self, stream: bool) -> dict[str, str]:
        headers: dict[str, str] = {
            "Content-Type": "application/json",
            "Accept": "text/event-stream" if stream else "application/json",
        }
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    def _build_body(
        self,
        messages: list[Message],
        tools: list[dict] | None,
        temperature: float,
        max_tokens: int,
        stream: bool,
    ) -> dict:
        body: dict = {
            "model": self._model,
            "messages": [m.to_wire() for m in messages],
            "temperature": temperature,
            "max_tokens": max_tokens,
            "stream": stream,
        }
        if tools:
            body["tools"] = tools
            body["tool_choice"] = "auto"
        logger.info(
            "REQUEST: model=%s stream=%s tools=%d messages=%d api_key=%s...",
            self._model,
            stream,
            len(tools) if tools else 0,
            len(messages),
            self._api_key[:12] if self._api_key else "(none)",
        )
        return body

    # ------------------------------------------------------------------
    # Non-streaming request
    # ------------------------------------------------------------------

    async def _post(self, body: dict, timeout_ms: int) -> dict:
        try:
            async with self._client(timeout_ms) as client:
                resp = await client.post(
                    self.endpoint, json=body, headers=self._build_headers(stream=False)
                )
        except httpx.TimeoutException:
            raise RequestTimeoutError(timeout_ms) from None
        except httpx.TransportError as exc:
            raise TransportError(None, str(exc)) from exc

        if not resp.is_success:
            raise TransportError(resp.status_code, resp.text)

        try:
            data = resp.json()
        except ValueError:
            raise ProtocolError("Response body is not valid JSON") from None

        # MiniMax reports API-level failures inside a 200 response.
        base_resp = data.get("base_resp") if isinstance(data, dict) else None
        if isinstance(base_resp, dict) and base_resp.get("status_code", 0) != 0:
            raise TransportError(
                resp.status_code,
                f"{base_resp.get('status_msg', '')} "
                f"(code: {base_resp.get('status_code')})",
            )
        return data

    def _parse_response(self, data: object) -> ChatResult:
        """Convert a non-streaming response into a ``ChatResult``."""
        checked = validate(CHAT_RESPONSE_SCHEMA, data)
        if not checked:
            raise ProtocolError("Unexpected response shape", checked.errors)

        choice = data["choices"][0]
        message = choice["message"]

        content = message.get("content")
        if content is None:
            content = ""
        elif not isinstance(content, str):
            content = json.dumps(content)

        tool_calls: list[ToolCallRequest] = []
        seen: set[str] = set()
        for raw_tc in message.get("tool_calls") or []:
            func = raw_tc["function"]
            args = func.get("arguments")
            if args is None:
                args = ""
            elif not isinstance(args, str):
                args = json.dumps(args)
            if raw_tc["id"] in seen:
                raise ProtocolError(f"Duplicate tool call id: {raw_tc['id']}")
            seen.add(raw_tc["id"])
            tool_calls.append(
                ToolCallRequest(id=raw_tc["id"], name=func["name"], arguments_json=args)
            )

        return ChatResult(
            content=content,
            tool_calls=tool_calls,
            model=data.get("model"),
            finish_reason=choice.get("finish_reason"),
            usage=data.get("usage") or {},
        )
