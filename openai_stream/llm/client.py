"""
Streaming chat completion client for OpenAI and Azure OpenAI.

One POST per call. On a 200 the event-stream body is parsed as it arrives
and only the text deltas are handed back, as bytes, through an async
iterator the caller pulls from.
"""

from __future__ import annotations

import json
from collections.abc import AsyncGenerator, AsyncIterator, Mapping, Sequence
from typing import Any

import httpx

from openai_stream.chat.models import Message, OpenAIModel
from openai_stream.logging_utils import ContextualLogger, LLMErrorHandler, log_operation

from .exceptions import LLMError, OpenAIError, ProviderError, UpstreamError
from .models import ChatCompletionRequest, ProviderConfig, RequestPolicy
from .streaming.models import ParsedEvent, StreamChunkType
from .streaming.parser import ChunkAccumulator, SSEParser

HTTP_OK = 200

MessageLike = Message | Mapping[str, Any]


class OpenAIStreamClient:
    """
    Streams chat completions as raw text bytes.

    The client owns an ``httpx.AsyncClient`` unless one is passed in, in
    which case closing is left to whoever created it.
    """

    def __init__(
        self,
        provider: ProviderConfig,
        policy: RequestPolicy | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.provider = provider
        self.policy = policy or RequestPolicy()
        self._owns_client = client is None
        self.client: httpx.AsyncClient = client or httpx.AsyncClient(
            timeout=provider.timeout
        )
        self._logger = ContextualLogger({
            "provider": provider.api_type.value,
        })

    def build_headers(self, key: str | None) -> dict[str, str]:
        """Headers for the configured flavor; the key falls back to the default."""
        api_key = key or self.provider.default_api_key
        if not api_key:
            raise ProviderError(
                "No API key supplied and OPENAI_API_KEY is not set",
                provider=self.provider.api_type.value,
            )

        headers = {"Content-Type": "application/json"}
        if self.provider.is_azure:
            headers["api-key"] = api_key
        else:
            headers["Authorization"] = f"Bearer {api_key}"
            if self.provider.organization:
                headers["OpenAI-Organization"] = self.provider.organization
        return headers

    def build_request_body(
        self,
        model: OpenAIModel,
        system_prompt: str,
        temperature: float,
        messages: Sequence[MessageLike],
    ) -> ChatCompletionRequest:
        """
        Assemble the outbound body, applying the request policy.

        The caller's model id is only sent to the OpenAI flavor; Azure picks
        the model from the deployment. A policy model, when set, replaces it
        for both.
        """
        prompt = self.policy.system_prompt
        if prompt is None:
            prompt = system_prompt

        conversation = [{"role": "system", "content": prompt}]
        conversation.extend(_message_payload(message) for message in messages)

        model_id = None if self.provider.is_azure else model.id
        if self.policy.model is not None:
            model_id = self.policy.model

        return ChatCompletionRequest(
            messages=conversation,
            max_tokens=self.policy.max_tokens,
            temperature=(
                temperature if self.policy.temperature is None
                else self.policy.temperature
            ),
            model=model_id,
        )

    @log_operation("open_chat_stream")
    async def stream(
        self,
        model: OpenAIModel,
        system_prompt: str,
        temperature: float,
        key: str | None,
        messages: Sequence[MessageLike],
    ) -> AsyncIterator[bytes]:
        """
        Send the request and return the delta byte stream.

        Raises:
            OpenAIError: The API answered non-200 with an error object.
            UpstreamError: Any other non-200 answer, or a transport failure.
            ProviderError: No API key is available.
        """
        url = self.provider.chat_completions_url
        headers = self.build_headers(key)
        body = self.build_request_body(model, system_prompt, temperature, messages)
        request_logger = self._logger.bind(model=body.model or model.id)
        request_logger.debug(
            "Sending chat completion request",
            messages=len(body.messages),
            max_tokens=body.max_tokens,
            temperature=body.temperature,
        )

        request = self.client.build_request(
            "POST", url, headers=headers, content=json.dumps(body.to_payload())
        )
        try:
            response = await self.client.send(request, stream=True)
        except httpx.HTTPError as e:
            raise UpstreamError(
                f"HTTP error: {e!s}", model=model.id
            ) from e

        if response.status_code != HTTP_OK:
            try:
                await self._raise_for_error_response(response, model.id)
            finally:
                await response.aclose()

        return self._iter_deltas(response, request_logger)

    async def _raise_for_error_response(
        self, response: httpx.Response, model_id: str
    ) -> None:
        try:
            raw = await response.aread()
        except httpx.HTTPError as e:
            raise UpstreamError(
                f"HTTP error: {e!s}", model=model_id, status_code=response.status_code
            ) from e

        try:
            result = json.loads(raw)
        except ValueError:
            result = None

        if isinstance(result, dict) and isinstance(result.get("error"), dict):
            raise OpenAIError.from_payload(
                result["error"],
                model=model_id,
                status_code=response.status_code,
                response_data=result,
            )

        detail = raw.decode("utf-8", errors="replace").strip() or response.reason_phrase
        raise UpstreamError(
            f"OpenAI API returned an error: {detail}",
            model=model_id,
            status_code=response.status_code,
            response_data=result if isinstance(result, dict) else None,
        )

    async def _iter_deltas(
        self, response: httpx.Response, request_logger: ContextualLogger
    ) -> AsyncGenerator[bytes]:
        parser = SSEParser()
        accumulator = ChunkAccumulator()
        events = parser.aiter_events(response.aiter_text())
        finished = False
        try:
            async for event in events:
                if not isinstance(event, ParsedEvent):
                    continue

                chunk = accumulator.process_event(event)
                if chunk.chunk_type is StreamChunkType.COMPLETION:
                    finished = True
                    break
                if chunk.chunk_type is StreamChunkType.CONTENT:
                    yield chunk.content.encode("utf-8")

        except httpx.HTTPError as e:
            request_logger.error("Stream failed", **LLMErrorHandler.describe(e))
            raise UpstreamError(f"HTTP error during streaming: {e!s}") from e
        except LLMError as e:
            request_logger.error("Stream failed", **LLMErrorHandler.describe(e))
            raise
        except GeneratorExit:
            request_logger.info(
                "Stream closed by consumer", **_stream_summary(accumulator)
            )
            raise
        finally:
            await events.aclose()
            await response.aclose()

        summary = _stream_summary(accumulator)
        if finished:
            request_logger.info(
                "Stream completed",
                finish_reason=accumulator.state.finish_reason,
                **summary,
            )
        else:
            request_logger.warning("Stream ended without finish reason", **summary)

    async def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self) -> OpenAIStreamClient:
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()


async def openai_stream(
    model: OpenAIModel,
    system_prompt: str,
    temperature: float,
    key: str | None,
    messages: Sequence[MessageLike],
    *,
    provider: ProviderConfig,
    policy: RequestPolicy | None = None,
    client: httpx.AsyncClient | None = None,
) -> AsyncIterator[bytes]:
    """
    One-shot form of ``OpenAIStreamClient.stream``.

    A client created here lives exactly as long as the returned stream.
    """
    stream_client = OpenAIStreamClient(provider, policy, client)
    try:
        deltas = await stream_client.stream(
            model, system_prompt, temperature, key, messages
        )
    except BaseException:
        await stream_client.close()
        raise
    return _closing(deltas, stream_client)


async def _closing(
    deltas: AsyncGenerator[bytes], stream_client: OpenAIStreamClient
) -> AsyncGenerator[bytes]:
    try:
        async for delta in deltas:
            yield delta
    finally:
        await deltas.aclose()
        await stream_client.close()


def _message_payload(message: MessageLike) -> dict[str, Any]:
    if isinstance(message, Message):
        return message.model_dump()
    return Message.model_validate(dict(message)).model_dump()


def _stream_summary(accumulator: ChunkAccumulator) -> dict[str, int]:
    state = accumulator.state
    return {
        "events": state.event_count,
        "content_chunks": state.content_chunks,
        "characters": len(state.content_buffer),
    }
