"""
Incremental SSE parser and delta extraction for chat completion streams.

SSEParser turns arbitrary text fragments into server-sent events as soon as
an event boundary is seen. ChunkAccumulator turns each event's JSON body into
a typed StreamChunk.
"""

from __future__ import annotations

import json
from collections.abc import AsyncGenerator, AsyncIterable, Iterator
from typing import Any

from ..exceptions import OpenAIError, StreamingError
from ..models import FinishReason
from .models import (
    AccumulatorState,
    ParsedEvent,
    ReconnectInterval,
    SSEEvent,
    StreamChunk,
    StreamChunkType,
)

DONE_MARKER = "[DONE]"
BOM = "\ufeff"


class SSEParser:
    """Event-stream parser fed with decoded text as it arrives."""

    def __init__(self) -> None:
        self.reset()
        self.reset_stats()

    def reset(self) -> None:
        """Drop any partially received line or event."""
        self._buffer = ""
        self._started = False
        self._pending_cr = False
        self._data: list[str] = []
        self._event_name: str | None = None
        self._event_id: str | None = None

    def feed(self, chunk: str) -> Iterator[SSEEvent]:
        """
        Consume one text fragment and yield every event it completes.

        Lines may be split across fragments; an incomplete trailing line or
        event stays buffered until a later fragment finishes it.
        """
        if not self._started:
            self._started = True
            if chunk.startswith(BOM):
                chunk = chunk[1:]

        # A CR ending the previous fragment may be the first half of CRLF
        if self._pending_cr:
            self._pending_cr = False
            if chunk.startswith("\n"):
                chunk = chunk[1:]

        self._buffer += chunk
        position = 0
        length = len(self._buffer)

        while position < length:
            line_end = self._find_line_end(position)
            if line_end == -1:
                break

            line = self._buffer[position:line_end]
            terminator = self._buffer[line_end]
            position = line_end + 1

            if terminator == "\r":
                if position < length:
                    if self._buffer[position] == "\n":
                        position += 1
                else:
                    self._pending_cr = True

            event = self._process_line(line)
            if event is not None:
                yield event

        self._buffer = self._buffer[position:]

    async def aiter_events(
        self, chunks: AsyncIterable[str]
    ) -> AsyncGenerator[SSEEvent]:
        """Drive ``feed`` over an async source of text fragments."""
        async for chunk in chunks:
            for event in self.feed(chunk):
                yield event

    def _find_line_end(self, start: int) -> int:
        lf = self._buffer.find("\n", start)
        cr = self._buffer.find("\r", start)
        if lf == -1:
            return cr
        if cr == -1:
            return lf
        return min(lf, cr)

    def _process_line(self, line: str) -> SSEEvent | None:
        if not line:
            return self._dispatch()

        if line.startswith(":"):
            self.stats["comments"] += 1
            return None

        field_name, sep, value = line.partition(":")
        if sep and value.startswith(" "):
            value = value[1:]

        if field_name == "data":
            self._data.append(value)
        elif field_name == "event":
            self._event_name = value
        elif field_name == "id":
            if "\0" not in value:
                self._event_id = value
        elif field_name == "retry":
            if value.isdigit():
                self.stats["reconnect_intervals"] += 1
                return ReconnectInterval(int(value))
        return None

    def _dispatch(self) -> ParsedEvent | None:
        event = None
        if self._data:
            event = ParsedEvent(
                data="\n".join(self._data),
                event=self._event_name,
                id=self._event_id,
            )
            self.stats["total_events"] += 1

        self._data = []
        self._event_name = None
        self._event_id = None
        return event

    def get_stats(self) -> dict[str, int]:
        """Get parser counters for monitoring."""
        return self.stats.copy()

    def reset_stats(self) -> None:
        """Reset statistics counters."""
        self.stats = {
            "total_events": 0,
            "reconnect_intervals": 0,
            "comments": 0,
        }


class ChunkAccumulator:
    """
    Turns chat completion events into typed stream chunks.

    Only ``choices[0]`` is inspected: a non-null finish reason completes the
    stream, otherwise its ``delta.content`` is the next fragment. The
    accumulated text and counters are kept for end-of-stream logging.
    """

    def __init__(self) -> None:
        self.state = AccumulatorState()

    def process_event(self, event: ParsedEvent) -> StreamChunk:
        """
        Interpret one data event.

        Raises:
            StreamingError: If the data is not JSON or not shaped like a
                completion chunk.
            OpenAIError: If the API reports an error inside the stream.
        """
        self.state.event_count += 1
        data = event.data

        if data.strip() == DONE_MARKER:
            return self._completion(FinishReason.STOP.value)

        try:
            payload = json.loads(data)
        except json.JSONDecodeError as e:
            raise StreamingError(
                f"Invalid JSON in stream chunk: {e}",
                response_data={"raw_data": data},
            ) from e

        if not isinstance(payload, dict):
            raise StreamingError(
                "Unexpected stream chunk: expected a JSON object",
                response_data={"raw_data": data},
            )

        if isinstance(payload.get("error"), dict):
            raise OpenAIError.from_payload(payload["error"], response_data=payload)

        choices = payload.get("choices")
        if not isinstance(choices, list):
            raise StreamingError(
                "Unexpected stream chunk: missing choices",
                response_data=payload,
            )

        # Azure sends a content-filter preamble with no choices
        if not choices:
            return self._skip()

        choice: dict[str, Any] = choices[0]
        if not isinstance(choice, dict):
            raise StreamingError(
                "Unexpected stream chunk: choice is not an object",
                response_data=payload,
            )

        if choice.get("finish_reason") is not None:
            return self._completion(choice["finish_reason"])

        delta = choice.get("delta") or {}
        if not isinstance(delta, dict):
            raise StreamingError(
                "Unexpected stream chunk: delta is not an object",
                response_data=payload,
            )

        content = delta.get("content")
        if not content:
            return self._skip()
        if not isinstance(content, str):
            raise StreamingError(
                "Unexpected stream chunk: content is not a string",
                response_data=payload,
            )

        self.state.content_buffer += content
        self.state.content_chunks += 1
        return StreamChunk(
            chunk_type=StreamChunkType.CONTENT,
            content=content,
            accumulated_content=self.state.content_buffer,
        )

    def _completion(self, finish_reason: str) -> StreamChunk:
        self.state.finish_reason = finish_reason
        return StreamChunk(
            chunk_type=StreamChunkType.COMPLETION,
            content=None,
            accumulated_content=self.state.content_buffer,
            finish_reason=finish_reason,
        )

    def _skip(self) -> StreamChunk:
        return StreamChunk(
            chunk_type=StreamChunkType.SKIP,
            content=None,
            accumulated_content=self.state.content_buffer,
        )

    def reset(self) -> None:
        """Reset accumulator state for a new stream."""
        self.state = AccumulatorState()
