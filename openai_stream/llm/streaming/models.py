"""
Streaming-specific dataclasses.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class StreamChunkType(Enum):
    """What a single streamed event means for the output."""
    CONTENT = "content"
    COMPLETION = "completion"
    SKIP = "skip"


@dataclass(frozen=True)
class ParsedEvent:
    """A dispatched server-sent event carrying data."""
    data: str
    event: str | None = None
    id: str | None = None


@dataclass(frozen=True)
class ReconnectInterval:
    """A ``retry:`` directive, in milliseconds."""
    value: int


SSEEvent = ParsedEvent | ReconnectInterval


@dataclass(frozen=True)
class StreamChunk:
    """Processed streaming chunk with accumulated state."""
    chunk_type: StreamChunkType
    content: str | None
    accumulated_content: str
    finish_reason: str | None = None


@dataclass
class AccumulatorState:
    """Mutable state for chunk accumulation."""
    content_buffer: str = ""
    event_count: int = 0
    content_chunks: int = 0
    finish_reason: str | None = None
