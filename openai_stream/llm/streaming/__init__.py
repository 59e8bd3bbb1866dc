"""
Streaming functionality for the chat completion client.

- Incremental SSE parsing
- Delta extraction from chat completion chunks
"""

from .models import ParsedEvent, ReconnectInterval, StreamChunk, StreamChunkType
from .parser import ChunkAccumulator, SSEParser

__all__ = [
    "ChunkAccumulator",
    "ParsedEvent",
    "ReconnectInterval",
    "SSEParser",
    "StreamChunk",
    "StreamChunkType",
]
