"""
Real-time chant recognition layer.

- transcript_buffer: Per-session word buffer; confirms a chant and drops consumed words.
- chant_engine: Voice + tap input, one serialized counting stream.
- websocket_server: WebSocket handler for /ws/chant (import separately to avoid pulling FastAPI).
"""

from streaming.transcript_buffer import TranscriptBuffer
from streaming.chant_engine import ChantEngine, TranscriptFragment

__all__ = [
    "TranscriptBuffer",
    "ChantEngine",
    "TranscriptFragment",
]
