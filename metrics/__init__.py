"""
Observability for the chant engine and its websocket stream.
"""

from metrics.chant_metrics import (
    get_snapshot,
    record_connection_open,
    record_connection_close,
    record_fragment,
    record_interim_ignored,
    record_confirmation,
    record_tap,
    record_overflow,
    record_recognizer_error,
    record_ingest_latency_ms,
    reset,
)

__all__ = [
    "get_snapshot",
    "record_connection_open",
    "record_connection_close",
    "record_fragment",
    "record_interim_ignored",
    "record_confirmation",
    "record_tap",
    "record_overflow",
    "record_recognizer_error",
    "record_ingest_latency_ms",
    "reset",
]
