"""
Chant engine metrics.

Thread-safe counters and ingest latency samples. Passed to ChantEngine and the
/ws/chant handler as a module; exposed via GET /metrics/chant (JSON snapshot).
"""

import threading
from collections import deque
from typing import Any, Dict

# ----- Shared state (module-level for singleton behavior) -----
_lock = threading.Lock()
_latency_samples: deque = deque(maxlen=1000)  # last N ingest durations (ms)
_counters: Dict[str, int] = {}

_COUNTER_NAMES = (
    "active_connections",
    "fragments_ingested",
    "interim_fragments_ignored",
    "voice_confirmations",
    "taps",
    "buffer_overflows",
    "recognizer_errors",
)


def reset() -> None:
    """Zero all counters and samples (tests, process restart)."""
    with _lock:
        _latency_samples.clear()
        for name in _COUNTER_NAMES:
            _counters[name] = 0


reset()


def _incr(name: str, delta: int = 1) -> None:
    with _lock:
        _counters[name] = max(0, _counters[name] + delta)


def record_connection_open() -> None:
    """Call when a WebSocket connection is accepted."""
    _incr("active_connections")


def record_connection_close() -> None:
    """Call when a WebSocket connection closes."""
    _incr("active_connections", -1)


def record_fragment() -> None:
    _incr("fragments_ingested")


def record_interim_ignored() -> None:
    _incr("interim_fragments_ignored")


def record_confirmation() -> None:
    _incr("voice_confirmations")


def record_tap() -> None:
    _incr("taps")


def record_overflow() -> None:
    """Buffer cap forced a truncation."""
    _incr("buffer_overflows")


def record_recognizer_error() -> None:
    _incr("recognizer_errors")


def record_ingest_latency_ms(ms: float) -> None:
    with _lock:
        _latency_samples.append(ms)


def get_snapshot() -> Dict[str, Any]:
    """
    Return a JSON-serializable snapshot of chant metrics.
    Used by GET /metrics/chant.
    """
    with _lock:
        samples = list(_latency_samples)
        counters = dict(_counters)
    n = len(samples)
    if n == 0:
        avg_latency_ms = None
        p95_latency_ms = None
    else:
        avg_latency_ms = round(sum(samples) / n, 3)
        sorted_s = sorted(samples)
        idx = max(0, int(0.95 * n) - 1)
        p95_latency_ms = round(sorted_s[idx], 3)
    snapshot: Dict[str, Any] = dict(counters)
    snapshot.update({
        "avg_ingest_latency_ms": avg_latency_ms,
        "p95_ingest_latency_ms": p95_latency_ms,
        "latency_sample_count": n,
    })
    return snapshot
