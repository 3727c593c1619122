"""
Chant engine: one counting stream fed by voice transcripts and manual taps.

Voice fragments go through the TranscriptBuffer; taps confirm directly. All
mutations are serialized by a single lock so that concurrent input channels
(HTTP taps on the thread pool, websocket voice on the event loop) keep the
count/round invariants.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional, Union

from core.counter import ChantCounter, ChantCounterState, ChantEvent, EventListener, StateListener
from core.mantra import EngineConfig
from streaming.transcript_buffer import TranscriptBuffer

logger = logging.getLogger(__name__)

MODES = ("voice", "tap")


@dataclass(frozen=True)
class TranscriptFragment:
    """Recognizer output at the engine boundary. Only final results are counted."""
    text: str
    is_final: bool = True

    @classmethod
    def from_payload(cls, payload: dict) -> "TranscriptFragment":
        """Build from a loosely typed recognizer payload ({"text"/"transcript", "is_final"/"isFinal"})."""
        text = payload.get("text")
        if text is None:
            text = payload.get("transcript")
        is_final = payload.get("is_final", payload.get("isFinal", True))
        return cls(text=text if isinstance(text, str) else "", is_final=_is_final_flag(is_final))


def _is_final_flag(value: object) -> bool:
    # Only an explicit true counts; "false", 0 and None are interim
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return value is True


class ChantEngine:
    """
    Owns the transcript buffer and the counter state for one practitioner.

    Args:
        config: Template, fuzzy threshold and buffer cap.
        initial_state: State to resume from (all zero if None).
        clear_buffer_on_mode_change: Drop the partial buffer when switching voice/tap.
        metrics: Optional module with record_fragment, record_interim_ignored,
            record_confirmation, record_tap, record_overflow, record_recognizer_error,
            record_ingest_latency_ms.
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        initial_state: Optional[ChantCounterState] = None,
        clear_buffer_on_mode_change: bool = True,
        metrics=None,
    ):
        self.config = config or EngineConfig()
        self.clear_buffer_on_mode_change = clear_buffer_on_mode_change
        self._buffer = TranscriptBuffer(self.config)
        self._counter = ChantCounter(initial_state)
        self._lock = threading.RLock()
        self._mode = "voice"
        self._metrics = metrics
        self._last_recognizer_error: Optional[str] = None

    # ----- Observers -----

    def subscribe(self, listener: EventListener) -> Callable[[], None]:
        """Milestone events (tick / quarter_round / round_complete) for feedback layers."""
        return self._counter.subscribe(listener)

    def subscribe_state(self, listener: StateListener) -> Callable[[], None]:
        """New state after every change, for persistence."""
        return self._counter.subscribe_state(listener)

    # ----- Inputs -----

    def ingest(self, fragment: Union[str, TranscriptFragment, None]) -> bool:
        """
        Feed one transcript fragment. Returns True if it completed a chant.
        Never raises for bad input; interim fragments are ignored.
        """
        if isinstance(fragment, TranscriptFragment):
            if not fragment.is_final:
                logger.debug("Ignoring interim fragment: %r", fragment.text)
                self._record("record_interim_ignored")
                return False
            text = fragment.text
        else:
            text = fragment if isinstance(fragment, str) else ""

        t0 = time.perf_counter()
        with self._lock:
            overflows_before = self._buffer.overflow_count
            confirmed = self._buffer.ingest(text)
            if self._buffer.overflow_count != overflows_before:
                self._record("record_overflow")
            if confirmed:
                self._confirm_voice()
        self._record("record_fragment")
        self._record("record_ingest_latency_ms", (time.perf_counter() - t0) * 1000)
        if confirmed:
            self._record("record_confirmation")
        return confirmed

    def rescan(self) -> bool:
        """
        Check the leftover buffer again (a second mantra from the same fragment).
        Not a new fragment: only a resulting confirmation is recorded in metrics.
        """
        with self._lock:
            confirmed = self._buffer.rescan()
            if confirmed:
                self._confirm_voice()
        if confirmed:
            self._record("record_confirmation")
        return confirmed

    def _confirm_voice(self) -> ChantEvent:
        event = self._counter.confirm(source="voice")
        logger.info("Chant confirmed by voice: %s (count=%d)", event.milestone.value, event.state.count)
        return event

    def tap(self, source: str = "touch") -> ChantEvent:
        """Manual increment: one tap or key press is exactly one confirmed chant."""
        with self._lock:
            event = self._counter.confirm(source=source)
        self._record("record_tap")
        return event

    def report_recognizer_error(self, message: str) -> None:
        """Upstream recognizer failed. Logged and counted; engine state is untouched."""
        self._last_recognizer_error = message
        logger.warning("Speech recognizer error: %s", message)
        self._record("record_recognizer_error")

    # ----- Control -----

    @property
    def mode(self) -> str:
        return self._mode

    def set_mode(self, mode: str) -> str:
        """Switch between "voice" and "tap"; clears the partial buffer by policy."""
        if mode not in MODES:
            raise ValueError(f"Unknown mode {mode!r}; expected one of {MODES}")
        with self._lock:
            if mode != self._mode and self.clear_buffer_on_mode_change:
                self._buffer.clear()
            self._mode = mode
        return mode

    def toggle_mode(self) -> str:
        return self.set_mode("tap" if self._mode == "voice" else "voice")

    def reset(self) -> ChantCounterState:
        """Zero count and round, keep lifetime total, drop the buffer."""
        with self._lock:
            self._buffer.clear()
            return self._counter.reset()

    def clear_buffer(self) -> None:
        with self._lock:
            self._buffer.clear()

    # ----- Views -----

    @property
    def state(self) -> ChantCounterState:
        return self._counter.state

    @property
    def buffer(self) -> TranscriptBuffer:
        return self._buffer

    @property
    def last_recognizer_error(self) -> Optional[str]:
        return self._last_recognizer_error

    def snapshot(self) -> dict:
        """JSON-serializable view for API responses."""
        with self._lock:
            return {
                "mode": self._mode,
                "state": self._counter.state.to_dict(),
                "progress": self._buffer.progress,
                "template_length": len(self.config.template),
                "buffer_chars": self._buffer.char_length(),
            }

    def _record(self, name: str, *args) -> None:
        if self._metrics and hasattr(self._metrics, name):
            getattr(self._metrics, name)(*args)
