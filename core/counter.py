"""
Chant counting state machine.

count runs 0..107; the 108th confirmation completes a round (mala), resets
count to 0 and increments round. Every 27th confirmation inside a round is a
quarter-round milestone. lifetime_count increments on every confirmation and
is never reset.
"""
import logging
import time
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

BEADS_PER_ROUND = 108
QUARTER_ROUND = 27


class Milestone(str, Enum):
    TICK = "tick"
    QUARTER_ROUND = "quarter_round"
    ROUND_COMPLETE = "round_complete"


@dataclass(frozen=True)
class ChantCounterState:
    """Snapshot of the counter. Persisted and restored verbatim."""
    count: int = 0
    round: int = 0
    lifetime_count: int = 0

    def __post_init__(self):
        if not 0 <= self.count < BEADS_PER_ROUND:
            raise ValueError(f"count must be in [0, {BEADS_PER_ROUND}), got {self.count}")
        if self.round < 0 or self.lifetime_count < 0:
            raise ValueError("round and lifetime_count must be >= 0")

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "ChantCounterState":
        """Build from persisted data; missing keys default to 0."""
        data = data or {}
        return cls(
            count=int(data.get("count", 0) or 0),
            round=int(data.get("round", 0) or 0),
            lifetime_count=int(data.get("lifetime_count", 0) or 0),
        )


@dataclass(frozen=True)
class ChantEvent:
    """One confirmed chant, as seen by feedback / persistence subscribers."""
    milestone: Milestone
    source: str
    state: ChantCounterState
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "milestone": self.milestone.value,
            "source": self.source,
            "state": self.state.to_dict(),
            "timestamp": self.timestamp,
        }


EventListener = Callable[[ChantEvent], None]
StateListener = Callable[[ChantCounterState], None]


class ChantCounter:
    """
    Owns the authoritative ChantCounterState.

    Subscribers are notified synchronously after each change; a failing
    subscriber is logged and skipped, never rolling back the count.
    """

    def __init__(self, initial_state: Optional[ChantCounterState] = None):
        self._state = initial_state or ChantCounterState()
        self._event_listeners: List[EventListener] = []
        self._state_listeners: List[StateListener] = []

    @property
    def state(self) -> ChantCounterState:
        return self._state

    def subscribe(self, listener: EventListener) -> Callable[[], None]:
        """Receive every ChantEvent. Returns an unsubscribe callable."""
        self._event_listeners.append(listener)
        return lambda: self._remove(self._event_listeners, listener)

    def subscribe_state(self, listener: StateListener) -> Callable[[], None]:
        """Receive the new state after every change (confirmations and resets)."""
        self._state_listeners.append(listener)
        return lambda: self._remove(self._state_listeners, listener)

    def confirm(self, source: str = "voice") -> ChantEvent:
        """Register one confirmed chant and return the milestone event."""
        prev = self._state
        new_count = prev.count + 1
        new_round = prev.round
        if new_count == BEADS_PER_ROUND:
            milestone = Milestone.ROUND_COMPLETE
            new_count = 0
            new_round += 1
        elif new_count % QUARTER_ROUND == 0:
            milestone = Milestone.QUARTER_ROUND
        else:
            milestone = Milestone.TICK

        self._state = ChantCounterState(
            count=new_count,
            round=new_round,
            lifetime_count=prev.lifetime_count + 1,
        )
        event = ChantEvent(milestone=milestone, source=source, state=self._state)
        if milestone is Milestone.ROUND_COMPLETE:
            logger.info("Round %d complete (lifetime %d)", new_round, self._state.lifetime_count)

        # Events first: a store that records the event already holds the new state
        for listener in list(self._event_listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Chant event listener failed")
        self._notify_state()
        return event

    def reset(self) -> ChantCounterState:
        """Zero count and round; lifetime_count is kept."""
        self._state = ChantCounterState(count=0, round=0, lifetime_count=self._state.lifetime_count)
        self._notify_state()
        return self._state

    def _notify_state(self) -> None:
        for listener in list(self._state_listeners):
            try:
                listener(self._state)
            except Exception:
                logger.exception("Chant state listener failed")

    @staticmethod
    def _remove(listeners: list, listener) -> None:
        if listener in listeners:
            listeners.remove(listener)
