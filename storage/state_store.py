"""
JSON file persistence for the chant counter.

Stores the counter state, per-day chant totals, a log of completed rounds and
the daily practice streak. Written after every state change; a failed write
is logged and never reaches the engine.
"""
import json
import logging
import os
import tempfile
import threading
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional

from core.counter import ChantCounterState, ChantEvent, Milestone

logger = logging.getLogger(__name__)

MAX_MILESTONES = 1000


def _empty_document() -> Dict[str, Any]:
    return {
        "state": ChantCounterState().to_dict(),
        "daily": {},        # "YYYY-MM-DD" -> chants that day
        "milestones": [],   # one entry per completed round
        "streak": 0,
        "last_active": None,
    }


def update_streak(streak: int, last_active: Optional[str], today: date) -> Dict[str, Any]:
    """
    Same day: unchanged. Day after last_active: +1. Any gap (or first use): 1.
    Returns {"streak", "last_active"}.
    """
    today_key = today.isoformat()
    if last_active == today_key:
        return {"streak": streak, "last_active": last_active}
    if last_active == (today - timedelta(days=1)).isoformat():
        return {"streak": streak + 1, "last_active": today_key}
    return {"streak": 1, "last_active": today_key}


class ChantStateStore:
    """
    File-backed store. Safe to call from the engine's listeners.

    Args:
        path: JSON file location (created on first save).
    """

    def __init__(self, path: str):
        self.path = path
        self._lock = threading.Lock()
        self._doc = self._read()

    def _read(self) -> Dict[str, Any]:
        doc = _empty_document()
        if not self.path or not os.path.isfile(self.path):
            return doc
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError("state file must contain a JSON object")
            ChantCounterState.from_dict(data.get("state"))
        except (OSError, ValueError, TypeError) as e:
            logger.warning("Could not load chant state from %s (%s); starting from zero", self.path, e)
            return doc
        doc.update({k: v for k, v in data.items() if k in doc})
        return doc

    def _write(self) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        try:
            os.makedirs(directory, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix=".chant_state_", suffix=".json", dir=directory)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(self._doc, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.path)
        except OSError:
            logger.exception("Failed to write chant state to %s", self.path)

    # ----- Engine collaborator hooks -----

    def load(self) -> ChantCounterState:
        """State to resume the engine from."""
        with self._lock:
            return ChantCounterState.from_dict(self._doc.get("state"))

    def save(self, state: ChantCounterState) -> None:
        """
        Persist the counter state (subscribe_state listener).
        Skipped when record_event already wrote this state for the same confirmation.
        """
        with self._lock:
            if self._doc.get("state") == state.to_dict():
                return
            self._doc["state"] = state.to_dict()
            self._write()

    def record_event(self, event: ChantEvent, today: Optional[date] = None) -> None:
        """Update daily totals, streak and round log for one confirmed chant (subscribe listener)."""
        today = today or datetime.fromtimestamp(event.timestamp).date()
        key = today.isoformat()
        with self._lock:
            daily = self._doc.setdefault("daily", {})
            daily[key] = int(daily.get(key, 0)) + 1
            self._doc.update(update_streak(int(self._doc.get("streak") or 0), self._doc.get("last_active"), today))
            if event.milestone is Milestone.ROUND_COMPLETE:
                milestones = self._doc.setdefault("milestones", [])
                milestones.append({
                    "date": key,
                    "round": event.state.round,
                    "lifetime_count": event.state.lifetime_count,
                    "source": event.source,
                })
                del milestones[:-MAX_MILESTONES]
            self._doc["state"] = event.state.to_dict()
            self._write()

    # ----- Reporting -----

    def this_week(self, today: Optional[date] = None) -> List[int]:
        """Chants per day for the last 7 days including today, oldest first."""
        today = today or date.today()
        with self._lock:
            daily = dict(self._doc.get("daily") or {})
        return [int(daily.get((today - timedelta(days=i)).isoformat(), 0)) for i in range(6, -1, -1)]

    def milestones(self) -> List[Dict[str, Any]]:
        with self._lock:
            return list(self._doc.get("milestones") or [])

    def stats(self) -> Dict[str, Any]:
        with self._lock:
            doc = dict(self._doc)
        return {
            "state": doc["state"],
            "streak": doc.get("streak", 0),
            "last_active": doc.get("last_active"),
            "rounds_logged": len(doc.get("milestones") or []),
        }
