"""
Persistence collaborator: counter state, daily totals, round log, streak.
"""

from storage.state_store import ChantStateStore, update_streak

__all__ = [
    "ChantStateStore",
    "update_streak",
]
