# Area: Matches
"""
gameplay_arena._matches.publisher - Turn notifications
======================================================

In-process last-value signal per match. Each successful turn write
publishes the match's new turn number; listeners re-read the match
from the store when notified. Values only move forward, so a late or
duplicate publish of an older turn is ignored.

A finished match is forgotten once it has no subscribers and no
blocked waiters.
"""

import logging
import threading
from typing import Callable, Dict, List, Optional, Set

logger = logging.getLogger("gameplay_arena.matches.publisher")

TurnCallback = Callable[[str, int], None]


class TurnPublisher:
    """Thread-safe latest-turn signal with callbacks and blocking waits."""

    def __init__(self) -> None:
        self._latest: Dict[str, int] = {}
        self._subscribers: Dict[str, List[TurnCallback]] = {}
        self._waiters: Dict[str, int] = {}
        self._finished: Set[str] = set()
        self._changed = threading.Condition()

    def publish(self, match_id: str, turn_number: int, over: bool = False) -> bool:
        """
        Record that ``turn_number`` was written for ``match_id``.

        Args:
            over: The turn ended the match

        Returns:
            False if an equal or newer turn was already published
        """
        with self._changed:
            if self._latest.get(match_id, -1) >= turn_number:
                return False
            self._latest[match_id] = turn_number
            callbacks = list(self._subscribers.get(match_id, ()))
            self._changed.notify_all()
            if over:
                self._finished.add(match_id)
                self._forget_if_idle(match_id)

        for callback in callbacks:
            try:
                callback(match_id, turn_number)
            except Exception:
                logger.error(f"Turn subscriber failed for {match_id}", exc_info=True)
        return True

    def latest(self, match_id: str) -> Optional[int]:
        with self._changed:
            return self._latest.get(match_id)

    def subscribe(self, match_id: str, callback: TurnCallback) -> None:
        with self._changed:
            self._subscribers.setdefault(match_id, []).append(callback)

    def unsubscribe(self, match_id: str, callback: TurnCallback) -> None:
        with self._changed:
            callbacks = self._subscribers.get(match_id, [])
            if callback in callbacks:
                callbacks.remove(callback)
            if not callbacks:
                self._subscribers.pop(match_id, None)
            self._forget_if_idle(match_id)

    def wait_for(self, match_id: str, turn_number: int, timeout: Optional[float] = None) -> bool:
        """
        Block until at least ``turn_number`` is published for ``match_id``.

        Returns:
            True if reached, False on timeout
        """
        with self._changed:
            self._waiters[match_id] = self._waiters.get(match_id, 0) + 1
            try:
                return self._changed.wait_for(
                    lambda: self._latest.get(match_id, -1) >= turn_number,
                    timeout=timeout,
                )
            finally:
                self._waiters[match_id] -= 1
                if not self._waiters[match_id]:
                    del self._waiters[match_id]
                self._forget_if_idle(match_id)

    def _forget_if_idle(self, match_id: str) -> None:
        # Caller holds the condition lock
        if match_id not in self._finished:
            return
        if self._subscribers.get(match_id) or self._waiters.get(match_id):
            return
        self._finished.discard(match_id)
        self._latest.pop(match_id, None)
