"""
Reentrancy guard.

Two-state machine shared by every mutating entry point of a pool. A nested
entry while LOCKED fails with ReentrantCall; every exit path returns the
guard to FREE.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from enum import Enum
from typing import Iterator

from ..exceptions import ReentrantCall

logger = logging.getLogger(__name__)


class GuardState(Enum):
    FREE = "free"
    LOCKED = "locked"


class ReentrancyGuard:

    def __init__(self) -> None:
        self._state = GuardState.FREE

    @property
    def state(self) -> GuardState:
        return self._state

    @property
    def locked(self) -> bool:
        return self._state is GuardState.LOCKED

    def acquire(self) -> None:
        if self._state is GuardState.LOCKED:
            logger.warning("Reentrant call rejected")
            raise ReentrantCall("Reentrant call")
        self._state = GuardState.LOCKED

    def release(self) -> None:
        self._state = GuardState.FREE

    @contextmanager
    def held(self) -> Iterator[None]:
        self.acquire()
        try:
            yield
        finally:
            self.release()
