"""Per-user bounded conversation window.

Concurrency contract:
  - Mutations for the same user are serialized by a per-user lock, so turns
    appended together land contiguously and in order.
  - Different users have different locks and never wait on each other;
    the registry lock is held only long enough to create a user's entry.
  - Contents live for the process lifetime. A restart clears everything.
"""

import logging
import threading
from abc import ABC, abstractmethod
from collections import deque

from matchengine.core.schemas import ConversationTurn, Role

logger = logging.getLogger(__name__)


class ContextStore(ABC):
    """Keyed store of recent conversation turns."""

    @abstractmethod
    def append(self, user_id: int, role: Role, text: str) -> None:
        """Add one turn, evicting the oldest if the window is full."""

    @abstractmethod
    def append_exchange(self, user_id: int, turns: list[tuple[Role, str]]) -> None:
        """Add several turns atomically with respect to other writers for the user."""

    @abstractmethod
    def get(self, user_id: int) -> list[ConversationTurn]:
        """Return a snapshot of the user's turns, oldest first."""

    def turn_count(self, user_id: int) -> int:
        return len(self.get(user_id))


class _UserWindow:
    __slots__ = ("lock", "turns")

    def __init__(self, max_turns: int) -> None:
        self.lock = threading.Lock()
        self.turns: deque[ConversationTurn] = deque(maxlen=max_turns)


class InMemoryContextStore(ContextStore):
    """FIFO-evicting window of ``max_turns`` per user, created lazily."""

    def __init__(self, max_turns: int = 10) -> None:
        if max_turns < 1:
            msg = "max_turns must be at least 1"
            raise ValueError(msg)
        self._max_turns = max_turns
        self._windows: dict[int, _UserWindow] = {}
        self._registry_lock = threading.Lock()

    @property
    def max_turns(self) -> int:
        return self._max_turns

    def _window(self, user_id: int) -> _UserWindow:
        window = self._windows.get(user_id)
        if window is None:
            with self._registry_lock:
                window = self._windows.setdefault(user_id, _UserWindow(self._max_turns))
        return window

    def append(self, user_id: int, role: Role, text: str) -> None:
        self.append_exchange(user_id, [(role, text)])

    def append_exchange(self, user_id: int, turns: list[tuple[Role, str]]) -> None:
        window = self._window(user_id)
        with window.lock:
            for role, text in turns:
                window.turns.append(ConversationTurn(role=role, text=text))
            size = len(window.turns)
        logger.debug("Context for user %d now holds %d/%d turns", user_id, size, self._max_turns)

    def get(self, user_id: int) -> list[ConversationTurn]:
        window = self._windows.get(user_id)
        if window is None:
            return []
        with window.lock:
            return list(window.turns)
