from __future__ import annotations

import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ...engine.game import Game


@dataclass
class GameSession:
    """A hosted game and when it was opened."""

    game: Game
    created_at: float = field(default_factory=time.time)


class GameRegistry:
    """Thread-safe in-memory registry of hosted games.

    The registry lock guards the mapping only; each ``Game`` serializes its
    own moves, so both players of one game go through the same lock.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._sessions: Dict[str, GameSession] = {}

    def open(self, game: Game) -> str:
        """Register ``game`` and return its new ``game_id``."""
        gid = str(uuid.uuid4())
        with self._lock:
            self._sessions[gid] = GameSession(game)
        return gid

    def get(self, game_id: str) -> Optional[Game]:
        with self._lock:
            session = self._sessions.get(game_id)
        return session.game if session is not None else None

    def replace(self, game_id: str, game: Game) -> None:
        """Swap in a new game under an existing id (a loaded position)."""
        with self._lock:
            if game_id not in self._sessions:
                raise KeyError(game_id)
            self._sessions[game_id] = GameSession(game)

    def close(self, game_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(game_id, None) is not None

    def game_ids(self) -> List[str]:
        """Game ids, oldest first."""
        with self._lock:
            items = sorted(self._sessions.items(), key=lambda kv: kv[1].created_at)
        return [gid for gid, _ in items]
