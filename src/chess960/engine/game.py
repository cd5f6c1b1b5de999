from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Set, Tuple

from .apply import apply_move, undo_move
from .errors import IllegalMove
from .move import MoveRecord, parse_relay, parse_uci
from .movegen import all_legal_moves, legal_moves
from .piece import Color
from .position import GameResult, Position, ResultKind
from .square import Square
from .startpos import RandomSource, new_game
from .terminal import in_check, refresh_result


logger = logging.getLogger(__name__)


def is_game_over(position: Position) -> bool:
    return position.game_over


def result(position: Position) -> Optional[GameResult]:
    return position.result


def to_fen(position: Position, *, shredder: bool = False) -> str:
    return position.to_fen(shredder=shredder)


def resign(position: Position, loser: Color) -> GameResult:
    """Record a resignation by ``loser``; the opponent wins.

    Raises:
        ValueError: If the game is already over.
    """
    if position.game_over:
        raise ValueError("game is already over")
    position.result = GameResult.resignation(loser.opponent)
    return position.result


def agree_draw(position: Position) -> GameResult:
    """Record a draw both players agreed to.

    Raises:
        ValueError: If the game is already over.
    """
    if position.game_over:
        raise ValueError("game is already over")
    position.result = GameResult.agreement()
    return position.result


@dataclass
class Game:
    """Game session around one position.

    Responsibility: own the position, serialize every query and mutation
    behind a lock, expose legal moves, apply moves from the local player and
    from a relay through the same validating path.
    """

    position: Position
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False, compare=False)

    @classmethod
    def new(cls, rng: Optional[RandomSource] = None) -> "Game":
        return cls(position=new_game(rng))

    @classmethod
    def from_fen(cls, fen: str) -> "Game":
        position = Position.from_fen(fen)
        refresh_result(position)
        return cls(position=position)

    def to_fen(self, *, shredder: bool = False) -> str:
        with self._lock:
            return to_fen(self.position, shredder=shredder)

    @property
    def start_position(self) -> Optional[str]:
        return self.position.start_position

    @property
    def side_to_move(self) -> Color:
        return self.position.side_to_move

    def legal_moves(self, sq: Square) -> Set[Square]:
        with self._lock:
            return legal_moves(self.position, sq)

    def all_legal_moves(self) -> List[Tuple[Square, Square]]:
        with self._lock:
            return all_legal_moves(self.position)

    def legal_moves_uci(self) -> List[str]:
        return [f"{a}{b}" for a, b in self.all_legal_moves()]

    def apply_move(self, from_sq: Square, to_sq: Square, *, color: Optional[Color] = None) -> MoveRecord:
        """Validate and apply a move.

        Args:
            from_sq (Square): Origin square.
            to_sq (Square): Destination square.
            color (Optional[Color]): Color of the requesting player, if known.
                A request for the side not to move is rejected.

        Raises:
            IllegalMove: If the move is not legal here.
        """
        with self._lock:
            if color is not None and color is not self.position.side_to_move:
                raise IllegalMove(f"not {color.label}'s turn")
            record = apply_move(self.position, from_sq, to_sq)
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug(
                    "move applied",
                    extra={"move": record.to_uci(), "fen": self.position.to_fen()},
                )
            if self.position.result is not None:
                logger.info("game over", extra={"result": str(self.position.result)})
            return record

    def apply_uci(self, uci: str, *, color: Optional[Color] = None) -> MoveRecord:
        from_sq, to_sq = parse_uci(uci)
        return self.apply_move(from_sq, to_sq, color=color)

    def apply_relay(self, payload: Mapping[str, Any]) -> MoveRecord:
        """Apply a move relayed from the other player's client.

        Relayed moves are validated exactly like local ones.
        """
        from_sq, to_sq = parse_relay(payload)
        color = Color.parse(payload["color"]) if payload.get("color") else None
        return self.apply_move(from_sq, to_sq, color=color)

    def undo_move(self) -> MoveRecord:
        """Take back the last move.

        Raises:
            ValueError: If there is nothing to undo, or the game was ended by
                resignation or agreement.
        """
        with self._lock:
            record = undo_move(self.position)
            logger.debug("move undone", extra={"move": record.to_uci()})
            return record

    def resign(self, loser: Color) -> GameResult:
        with self._lock:
            res = resign(self.position, loser)
            logger.info("game over", extra={"result": str(res)})
            return res

    def agree_draw(self) -> GameResult:
        with self._lock:
            res = agree_draw(self.position)
            logger.info("game over", extra={"result": str(res)})
            return res

    # --- State flags for protocol ---
    def in_check(self) -> bool:
        with self._lock:
            return in_check(self.position)

    def is_game_over(self) -> bool:
        return is_game_over(self.position)

    def result(self) -> Optional[GameResult]:
        return result(self.position)

    def checkmate(self) -> bool:
        res = self.position.result
        return res is not None and res.kind is ResultKind.CHECKMATE

    def stalemate(self) -> bool:
        res = self.position.result
        return res is not None and res.kind is ResultKind.STALEMATE

    def is_draw(self) -> bool:
        res = self.position.result
        return res is not None and res.is_draw

    def move_history_uci(self) -> List[str]:
        with self._lock:
            return [m.to_uci() for m in self.position.move_log]
