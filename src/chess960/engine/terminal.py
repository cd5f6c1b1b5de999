from __future__ import annotations

from typing import Optional

from .attacks import king_attacked
from .movegen import has_any_legal_move
from .piece import Color
from .position import GameResult, Position


FIFTY_MOVE_PLIES = 100


def in_check(position: Position, color: Optional[Color] = None) -> bool:
    """Return True if ``color`` (default: side to move) is in check."""
    color = position.side_to_move if color is None else color
    return king_attacked(position.board, color)


def is_checkmate(position: Position, color: Optional[Color] = None) -> bool:
    color = position.side_to_move if color is None else color
    return in_check(position, color) and not has_any_legal_move(position, color)


def is_stalemate(position: Position, color: Optional[Color] = None) -> bool:
    color = position.side_to_move if color is None else color
    return not in_check(position, color) and not has_any_legal_move(position, color)


def is_fifty_move_draw(position: Position) -> bool:
    return position.halfmove_clock >= FIFTY_MOVE_PLIES


def evaluate(position: Position) -> Optional[GameResult]:
    """Derive the result for the side to move, or ``None`` if play goes on.

    Checked in order: checkmate, stalemate, fifty-move rule. Threefold
    repetition and insufficient material are not detected.
    """
    color = position.side_to_move
    if not has_any_legal_move(position, color):
        if in_check(position, color):
            return GameResult.checkmate(color.opponent)
        return GameResult.stalemate()
    if is_fifty_move_draw(position):
        return GameResult.fifty_move()
    return None


def refresh_result(position: Position) -> Optional[GameResult]:
    """Store the derived result on ``position`` unless one is already set."""
    if position.result is None:
        position.result = evaluate(position)
    return position.result
