from __future__ import annotations

from .errors import IllegalMove
from .move import MoveRecord
from .piece import Color, PieceKind
from .position import Position, ResultKind
from .movegen import legal_moves
from .square import Square
from .terminal import refresh_result


EXTERNAL_RESULTS = (ResultKind.RESIGNATION, ResultKind.AGREEMENT)


def apply_move(position: Position, from_sq: Square, to_sq: Square) -> MoveRecord:
    """Apply a move in-place and return its record.

    All-or-nothing: the move is validated against ``legal_moves`` before any
    field changes, so a rejected move leaves ``position`` untouched.

    Raises:
        IllegalMove: If ``to_sq`` is not a legal target of the piece on
            ``from_sq`` for the side to move, or the game is over.
    """
    if position.game_over:
        raise IllegalMove("game is over")
    if to_sq not in legal_moves(position, from_sq):
        raise IllegalMove(f"illegal move: {from_sq}{to_sq}")

    record = position.describe(from_sq, to_sq)
    color = record.piece.color
    position._history.append(position.snapshot())

    position.board.play(record)

    if record.piece.kind is PieceKind.PAWN and abs(to_sq.rank - from_sq.rank) == 2:
        position.ep_square = Square((from_sq.rank + to_sq.rank) // 2, from_sq.file)
    else:
        position.ep_square = None

    _update_castling_rights(position, record)

    if record.piece.kind is PieceKind.PAWN or record.is_capture:
        position.halfmove_clock = 0
    else:
        position.halfmove_clock += 1

    position.move_log.append(record)
    if color is Color.BLACK:
        position.fullmove_number += 1
    position.side_to_move = color.opponent

    refresh_result(position)
    return record


def _update_castling_rights(position: Position, record: MoveRecord) -> None:
    """Clear rights on king moves, rook moves and rook captures."""
    color = record.piece.color
    if record.piece.kind is PieceKind.KING:
        position.castling[color] = position.castling[color].cleared()
    elif record.piece.kind is PieceKind.ROOK:
        _drop_rook_right(position, color, record.from_sq)
    captured = record.captured
    if captured is not None and captured.kind is PieceKind.ROOK:
        _drop_rook_right(position, captured.color, record.to_sq)


def _drop_rook_right(position: Position, color: Color, sq: Square) -> None:
    if sq.rank != color.back_rank:
        return
    rights = position.castling[color]
    if rights.king_side_rook == sq.file:
        rights = rights.without(king_side=True)
    if rights.queen_side_rook == sq.file:
        rights = rights.without(king_side=False)
    position.castling[color] = rights


def undo_move(position: Position) -> MoveRecord:
    """Revert the last applied move and return its record.

    Raises:
        ValueError: If no move has been applied, or the game was ended by
            resignation or agreement.
    """
    current = position.result
    if current is not None and current.kind in EXTERNAL_RESULTS:
        raise ValueError(f"cannot undo after {current.kind.value}")
    if not position.move_log or not position._history:
        raise ValueError("no moves to undo")
    record = position.move_log.pop()
    position.board.unplay(record)
    position.restore(position._history.pop())
    position.side_to_move = record.piece.color
    return record
