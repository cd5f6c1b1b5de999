from __future__ import annotations

from .board import Board
from .piece import Color, Piece, PieceKind
from .square import Square


def _sign(x: int) -> int:
    return (x > 0) - (x < 0)


def covers(board: Board, origin: Square, piece: Piece, target: Square) -> bool:
    """Return True if ``piece`` on ``origin`` attacks ``target``.

    Uses attack patterns, not moves: pawns attack diagonally forward whether
    or not the target is occupied, and kings never castle onto a square.
    """
    dr = target.rank - origin.rank
    df = target.file - origin.file
    if dr == 0 and df == 0:
        return False
    kind = piece.kind
    if kind is PieceKind.PAWN:
        return dr == piece.color.forward and abs(df) == 1
    if kind is PieceKind.KNIGHT:
        return (abs(dr), abs(df)) in ((1, 2), (2, 1))
    if kind is PieceKind.KING:
        return abs(dr) <= 1 and abs(df) <= 1

    straight = dr == 0 or df == 0
    diagonal = abs(dr) == abs(df)
    if kind is PieceKind.ROOK and not straight:
        return False
    if kind is PieceKind.BISHOP and not diagonal:
        return False
    if kind is PieceKind.QUEEN and not (straight or diagonal):
        return False

    # Walk the ray; every square strictly between must be empty.
    step_r, step_f = _sign(dr), _sign(df)
    r, f = origin.rank + step_r, origin.file + step_f
    while (r, f) != (target.rank, target.file):
        if not board.is_empty(Square(r, f)):
            return False
        r += step_r
        f += step_f
    return True


def is_attacked(board: Board, sq: Square, by_color: Color) -> bool:
    """Return True if ``sq`` is attacked by any piece of ``by_color``.

    This is the only attack test in the engine: legality filtering, check
    detection and castling path safety all go through it.
    """
    for origin, piece in board.pieces(by_color):
        if covers(board, origin, piece, sq):
            return True
    return False


def king_attacked(board: Board, color: Color) -> bool:
    """Return True if the king of ``color`` is attacked by the opponent."""
    return is_attacked(board, board.king_square(color), color.opponent)
