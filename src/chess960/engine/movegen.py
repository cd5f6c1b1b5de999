from __future__ import annotations

from typing import Iterable, List, Optional, Set, Tuple

from .attacks import is_attacked, king_attacked
from .move import MoveRecord
from .piece import Color, Piece, PieceKind
from .position import Position
from .square import Square


KNIGHT_OFFSETS = ((-1, 2), (1, 2), (-2, 1), (2, 1), (-2, -1), (2, -1), (-1, -2), (1, -2))
KING_OFFSETS = ((-1, -1), (0, -1), (1, -1), (-1, 0), (1, 0), (-1, 1), (0, 1), (1, 1))
BISHOP_DIRS = ((-1, -1), (1, -1), (-1, 1), (1, 1))
ROOK_DIRS = ((-1, 0), (1, 0), (0, -1), (0, 1))
QUEEN_DIRS = BISHOP_DIRS + ROOK_DIRS

SLIDER_DIRS = {
    PieceKind.BISHOP: BISHOP_DIRS,
    PieceKind.ROOK: ROOK_DIRS,
    PieceKind.QUEEN: QUEEN_DIRS,
}


def pseudo_legal_moves(position: Position, sq: Square) -> Set[Square]:
    """Return target squares for the piece on ``sq`` ignoring self-check.

    Returns an empty set for an empty square. Castling targets are included
    for kings; they are already checked for path safety.
    """
    piece = position.board.piece_at(sq)
    if piece is None:
        return set()
    kind = piece.kind
    if kind is PieceKind.PAWN:
        return _pawn_moves(position, sq, piece)
    if kind is PieceKind.KNIGHT:
        return _step_moves(position, sq, piece, KNIGHT_OFFSETS)
    if kind is PieceKind.KING:
        return _step_moves(position, sq, piece, KING_OFFSETS) | castling_moves(position, sq)
    return _slide_moves(position, sq, piece, SLIDER_DIRS[kind])


def _pawn_moves(position: Position, sq: Square, piece: Piece) -> Set[Square]:
    board = position.board
    fwd = piece.color.forward
    moves: Set[Square] = set()

    one = sq.offset(fwd, 0)
    if one is not None and board.is_empty(one):
        moves.add(one)
        if sq.rank == piece.color.pawn_rank:
            two = sq.offset(2 * fwd, 0)
            if two is not None and board.is_empty(two):
                moves.add(two)

    for df in (-1, 1):
        target = sq.offset(fwd, df)
        if target is None:
            continue
        occupant = board.piece_at(target)
        if occupant is not None:
            if occupant.color is not piece.color:
                moves.add(target)
        elif target == position.ep_square:
            victim = board.piece_at(Square(sq.rank, target.file))
            if victim == Piece(PieceKind.PAWN, piece.color.opponent):
                moves.add(target)
    return moves


def _step_moves(
    position: Position, sq: Square, piece: Piece, offsets: Iterable[Tuple[int, int]]
) -> Set[Square]:
    moves: Set[Square] = set()
    for dr, df in offsets:
        target = sq.offset(dr, df)
        if target is None:
            continue
        occupant = position.board.piece_at(target)
        if occupant is None or occupant.color is not piece.color:
            moves.add(target)
    return moves


def _slide_moves(
    position: Position, sq: Square, piece: Piece, dirs: Iterable[Tuple[int, int]]
) -> Set[Square]:
    moves: Set[Square] = set()
    for dr, df in dirs:
        target: Optional[Square] = sq.offset(dr, df)
        while target is not None:
            occupant = position.board.piece_at(target)
            if occupant is not None:
                if occupant.color is not piece.color:
                    moves.add(target)
                break
            moves.add(target)
            target = target.offset(dr, df)
    return moves


def castling_moves(position: Position, king_sq: Square) -> Set[Square]:
    """Return castling destinations for the king on ``king_sq``.

    The king goes two files toward the castling rook; the rook lands on the
    file next to the king, on the side the king came from. A castle needs:

    - the right for that side, with its rook still on the recorded file;
    - the king not in check;
    - every square between king and rook empty, and the king path, king
      destination and rook destination empty apart from king and rook;
    - no square the king crosses or lands on attacked;
    - a king destination on the board.
    """
    board = position.board
    king = board.piece_at(king_sq)
    if king is None or king.kind is not PieceKind.KING:
        return set()
    color = king.color
    rank = color.back_rank
    rights = position.castling[color]
    if king_sq.rank != rank or not (rights.king_side or rights.queen_side):
        return set()
    opponent = color.opponent
    if is_attacked(board, king_sq, opponent):
        return set()

    moves: Set[Square] = set()
    for king_side in (True, False):
        rook_file = rights.rook_file(king_side)
        if rook_file is None:
            continue
        if (rook_file > king_sq.file) is not king_side or rook_file == king_sq.file:
            continue
        if board.piece_at(Square(rank, rook_file)) != Piece(PieceKind.ROOK, color):
            continue
        step = 1 if king_side else -1
        dest_file = king_sq.file + 2 * step
        if not 0 <= dest_file < 8:
            continue
        rook_dest_file = dest_file - step

        lo, hi = sorted((king_sq.file, rook_file))
        needed = set(range(lo + 1, hi))
        needed.update((king_sq.file + step, dest_file, rook_dest_file))
        needed.difference_update((king_sq.file, rook_file))
        if any(not board.is_empty(Square(rank, f)) for f in needed):
            continue
        if any(is_attacked(board, Square(rank, king_sq.file + step * i), opponent) for i in (1, 2)):
            continue
        moves.add(Square(rank, dest_file))
    return moves


def leaves_king_safe(position: Position, record: MoveRecord) -> bool:
    """Play ``record`` on a scratch board and test the mover's king."""
    trial = position.board.copy()
    trial.play(record)
    return not king_attacked(trial, record.piece.color)


def _legal_targets(position: Position, sq: Square) -> Set[Square]:
    return {
        target
        for target in pseudo_legal_moves(position, sq)
        if leaves_king_safe(position, position.describe(sq, target))
    }


def legal_moves(position: Position, sq: Square) -> Set[Square]:
    """Return the legal target squares for the piece on ``sq``.

    Empty when the square is empty, holds a piece of the side not to move,
    or the game is over.
    """
    if position.game_over:
        return set()
    piece = position.board.piece_at(sq)
    if piece is None or piece.color is not position.side_to_move:
        return set()
    return _legal_targets(position, sq)


def all_legal_moves(position: Position) -> List[Tuple[Square, Square]]:
    """Return every legal ``(from, to)`` pair for the side to move, sorted."""
    moves: List[Tuple[Square, Square]] = []
    for sq, _piece in position.board.pieces(position.side_to_move):
        for target in legal_moves(position, sq):
            moves.append((sq, target))
    moves.sort()
    return moves


def has_any_legal_move(position: Position, color: Optional[Color] = None) -> bool:
    """Return True if ``color`` (default: side to move) has a legal move.

    Stops at the first piece with a legal move.
    """
    color = position.side_to_move if color is None else color
    for sq, _piece in position.board.pieces(color):
        if _legal_targets(position, sq):
            return True
    return False
