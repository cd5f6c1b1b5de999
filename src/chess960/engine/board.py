from __future__ import annotations

from typing import Dict, Iterator, Optional, Tuple

from .move import MoveRecord
from .piece import Color, Piece, PieceKind
from .square import Square


class Board:
    """Mapping from square to piece; empty squares are absent.

    Only ``Position`` and the legality filter's scratch copies mutate a board,
    and only through ``play`` / ``unplay`` once a game is set up.
    """

    __slots__ = ("_pieces",)

    def __init__(self, pieces: Optional[Dict[Square, Piece]] = None) -> None:
        self._pieces: Dict[Square, Piece] = dict(pieces) if pieces else {}

    def piece_at(self, sq: Square) -> Optional[Piece]:
        return self._pieces.get(sq)

    def is_empty(self, sq: Square) -> bool:
        return sq not in self._pieces

    def put(self, sq: Square, piece: Piece) -> None:
        self._pieces[sq] = piece

    def remove(self, sq: Square) -> Optional[Piece]:
        return self._pieces.pop(sq, None)

    def pieces(self, color: Optional[Color] = None) -> Iterator[Tuple[Square, Piece]]:
        for sq, p in list(self._pieces.items()):
            if color is None or p.color is color:
                yield sq, p

    def king_square(self, color: Color) -> Square:
        for sq, p in self._pieces.items():
            if p.kind is PieceKind.KING and p.color is color:
                return sq
        raise ValueError(f"no {color.label.lower()} king on the board")

    def copy(self) -> "Board":
        return Board(self._pieces)

    def play(self, record: MoveRecord) -> None:
        """Relocate pieces as described by ``record``."""
        self._pieces.pop(record.from_sq)
        rook = None
        if record.castling is not None:
            rook = self._pieces.pop(record.castling.rook_from)
        if record.en_passant is not None:
            self._pieces.pop(record.en_passant)
        self._pieces[record.to_sq] = record.placed
        if rook is not None and record.castling is not None:
            self._pieces[record.castling.rook_to] = rook

    def unplay(self, record: MoveRecord) -> None:
        """Exact inverse of ``play`` for the same record."""
        self._pieces.pop(record.to_sq)
        rook = None
        if record.castling is not None:
            rook = self._pieces.pop(record.castling.rook_to)
        self._pieces[record.from_sq] = record.piece
        if rook is not None and record.castling is not None:
            self._pieces[record.castling.rook_from] = rook
        if record.captured is not None:
            at = record.en_passant if record.en_passant is not None else record.to_sq
            self._pieces[at] = record.captured

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return self._pieces == other._pieces

    def __len__(self) -> int:
        return len(self._pieces)
