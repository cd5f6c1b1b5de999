from __future__ import annotations

import random
from typing import List, Optional, Protocol, Sequence, TypeVar

from .board import Board
from .piece import Color, Piece, PieceKind
from .position import CastlingRights, Position
from .square import Square


T = TypeVar("T")

DARK_FILES = (0, 2, 4, 6)  # a1 is dark
LIGHT_FILES = (1, 3, 5, 7)


class RandomSource(Protocol):
    """The subset of ``random.Random`` the generator draws from."""

    def choice(self, seq: Sequence[T]) -> T: ...

    def sample(self, population: Sequence[T], k: int) -> List[T]: ...


def generate_back_rank(rng: RandomSource) -> List[PieceKind]:
    """Draw one Chess960 back rank, files a..h.

    Draw order: dark-square bishop, light-square bishop, queen, then both
    knights together; the three files left take rook, king, rook from left to
    right, which puts the king between the rooks. Each of the 960 setups is
    equally likely with a uniform source.
    """
    rank: List[Optional[PieceKind]] = [None] * 8
    rank[rng.choice(DARK_FILES)] = PieceKind.BISHOP
    rank[rng.choice(LIGHT_FILES)] = PieceKind.BISHOP
    rank[rng.choice(_empty(rank))] = PieceKind.QUEEN
    for f in rng.sample(_empty(rank), 2):
        rank[f] = PieceKind.KNIGHT
    left, middle, right = _empty(rank)
    rank[left] = PieceKind.ROOK
    rank[middle] = PieceKind.KING
    rank[right] = PieceKind.ROOK
    return [k for k in rank if k is not None]


def _empty(rank: List[Optional[PieceKind]]) -> List[int]:
    return [f for f, k in enumerate(rank) if k is None]


def back_rank_string(kinds: Sequence[PieceKind]) -> str:
    """Render a back rank as uppercase letters, e.g. ``"RNBQKBNR"``."""
    return "".join(k.value.upper() for k in kinds)


def position_from_back_rank(kinds: Sequence[PieceKind]) -> Position:
    """Set up both armies with ``kinds`` on the back ranks, mirrored."""
    if len(kinds) != 8:
        raise ValueError("a back rank needs 8 pieces")
    board = Board()
    for color in Color:
        for file, kind in enumerate(kinds):
            board.put(Square(color.back_rank, file), Piece(kind, color))
            board.put(Square(color.pawn_rank, file), Piece(PieceKind.PAWN, color))
    rook_files = [f for f, k in enumerate(kinds) if k is PieceKind.ROOK]
    rights = CastlingRights(king_side_rook=max(rook_files), queen_side_rook=min(rook_files))
    return Position(
        board=board,
        castling={Color.WHITE: rights, Color.BLACK: rights},
        start_position=back_rank_string(kinds),
    )


def new_game(rng: Optional[RandomSource] = None) -> Position:
    """Create the starting position of a new Chess960 game.

    Args:
        rng: Random source; a fresh ``random.Random`` when omitted. Pass a
            seeded or scripted source for reproducible setups.
    """
    if rng is None:
        rng = random.Random()
    return position_from_back_rank(generate_back_rank(rng))
