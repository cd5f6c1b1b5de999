from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Color(Enum):
    WHITE = "w"
    BLACK = "b"

    @property
    def opponent(self) -> "Color":
        return Color.BLACK if self is Color.WHITE else Color.WHITE

    @property
    def back_rank(self) -> int:
        return 0 if self is Color.WHITE else 7

    @property
    def pawn_rank(self) -> int:
        return 1 if self is Color.WHITE else 6

    @property
    def forward(self) -> int:
        """Rank delta of a single pawn step."""
        return 1 if self is Color.WHITE else -1

    @property
    def label(self) -> str:
        return "White" if self is Color.WHITE else "Black"

    @classmethod
    def parse(cls, s: str) -> "Color":
        try:
            return cls(s)
        except ValueError:
            raise ValueError(f"invalid color: {s!r}") from None


class PieceKind(Enum):
    KING = "k"
    QUEEN = "q"
    ROOK = "r"
    BISHOP = "b"
    KNIGHT = "n"
    PAWN = "p"


@dataclass(frozen=True)
class Piece:
    kind: PieceKind
    color: Color

    @property
    def symbol(self) -> str:
        """FEN letter: uppercase for White, lowercase for Black."""
        ch = self.kind.value
        return ch.upper() if self.color is Color.WHITE else ch

    @classmethod
    def from_symbol(cls, ch: str) -> "Piece":
        try:
            kind = PieceKind(ch.lower())
        except ValueError:
            raise ValueError(f"invalid piece in FEN: {ch!r}") from None
        return cls(kind, Color.WHITE if ch.isupper() else Color.BLACK)

    def __str__(self) -> str:
        return self.symbol
