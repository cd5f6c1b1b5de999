from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Tuple

from .piece import Piece, PieceKind
from .square import Square


@dataclass(frozen=True)
class CastlingDetail:
    """Rook relocation performed alongside a castling king move."""

    rook_from: Square
    rook_to: Square


@dataclass(frozen=True)
class MoveRecord:
    """One applied move, as kept in the position's move log.

    Attributes:
        piece (Piece): The piece that moved (the pawn, for a promotion).
        from_sq (Square): Origin square.
        to_sq (Square): Destination square of the moving piece.
        captured (Optional[Piece]): Piece removed from the board, if any.
        castling (Optional[CastlingDetail]): Rook relocation for a castle.
        en_passant (Optional[Square]): Square of the pawn removed by an en
            passant capture.
        promotion (Optional[PieceKind]): Kind the pawn turned into.

    Records are never mutated after creation. The board applies and reverts
    them mechanically, so forward and inverse application share one source.
    """

    piece: Piece
    from_sq: Square
    to_sq: Square
    captured: Optional[Piece] = None
    castling: Optional[CastlingDetail] = None
    en_passant: Optional[Square] = None
    promotion: Optional[PieceKind] = None

    @property
    def is_capture(self) -> bool:
        return self.captured is not None

    @property
    def placed(self) -> Piece:
        """Piece standing on ``to_sq`` once the move is applied."""
        if self.promotion is not None:
            return Piece(self.promotion, self.piece.color)
        return self.piece

    def to_uci(self) -> str:
        """Serialize the move into long algebraic UCI form.

        Returns:
            str: Move encoded like ``"e2e4"`` or ``"e7e8q"``.
        """
        promo = self.promotion.value if self.promotion is not None else ""
        return f"{self.from_sq}{self.to_sq}{promo}"


def parse_uci(uci: str) -> Tuple[Square, Square]:
    """Parse a UCI move string into its squares.

    A trailing promotion letter is accepted only as ``q``: promotion is always
    to a queen.

    Raises:
        ValueError: If the string has an invalid length, squares, or promotion
            piece.
    """
    if not isinstance(uci, str) or len(uci) not in (4, 5):
        raise ValueError(f"invalid UCI move length: {uci!r}")
    from_sq = Square.parse(uci[0:2])
    to_sq = Square.parse(uci[2:4])
    if len(uci) == 5 and uci[4].lower() != PieceKind.QUEEN.value:
        raise ValueError(f"invalid promotion piece: {uci[4]!r}")
    return from_sq, to_sq


def parse_relay(payload: Mapping[str, Any]) -> Tuple[Square, Square]:
    """Parse a relayed move payload ``{"from": "e2", "to": "e4"}``."""
    try:
        raw_from = payload["from"]
        raw_to = payload["to"]
    except KeyError as e:
        raise ValueError(f"move payload missing field: {e.args[0]}") from e
    return Square.parse(raw_from), Square.parse(raw_to)
