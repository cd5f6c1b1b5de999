from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .board import Board
from .move import CastlingDetail, MoveRecord
from .piece import Color, Piece, PieceKind
from .square import FILES, Square


@dataclass(frozen=True)
class CastlingRights:
    """Castling availability for one color.

    Each side remembers the start file of the rook the right belongs to;
    ``None`` means the right is gone. Rights are only ever cleared.
    """

    king_side_rook: Optional[int] = None
    queen_side_rook: Optional[int] = None

    @property
    def king_side(self) -> bool:
        return self.king_side_rook is not None

    @property
    def queen_side(self) -> bool:
        return self.queen_side_rook is not None

    def rook_file(self, king_side: bool) -> Optional[int]:
        return self.king_side_rook if king_side else self.queen_side_rook

    def without(self, *, king_side: bool) -> "CastlingRights":
        if king_side:
            return replace(self, king_side_rook=None)
        return replace(self, queen_side_rook=None)

    def cleared(self) -> "CastlingRights":
        return CastlingRights()


class ResultKind(Enum):
    CHECKMATE = "checkmate"
    RESIGNATION = "resignation"
    STALEMATE = "stalemate"
    AGREEMENT = "agreement"
    FIFTY_MOVE = "fifty_move"


@dataclass(frozen=True)
class GameResult:
    """How a game ended; ``winner`` is set for decisive results only."""

    kind: ResultKind
    winner: Optional[Color] = None

    @classmethod
    def checkmate(cls, winner: Color) -> "GameResult":
        return cls(ResultKind.CHECKMATE, winner)

    @classmethod
    def resignation(cls, winner: Color) -> "GameResult":
        return cls(ResultKind.RESIGNATION, winner)

    @classmethod
    def stalemate(cls) -> "GameResult":
        return cls(ResultKind.STALEMATE)

    @classmethod
    def agreement(cls) -> "GameResult":
        return cls(ResultKind.AGREEMENT)

    @classmethod
    def fifty_move(cls) -> "GameResult":
        return cls(ResultKind.FIFTY_MOVE)

    @property
    def is_draw(self) -> bool:
        return self.winner is None

    @property
    def score(self) -> str:
        if self.winner is Color.WHITE:
            return "1-0"
        if self.winner is Color.BLACK:
            return "0-1"
        return "1/2-1/2"

    def __str__(self) -> str:
        if self.kind is ResultKind.CHECKMATE:
            return f"{self.winner.label} wins by checkmate"  # type: ignore[union-attr]
        if self.kind is ResultKind.RESIGNATION:
            return f"{self.winner.label} wins by resignation"  # type: ignore[union-attr]
        if self.kind is ResultKind.STALEMATE:
            return "Draw by stalemate"
        if self.kind is ResultKind.AGREEMENT:
            return "Draw by agreement"
        return "Draw by fifty-move rule"


@dataclass(frozen=True)
class _Snapshot:
    castling: Dict[Color, CastlingRights]
    ep_square: Optional[Square]
    halfmove_clock: int
    fullmove_number: int
    result: Optional[GameResult]


@dataclass
class Position:
    """The mutable state of one game.

    Notes:
    - Created by ``startpos.new_game`` or ``Position.from_fen``; mutated only
      by ``apply.apply_move`` / ``apply.undo_move`` and the external result
      setters of ``game``.
    - ``move_log`` is append-only history; ``_history`` holds the fields a
      move overwrites so undo can restore them.
    """

    board: Board
    side_to_move: Color = Color.WHITE
    castling: Dict[Color, CastlingRights] = field(
        default_factory=lambda: {Color.WHITE: CastlingRights(), Color.BLACK: CastlingRights()}
    )
    ep_square: Optional[Square] = None
    halfmove_clock: int = 0
    fullmove_number: int = 1
    move_log: List[MoveRecord] = field(default_factory=list)
    result: Optional[GameResult] = None
    start_position: Optional[str] = None
    _history: List[_Snapshot] = field(default_factory=list, repr=False, compare=False)

    @property
    def game_over(self) -> bool:
        return self.result is not None

    def copy(self) -> "Position":
        return Position(
            board=self.board.copy(),
            side_to_move=self.side_to_move,
            castling=dict(self.castling),
            ep_square=self.ep_square,
            halfmove_clock=self.halfmove_clock,
            fullmove_number=self.fullmove_number,
            move_log=list(self.move_log),
            result=self.result,
            start_position=self.start_position,
            _history=list(self._history),
        )

    def snapshot(self) -> _Snapshot:
        return _Snapshot(
            castling=dict(self.castling),
            ep_square=self.ep_square,
            halfmove_clock=self.halfmove_clock,
            fullmove_number=self.fullmove_number,
            result=self.result,
        )

    def restore(self, snap: _Snapshot) -> None:
        self.castling = dict(snap.castling)
        self.ep_square = snap.ep_square
        self.halfmove_clock = snap.halfmove_clock
        self.fullmove_number = snap.fullmove_number
        self.result = snap.result

    def describe(self, from_sq: Square, to_sq: Square) -> MoveRecord:
        """Build the record for moving the piece on ``from_sq`` to ``to_sq``.

        No legality checking happens here; callers pass candidates produced by
        the move generator. A king moving two files is a castle, a pawn
        landing on the en passant target diagonally is an en passant capture
        and a pawn reaching the far rank promotes to a queen.
        """
        piece = self.board.piece_at(from_sq)
        if piece is None:
            raise ValueError(f"no piece on {from_sq}")
        captured = self.board.piece_at(to_sq)

        if piece.kind is PieceKind.PAWN:
            en_passant: Optional[Square] = None
            if to_sq == self.ep_square and to_sq.file != from_sq.file and captured is None:
                en_passant = Square(from_sq.rank, to_sq.file)
                captured = self.board.piece_at(en_passant)
            promotion = PieceKind.QUEEN if to_sq.rank == piece.color.opponent.back_rank else None
            return MoveRecord(piece, from_sq, to_sq, captured, en_passant=en_passant, promotion=promotion)

        if piece.kind is PieceKind.KING and abs(to_sq.file - from_sq.file) == 2:
            king_side = to_sq.file > from_sq.file
            rook_file = self.castling[piece.color].rook_file(king_side)
            if rook_file is None:
                raise ValueError(f"no castling right for {piece.color.label} on that side")
            rook_to_file = to_sq.file - 1 if king_side else to_sq.file + 1
            detail = CastlingDetail(
                rook_from=Square(from_sq.rank, rook_file),
                rook_to=Square(from_sq.rank, rook_to_file),
            )
            return MoveRecord(piece, from_sq, to_sq, castling=detail)

        return MoveRecord(piece, from_sq, to_sq, captured)

    # --- FEN I/O ---
    @classmethod
    def from_fen(cls, fen: str) -> "Position":
        """Create a position from a Forsyth–Edwards Notation (FEN) string.

        Args:
            fen (str): FEN string describing the position to load.

        Returns:
            Position: Position initialized with the state encoded in ``fen``.

        Raises:
            ValueError: If ``fen`` is empty, has the wrong number of fields, or
                contains invalid piece placement, castling rights, en passant
                square, or move counters.

        Notes:
            Castling rights accept both ``KQkq`` (outermost rook on that side
            of the king) and Shredder/X-FEN file letters such as ``HAha``.
            The game result is not evaluated here; see ``terminal.refresh_result``.
        """
        if not fen or not isinstance(fen, str):
            raise ValueError("FEN must be a non-empty string")
        parts = fen.strip().split()
        if len(parts) != 6:
            raise ValueError("FEN must have 6 fields")
        placement, stm, castling, ep, halfmove, fullmove = parts

        board = _parse_placement(placement)
        for color in Color:
            kings = [sq for sq, p in board.pieces(color) if p.kind is PieceKind.KING]
            if len(kings) != 1:
                raise ValueError(f"FEN must contain exactly one {color.label.lower()} king")
        for sq, p in board.pieces():
            if p.kind is PieceKind.PAWN and sq.rank in (0, 7):
                raise ValueError("pawns cannot stand on the back ranks")

        if stm not in ("w", "b"):
            raise ValueError("side to move must be 'w' or 'b'")

        rights = _parse_castling(board, castling)

        ep_square: Optional[Square]
        if ep == "-":
            ep_square = None
        else:
            try:
                ep_square = Square.parse(ep)
            except ValueError as e:
                raise ValueError("invalid en passant square") from e
            if ep_square.rank not in (2, 5):
                raise ValueError("invalid en passant square rank")

        try:
            halfmove_clock = int(halfmove)
            fullmove_number = int(fullmove)
        except ValueError as e:
            raise ValueError("invalid move counters in FEN") from e
        if halfmove_clock < 0 or fullmove_number <= 0:
            raise ValueError("invalid move counters in FEN")

        return cls(
            board=board,
            side_to_move=Color(stm),
            castling=rights,
            ep_square=ep_square,
            halfmove_clock=halfmove_clock,
            fullmove_number=fullmove_number,
        )

    def to_fen(self, *, shredder: bool = False) -> str:
        """Serialize the position into a FEN string.

        Args:
            shredder (bool): Write castling rights as rook file letters
                (``HAha``) instead of ``KQkq``. Standard letters are ambiguous
                for some Chess960 setups.

        Returns:
            str: FEN string describing the position.
        """
        ranks_str: List[str] = []
        for rank in range(7, -1, -1):
            run = 0
            row = []
            for file in range(8):
                p = self.board.piece_at(Square(rank, file))
                if p is None:
                    run += 1
                else:
                    if run > 0:
                        row.append(str(run))
                        run = 0
                    row.append(p.symbol)
            if run > 0:
                row.append(str(run))
            ranks_str.append("".join(row))
        placement = "/".join(ranks_str)

        castling = "".join(
            _castling_letters(color, self.castling[color], shredder) for color in Color
        )
        ep = str(self.ep_square) if self.ep_square is not None else "-"
        return (
            f"{placement} {self.side_to_move.value} {castling or '-'} {ep} "
            f"{self.halfmove_clock} {self.fullmove_number}"
        )


def _parse_placement(placement: str) -> Board:
    ranks = placement.split("/")
    if len(ranks) != 8:
        raise ValueError("FEN board must have 8 ranks")
    board = Board()
    for rank_idx, rank in enumerate(ranks[::-1]):  # start from rank 1 (bottom)
        file_idx = 0
        for ch in rank:
            if ch.isdigit():
                n = int(ch)
                if n < 1 or n > 8:
                    raise ValueError("invalid empty count in FEN rank")
                file_idx += n
            else:
                piece = Piece.from_symbol(ch)
                if file_idx >= 8:
                    raise ValueError("too many squares in FEN rank")
                board.put(Square(rank_idx, file_idx), piece)
                file_idx += 1
        if file_idx != 8:
            raise ValueError("rank does not sum to 8 squares in FEN")
    return board


def _parse_castling(board: Board, field_: str) -> Dict[Color, CastlingRights]:
    rights = {Color.WHITE: CastlingRights(), Color.BLACK: CastlingRights()}
    if field_ == "-":
        return rights
    for ch in field_:
        if ch.lower() not in "kq" + FILES:
            raise ValueError("invalid castling rights")
        color = Color.WHITE if ch.isupper() else Color.BLACK
        king = board.king_square(color)
        if king.rank != color.back_rank:
            raise ValueError("castling rights require the king on its back rank")
        rook_files = [
            sq.file
            for sq, p in board.pieces(color)
            if p.kind is PieceKind.ROOK and sq.rank == color.back_rank
        ]
        letter = ch.lower()
        if letter == "k":
            candidates = [f for f in rook_files if f > king.file]
            if not candidates:
                raise ValueError("invalid castling rights: no king-side rook")
            file, king_side = max(candidates), True
        elif letter == "q":
            candidates = [f for f in rook_files if f < king.file]
            if not candidates:
                raise ValueError("invalid castling rights: no queen-side rook")
            file, king_side = min(candidates), False
        else:
            file = FILES.index(letter)
            if file not in rook_files:
                raise ValueError(f"invalid castling rights: no rook on file {letter}")
            king_side = file > king.file
        if king_side:
            rights[color] = replace(rights[color], king_side_rook=file)
        else:
            rights[color] = replace(rights[color], queen_side_rook=file)
    return rights


def _castling_letters(color: Color, rights: CastlingRights, shredder: bool) -> str:
    out: List[Tuple[Optional[int], str]] = [
        (rights.king_side_rook, "k"),
        (rights.queen_side_rook, "q"),
    ]
    letters = ""
    for rook_file, std in out:
        if rook_file is None:
            continue
        ch = FILES[rook_file] if shredder else std
        letters += ch.upper() if color is Color.WHITE else ch
    return letters
