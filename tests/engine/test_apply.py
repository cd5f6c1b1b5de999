from __future__ import annotations

import random

import pytest

from chess960.engine.apply import apply_move, undo_move
from chess960.engine.attacks import king_attacked
from chess960.engine.errors import IllegalMove
from chess960.engine.movegen import all_legal_moves, legal_moves
from chess960.engine.piece import Color, Piece, PieceKind
from chess960.engine.position import Position
from chess960.engine.square import Square
from chess960.engine.startpos import new_game


STARTPOS_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"


def sq(name: str) -> Square:
    return Square.parse(name)


def test_counters_and_side_to_move() -> None:
    p = Position.from_fen(STARTPOS_FEN)
    apply_move(p, sq("g1"), sq("f3"))
    assert (p.side_to_move, p.halfmove_clock, p.fullmove_number) == (Color.BLACK, 1, 1)
    apply_move(p, sq("g8"), sq("f6"))
    assert (p.side_to_move, p.halfmove_clock, p.fullmove_number) == (Color.WHITE, 2, 2)
    apply_move(p, sq("e2"), sq("e4"))
    assert p.halfmove_clock == 0
    apply_move(p, sq("f6"), sq("e4"))
    assert p.halfmove_clock == 0
    assert p.move_log[-1].captured == Piece(PieceKind.PAWN, Color.WHITE)
    assert [m.to_uci() for m in p.move_log] == ["g1f3", "g8f6", "e2e4", "f6e4"]


@pytest.mark.parametrize(
    "origin,target",
    [
        ("e2", "e5"),  # too far
        ("e7", "e5"),  # not White's piece
        ("e4", "e5"),  # empty square
        ("g1", "e2"),  # own piece on target
        ("e1", "e2"),  # king onto own pawn
    ],
)
def test_illegal_move_is_rejected_without_mutation(origin: str, target: str) -> None:
    p = Position.from_fen(STARTPOS_FEN)
    with pytest.raises(IllegalMove):
        apply_move(p, sq(origin), sq(target))
    assert p.to_fen() == STARTPOS_FEN
    assert p.move_log == []


def test_promotion_always_makes_a_queen() -> None:
    p = Position.from_fen("8/P3k3/8/8/8/8/8/4K3 w - - 0 1")
    record = apply_move(p, sq("a7"), sq("a8"))
    assert record.promotion is PieceKind.QUEEN
    assert record.to_uci() == "a7a8q"
    assert p.to_fen() == "Q7/4k3/8/8/8/8/8/4K3 b - - 0 1"
    undo_move(p)
    assert p.to_fen() == "8/P3k3/8/8/8/8/8/4K3 w - - 0 1"


def test_promotion_by_capture_and_for_black() -> None:
    p = Position.from_fen("1r2k3/P7/8/8/8/8/8/4K3 w - - 0 1")
    assert legal_moves(p, sq("a7")) == {sq("a8"), sq("b8")}
    apply_move(p, sq("a7"), sq("b8"))
    assert p.board.piece_at(sq("b8")) == Piece(PieceKind.QUEEN, Color.WHITE)

    p = Position.from_fen("4k3/8/8/8/8/8/p7/4K3 b - - 0 1")
    apply_move(p, sq("a2"), sq("a1"))
    assert p.to_fen() == "4k3/8/8/8/8/8/8/q3K3 w - - 0 2"


def test_undo_without_moves_raises() -> None:
    with pytest.raises(ValueError):
        undo_move(Position.from_fen(STARTPOS_FEN))


def test_undo_is_exact_inverse() -> None:
    p = Position.from_fen("r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 1")
    before = p.to_fen()
    for from_sq, to_sq in all_legal_moves(p):
        apply_move(p, from_sq, to_sq)
        undo_move(p)
        assert p.to_fen() == before
    assert p.move_log == []


@pytest.mark.parametrize("seed", [1, 7, 19, 960])
def test_random_games_never_leave_king_in_check(seed: int) -> None:
    rng = random.Random(seed)
    p = new_game(rng)
    start = p.to_fen()
    fens = [start]
    for _ in range(120):
        moves = all_legal_moves(p)
        if not moves:
            break
        from_sq, to_sq = rng.choice(moves)
        mover = p.side_to_move
        apply_move(p, from_sq, to_sq)
        assert not king_attacked(p.board, mover)
        fens.append(p.to_fen())
        if p.game_over:
            break

    # Walk the game back and compare against every recorded position.
    while p.move_log:
        fens.pop()
        undo_move(p)
        assert p.to_fen() == fens[-1]
    assert p.to_fen() == start
    assert p.result is None
