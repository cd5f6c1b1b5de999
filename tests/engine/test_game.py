from __future__ import annotations

import logging
import random
import threading

import pytest

from chess960.engine.errors import IllegalMove
from chess960.engine.game import Game
from chess960.engine.move import parse_relay, parse_uci
from chess960.engine.piece import Color
from chess960.engine.position import ResultKind
from chess960.engine.square import Square


STARTPOS_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"


def test_new_game_is_seedable() -> None:
    a = Game.new(random.Random(3))
    b = Game.new(random.Random(3))
    assert a.to_fen() == b.to_fen()
    assert a.start_position is not None and len(a.start_position) == 8
    assert a.side_to_move is Color.WHITE
    assert len(a.all_legal_moves()) > 0


def test_apply_uci_and_history() -> None:
    game = Game.from_fen(STARTPOS_FEN)
    game.apply_uci("e2e4")
    game.apply_uci("c7c5")
    assert game.move_history_uci() == ["e2e4", "c7c5"]
    assert game.side_to_move is Color.WHITE
    assert "g1f3" in game.legal_moves_uci()


def test_turn_ownership_is_checked() -> None:
    game = Game.from_fen(STARTPOS_FEN)
    with pytest.raises(IllegalMove, match="not Black's turn"):
        game.apply_move(Square.parse("e7"), Square.parse("e5"), color=Color.BLACK)
    game.apply_move(Square.parse("e2"), Square.parse("e4"), color=Color.WHITE)
    assert game.move_history_uci() == ["e2e4"]


def test_relay_payload_is_validated_like_local_moves() -> None:
    game = Game.from_fen(STARTPOS_FEN)
    record = game.apply_relay({"from": "g1", "to": "f3", "color": "w"})
    assert record.to_uci() == "g1f3"
    before = game.to_fen()
    with pytest.raises(IllegalMove):
        game.apply_relay({"from": "e7", "to": "e4"})
    with pytest.raises(ValueError):
        game.apply_relay({"from": "e7"})
    assert game.to_fen() == before


def test_parse_helpers() -> None:
    assert parse_uci("e7e8q") == (Square.parse("e7"), Square.parse("e8"))
    assert parse_relay({"from": "a1", "to": "h8"}) == (Square(0, 0), Square(7, 7))
    for bad in ("e2", "e2e9", "e7e8n", "z1a1"):
        with pytest.raises(ValueError):
            parse_uci(bad)


def test_from_fen_evaluates_result() -> None:
    game = Game.from_fen("7k/6Q1/6K1/8/8/8/8/8 b - - 0 1")
    assert game.is_game_over()
    assert game.checkmate() and not game.stalemate() and not game.is_draw()
    assert game.in_check()
    assert game.legal_moves_uci() == []

    game = Game.from_fen("4k3/8/8/8/8/8/8/4K3 w - - 100 80")
    res = game.result()
    assert res is not None and res.kind is ResultKind.FIFTY_MOVE
    assert game.is_draw()


def test_undo_in_session() -> None:
    game = Game.from_fen(STARTPOS_FEN)
    game.apply_uci("d2d4")
    record = game.undo_move()
    assert record.to_uci() == "d2d4"
    assert game.to_fen() == STARTPOS_FEN
    with pytest.raises(ValueError):
        game.undo_move()


def test_undo_after_checkmate_reopens_the_game() -> None:
    game = Game.from_fen("7k/Q7/6K1/8/8/8/8/8 w - - 0 1")
    game.apply_uci("a7g7")
    assert game.checkmate()
    game.undo_move()
    assert not game.is_game_over()


def test_no_undo_after_resignation_or_agreement() -> None:
    game = Game.from_fen(STARTPOS_FEN)
    game.apply_uci("e2e4")
    res = game.resign(Color.BLACK)
    assert res.winner is Color.WHITE
    with pytest.raises(ValueError, match="resignation"):
        game.undo_move()
    with pytest.raises(IllegalMove):
        game.apply_uci("e7e5")

    game = Game.from_fen(STARTPOS_FEN)
    game.apply_uci("e2e4")
    game.agree_draw()
    assert game.is_draw()
    with pytest.raises(ValueError):
        game.undo_move()
    with pytest.raises(ValueError):
        game.resign(Color.WHITE)


def test_concurrent_relay_and_local_moves_apply_once() -> None:
    game = Game.from_fen(STARTPOS_FEN)
    errors: list = []

    def attempt() -> None:
        try:
            game.apply_uci("e2e4", color=Color.WHITE)
        except IllegalMove as e:
            errors.append(e)

    threads = [threading.Thread(target=attempt) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert game.move_history_uci() == ["e2e4"]
    assert len(errors) == 7


def test_move_log_records_fen_only_at_debug(monkeypatch, caplog) -> None:
    game = Game.from_fen(STARTPOS_FEN)
    calls: list = []
    real_to_fen = game.position.to_fen

    def counting_to_fen(*args, **kwargs):
        calls.append(1)
        return real_to_fen(*args, **kwargs)

    monkeypatch.setattr(game.position, "to_fen", counting_to_fen)

    caplog.set_level(logging.INFO, logger="chess960.engine.game")
    game.apply_uci("e2e4")
    assert calls == []

    caplog.set_level(logging.DEBUG, logger="chess960.engine.game")
    game.apply_uci("e7e5")
    assert calls == [1]
    applied = [r for r in caplog.records if r.getMessage() == "move applied"]
    assert applied[-1].fen == "rnbqkbnr/pppp1ppp/8/4p3/4P3/8/PPPP1PPP/RNBQKBNR w KQkq e6 0 2"
