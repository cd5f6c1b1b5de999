from __future__ import annotations

import logging
import random
from typing import Dict, Literal, Optional

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, ConfigDict, Field

from .error import (
    exception_handler,
    http_exception_handler,
    illegal_move_exception_handler,
    request_validation_exception_handler,
)
from .logging_middleware import RequestIDLoggingMiddleware
from ...engine.errors import IllegalMove
from ...engine.game import Game
from ...engine.perft import perft as perft_nodes
from ...engine.piece import Color
from ...engine.position import Position
from ...engine.square import Square
from ...engine.startpos import RandomSource
from .session import GameRegistry


logger = logging.getLogger(__name__)

ColorCode = Literal["w", "b"]

MAX_PERFT_DEPTH = 3


class CreateGameRequest(BaseModel):
    seed: Optional[int] = Field(default=None, description="Seed for a reproducible start position")
    fen: Optional[str] = Field(default=None, description="Start from this FEN instead")


class CreateGameResponse(BaseModel):
    game_id: str
    fen: str
    start_position: Optional[str]


class SetPositionRequest(BaseModel):
    fen: str = Field(..., description="FEN string")


class MoveRequest(BaseModel):
    """Relay payload: origin and destination squares, e.g. ``{"from": "e2", "to": "e4"}``."""

    model_config = ConfigDict(populate_by_name=True)

    from_square: str = Field(..., alias="from", description="Origin square, e.g. e2")
    to_square: str = Field(..., alias="to", description="Destination square, e.g. e4")
    color: Optional[ColorCode] = Field(default=None, description="Color of the moving player")


class ResignRequest(BaseModel):
    color: ColorCode = Field(..., description="Color of the resigning player")


class PerftRequest(BaseModel):
    fen: str
    depth: int = Field(default=1, ge=0, le=MAX_PERFT_DEPTH)


class SquareMoves(BaseModel):
    square: str
    targets: list[str]


class GameState(BaseModel):
    game_id: str
    fen: str
    side_to_move: ColorCode
    start_position: Optional[str]
    legal_moves: list[str]
    in_check: bool
    checkmate: bool
    stalemate: bool
    draw: bool
    game_over: bool
    result: Optional[str]
    winner: Optional[ColorCode]
    score: Optional[str]
    last_move: Optional[str]
    move_history: list[str]


def create_app(rng: Optional[RandomSource] = None) -> FastAPI:
    """Build the HTTP API.

    Args:
        rng: Random source shared by every new game without an explicit seed;
            a fresh ``random.Random`` when omitted.
    """
    app = FastAPI(title="Chess960 API", version="0.1.0")

    logging.basicConfig(level=logging.INFO)

    # Middleware & error handling
    app.add_middleware(RequestIDLoggingMiddleware)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(IllegalMove, illegal_move_exception_handler)
    app.add_exception_handler(Exception, exception_handler)

    registry = GameRegistry()
    source: RandomSource = rng if rng is not None else random.Random()

    @app.get("/healthz")
    async def healthz() -> Dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/games", response_model=CreateGameResponse)
    async def create_game(req: Optional[CreateGameRequest] = None) -> CreateGameResponse:
        req = req or CreateGameRequest()
        if req.fen is not None:
            try:
                game = Game.from_fen(req.fen)
            except ValueError:
                raise HTTPException(status_code=400, detail="invalid FEN")
        elif req.seed is not None:
            game = Game.new(random.Random(req.seed))
        else:
            game = Game.new(source)
        game_id = registry.open(game)
        logger.info(
            "game created",
            extra={"game_id": game_id, "start_position": game.start_position},
        )
        return CreateGameResponse(
            game_id=game_id, fen=game.to_fen(), start_position=game.start_position
        )

    @app.get("/api/games")
    async def list_games() -> Dict[str, list[str]]:
        return {"games": registry.game_ids()}

    @app.get("/api/games/{game_id}/state", response_model=GameState)
    async def get_state(game_id: str) -> GameState:
        return _state(game_id, _require_game(registry, game_id))

    @app.get("/api/games/{game_id}/moves/{square}", response_model=SquareMoves)
    async def square_moves(game_id: str, square: str) -> SquareMoves:
        game = _require_game(registry, game_id)
        sq = _parse_square(square)
        targets = sorted(game.legal_moves(sq))
        return SquareMoves(square=str(sq), targets=[str(t) for t in targets])

    @app.post("/api/games/{game_id}/position", response_model=GameState)
    async def set_position(game_id: str, req: SetPositionRequest) -> GameState:
        _require_game(registry, game_id)
        try:
            registry.replace(game_id, Game.from_fen(req.fen))
        except ValueError:
            raise HTTPException(status_code=400, detail="invalid FEN")
        return _state(game_id, _require_game(registry, game_id))

    @app.post("/api/games/{game_id}/move", response_model=GameState)
    async def make_move(game_id: str, req: MoveRequest) -> GameState:
        game = _require_game(registry, game_id)
        from_sq = _parse_square(req.from_square)
        to_sq = _parse_square(req.to_square)
        color = Color(req.color) if req.color is not None else None
        # IllegalMove is rendered by its registered handler
        game.apply_move(from_sq, to_sq, color=color)
        return _state(game_id, game)

    @app.post("/api/games/{game_id}/undo", response_model=GameState)
    async def undo(game_id: str) -> GameState:
        game = _require_game(registry, game_id)
        try:
            game.undo_move()
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return _state(game_id, game)

    @app.post("/api/games/{game_id}/resign", response_model=GameState)
    async def resign(game_id: str, req: ResignRequest) -> GameState:
        game = _require_game(registry, game_id)
        try:
            game.resign(Color(req.color))
        except ValueError as e:
            raise HTTPException(status_code=409, detail=str(e))
        return _state(game_id, game)

    @app.post("/api/games/{game_id}/draw", response_model=GameState)
    async def draw(game_id: str) -> GameState:
        game = _require_game(registry, game_id)
        try:
            game.agree_draw()
        except ValueError as e:
            raise HTTPException(status_code=409, detail=str(e))
        return _state(game_id, game)

    @app.delete("/api/games/{game_id}")
    async def delete_game(game_id: str) -> Dict[str, bool]:
        if not registry.close(game_id):
            raise HTTPException(status_code=404, detail="game not found")
        return {"deleted": True}

    @app.post("/api/perft")
    def perft(req: PerftRequest) -> Dict[str, int]:
        # Plain def: node counting is CPU-bound and runs in the threadpool.
        try:
            position = Position.from_fen(req.fen)
        except ValueError:
            raise HTTPException(status_code=400, detail="invalid FEN")
        return {"nodes": perft_nodes(position, req.depth)}

    return app


def _require_game(registry: GameRegistry, game_id: str) -> Game:
    game = registry.get(game_id)
    if game is None:
        raise HTTPException(status_code=404, detail="game not found")
    return game


def _parse_square(raw: str) -> Square:
    try:
        return Square.parse(raw)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


def _state(game_id: str, game: Game) -> GameState:
    history = game.move_history_uci()
    res = game.result()
    return GameState(
        game_id=game_id,
        fen=game.to_fen(),
        side_to_move=game.side_to_move.value,
        start_position=game.start_position,
        legal_moves=game.legal_moves_uci(),
        in_check=game.in_check(),
        checkmate=game.checkmate(),
        stalemate=game.stalemate(),
        draw=game.is_draw(),
        game_over=game.is_game_over(),
        result=res.kind.value if res is not None else None,
        winner=res.winner.value if res is not None and res.winner is not None else None,
        score=res.score if res is not None else None,
        last_move=history[-1] if history else None,
        move_history=history,
    )


# Default app for non-factory servers
app = create_app()
