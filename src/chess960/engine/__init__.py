"""Chess960 rules engine.

Functional interface for UI and transport layers; ``Game`` wraps the same
operations for a single serialized session.
"""

from .apply import apply_move, undo_move
from .attacks import is_attacked
from .errors import IllegalMove
from .game import Game, agree_draw, is_game_over, resign, result, to_fen
from .move import CastlingDetail, MoveRecord
from .movegen import all_legal_moves, legal_moves, pseudo_legal_moves
from .piece import Color, Piece, PieceKind
from .position import CastlingRights, GameResult, Position, ResultKind
from .square import Square
from .startpos import generate_back_rank, new_game

__all__ = [
    "CastlingDetail",
    "CastlingRights",
    "Color",
    "Game",
    "GameResult",
    "IllegalMove",
    "MoveRecord",
    "Piece",
    "PieceKind",
    "Position",
    "ResultKind",
    "Square",
    "agree_draw",
    "all_legal_moves",
    "apply_move",
    "generate_back_rank",
    "is_attacked",
    "is_game_over",
    "legal_moves",
    "new_game",
    "pseudo_legal_moves",
    "resign",
    "result",
    "to_fen",
    "undo_move",
]
