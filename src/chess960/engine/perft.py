from __future__ import annotations

from typing import Dict

from .apply import apply_move, undo_move
from .movegen import all_legal_moves
from .position import Position


def perft(position: Position, depth: int) -> int:
    """Compute perft node count for ``position`` at ``depth``.

    Definition:
    - depth == 0 returns 1 (the current node).
    - depth > 0 returns the sum over all legal child positions' perft(depth-1).

    Works on a copy; ``position`` is not modified. Counts match standard
    chess tables only while no promotion happens within ``depth``, since
    pawns always promote to a queen here.
    """
    if depth < 0:
        raise ValueError("depth must be >= 0")
    return _perft(position.copy(), depth)


def divide(position: Position, depth: int) -> Dict[str, int]:
    """Return perft(depth - 1) per root move, keyed by UCI string."""
    if depth < 1:
        raise ValueError("depth must be >= 1")
    work = position.copy()
    out: Dict[str, int] = {}
    for from_sq, to_sq in all_legal_moves(work):
        record = apply_move(work, from_sq, to_sq)
        out[record.to_uci()] = _perft(work, depth - 1)
        undo_move(work)
    return out


def _perft(position: Position, depth: int) -> int:
    if depth == 0:
        return 1
    moves = all_legal_moves(position)
    if depth == 1:
        return len(moves)
    nodes = 0
    for from_sq, to_sq in moves:
        apply_move(position, from_sq, to_sq)
        nodes += _perft(position, depth - 1)
        undo_move(position)
    return nodes
