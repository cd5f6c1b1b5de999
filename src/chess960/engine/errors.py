from __future__ import annotations


class IllegalMove(ValueError):
    """A requested move is not among the legal moves of the position.

    Covers empty origin squares, the opponent's pieces, moves into or through
    check and moves after the game has ended. The position is left untouched.
    """
