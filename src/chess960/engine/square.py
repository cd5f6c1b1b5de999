from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


FILES = "abcdefgh"


@dataclass(frozen=True, order=True)
class Square:
    """A board coordinate.

    Notes:
    - ``rank`` 0..7 maps to algebraic ranks 1..8: rank 0 is White's back rank,
      rank 7 is Black's back rank.
    - ``file`` 0..7 maps to columns a..h.
    - Every component of the engine uses this convention; nothing else converts
      between coordinates.
    """

    rank: int
    file: int

    def __post_init__(self) -> None:
        if not (0 <= self.rank < 8 and 0 <= self.file < 8):
            raise ValueError(f"square out of range: rank={self.rank} file={self.file}")

    @classmethod
    def parse(cls, s: str) -> "Square":
        """Convert algebraic notation into a square.

        Args:
            s (str): Square name such as ``"e4"``.

        Returns:
            Square: The parsed square.

        Raises:
            ValueError: If ``s`` is not a valid square.
        """
        if not isinstance(s, str) or len(s) != 2 or s[0] not in FILES or s[1] < "1" or s[1] > "8":
            raise ValueError(f"invalid square: {s!r}")
        return cls(int(s[1]) - 1, FILES.index(s[0]))

    def offset(self, d_rank: int, d_file: int) -> Optional["Square"]:
        """Return the square shifted by the given deltas, or ``None`` off-board."""
        r = self.rank + d_rank
        f = self.file + d_file
        if 0 <= r < 8 and 0 <= f < 8:
            return Square(r, f)
        return None

    def __str__(self) -> str:
        return FILES[self.file] + str(self.rank + 1)
