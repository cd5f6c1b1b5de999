#!/usr/bin/env python3
# ruff: noqa: E402
from __future__ import annotations

import argparse
import os
import sys
import time

# Allow running this script directly via `python scripts/perft.py`
# by adding `src/` to sys.path.
SRC_PATH = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "src")
if SRC_PATH not in sys.path:
    sys.path.insert(0, SRC_PATH)

from chess960.engine.perft import divide, perft
from chess960.engine.position import Position
from chess960.engine.startpos import new_game


def main() -> None:
    parser = argparse.ArgumentParser(description="Run perft on a given FEN and depth")
    parser.add_argument("--fen", type=str, default=None, help="FEN string (default: random Chess960 start)")
    parser.add_argument("--depth", type=int, default=3, help="Perft depth (default: 3)")
    parser.add_argument("--divide", action="store_true", help="Print node counts per root move")
    args = parser.parse_args()

    position = Position.from_fen(args.fen) if args.fen else new_game()
    print(f"fen={position.to_fen(shredder=True)}")
    start = time.perf_counter()
    if args.divide:
        counts = divide(position, args.depth)
        for move, n in sorted(counts.items()):
            print(f"{move}: {n}")
        nodes = sum(counts.values())
    else:
        nodes = perft(position, args.depth)
    dt = time.perf_counter() - start
    print(f"nodes={nodes} depth={args.depth} time_ms={int(dt*1000)} nps={int(nodes/max(dt,1e-9))}")


if __name__ == "__main__":
    main()
