"""
Text helpers and a short scripted game.

Run with `python -m block_blast.demo [--seed N]` to deal a hand, place the
first piece that fits and print the board before and after.
"""

from __future__ import annotations

import argparse
from typing import Optional

import numpy as np

from block_blast.game import GameConfig, GameSession, PieceCatalog


def format_grid(grid: np.ndarray) -> str:
    return "\n".join("".join("█" if cell else "·" for cell in row) for row in grid)


def print_grid(grid: np.ndarray) -> None:
    print(format_grid(grid))


def print_piece(piece_shape: np.ndarray) -> None:
    print(format_grid(piece_shape))


def run_game_demo(seed: Optional[int] = None) -> None:  # pragma: no cover
    game = GameSession(GameConfig(random_seed=seed))
    print("=== Block Blast Demo ===")
    print(f"Hand: {[p.id for p in game.hand]}")
    print("\nInitial grid:")
    print_grid(game.board.grid)
    for piece in list(game.hand):
        print(f"\n{piece.id} ({piece.color}):")
        print_piece(piece.shape)
    for piece in list(game.hand):
        spots = game.board.valid_placements(piece)
        if not spots:
            continue
        row, col = spots[0]
        result = game.place_piece(piece.id, row, col)
        print(f"\nPlaced {piece.id} at ({row}, {col}): +{result.score_gained}, lines cleared: {result.lines_cleared}")
        print_grid(game.board.grid)
        print(f"Remaining hand: {[p.id for p in game.hand]}")
        print(f"Total score: {game.score}")
        break
    else:
        print("No piece in the hand fits")


def print_catalog() -> None:  # pragma: no cover
    catalog = PieceCatalog()
    print(f"{len(catalog)} variants from {len(catalog.base_names())} base shapes")
    for name in catalog.base_names():
        variants = catalog.variants_for(name)
        print(f"\n{name}: {len(variants)} variant(s)")
        for variant in variants:
            print(f"{variant.id}:")
            print_piece(variant.shape)


def main() -> None:  # pragma: no cover
    p = argparse.ArgumentParser()
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--catalog", action="store_true", help="List every piece variant instead of playing")
    args = p.parse_args()
    if args.catalog:
        print_catalog()
    else:
        run_game_demo(args.seed)


if __name__ == "__main__":  # pragma: no cover
    main()
