from __future__ import annotations

import random
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from .events import (
    EVENT_GAME_OVER,
    EVENT_GAME_RESET,
    EVENT_HAND_DEALT,
    EVENT_LINES_CLEARED,
    EVENT_PIECE_PLACED,
    EVENT_STATE_CHANGED,
    EventBus,
)
from .grid import Board
from .pieces import Piece, PieceCatalog, PieceDealer, default_catalog
from .rules import ScoringRules


@dataclass
class GameConfig:
    width: int = 8
    height: int = 8
    hand_size: int = 3
    random_seed: Optional[int] = None
    game_over_delay: float = 0.1  # seconds, for the deferred check
    max_episode_steps: int = 10000

    def __post_init__(self) -> None:
        if self.hand_size < 0:
            raise ValueError(f"hand_size must be >= 0, got {self.hand_size}")


@dataclass
class PlacementResult:
    success: bool
    score_gained: int = 0
    rows_cleared: int = 0
    cols_cleared: int = 0
    game_over: bool = False

    @property
    def lines_cleared(self) -> int:
        return self.rows_cleared + self.cols_cleared


class GameSession:
    """One game: board, hand and running score.

    A turn is `place_piece(piece_id, row, col)`: the piece is validated and
    committed, lines are cleared and scored, the hand is refilled once empty,
    and the session ends when no piece in the hand fits anywhere. After that
    every placement is rejected until `reset()`.
    """

    def __init__(self, config: Optional[GameConfig] = None, rules: Optional[ScoringRules] = None,
                 catalog: Optional[PieceCatalog] = None, rng: Optional[random.Random] = None,
                 bus: Optional[EventBus] = None) -> None:
        self.config = config or GameConfig()
        self.rules = rules or ScoringRules()
        self.catalog = catalog or default_catalog()
        self.rng = rng or random.Random(self.config.random_seed)
        self.dealer = PieceDealer(self.catalog, self.rng)
        self.bus = bus or EventBus()
        self._lock = threading.RLock()
        self._pending_check: Optional[threading.Timer] = None

        self.board = self._new_board()
        self.hand: List[Piece] = []
        self.score = 0
        self.lines_cleared_total = 0
        self.pieces_placed = 0
        self.game_over = False
        self.reset()

    def _new_board(self) -> Board:
        return Board(self.config.height, self.config.width, self.rules)

    # ---------- Observers ----------
    def subscribe(self, callback: Callable[..., Any]) -> None:
        """Call `callback(session, state=...)` after every committed change."""
        self.bus.subscribe(EVENT_STATE_CHANGED, callback)

    def _emit(self, name: str, **payload: Any) -> None:
        self.bus.emit(name, sender=self, **payload)

    def _state_changed(self) -> None:
        self._emit(EVENT_STATE_CHANGED, state=self.get_state())

    # ---------- Lifecycle ----------
    def reset(self, seed: Optional[int] = None) -> None:
        """Start over with an empty board, zero score and a fresh hand."""
        with self._lock:
            self.cancel_pending_check()
            if seed is not None:
                self.rng.seed(seed)
            self.board = self._new_board()
            self.hand = []
            self.score = 0
            self.lines_cleared_total = 0
            self.pieces_placed = 0
            self.game_over = False
            self._emit(EVENT_GAME_RESET)
            self._deal(self.config.hand_size)
            self._state_changed()

    def _deal(self, count: int) -> List[Piece]:
        # a hand that fits nowhere ends the game as soon as it is dealt
        self.hand = self.dealer.draw(count)
        self._emit(EVENT_HAND_DEALT, pieces=list(self.hand))
        self._mark_game_over_if_stuck()
        return self.hand

    def draw_hand(self, count: Optional[int] = None) -> List[Piece]:
        """Replace the hand with `count` new pieces (the configured hand size by default).

        Once the game is over the hand is left as it is until `reset()`.
        """
        with self._lock:
            if self.game_over:
                return self.hand
            hand = self._deal(self.config.hand_size if count is None else count)
            self._state_changed()
            return hand

    # ---------- Turn ----------
    def find_piece(self, piece_id: str) -> Optional[int]:
        for idx, piece in enumerate(self.hand):
            if piece.id == piece_id:
                return idx
        return None

    def can_place(self, piece_id: str, row: int, col: int) -> bool:
        with self._lock:
            idx = self.find_piece(piece_id)
            if self.game_over or idx is None:
                return False
            return self.board.can_place(self.hand[idx], row, col)

    def place_piece(self, piece_id: str, row: int, col: int) -> PlacementResult:
        with self._lock:
            if self.game_over:
                return PlacementResult(success=False, game_over=True)
            idx = self.find_piece(piece_id)
            if idx is None:
                return PlacementResult(success=False)
            piece = self.hand[idx]
            if not self.board.place(piece, row, col):
                return PlacementResult(success=False)

            self.hand.pop(idx)
            cleared = self.board.clear_lines()
            gained = self.rules.placement_score(piece.num_cells()) + cleared.score
            self.score += gained
            self.pieces_placed += 1
            self.lines_cleared_total += cleared.lines_cleared

            self._emit(EVENT_PIECE_PLACED, piece=piece, row=row, col=col, score_gained=gained)
            if cleared.lines_cleared:
                self._emit(EVENT_LINES_CLEARED, rows=cleared.rows, cols=cleared.cols, score=cleared.score)

            if self.hand:
                self._mark_game_over_if_stuck()
            else:
                self._deal(self.config.hand_size)
            self._state_changed()
            return PlacementResult(
                success=True,
                score_gained=gained,
                rows_cleared=cleared.rows_cleared,
                cols_cleared=cleared.cols_cleared,
                game_over=self.game_over,
            )

    def _mark_game_over_if_stuck(self) -> bool:
        if self.game_over:
            return True
        if self.board.can_place_any(self.hand):
            return False
        self.game_over = True
        self._emit(EVENT_GAME_OVER, score=self.score)
        return True

    def check_game_over(self) -> bool:
        """Mark the session over if nothing in the hand fits. Idempotent."""
        with self._lock:
            if self.game_over:
                return True
            if not self._mark_game_over_if_stuck():
                return False
            self._state_changed()
            return True

    # ---------- Deferred check ----------
    def schedule_game_over_check(self, delay: Optional[float] = None) -> None:
        """Run `check_game_over` after `delay` seconds; re-arms any pending check."""
        with self._lock:
            self.cancel_pending_check()
            wait = self.config.game_over_delay if delay is None else delay
            timer = threading.Timer(wait, self._run_pending_check)
            timer.daemon = True
            self._pending_check = timer
            timer.start()

    def cancel_pending_check(self) -> None:
        with self._lock:
            if self._pending_check is not None:
                self._pending_check.cancel()
                self._pending_check = None

    @property
    def has_pending_check(self) -> bool:
        return self._pending_check is not None

    def _run_pending_check(self) -> None:
        with self._lock:
            if self._pending_check is None or self._pending_check is not threading.current_thread():
                return
            self._pending_check = None
            self.check_game_over()

    # ---------- Views ----------
    def get_state(self) -> Dict[str, Any]:
        return {
            "grid": self.board.clone_state(),
            "cells": self.board.cell_colors(),
            "hand": [
                {"id": p.id, "shape": p.shape.tolist(), "color": p.color}
                for p in self.hand
            ],
            "pieces_remaining": len(self.hand),
            "score": self.score,
            "lines_cleared_total": self.lines_cleared_total,
            "pieces_placed": self.pieces_placed,
            "game_over": self.game_over,
        }
