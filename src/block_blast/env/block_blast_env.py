from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from block_blast.demo import format_grid
from block_blast.game import GameConfig, GameSession, ScoringRules


PIECE_MASK_SIZE = 5  # largest base shape spans 5 cells


def compute_action_mask(session: GameSession, slots: int) -> np.ndarray:
    """Boolean mask of shape (slots, height, width) over (slot, row, col) actions."""
    board = session.board
    mask = np.zeros((slots, board.height, board.width), dtype=np.bool_)
    if session.game_over:
        return mask
    for slot, piece in enumerate(session.hand[:slots]):
        for row, col in board.valid_placements(piece):
            mask[slot, row, col] = True
    return mask


def piece_masks(session: GameSession, slots: int) -> np.ndarray:
    masks = np.zeros((slots, PIECE_MASK_SIZE, PIECE_MASK_SIZE), dtype=np.int8)
    for slot, piece in enumerate(session.hand[:slots]):
        h, w = piece.shape.shape
        masks[slot, :h, :w] = piece.shape
    return masks


class BlockBlastEnv(gym.Env):
    """Gymnasium view of a GameSession.

    Action: (slot, row, col) placing the hand piece in `slot` with its top-left
    corner at (row, col). Reward is the session score gained by the move, or
    `invalid_action_penalty` when the placement is rejected.
    """

    metadata = {"render_modes": ["ansi"], "render_fps": 4}

    def __init__(self, config: Optional[GameConfig] = None, rules: Optional[ScoringRules] = None,
                 render_mode: Optional[str] = None,
                 invalid_action_penalty: float = -1.0,
                 terminal_penalty: float = 0.0) -> None:
        super().__init__()
        self.session = GameSession(config, rules)
        self.render_mode = render_mode
        self.invalid_action_penalty = float(invalid_action_penalty)
        self.terminal_penalty = float(terminal_penalty)

        height = self.session.config.height
        width = self.session.config.width
        k = max(1, self.session.config.hand_size)
        self.slots = k

        self.observation_space = spaces.Dict(
            {
                "grid": spaces.Box(low=0, high=1, shape=(height, width), dtype=np.int8),
                "pieces": spaces.Box(low=0, high=1, shape=(k, PIECE_MASK_SIZE, PIECE_MASK_SIZE), dtype=np.int8),
                "pieces_remaining": spaces.Discrete(k + 1),
            }
        )
        self.action_space = spaces.MultiDiscrete((k, height, width))
        self._steps = 0

    def _get_obs(self) -> Dict[str, Any]:
        return {
            "grid": (self.session.board.grid != 0).astype(np.int8),
            "pieces": piece_masks(self.session, self.slots),
            "pieces_remaining": len(self.session.hand),
        }

    def _get_info(self) -> Dict[str, Any]:
        return {
            "action_mask": compute_action_mask(self.session, self.slots),
            "score": self.session.score,
            "steps": self._steps,
        }

    def reset(self, *, seed: Optional[int] = None, options: Optional[dict] = None) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        super().reset(seed=seed)
        self.session.reset(seed)
        self._steps = 0
        return self._get_obs(), self._get_info()

    def step(self, action):
        slot, row, col = map(int, action)
        reward_components: Dict[str, float] = {}

        result = None
        if 0 <= slot < len(self.session.hand):
            result = self.session.place_piece(self.session.hand[slot].id, row, col)
        if result is not None and result.success:
            reward_components["score"] = float(result.score_gained)
        else:
            reward_components["invalid"] = self.invalid_action_penalty

        self._steps += 1
        terminated = bool(self.session.game_over)
        truncated = self._steps >= self.session.config.max_episode_steps
        if terminated:
            reward_components["terminal"] = self.terminal_penalty

        info = self._get_info()
        info["reward_components"] = reward_components
        info["lines_cleared"] = result.lines_cleared if result is not None and result.success else 0
        return self._get_obs(), float(sum(reward_components.values())), terminated, truncated, info

    def render(self) -> Optional[str]:
        if self.render_mode == "ansi":
            return format_grid(self.session.board.grid)
        return None

    def close(self) -> None:
        self.session.cancel_pending_check()
