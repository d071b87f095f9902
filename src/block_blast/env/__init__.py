"""Gymnasium environments for Block Blast."""

from __future__ import annotations

from gymnasium.envs.registration import register

from .block_blast_env import BlockBlastEnv, compute_action_mask
from .wrappers import FlattenPlacementWrapper, ResampleInvalidActionWrapper

# Placement environment: (slot, row, col) actions on the default 8x8 board
register(
    id="BlockBlast-8x8-v0",
    entry_point="block_blast.env.block_blast_env:BlockBlastEnv",
)

__all__ = [
    "BlockBlastEnv",
    "compute_action_mask",
    "FlattenPlacementWrapper",
    "ResampleInvalidActionWrapper",
]
