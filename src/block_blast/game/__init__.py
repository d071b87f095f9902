"""Game module for Block Blast.

Exports the core engine and supporting classes:
- shape helpers: normalize / rotate / mirror / compare piece shapes
- PieceCatalog: every unique orientation of the base shapes
- PieceDealer: random colored hands drawn from the catalog
- Board: placement, line clearing and the reachability scan
- ScoringRules: line-clear reward configuration
- EventBus: state-change signals for a presentation layer
- GameSession: turn sequencing, score and game over
"""

from .shapes import as_shape, normalize, rotate_clockwise, mirror_horizontal, shapes_equal, cell_offsets
from .pieces import BASE_SHAPES, BLOCK_COLORS, Piece, PieceVariant, PieceCatalog, PieceDealer, default_catalog
from .grid import Board, ClearResult
from .rules import ScoringRules
from .events import EventBus
from .core import GameConfig, GameSession, PlacementResult

__all__ = [
    "as_shape",
    "normalize",
    "rotate_clockwise",
    "mirror_horizontal",
    "shapes_equal",
    "cell_offsets",
    "BASE_SHAPES",
    "BLOCK_COLORS",
    "Piece",
    "PieceVariant",
    "PieceCatalog",
    "PieceDealer",
    "default_catalog",
    "Board",
    "ClearResult",
    "ScoringRules",
    "EventBus",
    "GameConfig",
    "GameSession",
    "PlacementResult",
]
