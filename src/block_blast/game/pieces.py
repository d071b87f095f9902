from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from .shapes import Shape, ShapeLike, cell_count, mirror_horizontal, normalize, rotate_clockwise, shapes_equal


BLOCK_COLORS: Tuple[str, ...] = (
    "#4285F4",  # blue
    "#EA4335",  # red
    "#FBBC05",  # yellow
    "#34A853",  # green
)


# Catalog ids depend on this order
BASE_SHAPES: Tuple[Tuple[str, Tuple[Tuple[int, ...], ...]], ...] = (
    ("Square2x2", ((1, 1), (1, 1))),
    ("L-Shape", ((1, 1, 1), (1, 0, 0))),
    ("SmallLine", ((1, 1),)),
    ("MediumLine", ((1, 1, 1),)),
    ("LongLine", ((1, 1, 1, 1),)),
    ("ExtraLongLine", ((1, 1, 1, 1, 1),)),
    ("Hook", ((1, 0), (1, 1))),
    ("ExtendedL", ((1, 1, 1), (1, 0, 0), (1, 0, 0))),
    ("Square3x3", ((1, 1, 1), (1, 1, 1), (1, 1, 1))),
    ("ZigZag", ((0, 1, 1), (1, 1, 0))),
    ("Rectangle2x3", ((1, 1, 1), (1, 1, 1))),
    ("T-Shape", ((1, 0), (1, 1), (1, 0))),
)


@dataclass(frozen=True)
class PieceVariant:
    """One normalized orientation of a base shape. Shape is read-only."""

    id: str
    base_name: str
    shape: Shape = field(compare=False)

    def num_cells(self) -> int:
        return cell_count(self.shape)


@dataclass
class Piece:
    """A dealt piece: private copy of a variant's shape plus a color."""

    id: str
    base_name: str
    shape: Shape
    color: str

    @classmethod
    def from_variant(cls, variant: PieceVariant, color: str) -> "Piece":
        return cls(id=variant.id, base_name=variant.base_name, shape=np.array(variant.shape, dtype=np.int8), color=color)

    def num_cells(self) -> int:
        return cell_count(self.shape)

    def get_size(self) -> Tuple[int, int]:
        """(height, width) of the bounding box."""
        h, w = self.shape.shape
        return int(h), int(w)


def _rotations(shape: Shape) -> Iterator[Shape]:
    current = shape
    for _ in range(4):
        yield current
        current = rotate_clockwise(current)


def generate_variants(shape: ShapeLike) -> List[Shape]:
    """Unique normalized orientations of `shape`.

    Scans the four clockwise rotations of the shape, then the four rotations
    of its horizontal mirror, keeping each orientation the first time it is
    seen. Returns [] for shapes without filled cells.
    """
    base = normalize(shape)
    if base is None:
        return []
    variants: List[Shape] = []
    for start in (base, mirror_horizontal(base)):
        for candidate in _rotations(start):
            normalized = normalize(candidate)
            if normalized is None:
                continue
            if not any(shapes_equal(normalized, existing) for existing in variants):
                variants.append(normalized)
    return variants


class PieceCatalog:
    """Every oriented variant of the base shapes, built once."""

    def __init__(self, base_shapes: Sequence[Tuple[str, ShapeLike]] = BASE_SHAPES) -> None:
        variants: List[PieceVariant] = []
        by_base: Dict[str, List[PieceVariant]] = {}
        for name, rows in base_shapes:
            # Malformed entries produce no variants
            for index, shape in enumerate(generate_variants(rows)):
                shape.flags.writeable = False
                variant = PieceVariant(id=f"{name}-{index}", base_name=name, shape=shape)
                variants.append(variant)
                by_base.setdefault(name, []).append(variant)
        self._variants: Tuple[PieceVariant, ...] = tuple(variants)
        self._by_id: Dict[str, PieceVariant] = {v.id: v for v in variants}
        self._by_base: Dict[str, Tuple[PieceVariant, ...]] = {k: tuple(v) for k, v in by_base.items()}

    def __len__(self) -> int:
        return len(self._variants)

    def __iter__(self) -> Iterator[PieceVariant]:
        return iter(self._variants)

    def __getitem__(self, index: int) -> PieceVariant:
        return self._variants[index]

    @property
    def variants(self) -> Tuple[PieceVariant, ...]:
        return self._variants

    def get(self, variant_id: str) -> Optional[PieceVariant]:
        return self._by_id.get(variant_id)

    def variants_for(self, base_name: str) -> Tuple[PieceVariant, ...]:
        return self._by_base.get(base_name, ())

    def base_names(self) -> List[str]:
        return list(self._by_base.keys())


class PieceDealer:
    """Deals hands of colored pieces from a catalog.

    Pass a seeded `random.Random` as `rng` for reproducible hands.
    """

    def __init__(self, catalog: PieceCatalog, rng: Optional[random.Random] = None,
                 palette: Sequence[str] = BLOCK_COLORS) -> None:
        if not palette:
            raise ValueError("Palette must contain at least one color")
        self.catalog = catalog
        self.rng = rng or random.Random()
        self.palette = tuple(palette)

    def draw(self, count: int) -> List[Piece]:
        count = max(0, min(int(count), len(self.catalog)))
        chosen = self.rng.sample(self.catalog.variants, count)
        return [Piece.from_variant(variant, self.rng.choice(self.palette)) for variant in chosen]


_DEFAULT_CATALOG: Optional[PieceCatalog] = None


def default_catalog() -> PieceCatalog:
    """Shared catalog over BASE_SHAPES, built on first use."""
    global _DEFAULT_CATALOG
    if _DEFAULT_CATALOG is None:
        _DEFAULT_CATALOG = PieceCatalog()
    return _DEFAULT_CATALOG
