from __future__ import annotations

from typing import List, Optional, Sequence, Tuple, Union

import numpy as np


Shape = np.ndarray
ShapeLike = Union[np.ndarray, Sequence[Sequence[int]]]
Offset = Tuple[int, int]


def as_shape(rows: ShapeLike) -> Shape:
    """Coerce nested rows into an int8 0/1 matrix.

    Raises ValueError for ragged input. An empty input gives a (0, 0) array.
    """
    if isinstance(rows, np.ndarray):
        arr = rows
    else:
        try:
            rows = list(rows)
            widths = {len(row) for row in rows}
        except TypeError:
            raise ValueError("Shape rows must be sequences") from None
        if not rows:
            return np.zeros((0, 0), dtype=np.int8)
        if len(widths) != 1:
            raise ValueError(f"Ragged shape rows: widths {sorted(widths)}")
        arr = np.array(rows)
    if arr.ndim != 2:
        raise ValueError(f"Shape must be 2D, got {arr.ndim}D")
    return (arr != 0).astype(np.int8)


def normalize(shape: ShapeLike) -> Optional[Shape]:
    """Crop to the bounding box of the filled cells, or None if there are none."""
    try:
        arr = as_shape(shape)
    except ValueError:
        return None
    if arr.shape[0] == 0 or arr.shape[1] == 0:
        return None
    rows = np.flatnonzero(arr.any(axis=1))
    cols = np.flatnonzero(arr.any(axis=0))
    if rows.size == 0:
        return None
    return arr[rows[0] : rows[-1] + 1, cols[0] : cols[-1] + 1].copy()


def rotate_clockwise(shape: ShapeLike) -> Shape:
    # (i, j) -> (j, rows - 1 - i)
    return np.ascontiguousarray(np.rot90(as_shape(shape), 1, axes=(1, 0)))


def mirror_horizontal(shape: ShapeLike) -> Shape:
    return np.ascontiguousarray(as_shape(shape)[:, ::-1])


def shapes_equal(a: ShapeLike, b: ShapeLike) -> bool:
    return bool(np.array_equal(as_shape(a), as_shape(b)))


def cell_offsets(shape: ShapeLike) -> List[Offset]:
    """(row, col) offsets of the filled cells in row-major order."""
    rows, cols = np.nonzero(as_shape(shape))
    return [(int(r), int(c)) for r, c in zip(rows, cols)]


def cell_count(shape: ShapeLike) -> int:
    return int(np.count_nonzero(as_shape(shape)))
