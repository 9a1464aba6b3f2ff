"""Utility functions for the minefield model and its solver."""

from typing import Dict, List, Tuple

# Module-level cache: (width, height) -> ((neighbor_index, ...), ...) indexed by cell
_NEIGHBORHOODS_CACHE: Dict[Tuple[int, int], Tuple[Tuple[int, ...], ...]] = {}


def cell_row(cell: int, width: int, height: int) -> int:
    """Return the 0-based row of a flat cell index."""
    if not 0 <= cell < width * height:
        raise IndexError(f"Cell index {cell} is outside the minefield.")
    return cell // width


def cell_col(cell: int, width: int, height: int) -> int:
    """Return the 0-based column of a flat cell index."""
    if not 0 <= cell < width * height:
        raise IndexError(f"Cell index {cell} is outside the minefield.")
    return cell % width


def cell_index(row: int, col: int, width: int, height: int) -> int:
    """Return the flat (row-major) index of the cell at (row, col)."""
    if not (0 <= row < height and 0 <= col < width):
        raise IndexError(f"Cell ({row}, {col}) is outside the minefield.")
    return row * width + col


def get_neighborhoods(width: int, height: int) -> Tuple[Tuple[int, ...], ...]:
    """
    Precompute and cache 8-connected neighbor indices for every cell in a grid.

    Args:
        width: Grid width (number of columns). Must be positive.
        height: Grid height (number of rows). Must be positive.

    Returns:
        A tuple indexed by flat cell index; entry i holds the indices of the
        in-bound neighbors of cell i, in row-major order.

    Raises:
        ValueError: If width or height is non-positive.
    """
    if width <= 0 or height <= 0:
        raise ValueError("width and height must be positive.")

    key = (width, height)
    cached = _NEIGHBORHOODS_CACHE.get(key)
    if cached is not None:
        return cached

    neighborhoods: List[Tuple[int, ...]] = []
    for row in range(height):
        for col in range(width):
            nbrs: List[int] = []
            for dr in (-1, 0, 1):
                for dc in (-1, 0, 1):
                    if dr == 0 and dc == 0:
                        continue
                    nr, nc = row + dr, col + dc
                    if 0 <= nr < height and 0 <= nc < width:
                        nbrs.append(nr * width + nc)
            neighborhoods.append(tuple(nbrs))

    result = tuple(neighborhoods)
    _NEIGHBORHOODS_CACHE[key] = result
    return result
