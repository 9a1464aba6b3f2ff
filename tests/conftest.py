import random

import matplotlib

matplotlib.use("Agg")

import pytest

from minefield import Minefield


def assert_counts_consistent(field: Minefield) -> None:
    """Every cell's adjacent count matches its neighbors, and the mine total holds."""
    assert sum(1 for c in field.cells if c.is_mine) == field.mines_count
    for i, cell in enumerate(field.cells):
        expected = sum(1 for n in field.neighbors(i) if field.cells[n].is_mine)
        assert cell.adjacent_mines == expected


def snapshot(field: Minefield):
    return [(c.is_mine, c.is_open, c.is_flagged, c.adjacent_mines) for c in field.cells]


@pytest.fixture
def random_fields():
    """Twenty seeded 8x8 boards with 10 mines."""
    return [
        Minefield(8, 8, 10, rng=random.Random(seed).random) for seed in range(20)
    ]
