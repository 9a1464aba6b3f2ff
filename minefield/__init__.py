"""
Minefield

A minesweeper board model with a no-guess deduction engine:
- Cascading reveal: flood fill, chord opening, first-click mine relocation
- Solvability check: can the board be cleared from a cell by logic alone?
- Hints: the next certain moves for the current board state

Deduction methods, tried in order on every pass:
- Direct: a number satisfied by its flags, or needing all its closed cells
- Subset shift: known groups subtracted from numbers that contain them
- Disjoint union: several disjoint groups subtracted at once
- Global count: remaining mines compared with the known groups
"""

from .engine import Cell, Minefield, play_cli
from .solver import Group, Hint, MinefieldSolver
from .utils import cell_col, cell_index, cell_row, get_neighborhoods
from .analysis import (
    format_hints,
    run_solvability_single_test,
    run_solvability_many_tests,
    run_level_analysis,
    run_density_analysis,
    summarize_deduction_mix,
)

__version__ = "1.0.0"

__all__ = [
    # Core classes
    "Cell",
    "Minefield",
    "MinefieldSolver",
    "Group",
    "Hint",
    # Index helpers
    "cell_row",
    "cell_col",
    "cell_index",
    "get_neighborhoods",
    # CLI
    "play_cli",
    # Analysis functions
    "format_hints",
    "run_solvability_single_test",
    "run_solvability_many_tests",
    "run_level_analysis",
    "run_density_analysis",
    "summarize_deduction_mix",
]
