"""Analysis and benchmarking tools for the no-guess minefield solver."""

import random
from collections import defaultdict
from typing import Dict, List, Optional, Sequence, Tuple

import matplotlib.pyplot as plt
import numpy as np

from .engine import Minefield
from .solver import FLAG, METHODS, Hint, MinefieldSolver

LEVELS: Dict[str, Tuple[int, int, int]] = {
    "beginner": (9, 9, 10),
    "intermediate": (16, 16, 40),
    "expert": (30, 16, 99),
}


def format_hints(
    field: Minefield, hints: Sequence[Hint], *, show_coords: bool = True
) -> str:
    """
    Format the visible minefield with hint cells marked.

    Args:
        field: Minefield whose visible state is drawn.
        hints: Hints as returned by get_hint(); cells to open are shown as
            'o', cells to flag as '!'.
        show_coords: If True, include row/column labels and a header.

    Returns:
        A text grid using the board legend ('?', 'F', digits, 'X') for the
        cells no hint mentions.
    """
    marks: Dict[int, str] = {}
    for action, cells in hints:
        for cell in cells:
            marks.setdefault(cell, "!" if action == FLAG else "o")

    w, h = field.width, field.height

    def cell_char(i: int) -> str:
        cell = field.cells[i]
        if not cell.is_open:
            if cell.is_flagged:
                return "F"
            return marks.get(i, "?")
        if cell.is_mine:
            return "X"
        return str(cell.adjacent_mines)

    lines: List[str] = []
    if show_coords:
        header = " ".join(f"{col:2d}" for col in range(w))
        lines.append("   " + header)
        lines.append("   " + "-" * (3 * w - 1))

    for row in range(h):
        cells = " ".join(f" {cell_char(row * w + col)}" for col in range(w))
        lines.append(f"{row:2d} |" + cells if show_coords else cells)

    return "\n".join(lines)


def run_solvability_single_test(
    width: int,
    height: int,
    mines_count: int,
    *,
    start: Optional[int] = None,
    seed: Optional[int] = None,
    show_board: bool = False,
) -> Dict[str, object]:
    """
    Generate one random minefield and check whether it is solvable without guessing.

    Args:
        width: Board width.
        height: Board height.
        mines_count: Total number of mines on the board.
        start: Index of the first opened cell; defaults to the center cell.
        seed: Seed for the mine layout; None uses the global random source.
        show_board: If True, print the field as left by the solver and the
            full layout.

    Returns:
        The solver counters plus "solvable", "opened_cells_count" and
        "flagged_cells_count".
    """
    rng = random.Random(seed).random if seed is not None else None
    field = Minefield(width, height, mines_count, rng=rng)
    if start is None:
        start = field.cell_index(height // 2, width // 2)

    solver = MinefieldSolver(field)
    solvable = solver.is_solvable_from(start, restore=False)

    if show_board:
        print("Solver result (closed cells shown as '?'):")
        print(field.format_board(reveal_all=False))
        print()
        print("Mine layout:")
        print(field.format_board(reveal_all=True))
        print()
        print(f"Solvable from cell {start}: {solvable}.")

    out: Dict[str, object] = dict(solver.stats())
    out["solvable"] = solvable
    out["opened_cells_count"] = sum(1 for cell in field.cells if cell.is_open)
    out["flagged_cells_count"] = field.used_flags

    field.restore()
    return out


def run_solvability_many_tests(
    width: int,
    height: int,
    mines_count: int,
    runs: int,
    *,
    seed: Optional[int] = None,
) -> Dict[str, float]:
    """
    Run many independent solvability checks and return averaged counters.

    Args:
        width: Board width.
        height: Board height.
        mines_count: Total number of mines on the board.
        runs: Number of independent boards to generate.
        seed: Seed for the sequence of boards; None for nondeterministic runs.

    Returns:
        Averages of the numeric per-run counters (prefixed with "avg_"), plus:
        - solvable_rate
        - avg_inferred_total_count

    Raises:
        ValueError: If runs is not positive.
    """
    if runs <= 0:
        raise ValueError("runs must be positive.")

    seeder = random.Random(seed)
    values: Dict[str, List[float]] = defaultdict(list)
    solvable_runs = 0

    for _ in range(runs):
        payload = run_solvability_single_test(
            width,
            height,
            mines_count,
            seed=seeder.randrange(2**32) if seed is not None else None,
        )
        if payload["solvable"]:
            solvable_runs += 1

        inferred_total = 0.0
        for k, v in payload.items():
            if isinstance(v, (int, float)) and not isinstance(v, bool):
                values[f"avg_{k}"].append(float(v))
        for method in METHODS:
            inferred_total += float(payload[f"inferred_{method}_count"])  # type: ignore[arg-type]
        values["avg_inferred_total_count"].append(inferred_total)

    out: Dict[str, float] = {k: float(np.mean(v)) for k, v in values.items()}
    out["solvable_rate"] = solvable_runs / runs
    return out


def run_level_analysis(
    runs: int, *, seed: Optional[int] = None, show: bool = True
) -> Dict[str, Dict[str, float]]:
    """
    Run solvability tests on standard difficulty levels and plot summaries.

    Args:
        runs: Number of boards per difficulty level.
        seed: Seed for the generated boards.
        show: If True, display the charts with plt.show().

    Returns:
        Mapping from level name to statistics dict returned by
        run_solvability_many_tests().

    Standard difficulty levels:
        - Beginner: 9x9, 10 mines
        - Intermediate: 16x16, 40 mines
        - Expert: 30x16, 99 mines
    """
    results: Dict[str, Dict[str, float]] = {}
    for level, (w, h, m) in LEVELS.items():
        results[level] = run_solvability_many_tests(w, h, m, runs, seed=seed)

    level_names = list(LEVELS.keys())
    x = np.arange(len(level_names))

    # 1) Cells inferred by method
    bar_w = 0.2
    plt.figure()  # type: ignore[misc]
    for offset, method in zip(np.linspace(-1.5, 1.5, len(METHODS)), METHODS):
        plt.bar(  # type: ignore[misc]
            x + offset * bar_w,
            [results[n][f"avg_inferred_{method}_count"] for n in level_names],
            width=bar_w,
            label=method,
        )
    plt.xticks(x, level_names)  # type: ignore[misc]
    plt.ylabel("Average inferred cells")  # type: ignore[misc]
    plt.title("Average deductions by method (per board)")  # type: ignore[misc]
    plt.legend()  # type: ignore[misc]
    plt.tight_layout()

    # 2) Solvable rate by level
    plt.figure()  # type: ignore[misc]
    plt.bar(x, [results[n]["solvable_rate"] for n in level_names])  # type: ignore[misc]
    plt.xticks(x, level_names)  # type: ignore[misc]
    plt.ylabel("Solvable rate")  # type: ignore[misc]
    plt.ylim(0.0, 1.0)  # type: ignore[misc]
    plt.title("No-guess solvable rate by difficulty level")  # type: ignore[misc]
    plt.tight_layout()

    if show:
        plt.show()  # type: ignore[misc]

    return results


def run_density_analysis(
    width: int,
    height: int,
    runs: int,
    *,
    densities: Optional[Sequence[float]] = None,
    seed: Optional[int] = None,
    show: bool = True,
) -> Dict[float, float]:
    """
    Measure how the no-guess solvable rate falls as mine density grows.

    Args:
        width: Board width.
        height: Board height.
        runs: Number of boards per density.
        densities: Mine fractions to test; defaults to 0.05..0.30.
        seed: Seed for the generated boards.
        show: If True, display the chart with plt.show().

    Returns:
        Mapping from density to solvable rate.
    """
    if densities is None:
        densities = [float(d) for d in np.linspace(0.05, 0.30, 6)]

    cells_count = width * height
    rates: Dict[float, float] = {}
    for density in densities:
        mines_count = int(round(density * cells_count))
        stats = run_solvability_many_tests(width, height, mines_count, runs, seed=seed)
        rates[density] = stats["solvable_rate"]

    plt.figure()  # type: ignore[misc]
    plt.plot(list(rates.keys()), list(rates.values()), marker="o")  # type: ignore[misc]
    plt.xlabel("Mine density")  # type: ignore[misc]
    plt.ylabel("Solvable rate")  # type: ignore[misc]
    plt.ylim(0.0, 1.0)  # type: ignore[misc]
    plt.title(f"No-guess solvable rate on {width}x{height} boards")  # type: ignore[misc]
    plt.tight_layout()

    if show:
        plt.show()  # type: ignore[misc]

    return rates


def summarize_deduction_mix(
    results: Dict[str, Dict[str, float]], *, level: str = "expert"
) -> Dict[str, float]:
    """
    Compute the share of each deduction method for one level.

    Args:
        results: Dict[level_name -> metrics_dict] from run_level_analysis().
        level: Which level to summarize.

    Returns:
        Dict with "<method>_frac" for every method, "solvable_rate" and
        "avg_passes_count".
    """
    if level not in results:
        raise KeyError(f"Level {level!r} not found in results.")
    m = results[level]

    def get(k: str) -> float:
        if k not in m:
            raise KeyError(f"Missing key {k!r} in metrics for level {level!r}.")
        return float(m[k])

    counts = {method: get(f"avg_inferred_{method}_count") for method in METHODS}
    total = sum(counts.values())
    if total == 0.0:
        raise ZeroDivisionError("No deductions recorded; cannot compute fractions.")

    out = {f"{method}_frac": count / total for method, count in counts.items()}
    out["solvable_rate"] = get("solvable_rate")
    out["avg_passes_count"] = get("avg_passes_count")
    return out
