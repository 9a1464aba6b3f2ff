"""No-guess deduction engine: solvability check and hints for a Minefield."""

import logging
from collections import deque
from functools import partial
from typing import Any, Callable, Deque, Dict, FrozenSet, List, NamedTuple, Set, Tuple

from .engine import Minefield

logger = logging.getLogger(__name__)

OPEN = "O"
FLAG = "F"

METHODS: Tuple[str, ...] = ("direct", "subset", "union", "global")


class Group(NamedTuple):
    """Exactly `count` of the closed, unflagged `cells` (sorted) are mines."""

    count: int
    cells: Tuple[int, ...]


class Hint(NamedTuple):
    """A directive to open ("O") or flag ("F") the given cells."""

    action: str
    cells: Tuple[int, ...]


class Deduction(NamedTuple):
    """A certain classification found by one of the deduction methods."""

    action: str
    cells: Tuple[int, ...]
    context: Tuple[int, ...]
    method: str


# Per constraint cell: (adjacent mine count, flagged neighbors, closed unflagged neighbors)
Constraint = Tuple[int, int, FrozenSet[int]]


class MinefieldSolver:
    """
    Pure-logic minefield solver.

    Every pass rebuilds the constraint system from the open numbered cells
    and tries, in order:
    1. Direct deduction: a number already satisfied by its flags, or needing
       all of its closed neighbors
    2. Subset shift: subtracting a known group from a number whose closed
       neighbors strictly contain it (plus partial-overlap bounds)
    3. Disjoint union: subtracting several disjoint groups at once
    4. Global count: comparing the remaining mine count with the groups
    """

    def __init__(self, field: Minefield) -> None:
        """
        Initialize a solver bound to a specific minefield.

        Args:
            field: The Minefield to analyze. The solvability check mutates it;
                hint generation only reads it.
        """
        self.field = field

        # Metrics / counters (for analysis)
        self.passes_count: int = 0
        self.max_groups_count: int = 0
        self.inferred_counts: Dict[str, int] = {m: 0 for m in METHODS}

    # -------------------------------------------------------------------------
    # Constraint system
    # -------------------------------------------------------------------------

    def _context(self, *centers: int) -> Tuple[int, ...]:
        """Sorted union of the given cells and their neighbors."""
        cells: Set[int] = set()
        for center in centers:
            cells.update(self.field.neighbors(center, include_self=True))
        return tuple(sorted(cells))

    def _constraint_cells(self) -> Dict[int, Constraint]:
        """Collect open numbered cells that still touch a closed, unflagged cell."""
        cells = self.field.cells
        constraints: Dict[int, Constraint] = {}

        for i, cell in enumerate(cells):
            if not cell.is_open or cell.is_mine:
                continue

            flagged = 0
            unknown: Set[int] = set()
            for n in self.field.neighbors(i):
                if cells[n].is_flagged:
                    flagged += 1
                elif not cells[n].is_open:
                    unknown.add(n)

            if unknown:
                constraints[i] = (cell.adjacent_mines, flagged, frozenset(unknown))

        return constraints

    # -------------------------------------------------------------------------
    # Deduction methods
    # -------------------------------------------------------------------------

    def _direct_deductions(
        self, constraints: Dict[int, Constraint], groups: Dict[Group, int]
    ) -> List[Deduction]:
        """Resolve numbers on their own and seed the groups with the rest."""
        deductions: List[Deduction] = []

        for cell, (count, flagged, unknown) in constraints.items():
            remaining = count - flagged
            cells = tuple(sorted(unknown))

            if remaining == 0:
                deductions.append(
                    Deduction(OPEN, cells, self._context(cell), "direct")
                )
            elif remaining == len(cells):
                deductions.append(
                    Deduction(FLAG, cells, self._context(cell), "direct")
                )
            elif 0 < remaining < len(cells):
                groups.setdefault(Group(remaining, cells), cell)

        return deductions

    def _subset_deductions(
        self, constraints: Dict[int, Constraint], groups: Dict[Group, int]
    ) -> List[Deduction]:
        """
        Shift known groups out of the constraints that strictly contain them.

        New groups found this way go back on the worklist until no unseen
        group appears. Groups that only partially overlap a constraint are
        then used to bound the mines left in the rest of it.
        """
        deductions: List[Deduction] = []
        worklist: Deque[Group] = deque(groups)

        while worklist:
            group = worklist.popleft()
            members = frozenset(group.cells)
            source = groups[group]

            for cell, (count, flagged, unknown) in constraints.items():
                if not members < unknown:
                    continue

                rest = tuple(sorted(unknown - members))
                remaining = count - flagged - group.count

                if remaining == 0:
                    deductions.append(
                        Deduction(OPEN, rest, self._context(cell, source), "subset")
                    )
                elif remaining == len(rest):
                    deductions.append(
                        Deduction(FLAG, rest, self._context(cell, source), "subset")
                    )
                elif 0 < remaining < len(rest):
                    derived = Group(remaining, rest)
                    if derived not in groups:
                        groups[derived] = cell
                        worklist.append(derived)

        for group, source in groups.items():
            members = frozenset(group.cells)

            for cell, (count, flagged, unknown) in constraints.items():
                inside = members & unknown
                if not inside or members <= unknown:
                    continue

                rest = tuple(sorted(unknown - members))
                if not rest:
                    continue

                outside = len(members) - len(inside)
                most_in_rest = count - flagged - max(0, group.count - outside)
                least_in_rest = count - flagged - min(group.count, len(inside))

                if most_in_rest == 0:
                    deductions.append(
                        Deduction(OPEN, rest, self._context(cell, source), "subset")
                    )
                elif least_in_rest == len(rest):
                    deductions.append(
                        Deduction(FLAG, rest, self._context(cell, source), "subset")
                    )

        return deductions

    def _union_deductions(
        self, constraints: Dict[int, Constraint], groups: Dict[Group, int]
    ) -> List[Deduction]:
        """Subtract every disjoint group a constraint strictly contains, greedily."""
        deductions: List[Deduction] = []

        for cell, (count, flagged, unknown) in constraints.items():
            covered: Set[int] = set()
            total = 0

            for group in groups:
                members = frozenset(group.cells)
                if members < unknown and not members & covered:
                    covered |= members
                    total += group.count

            if total == 0:
                continue

            rest = tuple(sorted(unknown - covered))
            if not rest:
                continue

            remaining = count - flagged - total
            if remaining == len(rest):
                deductions.append(Deduction(FLAG, rest, self._context(cell), "union"))
            elif remaining == 0:
                deductions.append(Deduction(OPEN, rest, self._context(cell), "union"))

        return deductions

    def _global_deductions(self, groups: Dict[Group, int]) -> List[Deduction]:
        """Compare the mines left on the board with the disjoint groups."""
        field = self.field
        closed = tuple(
            i
            for i, cell in enumerate(field.cells)
            if not cell.is_open and not cell.is_flagged
        )
        if not closed:
            return []

        mines_left = field.mines_count - field.used_flags
        if mines_left == 0:
            return [Deduction(OPEN, closed, closed, "global")]

        covered: Set[int] = set()
        total = 0
        for group in sorted(groups, key=lambda g: len(g.cells)):
            members = set(group.cells)
            if members & covered:
                continue
            covered |= members
            total += group.count

        outside = tuple(i for i in closed if i not in covered)
        if not outside:
            return []

        if total == mines_left:
            return [Deduction(OPEN, outside, outside, "global")]
        if mines_left - total == len(outside):
            return [Deduction(FLAG, outside, outside, "global")]
        return []

    def _deduce(self, exhaustive: bool) -> List[Deduction]:
        """
        Run the deduction methods on the current state.

        Args:
            exhaustive: If False, stop after the first method that finds
                something; otherwise run every method.
        """
        constraints = self._constraint_cells()
        groups: Dict[Group, int] = {}

        deductions = self._direct_deductions(constraints, groups)

        steps: Tuple[Callable[[], List[Deduction]], ...] = (
            partial(self._subset_deductions, constraints, groups),
            partial(self._union_deductions, constraints, groups),
            partial(self._global_deductions, groups),
        )
        for step in steps:
            if deductions and not exhaustive:
                break
            deductions.extend(step())

        self.max_groups_count = max(self.max_groups_count, len(groups))
        return deductions

    # -------------------------------------------------------------------------
    # Drivers
    # -------------------------------------------------------------------------

    def _apply(self, deduction: Deduction) -> int:
        """Open or flag the deduced cells that are still closed; return how many."""
        applied = 0
        for cell in deduction.cells:
            target = self.field.cells[cell]
            if target.is_open or target.is_flagged:
                continue
            if deduction.action == OPEN:
                self.field.open_cell(cell, first_click=False)
            else:
                self.field.set_flag(cell, True)
            applied += 1

        self.inferred_counts[deduction.method] += applied
        return applied

    def run_to_fixed_point(self) -> None:
        """Apply deductions to the minefield until a full pass finds nothing."""
        while True:
            self.passes_count += 1
            deductions = self._deduce(exhaustive=False)

            applied = 0
            for deduction in deductions:
                applied += self._apply(deduction)

            logger.debug(
                "Pass %d: %d deductions changed %d cells.",
                self.passes_count,
                len(deductions),
                applied,
            )
            if applied == 0:
                return

    def is_solvable_from(self, cell: int, restore: bool = True) -> bool:
        """
        Check whether the minefield can be cleared from a cell without guessing.

        Opens `cell` (relocating a mine if the field is new), then deduces and
        applies safe opens and flags until nothing more is certain.

        Args:
            cell: Index of the first cell to open.
            restore: If True, every cell is closed and unflagged again before
                returning, whatever the result. A first-click mine relocation
                is kept.

        Returns:
            True if every safe cell ended up open with no mine opened.

        Raises:
            IndexError: If the cell index is outside the minefield.
        """
        field = self.field
        opened = field.open_cell(cell)

        try:
            if field.is_lost():
                logger.debug("Start cell %d is a mine.", cell)
                return False

            if len(opened) == 1 and field.cells[opened[0]].adjacent_mines != 0:
                logger.debug("Start cell %d opens a lone number.", cell)
                return False

            self.run_to_fixed_point()
            solvable = field.is_cleared()
            logger.debug(
                "Solvability from cell %d: %s after %d passes.",
                cell,
                solvable,
                self.passes_count,
            )
            return solvable
        finally:
            if restore:
                field.restore()

    def get_hint(self, accurate: bool = False, only_one: bool = True) -> List[Hint]:
        """
        Look for certain moves without modifying the minefield.

        Args:
            accurate: If True, each hint lists only the cells to open/flag;
                otherwise it lists the neighborhood the deduction comes from.
            only_one: If True, return at most the first hint found.

        Returns:
            Hints in discovery order: direct deductions first (by cell index),
            then subset, union and global ones. Duplicates are dropped.
        """
        hints: List[Hint] = []
        seen: Set[Hint] = set()

        for deduction in self._deduce(exhaustive=True):
            hint = Hint(
                deduction.action, deduction.cells if accurate else deduction.context
            )
            if hint in seen:
                continue
            seen.add(hint)
            hints.append(hint)
            if only_one:
                break

        return hints

    def stats(self) -> Dict[str, Any]:
        """Return the solver counters as a flat payload."""
        payload: Dict[str, Any] = {
            "passes_count": self.passes_count,
            "max_groups_count": self.max_groups_count,
        }
        for method in METHODS:
            payload[f"inferred_{method}_count"] = self.inferred_counts[method]
        return payload
