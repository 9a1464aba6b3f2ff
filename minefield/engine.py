"""Minefield grid model with cascading reveal and first-click mine relocation."""

import logging
import random
from collections import deque
from dataclasses import dataclass
from typing import (
    TYPE_CHECKING,
    Callable,
    Deque,
    Iterable,
    Iterator,
    List,
    Optional,
    Set,
    Tuple,
)

import numpy as np

from .utils import cell_col, cell_index, cell_row, get_neighborhoods

if TYPE_CHECKING:
    from .solver import Hint

logger = logging.getLogger(__name__)


@dataclass
class Cell:
    """State of a single minefield cell."""

    is_mine: bool = False
    is_open: bool = False
    is_flagged: bool = False
    adjacent_mines: int = 0


class Minefield:
    """Rectangular minefield stored as a flat, row-major list of cells."""

    def __init__(
        self,
        width: int,
        height: int,
        mines_count: Optional[int] = None,
        *,
        mine_cells: Optional[Iterable[int]] = None,
        rng: Optional[Callable[[], float]] = None,
    ) -> None:
        """
        Create a minefield and place its mines.

        Args:
            width: Number of columns, must be > 0.
            height: Number of rows, must be > 0.
            mines_count: Number of mines to place at random. Defaults to one
                fifth of the cells, or to len(mine_cells) when those are given.
            mine_cells: Explicit mine indices; disables random placement.
            rng: Uniform random source returning a float in [0, 1), used to
                shuffle the mines. Defaults to random.random.

        Raises:
            ValueError: If dimensions are non-positive, the mine count is
                negative or exceeds the cell count, mine_cells contains
                duplicates, or mines_count contradicts mine_cells.
            IndexError: If a mine cell index is outside the minefield.
        """
        if width <= 0 or height <= 0:
            raise ValueError("Width and height must be positive.")

        cells_count = width * height
        placed: Optional[List[int]] = None

        if mine_cells is not None:
            placed = list(mine_cells)
            for m in placed:
                if not 0 <= m < cells_count:
                    raise IndexError(f"Mine cell {m} is outside the minefield.")
            if len(set(placed)) != len(placed):
                raise ValueError("mine_cells must not contain duplicates.")
            if mines_count is not None and mines_count != len(placed):
                raise ValueError(
                    f"mines_count ({mines_count}) does not match the "
                    f"{len(placed)} given mine cells."
                )
            mines_count = len(placed)
        elif mines_count is None:
            mines_count = cells_count // 5

        if mines_count < 0:
            raise ValueError("mines_count must be non-negative.")
        if mines_count > cells_count:
            raise ValueError(
                f"Cannot place {mines_count} mines in {cells_count} cells."
            )

        self.width: int = width
        self.height: int = height
        self.cells_count: int = cells_count
        self.mines_count: int = mines_count

        self._neighborhoods: Tuple[Tuple[int, ...], ...] = get_neighborhoods(
            width, height
        )
        self.cells: List[Cell] = [Cell() for _ in range(cells_count)]

        if placed is not None:
            for m in placed:
                self.cells[m].is_mine = True
        else:
            self._shuffle_mines(rng if rng is not None else random.random)

        self.reset_adjacent_counts()

    def _shuffle_mines(self, rng: Callable[[], float]) -> None:
        """Distribute mines_count mines uniformly (Fisher-Yates)."""
        layout = [i < self.mines_count for i in range(self.cells_count)]
        for i in range(self.cells_count - 1, 0, -1):
            j = min(int(rng() * (i + 1)), i)
            layout[i], layout[j] = layout[j], layout[i]

        for cell, is_mine in zip(self.cells, layout):
            cell.is_mine = is_mine

    def _check_cell(self, cell: int) -> None:
        if not 0 <= cell < self.cells_count:
            raise IndexError(f"Cell index {cell} is outside the minefield.")

    def __len__(self) -> int:
        return self.cells_count

    def __getitem__(self, cell: int) -> Cell:
        self._check_cell(cell)
        return self.cells[cell]

    def __iter__(self) -> Iterator[Cell]:
        return iter(self.cells)

    # -------------------------------------------------------------------------
    # Coordinates and neighborhoods
    # -------------------------------------------------------------------------

    def cell_row(self, cell: int) -> int:
        """Return the row the given cell is in (0-based)."""
        return cell_row(cell, self.width, self.height)

    def cell_col(self, cell: int) -> int:
        """Return the column the given cell is in (0-based)."""
        return cell_col(cell, self.width, self.height)

    def cell_index(self, row: int, col: int) -> int:
        """Return the flat index of the cell at (row, col)."""
        return cell_index(row, col, self.width, self.height)

    def neighbors(self, cell: int, include_self: bool = False) -> Tuple[int, ...]:
        """
        Return the indices of the cells directly around the given one.

        Args:
            cell: Index of the concerned cell.
            include_self: If True, the cell itself is returned first.

        Raises:
            IndexError: If the cell index is outside the minefield.
        """
        self._check_cell(cell)
        nbrs = self._neighborhoods[cell]
        return (cell,) + nbrs if include_self else nbrs

    def empty_zone(self, cell: int, include_flags: bool = False) -> List[int]:
        """
        Return the empty zone grown from the given cell.

        The zone is the seed plus, transitively, every neighbor of a
        zero-count cell already in the zone: the connected zero region and
        the numbered ring around it.

        Args:
            cell: Index of the seed cell.
            include_flags: If False, flagged cells are neither added to the
                zone nor expanded through.

        Returns:
            Zone cell indices in discovery order, each listed once.

        Raises:
            IndexError: If the cell index is outside the minefield.
        """
        self._check_cell(cell)

        zone: List[int] = [cell]
        seen: Set[int] = {cell}
        frontier: Deque[int] = deque([cell])

        while frontier:
            current = frontier.popleft()
            if self.cells[current].adjacent_mines != 0:
                continue

            for n in self._neighborhoods[current]:
                if n in seen:
                    continue
                if not include_flags and self.cells[n].is_flagged:
                    continue
                seen.add(n)
                zone.append(n)
                frontier.append(n)

        return zone

    def reset_adjacent_counts(self) -> None:
        """Recompute the adjacent mine count of every cell."""
        for cell in self.cells:
            cell.adjacent_mines = 0

        for i, cell in enumerate(self.cells):
            if cell.is_mine:
                for n in self._neighborhoods[i]:
                    self.cells[n].adjacent_mines += 1

    # -------------------------------------------------------------------------
    # Mutation
    # -------------------------------------------------------------------------

    def _open_single(self, cell: int, opened: List[int]) -> None:
        target = self.cells[cell]
        target.is_open = True
        target.is_flagged = False
        opened.append(cell)

    def _open_empty_zone(self, cell: int, opened: List[int]) -> None:
        if self.cells[cell].adjacent_mines != 0:
            return
        for z in self.empty_zone(cell):
            if not self.cells[z].is_open:
                self._open_single(z, opened)

    def _relocate_mine(self, cell: int) -> bool:
        """Move the mine at `cell` to the first closed free cell, scanning from 0."""
        for i, candidate in enumerate(self.cells):
            if i == cell or candidate.is_open or candidate.is_mine:
                continue
            self.cells[cell].is_mine = False
            candidate.is_mine = True
            self.reset_adjacent_counts()
            logger.debug("First-click mine moved from cell %d to cell %d.", cell, i)
            return True

        logger.warning(
            "Cannot relocate the first-click mine at cell %d: no free cell left.",
            cell,
        )
        return False

    def open_cell(self, cell: int, first_click: Optional[bool] = None) -> List[int]:
        """
        Open a cell following the minesweeper rules.

        A closed cell is opened; a zero-count cell opens its whole empty zone.
        An open numbered cell whose flagged neighbors match its count opens
        all of its other closed, unflagged neighbors.

        Args:
            cell: Index of the cell to open.
            first_click: If True and the opened cell is a mine, the mine is
                moved to the first free cell starting from index 0. None means
                "only when no cell is open yet" (see is_new).

        Returns:
            Indices of the cells that were opened by this call, in order.

        Raises:
            IndexError: If the cell index is outside the minefield.
        """
        self._check_cell(cell)
        if first_click is None:
            first_click = self.is_new()

        opened: List[int] = []
        target = self.cells[cell]

        if not target.is_open:
            self._open_single(cell, opened)

            if target.is_mine:
                if first_click and self._relocate_mine(cell):
                    self._open_empty_zone(cell, opened)
            else:
                self._open_empty_zone(cell, opened)

        elif target.adjacent_mines != 0:
            nbrs = self._neighborhoods[cell]
            flags = sum(1 for n in nbrs if self.cells[n].is_flagged)

            if flags == target.adjacent_mines:
                for n in nbrs:
                    nbr = self.cells[n]
                    if nbr.is_open or nbr.is_flagged:
                        continue
                    self._open_single(n, opened)
                    if not nbr.is_mine:
                        self._open_empty_zone(n, opened)

        return opened

    def set_flag(self, cell: int, flagged: bool = True) -> bool:
        """
        Set or clear the flag on a closed cell.

        Returns:
            True if the flag state changed; open cells cannot be flagged.

        Raises:
            IndexError: If the cell index is outside the minefield.
        """
        self._check_cell(cell)
        target = self.cells[cell]
        if target.is_open or target.is_flagged == flagged:
            return False
        target.is_flagged = flagged
        return True

    def restore(self) -> None:
        """Close and unflag every cell, keeping the mine layout."""
        for cell in self.cells:
            cell.is_open = False
            cell.is_flagged = False

    # -------------------------------------------------------------------------
    # Game state
    # -------------------------------------------------------------------------

    @property
    def used_flags(self) -> int:
        """Number of flagged cells."""
        return sum(1 for cell in self.cells if cell.is_flagged)

    def is_new(self) -> bool:
        """Whether no cell has been opened yet."""
        return not any(cell.is_open for cell in self.cells)

    def is_going_on(self) -> bool:
        """Whether the game has started and is neither cleared nor lost."""
        found_closed_safe = False
        found_open = False

        for cell in self.cells:
            if cell.is_open and cell.is_mine:
                return False
            if cell.is_open:
                found_open = True
            elif not cell.is_mine:
                found_closed_safe = True

        return found_open and found_closed_safe

    def is_over(self) -> bool:
        """Whether the game is over, either cleared or lost."""
        found_closed_safe = False

        for cell in self.cells:
            if cell.is_open and cell.is_mine:
                return True
            if not cell.is_open and not cell.is_mine:
                found_closed_safe = True

        return not found_closed_safe

    def is_cleared(self) -> bool:
        """Whether every safe cell is open and no mine is."""
        return all(cell.is_open != cell.is_mine for cell in self.cells)

    def is_lost(self) -> bool:
        """Whether a mine has been opened."""
        return any(cell.is_open and cell.is_mine for cell in self.cells)

    # -------------------------------------------------------------------------
    # Solver shortcuts
    # -------------------------------------------------------------------------

    def is_solvable_from(self, cell: int, restore: bool = True) -> bool:
        """Check whether the minefield can be cleared from `cell` without guessing."""
        from .solver import MinefieldSolver

        return MinefieldSolver(self).is_solvable_from(cell, restore=restore)

    def get_hint(self, accurate: bool = False, only_one: bool = True) -> List["Hint"]:
        """Return deduction hints for the current state (see MinefieldSolver.get_hint)."""
        from .solver import MinefieldSolver

        return MinefieldSolver(self).get_hint(accurate=accurate, only_one=only_one)

    # -------------------------------------------------------------------------
    # Display methods
    # -------------------------------------------------------------------------

    def simplify(self) -> np.ndarray:
        """
        Return a (height, width) array view of the minefield.

        Mines are -1, every other cell holds its adjacent mine count.
        """
        values = np.array(
            [-1 if cell.is_mine else cell.adjacent_mines for cell in self.cells],
            dtype=np.int8,
        )
        return values.reshape(self.height, self.width)

    _ANSI_RESET = "\033[0m"
    _ANSI_COORD = "\033[96m"
    _ANSI_MINE = "\033[91m"

    def _c(self, s: str) -> str:
        """Wrap string in coordinate color."""
        return f"{self._ANSI_COORD}{s}{self._ANSI_RESET}"

    def _m(self, s: str) -> str:
        """Wrap string in mine color (red)."""
        return f"{self._ANSI_MINE}{s}{self._ANSI_RESET}"

    def format_board(self, reveal_all: bool = False, color: bool = True) -> str:
        """
        Render the minefield as a multi-line string for terminal display.

        Legend: '?' closed, 'F' flagged, digits for open numbers, 'X' open mine.

        Args:
            reveal_all: If True, show every cell as if it were open.
            color: If False, emit plain text without ANSI escapes.

        Returns:
            A formatted multi-line string with row/column labels.
        """
        w = self.width
        c = self._c if color else str
        m = self._m if color else str

        def cell_str(i: int) -> str:
            cell = self.cells[i]
            if not (reveal_all or cell.is_open):
                return "F" if cell.is_flagged else "?"
            if cell.is_mine:
                return m("X")
            return str(cell.adjacent_mines)

        header_cells = " ".join(f"{col:2d}" for col in range(w))
        out = [c("   ") + c(header_cells)]
        out.append(c("   " + "-" * (3 * w - 1)))

        for row in range(self.height):
            row_cells = " ".join(f" {cell_str(row * w + col)}" for col in range(w))
            out.append(c(f"{row:2d} ") + c("|") + row_cells)

        return "\n".join(out)

    def print_board(self) -> None:
        """Print the current visible minefield to stdout."""
        print(self.format_board(reveal_all=False))

    def print_full_board(self) -> None:
        """Print the fully revealed minefield to stdout (for debugging)."""
        print(self.format_board(reveal_all=True))


def play_cli(field: Minefield) -> None:
    """
    Run a simple terminal UI for playing on a minefield.

    Commands: "row col" opens a cell, "f row col" toggles a flag,
    "h" prints a hint, "q" quits.

    Args:
        field: The Minefield instance to play on.
    """
    print(
        "Minefield CLI (enter: row col). Coordinates are 0-based.\n"
        "'f row col' toggles a flag, 'h' asks for a hint, 'q' quits.\n"
    )
    print(field.format_board(reveal_all=False))

    while True:
        s = input("\nMove: ").strip()
        if s.lower() in {"q", "quit", "exit"}:
            print("Quit.")
            return

        if s.lower() in {"h", "hint"}:
            hints = field.get_hint(accurate=True, only_one=True)
            if not hints:
                print("No certain move found, you will have to guess.")
            else:
                action, cells = hints[0]
                verb = "open" if action == "O" else "flag"
                coords = ", ".join(
                    f"({field.cell_row(i)}, {field.cell_col(i)})" for i in cells
                )
                print(f"Hint: {verb} {coords}")
            continue

        parts = s.replace(",", " ").split()
        flag = bool(parts) and parts[0].lower() == "f"
        if flag:
            parts = parts[1:]

        if len(parts) != 2:
            print("Invalid input. Example: 3 5 or f 3 5")
            continue

        try:
            cell = field.cell_index(int(parts[0]), int(parts[1]))
        except ValueError:
            print("Invalid input. Coordinates must be integers.")
            continue
        except IndexError:
            print("Invalid input. Coordinates are outside the minefield.")
            continue

        if flag:
            field.set_flag(cell, not field.cells[cell].is_flagged)
        else:
            field.open_cell(cell)

        print()
        print(field.format_board(reveal_all=False))

        if field.is_lost():
            print("\nYou hit a mine. You lost.")
            print("\nFull board:")
            print(field.format_board(reveal_all=True))
            return

        if field.is_cleared():
            print("\nYou opened all safe cells. You won!")
            print("\nFull board:")
            print(field.format_board(reveal_all=True))
            return
