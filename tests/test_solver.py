import random

import pytest

from conftest import assert_counts_consistent, snapshot
from minefield import Group, Hint, Minefield, MinefieldSolver


def open_cells(field, cells):
    for cell in cells:
        field.open_cell(cell, first_click=False)
    return field


def subset_field():
    """
    4x2 board, mines at 0 and 3, bottom row open (all ones).

    Only subset shifts make progress: {0,1} holds one mine, so the 2 left
    in {0,1,2} is safe; {2,3} does the same for 1.
    """
    return open_cells(Minefield(4, 2, mine_cells=[0, 3]), [4, 5, 6, 7])


def union_field():
    """
    5x2 board, mines at 1 and 8; cells 0, 4, 5, 7, 9 open.

    Cell 7 (a 2) sees {1,2,3,6,8}; the disjoint groups {1,6} and {3,8}
    hold one mine each, so 2 is safe.
    """
    return open_cells(Minefield(5, 2, mine_cells=[1, 8]), [0, 4, 5, 7, 9])


def union_flag_field():
    """
    5x2 board, mines at 1, 2 and 8; cells 0, 4, 5, 7, 9 open.

    Cell 7 (a 3) sees {1,2,3,6,8}; the disjoint groups {1,6} and {3,8}
    hold one mine each, so 2 is a mine.
    """
    return open_cells(Minefield(5, 2, mine_cells=[1, 2, 8]), [0, 4, 5, 7, 9])


class TestGroup:
    def test_value_equality(self):
        assert Group(1, (2, 3)) == Group(1, (2, 3))
        assert len({Group(1, (2, 3)), Group(1, (2, 3)), Group(2, (2, 3))}) == 2


class TestSolvability:
    def test_direct_deduction_only(self):
        field = Minefield(3, 3, mine_cells=[8])
        solver = MinefieldSolver(field)
        assert solver.is_solvable_from(0, restore=False)
        assert field.is_cleared()
        assert field.cells[8].is_flagged
        assert solver.inferred_counts == {
            "direct": 1,
            "subset": 0,
            "union": 0,
            "global": 0,
        }
        assert solver.passes_count == 2

    def test_restore(self):
        field = Minefield(3, 3, mine_cells=[8])
        assert field.is_solvable_from(0)
        assert field.is_new()
        assert field.used_flags == 0

    def test_lone_number_start_is_unsolvable(self):
        field = Minefield(4, 1, mine_cells=[0])
        assert not field.is_solvable_from(1)
        assert field.is_new()

    def test_lone_number_start_without_restore(self):
        field = Minefield(4, 1, mine_cells=[0])
        assert not field.is_solvable_from(1, restore=False)
        assert field.cells[1].is_open

    def test_empty_start_solves_row(self):
        field = Minefield(4, 1, mine_cells=[0])
        assert field.is_solvable_from(3)

    def test_subset_shift_solves(self):
        field = subset_field()
        solver = MinefieldSolver(field)
        assert solver.is_solvable_from(4, restore=False)
        assert field.is_cleared()
        assert sorted(i for i, c in enumerate(field.cells) if c.is_flagged) == [0, 3]
        assert solver.inferred_counts["subset"] == 2
        assert solver.inferred_counts["direct"] == 2

    def test_union_step_applies_then_stalls(self):
        field = union_field()
        solver = MinefieldSolver(field)
        assert not solver.is_solvable_from(7, restore=False)
        assert field.cells[2].is_open
        assert solver.inferred_counts["union"] == 1
        assert not field.is_lost()

    def test_union_flag_step_applies_then_stalls(self):
        field = union_flag_field()
        solver = MinefieldSolver(field)
        assert not solver.is_solvable_from(7, restore=False)
        assert field.cells[2].is_flagged
        assert solver.inferred_counts["union"] == 1
        assert solver.inferred_counts["subset"] == 0
        assert not field.is_lost()

    def test_first_click_relocation_survives_restore(self):
        field = Minefield(3, 3, mine_cells=[0])
        assert not field.is_solvable_from(0)
        assert field.is_new()
        assert [i for i, c in enumerate(field.cells) if c.is_mine] == [1]
        assert field.cells[0].adjacent_mines == 1
        assert_counts_consistent(field)

    def test_start_on_mine_without_first_click(self):
        field = Minefield(3, 3, mine_cells=[8])
        field.open_cell(0)
        field.restore()
        field.open_cell(4)
        assert not field.is_solvable_from(8)
        assert field.is_new()

    def test_out_of_range(self):
        field = Minefield(3, 3, mine_cells=[8])
        with pytest.raises(IndexError):
            field.is_solvable_from(9)
        assert field.is_new()

    def test_idempotent_under_restore(self, random_fields):
        for field in random_fields:
            start = next(i for i, c in enumerate(field.cells) if not c.is_mine)
            before = snapshot(field)
            first = field.is_solvable_from(start)
            middle = snapshot(field)
            second = field.is_solvable_from(start)
            assert first == second
            assert before == middle == snapshot(field)

    def test_solvable_means_cleared_by_deduction(self, random_fields):
        solvable_count = 0
        for field in random_fields:
            start = next(
                (
                    i
                    for i, c in enumerate(field.cells)
                    if not c.is_mine and c.adjacent_mines == 0
                ),
                None,
            )
            if start is None or not field.is_solvable_from(start):
                continue
            solvable_count += 1

            assert field.is_solvable_from(start, restore=False)
            assert field.is_cleared()
            assert not field.is_lost()
            assert all(c.is_mine for c in field.cells if c.is_flagged)
            assert_counts_consistent(field)
        assert solvable_count > 0

    def test_flags_are_always_mines(self, random_fields):
        for field in random_fields:
            start = next(i for i, c in enumerate(field.cells) if not c.is_mine)
            field.is_solvable_from(start, restore=False)
            assert not field.is_lost()
            assert all(c.is_mine for c in field.cells if c.is_flagged)


class TestHints:
    def test_direct_hint(self):
        field = Minefield(3, 3, mine_cells=[8])
        field.open_cell(0)
        assert field.get_hint(accurate=True) == [Hint("F", (8,))]
        assert field.get_hint(accurate=True, only_one=False) == [Hint("F", (8,))]
        assert field.get_hint() == [Hint("F", tuple(range(9)))]

    def test_inaccurate_hints_keep_each_neighborhood(self):
        field = Minefield(3, 3, mine_cells=[8])
        field.open_cell(0)
        assert field.get_hint(only_one=False) == [
            Hint("F", (0, 1, 2, 3, 4, 5, 6, 7, 8)),
            Hint("F", (1, 2, 4, 5, 7, 8)),
            Hint("F", (3, 4, 5, 6, 7, 8)),
            Hint("F", (8,)),
        ]

    def test_hint_does_not_modify_field(self):
        field = subset_field()
        before = snapshot(field)
        field.get_hint(accurate=True, only_one=False)
        assert snapshot(field) == before

    def test_subset_hints(self):
        field = subset_field()
        assert field.get_hint(accurate=True, only_one=False) == [
            Hint("O", (2,)),
            Hint("O", (1,)),
        ]
        assert field.get_hint(accurate=True) == [Hint("O", (2,))]
        assert field.get_hint() == [Hint("O", (0, 1, 2, 4, 5, 6))]

    def test_union_hint(self):
        field = union_field()
        assert field.get_hint(accurate=True, only_one=False) == [Hint("O", (2,))]

    def test_union_flag_hint(self):
        field = union_flag_field()
        assert field.get_hint(accurate=True, only_one=False) == [Hint("F", (2,))]
        assert field.get_hint() == [Hint("F", (1, 2, 3, 6, 7, 8))]

    def test_global_hint_when_all_flags_used(self):
        field = Minefield(2, 2, mine_cells=[0])
        field.set_flag(0)
        assert field.get_hint(accurate=True) == [Hint("O", (1, 2, 3))]
        assert field.get_hint(accurate=False) == [Hint("O", (1, 2, 3))]

    def test_global_hint_outside_groups(self):
        field = open_cells(Minefield(4, 1, mine_cells=[0]), [1])
        assert field.get_hint(accurate=True, only_one=False) == [Hint("O", (3,))]

    def test_global_flag_hint(self):
        field = open_cells(Minefield(4, 1, mine_cells=[0, 3]), [1])
        assert field.get_hint(accurate=True, only_one=False) == [Hint("F", (3,))]

    def test_no_hint_on_new_board(self):
        field = Minefield(4, 1, mine_cells=[0])
        assert field.get_hint() == []

    def test_accurate_hints_name_only_closed_unflagged_cells(self, random_fields):
        for seed, field in enumerate(random_fields):
            start = next(i for i, c in enumerate(field.cells) if not c.is_mine)
            field.open_cell(start)
            rng = random.Random(seed)
            for cell in rng.sample(
                [i for i, c in enumerate(field.cells) if c.is_mine], 3
            ):
                field.set_flag(cell)

            for action, cells in field.get_hint(accurate=True, only_one=False):
                assert action in ("O", "F")
                assert cells
                for cell in cells:
                    assert not field.cells[cell].is_open
                    assert not field.cells[cell].is_flagged
                    assert field.cells[cell].is_mine == (action == "F")

    def test_hint_replay_matches_solver(self):
        field = subset_field()
        while True:
            hints = field.get_hint(accurate=True)
            if not hints:
                break
            action, cells = hints[0]
            for cell in cells:
                if action == "O":
                    field.open_cell(cell, first_click=False)
                else:
                    field.set_flag(cell)
        assert field.is_cleared()
