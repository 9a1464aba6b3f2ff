"""
Quickstart example for the minefield no-guess solver.

This script demonstrates basic usage of the model, hints and solvability checks.
"""

from minefield import (
    Minefield,
    format_hints,
    run_solvability_many_tests,
)


def main():
    print("=" * 60)
    print("Minefield No-Guess Solver - Quickstart Example")
    print("=" * 60)

    # Example 1: Check a single board
    print("\n1. Checking a Beginner board (9x9, 10 mines) from its center...")
    print("-" * 60)

    field = Minefield(9, 9, 10)
    center = field.cell_index(4, 4)
    solvable = field.is_solvable_from(center)
    print(f"Solvable without guessing: {solvable}")

    # Example 2: Play a few moves with hints
    print("\n2. Opening the center and asking for hints:")
    print("-" * 60)
    field.open_cell(center)
    hints = field.get_hint(accurate=True, only_one=False)
    for action, cells in hints:
        verb = "open" if action == "O" else "flag"
        print(f"  {verb}: {list(cells)}")
    print(format_hints(field, hints))

    # Example 3: Solvable rate over many boards
    print("\n3. Checking 50 boards for the no-guess solvable rate...")
    print("-" * 60)

    results = run_solvability_many_tests(9, 9, 10, runs=50, seed=7)
    print(f"Solvable rate: {results['solvable_rate']*100:.1f}%")
    print(f"Average passes per board: {results['avg_passes_count']:.1f}")
    print(f"Average deduced cells: {results['avg_inferred_total_count']:.1f}")

    # Example 4: Compare difficulty levels
    print("\n4. Solvable rates by difficulty level (10 boards each)...")
    print("-" * 60)

    difficulties = [
        ("Beginner", 9, 9, 10),
        ("Intermediate", 16, 16, 40),
        ("Expert", 30, 16, 99),
    ]

    for name, w, h, m in difficulties:
        results = run_solvability_many_tests(w, h, m, runs=10, seed=7)
        print(f"{name:15s} ({w}x{h}, {m:2d} mines): {results['solvable_rate']*100:5.1f}% solvable")

    print("\n" + "=" * 60)
    print("Done! See DESIGN.md for how the deductions work.")
    print("=" * 60)


if __name__ == "__main__":
    main()
