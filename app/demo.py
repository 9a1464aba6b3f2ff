"""
Minefield No-Guess Solver - Interactive Demo

Run with: streamlit run app/demo.py
"""

import copy
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import streamlit as st
from typing import Dict, List, Optional, Set

from minefield import Hint, Minefield, MinefieldSolver


def render_board_html(
    field: Minefield,
    hints: Optional[List[Hint]] = None,
    show_mines: bool = False,
) -> str:
    """Render the minefield as HTML with styling, outlining hinted cells."""
    # Scale cell size based on board width
    if field.width >= 30:
        cell_size = 14
        font_size = "10px"
    elif field.width >= 25:
        cell_size = 16
        font_size = "11px"
    elif field.width >= 16:
        cell_size = 20
        font_size = "13px"
    else:
        cell_size = 26
        font_size = "15px"

    colors = {
        "0": "#cccccc",
        "1": "#0000ff",
        "2": "#008000",
        "3": "#ff0000",
        "4": "#000080",
        "5": "#800000",
        "6": "#008080",
        "7": "#000000",
        "8": "#808080",
    }

    open_hints: Set[int] = set()
    flag_hints: Set[int] = set()
    for action, cells in hints or []:
        (open_hints if action == "O" else flag_hints).update(cells)

    html = '<div style="font-family: monospace; line-height: 1.2;">'
    html += '<table style="border-collapse: collapse; margin: auto;">'

    for row in range(field.height):
        html += "<tr>"
        for col in range(field.width):
            i = row * field.width + col
            cell_state = field.cells[i]

            if cell_state.is_open and cell_state.is_mine:
                cell = "M"  # Opened mine (loss)
                bg = "#ff0000"
                text_color = "#ffffff"
            elif cell_state.is_open:
                cell = str(cell_state.adjacent_mines)
                bg = "#f0f0f0" if cell == "0" else "#ffffff"
                text_color = colors.get(cell, "#000000")
            elif cell_state.is_flagged:
                cell = "F"
                bg = "#ffa500"
                text_color = "#ffffff"
            elif show_mines and cell_state.is_mine:
                cell = "M"
                bg = "#ffcccc"
                text_color = "#ff0000"
            else:
                cell = "."
                bg = "#c0c0c0"
                text_color = "#666666"

            if i in flag_hints:
                border = "3px solid #ff0000"
            elif i in open_hints:
                border = "3px solid #00aa00"
            else:
                border = "1px solid #999"
            display = cell if cell != "0" else " "

            html += f'''<td style="
                width: {cell_size}px; height: {cell_size}px;
                text-align: center;
                background: {bg};
                border: {border};
                color: {text_color};
                font-weight: bold;
                font-size: {font_size};
            ">{display}</td>'''
        html += "</tr>"

    html += "</table></div>"
    return html


def _new_field(width: int, height: int, mines: int) -> None:
    st.session_state.field = Minefield(width, height, mines)
    st.session_state.hints = []
    st.session_state.solvable = None
    st.session_state.stats = {}


def main():
    st.set_page_config(
        page_title="Minefield No-Guess Solver",
        page_icon="💣",
        layout="wide",
    )

    st.title("Minefield No-Guess Solver")
    st.markdown("""
    Play a minefield with logic-only hints, and check whether a board can be
    cleared from a cell without ever guessing.
    """)

    # Sidebar configuration
    st.sidebar.header("Board Configuration")

    preset = st.sidebar.selectbox(
        "Difficulty Preset",
        ["Beginner (9x9, 10)", "Intermediate (16x16, 40)", "Expert (30x16, 99)", "Custom"],
    )

    if preset == "Beginner (9x9, 10)":
        width, height, mines = 9, 9, 10
    elif preset == "Intermediate (16x16, 40)":
        width, height, mines = 16, 16, 40
    elif preset == "Expert (30x16, 99)":
        width, height, mines = 30, 16, 99
    else:
        width = st.sidebar.slider("Width", 3, 30, 16)
        height = st.sidebar.slider("Height", 3, 30, 16)
        mines = st.sidebar.slider("Mines", 1, width * height - 1, min(40, width * height - 1))

    accurate = st.sidebar.checkbox(
        "Accurate hints",
        value=True,
        help="Accurate hints outline only the cells to open/flag; otherwise the "
             "whole neighborhood the deduction comes from is outlined.",
    )
    only_one = st.sidebar.checkbox("Only one hint", value=True)

    # Initialize session state
    if "field" not in st.session_state:
        st.session_state.prev_settings = None

    current_settings = (width, height, mines)
    if st.session_state.prev_settings != current_settings:
        _new_field(width, height, mines)
        st.session_state.prev_settings = current_settings

    field: Minefield = st.session_state.field

    col1, col2 = st.columns([3, 1]) if width >= 16 else st.columns([2, 1])

    with col1:
        st.subheader("Board")

        row = st.number_input("Row", 0, height - 1, 0)
        col = st.number_input("Column", 0, width - 1, 0)
        cell = field.cell_index(int(row), int(col))

        b1, b2, b3, b4, b5 = st.columns(5)
        with b1:
            if st.button("Open", type="primary"):
                field.open_cell(cell)
                st.session_state.hints = []
        with b2:
            if st.button("Flag"):
                field.set_flag(cell, not field.cells[cell].is_flagged)
                st.session_state.hints = []
        with b3:
            if st.button("Hint"):
                st.session_state.hints = field.get_hint(
                    accurate=accurate, only_one=only_one
                )
                if not st.session_state.hints:
                    st.warning("No certain move: a guess is needed.")
        with b4:
            if st.button("Check solvability"):
                # Run on a copy: the check resets open and flag state when done
                solver = MinefieldSolver(copy.deepcopy(field))
                st.session_state.solvable = solver.is_solvable_from(cell, restore=True)
                st.session_state.stats = solver.stats()
        with b5:
            if st.button("New Board"):
                _new_field(width, height, mines)
                st.rerun()

        show_mines = field.is_over()
        html = render_board_html(field, st.session_state.hints, show_mines=show_mines)
        st.markdown(html, unsafe_allow_html=True)

        if field.is_cleared():
            st.success("Cleared! All safe cells opened.")
        elif field.is_lost():
            st.error("Game Over! A mine was opened.")

        # Board legend
        st.markdown("""
        <div style="font-size: 12px; margin-top: 10px;">
        <b>Legend:</b>
        <span style="background: #c0c0c0; color: #666666; padding: 2px 6px; margin: 0 4px; font-weight: bold;">.</span> Closed
        <span style="background: #f0f0f0; padding: 2px 6px; margin: 0 4px;">&nbsp;</span> Empty (0)
        <span style="color: #0000ff; font-weight: bold; margin: 0 4px;">1-8</span> Adjacent mines
        <span style="background: #ffa500; color: white; padding: 2px 6px; margin: 0 4px; font-weight: bold;">F</span> Flagged
        <span style="border: 3px solid #00aa00; padding: 0 6px; margin: 0 4px;">&nbsp;</span> Hint: open
        <span style="border: 3px solid #ff0000; padding: 0 6px; margin: 0 4px;">&nbsp;</span> Hint: flag
        </div>
        """, unsafe_allow_html=True)

    with col2:
        st.subheader("Solver")

        metrics: Dict[str, object] = {
            "Flags used": f"{field.used_flags} / {field.mines_count}",
            "Open cells": sum(1 for c in field.cells if c.is_open),
        }
        for label, value in metrics.items():
            st.metric(label, value)

        if st.session_state.solvable is not None:
            st.markdown("---")
            if st.session_state.solvable:
                st.success("Solvable without guessing from the selected cell.")
            else:
                st.error("Not solvable by logic alone from the selected cell.")

            stats = st.session_state.stats
            st.text(f"Passes: {stats.get('passes_count', 0)}")
            for method in ("direct", "subset", "union", "global"):
                st.text(f"{method.capitalize()}: {stats.get(f'inferred_{method}_count', 0)} cells")

        st.markdown("---")
        st.subheader("Algorithm Info")
        st.markdown("""
        **Deduction methods:**
        1. **Direct**: a number's flags or closed cells settle it
        2. **Subset**: known groups subtracted from larger numbers
        3. **Union**: several disjoint groups subtracted at once
        4. **Global**: remaining mine count vs. known groups
        """)


if __name__ == "__main__":
    main()
