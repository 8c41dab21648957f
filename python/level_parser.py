"""
Level parsing utilities for tilewalk.

Levels are authored as compact strings, one per grid:
- Rows separated by |, top row first
- Cells separated by spaces
- A cell is a shape letter with optional rotation and start marker
"""

from __future__ import annotations

import logging
import re
from typing import Iterable

from tile_types import RED, WHITE, Direction, GridPos, ShapeKind
from tilewalk import CellPosition, Playfield, PortalBinding, TileGraph, bidirectional_portal

__all__ = ["parse_levels", "parse_playfield", "teleport_playfield", "TELEPORT_LEVEL"]

logger = logging.getLogger(__name__)

_SHAPE_LETTERS = {
    "S": ShapeKind.SQUARE,
    "T": ShapeKind.TRIANGLE,
    "R": ShapeKind.RIGHT_TRIANGLE,
}

_CELL_PATTERN = re.compile(r"^(?P<shape>[STR])(?P<rotation>-?\d+)?(?P<start>\*)?$")


def parse_levels(definitions: dict[str, str]) -> dict[str, TileGraph]:
    """
    Parse level definitions from a compact string format.

    Format:
    - Rows separated by |, the first row is the top of the grid
    - Cells separated by spaces
    - Cell contents:
      * Shape letter: S (Square), T (Triangle), R (RightTriangle)
      * Optional rotation in degrees after the letter, a multiple of 90
        Examples: "R" -> RightTriangle at 0°, "R90" -> RightTriangle at 90°
      * Optional '*' suffix marks the starting piece (colored red)
        Examples: "S*" -> starting Square, "R270*" -> starting RightTriangle
      * Underscore only (_): Empty cell
      * Empty string (from multiple adjacent spaces): Empty cell

    Coordinates: column index is x, and y grows upward, so the bottom row is
    y = 0. Tiles are inserted in reading order (top-left first).

    Example:
        {
            "main": "S* R90|S S",
        }
        Creates grid "main" with tiles at (0, 1) start Square, (1, 1)
        RightTriangle at 90°, (0, 0) Square and (1, 0) Square.

    Args:
        definitions: Dict mapping grid_id to string definition

    Returns:
        Dict mapping grid_id to the parsed TileGraph

    Raises:
        ValueError: If a cell string is malformed or rows differ in length
    """
    graphs: dict[str, TileGraph] = {}

    for grid_id, definition in definitions.items():
        row_strings = definition.split("|")
        parsed_rows: list[list[str]] = [row_str.split(" ") for row_str in row_strings]

        if parsed_rows:
            cols = len(parsed_rows[0])
            mismatched = [
                (i, len(row)) for i, row in enumerate(parsed_rows) if len(row) != cols
            ]
            if mismatched:
                error_msg = (
                    f"Inconsistent row lengths in grid '{grid_id}'\n"
                    f"  Expected: {cols} columns (from row 0)\n"
                    f"  Mismatched rows:\n"
                )
                for row_idx, actual_cols in mismatched:
                    error_msg += f"    Row {row_idx}: {actual_cols} columns - \"{row_strings[row_idx]}\"\n"
                error_msg += "  All rows must have the same number of cells"
                raise ValueError(error_msg)

        graph = TileGraph(grid_id)
        height = len(parsed_rows)

        for row_idx, cells in enumerate(parsed_rows):
            y = height - 1 - row_idx
            for col_idx, cell_str in enumerate(cells):
                if not cell_str or cell_str == "_":
                    continue

                match = _CELL_PATTERN.match(cell_str)
                rotation = int(match.group("rotation") or 0) if match else 0
                if match is None or rotation % 90 != 0:
                    error_msg = (
                        f"Invalid cell string: '{cell_str}'\n"
                        f"  Grid: '{grid_id}'\n"
                        f"  Row {row_idx}: \"{row_strings[row_idx]}\"\n"
                        f"  Position: column {col_idx}\n"
                        f"  Valid formats:\n"
                        f"    - Shape letter: S, T or R (e.g., 'S', 'T')\n"
                        f"    - Rotation suffix, multiple of 90 (e.g., 'R90', 'R270')\n"
                        f"    - '*' suffix: starting piece (e.g., 'S*', 'R90*')\n"
                        f"    - '_': Empty cell\n"
                        f"    - Empty string (multiple spaces): Empty cell"
                    )
                    raise ValueError(error_msg)

                color = RED if match.group("start") else WHITE
                graph.add(_SHAPE_LETTERS[match.group("shape")], rotation, GridPos(col_idx, y), color)

        if not graph.is_connected():
            logger.warning("Grid '%s' is not connected", grid_id)
        graphs[grid_id] = graph

    return graphs


def parse_playfield(
    definitions: dict[str, str], portals: Iterable[PortalBinding] = ()
) -> Playfield:
    """Parse several grids and link them with the given portal bindings."""
    graphs = parse_levels(definitions)
    return Playfield(graphs.values(), portals)


# =============================================================================
# Shipped Levels
# =============================================================================


# Two 2x2 grids. The start is the top-left cell of grid1.
TELEPORT_LEVEL = {
    "grid1": "S* S|S S",
    "grid2": "S S|S S",
}


def teleport_playfield() -> Playfield:
    """
    Two 2x2 grids joined at a corner.

    Leaving grid1 (1, 0) to the right or downward lands on grid2 (0, 1), and
    leaving grid2 (0, 1) to the left or upward lands back on grid1 (1, 0).
    """
    portals = bidirectional_portal(
        CellPosition("grid1", 1, 0),
        (Direction.E, Direction.S),
        CellPosition("grid2", 0, 1),
    )
    return parse_playfield(TELEPORT_LEVEL, portals)
