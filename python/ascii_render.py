"""
ASCII rendering for tilewalk graphs.

Each grid is drawn as a titled box covering its bounding rectangle, top row
first. Several grids are laid out side by side in flow layout.
"""

from __future__ import annotations

import logging
from typing import Callable, Mapping

import simple_chalk as chalk  # type: ignore[import-untyped]

from tile_types import Color, ShapeKind, Tile
from tilewalk import CellPosition, Playfield, TileGraph, heat_level

logger = logging.getLogger(__name__)


# Right triangle glyphs by rotation, right angle in the named corner
_RIGHT_TRIANGLE_GLYPHS = {
    0: "◣",  # bottom-left
    90: "◢",  # bottom-right
    180: "◥",  # top-right
    270: "◤",  # top-left
}

EMPTY_GLYPH = "·"

# Visit count -> colorizer: unvisited, then warmer with each revisit
HEAT_RAMP: list[Callable[[str], str]] = [
    chalk.white,
    chalk.yellowBright,
    chalk.yellow,
    chalk.redBright,
    chalk.red,
]

_TILE_COLORS: list[tuple[Color, Callable[[str], str]]] = [
    (Color(1.0, 1.0, 1.0), chalk.white),
    (Color(1.0, 0.0, 0.0), chalk.red),
    (Color(0.0, 1.0, 0.0), chalk.green),
    (Color(0.0, 0.0, 1.0), chalk.blue),
    (Color(1.0, 1.0, 0.0), chalk.yellow),
    (Color(1.0, 0.0, 1.0), chalk.magenta),
    (Color(0.0, 1.0, 1.0), chalk.cyan),
]


def shape_glyph(shape: ShapeKind, rotation: int) -> str:
    match shape:
        case ShapeKind.SQUARE:
            return "■"
        case ShapeKind.TRIANGLE:
            return "▲"
        case ShapeKind.RIGHT_TRIANGLE:
            return _RIGHT_TRIANGLE_GLYPHS[rotation]
    raise ValueError(f"No glyph for shape {shape}")


def tile_colorizer(color: Color) -> Callable[[str], str]:
    """Pick the closest terminal color for an RGB tile color."""

    def distance(candidate: Color) -> float:
        return (
            (candidate.r - color.r) ** 2
            + (candidate.g - color.g) ** 2
            + (candidate.b - color.b) ** 2
        )

    _, colorize = min(_TILE_COLORS, key=lambda entry: distance(entry[0]))
    return colorize


def render_graph(
    graph: TileGraph,
    cell_width: int = 3,
    highlight: CellPosition | None = None,
    heat: Mapping[CellPosition, int] | None = None,
    portals: frozenset[CellPosition] = frozenset(),
    frame_color: Callable[[str], str] | None = None,
) -> list[str]:
    """
    Render a single graph as a boxed character display.

    Args:
        graph: The graph to render
        cell_width: Characters per cell (default 3)
        highlight: Optional cell (cursor or token) shown on a white background
        heat: Optional visit counts; when given, tiles are colored by heat
            instead of by their own color
        portals: Cells to mark as portal endpoints
        frame_color: Optional colorizer for the box and title

    Returns:
        List of strings representing the rendered grid lines
    """
    colorize_frame = frame_color if frame_color is not None else (lambda s: s)
    bounds = graph.bounds()
    if bounds is None:
        min_x, min_y, max_x, max_y = 0, 0, 0, 0
    else:
        min_x, min_y, max_x, max_y = bounds

    cols = max_x - min_x + 1
    grid_width = cols * cell_width + 2
    title = f" {graph.grid_id} "

    lines: list[str] = []

    title_line = "┌" + "─" * (grid_width - 2) + "┐"
    if len(title) <= grid_width - 2:
        title_start = (grid_width - len(title)) // 2
        title_line = (
            "┌"
            + "─" * (title_start - 1)
            + title
            + "─" * (grid_width - title_start - len(title) - 1)
            + "┐"
        )
    lines.append(colorize_frame(title_line))

    for y in range(max_y, min_y - 1, -1):
        line_parts = [colorize_frame("│")]
        for x in range(min_x, max_x + 1):
            cell = CellPosition(graph.grid_id, x, y)
            tile = graph.at(cell.pos)
            line_parts.append(
                _render_cell(tile, cell, cell_width, highlight, heat, cell in portals)
            )
        line_parts.append(colorize_frame("│"))
        lines.append("".join(line_parts))

    lines.append(colorize_frame("└" + "─" * (grid_width - 2) + "┘"))
    return lines


def _render_cell(
    tile: Tile | None,
    cell: CellPosition,
    cell_width: int,
    highlight: CellPosition | None,
    heat: Mapping[CellPosition, int] | None,
    is_portal: bool,
) -> str:
    if tile is None:
        return EMPTY_GLYPH.center(cell_width)

    glyph = shape_glyph(tile.shape, tile.rotation)
    if is_portal and cell_width >= 3:
        content = f"[{glyph}]".center(cell_width)
    else:
        content = glyph.center(cell_width)

    if highlight == cell:
        return chalk.bgWhite.black(content)
    if heat is not None:
        return HEAT_RAMP[heat_level(heat.get(cell, 0), len(HEAT_RAMP))](content)
    return tile_colorizer(tile.color)(content)


def render_playfield(
    playfield: Playfield,
    terminal_width: int = 120,
    cell_width: int = 3,
    highlight: CellPosition | None = None,
    heat: Mapping[CellPosition, int] | None = None,
) -> str:
    """
    Render all grids of a playfield in flow layout (multiple grids per row).

    Args:
        playfield: Grids and portals to render
        terminal_width: Maximum width for layout (default 120)
        cell_width: Characters per cell (default 3)
        highlight: Optional cell to highlight (usually the token)
        heat: Optional visit counts per cell

    Returns:
        Rendered string with ANSI color codes
    """
    portal_cells = frozenset(binding.source for binding in playfield.portals)
    logger.debug(
        "render_playfield: grids=%d, portals=%d, width=%d",
        len(playfield.grids),
        len(portal_cells),
        terminal_width,
    )

    rendered_grids: dict[str, list[str]] = {}
    grid_widths: dict[str, int] = {}
    for grid_id, graph in playfield.grids.items():
        rendered_grids[grid_id] = render_graph(
            graph, cell_width, highlight, heat, portal_cells
        )
        bounds = graph.bounds()
        cols = 1 if bounds is None else bounds[2] - bounds[0] + 1
        grid_widths[grid_id] = cols * cell_width + 2  # +2 for borders

    output_lines: list[str] = []
    grid_spacing = 2

    current_row_grids: list[str] = []
    current_row_width = 0

    for grid_id in playfield.grids:
        needed_width = grid_widths[grid_id]
        if current_row_grids:
            needed_width += grid_spacing

        if current_row_grids and current_row_width + needed_width > terminal_width:
            _flush_grid_row(current_row_grids, rendered_grids, grid_widths, output_lines, grid_spacing)
            current_row_grids = []
            current_row_width = 0

        current_row_grids.append(grid_id)
        current_row_width += needed_width

    if current_row_grids:
        _flush_grid_row(current_row_grids, rendered_grids, grid_widths, output_lines, grid_spacing)

    return "\n".join(output_lines)


def _flush_grid_row(
    row_grid_ids: list[str],
    rendered_grids: dict[str, list[str]],
    grid_widths: dict[str, int],
    output_lines: list[str],
    grid_spacing: int,
) -> None:
    """Helper to flush a row of grids to output_lines."""
    row_grids = [rendered_grids[gid] for gid in row_grid_ids]
    max_height = max(len(g) for g in row_grids)

    # Pad using visible widths, string length includes ANSI codes
    for grid_id, grid_lines in zip(row_grid_ids, row_grids):
        while len(grid_lines) < max_height:
            grid_lines.append(" " * grid_widths[grid_id])

    for line_idx in range(max_height):
        line_parts = [grid_lines[line_idx] for grid_lines in row_grids]
        output_lines.append((" " * grid_spacing).join(line_parts))

    output_lines.append("")
