"""Tests for ascii_render module."""

import re

from ascii_render import EMPTY_GLYPH, render_graph, render_playfield, shape_glyph
from level_parser import parse_levels, parse_playfield
from tile_types import Direction, ShapeKind
from tilewalk import CellPosition, TileGraph, TraversalEngine, bidirectional_portal

ANSI = re.compile(r"\x1b\[[0-9;]*m")


def plain(text: str) -> str:
    return ANSI.sub("", text)


class TestShapeGlyphs:
    """Tests for glyph selection."""

    def test_basic_shapes(self) -> None:
        assert shape_glyph(ShapeKind.SQUARE, 90) == "■"
        assert shape_glyph(ShapeKind.TRIANGLE, 0) == "▲"

    def test_right_triangle_follows_rotation(self) -> None:
        glyphs = [shape_glyph(ShapeKind.RIGHT_TRIANGLE, r) for r in (0, 90, 180, 270)]
        assert glyphs == ["◣", "◢", "◥", "◤"]


class TestRenderGraph:
    """Tests for single grid rendering."""

    def test_rows_top_first(self) -> None:
        graph = parse_levels({"main": "S R90|S T"})["main"]
        lines = [plain(line) for line in render_graph(graph)]

        assert len(lines) == 4
        assert " main " in lines[0]
        assert lines[1] == "│ ■  ◢ │"
        assert lines[2] == "│ ■  ▲ │"
        assert lines[3] == "└──────┘"

    def test_empty_cells_inside_bounds(self) -> None:
        graph = parse_levels({"main": "S S|_ S"})["main"]
        lines = [plain(line) for line in render_graph(graph)]
        assert lines[2] == f"│ {EMPTY_GLYPH}  ■ │"

    def test_empty_graph(self) -> None:
        lines = [plain(line) for line in render_graph(TileGraph())]
        assert lines[1] == f"│ {EMPTY_GLYPH} │"

    def test_portal_marker(self) -> None:
        graph = parse_levels({"main": "S S"})["main"]
        lines = render_graph(graph, portals=frozenset({CellPosition("main", 1, 0)}))
        assert plain(lines[1]) == "│ ■ [■]│"

    def test_cell_width(self) -> None:
        graph = parse_levels({"main": "S S"})["main"]
        lines = [plain(line) for line in render_graph(graph, cell_width=1)]
        assert lines[1] == "│■■│"


class TestRenderPlayfield:
    """Tests for flow layout of several grids."""

    def test_grids_side_by_side(self) -> None:
        playfield = parse_playfield({"a": "S S|S S", "b": "S S|S S"})
        output = plain(render_playfield(playfield))
        lines = output.split("\n")
        assert " a " in lines[0] and " b " in lines[0]
        assert lines[1] == "│ ■  ■ │  │ ■  ■ │"

    def test_narrow_terminal_wraps(self) -> None:
        playfield = parse_playfield({"a": "S S", "b": "S S"})
        lines = plain(render_playfield(playfield, terminal_width=10)).split("\n")
        titles = [line for line in lines if line.startswith("┌")]
        assert len(titles) == 2
        assert all(len(line) <= 10 for line in lines)

    def test_portals_marked(self) -> None:
        portals = bidirectional_portal(CellPosition("a", 1, 0), [Direction.E], CellPosition("b", 0, 0))
        playfield = parse_playfield({"a": "S S", "b": "S S"}, portals)
        lines = plain(render_playfield(playfield)).split("\n")
        assert lines[1] == "│ ■ [■]│  │[■] ■ │"

    def test_renders_engine_state(self) -> None:
        engine = TraversalEngine(parse_levels({"main": "S* S"})["main"])
        engine.move(Direction.E)
        output = plain(
            render_playfield(engine.playfield, highlight=engine.token, heat=engine.heat_map())
        )
        assert "│ ■  ■ │" in output
