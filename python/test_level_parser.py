"""Tests for level_parser module."""

import pytest

from level_parser import TELEPORT_LEVEL, parse_levels, parse_playfield, teleport_playfield
from tile_types import RED, WHITE, Direction, GridPos, ShapeKind
from tilewalk import CellPosition


class TestParseLevels:
    """Tests for the compact level parser."""

    def test_simple_square_grid(self) -> None:
        """Parse a 2x2 block of squares."""
        graphs = parse_levels({"main": "S S|S S"})

        assert "main" in graphs
        graph = graphs["main"]
        assert graph.grid_id == "main"
        assert len(graph) == 4
        for x in (0, 1):
            for y in (0, 1):
                tile = graph.at(GridPos(x, y))
                assert tile is not None
                assert tile.shape == ShapeKind.SQUARE
                assert tile.rotation == 0

    def test_top_row_has_highest_y(self) -> None:
        """The first row is the top of the grid."""
        graph = parse_levels({"main": "T _|S S|S _"})["main"]
        top = graph.at(GridPos(0, 2))
        assert top is not None
        assert top.shape == ShapeKind.TRIANGLE
        assert graph.at(GridPos(1, 2)) is None

    def test_reading_order_ids(self) -> None:
        """Tiles are inserted top-left first."""
        graph = parse_levels({"main": "S T|R S"})["main"]
        assert [t.position for t in graph] == [
            GridPos(0, 1),
            GridPos(1, 1),
            GridPos(0, 0),
            GridPos(1, 0),
        ]
        assert [t.id for t in graph] == [0, 1, 2, 3]

    def test_rotations(self) -> None:
        """Rotation follows the shape letter."""
        graph = parse_levels({"main": "R90 R180 R270 R-90"})["main"]
        assert [t.rotation for t in graph] == [90, 180, 270, 270]
        assert all(t.shape == ShapeKind.RIGHT_TRIANGLE for t in graph)

    def test_start_marker(self) -> None:
        """A trailing * marks the starting piece."""
        graph = parse_levels({"main": "S R90* S"})["main"]
        start = graph.at(GridPos(1, 0))
        assert start is not None
        assert start.color == RED
        assert start.is_starting_piece
        assert start.rotation == 90

        other = graph.at(GridPos(0, 0))
        assert other is not None
        assert other.color == WHITE
        assert not other.is_starting_piece

    def test_empty_cells(self) -> None:
        """Underscores and doubled spaces are both empty."""
        graph = parse_levels({"main": "S  S|S _ S"})["main"]
        assert len(graph) == 4
        assert graph.at(GridPos(1, 1)) is None
        assert graph.at(GridPos(1, 0)) is None

    def test_multiple_grids(self) -> None:
        graphs = parse_levels({"a": "S", "b": "T T"})
        assert set(graphs) == {"a", "b"}
        assert len(graphs["b"]) == 2
        assert graphs["b"].grid_id == "b"

    def test_invalid_cell(self) -> None:
        with pytest.raises(ValueError, match="Invalid cell string: 'Q'"):
            parse_levels({"main": "S Q"})

    def test_invalid_rotation(self) -> None:
        with pytest.raises(ValueError, match="Invalid cell string: 'R45'"):
            parse_levels({"main": "R45"})

    def test_error_reports_location(self) -> None:
        with pytest.raises(ValueError) as exc_info:
            parse_levels({"level": "S S|S x"})
        message = str(exc_info.value)
        assert "Grid: 'level'" in message
        assert "Row 1" in message
        assert "column 1" in message

    def test_inconsistent_rows(self) -> None:
        with pytest.raises(ValueError, match="same number of cells"):
            parse_levels({"main": "S S|S"})


class TestPlayfields:
    """Tests for multi-grid playfields."""

    def test_parse_playfield_without_portals(self) -> None:
        playfield = parse_playfield({"a": "S S", "b": "S"})
        assert list(playfield.grids) == ["a", "b"]
        assert len(playfield) == 3
        assert playfield.portals == ()

    def test_teleport_level(self) -> None:
        playfield = teleport_playfield()
        assert set(playfield.grids) == set(TELEPORT_LEVEL)
        assert len(playfield) == 8
        assert playfield.portal_target(CellPosition("grid1", 1, 0), Direction.E) == CellPosition("grid2", 0, 1)
        assert playfield.portal_target(CellPosition("grid1", 1, 0), Direction.S) == CellPosition("grid2", 0, 1)
        assert playfield.portal_target(CellPosition("grid2", 0, 1), Direction.W) == CellPosition("grid1", 1, 0)
        assert playfield.portal_target(CellPosition("grid2", 0, 1), Direction.N) == CellPosition("grid1", 1, 0)
        assert playfield.portal_target(CellPosition("grid1", 1, 0), Direction.W) is None
        assert playfield.is_portal(CellPosition("grid1", 1, 0))
        assert not playfield.is_portal(CellPosition("grid1", 0, 0))

        start = playfield.tile_at(CellPosition("grid1", 0, 1))
        assert start is not None
        assert start.is_starting_piece
