"""Tests for level_records module."""

import json
import logging

import pytest
from pydantic import ValidationError

from level_records import (
    DEFAULT_CELL_SIZE,
    LevelDescription,
    ShapeRecord,
    dumps_level,
    export_level,
    graph_from_level,
    loads_level,
    tile_to_record,
)
from tile_types import BLUE, RED, WHITE, Direction, GridPos, PendingTile, ShapeKind
from tilewalk import CellPosition, PlacementBuilder, TraversalEngine


SAVED_LEVEL = """
{
  "levelName": "Corner",
  "shapes": [
    {"shapeType": "Square", "colorR": 1, "colorG": 1, "colorB": 1, "colorA": 1,
     "positionX": 0.0, "positionY": 0.0, "rotationZ": 0.0, "isStartingPiece": false},
    {"shapeType": "right triangle", "colorR": 1, "colorG": 0, "colorB": 0, "colorA": 1,
     "positionX": 0.5, "positionY": 0.0, "rotationZ": 89.99998, "isStartingPiece": true},
    {"shapeType": "Hexagon", "colorR": 1, "colorG": 1, "colorB": 1, "colorA": 1,
     "positionX": 1.0, "positionY": 0.0, "rotationZ": 0.0, "isStartingPiece": false},
    {"shapeType": "TRIANGLE", "colorR": 1, "colorG": 1, "colorB": 1, "colorA": 1,
     "positionX": 0.0, "positionY": -0.5, "rotationZ": -90.0, "isStartingPiece": false}
  ]
}
"""


def built_level() -> PlacementBuilder:
    builder = PlacementBuilder()
    builder.place_first(GridPos(0, 0), PendingTile(ShapeKind.SQUARE))
    builder.place_adjacent(Direction.E, PendingTile(ShapeKind.RIGHT_TRIANGLE, 270, RED))
    builder.place_adjacent(Direction.W, PendingTile(ShapeKind.SQUARE))
    builder.place_adjacent(Direction.N, PendingTile(ShapeKind.TRIANGLE, 180, BLUE))
    return builder


class TestShapeRecords:
    """Tests for record conversion."""

    def test_tile_to_record(self) -> None:
        builder = built_level()
        record = tile_to_record(builder.history[1])
        assert record.shape_type == "RightTriangle"
        assert record.position_x == pytest.approx(0.5)
        assert record.position_y == pytest.approx(0.0)
        assert record.rotation_z == pytest.approx(270.0)
        assert record.is_starting_piece
        assert record.color == RED

    def test_camel_case_json(self) -> None:
        level = export_level("Test", built_level().history)
        data = json.loads(dumps_level(level))
        assert data["levelName"] == "Test"
        assert set(data["shapes"][0]) == {
            "shapeType",
            "colorR",
            "colorG",
            "colorB",
            "colorA",
            "positionX",
            "positionY",
            "rotationZ",
            "isStartingPiece",
        }

    def test_records_accept_field_names(self) -> None:
        record = ShapeRecord(shape_type="Square", position_x=1.5)
        assert record.color == WHITE
        assert record.position_x == 1.5

    def test_malformed_json(self) -> None:
        with pytest.raises(ValidationError):
            loads_level('{"levelName": "x", "shapes": [{"colorR": 1}]}')


class TestLoadLevel:
    """Tests for rebuilding graphs from saved levels."""

    def test_load_saved_level(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING):
            graph = graph_from_level(loads_level(SAVED_LEVEL))

        assert len(graph) == 3
        corner = graph.at(GridPos(1, 0))
        assert corner is not None
        assert corner.shape == ShapeKind.RIGHT_TRIANGLE
        assert corner.rotation == 90
        assert corner.is_starting_piece

        below = graph.at(GridPos(0, -1))
        assert below is not None
        assert below.shape == ShapeKind.TRIANGLE
        assert below.rotation == 270

        assert "Hexagon" in caplog.text

    def test_round_trip_preserves_order_and_start(self) -> None:
        builder = built_level()
        text = dumps_level(export_level("Round trip", builder.history))
        graph = graph_from_level(loads_level(text))

        assert [(t.shape, t.rotation, t.position, t.color) for t in graph] == [
            (t.shape, t.rotation, t.position, t.color) for t in builder.history
        ]

    def test_loaded_level_plays_from_starting_piece(self) -> None:
        graph = graph_from_level(loads_level(SAVED_LEVEL))
        engine = TraversalEngine(graph)
        assert engine.token == CellPosition("main", 1, 0)

    def test_starting_flag_without_color(self) -> None:
        level = LevelDescription(
            level_name="Flag",
            shapes=[
                ShapeRecord(shape_type="Square"),
                ShapeRecord(shape_type="Square", position_x=DEFAULT_CELL_SIZE, is_starting_piece=True),
            ],
        )
        graph = graph_from_level(level)
        start = graph.at(GridPos(1, 0))
        assert start is not None
        assert start.is_starting_piece

    def test_custom_cell_size(self) -> None:
        level = LevelDescription(
            shapes=[ShapeRecord(shape_type="Square", position_x=2.0, position_y=-4.0)]
        )
        graph = graph_from_level(level, grid_id="big", cell_size=2.0)
        assert graph.grid_id == "big"
        assert graph.at(GridPos(1, -2)) is not None

    def test_duplicate_cells_raise(self) -> None:
        level = LevelDescription(
            shapes=[
                ShapeRecord(shape_type="Square", position_x=0.0),
                ShapeRecord(shape_type="Square", position_x=0.1),
            ]
        )
        with pytest.raises(ValueError, match="already occupied"):
            graph_from_level(level)
