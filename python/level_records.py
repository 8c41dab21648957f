"""Pydantic records for saved levels.

A level is a name plus a list of shape records in placement order. Field
names follow the saved JSON (camelCase); positions are world coordinates on a
lattice of ``cell_size`` units and get snapped to integer grid cells on load.
"""

from __future__ import annotations

import logging
from typing import Iterable, List

from pydantic import BaseModel, ConfigDict, Field

from tile_types import RED, Color, GridPos, ShapeKind, Tile
from tilewalk import TileGraph

logger = logging.getLogger(__name__)

DEFAULT_CELL_SIZE = 0.5


class ShapeRecord(BaseModel):
    """One placed shape as stored in a level file."""

    model_config = ConfigDict(populate_by_name=True)

    shape_type: str = Field(alias="shapeType")
    color_r: float = Field(1.0, alias="colorR")
    color_g: float = Field(1.0, alias="colorG")
    color_b: float = Field(1.0, alias="colorB")
    color_a: float = Field(1.0, alias="colorA")
    position_x: float = Field(0.0, alias="positionX")
    position_y: float = Field(0.0, alias="positionY")
    rotation_z: float = Field(0.0, alias="rotationZ", description="Degrees, counter-clockwise")
    is_starting_piece: bool = Field(False, alias="isStartingPiece")

    @property
    def color(self) -> Color:
        return Color(self.color_r, self.color_g, self.color_b, self.color_a)


class LevelDescription(BaseModel):
    """A named level: its shapes in the order they were placed."""

    model_config = ConfigDict(populate_by_name=True)

    level_name: str = Field("Untitled", alias="levelName")
    shapes: List[ShapeRecord] = Field(default_factory=list)


def tile_to_record(tile: Tile, cell_size: float = DEFAULT_CELL_SIZE) -> ShapeRecord:
    return ShapeRecord(
        shape_type=tile.shape.value,
        color_r=tile.color.r,
        color_g=tile.color.g,
        color_b=tile.color.b,
        color_a=tile.color.a,
        position_x=tile.position.x * cell_size,
        position_y=tile.position.y * cell_size,
        rotation_z=float(tile.rotation),
        is_starting_piece=tile.is_starting_piece,
    )


def export_level(
    name: str, tiles: Iterable[Tile], cell_size: float = DEFAULT_CELL_SIZE
) -> LevelDescription:
    """Describe placed tiles (in placement order) as a saveable level."""
    return LevelDescription(
        level_name=name,
        shapes=[tile_to_record(tile, cell_size) for tile in tiles],
    )


def graph_from_level(
    level: LevelDescription,
    grid_id: str = "main",
    cell_size: float = DEFAULT_CELL_SIZE,
) -> TileGraph:
    """
    Rebuild a tile graph from a level description.

    Unknown shape types are skipped with a warning. Edge compatibility is not
    re-checked; a disconnected result is only logged.

    Raises:
        ValueError: If two records snap to the same grid cell
    """
    graph = TileGraph(grid_id)
    for index, record in enumerate(level.shapes):
        try:
            shape = ShapeKind.parse(record.shape_type)
        except ValueError:
            logger.warning(
                "Skipping shape %d in '%s': unknown type '%s'",
                index,
                level.level_name,
                record.shape_type,
            )
            continue

        color = record.color
        if record.is_starting_piece and color.is_white:
            color = RED
        position = GridPos(
            round(record.position_x / cell_size), round(record.position_y / cell_size)
        )
        graph.add(shape, record.rotation_z, position, color)

    if not graph.is_connected():
        logger.warning("Level '%s' is not connected", level.level_name)
    logger.info("Loaded level '%s' with %d shapes", level.level_name, len(graph))
    return graph


def dumps_level(level: LevelDescription) -> str:
    return level.model_dump_json(by_alias=True, indent=2)


def loads_level(text: str) -> LevelDescription:
    """Parse level JSON. Raises pydantic.ValidationError on malformed records."""
    return LevelDescription.model_validate_json(text)
