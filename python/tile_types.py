"""
Shared type definitions for the tilewalk system.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum


class Direction(Enum):
    """Cardinal direction for placement and movement."""

    N = "N"  # Up (increasing y)
    S = "S"  # Down (decreasing y)
    E = "E"  # Right (increasing x)
    W = "W"  # Left (decreasing x)

    @property
    def delta(self) -> tuple[int, int]:
        return _DELTAS[self]

    @property
    def opposite(self) -> Direction:
        return _OPPOSITES[self]

    def rotated_ccw(self, quarter_turns: int = 1) -> Direction:
        """Rotate counter-clockwise by the given number of 90° steps."""
        order = _CCW_ORDER
        return order[(order.index(self) + quarter_turns) % 4]


_DELTAS = {
    Direction.N: (0, 1),
    Direction.S: (0, -1),
    Direction.E: (1, 0),
    Direction.W: (-1, 0),
}

_OPPOSITES = {
    Direction.N: Direction.S,
    Direction.S: Direction.N,
    Direction.E: Direction.W,
    Direction.W: Direction.E,
}

# Counter-clockwise order, matching positive rotation angles
_CCW_ORDER = (Direction.E, Direction.N, Direction.W, Direction.S)


class ShapeKind(Enum):
    """Kind of shape a tile carries."""

    SQUARE = "Square"
    TRIANGLE = "Triangle"
    RIGHT_TRIANGLE = "RightTriangle"

    @classmethod
    def parse(cls, name: str) -> ShapeKind:
        """
        Resolve a shape name, tolerating the spellings found in saved levels.

        Accepts "Square", "Triangle", "RightTriangle", "right triangle" and
        "right_triangle" in any case.

        Raises:
            ValueError: If the name is not a known shape
        """
        key = (name or "").strip().lower().replace(" ", "").replace("_", "")
        for kind in cls:
            if kind.value.lower() == key:
                return kind
        raise ValueError(f"Unknown shape type: '{name}'")


def normalize_rotation(degrees: float) -> int:
    """
    Snap an angle to the nearest quarter turn in [0, 360).

    Saved levels carry float Euler angles (e.g. 89.99998 or -90), so the value
    is rounded to a multiple of 90 before wrapping.
    """
    return (round(degrees / 90) * 90) % 360


class Command(Enum):
    """A single discrete input event, already mapped from a key or button."""

    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"
    ROTATE = "rotate"
    UNDO = "undo"
    CLEAR = "clear"
    RESET = "reset"

    @property
    def direction(self) -> Direction | None:
        return _COMMAND_DIRECTIONS.get(self)


_COMMAND_DIRECTIONS = {
    Command.UP: Direction.N,
    Command.DOWN: Direction.S,
    Command.LEFT: Direction.W,
    Command.RIGHT: Direction.E,
}


# =============================================================================
# Tile Definition Types
# =============================================================================


@dataclass(frozen=True)
class GridPos:
    """An integer lattice coordinate."""

    x: int
    y: int

    def step(self, direction: Direction) -> GridPos:
        dx, dy = direction.delta
        return GridPos(self.x + dx, self.y + dy)


@dataclass(frozen=True)
class Color:
    """An RGBA color with 0-1 components."""

    r: float
    g: float
    b: float
    a: float = 1.0

    @property
    def is_white(self) -> bool:
        return (
            abs(self.r - 1.0) < 1e-6
            and abs(self.g - 1.0) < 1e-6
            and abs(self.b - 1.0) < 1e-6
        )


WHITE = Color(1.0, 1.0, 1.0)
RED = Color(1.0, 0.0, 0.0)
BLUE = Color(0.0, 0.0, 1.0)
GREEN = Color(0.0, 1.0, 0.0)

PALETTE: tuple[Color, ...] = (WHITE, RED, BLUE, GREEN)


@dataclass(frozen=True)
class Tile:
    """A placed shape instance."""

    id: int
    shape: ShapeKind
    rotation: int
    position: GridPos
    color: Color = WHITE

    @property
    def is_starting_piece(self) -> bool:
        return not self.color.is_white


@dataclass(frozen=True)
class PendingTile:
    """The shape, rotation and color the next placement will use."""

    shape: ShapeKind
    rotation: int = 0
    color: Color = WHITE

    def __post_init__(self) -> None:
        object.__setattr__(self, "rotation", normalize_rotation(self.rotation))

    def rotated(self) -> PendingTile:
        """Advance by 90°, wrapping past 360° back to 0°."""
        return replace(self, rotation=(self.rotation + 90) % 360)

    def with_shape(self, shape: ShapeKind) -> PendingTile:
        """Pick a new shape; rotation starts over at 0°."""
        return replace(self, shape=shape, rotation=0)

    def with_color(self, color: Color) -> PendingTile:
        return replace(self, color=color)
