"""
Tile graph construction and traversal puzzles.

Two state machines share one grid-graph model:
- PlacementBuilder grows a connected TileGraph from a cursor, checking edge
  compatibility between neighboring shapes.
- TraversalEngine walks a token over one or more graphs (optionally linked by
  portals), counting visits until every tile has been occupied.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping

from tile_types import (
    WHITE,
    Color,
    Command,
    Direction,
    GridPos,
    PendingTile,
    ShapeKind,
    Tile,
    normalize_rotation,
)

logger = logging.getLogger(__name__)


class FailureReason(Enum):
    """Reason why an operation was rejected."""

    INCOMPATIBLE_EDGE = "incompatible_edge"  # Edge types don't match
    CANNOT_UNDO_ROOT = "cannot_undo_root"  # Only one tile left
    NO_CURSOR = "no_cursor"  # Adjacent placement before the first tile
    GRAPH_NOT_EMPTY = "graph_not_empty"  # First placement on a non-empty graph
    BLOCKED_MOVE = "blocked_move"  # No tile and no portal in that direction
    PUZZLE_ALREADY_SOLVED = "puzzle_already_solved"  # Move after the win


# =============================================================================
# Edge Classification
# =============================================================================


# Straight (axis-aligned) edges of a right triangle per rotation bucket.
# At 0° the right angle sits in the bottom-left corner.
_RIGHT_TRIANGLE_STRAIGHT_EDGES: dict[int, frozenset[Direction]] = {
    0: frozenset({Direction.S, Direction.W}),
    90: frozenset({Direction.S, Direction.E}),
    180: frozenset({Direction.N, Direction.E}),
    270: frozenset({Direction.N, Direction.W}),
}

_ALL_DIRECTIONS = frozenset(Direction)


def straight_edges(shape: ShapeKind, rotation: float) -> frozenset[Direction]:
    """Return the set of directions whose edge is straight for this shape."""
    if shape is ShapeKind.RIGHT_TRIANGLE:
        return _RIGHT_TRIANGLE_STRAIGHT_EDGES[normalize_rotation(rotation)]
    return _ALL_DIRECTIONS


def is_edge_straight(shape: ShapeKind, rotation: float, direction: Direction) -> bool:
    """
    Classify the edge a shape presents in the given direction.

    Squares and triangles are straight on every side. A right triangle is
    straight on the two sides adjacent to its right angle and presents its
    hypotenuse on the other two.
    """
    return direction in straight_edges(shape, rotation)


@dataclass(frozen=True)
class EdgeCheck:
    """Result of comparing the two edges that would touch after a placement."""

    anchor_shape: ShapeKind
    anchor_rotation: int
    placed_shape: ShapeKind
    placed_rotation: int
    direction: Direction  # From the anchor towards the placed tile
    anchor_straight: bool
    placed_straight: bool

    @property
    def requires_straight(self) -> bool:
        # Only right triangles have a hypotenuse at stake
        return ShapeKind.RIGHT_TRIANGLE in (self.anchor_shape, self.placed_shape)

    @property
    def compatible(self) -> bool:
        if not self.requires_straight:
            return True
        return self.anchor_straight and self.placed_straight

    def describe(self) -> str:
        def kind(straight: bool) -> str:
            return "STRAIGHT" if straight else "HYPOTENUSE"

        return (
            f"{self.anchor_shape.value}(rot:{self.anchor_rotation}°) edge "
            f"{self.direction.value} is {kind(self.anchor_straight)}, "
            f"{self.placed_shape.value}(rot:{self.placed_rotation}°) edge "
            f"{self.direction.opposite.value} is {kind(self.placed_straight)}"
        )


def check_edges(
    anchor_shape: ShapeKind,
    anchor_rotation: float,
    placed_shape: ShapeKind,
    placed_rotation: float,
    direction: Direction,
) -> EdgeCheck:
    """
    Compare the anchor's edge facing `direction` with the placed shape's
    opposite edge.
    """
    anchor_rot = normalize_rotation(anchor_rotation)
    placed_rot = normalize_rotation(placed_rotation)
    return EdgeCheck(
        anchor_shape=anchor_shape,
        anchor_rotation=anchor_rot,
        placed_shape=placed_shape,
        placed_rotation=placed_rot,
        direction=direction,
        anchor_straight=is_edge_straight(anchor_shape, anchor_rot, direction),
        placed_straight=is_edge_straight(placed_shape, placed_rot, direction.opposite),
    )


def edges_compatible(
    anchor_shape: ShapeKind,
    anchor_rotation: float,
    placed_shape: ShapeKind,
    placed_rotation: float,
    direction: Direction,
) -> bool:
    return check_edges(
        anchor_shape, anchor_rotation, placed_shape, placed_rotation, direction
    ).compatible


# =============================================================================
# Data Structures: Tile Graph
# =============================================================================


class TileGraph:
    """
    The tiles of one playing field plus a position index.

    Tiles are stored in an id -> Tile table and located through a separate
    position -> id map. Iteration yields tiles in insertion order, which for a
    builder-made graph is placement order.
    """

    def __init__(self, grid_id: str = "main") -> None:
        self.grid_id = grid_id
        self._tiles: dict[int, Tile] = {}
        self._index: dict[GridPos, int] = {}
        self._next_id = 0

    def __len__(self) -> int:
        return len(self._tiles)

    def __iter__(self) -> Iterator[Tile]:
        return iter(list(self._tiles.values()))

    def __contains__(self, position: object) -> bool:
        return position in self._index

    def __repr__(self) -> str:
        return f"TileGraph({self.grid_id!r}, tiles={len(self)})"

    @property
    def tiles(self) -> tuple[Tile, ...]:
        return tuple(self._tiles.values())

    @property
    def position_index(self) -> Mapping[GridPos, int]:
        return MappingProxyType(self._index)

    def get(self, tile_id: int) -> Tile:
        return self._tiles[tile_id]

    def at(self, position: GridPos) -> Tile | None:
        tile_id = self._index.get(position)
        return None if tile_id is None else self._tiles[tile_id]

    def neighbor(self, position: GridPos, direction: Direction) -> Tile | None:
        return self.at(position.step(direction))

    def add(
        self,
        shape: ShapeKind,
        rotation: float,
        position: GridPos,
        color: Color = WHITE,
    ) -> Tile:
        """
        Insert a new tile and return it.

        Raises:
            ValueError: If the position is already occupied
        """
        existing = self.at(position)
        if existing is not None:
            raise ValueError(
                f"Position already occupied\n"
                f"  Grid: '{self.grid_id}'\n"
                f"  Position: ({position.x}, {position.y})\n"
                f"  Occupied by: {existing.shape.value} #{existing.id}"
            )

        tile = Tile(self._next_id, shape, normalize_rotation(rotation), position, color)
        self._tiles[tile.id] = tile
        self._index[position] = tile.id
        self._next_id += 1
        return tile

    def remove(self, tile_id: int) -> Tile:
        """Remove a tile; removing the newest tile also releases its id."""
        tile = self._tiles.pop(tile_id)
        del self._index[tile.position]
        if tile_id == self._next_id - 1:
            self._next_id -= 1
        return tile

    def clear(self) -> None:
        self._tiles.clear()
        self._index.clear()
        self._next_id = 0

    def copy(self) -> TileGraph:
        clone = TileGraph(self.grid_id)
        clone._tiles = dict(self._tiles)
        clone._index = dict(self._index)
        clone._next_id = self._next_id
        return clone

    def is_connected(self) -> bool:
        """True if every tile reaches every other through occupied cells."""
        if not self._tiles:
            return True

        start = next(iter(self._tiles.values())).position
        seen = {start}
        queue = deque([start])
        while queue:
            pos = queue.popleft()
            for direction in Direction:
                nxt = pos.step(direction)
                if nxt in self._index and nxt not in seen:
                    seen.add(nxt)
                    queue.append(nxt)
        return len(seen) == len(self._tiles)

    def bounds(self) -> tuple[int, int, int, int] | None:
        """Return (min_x, min_y, max_x, max_y), or None for an empty graph."""
        if not self._index:
            return None
        xs = [p.x for p in self._index]
        ys = [p.y for p in self._index]
        return (min(xs), min(ys), max(xs), max(ys))


# =============================================================================
# Presentation Hooks
# =============================================================================


class Presenter:
    """
    Receives notifications after a state change has been committed.

    The default implementation ignores everything; front ends override the
    hooks they care about. Nothing in the core waits on a presenter.
    """

    def tile_placed(self, grid_id: str, tile: Tile) -> None:
        pass

    def tile_removed(self, grid_id: str, tile: Tile) -> None:
        pass

    def graph_cleared(self, grid_id: str) -> None:
        pass

    def cursor_moved(self, grid_id: str, tile: Tile | None) -> None:
        pass

    def token_moved(self, cell: CellPosition, teleported: bool) -> None:
        pass

    def heat_changed(self, cell: CellPosition, visits: int) -> None:
        pass

    def solved(self, moves: int) -> None:
        pass

    def rejected(self, failure: PlacementFailure | MoveFailure) -> None:
        pass


# =============================================================================
# Placement Builder
# =============================================================================


class PlacementOutcome(Enum):
    """What an accepted builder operation did."""

    PLACED = "placed"
    MOVED_TO_EXISTING = "moved_to_existing"  # Target occupied: cursor re-selected it
    UNDONE = "undone"


@dataclass(frozen=True)
class Placement:
    """An accepted builder operation."""

    outcome: PlacementOutcome
    cursor: Tile  # Tile under the cursor afterwards
    tile: Tile | None = None  # Tile inserted (PLACED) or removed (UNDONE)


@dataclass(frozen=True)
class PlacementFailure:
    """A rejected builder operation. The graph and cursor are unchanged."""

    reason: FailureReason
    position: GridPos | None
    details: str = ""


PlacementResult = Placement | PlacementFailure


class PlacementBuilder:
    """
    Grows a connected tile graph one step at a time from a cursor.

    Placement history is a single ordered sequence; each entry remembers the
    anchor it was placed from so undo can put the cursor back exactly.
    """

    def __init__(self, grid_id: str = "main", presenter: Presenter | None = None) -> None:
        self.graph = TileGraph(grid_id)
        self.presenter = presenter if presenter is not None else Presenter()
        self._cursor_id: int | None = None
        self._history: list[tuple[int, int]] = []  # (placed id, anchor id), root anchors itself

    @property
    def cursor(self) -> Tile | None:
        if self._cursor_id is None:
            return None
        return self.graph.get(self._cursor_id)

    @property
    def history(self) -> tuple[Tile, ...]:
        """Placed tiles, oldest first."""
        return tuple(self.graph.get(tile_id) for tile_id, _ in self._history)

    def place_first(self, position: GridPos, pending: PendingTile) -> PlacementResult:
        """Place the root tile. Only valid while the graph is empty."""
        if len(self.graph) > 0:
            return self._reject(
                PlacementFailure(
                    FailureReason.GRAPH_NOT_EMPTY,
                    position,
                    f"graph '{self.graph.grid_id}' already has {len(self.graph)} tile(s)",
                )
            )

        tile = self.graph.add(pending.shape, pending.rotation, position, pending.color)
        self._history.append((tile.id, tile.id))
        self._cursor_id = tile.id
        logger.info("First tile placed: %s at (%d, %d)", tile.shape.value, position.x, position.y)

        self.presenter.tile_placed(self.graph.grid_id, tile)
        self.presenter.cursor_moved(self.graph.grid_id, tile)
        return Placement(PlacementOutcome.PLACED, tile, tile)

    def place_adjacent(self, direction: Direction, pending: PendingTile) -> PlacementResult:
        """
        Place the pending tile next to the cursor, or re-select the tile
        already there.
        """
        anchor = self.cursor
        if anchor is None:
            return self._reject(
                PlacementFailure(FailureReason.NO_CURSOR, None, "place a first tile before building")
            )

        target = anchor.position.step(direction)
        existing = self.graph.at(target)
        if existing is not None:
            self._cursor_id = existing.id
            logger.debug("Moved to existing tile #%d at (%d, %d)", existing.id, target.x, target.y)
            self.presenter.cursor_moved(self.graph.grid_id, existing)
            return Placement(PlacementOutcome.MOVED_TO_EXISTING, existing)

        check = check_edges(
            anchor.shape, anchor.rotation, pending.shape, pending.rotation, direction
        )
        if not check.compatible:
            logger.info("Edge mismatch: %s", check.describe())
            return self._reject(
                PlacementFailure(FailureReason.INCOMPATIBLE_EDGE, target, check.describe())
            )

        tile = self.graph.add(pending.shape, pending.rotation, target, pending.color)
        self._history.append((tile.id, anchor.id))
        self._cursor_id = tile.id
        logger.debug(
            "Placed %s(rot:%d°) at (%d, %d). Total: %d",
            tile.shape.value,
            tile.rotation,
            target.x,
            target.y,
            len(self.graph),
        )

        self.presenter.tile_placed(self.graph.grid_id, tile)
        self.presenter.cursor_moved(self.graph.grid_id, tile)
        return Placement(PlacementOutcome.PLACED, tile, tile)

    def undo(self) -> PlacementResult:
        """Remove the most recently placed tile, never the root."""
        if len(self._history) <= 1:
            cursor = self.cursor
            return self._reject(
                PlacementFailure(
                    FailureReason.CANNOT_UNDO_ROOT,
                    cursor.position if cursor else None,
                    "can't undo the first tile, clear instead",
                )
            )

        tile_id, anchor_id = self._history.pop()
        removed = self.graph.remove(tile_id)
        self._cursor_id = anchor_id
        cursor = self.graph.get(anchor_id)
        logger.debug("Undid tile #%d - tiles remaining: %d", removed.id, len(self.graph))

        self.presenter.tile_removed(self.graph.grid_id, removed)
        self.presenter.cursor_moved(self.graph.grid_id, cursor)
        return Placement(PlacementOutcome.UNDONE, cursor, removed)

    def clear(self) -> None:
        """Empty the graph and forget the cursor and history."""
        count = len(self.graph)
        self.graph.clear()
        self._history.clear()
        self._cursor_id = None
        logger.info("Cleared %d tile(s)", count)

        self.presenter.graph_cleared(self.graph.grid_id)
        self.presenter.cursor_moved(self.graph.grid_id, None)

    @staticmethod
    def rotate(pending: PendingTile) -> PendingTile:
        return pending.rotated()

    def _reject(self, failure: PlacementFailure) -> PlacementFailure:
        self.presenter.rejected(failure)
        return failure


class BuilderSession:
    """
    Routes input commands to a builder and carries the pending tile between
    requests.
    """

    def __init__(
        self,
        builder: PlacementBuilder | None = None,
        pending: PendingTile | None = None,
        origin: GridPos = GridPos(0, 0),
    ) -> None:
        self.builder = builder if builder is not None else PlacementBuilder()
        self.pending = pending if pending is not None else PendingTile(ShapeKind.SQUARE)
        self.origin = origin

    def select_shape(self, shape: ShapeKind) -> None:
        self.pending = self.pending.with_shape(shape)

    def select_color(self, color: Color) -> None:
        self.pending = self.pending.with_color(color)

    def start(self, position: GridPos | None = None) -> PlacementResult:
        return self.builder.place_first(position if position is not None else self.origin, self.pending)

    def handle(self, command: Command) -> PlacementResult | None:
        """
        Apply one command. Returns the builder result, or None for commands
        that only touch the pending tile or reset everything.
        """
        direction = command.direction
        if direction is not None:
            return self.builder.place_adjacent(direction, self.pending)
        if command is Command.ROTATE:
            self.pending = self.builder.rotate(self.pending)
            logger.debug("Next tile will be rotated %d degrees", self.pending.rotation)
            return None
        if command is Command.UNDO:
            return self.builder.undo()
        if command in (Command.CLEAR, Command.RESET):
            self.builder.clear()
            self.pending = PendingTile(self.pending.shape, 0, self.pending.color)
            return None
        raise ValueError(f"Unsupported builder command: {command}")


# =============================================================================
# Portals and Playfields
# =============================================================================


@dataclass(frozen=True)
class CellPosition:
    """A cell within a specific grid."""

    grid_id: str
    x: int
    y: int

    @classmethod
    def of(cls, grid_id: str, position: GridPos) -> CellPosition:
        return cls(grid_id, position.x, position.y)

    @property
    def pos(self) -> GridPos:
        return GridPos(self.x, self.y)

    def step(self, direction: Direction) -> CellPosition:
        dx, dy = direction.delta
        return CellPosition(self.grid_id, self.x + dx, self.y + dy)


@dataclass(frozen=True)
class PortalBinding:
    """Leaving `source` in one of `exits` relocates the token to `target`."""

    source: CellPosition
    exits: frozenset[Direction]
    target: CellPosition

    def mirrored(self) -> PortalBinding:
        """The binding that leads back, leaving through the opposite sides."""
        return PortalBinding(
            self.target, frozenset(d.opposite for d in self.exits), self.source
        )


def bidirectional_portal(
    source: CellPosition, exits: Iterable[Direction], target: CellPosition
) -> tuple[PortalBinding, PortalBinding]:
    """Build a portal and its way back."""
    forward = PortalBinding(source, frozenset(exits), target)
    return (forward, forward.mirrored())


class Playfield:
    """
    One or more tile graphs plus the portal bindings between them.

    Portals are a table keyed by (cell, direction); each key leads to exactly
    one destination cell.
    """

    def __init__(
        self,
        grids: Iterable[TileGraph],
        portals: Iterable[PortalBinding] = (),
    ) -> None:
        self.grids: dict[str, TileGraph] = {}
        for graph in grids:
            if graph.grid_id in self.grids:
                raise ValueError(f"Duplicate grid id: '{graph.grid_id}'")
            self.grids[graph.grid_id] = graph

        self._bindings: list[PortalBinding] = []
        self._portals: dict[tuple[CellPosition, Direction], CellPosition] = {}
        for binding in portals:
            self._add_portal(binding)

    @property
    def portals(self) -> tuple[PortalBinding, ...]:
        return tuple(self._bindings)

    def _add_portal(self, binding: PortalBinding) -> None:
        for end, label in ((binding.source, "source"), (binding.target, "target")):
            if end.grid_id not in self.grids:
                raise ValueError(
                    f"Portal {label} names an unknown grid\n"
                    f"  Grid: '{end.grid_id}'\n"
                    f"  Available grids: {', '.join(sorted(self.grids))}"
                )
            if self.tile_at(end) is None:
                raise ValueError(
                    f"Portal {label} is not on a tile\n"
                    f"  Grid: '{end.grid_id}'\n"
                    f"  Position: ({end.x}, {end.y})"
                )
        if not binding.exits:
            raise ValueError(f"Portal at {binding.source} has no exit directions")

        for direction in binding.exits:
            key = (binding.source, direction)
            if key in self._portals:
                raise ValueError(
                    f"Portal exit bound twice\n"
                    f"  Cell: {binding.source.grid_id}({binding.source.x}, {binding.source.y})\n"
                    f"  Direction: {direction.value}\n"
                    f"  Existing target: {self._portals[key]}\n"
                    f"  New target: {binding.target}"
                )
            self._portals[key] = binding.target
        self._bindings.append(binding)

    def tile_at(self, cell: CellPosition) -> Tile | None:
        graph = self.grids.get(cell.grid_id)
        if graph is None:
            return None
        return graph.at(cell.pos)

    def portal_target(self, cell: CellPosition, direction: Direction) -> CellPosition | None:
        return self._portals.get((cell, direction))

    def is_portal(self, cell: CellPosition) -> bool:
        return any(binding.source == cell for binding in self._bindings)

    def cells(self) -> Iterator[tuple[CellPosition, Tile]]:
        for grid_id, graph in self.grids.items():
            for tile in graph:
                yield CellPosition.of(grid_id, tile.position), tile

    def __len__(self) -> int:
        return sum(len(graph) for graph in self.grids.values())


# =============================================================================
# Traversal Engine
# =============================================================================


class MoveOutcome(Enum):
    """How an accepted move relocated the token."""

    STEP = "step"  # Adjacent cell in the same grid
    TELEPORT = "teleport"  # Across a portal binding


@dataclass(frozen=True)
class Move:
    """An accepted move."""

    outcome: MoveOutcome
    position: CellPosition
    visits: int  # Visit count of the destination after the move
    solved: bool


@dataclass(frozen=True)
class MoveFailure:
    """A rejected move. Token and visit counts are unchanged."""

    reason: FailureReason
    position: CellPosition
    details: str = ""


MoveResult = Move | MoveFailure

HEAT_LEVELS = 5


def heat_level(visits: int, levels: int = HEAT_LEVELS) -> int:
    """Bucket a visit count for color mapping: 0 is unvisited, saturating at levels - 1."""
    return max(0, min(visits, levels - 1))


class TraversalEngine:
    """
    Moves a single token over a playfield, counting visits per tile.

    The puzzle is solved once every tile has been occupied at least once.
    The playfield is never modified.
    """

    def __init__(
        self,
        field: Playfield | TileGraph,
        start: CellPosition | GridPos | None = None,
        presenter: Presenter | None = None,
    ) -> None:
        self.playfield = field if isinstance(field, Playfield) else Playfield([field])
        self.presenter = presenter if presenter is not None else Presenter()
        self.start = self._resolve_start(start)

        self.token = self.start
        self.moves = 0
        self.solved = False
        self._visits: dict[tuple[str, int], int] = {}
        self.reset()

    def _resolve_start(self, start: CellPosition | GridPos | None) -> CellPosition:
        if len(self.playfield) == 0:
            raise ValueError("Cannot start a traversal on an empty playfield")

        if start is None:
            # First starting piece in placement order, else the first tile
            cells = list(self.playfield.cells())
            for cell, tile in cells:
                if tile.is_starting_piece:
                    return cell
            return cells[0][0]

        if isinstance(start, GridPos):
            start = CellPosition.of(next(iter(self.playfield.grids)), start)

        if self.playfield.tile_at(start) is None:
            raise ValueError(
                f"Start position is not on a tile\n"
                f"  Grid: '{start.grid_id}'\n"
                f"  Position: ({start.x}, {start.y})"
            )
        return start

    def reset(self) -> None:
        """Token back to start, all counts cleared, start counted once."""
        self._visits = {
            (cell.grid_id, tile.id): 0 for cell, tile in self.playfield.cells()
        }
        self.token = self.start
        self.moves = 0
        self.solved = False
        self._visit(self.start)
        self._update_solved()
        logger.debug("Traversal reset at %s", self.start)

        self.presenter.token_moved(self.token, False)
        for cell, _ in self.playfield.cells():
            self.presenter.heat_changed(cell, self.visit_count(cell))
        if self.solved:
            self.presenter.solved(self.moves)

    def move(self, direction: Direction) -> MoveResult:
        """Step or teleport the token in the given direction."""
        if self.solved:
            return self._reject(
                MoveFailure(
                    FailureReason.PUZZLE_ALREADY_SOLVED,
                    self.token,
                    "puzzle is solved, reset to play again",
                )
            )

        target = self.token.step(direction)
        outcome = MoveOutcome.STEP
        if self.playfield.tile_at(target) is None:
            portal = self.playfield.portal_target(self.token, direction)
            if portal is None:
                return self._reject(
                    MoveFailure(
                        FailureReason.BLOCKED_MOVE,
                        self.token,
                        f"no tile {direction.value} of ({self.token.x}, {self.token.y})",
                    )
                )
            logger.info("Teleporting from %s to %s", self.token, portal)
            target = portal
            outcome = MoveOutcome.TELEPORT

        self.token = target
        self.moves += 1
        visits = self._visit(target)
        self._update_solved()

        self.presenter.token_moved(target, outcome is MoveOutcome.TELEPORT)
        self.presenter.heat_changed(target, visits)
        if self.solved:
            logger.info("Puzzle solved in %d moves", self.moves)
            self.presenter.solved(self.moves)
        return Move(outcome, target, visits, self.solved)

    def handle(self, command: Command) -> MoveResult | None:
        """Apply one command: a direction moves, RESET restarts."""
        direction = command.direction
        if direction is not None:
            return self.move(direction)
        if command is Command.RESET:
            self.reset()
            return None
        raise ValueError(f"Unsupported traversal command: {command}")

    def visit_count(self, cell: CellPosition) -> int:
        tile = self.playfield.tile_at(cell)
        if tile is None:
            raise ValueError(f"No tile at {cell}")
        return self._visits[(cell.grid_id, tile.id)]

    def heat_map(self) -> dict[CellPosition, int]:
        return {
            cell: self._visits[(cell.grid_id, tile.id)]
            for cell, tile in self.playfield.cells()
        }

    def unvisited(self) -> list[CellPosition]:
        return [cell for cell, visits in self.heat_map().items() if visits == 0]

    def _visit(self, cell: CellPosition) -> int:
        key = (cell.grid_id, self.playfield.grids[cell.grid_id].position_index[cell.pos])
        self._visits[key] += 1
        return self._visits[key]

    def _update_solved(self) -> None:
        self.solved = all(count >= 1 for count in self._visits.values())

    def _reject(self, failure: MoveFailure) -> MoveFailure:
        logger.debug("Move rejected: %s (%s)", failure.reason.value, failure.details)
        self.presenter.rejected(failure)
        return failure
