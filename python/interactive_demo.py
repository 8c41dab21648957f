"""
Interactive demo for tilewalk.
Build a tile graph from the keyboard, or walk a level until every tile is visited.
"""

import logging
import sys

import readchar
from rich.console import Console
from rich.live import Live
from rich.panel import Panel
from rich.text import Text

from ascii_render import render_graph, render_playfield, shape_glyph, tile_colorizer
from level_parser import TELEPORT_LEVEL, parse_playfield, teleport_playfield
from level_records import dumps_level, export_level
from tile_types import PALETTE, Command, ShapeKind, Tile
from tilewalk import (
    BuilderSession,
    CellPosition,
    MoveFailure,
    Playfield,
    PlacementFailure,
    Presenter,
    TraversalEngine,
)

_MOVE_KEYS = {
    "w": Command.UP,
    "s": Command.DOWN,
    "a": Command.LEFT,
    "d": Command.RIGHT,
    readchar.key.UP: Command.UP,
    readchar.key.DOWN: Command.DOWN,
    readchar.key.LEFT: Command.LEFT,
    readchar.key.RIGHT: Command.RIGHT,
}

_SHAPE_KEYS = {
    "1": ShapeKind.SQUARE,
    "2": ShapeKind.TRIANGLE,
    "3": ShapeKind.RIGHT_TRIANGLE,
}


class StatusPresenter(Presenter):
    """Turns engine notifications into a one-line status message."""

    def __init__(self) -> None:
        self.message = "Ready"

    def tile_placed(self, grid_id: str, tile: Tile) -> None:
        self.message = (
            f"✓ Placed {tile.shape.value}({tile.rotation}°) at "
            f"({tile.position.x}, {tile.position.y})"
        )

    def tile_removed(self, grid_id: str, tile: Tile) -> None:
        self.message = f"✓ Removed {tile.shape.value} #{tile.id}"

    def graph_cleared(self, grid_id: str) -> None:
        self.message = "Cleared all tiles"

    def token_moved(self, cell: CellPosition, teleported: bool) -> None:
        verb = "Teleported" if teleported else "Moved"
        self.message = f"✓ {verb} to {cell.grid_id}({cell.x}, {cell.y})"

    def solved(self, moves: int) -> None:
        self.message = f"★ Solved in {moves} moves! Press R to play again"

    def rejected(self, failure: PlacementFailure | MoveFailure) -> None:
        self.message = f"✗ {failure.reason.value}"
        if failure.details:
            self.message += f" ({failure.details})"


class BuildDemo:
    """Interactive tile builder."""

    def __init__(self) -> None:
        self.presenter = StatusPresenter()
        self.session = BuilderSession()
        self.session.builder.presenter = self.presenter
        self.color_index = 0
        self.console = Console()
        self.exported: str | None = None

    def generate_display(self) -> Panel:
        builder = self.session.builder
        pending = self.session.pending
        cursor = builder.cursor

        status = Text()
        status.append("Next tile: ", style="bold")
        status.append_text(
            Text.from_ansi(tile_colorizer(pending.color)(shape_glyph(pending.shape, pending.rotation)))
        )
        status.append(f" {pending.shape.value} {pending.rotation}°\n")
        status.append("Tiles: ", style="bold")
        status.append(f"{len(builder.graph)}\n\n")

        highlight = None if cursor is None else CellPosition.of(builder.graph.grid_id, cursor.position)
        grid_text = "\n".join(render_graph(builder.graph, highlight=highlight))
        status.append(Text.from_ansi(grid_text))
        status.append("\n\n")
        status.append("Keys:\n", style="bold cyan")
        status.append("  Enter - Place first tile    WASD/arrows - Place or move cursor\n")
        status.append("  1/2/3 - Square/Triangle/Right triangle    C - Cycle color\n")
        status.append("  R - Rotate    Backspace - Undo    X - Clear\n")
        status.append("  E - Export level    P - Play this level    Q - Quit\n\n")

        status.append("─" * 40 + "\n", style="dim")
        status.append("Status: ", style="bold")
        status.append(self.presenter.message)

        return Panel(status, title="Tilewalk Builder", border_style="green", width=80)

    def handle_key(self, key: str) -> None:
        lowered = key.lower()
        if key in _MOVE_KEYS or lowered in _MOVE_KEYS:
            self.session.handle(_MOVE_KEYS.get(key) or _MOVE_KEYS[lowered])
        elif key in _SHAPE_KEYS:
            self.session.select_shape(_SHAPE_KEYS[key])
            self.presenter.message = f"Selected {self.session.pending.shape.value}"
        elif lowered == "c":
            self.color_index = (self.color_index + 1) % len(PALETTE)
            self.session.select_color(PALETTE[self.color_index])
            self.presenter.message = "Color changed"
        elif lowered == "r":
            self.session.handle(Command.ROTATE)
            self.presenter.message = f"Rotation {self.session.pending.rotation}°"
        elif key == readchar.key.BACKSPACE:
            self.session.handle(Command.UNDO)
        elif lowered == "x":
            self.session.handle(Command.CLEAR)
        elif key == readchar.key.ENTER:
            self.session.start()
        elif lowered == "e":
            self.exported = dumps_level(export_level("Built level", self.session.builder.history))
            self.presenter.message = f"Exported {len(self.session.builder.graph)} shapes"
        else:
            self.presenter.message = f"Unknown key: {repr(key)}"

    def run(self) -> None:
        """Run the builder until Q is pressed or P hands over to play mode."""
        play = False
        with Live(self.generate_display(), console=self.console, refresh_per_second=4) as live:
            try:
                while True:
                    live.update(self.generate_display())
                    key = readchar.readkey()

                    if key.lower() == "q":
                        break
                    if key.lower() == "p":
                        if len(self.session.builder.graph) == 0:
                            self.presenter.message = "✗ Nothing to play yet"
                            continue
                        play = True
                        break
                    self.handle_key(key)
            except KeyboardInterrupt:
                self.presenter.message = "Interrupted by user"
                live.update(self.generate_display())

        if self.exported is not None:
            self.console.print(self.exported)
        if play:
            PlayDemo(Playfield([self.session.builder.graph.copy()])).run()


class PlayDemo:
    """Interactive traversal puzzle."""

    def __init__(self, playfield: Playfield) -> None:
        self.presenter = StatusPresenter()
        self.engine = TraversalEngine(playfield, presenter=self.presenter)
        self.console = Console()

    def generate_display(self) -> Panel:
        engine = self.engine
        token = engine.token

        status = Text()
        status.append("Token: ", style="bold")
        status.append(f"{token.grid_id}({token.x}, {token.y})\n")
        status.append("Moves: ", style="bold")
        status.append(f"{engine.moves}    ")
        status.append("Unvisited: ", style="bold")
        status.append(f"{len(engine.unvisited())}\n\n")

        grid_text = render_playfield(engine.playfield, terminal_width=76, highlight=token, heat=engine.heat_map())
        status.append(Text.from_ansi(grid_text))
        status.append("\n")
        status.append("Keys:\n", style="bold cyan")
        status.append("  WASD/arrows - Move\n")
        status.append("  R - Reset\n")
        status.append("  Q - Quit\n\n")

        status.append("─" * 40 + "\n", style="dim")
        status.append("Status: ", style="bold")
        status.append(self.presenter.message)

        border = "yellow" if engine.solved else "green"
        return Panel(status, title="Tilewalk", border_style=border, width=80)

    def run(self) -> None:
        with Live(self.generate_display(), console=self.console, refresh_per_second=4) as live:
            try:
                while True:
                    live.update(self.generate_display())
                    key = readchar.readkey()

                    if key.lower() == "q":
                        self.presenter.message = "Quitting..."
                        live.update(self.generate_display())
                        break
                    elif key.lower() == "r":
                        self.engine.handle(Command.RESET)
                        self.presenter.message = "Level reset"
                    elif key in _MOVE_KEYS or key.lower() in _MOVE_KEYS:
                        self.engine.handle(_MOVE_KEYS.get(key) or _MOVE_KEYS[key.lower()])
                    else:
                        self.presenter.message = f"Unknown key: {repr(key)}"

            except KeyboardInterrupt:
                self.presenter.message = "Interrupted by user"
                live.update(self.generate_display())


LAYOUTS = dict(
    square = dict(main = 'S* S|S S'),
    ring = dict(main = 'S* S S|S _ S|R90 S R180'),
    wedge = dict(main = '_ R270 S R180|R270* S S S|S S S R90'),
    teleport = TELEPORT_LEVEL,
)


def load_layout(name: str) -> Playfield:
    if name == "teleport":
        return teleport_playfield()
    return parse_playfield(LAYOUTS[name])


if __name__ == "__main__":
    if len(sys.argv) > 1 and sys.argv[1] == 'sublime':
        # Running from IDE - just render the initial state
        logging.basicConfig(level=logging.DEBUG, format='%(levelname)s: %(message)s')

        print('Running from IDE - rendering initial state')
        print()

        engine = TraversalEngine(load_layout(sys.argv[2] if len(sys.argv) > 2 else 'teleport'))
        print(render_playfield(engine.playfield, highlight=engine.token, heat=engine.heat_map()))
    elif len(sys.argv) > 1 and sys.argv[1] == 'build':
        BuildDemo().run()
    else:
        PlayDemo(load_layout(sys.argv[1] if len(sys.argv) > 1 else 'square')).run()
