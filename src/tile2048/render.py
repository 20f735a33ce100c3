# render.py
# Stateless helpers for presentation layers: which tiles to highlight, and a text board.

from typing import FrozenSet, NamedTuple, Optional

from tile2048.game import GameState, GameStatus
from tile2048.grid import Grid, count_tiles, iter_tiles


class TileHighlights(NamedTuple):
    """Tile ids to style as freshly spawned or freshly merged."""
    new_ids: FrozenSet[int] = frozenset()
    merged_ids: FrozenSet[int] = frozenset()


def highlight_tiles(previous: Optional[GameState], current: GameState) -> TileHighlights:
    """
    Derives highlight sets by diffing two consecutive snapshots.

    Every tile counts as new when there is no previous snapshot. Otherwise, if
    the tile count went up, the newest tile is the one with the highest id.
    Merged tiles are the ones still carrying a merge record.
    """
    tiles = list(iter_tiles(current.grid))
    if previous is None:
        new_ids = frozenset(tile.id for tile in tiles)
    elif len(tiles) > count_tiles(previous.grid):
        new_ids = frozenset([max(tile.id for tile in tiles)])
    else:
        new_ids = frozenset()

    merged_ids = frozenset(tile.id for tile in tiles if tile.merged_from)
    return TileHighlights(new_ids=new_ids, merged_ids=merged_ids)


def format_board(grid: Grid, highlights: TileHighlights = TileHighlights()) -> str:
    """Text board, one row per line. New tiles get a ``*`` suffix, merged tiles a ``+``."""
    lines = []
    for row in grid.cells:
        cells = []
        for tile in row:
            if tile is None:
                cells.append(f"{'.':>5} ")
                continue
            mark = "*" if tile.id in highlights.new_ids else "+" if tile.id in highlights.merged_ids else " "
            cells.append(f"{tile.value:>5}{mark}")
        lines.append("".join(cells))
    return "\n".join(lines)


def status_line(state: GameState) -> str:
    messages = {
        GameStatus.PLAYING: "Status: playing",
        GameStatus.WON: "YOU WON!",
        GameStatus.LOST: "GAME OVER!",
    }
    return f"Score: {state.score}  {messages[state.status]}"
