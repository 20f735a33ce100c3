# tiles.py
# Tile creation, random spawning and the directional move/merge algorithm.

import logging
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from tile2048.grid import (
    Cell,
    Grid,
    Tile,
    TileIdCounter,
    clone_grid,
    get_empty_cells,
    iter_tiles,
    set_tile_at,
)

logger = logging.getLogger(__name__)

# Chance that a spawned tile is a 4 instead of a 2.
SPAWN_FOUR_PROBABILITY = 0.1


class Direction(str, Enum):
    """Represents the possible move directions."""
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"


@dataclass
class MoveResult:
    """Outcome of sliding a board in one direction."""
    grid: Grid
    moved: bool
    score_gained: int = 0
    merged_tiles: List[Tile] = field(default_factory=list)


# --- Tile creation ---

def create_tile(value: int, position: Tuple[int, int], tile_ids: TileIdCounter) -> Tile:
    """Allocates a fresh tile with no merge record."""
    return Tile(id=tile_ids.next_id(), value=value, position=Cell(*position))


def merge_tiles(first: Tile, second: Tile, tile_ids: TileIdCounter) -> Tile:
    """
    Combines two equal tiles into a new one.
    Args:
        first (Tile): The tile nearer the direction of travel.
        second (Tile): The tile merging into it.
        tile_ids (TileIdCounter): Counter for the new tile's id.
    Returns:
        Tile: A tile worth the sum of both, placed at ``second``'s position and
              recording the pair it came from.
    """
    return Tile(
        id=tile_ids.next_id(),
        value=first.value + second.value,
        position=Cell(*second.position),
        merged_from=(first, second),
    )


def can_merge(first: Optional[Tile], second: Optional[Tile]) -> bool:
    if first is None or second is None:
        return False
    return first.value == second.value


def spawn_random_tile(grid: Grid, rng: Optional[random.Random] = None) -> Grid:
    """
    Adds one tile (90% chance of 2, 10% chance of 4) to a random empty cell on a copy of the board.
    Args:
        grid (Grid): The current board.
        rng (Optional[random.Random]): Random source. The ``random`` module is used if omitted.
    Returns:
        Grid: A new board with the added tile, or the same board if it has no empty cells.
    """
    rng = rng or random
    empty_cells = get_empty_cells(grid)
    if not empty_cells:
        logger.debug("No empty cell to spawn into")
        return grid

    cell = rng.choice(empty_cells)
    value = 4 if rng.random() < SPAWN_FOUR_PROBABILITY else 2
    return set_tile_at(grid, cell, create_tile(value, cell, grid.tile_ids))


# --- Line Manipulation ---

def _line_cells(size: int, direction: Direction, index: int) -> List[Cell]:
    """
    Cells of one line, ordered from the edge tiles move toward.
    Args:
        size (int): Board dimension.
        direction (Direction): Direction of travel.
        index (int): Row index for LEFT/RIGHT, column index for UP/DOWN.
    Returns:
        List[Cell]: The line's coordinates, front first.
    Raises:
        ValueError: If an invalid direction is specified.
    """
    forward = range(size)
    backward = range(size - 1, -1, -1)
    if direction == Direction.LEFT:
        return [Cell(index, col) for col in forward]
    if direction == Direction.RIGHT:
        return [Cell(index, col) for col in backward]
    if direction == Direction.UP:
        return [Cell(row, index) for row in forward]
    if direction == Direction.DOWN:
        return [Cell(row, index) for row in backward]
    raise ValueError(f"Invalid direction: {direction!r}")


def _process_line(line: List[Optional[Tile]],
                  tile_ids: TileIdCounter) -> Tuple[List[Optional[Tile]], int, List[Tile]]:
    """
    Collapses a line toward its front and merges equal neighbours once each.
    Args:
        line (List[Optional[Tile]]): Tiles in travel order, front first.
        tile_ids (TileIdCounter): Counter for merged tiles.
    Returns:
        Tuple[List[Optional[Tile]], int, List[Tile]]: The processed line padded with None,
            the score gained, and the tiles created by merging.
    """
    tiles = [tile for tile in line if tile is not None]
    result: List[Optional[Tile]] = []
    merged: List[Tile] = []
    score = 0

    i = 0
    while i < len(tiles):
        if i + 1 < len(tiles) and can_merge(tiles[i], tiles[i + 1]):
            new_tile = merge_tiles(tiles[i], tiles[i + 1], tile_ids)
            result.append(new_tile)
            merged.append(new_tile)
            score += new_tile.value
            i += 2  # Both tiles are consumed
        else:
            result.append(tiles[i])
            i += 1

    result += [None] * (len(line) - len(result))
    return result, score, merged


def _same_values(first: Grid, second: Grid) -> bool:
    for row_a, row_b in zip(first.cells, second.cells):
        for tile_a, tile_b in zip(row_a, row_b):
            if (tile_a.value if tile_a else 0) != (tile_b.value if tile_b else 0):
                return False
    return True


# --- Core Move Processing ---

def move_tiles(grid: Grid, direction: Direction) -> MoveResult:
    """
    Slides every line of the board in one direction, merging equal neighbours.
    The input board is not modified.
    Args:
        grid (Grid): The board before the move.
        direction (Direction): Direction of travel.
    Returns:
        MoveResult: The resulting board, whether any value changed, the score
                    gained and the tiles created by merges.
    Raises:
        ValueError: If an invalid direction is specified.
    """
    direction = Direction(direction)
    work = clone_grid(grid)
    # Merge records only live for the turn that produced them.
    for tile in iter_tiles(work):
        tile.merged_from = None

    total_score = 0
    merged_tiles: List[Tile] = []
    for index in range(work.size):
        cells = _line_cells(work.size, direction, index)
        line = [work.cells[cell.row][cell.col] for cell in cells]
        processed, score, merged = _process_line(line, work.tile_ids)

        for cell, tile in zip(cells, processed):
            if tile is not None:
                tile.position = cell
            work.cells[cell.row][cell.col] = tile

        total_score += score
        merged_tiles.extend(merged)

    moved = not _same_values(grid, work)
    if not moved:
        logger.debug("Move %s left the board unchanged", direction.value)
    return MoveResult(grid=work, moved=moved, score_gained=total_score, merged_tiles=merged_tiles)
