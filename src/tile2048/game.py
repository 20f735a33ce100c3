# game.py
# Turn orchestration: apply a move, spawn a tile, evaluate win and loss.

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from tile2048.grid import Grid, TileIdCounter, create_grid, get_empty_cells, iter_tiles
from tile2048.tiles import Direction, move_tiles, spawn_random_tile

logger = logging.getLogger(__name__)

BOARD_SIZE = 4
WIN_VALUE = 2048


class GameStatus(str, Enum):
    """Represents the current progress state of the game."""
    PLAYING = "playing"
    WON = "won"
    LOST = "lost"


@dataclass(frozen=True)
class GameState:
    """Snapshot of the game after one turn. Never modified once returned."""
    grid: Grid
    score: int = 0
    status: GameStatus = GameStatus.PLAYING
    has_won: bool = False


def init_game(tile_ids: Optional[TileIdCounter] = None,
              rng: Optional[random.Random] = None) -> GameState:
    """
    Starts a new game on an empty 4x4 board with two random tiles.
    Args:
        tile_ids (Optional[TileIdCounter]): Counter to reuse. It is reset before use.
        rng (Optional[random.Random]): Random source for the initial tiles.
    Returns:
        GameState: Score 0, status PLAYING, has_won False.
    """
    if tile_ids is None:
        tile_ids = TileIdCounter()
    tile_ids.reset()

    grid = create_grid(BOARD_SIZE, tile_ids)
    grid = spawn_random_tile(grid, rng)
    grid = spawn_random_tile(grid, rng)
    return GameState(grid=grid)


# --- Game State Checks ---

def check_win_condition(grid: Grid) -> bool:
    """True if any tile has reached the winning value."""
    return any(tile.value >= WIN_VALUE for tile in iter_tiles(grid))


def can_move(grid: Grid) -> bool:
    """
    Checks whether any move can still change the board.
    Args:
        grid (Grid): The board to check.
    Returns:
        bool: True if a cell is empty or two orthogonal neighbours hold equal values.
    """
    if get_empty_cells(grid):
        return True

    n = grid.size
    for row in range(n):
        for col in range(n):
            value = grid.cells[row][col].value
            if col < n - 1 and grid.cells[row][col + 1].value == value:
                return True
            if row < n - 1 and grid.cells[row + 1][col].value == value:
                return True
    return False


def check_game_over(grid: Grid) -> bool:
    return not can_move(grid)


def make_move(state: GameState, direction: Direction,
              rng: Optional[random.Random] = None) -> GameState:
    """
    Plays one turn.
    Args:
        state (GameState): The current snapshot.
        direction (Direction): Direction to slide.
        rng (Optional[random.Random]): Random source for the spawned tile.
    Returns:
        GameState: ``state`` itself when the game is lost or the move changes nothing,
                   otherwise a new snapshot.
    Raises:
        ValueError: If an invalid direction is specified.
    """
    if state.status == GameStatus.LOST:
        return state

    result = move_tiles(state.grid, direction)
    if not result.moved:
        return state

    grid = spawn_random_tile(result.grid, rng)
    score = state.score + result.score_gained
    status = state.status
    has_won = state.has_won

    if not has_won and check_win_condition(grid):
        has_won = True
        status = GameStatus.WON
        logger.info("Reached %d with score %d", WIN_VALUE, score)

    # Evaluated after the win check, so a loss overrides a simultaneous win.
    if check_game_over(grid):
        status = GameStatus.LOST
        logger.info("No moves left, final score %d", score)

    return GameState(grid=grid, score=score, status=status, has_won=has_won)
