"""Stateless rule engine for the 2048 sliding-tile game."""

from tile2048.game import (
    BOARD_SIZE,
    WIN_VALUE,
    GameState,
    GameStatus,
    can_move,
    check_game_over,
    check_win_condition,
    init_game,
    make_move,
)
from tile2048.grid import (
    Cell,
    Grid,
    Tile,
    TileIdCounter,
    clone_grid,
    count_tiles,
    create_grid,
    get_empty_cells,
    get_tile_at,
    grid_from_values,
    grid_to_values,
    iter_tiles,
    reset_tile_ids,
    set_tile_at,
)
from tile2048.tiles import (
    Direction,
    MoveResult,
    can_merge,
    create_tile,
    merge_tiles,
    move_tiles,
    spawn_random_tile,
)

__all__ = [
    "BOARD_SIZE",
    "WIN_VALUE",
    "Cell",
    "Direction",
    "GameState",
    "GameStatus",
    "Grid",
    "MoveResult",
    "Tile",
    "TileIdCounter",
    "can_merge",
    "can_move",
    "check_game_over",
    "check_win_condition",
    "clone_grid",
    "count_tiles",
    "create_grid",
    "create_tile",
    "get_empty_cells",
    "get_tile_at",
    "grid_from_values",
    "grid_to_values",
    "init_game",
    "iter_tiles",
    "make_move",
    "merge_tiles",
    "move_tiles",
    "reset_tile_ids",
    "set_tile_at",
    "spawn_random_tile",
]
