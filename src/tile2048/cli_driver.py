# cli_driver.py
# Play 2048 in the terminal on top of the stateless core.

import logging
import os
from typing import Callable, Optional

from tile2048.game import GameState, GameStatus, init_game, make_move
from tile2048.grid import TileIdCounter
from tile2048.render import format_board, highlight_tiles, status_line
from tile2048.tiles import Direction

KEY_MAP = {
    'W': Direction.UP, 'A': Direction.LEFT, 'S': Direction.DOWN, 'D': Direction.RIGHT,
    'UP': Direction.UP, 'LEFT': Direction.LEFT, 'DOWN': Direction.DOWN, 'RIGHT': Direction.RIGHT,
}


def parse_direction(text: str) -> Optional[Direction]:
    """Maps a typed command to a direction, or None if it is not a move."""
    return KEY_MAP.get(text.strip().upper())


def display_board_state(previous: Optional[GameState], state: GameState,
                        output: Callable[[str], None] = print):
    """Prints the board, score, and game status to the console."""
    output("")
    output(status_line(state))
    output(format_board(state.grid, highlight_tiles(previous, state)))
    output("-" * (state.grid.size * 6))


def play(read: Callable[[str], str] = input, output: Callable[[str], None] = print) -> GameState:
    """
    Runs an interactive session until the player quits, declines to continue after a win,
    or declines a new game after a loss.
    Args:
        read (Callable[[str], str]): Prompt function returning a line of input.
        output (Callable[[str], None]): Sink for printed lines.
    Returns:
        GameState: The last state shown.
    """
    tile_ids = TileIdCounter()
    state = init_game(tile_ids)
    previous: Optional[GameState] = None
    continue_after_win = False
    display_board_state(previous, state, output)

    while True:
        if state.status == GameStatus.WON and not continue_after_win:
            answer = read("You reached 2048! Keep playing? (y/n): ").strip().upper()
            if answer != 'Y':
                break
            continue_after_win = True
        elif state.status == GameStatus.LOST:
            answer = read("No more moves possible. New game? (y/n): ").strip().upper()
            if answer != 'Y':
                break
            state, previous, continue_after_win = init_game(tile_ids), None, False
            display_board_state(previous, state, output)
            continue

        command = read("Enter move (W/A/S/D, N for new game, Q to quit): ").strip().upper()
        if command == 'Q':
            output("Quitting game.")
            break
        if command == 'N':
            state, previous, continue_after_win = init_game(tile_ids), None, False
            display_board_state(previous, state, output)
            continue

        direction = parse_direction(command)
        if direction is None:
            output("Invalid input. Use W, A, S, D.")
            continue

        new_state = make_move(state, direction)
        if new_state is state:
            output("Move did not change the board. Try a different direction.")
            continue

        previous, state = state, new_state
        display_board_state(previous, state, output)

    output(f"\nFinal score: {state.score}")
    return state


def main():
    logging.basicConfig(level=os.getenv("TILE2048_LOG_LEVEL", "WARNING").upper(),
                        format='[%(levelname)s] %(message)s')
    try:
        play()
    except (EOFError, KeyboardInterrupt):
        print("\nQuitting game.")


if __name__ == "__main__":
    main()
