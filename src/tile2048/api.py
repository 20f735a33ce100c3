import logging
import os
from typing import List, Optional

import uvicorn
from fastapi import FastAPI, HTTPException, Request
from pydantic import BaseModel, Field
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from tile2048.game import GameState, GameStatus, init_game, make_move
from tile2048.grid import grid_from_values, grid_to_values, iter_tiles
from tile2048.render import highlight_tiles
from tile2048.tiles import Direction

logger = logging.getLogger(__name__)

RATE_LIMIT = os.getenv("TILE2048_RATE_LIMIT", "100/minute")

# Initialize the rate limiter
limiter = Limiter(key_func=get_remote_address)
app = FastAPI(
    title="2048 Game API",
    description="A stateless API for playing the 2048 game. "\
                "Manage your game state (board, score, status) on the client side.",
    version="1.0.0"
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# --- Pydantic Models for API requests and responses ---

class TileData(BaseModel):
    """A tile as seen by a rendering client."""
    id: int = Field(..., ge=1, description="Identifier, unique within the returned board.")
    value: int = Field(..., ge=2, description="Tile value (a power of two).")
    row: int = Field(..., ge=0)
    col: int = Field(..., ge=0)
    new: bool = Field(default=False, description="True for the tile spawned this turn.")
    merged: bool = Field(default=False, description="True for tiles produced by a merge this turn.")


class GameStateData(BaseModel):
    """Represents the complete state of a game instance."""
    board: List[List[int]] = Field(..., description="The N x N game board, 0 for empty cells.")
    tiles: List[TileData] = Field(default_factory=list, description="Occupied cells in row-major order.")
    score: int = Field(..., ge=0, description="Current score of the game.")
    status: GameStatus = Field(..., description="Current progress state of the game (playing, won, lost).")
    has_won: bool = Field(..., description="True once 2048 has been reached, even after a later loss.")
    board_size: int = Field(..., gt=0, description="The dimension N of the N x N board.")


class MoveRequestData(BaseModel):
    """Data required to make a move."""
    board: List[List[int]] = Field(..., description="Current N x N game board state before the move.")
    score: int = Field(default=0, ge=0, description="Current score before the move.")
    status: GameStatus = Field(default=GameStatus.PLAYING, description="Current progress state.")
    has_won: bool = Field(default=False, description="Whether the game has already been won.")
    direction: Direction = Field(..., description="Direction of the move (up, down, left, right).")


class MoveResponseData(GameStateData):
    """Response after a move, including the new game state and move effectiveness."""
    moved: bool = Field(
        ...,
        description="True if the move resulted in a change to the board state, False otherwise."
    )
    message: Optional[str] = Field(
        default=None,
        description="An optional message, e.g., if a move was invalid, game ended, or other info."
    )


def to_state_data(state: GameState, previous: Optional[GameState] = None) -> dict:
    """Flattens a snapshot into response fields, flagging highlighted tiles."""
    highlights = highlight_tiles(previous, state)
    tiles = [
        TileData(
            id=tile.id,
            value=tile.value,
            row=tile.position.row,
            col=tile.position.col,
            new=tile.id in highlights.new_ids,
            merged=tile.id in highlights.merged_ids,
        )
        for tile in iter_tiles(state.grid)
    ]
    return dict(
        board=grid_to_values(state.grid),
        tiles=tiles,
        score=state.score,
        status=state.status,
        has_won=state.has_won,
        board_size=state.grid.size,
    )

# --- API Endpoints ---

@app.get("/health", summary="Liveness check")
async def health():
    return {"status": "ok"}


@app.post("/game/new", response_model=GameStateData, summary="Start a New 2048 Game")
@limiter.limit(RATE_LIMIT)
async def start_new_game(request: Request):
    """
    Initializes a new 4x4 game.

    Returns the initial game state: the board with two random tiles,
    score (0), status (playing) and has_won (false).
    """
    state = init_game()
    logger.debug("New game started")
    return GameStateData(**to_state_data(state))


@app.post("/game/move", response_model=MoveResponseData, summary="Make a Move in the Game")
@limiter.limit(RATE_LIMIT)
async def make_game_move(request: Request, request_data: MoveRequestData):
    """
    Processes a player's move in the game.

    Requires the current `board`, `score`, `status`, `has_won` and the
    `direction` of the move.

    The API will:
    1. Slide and merge tiles in the chosen direction.
    2. If the board changed, add a new random tile (2 or 4).
    3. Determine the new game status (playing, won, lost).

    A lost game or a move that changes nothing returns the submitted state with `moved` false.
    """
    try:
        grid = grid_from_values(request_data.board)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Invalid board structure in request: {str(e)}")

    current = GameState(
        grid=grid,
        score=request_data.score,
        status=request_data.status,
        has_won=request_data.has_won,
    )

    try:
        new_state = make_move(current, request_data.direction)
    except Exception as e:
        logger.exception("Unexpected error in /game/move")
        raise HTTPException(status_code=500, detail=f"An unexpected server error occurred while processing the move: {str(e)}")

    moved = new_state is not current
    message: Optional[str] = None
    if current.status == GameStatus.LOST:
        message = "Game Over. No more valid moves."
    elif not moved:
        message = "Move was not effective; board state unchanged."
    elif new_state.status == GameStatus.LOST:
        message = "Game Over. No more valid moves."
    elif new_state.status == GameStatus.WON and not current.has_won:
        message = "Congratulations! You won!"

    if moved:
        data = to_state_data(new_state, previous=current)
    else:
        data = to_state_data(current, previous=current)
    return MoveResponseData(**data, moved=moved, message=message)


def serve():
    """Runs the API with uvicorn, configured from the environment."""
    logging.basicConfig(level=os.getenv("TILE2048_LOG_LEVEL", "INFO").upper(),
                        format='[%(levelname)s] %(message)s')
    uvicorn.run(
        app,
        host=os.getenv("TILE2048_HOST", "127.0.0.1"),
        port=int(os.getenv("TILE2048_PORT", "8000")),
    )


if __name__ == "__main__":
    serve()
