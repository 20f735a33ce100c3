# grid.py
# Fixed-size square board of tiles plus the tile identifier counter it draws from.

from dataclasses import dataclass, field, replace
from typing import Iterator, List, NamedTuple, Optional, Sequence, Tuple


class Cell(NamedTuple):
    """A 0-indexed (row, col) coordinate on the board."""
    row: int
    col: int


@dataclass
class Tile:
    """One numbered piece on the board.

    ``merged_from`` holds the two source tiles only for the turn in which
    this tile was produced by a merge.
    """
    id: int
    value: int
    position: Cell
    merged_from: Optional[Tuple["Tile", "Tile"]] = None


class TileIdCounter:
    """Monotonic tile identifier source for one game run."""

    def __init__(self, start: int = 1):
        self._start = start
        self._next = start

    def next_id(self) -> int:
        tile_id = self._next
        self._next += 1
        return tile_id

    def peek(self) -> int:
        return self._next

    def reset(self) -> None:
        self._next = self._start


@dataclass
class Grid:
    """
    An N x N board. Each cell holds a Tile or None.

    The counter is shared by every grid derived from this one, so tiles
    created later in the same game keep getting larger ids.
    """
    size: int
    cells: List[List[Optional[Tile]]]
    tile_ids: TileIdCounter = field(default_factory=TileIdCounter, compare=False, repr=False)


def reset_tile_ids(tile_ids: TileIdCounter) -> None:
    """Restart a counter at its first identifier. Used for new games and test setup."""
    tile_ids.reset()


# --- Construction ---

def create_grid(size: int, tile_ids: Optional[TileIdCounter] = None) -> Grid:
    """
    Creates an empty board.
    Args:
        size (int): The dimension of the N x N board.
        tile_ids (Optional[TileIdCounter]): Counter for the game run. A fresh one is made if omitted.
    Returns:
        Grid: A board with every cell empty.
    Raises:
        ValueError: If size is not a positive integer.
    """
    if not isinstance(size, int) or isinstance(size, bool) or size <= 0:
        raise ValueError("Grid size must be a positive integer.")
    cells: List[List[Optional[Tile]]] = [[None] * size for _ in range(size)]
    return Grid(size=size, cells=cells, tile_ids=tile_ids if tile_ids is not None else TileIdCounter())


def grid_from_values(values: Sequence[Sequence[Optional[int]]],
                     tile_ids: Optional[TileIdCounter] = None) -> Grid:
    """
    Builds a board from a square matrix of tile values (0 or None means empty).
    Tiles get ids in row-major order.
    Args:
        values (Sequence[Sequence[Optional[int]]]): The value matrix.
        tile_ids (Optional[TileIdCounter]): Counter to draw ids from.
    Returns:
        Grid: The populated board.
    Raises:
        ValueError: If the matrix is empty, not square, or holds a value that is not a power of two >= 2.
    """
    size = len(values)
    if size == 0 or not all(len(row) == size for row in values):
        raise ValueError("Board must be a non-empty square matrix.")

    grid = create_grid(size, tile_ids)
    for row in range(size):
        for col in range(size):
            value = values[row][col]
            if not value:
                continue
            if not isinstance(value, int) or value < 2 or value & (value - 1):
                raise ValueError(f"Invalid tile value {value!r} at ({row}, {col}).")
            cell = Cell(row, col)
            grid.cells[row][col] = Tile(id=grid.tile_ids.next_id(), value=value, position=cell)
    return grid


def grid_to_values(grid: Grid) -> List[List[int]]:
    """Returns the board as a matrix of ints, 0 for empty cells."""
    return [[tile.value if tile else 0 for tile in row] for row in grid.cells]


# --- Read-only accessors ---

def get_empty_cells(grid: Grid) -> List[Cell]:
    """
    Get coordinates of unoccupied cells.
    Args:
        grid (Grid): The board to scan.
    Returns:
        List[Cell]: Empty cells in row-major order.
    """
    empty_cells = []
    for row in range(grid.size):
        for col in range(grid.size):
            if grid.cells[row][col] is None:
                empty_cells.append(Cell(row, col))
    return empty_cells


def get_tile_at(grid: Grid, cell: Tuple[int, int]) -> Optional[Tile]:
    """Returns the tile at ``cell``, or None when the cell is empty or off the board."""
    row, col = cell
    if row < 0 or row >= grid.size or col < 0 or col >= grid.size:
        return None
    return grid.cells[row][col]


def iter_tiles(grid: Grid) -> Iterator[Tile]:
    for row in grid.cells:
        for tile in row:
            if tile is not None:
                yield tile


def count_tiles(grid: Grid) -> int:
    return sum(1 for _ in iter_tiles(grid))


# --- Copy-producing updates ---

def set_tile_at(grid: Grid, cell: Tuple[int, int], tile: Optional[Tile]) -> Grid:
    """
    Places (or clears) a tile on a copy of the board.
    Args:
        grid (Grid): The source board, left untouched.
        cell (Tuple[int, int]): Target (row, col).
        tile (Optional[Tile]): Tile to place, or None to clear the cell.
    Returns:
        Grid: A new board sharing the untouched tiles with the source.
    """
    row, col = cell
    new_cells = [list(r) for r in grid.cells]
    new_cells[row][col] = tile
    return replace(grid, cells=new_cells)


def clone_grid(grid: Grid) -> Grid:
    """Deep copy: new rows and a distinct copy of every tile, position included."""
    new_cells = [
        [replace(tile, position=Cell(*tile.position)) if tile else None for tile in row]
        for row in grid.cells
    ]
    return Grid(size=grid.size, cells=new_cells, tile_ids=grid.tile_ids)
