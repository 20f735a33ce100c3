import random

import pytest

from conftest import StubRandom
from tile2048.grid import (
    Cell,
    count_tiles,
    create_grid,
    get_tile_at,
    grid_from_values,
    grid_to_values,
    iter_tiles,
)
from tile2048.tiles import (
    Direction,
    can_merge,
    create_tile,
    merge_tiles,
    move_tiles,
    spawn_random_tile,
)


def _lines_in_travel_order(values, direction):
    n = len(values)
    if direction == Direction.LEFT:
        return [values[r] for r in range(n)]
    if direction == Direction.RIGHT:
        return [values[r][::-1] for r in range(n)]
    if direction == Direction.UP:
        return [[values[r][c] for r in range(n)] for c in range(n)]
    return [[values[r][c] for r in range(n - 1, -1, -1)] for c in range(n)]


class TestTileCreation:

    def test_create_tile(self, tile_ids):
        first = create_tile(2, (1, 3), tile_ids)
        second = create_tile(4, Cell(0, 0), tile_ids)
        assert (first.id, first.value, first.position) == (1, 2, Cell(1, 3))
        assert second.id == 2
        assert first.merged_from is None

    def test_merge_tiles(self, tile_ids):
        a = create_tile(8, (0, 0), tile_ids)
        b = create_tile(8, (0, 2), tile_ids)
        merged = merge_tiles(a, b, tile_ids)
        assert merged.value == 16
        assert merged.id == 3
        assert merged.position == Cell(0, 2)
        assert merged.merged_from == (a, b)

    def test_can_merge(self, tile_ids):
        two = create_tile(2, (0, 0), tile_ids)
        other_two = create_tile(2, (0, 1), tile_ids)
        four = create_tile(4, (0, 2), tile_ids)
        assert can_merge(two, other_two)
        assert not can_merge(two, four)
        assert not can_merge(two, None)
        assert not can_merge(None, None)


class TestSpawn:

    def test_full_board_is_noop(self, make_grid):
        grid = make_grid([[2, 4], [8, 16]])
        assert spawn_random_tile(grid) is grid

    def test_adds_exactly_one(self, make_grid):
        grid = make_grid([[2, 0, 0, 0], [0, 0, 0, 0], [0, 0, 4, 0], [0, 0, 0, 0]])
        for seed in range(30):
            spawned = spawn_random_tile(grid, random.Random(seed))
            assert count_tiles(spawned) == 3
            assert count_tiles(grid) == 2
            new_values = [t.value for t in iter_tiles(spawned) if t.position not in {(0, 0), (2, 2)}]
            assert new_values in ([2], [4])

    def test_value_from_draw(self, tile_ids):
        grid = create_grid(2, tile_ids)
        assert get_tile_at(spawn_random_tile(grid, StubRandom(draw=0.5)), (0, 0)).value == 2
        assert get_tile_at(spawn_random_tile(grid, StubRandom(draw=0.05)), (0, 0)).value == 4

    def test_spawned_tile_gets_next_id(self, make_grid, stub_rng):
        grid = make_grid([[2, 2], [0, 0]])
        tile = get_tile_at(spawn_random_tile(grid, stub_rng), (1, 0))
        assert tile.id == 3
        assert tile.position == Cell(1, 0)

    def test_distribution(self, tile_ids):
        rng = random.Random(1234)
        grid = create_grid(4, tile_ids)
        fours = sum(
            next(iter_tiles(spawn_random_tile(grid, rng))).value == 4
            for _ in range(2000)
        )
        assert 120 < fours < 290


class TestMoveLines:

    def test_four_equal(self, make_grid):
        result = move_tiles(make_grid([[2, 2, 2, 2], [0] * 4, [0] * 4, [0] * 4]), Direction.LEFT)
        assert grid_to_values(result.grid)[0] == [4, 4, 0, 0]
        assert result.score_gained == 8
        assert len(result.merged_tiles) == 2

    def test_front_pair_merges_first(self, make_grid):
        result = move_tiles(make_grid([[2, 2, 4, 0], [0] * 4, [0] * 4, [0] * 4]), Direction.LEFT)
        assert grid_to_values(result.grid)[0] == [4, 4, 0, 0]
        assert result.score_gained == 4
        assert len(result.merged_tiles) == 1
        assert get_tile_at(result.grid, (0, 0)).merged_from is not None
        assert get_tile_at(result.grid, (0, 1)).merged_from is None

    def test_right_reads_from_far_edge(self, make_grid):
        result = move_tiles(make_grid([[2, 2, 4, 0], [0] * 4, [0] * 4, [0] * 4]), Direction.RIGHT)
        assert grid_to_values(result.grid)[0] == [0, 0, 4, 4]
        assert get_tile_at(result.grid, (0, 3)).merged_from is None
        assert get_tile_at(result.grid, (0, 2)).merged_from is not None

    def test_up_and_down(self, make_grid):
        values = [[2, 0, 0, 0], [2, 0, 0, 0], [4, 0, 0, 0], [4, 0, 0, 0]]
        up = move_tiles(make_grid(values), Direction.UP)
        down = move_tiles(make_grid(values), Direction.DOWN)
        assert [row[0] for row in grid_to_values(up.grid)] == [4, 8, 0, 0]
        assert [row[0] for row in grid_to_values(down.grid)] == [0, 0, 4, 8]
        assert up.score_gained == down.score_gained == 12

    def test_mixed_board(self, make_grid):
        board = [[2, 2, 4, 4], [0, 2, 2, 4], [2, 0, 0, 2], [2, 2, 2, 2]]
        result = move_tiles(make_grid(board), Direction.LEFT)
        assert grid_to_values(result.grid) == [[4, 8, 0, 0], [4, 4, 0, 0], [4, 0, 0, 0], [4, 4, 0, 0]]
        assert result.score_gained == 28

    def test_gaps_close_without_merge(self, make_grid):
        result = move_tiles(make_grid([[0, 2, 0, 4], [0] * 4, [0] * 4, [0] * 4]), Direction.LEFT)
        assert result.moved
        assert result.score_gained == 0
        assert grid_to_values(result.grid)[0] == [2, 4, 0, 0]

    def test_blocked_line_not_moved(self, make_grid):
        grid = make_grid([[2, 4, 8, 16], [0] * 4, [0] * 4, [0] * 4])
        result = move_tiles(grid, Direction.LEFT)
        assert not result.moved
        assert result.score_gained == 0
        assert result.merged_tiles == []

    def test_empty_board_not_moved(self, tile_ids):
        for direction in Direction:
            assert not move_tiles(create_grid(4, tile_ids), direction).moved


class TestMergedTile:

    def test_identity_and_sources(self, make_grid, tile_ids):
        grid = make_grid([[0, 0, 0, 0], [0, 8, 0, 8], [0, 0, 0, 0], [0, 0, 0, 0]])
        first, second = get_tile_at(grid, (1, 1)), get_tile_at(grid, (1, 3))
        result = move_tiles(grid, Direction.LEFT)

        merged = get_tile_at(result.grid, (1, 0))
        assert merged.value == 16
        assert merged.id > max(first.id, second.id)
        assert merged.position == Cell(1, 0)
        assert [t.id for t in merged.merged_from] == [first.id, second.id]
        assert result.merged_tiles == [merged]

    def test_merge_record_not_chained(self, make_grid):
        first = move_tiles(make_grid([[2, 2, 4, 0], [0] * 4, [0] * 4, [0] * 4]), Direction.LEFT)
        second = move_tiles(first.grid, Direction.LEFT)

        eight = get_tile_at(second.grid, (0, 0))
        assert eight.value == 8
        assert all(source.merged_from is None for source in eight.merged_from)
        # The earlier result keeps its own record.
        assert get_tile_at(first.grid, (0, 0)).merged_from is not None

    def test_merge_record_cleared_next_turn(self, make_grid):
        first = move_tiles(make_grid([[2, 2, 0, 0], [0] * 4, [0] * 4, [0] * 4]), Direction.LEFT)
        second = move_tiles(first.grid, Direction.RIGHT)
        assert second.moved
        assert get_tile_at(second.grid, (0, 3)).merged_from is None


def test_invalid_direction(make_grid):
    with pytest.raises(ValueError):
        move_tiles(make_grid([[2, 0], [0, 0]]), "sideways")


def test_accepts_direction_token(make_grid):
    result = move_tiles(make_grid([[0, 2], [0, 0]]), "left")
    assert grid_to_values(result.grid) == [[2, 0], [0, 0]]


@pytest.mark.parametrize("direction", list(Direction))
class TestMoveProperties:

    def test_no_gaps(self, random_board, direction):
        result = move_tiles(grid_from_values(random_board), direction)
        for line in _lines_in_travel_order(grid_to_values(result.grid), direction):
            occupied = [value != 0 for value in line]
            assert occupied == sorted(occupied, reverse=True)

    def test_score_and_conservation(self, random_board, direction):
        grid = grid_from_values(random_board)
        result = move_tiles(grid, direction)

        assert result.score_gained == sum(t.value for t in result.merged_tiles)
        for tile in result.merged_tiles:
            a, b = tile.merged_from
            assert a.value == b.value
            assert tile.value == 2 * a.value
        assert count_tiles(result.grid) == count_tiles(grid) - len(result.merged_tiles)
        assert sum(map(sum, grid_to_values(result.grid))) == sum(map(sum, random_board))

    def test_positions_match_cells(self, random_board, direction):
        result = move_tiles(grid_from_values(random_board), direction)
        for r, row in enumerate(result.grid.cells):
            for c, tile in enumerate(row):
                if tile is not None:
                    assert tile.position == Cell(r, c)

    def test_input_untouched(self, random_board, direction):
        grid = grid_from_values(random_board)
        before = [(t.id, t.value, t.position) for t in iter_tiles(grid)]
        move_tiles(grid, direction)
        assert [(t.id, t.value, t.position) for t in iter_tiles(grid)] == before

    def test_noop_is_idempotent(self, random_board, direction):
        result = move_tiles(grid_from_values(random_board), direction)
        settled = result.grid
        # Repeated moves only merge, so the tile count drops until the board settles.
        while True:
            again = move_tiles(settled, direction)
            if not again.moved:
                break
            settled = again.grid
        repeat = move_tiles(again.grid, direction)
        assert not repeat.moved
        assert grid_to_values(repeat.grid) == grid_to_values(again.grid)
