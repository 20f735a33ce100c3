import random

import pytest

from tile2048.grid import TileIdCounter, grid_from_values


class StubRandom:
    """Picks the first candidate cell and returns a fixed draw for the tile value."""

    def __init__(self, draw=0.5):
        self.draw = draw

    def choice(self, seq):
        return seq[0]

    def random(self):
        return self.draw


def random_values(rng, size=4, empty_ratio=0.4):
    """A value matrix with a mix of empty cells and small powers of two."""
    return [
        [0 if rng.random() < empty_ratio else 2 ** rng.randint(1, 4) for _ in range(size)]
        for _ in range(size)
    ]


@pytest.fixture
def tile_ids():
    return TileIdCounter()


@pytest.fixture
def make_grid(tile_ids):
    def _make(values):
        return grid_from_values(values, tile_ids)
    return _make


@pytest.fixture
def stub_rng():
    return StubRandom()


@pytest.fixture(params=range(40))
def random_board(request):
    return random_values(random.Random(request.param))
