"""
Tests for the sparse terrain store.
"""

import pytest

from config import CHUNK_SIZE
from terrain import Cell, Chunk, Rect, TerrainMap, UNDERGROUND, chunk_key
from conftest import ScriptedRng


@pytest.mark.parametrize("x, y", [
    (0, 0), (99, 99), (100, 0), (-1, -1), (-100, 5), (-101, -250),
    (123456, -987654),
])
def test_get_returns_what_was_set(x, y):
    terrain = TerrainMap()
    cell = Cell(True, ex=x, ey=y)
    terrain.set(x, y, cell)
    assert terrain.get(x, y) is cell
    assert terrain.chunk_count == 1


def test_chunk_key_floors_negative_coordinates():
    assert chunk_key(0, 0) == (0, 0)
    assert chunk_key(99, 100) == (0, 1)
    assert chunk_key(-1, -100) == (-1, -1)
    assert chunk_key(-101, 250) == (-2, 2)


def test_get_on_unset_cell_does_not_allocate():
    terrain = TerrainMap()
    assert terrain.get(5, 5) is None
    assert terrain.get(-5, -5) is None
    assert terrain.chunk_count == 0


def test_neighbouring_cells_in_other_chunks_stay_independent():
    terrain = TerrainMap()
    a, b = Cell(ex=99, ey=0), Cell(ex=100, ey=0)
    terrain.set(99, 0, a)
    terrain.set(100, 0, b)
    assert terrain.get(99, 0) is a
    assert terrain.get(100, 0) is b
    assert terrain.get(101, 0) is None
    assert terrain.chunk_count == 2


def test_probe_synthesises_underground_below_ground_only():
    terrain = TerrainMap()
    assert terrain.probe(3, -1) is UNDERGROUND
    assert terrain.probe(3, 0) is None
    assert terrain.probe(3, 40) is None
    assert terrain.chunk_count == 0


def test_probe_prefers_stored_cell_below_ground():
    terrain = TerrainMap()
    hole = Cell(False, ex=0, ey=-3)
    terrain.set(0, -3, hole)
    assert terrain.probe(0, -3) is hole


def test_underground_default_is_distinguishable():
    assert UNDERGROUND.present
    assert UNDERGROUND.underground
    assert UNDERGROUND.color == [-3.0, -3.0, -3.0]
    assert not Cell().underground


def test_add_region_writes_every_cell():
    terrain = TerrainMap()
    terrain.add_region(True, Rect(-2, -1, 4, 3))
    coords = sorted((x, y) for x, y, _ in terrain.cells())
    assert coords == sorted((x, y) for x in range(-2, 2) for y in range(-1, 2))
    for x, y, cell in terrain.cells():
        assert cell.present
        assert cell.color == [1.0, 1.0, 1.0]
        assert (cell.ex, cell.ey) == (x, y)


def test_add_region_floors_origin_and_can_erase():
    terrain = TerrainMap()
    terrain.add_region(True, Rect(0.7, -0.2, 2, 1))
    assert terrain.get(0, -1).present
    assert terrain.get(1, -1).present
    terrain.add_region(False, Rect(1, -1, 1, 1))
    assert not terrain.get(1, -1).present
    assert terrain.get(0, -1).present


@pytest.mark.parametrize("width, height", [(0, 5), (5, 0), (-3, 2), (2, -1)])
def test_add_region_without_area_is_a_no_op(width, height):
    terrain = TerrainMap()
    terrain.add_region(True, Rect(0, 0, width, height))
    assert terrain.chunk_count == 0


def test_region_spanning_chunks():
    terrain = TerrainMap()
    terrain.add_region(True, Rect(CHUNK_SIZE - 1, CHUNK_SIZE - 1, 2, 2))
    assert terrain.chunk_count == 4
    assert len(terrain) == 4


def test_chunk_yields_absolute_coordinates():
    chunk = Chunk(-1, 2)
    chunk.rows[3][4] = Cell(ex=-96, ey=203)
    assert [(x, y) for x, y, _ in chunk.cells()] == [(-96, 203)]


# ──────────────────────────────────────────────────────────────────────────────
# Erosion
# ──────────────────────────────────────────────────────────────────────────────

def test_erosion_removes_up_to_a_tenth_per_channel():
    cell = Cell()
    cell.erode(ScriptedRng([0.5, 1.0, 0.0]))
    assert cell.color == pytest.approx([0.95, 0.9, 1.0])
    assert cell.present


def test_erosion_is_monotonic_and_clears_only_at_zero():
    cell = Cell(True, [0.25, 0.05, 0.12])
    rng = ScriptedRng(default=1.0)
    history = [list(cell.color)]
    for _ in range(2):
        cell.erode(rng)
        history.append(list(cell.color))
        assert cell.present
    cell.erode(rng)
    assert cell.color == [0.0, 0.0, 0.0]
    assert not cell.present

    for before, after in zip(history, history[1:] + [cell.color]):
        for b, a in zip(before, after):
            assert a >= 0
            assert a < b or (a == 0 and b == 0)


def test_erosion_never_touches_underground_default():
    UNDERGROUND.erode(ScriptedRng(default=1.0))
    assert UNDERGROUND.color == [-3.0, -3.0, -3.0]
    assert UNDERGROUND.present
