"""
Tests for world export / import.
"""

import json
import math

import pytest

from snapshot import (
    InvalidSnapshot, export_state, import_state, write_snapshot, read_snapshot,
)
from terrain import Rect
from world import World
from conftest import ScriptedRng, place


@pytest.fixture
def filled(world):
    world.terrain.add_region(True, Rect(5, 3, 1, 1))
    world.terrain.add_region(False, Rect(-1, -1, 1, 1))
    c = place(world, 0.25, 1.5, born=42, mov=(0.3, -0.2))
    c.skin = [0.1, -0.2, 0.3]
    c.time_start = 123.0
    c.members[1].x = 0.24
    return world


def test_export_layout(filled):
    data = export_state(filled)
    assert len(data["creatures"]) == 1
    creature = data["creatures"][0]
    assert creature["skin"] == [0.1, -0.2, 0.3]
    assert creature["timeStart"] == 123.0
    assert creature["born"] == 42
    assert len(creature["members"]) == 7
    assert creature["members"][1] == {"x": 0.24, "y": 1.5, "rotation": 0.0}
    assert "mov" not in creature

    chunks = {(c["gridX"], c["gridY"]): c["grid"] for c in data["map"]}
    assert set(chunks) == {(0, 0), (-1, -1)}


def test_export_trims_blank_rows_and_cells(filled):
    chunks = {(c["gridX"], c["gridY"]): c["grid"] for c in export_state(filled)["map"]}

    grid = chunks[(0, 0)]
    assert len(grid) == 4
    assert grid[:3] == [None, None, None]
    assert grid[3][:5] == [None] * 5
    assert grid[3][5] == {"elem": True, "color": [1.0, 1.0, 1.0], "ex": 5, "ey": 3}

    # (-1, -1) is the last row and column of its chunk
    grid = chunks[(-1, -1)]
    assert len(grid) == 100
    assert len(grid[99]) == 100
    assert grid[99][99]["elem"] is False


def test_export_is_json_serialisable(filled):
    text = json.dumps(export_state(filled))
    assert json.loads(text) == export_state(filled)


def test_round_trip_restores_bodies_and_terrain(filled):
    data = export_state(filled)
    fresh = World(rng=ScriptedRng())
    import_state(fresh, data)

    assert export_state(fresh) == data
    c = fresh.creatures[0]
    assert c.id == 1
    assert all(m.creature_id == c.id for m in c.members)
    assert fresh.creature_by_id(c.id) is c
    assert c.mov == [0.0, 0.0]
    assert fresh.terrain.get(5, 3).present
    assert fresh.terrain.get(-1, -1).present is False
    assert fresh.terrain.get(6, 3) is None


def test_import_resets_counters_and_symbols(filled):
    data = export_state(filled)
    filled.thrill, filled.love, filled.score, filled.age = 5.0, 2.0, 99, 1234
    filled.emit_symbol(0.0, 0.0, 0, 1.0, 0)
    import_state(filled, data)
    assert (filled.thrill, filled.love, filled.score, filled.age) == (0.0, 0.0, 0, 0)
    assert filled.symbols == []


def test_import_gives_fresh_ids(filled):
    data = export_state(filled)
    import_state(filled, data)
    import_state(filled, data)
    assert filled.creatures[0].id == 3


def test_missing_cell_position_is_derived(world):
    import_state(world, {
        "creatures": [],
        "map": [{"gridX": -1, "gridY": 2,
                 "grid": [None, [None, {"elem": True, "color": [1, 0.5, 0]}]]}],
    })
    cell = world.terrain.get(-99, 201)
    assert cell.present
    assert (cell.ex, cell.ey) == (-99, 201)
    assert cell.color == [1.0, 0.5, 0.0]


# ──────────────────────────────────────────────────────────────────────────────
# Validation
# ──────────────────────────────────────────────────────────────────────────────

def _good():
    return {
        "creatures": [{
            "members": [{"x": 0, "y": 1, "rotation": 0}],
            "skin": [0, 0, 0], "timeStart": 0, "born": 0,
        }],
        "map": [{"gridX": 0, "gridY": 0,
                 "grid": [[{"elem": True, "color": [1, 1, 1], "ex": 0, "ey": 0}]]}],
    }


def _break_skin(d):
    d["creatures"][0]["skin"] = [0, 0]


def _break_number(d):
    d["creatures"][0]["members"][0]["x"] = math.nan


def _break_bool(d):
    d["creatures"][0]["born"] = True


def _break_members(d):
    d["creatures"][0]["members"] = []


def _break_rows(d):
    d["map"][0]["grid"] = [None] * 101


def _break_color(d):
    d["map"][0]["grid"][0][0]["color"] = "white"


def _break_grid_x(d):
    d["map"][0]["gridX"] = 0.5


def _break_map(d):
    del d["map"]


@pytest.mark.parametrize("breaker", [
    _break_skin, _break_number, _break_bool, _break_members,
    _break_rows, _break_color, _break_grid_x, _break_map,
])
def test_invalid_snapshot_leaves_world_untouched(filled, breaker):
    data = _good()
    breaker(data)
    before = export_state(filled)
    terrain = filled.terrain
    filled.thrill = 7.0

    with pytest.raises(InvalidSnapshot):
        import_state(filled, data)

    assert export_state(filled) == before
    assert filled.terrain is terrain
    assert filled.thrill == 7.0


def test_good_snapshot_is_accepted(world):
    import_state(world, _good())
    assert len(world.creatures) == 1
    assert world.terrain.get(0, 0).present


def test_non_object_is_rejected(world):
    with pytest.raises(InvalidSnapshot):
        import_state(world, [1, 2, 3])


def test_invalid_snapshot_is_a_value_error():
    assert issubclass(InvalidSnapshot, ValueError)


# ──────────────────────────────────────────────────────────────────────────────
# Files
# ──────────────────────────────────────────────────────────────────────────────

def test_file_round_trip(filled, tmp_path):
    path = write_snapshot(filled, str(tmp_path / "world.json"))
    fresh = World(rng=ScriptedRng())
    read_snapshot(fresh, path)
    assert export_state(fresh) == export_state(filled)


def test_corrupt_file(world, tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json")
    with pytest.raises(InvalidSnapshot):
        read_snapshot(world, str(path))


def test_file_that_is_not_utf8(world, tmp_path):
    path = tmp_path / "binary.json"
    path.write_bytes(b'{"creatures": [], "map": [\xff\xfe]}')
    with pytest.raises(InvalidSnapshot):
        read_snapshot(world, str(path))
    assert world.creatures == []
