"""
Export / import of a full TardiSim world.

Snapshot layout (plain JSON-compatible dict):

  {
    "creatures": [
      {"members": [{"x", "y", "rotation"}, ...],
       "skin": [r, g, b], "timeStart": float, "born": float},
      ...
    ],
    "map": [
      {"gridX": int, "gridY": int,
       "grid": [row | null, ...]}     # row-major, trailing blanks trimmed
      ...                             # row = [cell | null, ...]
    ]                                 # cell = {"elem", "color", "ex", "ey"}
  }

Velocities, timers and aggregate counters are not part of a snapshot.
"""

import json
import math

from config import CHUNK_SIZE
from creature import Member
from terrain import Cell, Chunk, TerrainMap


class InvalidSnapshot(ValueError):
    """Raised when import data is malformed. The world is left untouched."""


# ──────────────────────────────────────────────────────────────────────────────
# Export
# ──────────────────────────────────────────────────────────────────────────────

def _trim(items: list) -> list:
    end = len(items)
    while end and items[end - 1] is None:
        end -= 1
    return items[:end]


def _export_chunk(chunk: Chunk) -> dict:
    rows = []
    for row in chunk.rows:
        cells = _trim([
            {"elem": bool(cell.present), "color": list(cell.color),
             "ex": cell.ex, "ey": cell.ey} if cell is not None else None
            for cell in row
        ])
        rows.append(cells or None)
    return {"gridX": chunk.grid_x, "gridY": chunk.grid_y, "grid": _trim(rows)}


def export_state(world) -> dict:
    """Serialise creatures and terrain of `world`."""
    return {
        "creatures": [
            {
                "members": [
                    {"x": m.x, "y": m.y, "rotation": m.rotation}
                    for m in c.members
                ],
                "skin": list(c.skin),
                "timeStart": c.time_start,
                "born": c.born,
            }
            for c in world.creatures
        ],
        "map": [_export_chunk(chunk) for chunk in world.terrain.chunks.values()],
    }


# ──────────────────────────────────────────────────────────────────────────────
# Import
# ──────────────────────────────────────────────────────────────────────────────

def _number(value, what: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidSnapshot(f"{what}: expected a number, got {value!r}")
    if not math.isfinite(value):
        raise InvalidSnapshot(f"{what}: not finite")
    return float(value)


def _integer(value, what: str) -> int:
    number = _number(value, what)
    if number != int(number):
        raise InvalidSnapshot(f"{what}: expected an integer, got {value!r}")
    return int(number)


def _field(data, key: str, what: str):
    if not isinstance(data, dict) or key not in data:
        raise InvalidSnapshot(f"{what}: missing '{key}'")
    return data[key]


def _triple(value, what: str) -> list:
    if not isinstance(value, (list, tuple)) or len(value) != 3:
        raise InvalidSnapshot(f"{what}: expected 3 channels")
    return [_number(v, what) for v in value]


def _parse_creature(data, idx: int) -> tuple:
    what = f"creatures[{idx}]"
    members = _field(data, "members", what)
    if not isinstance(members, list) or not members:
        raise InvalidSnapshot(f"{what}: needs at least one member")
    parsed = [
        (_number(_field(m, "x", f"{what}.members[{i}]"), f"{what}.members[{i}].x"),
         _number(_field(m, "y", f"{what}.members[{i}]"), f"{what}.members[{i}].y"),
         _number(_field(m, "rotation", f"{what}.members[{i}]"),
                 f"{what}.members[{i}].rotation"))
        for i, m in enumerate(members)
    ]
    skin = _triple(_field(data, "skin", what), f"{what}.skin")
    time_start = _number(_field(data, "timeStart", what), f"{what}.timeStart")
    born = _number(_field(data, "born", what), f"{what}.born")
    return parsed, skin, time_start, born


def _parse_chunk(data, idx: int) -> Chunk:
    what = f"map[{idx}]"
    chunk = Chunk(_integer(_field(data, "gridX", what), f"{what}.gridX"),
                  _integer(_field(data, "gridY", what), f"{what}.gridY"))
    rows = _field(data, "grid", what)
    if not isinstance(rows, list) or len(rows) > CHUNK_SIZE:
        raise InvalidSnapshot(f"{what}.grid: expected at most {CHUNK_SIZE} rows")
    for r, row in enumerate(rows):
        if row is None:
            continue
        if not isinstance(row, list) or len(row) > CHUNK_SIZE:
            raise InvalidSnapshot(f"{what}.grid[{r}]: expected at most {CHUNK_SIZE} cells")
        for c, cell in enumerate(row):
            if cell is None:
                continue
            where = f"{what}.grid[{r}][{c}]"
            color = _triple(_field(cell, "color", where), f"{where}.color")
            ex = chunk.grid_x * CHUNK_SIZE + c
            ey = chunk.grid_y * CHUNK_SIZE + r
            if "ex" in cell:
                ex = _integer(cell["ex"], f"{where}.ex")
            if "ey" in cell:
                ey = _integer(cell["ey"], f"{where}.ey")
            chunk.rows[r][c] = Cell(bool(_field(cell, "elem", where)), color, ex, ey)
    return chunk


def import_state(world, data: dict):
    """
    Replace creatures and terrain of `world` with the snapshot's.
    Counters and symbols are reset. Raises InvalidSnapshot before
    touching anything if the data is malformed.
    """
    if not isinstance(data, dict):
        raise InvalidSnapshot("snapshot must be an object")
    creatures = _field(data, "creatures", "snapshot")
    chunks = _field(data, "map", "snapshot")
    if not isinstance(creatures, list) or not isinstance(chunks, list):
        raise InvalidSnapshot("'creatures' and 'map' must be lists")

    parsed = [_parse_creature(c, i) for i, c in enumerate(creatures)]
    terrain = TerrainMap()
    for i, chunk_data in enumerate(chunks):
        chunk = _parse_chunk(chunk_data, i)
        terrain.chunks[(chunk.grid_x, chunk.grid_y)] = chunk

    # Everything validated: swap the new state in
    world.creatures = []
    for members, skin, time_start, born in parsed:
        creature = world.new_creature(skin, born)
        creature.time_start = time_start
        creature.members = [Member(x, y, rot, creature.id) for x, y, rot in members]
        world.creatures.append(creature)
    world.terrain = terrain
    world.symbols = []
    world.reset_counters()


# ──────────────────────────────────────────────────────────────────────────────
# Files
# ──────────────────────────────────────────────────────────────────────────────

def write_snapshot(world, path: str) -> str:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(export_state(world), f)
    return path


def read_snapshot(world, path: str):
    with open(path, encoding="utf-8") as f:
        try:
            data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise InvalidSnapshot(f"{path}: {exc}") from exc
    import_state(world, data)
