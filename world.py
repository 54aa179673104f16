"""
World state for TardiSim.

The world owns everything a tick mutates:
  - the sparse terrain map
  - the creature list (order matters for seeded runs)
  - the live symbols
  - the shared random generator
  - the aggregate counters: thrill, love, score and age

One Simulation owns one World; nothing here is module-global, so several
worlds can run side by side.
"""

import numpy as np

from config import (
    CELL_SCALE, MEMBER_SIZE, MEMBER_JITTER, SPAWN_SPREAD, SPAWN_HEIGHT,
    DEFAULT_BORN, SYMBOL_LIFESPAN,
)
from creature import Creature, Member
from genome import random_skin
from terrain import TerrainMap


class Symbol:
    """A short-lived marker (heart or spark) floating above a creature."""
    __slots__ = ("x", "y", "rotation", "size", "index", "born")

    def __init__(self, x: float, y: float, rotation: float, size: float,
                 index: int, born: float):
        self.x        = x
        self.y        = y
        self.rotation = rotation
        self.size     = size
        self.index    = index
        self.born     = born

    def age_fraction(self, time: float) -> float:
        return (time - self.born) / SYMBOL_LIFESPAN

    def expired(self, time: float) -> bool:
        return time - self.born >= SYMBOL_LIFESPAN

    def to_dict(self) -> dict:
        return {
            "x": self.x, "y": self.y, "rotation": self.rotation,
            "size": self.size, "index": self.index, "born": self.born,
        }


class World:
    """
    Terrain, population and aggregate counters of one simulation.
    """

    def __init__(self, seed: int = None, rng=None):
        self.rng       = rng if rng is not None else np.random.default_rng(seed)
        self.terrain   = TerrainMap()
        self.creatures = []
        self.symbols   = []
        self._next_id  = 1
        self.reset_counters()

    def reset_counters(self):
        self.thrill = 0.0     # global excitement
        self.love   = 0.0     # social bond, spent on each birth
        self.score  = 0
        self.age    = 0       # ticks simulated

    # ──────────────────────────────────────────────────────────────────────────
    # Creatures
    # ──────────────────────────────────────────────────────────────────────────

    def new_creature(self, skin=None, born: float = DEFAULT_BORN) -> Creature:
        """Allocate a creature with the next id, without members or placement."""
        creature = Creature(self._next_id, skin, born)
        self._next_id += 1
        return creature

    def spawn_creature(self, x: float = None, y: float = None,
                       born: float = None, skin=None) -> Creature:
        """
        Create a creature and add it to the population.
        Anything not given is randomised.
        """
        rng = self.rng
        if skin is None:
            skin = random_skin(rng)
        creature = self.new_creature(skin, DEFAULT_BORN if born is None else born)
        creature.direction  = 1 if rng.random() > .5 else -1
        creature.time_start = rng.random() * 1000

        if x is None:
            x = (rng.random() - .5) * SPAWN_SPREAD
        if y is None:
            y = SPAWN_HEIGHT
        head = Member(x, y, (rng.random() - .5) * .5, creature.id)
        creature.mov = [rng.random() - .5, rng.random() - .5]

        creature.members.append(head)
        for _ in range(1, len(MEMBER_SIZE)):
            prev = creature.members[-1]
            creature.members.append(Member(
                prev.x + (rng.random() - .5) * MEMBER_JITTER,
                prev.y + (rng.random() - .5) * MEMBER_JITTER,
                head.rotation * (rng.random() - .5) * .1,
                creature.id,
            ))
        self.creatures.append(creature)
        return creature

    def creature_by_id(self, creature_id: int):
        """Owner lookup for a member's back-reference."""
        for c in self.creatures:
            if c.id == creature_id:
                return c
        return None

    # ──────────────────────────────────────────────────────────────────────────
    # Symbols
    # ──────────────────────────────────────────────────────────────────────────

    def emit_symbol(self, x: float, y: float, index: int, size: float,
                    born: float) -> Symbol:
        symbol = Symbol(x, y, self.rng.random() - .5, size, index, born)
        self.symbols.append(symbol)
        return symbol

    def expire_symbols(self, time: float):
        self.symbols = [s for s in self.symbols if not s.expired(time)]

    # ──────────────────────────────────────────────────────────────────────────
    # Snapshot for visualisation
    # ──────────────────────────────────────────────────────────────────────────

    def snapshot(self, time: float):
        """
        Returns three lists for visualisation:
          members: (x, y, rotation, size, skin) for every visible segment
          cells:   (x, y, color) for every present terrain cell, world units
          symbols: (x, y, index, age_fraction)
        """
        members = []
        for c in self.creatures:
            grown = c.size_at(time)
            for m, base in zip(c.members, MEMBER_SIZE):
                if base:
                    members.append((m.x, m.y, m.rotation, base * grown, c.skin))
        cells = [
            (x / CELL_SCALE, y / CELL_SCALE, cell.color)
            for x, y, cell in self.terrain.cells() if cell.present
        ]
        symbols = [(s.x, s.y, s.index, s.age_fraction(time)) for s in self.symbols]
        return members, cells, symbols
