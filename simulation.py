"""
Simulation Engine for TardiSim.

Orchestrates one world tick by tick:
  for each tick:
    1. gravity  for every creature
    2. move     for every creature
    3. direction for every creature
    4. act      for every creature
    5. decay thrill, grow score, age the world, expire symbols, track mood

Phases are never interleaved per creature: everyone falls before anyone
moves, and act() sees the positions everyone reached this tick.
"""

import math
import time as walltime
from dataclasses import dataclass, field

from world import World
from terrain import Rect
import snapshot
from config import (
    CELL_SCALE, HIGHWALL, WALLSIZE, BRUSH_SIZE,
    THRILL_DECAY, THRILL_DECAY_OFFSET, SCORE_DIVISOR, TICKS_PER_YEAR,
    MOOD_LEVELS, JOY_CAPACITY, MOOD_GRACE, DESPAIR_AFTER, DESPAIR_WINDOW,
    TOTAL_CREATURES, FRAME_MS, MAX_TICKS, STATS_INTERVAL,
)
from creature import round_half_up


@dataclass
class TickSummary:
    """Aggregate state after a tick, for renderers and UIs."""
    time:       float
    population: int
    thrill:     float
    love:       float
    score:      int
    age:        int
    joy:        float = 0.0      # thrill per creature, 1.0 = full bar
    mood:       int   = 0        # 0 (asleep) … MOOD_LEVELS - 1 (ecstatic)
    despair:    bool  = False
    symbols:    list  = field(default_factory=list)

    @property
    def year(self) -> int:
        return self.age // TICKS_PER_YEAR

    def stats(self) -> dict:
        """Flat row for logs and charts."""
        return {
            "age":        self.age,
            "year":       self.year,
            "time":       round(self.time, 1),
            "population": self.population,
            "thrill":     round(self.thrill, 4),
            "love":       round(self.love, 4),
            "score":      self.score,
            "mood":       self.mood,
        }

    def to_dict(self) -> dict:
        data = self.stats()
        data["joy"]     = round(self.joy, 4)
        data["despair"] = self.despair
        data["symbols"] = [s.to_dict() for s in self.symbols]
        return data


class Simulation:
    """
    Main simulation controller.
    """

    def __init__(
        self,
        seed:             int  = None,
        rng                    = None,
        frame_ms:         float= FRAME_MS,
        stats_interval:   int  = STATS_INTERVAL,
        stop_on_despair:  bool = True,
        on_tick_callback       = None,    # called after every tick
    ):
        self.world            = World(seed, rng)
        self.rng              = self.world.rng
        self.frame_ms         = frame_ms
        self.stats_interval   = stats_interval
        self.stop_on_despair  = stop_on_despair
        self.on_tick_callback = on_tick_callback

        self.clock       = 0.0       # time handed to the next run() tick
        self.last_cheer  = 0.0       # last time mood was above the bottom
        self.despair     = False
        self.stats       = []        # one row per stats_interval ticks
        self.last_summary = None

    # ──────────────────────────────────────────────────────────────────────────
    # World setup
    # ──────────────────────────────────────────────────────────────────────────

    def build_arena(self, highwall: int = HIGHWALL, wallsize: int = WALLSIZE):
        """Two side walls and a floor just below ground level."""
        self.paint_terrain(True, Rect(-highwall, -1, wallsize, highwall))
        self.paint_terrain(True, Rect(highwall, -1, wallsize, highwall))
        self.paint_terrain(True, Rect(-highwall, -1, highwall * 2, wallsize))

    def populate(self, count: int = TOTAL_CREATURES) -> list:
        """Spawn the initial population; they stay quiet for a few seconds."""
        ids = []
        for _ in range(count):
            creature = self.world.spawn_creature()
            creature.last_symbol = 5000
            ids.append(creature.id)
        return ids

    def spawn_agent(self, x: float = None, y: float = None,
                    born: float = None, skin=None) -> int:
        return self.world.spawn_creature(x, y, born, skin).id

    def paint_terrain(self, present: bool, rect: Rect):
        self.world.terrain.add_region(present, Rect(*rect))

    def paint_brush(self, present: bool, x: float, y: float):
        """Draw/erase tool: a BRUSH_SIZE square centred on world point (x, y)."""
        half = BRUSH_SIZE // 2
        cell_x = math.floor(x * CELL_SCALE)
        cell_y = math.floor(y * CELL_SCALE)
        self.paint_terrain(present, Rect(cell_x - half, cell_y - half,
                                         BRUSH_SIZE, BRUSH_SIZE))

    # ──────────────────────────────────────────────────────────────────────────
    # Persistence
    # ──────────────────────────────────────────────────────────────────────────

    def export_state(self) -> dict:
        return snapshot.export_state(self.world)

    def import_state(self, data: dict):
        snapshot.import_state(self.world, data)
        self.despair = False
        self.last_cheer = self.clock

    # ──────────────────────────────────────────────────────────────────────────
    # One tick
    # ──────────────────────────────────────────────────────────────────────────

    def tick(self, time: float) -> TickSummary:
        """Advance the whole world by one tick at elapsed time `time`."""
        world = self.world
        # Newborns join the population but not the current tick
        creatures = list(world.creatures)

        for c in creatures:
            c.gravity()
        for c in creatures:
            c.move(time, world)
        for c in creatures:
            c.adjust_direction()
        for c in creatures:
            c.act(time, world)

        n = len(world.creatures)
        world.thrill *= 1 - (THRILL_DECAY * (n + THRILL_DECAY_OFFSET))
        world.score += round_half_up(world.thrill / SCORE_DIVISOR +
                                     self.rng.random() * self.rng.random())
        world.age += 1
        world.expire_symbols(time)

        joy, mood = self._update_mood(time)
        self.last_summary = TickSummary(
            time       = time,
            population = n,
            thrill     = world.thrill,
            love       = world.love,
            score      = world.score,
            age        = world.age,
            joy        = joy,
            mood       = mood,
            despair    = self.despair,
            symbols    = list(world.symbols),
        )
        return self.last_summary

    def _update_mood(self, time: float):
        n = len(self.world.creatures)
        joy = self.world.thrill / (n * JOY_CAPACITY) if n else 0.0
        mood = max(0, min(MOOD_LEVELS - 1, math.floor(MOOD_LEVELS * joy)))
        if time > MOOD_GRACE:
            if mood >= 1:
                self.last_cheer = time
            elif time > DESPAIR_AFTER and time - self.last_cheer > DESPAIR_WINDOW:
                self.despair = True
        return joy, mood

    # ──────────────────────────────────────────────────────────────────────────
    # Run loop
    # ──────────────────────────────────────────────────────────────────────────

    def run(self, ticks: int = MAX_TICKS, stop_event=None) -> TickSummary:
        """
        Tick `ticks` times on a fixed-step clock.
        Stops early on despair (if enabled) or when `stop_event` is set.
        """
        t0 = walltime.time()
        summary = self.last_summary
        for _ in range(ticks):
            if stop_event is not None and stop_event.is_set():
                break
            summary = self.tick(self.clock)
            self.clock += self.frame_ms

            if summary.age % self.stats_interval == 0:
                self.stats.append(summary.stats())
            if summary.age % TICKS_PER_YEAR == 0:
                self._print_stats(summary, walltime.time() - t0)
            if self.on_tick_callback:
                self.on_tick_callback(summary, self.world)

            if summary.despair and self.stop_on_despair:
                print("  !! Despair – the tardigrades are too sad to continue. Stopping.")
                break
        return summary

    def _print_stats(self, summary: TickSummary, elapsed: float):
        print(
            f"Year {summary.year:>4}  |  "
            f"tardigrades {summary.population:>5}  |  "
            f"thrill {summary.thrill:>8.2f}  |  "
            f"love {summary.love:>6.2f}  |  "
            f"score {summary.score:>7}  |  "
            f"{elapsed:.2f}s"
        )
