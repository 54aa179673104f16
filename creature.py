"""
Creature class for TardiSim.

Each creature has:
  - a chain of members (head first); the tail follows the head with one
    tick of lag per segment
  - a skin (three colour channels, the heritable trait)
  - movement state: velocity, facing direction, peak vertical speed
  - social state: influence, last bounce, last emitted symbol

Every simulation tick the orchestrator runs, for the whole population
and in this order:
  1. gravity()
  2. move()              – integrate, collide with and erode the terrain
  3. adjust_direction()
  4. act()               – socialise and maybe reproduce
"""

import math

from config import (
    CELL_SCALE, GRAVITY, MOVE_SCALE, BOUNCE_DAMPING, INFLUENCE_DECAY,
    THRILL_MEMORY, WOBBLE_PERIOD, WOBBLE_AMPLITUDE,
    ACT_CHANCE, RECENT_BOUNCE, CLOSENESS, MATURATION_TIME, MATURE_SIZE,
    SYMBOL_COOLDOWN, SYMBOL_LOVE, SYMBOL_THRILL,
)
from genome import blend_skins
from terrain import Cell


def round_half_up(value: float) -> int:
    return math.floor(value + .5)


def collide(terrain, px: float, py: float, auto_create: bool = False):
    """
    Terrain cell under world point (px, py), or None if there is none.

    Unset cells below ground read as solid. With `auto_create` such a
    cell is materialised in the store so it can be eroded.
    """
    cell_x = math.floor(px * CELL_SCALE)
    cell_y = math.floor(py * CELL_SCALE)
    cell = terrain.get(cell_x, cell_y)
    if cell is None:
        if py >= 0:
            return None
        if not auto_create:
            return terrain.probe(cell_x, cell_y)
        cell = Cell(True, ex=cell_x, ey=cell_y)
        terrain.set(cell_x, cell_y, cell)
    return cell


class Member:
    """One body segment. `creature_id` points back to the owner."""
    __slots__ = ("x", "y", "rotation", "creature_id")

    def __init__(self, x: float, y: float, rotation: float, creature_id: int):
        self.x           = x
        self.y           = y
        self.rotation    = rotation
        self.creature_id = creature_id


class Creature:
    """
    A single tardigrade.
    """
    __slots__ = (
        "id", "members", "skin", "mov", "direction",
        "time_start", "born", "last_bounce", "last_symbol",
        "influence", "thrill_speed",
    )

    def __init__(self, creature_id: int, skin=None, born: float = 0):
        self.id           = creature_id
        self.members      = []
        self.skin         = list(skin) if skin is not None else [0.0, 0.0, 0.0]
        self.mov          = [0.0, 0.0]
        self.direction    = 1
        self.time_start   = 0.0          # phase offset of the head wobble
        self.born         = born
        self.last_bounce  = 0
        self.last_symbol  = born
        self.influence    = 0.0          # bias for the next random escape
        self.thrill_speed = 0.0          # peak |vertical speed|, slowly fading

    @property
    def head(self) -> Member:
        return self.members[0]

    @property
    def x(self) -> float:
        return self.members[0].x

    @property
    def y(self) -> float:
        return self.members[0].y

    def size_at(self, time: float) -> float:
        """Grows linearly from 0.5 at birth to 1.0 once mature."""
        dt = max(0.0, min(1.0, (time - self.born) / MATURATION_TIME))
        return .5 + dt * .5

    # ──────────────────────────────────────────────────────────────────────────
    # Phase 1
    # ──────────────────────────────────────────────────────────────────────────

    def gravity(self):
        self.mov[1] -= GRAVITY

    # ──────────────────────────────────────────────────────────────────────────
    # Phase 2
    # ──────────────────────────────────────────────────────────────────────────

    def move(self, time: float, world):
        """Drag the tail, bounce off the terrain and advance the head."""
        for i in range(len(self.members) - 1, 0, -1):
            follower, leader = self.members[i], self.members[i - 1]
            follower.x        = leader.x
            follower.y        = leader.y
            follower.rotation = leader.rotation

        head = self.head
        px = head.x + self.mov[0] * MOVE_SCALE
        py = head.y + self.mov[1] * MOVE_SCALE
        cell = collide(world.terrain, px, py, auto_create=True)
        if cell is not None and cell.present:
            self._bounce(time, world, cell, py)

        head.x += self.mov[0] * MOVE_SCALE
        head.y += self.mov[1] * MOVE_SCALE
        head.rotation = math.sin((self.time_start + time) / WOBBLE_PERIOD) * WOBBLE_AMPLITUDE

        speed = abs(self.mov[1])
        if speed > self.thrill_speed:
            world.thrill += speed - self.thrill_speed
            self.thrill_speed = speed
            if time - self.last_symbol > SYMBOL_COOLDOWN:
                self.last_symbol = time
                world.emit_symbol(self.x, self.y, SYMBOL_THRILL,
                                  self._symbol_size(), time)
        self.thrill_speed *= THRILL_MEMORY

    def _bounce(self, time: float, world, cell, py: float):
        rng = world.rng
        head = self.head
        if self.mov[1] < 0:
            self.mov[1] = -self.mov[1] * BOUNCE_DAMPING

        reach = abs(self.mov[0]) * MOVE_SCALE
        left  = collide(world.terrain, head.x - reach, py)
        right = collide(world.terrain, head.x + reach, py)
        self._escape(left is not None and left.present,
                     right is not None and right.present, rng)

        self.last_bounce = time
        cell.erode(rng)

    def _escape(self, blocked_left: bool, blocked_right: bool, rng):
        """New horizontal heading after a bounce, given what is on each side."""
        if blocked_left != blocked_right:
            free = 1 if blocked_left else -1
            self.mov[0] = abs(self.mov[0]) * free * MOVE_SCALE
        elif blocked_left:
            self.mov[0] = -self.mov[0]
        else:
            self.mov[0] = (rng.random() - .5) + self.influence * rng.random()
            self.mov[1] = (rng.random() - .5) * 2
            self.influence *= INFLUENCE_DECAY

    # ──────────────────────────────────────────────────────────────────────────
    # Phase 3
    # ──────────────────────────────────────────────────────────────────────────

    def adjust_direction(self):
        """Face the way we are drifting; keep facing when not drifting."""
        if self.mov[0] > 0:
            self.direction = 1
        elif self.mov[0] < 0:
            self.direction = -1

    # ──────────────────────────────────────────────────────────────────────────
    # Phase 4
    # ──────────────────────────────────────────────────────────────────────────

    def act(self, time: float, world):
        """Occasionally wiggle, meet a random neighbour and maybe breed."""
        rng = world.rng
        if rng.random() >= ACT_CHANCE:
            return

        if time - self.last_bounce < RECENT_BOUNCE:
            self.mov[0] += rng.random() - .5
            self.mov[0] *= .9
            self.mov[1] = (rng.random() - .5) * 2

        creatures = world.creatures
        partner = creatures[int(rng.integers(0, len(creatures)))]
        if partner is self:
            return

        dx = partner.x - self.x
        dy = partner.y - self.y
        if dx * dx + dy * dy >= CLOSENESS:
            return

        self.influence -= dx
        n = len(creatures)
        pre_love = world.love
        world.love += abs(self.thrill_speed / 10)
        if (time - self.last_symbol > SYMBOL_COOLDOWN and
                round_half_up(100 * pre_love / n) != round_half_up(100 * world.love / n)):
            self.last_symbol = time
            world.emit_symbol(self.x, self.y, SYMBOL_LOVE,
                              self._symbol_size(), time)

        if world.love > n and self.size_at(time) >= MATURE_SIZE:
            world.love = 0.0
            skin = blend_skins(self.skin, partner.skin, rng)
            world.spawn_creature(self.x, self.y, time, skin)

    # ──────────────────────────────────────────────────────────────────────────

    def _symbol_size(self) -> float:
        return 1 + abs(self.thrill_speed) / 10
