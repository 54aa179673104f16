"""
Shared fixtures for the TardiSim tests.
"""

import pytest

from simulation import Simulation
from world import World


class ScriptedRng:
    """
    Stand-in for numpy's Generator that replays fixed values.
    Once a script runs out, the default is returned forever.
    """

    def __init__(self, values=(), ints=(), default=0.5):
        self.values  = list(values)
        self.ints    = list(ints)
        self.default = default

    def random(self):
        return self.values.pop(0) if self.values else self.default

    def integers(self, low, high=None):
        return self.ints.pop(0) if self.ints else low


@pytest.fixture
def rng() -> ScriptedRng:
    # 0.5 everywhere: no creature ever passes the 10% act gate
    return ScriptedRng()


@pytest.fixture
def world(rng) -> World:
    return World(rng=rng)


@pytest.fixture
def sim(rng) -> Simulation:
    return Simulation(rng=rng, stop_on_despair=False)


def place(world, x: float, y: float, born: float = -10000, mov=(0.0, 0.0)):
    """Spawn a creature at (x, y) with a known velocity."""
    creature = world.spawn_creature(x, y, born)
    creature.mov = list(mov)
    return creature
