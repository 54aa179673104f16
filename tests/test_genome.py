"""
Tests for skin genetics.
"""

import numpy as np
import pytest

from genome import random_skin, blend_skins, skin_to_color
from conftest import ScriptedRng


def test_random_skin_shares_lightness():
    skin = random_skin(ScriptedRng([0.9, 0.0, 0.5, 1.0]))
    assert skin == pytest.approx([0.4 - 0.15, 0.4, 0.4 + 0.15])


def test_random_skin_stays_in_range():
    rng = np.random.default_rng(3)
    for _ in range(200):
        skin = random_skin(rng)
        assert len(skin) == 3
        assert all(-0.65 <= s <= 0.65 for s in skin)


def test_blend_takes_each_channel_from_a_parent():
    a, b = [1.0, 2.0, 3.0], [-1.0, -2.0, -3.0]
    rng = ScriptedRng([0.5, 0.5, 0.9, 0.6, 0.9, 0.1, 0.9, 0.6])
    assert blend_skins(a, b, rng) == [-1.0, 2.0, -3.0]


def test_blend_mutation_is_shared_between_channels():
    a, b = [1.0, 2.0, 3.0], [-1.0, -2.0, -3.0]
    # light 0.3 → -0.2, tint (0.9 - .5) * .5 = 0.2 → mutant 0.0
    rng = ScriptedRng([0.3, 0.9, 0.001, 0.9, 0.1, 0.005])
    assert blend_skins(a, b, rng) == pytest.approx([0.0, 2.0, 0.0])


def test_blend_with_real_generator_mixes_parents():
    rng = np.random.default_rng(11)
    a, b = [0.1, 0.1, 0.1], [0.2, 0.2, 0.2]
    children = [blend_skins(a, b, rng) for _ in range(300)]
    channels = [v for child in children for v in child]
    assert channels.count(0.1) > 300
    assert channels.count(0.2) > 300


def test_skin_to_color():
    assert skin_to_color([0.0, 0.0, 0.0]) == (128, 128, 128)
    assert skin_to_color([5.0, -5.0, 0.5]) == (255, 0, 166)
    assert skin_to_color([]) == (128, 128, 128)
