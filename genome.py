"""
Skin genetics for TardiSim.

A creature's only heritable trait is its skin: three floats, one per
colour channel, roughly in [-0.75, 0.75]. They are added as a light
offset on top of the base sprite colour when rendering.

Reproduction picks each child channel independently:
  - 1% of the time a mutation value (shared by all mutated channels
    of that child),
  - otherwise 50/50 from either parent.
"""

import numpy as np
from config import SKIN_COLORIZE, CHILD_COLORIZE, MUTATION_CHANCE

SKIN_BASE  = 0.5   # grey level of the untinted sprite
SKIN_LIGHT = 0.3   # how strongly the skin offset shows


def random_skin(rng=None, colorize: float = SKIN_COLORIZE) -> list:
    """A fresh skin: one shared lightness plus a small per-channel tint."""
    if rng is None:
        rng = np.random.default_rng()
    light = rng.random() - .5
    return [light + colorize * (rng.random() - .5) for _ in range(3)]


def blend_skins(skin_a: list, skin_b: list, rng=None,
                mutation_chance: float = MUTATION_CHANCE) -> list:
    """Child skin from parents A and B, channel by channel."""
    if rng is None:
        rng = np.random.default_rng()
    light = rng.random() - .5
    mutant = light + CHILD_COLORIZE * (rng.random() - .5)
    child = []
    for a, b in zip(skin_a, skin_b):
        if rng.random() < mutation_chance:
            child.append(mutant)
        elif rng.random() < .5:
            child.append(a)
        else:
            child.append(b)
    return child


def skin_to_color(skin: list) -> tuple:
    """Map a skin to an 8-bit RGB tuple as it would appear on screen."""
    if not skin:
        return (128, 128, 128)
    return tuple(
        int(round(255 * min(1.0, max(0.0, SKIN_BASE + SKIN_LIGHT * float(s)))))
        for s in skin[:3]
    )
