"""
Sparse terrain store for TardiSim.

The terrain is an unbounded 2-D grid of destructible cells. Cells are
grouped into fixed CHUNK_SIZE x CHUNK_SIZE chunks kept in a dict keyed by
chunk coordinates, so only the areas that were ever painted or touched
cost memory.

Anything below ground level (y < 0) that was never written behaves as
solid rock: probes return the shared UNDERGROUND cell for it.
"""

import math
from typing import NamedTuple

from config import CHUNK_SIZE, CELL_COLOR, UNDERGROUND_COLOR, EROSION_MAX


class Rect(NamedTuple):
    """Axis-aligned rectangle in cell units."""
    x: float
    y: float
    width: int
    height: int


class Cell:
    """
    One unit of terrain matter.

    `color` doubles as the cell's integrity: every bounce erodes it and
    the cell disappears once all three channels are worn down to zero.
    """
    __slots__ = ("present", "color", "ex", "ey", "underground")

    def __init__(self, present: bool = True, color=CELL_COLOR,
                 ex: int = 0, ey: int = 0, underground: bool = False):
        self.present     = present
        self.color       = [float(c) for c in color]
        self.ex          = ex
        self.ey          = ey
        self.underground = underground

    def erode(self, rng, amount: float = EROSION_MAX):
        """Wear each channel down by a random share of `amount`."""
        if self.underground:
            return
        for i in range(3):
            self.color[i] = max(0.0, self.color[i] - rng.random() * amount)
        if all(c <= 0 for c in self.color):
            self.present = False

    def __repr__(self):
        return (f"Cell(present={self.present}, color={self.color}, "
                f"ex={self.ex}, ey={self.ey})")


# Returned for unset cells below ground. Never stored, never eroded.
UNDERGROUND = Cell(True, UNDERGROUND_COLOR, underground=True)


class Chunk:
    """A dense CHUNK_SIZE x CHUNK_SIZE block of optional cells."""
    __slots__ = ("grid_x", "grid_y", "rows")

    def __init__(self, grid_x: int, grid_y: int):
        self.grid_x = grid_x
        self.grid_y = grid_y
        # rows[cy][cx] = Cell or None
        self.rows   = [[None] * CHUNK_SIZE for _ in range(CHUNK_SIZE)]

    def cells(self):
        """Yield (x, y, cell) in absolute cell coordinates."""
        ox = self.grid_x * CHUNK_SIZE
        oy = self.grid_y * CHUNK_SIZE
        for cy, row in enumerate(self.rows):
            for cx, cell in enumerate(row):
                if cell is not None:
                    yield ox + cx, oy + cy, cell


def chunk_key(x: int, y: int) -> tuple:
    """Chunk coordinates owning cell (x, y)."""
    return x // CHUNK_SIZE, y // CHUNK_SIZE


class TerrainMap:
    """
    Dictionary of chunks. A cell exists only if it was explicitly set;
    reading never allocates.
    """

    def __init__(self):
        self.chunks = {}

    # ──────────────────────────────────────────────────────────────────────────
    # Cell access
    # ──────────────────────────────────────────────────────────────────────────

    def get(self, x: int, y: int):
        """Return the stored cell at (x, y) or None."""
        chunk = self.chunks.get(chunk_key(x, y))
        if chunk is None:
            return None
        return chunk.rows[y - chunk.grid_y * CHUNK_SIZE][x - chunk.grid_x * CHUNK_SIZE]

    def set(self, x: int, y: int, cell):
        """Store `cell` at (x, y), creating its chunk on first write."""
        key = chunk_key(x, y)
        chunk = self.chunks.get(key)
        if chunk is None:
            chunk = Chunk(*key)
            self.chunks[key] = chunk
        chunk.rows[y - chunk.grid_y * CHUNK_SIZE][x - chunk.grid_x * CHUNK_SIZE] = cell

    def probe(self, x: int, y: int):
        """
        Like get(), but unset cells below ground read as UNDERGROUND.
        Unset cells at or above ground read as None.
        """
        cell = self.get(x, y)
        if cell is None and y < 0:
            return UNDERGROUND
        return cell

    # ──────────────────────────────────────────────────────────────────────────
    # Bulk edits
    # ──────────────────────────────────────────────────────────────────────────

    def add_region(self, present: bool, rect: Rect):
        """
        Overwrite every cell of `rect` with a fresh full-integrity cell.
        Rectangles with no area are ignored.
        """
        x, y, width, height = rect
        if width <= 0 or height <= 0:
            return
        x0 = math.floor(x)
        y0 = math.floor(y)
        for xi in range(int(width)):
            for yi in range(int(height)):
                ex, ey = x0 + xi, y0 + yi
                self.set(ex, ey, Cell(present, CELL_COLOR, ex, ey))

    # ──────────────────────────────────────────────────────────────────────────
    # Introspection
    # ──────────────────────────────────────────────────────────────────────────

    def cells(self):
        """Yield (x, y, cell) for every stored cell."""
        for chunk in self.chunks.values():
            yield from chunk.cells()

    @property
    def chunk_count(self) -> int:
        return len(self.chunks)

    def __len__(self):
        return sum(1 for _ in self.cells())
