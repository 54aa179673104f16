"""
Visualizer for TardiSim.

Produces:
  1. World snapshots  – terrain cells, tardigrade segments and symbols
  2. Aggregate chart  – population, thrill, love and score over time
  3. CSV log          – periodic stats rows
"""

import os
import csv
import numpy as np
import matplotlib
matplotlib.use("Agg")          # non-interactive backend (no display needed)
import matplotlib.pyplot as plt

from genome import skin_to_color
from config import SAVE_DIR, LOG_CSV, SYMBOL_LOVE, TICKS_PER_YEAR

CELL_BASE  = 0.5
CELL_LIGHT = (0.3, 0.6, 0.6)   # per-channel weight of a cell's integrity


# ──────────────────────────────────────────────────────────────────────────────
# Directory setup
# ──────────────────────────────────────────────────────────────────────────────

def ensure_dirs(base: str = SAVE_DIR):
    for sub in ("snapshots", "charts", "saves"):
        os.makedirs(os.path.join(base, sub), exist_ok=True)


def cell_rgb(color) -> tuple:
    """Screen colour of a terrain cell; worn cells look darker."""
    return tuple(
        float(np.clip(CELL_BASE + w * c, 0.0, 1.0))
        for w, c in zip(CELL_LIGHT, color)
    )


# ──────────────────────────────────────────────────────────────────────────────
# World snapshot
# ──────────────────────────────────────────────────────────────────────────────

def save_world_snapshot(world, time: float, base: str = SAVE_DIR,
                        view=None):
    """
    Render the world around the population.
    `view` = (xmin, xmax, ymin, ymax) in world units; default fits the
    creatures with a margin.
    """
    members, cells, symbols = world.snapshot(time)

    if view is None:
        if members:
            xs = [m[0] for m in members]
            ys = [m[1] for m in members]
            cx, cy = (min(xs) + max(xs)) / 2, (min(ys) + max(ys)) / 2
            half = max(0.5, (max(xs) - min(xs)) / 2 + 0.2,
                       (max(ys) - min(ys)) / 2 + 0.2)
        else:
            cx, cy, half = 0.0, 0.0, 1.0
        view = (cx - half, cx + half, cy - half, cy + half)
    xmin, xmax, ymin, ymax = view

    fig, ax = plt.subplots(figsize=(6, 6), dpi=100)
    ax.set_xlim(xmin, xmax)
    ax.set_ylim(ymin, ymax)
    ax.set_aspect("equal")
    ax.set_facecolor("#111111")
    fig.patch.set_facecolor("#111111")
    ax.set_title(f"Year {world.age // TICKS_PER_YEAR}  "
                 f"({len(world.creatures)} tardigrades, score {world.score})",
                 color="white", fontsize=10)
    ax.tick_params(colors="white")
    for spine in ax.spines.values():
        spine.set_edgecolor("#444444")

    # Bedrock
    if ymin < 0:
        ax.axhspan(ymin, min(0, ymax), color="#221a14", zorder=0)

    visible = [c for c in cells if xmin <= c[0] <= xmax and ymin <= c[1] <= ymax]
    if visible:
        ax.scatter([c[0] for c in visible], [c[1] for c in visible],
                   c=[cell_rgb(c[2]) for c in visible],
                   s=2, marker="s", linewidths=0, zorder=1)

    # Tail first so heads are drawn on top
    if members:
        ordered = members[::-1]
        ax.scatter([m[0] for m in ordered], [m[1] for m in ordered],
                   c=[[v / 255 for v in skin_to_color(m[4])] for m in ordered],
                   s=[12 * m[3] ** 2 for m in ordered],
                   linewidths=0, zorder=2)

    for x, y, index, age in symbols:
        marker = "h" if index == SYMBOL_LOVE else "*"
        color  = "#FF4466" if index == SYMBOL_LOVE else "#FFDD44"
        ax.scatter([x], [y + age * .1], marker=marker, color=color,
                   s=60, alpha=max(0.0, 1.0 - age), zorder=3)

    path = os.path.join(base, "snapshots", f"tick_{world.age:08d}.png")
    plt.savefig(path, dpi=100, bbox_inches="tight", facecolor=fig.get_facecolor())
    plt.close(fig)
    return path


# ──────────────────────────────────────────────────────────────────────────────
# Aggregate chart
# ──────────────────────────────────────────────────────────────────────────────

def save_world_chart(stats: list, base: str = SAVE_DIR,
                     filename: str = "world.png"):
    """
    Plot population (left) against thrill and love (right).
    """
    if not stats:
        return
    ages       = [s["age"]        for s in stats]
    population = [s["population"] for s in stats]
    thrill     = [s["thrill"]     for s in stats]
    love       = [s["love"]       for s in stats]
    score      = [s["score"]      for s in stats]

    fig, ax1 = plt.subplots(figsize=(12, 5), dpi=100)
    fig.patch.set_facecolor("#111111")
    ax1.set_facecolor("#111111")

    ax1.plot(ages, population, color="#44FF44", linewidth=1.2,
             label="Tardigrades", zorder=3)
    ax1.set_ylabel("Tardigrades", color="white")
    ax1.set_ylim(0, max(population) * 1.2 + 1)
    ax1.tick_params(axis="both", colors="white")
    ax1.set_xlabel("Tick", color="white")

    ax2 = ax1.twinx()
    ax2.set_facecolor("#111111")
    ax2.plot(ages, thrill, color="#FFDD44", linewidth=1.0,
             label="Thrill", zorder=2)
    ax2.plot(ages, love, color="#FF4466", linewidth=1.0,
             linestyle="--", label="Love", zorder=2)
    ax2.set_ylabel("Thrill / love", color="white")
    ax2.tick_params(colors="white")

    for spine in ax1.spines.values():
        spine.set_edgecolor("#444444")

    lines1, labels1 = ax1.get_legend_handles_labels()
    lines2, labels2 = ax2.get_legend_handles_labels()
    ax1.legend(lines1 + lines2, labels1 + labels2,
               facecolor="#222222", labelcolor="white",
               loc="upper left", fontsize=8)

    ax1.set_title(f"World history  (final score {score[-1]})",
                  color="white", fontsize=12)
    plt.tight_layout()
    path = os.path.join(base, "charts", filename)
    plt.savefig(path, dpi=100, bbox_inches="tight",
                facecolor=fig.get_facecolor())
    plt.close(fig)
    return path


# ──────────────────────────────────────────────────────────────────────────────
# CSV log
# ──────────────────────────────────────────────────────────────────────────────

def append_csv(stats: dict, base: str = SAVE_DIR):
    """Append one stats row to a CSV file."""
    if not LOG_CSV:
        return
    path = os.path.join(base, "world_log.csv")
    file_exists = os.path.isfile(path)
    with open(path, "a", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=list(stats.keys()))
        if not file_exists:
            writer.writeheader()
        writer.writerow(stats)
    return path
