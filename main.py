"""
TardiSim – Main Entry Point
===========================

Usage examples:
  python main.py                          # 2 tardigrades in the default arena
  python main.py --num 20 --ticks 120000  # bigger, longer world
  python main.py --seed 7                 # reproducible run
  python main.py --no_arena               # open world, bedrock only
  python main.py --load save.json         # continue a saved world
  python main.py --save save.json         # write the final world
  python main.py --keep_going             # don't stop when the world despairs
"""

import argparse
import os

from simulation import Simulation
from snapshot   import read_snapshot, write_snapshot
from visualizer import (ensure_dirs, save_world_snapshot,
                        save_world_chart, append_csv)
from config import (SAVE_DIR, SNAPSHOT_INTERVAL, TOTAL_CREATURES,
                    MAX_TICKS, STATS_INTERVAL)


# ──────────────────────────────────────────────────────────────────────────────
# CLI
# ──────────────────────────────────────────────────────────────────────────────

def parse_args(argv=None):
    p = argparse.ArgumentParser(description="TardiSim – tardigrades on destructible terrain")
    p.add_argument("--num",        type=int,   default=TOTAL_CREATURES,
                   help="Initial number of tardigrades")
    p.add_argument("--ticks",      type=int,   default=MAX_TICKS,
                   help="Number of ticks to simulate")
    p.add_argument("--seed",       type=int,   default=None,
                   help="Random seed for reproducibility")
    p.add_argument("--no_arena",   action="store_true",
                   help="Skip the walls and floor")
    p.add_argument("--load",       default=None,
                   help="Start from a saved world (JSON)")
    p.add_argument("--save",       default=None,
                   help="Write the final world to this JSON file")
    p.add_argument("--keep_going", action="store_true",
                   help="Keep running even when the world despairs")
    p.add_argument("--outdir",     default=SAVE_DIR,
                   help="Output directory")
    p.add_argument("--snapshot_interval", type=int, default=SNAPSHOT_INTERVAL,
                   help="Save a world snapshot every N ticks (0 = never)")
    return p.parse_args(argv)


# ──────────────────────────────────────────────────────────────────────────────
# Callbacks
# ──────────────────────────────────────────────────────────────────────────────

class SimCallbacks:
    """Bundles the per-tick callback used by the simulation."""

    def __init__(self, outdir: str, snapshot_interval: int,
                 stats_interval: int = STATS_INTERVAL):
        self.outdir            = outdir
        self.snapshot_interval = snapshot_interval
        self.stats_interval    = stats_interval

    def on_tick(self, summary, world):
        if summary.age % self.stats_interval == 0:
            append_csv(summary.stats(), self.outdir)

        if self.snapshot_interval and summary.age % self.snapshot_interval == 0:
            path = save_world_snapshot(world, summary.time, self.outdir)
            print(f"  → Snapshot: {path}")


# ──────────────────────────────────────────────────────────────────────────────
# Main
# ──────────────────────────────────────────────────────────────────────────────

def main(argv=None):
    args = parse_args(argv)
    outdir = args.outdir
    ensure_dirs(outdir)

    print("=" * 60)
    print("  TardiSim – Tardigrade Terrain Simulator")
    print("=" * 60)
    print(f"  Tardigrades: {args.num if not args.load else 'from ' + args.load}")
    print(f"  Ticks      : {args.ticks}")
    print(f"  Seed       : {args.seed}")
    print(f"  Arena      : {'no' if args.no_arena else 'yes'}")
    print(f"  Output dir : {outdir}")
    print("=" * 60)

    cb = SimCallbacks(
        outdir            = outdir,
        snapshot_interval = args.snapshot_interval,
    )

    sim = Simulation(
        seed             = args.seed,
        stop_on_despair  = not args.keep_going,
        on_tick_callback = cb.on_tick,
    )

    if args.load:
        read_snapshot(sim.world, args.load)
        print(f"  Loaded {len(sim.world.creatures)} tardigrades from {args.load}")
    else:
        if not args.no_arena:
            sim.build_arena()
        sim.populate(args.num)

    summary = sim.run(args.ticks)

    # Final chart
    print("\nSaving world chart …")
    chart_path = save_world_chart(sim.stats, outdir, "world_final.png")
    if chart_path:
        print(f"  → {chart_path}")

    snap = save_world_snapshot(sim.world, sim.clock, outdir)
    print(f"  → Final snapshot: {snap}")

    if args.save:
        print(f"  → Saved world: {write_snapshot(sim.world, args.save)}")

    if summary is not None:
        print(f"\nFinal score {summary.score} after {summary.year} years "
              f"with {summary.population} tardigrades.")
    print("Done! All outputs saved to:", os.path.abspath(outdir))


if __name__ == "__main__":
    main()
