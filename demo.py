"""
Quick demo – runs ten simulated years with a dozen tardigrades
and saves snapshots, a chart and a world save without needing a display.
"""
import os, sys
sys.path.insert(0, os.path.dirname(__file__))

from simulation import Simulation
from snapshot import write_snapshot
from visualizer import (ensure_dirs, save_world_snapshot,
                        save_world_chart, append_csv)

OUT = "output/demo"
ensure_dirs(OUT)

def on_tick(summary, world):
    if summary.age % 100 == 0:
        append_csv(summary.stats(), OUT)
    if summary.age % 2000 == 0:
        save_world_snapshot(world, summary.time, OUT)

sim = Simulation(
    seed             = 42,
    stop_on_despair  = False,
    on_tick_callback = on_tick,
)
sim.build_arena()
sim.populate(12)
sim.run(10000)

save_world_chart(sim.stats, OUT, "demo_chart.png")
write_snapshot(sim.world, os.path.join(OUT, "saves", "demo.json"))
print("\nAll outputs in:", OUT)
