"""
TardiSim Server  –  Flask + Server-Sent Events
==============================================

Endpoints:
  POST /start        Start (or restart) a world with JSON config body
  POST /stop         Stop ticking (the world is kept for export / paint)
  GET  /stream       SSE stream – browser subscribes here for live data
  GET  /status       Current run state as JSON
  POST /paint        Draw / erase terrain  {"mode", "x", "y"} or {"mode", "rect"}
  GET  /export       Full world snapshot as JSON
  POST /import       Replace the world with a snapshot

Run:
  python server.py
  # → http://localhost:5000
"""

import math
import threading
import queue
import json
import time
import sys
import os

from flask import Flask, Response, request, jsonify

# Make sure the modules next to this file are importable
sys.path.insert(0, os.path.dirname(__file__))

from simulation import Simulation
from snapshot import InvalidSnapshot
from config import TOTAL_CREATURES, FRAME_RATE, MAX_TICKS, PAINT_MAX_CELLS

# ──────────────────────────────────────────────────────────────────────────────
app = Flask(__name__)

# Global simulation state
_sim:         Simulation | None = None
_sim_lock     = threading.Lock()      # every world mutation goes through this
_sim_thread:  threading.Thread | None = None
_stop_event   = threading.Event()
_tick_queue   = queue.Queue(maxsize=200)   # holds dicts to stream
_sim_status   = {
    "running":    False,
    "age":        0,
    "population": 0,
    "cfg":        {},
}
_status_lock  = threading.Lock()


# ──────────────────────────────────────────────────────────────────────────────
# CORS helper – allow a dev front-end (any origin) to call us
# ──────────────────────────────────────────────────────────────────────────────

@app.after_request
def add_cors(response):
    response.headers["Access-Control-Allow-Origin"]  = "*"
    response.headers["Access-Control-Allow-Headers"] = "Content-Type"
    response.headers["Access-Control-Allow-Methods"] = "GET, POST, OPTIONS"
    return response

@app.route("/", methods=["OPTIONS"])
@app.route("/<path:p>", methods=["OPTIONS"])
def preflight(p=""):
    return Response(status=200)


# ──────────────────────────────────────────────────────────────────────────────
# Simulation thread
# ──────────────────────────────────────────────────────────────────────────────

def _build_cfg(data: dict) -> dict:
    """Merge request JSON with defaults."""
    seed = data.get("seed")
    return {
        "num":              int(data.get("num",            TOTAL_CREATURES)),
        "seed":             int(seed) if seed is not None else None,
        "arena":            bool(data.get("arena",         True)),
        "max_ticks":        int(data.get("maxTicks",       MAX_TICKS)),
        "ticks_per_second": float(data.get("ticksPerSecond", FRAME_RATE)),
        "stream_every":     max(1, int(data.get("streamEvery", 1))),
        "stop_on_despair":  bool(data.get("stopOnDespair", True)),
    }


def _new_simulation(cfg: dict) -> Simulation:
    sim = Simulation(seed=cfg["seed"], stop_on_despair=cfg["stop_on_despair"])
    if cfg["arena"]:
        sim.build_arena()
    sim.populate(cfg["num"])
    return sim


def _push(out_q: queue.Queue, payload: dict):
    # Non-blocking put; drop oldest frame if queue full
    if out_q.full():
        try:
            out_q.get_nowait()
        except queue.Empty:
            pass
    out_q.put(payload)


def _sim_worker(sim: Simulation, cfg: dict, stop_evt: threading.Event,
                out_q: queue.Queue):
    """Tick the world in a background thread; push summaries into the queue."""
    pause = 1.0 / cfg["ticks_per_second"] if cfg["ticks_per_second"] > 0 else 0.0

    with _status_lock:
        _sim_status["running"] = True

    try:
        for _ in range(cfg["max_ticks"]):
            if stop_evt.is_set():
                break
            with _sim_lock:
                summary = sim.run(1)

            with _status_lock:
                _sim_status["age"]        = summary.age
                _sim_status["population"] = summary.population

            if summary.age % cfg["stream_every"] == 0:
                payload = summary.to_dict()
                payload["type"] = "tick"
                _push(out_q, payload)

            if summary.despair and sim.stop_on_despair:
                break
            if pause:
                time.sleep(pause)
    finally:
        with _status_lock:
            _sim_status["running"] = False
        _push(out_q, {"type": "done", "age": _sim_status["age"]})


# ──────────────────────────────────────────────────────────────────────────────
# Routes
# ──────────────────────────────────────────────────────────────────────────────

def _no_world():
    return jsonify({"error": "no world – POST /start first"}), 409


@app.route("/start", methods=["POST"])
def start():
    global _sim, _sim_thread, _stop_event, _tick_queue

    # Stop any running world
    _stop_event.set()
    if _sim_thread and _sim_thread.is_alive():
        _sim_thread.join(timeout=3)

    # Reset
    _stop_event = threading.Event()
    _tick_queue = queue.Queue(maxsize=200)
    cfg = _build_cfg(request.get_json(force=True, silent=True) or {})
    with _sim_lock:
        _sim = _new_simulation(cfg)
    with _status_lock:
        _sim_status["cfg"]        = cfg
        _sim_status["age"]        = 0
        _sim_status["population"] = len(_sim.world.creatures)
        _sim_status["running"]    = False

    _sim_thread = threading.Thread(
        target=_sim_worker,
        args=(_sim, cfg, _stop_event, _tick_queue),
        daemon=True,
    )
    _sim_thread.start()
    return jsonify({"status": "started", "cfg": cfg})


@app.route("/stop", methods=["POST"])
def stop():
    _stop_event.set()
    return jsonify({"status": "stopped"})


@app.route("/status", methods=["GET"])
def status():
    with _status_lock:
        return jsonify(dict(_sim_status))


def _finite(value) -> float:
    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f"{value!r} is not a finite number")
    return number


@app.route("/paint", methods=["POST"])
def paint():
    """Draw (solid) or erase (empty) terrain around a point or over a rect."""
    if _sim is None:
        return _no_world()
    data = request.get_json(force=True, silent=True) or {}
    if not isinstance(data, dict):
        return jsonify({"error": "paint request must be a JSON object"}), 400
    mode = str(data.get("mode", "draw")).lower()
    if mode not in ("draw", "erase"):
        return jsonify({"error": f"unknown mode {mode!r}"}), 400
    present = mode == "draw"
    try:
        if "rect" in data:
            x, y, w, h = (_finite(v) for v in data["rect"])
            w, h = int(w), int(h)
            if w > 0 and h > 0 and w * h > PAINT_MAX_CELLS:
                raise ValueError(f"rect covers more than {PAINT_MAX_CELLS} cells")
        else:
            x, y = _finite(data["x"]), _finite(data["y"])
    except (KeyError, TypeError, ValueError) as exc:
        return jsonify({"error": f"bad paint request: {exc}"}), 400

    with _sim_lock:
        if "rect" in data:
            _sim.paint_terrain(present, (x, y, w, h))
        else:
            _sim.paint_brush(present, x, y)
    return jsonify({"status": "ok", "mode": mode})


@app.route("/export", methods=["GET"])
def export():
    if _sim is None:
        return _no_world()
    with _sim_lock:
        return jsonify(_sim.export_state())


@app.route("/import", methods=["POST"])
def import_():
    global _sim
    data = request.get_json(force=True, silent=True)
    with _sim_lock:
        sim = _sim or Simulation()
        try:
            sim.import_state(data)
        except InvalidSnapshot as exc:
            return jsonify({"error": str(exc)}), 400
        _sim = sim
        population = len(sim.world.creatures)
    with _status_lock:
        _sim_status["population"] = population
        _sim_status["age"]        = 0
    return jsonify({"status": "imported", "population": population})


@app.route("/stream", methods=["GET"])
def stream():
    """SSE endpoint – browser subscribes and receives tick summaries."""

    def event_gen():
        # Send a hello so the browser knows it's connected
        yield "data: {\"type\": \"connected\"}\n\n"

        while True:
            try:
                payload = _tick_queue.get(timeout=1)
                yield f"data: {json.dumps(payload)}\n\n"
                if payload.get("type") == "done":
                    break
            except queue.Empty:
                # Keep-alive ping
                yield "data: {\"type\": \"ping\"}\n\n"

    return Response(
        event_gen(),
        mimetype="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "X-Accel-Buffering": "no",    # disable nginx buffering if behind proxy
        },
    )


# ──────────────────────────────────────────────────────────────────────────────

if __name__ == "__main__":
    print("=" * 50)
    print("  TardiSim Server  →  http://localhost:5000")
    print("  SSE stream       →  http://localhost:5000/stream")
    print("=" * 50)
    app.run(host="0.0.0.0", port=5000, threaded=True, debug=False)
