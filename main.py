#!/usr/bin/env python3
"""
Turret Defense Simulator - Entry Point

    python main.py                       # 3D window
    python main.py --headless -d 30      # no window, API only, 30 s
    python main.py --config sim.json
"""

import sys
import os
import time
import argparse
import logging

# Add project root to path so canonical module imports work
# (e.g. "from game.manager import DefenseManager")
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from config import load_config, SimConfig

logger = logging.getLogger("turret_sim")

HEADLESS_HZ = 60.0


def run_headless(config: SimConfig, duration: float = None):
    """Fixed-step loop without a window. Muzzles resolve immediately from
    the procedural body dimensions."""
    from game.manager import DefenseManager
    from api.rest_server import DefenseAPI
    from api.ws_server import EventBroadcaster
    from turret.muzzle import OffsetMuzzle, muzzle_offset_from_bounds

    manager = DefenseManager(config)

    # Placeholder body bounds (see rendering.models.build_turret_body)
    offset = muzzle_offset_from_bounds([-0.6, -0.6, 0.0], [0.6, 1.5, 1.0])
    for turret in manager.turrets:
        turret.resolve_muzzle(OffsetMuzzle(turret, offset))

    if config.server.enabled:
        api = DefenseAPI(host=config.server.host, port=config.server.api_port)
        api.bind(manager)
        api.start()
        ws = EventBroadcaster(host=config.server.host, port=config.server.ws_port)
        ws.start()
        manager.add_event_listener(ws.push_event)

    step = 1.0 / HEADLESS_HZ
    start = time.monotonic()
    next_tick = start
    logger.info(f"Headless simulation at {HEADLESS_HZ:.0f} Hz")
    try:
        while duration is None or time.monotonic() - start < duration:
            manager.update(step)
            next_tick += step
            delay = next_tick - time.monotonic()
            if delay > 0:
                time.sleep(delay)
    except KeyboardInterrupt:
        logger.info("Interrupted")

    status = manager.get_full_status()
    logger.info(f"Stopped after {status['sim_time']:.1f}s sim time, "
                f"{status['stats']['shots_fired']} shots fired")
    return manager


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Turret defense simulator")
    parser.add_argument("--config", "-c", default=None, help="JSON config file")
    parser.add_argument("--headless", action="store_true", help="Run without a window")
    parser.add_argument("--duration", "-d", type=float, default=None,
                        help="Headless run time in seconds (default: until Ctrl-C)")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    config = load_config(args.config)

    if args.headless:
        run_headless(config, args.duration)
    else:
        from app import main as run_app
        run_app(config)


if __name__ == "__main__":
    main()
