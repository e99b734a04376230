#!/usr/bin/env python3
"""
Example: drop a hostile and watch the turrets engage it.

Spawns a stationary hostile north-east of the origin, then prints the
first turret's state until it starts firing.

Usage:
    python client/example_watch.py
"""

import sys
import os
import time

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from client.defense_client import DefenseClient


def main():
    client = DefenseClient()

    def on_event(event):
        if event.get("event") == "shot_fired":
            data = event.get("data", {})
            print(f"\n  >>> Turret {data.get('turret_id')} fired "
                  f"(total {data.get('total_fired')})")

    client.on_event(on_event)

    hostile = client.spawn_hostile([15.0, 15.0, 0.0])
    print(f"Spawned hostile {hostile['id']} at {hostile['position']}")

    try:
        while True:
            t = client.get_turret(0)
            print(f"\r  state={t['state']:<8} heading={t['heading_deg']:7.2f} "
                  f"align={t['alignment_deg']} cooldown={t['cooldown']:.2f}",
                  end="", flush=True)
            time.sleep(0.1)
    except KeyboardInterrupt:
        print("\nStopping...")
    finally:
        client.close()


if __name__ == "__main__":
    main()
