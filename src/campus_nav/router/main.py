# main.py
# Entry point: interactive console on top of NavigationSystem.
# In production, feed update() from the real location subscription instead.
#
#   python -m campus_nav.router.main [map.json]
#
# Commands: scan <qr>, dests [accessible], go <dest_id> [accessible] [ar],
#           gps <lat> <lon> [heading], next, simulate, status, stop, quit

import logging
import sys
import time

from ..voice.guidance import ConsoleGuidance
from .geo_utils import destination_point
from .models import UserLocation
from .nav_config import NavConfig
from .navigator import NavigationSystem

# ------------------------------------------------------------------
# Logging setup: configure once here, all modules inherit
# ------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%H:%M:%S",
)

# ------------------------------------------------------------------
# Config: tweak thresholds or paths here, not inside the modules
# ------------------------------------------------------------------
config = NavConfig(
    step_completion_threshold_m=5.0,
    direction_tolerance_deg=45.0,
    log_dir="logs",
)

SIM_WALKING_SPEED_MS = 1.4
SIM_MAX_SAMPLES = 1000


def parse_floats(parts, count: int):
    if len(parts) != count:
        raise ValueError(f"Expected {count} numbers, got {len(parts)}")
    return [float(x) for x in parts]


def simulate_walk(nav: NavigationSystem) -> None:
    """Walk the active route with synthetic fixes along each step's direction."""
    interval = config.nominal_sample_interval_s
    t = time.time()
    samples = 0
    step = None
    lat = lon = 0.0

    while nav.is_active and samples < SIM_MAX_SAMPLES:
        current = nav.current_step
        if current is None:
            break
        if current is not step:
            step = current
            origin = nav.campus_map.nodes[step.from_node].coordinates
            lat, lon = origin.lat, origin.lon
        else:
            lat, lon = destination_point(lat, lon, step.direction.degrees, SIM_WALKING_SPEED_MS * interval)

        nav.update(UserLocation(lat, lon, heading=step.direction.degrees, timestamp=t))
        print(f"  GPS ({lat:.6f}, {lon:.6f}) → {nav.progress:5.1f}%  {nav.remaining_distance:6.1f} m left")
        t += interval
        samples += 1
        # Simulate GPS poll interval (remove in real use)
        time.sleep(0.02)


def main() -> None:
    map_path = sys.argv[1] if len(sys.argv) > 1 else None
    nav = NavigationSystem(map_path, config=config, guidance=ConsoleGuidance())

    print("Commands:")
    print("  scan <qr_code>")
    print("  dests [accessible]")
    print("  go <destination_id> [accessible] [ar]")
    print("  gps <lat> <lon> [heading]")
    print("  next | simulate | status | stop | quit")

    while True:
        try:
            line = input("> ").strip()
        except EOFError:
            break
        if not line:
            continue

        if line.lower() in ("q", "quit", "exit"):
            break

        parts = line.split()
        cmd = parts[0].lower()
        args = parts[1:]

        try:
            if cmd == "scan" and args:
                _, msg, _ = nav.scan_qr(args[0])
                print("[NAV]", msg)

            elif cmd == "dests":
                for dest in nav.list_destinations(require_accessible="accessible" in args):
                    print(f"  {dest.node.id:<16} {dest}")

            elif cmd == "go" and args:
                ok, msg = nav.start_navigation(
                    None, args[0],
                    require_accessible="accessible" in args[1:],
                    ar_mode="ar" in args[1:],
                )
                print("[NAV]", msg)

            elif cmd == "gps":
                if len(args) == 3:
                    lat, lon, heading = parse_floats(args, 3)
                else:
                    lat, lon = parse_floats(args, 2)
                    heading = None
                state = nav.update(UserLocation(lat, lon, heading=heading, timestamp=time.time()))
                print(f"[NAV] step {state.current_step_index + 1}, {nav.remaining_distance:.0f} m left")

            elif cmd == "next":
                if not nav.next_step():
                    print("[NAV] Navigation is not active.")

            elif cmd == "simulate":
                simulate_walk(nav)

            elif cmd == "status":
                step = nav.current_step
                if step is None:
                    print("[NAV] Idle.")
                else:
                    print(f"[NAV] Step {step.step_number}: {step.instruction}")
                    print(f"      {nav.progress:.0f}% done, {nav.remaining_distance:.0f} m left"
                          + (" - WRONG DIRECTION" if nav.wrong_direction else ""))

            elif cmd == "stop":
                nav.stop_navigation()

            else:
                print("[NAV] Unknown command.")

        except ValueError as e:
            print("[ERR]", e)

    nav.stop_navigation()


if __name__ == "__main__":
    main()
