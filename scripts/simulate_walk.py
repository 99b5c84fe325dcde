#!/usr/bin/env python3
"""Walk a simulated series toward a plot and print every route update.

Uses the configured OSRM service (``PLOTFINDER_ROUTING_BASE_URL``) and
the bundled walk series unless ``--series-file`` is given.  Useful to
watch the proximity fallback flip and to capture a sample log for
offline inspection.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Allow running from repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pyplotfinder import PlotFinderClient, PlotFinderConfig, PlotFinderError, RouteUpdate  # noqa: E402
from pyplotfinder.location.feeds import load_series  # noqa: E402


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Simulated walk toward a plot marker.")
    parser.add_argument(
        "token",
        help="Marker token of the destination (JSON, lat:..|lng:.., URL or POINT(lng lat)).",
    )
    parser.add_argument(
        "--series",
        default=None,
        help="Series id to walk (default: first series).",
    )
    parser.add_argument(
        "--series-file",
        type=Path,
        default=None,
        help="Series document to load instead of the bundled one.",
    )
    parser.add_argument(
        "--interval-ms",
        type=int,
        default=1000,
        help="Emission interval in milliseconds (minimum 250).",
    )
    parser.add_argument(
        "--duration",
        type=float,
        default=10.0,
        help="Seconds to walk before stopping.",
    )
    parser.add_argument(
        "--export",
        type=Path,
        default=None,
        help="Write the sample log to this JSON file on exit.",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logs.",
    )
    return parser.parse_args()


def _print_update(update: RouteUpdate) -> None:
    origin = update.request.origin
    notice = " (outside radius, starting at entrance)" if update.outside_radius else ""
    print(
        f"[walk] route from {origin.lat:.6f},{origin.lng:.6f}: "
        f"{update.result.distance_m:.0f} m, {update.result.duration_s / 60:.1f} min{notice}"
    )


async def _run(args: argparse.Namespace) -> int:
    config = PlotFinderConfig.from_env(simulated_interval_ms=args.interval_ms)
    series = load_series(args.series_file) if args.series_file else None

    async with PlotFinderClient(config, series=series) as client:
        client.coordinator.add_route_listener(_print_update)
        client.coordinator.add_error_listener(lambda exc: print(f"[walk] routing failed: {exc}", file=sys.stderr))

        decoded = client.scan(args.token)
        if not decoded.has_coordinates:
            print("[walk] token carries no geocoded data", file=sys.stderr)
            return 2

        if args.series:
            client.arbiter.select_series(args.series)
        client.arbiter.set_simulated(True)
        await asyncio.sleep(args.duration)
        await client.coordinator.wait()

        print(f"[walk] {len(client.arbiter.samples)} samples kept")
        if args.export is not None:
            path = client.write_samples(args.export)
            print(f"[walk] samples written to {path}")
    return 0


def main() -> int:
    args = _parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        return asyncio.run(_run(args))
    except PlotFinderError as exc:
        print(f"[walk] {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
