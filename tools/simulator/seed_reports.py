#!/usr/bin/env python3
"""AreaWatch report seeder.

Submits synthetic community flood reports scattered around one or more
centers, so the map has hotspots to rank.

Usage:
    # 115 reports scattered over Luzon
    python -m tools.simulator.seed_reports --server http://localhost:8000 --count 115

    # A tight cluster around Marikina, some flagged for rescue
    python -m tools.simulator.seed_reports --center 14.6507,121.1029 --radius-km 2 --rescue-rate 0.3
"""

from __future__ import annotations

import argparse
import asyncio
import json
import math
import random
import time

import httpx

SEED_NAME = "Seeded Reporter"

# Luzon, roughly; used when no --center is given.
DEFAULT_BOUNDS = {"lat_min": 12.0, "lat_max": 18.5, "lng_min": 119.8, "lng_max": 124.2}

DESCRIPTIONS = [
    "Street flooding reported, water pooling near intersections.",
    "Heavy rain causing minor flooding along a main road.",
    "Drainage overflow observed, water rising slowly.",
    "Flooded low-lying area, passable with caution.",
    "Rapid runoff after rain, water on the roadway.",
]


def scatter_point(center: tuple[float, float], radius_km: float) -> tuple[float, float]:
    """Random point within radius_km of center (flat-earth approximation)."""
    angle = random.uniform(0, 2 * math.pi)
    dist_km = radius_km * math.sqrt(random.random())
    lat = center[0] + (dist_km / 111.0) * math.cos(angle)
    lng = center[1] + (dist_km / (111.0 * math.cos(math.radians(center[0])))) * math.sin(angle)
    return lat, lng


def random_point() -> tuple[float, float]:
    lat = random.uniform(DEFAULT_BOUNDS["lat_min"], DEFAULT_BOUNDS["lat_max"])
    lng = random.uniform(DEFAULT_BOUNDS["lng_min"], DEFAULT_BOUNDS["lng_max"])
    return lat, lng


def make_report_payload(coords: tuple[float, float], rescue_rate: float) -> dict:
    lat, lng = coords
    return {
        "reporterName": SEED_NAME,
        "location": f"Seeded location {lat:.3f}, {lng:.3f}",
        "description": random.choice(DESCRIPTIONS),
        "type": "flood",
        "coordinates": [round(lat, 6), round(lng, 6)],
        "needsRescue": random.random() < rescue_rate,
    }


async def run_seeder(args: argparse.Namespace) -> None:
    points = []
    for _ in range(args.count):
        if args.center is not None:
            points.append(scatter_point(args.center, args.radius_km))
        else:
            points.append(random_point())

    print(f"Submitting {len(points)} reports to {args.server}")
    start = time.monotonic()
    sent = errors = 0
    severities: dict[str, int] = {}

    async with httpx.AsyncClient(timeout=10.0) as client:
        for coords in points:
            try:
                resp = await client.post(
                    f"{args.server}/api/v1/reports",
                    content=json.dumps(make_report_payload(coords, args.rescue_rate)),
                    headers={"content-type": "application/json"},
                )
            except httpx.RequestError as exc:
                errors += 1
                print(f"  request failed: {exc}")
                continue

            if resp.status_code == 201:
                sent += 1
                severity = resp.json()["report"]["severity"]
                severities[severity] = severities.get(severity, 0) + 1
            else:
                errors += 1
                print(f"  HTTP {resp.status_code}: {resp.text[:200]}")

            if args.delay > 0:
                await asyncio.sleep(args.delay)

        elapsed = time.monotonic() - start
        print(f"\nSeeding complete in {elapsed:.1f}s")
        print(f"  Reports stored: {sent}")
        print(f"  Errors: {errors}")
        print(f"  Computed severities: {severities}")

        resp = await client.get(f"{args.server}/api/v1/areas/severity", params={"limit": 5})
        if resp.status_code == 200:
            print("\nTop areas:")
            for area in resp.json()["rankings"]:
                print(f"  {area['area_identifier']:<28} {area['severity']:<9} score={area['score']}")


def main():
    parser = argparse.ArgumentParser(description="AreaWatch report seeder")
    parser.add_argument("--server", default="http://localhost:8000", help="Server URL")
    parser.add_argument("--count", type=int, default=115, help="Number of reports to submit")
    parser.add_argument("--center", type=str, default=None,
                        help="Center lat,lng (default: random points over Luzon)")
    parser.add_argument("--radius-km", type=float, default=5.0, help="Scatter radius in km around --center")
    parser.add_argument("--rescue-rate", type=float, default=0.1, help="Fraction of reports needing rescue")
    parser.add_argument("--delay", type=float, default=0.0, help="Seconds to wait between submissions")

    args = parser.parse_args()

    if args.center is not None:
        lat, lng = args.center.split(",")
        args.center = (float(lat), float(lng))

    asyncio.run(run_seeder(args))


if __name__ == "__main__":
    main()
