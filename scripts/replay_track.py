from __future__ import annotations

import argparse
import csv
import json
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from drivealert.alerts.sinks import create_sink
from drivealert.hazards.loader import load_hazards
from drivealert.session import EngineConfig, ManualScheduler, TelemetrySession
from drivealert.session.collaborators import AttributeCallback
from drivealert.utils.config import load_yaml, resolve_path, section
from drivealert.utils.logging import setup_logging
from drivealert.utils.types import LatLng, RawSample, RoadAttributeCandidate
from drivealert.utils.units import kmh_to_mps


logger = logging.getLogger("drivealert.replay")


class FixedLimitLookup:
    def __init__(self, limit_kmh: float) -> None:
        self._limit_kmh = float(limit_kmh)

    def lookup(self, position: LatLng, done: AttributeCallback) -> None:
        _ = position
        done(RoadAttributeCandidate(inferred_heading_deg=None, road_class=None, inferred_speed_limit_kmh=self._limit_kmh))


def _opt_float(x: Optional[str]) -> Optional[float]:
    if x is None or x == "":
        return None
    return float(x)


def _read_track(path: str) -> List[RawSample]:
    out: List[RawSample] = []
    with open(path, "r", encoding="utf-8") as f:
        for r in csv.DictReader(f):
            if r.get("speed_kmh") not in (None, ""):
                speed_mps = kmh_to_mps(float(r["speed_kmh"]))
            else:
                speed_mps = _opt_float(r.get("speed_mps"))
            out.append(
                RawSample.from_fix(
                    latitude=float(r["latitude"]),
                    longitude=float(r["longitude"]),
                    speed_mps=speed_mps,
                    heading_deg=_opt_float(r.get("heading_deg")),
                    accuracy_m=_opt_float(r.get("accuracy_m")),
                    timestamp_s=float(r["timestamp_s"]),
                )
            )
    return out


def main() -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("--track", required=True, help="CSV with timestamp_s,latitude,longitude,speed_mps|speed_kmh,heading_deg,accuracy_m")
    ap.add_argument("--hazards", default=None, help="Hazard file (JSON or YAML)")
    ap.add_argument("--route", default=None, help="JSON list of [lat, lng] route points")
    ap.add_argument("--config", default="configs/engine.yaml")
    ap.add_argument("--speed-limit", type=float, default=None, help="Fixed speed limit in km/h")
    ap.add_argument("--muted", action="store_true")
    ap.add_argument("--log-level", default="INFO")
    ap.add_argument("--log-file", default=None)
    args = ap.parse_args()

    base_dir = os.getcwd()
    raw_cfg = load_yaml(resolve_path(args.config, base_dir))
    setup_logging(level=args.log_level, log_file=args.log_file, levels=section(raw_cfg, "logging").get("levels"))

    cfg = EngineConfig.from_dict(raw_cfg)
    scheduler = ManualScheduler()
    lookup = FixedLimitLookup(args.speed_limit) if args.speed_limit is not None else None
    session = TelemetrySession(cfg, scheduler, sink=create_sink(cfg.announcements), attribute_lookup=lookup)
    session.muted = bool(args.muted)
    session.start()

    if args.hazards:
        session.set_hazards(load_hazards(resolve_path(args.hazards, base_dir)))
    if args.route:
        with open(resolve_path(args.route, base_dir), "r", encoding="utf-8") as f:
            route = [(float(p[0]), float(p[1])) for p in json.load(f)]
        if len(route) >= 2:
            session.start_navigation(route, route[-1])

    samples = _read_track(resolve_path(args.track, base_dir))
    if not samples:
        raise RuntimeError(f"No samples found in: {args.track}")
    ticks = scheduler.replay(samples, tick_interval_s=cfg.alert_interval_s, frame_interval_s=cfg.frame_interval_s)
    state = session.motion
    print(
        f"samples={len(samples)} ticks={ticks} final_speed_kmh={state.smoothed_speed_kmh:.1f} "
        f"stationary={state.is_stationary} hazards={len(session.hazards)}"
    )
    session.stop()


if __name__ == "__main__":
    main()
