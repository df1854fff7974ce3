from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional

import yaml

from drivealert.utils.types import HazardEntity
from drivealert.utils.units import mph_to_kmh


logger = logging.getLogger("drivealert.hazards.loader")

OFFICIAL_TYPES: Dict[str, str] = {
    "SPEED_CAM": "speed-camera",
    "RED_LIGHT_CAM": "red-light-camera",
    "POLICE_POST": "checkpoint",
    "AI_CAM": "ai-enforcement",
}

_COMPASS_POINTS = ("N", "NNE", "NE", "ENE", "E", "ESE", "SE", "SSE", "S", "SSW", "SW", "WSW", "W", "WNW", "NW", "NNW")
CARDINAL_DIRECTIONS: Dict[str, float] = {p: i * 22.5 for i, p in enumerate(_COMPASS_POINTS)}

_NUMBER = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(mph)?", re.IGNORECASE)


@dataclass(frozen=True)
class HazardCorrection:
    hazard_id: str
    original_latitude: float
    original_longitude: float
    corrected_latitude: float
    corrected_longitude: float
    timestamp_s: float


def parse_official_cameras(records: Iterable[Mapping[str, Any]]) -> List[HazardEntity]:
    out: List[HazardEntity] = []
    for r in records:
        raw_type = str(r.get("type", "SPEED_CAM")).upper()
        category = OFFICIAL_TYPES.get(raw_type)
        if category is None:
            raise ValueError(f"Unknown official camera type: {raw_type}")
        limit = r.get("speed_limit")
        out.append(
            HazardEntity(
                id=str(r["id"]),
                latitude=float(r["lat"]),
                longitude=float(r["lng"]),
                category=category,  # type: ignore[arg-type]
                source="official",
                speed_limit_kmh=None if limit is None else float(limit),
                name=None if r.get("name") is None else str(r["name"]),
                city=None if r.get("city") is None else str(r["city"]),
            )
        )
    return out


def parse_maxspeed(value: Optional[str]) -> Optional[float]:
    if value is None:
        return None
    m = _NUMBER.match(str(value))
    if m is None:
        return None
    v = float(m.group(1))
    return mph_to_kmh(v) if m.group(2) else v


def parse_direction(value: Optional[str]) -> Optional[float]:
    """Degrees from an OSM ``direction`` tag, numeric or cardinal (``NE``).

    Multi-valued tags keep the first value. ``forward``/``backward`` and
    anything else unreadable give None.
    """
    if value is None:
        return None
    text = str(value).split(";")[0].strip().upper()
    if text in CARDINAL_DIRECTIONS:
        return CARDINAL_DIRECTIONS[text]
    try:
        return float(text) % 360.0
    except ValueError:
        return None


def parse_overpass_elements(payload: Mapping[str, Any]) -> List[HazardEntity]:
    """Community speed cameras from an Overpass ``[out:json]`` response."""
    out: List[HazardEntity] = []
    for el in payload.get("elements", []) or []:
        if el.get("type") != "node" or "lat" not in el or "lon" not in el:
            continue
        tags = el.get("tags", {}) or {}
        enforcement = str(tags.get("enforcement", "")).lower()
        category = "red-light-camera" if enforcement == "traffic_signals" else "speed-camera"
        out.append(
            HazardEntity(
                id=f"osm-{el['id']}",
                latitude=float(el["lat"]),
                longitude=float(el["lon"]),
                category=category,  # type: ignore[arg-type]
                source="community",
                speed_limit_kmh=parse_maxspeed(tags.get("maxspeed")),
                direction_deg=parse_direction(tags.get("direction")),
                name=tags.get("name"),
            )
        )
    return out


def load_hazards(path: str) -> List[HazardEntity]:
    p = Path(path)
    with open(p, "r", encoding="utf-8") as f:
        if p.suffix.lower() in {".yaml", ".yml"}:
            data = yaml.safe_load(f) or []
        else:
            data = json.load(f)
    if isinstance(data, dict):
        hazards = [HazardEntity.from_dict(dict(d)) for d in data.get("hazards", []) or []]
        hazards.extend(parse_official_cameras(data.get("official", []) or []))
        if "elements" in data:
            hazards.extend(parse_overpass_elements(data))
    elif isinstance(data, list):
        hazards = [HazardEntity.from_dict(dict(d)) for d in data]
    else:
        raise ValueError(f"Expected a list or dict of hazards in: {path}")
    logger.info("Loaded %d hazards from %s", len(hazards), path)
    return hazards


def apply_corrections(hazards: Iterable[HazardEntity], corrections: Mapping[str, HazardCorrection]) -> List[HazardEntity]:
    out: List[HazardEntity] = []
    for h in hazards:
        c = corrections.get(h.id)
        if c is None:
            out.append(h)
        else:
            out.append(replace(h, latitude=float(c.corrected_latitude), longitude=float(c.corrected_longitude)))
    return out


def make_correction(hazard: HazardEntity, latitude: float, longitude: float, timestamp_s: float) -> HazardCorrection:
    return HazardCorrection(
        hazard_id=hazard.id,
        original_latitude=float(hazard.latitude),
        original_longitude=float(hazard.longitude),
        corrected_latitude=float(latitude),
        corrected_longitude=float(longitude),
        timestamp_s=float(timestamp_s),
    )


def hazard_stats(hazards: Iterable[HazardEntity]) -> Dict[str, Any]:
    by_category: Dict[str, int] = {}
    cities: List[str] = []
    total = 0
    for h in hazards:
        total += 1
        by_category[h.category] = by_category.get(h.category, 0) + 1
        if h.city is not None and h.city not in cities:
            cities.append(h.city)
    return {"total": total, "by_category": by_category, "cities": cities}
