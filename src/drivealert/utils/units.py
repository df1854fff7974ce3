from __future__ import annotations

KMH_PER_MPH = 1.609344


def mps_to_kmh(v_mps: float) -> float:
    return float(v_mps) * 3.6


def kmh_to_mps(v_kmh: float) -> float:
    return float(v_kmh) / 3.6


def mph_to_kmh(v_mph: float) -> float:
    return float(v_mph) * KMH_PER_MPH
