from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, Tuple


class SpeedLimitClassifier(Protocol):
    def classify(self, road_name: Optional[str], road_type: Optional[str]) -> Optional[float]:
        ...


@dataclass(frozen=True)
class KeywordRule:
    limit_kmh: float
    name_keywords: Tuple[str, ...] = ()
    type_keywords: Tuple[str, ...] = ()

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "KeywordRule":
        if "limit_kmh" not in d:
            raise ValueError("classifier rule requires limit_kmh")
        names = d.get("name_keywords", []) or []
        types = d.get("type_keywords", []) or []
        if not isinstance(names, list) or not isinstance(types, list):
            raise ValueError("classifier rule keywords must be lists")
        return KeywordRule(
            limit_kmh=float(d["limit_kmh"]),
            name_keywords=tuple(str(k).lower() for k in names),
            type_keywords=tuple(str(k).lower() for k in types),
        )

    def matches(self, name: str, road_type: str) -> bool:
        return any(k in name for k in self.name_keywords) or any(k in road_type for k in self.type_keywords)


DEFAULT_RULES: Tuple[KeywordRule, ...] = (
    KeywordRule(100.0, ("expressway", "nh-", "national highway"), ("motorway",)),
    KeywordRule(80.0, ("sh-", "state highway"), ("trunk",)),
    KeywordRule(60.0, ("ring road", "outer ring", "inner ring"), ("primary",)),
    KeywordRule(50.0, ("marg", "road"), ("secondary", "tertiary")),
    KeywordRule(30.0, ("service",), ("service",)),
    KeywordRule(30.0, (), ("residential", "living_street")),
)


@dataclass
class KeywordSpeedLimitClassifier(SpeedLimitClassifier):
    """First matching substring rule wins; otherwise the default applies."""
    rules: List[KeywordRule]
    default_kmh: Optional[float] = 40.0

    def classify(self, road_name: Optional[str], road_type: Optional[str]) -> Optional[float]:
        name = (road_name or "").lower()
        kind = (road_type or "").lower()
        for rule in self.rules:
            if rule.matches(name, kind):
                return float(rule.limit_kmh)
        return None if self.default_kmh is None else float(self.default_kmh)


@dataclass
class NullSpeedLimitClassifier(SpeedLimitClassifier):
    def classify(self, road_name: Optional[str], road_type: Optional[str]) -> Optional[float]:
        _ = (road_name, road_type)
        return None


def create_classifier(backend: str, params: Dict[str, Any]) -> SpeedLimitClassifier:
    if backend == "keywords":
        raw_rules = params.get("rules")
        if raw_rules is None:
            rules = list(DEFAULT_RULES)
        elif isinstance(raw_rules, list):
            rules = [KeywordRule.from_dict(dict(r)) for r in raw_rules]
        else:
            raise ValueError("classifier rules must be a list")
        default = params.get("default_kmh", 40.0)
        return KeywordSpeedLimitClassifier(rules=rules, default_kmh=None if default is None else float(default))
    if backend == "none":
        return NullSpeedLimitClassifier()
    raise ValueError(f"Unknown speed limit classifier backend: {backend}")
