from .classifier import KeywordRule, KeywordSpeedLimitClassifier, SpeedLimitClassifier, create_classifier
from .limits import LimitDecision, SpeedLimitTracker, SpeedLimitTrackerConfig
from .validator import RoadAttributeValidator, ValidationResult, ValidatorConfig

__all__ = [
    "KeywordRule",
    "KeywordSpeedLimitClassifier",
    "LimitDecision",
    "RoadAttributeValidator",
    "SpeedLimitClassifier",
    "SpeedLimitTracker",
    "SpeedLimitTrackerConfig",
    "ValidationResult",
    "ValidatorConfig",
    "create_classifier",
]
