"""Core domain: models, capability contracts and the alarm rule table."""

from .interfaces import ImageClassifier, SecurityRepository, StatusListener
from .models import (
    AlarmDecision,
    AlarmStatus,
    ArmingStatus,
    SecurityConfig,
    Sensor,
    SensorType,
    ThreatAssessment,
)
from .rules import AlarmRules

__all__ = [
    "AlarmDecision",
    "AlarmRules",
    "AlarmStatus",
    "ArmingStatus",
    "ImageClassifier",
    "SecurityConfig",
    "SecurityRepository",
    "Sensor",
    "SensorType",
    "StatusListener",
    "ThreatAssessment",
]
