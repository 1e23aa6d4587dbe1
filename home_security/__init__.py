"""
Home Security Alarm Engine: public API.

Importing from ``home_security`` gives access to all stable interfaces:

    from home_security import SecurityService, InMemorySecurityRepository, Sensor
"""

from .classifier import (
    ASSESSMENT_TOOL_SCHEMA,
    ClassifierUnavailableError,
    ClaudeImageClassifier,
    FakeImageClassifier,
    GuardedImageClassifier,
    OllamaImageClassifier,
    build_classifier,
)
from .core import (
    AlarmDecision,
    AlarmRules,
    AlarmStatus,
    ArmingStatus,
    ImageClassifier,
    SecurityConfig,
    SecurityRepository,
    Sensor,
    SensorType,
    StatusListener,
    ThreatAssessment,
)
from .demo import main, run_main, run_scenario
from .engine import ListenerRegistry, SecurityService, StateTransaction
from .repository import InMemorySecurityRepository

__all__ = [
    "ASSESSMENT_TOOL_SCHEMA",
    "AlarmDecision",
    "AlarmRules",
    "AlarmStatus",
    "ArmingStatus",
    "ClassifierUnavailableError",
    "ClaudeImageClassifier",
    "FakeImageClassifier",
    "GuardedImageClassifier",
    "ImageClassifier",
    "InMemorySecurityRepository",
    "ListenerRegistry",
    "OllamaImageClassifier",
    "SecurityConfig",
    "SecurityRepository",
    "SecurityService",
    "Sensor",
    "SensorType",
    "StateTransaction",
    "StatusListener",
    "ThreatAssessment",
    "build_classifier",
    "main",
    "run_main",
    "run_scenario",
]
