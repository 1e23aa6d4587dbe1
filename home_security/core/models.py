from __future__ import annotations

import uuid
from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator


class AlarmStatus(str, Enum):
    """Current danger level of the premises."""

    NO_ALARM = "NO_ALARM"
    PENDING_ALARM = "PENDING_ALARM"
    ALARM = "ALARM"


class ArmingStatus(str, Enum):
    """Whether monitoring is off, or on in one of two modes."""

    DISARMED = "DISARMED"
    ARMED_HOME = "ARMED_HOME"
    ARMED_AWAY = "ARMED_AWAY"

    @property
    def is_armed(self) -> bool:
        return self is not ArmingStatus.DISARMED


class SensorType(str, Enum):
    DOOR = "DOOR"
    WINDOW = "WINDOW"
    MOTION = "MOTION"


class Sensor(BaseModel):
    """
    A binary contact/presence detector.

    Identity is the generated ``sensor_id``: two sensors with the same name and
    type are still distinct, and flipping ``active`` never changes how a sensor
    hashes, so it stays findable inside the repository's set.
    """

    model_config = ConfigDict(validate_assignment=True)

    name: str = Field(frozen=True)
    sensor_type: SensorType = Field(frozen=True)
    active: bool = False
    sensor_id: uuid.UUID = Field(default_factory=uuid.uuid4, frozen=True)

    @field_validator("name")
    @classmethod
    def name_must_not_be_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("sensor name must not be empty")
        return v

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Sensor):
            return NotImplemented
        return self.sensor_id == other.sensor_id

    def __hash__(self) -> int:
        return hash(self.sensor_id)


class AlarmDecision(BaseModel):
    """
    Output of AlarmRules when a rule fires: the status to write and which rule
    asked for it. Produced fresh per event, never persisted.
    """

    status: AlarmStatus
    rule: str


class ThreatAssessment(BaseModel):
    """
    Structured verdict returned by a vision model for one camera image.
    ``confidence`` uses the same 0-100 scale as ``SecurityConfig.confidence_threshold``.
    """

    contains_threat: bool
    confidence: float = Field(
        ge=0.0,
        le=100.0,
        description="Confidence in the verdict, in percent",
    )
    labels: List[str] = Field(
        default_factory=list,
        description="What the model saw in the image",
    )

    def exceeds(self, confidence_threshold: float) -> bool:
        return self.contains_threat and self.confidence >= confidence_threshold


class SecurityConfig(BaseModel):
    """Dependency-injected configuration for SecurityService and the classifier factory."""

    confidence_threshold: float = Field(default=50.0, ge=0.0, le=100.0)

    # Classifier backend: False = local Ollama (default), True = cloud Anthropic
    use_cloud_classifier: bool = False
    anthropic_model: str = "claude-opus-4-6"
    ollama_model: str = "llava"
    ollama_base_url: str = "http://localhost:11434"
    classifier_timeout_seconds: float = Field(default=60.0, gt=0.0)

    classifier_failure_threshold: int = Field(default=5, ge=1)  # consecutive failures before opening
    classifier_cooldown_seconds: float = Field(default=60.0, ge=0.0)  # seconds to stay open
