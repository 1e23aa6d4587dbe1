"""
Shared pytest fixtures used across the modular test suite.
"""

from __future__ import annotations

from typing import Iterable, Optional
from unittest.mock import MagicMock

import pytest

from home_security.core.models import AlarmStatus, ArmingStatus, SecurityConfig, Sensor, SensorType


def make_sensor(
    name: str = "Front door",
    sensor_type: SensorType = SensorType.DOOR,
    active: bool = False,
) -> Sensor:
    return Sensor(name=name, sensor_type=sensor_type, active=active)


def make_repository(
    alarm_status: AlarmStatus = AlarmStatus.NO_ALARM,
    arming_status: ArmingStatus = ArmingStatus.DISARMED,
    sensors: Optional[Iterable[Sensor]] = None,
) -> MagicMock:
    """Return a mock SecurityRepository reporting the given state on every read."""
    repository = MagicMock()
    repository.get_alarm_status.return_value = alarm_status
    repository.get_arming_status.return_value = arming_status
    repository.get_sensors.return_value = set(sensors or ())
    return repository


def make_classifier(detected: bool = False) -> MagicMock:
    """Return a mock ImageClassifier whose contains_threat() returns ``detected``."""
    classifier = MagicMock()
    classifier.contains_threat.return_value = detected
    return classifier


def make_listener() -> MagicMock:
    return MagicMock(spec=["on_alarm_status_changed", "on_sensor_count_changed", "on_threat_detected"])


@pytest.fixture
def config() -> SecurityConfig:
    return SecurityConfig(confidence_threshold=50.0)


@pytest.fixture
def sensor() -> Sensor:
    return make_sensor()
