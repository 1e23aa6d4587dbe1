"""
Capability contracts the engine consumes (repository, classifier) and exposes (listener).

These are structural ``Protocol`` types: any object with matching methods
satisfies them, so tests can hand the engine a ``MagicMock`` or a small fake
without subclassing anything.
"""

from __future__ import annotations

from typing import Any, Protocol, Set, runtime_checkable

from .models import AlarmStatus, ArmingStatus, Sensor


@runtime_checkable
class SecurityRepository(Protocol):
    """Durable store of alarm status, arming status and the sensor set."""

    def get_alarm_status(self) -> AlarmStatus: ...

    def set_alarm_status(self, status: AlarmStatus) -> None: ...

    def get_arming_status(self) -> ArmingStatus: ...

    def set_arming_status(self, status: ArmingStatus) -> None: ...

    def get_sensors(self) -> Set[Sensor]: ...

    def add_sensor(self, sensor: Sensor) -> None: ...

    def remove_sensor(self, sensor: Sensor) -> None: ...

    def update_sensor(self, sensor: Sensor) -> None:
        """Persist a change to ``sensor.active``."""
        ...


@runtime_checkable
class ImageClassifier(Protocol):
    def contains_threat(self, image: Any, confidence_threshold: float) -> bool: ...


@runtime_checkable
class StatusListener(Protocol):
    """Passive observer of engine state. Notifications are fire-and-forget."""

    def on_alarm_status_changed(self, status: AlarmStatus) -> None: ...

    def on_sensor_count_changed(self, count: int) -> None: ...

    def on_threat_detected(self, detected: bool) -> None: ...
