from __future__ import annotations

import threading
from typing import Iterable, Optional, Set

from ..core.models import AlarmStatus, ArmingStatus, Sensor


class InMemorySecurityRepository:
    """
    Process-local implementation of the SecurityRepository contract.

    Starts disarmed with no alarm and no sensors unless told otherwise.
    Sensors are kept in a set keyed by their identity, so re-adding a sensor is
    a no-op and ``update_sensor`` replaces the stored object with the caller's.
    ``get_sensors`` returns a copy of the set; the Sensor objects inside are
    shared, not cloned.
    """

    def __init__(
        self,
        alarm_status: AlarmStatus = AlarmStatus.NO_ALARM,
        arming_status: ArmingStatus = ArmingStatus.DISARMED,
        sensors: Optional[Iterable[Sensor]] = None,
    ) -> None:
        self._alarm_status = alarm_status
        self._arming_status = arming_status
        self._sensors: Set[Sensor] = set(sensors or ())
        self._lock = threading.Lock()

    def get_alarm_status(self) -> AlarmStatus:
        return self._alarm_status

    def set_alarm_status(self, status: AlarmStatus) -> None:
        self._alarm_status = status

    def get_arming_status(self) -> ArmingStatus:
        return self._arming_status

    def set_arming_status(self, status: ArmingStatus) -> None:
        self._arming_status = status

    def get_sensors(self) -> Set[Sensor]:
        with self._lock:
            return set(self._sensors)

    def add_sensor(self, sensor: Sensor) -> None:
        with self._lock:
            self._sensors.add(sensor)

    def remove_sensor(self, sensor: Sensor) -> None:
        with self._lock:
            self._sensors.discard(sensor)

    def update_sensor(self, sensor: Sensor) -> None:
        # An unknown sensor is stored rather than rejected.
        with self._lock:
            self._sensors.discard(sensor)
            self._sensors.add(sensor)
