from __future__ import annotations

import logging
import threading
from typing import Any, Optional, Set, Tuple

from ..core.interfaces import ImageClassifier, SecurityRepository, StatusListener
from ..core.models import AlarmDecision, AlarmStatus, ArmingStatus, SecurityConfig, Sensor
from ..core.rules import AlarmRules
from .listeners import ListenerRegistry
from .transaction import StateTransaction

logger = logging.getLogger(__name__)


def _require(value: Any, expected: type, name: str) -> None:
    if value is None:
        raise ValueError(f"{name} must not be None")
    if not isinstance(value, expected):
        raise ValueError(
            f"{name} must be a {expected.__name__}, got {type(value).__name__}"
        )


class SecurityService:
    """
    Orchestrator: wires AlarmRules, the repository, the image classifier and
    the listener registry together behind the operations a front end calls.

    Responsibilities
    ----------------
    1. Read the current state from the repository (the single source of truth).
    2. Ask AlarmRules what, if anything, the incoming event changes.
    3. Write the result inside a StateTransaction so a failing write never
       leaves alarm status and sensor flags half-updated.
    4. Notify listeners synchronously, after the writes have committed.

    The only state held here is the listener registry and ``threat_detected``,
    the verdict of the most recent camera scan. Neither is persisted.

    Every public operation runs under one re-entrant lock, so concurrent
    callers see each read-decide-write-notify sequence as a single step.
    A listener that calls back into the service from a notification is
    allowed (same thread), but it runs after the writes that triggered it.
    """

    def __init__(
        self,
        repository: SecurityRepository,
        classifier: ImageClassifier,
        config: Optional[SecurityConfig] = None,
    ) -> None:
        if repository is None:
            raise ValueError("repository is required")
        if classifier is None:
            raise ValueError("classifier is required")

        self._repository = repository
        self._classifier = classifier
        self._config = config or SecurityConfig()
        self._rules = AlarmRules()
        self._listeners = ListenerRegistry()
        self._lock = threading.RLock()
        self._threat_detected = False

    @property
    def threat_detected(self) -> bool:
        """True when the most recent ``process_image`` call found a threat."""
        return self._threat_detected

    @property
    def listeners(self) -> Tuple[StatusListener, ...]:
        """Snapshot of the registered listeners, in notification order."""
        with self._lock:
            return tuple(self._listeners)

    # ------------------------------------------------------------------
    # Read-through accessors
    # ------------------------------------------------------------------

    def get_alarm_status(self) -> AlarmStatus:
        return self._repository.get_alarm_status()

    def get_arming_status(self) -> ArmingStatus:
        return self._repository.get_arming_status()

    def get_sensors(self) -> Set[Sensor]:
        return self._repository.get_sensors()

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def add_status_listener(self, listener: StatusListener) -> None:
        if listener is None:
            raise ValueError("listener must not be None")
        with self._lock:
            self._listeners.add(listener)

    def remove_status_listener(self, listener: StatusListener) -> None:
        if listener is None:
            raise ValueError("listener must not be None")
        with self._lock:
            self._listeners.remove(listener)

    # ------------------------------------------------------------------
    # Sensor registry
    # ------------------------------------------------------------------

    def add_sensor(self, sensor: Sensor) -> None:
        _require(sensor, Sensor, "sensor")
        with self._lock:
            self._repository.add_sensor(sensor)
            count = len(self._repository.get_sensors())
            logger.debug("Sensor %s registered (%d total)", sensor.name, count)
            self._listeners.notify_sensor_count(count)

    def remove_sensor(self, sensor: Sensor) -> None:
        _require(sensor, Sensor, "sensor")
        with self._lock:
            self._repository.remove_sensor(sensor)
            count = len(self._repository.get_sensors())
            logger.debug("Sensor %s removed (%d total)", sensor.name, count)
            self._listeners.notify_sensor_count(count)

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def change_sensor_activation_status(self, sensor: Sensor, active: bool) -> None:
        """
        Apply one sensor toggle.

        The sensor's flag is always written, even when the toggle leaves the
        alarm status alone (e.g. while disarmed, or once the alarm is sticky).
        """
        _require(sensor, Sensor, "sensor")
        _require(active, bool, "active")

        with self._lock:
            alarm_status = self._repository.get_alarm_status()
            arming_status = self._repository.get_arming_status()
            was_active = sensor.active
            others_active = any(
                other.active
                for other in self._repository.get_sensors()
                if other != sensor
            )

            decision = self._rules.evaluate_sensor_change(
                alarm_status=alarm_status,
                arming_status=arming_status,
                was_active=was_active,
                active=active,
                others_active=others_active,
            )

            with StateTransaction("sensor-toggle") as tx:
                self._write_sensor(tx, sensor, active)
                if decision is not None:
                    self._write_alarm_status(tx, decision, alarm_status)

            logger.debug("Sensor %s %s -> %s", sensor.name, was_active, active)
            self._announce(decision, alarm_status)

    def process_image(self, image: Any) -> None:
        """
        Classify one camera image and update the alarm status from the verdict.

        The verdict is remembered in ``threat_detected`` so that a later switch
        to ARMED_HOME can raise the alarm without a fresh scan. It is only
        stored once any resulting write has gone through.
        """
        if image is None:
            raise ValueError("image must not be None")

        with self._lock:
            detected = bool(
                self._classifier.contains_threat(
                    image, self._config.confidence_threshold
                )
            )
            alarm_status = self._repository.get_alarm_status()
            arming_status = self._repository.get_arming_status()
            any_active = any(s.active for s in self._repository.get_sensors())

            decision = self._rules.evaluate_image_scan(
                threat_detected=detected,
                arming_status=arming_status,
                any_sensor_active=any_active,
            )

            if decision is not None:
                with StateTransaction("image-scan") as tx:
                    self._write_alarm_status(tx, decision, alarm_status)

            self._threat_detected = detected
            logger.info("Camera scan: threat %s", "detected" if detected else "not detected")

            self._announce(decision, alarm_status)
            self._listeners.notify_threat_detected(detected)

    def set_arming_status(self, arming_status: ArmingStatus) -> None:
        """
        Switch monitoring mode.

        Arming (home or away) first resets every registered sensor to inactive
        so stale activity from before arming cannot trip the alarm. The reset
        is a bulk write and does not go through the sensor-toggle rules.
        """
        _require(arming_status, ArmingStatus, "arming_status")

        with self._lock:
            alarm_status = self._repository.get_alarm_status()
            previous_arming = self._repository.get_arming_status()
            decision = self._rules.evaluate_arming_change(
                arming_status=arming_status,
                threat_detected=self._threat_detected,
            )

            with StateTransaction("arming") as tx:
                if arming_status.is_armed:
                    for sensor in list(self._repository.get_sensors()):
                        self._write_sensor(tx, sensor, False)
                if decision is not None:
                    self._write_alarm_status(tx, decision, alarm_status)
                tx.apply(
                    f"arming status -> {arming_status.value}",
                    lambda: self._repository.set_arming_status(arming_status),
                    lambda: self._repository.set_arming_status(previous_arming),
                )

            logger.info("Arming status %s -> %s", previous_arming, arming_status)
            self._announce(decision, alarm_status)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def _write_sensor(self, tx: StateTransaction, sensor: Sensor, active: bool) -> None:
        previous = sensor.active

        def do() -> None:
            sensor.active = active
            try:
                self._repository.update_sensor(sensor)
            except Exception:
                sensor.active = previous
                raise

        def undo() -> None:
            sensor.active = previous
            self._repository.update_sensor(sensor)

        tx.apply(f"sensor {sensor.name} active={active}", do, undo)

    def _write_alarm_status(
        self,
        tx: StateTransaction,
        decision: AlarmDecision,
        previous: AlarmStatus,
    ) -> None:
        tx.apply(
            f"alarm status -> {decision.status.value}",
            lambda: self._repository.set_alarm_status(decision.status),
            lambda: self._repository.set_alarm_status(previous),
        )

    def _announce(self, decision: Optional[AlarmDecision], previous: AlarmStatus) -> None:
        """Log and fan out a committed alarm-status write."""
        if decision is None:
            return
        logger.info(
            "Alarm status %s -> %s (%s)", previous, decision.status, decision.rule
        )
        self._listeners.notify_alarm_status(decision.status)
