from __future__ import annotations

from typing import Optional

from .models import AlarmDecision, AlarmStatus, ArmingStatus

RETRIGGER_WHILE_PENDING = "RETRIGGER_WHILE_PENDING"
ARMED_SENSOR_TRIP = "ARMED_SENSOR_TRIP"
ALL_SENSORS_CLEARED = "ALL_SENSORS_CLEARED"
THREAT_WHILE_ARMED_HOME = "THREAT_WHILE_ARMED_HOME"
SCENE_CLEAR = "SCENE_CLEAR"
DISARM_CLEARS = "DISARM_CLEARS"
ARMED_HOME_WITH_THREAT = "ARMED_HOME_WITH_THREAT"


class AlarmRules:
    """
    Symbolic layer: the deterministic rule table mapping one event plus a
    snapshot of current state onto an optional alarm-status change.

    Intentionally stateless. Every input is passed in by SecurityService, which
    owns the reads and writes, so each rule can be tested without a repository.
    A ``None`` return means "leave AlarmStatus alone".
    """

    def evaluate_sensor_change(
        self,
        alarm_status: AlarmStatus,
        arming_status: Optional[ArmingStatus],
        was_active: bool,
        active: bool,
        others_active: bool,
    ) -> Optional[AlarmDecision]:
        """
        Decide the alarm status after a sensor is toggled.

        Parameters
        ----------
        alarm_status:
            Persisted AlarmStatus before the toggle.
        arming_status:
            Persisted ArmingStatus. Only consulted when a fresh activation
            needs it, so deactivations never depend on it.
        was_active / active:
            The sensor's flag before the call and the requested flag.
        others_active:
            Whether any *other* registered sensor is active.

        Rules are checked top-down; the first that applies wins.
        """
        # Once triggered, only disarming clears the alarm.
        if alarm_status is AlarmStatus.ALARM:
            return None

        if active:
            if was_active:
                if alarm_status is AlarmStatus.PENDING_ALARM:
                    return AlarmDecision(status=AlarmStatus.ALARM, rule=RETRIGGER_WHILE_PENDING)
                return None
            if arming_status is None or not arming_status.is_armed:
                return None
            if alarm_status is AlarmStatus.NO_ALARM:
                return AlarmDecision(status=AlarmStatus.PENDING_ALARM, rule=ARMED_SENSOR_TRIP)
            return AlarmDecision(status=AlarmStatus.ALARM, rule=ARMED_SENSOR_TRIP)

        if not was_active:
            return None
        if alarm_status is AlarmStatus.PENDING_ALARM and not others_active:
            return AlarmDecision(status=AlarmStatus.NO_ALARM, rule=ALL_SENSORS_CLEARED)
        return None

    def evaluate_image_scan(
        self,
        threat_detected: bool,
        arming_status: ArmingStatus,
        any_sensor_active: bool,
    ) -> Optional[AlarmDecision]:
        if threat_detected and arming_status is ArmingStatus.ARMED_HOME:
            return AlarmDecision(status=AlarmStatus.ALARM, rule=THREAT_WHILE_ARMED_HOME)
        if not threat_detected and not any_sensor_active:
            return AlarmDecision(status=AlarmStatus.NO_ALARM, rule=SCENE_CLEAR)
        return None

    def evaluate_arming_change(
        self,
        arming_status: ArmingStatus,
        threat_detected: bool,
    ) -> Optional[AlarmDecision]:
        """
        Disarming always clears the alarm. Arming home while the last scan saw
        a threat raises it straight away, even though that scan happened before
        the system was armed.
        """
        if arming_status is ArmingStatus.DISARMED:
            return AlarmDecision(status=AlarmStatus.NO_ALARM, rule=DISARM_CLEARS)
        if arming_status is ArmingStatus.ARMED_HOME and threat_detected:
            return AlarmDecision(status=AlarmStatus.ALARM, rule=ARMED_HOME_WITH_THREAT)
        return None
