from __future__ import annotations

from typing import Iterator, List

from ..core.interfaces import StatusListener
from ..core.models import AlarmStatus


class ListenerRegistry:
    """
    Ordered set of StatusListener references with synchronous fan-out.

    Membership is by identity (``is``), not equality, so two listeners that
    compare equal are still tracked separately. Notification iterates over a
    snapshot taken at call time: a listener that unregisters itself (or
    another listener) mid-dispatch does not disturb the current round.

    Exceptions raised by a listener are NOT caught. The remaining listeners
    of that round are skipped and the error reaches whoever triggered the
    notification.
    """

    def __init__(self) -> None:
        self._listeners: List[StatusListener] = []

    def __len__(self) -> int:
        return len(self._listeners)

    def __iter__(self) -> Iterator[StatusListener]:
        return iter(list(self._listeners))

    def __contains__(self, listener: object) -> bool:
        return any(registered is listener for registered in self._listeners)

    # ------------------------------------------------------------------
    # Membership
    # ------------------------------------------------------------------

    def add(self, listener: StatusListener) -> bool:
        """Register ``listener``; returns False if that exact object is already registered."""
        if listener in self:
            return False
        self._listeners.append(listener)
        return True

    def remove(self, listener: StatusListener) -> bool:
        """Unregister ``listener``; returns False when it was not registered."""
        for index, registered in enumerate(self._listeners):
            if registered is listener:
                del self._listeners[index]
                return True
        return False

    # ------------------------------------------------------------------
    # Fan-out
    # ------------------------------------------------------------------

    def notify_alarm_status(self, status: AlarmStatus) -> None:
        for listener in list(self._listeners):
            listener.on_alarm_status_changed(status)

    def notify_sensor_count(self, count: int) -> None:
        for listener in list(self._listeners):
            listener.on_sensor_count_changed(count)

    def notify_threat_detected(self, detected: bool) -> None:
        for listener in list(self._listeners):
            listener.on_threat_detected(detected)
