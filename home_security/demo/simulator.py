from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict, List, Literal, Optional

import anthropic
from pydantic import BaseModel, model_validator

from ..classifier import FakeImageClassifier, build_classifier
from ..core.interfaces import ImageClassifier
from ..core.models import AlarmStatus, ArmingStatus, SecurityConfig, Sensor, SensorType
from ..engine import SecurityService
from ..repository import InMemorySecurityRepository


class ScenarioStep(BaseModel):
    """One scripted front-end action replayed against a SecurityService."""

    action: Literal["arm", "toggle", "scan"]
    sensor: Optional[str] = None
    active: bool = True
    arming_status: Optional[ArmingStatus] = None
    image: bytes = b""

    @model_validator(mode="after")
    def fields_match_action(self) -> "ScenarioStep":
        if self.action == "arm" and self.arming_status is None:
            raise ValueError("an 'arm' step needs arming_status")
        if self.action == "toggle" and not self.sensor:
            raise ValueError("a 'toggle' step needs a sensor name")
        return self


class ConsoleStatusListener:
    """Prints every notification, the way a status bar in a front end would show it."""

    def __init__(self) -> None:
        self.alarm_history: List[AlarmStatus] = []

    def on_alarm_status_changed(self, status: AlarmStatus) -> None:
        self.alarm_history.append(status)
        print(f"[ALARM] {status.value}")

    def on_sensor_count_changed(self, count: int) -> None:
        print(f"[SENSORS] {count} registered")

    def on_threat_detected(self, detected: bool) -> None:
        print(f"[CAMERA] {'threat detected' if detected else 'all clear'}")


def run_scenario(service: SecurityService, steps: List[ScenarioStep]) -> List[AlarmStatus]:
    """
    Replay ``steps`` in order and return the alarm status observed after each.
    Sensors are looked up by name among those already registered.
    """
    observed: List[AlarmStatus] = []
    for step in steps:
        if step.action == "arm":
            service.set_arming_status(step.arming_status)
        elif step.action == "toggle":
            by_name: Dict[str, Sensor] = {s.name: s for s in service.get_sensors()}
            if step.sensor not in by_name:
                raise ValueError(f"Unknown sensor {step.sensor!r}")
            service.change_sensor_activation_status(by_name[step.sensor], step.active)
        else:
            service.process_image(step.image)
        observed.append(service.get_alarm_status())
    return observed


DEMO_SCENARIO: List[ScenarioStep] = [
    ScenarioStep(action="arm", arming_status=ArmingStatus.ARMED_AWAY),
    ScenarioStep(action="toggle", sensor="Front door", active=True),
    ScenarioStep(action="toggle", sensor="Front door", active=False),
    ScenarioStep(action="toggle", sensor="Hall motion", active=True),
    ScenarioStep(action="toggle", sensor="Kitchen window", active=True),
    ScenarioStep(action="toggle", sensor="Kitchen window", active=False),
    ScenarioStep(action="arm", arming_status=ArmingStatus.DISARMED),
    ScenarioStep(action="scan", image=b"demo-frame"),
    ScenarioStep(action="arm", arming_status=ArmingStatus.ARMED_HOME),
    ScenarioStep(action="arm", arming_status=ArmingStatus.DISARMED),
]


def _classifier_from_env(config: SecurityConfig) -> ImageClassifier:
    backend = os.environ.get("HOME_SECURITY_CLASSIFIER", "fake").lower()
    if backend == "fake":
        return FakeImageClassifier(threat_probability=1.0, seed=0)
    if backend == "claude":
        config.use_cloud_classifier = True
        client = anthropic.Anthropic(api_key=os.environ["ANTHROPIC_API_KEY"])
        return build_classifier(config, anthropic_client=client)
    if backend == "ollama":
        return build_classifier(config)
    raise ValueError(f"Unknown HOME_SECURITY_CLASSIFIER {backend!r}")


def main() -> None:
    """
    End-to-end demo against an in-memory repository.

    Environment
    -----------
    HOME_SECURITY_CLASSIFIER  fake (default), ollama or claude
    HOME_SECURITY_IMAGE       image file scanned instead of the placeholder frame,
                              required for ollama and claude
    ANTHROPIC_API_KEY         required for claude
    OLLAMA_BASE_URL / OLLAMA_MODEL  override the local vision server
    """
    backend = os.environ.get("HOME_SECURITY_CLASSIFIER", "fake").lower()
    image_path = os.environ.get("HOME_SECURITY_IMAGE")
    if backend != "fake" and not image_path:
        raise ValueError(
            f"HOME_SECURITY_IMAGE must point at a PNG or JPEG frame for the {backend!r} classifier"
        )

    config = SecurityConfig(
        ollama_base_url=os.environ.get("OLLAMA_BASE_URL", "http://localhost:11434"),
        ollama_model=os.environ.get("OLLAMA_MODEL", "llava"),
    )
    service = SecurityService(
        repository=InMemorySecurityRepository(),
        classifier=_classifier_from_env(config),
        config=config,
    )
    listener = ConsoleStatusListener()
    service.add_status_listener(listener)

    for name, sensor_type in (
        ("Front door", SensorType.DOOR),
        ("Kitchen window", SensorType.WINDOW),
        ("Hall motion", SensorType.MOTION),
    ):
        service.add_sensor(Sensor(name=name, sensor_type=sensor_type))

    steps = DEMO_SCENARIO
    if image_path:
        frame = Path(image_path).read_bytes()
        steps = [
            step.model_copy(update={"image": frame}) if step.action == "scan" else step
            for step in steps
        ]

    observed = run_scenario(service, steps)
    print(f"\nAlarm status after each step: {[s.value for s in observed]}")
    print(f"Alarm notifications received: {len(listener.alarm_history)}")


def run_main() -> None:
    """Entry point for the console script."""
    logging.basicConfig(
        level=os.environ.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    main()


if __name__ == "__main__":  # pragma: no cover
    run_main()
