"""Demo: scripted scenario replay and main entry point."""

from .simulator import (
    DEMO_SCENARIO,
    ConsoleStatusListener,
    ScenarioStep,
    main,
    run_main,
    run_scenario,
)

__all__ = [
    "ConsoleStatusListener",
    "DEMO_SCENARIO",
    "ScenarioStep",
    "main",
    "run_main",
    "run_scenario",
]
