"""
Configuration Management

Centralized configuration for:
- Simulation defaults (seeding, Monte Carlo batch size, channel normalization)
- Advisor thresholds (recommendation and risk rules)
- Logging (level, console or JSON rendering)
"""

from .settings import (
    Settings,
    SimulationConfig,
    AdvisorConfig,
    LoggingConfig,
    ScenarioMode,
    get_settings
)
from .logging import configure_logging

__all__ = [
    "Settings",
    "SimulationConfig",
    "AdvisorConfig",
    "LoggingConfig",
    "ScenarioMode",
    "get_settings",
    "configure_logging"
]
