"""
Settings Management with Pydantic

Provides type-safe configuration management with:
- Environment variable support
- Validation
- One sub-configuration per concern

Core classes take these configs as constructor arguments; only entry
points reach for the cached ``get_settings()``.
"""

from enum import Enum
from typing import Optional
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ScenarioMode(str, Enum):
    """How what-if scenario outcomes are projected."""
    HEURISTIC = "heuristic"
    RESIMULATED = "resimulated"


class SimulationConfig(BaseSettings):
    """Simulation engine configuration."""
    model_config = SettingsConfigDict(
        env_prefix="SIMULATION_",
        extra="ignore"
    )

    # Randomization (None = intentionally stochastic runs)
    default_seed: Optional[int] = None

    # Monte Carlo batches
    monte_carlo_runs: int = Field(default=20, ge=1)
    bootstrap_iterations: int = Field(default=1000, ge=1)

    # Channel allocations that do not sum to 100 are rescaled
    normalize_channel_allocations: bool = True
    allocation_tolerance: float = 0.01  # percentage points

    scenario_mode: ScenarioMode = ScenarioMode.HEURISTIC


class AdvisorConfig(BaseSettings):
    """Recommendation and risk rule thresholds."""
    model_config = SettingsConfigDict(
        env_prefix="ADVISOR_",
        extra="ignore"
    )

    max_recommendations: int = Field(default=5, ge=1)

    # Recommendation rules
    share_trend_floor: float = 0.0
    profit_margin_floor: float = 0.15
    satisfaction_floor: float = 70.0
    competitive_position_floor: float = 0.3

    # Risk rules
    market_risk_share_trend: float = -1.0
    financial_risk_margin: float = 0.05
    competitive_risk_intensity: float = 0.8


class LoggingConfig(BaseSettings):
    """Logging configuration."""
    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        extra="ignore"
    )

    level: str = "INFO"
    json_output: bool = False


class Settings(BaseSettings):
    """Main application settings."""
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Application
    app_name: str = "Strategy Sandbox"
    debug: bool = False

    # Sub-configurations
    simulation: SimulationConfig = Field(default_factory=SimulationConfig)
    advisor: AdvisorConfig = Field(default_factory=AdvisorConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_env(cls) -> "Settings":
        """Create settings from environment variables."""
        return cls(
            simulation=SimulationConfig(),
            advisor=AdvisorConfig(),
            logging=LoggingConfig()
        )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings.from_env()
