"""
Market Dynamics

Latent factors that stay fixed for the whole run: structural competitor
pressure and the monthly seasonality curve. Pure functions of the
parameters, deterministic and free of side effects.
"""

import math
from dataclasses import dataclass

from ..core.parameters import SimulationParameters

MONTHS_PER_YEAR = 12

COMPETITOR_STRENGTH_BASE = 0.3
COMPETITOR_STRENGTH_PER_RIVAL = 0.1
COMPETITOR_STRENGTH_CAP = 0.9  # the market is never fully foreclosed

SEASONALITY_AMPLITUDE = 0.2


@dataclass(frozen=True)
class MarketDynamics:
    """Month-invariant market factors for a run."""
    competitor_strength: float
    seasonality_factors: tuple
    price_elasticity: float
    market_growth_rate: float = 0.05  # annual, informational
    innovation_impact_cap: float = 0.15  # max share gain from innovation

    def seasonality_for(self, month: int) -> float:
        """Seasonality multiplier for a 1-based simulation month."""
        return self.seasonality_factors[month % MONTHS_PER_YEAR]


def competitor_strength(competitor_count: int) -> float:
    """More rivals raise the headwind, up to the cap."""
    return min(
        COMPETITOR_STRENGTH_CAP,
        COMPETITOR_STRENGTH_BASE + COMPETITOR_STRENGTH_PER_RIVAL * competitor_count
    )


def seasonality_factors() -> tuple:
    """Twelve monthly multipliers on a sine curve around 1.0."""
    return tuple(
        1 + SEASONALITY_AMPLITUDE * math.sin(2 * math.pi * i / MONTHS_PER_YEAR)
        for i in range(MONTHS_PER_YEAR)
    )


class MarketDynamicsModel:
    """Derives MarketDynamics from simulation parameters."""

    def derive(self, parameters: SimulationParameters) -> MarketDynamics:
        return MarketDynamics(
            competitor_strength=competitor_strength(parameters.competitor_count),
            seasonality_factors=seasonality_factors(),
            price_elasticity=parameters.pricing_strategy.price_elasticity
        )
