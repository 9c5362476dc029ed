"""
Pytest Configuration and Fixtures
==================================
Shared parameter payloads, a deterministic random stub and analysis
builders for the simulation and advisor tests.
"""

import copy
from typing import Any, Dict

import pytest

from strategy_sandbox.advisor.analysis import (
    AnalysisData,
    MarketConditions,
    PerformanceMetrics
)
from strategy_sandbox.core.parameters import SimulationParameters
from strategy_sandbox.simulation.entities import FinalMetrics, KPIMetrics, TimelineData


class MidpointRandom:
    """Stand-in generator whose draws are always the middle of the range."""

    def uniform(self, a: float, b: float) -> float:
        return (a + b) / 2

    def random(self) -> float:
        return 0.5


@pytest.fixture
def midpoint_rng():
    return MidpointRandom()


@pytest.fixture
def sample_payload() -> Dict[str, Any]:
    """Reference strategy from the end-to-end scenario, in JSON contract form."""
    return {
        "marketSize": 10_000_000,
        "initialMarketShare": 15,
        "competitorCount": 5,
        "simulationDuration": 12,
        "pricingStrategy": {
            "model": "competitive",
            "basePrice": 299,
            "priceElasticity": 1.2,
            "competitorPriceResponse": 0.5
        },
        "promotionStrategy": {
            "channels": [
                {"type": "search", "budgetAllocationPercent": 40, "effectiveness": 0.8,
                 "targetAudience": ["smb"]},
                {"type": "social", "budgetAllocationPercent": 35, "effectiveness": 0.7,
                 "targetAudience": ["consumers"]},
                {"type": "offline", "budgetAllocationPercent": 25, "effectiveness": 0.4,
                 "targetAudience": ["enterprise"]}
            ],
            "totalBudget": 5_000_000
        },
        "productStrategy": {"qualityLevel": 7, "innovationRate": 2},
        "budget": {
            "total": 12_000_000,
            "marketing": 5_000_000,
            "product": 3_000_000,
            "operations": 3_000_000,
            "reserve": 1_000_000
        }
    }


@pytest.fixture
def sample_parameters(sample_payload) -> SimulationParameters:
    return SimulationParameters.from_payload(sample_payload)


@pytest.fixture
def make_parameters(sample_payload):
    """Factory applying nested snake_case overrides to the sample strategy."""
    base = SimulationParameters.from_payload(sample_payload)

    def _make(**changes) -> SimulationParameters:
        return base.with_changes(copy.deepcopy(changes))

    return _make


@pytest.fixture
def simple_parameters() -> SimulationParameters:
    """
    Small market with round numbers for hand-checked step arithmetic.

    One search channel taking the whole 900k marketing budget gives
    log10(1 + 9) = 1, so marketing impact = 0.5 * 1 * 2 = 1.0 points.
    Two competitors give strength 0.5, quality 5 gives impact 0.5.
    """
    return SimulationParameters(
        market_size=1_000_000,
        initial_market_share=10,
        competitor_count=2,
        simulation_duration=3,
        pricing_strategy={"model": "competitive", "base_price": 100, "price_elasticity": 1.0},
        promotion_strategy={
            "channels": [
                {"type": "search", "budget_allocation_percent": 100, "effectiveness": 0.5}
            ]
        },
        product_strategy={"quality_level": 5},
        budget={"total": 1_500_000, "marketing": 900_000, "product": 300_000}
    )


def _month(month: int, share: float, nps: float = 60.0) -> TimelineData:
    return TimelineData(
        month=month,
        market_share=share,
        revenue=1000.0,
        costs=900.0,
        profit=100.0,
        customer_base=100,
        kpis=KPIMetrics(nps=nps, ltv=2000.0)
    )


@pytest.fixture
def make_analysis(sample_parameters):
    """Build AnalysisData with chosen performance and market-condition values."""

    def _make(
        market_share_trend: float = 1.0,
        profit_margin: float = 0.3,
        customer_satisfaction: float = 80.0,
        competitive_position: float = 0.5,
        growth_rate: float = 10.0,
        competition_intensity: float = 0.5,
        customer_preferences: tuple = (),
        total_revenue: float = 1_000_000.0,
        parameters: SimulationParameters = None
    ) -> AnalysisData:
        timeline = tuple(_month(i, 20.0) for i in range(1, 13))
        return AnalysisData(
            parameters=parameters or sample_parameters,
            timeline=timeline,
            final_metrics=FinalMetrics(
                total_revenue=total_revenue,
                total_profit=total_revenue * profit_margin,
                final_market_share=20.0
            ),
            current_performance=PerformanceMetrics(
                growth_rate=growth_rate,
                profit_margin=profit_margin,
                market_share_trend=market_share_trend,
                customer_satisfaction=customer_satisfaction,
                competitive_position=competitive_position
            ),
            market_conditions=MarketConditions(
                competition_intensity=competition_intensity,
                customer_preferences=customer_preferences
            )
        )

    return _make
