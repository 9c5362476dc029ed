"""
Analysis Data

Derives the performance and market-condition summary that the
recommendation, risk, insight and strategic-option rules evaluate.

Performance compares the first and last quarter of the timeline:
- Market share trend: last-quarter average share minus first-quarter average
- Profit margin: total profit over total revenue
- Customer satisfaction: average NPS
- Competitive position: last-quarter share as a fraction
"""

from dataclasses import dataclass, field
from typing import Sequence

from ..core.parameters import (
    DIGITAL_CHANNELS,
    PricingModel,
    SimulationParameters
)
from ..simulation.entities import FinalMetrics, TimelineData

MARKET_MATURITY = 0.5  # no market data to derive it from
DIGITAL_NATIVE_ALLOCATION = 60.0
INNOVATION_SEEKING_QUALITY = 7
RAPID_EXPANSION_GROWTH = 5.0


@dataclass(frozen=True)
class PerformanceMetrics:
    """How the simulated business performed over the horizon."""
    growth_rate: float = 0.0  # customer growth %
    profit_margin: float = 0.0
    market_share_trend: float = 0.0  # percentage points
    customer_satisfaction: float = 0.0  # NPS
    competitive_position: float = 0.0  # 0-1


@dataclass(frozen=True)
class MarketConditions:
    """The environment the business operated in."""
    competition_intensity: float = 0.0
    market_maturity: float = MARKET_MATURITY
    customer_preferences: tuple = ()
    emerging_trends: tuple = ()


@dataclass(frozen=True)
class AnalysisData:
    """Everything the advisor rules read."""
    parameters: SimulationParameters
    timeline: tuple
    final_metrics: FinalMetrics
    current_performance: PerformanceMetrics = field(default_factory=PerformanceMetrics)
    market_conditions: MarketConditions = field(default_factory=MarketConditions)


def _average(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


class AnalysisBuilder:
    """Builds AnalysisData from parameters and a finished timeline."""

    def build(
        self,
        parameters: SimulationParameters,
        timeline: Sequence[TimelineData],
        final_metrics: FinalMetrics
    ) -> AnalysisData:
        timeline = tuple(timeline)
        return AnalysisData(
            parameters=parameters,
            timeline=timeline,
            final_metrics=final_metrics,
            current_performance=self._performance(timeline, final_metrics),
            market_conditions=self._market_conditions(parameters, timeline)
        )

    def build_from_results(self, results) -> AnalysisData:
        """Convenience wrapper for a SimulationResults bundle."""
        return self.build(results.parameters, results.timeline, results.final_metrics)

    def _performance(
        self,
        timeline: tuple,
        final_metrics: FinalMetrics
    ) -> PerformanceMetrics:
        if not timeline:
            return PerformanceMetrics()

        # Short horizons still compare at least one month at each end
        window = max(1, len(timeline) // 4)
        initial_share = _average([m.market_share for m in timeline[:window]])
        final_share = _average([m.market_share for m in timeline[-window:]])

        total_revenue = final_metrics.total_revenue
        profit_margin = (
            final_metrics.total_profit / total_revenue if total_revenue > 0 else 0.0
        )

        return PerformanceMetrics(
            growth_rate=final_metrics.customer_growth_percent,
            profit_margin=profit_margin,
            market_share_trend=final_share - initial_share,
            customer_satisfaction=_average([m.kpis.nps for m in timeline]),
            competitive_position=final_share / 100
        )

    def _market_conditions(
        self,
        parameters: SimulationParameters,
        timeline: tuple
    ) -> MarketConditions:
        return MarketConditions(
            competition_intensity=parameters.competitor_count / 10,
            market_maturity=MARKET_MATURITY,
            customer_preferences=self._customer_preferences(parameters),
            emerging_trends=self._emerging_trends(timeline)
        )

    def _customer_preferences(self, parameters: SimulationParameters) -> tuple:
        preferences = []

        model = parameters.pricing_strategy.model
        if model == PricingModel.PENETRATION:
            preferences.append("price-sensitive")
        elif model == PricingModel.PREMIUM:
            preferences.append("quality-focused")

        if parameters.product_strategy.quality_level > INNOVATION_SEEKING_QUALITY:
            preferences.append("innovation-seeking")

        digital_allocation = sum(
            c.budget_allocation_percent
            for c in parameters.promotion_strategy.channels
            if c.type in DIGITAL_CHANNELS
        )
        if digital_allocation > DIGITAL_NATIVE_ALLOCATION:
            preferences.append("digital-native")

        return tuple(preferences)

    def _emerging_trends(self, timeline: tuple) -> tuple:
        trends = []
        if not timeline:
            return ()

        recent_growth = [m.kpis.growth_rate for m in timeline[-3:]]
        if all(g > RAPID_EXPANSION_GROWTH for g in recent_growth):
            trends.append("rapid-market-expansion")

        roi_trend = [m.kpis.roi for m in timeline[-6:]]
        if all(later >= earlier for earlier, later in zip(roi_trend, roi_trend[1:])):
            trends.append("improving-efficiency")

        return tuple(trends)
