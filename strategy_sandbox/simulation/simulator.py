"""
Simulation Engine

Discrete-time market simulation. Each month:
- Marketing, pricing and quality push market share up or down
- Competitors exert a stochastic headwind
- Seasonality scales the net movement
- Customers are acquired from share gains and lost to churn
- Revenue, costs and KPIs are derived from the new customer base

The only sources of randomness (dynamic pricing, competitor pressure,
competitor share jitter) draw from an injected ``random.Random``, so a
seeded run is reproducible and parallel runs never share state.
"""

import math
import random
from typing import Iterator, Optional

import structlog

from ..config.settings import AdvisorConfig, SimulationConfig
from ..core.parameters import PricingModel, SimulationParameters
from .aggregation import FinalMetricsAggregator
from .dynamics import MarketDynamics, MarketDynamicsModel
from .entities import KPIMetrics, SimulationResults, TimelineData

logger = structlog.get_logger(__name__)

# Marketing
MARKETING_BUDGET_SCALE = 100_000
MARKETING_IMPACT_SCALE = 2.0
MARKETING_IMPACT_CAP = 5.0  # percentage points per month

# Pricing
PRICE_MULTIPLIERS = {
    PricingModel.PENETRATION: 0.8,
    PricingModel.COMPETITIVE: 1.0,
    PricingModel.PREMIUM: 1.3,
}
DYNAMIC_PRICE_RANGE = (0.9, 1.2)
PRICE_IMPACT_SCALE = 0.1

# Competitors
COMPETITOR_JITTER = (0.8, 1.2)
COMPETITOR_IMPACT_SCALE = 2.0
COMPETITOR_SHARE_JITTER = (0.8, 1.2)

# Customers
BASE_CHURN = 0.05
CHURN_QUALITY_REDUCTION = 0.03
MIN_CHURN = 0.01
ACQUISITION_FACTOR = 0.001
ACTIVE_CUSTOMER_FACTOR = 0.001  # 10% of the share-weighted market is active

# KPIs
ACQUISITION_COST_SHARE = 0.7
NPS_BASE = 30
NPS_PER_QUALITY_POINT = 5


class MonthlySimulationStep:
    """
    State transition from one month to the next.

    Given the previous market share and customer base, returns the next
    month's full metrics record. Never raises for validated parameters;
    clamps and zero guards absorb the numeric edge cases.
    """

    def __init__(
        self,
        parameters: SimulationParameters,
        dynamics: MarketDynamics,
        rng: random.Random
    ):
        self.parameters = parameters
        self.dynamics = dynamics
        self._rng = rng

    def __call__(
        self,
        month: int,
        previous_market_share: float,
        previous_customer_base: int
    ) -> TimelineData:
        marketing_impact = self._marketing_impact()
        price_impact = self._price_impact()
        quality_impact = self.parameters.product_strategy.quality_level / 10
        competitor_impact = self._competitor_impact()
        seasonality = self.dynamics.seasonality_for(month)

        share_change = (
            marketing_impact + price_impact + quality_impact - competitor_impact
        ) * seasonality
        market_share = min(100.0, max(0.0, previous_market_share + share_change))

        # Customer flow
        churn_rate = self._churn_rate(quality_impact)
        new_customers = math.floor(
            self.parameters.market_size * max(0.0, share_change) * ACQUISITION_FACTOR
        )
        churned = math.floor(previous_customer_base * churn_rate)
        customer_base = max(0, previous_customer_base + new_customers - churned)

        # Financials
        revenue = customer_base * self.parameters.pricing_strategy.base_price * seasonality
        costs = self._monthly_costs()
        profit = revenue - costs

        kpis = self._kpis(new_customers, customer_base, revenue, costs, churn_rate)
        competitor_shares = self._competitor_shares(market_share)

        return TimelineData(
            month=month,
            market_share=market_share,
            revenue=revenue,
            costs=costs,
            profit=profit,
            customer_base=customer_base,
            competitor_shares=competitor_shares,
            kpis=kpis,
            share_change=share_change,
            new_customers=new_customers,
            churned_customers=churned
        )

    def _marketing_impact(self) -> float:
        """Logarithmic diminishing returns per channel, capped per month."""
        marketing_budget = self.parameters.budget.marketing
        total_impact = 0.0

        for channel in self.parameters.promotion_strategy.channels:
            channel_budget = marketing_budget * channel.budget_allocation_percent / 100
            diminishing = math.log10(1 + channel_budget / MARKETING_BUDGET_SCALE)
            total_impact += channel.effectiveness * diminishing

        return min(total_impact * MARKETING_IMPACT_SCALE, MARKETING_IMPACT_CAP)

    def _price_impact(self) -> float:
        """Prices above the reference lose share; below it gain share."""
        pricing = self.parameters.pricing_strategy

        if pricing.model == PricingModel.DYNAMIC:
            multiplier = self._rng.uniform(*DYNAMIC_PRICE_RANGE)
        else:
            multiplier = PRICE_MULTIPLIERS[pricing.model]

        price_deviation = (multiplier - 1) * pricing.base_price
        return -price_deviation * self.dynamics.price_elasticity * PRICE_IMPACT_SCALE

    def _competitor_impact(self) -> float:
        jitter = self._rng.uniform(*COMPETITOR_JITTER)
        return self.dynamics.competitor_strength * jitter * COMPETITOR_IMPACT_SCALE

    def _churn_rate(self, quality_impact: float) -> float:
        return max(MIN_CHURN, BASE_CHURN - quality_impact * CHURN_QUALITY_REDUCTION)

    def _monthly_costs(self) -> float:
        """Flat amortization of the annual spend."""
        budget = self.parameters.budget
        return (budget.marketing + budget.product + budget.operations) / 12

    def _kpis(
        self,
        new_customers: int,
        customer_base: int,
        revenue: float,
        costs: float,
        churn_rate: float
    ) -> KPIMetrics:
        cac = costs * ACQUISITION_COST_SHARE / new_customers if new_customers > 0 else 0.0
        ltv = (revenue / customer_base) * 12 / churn_rate if customer_base > 0 else 0.0
        roi = (revenue - costs) / costs if costs > 0 else 0.0
        nps = NPS_BASE + self.parameters.product_strategy.quality_level * NPS_PER_QUALITY_POINT
        growth_rate = new_customers / customer_base * 100 if customer_base > 0 else 0.0

        return KPIMetrics(
            cac=cac,
            ltv=ltv,
            roi=roi,
            nps=nps,
            churn_rate=churn_rate,
            growth_rate=growth_rate
        )

    def _competitor_shares(self, our_share: float) -> dict[str, float]:
        """Split the remaining share across rivals. Reporting only."""
        count = self.parameters.competitor_count
        even_share = (100 - our_share) / count

        return {
            f"Competitor {i + 1}": even_share * self._rng.uniform(*COMPETITOR_SHARE_JITTER)
            for i in range(count)
        }


class TimelineBuilder:
    """Drives the monthly step across the planning horizon."""

    def __init__(
        self,
        parameters: SimulationParameters,
        dynamics: MarketDynamics,
        rng: random.Random
    ):
        self.parameters = parameters
        self._step = MonthlySimulationStep(parameters, dynamics, rng)

    def initial_customer_base(self) -> int:
        return math.floor(
            self.parameters.market_size
            * self.parameters.initial_market_share
            * ACTIVE_CUSTOMER_FACTOR
        )

    def iter_months(self) -> Iterator[TimelineData]:
        """
        Yield one record per month in order.

        Consumers may stop iterating at any point; the partial timeline
        has no side effects and can be discarded.
        """
        market_share = self.parameters.initial_market_share
        customer_base = self.initial_customer_base()

        for month in range(1, self.parameters.simulation_duration + 1):
            record = self._step(month, market_share, customer_base)
            yield record
            market_share = record.market_share
            customer_base = record.customer_base

    def build(self) -> tuple:
        return tuple(self.iter_months())


class MarketSimulator:
    """
    Main simulation engine.

    Validates and normalizes the parameters, derives market dynamics,
    builds the timeline and hands the trajectory to the advisor for
    recommendations and what-if scenarios.
    """

    def __init__(
        self,
        parameters,
        config: SimulationConfig = None,
        advisor_config: AdvisorConfig = None,
        seed: Optional[int] = None,
        rng: Optional[random.Random] = None,
        dynamics_model: MarketDynamicsModel = None
    ):
        self.config = config or SimulationConfig()
        self.advisor_config = advisor_config or AdvisorConfig()
        self.seed: Optional[int] = seed if seed is not None else self.config.default_seed
        if rng is not None and self.seed is None:
            # Re-simulated scenarios rebuild generators from this seed
            self.seed = rng.getrandbits(64)
        self.parameters = self._prepare_parameters(SimulationParameters.ensure(parameters))

        self._rng = rng
        self._dynamics_model = dynamics_model or MarketDynamicsModel()
        self._aggregator = FinalMetricsAggregator()
        self.dynamics = self._dynamics_model.derive(self.parameters)

    def _prepare_parameters(self, parameters: SimulationParameters) -> SimulationParameters:
        """Rescale channel allocations that do not sum to 100."""
        if not self.config.normalize_channel_allocations:
            return parameters

        promotion = parameters.promotion_strategy
        total = promotion.allocation_total()
        if total <= 0 or abs(total - 100) <= self.config.allocation_tolerance:
            return parameters

        logger.warning(
            "channel_allocations_normalized",
            allocation_total=round(total, 4),
            channels=len(promotion.channels)
        )
        return parameters.model_copy(update={"promotion_strategy": promotion.normalized()})

    def _new_rng(self) -> random.Random:
        if self._rng is not None:
            return self._rng
        return random.Random(self.seed)

    def timeline_builder(self) -> TimelineBuilder:
        """Builder with a fresh generator; seeded runs restart the sequence."""
        return TimelineBuilder(self.parameters, self.dynamics, self._new_rng())

    def simulate_timeline(self) -> tuple:
        return self.timeline_builder().build()

    def run(self, include_advice: bool = True) -> SimulationResults:
        """
        Run a complete simulation.

        With ``include_advice`` the results carry ranked recommendations
        and what-if scenarios; without it only the trajectory and summary.
        """
        logger.debug(
            "simulation_started",
            months=self.parameters.simulation_duration,
            pricing_model=self.parameters.pricing_strategy.model.value,
            seed=self.seed
        )

        timeline = self.simulate_timeline()
        final_metrics = self._aggregator.aggregate(timeline)

        recommendations = ()
        scenarios = ()
        if include_advice:
            from ..advisor.analysis import AnalysisBuilder
            from ..advisor.recommendations import RecommendationEngine
            from ..advisor.scenarios import ScenarioGenerator

            analysis = AnalysisBuilder().build(self.parameters, timeline, final_metrics)
            recommendations = tuple(
                RecommendationEngine(self.advisor_config).recommend(analysis)
            )
            # An injected generator's trajectory is not reproducible from
            # the seed, so scenario deltas get their own seeded baseline
            baseline = final_metrics if self._rng is None else None
            scenarios = tuple(
                ScenarioGenerator(
                    mode=self.config.scenario_mode,
                    config=self.config,
                    seed=self.seed
                ).generate(self.parameters, baseline=baseline)
            )

        logger.info(
            "simulation_completed",
            months=len(timeline),
            final_market_share=round(final_metrics.final_market_share, 2),
            total_revenue=round(final_metrics.total_revenue, 2),
            recommendations=len(recommendations),
            seed=self.seed
        )

        return SimulationResults(
            parameters=self.parameters,
            timeline=timeline,
            final_metrics=final_metrics,
            recommendations=recommendations,
            scenarios=scenarios,
            seed=self.seed
        )
