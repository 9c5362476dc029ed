"""
Batch Analysis of Simulation Runs

This module provides:
- Monte Carlo batches of independently seeded runs
- Bootstrap confidence intervals over final metrics
- Sensitivity analysis across marketing budget, price and quality grids

Each run owns its own random generator (seed = base seed + run index),
and aggregation only reads finished FinalMetrics, never in-flight
timelines.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Mapping, Optional
import random
import statistics

import structlog

from ..config.settings import SimulationConfig
from ..core.parameters import SimulationParameters
from .entities import FinalMetrics, frozen_mapping
from .simulator import MarketSimulator

logger = structlog.get_logger(__name__)

FINAL_METRIC_NAMES = (
    "total_revenue",
    "total_profit",
    "final_market_share",
    "customer_growth_percent",
    "brand_value",
)


@dataclass(frozen=True)
class ConfidenceInterval:
    """Confidence interval for a metric."""
    mean: float = 0.0
    lower: float = 0.0
    upper: float = 0.0
    confidence_level: float = 0.95


@dataclass(frozen=True)
class MetricSummary:
    """Distribution of one final metric across a batch."""
    metric_name: str
    mean: float
    std: float
    min: float
    max: float
    ci: ConfidenceInterval


@dataclass(frozen=True)
class MonteCarloResult:
    """Aggregated outcome of a Monte Carlo batch."""
    runs: int
    base_seed: int
    final_metrics: tuple = ()  # FinalMetrics per run, in seed order
    summaries: Mapping[str, MetricSummary] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "summaries", frozen_mapping(self.summaries))

    def summary(self, metric_name: str) -> MetricSummary:
        return self.summaries[metric_name]

    def to_dict(self) -> dict:
        return {
            "runs": self.runs,
            "base_seed": self.base_seed,
            "summaries": {
                name: {
                    "mean": s.mean,
                    "std": s.std,
                    "min": s.min,
                    "max": s.max,
                    "ci_lower": s.ci.lower,
                    "ci_upper": s.ci.upper
                }
                for name, s in self.summaries.items()
            }
        }


class MetricsCalculator:
    """Bootstrap statistics over batches of final metrics."""

    def __init__(self, bootstrap_iterations: int = 1000, seed: Optional[int] = None):
        self.bootstrap_iterations = bootstrap_iterations
        self._rng = random.Random(seed)

    def calculate_confidence_interval(
        self,
        values: list,
        confidence: float = 0.95
    ) -> ConfidenceInterval:
        """
        Calculate a bootstrap confidence interval.

        Intervals characterize variability within the model only, not
        real-world uncertainty.
        """
        if not values or len(values) < 2:
            mean = values[0] if values else 0
            return ConfidenceInterval(
                mean=mean,
                lower=mean,
                upper=mean,
                confidence_level=confidence
            )

        bootstrap_means = []
        n = len(values)

        for _ in range(self.bootstrap_iterations):
            sample = [self._rng.choice(values) for _ in range(n)]
            bootstrap_means.append(statistics.mean(sample))

        bootstrap_means.sort()

        alpha = 1 - confidence
        lower_idx = int(alpha / 2 * self.bootstrap_iterations)
        upper_idx = min(
            self.bootstrap_iterations - 1,
            int((1 - alpha / 2) * self.bootstrap_iterations)
        )

        return ConfidenceInterval(
            mean=statistics.mean(values),
            lower=bootstrap_means[lower_idx],
            upper=bootstrap_means[upper_idx],
            confidence_level=confidence
        )

    def summarize(self, metrics: list[FinalMetrics], metric_name: str) -> MetricSummary:
        values = [getattr(m, metric_name) for m in metrics]
        return MetricSummary(
            metric_name=metric_name,
            mean=statistics.mean(values),
            std=statistics.stdev(values) if len(values) > 1 else 0.0,
            min=min(values),
            max=max(values),
            ci=self.calculate_confidence_interval(values)
        )


class MonteCarloRunner:
    """
    Runs a batch of independent simulations and aggregates the outcomes.

    Runs share nothing but the (frozen) parameters, so the batch is
    reproducible for a given base seed.
    """

    def __init__(self, config: SimulationConfig = None):
        self.config = config or SimulationConfig()

    def run(
        self,
        parameters: SimulationParameters,
        runs: Optional[int] = None,
        base_seed: Optional[int] = None
    ) -> MonteCarloResult:
        if runs is None:
            runs = self.config.monte_carlo_runs
        if runs < 1:
            raise ValueError(f"Monte Carlo batch needs at least one run, got {runs}")
        if base_seed is None:
            base_seed = self.config.default_seed if self.config.default_seed is not None else 42

        final_metrics = []
        for run_index in range(runs):
            simulator = MarketSimulator(
                parameters,
                config=self.config,
                seed=base_seed + run_index
            )
            result = simulator.run(include_advice=False)
            final_metrics.append(result.final_metrics)

        calculator = MetricsCalculator(
            bootstrap_iterations=self.config.bootstrap_iterations,
            seed=base_seed
        )
        summaries = {
            name: calculator.summarize(final_metrics, name)
            for name in FINAL_METRIC_NAMES
        }

        logger.info(
            "monte_carlo_completed",
            runs=runs,
            base_seed=base_seed,
            mean_final_share=round(summaries["final_market_share"].mean, 2)
        )

        return MonteCarloResult(
            runs=runs,
            base_seed=base_seed,
            final_metrics=tuple(final_metrics),
            summaries=summaries
        )


class SensitivityAnalyzer:
    """
    Sensitivity analysis over key strategy levers.

    Varies one lever at a time and averages a small Monte Carlo batch
    per grid point:
    - Marketing budget multiplier
    - Base price multiplier
    - Product quality level
    """

    def __init__(
        self,
        base_parameters: SimulationParameters,
        config: SimulationConfig = None,
        runs_per_point: int = 5,
        base_seed: int = 42
    ):
        self.base_parameters = base_parameters
        self.config = config or SimulationConfig()
        self.runs_per_point = runs_per_point
        self.base_seed = base_seed
        self._runner = MonteCarloRunner(self.config)

    def _evaluate(self, parameters: SimulationParameters) -> MonteCarloResult:
        return self._runner.run(
            parameters,
            runs=self.runs_per_point,
            base_seed=self.base_seed
        )

    def run_marketing_sensitivity(self, multipliers: list = None) -> list[dict]:
        """Scale the marketing budget."""
        multipliers = multipliers or [0.5, 0.75, 1.0, 1.25, 1.5]
        results = []

        for multiplier in multipliers:
            params = self.base_parameters.with_changes({
                "budget": {"marketing": self.base_parameters.budget.marketing * multiplier}
            })
            batch = self._evaluate(params)
            results.append({
                "marketing_multiplier": multiplier,
                "avg_final_market_share": batch.summary("final_market_share").mean,
                "avg_total_revenue": batch.summary("total_revenue").mean,
                "avg_total_profit": batch.summary("total_profit").mean
            })

        return results

    def run_price_sensitivity(self, multipliers: list = None) -> list[dict]:
        """Scale the base price."""
        multipliers = multipliers or [0.8, 0.9, 1.0, 1.1, 1.2]
        base_price = self.base_parameters.pricing_strategy.base_price
        results = []

        for multiplier in multipliers:
            params = self.base_parameters.with_changes({
                "pricing_strategy": {"base_price": base_price * multiplier}
            })
            batch = self._evaluate(params)
            results.append({
                "price_multiplier": multiplier,
                "avg_final_market_share": batch.summary("final_market_share").mean,
                "avg_total_revenue": batch.summary("total_revenue").mean,
                "avg_total_profit": batch.summary("total_profit").mean
            })

        return results

    def run_quality_sensitivity(self, quality_levels: list = None) -> list[dict]:
        """Vary product quality on the 1-10 scale."""
        quality_levels = quality_levels or [2, 4, 6, 8, 10]
        results = []

        for quality in quality_levels:
            params = self.base_parameters.with_changes({
                "product_strategy": {"quality_level": quality}
            })
            batch = self._evaluate(params)
            results.append({
                "quality_level": quality,
                "avg_final_market_share": batch.summary("final_market_share").mean,
                "avg_customer_growth_percent": batch.summary("customer_growth_percent").mean,
                "avg_total_revenue": batch.summary("total_revenue").mean
            })

        return results

    def generate_robustness_report(self) -> dict:
        """Generate the complete sensitivity report."""
        return {
            "generated_at": datetime.now().isoformat(),
            "base_parameters": {
                "marketing_budget": self.base_parameters.budget.marketing,
                "base_price": self.base_parameters.pricing_strategy.base_price,
                "quality_level": self.base_parameters.product_strategy.quality_level
            },
            "marketing_sensitivity": self.run_marketing_sensitivity(),
            "price_sensitivity": self.run_price_sensitivity(),
            "quality_sensitivity": self.run_quality_sensitivity()
        }
