"""
Market Simulation Engine

Parameters -> MarketDynamicsModel -> TimelineBuilder (monthly steps)
-> Timeline -> FinalMetricsAggregator -> FinalMetrics.

Runs are single-threaded and self-contained: a run keeps no state after
it returns, so batches (Monte Carlo, sensitivity sweeps) can execute
independently with one seeded generator per run.
"""

from .entities import (
    KPIMetrics,
    TimelineData,
    FinalMetrics,
    SimulationResults
)
from .dynamics import MarketDynamics, MarketDynamicsModel
from .aggregation import FinalMetricsAggregator
from .simulator import (
    MonthlySimulationStep,
    TimelineBuilder,
    MarketSimulator
)
from .metrics import (
    ConfidenceInterval,
    MetricsCalculator,
    MonteCarloResult,
    MonteCarloRunner,
    SensitivityAnalyzer
)

__all__ = [
    "KPIMetrics",
    "TimelineData",
    "FinalMetrics",
    "SimulationResults",
    "MarketDynamics",
    "MarketDynamicsModel",
    "FinalMetricsAggregator",
    "MonthlySimulationStep",
    "TimelineBuilder",
    "MarketSimulator",
    "ConfidenceInterval",
    "MetricsCalculator",
    "MonteCarloResult",
    "MonteCarloRunner",
    "SensitivityAnalyzer"
]
