"""
Simulation Entities

Value objects produced by a simulation run:
- Monthly KPI snapshots
- Timeline records (one per simulated month)
- Final summary metrics
- The complete result bundle returned to callers

All are frozen. A timeline record depends only on the record before it
plus the run's immutable parameters and market dynamics.
"""

from dataclasses import asdict, dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional

from ..core.parameters import SimulationParameters


def frozen_mapping(value: Mapping) -> Mapping:
    """Read-only view of a (possibly nested) mapping."""
    return MappingProxyType({
        k: frozen_mapping(v) if isinstance(v, Mapping) else v
        for k, v in value.items()
    })


def thawed(value: Any) -> Any:
    """Plain-dict copy of a frozen mapping, for serialization and merging."""
    if isinstance(value, Mapping):
        return {k: thawed(v) for k, v in value.items()}
    return value


@dataclass(frozen=True)
class KPIMetrics:
    """Key performance indicators for one month."""
    cac: float = 0.0  # Customer acquisition cost
    ltv: float = 0.0  # Lifetime value
    roi: float = 0.0
    nps: float = 0.0  # Net promoter score proxy
    churn_rate: float = 0.0  # fraction of base lost this month
    growth_rate: float = 0.0  # new customers as % of base


@dataclass(frozen=True)
class TimelineData:
    """Full metrics record for a single simulated month."""
    month: int
    market_share: float
    revenue: float
    costs: float
    profit: float
    customer_base: int
    competitor_shares: Mapping[str, float] = field(default_factory=dict)
    kpis: KPIMetrics = field(default_factory=KPIMetrics)

    # Diagnostic breakdown of the share movement
    share_change: float = 0.0
    new_customers: int = 0
    churned_customers: int = 0

    def __post_init__(self):
        object.__setattr__(self, "competitor_shares", frozen_mapping(self.competitor_shares))

    def to_dict(self) -> dict:
        return {
            "month": self.month,
            "market_share": self.market_share,
            "revenue": self.revenue,
            "costs": self.costs,
            "profit": self.profit,
            "customer_base": self.customer_base,
            "competitor_shares": thawed(self.competitor_shares),
            "kpis": asdict(self.kpis),
            "share_change": self.share_change,
            "new_customers": self.new_customers,
            "churned_customers": self.churned_customers
        }


@dataclass(frozen=True)
class FinalMetrics:
    """Summary of a completed timeline."""
    total_revenue: float = 0.0
    total_profit: float = 0.0
    final_market_share: float = 0.0
    customer_growth_percent: float = 0.0
    brand_value: float = 0.0  # illustrative proxy, not a valuation

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class SimulationResults:
    """
    Everything a simulation run returns.

    ``recommendations`` and ``scenarios`` hold advisor value objects
    (see strategy_sandbox.advisor).
    """
    parameters: SimulationParameters
    timeline: tuple = ()
    final_metrics: FinalMetrics = field(default_factory=FinalMetrics)
    recommendations: tuple = ()
    scenarios: tuple = ()
    seed: Optional[int] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "parameters": self.parameters.model_dump(mode="json", by_alias=True),
            "timeline": [m.to_dict() for m in self.timeline],
            "final_metrics": self.final_metrics.to_dict(),
            "recommendations": [r.to_dict() for r in self.recommendations],
            "scenarios": [s.to_dict() for s in self.scenarios],
            "seed": self.seed
        }
