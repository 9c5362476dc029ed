"""
Recommendation Engine

Evaluates a fixed, ordered rule table against AnalysisData. Each firing
rule emits one recommendation with a parameterized description, a
quantified impact and an ordered implementation checklist.

| Rule | Fires when | Priority |
|------|------------|----------|
| Market share recovery | share trend < 0 | high |
| Profit optimization | profit margin < 0.15 | high |
| Retention plan | NPS < 70 | medium |
| Competitive differentiation | competitive position < 0.3 | high |

Results are ranked by priority weight, then projected revenue impact,
and truncated to the configured maximum.
"""

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Callable

from ..config.settings import AdvisorConfig
from .analysis import AnalysisData
from .rules import check_condition, metric_value


class RecommendationType(str, Enum):
    """Recommendation categories."""
    STRATEGIC = "strategic"
    PRICING = "pricing"
    PRODUCT = "product"
    PROMOTION = "promotion"


class Priority(str, Enum):
    """Recommendation priority."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def weight(self) -> int:
        return PRIORITY_WEIGHTS[self]


PRIORITY_WEIGHTS = {Priority.HIGH: 3, Priority.MEDIUM: 2, Priority.LOW: 1}


class RecommendationRuleKind(str, Enum):
    """The closed set of recommendation rules."""
    MARKET_SHARE_RECOVERY = "market_share_recovery"
    PROFIT_OPTIMIZATION = "profit_optimization"
    RETENTION_PLAN = "retention_plan"
    COMPETITIVE_DIFFERENTIATION = "competitive_differentiation"


@dataclass(frozen=True)
class Impact:
    """Projected effect of acting on a recommendation."""
    revenue: float = 0.0
    market_share_delta: float = 0.0  # percentage points
    time_to_impact_days: int = 0
    confidence: float = 0.0  # 0-1


@dataclass(frozen=True)
class Recommendation:
    """A single ranked recommendation."""
    id: str
    type: RecommendationType
    priority: Priority
    title: str
    description: str
    impact: Impact
    implementation: tuple = ()  # ordered checklist

    def sort_key(self) -> tuple:
        return (self.priority.weight, self.impact.revenue)

    def to_dict(self) -> dict:
        data = asdict(self)
        data["type"] = self.type.value
        data["priority"] = self.priority.value
        data["implementation"] = list(self.implementation)
        return data


@dataclass(frozen=True)
class RecommendationRule:
    """A condition on one analysis metric paired with the recommendation it yields."""
    kind: RecommendationRuleKind
    type: RecommendationType
    priority: Priority
    title: str
    metric: str
    condition: str
    threshold: float

    def matches(self, analysis: AnalysisData) -> bool:
        return check_condition(metric_value(analysis, self.metric), self.condition, self.threshold)

    def recommend(self, analysis: AnalysisData) -> Recommendation:
        describe, impact, implementation = RULE_CONTENT[self.kind]
        return Recommendation(
            id=f"rec-{self.kind.value}",
            type=self.type,
            priority=self.priority,
            title=self.title,
            description=describe(analysis),
            impact=impact(analysis),
            implementation=implementation
        )


# =============================================================================
# Market share recovery
# =============================================================================

def _market_share_description(data: AnalysisData) -> str:
    channels = data.parameters.promotion_strategy.channels
    underperforming = [c for c in channels if c.effectiveness < 0.5]
    trend = data.current_performance.market_share_trend
    return (
        f"Market share moved {trend:+.1f} points over the horizon. Focus on "
        f"optimizing {len(underperforming)} underperforming channels and "
        f"increasing brand visibility through targeted campaigns."
    )


def _market_share_impact(data: AnalysisData) -> Impact:
    share_gain = 2.5
    potential_customers = data.parameters.market_size * 0.01 * share_gain
    revenue = potential_customers * data.parameters.pricing_strategy.base_price * 12
    return Impact(
        revenue=revenue * 0.7,  # conservative
        market_share_delta=share_gain,
        time_to_impact_days=90,
        confidence=0.75
    )


MARKET_SHARE_STEPS = (
    "Reallocate 30% of budget to high-performing channels",
    "Launch targeted acquisition campaign",
    "Implement referral program",
    "Enhance product differentiation",
)


# =============================================================================
# Profit optimization
# =============================================================================

TARGET_MARGIN = 0.2


def _profit_description(data: AnalysisData) -> str:
    margin = data.current_performance.profit_margin
    gap = TARGET_MARGIN - margin
    return (
        f"Current margins at {margin * 100:.1f}% are below target. Implement "
        f"pricing optimization and cost reduction to achieve "
        f"{gap * 100:.1f}% improvement."
    )


def _profit_impact(data: AnalysisData) -> Impact:
    return Impact(
        revenue=data.final_metrics.total_revenue * 0.05,
        market_share_delta=-0.3,  # slight share loss from price increase
        time_to_impact_days=30,
        confidence=0.85
    )


PROFIT_STEPS = (
    "Implement tiered pricing model",
    "Reduce operational costs by 10%",
    "Automate low-value processes",
    "Negotiate supplier contracts",
)


# =============================================================================
# Retention plan
# =============================================================================

DEFAULT_LTV = 1000.0
CHURN_REDUCTION = 0.02


def _retention_description(data: AnalysisData) -> str:
    nps = data.current_performance.customer_satisfaction
    return (
        f"Customer satisfaction at {nps:.0f} requires immediate attention. "
        f"Launch comprehensive retention program focusing on service quality "
        f"and product improvements."
    )


def _retention_impact(data: AnalysisData) -> Impact:
    ltv = (data.timeline[0].kpis.ltv if data.timeline else 0.0) or DEFAULT_LTV
    customer_base = (
        data.final_metrics.total_revenue / data.parameters.pricing_strategy.base_price / 12
    )
    return Impact(
        revenue=customer_base * CHURN_REDUCTION * ltv,
        market_share_delta=1.0,
        time_to_impact_days=120,
        confidence=0.8
    )


RETENTION_STEPS = (
    "Launch customer success program",
    "Implement feedback loop system",
    "Enhance product quality metrics",
    "Create loyalty rewards program",
)


# =============================================================================
# Competitive differentiation
# =============================================================================

def _competitive_description(data: AnalysisData) -> str:
    position = data.current_performance.competitive_position
    return (
        f"Competitive position at {position * 100:.1f}% requires differentiation. "
        f"Develop unique value proposition and strengthen brand positioning."
    )


def _competitive_impact(data: AnalysisData) -> Impact:
    return Impact(
        revenue=data.final_metrics.total_revenue * 0.15,
        market_share_delta=3.0,
        time_to_impact_days=180,
        confidence=0.7
    )


COMPETITIVE_STEPS = (
    "Develop unique selling proposition",
    "Launch brand repositioning campaign",
    "Introduce exclusive features",
    "Build strategic partnerships",
)


RULE_CONTENT: dict[RecommendationRuleKind, tuple[Callable, Callable, tuple]] = {
    RecommendationRuleKind.MARKET_SHARE_RECOVERY: (
        _market_share_description, _market_share_impact, MARKET_SHARE_STEPS
    ),
    RecommendationRuleKind.PROFIT_OPTIMIZATION: (
        _profit_description, _profit_impact, PROFIT_STEPS
    ),
    RecommendationRuleKind.RETENTION_PLAN: (
        _retention_description, _retention_impact, RETENTION_STEPS
    ),
    RecommendationRuleKind.COMPETITIVE_DIFFERENTIATION: (
        _competitive_description, _competitive_impact, COMPETITIVE_STEPS
    ),
}


def default_rules(config: AdvisorConfig) -> list[RecommendationRule]:
    """The rule table, in evaluation order."""
    return [
        RecommendationRule(
            kind=RecommendationRuleKind.MARKET_SHARE_RECOVERY,
            type=RecommendationType.STRATEGIC,
            priority=Priority.HIGH,
            title="Market Share Recovery Plan",
            metric="current_performance.market_share_trend",
            condition="lt",
            threshold=config.share_trend_floor
        ),
        RecommendationRule(
            kind=RecommendationRuleKind.PROFIT_OPTIMIZATION,
            type=RecommendationType.PRICING,
            priority=Priority.HIGH,
            title="Profit Margin Optimization",
            metric="current_performance.profit_margin",
            condition="lt",
            threshold=config.profit_margin_floor
        ),
        RecommendationRule(
            kind=RecommendationRuleKind.RETENTION_PLAN,
            type=RecommendationType.PRODUCT,
            priority=Priority.MEDIUM,
            title="Customer Experience Enhancement",
            metric="current_performance.customer_satisfaction",
            condition="lt",
            threshold=config.satisfaction_floor
        ),
        RecommendationRule(
            kind=RecommendationRuleKind.COMPETITIVE_DIFFERENTIATION,
            type=RecommendationType.STRATEGIC,
            priority=Priority.HIGH,
            title="Competitive Differentiation Strategy",
            metric="current_performance.competitive_position",
            condition="lt",
            threshold=config.competitive_position_floor
        ),
    ]


class RecommendationEngine:
    """
    Applies the rule table and ranks what fires.

    No rule firing yields an empty list.
    """

    def __init__(self, config: AdvisorConfig = None):
        self.config = config or AdvisorConfig()
        self._rules = default_rules(self.config)

    @property
    def rules(self) -> list[RecommendationRule]:
        return list(self._rules)

    def recommend(self, analysis: AnalysisData) -> list[Recommendation]:
        recommendations = [
            rule.recommend(analysis)
            for rule in self._rules
            if rule.matches(analysis)
        ]
        return self._rank(recommendations)

    def _rank(self, recommendations: list[Recommendation]) -> list[Recommendation]:
        ranked = sorted(recommendations, key=lambda r: r.sort_key(), reverse=True)
        return ranked[:self.config.max_recommendations]
