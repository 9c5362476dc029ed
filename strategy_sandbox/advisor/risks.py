"""
Risk Assessor

Threshold rules over AnalysisData that build a risk register:
- Market: share trend below -1 point (high)
- Financial: profit margin below 5% (critical)
- Competitive: competition intensity above 0.8 (medium)

The overall level escalates with the worst findings, and mitigation
priorities list mitigations from most to least severe.
"""

from dataclasses import dataclass, field
from enum import Enum

from ..config.settings import AdvisorConfig
from .analysis import AnalysisData
from .rules import check_condition, metric_value


class RiskType(str, Enum):
    """Risk categories."""
    MARKET = "market"
    FINANCIAL = "financial"
    OPERATIONAL = "operational"
    COMPETITIVE = "competitive"


class RiskSeverity(str, Enum):
    """Risk severity levels."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def weight(self) -> int:
        return SEVERITY_WEIGHTS[self]


SEVERITY_WEIGHTS = {
    RiskSeverity.CRITICAL: 4,
    RiskSeverity.HIGH: 3,
    RiskSeverity.MEDIUM: 2,
    RiskSeverity.LOW: 1,
}


@dataclass(frozen=True)
class Risk:
    """An entry in the risk register."""
    type: RiskType
    severity: RiskSeverity
    description: str
    mitigation: str
    probability: float

    def to_dict(self) -> dict:
        return {
            "type": self.type.value,
            "severity": self.severity.value,
            "description": self.description,
            "mitigation": self.mitigation,
            "probability": self.probability
        }


@dataclass(frozen=True)
class RiskAssessment:
    """Risk register with an overall level."""
    risks: tuple = ()
    overall_risk_level: RiskSeverity = RiskSeverity.LOW
    mitigation_priorities: tuple = ()

    def to_dict(self) -> dict:
        return {
            "risks": [r.to_dict() for r in self.risks],
            "overall_risk_level": self.overall_risk_level.value,
            "mitigation_priorities": list(self.mitigation_priorities)
        }


@dataclass(frozen=True)
class RiskRule:
    """Definition of a risk rule."""
    type: RiskType
    severity: RiskSeverity
    metric: str
    condition: str
    threshold: float
    description: str
    mitigation: str
    probability: float

    def evaluate(self, analysis: AnalysisData):
        """Return the Risk when the condition holds, else None."""
        value = metric_value(analysis, self.metric)
        if not check_condition(value, self.condition, self.threshold):
            return None
        return Risk(
            type=self.type,
            severity=self.severity,
            description=self.description,
            mitigation=self.mitigation,
            probability=self.probability
        )


def default_risk_rules(config: AdvisorConfig) -> list[RiskRule]:
    return [
        RiskRule(
            type=RiskType.MARKET,
            severity=RiskSeverity.HIGH,
            metric="current_performance.market_share_trend",
            condition="lt",
            threshold=config.market_risk_share_trend,
            description="Continued market share loss could lead to marginalization",
            mitigation="Immediate strategic intervention required",
            probability=0.7
        ),
        RiskRule(
            type=RiskType.FINANCIAL,
            severity=RiskSeverity.CRITICAL,
            metric="current_performance.profit_margin",
            condition="lt",
            threshold=config.financial_risk_margin,
            description="Unsustainable profit margins threaten business viability",
            mitigation="Cost optimization and pricing review needed",
            probability=0.8
        ),
        RiskRule(
            type=RiskType.COMPETITIVE,
            severity=RiskSeverity.MEDIUM,
            metric="market_conditions.competition_intensity",
            condition="gt",
            threshold=config.competitive_risk_intensity,
            description="Intense competition may erode market position",
            mitigation="Develop unique value proposition",
            probability=0.6
        ),
    ]


class RiskAssessor:
    """Evaluates the risk rules and rolls them up."""

    def __init__(self, config: AdvisorConfig = None):
        self.config = config or AdvisorConfig()
        self._rules = default_risk_rules(self.config)

    @property
    def rules(self) -> list[RiskRule]:
        return list(self._rules)

    def assess(self, analysis: AnalysisData) -> RiskAssessment:
        risks = []
        for rule in self._rules:
            risk = rule.evaluate(analysis)
            if risk is not None:
                risks.append(risk)

        return RiskAssessment(
            risks=tuple(risks),
            overall_risk_level=self.overall_risk_level(risks),
            mitigation_priorities=self.prioritize_mitigation(risks)
        )

    @staticmethod
    def overall_risk_level(risks: list[Risk]) -> RiskSeverity:
        if any(r.severity == RiskSeverity.CRITICAL for r in risks):
            return RiskSeverity.CRITICAL

        high_count = sum(1 for r in risks if r.severity == RiskSeverity.HIGH)
        if high_count >= 2:
            return RiskSeverity.HIGH
        if high_count == 1:
            return RiskSeverity.MEDIUM
        return RiskSeverity.LOW

    @staticmethod
    def prioritize_mitigation(risks: list[Risk]) -> tuple:
        ordered = sorted(risks, key=lambda r: r.severity.weight, reverse=True)
        return tuple(r.mitigation for r in ordered)
