"""
Strategy Advisor

Threads simulation parameters and results through the advisory rules:
1. Build analysis data (performance and market conditions)
2. Generate narrative insights
3. Rank recommendations
4. Assess risks
5. Identify strategic options

The advisor holds only its rule tables; every call is independent.
"""

from dataclasses import dataclass, field
from typing import Any, Mapping

import structlog

from ..config.settings import AdvisorConfig
from ..core.parameters import SimulationParameters
from ..simulation.entities import SimulationResults, frozen_mapping, thawed
from .analysis import AnalysisBuilder, AnalysisData
from .recommendations import RecommendationEngine
from .risks import RiskAssessment, RiskAssessor

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class StrategicOption:
    """A broader strategic direction worth evaluating."""
    id: str
    name: str
    description: str
    requirements: tuple = ()
    expected_outcome: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "expected_outcome", frozen_mapping(self.expected_outcome))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "requirements": list(self.requirements),
            "expected_outcome": thawed(self.expected_outcome)
        }


@dataclass(frozen=True)
class AdvisorReport:
    """Output of a full advisory pass."""
    insights: tuple = ()
    recommendations: tuple = ()
    risk_assessment: RiskAssessment = field(default_factory=RiskAssessment)
    strategic_options: tuple = ()

    def to_dict(self) -> dict:
        return {
            "insights": list(self.insights),
            "recommendations": [r.to_dict() for r in self.recommendations],
            "risk_assessment": self.risk_assessment.to_dict(),
            "strategic_options": [o.to_dict() for o in self.strategic_options]
        }


class StrategyAdvisor:
    """Produces insights, recommendations, risks and options for a run."""

    def __init__(
        self,
        config: AdvisorConfig = None,
        analysis_builder: AnalysisBuilder = None,
        recommendation_engine: RecommendationEngine = None,
        risk_assessor: RiskAssessor = None
    ):
        self.config = config or AdvisorConfig()
        self._analysis = analysis_builder or AnalysisBuilder()
        self._recommendations = recommendation_engine or RecommendationEngine(self.config)
        self._risks = risk_assessor or RiskAssessor(self.config)

    def analyze_simulation(
        self,
        parameters: SimulationParameters,
        results: SimulationResults
    ) -> AdvisorReport:
        analysis = self._analysis.build(parameters, results.timeline, results.final_metrics)

        report = AdvisorReport(
            insights=tuple(self.generate_insights(analysis)),
            recommendations=tuple(self._recommendations.recommend(analysis)),
            risk_assessment=self._risks.assess(analysis),
            strategic_options=tuple(self.identify_strategic_options(analysis))
        )

        logger.info(
            "advisor_report_generated",
            insights=len(report.insights),
            recommendations=len(report.recommendations),
            risks=len(report.risk_assessment.risks),
            overall_risk=report.risk_assessment.overall_risk_level.value
        )
        return report

    def generate_insights(self, data: AnalysisData) -> list[str]:
        insights = []
        performance = data.current_performance

        if performance.market_share_trend > 2:
            insights.append("Strong market share growth indicates effective strategy execution")
        elif performance.market_share_trend < -2:
            insights.append("Declining market share suggests need for strategic adjustment")

        if performance.profit_margin > 0.25:
            insights.append("Excellent profit margins provide room for strategic investments")
        elif performance.profit_margin < 0.1:
            insights.append("Low profitability limits strategic flexibility")

        if data.market_conditions.competition_intensity > 0.7:
            insights.append("High competition requires differentiation strategy")

        if performance.customer_satisfaction > 80:
            insights.append("High customer satisfaction creates strong foundation for growth")

        return insights

    def identify_strategic_options(self, data: AnalysisData) -> list[StrategicOption]:
        options = []
        total_budget = data.parameters.budget.total

        if data.current_performance.market_share_trend > 0:
            options.append(StrategicOption(
                id="growth-acceleration",
                name="Growth Acceleration",
                description="Double down on successful strategies to capture more market share",
                requirements=(
                    "Increased marketing budget",
                    "Expanded sales team",
                    "Product enhancement",
                ),
                expected_outcome={
                    "market_share_gain": 5,
                    "timeframe_months": 12,
                    "investment": total_budget * 0.3
                }
            ))

        if data.current_performance.profit_margin < 0.2:
            options.append(StrategicOption(
                id="operational-excellence",
                name="Operational Excellence",
                description="Focus on cost optimization and operational efficiency",
                requirements=(
                    "Process automation",
                    "Supply chain optimization",
                    "Overhead reduction",
                ),
                expected_outcome={
                    "margin_improvement": 0.08,
                    "timeframe_months": 6,
                    "investment": total_budget * 0.1
                }
            ))

        if "innovation-seeking" in data.market_conditions.customer_preferences:
            options.append(StrategicOption(
                id="innovation-leadership",
                name="Innovation Leadership",
                description="Become the market leader through product innovation",
                requirements=(
                    "R&D investment",
                    "Talent acquisition",
                    "Partnership development",
                ),
                expected_outcome={
                    "competitive_advantage": 0.3,
                    "timeframe_months": 18,
                    "investment": total_budget * 0.4
                }
            ))

        return options
