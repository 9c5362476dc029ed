"""
Strategy Advisor

Rule-based advisory layer over a finished simulation:
- AnalysisData: performance and market-condition summary
- RecommendationEngine: ranked recommendations from a fixed rule table
- RiskAssessor: risk register and overall risk level
- ScenarioGenerator: canned what-if alternatives (heuristic or re-simulated)
- StrategyAdvisor: insights, recommendations, risks and strategic options
"""

from .analysis import (
    AnalysisBuilder,
    AnalysisData,
    MarketConditions,
    PerformanceMetrics
)
from .recommendations import (
    Impact,
    Priority,
    Recommendation,
    RecommendationEngine,
    RecommendationRule,
    RecommendationRuleKind,
    RecommendationType
)
from .risks import (
    Risk,
    RiskAssessment,
    RiskAssessor,
    RiskRule,
    RiskSeverity,
    RiskType
)
from .scenarios import ProjectedResults, ScenarioGenerator, WhatIfScenario
from .advisor import AdvisorReport, StrategicOption, StrategyAdvisor

__all__ = [
    "AnalysisBuilder",
    "AnalysisData",
    "MarketConditions",
    "PerformanceMetrics",
    "Impact",
    "Priority",
    "Recommendation",
    "RecommendationEngine",
    "RecommendationRule",
    "RecommendationRuleKind",
    "RecommendationType",
    "Risk",
    "RiskAssessment",
    "RiskAssessor",
    "RiskRule",
    "RiskSeverity",
    "RiskType",
    "ProjectedResults",
    "ScenarioGenerator",
    "WhatIfScenario",
    "AdvisorReport",
    "StrategicOption",
    "StrategyAdvisor"
]
