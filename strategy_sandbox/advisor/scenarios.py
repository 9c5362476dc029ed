"""
What-If Scenarios

Three alternative strategies expressed as partial parameter overrides:
- Aggressive Marketing: +50% marketing budget
- Premium Positioning: premium pricing at +30% base price
- Innovation Focus: double innovation rate, +2 quality (capped at 10)

Projected results come from one of two modes:
- HEURISTIC: hand-authored projections, no extra simulation cost
- RESIMULATED: re-run the engine with the override under the same seed
  and measure the change against the baseline run
"""

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

import structlog

from ..config.settings import ScenarioMode, SimulationConfig
from ..core.parameters import PricingModel, SimulationParameters
from ..simulation.entities import FinalMetrics, frozen_mapping, thawed

logger = structlog.get_logger(__name__)

MAX_QUALITY_LEVEL = 10


@dataclass(frozen=True)
class ProjectedResults:
    """Projected outcome of a scenario relative to the baseline."""
    market_share_change: float = 0.0  # percentage points
    revenue_change_percent: float = 0.0
    risk_level: str = "medium"  # low, medium, high
    probability: float = 0.0  # chance of success


@dataclass(frozen=True)
class WhatIfScenario:
    """An alternative parameterization with its projected outcome."""
    id: str
    name: str
    description: str
    parameter_changes: Mapping[str, Any] = field(default_factory=dict)
    projected_results: ProjectedResults = field(default_factory=ProjectedResults)
    mode: ScenarioMode = ScenarioMode.HEURISTIC

    def __post_init__(self):
        object.__setattr__(self, "parameter_changes", frozen_mapping(self.parameter_changes))

    def apply_to(self, parameters: SimulationParameters) -> SimulationParameters:
        """Parameters with this scenario's override applied."""
        return parameters.with_changes(thawed(self.parameter_changes))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "parameter_changes": _jsonable(self.parameter_changes),
            "projected_results": {
                "market_share_change": self.projected_results.market_share_change,
                "revenue_change_percent": self.projected_results.revenue_change_percent,
                "risk_level": self.projected_results.risk_level,
                "probability": self.projected_results.probability
            },
            "mode": self.mode.value
        }


def _jsonable(value):
    if isinstance(value, Mapping):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_jsonable(v) for v in value]
    if isinstance(value, PricingModel):
        return value.value
    return value


class ScenarioGenerator:
    """Produces the canned what-if scenarios for a parameter set."""

    def __init__(
        self,
        mode: ScenarioMode = ScenarioMode.HEURISTIC,
        config: SimulationConfig = None,
        seed: Optional[int] = None
    ):
        self.mode = ScenarioMode(mode)
        self.config = config or SimulationConfig()
        self.seed = seed

    def generate(
        self,
        parameters: SimulationParameters,
        baseline: Optional[FinalMetrics] = None
    ) -> list[WhatIfScenario]:
        scenarios = self._heuristic_scenarios(parameters)

        if self.mode == ScenarioMode.RESIMULATED:
            scenarios = self._resimulate(parameters, scenarios, baseline)

        return scenarios

    def _heuristic_scenarios(self, parameters: SimulationParameters) -> list[WhatIfScenario]:
        budget = parameters.budget.model_dump()
        pricing = parameters.pricing_strategy
        product = parameters.product_strategy

        return [
            WhatIfScenario(
                id="aggressive-marketing",
                name="Aggressive Marketing",
                description="What if we increase marketing budget by 50%?",
                parameter_changes={
                    "budget": {**budget, "marketing": budget["marketing"] * 1.5}
                },
                projected_results=ProjectedResults(
                    market_share_change=3.5,
                    revenue_change_percent=25.0,
                    risk_level="medium",
                    probability=0.7
                )
            ),
            WhatIfScenario(
                id="premium-positioning",
                name="Premium Positioning",
                description="What if we switch to premium pricing strategy?",
                parameter_changes={
                    "pricing_strategy": {
                        "model": PricingModel.PREMIUM,
                        "base_price": pricing.base_price * 1.3
                    }
                },
                projected_results=ProjectedResults(
                    market_share_change=-1.5,
                    revenue_change_percent=15.0,
                    risk_level="low",
                    probability=0.8
                )
            ),
            WhatIfScenario(
                id="innovation-focus",
                name="Innovation Focus",
                description="What if we double our product development efforts?",
                parameter_changes={
                    "product_strategy": {
                        "innovation_rate": product.innovation_rate * 2,
                        "quality_level": min(MAX_QUALITY_LEVEL, product.quality_level + 2)
                    }
                },
                projected_results=ProjectedResults(
                    market_share_change=5.0,
                    revenue_change_percent=30.0,
                    risk_level="high",
                    probability=0.6
                )
            ),
        ]

    def _run(self, parameters: SimulationParameters) -> FinalMetrics:
        # Imported here: the simulator itself builds scenarios after a run
        from ..simulation.simulator import MarketSimulator

        simulator = MarketSimulator(parameters, config=self.config, seed=self.seed)
        return simulator.run(include_advice=False).final_metrics

    def _resimulate(
        self,
        parameters: SimulationParameters,
        scenarios: list[WhatIfScenario],
        baseline: Optional[FinalMetrics]
    ) -> list[WhatIfScenario]:
        baseline = baseline or self._run(parameters)
        resimulated = []

        for scenario in scenarios:
            outcome = self._run(scenario.apply_to(parameters))

            revenue_change = (
                (outcome.total_revenue - baseline.total_revenue)
                / baseline.total_revenue * 100
                if baseline.total_revenue > 0 else 0.0
            )
            projected = ProjectedResults(
                market_share_change=outcome.final_market_share - baseline.final_market_share,
                revenue_change_percent=revenue_change,
                risk_level=scenario.projected_results.risk_level,
                probability=scenario.projected_results.probability
            )
            resimulated.append(WhatIfScenario(
                id=scenario.id,
                name=scenario.name,
                description=scenario.description,
                parameter_changes=scenario.parameter_changes,
                projected_results=projected,
                mode=ScenarioMode.RESIMULATED
            ))

        logger.debug("scenarios_resimulated", scenarios=len(resimulated), seed=self.seed)
        return resimulated
