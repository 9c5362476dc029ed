"""
Simulation Service

End-to-end flow for a simulation request:
1. Validate the raw payload into parameters
2. Run the market simulation
3. Run the strategy advisor over the results
4. Store the record through the injected repository

Validation failures raise InvalidParameters before anything is stored.
Any later failure is stored as a FAILED record and re-raised.
"""

from dataclasses import replace
from datetime import datetime
from typing import Any, Optional

import structlog

from ..advisor.advisor import StrategyAdvisor
from ..config.settings import AdvisorConfig, SimulationConfig
from ..core.parameters import SimulationParameters
from ..simulation.simulator import MarketSimulator
from .repository import (
    InMemorySimulationRepository,
    MarketSimulation,
    SimulationRepository,
    SimulationStatus
)

logger = structlog.get_logger(__name__)


class SimulationService:
    """Runs simulations and advisor passes, persisting the outcome."""

    def __init__(
        self,
        repository: SimulationRepository = None,
        simulation_config: SimulationConfig = None,
        advisor_config: AdvisorConfig = None
    ):
        self._repository = repository or InMemorySimulationRepository()
        self.simulation_config = simulation_config or SimulationConfig()
        self.advisor_config = advisor_config or AdvisorConfig()
        self._advisor = StrategyAdvisor(self.advisor_config)

    def run(
        self,
        payload: Any,
        name: str = "",
        description: str = "Market strategy simulation",
        seed: Optional[int] = None
    ) -> MarketSimulation:
        parameters = SimulationParameters.ensure(payload)

        record = MarketSimulation(
            name=name or f"Simulation {datetime.now():%Y-%m-%d}",
            description=description,
            parameters=parameters,
            status=SimulationStatus.RUNNING
        )
        log = logger.bind(simulation_id=record.id)

        try:
            simulator = MarketSimulator(
                parameters,
                config=self.simulation_config,
                advisor_config=self.advisor_config,
                seed=seed
            )
            results = simulator.run()
            analysis = self._advisor.analyze_simulation(simulator.parameters, results)
        except Exception:
            record.status = SimulationStatus.FAILED
            record.updated_at = datetime.now()
            self._repository.save(record)
            log.exception("simulation_failed")
            raise

        # Stored results carry the advisor's ranking
        record.results = replace(results, recommendations=analysis.recommendations)
        record.analysis = analysis
        record.parameters = simulator.parameters
        record.status = SimulationStatus.COMPLETED
        record.updated_at = datetime.now()
        self._repository.save(record)

        log.info(
            "simulation_stored",
            status=record.status.value,
            recommendations=len(analysis.recommendations)
        )
        return record

    def get(self, simulation_id: str) -> Optional[MarketSimulation]:
        return self._repository.get(simulation_id)

    def list(self, status: Optional[SimulationStatus] = None) -> list[MarketSimulation]:
        return self._repository.list(status)

    def delete(self, simulation_id: str) -> bool:
        return self._repository.delete(simulation_id)
