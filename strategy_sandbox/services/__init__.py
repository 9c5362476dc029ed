"""
Application services around the simulation core.

Storage is injected through SimulationRepository; the core itself keeps
no state between runs.
"""

from .repository import (
    MarketSimulation,
    SimulationStatus,
    SimulationRepository,
    InMemorySimulationRepository
)
from .simulation_service import SimulationService

__all__ = [
    "MarketSimulation",
    "SimulationStatus",
    "SimulationRepository",
    "InMemorySimulationRepository",
    "SimulationService"
]
