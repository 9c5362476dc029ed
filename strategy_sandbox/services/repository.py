"""
Simulation Repository

Storage interface for completed simulation records. The service receives
a repository at construction; no storage is held at module level.

The in-memory implementation suits tests and demos. Production backends
implement the same interface.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import uuid4

from ..core.parameters import SimulationParameters
from ..simulation.entities import SimulationResults


class SimulationStatus(str, Enum):
    """Lifecycle of a stored simulation."""
    DRAFT = "draft"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class MarketSimulation:
    """A named simulation with its inputs, outputs and advisor analysis."""
    id: str = field(default_factory=lambda: f"sim_{uuid4().hex[:12]}")
    name: str = ""
    description: str = ""
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)
    parameters: Optional[SimulationParameters] = None
    results: Optional[SimulationResults] = None
    analysis: Any = None  # AdvisorReport
    status: SimulationStatus = SimulationStatus.DRAFT

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "parameters": (
                self.parameters.model_dump(mode="json", by_alias=True)
                if self.parameters else None
            ),
            "results": self.results.to_dict() if self.results else None,
            "analysis": self.analysis.to_dict() if self.analysis else None,
            "status": self.status.value
        }


class SimulationRepository(ABC):
    """Abstract storage for simulation records."""

    @abstractmethod
    def save(self, simulation: MarketSimulation) -> None:
        """Insert or replace a record."""
        pass

    @abstractmethod
    def get(self, simulation_id: str) -> Optional[MarketSimulation]:
        """Fetch a record by id."""
        pass

    @abstractmethod
    def list(self, status: Optional[SimulationStatus] = None) -> list[MarketSimulation]:
        """List records, newest first."""
        pass

    @abstractmethod
    def delete(self, simulation_id: str) -> bool:
        """Remove a record. Returns False when it did not exist."""
        pass


class InMemorySimulationRepository(SimulationRepository):
    """Dictionary-backed repository."""

    def __init__(self):
        self._records: dict[str, MarketSimulation] = {}

    def save(self, simulation: MarketSimulation) -> None:
        self._records[simulation.id] = simulation

    def get(self, simulation_id: str) -> Optional[MarketSimulation]:
        return self._records.get(simulation_id)

    def list(self, status: Optional[SimulationStatus] = None) -> list[MarketSimulation]:
        records = list(self._records.values())
        if status:
            records = [r for r in records if r.status == status]
        records.sort(key=lambda r: r.created_at, reverse=True)
        return records

    def delete(self, simulation_id: str) -> bool:
        if simulation_id in self._records:
            del self._records[simulation_id]
            return True
        return False
