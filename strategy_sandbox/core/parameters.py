"""
Simulation Parameters

Input schema for a simulation run. Field names are snake_case in Python
and accept the camelCase keys of the JSON contract, so a request payload
such as ``{"marketSize": ..., "pricingStrategy": {"basePrice": ...}}``
validates directly.

Parameters are frozen: a run never mutates its inputs, and scenario
overrides produce new instances through ``with_changes``.
"""

from enum import Enum
from typing import Any, Mapping

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from .errors import InvalidParameters


class PricingModel(str, Enum):
    """Supported pricing strategies."""
    COMPETITIVE = "competitive"
    PENETRATION = "penetration"
    PREMIUM = "premium"
    DYNAMIC = "dynamic"


class ChannelType(str, Enum):
    """Promotion channel types."""
    SOCIAL = "social"
    SEARCH = "search"
    DISPLAY = "display"
    EMAIL = "email"
    INFLUENCER = "influencer"
    OFFLINE = "offline"


DIGITAL_CHANNELS = frozenset({ChannelType.SOCIAL, ChannelType.SEARCH, ChannelType.EMAIL})


class SandboxModel(BaseModel):
    """Base model shared by all parameter schemas."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore"
    )


class PricingStrategy(SandboxModel):
    """Pricing model and the market's sensitivity to it."""
    model: PricingModel = PricingModel.COMPETITIVE
    base_price: float = Field(gt=0)
    price_elasticity: float = Field(default=1.0, ge=0)
    competitor_price_response: float = 0.0


class PromotionChannel(SandboxModel):
    """A single marketing channel and its share of the marketing budget."""
    type: ChannelType
    budget_allocation_percent: float = Field(
        ge=0,
        le=100,
        validation_alias=AliasChoices(
            "budget_allocation_percent",
            "budgetAllocationPercent",
            "budgetAllocation"
        )
    )
    effectiveness: float = Field(ge=0, le=1)
    target_audience: list[str] = Field(default_factory=list)


class SeasonalityFactor(SandboxModel):
    """
    Seasonal multiplier for one calendar month, part of the JSON contract.

    Accepted and echoed back in results only; the engine applies its own
    seasonality curve (see simulation.dynamics) and does not read these.
    """
    month: int = Field(ge=1, le=12)
    factor: float = Field(default=1.0, ge=0)


class PromotionStrategy(SandboxModel):
    """Channel mix and promotion budget."""
    channels: list[PromotionChannel] = Field(default_factory=list)
    total_budget: float = Field(default=0.0, ge=0)
    seasonality: list[SeasonalityFactor] = Field(default_factory=list)  # not simulated

    def allocation_total(self) -> float:
        """Sum of channel allocation percentages."""
        return sum(c.budget_allocation_percent for c in self.channels)

    def normalized(self) -> "PromotionStrategy":
        """Return a copy whose channel allocations sum to 100."""
        total = self.allocation_total()
        if total <= 0:
            return self

        channels = [
            c.model_copy(update={
                "budget_allocation_percent": c.budget_allocation_percent * 100 / total
            })
            for c in self.channels
        ]
        return self.model_copy(update={"channels": channels})


class ProductFeature(SandboxModel):
    """A product feature on the roadmap."""
    id: str = ""
    name: str = ""
    cost: float = Field(default=0.0, ge=0)
    market_appeal: float = Field(default=0.5, ge=0, le=1)
    development_time: float = Field(default=0.0, ge=0)  # days


class ProductStrategy(SandboxModel):
    """Product quality and innovation cadence."""
    features: list[ProductFeature] = Field(default_factory=list)
    quality_level: float = Field(ge=1, le=10)
    innovation_rate: float = Field(default=0.0, ge=0)  # features per quarter


class Budget(SandboxModel):
    """Annual budget split."""
    total: float = Field(default=0.0, ge=0)
    marketing: float = Field(default=0.0, ge=0)
    product: float = Field(default=0.0, ge=0)
    operations: float = Field(default=0.0, ge=0)
    reserve: float = Field(default=0.0, ge=0)


class SimulationParameters(SandboxModel):
    """Complete input for one simulation run."""
    market_size: float = Field(gt=0)
    initial_market_share: float = Field(ge=0, le=100)
    competitor_count: int = Field(ge=1)
    simulation_duration: int = Field(ge=1)  # months

    pricing_strategy: PricingStrategy
    promotion_strategy: PromotionStrategy = Field(default_factory=PromotionStrategy)
    product_strategy: ProductStrategy
    budget: Budget = Field(default_factory=Budget)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "SimulationParameters":
        """
        Validate a raw mapping into parameters.

        Raises InvalidParameters with the individual field errors attached.
        """
        try:
            return cls.model_validate(payload)
        except ValidationError as exc:
            raise InvalidParameters(
                "Invalid simulation parameters",
                errors=exc.errors(include_url=False, include_context=False)
            ) from exc

    @classmethod
    def ensure(cls, value: Any) -> "SimulationParameters":
        """Accept either a parameters instance or a raw mapping."""
        if isinstance(value, cls):
            return value
        if isinstance(value, Mapping):
            return cls.from_payload(value)
        raise InvalidParameters(
            f"Expected SimulationParameters or mapping, got {type(value).__name__}"
        )

    def with_changes(self, changes: Mapping[str, Any]) -> "SimulationParameters":
        """
        Return new parameters with a nested partial override applied.

        Keys are snake_case field names; nested mappings are merged into
        the corresponding sub-model rather than replacing it wholesale.
        """
        merged = _deep_merge(self.model_dump(), changes)
        return type(self).from_payload(merged)


def _deep_merge(base: dict, changes: Mapping[str, Any]) -> dict:
    result = dict(base)
    for key, value in changes.items():
        if isinstance(value, Mapping) and isinstance(result.get(key), dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result
