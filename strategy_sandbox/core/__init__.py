"""
Core domain models for the strategy sandbox.

Input parameters are validated once at entry; everything downstream
assumes well-formed values.
"""

from .errors import SandboxError, InvalidParameters
from .parameters import (
    PricingModel,
    ChannelType,
    PricingStrategy,
    PromotionChannel,
    PromotionStrategy,
    SeasonalityFactor,
    ProductFeature,
    ProductStrategy,
    Budget,
    SimulationParameters
)

__all__ = [
    "SandboxError",
    "InvalidParameters",
    "PricingModel",
    "ChannelType",
    "PricingStrategy",
    "PromotionChannel",
    "PromotionStrategy",
    "SeasonalityFactor",
    "ProductFeature",
    "ProductStrategy",
    "Budget",
    "SimulationParameters"
]
