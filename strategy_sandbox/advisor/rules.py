"""Shared threshold evaluation for advisor rule tables."""

from typing import Any

CONDITIONS = ("gt", "lt", "gte", "lte")


def check_condition(value: float, condition: str, threshold: float) -> bool:
    """Check if a threshold condition is met."""
    if condition == "gt":
        return value > threshold
    elif condition == "lt":
        return value < threshold
    elif condition == "gte":
        return value >= threshold
    elif condition == "lte":
        return value <= threshold
    raise ValueError(f"Unsupported condition: {condition}")


def metric_value(analysis: Any, path: str) -> float:
    """Resolve a dotted attribute path such as 'current_performance.profit_margin'."""
    value = analysis
    for part in path.split("."):
        value = getattr(value, part)
    return value
