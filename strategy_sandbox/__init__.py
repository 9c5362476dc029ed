"""
Strategy Sandbox

A discrete-time market simulation engine with a rule-based strategy advisor.
Models how marketing spend, pricing, product quality, seasonality and
competitor pressure move market share, revenue and customer base month by
month, then derives recommendations, risks and what-if scenarios.
"""

__version__ = "0.1.0"
