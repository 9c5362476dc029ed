"""Reduces a finished timeline into FinalMetrics."""

from typing import Sequence

from .entities import FinalMetrics, TimelineData

BRAND_REVENUE_WEIGHT = 0.2
BRAND_SHARE_POINT_VALUE = 100_000


class FinalMetricsAggregator:
    """Summarizes a timeline into totals and end-of-horizon figures."""

    def aggregate(self, timeline: Sequence[TimelineData]) -> FinalMetrics:
        if not timeline:
            return FinalMetrics()

        total_revenue = sum(m.revenue for m in timeline)
        total_profit = sum(m.profit for m in timeline)
        final_share = timeline[-1].market_share

        initial_customers = timeline[0].customer_base
        final_customers = timeline[-1].customer_base
        customer_growth = (
            (final_customers - initial_customers) / max(1, initial_customers) * 100
        )

        # Heuristic proxy only
        brand_value = (
            total_revenue * BRAND_REVENUE_WEIGHT
            + final_share * BRAND_SHARE_POINT_VALUE
        )

        return FinalMetrics(
            total_revenue=total_revenue,
            total_profit=total_profit,
            final_market_share=final_share,
            customer_growth_percent=customer_growth,
            brand_value=brand_value
        )
