"""
Unit Tests for the Recommendation Engine
=========================================
"""

import pytest

from strategy_sandbox.advisor import (
    Priority,
    RecommendationEngine,
    RecommendationType
)
from strategy_sandbox.config import AdvisorConfig


@pytest.fixture
def engine():
    return RecommendationEngine()


@pytest.fixture
def struggling_analysis(make_analysis):
    """Every recommendation rule fires."""
    return make_analysis(
        market_share_trend=-1.0,
        profit_margin=0.1,
        customer_satisfaction=60.0,
        competitive_position=0.2
    )


class TestRuleFiring:

    def test_healthy_business_gets_no_recommendations(self, engine, make_analysis):
        assert engine.recommend(make_analysis()) == []

    def test_share_decline(self, engine, make_analysis, sample_parameters):
        recs = engine.recommend(make_analysis(market_share_trend=-0.5))

        assert [r.id for r in recs] == ["rec-market_share_recovery"]
        rec = recs[0]
        assert rec.type == RecommendationType.STRATEGIC
        assert rec.priority == Priority.HIGH
        expected = (
            sample_parameters.market_size * 0.01 * 2.5
            * sample_parameters.pricing_strategy.base_price * 12 * 0.7
        )
        assert rec.impact.revenue == pytest.approx(expected)
        assert rec.impact.market_share_delta == 2.5
        assert rec.impact.time_to_impact_days == 90
        # one channel (offline, 0.4) is below 0.5 effectiveness
        assert "1 underperforming channels" in rec.description

    def test_flat_share_does_not_fire(self, engine, make_analysis):
        assert engine.recommend(make_analysis(market_share_trend=0.0)) == []

    def test_low_margin(self, engine, make_analysis):
        recs = engine.recommend(make_analysis(profit_margin=0.1))

        assert [r.id for r in recs] == ["rec-profit_optimization"]
        assert recs[0].type == RecommendationType.PRICING
        assert recs[0].impact.revenue == pytest.approx(1_000_000 * 0.05)
        assert recs[0].impact.confidence == 0.85
        assert "10.0%" in recs[0].description

    def test_low_satisfaction(self, engine, make_analysis, sample_parameters):
        recs = engine.recommend(make_analysis(customer_satisfaction=65.0))

        assert [r.id for r in recs] == ["rec-retention_plan"]
        rec = recs[0]
        assert rec.priority == Priority.MEDIUM
        customer_base = 1_000_000 / sample_parameters.pricing_strategy.base_price / 12
        # first month LTV of the fixture timeline is 2000
        assert rec.impact.revenue == pytest.approx(customer_base * 0.02 * 2000)

    def test_weak_position(self, engine, make_analysis):
        recs = engine.recommend(make_analysis(competitive_position=0.25))

        assert [r.id for r in recs] == ["rec-competitive_differentiation"]
        assert recs[0].impact.revenue == pytest.approx(150_000)
        assert recs[0].impact.time_to_impact_days == 180


class TestRanking:

    def test_sorted_by_priority_then_revenue(self, engine, struggling_analysis):
        recs = engine.recommend(struggling_analysis)

        assert [r.id for r in recs] == [
            "rec-market_share_recovery",
            "rec-competitive_differentiation",
            "rec-profit_optimization",
            "rec-retention_plan",
        ]
        keys = [(r.priority.weight, r.impact.revenue) for r in recs]
        assert keys == sorted(keys, reverse=True)

    def test_truncated_to_configured_maximum(self, struggling_analysis):
        engine = RecommendationEngine(AdvisorConfig(max_recommendations=2))

        recs = engine.recommend(struggling_analysis)

        assert [r.id for r in recs] == [
            "rec-market_share_recovery",
            "rec-competitive_differentiation",
        ]

    def test_thresholds_come_from_config(self, make_analysis):
        engine = RecommendationEngine(AdvisorConfig(profit_margin_floor=0.5))

        recs = engine.recommend(make_analysis(profit_margin=0.3))

        assert [r.id for r in recs] == ["rec-profit_optimization"]


class TestRecommendationContent:

    def test_every_recommendation_has_checklist(self, engine, struggling_analysis):
        for rec in engine.recommend(struggling_analysis):
            assert len(rec.implementation) == 4
            assert rec.title
            assert 0 < rec.impact.confidence <= 1

    def test_to_dict(self, engine, struggling_analysis):
        data = engine.recommend(struggling_analysis)[0].to_dict()

        assert data["type"] == "strategic"
        assert data["priority"] == "high"
        assert data["impact"]["market_share_delta"] == 2.5
        assert isinstance(data["implementation"], list)
