"""
Unit Tests for the Simulation Engine
=====================================
Monthly step arithmetic, timeline invariants across a parameter grid,
seeded reproducibility and the end-to-end reference run.
"""

import itertools
import math
import random

import pytest
from structlog.testing import capture_logs

from strategy_sandbox.config import SimulationConfig
from strategy_sandbox.simulation import (
    MarketDynamicsModel,
    MarketSimulator,
    MonthlySimulationStep,
    TimelineBuilder
)


def _step(parameters, rng):
    dynamics = MarketDynamicsModel().derive(parameters)
    return MonthlySimulationStep(parameters, dynamics, rng)


class TestMonthlyStep:
    """Hand-checked arithmetic with midpoint draws."""

    def test_share_change(self, simple_parameters, midpoint_rng):
        # (marketing 1.0 + price 0 + quality 0.5 - competitor 1.0) * 1.1
        record = _step(simple_parameters, midpoint_rng)(1, 10.0, 10_000)

        assert record.share_change == pytest.approx(0.55)
        assert record.market_share == pytest.approx(10.55)

    def test_customer_flow(self, simple_parameters, midpoint_rng):
        record = _step(simple_parameters, midpoint_rng)(1, 10.0, 10_000)

        assert record.kpis.churn_rate == pytest.approx(0.035)
        assert record.new_customers == math.floor(1_000_000 * record.share_change * 0.001)
        assert record.churned_customers == math.floor(10_000 * record.kpis.churn_rate)
        assert record.customer_base == (
            10_000 + record.new_customers - record.churned_customers
        )

    def test_financials(self, simple_parameters, midpoint_rng):
        record = _step(simple_parameters, midpoint_rng)(1, 10.0, 10_000)

        assert record.revenue == pytest.approx(record.customer_base * 100 * 1.1)
        assert record.costs == pytest.approx(100_000)
        assert record.profit == pytest.approx(record.revenue - record.costs)

    def test_kpis(self, simple_parameters, midpoint_rng):
        record = _step(simple_parameters, midpoint_rng)(1, 10.0, 10_000)
        kpis = record.kpis

        assert kpis.cac == pytest.approx(100_000 * 0.7 / record.new_customers)
        assert kpis.ltv == pytest.approx(
            record.revenue / record.customer_base * 12 / kpis.churn_rate
        )
        assert kpis.roi == pytest.approx((record.revenue - 100_000) / 100_000)
        assert kpis.nps == 55
        assert kpis.growth_rate == pytest.approx(
            record.new_customers / record.customer_base * 100
        )

    @pytest.mark.parametrize("model,expected_price_impact", [
        ("penetration", 2.0),
        ("competitive", 0.0),
        ("premium", -3.0),
        ("dynamic", -0.5),  # midpoint multiplier 1.05
    ])
    def test_price_impact_by_model(
        self, simple_parameters, midpoint_rng, model, expected_price_impact
    ):
        baseline = _step(simple_parameters, midpoint_rng)(1, 10.0, 10_000)
        priced = simple_parameters.with_changes({"pricing_strategy": {"model": model}})
        record = _step(priced, midpoint_rng)(1, 10.0, 10_000)

        assert record.share_change - baseline.share_change == pytest.approx(
            expected_price_impact * 1.1
        )

    def test_marketing_impact_capped(self, simple_parameters, midpoint_rng):
        rich = simple_parameters.with_changes({
            "budget": {"marketing": 10_000_000_000},
            "promotion_strategy": {"channels": [
                {"type": "search", "budget_allocation_percent": 100, "effectiveness": 1.0}
            ]}
        })
        record = _step(rich, midpoint_rng)(1, 10.0, 10_000)

        # (cap 5.0 + quality 0.5 - competitor 1.0) * 1.1
        assert record.share_change == pytest.approx(4.95)

    def test_competitor_shares_split_remaining_share(self, simple_parameters, midpoint_rng):
        record = _step(simple_parameters, midpoint_rng)(1, 10.0, 10_000)

        assert list(record.competitor_shares) == ["Competitor 1", "Competitor 2"]
        for share in record.competitor_shares.values():
            assert share == pytest.approx((100 - record.market_share) / 2)

    def test_zero_guards(self, simple_parameters, midpoint_rng):
        idle = simple_parameters.with_changes({
            "initial_market_share": 0,
            "competitor_count": 10,
            "budget": {"marketing": 0, "product": 0, "operations": 0},
            "product_strategy": {"quality_level": 1}
        })
        record = _step(idle, midpoint_rng)(1, 0.0, 0)

        assert record.market_share == 0.0
        assert record.customer_base == 0
        assert record.costs == 0
        assert record.kpis.cac == 0
        assert record.kpis.ltv == 0
        assert record.kpis.roi == 0
        assert record.kpis.growth_rate == 0


class TestTimelineBuilder:

    def test_initial_customer_base(self, sample_parameters):
        dynamics = MarketDynamicsModel().derive(sample_parameters)
        builder = TimelineBuilder(sample_parameters, dynamics, random.Random(1))

        assert builder.initial_customer_base() == 150_000

    def test_months_are_ordered_and_threaded(self, sample_parameters):
        dynamics = MarketDynamicsModel().derive(sample_parameters)
        timeline = TimelineBuilder(sample_parameters, dynamics, random.Random(3)).build()

        assert [m.month for m in timeline] == list(range(1, 13))
        for previous, current in zip(timeline, timeline[1:]):
            expected = min(100.0, max(0.0, previous.market_share + current.share_change))
            assert current.market_share == pytest.approx(expected)

    def test_iteration_can_stop_early(self, sample_parameters):
        dynamics = MarketDynamicsModel().derive(sample_parameters)
        months = TimelineBuilder(sample_parameters, dynamics, random.Random(3)).iter_months()

        partial = list(itertools.islice(months, 4))

        assert [m.month for m in partial] == [1, 2, 3, 4]


PARAMETER_GRID = list(itertools.product(
    ["competitive", "penetration", "premium", "dynamic"],
    [1, 10],           # quality level
    [1, 8],            # competitor count
    [0, 50_000_000],   # marketing budget
    [0, 99.5],         # initial market share
))


class TestTimelineInvariants:
    """Properties that hold for every valid parameter combination."""

    @pytest.mark.parametrize("duration", [1, 5, 12, 36])
    def test_timeline_length_matches_duration(self, make_parameters, duration):
        params = make_parameters(simulation_duration=duration)

        results = MarketSimulator(params, seed=7).run()

        assert len(results.timeline) == duration

    @pytest.mark.parametrize("model,quality,competitors,marketing,share", PARAMETER_GRID)
    def test_share_and_customers_stay_in_bounds(
        self, make_parameters, model, quality, competitors, marketing, share
    ):
        params = make_parameters(
            initial_market_share=share,
            competitor_count=competitors,
            simulation_duration=24,
            pricing_strategy={"model": model, "base_price": 2_000},
            product_strategy={"quality_level": quality},
            budget={"marketing": marketing}
        )

        for seed in range(3):
            timeline = MarketSimulator(params, seed=seed).simulate_timeline()
            for month in timeline:
                assert 0.0 <= month.market_share <= 100.0
                assert month.customer_base >= 0

    @pytest.mark.parametrize("seed", [0, 1, 42, 2024])
    def test_competitor_shares_within_jitter_bound(self, make_parameters, seed):
        params = make_parameters(pricing_strategy={"model": "dynamic"})

        timeline = MarketSimulator(params, seed=seed).simulate_timeline()

        for month in timeline:
            remaining = 100 - month.market_share
            even = remaining / params.competitor_count
            for share in month.competitor_shares.values():
                assert 0.8 * even - 1e-9 <= share <= 1.2 * even + 1e-9
            total = sum(month.competitor_shares.values())
            assert 0.8 * remaining - 1e-9 <= total <= 1.2 * remaining + 1e-9

    def test_records_cannot_be_edited_after_the_fact(self, sample_parameters):
        timeline = MarketSimulator(sample_parameters, seed=4).simulate_timeline()

        with pytest.raises(TypeError):
            timeline[0].competitor_shares["Competitor 1"] = 0.0

        assert isinstance(timeline[0].to_dict()["competitor_shares"], dict)

    def test_final_share_matches_last_month(self, sample_parameters):
        results = MarketSimulator(sample_parameters, seed=11).run()

        assert results.final_metrics.final_market_share == results.timeline[-1].market_share


class TestDeterminism:

    def test_same_seed_reproduces_timeline(self, make_parameters):
        params = make_parameters(pricing_strategy={"model": "dynamic"})

        first = MarketSimulator(params, seed=99).simulate_timeline()
        second = MarketSimulator(params, seed=99).simulate_timeline()

        assert first == second

    def test_repeated_runs_on_one_simulator_reproduce(self, sample_parameters):
        simulator = MarketSimulator(sample_parameters, seed=5)

        assert simulator.run().timeline == simulator.run().timeline

    def test_default_seed_from_config(self, sample_parameters):
        config = SimulationConfig(default_seed=8)

        first = MarketSimulator(sample_parameters, config=config).simulate_timeline()
        second = MarketSimulator(sample_parameters, seed=8).simulate_timeline()

        assert first == second

    def test_different_seeds_diverge(self, sample_parameters):
        first = MarketSimulator(sample_parameters, seed=1).simulate_timeline()
        second = MarketSimulator(sample_parameters, seed=2).simulate_timeline()

        assert first != second

    def test_injected_generator_is_used(self, sample_parameters):
        first = MarketSimulator(
            sample_parameters, seed=17, rng=random.Random(17)
        ).simulate_timeline()
        second = MarketSimulator(sample_parameters, seed=17).simulate_timeline()

        assert first == second

    def test_injected_generator_without_seed_derives_one(self, sample_parameters):
        first = MarketSimulator(sample_parameters, rng=random.Random(5))
        second = MarketSimulator(sample_parameters, rng=random.Random(5))

        assert first.seed is not None
        assert first.seed == second.seed
        assert first.simulate_timeline() == second.simulate_timeline()


class TestChannelNormalization:

    def test_allocations_rescaled_with_warning(self, make_parameters):
        params = make_parameters(promotion_strategy={"channels": [
            {"type": "search", "budget_allocation_percent": 30, "effectiveness": 0.8},
            {"type": "social", "budget_allocation_percent": 30, "effectiveness": 0.6},
        ]})

        with capture_logs() as logs:
            simulator = MarketSimulator(params, seed=1)

        assert simulator.parameters.promotion_strategy.allocation_total() == pytest.approx(100)
        events = [entry["event"] for entry in logs]
        assert "channel_allocations_normalized" in events

    def test_valid_allocations_untouched(self, sample_parameters):
        with capture_logs() as logs:
            simulator = MarketSimulator(sample_parameters, seed=1)

        assert simulator.parameters is sample_parameters
        assert not [e for e in logs if e["event"] == "channel_allocations_normalized"]

    def test_normalization_can_be_disabled(self, make_parameters):
        params = make_parameters(promotion_strategy={"channels": [
            {"type": "search", "budget_allocation_percent": 30, "effectiveness": 0.8},
        ]})
        config = SimulationConfig(normalize_channel_allocations=False)

        simulator = MarketSimulator(params, config=config, seed=1)

        assert simulator.parameters.promotion_strategy.allocation_total() == pytest.approx(30)


class TestEndToEnd:
    """Reference strategy with seed 42."""

    def test_reference_run(self, sample_parameters):
        results = MarketSimulator(sample_parameters, seed=42).run()

        assert len(results.timeline) == 12
        assert 15 <= results.timeline[0].market_share <= 20
        assert results.final_metrics.total_revenue > 0
        assert results.seed == 42
        assert len(results.scenarios) == 3

    def test_payload_accepted_directly(self, sample_payload):
        results = MarketSimulator(sample_payload, seed=42).run()

        assert len(results.timeline) == 12

    def test_run_without_advice(self, sample_parameters):
        results = MarketSimulator(sample_parameters, seed=42).run(include_advice=False)

        assert results.recommendations == ()
        assert results.scenarios == ()

    def test_results_serialize(self, sample_parameters):
        data = MarketSimulator(sample_parameters, seed=42).run().to_dict()

        assert data["parameters"]["marketSize"] == 10_000_000
        assert len(data["timeline"]) == 12
        assert data["timeline"][0]["kpis"]["nps"] == 65
        assert len(data["scenarios"]) == 3
