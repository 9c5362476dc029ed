#!/usr/bin/env python3
"""
Strategy Sandbox - Main Demo

Runs a twelve-month market simulation for a sample strategy and prints:
1. The monthly timeline and final metrics
2. Ranked recommendations, risks, insights and strategic options
3. What-if scenarios (heuristic and re-simulated)
4. A Monte Carlo summary of the final metrics
"""

from strategy_sandbox.advisor import StrategyAdvisor
from strategy_sandbox.config import ScenarioMode, configure_logging, get_settings
from strategy_sandbox.core import SimulationParameters
from strategy_sandbox.simulation import MarketSimulator, MonteCarloRunner

SAMPLE_PARAMETERS = {
    "marketSize": 10_000_000,
    "initialMarketShare": 15,
    "competitorCount": 5,
    "simulationDuration": 12,
    "pricingStrategy": {
        "model": "competitive",
        "basePrice": 299,
        "priceElasticity": 1.2,
        "competitorPriceResponse": 0.5
    },
    "promotionStrategy": {
        "channels": [
            {"type": "search", "budgetAllocationPercent": 40, "effectiveness": 0.8,
             "targetAudience": ["smb"]},
            {"type": "social", "budgetAllocationPercent": 35, "effectiveness": 0.7,
             "targetAudience": ["consumers"]},
            {"type": "offline", "budgetAllocationPercent": 25, "effectiveness": 0.4,
             "targetAudience": ["enterprise"]}
        ],
        "totalBudget": 5_000_000
    },
    "productStrategy": {"qualityLevel": 7, "innovationRate": 2},
    "budget": {
        "total": 12_000_000,
        "marketing": 5_000_000,
        "product": 3_000_000,
        "operations": 3_000_000,
        "reserve": 1_000_000
    }
}


def run_simulation_demo(parameters: SimulationParameters, seed: int):
    """Run the simulation and print the timeline."""
    print("=" * 60)
    print("STRATEGY SANDBOX - SIMULATION DEMO")
    print("=" * 60)
    print()
    print(f"  - Market size: {parameters.market_size:,.0f}")
    print(f"  - Initial share: {parameters.initial_market_share:.1f}%")
    print(f"  - Competitors: {parameters.competitor_count}")
    print(f"  - Horizon: {parameters.simulation_duration} months")
    print(f"  - Seed: {seed}")
    print()

    simulator = MarketSimulator(parameters, seed=seed)
    results = simulator.run()

    print(f"{'Month':<7} {'Share %':<9} {'Customers':<11} {'Revenue':<15} {'Profit':<15}")
    print("-" * 60)
    for month in results.timeline:
        print(
            f"{month.month:<7} {month.market_share:<9.2f} {month.customer_base:<11,} "
            f"{month.revenue:<15,.0f} {month.profit:<15,.0f}"
        )
    print()

    final = results.final_metrics
    print("Final metrics:")
    print(f"  Total revenue:    {final.total_revenue:,.0f}")
    print(f"  Total profit:     {final.total_profit:,.0f}")
    print(f"  Final share:      {final.final_market_share:.2f}%")
    print(f"  Customer growth:  {final.customer_growth_percent:+.1f}%")
    print(f"  Brand value:      {final.brand_value:,.0f}")
    print()

    return results


def run_advisor_demo(parameters: SimulationParameters, results):
    """Print the advisor's report."""
    print("=" * 60)
    print("STRATEGY ADVISOR")
    print("=" * 60)
    print()

    report = StrategyAdvisor().analyze_simulation(parameters, results)

    print("Insights:")
    for insight in report.insights or ["(none)"]:
        print(f"  - {insight}")
    print()

    print("Recommendations:")
    for i, rec in enumerate(report.recommendations, 1):
        print(f"  {i}. [{rec.priority.value.upper()}] {rec.title}")
        print(f"     {rec.description}")
        print(f"     Revenue impact: {rec.impact.revenue:,.0f} "
              f"(confidence {rec.impact.confidence:.0%})")
    if not report.recommendations:
        print("  (none)")
    print()

    assessment = report.risk_assessment
    print(f"Overall risk: {assessment.overall_risk_level.value}")
    for risk in assessment.risks:
        print(f"  - {risk.type.value} ({risk.severity.value}): {risk.description}")
    print()

    print("Strategic options:")
    for option in report.strategic_options:
        print(f"  - {option.name}: {option.description}")
    print()


def run_scenario_demo(parameters: SimulationParameters, seed: int):
    """Compare heuristic and re-simulated scenario projections."""
    print("=" * 60)
    print("WHAT-IF SCENARIOS")
    print("=" * 60)
    print()

    settings = get_settings()
    heuristic = MarketSimulator(parameters, seed=seed).run().scenarios
    resim_config = settings.simulation.model_copy(
        update={"scenario_mode": ScenarioMode.RESIMULATED}
    )
    resimulated = MarketSimulator(parameters, config=resim_config, seed=seed).run().scenarios

    print(f"{'Scenario':<24} {'Heuristic Δshare':<18} {'Resimulated Δshare':<20}")
    print("-" * 60)
    for h, r in zip(heuristic, resimulated):
        print(
            f"{h.name:<24} {h.projected_results.market_share_change:<+18.2f} "
            f"{r.projected_results.market_share_change:<+20.2f}"
        )
    print()


def run_monte_carlo_demo(parameters: SimulationParameters, seed: int):
    """Summarize a Monte Carlo batch."""
    print("=" * 60)
    print("MONTE CARLO")
    print("=" * 60)
    print()

    batch = MonteCarloRunner(get_settings().simulation).run(parameters, base_seed=seed)
    share = batch.summary("final_market_share")
    revenue = batch.summary("total_revenue")

    print(f"Runs: {batch.runs}")
    print(f"Final share: mean {share.mean:.2f}% "
          f"(95% CI {share.ci.lower:.2f} - {share.ci.upper:.2f})")
    print(f"Total revenue: mean {revenue.mean:,.0f} "
          f"(min {revenue.min:,.0f}, max {revenue.max:,.0f})")
    print()


def main():
    """Main entry point."""
    settings = get_settings()
    configure_logging(settings.logging)

    seed = settings.simulation.default_seed if settings.simulation.default_seed is not None else 42
    parameters = SimulationParameters.from_payload(SAMPLE_PARAMETERS)

    results = run_simulation_demo(parameters, seed)
    run_advisor_demo(results.parameters, results)
    run_scenario_demo(parameters, seed)
    run_monte_carlo_demo(parameters, seed)

    print("=" * 60)
    print("DEMONSTRATION COMPLETE")
    print("=" * 60)


if __name__ == "__main__":
    main()
