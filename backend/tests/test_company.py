"""
Company ledger tests: quarterly close, clamping, diminishing returns, probabilities.
"""

import random

import pytest

from corporate_chaos.sim_engine.entities.company import (
    BASE_QUARTERLY_COST,
    DEFAULT_BUDGETS,
    Company,
)
from corporate_chaos.sim_engine.entities.department import BASE_EFFICIENCY
from corporate_chaos.sim_engine.entities.enums import Department, RiskAppetite


# ============================================================================
# Quarterly close
# ============================================================================

class TestQuarterlyFinancials:
    def test_empty_company_breaks_even(self, company, registry):
        """Base expenses only; revenue follows the (slightly decayed) market share."""
        company.process_quarterly_financials(registry, random.Random(1))

        assert company.quarterly_expenses == BASE_QUARTERLY_COST
        assert company.quarterly_revenue == pytest.approx(company.market_share * 10000)
        assert company.capital == pytest.approx(500000 + company.quarterly_revenue - BASE_QUARTERLY_COST)
        # 5 * 10000 = 50000 before decay; decay is at most 0.06 share points
        assert abs(company.capital - 500000) <= 600
        assert 4.94 <= company.market_share < 5.0

    def test_staff_add_cost_and_revenue(self, company, staffed_registry):
        company.process_quarterly_financials(staffed_registry, random.Random(1))

        assert company.quarterly_expenses == pytest.approx(BASE_QUARTERLY_COST + 6 * 5040.0 * 3)
        # productivity factor 1 + 288/100
        assert company.quarterly_revenue == pytest.approx(company.market_share * 10000 * 3.88)

    def test_reputation_scales_revenue(self, registry):
        good = Company(reputation=100)
        bad = Company(reputation=-100)
        good.process_quarterly_financials(registry, random.Random(3))
        bad.process_quarterly_financials(registry, random.Random(3))

        assert good.quarterly_revenue > bad.quarterly_revenue

    def test_net_profit(self, company):
        company.quarterly_revenue = 80000.0
        company.quarterly_expenses = 50000.0

        assert company.net_profit() == 30000.0


class TestBudgetEffects:
    def test_default_budgets_are_neutral(self, company, registry):
        company.apply_budget_allocations(registry)

        assert (company.reputation, company.morale, company.risk) == (0, 0, 0)
        assert company.market_share == 5.0
        assert all(stats.efficiency == BASE_EFFICIENCY for stats in registry)

    def test_heavy_marketing_and_research(self, company, registry):
        budgets = dict(DEFAULT_BUDGETS)
        budgets.update({Department.MARKETING: 25, Department.RESEARCH: 25, Department.IT: 10, Department.HR: 20,
                        Department.OPERATIONS: 10, Department.FINANCE: 10})
        company.set_budget_allocations(budgets)

        company.apply_budget_allocations(registry)

        assert company.reputation == 3
        assert company.market_share > 5.0
        assert company.morale == 3
        # ops <= 10 => +3, IT <= 10 => +5
        assert company.risk == 8
        assert registry[Department.HR].efficiency == BASE_EFFICIENCY + 5
        assert registry[Department.RESEARCH].efficiency == BASE_EFFICIENCY + 4

    def test_set_budget_requires_every_department(self, company):
        with pytest.raises(ValueError):
            company.set_budget_allocations({Department.MARKETING: 100})


# ============================================================================
# Invariants
# ============================================================================

class TestClamp:
    def test_clamp_values(self):
        company = Company(reputation=250, morale=-250, risk=101, market_share=130.0)
        company.clamp_values()

        assert company.reputation == 100
        assert company.morale == -100
        assert company.risk == 100
        assert company.market_share == 100.0

    def test_negative_share_floors_at_zero(self):
        company = Company(market_share=-4.0)
        company.clamp_values()

        assert company.market_share == 0.0

    def test_capital_is_not_clamped(self):
        company = Company(capital=-1e9)
        company.clamp_values()

        assert company.capital == -1e9

    def test_many_closes_stay_in_range(self, staffed_registry):
        rng = random.Random(2024)
        company = Company()
        for _ in range(200):
            company.reputation += rng.randrange(-60, 61)
            company.morale += rng.randrange(-60, 61)
            company.risk += rng.randrange(-60, 61)
            company.market_share += rng.uniform(-20, 20)
            company.process_quarterly_financials(staffed_registry, rng)

            assert -100 <= company.reputation <= 100
            assert -100 <= company.morale <= 100
            assert -100 <= company.risk <= 100
            assert 0 <= company.market_share <= 100


# ============================================================================
# Market share curves and probabilities
# ============================================================================

class TestMarketShareCurves:
    def test_gain_shrinks_as_share_grows(self):
        shares = [0, 10, 30, 49, 50, 55, 60, 65, 69, 90]
        gains = [Company(market_share=s).market_share_gain(2.0) for s in shares]

        assert gains == sorted(gains, reverse=True)
        assert gains[0] == pytest.approx(2.0)

    def test_competitive_pressure_tiers(self):
        assert Company(market_share=10).competitive_pressure() == 1.0
        assert Company(market_share=50).competitive_pressure() == 0.5
        assert Company(market_share=60).competitive_pressure() == 0.3
        assert Company(market_share=65).competitive_pressure() == 0.2

    def test_loss_grows_with_share(self):
        assert Company(market_share=0).market_share_loss(1.0) == pytest.approx(1.0)
        assert Company(market_share=100).market_share_loss(1.0) == pytest.approx(1.5)


class TestProbabilities:
    def test_catastrophe_chance_monotone_and_capped(self):
        chances = [Company(risk=r).catastrophic_event_chance() for r in range(-100, 101, 10)]

        assert chances == sorted(chances)
        assert min(chances) == pytest.approx(0.05)
        assert max(chances) == pytest.approx(0.25)

    def test_turnover_chance_falls_with_morale(self):
        chances = [Company(morale=m).employee_turnover_chance() for m in range(-100, 101, 10)]

        assert chances == sorted(chances, reverse=True)
        assert max(chances) == pytest.approx(0.30)
        assert min(chances) == pytest.approx(0.02)
        assert Company(morale=0).employee_turnover_chance() == pytest.approx(0.10)


class TestKnobsAndDescriptions:
    def test_multipliers(self):
        assert Company(risk_appetite=RiskAppetite.AGGRESSIVE).risk_multiplier() == 1.5
        assert Company().investment_multiplier() == 1.0
        assert Company().employee_multiplier() == 1.0

    def test_descriptions(self):
        assert Company(reputation=85).reputation_description() == "Excellent"
        assert Company(reputation=-95).reputation_description() == "Disastrous"
        assert Company(morale=0).morale_description() == "Neutral"
        assert Company(risk=-90).risk_description() == "Ultra Safe"

    def test_round_trip(self):
        company = Company(capital=123.0, reputation=7, risk_appetite=RiskAppetite.CONSERVATIVE)
        company.budgets[Department.IT] = 25.0

        assert Company.from_dict(company.to_dict()) == company
