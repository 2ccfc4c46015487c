# backend/corporate_chaos/sim_engine/economy/decision_system.py
"""
Decision Processor

Player-triggered actions outside the quarterly tick:
- executive decisions (cost cutting, bonuses, loans, marketing, retreats, R&D, crisis consultants)
- budget reallocation (validated, then a one-time nudge on top of the recurring quarterly effects)
- quarterly initiatives (department pushes driven by the company's control knobs)

Every call returns a DecisionResult. A rejected action leaves company and
registry untouched.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Optional
import random

from corporate_chaos.sim_engine.entities.company import Company
from corporate_chaos.sim_engine.entities.department import DepartmentRegistry
from corporate_chaos.sim_engine.entities.enums import (
    Department,
    ExecutiveDecision,
    MarketStrategy,
    QuarterlyInitiative,
)


BUDGET_TOLERANCE = 0.1
EMERGENCY_LOAN_AMOUNT = 200000.0

# Minimum capital on hand; None means always allowed
REQUIRED_CAPITAL: Dict[ExecutiveDecision, Optional[float]] = {
    ExecutiveDecision.COST_CUTTING_LIGHT: 10000.0,
    ExecutiveDecision.COST_CUTTING_MEDIUM: 25000.0,
    ExecutiveDecision.COST_CUTTING_HEAVY: 50000.0,
    ExecutiveDecision.BONUS_SMALL: 50000.0,
    ExecutiveDecision.BONUS_LARGE: 150000.0,
    ExecutiveDecision.EMERGENCY_LOAN: None,
    ExecutiveDecision.MARKETING_LOCAL: 75000.0,
    ExecutiveDecision.MARKETING_NATIONAL: 200000.0,
    ExecutiveDecision.RETREAT_WEEKEND: 30000.0,
    ExecutiveDecision.RETREAT_WEEK: 80000.0,
    ExecutiveDecision.RD_INVESTMENT: 120000.0,
    ExecutiveDecision.CRISIS_MANAGEMENT: 100000.0,
}


@dataclass(frozen=True)
class DecisionResult:
    accepted: bool
    message: str


@dataclass(frozen=True)
class CostCutTier:
    label: str
    savings_pct: float
    morale_hit: int
    risk_increase: int


@dataclass(frozen=True)
class StaffPerk:
    label: str
    cost: float
    company_morale: int
    company_risk: int
    employee_morale: int
    employee_productivity: int


COST_CUT_TIERS = {
    ExecutiveDecision.COST_CUTTING_LIGHT: CostCutTier("Light", 0.05, 5, 3),
    ExecutiveDecision.COST_CUTTING_MEDIUM: CostCutTier("Medium", 0.15, 12, 8),
    ExecutiveDecision.COST_CUTTING_HEAVY: CostCutTier("Heavy", 0.25, 20, 15),
}

STAFF_PERKS = {
    ExecutiveDecision.BONUS_SMALL: StaffPerk("Small employee bonuses", 50000.0, 15, 0, 10, 3),
    ExecutiveDecision.BONUS_LARGE: StaffPerk("Large employee bonuses", 150000.0, 25, 0, 20, 8),
    ExecutiveDecision.RETREAT_WEEKEND: StaffPerk("Weekend company retreat", 30000.0, 12, -5, 15, 5),
    ExecutiveDecision.RETREAT_WEEK: StaffPerk("Week-long company retreat", 80000.0, 20, -10, 25, 10),
}


def rejected(message: str) -> DecisionResult:
    return DecisionResult(accepted=False, message=message)


def accepted(message: str) -> DecisionResult:
    return DecisionResult(accepted=True, message=message)


class DecisionSystem:
    def __init__(self, rng: random.Random):
        self.rng = rng
        self._handlers: Dict[ExecutiveDecision, Callable[[ExecutiveDecision, Company, DepartmentRegistry], str]] = {
            ExecutiveDecision.COST_CUTTING_LIGHT: self._cost_cutting,
            ExecutiveDecision.COST_CUTTING_MEDIUM: self._cost_cutting,
            ExecutiveDecision.COST_CUTTING_HEAVY: self._cost_cutting,
            ExecutiveDecision.BONUS_SMALL: self._staff_perk,
            ExecutiveDecision.BONUS_LARGE: self._staff_perk,
            ExecutiveDecision.RETREAT_WEEKEND: self._staff_perk,
            ExecutiveDecision.RETREAT_WEEK: self._staff_perk,
            ExecutiveDecision.EMERGENCY_LOAN: self._emergency_loan,
            ExecutiveDecision.MARKETING_LOCAL: self._marketing_campaign,
            ExecutiveDecision.MARKETING_NATIONAL: self._marketing_campaign,
            ExecutiveDecision.RD_INVESTMENT: self._rd_investment,
            ExecutiveDecision.CRISIS_MANAGEMENT: self._crisis_management,
        }

    # =================================================================
    # Executive decisions
    # =================================================================

    def execute(self, decision: ExecutiveDecision, company: Company, registry: DepartmentRegistry) -> DecisionResult:
        required = REQUIRED_CAPITAL[decision]
        if required is not None and company.capital < required:
            return rejected(
                f"Insufficient funds: {decision.value} needs ${required:,.0f}, "
                f"available ${company.capital:,.0f}."
            )

        message = self._handlers[decision](decision, company, registry)
        company.clamp_values()
        return accepted(message)

    def _cost_cutting(self, decision: ExecutiveDecision, company: Company, registry: DepartmentRegistry) -> str:
        tier = COST_CUT_TIERS[decision]
        savings = company.quarterly_expenses * tier.savings_pct
        company.capital += savings
        company.morale -= tier.morale_hit
        company.risk += tier.risk_increase

        if decision == ExecutiveDecision.COST_CUTTING_HEAVY and self.rng.random() < 0.3:
            return (
                f"Heavy cost cutting implemented! Saved ${savings:,.0f}, but caused major employee "
                f"dissatisfaction. Some employees may quit!"
            )
        return (
            f"{tier.label} cost cutting implemented! Saved ${savings:,.0f}, but morale decreased by "
            f"{tier.morale_hit} and risk increased by {tier.risk_increase}."
        )

    def _staff_perk(self, decision: ExecutiveDecision, company: Company, registry: DepartmentRegistry) -> str:
        perk = STAFF_PERKS[decision]
        company.capital -= perk.cost
        company.morale += perk.company_morale
        company.risk += perk.company_risk

        staff = registry.all_employees()
        for employee in staff:
            employee.adjust_morale(perk.employee_morale)
            employee.adjust_productivity(perk.employee_productivity)

        return (
            f"{perk.label} paid out (${perk.cost:,.0f}). Company morale +{perk.company_morale}, "
            f"{len(staff)} employees got morale +{perk.employee_morale} and productivity +{perk.employee_productivity}."
        )

    def _emergency_loan(self, decision: ExecutiveDecision, company: Company, registry: DepartmentRegistry) -> str:
        company.capital += EMERGENCY_LOAN_AMOUNT
        company.risk += 20
        company.reputation -= 10
        return (
            f"Emergency loan of ${EMERGENCY_LOAN_AMOUNT:,.0f} secured! "
            f"Risk increased by 20, reputation decreased by 10."
        )

    def _marketing_campaign(self, decision: ExecutiveDecision, company: Company, registry: DepartmentRegistry) -> str:
        if decision == ExecutiveDecision.MARKETING_LOCAL:
            label, cost, risk = "Local", 75000.0, 5
            reputation_gain = self.rng.randrange(8, 15)
            base_gain = self.rng.random() * 1.0 + 0.5
        else:
            label, cost, risk = "National", 200000.0, 12
            reputation_gain = self.rng.randrange(15, 25)
            base_gain = self.rng.random() * 2.0 + 1.0

        share_gain = company.market_share_gain(base_gain)
        company.capital -= cost
        company.reputation += reputation_gain
        company.market_share += share_gain
        company.risk += risk

        return (
            f"{label} marketing campaign launched! Cost ${cost:,.0f}, reputation +{reputation_gain}, "
            f"market share +{share_gain:.2f}%, risk +{risk}."
        )

    def _rd_investment(self, decision: ExecutiveDecision, company: Company, registry: DepartmentRegistry) -> str:
        cost = 120000.0
        share_gain = company.market_share_gain(self.rng.random() * 1.5 + 1.0)
        reputation_gain = self.rng.randrange(10, 18)

        company.capital -= cost
        company.market_share += share_gain
        company.reputation += reputation_gain
        company.risk += 8

        return (
            f"R&D investment of ${cost:,.0f} made! Market share +{share_gain:.2f}%, "
            f"reputation +{reputation_gain}, risk +8."
        )

    def _crisis_management(self, decision: ExecutiveDecision, company: Company, registry: DepartmentRegistry) -> str:
        cost = 100000.0
        reputation_gain = self.rng.randrange(5, 12)

        company.capital -= cost
        company.risk -= 15
        company.reputation += reputation_gain

        return f"Crisis management consultants hired for ${cost:,.0f}! Risk -15, reputation +{reputation_gain}."

    # =================================================================
    # Budget reallocation
    # =================================================================

    def reallocate_budget(self, company: Company, registry: DepartmentRegistry,
                          allocations: Dict[Department, float]) -> DecisionResult:
        missing = [d.value for d in Department if d not in allocations]
        if missing:
            return rejected(f"Budget allocation is missing departments: {', '.join(missing)}.")

        total = sum(float(allocations[d]) for d in Department)
        if abs(total - 100.0) > BUDGET_TOLERANCE:
            return rejected(f"Budget allocation must total exactly 100% (got {total:.1f}%).")

        company.set_budget_allocations(allocations)
        self._apply_budget_nudge(company, registry)
        company.clamp_values()

        return accepted("Department budget allocation updated! New focus areas will affect department performance next quarter.")

    def _apply_budget_nudge(self, company: Company, registry: DepartmentRegistry) -> None:
        b = company.budgets

        if b[Department.MARKETING] >= 25:
            company.reputation += 3
            company.market_share += 0.5
        elif b[Department.MARKETING] <= 5:
            company.reputation -= 2

        if b[Department.OPERATIONS] >= 25:
            company.risk -= 3
            registry.boost_efficiency(Department.OPERATIONS, 5)
        elif b[Department.OPERATIONS] <= 10:
            company.risk += 5

        if b[Department.FINANCE] >= 20:
            company.quarterly_expenses *= 0.95

        if b[Department.HR] >= 20:
            company.morale += 5
            registry.boost_efficiency(Department.HR, 10)
        elif b[Department.HR] <= 5:
            company.morale -= 3

        if b[Department.IT] >= 25:
            company.risk -= 5
            for employee in registry.assigned_employees():
                employee.adjust_productivity(2)
        elif b[Department.IT] <= 10:
            company.risk += 8

        if b[Department.RESEARCH] >= 25:
            company.market_share += 1
            company.reputation += 2

    # =================================================================
    # Quarterly initiatives
    # =================================================================

    def run_initiative(self, kind: QuarterlyInitiative, company: Company,
                       registry: DepartmentRegistry) -> DecisionResult:
        risk_mult = company.risk_multiplier()
        invest_mult = company.investment_multiplier()

        if kind == QuarterlyInitiative.MARKETING:
            result = self._marketing_initiative(company, registry, risk_mult, invest_mult)
        elif kind == QuarterlyInitiative.OPERATIONS:
            result = self._operations_initiative(company, registry, risk_mult, invest_mult)
        elif kind == QuarterlyInitiative.FINANCE:
            result = self._finance_initiative(company, registry, risk_mult, invest_mult)
        else:
            raise ValueError(f"Unknown initiative: {kind!r}")

        if result.accepted:
            company.clamp_values()
        return result

    def _marketing_initiative(self, company: Company, registry: DepartmentRegistry,
                              risk_mult: float, invest_mult: float) -> DecisionResult:
        cost = 50000.0 * invest_mult
        share_gain = 2.0 * invest_mult * risk_mult
        risk_increase = int(3 * risk_mult)

        effectiveness = registry[Department.MARKETING].total_productivity() / 100.0
        share_gain *= 1 + effectiveness
        cost *= 0.8 + effectiveness * 0.2

        if company.market_strategy == MarketStrategy.INNOVATION:
            share_gain *= 1.3
            risk_increase += 2
        elif company.market_strategy == MarketStrategy.COST:
            share_gain *= 0.8
            cost *= 0.7

        if company.capital < cost:
            return rejected(f"Insufficient funds for the quarterly marketing campaign (${cost:,.0f}).")

        company.capital -= cost
        company.market_share += share_gain
        company.risk += risk_increase
        if self.rng.random() < 0.3:
            company.reputation += self.rng.randrange(1, 4)

        return accepted(
            f"Quarterly marketing campaign executed! Cost: ${cost:,.0f}, "
            f"Market Share +{share_gain:.1f}%, Risk +{risk_increase}"
        )

    def _operations_initiative(self, company: Company, registry: DepartmentRegistry,
                               risk_mult: float, invest_mult: float) -> DecisionResult:
        cost = 30000.0 * invest_mult
        morale_gain = int(10 * invest_mult)
        risk_reduction = int(5 * risk_mult)

        effectiveness = registry[Department.OPERATIONS].total_productivity() / 100.0
        morale_gain = int(morale_gain * (1 + effectiveness))
        risk_reduction = int(risk_reduction * (1 + effectiveness))

        if company.capital < cost:
            return rejected(f"Insufficient funds for the operations push (${cost:,.0f}).")

        company.capital -= cost
        company.morale += morale_gain
        company.risk = max(0, company.risk - risk_reduction)

        return accepted(
            f"Operations optimized for the quarter! Cost: ${cost:,.0f}, "
            f"Morale +{morale_gain}, Risk -{risk_reduction}"
        )

    def _finance_initiative(self, company: Company, registry: DepartmentRegistry,
                            risk_mult: float, invest_mult: float) -> DecisionResult:
        gain = 25000.0 * invest_mult
        morale_loss = int(8 * risk_mult)
        reputation_loss = int(5 * risk_mult)

        effectiveness = registry[Department.FINANCE].total_productivity() / 100.0
        gain *= 1 + effectiveness
        morale_loss = int(morale_loss * (1 - effectiveness * 0.3))

        company.capital += gain
        company.morale -= morale_loss
        company.reputation -= reputation_loss

        return accepted(
            f"Financial optimization completed! Gained: ${gain:,.0f}, "
            f"Morale -{morale_loss}, Reputation -{reputation_loss}"
        )
