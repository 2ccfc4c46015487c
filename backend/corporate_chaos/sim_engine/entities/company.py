# backend/corporate_chaos/sim_engine/entities/company.py
"""
Company Ledger

Company-wide financial and reputational state plus the quarterly close.

Ranges:
- reputation / morale / risk : ints in [-100, 100]
- market_share                : float in [0, 100]
- capital                     : unbounded (bankruptcy is an end condition, not a clamp)

Clamp is applied after each batch of mutations (quarterly close, chaos pass,
decisions), not after every individual delta.
"""

from __future__ import annotations

from dataclasses import dataclass, field, asdict
from typing import Any, Dict
import random

from corporate_chaos.sim_engine.entities.department import DepartmentRegistry
from corporate_chaos.sim_engine.entities.enums import (
    CrisisResponse,
    Department,
    EmployeeManagement,
    InvestmentLevel,
    MarketStrategy,
    RiskAppetite,
    WorkforceFocus,
)


# ============================================================
# Constants
# ============================================================

STARTING_CAPITAL = 500000.0
STARTING_MARKET_SHARE = 5.0

BASE_QUARTERLY_COST = 50000.0
REVENUE_PER_SHARE_POINT = 10000.0

SCALE_MIN = -100
SCALE_MAX = 100

DEFAULT_BUDGETS: Dict[Department, float] = {
    Department.MARKETING: 15.0,
    Department.OPERATIONS: 20.0,
    Department.FINANCE: 15.0,
    Department.HR: 10.0,
    Department.IT: 20.0,
    Department.RESEARCH: 20.0,
}

RISK_MULTIPLIERS = {
    RiskAppetite.CONSERVATIVE: 0.7,
    RiskAppetite.BALANCED: 1.0,
    RiskAppetite.AGGRESSIVE: 1.5,
}

INVESTMENT_MULTIPLIERS = {
    InvestmentLevel.LOW: 0.5,
    InvestmentLevel.MEDIUM: 1.0,
    InvestmentLevel.HIGH: 2.0,
}

EMPLOYEE_MULTIPLIERS = {
    EmployeeManagement.LOW: 0.8,
    EmployeeManagement.STANDARD: 1.0,
    EmployeeManagement.HIGH: 1.3,
}

# (threshold, label), checked top-down
_REPUTATION_BANDS = [
    (80, "Excellent"), (60, "Very Good"), (40, "Good"), (20, "Fair"), (0, "Neutral"),
    (-20, "Poor"), (-40, "Bad"), (-60, "Very Bad"), (-80, "Terrible"),
]
_MORALE_BANDS = [
    (80, "Excellent"), (60, "High"), (40, "Good"), (20, "Fair"), (0, "Neutral"),
    (-20, "Low"), (-40, "Poor"), (-60, "Very Low"), (-80, "Critical"),
]
_RISK_BANDS = [
    (80, "Extreme"), (60, "Very High"), (40, "High"), (20, "Elevated"), (0, "Moderate"),
    (-20, "Low"), (-40, "Very Low"), (-60, "Minimal"), (-80, "Negligible"),
]


def clamp(x: float, lo: float, hi: float) -> float:
    return lo if x < lo else hi if x > hi else x


def _band(value: float, bands, floor_label: str) -> str:
    for threshold, label in bands:
        if value >= threshold:
            return label
    return floor_label


# ============================================================
# Company
# ============================================================

@dataclass
class Company:
    capital: float = STARTING_CAPITAL
    reputation: int = 0
    morale: int = 0
    risk: int = 0
    market_share: float = STARTING_MARKET_SHARE
    employee_count: int = 0
    quarterly_revenue: float = 0.0
    quarterly_expenses: float = 0.0

    # control knobs
    risk_appetite: RiskAppetite = RiskAppetite.BALANCED
    investment_level: InvestmentLevel = InvestmentLevel.MEDIUM
    workforce_focus: WorkforceFocus = WorkforceFocus.EFFICIENCY
    market_strategy: MarketStrategy = MarketStrategy.QUALITY
    crisis_response: CrisisResponse = CrisisResponse.CONTROL
    employee_management: EmployeeManagement = EmployeeManagement.STANDARD

    # department budgets (percent of spend)
    budgets: Dict[Department, float] = field(default_factory=lambda: dict(DEFAULT_BUDGETS))

    # hiring refresh tracking
    current_quarter_refreshes: int = 0
    last_refresh_quarter: int = 0

    # ------------------------------------------------------------------
    # Invariants
    # ------------------------------------------------------------------

    def clamp_values(self) -> None:
        self.reputation = int(clamp(self.reputation, SCALE_MIN, SCALE_MAX))
        self.morale = int(clamp(self.morale, SCALE_MIN, SCALE_MAX))
        self.risk = int(clamp(self.risk, SCALE_MIN, SCALE_MAX))
        self.market_share = clamp(self.market_share, 0.0, 100.0)

    # ------------------------------------------------------------------
    # Market share curves
    # ------------------------------------------------------------------

    def competitive_pressure(self) -> float:
        if self.market_share >= 65:
            return 0.2
        if self.market_share >= 60:
            return 0.3
        if self.market_share >= 50:
            return 0.5
        return 1.0

    def market_share_gain(self, base: float) -> float:
        return base * (1 - self.market_share / 100.0) * self.competitive_pressure()

    def market_share_loss(self, base: float) -> float:
        return base * (1 + self.market_share / 200.0)

    # ------------------------------------------------------------------
    # Quarterly close
    # ------------------------------------------------------------------

    def apply_budget_allocations(self, registry: DepartmentRegistry) -> None:
        b = self.budgets

        marketing = b[Department.MARKETING]
        if marketing >= 25:
            self.reputation += 2
            self.market_share += self.market_share_gain(0.15)
        elif marketing <= 5:
            self.reputation -= 1
            self.market_share -= self.market_share_loss(0.1)

        operations = b[Department.OPERATIONS]
        if operations >= 25:
            self.risk -= 2
            registry.boost_efficiency(Department.OPERATIONS, 3)
        elif operations <= 10:
            self.risk += 3

        if b[Department.FINANCE] >= 20:
            self.quarterly_expenses *= 0.98

        hr = b[Department.HR]
        if hr >= 20:
            self.morale += 3
            registry.boost_efficiency(Department.HR, 5)
        elif hr <= 5:
            self.morale -= 2

        it = b[Department.IT]
        if it >= 25:
            self.risk -= 3
            registry.boost_all_efficiency(2)
        elif it <= 10:
            self.risk += 5

        if b[Department.RESEARCH] >= 25:
            self.market_share += self.market_share_gain(0.25)
            self.reputation += 1
            registry.boost_efficiency(Department.RESEARCH, 4)

    def apply_market_dynamics(self, rng: random.Random) -> None:
        if self.market_share >= 60:
            decay = 0.15
        elif self.market_share >= 50:
            decay = 0.12
        elif self.market_share >= 30:
            decay = 0.08
        else:
            decay = 0.05
        self.market_share -= decay * rng.uniform(0.8, 1.2)

        if self.reputation < -20:
            self.market_share -= 0.1
        elif self.reputation > 50:
            self.market_share += 0.05

        if self.morale < -20:
            self.market_share -= 0.08
        if self.risk > 50:
            self.market_share -= 0.06

    def process_quarterly_financials(self, registry: DepartmentRegistry, rng: random.Random) -> None:
        # 1. budgets, 2. market dynamics
        self.apply_budget_allocations(registry)
        self.apply_market_dynamics(rng)

        # 3. expenses
        self.quarterly_expenses = registry.quarterly_cost() + BASE_QUARTERLY_COST

        # 4. revenue
        productivity_factor = 1 + registry.total_productivity() / 100.0
        self.quarterly_revenue = (
            self.market_share * REVENUE_PER_SHARE_POINT * productivity_factor * self.reputation_revenue_modifier()
        )

        # 5. capital, 6. clamp
        self.capital += self.quarterly_revenue - self.quarterly_expenses
        self.clamp_values()

    def net_profit(self) -> float:
        return self.quarterly_revenue - self.quarterly_expenses

    # ------------------------------------------------------------------
    # Probabilities
    # ------------------------------------------------------------------

    def catastrophic_event_chance(self) -> float:
        return min(0.25, 0.05 + max(0, self.risk) / 100.0 * 0.20)

    def employee_turnover_chance(self) -> float:
        return clamp(0.10 - self.morale / 100.0 * 0.20, 0.02, 0.30)

    # ------------------------------------------------------------------
    # Knob lookups
    # ------------------------------------------------------------------

    def risk_multiplier(self) -> float:
        return RISK_MULTIPLIERS[self.risk_appetite]

    def investment_multiplier(self) -> float:
        return INVESTMENT_MULTIPLIERS[self.investment_level]

    def employee_multiplier(self) -> float:
        return EMPLOYEE_MULTIPLIERS[self.employee_management]

    def reputation_revenue_modifier(self) -> float:
        return 1.0 + self.reputation / 200.0

    # ------------------------------------------------------------------
    # Budgets
    # ------------------------------------------------------------------

    def budget_allocations(self) -> Dict[Department, float]:
        return dict(self.budgets)

    def set_budget_allocations(self, allocations: Dict[Department, float]) -> None:
        missing = [d.value for d in Department if d not in allocations]
        if missing:
            raise ValueError(f"Budget allocation missing departments: {missing}")
        self.budgets = {d: float(allocations[d]) for d in Department}

    # ------------------------------------------------------------------
    # Descriptions (UI / logs)
    # ------------------------------------------------------------------

    def reputation_description(self) -> str:
        return _band(self.reputation, _REPUTATION_BANDS, "Disastrous")

    def morale_description(self) -> str:
        return _band(self.morale, _MORALE_BANDS, "Catastrophic")

    def risk_description(self) -> str:
        return _band(self.risk, _RISK_BANDS, "Ultra Safe")

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        for knob in (
            "risk_appetite",
            "investment_level",
            "workforce_focus",
            "market_strategy",
            "crisis_response",
            "employee_management",
        ):
            d[knob] = getattr(self, knob).value
        d["budgets"] = {dept.value: pct for dept, pct in self.budgets.items()}
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Company":
        budgets = data.get("budgets") or {d.value: v for d, v in DEFAULT_BUDGETS.items()}
        return cls(
            capital=float(data["capital"]),
            reputation=int(data["reputation"]),
            morale=int(data["morale"]),
            risk=int(data["risk"]),
            market_share=float(data["market_share"]),
            employee_count=int(data.get("employee_count", 0)),
            quarterly_revenue=float(data.get("quarterly_revenue", 0.0)),
            quarterly_expenses=float(data.get("quarterly_expenses", 0.0)),
            risk_appetite=RiskAppetite(data.get("risk_appetite", RiskAppetite.BALANCED.value)),
            investment_level=InvestmentLevel(data.get("investment_level", InvestmentLevel.MEDIUM.value)),
            workforce_focus=WorkforceFocus(data.get("workforce_focus", WorkforceFocus.EFFICIENCY.value)),
            market_strategy=MarketStrategy(data.get("market_strategy", MarketStrategy.QUALITY.value)),
            crisis_response=CrisisResponse(data.get("crisis_response", CrisisResponse.CONTROL.value)),
            employee_management=EmployeeManagement(
                data.get("employee_management", EmployeeManagement.STANDARD.value)
            ),
            budgets={Department(k): float(v) for k, v in budgets.items()},
            current_quarter_refreshes=int(data.get("current_quarter_refreshes", 0)),
            last_refresh_quarter=int(data.get("last_refresh_quarter", 0)),
        )
