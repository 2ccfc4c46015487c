"""
Peak-performance scoring.

A run is scored on the best values it ever reached, not on where it ended:
a company that peaked and then went bankrupt still keeps its peaks.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict
import datetime as _dt

from corporate_chaos.sim_engine.entities.company import Company


# (points per unit) applied to peaks
CAPITAL_POINTS_PER_1000 = 2
REVENUE_POINTS_PER_1000 = 3
PROFIT_POINTS_PER_1000 = 5
MARKET_SHARE_POINTS = 50
EMPLOYEE_POINTS = 20
REPUTATION_POINTS = 10
QUARTER_POINTS = 100


@dataclass
class GameScore:
    nickname: str = ""
    score: int = 0

    # peaks
    peak_capital: float = 0.0
    peak_revenue: float = 0.0
    peak_profit: float = 0.0
    peak_market_share: float = 0.0
    peak_employees: int = 0
    peak_reputation: int = 0
    peak_quarter: int = 0

    # final state (reference only)
    final_capital: float = 0.0
    final_market_share: float = 0.0
    final_employees: int = 0
    quarters_played: int = 0
    end_reason: str = ""
    date_achieved: str = ""

    def update_peak_metrics(self, company: Company, current_quarter: int) -> None:
        if company.capital > self.peak_capital:
            self.peak_capital = company.capital
            self.peak_quarter = current_quarter

        if company.quarterly_revenue > self.peak_revenue:
            self.peak_revenue = company.quarterly_revenue

        profit = company.net_profit()
        if profit > self.peak_profit:
            self.peak_profit = profit

        if company.market_share > self.peak_market_share:
            self.peak_market_share = company.market_share

        if company.employee_count > self.peak_employees:
            self.peak_employees = company.employee_count

        if company.reputation > self.peak_reputation:
            self.peak_reputation = company.reputation

    def base_score(self) -> float:
        return (
            self.peak_capital / 1000 * CAPITAL_POINTS_PER_1000
            + self.peak_revenue / 1000 * REVENUE_POINTS_PER_1000
            + self.peak_profit / 1000 * PROFIT_POINTS_PER_1000
            + self.peak_market_share * MARKET_SHARE_POINTS
            + self.peak_employees * EMPLOYEE_POINTS
            + self.peak_reputation * REPUTATION_POINTS
            + self.quarters_played * QUARTER_POINTS
        )

    def bonus_multiplier(self) -> float:
        mult = 1.0
        if self.peak_market_share >= 50:
            mult *= 2.0
        if self.peak_profit >= 100000:
            mult *= 1.5
        if self.peak_capital >= 1000000:
            mult *= 1.3
        if self.quarters_played >= 20:
            mult *= 1.2
        return mult

    def calculate_score(self) -> int:
        self.score = int(max(0.0, self.base_score() * self.bonus_multiplier()))
        return self.score

    def finalize(self, company: Company, quarters_played: int, end_reason: str) -> int:
        self.final_capital = max(0.0, company.capital)
        self.final_market_share = company.market_share
        self.final_employees = company.employee_count
        self.quarters_played = int(quarters_played)
        self.end_reason = end_reason
        self.date_achieved = _dt.datetime.now().isoformat(timespec="seconds")
        return self.calculate_score()

    def breakdown(self) -> Dict[str, float]:
        return {
            "peak_capital": self.peak_capital / 1000 * CAPITAL_POINTS_PER_1000,
            "peak_revenue": self.peak_revenue / 1000 * REVENUE_POINTS_PER_1000,
            "peak_profit": self.peak_profit / 1000 * PROFIT_POINTS_PER_1000,
            "peak_market_share": self.peak_market_share * MARKET_SHARE_POINTS,
            "peak_employees": self.peak_employees * EMPLOYEE_POINTS,
            "peak_reputation": self.peak_reputation * REPUTATION_POINTS,
            "quarters_played": self.quarters_played * QUARTER_POINTS,
            "bonus_multiplier": self.bonus_multiplier(),
        }

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GameScore":
        known = {k: data[k] for k in cls.__dataclass_fields__ if k in data}
        return cls(**known)
