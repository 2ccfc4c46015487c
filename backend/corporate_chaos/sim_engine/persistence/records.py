"""
Persistable records: quarterly reports, finished-run summaries and save snapshots.

All records serialize to plain JSON-safe dicts (enum values as strings,
snake_case keys) and load back with from_dict.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import datetime as _dt
import re
import uuid

from corporate_chaos.sim_engine.entities.company import Company
from corporate_chaos.sim_engine.entities.department import DepartmentRegistry
from corporate_chaos.sim_engine.entities.enums import Department
from corporate_chaos.sim_engine.scoring.game_score import GameScore


SAVE_TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"


def now_iso() -> str:
    return _dt.datetime.now().isoformat(timespec="seconds")


def safe_file_stem(name: str) -> str:
    stem = re.sub(r"[^A-Za-z0-9_\- ]+", "", name).strip().replace(" ", "_")
    return stem or "save"


# ============================================================
# Quarterly report
# ============================================================

@dataclass
class QuarterlyReport:
    quarter: int
    starting_capital: float
    ending_capital: float
    revenue: float
    expenses: float
    market_share_change: float
    employee_count: int
    major_events: List[str] = field(default_factory=list)
    department_performance: Dict[Department, float] = field(default_factory=dict)

    @property
    def profit(self) -> float:
        return self.revenue - self.expenses

    def to_dict(self) -> Dict[str, Any]:
        return {
            "quarter": self.quarter,
            "starting_capital": self.starting_capital,
            "ending_capital": self.ending_capital,
            "revenue": self.revenue,
            "expenses": self.expenses,
            "market_share_change": self.market_share_change,
            "employee_count": self.employee_count,
            "major_events": list(self.major_events),
            "department_performance": {d.value: v for d, v in self.department_performance.items()},
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "QuarterlyReport":
        return cls(
            quarter=int(data["quarter"]),
            starting_capital=float(data["starting_capital"]),
            ending_capital=float(data["ending_capital"]),
            revenue=float(data["revenue"]),
            expenses=float(data["expenses"]),
            market_share_change=float(data["market_share_change"]),
            employee_count=int(data["employee_count"]),
            major_events=list(data.get("major_events", [])),
            department_performance={
                Department(k): float(v) for k, v in data.get("department_performance", {}).items()
            },
        )


# ============================================================
# Finished run
# ============================================================

@dataclass
class GameRunRecord:
    """History entry for one finished run.

    total_revenue is the lifetime sum of quarterly revenues; the best single
    quarter is already kept on the score as peak_revenue.
    """

    player_nickname: str = ""
    run_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    start_date: str = field(default_factory=now_iso)
    end_date: Optional[str] = None
    final_score: int = 0
    quarters_played: int = 0
    end_reason: str = ""
    final_stats: Company = field(default_factory=Company)
    quarterly_reports: List[QuarterlyReport] = field(default_factory=list)
    peak_market_share: float = 0.0
    max_employees: int = 0
    total_revenue: float = 0.0

    def close(self, company: Company, score: GameScore) -> None:
        self.end_date = now_iso()
        self.final_score = score.score
        self.quarters_played = score.quarters_played
        self.end_reason = score.end_reason
        self.final_stats = Company.from_dict(company.to_dict())
        self.peak_market_share = score.peak_market_share
        self.max_employees = score.peak_employees
        self.total_revenue = sum(r.revenue for r in self.quarterly_reports)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "run_id": self.run_id,
            "player_nickname": self.player_nickname,
            "start_date": self.start_date,
            "end_date": self.end_date,
            "final_score": self.final_score,
            "quarters_played": self.quarters_played,
            "end_reason": self.end_reason,
            "final_stats": self.final_stats.to_dict(),
            "quarterly_reports": [r.to_dict() for r in self.quarterly_reports],
            "peak_market_share": self.peak_market_share,
            "max_employees": self.max_employees,
            "total_revenue": self.total_revenue,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GameRunRecord":
        return cls(
            run_id=str(data["run_id"]),
            player_nickname=str(data.get("player_nickname", "")),
            start_date=str(data.get("start_date", "")),
            end_date=data.get("end_date"),
            final_score=int(data.get("final_score", 0)),
            quarters_played=int(data.get("quarters_played", 0)),
            end_reason=str(data.get("end_reason", "")),
            final_stats=Company.from_dict(data["final_stats"]) if data.get("final_stats") else Company(),
            quarterly_reports=[QuarterlyReport.from_dict(r) for r in data.get("quarterly_reports", [])],
            peak_market_share=float(data.get("peak_market_share", 0.0)),
            max_employees=int(data.get("max_employees", 0)),
            total_revenue=float(data.get("total_revenue", 0.0)),
        )


# ============================================================
# Save snapshot
# ============================================================

@dataclass
class GameSave:
    save_name: str
    player_nickname: str
    current_quarter: int
    company: Company
    registry: DepartmentRegistry
    save_date: str = field(default_factory=now_iso)
    game_events: List[str] = field(default_factory=list)
    quarterly_reports: List[QuarterlyReport] = field(default_factory=list)
    chaos_state: Dict[str, Any] = field(default_factory=dict)
    score: GameScore = field(default_factory=GameScore)
    run_id: str = ""
    rng_state: Optional[List[Any]] = None

    def file_name(self) -> str:
        stamp = _dt.datetime.fromisoformat(self.save_date).strftime(SAVE_TIMESTAMP_FORMAT)
        return f"{safe_file_stem(self.save_name)}_{stamp}.json"

    def to_dict(self) -> Dict[str, Any]:
        registry = self.registry.to_dict()
        return {
            "save_name": self.save_name,
            "player_nickname": self.player_nickname,
            "save_date": self.save_date,
            "current_quarter": self.current_quarter,
            "company": self.company.to_dict(),
            "departments": registry["departments"],
            "available_employees": registry["unassigned"],
            "game_events": list(self.game_events),
            "quarterly_reports": [r.to_dict() for r in self.quarterly_reports],
            "chaos_state": dict(self.chaos_state),
            "score": self.score.to_dict(),
            "run_id": self.run_id,
            "rng_state": self.rng_state,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GameSave":
        registry = DepartmentRegistry.from_dict({
            "departments": data.get("departments", []),
            "unassigned": data.get("available_employees", []),
        })
        return cls(
            save_name=str(data["save_name"]),
            player_nickname=str(data.get("player_nickname", "")),
            save_date=str(data.get("save_date") or now_iso()),
            current_quarter=int(data["current_quarter"]),
            company=Company.from_dict(data["company"]),
            registry=registry,
            game_events=list(data.get("game_events", [])),
            quarterly_reports=[QuarterlyReport.from_dict(r) for r in data.get("quarterly_reports", [])],
            chaos_state=dict(data.get("chaos_state", {})),
            score=GameScore.from_dict(data.get("score", {})),
            run_id=str(data.get("run_id", "")),
            rng_state=data.get("rng_state"),
        )
