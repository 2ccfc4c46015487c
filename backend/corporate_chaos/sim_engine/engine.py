from __future__ import annotations

"""
CORPORATE CHAOS - SIM ENGINE (CORE ORCHESTRATOR)
================================================

What belongs here:
- The GameEngine class (quarter loop orchestration)
- Wiring between the company ledger, department registry, chaos engine,
  decision system, hiring pool and scoring
- End-of-game handling (score, run record, reset)
- Debug printing helpers

What MUST NOT belong here:
- run_sim.py runner / __main__ entrypoint
- autopilot policy
- run folder / timeline file output
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional
import random

from corporate_chaos.sim_engine.chaos.chaos_engine import ChaosEngine
from corporate_chaos.sim_engine.chaos.morale import apply_quarterly_morale_drift
from corporate_chaos.sim_engine.economy.decision_system import DecisionResult, DecisionSystem
from corporate_chaos.sim_engine.entities.company import Company
from corporate_chaos.sim_engine.entities.department import DepartmentRegistry
from corporate_chaos.sim_engine.entities.employee import Employee, generate_random_employee
from corporate_chaos.sim_engine.entities.enums import (
    CrisisResponse,
    Department,
    EmployeeManagement,
    ExecutiveDecision,
    GameStatus,
    InvestmentLevel,
    MarketStrategy,
    QuarterlyInitiative,
    RiskAppetite,
    WorkforceFocus,
)
from corporate_chaos.sim_engine.generation.candidate_generator import (
    MAX_REFRESHES_PER_QUARTER,
    CandidatePool,
    quality_label,
)
from corporate_chaos.sim_engine.persistence.config import GameConfig, validate_nickname
from corporate_chaos.sim_engine.persistence.records import GameRunRecord, GameSave, QuarterlyReport
from corporate_chaos.sim_engine.persistence.store import GameStore
from corporate_chaos.sim_engine.scoring.game_score import GameScore
from corporate_chaos.sim_engine.scoring.leaderboard import Leaderboard


# =====================================================================
# END CONDITIONS
# =====================================================================

MAX_QUARTERS = 120
VICTORY_MARKET_SHARE = 70.0

END_BANKRUPTCY = "Bankruptcy - Ran out of capital"
END_VICTORY = "Victory - Market Dominance Achieved (70% Market Share)"
END_NO_EMPLOYEES = "Business Failure - No employees left"
END_RETIREMENT = "Retirement - You've reached the end of your 30-year career!"

AUTOSAVE_NAME = "autosave"

KNOB_TYPES = {
    "risk_appetite": RiskAppetite,
    "investment_level": InvestmentLevel,
    "workforce_focus": WorkforceFocus,
    "market_strategy": MarketStrategy,
    "crisis_response": CrisisResponse,
    "employee_management": EmployeeManagement,
}


def check_end_condition(company: Company, current_quarter: int) -> Optional[str]:
    """
    First matching terminal condition, in priority order, or None.
    `current_quarter` is the quarter about to begin.
    """
    if company.capital <= 0:
        return END_BANKRUPTCY
    if company.market_share >= VICTORY_MARKET_SHARE:
        return END_VICTORY
    if company.employee_count <= 0:
        return END_NO_EMPLOYEES
    if current_quarter > MAX_QUARTERS:
        return END_RETIREMENT
    return None


def quarter_label(current_quarter: int) -> str:
    year = (current_quarter - 1) // 4 + 1
    quarter_in_year = (current_quarter - 1) % 4 + 1
    return f"Y{year} Q{quarter_in_year} ({current_quarter}/{MAX_QUARTERS})"


def rng_state_to_list(rng: random.Random) -> List[Any]:
    version, internal, gauss_next = rng.getstate()
    return [version, list(internal), gauss_next]


def rng_state_from_list(state: List[Any]) -> tuple:
    version, internal, gauss_next = state
    return (int(version), tuple(int(x) for x in internal), gauss_next)


@dataclass
class QuarterOutcome:
    quarter: int
    events: List[str]
    report: QuarterlyReport
    end_reason: Optional[str] = None
    final_score: Optional[GameScore] = None
    run_record: Optional[GameRunRecord] = None
    save_file: Optional[str] = None

    @property
    def ended(self) -> bool:
        return self.end_reason is not None


# =====================================================================
# GAME ENGINE
# =====================================================================

class GameEngine:
    """
    CORE GAME ENGINE

    Responsibilities:
    - Owns the single Company, DepartmentRegistry and seeded RNG
    - Runs the quarterly close: financials -> chaos -> clamp -> peaks ->
      morale drift -> next quarter -> report -> end check
    - Exposes the player actions (hiring, assignment, decisions, knobs)
    - Hands finished runs to the store and resets to a fresh game

    Every random draw goes through self.rng, so a seed replays a run exactly
    as long as the same actions are taken in the same order.
    """

    # --------------------------------------------------
    # Construction
    # --------------------------------------------------

    def __init__(
        self,
        seed: int | None = None,
        config: GameConfig | None = None,
        store: GameStore | None = None,
        debug: bool = False,
    ):
        self.seed: int = seed if seed is not None else random.randrange(1, 10**18)
        self.rng: random.Random = random.Random(self.seed)
        self.config: GameConfig = config or GameConfig()
        self.store: GameStore | None = store
        self.debug: bool = debug

        # ------------------------------------
        # Core systems
        # ------------------------------------
        self.decisions = DecisionSystem(self.rng)
        self.candidates = CandidatePool(self.rng)

        if store is not None:
            self.leaderboard = store.load_leaderboard(self.config.max_high_scores)
        else:
            self.leaderboard = Leaderboard(max_entries=self.config.max_high_scores)

        # Finished runs from this engine instance (newest last)
        self.completed_runs: List[GameRunRecord] = []
        self.last_final_score: GameScore | None = None
        # File name of the one autosave this engine keeps on disk
        self.last_autosave: str | None = None

        self.new_game()

    def new_game(self, nickname: str = "Player") -> None:
        self.company = Company(capital=float(self.config.default_starting_capital))
        self.registry = DepartmentRegistry()
        self.chaos = ChaosEngine(self.rng)
        self.score = GameScore(nickname=nickname)
        self.run = GameRunRecord(player_nickname=nickname)

        self.current_quarter: int = 1
        self.status: GameStatus = GameStatus.ACTIVE
        self.game_log: List[str] = []
        self.current_quarter_events: List[str] = []
        self.quarterly_reports: List[QuarterlyReport] = []

        for _ in range(max(0, int(self.config.default_starting_employees))):
            self.registry.hire(generate_random_employee(self.rng, self.current_quarter), self.current_quarter)

        self.company.last_refresh_quarter = self.current_quarter
        self.candidates.generate(self.company, self.registry, self.current_quarter)

        # Starting position counts as the first peak
        self.score.update_peak_metrics(self.company, self.current_quarter)

        self.log(f"Welcome to Corporate Chaos, {nickname}! Starting capital ${self.company.capital:,.0f}.")
        self.log(f"{len(self.registry.unassigned)} employees are waiting for a department assignment.")

    # --------------------------------------------------
    # Small helpers
    # --------------------------------------------------

    def log(self, text: str) -> None:
        self.game_log.append(text)

    def _require_active(self) -> None:
        if self.status != GameStatus.ACTIVE:
            raise RuntimeError("GameEngine: the game has ended; call new_game() first.")

    def quarter_label(self) -> str:
        return quarter_label(self.current_quarter)

    def _sync_employee_count(self) -> None:
        self.company.employee_count = self.registry.employee_count()

    # --------------------------------------------------
    # Hiring
    # --------------------------------------------------

    def candidate_pool(self) -> List[Employee]:
        return list(self.candidates.candidates)

    def hiring_quality(self) -> float:
        return self.candidates.quality

    def hiring_summary(self) -> str:
        remaining = self.candidates.remaining_refreshes(self.company, self.current_quarter)
        return (
            f"Hiring Quality: {self.candidates.quality:.0%} ({quality_label(self.candidates.quality)}) | "
            f"Refreshes: {remaining}/{MAX_REFRESHES_PER_QUARTER}"
        )

    def refresh_candidates(self) -> bool:
        self._require_active()
        if not self.candidates.refresh(self.company, self.registry, self.current_quarter):
            return False
        self.log(f"Candidate pool refreshed ({len(self.candidates.candidates)} candidates).")
        return True

    def hire(self, candidate_id: str) -> Employee:
        self._require_active()
        employee = self.candidates.take(candidate_id)
        self.registry.hire(employee, self.current_quarter)
        self.log(
            f"Hired {employee.name} ({employee.overall_skill} {employee.specialization}). "
            f"Available for department assignment."
        )
        return employee

    def pass_on(self, candidate_id: str) -> Employee:
        self._require_active()
        return self.candidates.take(candidate_id)

    def assign(self, employee_id: str, department: Department | str) -> Employee:
        self._require_active()
        employee = self.registry.assign(employee_id, Department(department))
        self._sync_employee_count()
        self.log(f"{employee.name} assigned to {employee.assigned_department}.")
        return employee

    def transfer(self, employee_id: str, department: Department | str) -> Employee:
        self._require_active()
        employee = self.registry.transfer(employee_id, Department(department))
        self.log(f"{employee.name} transferred to {employee.assigned_department}.")
        return employee

    def release(self, employee_id: str) -> Employee:
        self._require_active()
        employee = self.registry.release(employee_id)
        self._sync_employee_count()
        self.log(f"{employee.name} moved back to the unassigned pool.")
        return employee

    # --------------------------------------------------
    # Decisions
    # --------------------------------------------------

    def _record_decision(self, result: DecisionResult) -> DecisionResult:
        if result.accepted:
            self.log(result.message)
            self.current_quarter_events.append(result.message)
        return result

    def execute_decision(self, decision: ExecutiveDecision | str) -> DecisionResult:
        self._require_active()
        return self._record_decision(
            self.decisions.execute(ExecutiveDecision(decision), self.company, self.registry)
        )

    def reallocate_budget(self, allocations: Dict[Any, float]) -> DecisionResult:
        self._require_active()
        typed = {Department(k): float(v) for k, v in allocations.items()}
        return self._record_decision(self.decisions.reallocate_budget(self.company, self.registry, typed))

    def run_initiative(self, kind: QuarterlyInitiative | str) -> DecisionResult:
        self._require_active()
        return self._record_decision(
            self.decisions.run_initiative(QuarterlyInitiative(kind), self.company, self.registry)
        )

    def set_knobs(self, **knobs: Any) -> None:
        self._require_active()
        unknown = [k for k in knobs if k not in KNOB_TYPES]
        if unknown:
            raise ValueError(f"Unknown control knob(s): {', '.join(sorted(unknown))}")

        for name, value in knobs.items():
            setattr(self.company, name, KNOB_TYPES[name](value))

    # --------------------------------------------------
    # Debug printing
    # --------------------------------------------------

    def _debug_dump_quarter(self, report: QuarterlyReport, events: List[str]) -> None:
        c = self.company

        print("\n[COMPANY]")
        print(f"  Capital: ${c.capital:,.0f} (start ${report.starting_capital:,.0f})")
        print(f"  Revenue: ${c.quarterly_revenue:,.0f} | Expenses: ${c.quarterly_expenses:,.0f} | Profit: ${c.net_profit():,.0f}")
        print(f"  Market share: {c.market_share:.2f}% ({report.market_share_change:+.2f})")
        print(f"  Reputation: {c.reputation} ({c.reputation_description()})")
        print(f"  Morale: {c.morale} ({c.morale_description()})")
        print(f"  Risk: {c.risk} ({c.risk_description()})")

        print("\n[DEPARTMENTS]")
        for stats in self.registry:
            print(
                f"  {stats.department.value:<10} staff={stats.employee_count():<3} "
                f"prod={stats.total_productivity():7.1f} eff={stats.efficiency:5.1f} "
                f"cost=${stats.quarterly_cost():,.0f}"
            )
        print(f"  Unassigned: {len(self.registry.unassigned)}")

        print("\n[CRISES]")
        print("  " + self.chaos.crisis_status_summary().replace("\n", "\n  "))

        print("\n[EVENTS]")
        if not events:
            print("  (quiet quarter)")
        for e in events:
            print(f"  - {e}")

        print("\n[SCORE]")
        print(f"  Running score: {self.score.calculate_score():,} | peak share {self.score.peak_market_share:.2f}%")

    # --------------------------------------------------
    # Quarterly close
    # --------------------------------------------------

    def process_quarter(self) -> QuarterOutcome:
        """
        Simulates one quarter and checks for game over.
        When the game ends the outcome carries the final score and run record,
        and the engine is already reset to a fresh game.
        """
        self._require_active()

        played = self.current_quarter
        starting_capital = self.company.capital
        starting_share = self.company.market_share

        if self.debug:
            print("\n==============================")
            print(f"   QUARTER {played}  {quarter_label(played)}")
            print("==============================")

        # --------------------------------------------------
        # 1. Financial close
        # --------------------------------------------------
        self.company.process_quarterly_financials(self.registry, self.rng)

        # --------------------------------------------------
        # 2. Chaos
        # --------------------------------------------------
        events = self.chaos.apply_quarterly_chaos(self.company, self.registry)
        self.current_quarter_events.extend(events)
        for text in events:
            self.log(text)

        # --------------------------------------------------
        # 3. Invariants + derived count
        # --------------------------------------------------
        self.company.clamp_values()
        self._sync_employee_count()

        # --------------------------------------------------
        # 4. Peak tracking
        # --------------------------------------------------
        self.score.update_peak_metrics(self.company, played)
        self.score.quarters_played = played

        # --------------------------------------------------
        # 5. Employee morale drift
        # --------------------------------------------------
        apply_quarterly_morale_drift(self.company, self.registry)

        # --------------------------------------------------
        # 6. Next quarter
        # --------------------------------------------------
        self.current_quarter += 1
        if self.company.last_refresh_quarter != self.current_quarter:
            self.company.current_quarter_refreshes = 0
            self.company.last_refresh_quarter = self.current_quarter

        # --------------------------------------------------
        # 7. Report
        # --------------------------------------------------
        report = QuarterlyReport(
            quarter=played,
            starting_capital=starting_capital,
            ending_capital=self.company.capital,
            revenue=self.company.quarterly_revenue,
            expenses=self.company.quarterly_expenses,
            market_share_change=self.company.market_share - starting_share,
            employee_count=self.company.employee_count,
            major_events=list(self.current_quarter_events),
            department_performance=self.registry.performance_by_department(),
        )
        self.quarterly_reports.append(report)
        self.run.quarterly_reports.append(report)

        outcome = QuarterOutcome(quarter=played, events=list(events), report=report)

        if self.debug:
            self._debug_dump_quarter(report, events)

        # --------------------------------------------------
        # 8. End check
        # --------------------------------------------------
        reason = check_end_condition(self.company, self.current_quarter)
        if reason is not None:
            outcome.end_reason = reason
            outcome.final_score, outcome.run_record = self._end_game(reason)
            return outcome

        self.current_quarter_events = []
        self.candidates.generate(self.company, self.registry, self.current_quarter)
        self.log(f"Quarter {self.current_quarter} begins! Use the hiring panel to recruit new talent.")

        if self.config.auto_save_enabled and self.store is not None:
            outcome.save_file = self._autosave()

        return outcome

    def _autosave(self) -> Optional[str]:
        """Writes a fresh autosave, then drops the one it replaces."""
        file_name = self.store.save_game(self.snapshot(AUTOSAVE_NAME))
        if file_name is None:
            return None
        if self.last_autosave is not None and self.last_autosave != file_name:
            self.store.delete_save(self.last_autosave)
        self.last_autosave = file_name
        return file_name

    def sim_quarters(self, quarters: int) -> List[QuarterOutcome]:
        """Runs up to `quarters` quarters, stopping early when a game ends."""
        outcomes: List[QuarterOutcome] = []
        for _ in range(quarters):
            outcome = self.process_quarter()
            outcomes.append(outcome)
            if outcome.ended:
                break
        return outcomes

    # --------------------------------------------------
    # Game over
    # --------------------------------------------------

    def _end_game(self, reason: str) -> tuple[GameScore, GameRunRecord]:
        self.status = GameStatus.ENDED

        final = self.score
        final.finalize(self.company, self.current_quarter - 1, reason)

        record = self.run
        record.close(self.company, final)
        if self.store is not None:
            self.store.save_run(record)

        self.completed_runs.append(record)
        self.last_final_score = final
        self.log(f"GAME OVER: {reason} | Final score {final.score:,} (peak performance)")

        if self.debug:
            print("\n[GAME OVER]")
            print(f"  {reason}")
            for k, v in final.breakdown().items():
                print(f"  {k}: {v:,.2f}")
            print(f"  FINAL SCORE: {final.score:,}")

        self.new_game(final.nickname or "Player")
        return final, record

    def record_high_score(self, score: GameScore, nickname: str) -> int:
        """Adds a finalized score to the leaderboard; returns the player's rank."""
        error = validate_nickname(nickname, self.config)
        if error is not None:
            raise ValueError(error)

        score.nickname = nickname.strip()
        rank = self.leaderboard.add(score)
        if self.store is not None:
            self.store.save_leaderboard(self.leaderboard)
        return rank

    # --------------------------------------------------
    # Save / load
    # --------------------------------------------------

    def snapshot(self, save_name: str) -> GameSave:
        return GameSave(
            save_name=save_name,
            player_nickname=self.score.nickname,
            current_quarter=self.current_quarter,
            company=Company.from_dict(self.company.to_dict()),
            registry=DepartmentRegistry.from_dict(self.registry.to_dict()),
            game_events=list(self.game_log),
            quarterly_reports=[QuarterlyReport.from_dict(r.to_dict()) for r in self.quarterly_reports],
            chaos_state=self.chaos.to_dict(),
            score=GameScore.from_dict(self.score.to_dict()),
            run_id=self.run.run_id,
            rng_state=rng_state_to_list(self.rng),
        )

    def restore(self, save: GameSave) -> None:
        self.company = Company.from_dict(save.company.to_dict())
        self.registry = DepartmentRegistry.from_dict(save.registry.to_dict())
        self.current_quarter = save.current_quarter
        self.status = GameStatus.ACTIVE
        self.game_log = list(save.game_events)
        self.current_quarter_events = []
        self.quarterly_reports = [QuarterlyReport.from_dict(r.to_dict()) for r in save.quarterly_reports]
        self._sync_employee_count()

        # Pool is not saved; draw it before the RNG rewinds to the saved stream
        self.candidates.generate(self.company, self.registry, self.current_quarter)

        if save.rng_state:
            self.rng.setstate(rng_state_from_list(save.rng_state))

        self.chaos = ChaosEngine(self.rng)
        self.chaos.load_state(save.chaos_state)

        self.score = GameScore.from_dict(save.score.to_dict())
        if not self.score.nickname:
            self.score.nickname = save.player_nickname

        self.run = GameRunRecord(player_nickname=save.player_nickname)
        if save.run_id:
            self.run.run_id = save.run_id
        self.run.quarterly_reports = list(self.quarterly_reports)

        self.log(f"Game '{save.save_name}' loaded at {quarter_label(self.current_quarter)}.")

    def save_game(self, save_name: str) -> Optional[str]:
        if self.store is None:
            raise RuntimeError("GameEngine.save_game() called without a store.")
        return self.store.save_game(self.snapshot(save_name))

    def load_game(self, file_name: str) -> bool:
        if self.store is None:
            raise RuntimeError("GameEngine.load_game() called without a store.")
        save = self.store.load_game(file_name)
        if save is None:
            return False
        self.restore(save)
        return True

    # --------------------------------------------------
    # Snapshots for runners / UIs
    # --------------------------------------------------

    def state_snapshot(self) -> Dict[str, Any]:
        return {
            "quarter": self.current_quarter,
            "quarter_label": quarter_label(self.current_quarter),
            "status": self.status.value,
            "company": self.company.to_dict(),
            "departments": {
                stats.department.value: {
                    "employees": stats.employee_count(),
                    "total_productivity": round(stats.total_productivity(), 2),
                    "efficiency": stats.efficiency,
                    "quarterly_cost": stats.quarterly_cost(),
                }
                for stats in self.registry
            },
            "unassigned": len(self.registry.unassigned),
            "crises": self.chaos.crisis_status_summary(),
            "score_so_far": GameScore.from_dict(self.score.to_dict()).calculate_score(),
        }
