# backend/run_sim.py
"""
Corporate Chaos - Autopilot Runner
==================================

This runner is a top-level orchestration / testing harness.

It:
- Builds a GameEngine from one master seed (seed-split so runner choices never
  shift engine draws)
- Plays a simple autopilot policy quarter by quarter (hire, assign, bonus, loan, market)
- Produces a human-readable timeline log + machine-readable JSON artifacts
- Hands the finished run to a GameStore under the output dir
- Owns all I/O; engine must not write files except through its store
- Never crashes silently: it will dump context, last log lines, snapshot and seed/config on failure

Standard library only in this runner.
"""

from __future__ import annotations

import argparse
from dataclasses import dataclass, fields, is_dataclass
import datetime as _dt
from enum import Enum
import hashlib
import json
from pathlib import Path
import sys
import time
import traceback
from typing import Any, Dict, List, Optional
from collections import deque

from corporate_chaos.sim_engine.engine import GameEngine, QuarterOutcome, quarter_label
from corporate_chaos.sim_engine.entities.enums import (
    CrisisResponse,
    ExecutiveDecision,
    QuarterlyInitiative,
    RiskAppetite,
)
from corporate_chaos.sim_engine.persistence.config import GameConfig, load_config
from corporate_chaos.sim_engine.persistence.store import GameStore

# =============================================================================
# Constants / Small helpers
# =============================================================================

LOG_LEVELS = ("minimal", "normal", "debug", "insane")
STORE_FOLDER = "store"


def now_utc_compact() -> str:
    # Timestamp for run folder
    return _dt.datetime.now(_dt.timezone.utc).strftime("%Y%m%d_%H%M%S")


def stable_json_dumps(obj: Any, pretty: bool = False) -> str:
    if pretty:
        return json.dumps(obj, sort_keys=True, indent=2, ensure_ascii=False)
    return json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False)

# =============================================================================
# RNG Seed splitting utilities (deterministic)
# =============================================================================

def split_seed(master_seed: int, label: str) -> int:
    """
    Deterministically derives a sub-seed from (master_seed, label).
    """
    h = hashlib.sha256(f"{master_seed}::{label}".encode("utf-8")).digest()
    # Use 64-bit chunk
    return int.from_bytes(h[:8], "big", signed=False)

# =============================================================================
# Safe serialization helpers
# =============================================================================

def safe_to_primitive(obj: Any, _depth: int = 0, _max_depth: int = 8) -> Any:
    """
    Convert runner/engine objects into JSON-safe primitives.
    Objects exposing to_dict() are trusted to return JSON-safe data.
    """
    if _depth > _max_depth:
        return str(obj)

    if isinstance(obj, Enum):
        return obj.value

    if obj is None or isinstance(obj, (bool, int, float, str)):
        return obj

    if hasattr(obj, "to_dict"):
        return obj.to_dict()

    if is_dataclass(obj):
        return {f.name: safe_to_primitive(getattr(obj, f.name), _depth + 1, _max_depth) for f in fields(obj)}

    if isinstance(obj, dict):
        return {str(safe_to_primitive(k)): safe_to_primitive(v, _depth + 1, _max_depth) for k, v in obj.items()}

    if isinstance(obj, (list, tuple, set)):
        return [safe_to_primitive(v, _depth + 1, _max_depth) for v in obj]

    return str(obj)

# =============================================================================
# Config dataclasses
# =============================================================================

@dataclass
class RunConfig:
    seed: int
    quarters: int = 120
    nickname: str = "Autopilot"
    debug: bool = False
    log_level: str = "normal"  # minimal|normal|debug|insane
    output_dir: str = "runs"
    config_path: Optional[str] = None
    write_json: bool = True
    pretty_print: bool = False
    flush_each_quarter: bool = True
    risk_appetite: Optional[str] = None
    crisis_response: Optional[str] = None


# =============================================================================
# Run folder
# =============================================================================

class RunOutput:
    """Everything one run writes lives under run_dir."""

    def __init__(self, run_dir: Path, pretty: bool, json_enabled: bool = True):
        self.run_dir = run_dir
        self.pretty = pretty
        self.json_enabled = json_enabled
        self.timeline_path = run_dir / "timeline.log"
        self.errors_path = run_dir / "errors.log"
        self._timeline = None

    def open(self) -> None:
        self.run_dir.mkdir(parents=True, exist_ok=True)
        self._timeline = open(self.timeline_path, "a", encoding="utf-8")

    def close(self) -> None:
        if self._timeline is not None:
            self._timeline.close()
            self._timeline = None

    def timeline(self, line: str) -> None:
        if self._timeline is None:
            self.open()
        self._timeline.write(line + "\n")

    def flush(self) -> None:
        if self._timeline is not None:
            self._timeline.flush()

    def write_json(self, filename: str, data: Any, always: bool = False) -> None:
        """Quarter and score artifacts honour --no_json; crash dumps pass always=True."""
        if not (self.json_enabled or always):
            return
        text = stable_json_dumps(safe_to_primitive(data), pretty=self.pretty)
        (self.run_dir / filename).write_text(text, encoding="utf-8")

    def write_text(self, filename: str, text: str) -> None:
        (self.run_dir / filename).write_text(text, encoding="utf-8")

    def append_error(self, text: str) -> None:
        with open(self.errors_path, "a", encoding="utf-8") as f:
            f.write(text + "\n")

# =============================================================================
# Leveled timeline logger
# =============================================================================

LEVEL_RANK = {level: rank for rank, level in enumerate(LOG_LEVELS)}
RING_LINES = 200


class RunnerLogger:
    """Filters by level, mirrors to stdout and keeps the last RING_LINES lines for crash dumps."""

    def __init__(self, out: RunOutput, log_level: str, flush_each_quarter: bool):
        self.out = out
        self.max_rank = LEVEL_RANK.get(log_level, LEVEL_RANK["normal"])
        self.flush_each_quarter = flush_each_quarter
        self.ring: deque = deque(maxlen=RING_LINES)

    def emit(self, line: str, level: str = "normal") -> None:
        if LEVEL_RANK.get(level, LEVEL_RANK["normal"]) > self.max_rank:
            return
        self.ring.append(line)
        self.out.timeline(line)
        print(line)

    def end_quarter(self) -> None:
        if self.flush_each_quarter:
            self.out.flush()

    def last_lines(self) -> List[str]:
        return list(self.ring)

# =============================================================================
# Autopilot policy
# =============================================================================

@dataclass
class AutopilotPolicy:
    """
    Plays the player's side between quarter closes. Deterministic: it only
    reads engine state, so the run replays exactly from the engine seed.
    """
    max_staff: int = 24
    hires_per_quarter: int = 2
    payroll_reserve_quarters: float = 4.0
    low_morale: int = -20
    low_capital: float = 100000.0
    loan_cooldown_quarters: int = 4
    marketing_capital: float = 400000.0
    last_loan_quarter: int = -999

    def act(self, engine: GameEngine) -> List[str]:
        actions: List[str] = []
        company = engine.company

        # 1. Keep the lights on
        if company.capital < self.low_capital and engine.current_quarter - self.last_loan_quarter >= self.loan_cooldown_quarters:
            result = engine.execute_decision(ExecutiveDecision.EMERGENCY_LOAN)
            self.last_loan_quarter = engine.current_quarter
            actions.append(f"LOAN: {result.message}")

        # 2. Hire the most productive candidates we can carry
        hires = 0
        for candidate in sorted(engine.candidate_pool(), key=lambda c: c.productivity, reverse=True):
            if hires >= self.hires_per_quarter or len(engine.registry.all_employees()) >= self.max_staff:
                break
            payroll = (
                engine.registry.quarterly_cost()
                + sum(e.quarterly_cost() for e in engine.registry.unassigned)
                + candidate.quarterly_cost()
            )
            if company.capital < payroll * self.payroll_reserve_quarters:
                break
            engine.hire(candidate.id)
            hires += 1
            actions.append(
                f"HIRE: {candidate.name} ({candidate.overall_skill} {candidate.specialization}, "
                f"prod {candidate.productivity}, ${candidate.salary:,.0f}/mo)"
            )

        # 3. Everyone works in their specialization
        for employee in list(engine.registry.unassigned):
            engine.assign(employee.id, employee.specialization)
            actions.append(f"ASSIGN: {employee.name} -> {employee.specialization}")

        # 4. Morale rescue
        if company.morale < self.low_morale:
            result = engine.execute_decision(ExecutiveDecision.BONUS_SMALL)
            actions.append(f"BONUS: {result.message}")

        # 5. Growth push when cash is comfortable
        if company.capital > self.marketing_capital:
            result = engine.run_initiative(QuarterlyInitiative.MARKETING)
            actions.append(f"INITIATIVE: {result.message}")

        return actions

# =============================================================================
# Quarter printing
# =============================================================================

def print_quarter(logger: RunnerLogger, outcome: QuarterOutcome, actions: List[str]) -> None:
    r = outcome.report
    logger.emit(
        f"[{quarter_label(outcome.quarter)}] Capital ${r.ending_capital:,.0f} | "
        f"Revenue ${r.revenue:,.0f} | Expenses ${r.expenses:,.0f} | "
        f"Share change {r.market_share_change:+.2f} | Staff {r.employee_count}",
        "normal",
    )
    for a in actions:
        logger.emit(f"    > {a}", "insane")
    for e in outcome.events:
        logger.emit(f"    * {e}", "debug")

# =============================================================================
# Main runner orchestration
# =============================================================================

def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Corporate Chaos - Autopilot Runner")
    p.add_argument("--seed", type=int, default=None, help="Master seed (default: time_ns).")
    p.add_argument("--quarters", type=int, default=120, help="Maximum quarters to simulate.")
    p.add_argument("--nickname", type=str, default="Autopilot", help="Player nickname for run history / high scores.")
    p.add_argument("--output_dir", type=str, default="runs", help="Output directory root.")
    p.add_argument("--config", type=str, default=None, help="Path to a config.json (created with defaults if missing).")
    p.add_argument("--log_level", type=str, default="normal", choices=LOG_LEVELS, help="Logging verbosity.")
    p.add_argument("--no_json", action="store_true", help="Disable JSON outputs.")
    p.add_argument("--pretty", action="store_true", help="Pretty-print JSON.")
    p.add_argument("--debug", action="store_true", help="Enable engine debug dumps.")
    p.add_argument("--risk_appetite", type=str, default=None, choices=[v.value for v in RiskAppetite],
                   help="Override the starting risk appetite.")
    p.add_argument("--crisis_response", type=str, default=None, choices=[v.value for v in CrisisResponse],
                   help="Override the starting crisis response.")
    return p


def main(argv: Optional[List[str]] = None) -> int:
    argv = argv if argv is not None else sys.argv[1:]
    parser = build_arg_parser()
    args = parser.parse_args(argv)

    seed = args.seed if args.seed is not None else time.time_ns()
    run_cfg = RunConfig(
        seed=seed,
        quarters=int(args.quarters),
        nickname=str(args.nickname),
        debug=bool(args.debug),
        log_level=str(args.log_level),
        output_dir=str(args.output_dir),
        config_path=args.config,
        write_json=not bool(args.no_json),
        pretty_print=bool(args.pretty),
        flush_each_quarter=True,
        risk_appetite=args.risk_appetite,
        crisis_response=args.crisis_response,
    )

    game_cfg = load_config(run_cfg.config_path) if run_cfg.config_path else GameConfig()

    # output folder
    run_dir = Path(run_cfg.output_dir) / f"{now_utc_compact()}_{run_cfg.seed}"
    out = RunOutput(run_dir=run_dir, pretty=run_cfg.pretty_print, json_enabled=run_cfg.write_json)
    out.open()
    logger = RunnerLogger(out=out, log_level=run_cfg.log_level, flush_each_quarter=run_cfg.flush_each_quarter)

    # Save config upfront
    out.write_json("run_config.json", {"run": run_cfg, "game": game_cfg})

    store = GameStore(Path(run_cfg.output_dir) / STORE_FOLDER)
    engine_seed = split_seed(run_cfg.seed, "engine")
    engine: Optional[GameEngine] = None
    policy = AutopilotPolicy()

    logger.emit("=================================================", "minimal")
    logger.emit(f"CORPORATE CHAOS AUTOPILOT - {_dt.datetime.now(_dt.timezone.utc).isoformat(timespec='seconds')}", "minimal")
    logger.emit("=================================================", "minimal")
    logger.emit(f"Seed     : {run_cfg.seed} (engine {engine_seed})", "normal")
    logger.emit(f"Quarters : {run_cfg.quarters}", "normal")
    logger.emit(f"Player   : {run_cfg.nickname}", "normal")
    logger.emit("-------------------------------------------------", "normal")

    # Core loop with crash safety
    last_context: Dict[str, Any] = {"phase": "init", "quarter": None}

    try:
        engine = GameEngine(seed=engine_seed, config=game_cfg, store=store, debug=run_cfg.debug)
        engine.new_game(run_cfg.nickname)

        knobs = {}
        if run_cfg.risk_appetite:
            knobs["risk_appetite"] = run_cfg.risk_appetite
        if run_cfg.crisis_response:
            knobs["crisis_response"] = run_cfg.crisis_response
        if knobs:
            engine.set_knobs(**knobs)
            logger.emit(f"Knobs    : {knobs}", "normal")

        final: Optional[QuarterOutcome] = None

        for _ in range(run_cfg.quarters):
            last_context["quarter"] = engine.current_quarter

            last_context["phase"] = "autopilot"
            actions = policy.act(engine)

            last_context["phase"] = "process_quarter"
            outcome = engine.process_quarter()
            print_quarter(logger, outcome, actions)

            if out.json_enabled:
                out.write_json(
                    f"quarter_{outcome.quarter}.json",
                    {
                        "quarter": outcome.quarter,
                        "report": outcome.report,
                        "events": outcome.events,
                        "actions": actions,
                        "state": engine.state_snapshot() if not outcome.ended else None,
                        "end_reason": outcome.end_reason,
                    },
                )

            logger.end_quarter()

            if outcome.ended:
                final = outcome
                break

        last_context["phase"] = "final"
        logger.emit("-------------------------------------------------", "minimal")
        if final is not None and final.final_score is not None:
            score = final.final_score
            logger.emit(f"GAME OVER : {final.end_reason}", "minimal")
            logger.emit(f"Score     : {score.score:,} (quarters played {score.quarters_played})", "minimal")
            for k, v in score.breakdown().items():
                logger.emit(f"  {k:<18} {v:,.2f}", "debug")

            rank: Optional[int] = None
            if engine.leaderboard.is_high_score(score.score):
                try:
                    rank = engine.record_high_score(score, run_cfg.nickname)
                    logger.emit(f"High score! Ranked #{rank}", "minimal")
                except ValueError as e:
                    logger.emit(f"[WARN] High score not recorded: {e}", "minimal")

            out.write_json(
                "final_score.json",
                {
                    "ended": True,
                    "end_reason": final.end_reason,
                    "score": score,
                    "breakdown": score.breakdown(),
                    "run_id": final.run_record.run_id if final.run_record else None,
                    "leaderboard_rank": rank,
                },
            )
        else:
            running = engine.score
            running.quarters_played = engine.current_quarter - 1
            logger.emit(f"Run stopped after {run_cfg.quarters} quarters; game still active.", "minimal")
            logger.emit(f"Running score: {running.calculate_score():,}", "minimal")
            out.write_json(
                "final_score.json",
                {
                    "ended": False,
                    "end_reason": None,
                    "score": running,
                    "breakdown": running.breakdown(),
                    "run_id": engine.run.run_id,
                    "leaderboard_rank": None,
                },
            )

        logger.emit("Simulation finished successfully.", "normal")
        return 0

    except Exception as e:
        # Never crash silently
        tb = traceback.format_exc()
        logger.emit("=================================================", "minimal")
        logger.emit("[FATAL] Simulation crashed.", "minimal")
        logger.emit(f"Seed: {run_cfg.seed}", "minimal")
        logger.emit(f"Last context: {last_context}", "minimal")
        logger.emit(f"Error: {type(e).__name__}: {e}", "minimal")
        logger.emit("=================================================", "minimal")

        out.append_error(tb)

        crash = {
            "seed": run_cfg.seed,
            "engine_seed": engine_seed,
            "last_context": last_context,
            "error": f"{type(e).__name__}: {e}",
            "traceback": tb.splitlines(),
            "engine_state": engine.state_snapshot() if engine is not None else None,
        }
        try:
            out.write_json("crash_snapshot.json", crash, always=True)
            out.write_text("last_200_lines.log", "\n".join(logger.last_lines()))
        except (OSError, TypeError, ValueError) as dump_error:
            out.append_error(f"crash dump failed: {type(dump_error).__name__}: {dump_error}")

        print(f"[FATAL] Crash details written to: {out.run_dir}")
        return 1

    finally:
        out.close()


if __name__ == "__main__":
    raise SystemExit(main())
