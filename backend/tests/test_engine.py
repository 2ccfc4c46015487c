"""
GameEngine tests: quarter loop, end conditions, hiring flow, decisions, save/load.

Run with:
    pytest backend/tests/test_engine.py -v
"""

import pytest

from corporate_chaos.sim_engine.engine import (
    AUTOSAVE_NAME,
    END_BANKRUPTCY,
    END_NO_EMPLOYEES,
    END_RETIREMENT,
    END_VICTORY,
    MAX_QUARTERS,
    GameEngine,
    check_end_condition,
    quarter_label,
)
from corporate_chaos.sim_engine.entities.company import Company
from corporate_chaos.sim_engine.entities.enums import GameStatus, RiskAppetite
from corporate_chaos.sim_engine.generation.candidate_generator import MAX_REFRESHES_PER_QUARTER
from corporate_chaos.sim_engine.persistence.config import GameConfig
from corporate_chaos.sim_engine.persistence.store import GameStore
from corporate_chaos.sim_engine.scoring.game_score import GameScore


def staff_everyone(engine):
    for employee in list(engine.registry.unassigned):
        engine.assign(employee.id, employee.specialization)


def silence_chaos(engine, monkeypatch):
    monkeypatch.setattr(engine.chaos, "apply_quarterly_chaos", lambda company, registry: [])


@pytest.fixture
def engine():
    e = GameEngine(seed=1234)
    staff_everyone(e)
    return e


# ============================================================================
# End conditions
# ============================================================================

class TestEndConditions:
    def test_priority_order(self):
        assert check_end_condition(Company(capital=-1.0, market_share=80.0), 200) == END_BANKRUPTCY
        assert check_end_condition(Company(capital=1.0, market_share=80.0), 200) == END_VICTORY
        assert check_end_condition(Company(employee_count=0), 200) == END_NO_EMPLOYEES
        assert check_end_condition(Company(employee_count=3), MAX_QUARTERS + 1) == END_RETIREMENT
        assert check_end_condition(Company(employee_count=3), MAX_QUARTERS) is None

    def test_zero_capital_is_bankrupt(self):
        assert check_end_condition(Company(capital=0.0, employee_count=3), 2) == END_BANKRUPTCY

    def test_victory_threshold_inclusive(self):
        assert check_end_condition(Company(market_share=70.0, employee_count=3), 2) == END_VICTORY

    def test_quarter_labels(self):
        assert quarter_label(1) == "Y1 Q1 (1/120)"
        assert quarter_label(6) == "Y2 Q2 (6/120)"
        assert quarter_label(120) == "Y30 Q4 (120/120)"


# ============================================================================
# New game
# ============================================================================

class TestNewGame:
    def test_starting_state(self):
        e = GameEngine(seed=5)

        assert e.current_quarter == 1
        assert e.status == GameStatus.ACTIVE
        assert e.company.capital == 500000.0
        assert len(e.registry.unassigned) == 5
        assert e.registry.employee_count() == 0
        assert len(e.candidate_pool()) >= 3
        assert e.game_log[0].startswith("Welcome to Corporate Chaos")

    def test_config_drives_start(self):
        e = GameEngine(seed=5, config=GameConfig(default_starting_capital=42000.0, default_starting_employees=0))

        assert e.company.capital == 42000.0
        assert e.registry.unassigned == []

    def test_starting_position_is_a_peak(self):
        e = GameEngine(seed=5)

        assert e.score.peak_capital == 500000.0
        assert e.score.peak_market_share == 5.0
        assert e.score.peak_quarter == 1

    def test_losing_first_quarter_keeps_starting_capital_peak(self, engine, monkeypatch):
        silence_chaos(engine, monkeypatch)
        engine.company.market_share = 0.5

        engine.process_quarter()

        assert engine.company.capital < 500000.0
        assert engine.score.peak_capital == 500000.0
        assert engine.score.peak_quarter == 1

    def test_seed_is_chosen_when_missing(self):
        e = GameEngine()

        assert 1 <= e.seed < 10**18


# ============================================================================
# Quarter loop
# ============================================================================

class TestProcessQuarter:
    def test_quiet_quarter_advances(self, engine, monkeypatch):
        silence_chaos(engine, monkeypatch)

        outcome = engine.process_quarter()

        assert not outcome.ended
        assert outcome.quarter == 1
        assert outcome.events == []
        assert engine.current_quarter == 2
        assert engine.company.employee_count == 5
        assert outcome.report.expenses == pytest.approx(engine.registry.quarterly_cost() + 50000.0)
        assert outcome.report.ending_capital == engine.company.capital
        assert engine.quarterly_reports == [outcome.report]
        assert engine.score.quarters_played == 1
        assert engine.game_log[-1].startswith("Quarter 2 begins!")

    def test_unstaffed_company_fails(self, monkeypatch):
        e = GameEngine(seed=5)
        silence_chaos(e, monkeypatch)

        outcome = e.process_quarter()

        assert outcome.end_reason == END_NO_EMPLOYEES

    def test_bankruptcy(self, engine, monkeypatch):
        silence_chaos(engine, monkeypatch)
        engine.company.capital = -1e9

        outcome = engine.process_quarter()

        assert outcome.end_reason == END_BANKRUPTCY
        assert outcome.final_score.final_capital == 0.0
        assert outcome.run_record.end_reason == END_BANKRUPTCY

    def test_victory(self, engine, monkeypatch):
        silence_chaos(engine, monkeypatch)
        engine.company.market_share = 75.0

        outcome = engine.process_quarter()

        assert outcome.end_reason == END_VICTORY
        assert outcome.final_score.peak_market_share >= 70.0
        assert outcome.final_score.bonus_multiplier() >= 2.0

    def test_retirement_after_last_quarter(self, engine, monkeypatch):
        silence_chaos(engine, monkeypatch)
        engine.current_quarter = MAX_QUARTERS

        outcome = engine.process_quarter()

        assert outcome.ended
        assert outcome.end_reason == END_RETIREMENT
        assert outcome.final_score.quarters_played == MAX_QUARTERS
        assert outcome.final_score.score > 0
        assert outcome.run_record.final_score == outcome.final_score.score
        assert engine.completed_runs == [outcome.run_record]
        assert engine.last_final_score is outcome.final_score

        # reset to a fresh game
        assert engine.current_quarter == 1
        assert engine.status == GameStatus.ACTIVE
        assert engine.quarterly_reports == []
        assert engine.score.nickname == "Player"

    def test_sim_quarters_stops_at_game_end(self, monkeypatch):
        e = GameEngine(seed=5)
        silence_chaos(e, monkeypatch)

        outcomes = e.sim_quarters(10)

        assert len(outcomes) == 1
        assert outcomes[0].ended

    def test_same_seed_same_run(self):
        runs = []
        for _ in range(2):
            e = GameEngine(seed=77)
            staff_everyone(e)
            outcomes = e.sim_quarters(8)
            runs.append([(o.events, o.end_reason, o.report.ending_capital) for o in outcomes])

        assert runs[0] == runs[1]

    def test_ended_game_rejects_actions(self, engine):
        engine.status = GameStatus.ENDED

        with pytest.raises(RuntimeError):
            engine.process_quarter()
        with pytest.raises(RuntimeError):
            engine.refresh_candidates()


# ============================================================================
# Hiring
# ============================================================================

class TestHiring:
    def test_hire_moves_candidate_to_pool(self, engine):
        candidate = engine.candidate_pool()[0]

        hired = engine.hire(candidate.id)

        assert hired is candidate
        assert hired in engine.registry.unassigned
        assert hired.quarter_hired == 1
        assert candidate.id not in {c.id for c in engine.candidate_pool()}

    def test_pass_on_discards(self, engine):
        candidate = engine.candidate_pool()[0]

        engine.pass_on(candidate.id)

        assert candidate not in engine.candidate_pool()
        assert candidate not in engine.registry.all_employees()

    def test_unknown_candidate(self, engine):
        with pytest.raises(KeyError):
            engine.hire("not-a-candidate")

    def test_assign_accepts_department_name(self, engine):
        hired = engine.hire(engine.candidate_pool()[0].id)

        engine.assign(hired.id, "IT")

        assert hired.assigned_department.value == "IT"
        assert engine.company.employee_count == 6

    def test_release_updates_count(self, engine):
        employee = engine.registry.assigned_employees()[0]

        engine.release(employee.id)

        assert engine.company.employee_count == 4

    def test_refresh_limit_resets_next_quarter(self, engine, monkeypatch):
        silence_chaos(engine, monkeypatch)

        results = [engine.refresh_candidates() for _ in range(MAX_REFRESHES_PER_QUARTER + 1)]

        assert results[-1] is False
        assert all(results[:-1])
        assert "Refreshes: 0/5" in engine.hiring_summary()

        engine.process_quarter()

        assert "Refreshes: 5/5" in engine.hiring_summary()
        assert engine.refresh_candidates() is True


# ============================================================================
# Decisions and knobs
# ============================================================================

class TestDecisions:
    def test_rejected_decision_is_not_logged(self, engine):
        engine.company.capital = 1000.0
        log_size = len(engine.game_log)

        result = engine.execute_decision("BonusSmall")

        assert not result.accepted
        assert len(engine.game_log) == log_size
        assert engine.current_quarter_events == []

    def test_accepted_decision_is_logged(self, engine):
        result = engine.execute_decision("EmergencyLoan")

        assert result.accepted
        assert engine.game_log[-1] == result.message
        assert engine.current_quarter_events == [result.message]

    def test_budget_accepts_names(self, engine):
        result = engine.reallocate_budget(
            {"Marketing": 20, "Operations": 20, "Finance": 15, "HR": 15, "IT": 15, "Research": 15}
        )

        assert result.accepted

    def test_initiative_by_name(self, engine):
        assert engine.run_initiative("finance").accepted

    def test_set_knobs(self, engine):
        engine.set_knobs(risk_appetite="Aggressive")

        assert engine.company.risk_appetite == RiskAppetite.AGGRESSIVE

    def test_set_unknown_knob(self, engine):
        with pytest.raises(ValueError):
            engine.set_knobs(coffee_budget="High")

    def test_set_bad_knob_value(self, engine):
        with pytest.raises(ValueError):
            engine.set_knobs(risk_appetite="Reckless")


class TestHighScores:
    def test_invalid_nickname(self, engine):
        with pytest.raises(ValueError):
            engine.record_high_score(GameScore(quarters_played=3), "x")

    def test_recorded_and_persisted(self, tmp_path):
        store = GameStore(tmp_path)
        e = GameEngine(seed=3, store=store)

        rank = e.record_high_score(GameScore(quarters_played=3), "  Ada ")

        assert rank == 1
        assert e.leaderboard.scores[0].nickname == "Ada"
        assert [s.nickname for s in store.load_leaderboard().scores] == ["Ada"]


# ============================================================================
# Save / load
# ============================================================================

class TestSaveLoad:
    def test_restore_replays_the_same_future(self):
        original = GameEngine(seed=2024)
        staff_everyone(original)
        original.sim_quarters(2)
        save = original.snapshot("checkpoint")

        expected = [(o.events, o.end_reason, o.report.ending_capital) for o in original.sim_quarters(4)]

        other = GameEngine(seed=1)
        other.restore(save)
        actual = [(o.events, o.end_reason, o.report.ending_capital) for o in other.sim_quarters(4)]

        assert actual == expected

    def test_snapshot_is_a_copy(self, engine):
        save = engine.snapshot("copy")
        engine.company.capital = 1.0

        assert save.company.capital == 500000.0
        assert save.current_quarter == 1
        assert save.rng_state is not None

    def test_autosave_and_load(self, tmp_path, monkeypatch):
        store = GameStore(tmp_path)
        e = GameEngine(seed=9, store=store)
        staff_everyone(e)
        silence_chaos(e, monkeypatch)

        outcome = e.process_quarter()

        assert outcome.save_file is not None
        assert outcome.save_file.startswith(AUTOSAVE_NAME + "_")
        assert outcome.save_file in store.list_saves()

        capital = e.company.capital
        e.company.capital = 5.0
        assert e.load_game(outcome.save_file) is True
        assert e.company.capital == capital
        assert e.current_quarter == 2
        assert e.company.employee_count == 5

    def test_only_latest_autosave_is_kept(self, tmp_path, monkeypatch):
        store = GameStore(tmp_path)
        e = GameEngine(seed=9, store=store)
        staff_everyone(e)
        silence_chaos(e, monkeypatch)
        manual = store.save_game(e.snapshot("manual"))

        stamps = iter(["2026-03-04T05:06:07", "2026-03-04T05:06:08", "2026-03-04T05:06:09"])
        take_snapshot = e.snapshot

        def stamped(save_name):
            save = take_snapshot(save_name)
            save.save_date = next(stamps)
            return save

        monkeypatch.setattr(e, "snapshot", stamped)

        outcomes = e.sim_quarters(3)

        autosaves = [name for name in store.list_saves() if name.startswith(AUTOSAVE_NAME + "_")]
        assert autosaves == ["autosave_20260304_050609.json"]
        assert outcomes[-1].save_file == autosaves[0]
        assert e.last_autosave == autosaves[0]
        assert manual in store.list_saves()

    def test_autosave_disabled(self, tmp_path, monkeypatch):
        store = GameStore(tmp_path)
        e = GameEngine(seed=9, store=store, config=GameConfig(auto_save_enabled=False))
        staff_everyone(e)
        silence_chaos(e, monkeypatch)

        assert e.process_quarter().save_file is None
        assert store.list_saves() == []

    def test_finished_run_is_stored(self, tmp_path, monkeypatch):
        store = GameStore(tmp_path)
        e = GameEngine(seed=9, store=store)
        silence_chaos(e, monkeypatch)

        outcome = e.process_quarter()

        assert [r.run_id for r in store.load_runs_history()] == [outcome.run_record.run_id]

    def test_store_required(self, engine):
        with pytest.raises(RuntimeError):
            engine.save_game("x")
        with pytest.raises(RuntimeError):
            engine.load_game("x.json")

    def test_missing_save_file(self, tmp_path):
        e = GameEngine(seed=9, store=GameStore(tmp_path))

        assert e.load_game("nothing.json") is False

    def test_state_snapshot(self, engine):
        state = engine.state_snapshot()

        assert state["quarter"] == 1
        assert state["status"] == "Active"
        assert set(state["departments"]) == {"Marketing", "Operations", "Finance", "HR", "IT", "Research"}
        assert state["crises"] == "No active crises"
