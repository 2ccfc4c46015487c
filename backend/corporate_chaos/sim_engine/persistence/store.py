"""
JSON file store for saves, finished runs and the high-score table.

Layout under the store root:
  sv_game/<save>_<YYYYMMDD_HHMMSS>.json
  game_runs/run_<run_id>.json
  runs_history.json      (latest 50 runs, newest first)
  highscores.json
  errors.log             (append-only; one entry per failed operation)

The store never raises on I/O or decode problems: failures are written to
errors.log and reported as False / None / empty results.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, List, Optional, Union
import datetime as _dt
import json
import traceback

from corporate_chaos.sim_engine.persistence.records import GameRunRecord, GameSave
from corporate_chaos.sim_engine.scoring.leaderboard import DEFAULT_MAX_ENTRIES, Leaderboard


SAVE_FOLDER = "sv_game"
RUNS_FOLDER = "game_runs"
RUNS_FILE = "runs_history.json"
HIGH_SCORES_FILE = "highscores.json"
ERRORS_FILE = "errors.log"

MAX_RUN_HISTORY = 50


def stable_json_dumps(obj: Any) -> str:
    return json.dumps(obj, sort_keys=True, indent=2, ensure_ascii=False)


class GameStore:
    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)
        self.saves_dir = self.root / SAVE_FOLDER
        self.runs_dir = self.root / RUNS_FOLDER
        self.runs_file = self.root / RUNS_FILE
        self.high_scores_file = self.root / HIGH_SCORES_FILE
        self.errors_path = self.root / ERRORS_FILE

        self.saves_dir.mkdir(parents=True, exist_ok=True)
        self.runs_dir.mkdir(parents=True, exist_ok=True)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def append_error(self, operation: str, exc: BaseException) -> None:
        stamp = _dt.datetime.now().isoformat(timespec="seconds")
        with open(self.errors_path, "a", encoding="utf-8") as f:
            f.write(f"[{stamp}] {operation}: {type(exc).__name__}: {exc}\n")
            f.write("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)))

    def _write(self, path: Path, data: Any) -> None:
        path.write_text(stable_json_dumps(data), encoding="utf-8")

    def _read(self, path: Path) -> Any:
        return json.loads(path.read_text(encoding="utf-8"))

    # ------------------------------------------------------------------
    # Saves
    # ------------------------------------------------------------------

    def save_game(self, save: GameSave) -> Optional[str]:
        """Writes the snapshot; returns its file name, or None on failure."""
        try:
            file_name = save.file_name()
            self._write(self.saves_dir / file_name, save.to_dict())
        except (OSError, TypeError, ValueError) as e:
            self.append_error(f"save_game({save.save_name})", e)
            return None
        return file_name

    def load_game(self, file_name: str) -> Optional[GameSave]:
        path = self.saves_dir / file_name
        if not path.exists():
            return None
        try:
            return GameSave.from_dict(self._read(path))
        except (OSError, ValueError, KeyError, TypeError) as e:
            self.append_error(f"load_game({file_name})", e)
            return None

    def list_saves(self) -> List[str]:
        try:
            files = [p for p in self.saves_dir.glob("*.json") if p.is_file()]
            files.sort(key=lambda p: p.stat().st_mtime, reverse=True)
        except OSError as e:
            self.append_error("list_saves", e)
            return []
        return [p.name for p in files]

    def delete_save(self, file_name: str) -> bool:
        path = self.saves_dir / file_name
        if not path.exists():
            return False
        try:
            path.unlink()
        except OSError as e:
            self.append_error(f"delete_save({file_name})", e)
            return False
        return True

    # ------------------------------------------------------------------
    # Run history
    # ------------------------------------------------------------------

    def save_run(self, record: GameRunRecord) -> bool:
        try:
            self._write(self.runs_dir / f"run_{record.run_id}.json", record.to_dict())

            history = self.load_runs_history()
            # newest first; same-second runs keep the latest in front
            history.insert(0, record)
            history.sort(key=lambda r: r.start_date, reverse=True)
            self._write(self.runs_file, [r.to_dict() for r in history[:MAX_RUN_HISTORY]])
        except (OSError, TypeError, ValueError) as e:
            self.append_error(f"save_run({record.run_id})", e)
            return False
        return True

    def load_runs_history(self) -> List[GameRunRecord]:
        if not self.runs_file.exists():
            return []
        try:
            return [GameRunRecord.from_dict(r) for r in self._read(self.runs_file)]
        except (OSError, ValueError, KeyError, TypeError) as e:
            self.append_error("load_runs_history", e)
            return []

    def load_run(self, run_id: str) -> Optional[GameRunRecord]:
        path = self.runs_dir / f"run_{run_id}.json"
        if not path.exists():
            return None
        try:
            return GameRunRecord.from_dict(self._read(path))
        except (OSError, ValueError, KeyError, TypeError) as e:
            self.append_error(f"load_run({run_id})", e)
            return None

    # ------------------------------------------------------------------
    # High scores
    # ------------------------------------------------------------------

    def load_leaderboard(self, max_entries: int = DEFAULT_MAX_ENTRIES) -> Leaderboard:
        if not self.high_scores_file.exists():
            return Leaderboard(max_entries=max_entries)
        try:
            return Leaderboard.from_dict(self._read(self.high_scores_file), max_entries=max_entries)
        except (OSError, ValueError, KeyError, TypeError) as e:
            self.append_error("load_leaderboard", e)
            return Leaderboard(max_entries=max_entries)

    def save_leaderboard(self, board: Leaderboard) -> bool:
        try:
            self._write(self.high_scores_file, board.to_dict())
        except (OSError, TypeError, ValueError) as e:
            self.append_error("save_leaderboard", e)
            return False
        return True
