from __future__ import annotations

from typing import Any, Dict, List
import datetime as _dt

from corporate_chaos.sim_engine.scoring.game_score import GameScore


DEFAULT_MAX_ENTRIES = 10


class Leaderboard:
    """
    Top-N finalized scores, highest first. Ties keep insertion order
    (Python's sort is stable).
    """

    def __init__(self, max_entries: int = DEFAULT_MAX_ENTRIES, scores: List[GameScore] | None = None):
        if max_entries < 1:
            raise ValueError("Leaderboard must keep at least one entry.")
        self.max_entries = int(max_entries)
        self.scores: List[GameScore] = []
        self.last_updated: str = ""
        for s in scores or []:
            self.scores.append(s)
        self._trim()

    def _trim(self) -> None:
        self.scores = sorted(self.scores, key=lambda s: s.score, reverse=True)[: self.max_entries]

    def add(self, score: GameScore) -> int:
        score.calculate_score()
        if not score.date_achieved:
            score.date_achieved = _dt.datetime.now().isoformat(timespec="seconds")

        self.scores.append(score)
        self._trim()
        self.last_updated = _dt.datetime.now().isoformat(timespec="seconds")
        return self.player_rank(score.nickname)

    def top(self, count: int = DEFAULT_MAX_ENTRIES) -> List[GameScore]:
        return self.scores[:count]

    def is_high_score(self, score: int) -> bool:
        if len(self.scores) < self.max_entries:
            return True
        return score > min(s.score for s in self.scores)

    def player_rank(self, nickname: str) -> int:
        """1-based rank of the player's best entry, -1 if not on the board."""
        wanted = nickname.casefold()
        mine = [s.score for s in self.scores if s.nickname.casefold() == wanted]
        if not mine:
            return -1
        best = max(mine)
        for i, s in enumerate(self.scores):
            if s.score == best:
                return i + 1
        return -1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "scores": [s.to_dict() for s in self.scores],
            "last_updated": self.last_updated,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], max_entries: int = DEFAULT_MAX_ENTRIES) -> "Leaderboard":
        board = cls(max_entries=max_entries, scores=[GameScore.from_dict(s) for s in data.get("scores", [])])
        board.last_updated = str(data.get("last_updated", ""))
        return board
