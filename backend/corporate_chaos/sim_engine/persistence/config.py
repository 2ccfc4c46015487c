"""
Game configuration (config.json) and nickname rules.

Missing file -> defaults are written and returned.
Malformed file -> defaults are returned and the file is left alone.
Unknown keys are ignored so older/newer config files still load.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union
import json


CONFIG_FILE = "config.json"


@dataclass
class GameConfig:
    max_high_scores: int = 10
    default_starting_capital: float = 500000.0
    default_starting_employees: int = 5
    score_multiplier: float = 1.0  # stored for the UI, not used by the score formula
    auto_save_enabled: bool = True
    show_score_calculation: bool = True
    minimum_nickname_length: int = 2
    maximum_nickname_length: int = 20

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GameConfig":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


def load_config(path: Union[str, Path] = CONFIG_FILE) -> GameConfig:
    p = Path(path)
    if not p.exists():
        config = GameConfig()
        save_config(config, p)
        return config

    try:
        raw = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return GameConfig()
    if not isinstance(raw, dict):
        return GameConfig()
    return GameConfig.from_dict(raw)


def save_config(config: GameConfig, path: Union[str, Path] = CONFIG_FILE) -> bool:
    p = Path(path)
    try:
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(json.dumps(config.to_dict(), indent=2, sort_keys=True), encoding="utf-8")
    except OSError:
        return False
    return True


def validate_nickname(nickname: str, config: Optional[GameConfig] = None) -> Optional[str]:
    """
    Returns an error message, or None when the nickname is acceptable.
    Allowed characters: letters, digits, space, underscore, hyphen.
    """
    cfg = config or GameConfig()
    name = (nickname or "").strip()

    if not name:
        return "Please enter a nickname."
    if len(name) < cfg.minimum_nickname_length:
        return f"Nickname must be at least {cfg.minimum_nickname_length} characters long."
    if len(name) > cfg.maximum_nickname_length:
        return f"Nickname must be no more than {cfg.maximum_nickname_length} characters long."
    if not all(ch.isalnum() or ch in " _-" for ch in name):
        return "Nickname can only contain letters, numbers, spaces, underscores, and hyphens."
    return None
