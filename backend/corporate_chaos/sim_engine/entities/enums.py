# backend/corporate_chaos/sim_engine/entities/enums.py
"""
Corporate Chaos - Enums Ontology

Canonical discrete classifications used across the sim engine.
These enums are:
- stable (values must not change once introduced)
- serializable (stored as strings in JSON saves)
- human-readable (logs/debug)
- round-trippable (Enum(value) works)

Usage guideline:
- In-memory: store enum instances (e.g., Department.MARKETING)
- Persisted: store enum.value (string)
- Load: Department(json_value)

Ordinals (skill rank, risk rank) are exposed through `.rank` because the
salary and event formulas need them. Everything else here is meaning, not math.
"""

from __future__ import annotations

from enum import Enum


class StrEnum(str, Enum):
    def __str__(self) -> str:
        return self.value


# ============================================================
# ORGANIZATION
# ============================================================

class Department(StrEnum):
    MARKETING = "Marketing"
    OPERATIONS = "Operations"
    FINANCE = "Finance"
    HR = "HR"
    IT = "IT"
    RESEARCH = "Research"


class SkillLevel(StrEnum):
    TRAINEE = "Trainee"
    JUNIOR = "Junior"
    MID = "Mid"
    SENIOR = "Senior"
    EXPERT = "Expert"

    @property
    def rank(self) -> int:
        return _SKILL_RANKS[self]


class RiskLevel(StrEnum):
    VERY_LOW = "VeryLow"
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    VERY_HIGH = "VeryHigh"

    @property
    def rank(self) -> int:
        return _RISK_RANKS[self]

    @classmethod
    def from_rank(cls, rank: int) -> "RiskLevel":
        return list(cls)[int(rank) - 1]


_SKILL_RANKS = {level: i + 1 for i, level in enumerate(SkillLevel)}
_RISK_RANKS = {level: i + 1 for i, level in enumerate(RiskLevel)}


# ============================================================
# CONTROL KNOBS
# ============================================================

class RiskAppetite(StrEnum):
    CONSERVATIVE = "Conservative"
    BALANCED = "Balanced"
    AGGRESSIVE = "Aggressive"


class InvestmentLevel(StrEnum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class WorkforceFocus(StrEnum):
    WELLBEING = "Wellbeing"
    EFFICIENCY = "Efficiency"


class MarketStrategy(StrEnum):
    COST = "Cost"
    QUALITY = "Quality"
    INNOVATION = "Innovation"


class CrisisResponse(StrEnum):
    IMMEDIATE = "Immediate"
    CONTROL = "Control"
    ABSORB = "Absorb"


class EmployeeManagement(StrEnum):
    LOW = "Low"
    STANDARD = "Standard"
    HIGH = "High"


# ============================================================
# CHAOS / GAME FLOW
# ============================================================

class CrisisLevel(StrEnum):
    NONE = "None"
    WARNING = "Warning"
    CRITICAL = "Critical"
    CATASTROPHIC = "Catastrophic"


class GameStatus(StrEnum):
    ACTIVE = "Active"
    ENDED = "Ended"


class ExecutiveDecision(StrEnum):
    COST_CUTTING_LIGHT = "CostCuttingLight"
    COST_CUTTING_MEDIUM = "CostCuttingMedium"
    COST_CUTTING_HEAVY = "CostCuttingHeavy"
    BONUS_SMALL = "BonusSmall"
    BONUS_LARGE = "BonusLarge"
    EMERGENCY_LOAN = "EmergencyLoan"
    MARKETING_LOCAL = "MarketingLocal"
    MARKETING_NATIONAL = "MarketingNational"
    RETREAT_WEEKEND = "RetreatWeekend"
    RETREAT_WEEK = "RetreatWeek"
    RD_INVESTMENT = "RdInvestment"
    CRISIS_MANAGEMENT = "CrisisManagement"


class QuarterlyInitiative(StrEnum):
    MARKETING = "marketing"
    OPERATIONS = "operations"
    FINANCE = "finance"
