# backend/corporate_chaos/sim_engine/entities/employee.py

from __future__ import annotations

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional
import random
import uuid

from corporate_chaos.sim_engine.entities.enums import Department, RiskLevel, SkillLevel
from corporate_chaos.sim_engine.generation.name_generator import generate_name
from corporate_chaos.sim_engine.generation.position_generator import generate_position


# ============================================================
# UTILITIES
# ============================================================

STAT_MIN = 0
STAT_MAX = 100

BASE_MONTHLY_SALARY = 3000.0
SPECIALIZATION_BONUS = 1.2

EARLY_GAME_LAST_QUARTER = 5
MID_GAME_LAST_QUARTER = 20


def clamp_stat(x: float) -> int:
    return int(max(STAT_MIN, min(STAT_MAX, x)))


def new_employee_id() -> str:
    return str(uuid.uuid4())


def seeded_employee_id(rng: random.Random) -> str:
    # ids follow the seed so replays produce identical saves
    return str(uuid.UUID(int=rng.getrandbits(128), version=4))


# ============================================================
# EMPLOYEE
# ============================================================

@dataclass
class Employee:
    name: str
    productivity: int
    risk_level: RiskLevel
    overall_skill: SkillLevel
    specialization: Department
    experience: int
    morale: int
    salary: float = 0.0
    id: str = field(default_factory=new_employee_id)
    assigned_department: Optional[Department] = None
    is_assigned: bool = False
    quarter_hired: int = 0
    position_description: str = ""
    skill_keywords: List[str] = field(default_factory=list)

    # --------------------------------------------------
    # Derived values
    # --------------------------------------------------

    def effective_productivity(self) -> float:
        bonus = SPECIALIZATION_BONUS if self.assigned_department == self.specialization else 1.0
        return self.productivity * (self.morale / 100.0) * bonus

    def quarterly_cost(self) -> float:
        return self.salary * 3

    def is_senior(self) -> bool:
        return self.overall_skill.rank >= SkillLevel.SENIOR.rank

    # --------------------------------------------------
    # Mutation (always clamped)
    # --------------------------------------------------

    def adjust_morale(self, delta: int) -> None:
        self.morale = clamp_stat(self.morale + delta)

    def adjust_productivity(self, delta: int) -> None:
        self.productivity = clamp_stat(self.productivity + delta)

    # --------------------------------------------------
    # Serialization
    # --------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["risk_level"] = self.risk_level.value
        d["overall_skill"] = self.overall_skill.value
        d["specialization"] = self.specialization.value
        d["assigned_department"] = self.assigned_department.value if self.assigned_department else None
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Employee":
        assigned = data.get("assigned_department")
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            productivity=int(data["productivity"]),
            salary=float(data["salary"]),
            risk_level=RiskLevel(data["risk_level"]),
            overall_skill=SkillLevel(data["overall_skill"]),
            specialization=Department(data["specialization"]),
            experience=int(data["experience"]),
            morale=int(data["morale"]),
            assigned_department=Department(assigned) if assigned else None,
            is_assigned=bool(data.get("is_assigned", False)),
            quarter_hired=int(data.get("quarter_hired", 0)),
            position_description=str(data.get("position_description", "")),
            skill_keywords=list(data.get("skill_keywords", [])),
        )


# ============================================================
# GENERATION
# ============================================================

def calculate_salary(skill: SkillLevel, experience: int, productivity: int) -> float:
    multiplier = 1 + skill.rank * 0.3 + experience * 0.1
    return float(round(BASE_MONTHLY_SALARY * multiplier * productivity / 100.0))


def apply_quarter_skill_tier(employee: Employee, current_quarter: int, rng: random.Random) -> None:
    """
    Early quarters are dominated by entry-level talent, later quarters open up
    Senior and Expert hires. Experience is re-rolled to fit the chosen tier.
    """
    roll = rng.random()

    if current_quarter <= EARLY_GAME_LAST_QUARTER:
        # 70% Trainee/Junior, 25% Mid, 5% Senior
        if roll < 0.70:
            employee.overall_skill = SkillLevel.TRAINEE if rng.random() < 0.6 else SkillLevel.JUNIOR
            employee.experience = rng.randrange(0, 3)
            employee.productivity = max(30, employee.productivity - rng.randrange(0, 20))
        elif roll < 0.95:
            employee.overall_skill = SkillLevel.MID
            employee.experience = rng.randrange(2, 6)
        else:
            employee.overall_skill = SkillLevel.SENIOR
            employee.experience = rng.randrange(5, 10)
            employee.productivity = min(95, employee.productivity + rng.randrange(0, 15))

    elif current_quarter <= MID_GAME_LAST_QUARTER:
        # 40% Trainee/Junior, 35% Mid, 20% Senior, 5% Expert
        if roll < 0.40:
            employee.overall_skill = SkillLevel.TRAINEE if rng.random() < 0.5 else SkillLevel.JUNIOR
            employee.experience = rng.randrange(0, 4)
        elif roll < 0.75:
            employee.overall_skill = SkillLevel.MID
            employee.experience = rng.randrange(2, 8)
        elif roll < 0.95:
            employee.overall_skill = SkillLevel.SENIOR
            employee.experience = rng.randrange(5, 12)
            employee.productivity = min(95, employee.productivity + rng.randrange(0, 10))
        else:
            employee.overall_skill = SkillLevel.EXPERT
            employee.experience = rng.randrange(8, 15)
            employee.productivity = min(98, employee.productivity + rng.randrange(5, 20))

    else:
        # 20% Trainee/Junior, 30% Mid, 35% Senior, 15% Expert
        if roll < 0.20:
            employee.overall_skill = SkillLevel.TRAINEE if rng.random() < 0.4 else SkillLevel.JUNIOR
            employee.experience = rng.randrange(0, 5)
        elif roll < 0.50:
            employee.overall_skill = SkillLevel.MID
            employee.experience = rng.randrange(3, 10)
        elif roll < 0.85:
            employee.overall_skill = SkillLevel.SENIOR
            employee.experience = rng.randrange(6, 15)
            employee.productivity = min(95, employee.productivity + rng.randrange(0, 10))
        else:
            employee.overall_skill = SkillLevel.EXPERT
            employee.experience = rng.randrange(10, 20)
            employee.productivity = min(100, employee.productivity + rng.randrange(10, 25))


def generate_random_employee(rng: random.Random, current_quarter: int) -> Employee:
    employee = Employee(
        id=seeded_employee_id(rng),
        name=generate_name(rng),
        productivity=rng.randrange(40, 96),
        risk_level=RiskLevel.from_rank(rng.randrange(1, 6)),
        overall_skill=SkillLevel.TRAINEE,
        specialization=rng.choice(list(Department)),
        experience=rng.randrange(0, 15),
        morale=rng.randrange(60, 91),
    )

    apply_quarter_skill_tier(employee, current_quarter, rng)

    employee.position_description, employee.skill_keywords = generate_position(rng, employee.specialization)
    employee.salary = calculate_salary(employee.overall_skill, employee.experience, employee.productivity)
    return employee
