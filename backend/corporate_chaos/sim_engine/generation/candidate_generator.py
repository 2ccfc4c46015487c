"""
candidate_generator.py

Hiring market for the player.

Candidate quality follows the company:
- HR staff productivity (40% weight)
- reputation (30% weight)
- morale (30% weight)

Better hiring quality means more candidates per pool, higher productivity and
morale, lower risk, and a chance of a skill upgrade. Poor hiring quality does
the opposite. Quarter tiers (early/mid/late) still cap what skill levels exist.

The pool may be refreshed a limited number of times per quarter; the counter
lives on the Company so it survives save/load.
"""

from __future__ import annotations

from typing import List, Tuple
import random

from corporate_chaos.sim_engine.entities.company import Company
from corporate_chaos.sim_engine.entities.department import DepartmentRegistry
from corporate_chaos.sim_engine.entities.employee import (
    EARLY_GAME_LAST_QUARTER,
    MID_GAME_LAST_QUARTER,
    Employee,
    calculate_salary,
    seeded_employee_id,
)
from corporate_chaos.sim_engine.entities.enums import Department, RiskLevel, SkillLevel
from corporate_chaos.sim_engine.generation.name_generator import generate_candidate_name
from corporate_chaos.sim_engine.generation.position_generator import generate_position


MAX_REFRESHES_PER_QUARTER = 5
MIN_CANDIDATES = 3
MAX_CANDIDATES = 8

_SKILLS = list(SkillLevel)


# =============================================================================
# Quality
# =============================================================================

def hiring_quality(company: Company, registry: DepartmentRegistry) -> float:
    hr = registry[Department.HR]
    hr_quality = 0.0
    if hr.employees:
        hr_quality = min(1.0, (hr.total_productivity() / hr.employee_count()) / 100.0)

    reputation_quality = max(0.0, (company.reputation + 100) / 200.0)
    morale_quality = max(0.0, (company.morale + 100) / 200.0)

    return min(1.0, 0.3 + hr_quality * 0.4 + reputation_quality * 0.3 + morale_quality * 0.3)


def candidate_count(quality: float) -> int:
    return max(MIN_CANDIDATES, min(MAX_CANDIDATES, int(3 + quality * 5)))


def quality_label(quality: float) -> str:
    if quality >= 0.8:
        return "Excellent - Attracting top talent!"
    if quality >= 0.6:
        return "Good - Quality candidates available"
    if quality >= 0.4:
        return "Average - Mixed candidate pool"
    return "Poor - Limited candidate quality"


# =============================================================================
# Candidate rolls
# =============================================================================

def _tier_roll(rng: random.Random, current_quarter: int) -> Tuple[SkillLevel, int, int]:
    """(skill, experience, productivity) before quality modifiers."""
    roll = rng.random()

    if current_quarter <= EARLY_GAME_LAST_QUARTER:
        if roll < 0.70:
            skill = SkillLevel.TRAINEE if rng.random() < 0.6 else SkillLevel.JUNIOR
            return skill, rng.randrange(0, 3), rng.randrange(30, 70)
        if roll < 0.95:
            return SkillLevel.MID, rng.randrange(2, 6), rng.randrange(50, 80)
        return SkillLevel.SENIOR, rng.randrange(5, 10), rng.randrange(70, 90)

    if current_quarter <= MID_GAME_LAST_QUARTER:
        if roll < 0.40:
            skill = SkillLevel.TRAINEE if rng.random() < 0.5 else SkillLevel.JUNIOR
            return skill, rng.randrange(0, 4), rng.randrange(35, 75)
        if roll < 0.75:
            return SkillLevel.MID, rng.randrange(2, 8), rng.randrange(55, 85)
        if roll < 0.95:
            return SkillLevel.SENIOR, rng.randrange(5, 12), rng.randrange(70, 95)
        return SkillLevel.EXPERT, rng.randrange(8, 15), rng.randrange(80, 98)

    if roll < 0.20:
        skill = SkillLevel.TRAINEE if rng.random() < 0.4 else SkillLevel.JUNIOR
        return skill, rng.randrange(0, 5), rng.randrange(40, 80)
    if roll < 0.50:
        return SkillLevel.MID, rng.randrange(3, 10), rng.randrange(60, 90)
    if roll < 0.85:
        return SkillLevel.SENIOR, rng.randrange(6, 15), rng.randrange(75, 98)
    return SkillLevel.EXPERT, rng.randrange(10, 20), rng.randrange(85, 100)


def _risk_for_quality(rng: random.Random, quality: float) -> RiskLevel:
    if quality >= 0.7:
        return RiskLevel.from_rank(rng.randrange(1, 3))
    if quality >= 0.5:
        return RiskLevel.from_rank(rng.randrange(1, 4))
    return RiskLevel.from_rank(rng.randrange(2, 6))


def generate_candidate(rng: random.Random, quality: float, current_quarter: int) -> Employee:
    candidate_id = seeded_employee_id(rng)
    name = generate_candidate_name(rng)
    specialization = rng.choice(list(Department))

    skill, experience, productivity = _tier_roll(rng, current_quarter)

    if quality >= 0.8:
        productivity = min(100, productivity + rng.randrange(5, 15))
        morale = rng.randrange(75, 95)
        if rng.random() < 0.3 and skill != SkillLevel.EXPERT:
            skill = _SKILLS[_SKILLS.index(skill) + 1]
            experience += rng.randrange(1, 3)
    elif quality >= 0.6:
        productivity = min(100, productivity + rng.randrange(0, 10))
        morale = rng.randrange(65, 85)
    elif quality >= 0.4:
        morale = rng.randrange(55, 80)
    else:
        productivity = max(20, productivity - rng.randrange(5, 15))
        morale = rng.randrange(40, 70)
        if rng.random() < 0.2 and skill != SkillLevel.TRAINEE:
            skill = _SKILLS[_SKILLS.index(skill) - 1]
            experience = max(0, experience - rng.randrange(1, 3))

    description, keywords = generate_position(rng, specialization)

    return Employee(
        id=candidate_id,
        name=name,
        productivity=productivity,
        risk_level=_risk_for_quality(rng, quality),
        overall_skill=skill,
        specialization=specialization,
        experience=experience,
        morale=morale,
        salary=calculate_salary(skill, experience, productivity),
        position_description=description,
        skill_keywords=keywords,
    )


# =============================================================================
# Pool
# =============================================================================

class CandidatePool:
    def __init__(self, rng: random.Random):
        self.rng = rng
        self.candidates: List[Employee] = []
        self.quality: float = 0.0

    def generate(self, company: Company, registry: DepartmentRegistry, current_quarter: int) -> List[Employee]:
        self.quality = hiring_quality(company, registry)
        self.candidates = [
            generate_candidate(self.rng, self.quality, current_quarter)
            for _ in range(candidate_count(self.quality))
        ]
        return self.candidates

    def remaining_refreshes(self, company: Company, current_quarter: int) -> int:
        if company.last_refresh_quarter != current_quarter:
            return MAX_REFRESHES_PER_QUARTER
        return max(0, MAX_REFRESHES_PER_QUARTER - company.current_quarter_refreshes)

    def refresh(self, company: Company, registry: DepartmentRegistry, current_quarter: int) -> bool:
        if company.last_refresh_quarter != current_quarter:
            company.current_quarter_refreshes = 0
            company.last_refresh_quarter = current_quarter

        if company.current_quarter_refreshes >= MAX_REFRESHES_PER_QUARTER:
            return False

        company.current_quarter_refreshes += 1
        self.generate(company, registry, current_quarter)
        return True

    def take(self, candidate_id: str) -> Employee:
        for i, candidate in enumerate(self.candidates):
            if candidate.id == candidate_id:
                return self.candidates.pop(i)
        raise KeyError(f"Unknown candidate id: {candidate_id}")
