"""
Shared fixtures for the sim engine tests.
"""

import random
from itertools import count

import pytest

from corporate_chaos.sim_engine.entities.company import Company
from corporate_chaos.sim_engine.entities.department import DepartmentRegistry
from corporate_chaos.sim_engine.entities.employee import Employee, calculate_salary
from corporate_chaos.sim_engine.entities.enums import Department, RiskLevel, SkillLevel


class FixedRandom(random.Random):
    """random() always returns `value`; integer draws (randrange/choice) stay seeded."""

    def __init__(self, value: float, seed: int = 0):
        self.value = value
        super().__init__(seed)

    def random(self):
        return self.value

    def getrandbits(self, k):
        return super().getrandbits(k)


class ScriptedRandom(random.Random):
    """random() replays `values` in order, then returns `default` forever."""

    def __init__(self, values, default: float = 0.999999, seed: int = 0):
        self.values = list(values)
        self.default = default
        super().__init__(seed)

    def random(self):
        if self.values:
            return self.values.pop(0)
        return self.default

    def getrandbits(self, k):
        return super().getrandbits(k)


@pytest.fixture
def scripted_rng():
    return ScriptedRandom


@pytest.fixture
def fixed_rng():
    """Factory: fixed_rng(0.0) fires every roll, fixed_rng(0.999999) fires none."""
    return FixedRandom


@pytest.fixture
def quiet_rng():
    return FixedRandom(0.999999)


@pytest.fixture
def make_employee():
    ids = count(1)

    def _make(
        name="Test Person",
        productivity=80,
        morale=50,
        specialization=Department.MARKETING,
        skill=SkillLevel.MID,
        experience=2,
        risk=RiskLevel.LOW,
        salary=None,
    ):
        return Employee(
            id=f"emp-{next(ids)}",
            name=name,
            productivity=productivity,
            risk_level=risk,
            overall_skill=skill,
            specialization=specialization,
            experience=experience,
            morale=morale,
            salary=salary if salary is not None else calculate_salary(skill, experience, productivity),
        )

    return _make


@pytest.fixture
def company():
    return Company()


@pytest.fixture
def registry():
    return DepartmentRegistry()


@pytest.fixture
def staffed_registry(make_employee):
    """One assigned Mid employee per department, working in their specialization."""
    reg = DepartmentRegistry()
    for dept in Department:
        employee = make_employee(name=f"{dept.value} Lead", specialization=dept)
        reg.hire(employee, quarter=1)
        reg.assign(employee.id, dept)
    return reg
