"""
Employee model tests.

Run with:
    pytest backend/tests/test_employee.py -v
"""

import random

import pytest

from corporate_chaos.sim_engine.entities.employee import (
    Employee,
    apply_quarter_skill_tier,
    calculate_salary,
    generate_random_employee,
)
from corporate_chaos.sim_engine.entities.enums import Department, SkillLevel


# ============================================================================
# Derived values
# ============================================================================

class TestEffectiveProductivity:
    """productivity x morale/100, with the specialization bonus when placed in-field."""

    def test_specialized_assignment_gets_bonus(self, make_employee):
        employee = make_employee(productivity=80, morale=50, specialization=Department.MARKETING)
        employee.assigned_department = Department.MARKETING

        assert employee.effective_productivity() == pytest.approx(48.0)

    def test_off_field_assignment_has_no_bonus(self, make_employee):
        employee = make_employee(productivity=80, morale=50, specialization=Department.MARKETING)
        employee.assigned_department = Department.FINANCE

        assert employee.effective_productivity() == pytest.approx(40.0)

    def test_unassigned_has_no_bonus(self, make_employee):
        employee = make_employee(productivity=80, morale=50)

        assert employee.effective_productivity() == pytest.approx(40.0)

    def test_zero_morale_means_zero_output(self, make_employee):
        employee = make_employee(productivity=100, morale=0)
        employee.assigned_department = employee.specialization

        assert employee.effective_productivity() == 0.0

    def test_seniority(self, make_employee):
        assert make_employee(skill=SkillLevel.SENIOR).is_senior()
        assert make_employee(skill=SkillLevel.EXPERT).is_senior()
        assert not make_employee(skill=SkillLevel.MID).is_senior()


class TestSalary:
    def test_formula(self):
        # 3000 * (1 + 3*0.3 + 2*0.1) * 0.8
        assert calculate_salary(SkillLevel.MID, 2, 80) == 5040.0
        # 3000 * (1 + 1*0.3) * 0.5
        assert calculate_salary(SkillLevel.TRAINEE, 0, 50) == 1950.0

    def test_quarterly_cost_is_three_months(self, make_employee):
        employee = make_employee(salary=4000.0)

        assert employee.quarterly_cost() == 12000.0


class TestClampedAdjustments:
    def test_morale_bounds(self, make_employee):
        employee = make_employee(morale=50)

        employee.adjust_morale(500)
        assert employee.morale == 100

        employee.adjust_morale(-500)
        assert employee.morale == 0

    def test_productivity_bounds(self, make_employee):
        employee = make_employee(productivity=95)

        employee.adjust_productivity(10)
        assert employee.productivity == 100

        employee.adjust_productivity(-250)
        assert employee.productivity == 0


# ============================================================================
# Generation
# ============================================================================

class TestRandomEmployee:
    def test_same_seed_same_employee(self):
        a = generate_random_employee(random.Random(99), current_quarter=3)
        b = generate_random_employee(random.Random(99), current_quarter=3)

        assert a.to_dict() == b.to_dict()

    def test_early_quarters_never_produce_experts(self):
        for seed in range(300):
            employee = generate_random_employee(random.Random(seed), current_quarter=1)

            assert employee.overall_skill != SkillLevel.EXPERT
            assert 30 <= employee.productivity <= 95
            assert 60 <= employee.morale <= 90
            assert employee.salary == calculate_salary(
                employee.overall_skill, employee.experience, employee.productivity
            )
            assert not employee.is_assigned
            assert employee.position_description
            assert 2 <= len(employee.skill_keywords) <= 4

    def test_late_quarters_open_up_experts(self):
        skills = {
            generate_random_employee(random.Random(seed), current_quarter=40).overall_skill
            for seed in range(300)
        }

        assert SkillLevel.EXPERT in skills
        assert SkillLevel.SENIOR in skills

    def test_early_tier_is_mostly_entry_level(self):
        entry = 0
        for seed in range(500):
            employee = generate_random_employee(random.Random(seed), current_quarter=2)
            if employee.overall_skill in (SkillLevel.TRAINEE, SkillLevel.JUNIOR):
                entry += 1

        # 70% expected
        assert 0.6 < entry / 500 < 0.8

    def test_tier_rerolls_experience(self, make_employee):
        employee = make_employee(experience=14, skill=SkillLevel.TRAINEE)
        apply_quarter_skill_tier(employee, current_quarter=1, rng=random.Random(5))

        if employee.overall_skill in (SkillLevel.TRAINEE, SkillLevel.JUNIOR):
            assert employee.experience <= 2
        elif employee.overall_skill == SkillLevel.MID:
            assert 2 <= employee.experience <= 5
        else:
            assert 5 <= employee.experience <= 9


class TestEmployeeSerialization:
    def test_round_trip_keeps_enums(self, make_employee):
        employee = make_employee(specialization=Department.IT)
        employee.assigned_department = Department.IT
        employee.is_assigned = True
        employee.skill_keywords = ["Networking", "Security"]

        data = employee.to_dict()
        restored = Employee.from_dict(data)

        assert data["specialization"] == "IT"
        assert data["overall_skill"] == "Mid"
        assert restored == employee
