# backend/corporate_chaos/sim_engine/entities/department.py
"""
Department Registry

Owns every hired employee. An employee lives in exactly one place:
- the unassigned pool (hired, waiting for a department), or
- one department's roster.

Moves are explicit (hire, assign, transfer, release, remove). The registry is
built with all six departments so lookups never need existence checks.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Tuple

from corporate_chaos.sim_engine.entities.employee import Employee
from corporate_chaos.sim_engine.entities.enums import Department


BASE_EFFICIENCY = 50.0
EFFICIENCY_MIN = 0.0
EFFICIENCY_MAX = 100.0


def clamp(x: float, lo: float, hi: float) -> float:
    return lo if x < lo else hi if x > hi else x


# ============================================================
# Department stats
# ============================================================

@dataclass
class DepartmentStats:
    department: Department
    employees: List[Employee] = field(default_factory=list)
    efficiency: float = BASE_EFFICIENCY

    def total_productivity(self) -> float:
        return sum(e.effective_productivity() for e in self.employees)

    def quarterly_cost(self) -> float:
        return sum(e.quarterly_cost() for e in self.employees)

    def employee_count(self) -> int:
        return len(self.employees)

    def average_productivity(self) -> float:
        if not self.employees:
            return 0.0
        return sum(e.productivity for e in self.employees) / len(self.employees)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "department": self.department.value,
            "efficiency": self.efficiency,
            "employees": [e.to_dict() for e in self.employees],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DepartmentStats":
        return cls(
            department=Department(data["department"]),
            efficiency=float(data.get("efficiency", BASE_EFFICIENCY)),
            employees=[Employee.from_dict(e) for e in data.get("employees", [])],
        )


# ============================================================
# Registry
# ============================================================

class DepartmentRegistry:
    def __init__(self) -> None:
        self.departments: Dict[Department, DepartmentStats] = {
            dept: DepartmentStats(department=dept) for dept in Department
        }
        self.unassigned: List[Employee] = []

    def __getitem__(self, department: Department) -> DepartmentStats:
        return self.departments[department]

    def __iter__(self) -> Iterator[DepartmentStats]:
        return iter(self.departments.values())

    # --------------------------------------------------
    # Lookup
    # --------------------------------------------------

    def find(self, employee_id: str) -> Employee:
        for employee in self.unassigned:
            if employee.id == employee_id:
                return employee
        for stats in self:
            for employee in stats.employees:
                if employee.id == employee_id:
                    return employee
        raise KeyError(f"Unknown employee id: {employee_id}")

    def assigned_employees(self) -> List[Employee]:
        return [e for stats in self for e in stats.employees]

    def all_employees(self) -> List[Employee]:
        return list(self.unassigned) + self.assigned_employees()

    # --------------------------------------------------
    # Ownership moves
    # --------------------------------------------------

    def hire(self, employee: Employee, quarter: int) -> Employee:
        employee.quarter_hired = int(quarter)
        employee.is_assigned = False
        employee.assigned_department = None
        self.unassigned.append(employee)
        return employee

    def assign(self, employee_id: str, department: Department) -> Employee:
        employee = self._take_from_pool(employee_id)
        self._place(employee, department)
        return employee

    def transfer(self, employee_id: str, department: Department) -> Employee:
        employee, current = self._take_from_department(employee_id)
        if current == department:
            self.departments[current].employees.append(employee)
            return employee
        self._place(employee, department)
        return employee

    def release(self, employee_id: str) -> Employee:
        employee, _ = self._take_from_department(employee_id)
        employee.is_assigned = False
        employee.assigned_department = None
        self.unassigned.append(employee)
        return employee

    def remove(self, employee: Employee) -> bool:
        """
        Drops the employee from wherever it lives. Returns False if the
        registry does not hold it (already gone earlier in the quarter).
        """
        if employee in self.unassigned:
            self.unassigned.remove(employee)
            return True
        for stats in self:
            if employee in stats.employees:
                stats.employees.remove(employee)
                return True
        return False

    def _take_from_pool(self, employee_id: str) -> Employee:
        for i, employee in enumerate(self.unassigned):
            if employee.id == employee_id:
                return self.unassigned.pop(i)
        raise KeyError(f"Employee {employee_id} is not in the unassigned pool")

    def _take_from_department(self, employee_id: str) -> Tuple[Employee, Department]:
        for stats in self:
            for i, employee in enumerate(stats.employees):
                if employee.id == employee_id:
                    return stats.employees.pop(i), stats.department
        raise KeyError(f"Employee {employee_id} is not assigned to a department")

    def _place(self, employee: Employee, department: Department) -> None:
        employee.is_assigned = True
        employee.assigned_department = department
        self.departments[department].employees.append(employee)

    # --------------------------------------------------
    # Efficiency
    # --------------------------------------------------

    def boost_efficiency(self, department: Department, amount: float) -> float:
        stats = self.departments[department]
        stats.efficiency = clamp(stats.efficiency + amount, EFFICIENCY_MIN, EFFICIENCY_MAX)
        return stats.efficiency

    def boost_all_efficiency(self, amount: float) -> None:
        for dept in Department:
            self.boost_efficiency(dept, amount)

    # --------------------------------------------------
    # Aggregates
    # --------------------------------------------------

    def total_productivity(self) -> float:
        return sum(stats.total_productivity() for stats in self)

    def quarterly_cost(self) -> float:
        return sum(stats.quarterly_cost() for stats in self)

    def employee_count(self) -> int:
        return sum(stats.employee_count() for stats in self)

    def performance_by_department(self) -> Dict[Department, float]:
        return {stats.department: stats.total_productivity() for stats in self}

    # --------------------------------------------------
    # Serialization
    # --------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        return {
            "departments": [stats.to_dict() for stats in self],
            "unassigned": [e.to_dict() for e in self.unassigned],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DepartmentRegistry":
        registry = cls()
        for raw in data.get("departments", []):
            stats = DepartmentStats.from_dict(raw)
            registry.departments[stats.department] = stats
        registry.unassigned = [Employee.from_dict(e) for e in data.get("unassigned", [])]
        return registry
