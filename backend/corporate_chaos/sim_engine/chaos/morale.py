"""
morale.py

End-of-quarter employee morale drift.

Staff feel the quarterly result: a profitable quarter lifts every assigned
employee's morale, a losing one drags it down. Values stay within 0..100.
"""

from __future__ import annotations

from corporate_chaos.sim_engine.entities.company import Company
from corporate_chaos.sim_engine.entities.department import DepartmentRegistry


PROFITABLE_QUARTER_MORALE = 5
LOSING_QUARTER_MORALE = -10


def quarterly_morale_delta(company: Company) -> int:
    if company.quarterly_revenue > company.quarterly_expenses:
        return PROFITABLE_QUARTER_MORALE
    return LOSING_QUARTER_MORALE


def apply_quarterly_morale_drift(company: Company, registry: DepartmentRegistry) -> int:
    delta = quarterly_morale_delta(company)
    for employee in registry.assigned_employees():
        employee.adjust_morale(delta)
    return delta
