"""
chaos_engine.py

Stochastic per-quarter event layer.

This module:
- Runs multi-quarter crises (warning -> ongoing stress -> resolution)
- Rolls per-department employee events (poaching, fumbles, retirement, breakthroughs)
- Rolls market, reputation, morale and risk driven events
- Rolls catastrophes against the company's risk level
- Removes employees whose morale makes them quit

Every event draws its numbers first and applies them as a structured delta
(ChaosEvent). Text is only produced afterwards for the quarter log.

Fixed pass order per quarter:
  1. active crises          6. morale events
  2. employee events        7. risk events
  3. market events          8. catastrophic event
  4. crisis genesis         9. random flavor chaos
  5. reputation events     10. morale turnover
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional
import random

from corporate_chaos.sim_engine.entities.company import Company
from corporate_chaos.sim_engine.entities.department import DepartmentRegistry, DepartmentStats
from corporate_chaos.sim_engine.entities.employee import Employee
from corporate_chaos.sim_engine.entities.enums import CrisisLevel, CrisisResponse, RiskAppetite, SkillLevel


MAX_ACTIVE_CRISES = 2

CRISIS_IMPACT = {
    CrisisLevel.WARNING: 0.05,
    CrisisLevel.CRITICAL: 0.15,
    CrisisLevel.CATASTROPHIC: 0.30,
}

CRISIS_STRESS = {
    CrisisLevel.WARNING: 1,
    CrisisLevel.CRITICAL: 3,
    CrisisLevel.CATASTROPHIC: 5,
}

RESPONSE_MULTIPLIERS = {
    CrisisResponse.IMMEDIATE: 0.6,
    CrisisResponse.CONTROL: 0.8,
    CrisisResponse.ABSORB: 1.2,
}

MARKET_CHAOS_MULTIPLIERS = {
    RiskAppetite.CONSERVATIVE: 0.7,
    RiskAppetite.BALANCED: 1.0,
    RiskAppetite.AGGRESSIVE: 1.8,
}


# =============================================================================
# Catalogs
# =============================================================================

CRISIS_TEMPLATES = [
    ("Economic Recession Looming", "Market indicators suggest major downturn approaching", 3, CrisisLevel.CRITICAL),
    ("Industry Regulation Changes", "New compliance requirements will be mandatory", 2, CrisisLevel.WARNING),
    ("Technology Obsolescence", "Your core technology may become outdated", 4, CrisisLevel.CRITICAL),
    ("Major Competitor Merger", "Two rivals are planning to merge and dominate market", 2, CrisisLevel.WARNING),
    ("Supply Chain Crisis", "Critical suppliers facing major disruptions", 3, CrisisLevel.CRITICAL),
    ("Cybersecurity Threat", "Industry-wide security vulnerabilities discovered", 1, CrisisLevel.CATASTROPHIC),
    ("Environmental Regulations", "New green policies will affect operations", 4, CrisisLevel.WARNING),
]

FUMBLES = [
    "accidentally deleted critical files",
    "sent confidential data to wrong client",
    "made a costly calculation error",
    "missed an important deadline",
    "caused a system outage",
    "leaked sensitive information",
    "made a public relations blunder",
]

BREAKTHROUGHS = [
    "developed a cost-saving process",
    "discovered a new market opportunity",
    "created an innovative solution",
    "improved operational efficiency",
    "secured a major client",
    "solved a long-standing problem",
    "invented a game-changing feature",
]

MARKET_DISRUPTIONS = [
    "New technology disrupts your market segment",
    "Consumer preferences shift dramatically",
    "Government regulations change overnight",
    "Currency fluctuations affect international business",
    "E-commerce platform changes algorithms",
    "Viral social media trend impacts brand perception",
    "Scientific breakthrough makes products obsolete",
]

COMPETITOR_ACTIONS = [
    "launches aggressive price war",
    "poaches your key clients",
    "copies your business model",
    "spreads negative publicity",
    "files patent lawsuit",
    "undercuts your pricing by 30%",
    "releases competing product early",
]

SCANDALS = [
    "leaked internal emails reveal questionable practices",
    "former employee whistleblower goes public",
    "social media backlash over company policies",
    "executive caught in personal scandal",
    "data privacy violation discovered",
    "discriminatory hiring practices exposed",
    "environmental damage cover-up revealed",
    "tax avoidance scheme becomes public",
    "insider trading allegations surface",
]

MISMANAGEMENTS = [
    "budget allocated to wrong department",
    "critical project deadline missed due to poor planning",
    "resources wasted on failed initiative",
    "communication breakdown between departments",
    "strategic decision backfires spectacularly",
    "vendor contract negotiated poorly",
    "talent acquisition strategy fails",
    "operational efficiency drops due to poor processes",
]

POSITIVE_PR = [
    "wins industry excellence award",
    "featured in major business magazine",
    "CEO gives inspiring keynote speech",
    "company's charity work gets recognition",
    "innovative product receives media praise",
    "workplace culture highlighted as exemplary",
    "sustainability efforts gain public attention",
    "employee volunteer program makes headlines",
]

MISCOMMUNICATIONS = [
    "critical information not shared between teams",
    "project requirements misunderstood",
    "client expectations not properly communicated",
    "deadline changes not relayed to all stakeholders",
    "budget constraints not communicated clearly",
    "policy changes cause confusion across departments",
    "meeting outcomes not documented or shared",
    "technical specifications lost in translation",
]

TEAM_SUCCESSES = [
    "successful company retreat boosts collaboration",
    "cross-department project exceeds expectations",
    "employee recognition program shows results",
    "mentorship program creates strong bonds",
    "innovation workshop generates breakthrough ideas",
    "company culture initiative improves satisfaction",
    "team lunch tradition strengthens relationships",
]

PRODUCT_DEFECTS = [
    "manufacturing defect discovered in latest batch",
    "software bug causes customer data loss",
    "safety issue identified in product design",
    "quality control failure leads to recalls",
    "supplier provides substandard materials",
    "packaging defect damages product reputation",
    "performance issues reported by multiple customers",
    "compatibility problems with existing systems",
]

QUALITY_WINS = [
    "receives industry quality certification",
    "zero-defect milestone achieved",
    "customer satisfaction scores reach new high",
    "quality improvement process shows results",
    "supplier partnership enhances product quality",
    "rigorous testing prevents potential issues",
    "quality assurance team prevents major defect",
]

CATASTROPHES = [
    "major data breach exposes customer information",
    "factory fire destroys primary production facility",
    "class-action lawsuit filed against company",
    "regulatory investigation launched",
    "key patent invalidated by court ruling",
    "major client cancels all contracts",
    "cyber attack cripples company operations",
    "environmental disaster linked to company operations",
]

FLAVOR_CHAOS = [
    "A viral video about your company spreads everywhere",
    "Your office building gets featured in a reality TV show",
    "A unicorn startup tries to acquire you with cryptocurrency",
    "Your employees start a company-wide gaming tournament during work hours",
    "Free pizza delivery mix-up leads to unexpected client meeting",
    "CEO gets stuck in elevator with major investor",
    "Company phone system gets hacked to only play elevator music",
    "Intern accidentally redesigns company logo, everyone loves it",
    "Office therapy dog becomes internet famous",
    "Coffee machine breaks, productivity drops 50%",
]


# =============================================================================
# Data
# =============================================================================

@dataclass
class CrisisEvent:
    title: str
    description: str
    level: CrisisLevel
    quarters_remaining: int
    is_active: bool = True

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["level"] = self.level.value
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CrisisEvent":
        return cls(
            title=str(data["title"]),
            description=str(data["description"]),
            level=CrisisLevel(data["level"]),
            quarters_remaining=int(data["quarters_remaining"]),
            is_active=bool(data.get("is_active", True)),
        )


@dataclass
class ChaosEvent:
    """
    One resolved event. Deltas are applied to the company as-is; `text` is
    the log line and never feeds back into gameplay.
    """
    category: str
    headline: str
    detail: str = ""
    capital: float = 0.0
    reputation: int = 0
    morale: int = 0
    risk: int = 0
    market_share: float = 0.0
    employee_id: Optional[str] = None
    text: str = ""

    def apply(self, company: Company) -> None:
        company.capital += self.capital
        company.reputation += self.reputation
        company.morale += self.morale
        company.risk += self.risk
        company.market_share += self.market_share

    def effects(self) -> List[str]:
        parts: List[str] = []
        if self.capital:
            sign = "+" if self.capital > 0 else "-"
            parts.append(f"Capital {sign}${abs(self.capital):,.0f}")
        for label, value in (("Reputation", self.reputation), ("Morale", self.morale), ("Risk", self.risk)):
            if value:
                parts.append(f"{label} {value:+d}")
        if self.market_share:
            parts.append(f"Market Share {self.market_share:+.1f}%")
        return parts

    def describe(self) -> str:
        if self.text:
            return self.text
        line = f"{self.headline}! {self.detail}" if self.detail else f"{self.headline}!"
        effects = self.effects()
        if effects:
            line += " " + ", ".join(effects)
        return line


# =============================================================================
# Chaos Engine
# =============================================================================

class ChaosEngine:
    def __init__(self, rng: random.Random):
        self.rng = rng
        self.active_crises: List[CrisisEvent] = []
        self.quarters_since_last_major_event: int = 0
        self.last_events: List[ChaosEvent] = []

    def _roll(self, p: float) -> bool:
        return self.rng.random() < p

    # ------------------------------------------------------------------
    # Quarterly pass
    # ------------------------------------------------------------------

    def apply_quarterly_chaos(self, company: Company, registry: DepartmentRegistry) -> List[str]:
        events: List[ChaosEvent] = []
        self.quarters_since_last_major_event += 1

        # 1. crises already in flight
        events.extend(self._process_active_crises(company, registry))

        # 2. employees
        for stats in registry:
            events.extend(self._employee_events(stats, company, registry))

        # 3. market
        events.extend(self._market_events(company))

        # 4. new crisis
        crisis_warning = self._crisis_genesis()
        if crisis_warning is not None:
            events.append(crisis_warning)

        # 5-7. company state driven
        events.extend(self._reputation_events(company))
        events.extend(self._morale_events(company))
        events.extend(self._risk_events(company))

        # 8. catastrophe
        if self._roll(company.catastrophic_event_chance()):
            events.append(self._catastrophic_event(company))

        # 9. flavor
        flavor = self._random_chaos(company)
        if flavor is not None:
            events.append(flavor)

        # 10. turnover
        events.extend(self._morale_turnover(company, registry))

        self.last_events = events
        return [e.describe() for e in events]

    # ------------------------------------------------------------------
    # 1. Crises
    # ------------------------------------------------------------------

    def _process_active_crises(self, company: Company, registry: DepartmentRegistry) -> List[ChaosEvent]:
        events: List[ChaosEvent] = []

        for crisis in reversed(list(self.active_crises)):
            crisis.quarters_remaining -= 1

            if crisis.quarters_remaining <= 0:
                events.append(self._resolve_crisis(crisis, company))
                crisis.is_active = False
                self.active_crises.remove(crisis)
                self.quarters_since_last_major_event = 0
                continue

            stress = CRISIS_STRESS[crisis.level]
            event = ChaosEvent(
                category="crisis",
                headline="ONGOING CRISIS",
                morale=-stress,
                risk=stress,
                text=f"ONGOING CRISIS: {crisis.title} - {crisis.quarters_remaining} quarters remaining!",
            )
            event.apply(company)
            for employee in registry.assigned_employees():
                employee.adjust_morale(-stress)
            events.append(event)

        return events

    def _resolve_crisis(self, crisis: CrisisEvent, company: Company) -> ChaosEvent:
        impact = CRISIS_IMPACT.get(crisis.level, 0.05)
        response = RESPONSE_MULTIPLIERS[company.crisis_response]

        event = ChaosEvent(
            category="crisis",
            headline="CRISIS RESOLVED",
            detail=f"{crisis.title}.",
            capital=-(company.capital * impact * response),
            morale=-int(20 * impact * response),
            reputation=-int(15 * impact * response),
        )
        event.apply(company)
        return event

    # ------------------------------------------------------------------
    # 2. Employee events
    # ------------------------------------------------------------------

    def _employee_events(self, stats: DepartmentStats, company: Company,
                         registry: DepartmentRegistry) -> List[ChaosEvent]:
        if not stats.employees:
            return []

        events: List[ChaosEvent] = []
        dept = stats.department

        # Scouting
        if self._roll(0.15) and stats.employees:
            target = self.rng.choice(stats.employees)
            if target.is_senior():
                events.append(self._scouting(target, dept.value, company, registry))

        # Fumble
        if self._roll(0.12) and stats.employees:
            events.append(self._fumble(self.rng.choice(stats.employees), dept.value, company))

        # Retirement (first veteran in roster order)
        if self._roll(0.08):
            retiree = next((e for e in stats.employees if e.experience > 10), None)
            if retiree is not None:
                events.append(self._retirement(retiree, dept.value, company, registry))

        # Breakthrough
        if self._roll(0.10):
            innovator = next((e for e in stats.employees if e.overall_skill.rank >= SkillLevel.MID.rank), None)
            if innovator is not None:
                events.append(self._breakthrough(innovator, dept.value, company))

        return events

    def _scouting(self, employee: Employee, dept: str, company: Company,
                  registry: DepartmentRegistry) -> ChaosEvent:
        offer = employee.salary * (self.rng.random() * 1.0 + 1.5)

        if self._roll(0.6):
            registry.remove(employee)
            event = ChaosEvent(
                category="employee",
                headline="TALENT POACHED",
                detail=f"{employee.name} from {dept} was scouted by competitors for ${offer:,.0f}.",
                morale=-5,
                reputation=-2,
                employee_id=employee.id,
            )
            event.apply(company)
            return event

        raise_amount = employee.salary * 0.3
        employee.salary += raise_amount
        event = ChaosEvent(
            category="employee",
            headline="RETENTION BONUS",
            detail=f"{employee.name} received a ${raise_amount:,.0f}/month raise to stay.",
            capital=-(raise_amount * 4),
            employee_id=employee.id,
        )
        event.apply(company)
        return event

    def _fumble(self, employee: Employee, dept: str, company: Company) -> ChaosEvent:
        fumble = self.rng.choice(FUMBLES)
        cost = float(self.rng.randrange(5000, 25000))
        reputation_loss = self.rng.randrange(3, 8)
        morale_loss = self.rng.randrange(2, 6)

        # Senior people break bigger things
        if employee.is_senior():
            cost *= 2
            reputation_loss += 3

        event = ChaosEvent(
            category="employee",
            headline="EMPLOYEE FUMBLE",
            detail=f"{employee.name} ({dept}) {fumble}.",
            capital=-cost,
            reputation=-reputation_loss,
            morale=-morale_loss,
            employee_id=employee.id,
        )
        event.apply(company)
        employee.adjust_morale(-15)
        return event

    def _retirement(self, employee: Employee, dept: str, company: Company,
                    registry: DepartmentRegistry) -> ChaosEvent:
        knowledge_loss = employee.effective_productivity() * 0.5
        registry.remove(employee)

        party_cost = float(self.rng.randrange(2000, 8000))
        event = ChaosEvent(
            category="employee",
            headline="RETIREMENT",
            detail=(
                f"{employee.name} from {dept} retired after {employee.experience} years. "
                f"Knowledge loss: {knowledge_loss:.1f}."
            ),
            capital=-party_cost,
            morale=3 - int(knowledge_loss / 10),
            employee_id=employee.id,
        )
        event.apply(company)
        return event

    def _breakthrough(self, employee: Employee, dept: str, company: Company) -> ChaosEvent:
        breakthrough = self.rng.choice(BREAKTHROUGHS)
        event = ChaosEvent(
            category="employee",
            headline="BREAKTHROUGH",
            detail=f"{employee.name} ({dept}) {breakthrough}.",
            capital=float(self.rng.randrange(15000, 50000)),
            reputation=self.rng.randrange(2, 6),
            morale=self.rng.randrange(3, 8),
            employee_id=employee.id,
        )
        event.apply(company)
        employee.adjust_morale(20)
        employee.adjust_productivity(5)
        return event

    # ------------------------------------------------------------------
    # 3. Market
    # ------------------------------------------------------------------

    def _market_events(self, company: Company) -> List[ChaosEvent]:
        events: List[ChaosEvent] = []
        mult = MARKET_CHAOS_MULTIPLIERS[company.risk_appetite]

        if self._roll(0.25 * mult):
            events.append(self._market_disruption(company))
        if self._roll(0.20 * mult):
            events.append(self._competitor_action(company))

        return events

    def _market_disruption(self, company: Company) -> ChaosEvent:
        disruption = self.rng.choice(MARKET_DISRUPTIONS)

        if self._roll(0.5):
            event = ChaosEvent(
                category="market",
                headline="MARKET DISRUPTION",
                detail=f"{disruption}.",
                capital=-(company.capital * (self.rng.random() * 0.10 + 0.05)),
                market_share=-float(self.rng.randrange(2, 6)),
            )
        else:
            event = ChaosEvent(
                category="market",
                headline="MARKET OPPORTUNITY",
                detail=f"{disruption}.",
                capital=float(self.rng.randrange(20000, 60000)),
                market_share=self.rng.random() * 1.0 + 0.5,
            )
        event.apply(company)
        return event

    def _competitor_action(self, company: Company) -> ChaosEvent:
        action = self.rng.choice(COMPETITOR_ACTIONS)
        impact = float(self.rng.randrange(10000, 40000))
        reputation_loss = self.rng.randrange(2, 7)

        # Leaders draw heavier fire; tiers compound
        share_loss = 0.5 + self.rng.random() * 1.0
        if company.market_share >= 30:
            share_loss *= 1.5
        if company.market_share >= 50:
            share_loss *= 2.0
        if company.market_share >= 60:
            share_loss *= 2.5

        event = ChaosEvent(
            category="market",
            headline="COMPETITOR ATTACK",
            detail=f"Major competitor {action}.",
            capital=-impact,
            reputation=-reputation_loss,
            market_share=-share_loss,
            risk=5,
        )
        event.apply(company)
        return event

    # ------------------------------------------------------------------
    # 4. Crisis genesis
    # ------------------------------------------------------------------

    def _crisis_genesis(self) -> Optional[ChaosEvent]:
        if not (self._roll(0.15) and len(self.active_crises) < MAX_ACTIVE_CRISES):
            return None

        title, description, quarters, level = self.rng.choice(CRISIS_TEMPLATES)
        crisis = CrisisEvent(title=title, description=description, level=level, quarters_remaining=quarters)
        self.active_crises.append(crisis)

        return ChaosEvent(
            category="crisis",
            headline="CRISIS WARNING",
            text=f"CRISIS WARNING: {title} - {description} ({quarters} quarters to prepare!)",
        )

    # ------------------------------------------------------------------
    # 5. Reputation
    # ------------------------------------------------------------------

    def _reputation_events(self, company: Company) -> List[ChaosEvent]:
        events: List[ChaosEvent] = []

        if self._roll(0.15):
            events.append(ChaosEvent(
                category="reputation",
                headline="SCANDAL",
                detail=f"Company {self.rng.choice(SCANDALS)}.",
                reputation=-self.rng.randrange(15, 35),
                morale=-self.rng.randrange(10, 20),
                capital=-float(self.rng.randrange(50000, 150000)),
                risk=10,
            ))
            events[-1].apply(company)

        if self._roll(0.12):
            events.append(ChaosEvent(
                category="reputation",
                headline="MISMANAGEMENT",
                detail=f"{self.rng.choice(MISMANAGEMENTS).capitalize()}.",
                morale=-self.rng.randrange(8, 18),
                reputation=-self.rng.randrange(5, 12),
                capital=-float(self.rng.randrange(25000, 75000)),
                risk=5,
            ))
            events[-1].apply(company)

        if company.reputation > 20 and self._roll(0.08):
            events.append(ChaosEvent(
                category="reputation",
                headline="POSITIVE PR",
                detail=f"Company {self.rng.choice(POSITIVE_PR)}.",
                reputation=self.rng.randrange(8, 20),
                morale=self.rng.randrange(5, 15),
                capital=float(self.rng.randrange(15000, 45000)),
            ))
            events[-1].apply(company)

        return events

    # ------------------------------------------------------------------
    # 6. Morale
    # ------------------------------------------------------------------

    def _morale_events(self, company: Company) -> List[ChaosEvent]:
        events: List[ChaosEvent] = []

        if company.morale < -20 and self._roll(0.18):
            events.append(ChaosEvent(
                category="morale",
                headline="MISCOMMUNICATION",
                detail=f"{self.rng.choice(MISCOMMUNICATIONS).capitalize()}.",
                morale=-self.rng.randrange(10, 20),
                capital=-float(self.rng.randrange(15000, 40000)),
                reputation=-self.rng.randrange(3, 8),
                risk=3,
            ))
            events[-1].apply(company)

        if company.morale > 10 and self._roll(0.10):
            events.append(ChaosEvent(
                category="morale",
                headline="TEAM SUCCESS",
                detail=f"{self.rng.choice(TEAM_SUCCESSES).capitalize()}.",
                morale=self.rng.randrange(8, 18),
                reputation=self.rng.randrange(2, 6),
            ))
            events[-1].apply(company)

        return events

    # ------------------------------------------------------------------
    # 7. Risk
    # ------------------------------------------------------------------

    def _risk_events(self, company: Company) -> List[ChaosEvent]:
        events: List[ChaosEvent] = []

        if self._roll(0.12):
            defect = self.rng.choice(PRODUCT_DEFECTS).capitalize()
            if self._roll(0.3):
                event = ChaosEvent(
                    category="risk",
                    headline="MASS RECALL",
                    detail=f"{defect} triggers massive product recall.",
                    reputation=-self.rng.randrange(25, 45),
                    capital=-float(self.rng.randrange(100000, 300000)),
                    morale=-self.rng.randrange(15, 25),
                    risk=15,
                )
            else:
                event = ChaosEvent(
                    category="risk",
                    headline="PRODUCT DEFECT",
                    detail=f"{defect}.",
                    reputation=-self.rng.randrange(8, 18),
                    capital=-float(self.rng.randrange(20000, 60000)),
                    morale=-self.rng.randrange(5, 12),
                    risk=5,
                )
            event.apply(company)
            events.append(event)

        if company.risk < -10 and self._roll(0.08):
            events.append(ChaosEvent(
                category="risk",
                headline="QUALITY SUCCESS",
                detail=f"Company {self.rng.choice(QUALITY_WINS)}.",
                reputation=self.rng.randrange(10, 20),
                morale=self.rng.randrange(8, 15),
                capital=float(self.rng.randrange(25000, 60000)),
                risk=-8,
            ))
            events[-1].apply(company)

        return events

    # ------------------------------------------------------------------
    # 8. Catastrophe
    # ------------------------------------------------------------------

    def _catastrophic_event(self, company: Company) -> ChaosEvent:
        catastrophe = self.rng.choice(CATASTROPHES)
        event = ChaosEvent(
            category="catastrophe",
            headline="CATASTROPHIC EVENT",
            detail=f"{catastrophe.capitalize()}.",
            reputation=-self.rng.randrange(30, 60),
            capital=-(company.capital * (self.rng.random() * 0.15 + 0.10)),
            morale=-self.rng.randrange(20, 40),
            risk=20,
        )
        event.apply(company)
        self.quarters_since_last_major_event = 0
        return event

    # ------------------------------------------------------------------
    # 9. Flavor chaos
    # ------------------------------------------------------------------

    def _random_chaos(self, company: Company) -> Optional[ChaosEvent]:
        if not self._roll(0.20):
            return None

        flavor = self.rng.choice(FLAVOR_CHAOS)
        if self._roll(0.5):
            event = ChaosEvent(
                category="flavor",
                headline="RANDOM CHAOS",
                detail=f"{flavor}. Unexpected benefit.",
                capital=float(self.rng.randrange(5000, 25000)),
                morale=self.rng.randrange(5, 15),
            )
        else:
            event = ChaosEvent(
                category="flavor",
                headline="RANDOM CHAOS",
                detail=f"{flavor}. Unexpected cost.",
                capital=-float(self.rng.randrange(3000, 15000)),
                morale=-self.rng.randrange(2, 8),
            )
        event.apply(company)
        return event

    # ------------------------------------------------------------------
    # 10. Turnover
    # ------------------------------------------------------------------

    def _morale_turnover(self, company: Company, registry: DepartmentRegistry) -> List[ChaosEvent]:
        events: List[ChaosEvent] = []
        base_chance = company.employee_turnover_chance()

        for stats in registry:
            leaving: List[Employee] = []
            for employee in stats.employees:
                chance = base_chance
                if employee.morale < 30:
                    chance *= 1.5
                if employee.morale < 10:
                    chance *= 2.0
                if self._roll(chance):
                    leaving.append(employee)

            for employee in leaving:
                registry.remove(employee)
                event = ChaosEvent(
                    category="turnover",
                    headline="EMPLOYEE QUIT",
                    morale=-2,
                    employee_id=employee.id,
                    text=(
                        f"EMPLOYEE QUIT! {employee.name} from {stats.department.value} "
                        f"left due to low morale. Company morale -2"
                    ),
                )
                event.apply(company)
                events.append(event)

        return events

    # ------------------------------------------------------------------
    # Status / persistence
    # ------------------------------------------------------------------

    def crisis_status_summary(self) -> str:
        if not self.active_crises:
            return "No active crises"
        return "\n".join(
            f"[{c.level.value.upper()}] {c.title} ({c.quarters_remaining}Q)" for c in self.active_crises
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "active_crises": [c.to_dict() for c in self.active_crises],
            "quarters_since_last_major_event": self.quarters_since_last_major_event,
        }

    def load_state(self, data: Dict[str, Any]) -> None:
        self.active_crises = [CrisisEvent.from_dict(c) for c in data.get("active_crises", [])]
        self.quarters_since_last_major_event = int(data.get("quarters_since_last_major_event", 0))
