"""
Position text for generated employees.

Each department owns six role descriptions and a keyword bag. Generated
employees get one description and 2-4 shuffled keywords from their
specialization.
"""

from __future__ import annotations

import random
from typing import Dict, List, Tuple

from corporate_chaos.sim_engine.entities.enums import Department


POSITION_TEMPLATES: Dict[Department, Tuple[List[str], List[str]]] = {
    Department.MARKETING: (
        [
            "Brand strategist with creative campaign experience",
            "Digital marketing specialist focused on social media growth",
            "Market research analyst with consumer behavior expertise",
            "Content creator with strong storytelling abilities",
            "SEO/SEM specialist with data-driven approach",
            "Public relations coordinator with media connections",
        ],
        ["campaigns", "branding", "social media", "analytics", "content", "SEO", "PR", "creative"],
    ),
    Department.OPERATIONS: (
        [
            "Process optimization expert with lean methodology background",
            "Supply chain coordinator with vendor management skills",
            "Quality assurance specialist focused on continuous improvement",
            "Project manager with cross-functional team experience",
            "Operations analyst with efficiency optimization focus",
            "Logistics coordinator with distribution expertise",
        ],
        ["processes", "supply chain", "quality", "logistics", "efficiency", "lean", "coordination"],
    ),
    Department.FINANCE: (
        [
            "Financial analyst with budgeting and forecasting expertise",
            "Accounting specialist with regulatory compliance knowledge",
            "Investment advisor with portfolio management experience",
            "Cost analyst focused on expense optimization",
            "Tax specialist with corporate finance background",
            "Risk management analyst with audit experience",
        ],
        ["budgeting", "forecasting", "compliance", "investments", "analysis", "auditing", "taxation"],
    ),
    Department.HR: (
        [
            "Talent acquisition specialist with recruitment expertise",
            "Employee relations coordinator focused on workplace culture",
            "Training and development specialist with learning programs",
            "Compensation analyst with benefits administration skills",
            "HR generalist with policy development experience",
            "Organizational development consultant with change management",
        ],
        ["recruitment", "culture", "training", "benefits", "policies", "development", "relations"],
    ),
    Department.IT: (
        [
            "Software developer with full-stack development skills",
            "Systems administrator with network infrastructure expertise",
            "Cybersecurity specialist focused on threat prevention",
            "Database administrator with data management experience",
            "IT support technician with troubleshooting abilities",
            "DevOps engineer with automation and deployment skills",
        ],
        ["programming", "systems", "security", "databases", "support", "automation", "networks"],
    ),
    Department.RESEARCH: (
        [
            "Research scientist with experimental design expertise",
            "Data scientist with machine learning and analytics skills",
            "Product development specialist with innovation focus",
            "Market research analyst with statistical analysis background",
            "R&D engineer with prototype development experience",
            "Innovation consultant with emerging technology knowledge",
        ],
        ["research", "data science", "innovation", "analysis", "development", "experimentation", "technology"],
    ),
}


def generate_position(rng: random.Random, specialization: Department) -> Tuple[str, List[str]]:
    descriptions, keywords = POSITION_TEMPLATES[specialization]
    description = rng.choice(descriptions)

    shuffled = list(keywords)
    rng.shuffle(shuffled)
    return description, shuffled[: rng.randrange(2, 5)]
