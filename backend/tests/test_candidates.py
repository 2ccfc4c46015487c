"""
Hiring market tests: pool quality, pool size, refresh limits.
"""

import random

import pytest

from corporate_chaos.sim_engine.entities.company import Company
from corporate_chaos.sim_engine.entities.employee import calculate_salary
from corporate_chaos.sim_engine.entities.enums import Department
from corporate_chaos.sim_engine.generation.candidate_generator import (
    MAX_CANDIDATES,
    MAX_REFRESHES_PER_QUARTER,
    MIN_CANDIDATES,
    CandidatePool,
    candidate_count,
    generate_candidate,
    hiring_quality,
    quality_label,
)


class TestHiringQuality:
    def test_neutral_company_without_hr(self, company, registry):
        assert hiring_quality(company, registry) == pytest.approx(0.6)
        assert candidate_count(0.6) == 6
        assert candidate_count(0.59) == 5
        assert quality_label(0.6).startswith("Good")

    def test_best_case_is_capped(self, registry, make_employee):
        star = make_employee(productivity=100, morale=100, specialization=Department.HR)
        registry.hire(star, quarter=1)
        registry.assign(star.id, Department.HR)

        quality = hiring_quality(Company(reputation=100, morale=100), registry)

        assert quality == 1.0
        assert candidate_count(quality) == MAX_CANDIDATES
        assert quality_label(quality).startswith("Excellent")

    def test_worst_case(self, registry):
        quality = hiring_quality(Company(reputation=-100, morale=-100), registry)

        assert quality == pytest.approx(0.3)
        assert candidate_count(quality) == 4
        assert quality_label(quality).startswith("Poor")

    def test_count_bounds(self):
        assert candidate_count(-5.0) == MIN_CANDIDATES
        assert candidate_count(5.0) == MAX_CANDIDATES


class TestGenerateCandidate:
    def test_same_seed_same_candidate(self):
        a = generate_candidate(random.Random(4), 0.6, current_quarter=10)
        b = generate_candidate(random.Random(4), 0.6, current_quarter=10)

        assert a.to_dict() == b.to_dict()

    def test_candidates_are_consistent(self):
        rng = random.Random(12)
        for quarter in (1, 12, 40):
            for quality in (0.2, 0.5, 0.7, 0.9):
                candidate = generate_candidate(rng, quality, quarter)

                assert 20 <= candidate.productivity <= 100
                assert candidate.salary == calculate_salary(
                    candidate.overall_skill, candidate.experience, candidate.productivity
                )
                assert not candidate.is_assigned
                assert candidate.position_description

    def test_poor_quality_brings_riskier_people(self):
        rng = random.Random(3)
        ranks = [generate_candidate(rng, 0.1, 10).risk_level.rank for _ in range(100)]

        assert min(ranks) >= 2

    def test_high_quality_brings_safer_people(self):
        rng = random.Random(3)
        ranks = [generate_candidate(rng, 0.9, 10).risk_level.rank for _ in range(100)]

        assert max(ranks) <= 2


class TestCandidatePool:
    def test_generate_sizes_pool_from_quality(self, company, registry):
        pool = CandidatePool(random.Random(1))

        candidates = pool.generate(company, registry, current_quarter=1)

        assert pool.quality == pytest.approx(0.6)
        assert len(candidates) == candidate_count(pool.quality)
        assert pool.candidates is candidates

    def test_refresh_limit_per_quarter(self, company, registry):
        pool = CandidatePool(random.Random(1))
        company.last_refresh_quarter = 3

        results = [pool.refresh(company, registry, current_quarter=3) for _ in range(MAX_REFRESHES_PER_QUARTER + 1)]

        assert results == [True] * MAX_REFRESHES_PER_QUARTER + [False]
        assert pool.remaining_refreshes(company, 3) == 0
        assert pool.remaining_refreshes(company, 4) == MAX_REFRESHES_PER_QUARTER

        assert pool.refresh(company, registry, current_quarter=4) is True
        assert company.current_quarter_refreshes == 1
        assert company.last_refresh_quarter == 4

    def test_take(self, company, registry):
        pool = CandidatePool(random.Random(1))
        first = pool.generate(company, registry, 1)[0]

        assert pool.take(first.id) is first
        assert first not in pool.candidates
        with pytest.raises(KeyError):
            pool.take(first.id)
