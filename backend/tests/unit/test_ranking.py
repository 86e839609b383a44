"""Unit tests for the ranking engine."""
import pytest

from company_ranker.core.ranking import (
    calculate_global_ranks,
    calculate_group_ranks,
    calculate_performance,
    enrich_companies,
    rating_group,
)
from company_ranker.models.schemas import EnrichedCompany, GroupRanks


class TestRatingGroup:
    """Tests for rating_group function."""

    @pytest.mark.unit
    @pytest.mark.parametrize("rating,expected", [
        (0, 0),
        (4.4, 4),
        (4.5, 5),
        (5.5, 6),
        (7.49, 7),
        (10, 10),
    ])
    def test_rounds_half_up(self, rating, expected):
        """Test that halves round up consistently."""
        assert rating_group(rating) == expected


class TestCalculatePerformance:
    """Tests for calculate_performance function."""

    @pytest.mark.unit
    def test_daily_above_weekly_average(self, company_factory):
        """Test positive percentage when today beats the weekly average."""
        company = company_factory(1, daily_income=2000, weekly_income=10000)
        assert calculate_performance(company) == pytest.approx(40.0)

    @pytest.mark.unit
    def test_daily_below_weekly_average(self, company_factory):
        """Test negative percentage when today trails the weekly average."""
        company = company_factory(1, daily_income=500, weekly_income=7000)
        assert calculate_performance(company) == pytest.approx(-50.0)

    @pytest.mark.unit
    def test_zero_weekly_income_returns_zero(self, company_factory):
        """Test that no weekly revenue yields 0 instead of dividing by zero."""
        company = company_factory(1, daily_income=500, weekly_income=0)
        assert calculate_performance(company) == 0.0


class TestCalculateGlobalRanks:
    """Tests for calculate_global_ranks function."""

    @pytest.mark.unit
    def test_rating_beats_revenue(self, company_factory):
        """Test that a higher rating outranks a higher weekly income."""
        companies = [
            company_factory(1, rating=9.6, weekly_income=100),
            company_factory(2, rating=9.4, weekly_income=200),
            company_factory(3, rating=5.0, weekly_income=50),
        ]
        assert calculate_global_ranks(companies) == [1, 2, 3]

    @pytest.mark.unit
    def test_weekly_income_breaks_rating_ties(self, company_factory):
        """Test that equal ratings fall back to weekly income."""
        companies = [
            company_factory(1, rating=7, weekly_income=100),
            company_factory(2, rating=7, weekly_income=300),
            company_factory(3, rating=7, weekly_income=200),
        ]
        assert calculate_global_ranks(companies) == [3, 1, 2]

    @pytest.mark.unit
    def test_ranks_are_a_permutation(self, sample_companies):
        """Test that ranks cover 1..N without gaps or duplicates."""
        ranks = calculate_global_ranks(sample_companies)
        assert sorted(ranks) == list(range(1, len(sample_companies) + 1))

    @pytest.mark.unit
    def test_full_ties_get_distinct_ranks(self, company_factory):
        """Test that identical keys still receive distinct ranks."""
        companies = [company_factory(i, rating=5, weekly_income=100) for i in range(1, 5)]
        assert sorted(calculate_global_ranks(companies)) == [1, 2, 3, 4]

    @pytest.mark.unit
    def test_empty_batch(self):
        """Test that an empty batch yields no ranks."""
        assert calculate_global_ranks([]) == []


class TestCalculateGroupRanks:
    """Tests for calculate_group_ranks function."""

    @pytest.mark.unit
    def test_age_ranks_ascend_within_group(self, company_factory):
        """Test that the youngest company in a group has age rank 1."""
        companies = [
            company_factory(1, rating=8.2, days_old=10),
            company_factory(2, rating=7.9, days_old=5),
        ]
        ranks = calculate_group_ranks(companies)

        assert [r.rank_age for r in ranks] == [2, 1]
        assert [r.total_in_group for r in ranks] == [2, 2]

    @pytest.mark.unit
    def test_groups_are_ranked_independently(self, sample_companies):
        """Test that each rating group has its own 1-based ranks."""
        ranks = calculate_group_ranks(sample_companies)

        # Companies 1 and 2 share rating 7; company 2 is younger and earns more
        assert ranks[0] == GroupRanks(rank_age=2, rank_revenue=2, rank_customers=2, total_in_group=2)
        assert ranks[1] == GroupRanks(rank_age=1, rank_revenue=1, rank_customers=1, total_in_group=2)
        # Singletons rank first in everything
        for single in (ranks[2], ranks[3], ranks[4]):
            assert single == GroupRanks(rank_age=1, rank_revenue=1, rank_customers=1, total_in_group=1)

    @pytest.mark.unit
    def test_group_ranks_are_permutations(self, company_factory):
        """Test that every group rank sequence is a permutation of 1..size."""
        companies = [
            company_factory(i, rating=rating, days_old=(i * 37) % 11,
                            weekly_income=(i * 53) % 17, weekly_customers=(i * 29) % 13)
            for i, rating in enumerate([4.6, 5.2, 5.4, 4.9, 3.1, 5.0, 3.4], start=1)
        ]
        ranks = calculate_group_ranks(companies)

        groups = {}
        for company, rank in zip(companies, ranks):
            groups.setdefault(rating_group(company.rating), []).append(rank)

        for members in groups.values():
            expected = list(range(1, len(members) + 1))
            assert sorted(r.rank_age for r in members) == expected
            assert sorted(r.rank_revenue for r in members) == expected
            assert sorted(r.rank_customers for r in members) == expected
            assert all(r.total_in_group == len(members) for r in members)

    @pytest.mark.unit
    def test_duplicate_ids_do_not_collide(self, company_factory):
        """Test that ranks follow positions, not ids."""
        companies = [
            company_factory(1, rating=5, days_old=30),
            company_factory(1, rating=5, days_old=10),
        ]
        ranks = calculate_group_ranks(companies)
        assert [r.rank_age for r in ranks] == [2, 1]


class TestEnrichCompanies:
    """Tests for enrich_companies function."""

    @pytest.mark.unit
    def test_preserves_order_and_fields(self, sample_companies):
        """Test that enrichment keeps input order and raw fields."""
        enriched = enrich_companies(sample_companies)

        assert all(isinstance(c, EnrichedCompany) for c in enriched)
        assert [c.id for c in enriched] == [c.id for c in sample_companies]
        assert enriched[0].name == "Alpha Gardens"
        assert enriched[0].weekly_income == 10000

    @pytest.mark.unit
    def test_attaches_derived_fields(self, sample_companies):
        """Test global rank, performance and group ranks on the sample batch."""
        enriched = {c.id: c for c in enrich_companies(sample_companies)}

        assert enriched[5].torn_rank == 1
        assert enriched[2].torn_rank == 2
        assert enriched[1].torn_rank == 3
        assert enriched[3].torn_rank == 4
        assert enriched[4].torn_rank == 5
        assert enriched[1].performance == pytest.approx(40.0)
        assert enriched[4].performance == 0.0
        assert enriched[2].group_ranks.total_in_group == 2

    @pytest.mark.unit
    def test_display_rank_unset(self, sample_companies):
        """Test that enrichment does not assign a display rank."""
        assert all(c.display_rank is None for c in enrich_companies(sample_companies))

    @pytest.mark.unit
    def test_does_not_mutate_input(self, sample_companies):
        """Test that the raw batch is left untouched."""
        before = [c.model_dump() for c in sample_companies]
        enrich_companies(sample_companies)
        assert [c.model_dump() for c in sample_companies] == before

    @pytest.mark.unit
    def test_re_enriching_recomputes(self, sample_companies):
        """Test that enriched records can be enriched again."""
        once = enrich_companies(sample_companies)
        twice = enrich_companies(once)
        assert [c.torn_rank for c in twice] == [c.torn_rank for c in once]

    @pytest.mark.unit
    def test_empty_batch(self):
        """Test that an empty batch enriches to an empty list."""
        assert enrich_companies([]) == []


class TestDerivedProperties:
    """Tests for computed fields on EnrichedCompany."""

    @pytest.mark.unit
    def test_staffing_percent(self, sample_companies):
        """Test staffing as a rounded share of capacity."""
        enriched = enrich_companies(sample_companies)
        assert enriched[0].staffing_percent == 50
        assert enriched[3].staffing_percent == 0

    @pytest.mark.unit
    def test_performance_band(self, sample_companies):
        """Test up, flat and down bands around the weekly average."""
        enriched = {c.id: c for c in enrich_companies(sample_companies)}
        assert enriched[1].performance_band.value == "up"
        assert enriched[2].performance_band.value == "down"
        assert enriched[3].performance_band.value == "flat"
