"""Tests for demographic quota distribution."""

import pytest

from research_calculators.calculators import (
    DemographicsInputs,
    QuotaCell,
    census_quota_cells,
    compute_demographics,
)
from research_calculators.reference import QualityRating, get_census
from research_calculators.results import Infeasible, NoResult, NotFound


def young_adults(explicit=None):
    cells = [
        QuotaCell("female:18-24", target=explicit),
        QuotaCell("female:25-34"),
        QuotaCell("male:18-24"),
        QuotaCell("male:25-34"),
    ]
    return cells


# =========================================================================
# RECONCILIATION
# =========================================================================
class TestReconciliation:
    """Cell counts always add up to the overall sample."""

    @pytest.mark.parametrize("country", ["Turkey", "UK", "Germany", "Poland"])
    @pytest.mark.parametrize("n", [1, 7, 99, 500, 1000, 1234, 4999])
    def test_full_census_sums_to_n(self, country, n):
        result = compute_demographics(DemographicsInputs(country=country, overall_n=n))
        assert sum(result.counts.values()) == n
        assert all(count >= 0 for count in result.counts.values())

    @pytest.mark.parametrize("n", [3, 250, 1001])
    @pytest.mark.parametrize("explicit", [None, 0, 1, 100])
    def test_partial_breakdown_sums_to_n(self, n, explicit):
        if explicit is not None and explicit > n:
            pytest.skip("explicit cell larger than sample")
        result = compute_demographics(DemographicsInputs(overall_n=n, cells=young_adults(explicit)))
        assert sum(result.counts.values()) == n

    def test_full_census_is_proportional(self):
        result = compute_demographics(DemographicsInputs(country="Turkey", overall_n=1000))
        entry = get_census("Turkey")
        largest = max(entry.cells, key=entry.cells.get)
        for allocation in result.allocations:
            if allocation.key != largest:
                assert abs(allocation.count - 1000 * entry.cells[allocation.key]) <= 0.5 + 1e-9


# =========================================================================
# EXPLICIT AND PROPORTIONAL CELLS
# =========================================================================
class TestQuotaCells:
    """Explicit targets pass through; the rest follow census weights."""

    def test_explicit_cell_passes_through(self):
        result = compute_demographics(DemographicsInputs(overall_n=1000, cells=young_adults(150)))
        counts = result.counts
        assert counts["female:18-24"] == 150
        assert counts == {
            "female:18-24": 150,
            "female:25-34": 327,
            "male:18-24": 209,
            "male:25-34": 314,
        }

    def test_allocations_keep_request_order(self):
        result = compute_demographics(DemographicsInputs(overall_n=100, cells=young_adults()))
        assert [a.key for a in result.allocations] == [c.key for c in young_adults()]

    def test_explicit_total_over_sample_is_infeasible(self):
        cells = [QuotaCell("female:18-24", 600), QuotaCell("male:18-24", 500)]
        result = compute_demographics(DemographicsInputs(overall_n=1000, cells=cells))
        assert isinstance(result, Infeasible)

    def test_all_explicit_must_match_sample(self):
        cells = [QuotaCell("female:18-24", 400), QuotaCell("male:18-24", 400)]
        assert isinstance(
            compute_demographics(DemographicsInputs(overall_n=1000, cells=cells)),
            Infeasible
        )
        exact = compute_demographics(DemographicsInputs(overall_n=800, cells=cells))
        assert exact.counts == {"female:18-24": 400, "male:18-24": 400}

    def test_explicit_cell_may_be_outside_census(self):
        cells = [QuotaCell("nonbinary:18-24", 20), QuotaCell("female:18-24")]
        result = compute_demographics(DemographicsInputs(overall_n=100, cells=cells))
        assert result.counts == {"nonbinary:18-24": 20, "female:18-24": 80}

    def test_keys_are_case_insensitive(self):
        cells = [QuotaCell("Female:18-24"), QuotaCell("MALE:18-24")]
        result = compute_demographics(DemographicsInputs(overall_n=100, cells=cells))
        assert set(result.counts) == {"female:18-24", "male:18-24"}


# =========================================================================
# INVALID INPUT AND MISSING REFERENCE DATA
# =========================================================================
class TestInvalidInputs:
    """Typed outcomes instead of exceptions."""

    @pytest.mark.parametrize("n", [0, -5, None])
    def test_non_positive_sample(self, n):
        assert isinstance(compute_demographics(DemographicsInputs(overall_n=n)), NoResult)

    def test_empty_breakdown(self):
        assert isinstance(compute_demographics(DemographicsInputs(overall_n=100, cells=[])), NoResult)

    def test_duplicate_cells(self):
        cells = [QuotaCell("male:18-24"), QuotaCell("Male:18-24")]
        assert isinstance(compute_demographics(DemographicsInputs(overall_n=100, cells=cells)), NoResult)

    def test_negative_target(self):
        cells = [QuotaCell("male:18-24", -1), QuotaCell("female:18-24")]
        assert isinstance(compute_demographics(DemographicsInputs(overall_n=100, cells=cells)), NoResult)

    def test_unknown_country(self):
        result = compute_demographics(DemographicsInputs(country="Atlantis", overall_n=100))
        assert isinstance(result, NotFound)
        assert result.key == "Atlantis"

    def test_unknown_proportional_cell(self):
        cells = [QuotaCell("female:12-17")]
        result = compute_demographics(DemographicsInputs(overall_n=100, cells=cells))
        assert isinstance(result, NotFound)


# =========================================================================
# DERIVED OUTPUTS
# =========================================================================
class TestDerivedOutputs:
    """Quality, marginals and sourcing flags."""

    def test_smallest_cell_drives_quality(self):
        result = compute_demographics(DemographicsInputs(country="Turkey", overall_n=1000))
        assert result.smallest_cell == min(result.counts.values())
        assert result.smallest_cell_moe > 10
        assert result.quality_rating == QualityRating.POOR

    def test_large_cells_rate_better(self):
        cells = [QuotaCell("female:25-34"), QuotaCell("male:25-34")]
        result = compute_demographics(DemographicsInputs(overall_n=2000, cells=cells))
        assert result.quality_rating == QualityRating.GOOD

    def test_empty_cell_rates_poor(self):
        result = compute_demographics(DemographicsInputs(country="Turkey", overall_n=1))
        assert result.smallest_cell == 0
        assert result.smallest_cell_moe is None
        assert result.quality_rating == QualityRating.POOR

    def test_marginals_add_up(self):
        result = compute_demographics(DemographicsInputs(country="UK", overall_n=1000))
        assert sum(result.age_distribution.values()) == 1000
        assert sum(result.gender_distribution.values()) == 1000

    def test_full_census_incidence(self):
        result = compute_demographics(DemographicsInputs(country="Turkey", overall_n=500))
        assert result.incidence_rate == 100.0
        assert result.is_achievable
        assert result.data_source == "TÜİK 2024"

    def test_narrow_target_flags_hard_to_reach(self):
        cells = [QuotaCell("female:65+")]
        result = compute_demographics(DemographicsInputs(country="Germany", overall_n=300))
        narrow = compute_demographics(DemographicsInputs(country="Turkey", overall_n=300, cells=cells))
        assert result.hard_to_reach
        assert narrow.incidence_rate < 10
        assert not narrow.is_achievable


class TestCensusQuotaCells:
    """Census-filtered breakdowns."""

    def test_age_and_gender_filter(self):
        cells = census_quota_cells("Turkey", age_range=(25, 44), gender="female")
        assert [c.key for c in cells] == ["female:25-34", "female:35-44"]
        assert not any(c.is_explicit for c in cells)

    def test_open_ended_band_included(self):
        cells = census_quota_cells("Turkey", age_range=(55, 100))
        assert {c.key for c in cells} == {
            "male:55-64", "male:65+", "female:55-64", "female:65+",
        }

    def test_unknown_country(self):
        assert isinstance(census_quota_cells("Atlantis"), NotFound)

    def test_subset_is_scaled_to_whole_sample(self):
        cells = census_quota_cells("Turkey", gender="female")
        result = compute_demographics(DemographicsInputs(country="Turkey", overall_n=510, cells=cells))
        assert result.counts == {
            "female:18-24": 75,
            "female:25-34": 112,
            "female:35-44": 106,
            "female:45-54": 87,
            "female:55-64": 68,
            "female:65+": 62,
        }
        assert result.gender_distribution == {"female": 510}
