"""Tests for feasibility scoring."""

import pytest

from research_calculators.calculators import (
    DimensionScore,
    FeasibilityInputs,
    FeasibilityVerdict,
    RiskSeverity,
    assess_project,
    score_feasibility,
    verdict_for,
)
from research_calculators.calculators.feasibility import (
    incidence_dimension,
    market_difficulty_dimension,
    sample_market_dimension,
    timeline_dimension,
)
from research_calculators.config import FeasibilityConfig
from research_calculators.reference import Methodology
from research_calculators.results import NoResult


def healthy_dimensions(**overrides):
    scores = {
        "timeline": 100,
        "incidence": 100,
        "sample_market": 100,
        "loi": 100,
        "market_difficulty": 100,
    }
    scores.update(overrides)
    return [DimensionScore(name, score) for name, score in scores.items()]


# =========================================================================
# VERDICT
# =========================================================================
class TestVerdict:
    """Verdict bands; a score on a boundary takes the upper band."""

    @pytest.mark.parametrize("score,verdict", [
        (100, FeasibilityVerdict.FEASIBLE),
        (75, FeasibilityVerdict.FEASIBLE),
        (74.999, FeasibilityVerdict.AT_RISK),
        (40, FeasibilityVerdict.AT_RISK),
        (39.999, FeasibilityVerdict.INFEASIBLE),
        (0, FeasibilityVerdict.INFEASIBLE),
    ])
    def test_boundaries(self, score, verdict, feasibility_config):
        assert verdict_for(score, feasibility_config) == verdict

    @pytest.mark.parametrize("score,verdict", [
        (75, FeasibilityVerdict.FEASIBLE),
        (40, FeasibilityVerdict.AT_RISK),
        (39.999, FeasibilityVerdict.INFEASIBLE),
    ])
    def test_composite_on_boundary(self, score, verdict, feasibility_config):
        result = score_feasibility([DimensionScore("custom", score)], config=feasibility_config)
        assert result.overall_score == score
        assert result.verdict == verdict

    @pytest.mark.parametrize("count", [9, 11])
    @pytest.mark.parametrize("score,verdict", [
        (75, FeasibilityVerdict.FEASIBLE),
        (40, FeasibilityVerdict.AT_RISK),
    ])
    def test_equal_shares_hold_boundary(self, count, score, verdict, feasibility_config):
        dims = [DimensionScore(f"d{i}", score) for i in range(count)]
        result = score_feasibility(dims, config=feasibility_config)
        assert result.overall_score == score
        assert result.verdict == verdict

    def test_custom_weights_hold_boundary(self, feasibility_config):
        dims = [DimensionScore(name, 40) for name in ("a", "b", "c")]
        result = score_feasibility(dims, weights={"a": 0.1, "b": 0.7, "c": 0.2}, config=feasibility_config)
        assert result.verdict == FeasibilityVerdict.AT_RISK

    def test_tuned_thresholds(self):
        config = FeasibilityConfig(feasible_threshold=90, at_risk_threshold=60)
        assert verdict_for(85, config) == FeasibilityVerdict.AT_RISK
        assert verdict_for(55, config) == FeasibilityVerdict.INFEASIBLE


# =========================================================================
# WEIGHTING
# =========================================================================
class TestWeighting:
    """Weighted composite."""

    def test_default_weights(self, feasibility_config):
        result = score_feasibility(healthy_dimensions(timeline=0), config=feasibility_config)
        assert result.overall_score == pytest.approx(75)
        assert sum(d.weight for d in result.dimensions) == pytest.approx(1)

    def test_caller_weights_are_normalised(self, feasibility_config):
        dims = [DimensionScore("a", 100), DimensionScore("b", 50)]
        result = score_feasibility(dims, weights={"a": 3, "b": 1}, config=feasibility_config)
        assert result.overall_score == pytest.approx(87.5)
        assert [d.weight for d in result.dimensions] == [0.75, 0.25]

    def test_own_weight_takes_precedence(self, feasibility_config):
        dims = [DimensionScore("a", 100, weight=1), DimensionScore("b", 0, weight=1)]
        result = score_feasibility(dims, weights={"a": 9}, config=feasibility_config)
        assert result.overall_score == pytest.approx(50)

    @pytest.mark.parametrize("dims,weights", [
        ([], None),
        ([DimensionScore("a", 101)], None),
        ([DimensionScore("a", -1)], None),
        ([DimensionScore("a", 50, weight=-1)], None),
        ([DimensionScore("a", 50)], {"a": 0}),
    ])
    def test_invalid(self, dims, weights, feasibility_config):
        assert isinstance(score_feasibility(dims, weights, feasibility_config), NoResult)


# =========================================================================
# RISKS
# =========================================================================
class TestRisks:
    """Risks come from single weak dimensions, not the composite."""

    def test_catastrophic_dimension_is_not_hidden(self, feasibility_config):
        result = score_feasibility(healthy_dimensions(market_difficulty=0), config=feasibility_config)
        assert result.verdict == FeasibilityVerdict.FEASIBLE
        assert len(result.risks) == 1
        risk = result.risks[0]
        assert risk.dimension == "market_difficulty"
        assert risk.severity == RiskSeverity.CRITICAL
        assert risk.mitigation

    @pytest.mark.parametrize("score,severity", [
        (29, RiskSeverity.LOW),
        (20, RiskSeverity.MEDIUM),
        (10, RiskSeverity.HIGH),
        (5, RiskSeverity.CRITICAL),
    ])
    def test_severity_grows_with_deficit(self, score, severity, feasibility_config):
        result = score_feasibility(healthy_dimensions(loi=score), config=feasibility_config)
        assert result.risks[0].severity == severity

    def test_floor_itself_is_not_a_risk(self, feasibility_config):
        result = score_feasibility(healthy_dimensions(loi=30), config=feasibility_config)
        assert result.risks == []

    def test_risks_ranked_most_severe_first(self, feasibility_config):
        result = score_feasibility(
            healthy_dimensions(timeline=25, incidence=2, loi=12),
            config=feasibility_config
        )
        assert [r.dimension for r in result.risks] == ["incidence", "loi", "timeline"]


# =========================================================================
# PROJECT ASSESSMENT
# =========================================================================
class TestAssessProject:
    """Scoring a project brief."""

    def test_routine_study(self, feasibility_config):
        inputs = FeasibilityInputs(
            countries=["Turkey"], sample_size=400, timeline_days=14,
            incidence_rate=30, loi=10,
        )
        result = assess_project(inputs, config=feasibility_config)
        scores = {d.dimension: d.score for d in result.dimensions}
        assert scores == {
            "timeline": 100,
            "incidence": 85,
            "sample_market": 100,
            "loi": 90,
            "market_difficulty": 75,
        }
        assert result.overall_score == pytest.approx(90.5)
        assert result.verdict == FeasibilityVerdict.FEASIBLE
        assert result.risks == []
        assert result.estimated_cost == 6000
        assert result.estimated_days == 3
        assert result.recommendations == []

    def test_stretched_study(self, feasibility_config):
        inputs = FeasibilityInputs(
            methodology=Methodology.F2F, countries=["Turkey", "Brazil"],
            sample_size=1000, timeline_days=10, incidence_rate=4, loi=25,
        )
        result = assess_project(inputs, config=feasibility_config)
        assert result.verdict == FeasibilityVerdict.INFEASIBLE
        assert result.risks[0].severity == RiskSeverity.CRITICAL
        assert "Address high-risk items before proceeding" in result.recommendations
        assert "Consider panel blend for low-incidence audiences" in result.recommendations

    def test_string_methodology(self, feasibility_config):
        inputs = FeasibilityInputs(methodology="cati", countries=["UK"], sample_size=200)
        assert assess_project(inputs, config=feasibility_config).estimated_cost == 5000

    def test_market_size_ratio(self):
        assert sample_market_dimension(100, 50, market_size=100000).score == 100
        assert sample_market_dimension(400, 50, market_size=2000).score == 35
        assert sample_market_dimension(900, 50, market_size=1000).score == 0

    def test_timeline_shortfall(self):
        dim = timeline_dimension(1500, 5, Methodology.ONLINE, 20)
        assert dim.score == 0
        assert "15 days" in dim.rationale

    def test_incidence_and_markets(self):
        assert incidence_dimension(3).score == 10
        many = market_difficulty_dimension(["USA", "UK", "Germany"])
        assert many.score == pytest.approx(100 - 35 / 3 - 10)

    @pytest.mark.parametrize("inputs", [
        FeasibilityInputs(countries=["UK"], sample_size=0),
        FeasibilityInputs(countries=[], sample_size=100),
        FeasibilityInputs(countries=["UK"], sample_size=100, timeline_days=0),
        FeasibilityInputs(countries=["UK"], sample_size=100, incidence_rate=0),
        FeasibilityInputs(countries=["UK"], sample_size=100, loi=-5),
        FeasibilityInputs(countries=["UK"], sample_size=100, market_size=0),
        FeasibilityInputs(methodology="carrier pigeon", countries=["UK"], sample_size=100),
    ])
    def test_invalid_briefs(self, inputs):
        assert isinstance(assess_project(inputs), NoResult)
