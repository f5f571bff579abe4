#!/usr/bin/env python3
"""
Research Calculators - Main Demo

Walks through every calculator over a small in-memory dataset:
1. Margin of error and sample size
2. Demographic quota distribution
3. MaxDiff design
4. Interview length and fieldwork cost
5. Feasibility assessment
6. Budget, timeline and subgroup planning
7. @-mention search and auto-fill from past proposals
"""

from research_calculators.calculators import (
    DemographicsInputs,
    FeasibilityInputs,
    LOICostInputs,
    MaxDiffInputs,
    MOEInputs,
    QuestionnaireInputs,
    QuotaCell,
    SampleSizeInputs,
    assess_project,
    compute_demographics,
    compute_margin_of_error,
    compute_maxdiff,
    compute_sample_size,
    estimate_cost,
    estimate_interview_length,
)
from research_calculators.config import get_settings
from research_calculators.extraction import (
    CalculatorType,
    Project,
    Proposal,
    format_entity_info,
    get_autofill_from_entity,
    merge_autofill,
    search_entities,
)
from research_calculators.insights import (
    StudyContext,
    budget_recommendation,
    compare_with_benchmark,
    contextual_insights,
    generate_insights,
    subgroup_recommendation,
    timeline_recommendation,
)
from research_calculators.logging_setup import configure_logging
from research_calculators.results import is_result


SAMPLE_PROPOSALS = [
    Proposal.model_validate({
        "id": "p-101",
        "code": "ACM-2024-01",
        "projectId": "prj-1",
        "status": "approved",
        "createdAt": "2024-03-02T09:00:00Z",
        "content": {
            "title": "Acme Brand Health Q1",
            "client": "Acme Corp",
            "methodology": {"type": "online"},
            "sampleSize": 500,
            "markets": [{"country": "Turkey"}, {"country": "Germany"}],
            "loi": 12,
        },
    }),
    Proposal.model_validate({
        "id": "p-102",
        "code": "ACM-2024-02",
        "projectId": "prj-1",
        "status": "draft",
        "createdAt": "2024-06-18T14:30:00Z",
        "content": {
            "title": "Acme Brand Health Q2",
            "client": "Acme  Corp",
            "methodology": {"type": "online"},
            "sampleSize": 700,
            "markets": [{"country": "Turkey"}, {"country": "UK"}],
            "loi": 15,
        },
    }),
    Proposal.model_validate({
        "id": "p-201",
        "code": "GLB-2024-07",
        "status": "deleted",
        "createdAt": "2024-05-11T08:00:00Z",
        "content": {
            "title": "Globex Pricing Study",
            "client": "Globex",
            "methodology": "cati",
            "sampleSize": 300,
            "markets": [{"country": "USA"}],
        },
    }),
]

SAMPLE_PROJECTS = [
    Project(id="prj-1", name="Acme Brand Tracker", client="Acme Corp"),
]


def _print_insights(outputs, inputs=None):
    for insight in generate_insights(outputs, inputs=inputs):
        print(f"    [{insight.type.value:<14}] {insight.message}")


def run_precision_demo():
    """Margin of error and sample size."""
    print("=" * 60)
    print("PRECISION: MARGIN OF ERROR & SAMPLE SIZE")
    print("=" * 60)
    print()

    print(f"{'Sample':<10} {'Confidence':<12} {'MOE (%)':<10} {'Rating':<12}")
    print("-" * 60)
    for n in (100, 400, 1000, 2500):
        moe = compute_margin_of_error(MOEInputs(sample_size=n, confidence_level=95))
        print(f"{n:<10} {'95%':<12} {moe.margin_of_error:<10} {moe.quality_rating.value:<12}")
    print()

    inputs = SampleSizeInputs(confidence_level=95, margin_of_error=5)
    result = compute_sample_size(inputs)
    print(f"Sample needed for ±5% at 95%: {result.recommended_sample}")
    print(f"  Range: {result.minimum_sample}-{result.maximum_sample}")
    print(f"  Estimated online cost: ${result.estimated_cost:,.0f}")
    _print_insights(result, inputs)
    print()

    finite = compute_margin_of_error(MOEInputs(sample_size=400, population_size=300))
    print(f"n=400 from a population of 300: {finite.reason}")
    print()


def run_demographics_demo():
    """Census-proportional quotas with one fixed cell."""
    print("=" * 60)
    print("DEMOGRAPHIC QUOTAS (Turkey, n=1000)")
    print("=" * 60)
    print()

    inputs = DemographicsInputs(
        country="Turkey",
        overall_n=1000,
        cells=[
            QuotaCell("female:18-24", target=150),
            QuotaCell("female:25-34"),
            QuotaCell("male:18-24"),
            QuotaCell("male:25-34"),
        ]
    )
    result = compute_demographics(inputs)

    print(f"{'Cell':<18} {'Census':<10} {'Count':<8} {'Fixed':<6}")
    print("-" * 60)
    for allocation in result.allocations:
        census = f"{allocation.census_proportion:.1%}" if allocation.census_proportion else "-"
        fixed = "yes" if allocation.explicit else ""
        print(f"{allocation.key:<18} {census:<10} {allocation.count:<8} {fixed:<6}")
    print("-" * 60)
    print(f"{'Total':<18} {'':<10} {sum(result.counts.values()):<8}")
    print()
    print(f"Smallest cell: n={result.smallest_cell} (±{result.smallest_cell_moe}%, "
          f"{result.quality_rating.value})")
    _print_insights(result, inputs)
    print()


def run_design_demo():
    """MaxDiff design and questionnaire length."""
    print("=" * 60)
    print("SURVEY DESIGN: MAXDIFF & INTERVIEW LENGTH")
    print("=" * 60)
    print()

    maxdiff_inputs = MaxDiffInputs(total_items=14, sample_size=150)
    design = compute_maxdiff(maxdiff_inputs)
    print(f"MaxDiff with {design.total_items} items:")
    print(f"  - Items per set: {design.items_per_set}")
    print(f"  - Sets: {design.number_of_sets}")
    print(f"  - Minimum respondents: {design.minimum_respondents}")
    print(f"  - First sets: {design.design[:3]}")
    _print_insights(design, maxdiff_inputs)
    print()

    questionnaire = QuestionnaireInputs(
        single_choice=25,
        multiple_choice=10,
        matrix_questions=3,
        matrix_items=8,
        open_end_short=2,
        open_end_long=2,
        intro_screens=2,
    )
    length = estimate_interview_length(questionnaire)
    print(f"Questionnaire: ~{length.estimated_loi} min "
          f"({length.min_loi}-{length.max_loi}), {length.cost_tier} tier")
    _print_insights(length, questionnaire)
    print()

    cost = estimate_cost(LOICostInputs(loi_minutes=length.estimated_loi, incidence_rate=12, sample_size=800))
    print(f"Fieldwork cost at 12% incidence, n=800: "
          f"${cost.total_min:,.0f}-${cost.total_max:,.0f}")
    _print_insights(cost)
    print()


def run_feasibility_demo():
    """Feasibility of a multi-market brief."""
    print("=" * 60)
    print("FEASIBILITY ASSESSMENT")
    print("=" * 60)
    print()

    inputs = FeasibilityInputs(
        countries=["Turkey", "Germany", "Brazil"],
        sample_size=800,
        timeline_days=7,
        incidence_rate=12,
        loi=18,
    )
    result = assess_project(inputs)

    print(f"{'Dimension':<20} {'Score':<8} {'Weight':<8}")
    print("-" * 60)
    for dim in result.dimensions:
        print(f"{dim.dimension:<20} {dim.score:<8.0f} {dim.weight:<8.2f}")
    print("-" * 60)
    print(f"{'Overall':<20} {result.overall_score:<8.1f} {result.verdict.value}")
    print()

    for risk in result.risks:
        print(f"  [{risk.severity.value}] {risk.description}")
        print(f"      -> {risk.mitigation}")
    print()
    _print_insights(result, inputs)
    print()


def run_planning_demo():
    """Budget, timeline and subgroup planning."""
    print("=" * 60)
    print("STUDY PLANNING")
    print("=" * 60)
    print()

    budget = budget_recommendation(15000, "Germany", loi=12)
    print("Budget $15,000 (Germany, online, 12 min):")
    print(f"  ${budget.cost_per_respondent:.2f}/respondent, max n={budget.max_sample:,}, "
          f"recommended n={budget.recommended_sample:,} (±{budget.moe_at_recommended}%)")

    timeline = timeline_recommendation(10, "cati", incidence_rate=40)
    print(f"10-day CATI window at 40% incidence ({timeline.daily_capacity}/day):")
    print(f"  comfortable n={timeline.comfortable_sample:,}, aggressive n={timeline.aggressive_sample:,}, "
          f"risk zone n={timeline.risk_zone:,}")

    subgroups = subgroup_recommendation(budget.recommended_sample, 6)
    print(f"  {subgroups.recommendation}")

    comparison = compare_with_benchmark(budget.moe_at_recommended, "moe")
    print(f"  MOE percentile vs industry: {comparison.percentile} ({comparison.rating.value})")
    print()

    inputs = SampleSizeInputs(margin_of_error=3)
    context = StudyContext(study_type="Brand Tracker", country="Germany", budget=15000)
    for insight in contextual_insights(compute_sample_size(inputs), inputs, context):
        print(f"  [{insight.type.value}] {insight.message}")
    print()


def run_autofill_demo():
    """@-mention search and auto-fill."""
    print("=" * 60)
    print("@-MENTION SEARCH & AUTO-FILL")
    print("=" * 60)
    print()

    results = search_entities("acme", SAMPLE_PROPOSALS, SAMPLE_PROJECTS)
    for entity in results:
        chips = ", ".join(format_entity_info(entity))
        print(f"  @{entity.type.value:<9} {entity.label:<24} {chips}")
    print()

    client = next(e for e in results if e.type.value == "client")
    autofill = get_autofill_from_entity(client, CalculatorType.FEASIBILITY)
    print(f"Auto-fill from {client.label}: {autofill.populated()}")

    inputs = merge_autofill(autofill, FeasibilityInputs())
    result = assess_project(inputs)
    if is_result(result):
        print(f"  Feasibility of a repeat study: {result.overall_score:.0f}/100 "
              f"({result.verdict.value})")
    print()


def main():
    """Main entry point."""
    settings = get_settings()
    configure_logging(settings)

    print()
    print("+" + "=" * 58 + "+")
    print(f"|{settings.app_name.upper():^58}|")
    print("|                                                          |")
    print("|  Sample size, quotas, MaxDiff, LOI and feasibility       |")
    print("+" + "=" * 58 + "+")
    print()

    run_precision_demo()
    run_demographics_demo()
    run_design_demo()
    run_feasibility_demo()
    run_planning_demo()
    run_autofill_demo()

    print("=" * 60)
    print("DEMONSTRATION COMPLETE")
    print("=" * 60)
    print()


if __name__ == "__main__":
    main()
