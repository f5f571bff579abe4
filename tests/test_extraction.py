"""Tests for entity extraction, search and auto-fill."""

import pytest
from pydantic import ValidationError

from research_calculators.calculators import (
    DemographicsInputs,
    FeasibilityInputs,
    MOEInputs,
    SampleSizeInputs,
)
from research_calculators.config import ReliabilityTier
from research_calculators.extraction import (
    CalculatorAutoFill,
    CalculatorType,
    ClientContext,
    EntityType,
    MentionEntity,
    Proposal,
    ProposalContext,
    client_key,
    client_to_mention,
    extract_clients_from_proposals,
    extract_project_contexts,
    format_entity_info,
    get_autofill_from_entity,
    merge_autofill,
    project_to_mention,
    proposal_to_mention,
    search_entities,
)
from research_calculators.reference import Methodology

from conftest import make_proposal


# =========================================================================
# SNAPSHOT RECORDS
# =========================================================================
class TestRecords:
    """Proposal snapshots from application payloads."""

    def test_camel_case_payload(self):
        proposal = Proposal.model_validate({
            "id": "p-9",
            "projectId": "prj-9",
            "createdAt": "2024-01-01",
            "content": {"sampleSize": 250, "methodology": {"type": "online"}},
        })
        assert proposal.project_id == "prj-9"
        assert proposal.content.sample_size == 250
        assert proposal.content.methodology_type == "online"

    def test_methodology_as_string(self):
        proposal = Proposal.model_validate({"id": "p-9", "content": {"methodology": "cati"}})
        assert proposal.content.methodology_type == "cati"

    def test_snapshots_are_frozen(self):
        proposal = make_proposal("p-9")
        with pytest.raises(ValidationError):
            proposal.status = "deleted"


# =========================================================================
# CLIENT EXTRACTION
# =========================================================================
class TestExtractClients:
    """Client contexts aggregated from proposals."""

    def test_client_key(self):
        assert client_key("Acme   Corp") == "acme-corp"
        assert client_key(" Acme\tCorp ") == "acme-corp"

    def test_same_client_with_different_spacing(self, acme_proposals):
        clients = extract_clients_from_proposals(acme_proposals)
        assert len(clients) == 1
        acme = clients[0]
        assert acme.id == "acme-corp"
        assert acme.name == "Acme Corp"
        assert acme.total_projects == 2
        assert acme.average_sample_size == 600

    def test_last_methodology_wins(self, acme_proposals):
        acme = extract_clients_from_proposals(acme_proposals)[0]
        assert acme.typical_methodology == "cati"

    def test_countries_deduplicated_in_order(self, acme_proposals):
        acme = extract_clients_from_proposals(acme_proposals)[0]
        assert acme.common_countries == ("Turkey", "Germany", "UK")

    def test_recent_proposals_newest_first(self, acme_proposals):
        acme = extract_clients_from_proposals(acme_proposals)[0]
        assert [r.id for r in acme.recent_proposals] == ["p-2", "p-1"]
        assert acme.last_project_date == "2024-06-18T14:30:00Z"

    def test_recent_proposals_capped_at_five(self):
        proposals = [
            make_proposal(f"p-{i}", client="Acme", created_at=f"2024-0{i}-01")
            for i in range(1, 8)
        ]
        acme = extract_clients_from_proposals(proposals)[0]
        assert acme.total_projects == 7
        assert [r.id for r in acme.recent_proposals] == ["p-7", "p-6", "p-5", "p-4", "p-3"]

    def test_running_pairwise_average(self, acme_proposals):
        proposals = acme_proposals + [make_proposal("p-3", client="Acme Corp", sample_size=900)]
        acme = extract_clients_from_proposals(proposals)[0]
        assert acme.average_sample_size == 750

    def test_missing_sample_sizes_skipped(self):
        proposals = [
            make_proposal("p-1", client="Acme"),
            make_proposal("p-2", client="Acme", sample_size=300),
        ]
        assert extract_clients_from_proposals(proposals)[0].average_sample_size == 300

    def test_sorted_by_recency_then_volume(self, proposals):
        clients = extract_clients_from_proposals(proposals)
        assert [c.name for c in clients] == ["Acme Corp", "Globex", "Initech"]

    def test_undated_clients_sorted_by_volume(self):
        proposals = [
            make_proposal("p-1", client="Solo"),
            make_proposal("p-2", client="Busy"),
            make_proposal("p-3", client="Busy"),
        ]
        assert [c.name for c in extract_clients_from_proposals(proposals)] == ["Busy", "Solo"]

    def test_anonymous_proposals_ignored(self, proposals):
        assert all(c.name for c in extract_clients_from_proposals(proposals))

    def test_empty_input(self):
        assert extract_clients_from_proposals([]) == []

    def test_deterministic(self, proposals):
        assert extract_clients_from_proposals(proposals) == extract_clients_from_proposals(proposals)


# =========================================================================
# PROJECT EXTRACTION
# =========================================================================
class TestExtractProjects:
    """Project contexts joined by project id."""

    def test_join_by_project_id(self, projects, proposals):
        tracker = extract_project_contexts(projects, proposals)[0]
        assert [r.id for r in tracker.proposals] == ["p-1", "p-2"]
        assert tracker.client == "Acme Corp"
        assert tracker.status == "active"
        assert tracker.methodology == "online"
        assert tracker.target_sample_size == 500
        assert tracker.target_countries == ("Turkey", "Germany")

    def test_project_without_proposals(self, projects, proposals):
        pricing = extract_project_contexts(projects, proposals)[1]
        assert pricing.proposals == ()
        assert pricing.client == "Globex"
        assert pricing.target_sample_size is None

    def test_empty_input(self):
        assert extract_project_contexts([], []) == []


# =========================================================================
# MENTIONS AND SEARCH
# =========================================================================
class TestMentions:
    """Mention entities and search."""

    def test_metadata_must_match_type(self):
        client = ClientContext(id="acme", name="Acme")
        with pytest.raises(ValueError):
            MentionEntity(id="acme", type=EntityType.PROJECT, label="Acme", metadata=client)

    def test_string_type_is_normalised(self, autofill_config):
        context = ProposalContext(id="p-1", title="Tracker", sample_size=500, methodology="online")
        mention = MentionEntity(id="p-1", type="proposal", label="Tracker", metadata=context)
        assert mention.type is EntityType.PROPOSAL

        autofill = get_autofill_from_entity(mention, CalculatorType.SAMPLE, autofill_config)
        assert autofill.sample_size == 500
        assert autofill.methodology == "online"
        assert format_entity_info(mention) == ["n=500", "online"]

    def test_proposal_mention(self, acme_proposals):
        mention = proposal_to_mention(acme_proposals[0])
        assert mention.type == EntityType.PROPOSAL
        assert mention.label == "Acme Brand Health Q1"
        assert mention.sub_label == "CODE-p-1"
        assert mention.metadata.countries == ("Turkey", "Germany")
        assert mention.metadata.loi == 12

    def test_untitled_proposal(self):
        assert proposal_to_mention(make_proposal("p-1", title=None)).label == "Untitled"

    def test_search_across_kinds(self, proposals, projects):
        results = search_entities("ACME", proposals, projects)
        assert [(r.type, r.id) for r in results] == [
            (EntityType.PROPOSAL, "p-1"),
            (EntityType.PROPOSAL, "p-2"),
            (EntityType.CLIENT, "acme-corp"),
            (EntityType.PROJECT, "prj-1"),
        ]

    def test_search_matches_code(self, proposals, projects):
        results = search_entities("code-p-3", proposals, projects, types=[EntityType.PROPOSAL])
        assert [r.id for r in results] == ["p-3"]

    def test_deleted_proposals_excluded(self, proposals, projects):
        results = search_entities("initech", proposals, projects, types=["proposal"])
        assert results == []

    def test_per_kind_caps(self, projects):
        proposals = [make_proposal(f"p-{i}", client=f"Acme {i}") for i in range(10)]
        results = search_entities("acme", proposals, projects)
        kinds = [r.type for r in results]
        assert kinds.count(EntityType.PROPOSAL) == 5
        assert kinds.count(EntityType.CLIENT) == 3
        assert kinds.count(EntityType.PROJECT) == 1

    def test_no_match(self, proposals, projects):
        assert search_entities("zzz", proposals, projects) == []

    def test_format_entity_info(self, acme_proposals, projects):
        proposal = proposal_to_mention(acme_proposals[0])
        assert format_entity_info(proposal) == ["n=500", "online", "Turkey, Germany", "12 min"]

        client = client_to_mention(extract_clients_from_proposals(acme_proposals)[0])
        assert format_entity_info(client) == ["2 projects", "avg n=600", "cati"]

        project = project_to_mention(extract_project_contexts(projects, acme_proposals)[0])
        assert format_entity_info(project) == ["Acme Corp", "2 proposals", "active"]


# =========================================================================
# AUTO-FILL
# =========================================================================
class TestAutoFill:
    """Auto-fill from mentioned entities."""

    def test_client_autofill_for_feasibility(self, acme_proposals, autofill_config):
        client = client_to_mention(extract_clients_from_proposals(acme_proposals)[0])
        autofill = get_autofill_from_entity(client, CalculatorType.FEASIBILITY, autofill_config)
        assert autofill.sample_size == 600
        assert autofill.countries == ["Turkey", "Germany", "UK"]
        assert autofill.methodology == "cati"
        assert autofill.timeline == 14
        assert autofill.incidence_rate == 30

    def test_defaults_never_overwrite_inferred_values(self, acme_proposals, autofill_config):
        proposal = proposal_to_mention(acme_proposals[0])
        autofill = get_autofill_from_entity(proposal, CalculatorType.DEMOGRAPHICS, autofill_config)
        assert autofill.countries == ["Turkey", "Germany"]

    def test_demographics_default_country(self, autofill_config):
        proposal = proposal_to_mention(make_proposal("p-1", sample_size=300))
        autofill = get_autofill_from_entity(proposal, "demographics", autofill_config)
        assert autofill.countries == ["Turkey"]

    @pytest.mark.parametrize("calculator,expected", [
        (CalculatorType.SAMPLE, {"confidence_level": 95, "margin_of_error": 5.0}),
        (CalculatorType.MOE, {"confidence_level": 95}),
        (CalculatorType.MAXDIFF, {"reliability": ReliabilityTier.MEDIUM}),
        (CalculatorType.LOI, {}),
    ])
    def test_calculator_defaults(self, calculator, expected, autofill_config):
        proposal = proposal_to_mention(make_proposal("p-1", sample_size=300))
        autofill = get_autofill_from_entity(proposal, calculator, autofill_config)
        assert autofill.populated() == {"sample_size": 300, **expected}

    def test_merge_into_feasibility_inputs(self):
        autofill = CalculatorAutoFill(
            sample_size=600, countries=["Turkey"], methodology="CATI",
            timeline=21, incidence_rate=15.0,
        )
        inputs = merge_autofill(autofill, FeasibilityInputs(loi=12))
        assert inputs.sample_size == 600
        assert inputs.countries == ["Turkey"]
        assert inputs.methodology == Methodology.CATI
        assert inputs.timeline_days == 21
        assert inputs.incidence_rate == 15.0
        assert inputs.loi == 12

    def test_merge_only_touches_declared_fields(self):
        autofill = CalculatorAutoFill(sample_size=600, countries=["Germany", "UK"], timeline=21)
        demographics = merge_autofill(autofill, DemographicsInputs())
        assert demographics.country == "Germany"
        assert demographics.overall_n == 600

        sample = merge_autofill(CalculatorAutoFill(confidence_level=99), SampleSizeInputs())
        assert sample.confidence_level == 99
        assert sample.margin_of_error == 5.0

    def test_merge_skips_unknown_methodology(self):
        inputs = merge_autofill(CalculatorAutoFill(methodology="Online Survey"), FeasibilityInputs())
        assert inputs.methodology == Methodology.ONLINE

    def test_merge_leaves_original_untouched(self):
        original = MOEInputs(sample_size=100)
        merged = merge_autofill(CalculatorAutoFill(sample_size=400), original)
        assert original.sample_size == 100
        assert merged.sample_size == 400
