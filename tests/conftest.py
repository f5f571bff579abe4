"""Shared test fixtures for the research calculators test suite."""

import pytest

from research_calculators.config import AutoFillConfig, FeasibilityConfig, MaxDiffConfig
from research_calculators.extraction import Project, Proposal


def make_proposal(id, client=None, sample_size=None, created_at=None, **kwargs):
    """Build a proposal snapshot with only the fields a test cares about."""
    content = {
        "title": kwargs.pop("title", f"Proposal {id}"),
        "client": client,
        "sampleSize": sample_size,
        "markets": [{"country": c} for c in kwargs.pop("countries", [])],
    }
    if "methodology" in kwargs:
        content["methodology"] = {"type": kwargs.pop("methodology")}
    if "loi" in kwargs:
        content["loi"] = kwargs.pop("loi")
    return Proposal.model_validate({
        "id": id,
        "code": kwargs.pop("code", f"CODE-{id}"),
        "projectId": kwargs.pop("project_id", None),
        "status": kwargs.pop("status", "draft"),
        "createdAt": created_at,
        "content": content,
    })


@pytest.fixture
def feasibility_config():
    return FeasibilityConfig()


@pytest.fixture
def maxdiff_config():
    return MaxDiffConfig()


@pytest.fixture
def autofill_config():
    return AutoFillConfig()


@pytest.fixture
def acme_proposals():
    """Two proposals for the same client, written with different spacing."""
    return [
        make_proposal(
            "p-1", client="Acme Corp", sample_size=500,
            created_at="2024-03-02T09:00:00Z", methodology="online",
            countries=["Turkey", "Germany"], loi=12, project_id="prj-1",
            title="Acme Brand Health Q1",
        ),
        make_proposal(
            "p-2", client="acme   corp", sample_size=700,
            created_at="2024-06-18T14:30:00Z", methodology="cati",
            countries=["Turkey", "UK"], project_id="prj-1",
            title="Acme Brand Health Q2",
        ),
    ]


@pytest.fixture
def proposals(acme_proposals):
    """Acme proposals plus other clients, a deleted proposal and an anonymous one."""
    return acme_proposals + [
        make_proposal(
            "p-3", client="Globex", sample_size=300,
            created_at="2024-05-11T08:00:00Z", countries=["USA"],
            title="Globex Pricing Study",
        ),
        make_proposal(
            "p-4", client="Initech", sample_size=200,
            created_at="2024-01-20T08:00:00Z", status="deleted",
            title="Initech Concept Test",
        ),
        make_proposal("p-5", title="Untitled brief"),
    ]


@pytest.fixture
def projects():
    return [
        Project(id="prj-1", name="Acme Brand Tracker", client="Acme Holdings"),
        Project(id="prj-2", name="Globex Pricing", client="Globex"),
    ]
