"""
Entity Extraction, Search and Auto-fill

Derives client and project contexts from proposal snapshots, searches the
three entity kinds for the @-mention picker, and turns a picked entity into
calculator auto-fill values.

Everything is recomputed from the snapshots on each call; the same input
lists always give the same output.
"""

from dataclasses import dataclass, field, fields, replace
from typing import Optional
import re

import structlog

from ..config import AutoFillConfig, get_settings
from ..reference import Methodology
from ..utils import round_count
from .contexts import (
    CalculatorAutoFill,
    CalculatorType,
    ClientContext,
    EntityType,
    MentionEntity,
    ProjectContext,
    ProposalContext,
    ProposalRef,
)

logger = structlog.get_logger(__name__)

MAX_RECENT_PROPOSALS = 5

SEARCH_LIMITS = {
    EntityType.PROPOSAL: 5,
    EntityType.CLIENT: 3,
    EntityType.PROJECT: 3,
}

DELETED_STATUS = "deleted"


def client_key(name: str) -> str:
    """Normalised client id: lowercase, whitespace runs become one hyphen."""
    return re.sub(r"\s+", "-", name.strip().lower())


def _proposal_ref(proposal) -> ProposalRef:
    return ProposalRef(
        id=proposal.id,
        title=proposal.content.title or "Untitled",
        code=proposal.code,
        date=proposal.created_at
    )


def _newest_first(refs: list) -> list:
    return sorted(refs, key=lambda r: r.date or "", reverse=True)


# =============================================================================
# Extraction
# =============================================================================

@dataclass
class _ClientTally:
    key: str
    name: str
    refs: list = field(default_factory=list)
    methodology: Optional[str] = None
    average_sample: Optional[int] = None
    countries: list = field(default_factory=list)
    total: int = 0
    last_date: Optional[str] = None

    def add(self, proposal) -> None:
        content = proposal.content
        self.total += 1
        self.refs.append(_proposal_ref(proposal))

        # Latest proposal wins
        if content.methodology_type:
            self.methodology = content.methodology_type

        if content.sample_size:
            if self.average_sample is None:
                self.average_sample = content.sample_size
            else:
                self.average_sample = round_count((self.average_sample + content.sample_size) / 2)

        for country in content.countries:
            if country not in self.countries:
                self.countries.append(country)

        if proposal.created_at and (self.last_date is None or proposal.created_at > self.last_date):
            self.last_date = proposal.created_at

    def freeze(self) -> ClientContext:
        return ClientContext(
            id=self.key,
            name=self.name,
            recent_proposals=tuple(_newest_first(self.refs)[:MAX_RECENT_PROPOSALS]),
            typical_methodology=self.methodology,
            average_sample_size=self.average_sample,
            common_countries=tuple(self.countries),
            total_projects=self.total,
            last_project_date=self.last_date
        )


def extract_clients_from_proposals(proposals: list) -> list[ClientContext]:
    """
    One ClientContext per distinct client named on the proposals.

    Sorted by most recent project date, newest first; clients without a
    date come last and ties go to the client with more projects.
    """
    tallies: dict[str, _ClientTally] = {}
    for proposal in proposals:
        name = proposal.content.client
        if not name or not name.strip():
            continue
        key = client_key(name)
        if key not in tallies:
            tallies[key] = _ClientTally(key=key, name=name)
        tallies[key].add(proposal)

    clients = [tally.freeze() for tally in tallies.values()]
    clients.sort(key=lambda c: c.total_projects, reverse=True)
    clients.sort(key=lambda c: c.last_project_date or "", reverse=True)

    logger.debug("extraction.clients", proposals=len(proposals), clients=len(clients))
    return clients


def extract_project_contexts(projects: list, proposals: list) -> list[ProjectContext]:
    """One ProjectContext per project, joined to proposals by project id."""
    contexts = []
    for project in projects:
        linked = [p for p in proposals if p.project_id is not None and p.project_id == project.id]
        first = linked[0].content if linked else None

        countries = first.countries if first else []
        contexts.append(ProjectContext(
            id=project.id,
            name=project.name,
            client=(first.client if first and first.client else project.client),
            proposals=tuple(_proposal_ref(p) for p in linked),
            status="active",
            methodology=first.methodology_type if first else None,
            target_sample_size=first.sample_size if first else None,
            target_countries=tuple(countries) if countries else None
        ))
    return contexts


# =============================================================================
# Mention entities
# =============================================================================

def proposal_to_mention(proposal) -> MentionEntity:
    content = proposal.content
    title = content.title or "Untitled"
    countries = content.countries
    return MentionEntity(
        id=proposal.id,
        type=EntityType.PROPOSAL,
        label=title,
        sub_label=proposal.code,
        metadata=ProposalContext(
            id=proposal.id,
            title=title,
            code=proposal.code,
            methodology=content.methodology_type,
            sample_size=content.sample_size,
            countries=tuple(countries) if countries else None,
            loi=content.loi
        )
    )


def client_to_mention(client: ClientContext) -> MentionEntity:
    return MentionEntity(
        id=client.id,
        type=EntityType.CLIENT,
        label=client.name,
        sub_label=f"{client.total_projects} projects",
        metadata=client
    )


def project_to_mention(project: ProjectContext) -> MentionEntity:
    return MentionEntity(
        id=project.id,
        type=EntityType.PROJECT,
        label=project.name,
        sub_label=project.client,
        metadata=project
    )


def _proposal_matches(proposal, term: str) -> bool:
    haystacks = (proposal.content.title, proposal.code, proposal.content.client)
    return any(term in (text or "").lower() for text in haystacks)


def search_entities(
    query: str,
    proposals: list,
    projects: list,
    types: Optional[list] = None
) -> list[MentionEntity]:
    """
    Case-insensitive substring search over proposals, clients and projects.

    Results are grouped by kind in that order and capped per kind.
    Deleted proposals never match.
    """
    term = (query or "").strip().lower()
    wanted = {EntityType(t) for t in types} if types is not None else set(EntityType)
    results = []

    if EntityType.PROPOSAL in wanted:
        matching = [
            p for p in proposals
            if p.status != DELETED_STATUS and _proposal_matches(p, term)
        ]
        results.extend(proposal_to_mention(p) for p in matching[:SEARCH_LIMITS[EntityType.PROPOSAL]])

    if EntityType.CLIENT in wanted:
        matching = [
            c for c in extract_clients_from_proposals(proposals)
            if term in c.name.lower()
        ]
        results.extend(client_to_mention(c) for c in matching[:SEARCH_LIMITS[EntityType.CLIENT]])

    if EntityType.PROJECT in wanted:
        matching = [p for p in projects if term in p.name.lower()]
        contexts = extract_project_contexts(matching[:SEARCH_LIMITS[EntityType.PROJECT]], proposals)
        results.extend(project_to_mention(c) for c in contexts)

    return results


# =============================================================================
# Auto-fill
# =============================================================================

def _inferred(entity: MentionEntity) -> CalculatorAutoFill:
    ctx = entity.metadata
    if entity.type == EntityType.PROPOSAL:
        return CalculatorAutoFill(
            sample_size=ctx.sample_size,
            countries=list(ctx.countries) if ctx.countries else None,
            loi=ctx.loi,
            methodology=ctx.methodology
        )
    if entity.type == EntityType.CLIENT:
        return CalculatorAutoFill(
            sample_size=ctx.average_sample_size,
            countries=list(ctx.common_countries) or None,
            methodology=ctx.typical_methodology
        )
    return CalculatorAutoFill(
        sample_size=ctx.target_sample_size,
        countries=list(ctx.target_countries) if ctx.target_countries else None,
        methodology=ctx.methodology
    )


def _with_defaults(autofill: CalculatorAutoFill, defaults: dict) -> CalculatorAutoFill:
    unset = {
        name: value for name, value in defaults.items()
        if getattr(autofill, name) in (None, [])
    }
    return replace(autofill, **unset)


def get_autofill_from_entity(
    entity: MentionEntity,
    calculator_type: CalculatorType,
    config: Optional[AutoFillConfig] = None
) -> CalculatorAutoFill:
    """
    Calculator inputs inferred from a mentioned entity.

    Calculator defaults only fill fields the entity could not supply.
    """
    config = config or get_settings().autofill
    autofill = _inferred(entity)

    calculator = CalculatorType(calculator_type)
    if calculator == CalculatorType.SAMPLE:
        defaults = {
            "confidence_level": config.default_confidence,
            "margin_of_error": config.default_margin_of_error,
        }
    elif calculator == CalculatorType.MOE:
        defaults = {"confidence_level": config.default_confidence}
    elif calculator == CalculatorType.FEASIBILITY:
        defaults = {
            "timeline": config.default_timeline_days,
            "incidence_rate": config.default_incidence_rate,
        }
    elif calculator == CalculatorType.DEMOGRAPHICS:
        defaults = {"countries": [config.default_country]}
    elif calculator == CalculatorType.MAXDIFF:
        defaults = {"reliability": config.default_reliability}
    else:
        defaults = {}

    return _with_defaults(autofill, defaults)


# Inputs field -> auto-fill field, where the names differ
_INPUT_ALIASES = {
    "timeline_days": "timeline",
    "overall_n": "sample_size",
    "loi_minutes": "loi",
    "country": "countries",
}


def merge_autofill(autofill: CalculatorAutoFill, inputs):
    """
    Copy of a calculator inputs dataclass with the auto-fill values applied.

    Only fields the inputs type declares are touched. A single-country
    field takes the first country; an unknown methodology is left alone.
    """
    updates = {}
    for f in fields(inputs):
        value = getattr(autofill, _INPUT_ALIASES.get(f.name, f.name), None)
        if value is None:
            continue
        if f.name == "country":
            if not value:
                continue
            value = value[0]
        elif f.name == "countries":
            value = list(value)
        elif f.name == "methodology":
            try:
                value = Methodology(value.lower())
            except ValueError:
                logger.debug("autofill.unknown_methodology", methodology=value)
                continue
        updates[f.name] = value
    return replace(inputs, **updates)


def format_entity_info(entity: MentionEntity) -> list[str]:
    """Short summary chips for a mention."""
    ctx = entity.metadata
    info = []

    if entity.type == EntityType.PROPOSAL:
        if ctx.sample_size:
            info.append(f"n={ctx.sample_size}")
        if ctx.methodology:
            info.append(ctx.methodology)
        if ctx.countries:
            info.append(", ".join(ctx.countries[:2]))
        if ctx.loi:
            info.append(f"{ctx.loi:g} min")
    elif entity.type == EntityType.CLIENT:
        if ctx.total_projects:
            info.append(f"{ctx.total_projects} projects")
        if ctx.average_sample_size:
            info.append(f"avg n={ctx.average_sample_size}")
        if ctx.typical_methodology:
            info.append(ctx.typical_methodology)
    else:
        if ctx.client:
            info.append(ctx.client)
        info.append(f"{len(ctx.proposals)} proposals")
        info.append(ctx.status)

    return info
