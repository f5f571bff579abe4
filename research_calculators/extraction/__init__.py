"""
Entity Extraction & Auto-fill

Read-only views over the host application's proposals and projects:
- Client and project contexts aggregated from proposals
- @-mention search across proposals, clients and projects
- Calculator auto-fill from a mentioned entity
"""

from .records import Market, MethodologyInfo, ProposalContent, Proposal, Project
from .contexts import (
    EntityType,
    CalculatorType,
    ProposalRef,
    ProposalContext,
    ClientContext,
    ProjectContext,
    MentionEntity,
    CalculatorAutoFill,
)
from .mentions import (
    client_key,
    extract_clients_from_proposals,
    extract_project_contexts,
    proposal_to_mention,
    client_to_mention,
    project_to_mention,
    search_entities,
    get_autofill_from_entity,
    merge_autofill,
    format_entity_info,
)

__all__ = [
    "Market",
    "MethodologyInfo",
    "ProposalContent",
    "Proposal",
    "Project",
    "EntityType",
    "CalculatorType",
    "ProposalRef",
    "ProposalContext",
    "ClientContext",
    "ProjectContext",
    "MentionEntity",
    "CalculatorAutoFill",
    "client_key",
    "extract_clients_from_proposals",
    "extract_project_contexts",
    "proposal_to_mention",
    "client_to_mention",
    "project_to_mention",
    "search_entities",
    "get_autofill_from_entity",
    "merge_autofill",
    "format_entity_info",
]
