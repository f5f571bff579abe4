"""
Context Records for @-mentions and Auto-fill

Read-only aggregates derived from proposal and project snapshots, and the
MentionEntity wrapper that puts the three kinds behind one search result
shape. A MentionEntity's metadata type is fixed by its entity type.
"""

from dataclasses import dataclass, fields
from enum import Enum
from types import MappingProxyType
from typing import Optional, Union

from ..config import ReliabilityTier


class EntityType(Enum):
    """Kinds of entity that can be mentioned."""
    PROPOSAL = "proposal"
    CLIENT = "client"
    PROJECT = "project"


class CalculatorType(Enum):
    """Calculators an entity can pre-fill."""
    SAMPLE = "sample"
    MOE = "moe"
    MAXDIFF = "maxdiff"
    DEMOGRAPHICS = "demographics"
    FEASIBILITY = "feasibility"
    LOI = "loi"


@dataclass(frozen=True)
class ProposalRef:
    """Short reference to a proposal."""
    id: str
    title: str
    code: Optional[str] = None
    date: Optional[str] = None


@dataclass(frozen=True)
class ProposalContext:
    """What a single proposal tells a calculator."""
    id: str
    title: str
    code: Optional[str] = None
    methodology: Optional[str] = None
    sample_size: Optional[int] = None
    countries: Optional[tuple] = None
    loi: Optional[float] = None


@dataclass(frozen=True)
class ClientContext:
    """
    A client's history, aggregated from its proposals.

    recent_proposals holds at most five references, newest first.
    average_sample_size is a running pairwise average, so later proposals
    weigh more than earlier ones.
    """
    id: str
    name: str
    recent_proposals: tuple = ()
    typical_methodology: Optional[str] = None
    average_sample_size: Optional[int] = None
    common_countries: tuple = ()
    total_projects: int = 0
    last_project_date: Optional[str] = None


@dataclass(frozen=True)
class ProjectContext:
    """A project and the proposals filed under it."""
    id: str
    name: str
    client: Optional[str] = None
    proposals: tuple = ()
    status: str = "active"
    methodology: Optional[str] = None
    target_sample_size: Optional[int] = None
    target_countries: Optional[tuple] = None


EntityContext = Union[ProposalContext, ClientContext, ProjectContext]

METADATA_TYPES = MappingProxyType({
    EntityType.PROPOSAL: ProposalContext,
    EntityType.CLIENT: ClientContext,
    EntityType.PROJECT: ProjectContext,
})


@dataclass(frozen=True)
class MentionEntity:
    """A search result for the @-mention picker."""
    id: str
    type: EntityType
    label: str
    sub_label: Optional[str] = None
    metadata: EntityContext = None

    def __post_init__(self):
        kind = EntityType(self.type)
        expected = METADATA_TYPES[kind]
        if not isinstance(self.metadata, expected):
            raise ValueError(
                f"{kind.value} mention needs {expected.__name__} metadata, "
                f"got {type(self.metadata).__name__}"
            )
        # Frozen; store the enum so string-typed mentions compare equal
        object.__setattr__(self, "type", kind)


@dataclass
class CalculatorAutoFill:
    """Sparse calculator inputs inferred from an entity; None means unknown."""
    sample_size: Optional[int] = None
    confidence_level: Optional[int] = None
    margin_of_error: Optional[float] = None
    countries: Optional[list] = None
    methodology: Optional[str] = None
    loi: Optional[float] = None
    timeline: Optional[int] = None
    incidence_rate: Optional[float] = None
    target_audience: Optional[str] = None
    reliability: Optional[ReliabilityTier] = None

    def populated(self) -> dict:
        """Only the fields that were inferred or defaulted."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }
