"""
Pydantic Schemas for Proposal and Project Snapshots

The host application owns these records; the extraction engine only reads
them. Field names accept both snake_case and the camelCase used by the
application's JSON payloads.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class _Snapshot(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore"
    )


class Market(_Snapshot):
    """A fieldwork market of a proposal."""
    country: str = Field(description="Country name as entered on the proposal")


class MethodologyInfo(_Snapshot):
    """Methodology block of a proposal."""
    type: Optional[str] = Field(
        description="Methodology identifier, e.g. 'online' or 'cati'",
        default=None
    )


class ProposalContent(_Snapshot):
    """Editable body of a proposal."""
    title: Optional[str] = None
    client: Optional[str] = None
    methodology: Optional[MethodologyInfo] = None
    sample_size: Optional[int] = Field(
        description="Completes per market",
        default=None
    )
    markets: List[Market] = Field(default_factory=list)
    loi: Optional[float] = Field(
        description="Length of interview in minutes",
        default=None
    )

    @field_validator("methodology", mode="before")
    @classmethod
    def _methodology_from_string(cls, value):
        if isinstance(value, str):
            return {"type": value}
        return value

    @property
    def methodology_type(self) -> Optional[str]:
        return self.methodology.type if self.methodology else None

    @property
    def countries(self) -> List[str]:
        return [m.country for m in self.markets if m.country]


class Proposal(_Snapshot):
    """A proposal as stored by the host application."""
    id: str
    code: Optional[str] = None
    project_id: Optional[str] = None
    status: str = "draft"
    content: ProposalContent = Field(default_factory=ProposalContent)
    created_at: Optional[str] = Field(
        description="ISO-8601 timestamp; compared as a string",
        default=None
    )


class Project(_Snapshot):
    """A project grouping proposals."""
    id: str
    name: str
    client: Optional[str] = None
    created_at: Optional[str] = None
