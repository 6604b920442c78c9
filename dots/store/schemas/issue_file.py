"""Full record as stored in {dots_dir}/.../{id}.md."""

from typing import Annotated, List

from pydantic import BaseModel, BeforeValidator, Field, field_validator

from dots.store.schemas.status import STATUS_NAMES, Status


def _coerce_status(value: object) -> object:
    """Accept status names (including the ``done`` alias) as well as Status."""
    if isinstance(value, str) and not isinstance(value, Status):
        return STATUS_NAMES.get(value.strip(), value)
    return value


class IssueFile(BaseModel):
    """Full record as stored in {dots_dir}/.../{id}.md.

    ``parent`` is derived from where the file lives and is never written to
    the header.
    """

    id: str = Field(..., description="Record ID, also the file name without extension")
    title: str = Field(..., min_length=1, description="Record title")
    description: str = Field(default="", description="Free-form body")
    status: Annotated[Status, BeforeValidator(_coerce_status)] = Field(
        default=Status.OPEN,
        description="open, active or closed",
    )
    priority: int = Field(default=2, description="Lower sorts first")
    issue_type: str = Field(default="task", description="task, bug, feature, ...")
    assignee: str | None = Field(default=None, description="Assignee. Omitted when not assigned.")
    created_at: str = Field(..., min_length=1, description="Creation timestamp")
    closed_at: str | None = Field(default=None, description="Set iff status is closed")
    close_reason: str | None = Field(default=None, description="Why the record was closed")
    blocks: List[str] = Field(default_factory=list, description="IDs of records blocking this one")
    peer_index: float = Field(default=0.0, description="Fractional sort key among siblings")
    parent: str | None = Field(default=None, description="Parent ID, computed from the file location")

    model_config = {"extra": "forbid", "populate_by_name": True}

    @field_validator("description")
    @classmethod
    def _strip_description(cls, value: str) -> str:
        return value.strip("\n\r\t ")

    @field_validator("assignee", "closed_at", "close_reason")
    @classmethod
    def _empty_to_none(cls, value: str | None) -> str | None:
        return value or None

    def with_status(
        self,
        status: Status,
        closed_at: str | None,
        close_reason: str | None,
    ) -> "IssueFile":
        """Copy with updated status fields."""
        return self.model_copy(
            update={"status": status, "closed_at": closed_at, "close_reason": close_reason}
        )

    def with_blocks(self, blocks: List[str]) -> "IssueFile":
        """Copy with a new blocker list."""
        return self.model_copy(update={"blocks": list(blocks)})

    def sort_key(self) -> tuple[int, str]:
        """Flat listing order: priority, then creation time."""
        return (self.priority, self.created_at)

    def sibling_key(self) -> tuple[float, int, str]:
        """Order among siblings: ordering key, then priority, then creation time."""
        return (self.peer_index, self.priority, self.created_at)
