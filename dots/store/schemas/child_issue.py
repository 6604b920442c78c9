"""Child record with its computed blocked flag."""

from pydantic import BaseModel, Field

from dots.store.schemas.issue_file import IssueFile


class ChildIssue(BaseModel):
    """Child record with its computed blocked flag."""

    issue: IssueFile
    blocked: bool = Field(default=False, description="True if any blocker is open or active")
