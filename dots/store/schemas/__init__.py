"""Schemas for record files and computed views."""

from dots.store.schemas.child_issue import ChildIssue
from dots.store.schemas.issue_file import IssueFile
from dots.store.schemas.status import DependencyKind, Status

__all__ = ["ChildIssue", "DependencyKind", "IssueFile", "Status"]
