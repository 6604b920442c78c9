"""Record store: markdown files with a header block under a store directory."""

from dots.store.archive import purge_archive
from dots.store.hierarchy import FixResult, fix_orphans, list_orphan_parents
from dots.store.identifiers import generate_id, slugify, validate_id
from dots.store.issue_store import (
    add_dependency,
    archive_issue,
    create_issue,
    delete_issue,
    get_children,
    get_issue,
    get_issue_by_path,
    get_ready_issues,
    get_root_issues,
    init_storage,
    list_all_issues,
    list_issues,
    remove_dependency,
    rename_issue,
    search_issues,
    slugify_ids,
    update_status,
    utc_now,
)
from dots.store.paths import Resolved, resolve_id, resolve_ids
from dots.store.schemas import ChildIssue, DependencyKind, IssueFile, Status
from dots.store.store_config import get_config, get_or_create_prefix, set_config

__all__ = [
    "ChildIssue",
    "DependencyKind",
    "FixResult",
    "IssueFile",
    "Resolved",
    "Status",
    "add_dependency",
    "archive_issue",
    "create_issue",
    "delete_issue",
    "fix_orphans",
    "generate_id",
    "get_children",
    "get_config",
    "get_issue",
    "get_issue_by_path",
    "get_or_create_prefix",
    "get_ready_issues",
    "get_root_issues",
    "init_storage",
    "list_all_issues",
    "list_issues",
    "list_orphan_parents",
    "purge_archive",
    "remove_dependency",
    "rename_issue",
    "resolve_id",
    "resolve_ids",
    "search_issues",
    "set_config",
    "slugify",
    "slugify_ids",
    "update_status",
    "utc_now",
    "validate_id",
]
