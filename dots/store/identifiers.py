"""Record ID generation and validation.

IDs are used both as file names and as header values, so validate_id is the
single gate every externally supplied ID goes through before it touches the
filesystem or a header.
"""

import re
import secrets

from dots.errors import InvalidId
from dots.store.paths import ARCHIVE_DIR, CONFIG_FILE

MAX_ID_LEN = 128
MAX_SLUG_LEN = 30
MAX_SLUG_WORDS = 3
SUFFIX_BYTES = 4
UNSAFE_CHARS = frozenset("#:'\"")
RESERVED_IDS = frozenset({ARCHIVE_DIR, CONFIG_FILE})

ABBREVIATIONS = {
    "administration": "admin",
    "application": "app",
    "applications": "apps",
    "architecture": "arch",
    "argument": "arg",
    "arguments": "args",
    "authentication": "auth",
    "authorization": "authz",
    "configuration": "config",
    "configure": "config",
    "database": "db",
    "databases": "dbs",
    "dependency": "dep",
    "dependencies": "deps",
    "development": "dev",
    "documentation": "docs",
    "environment": "env",
    "implementation": "impl",
    "implement": "impl",
    "information": "info",
    "initialization": "init",
    "initialize": "init",
    "management": "mgmt",
    "message": "msg",
    "messages": "msgs",
    "performance": "perf",
    "production": "prod",
    "repository": "repo",
    "specification": "spec",
    "synchronization": "sync",
    "synchronize": "sync",
    "temporary": "tmp",
    "utilities": "utils",
    "utility": "util",
}

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def validate_id(issue_id: str) -> None:
    """Raise InvalidId unless issue_id is safe as a path component and header value."""
    if not issue_id:
        raise InvalidId("id is empty")
    if issue_id in RESERVED_IDS:
        raise InvalidId(f"id is reserved by the store layout: {issue_id!r}")
    if len(issue_id.encode("utf-8")) > MAX_ID_LEN:
        raise InvalidId(f"id longer than {MAX_ID_LEN} bytes")
    if "/" in issue_id or "\\" in issue_id or ".." in issue_id or issue_id == ".":
        raise InvalidId(f"id is not a plain name: {issue_id!r}")
    for ch in issue_id:
        if ord(ch) < 0x20 or ord(ch) == 0x7F:
            raise InvalidId(f"id contains a control character: {issue_id!r}")
        if ch in UNSAFE_CHARS:
            raise InvalidId(f"id contains {ch!r}: {issue_id!r}")


def is_valid_id(issue_id: str) -> bool:
    """True if validate_id would accept issue_id."""
    try:
        validate_id(issue_id)
    except InvalidId:
        return False
    return True


def slugify(title: str) -> str:
    """Short lowercase slug for a title, e.g. "Fix User Authentication Bug" -> "fix-user-auth"."""
    words = [w for w in _NON_ALNUM.split(title.lower()) if w]
    words = [ABBREVIATIONS.get(w, w) for w in words][:MAX_SLUG_WORDS]
    slug = "-".join(words)
    if len(slug) > MAX_SLUG_LEN:
        cut = slug[:MAX_SLUG_LEN]
        if slug[MAX_SLUG_LEN] != "-" and "-" in cut:
            cut = cut[: cut.rindex("-")]
        slug = cut.strip("-")
    return slug or "untitled"


def random_suffix() -> str:
    """Lowercase hex from a cryptographic RNG."""
    return secrets.token_hex(SUFFIX_BYTES)


def generate_id(prefix: str, title: str | None = None) -> str:
    """New ID: {prefix}-{slug}-{hex}, or {prefix}-{hex} without a title."""
    suffix = random_suffix()
    issue_id = f"{prefix}-{slugify(title)}-{suffix}" if title is not None else f"{prefix}-{suffix}"
    validate_id(issue_id)
    return issue_id


def unslugged_suffix(issue_id: str, prefix: str) -> str | None:
    """Hex suffix of an ID shaped {prefix}-{hex}; None if it already carries a slug."""
    match = re.fullmatch(re.escape(prefix) + r"-([0-9a-f]{8,16})", issue_id)
    return match.group(1) if match else None


def slugged_id(prefix: str, title: str, suffix: str) -> str:
    """{prefix}-{slug}-{suffix}, keeping an existing random suffix."""
    issue_id = f"{prefix}-{slugify(title)}-{suffix}"
    validate_id(issue_id)
    return issue_id
