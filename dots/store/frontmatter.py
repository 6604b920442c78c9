"""Header codec for record files.

A record file looks like::

    ---
    title: Fix login
    status: open
    priority: 2
    issue-type: task
    created-at: "2024-01-01T00:00:00Z"
    blocks:
      - dots-api-1a2b3c4d
    peer-index: 0
    ---

    Free-form description.

Scalars are written unquoted unless they need double quotes (see
needs_quoting). Unknown keys are ignored when reading.
"""

from pydantic import ValidationError

from dots.errors import InvalidFrontmatter, InvalidId
from dots.store.identifiers import validate_id
from dots.store.schemas import IssueFile, Status

DELIMITER = "---"

FIELD_NAMES = {
    "title": "title",
    "status": "status",
    "priority": "priority",
    "issue-type": "issue_type",
    "assignee": "assignee",
    "created-at": "created_at",
    "closed-at": "closed_at",
    "close-reason": "close_reason",
    "blocks": "blocks",
    "peer-index": "peer_index",
}

_ESCAPES = {"n": "\n", "r": "\r", "t": "\t", '"': '"', "\\": "\\"}
_QUOTE_TRIGGERS = frozenset("\n\r:#\"'\\")


def needs_quoting(value: str) -> bool:
    """True if value must be double-quoted to survive a round trip."""
    if not value:
        return True
    if any(ch in _QUOTE_TRIGGERS for ch in value):
        return True
    return value[0] in " \t" or value[-1] in " \t"


def quote(value: str) -> str:
    """Render a scalar, quoting and escaping only when needed."""
    if not needs_quoting(value):
        return value
    escaped = (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
    )
    return f'"{escaped}"'


def unquote(value: str) -> str:
    """Inverse of quote. Unknown escapes are kept literally."""
    if len(value) < 2 or value[0] != '"' or value[-1] != '"':
        return value
    inner = value[1:-1]
    out = []
    i = 0
    while i < len(inner):
        ch = inner[i]
        if ch == "\\" and i + 1 < len(inner):
            nxt = inner[i + 1]
            out.append(_ESCAPES.get(nxt, "\\" + nxt))
            i += 2
        else:
            out.append(ch)
            i += 1
    return "".join(out)


def format_number(value: float) -> str:
    """Canonical decimal: integral values without a fraction, others via repr."""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def _split_document(content: str) -> tuple[list[str], str]:
    """Header lines and body. Header lines may end in CRLF; the body is kept as is."""
    first, sep, rest = content.partition("\n")
    if not sep or first.rstrip("\r") != DELIMITER:
        raise InvalidFrontmatter("missing opening delimiter")
    header: list[str] = []
    while rest:
        line, _, rest = rest.partition("\n")
        if line.rstrip("\r") == DELIMITER:
            return header, rest.strip("\n\r\t ")
        header.append(line)
    raise InvalidFrontmatter("missing closing delimiter")


def parse_frontmatter(content: str, issue_id: str, parent: str | None = None) -> IssueFile:
    """Decode a record document.

    Raises InvalidFrontmatter for a malformed header, a missing title or
    created-at, a non-numeric priority or peer-index, or an invalid blocker
    ID; InvalidStatus for an unknown status.
    """
    lines, body = _split_document(content)
    fields: dict = {}
    blocks: list[str] = []
    in_blocks = False
    for line in lines:
        stripped = line.strip("\r\t ")
        if in_blocks:
            if stripped.startswith("- "):
                blocker = stripped[2:].strip()
                try:
                    validate_id(blocker)
                except InvalidId as e:
                    raise InvalidFrontmatter(f"invalid blocker id in {issue_id}: {e}") from e
                blocks.append(blocker)
                continue
            if not stripped:
                continue
            in_blocks = False
        key, sep, raw = stripped.partition(":")
        if not sep:
            continue
        name = FIELD_NAMES.get(key)
        if name is None:
            continue
        value = raw.strip(" ")
        if name == "blocks":
            in_blocks = True
        elif name == "status":
            fields["status"] = Status.parse(unquote(value))
        elif name == "priority":
            try:
                fields["priority"] = int(unquote(value))
            except ValueError as e:
                raise InvalidFrontmatter(f"priority is not an integer: {value!r}") from e
        elif name == "peer_index":
            try:
                fields["peer_index"] = float(unquote(value))
            except ValueError as e:
                raise InvalidFrontmatter(f"peer-index is not a number: {value!r}") from e
        else:
            fields[name] = unquote(value)

    if not fields.get("title"):
        raise InvalidFrontmatter(f"{issue_id}: title is required")
    if not fields.get("created_at"):
        raise InvalidFrontmatter(f"{issue_id}: created-at is required")
    try:
        return IssueFile(id=issue_id, description=body, blocks=blocks, parent=parent, **fields)
    except ValidationError as e:
        raise InvalidFrontmatter(f"{issue_id}: {e}") from e


def serialize_frontmatter(issue: IssueFile) -> str:
    """Encode a record document in the canonical field order."""
    lines = [
        DELIMITER,
        f"title: {quote(issue.title)}",
        f"status: {issue.status.value}",
        f"priority: {issue.priority}",
        f"issue-type: {quote(issue.issue_type)}",
    ]
    if issue.assignee is not None:
        lines.append(f"assignee: {quote(issue.assignee)}")
    lines.append(f"created-at: {quote(issue.created_at)}")
    if issue.closed_at is not None:
        lines.append(f"closed-at: {quote(issue.closed_at)}")
    if issue.close_reason is not None:
        lines.append(f"close-reason: {quote(issue.close_reason)}")
    if issue.blocks:
        lines.append("blocks:")
        lines.extend(f"  - {blocker}" for blocker in issue.blocks)
    lines.append(f"peer-index: {format_number(issue.peer_index)}")
    lines.append(DELIMITER)
    text = "\n".join(lines) + "\n"
    if issue.description:
        text += "\n" + issue.description + "\n"
    return text
