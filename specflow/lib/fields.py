"""
Markdown field tokenizer.

Shared by the dependency parser and the maintenance parser:

- Labelled fields: ``**Depends on**: a, b <!-- comment -->`` or ``Depends on: a``
- Bracket tokens: ``[id=scan] [freq=weekly]``

Both forms tolerate trailing HTML comments and surrounding whitespace.
"""

import re
from dataclasses import dataclass

COMMENT_OPEN = "<!--"
BULLET_PREFIXES = ("- ", "* ")

TOKEN_RE = re.compile(r'\[([a-z]+)=([^\]]+)\]')


@dataclass
class FieldValue:
    """A labelled field found on a single line."""
    name: str
    value: str  # Text after the colon, comment stripped, trimmed
    comment: str | None  # Trailing comment text, if any
    placeholder: bool  # True if the value still contains a template marker


def strip_comment(value: str) -> tuple[str, str | None]:
    """Split ``value`` at the first comment marker."""
    idx = value.find(COMMENT_OPEN)
    if idx == -1:
        return value.strip(), None
    return value[:idx].strip(), value[idx:].strip()


def match_field(line: str, name: str) -> FieldValue | None:
    """Match ``**name**:`` or ``name:`` at the start of ``line`` (case-insensitive)."""
    trimmed = line.strip()
    lower = trimmed.lower()
    label = name.lower()
    if not (lower.startswith(f"**{label}**:") or lower.startswith(f"{label}:")):
        return None

    raw = trimmed[trimmed.index(":") + 1:]
    value, comment = strip_comment(raw)
    return FieldValue(
        name=name,
        value=value,
        comment=comment,
        placeholder=COMMENT_OPEN in value,
    )


def find_field(content: str, name: str) -> FieldValue | None:
    """Return the first line in ``content`` carrying the labelled field."""
    for line in content.splitlines():
        field = match_field(line, name)
        if field is not None:
            return field
    return None


def split_list(value: str) -> list[str]:
    """Split a comma-separated value, dropping empty entries."""
    return [item.strip() for item in value.split(",") if item.strip()]


def is_bullet(line: str) -> bool:
    return line.strip().startswith(BULLET_PREFIXES)


def bracket_tokens(line: str) -> dict[str, str]:
    """Extract ``[key=value]`` tokens. The first occurrence of a key wins."""
    tokens: dict[str, str] = {}
    for key, value in TOKEN_RE.findall(line):
        tokens.setdefault(key, value.strip())
    return tokens


def strip_tokens(line: str, keys: tuple[str, ...]) -> str:
    """Remove the ``[key=value]`` tokens named in ``keys`` and the leading bullet marker.

    Bracket tokens with other keys are left in the text.
    """
    pattern = re.compile(r"\[(?:" + "|".join(map(re.escape, keys)) + r")=[^\]]+\]")
    text = pattern.sub("", line).strip()
    for prefix in BULLET_PREFIXES:
        if text.startswith(prefix):
            text = text[len(prefix):]
            break
    return text.strip()


def name_to_slug(name: str) -> str:
    """Convert a human name into a lowercase, hyphen-separated slug.

    Runs of non-alphanumeric characters collapse to a single hyphen.
    Returns "" when nothing alphanumeric remains.
    """
    return re.sub(r'[^a-z0-9]+', "-", name.lower()).strip("-")
