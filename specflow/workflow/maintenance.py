"""
Maintenance scheduling.

A maintenance item is a markdown document whose "## Requirements" section
lists recurring requirements:

    - Run dependency scan [id=scan] [freq=weekly]
    - Rotate credentials [freq=quarterly] [id=rotate]

Last-actioned timestamps live in the workspace state record, keyed by item
slug and requirement id. A requirement is due when it has no frequency, was
never actioned, has an unreadable timestamp, or its interval has elapsed.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable

from specflow.lib.constants import FREQUENCIES
from specflow.lib.errors import AlreadyExists, InvalidSlug, Malformed, NotFound
from specflow.lib.fields import bracket_tokens, is_bullet, name_to_slug, strip_tokens
from specflow.lib.repository import WorkspaceRepository
from specflow.lib.state import StateStore
from specflow.lib.templates import render

logger = logging.getLogger(__name__)

REQUIREMENTS_HEADING = "## requirements"
REQUIREMENT_TOKENS = ("id", "freq")

# Fixed intervals in days; the rest are calendar months
DAY_INTERVALS = {"daily": 1, "weekly": 7, "biweekly": 14}
MONTH_INTERVALS = {"monthly": 1, "quarterly": 3, "yearly": 12}


@dataclass
class Requirement:
    id: str
    text: str
    freq: str | None = None
    line: int = 0  # 1-indexed line in the maintenance document
    last_actioned: str | None = None
    due: bool = True


@dataclass
class ItemSummary:
    slug: str
    total: int = 0
    due: int = 0
    error: str | None = None  # Parse error, if the document is malformed


def parse_requirements(content: str, actioned: dict[str, str] | None = None) -> list[Requirement]:
    """Parse the requirement bullets of a maintenance document, in order.

    Args:
        content: Maintenance document markdown
        actioned: Optional id -> last-actioned timestamp, attached to results

    Raises:
        Malformed: Missing id, duplicate id or unknown frequency
    """
    actioned = actioned or {}
    requirements: list[Requirement] = []
    first_seen: dict[str, int] = {}
    in_section = False

    for lineno, line in enumerate(content.splitlines(), start=1):
        trimmed = line.strip()
        if trimmed.startswith("## "):
            if in_section:
                break
            in_section = trimmed.lower() == REQUIREMENTS_HEADING
            continue
        if not in_section or not is_bullet(line):
            continue

        tokens = bracket_tokens(trimmed)
        req_id = tokens.get("id")
        if not req_id:
            raise Malformed("requirement missing [id=...]", line=lineno)
        if req_id in first_seen:
            raise Malformed(
                f"duplicate id '{req_id}' (first seen on line {first_seen[req_id]})",
                line=lineno,
            )

        freq = tokens.get("freq")
        if freq is not None and freq not in FREQUENCIES:
            raise Malformed(
                f"unknown frequency '{freq}' (allowed: {', '.join(FREQUENCIES)})",
                line=lineno,
            )

        first_seen[req_id] = lineno
        requirements.append(Requirement(
            id=req_id,
            text=strip_tokens(trimmed, REQUIREMENT_TOKENS),
            freq=freq,
            line=lineno,
            last_actioned=actioned.get(req_id),
        ))

    return requirements


def format_timestamp(moment: datetime) -> str:
    """RFC 3339 UTC timestamp, second precision."""
    return _as_utc(moment).strftime("%Y-%m-%dT%H:%M:%SZ")


def parse_timestamp(value: str) -> datetime | None:
    """Parse an RFC 3339 timestamp. Returns None if unreadable."""
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return _as_utc(datetime.fromisoformat(text))
    except ValueError:
        return None


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def add_months(moment: datetime, months: int) -> datetime:
    """Add calendar months. Days past the end of the target month roll into the next.

    Jan 31 + 1 month is Mar 3 (Mar 2 in a leap year).
    """
    index = moment.month - 1 + months
    first = moment.replace(year=moment.year + index // 12, month=index % 12 + 1, day=1)
    return first + timedelta(days=moment.day - 1)


def next_due(freq: str, last_actioned: datetime) -> datetime:
    """When a requirement actioned at ``last_actioned`` falls due again."""
    if freq in DAY_INTERVALS:
        return last_actioned + timedelta(days=DAY_INTERVALS[freq])
    if freq in MONTH_INTERVALS:
        return add_months(last_actioned, MONTH_INTERVALS[freq])
    raise ValueError(f"Unknown frequency: {freq}")


def is_due(freq: str | None, last_actioned: str | None, now: datetime) -> bool:
    """Due unless the frequency interval since the last action has not elapsed."""
    if not freq or not last_actioned:
        return True
    last = parse_timestamp(last_actioned)
    if last is None:
        logger.warning(f"Unreadable timestamp '{last_actioned}', treating as due")
        return True
    return _as_utc(now) >= next_due(freq, last)


class MaintenanceScheduler:
    """Maintenance items of one workspace."""

    def __init__(
        self,
        repository: WorkspaceRepository,
        store: StateStore,
        clock: Callable[[], datetime] | None = None,
    ):
        self.repository = repository
        self.store = store
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def add(self, name: str) -> str:
        """Create a maintenance document from the template. Returns the slug."""
        slug = name_to_slug(name)
        if not slug:
            raise InvalidSlug(name)
        if self.repository.maintenance_exists(slug):
            raise AlreadyExists("Maintenance item", slug)

        self.repository.write_maintenance(slug, render("maintenance.md", {"name": name, "slug": slug}))
        logger.info(f"Created maintenance item {slug}")
        return slug

    def requirements(self, slug: str) -> list[Requirement]:
        """All requirements of an item with their due status."""
        content = self.repository.read_maintenance(slug)
        state = self.store.load()
        now = self.clock()

        requirements = parse_requirements(content, state.maintenance.get(slug, {}))
        for req in requirements:
            req.due = is_due(req.freq, req.last_actioned, now)
        return requirements

    def due(self, slug: str) -> list[Requirement]:
        return [r for r in self.requirements(slug) if r.due]

    def list_items(self) -> list[ItemSummary]:
        """Every maintenance item with requirement and due counts.

        A malformed document is reported in its summary rather than failing the listing.
        """
        summaries = []
        for slug in self.repository.list_maintenance():
            try:
                reqs = self.requirements(slug)
            except Malformed as e:
                logger.warning(f"Maintenance item '{slug}' is malformed: {e}")
                summaries.append(ItemSummary(slug=slug, error=str(e)))
                continue
            summaries.append(ItemSummary(slug=slug, total=len(reqs), due=sum(1 for r in reqs if r.due)))
        return summaries

    def mark_actioned(self, slug: str, req_id: str, now: datetime | None = None) -> str:
        """Record that a requirement was actioned. Returns the stored timestamp.

        Raises:
            NotFound: Item or requirement id does not exist
            Malformed: Item document does not parse
        """
        content = self.repository.read_maintenance(slug)
        ids = [r.id for r in parse_requirements(content)]
        if req_id not in ids:
            raise NotFound(
                "Requirement", req_id,
                message=f"Requirement '{req_id}' not found in maintenance item '{slug}'",
            )

        timestamp = format_timestamp(now or self.clock())
        state = self.store.load()
        state.set_actioned(slug, req_id, timestamp)
        self.store.save(state)
        logger.info(f"Marked {slug}/{req_id} actioned at {timestamp}")
        return timestamp

    def remove(self, slug: str) -> None:
        """Delete a maintenance item and its recorded timestamps."""
        self.repository.delete_maintenance(slug)
        state = self.store.load()
        if state.maintenance.pop(slug, None) is not None:
            self.store.save(state)
