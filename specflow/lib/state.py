"""
Workspace state file (.specflow.json).

Tracks active proposals, the primary proposal, per-proposal document
hashes captured at activation, and per-requirement last-actioned
timestamps for maintenance items.

Single writer, whole-file overwrite. No locking: last writer wins.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

from specflow.lib.constants import STATE_VERSION
from specflow.lib.errors import IOFailure, MalformedState
from specflow.lib.validate import validate, validate_before_write

logger = logging.getLogger(__name__)


@dataclass
class WorkspaceState:
    """The single persisted state record.

    Invariants:
    - primary is "" or a member of active
    - every key of hashes is a member of active
    """
    version: int = STATE_VERSION
    active: list[str] = field(default_factory=list)
    primary: str = ""
    hashes: dict[str, dict[str, str]] = field(default_factory=dict)
    maintenance: dict[str, dict[str, str]] = field(default_factory=dict)  # item -> id -> RFC3339

    def is_active(self, slug: str) -> bool:
        return slug in self.active

    def activate(self, slug: str, hashes: dict[str, str]) -> None:
        """Add slug to active (if absent), make it primary, store its hashes."""
        if slug not in self.active:
            self.active.append(slug)
        self.primary = slug
        self.hashes[slug] = dict(hashes)

    def deactivate(self, slug: str) -> bool:
        """Remove slug from active and drop its hashes.

        If it was primary, the first remaining active slug takes over.
        Returns True if anything changed.
        """
        if slug not in self.active and slug not in self.hashes:
            return False
        self.active = [s for s in self.active if s != slug]
        self.hashes.pop(slug, None)
        if self.primary == slug:
            self.primary = self.active[0] if self.active else ""
        return True

    def reconcile(self, existing: set[str]) -> list[str]:
        """Drop references to proposals that no longer exist.

        Returns the stale slugs removed. This is the only place stale
        active/primary/hash entries are cleaned up.
        """
        stale = [s for s in self.active if s not in existing]
        stale += [s for s in self.hashes if s not in existing and s not in stale]
        for slug in stale:
            self.deactivate(slug)
        if self.primary and self.primary not in self.active:
            stale.append(self.primary)
            self.primary = self.active[0] if self.active else ""
        return stale

    def last_actioned(self, item: str, req_id: str) -> str | None:
        return self.maintenance.get(item, {}).get(req_id)

    def set_actioned(self, item: str, req_id: str, timestamp: str) -> None:
        self.maintenance.setdefault(item, {})[req_id] = timestamp

    def to_dict(self) -> dict:
        return {
            "version": self.version,
            "active": list(self.active),
            "primary": self.primary,
            "hashes": {slug: dict(h) for slug, h in self.hashes.items()},
            "maintenance": {
                item: {req_id: {"last_actioned": ts} for req_id, ts in reqs.items()}
                for item, reqs in self.maintenance.items()
            },
        }

    @classmethod
    def from_dict(cls, data: dict) -> "WorkspaceState":
        """Build state from a decoded record. Null or missing collections become empty."""
        maintenance: dict[str, dict[str, str]] = {}
        for item, reqs in (data.get("maintenance") or {}).items():
            maintenance[item] = {}
            for req_id, entry in (reqs or {}).items():
                entry = entry or {}
                ts = entry.get("last_actioned") or entry.get("lastActioned")
                if ts:
                    maintenance[item][req_id] = ts

        active: list[str] = []
        for slug in data.get("active") or []:
            if slug not in active:
                active.append(slug)

        state = cls(
            version=data.get("version") or STATE_VERSION,
            active=active,
            primary=data.get("primary") or "",
            hashes={slug: dict(h or {}) for slug, h in (data.get("hashes") or {}).items()},
            maintenance=maintenance,
        )
        return state


class StateStore:
    """Loads and saves the workspace state file."""

    def __init__(self, path: Path):
        self.path = path

    def load(self) -> WorkspaceState:
        """Read the state file. A missing file yields a fresh state."""
        if not self.path.exists():
            return WorkspaceState()

        try:
            text = self.path.read_text()
        except OSError as e:
            raise IOFailure("read state file", self.path, e) from e

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise MalformedState(f"Invalid JSON in {self.path}: {e}") from None

        if not isinstance(data, dict):
            raise MalformedState(f"State file {self.path} must contain a JSON object")

        validate(data, "state")
        state = WorkspaceState.from_dict(data)

        if state.primary and state.primary not in state.active:
            logger.warning(f"Primary '{state.primary}' is not active, clearing it")
            state.primary = state.active[0] if state.active else ""
        for slug in [s for s in state.hashes if s not in state.active]:
            logger.warning(f"Dropping hashes for inactive proposal '{slug}'")
            del state.hashes[slug]

        return state

    def save(self, state: WorkspaceState) -> None:
        """Serialise state deterministically and overwrite the file."""
        data = state.to_dict()
        validate_before_write(data, "state", self.path)
        content = json.dumps(data, indent=2, sort_keys=True) + "\n"
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(content)
        except OSError as e:
            raise IOFailure("write state file", self.path, e) from e
