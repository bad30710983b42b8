"""Shared fixtures: in-memory repository and state store."""

from datetime import datetime, timezone

import pytest

from specflow.lib.constants import SPECIFICATION_DOC
from specflow.lib.errors import NotFound
from specflow.lib.repository import WorkspaceRepository
from specflow.lib.state import WorkspaceState
from specflow.workflow.lifecycle import ProposalLifecycle
from specflow.workflow.maintenance import MaintenanceScheduler
from specflow.workspace import Workspace


def spec_doc(name: str = "Example", depends: str = "none") -> str:
    """A specification that passes every required-section check."""
    return f"""# Specification: {name}

**Depends on**: {depends}

## Abstract

Summary.

## Introduction

Context.

## Requirements

The system MUST work.

## Examples

## Error Handling

## Security Considerations
"""


class MemoryRepository(WorkspaceRepository):
    """WorkspaceRepository kept entirely in dictionaries."""

    def __init__(self):
        self.proposals: dict[str, dict[str, bytes]] = {}
        self.completed: dict[str, str] = {}
        self.archive: dict[str, dict[str, str]] = {}
        self.maintenance: dict[str, str] = {}
        self.rules: dict[str, str] = {}
        self.project: str | None = None

    def add_proposal(self, slug: str, **documents: str) -> None:
        """Seed a proposal. Keyword names are document stems (specification=...)."""
        self.proposals[slug] = {f"{name}.md": text.encode() for name, text in documents.items()}

    def list_proposals(self):
        return sorted(self.proposals)

    def proposal_exists(self, slug):
        return slug in self.proposals

    def create_proposal(self, slug, documents):
        self.proposals[slug] = {name: text.encode() for name, text in documents.items()}

    def read_bytes(self, slug, filename):
        return self.proposals.get(slug, {}).get(filename)

    def write_document(self, slug, filename, content):
        if slug not in self.proposals:
            raise NotFound("Proposal", slug)
        self.proposals[slug][filename] = content.encode()

    def delete_proposal(self, slug):
        del self.proposals[slug]

    def list_completed(self):
        return sorted(self.completed)

    def read_completed(self, slug):
        return self.completed.get(slug)

    def promote_specification(self, slug):
        self.completed[slug] = self.proposals[slug][SPECIFICATION_DOC].decode()

    def archive_documents(self, slug, filenames, marker=None):
        docs = self.proposals.get(slug, {})
        present = [f for f in filenames if f in docs]
        if not present and marker is None:
            return []
        target = self.archive.setdefault(slug, {})
        for filename in present:
            target[filename] = docs[filename].decode()
        if marker is not None:
            target[marker] = ""
        return present

    def list_archived(self):
        return sorted(self.archive)

    def archive_has_marker(self, slug, marker):
        return marker in self.archive.get(slug, {})

    def list_maintenance(self):
        return sorted(self.maintenance)

    def read_maintenance(self, slug):
        if slug not in self.maintenance:
            raise NotFound("Maintenance item", slug)
        return self.maintenance[slug]

    def write_maintenance(self, slug, content):
        self.maintenance[slug] = content

    def delete_maintenance(self, slug):
        if slug not in self.maintenance:
            raise NotFound("Maintenance item", slug)
        del self.maintenance[slug]

    def list_rules(self):
        return sorted(self.rules)

    def read_rule(self, slug):
        return self.rules.get(slug)

    def write_rule(self, slug, content):
        self.rules[slug] = content

    def read_project(self):
        return self.project


class MemoryStore:
    """StateStore stand-in that keeps the serialised record in memory."""

    def __init__(self, data: dict | None = None):
        self.data = data
        self.saves = 0

    def load(self) -> WorkspaceState:
        if self.data is None:
            return WorkspaceState()
        return WorkspaceState.from_dict(self.data)

    def save(self, state: WorkspaceState) -> None:
        self.data = state.to_dict()
        self.saves += 1


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def repo():
    return MemoryRepository()


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def lifecycle(repo, store):
    return ProposalLifecycle(repo, store)


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 3, 1, 9, 30, tzinfo=timezone.utc))


@pytest.fixture
def scheduler(repo, store, clock):
    return MaintenanceScheduler(repo, store, clock=clock)


@pytest.fixture
def workspace(tmp_path):
    """An initialised on-disk workspace."""
    ws = Workspace(tmp_path / "spec")
    ws.init()
    return ws
