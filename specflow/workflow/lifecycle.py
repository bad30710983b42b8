"""
Proposal lifecycle: create, activate, validate, complete, remove, abandon.

Every operation loads the state record, checks the requested transition
with ProposalFSM, applies the directory changes through the repository
and saves the state record. There is no rollback: if a later step of a
multi-step operation fails, the error propagates and the workspace may
be left partially migrated.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from specflow.git import commit_workspace, is_work_tree
from specflow.lib import graph
from specflow.lib.checks import (
    DocumentCheck,
    check_design,
    check_implementation,
    check_specification,
    count_requirement_keywords,
    task_progress,
)
from specflow.lib.config import WorkspaceConfig
from specflow.lib.constants import (
    ABANDONED_MARKER,
    ARCHIVED_ON_COMPLETE,
    DESIGN_DOC,
    IMPLEMENTATION_DOC,
    PROPOSAL_DOC_FILES,
    SPECIFICATION_DOC,
)
from specflow.lib.errors import AlreadyExists, CyclicDependency, DependencyUnmet, InvalidSlug, NotFound
from specflow.lib.fields import name_to_slug
from specflow.lib.integrity import IntegrityReport, capture, compare
from specflow.lib.repository import WorkspaceRepository
from specflow.lib.state import StateStore, WorkspaceState
from specflow.lib.templates import render
from specflow.workflow.fsm import ProposalFSM

logger = logging.getLogger(__name__)


@dataclass
class ValidationReport:
    """Outcome of validating one proposal. Never mutates the workspace."""
    slug: str
    checks: list[DocumentCheck] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)  # Proposal-level errors
    warnings: list[str] = field(default_factory=list)  # Proposal-level warnings
    strict: bool = False

    @property
    def all_errors(self) -> list[str]:
        found = list(self.errors)
        for check in self.checks:
            found.extend(f"{check.document}: {e}" for e in check.errors)
        if self.strict:
            found.extend(self._collect_warnings())
        return found

    @property
    def all_warnings(self) -> list[str]:
        return [] if self.strict else self._collect_warnings()

    @property
    def valid(self) -> bool:
        return not self.all_errors

    def _collect_warnings(self) -> list[str]:
        found = list(self.warnings)
        for check in self.checks:
            found.extend(f"{check.document}: {w}" for w in check.warnings)
        return found


@dataclass
class CompletionResult:
    slug: str
    archived: list[str] = field(default_factory=list)
    committed: bool = False


@dataclass
class CurrentContext:
    """Context of the primary proposal, or the reason it was withheld.

    When ``mismatch`` is set, documents are withheld until the caller
    re-activates the proposal or confirms the changes.
    """
    slug: str
    documents: dict[str, str] | None = None
    rules: dict[str, str] = field(default_factory=dict)
    project: str | None = None
    mismatch: IntegrityReport | None = None
    unverified: bool = False  # No hashes stored for the proposal, so changes cannot be detected

    @property
    def blocked(self) -> bool:
        return self.mismatch is not None


@dataclass
class ProposalSummary:
    slug: str
    active: bool = False
    primary: bool = False
    tasks_total: int = 0
    tasks_done: int = 0
    dependencies: list[str] = field(default_factory=list)
    unmet: list[str] = field(default_factory=list)

    @property
    def progress(self) -> int:
        """Percentage of implementation tasks checked off."""
        if self.tasks_total == 0:
            return 0
        return self.tasks_done * 100 // self.tasks_total


@dataclass
class ProjectContext:
    """Workspace-wide context: rules, project design and completed specifications.

    ``proposal`` holds the primary proposal's context when it was requested
    and a proposal is active.
    """
    rules: dict[str, str] = field(default_factory=dict)
    project: str | None = None
    specifications: dict[str, str] = field(default_factory=dict)
    proposal: CurrentContext | None = None

    @property
    def empty(self) -> bool:
        return not (self.rules or self.project or self.specifications or self.proposal)


@dataclass
class WorkspaceStats:
    completed: int = 0
    must: int = 0
    should: int = 0
    may: int = 0
    active: int = 0
    pending: int = 0
    archived_completed: int = 0
    archived_abandoned: int = 0
    current: str = ""
    tasks_total: int = 0
    tasks_done: int = 0

    @property
    def requirements(self) -> int:
        return self.must + self.should + self.may

    @property
    def archived(self) -> int:
        return self.archived_completed + self.archived_abandoned


class ProposalLifecycle:
    """Operations on proposals within one workspace."""

    def __init__(
        self,
        repository: WorkspaceRepository,
        store: StateStore,
        config: WorkspaceConfig | None = None,
        git_root: Path | None = None,
    ):
        self.repository = repository
        self.store = store
        self.config = config or WorkspaceConfig()
        self.git_root = git_root

    # -- helpers ---------------------------------------------------------

    def _load_state(self) -> tuple[WorkspaceState, list[str]]:
        """Load the state record and drop references to deleted proposals."""
        state = self.store.load()
        stale = state.reconcile(set(self.repository.list_proposals()))
        if stale:
            logger.warning(f"Dropped stale references to missing proposals: {', '.join(stale)}")
        return state, stale

    def _require_proposal(self, slug: str) -> None:
        if not self.repository.proposal_exists(slug):
            raise NotFound("Proposal", slug)

    def _reader(self, slug: str):
        return lambda filename: self.repository.read_bytes(slug, filename)

    # -- operations ------------------------------------------------------

    def create(self, name: str) -> str:
        """Create a proposal directory with the three template documents.

        Returns the slug.
        """
        slug = name_to_slug(name)
        if not slug:
            raise InvalidSlug(name)
        if self.repository.proposal_exists(slug):
            raise AlreadyExists("Proposal", slug)
        if self.repository.completed_exists(slug):
            raise AlreadyExists("Completed specification", slug)

        data = {"name": name, "slug": slug}
        documents = {doc: render(f"proposal/{doc}", data) for doc in PROPOSAL_DOC_FILES}
        self.repository.create_proposal(slug, documents)
        logger.info(f"Created proposal {slug} at {self.repository.location(slug)}")
        return slug

    def activate(self, slug: str) -> dict[str, str]:
        """Make ``slug`` active and primary, capturing its document hashes.

        Raises:
            NotFound: Proposal does not exist
            CyclicDependency: Proposal sits on a dependency cycle
            DependencyUnmet: Declared dependencies are not completed yet
        """
        self._require_proposal(slug)
        state, _ = self._load_state()

        nodes = graph.build(self.repository, state)
        cycles = graph.cycles_involving(nodes, slug)
        if cycles:
            raise CyclicDependency(slug, cycles)
        missing = graph.missing_dependencies(nodes, slug)
        if missing:
            raise DependencyUnmet(slug, missing)

        previous = state.primary
        ProposalFSM(slug, state).fire("activate")
        if previous and previous != slug:
            ProposalFSM(previous, state).fire("demote")

        hashes = capture(self._reader(slug))
        state.activate(slug, hashes)
        self.store.save(state)
        return hashes

    def deactivate(self, slug: str | None = None) -> str:
        """Deactivate ``slug``, or the primary proposal when None. Returns the slug."""
        state, _ = self._load_state()
        if slug is None:
            if not state.primary:
                raise NotFound("Active proposal", "", message="No active proposal")
            slug = state.primary
        if not state.is_active(slug):
            raise NotFound("Active proposal", slug, message=f"Proposal '{slug}' is not active")

        ProposalFSM(slug, state).fire("deactivate")
        state.deactivate(slug)
        self.store.save(state)
        return slug

    def validate(self, slug: str) -> ValidationReport:
        """Check a proposal's documents and dependencies. Read-only."""
        self._require_proposal(slug)
        report = ValidationReport(slug=slug, strict=self.config.validation.strict)

        checkers = {
            SPECIFICATION_DOC: lambda c: check_specification(c, self.config.validation.require_sections),
            DESIGN_DOC: check_design,
            IMPLEMENTATION_DOC: check_implementation,
        }
        for filename in PROPOSAL_DOC_FILES:
            content = self.repository.read_document(slug, filename)
            if content is None:
                report.errors.append(f"Missing {filename}")
                continue
            report.checks.append(checkers[filename](content))

        state, _ = self._load_state()
        nodes = graph.build(self.repository, state)
        missing = graph.missing_dependencies(nodes, slug)
        if missing:
            report.warnings.append(f"Unmet dependencies: {', '.join(missing)}")
        for cycle in graph.cycles_involving(nodes, slug):
            report.warnings.append(f"Circular dependency: {' -> '.join(cycle)}")

        return report

    def complete(self, slug: str) -> CompletionResult:
        """Promote the specification, archive the other documents, drop the proposal."""
        self._require_proposal(slug)
        if self.repository.read_bytes(slug, SPECIFICATION_DOC) is None:
            raise NotFound(
                "Specification", slug,
                message=f"Proposal '{slug}' has no {SPECIFICATION_DOC}; cannot complete",
            )
        if self.repository.completed_exists(slug):
            raise AlreadyExists("Completed specification", slug)

        state, _ = self._load_state()
        ProposalFSM(slug, state).fire("complete")

        archived = self.repository.archive_documents(slug, list(ARCHIVED_ON_COMPLETE))
        self.repository.promote_specification(slug)
        self.repository.delete_proposal(slug)
        state.deactivate(slug)
        self.store.save(state)

        result = CompletionResult(slug=slug, archived=archived)
        if self.config.git.auto_commit:
            result.committed = self._commit(f"specflow: complete {slug}")
        return result

    def _commit(self, message: str) -> bool:
        """Best-effort snapshot commit. Failures are logged, never raised."""
        if self.git_root is None or not is_work_tree(self.git_root):
            logger.warning("Auto-commit enabled but workspace is not in a git work tree")
            return False
        result = commit_workspace(self.git_root, message)
        if result is None:
            logger.info("Nothing to commit")
            return False
        if not result.success:
            logger.warning(f"Auto-commit failed: {result.error}")
            return False
        return True

    def remove(self, slug: str, force: bool = False) -> None:
        """Delete a proposal. Active proposals need ``force``."""
        self._require_proposal(slug)
        state, _ = self._load_state()
        ProposalFSM(slug, state).fire("remove", force=force)

        self.repository.delete_proposal(slug)
        state.deactivate(slug)
        self.store.save(state)

    def abandon(self, slug: str) -> list[str]:
        """Archive every document with an abandoned marker, then drop the proposal.

        Returns the archived filenames.
        """
        self._require_proposal(slug)
        state, _ = self._load_state()
        ProposalFSM(slug, state).fire("abandon")

        archived = self.repository.archive_documents(
            slug, list(PROPOSAL_DOC_FILES), marker=ABANDONED_MARKER
        )
        self.repository.delete_proposal(slug)
        state.deactivate(slug)
        self.store.save(state)
        return archived

    # -- context for the primary proposal --------------------------------

    def _gate(self, confirm: bool) -> tuple[str, IntegrityReport]:
        """Integrity check for the primary proposal."""
        state, stale = self._load_state()
        if stale:
            self.store.save(state)
        if not state.primary:
            raise NotFound("Active proposal", "", message="No active proposal")

        slug = state.primary
        stored = state.hashes.get(slug)
        if stored is None:
            logger.warning(f"No stored hashes for '{slug}'; re-activate to enable change detection")
            return slug, IntegrityReport(slug=slug, hashes_stored=False)

        changed = compare(self._reader(slug), stored)
        report = IntegrityReport(slug=slug, changed_files=changed)
        if changed and confirm:
            logger.info(f"Proceeding with modified files in '{slug}': {', '.join(changed)}")
        return slug, report

    def current_context(self, confirm: bool = False) -> CurrentContext:
        """Specification and design of the primary proposal, plus rules and project."""
        slug, report = self._gate(confirm)
        if report.requires_confirmation and not confirm:
            return CurrentContext(slug=slug, mismatch=report)

        return CurrentContext(
            slug=slug,
            documents=self._read_documents(slug, (SPECIFICATION_DOC, DESIGN_DOC)),
            rules=self._read_rules(),
            project=self.repository.read_project(),
            unverified=not report.hashes_stored,
        )

    def _read_documents(self, slug: str, filenames) -> dict[str, str]:
        documents = {}
        for filename in filenames:
            content = self.repository.read_document(slug, filename)
            if content is not None:
                documents[filename] = content
        return documents

    def _read_rules(self) -> dict[str, str]:
        rules = {}
        for rule in self.repository.list_rules():
            content = self.repository.read_rule(rule)
            if content is not None:
                rules[rule] = content
        return rules

    def current_tasks(self, confirm: bool = False) -> CurrentContext:
        """Implementation document of the primary proposal."""
        slug, report = self._gate(confirm)
        if report.requires_confirmation and not confirm:
            return CurrentContext(slug=slug, mismatch=report)

        return CurrentContext(
            slug=slug,
            documents=self._read_documents(slug, (IMPLEMENTATION_DOC,)),
            unverified=not report.hashes_stored,
        )

    # -- workspace-wide context ------------------------------------------

    def project_context(self) -> ProjectContext:
        """Rules and the project design document."""
        return ProjectContext(rules=self._read_rules(), project=self.repository.read_project())

    def specifications(self) -> dict[str, str]:
        """Every completed specification, keyed by slug."""
        specs = {}
        for slug in self.repository.list_completed():
            content = self.repository.read_completed(slug)
            if content is not None:
                specs[slug] = content
        return specs

    def summary(self, confirm: bool = False) -> ProjectContext:
        """Rules, project, completed specifications and all documents of the primary proposal.

        The primary proposal goes through the same integrity check as
        current_context; a blocked check leaves ``proposal.mismatch`` set.
        """
        context = self.project_context()
        context.specifications = self.specifications()

        try:
            slug, report = self._gate(confirm)
        except NotFound:
            return context
        if report.requires_confirmation and not confirm:
            context.proposal = CurrentContext(slug=slug, mismatch=report)
        else:
            context.proposal = CurrentContext(
                slug=slug,
                documents=self._read_documents(slug, PROPOSAL_DOC_FILES),
                unverified=not report.hashes_stored,
            )
        return context

    # -- listing ---------------------------------------------------------

    def list_proposals(self) -> list[ProposalSummary]:
        state, _ = self._load_state()
        nodes = graph.build(self.repository, state)

        summaries = []
        for slug in self.repository.list_proposals():
            total, done = task_progress(self.repository.read_document(slug, IMPLEMENTATION_DOC))
            summaries.append(ProposalSummary(
                slug=slug,
                active=state.is_active(slug),
                primary=state.primary == slug,
                tasks_total=total,
                tasks_done=done,
                dependencies=list(nodes[slug].dependencies),
                unmet=graph.missing_dependencies(nodes, slug),
            ))
        return summaries

    def dependency_graph(self) -> dict[str, graph.ProposalNode]:
        state, _ = self._load_state()
        return graph.build(self.repository, state)

    def stats(self) -> WorkspaceStats:
        """Counts over completed specifications, proposals and the archive."""
        stats = WorkspaceStats()

        for content in self.specifications().values():
            stats.completed += 1
            must, should, may = count_requirement_keywords(content)
            stats.must += must
            stats.should += should
            stats.may += may

        for summary in self.list_proposals():
            if summary.active:
                stats.active += 1
            else:
                stats.pending += 1
            if summary.primary:
                stats.current = summary.slug
                stats.tasks_total = summary.tasks_total
                stats.tasks_done = summary.tasks_done

        for slug in self.repository.list_archived():
            if self.repository.archive_has_marker(slug, ABANDONED_MARKER):
                stats.archived_abandoned += 1
            else:
                stats.archived_completed += 1

        return stats
