"""
Workspace engine.

Threads one workspace root through the repository, state store, config,
lifecycle and scheduler so several workspaces can coexist in one process.

Usage:
    from specflow.workspace import Workspace

    ws = Workspace(Path("spec"))
    slug = ws.lifecycle.create("User Auth")
    ws.lifecycle.activate(slug)
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Callable

from specflow.lib.config import WorkspaceConfig, WorkspaceLayout, load_workspace_config, save_workspace_config
from specflow.lib.errors import AlreadyExists, InvalidSlug, IOFailure
from specflow.lib.fields import name_to_slug
from specflow.lib.repository import FileRepository, WorkspaceRepository
from specflow.lib.state import StateStore
from specflow.lib.templates import render
from specflow.workflow.lifecycle import ProposalLifecycle
from specflow.workflow.maintenance import MaintenanceScheduler

logger = logging.getLogger(__name__)


class Workspace:
    """One specflow workspace rooted at ``root``.

    The repository, store and clock can be substituted (tests use an
    in-memory repository and a fixed clock).
    """

    def __init__(
        self,
        root: Path,
        repository: WorkspaceRepository | None = None,
        store: StateStore | None = None,
        config: WorkspaceConfig | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.layout = WorkspaceLayout(Path(root))
        self.repository = repository or FileRepository(self.layout)
        self.store = store or StateStore(self.layout.state_file)
        self.config = config or load_workspace_config(self.layout.root)

        self.lifecycle = ProposalLifecycle(
            self.repository, self.store, self.config, git_root=self.layout.root
        )
        self.maintenance = MaintenanceScheduler(self.repository, self.store, clock=clock)

    @property
    def root(self) -> Path:
        return self.layout.root

    def exists(self) -> bool:
        return self.layout.proposals_dir.is_dir()

    def init(self) -> list[Path]:
        """Create the workspace directories, project.md and specflow.yaml.

        Existing files are left untouched. Returns the paths created.
        """
        created = []
        for directory in self.layout.area_dirs():
            if not directory.exists():
                try:
                    directory.mkdir(parents=True)
                except OSError as e:
                    raise IOFailure("create directory", directory, e) from e
                created.append(directory)

        project_file = self.layout.project_file
        if not project_file.exists():
            try:
                project_file.write_text(render("project.md", {}))
            except OSError as e:
                raise IOFailure("write", project_file, e) from e
            created.append(project_file)

        config_file = self.layout.config_file
        if not config_file.exists():
            try:
                save_workspace_config(self.layout.root, self.config)
            except OSError as e:
                raise IOFailure("write", config_file, e) from e
            created.append(config_file)

        if created:
            logger.info(f"Initialised workspace at {self.layout.root}")
        return created

    def add_rule(self, name: str) -> str:
        """Create a rule document from the template. Returns the slug."""
        slug = name_to_slug(name)
        if not slug:
            raise InvalidSlug(name)
        if slug in self.repository.list_rules():
            raise AlreadyExists("Rule", slug)
        self.repository.write_rule(slug, render("rule.md", {"name": name, "slug": slug}))
        return slug
