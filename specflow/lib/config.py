"""
Configuration loaders for specflow.

WorkspaceLayout resolves every path inside a workspace from its root.
WorkspaceConfig is loaded from specflow.yaml; if the file is missing or
unreadable, defaults are used.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from specflow.lib.constants import (
    ARCHIVE_DIR,
    CONFIG_FILE,
    DEFAULT_ROOT_DIRNAME,
    MAINTENANCE_DIR,
    PROJECT_FILE,
    PROPOSAL_DIR,
    RULE_DIR,
    SECTION_DIR,
    STATE_FILE,
)

logger = logging.getLogger(__name__)

ROOT_ENV_VAR = "SPECFLOW_ROOT"


@dataclass(frozen=True)
class WorkspaceLayout:
    """Paths inside a specflow workspace."""
    root: Path

    @property
    def proposals_dir(self) -> Path:
        return self.root / PROPOSAL_DIR

    @property
    def sections_dir(self) -> Path:
        return self.root / SECTION_DIR

    @property
    def archive_root(self) -> Path:
        return self.root / ARCHIVE_DIR

    @property
    def maintenance_dir(self) -> Path:
        return self.root / MAINTENANCE_DIR

    @property
    def rules_dir(self) -> Path:
        return self.root / RULE_DIR

    @property
    def project_file(self) -> Path:
        return self.root / PROJECT_FILE

    @property
    def state_file(self) -> Path:
        return self.root / STATE_FILE

    @property
    def config_file(self) -> Path:
        return self.root / CONFIG_FILE

    def proposal_dir(self, slug: str) -> Path:
        return self.proposals_dir / slug

    def section_file(self, slug: str) -> Path:
        return self.sections_dir / f"{slug}.md"

    def archive_dir(self, slug: str) -> Path:
        return self.archive_root / slug

    def maintenance_file(self, slug: str) -> Path:
        return self.maintenance_dir / f"{slug}.md"

    def rule_file(self, slug: str) -> Path:
        return self.rules_dir / f"{slug}.md"

    def area_dirs(self) -> list[Path]:
        """Directories created by `specflow init`."""
        return [
            self.root,
            self.rules_dir,
            self.proposals_dir,
            self.archive_root,
            self.sections_dir,
            self.maintenance_dir,
        ]


def resolve_root(explicit: str | None = None, cwd: Path | None = None) -> Path:
    """Resolve the workspace root: --root, then $SPECFLOW_ROOT, then ./spec."""
    if explicit:
        return Path(explicit)
    env_root = os.environ.get(ROOT_ENV_VAR)
    if env_root:
        return Path(env_root)
    return (cwd or Path.cwd()) / DEFAULT_ROOT_DIRNAME


@dataclass
class ValidationConfig:
    strict: bool = False  # Treat warnings as errors
    require_sections: list[str] = field(default_factory=list)  # Extra required specification sections


@dataclass
class GitConfig:
    auto_commit: bool = False  # Commit the workspace after a proposal is completed


@dataclass
class WatchConfig:
    poll_interval: float = 2.0  # Seconds between filesystem scans
    debounce: float = 0.5  # Minimum seconds between reloads


@dataclass
class WorkspaceConfig:
    """Workspace configuration from specflow.yaml."""
    validation: ValidationConfig = field(default_factory=ValidationConfig)
    git: GitConfig = field(default_factory=GitConfig)
    watch: WatchConfig = field(default_factory=WatchConfig)


def _section(data: dict, name: str) -> dict:
    value = data.get(name) or {}
    if not isinstance(value, dict):
        logger.warning(f"Ignoring '{name}' in {CONFIG_FILE}: expected a mapping")
        return {}
    return value


def load_workspace_config(root: Path | None) -> WorkspaceConfig:
    """Load specflow.yaml and return WorkspaceConfig.

    If root is None or the file doesn't exist, returns defaults.
    """
    if root is None:
        return WorkspaceConfig()

    config_path = root / CONFIG_FILE
    if not config_path.exists():
        return WorkspaceConfig()

    try:
        data = yaml.safe_load(config_path.read_text()) or {}
    except (yaml.YAMLError, OSError) as e:
        logger.warning(f"Failed to parse {config_path}: {e}")
        return WorkspaceConfig()

    if not isinstance(data, dict):
        logger.warning(f"Failed to parse {config_path}: expected a mapping at top level")
        return WorkspaceConfig()

    validation = _section(data, "validation")
    git = _section(data, "git")
    watch = _section(data, "watch")

    try:
        return WorkspaceConfig(
            validation=ValidationConfig(
                strict=bool(validation.get("strict", False)),
                require_sections=[str(s) for s in validation.get("require_sections") or []],
            ),
            git=GitConfig(auto_commit=bool(git.get("auto_commit", False))),
            watch=WatchConfig(
                poll_interval=float(watch.get("poll_interval", 2.0)),
                debounce=float(watch.get("debounce", 0.5)),
            ),
        )
    except (TypeError, ValueError) as e:
        logger.warning(f"Invalid value in {config_path}: {e}")
        return WorkspaceConfig()


def save_workspace_config(root: Path, config: WorkspaceConfig) -> None:
    """Write specflow.yaml."""
    data = {
        "validation": {
            "strict": config.validation.strict,
            "require_sections": list(config.validation.require_sections),
        },
        "git": {"auto_commit": config.git.auto_commit},
        "watch": {
            "poll_interval": config.watch.poll_interval,
            "debounce": config.watch.debounce,
        },
    }
    (root / CONFIG_FILE).write_text(yaml.safe_dump(data, sort_keys=False))
