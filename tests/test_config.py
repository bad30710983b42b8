"""Tests for specflow.lib.config module."""

import logging
from pathlib import Path

import yaml

from specflow.lib.config import (
    ROOT_ENV_VAR,
    WorkspaceConfig,
    WorkspaceLayout,
    load_workspace_config,
    resolve_root,
    save_workspace_config,
)


class TestWorkspaceLayout:
    def test_paths(self, tmp_path):
        layout = WorkspaceLayout(tmp_path)
        assert layout.proposal_dir("auth") == tmp_path / "proposal" / "auth"
        assert layout.section_file("auth") == tmp_path / "section" / "auth.md"
        assert layout.archive_dir("auth") == tmp_path / "archive" / "auth"
        assert layout.maintenance_file("ops") == tmp_path / "maintenance" / "ops.md"
        assert layout.rule_file("style") == tmp_path / "rule" / "style.md"
        assert layout.state_file == tmp_path / ".specflow.json"
        assert layout.config_file == tmp_path / "specflow.yaml"


class TestResolveRoot:
    def test_explicit_wins(self, monkeypatch):
        monkeypatch.setenv(ROOT_ENV_VAR, "/from/env")
        assert resolve_root("/explicit") == Path("/explicit")

    def test_env(self, monkeypatch):
        monkeypatch.setenv(ROOT_ENV_VAR, "/from/env")
        assert resolve_root() == Path("/from/env")

    def test_default(self, monkeypatch, tmp_path):
        monkeypatch.delenv(ROOT_ENV_VAR, raising=False)
        assert resolve_root(cwd=tmp_path) == tmp_path / "spec"


class TestLoadWorkspaceConfig:
    def test_returns_defaults_when_no_root(self):
        assert load_workspace_config(None) == WorkspaceConfig()

    def test_returns_defaults_when_file_missing(self, tmp_path):
        assert load_workspace_config(tmp_path) == WorkspaceConfig()

    def test_loads_custom_config(self, tmp_path):
        (tmp_path / "specflow.yaml").write_text(yaml.safe_dump({
            "validation": {"strict": True, "require_sections": ["Rollout"]},
            "git": {"auto_commit": True},
        }))

        config = load_workspace_config(tmp_path)

        assert config.validation.strict is True
        assert config.validation.require_sections == ["Rollout"]
        assert config.git.auto_commit is True
        # Unset sections keep defaults
        assert config.watch.poll_interval == 2.0

    def test_handles_invalid_yaml(self, tmp_path, caplog):
        (tmp_path / "specflow.yaml").write_text("validation: [unclosed")
        with caplog.at_level(logging.WARNING, logger="specflow.lib.config"):
            config = load_workspace_config(tmp_path)
        assert config == WorkspaceConfig()
        assert "Failed to parse" in caplog.text

    def test_handles_non_mapping_section(self, tmp_path, caplog):
        (tmp_path / "specflow.yaml").write_text("git: yes\n")
        with caplog.at_level(logging.WARNING, logger="specflow.lib.config"):
            config = load_workspace_config(tmp_path)
        assert config.git.auto_commit is False
        assert "Ignoring 'git'" in caplog.text

    def test_handles_bad_value(self, tmp_path):
        (tmp_path / "specflow.yaml").write_text("watch:\n  poll_interval: fast\n")
        assert load_workspace_config(tmp_path) == WorkspaceConfig()

    def test_save_round_trip(self, tmp_path):
        config = WorkspaceConfig()
        config.validation.strict = True
        config.watch.debounce = 1.5
        save_workspace_config(tmp_path, config)
        assert load_workspace_config(tmp_path) == config
