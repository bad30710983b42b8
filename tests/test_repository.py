"""Tests for specflow.lib.repository.FileRepository and the on-disk workspace."""

import pytest

from specflow.lib.errors import IOFailure, NotFound


class TestWorkspaceInit:
    def test_creates_layout(self, workspace):
        layout = workspace.layout
        for directory in layout.area_dirs():
            assert directory.is_dir()
        assert layout.project_file.exists()
        assert layout.config_file.exists()

    def test_idempotent(self, workspace):
        workspace.layout.project_file.write_text("# Mine\n")
        assert workspace.init() == []
        assert workspace.layout.project_file.read_text() == "# Mine\n"


class TestFileRepository:
    def test_proposal_documents(self, workspace):
        repo = workspace.repository
        repo.create_proposal("auth", {"specification.md": "# Spec\n"})

        assert repo.list_proposals() == ["auth"]
        assert repo.read_document("auth", "specification.md") == "# Spec\n"
        assert repo.read_bytes("auth", "design.md") is None

        repo.write_document("auth", "design.md", "# Design: Auth\n")
        assert repo.read_document("auth", "design.md") == "# Design: Auth\n"

    def test_write_to_missing_proposal(self, workspace):
        with pytest.raises(NotFound):
            workspace.repository.write_document("nope", "design.md", "x")

    def test_create_existing_wraps_os_error(self, workspace):
        workspace.repository.create_proposal("auth", {})
        with pytest.raises(IOFailure) as exc_info:
            workspace.repository.create_proposal("auth", {})
        assert exc_info.value.exit_code == 1
        assert exc_info.value.path == workspace.layout.proposal_dir("auth")

    def test_archive_only_when_something_present(self, workspace):
        repo = workspace.repository
        repo.create_proposal("x", {"specification.md": "# Spec\n"})
        assert repo.archive_documents("x", ["design.md", "implementation.md"]) == []
        assert not workspace.layout.archive_dir("x").exists()

    def test_archive_with_marker(self, workspace):
        repo = workspace.repository
        repo.create_proposal("x", {"specification.md": "# Spec\n"})
        assert repo.archive_documents("x", ["specification.md", "design.md"], marker=".abandoned") == [
            "specification.md"
        ]
        archive_dir = workspace.layout.archive_dir("x")
        assert (archive_dir / "specification.md").read_text() == "# Spec\n"
        assert (archive_dir / ".abandoned").exists()
        assert repo.list_archived() == ["x"]
        assert repo.archive_has_marker("x", ".abandoned")
        assert not repo.archive_has_marker("x", ".other")
        assert not repo.archive_has_marker("missing", ".abandoned")

    def test_promote_specification(self, workspace):
        repo = workspace.repository
        repo.create_proposal("x", {"specification.md": "# Spec\n"})
        repo.promote_specification("x")
        assert repo.list_completed() == ["x"]
        assert repo.completed_exists("x")
        assert repo.read_completed("x") == "# Spec\n"

    def test_maintenance(self, workspace):
        repo = workspace.repository
        repo.write_maintenance("ops", "## Requirements\n")
        assert repo.list_maintenance() == ["ops"]
        assert repo.maintenance_exists("ops")
        repo.delete_maintenance("ops")
        with pytest.raises(NotFound):
            repo.read_maintenance("ops")
        with pytest.raises(NotFound):
            repo.delete_maintenance("ops")

    def test_rules_and_project(self, workspace):
        repo = workspace.repository
        repo.write_rule("style", "Use tabs.\n")
        assert repo.list_rules() == ["style"]
        assert repo.read_rule("style") == "Use tabs.\n"
        assert repo.read_project().startswith("# Project")


class TestWorkspaceOnDisk:
    def test_complete_with_only_specification(self, workspace):
        layout = workspace.layout
        proposal_dir = layout.proposal_dir("x")
        proposal_dir.mkdir()
        (proposal_dir / "specification.md").write_text("# Spec X\n")

        workspace.lifecycle.complete("x")

        assert not layout.archive_dir("x").exists()
        assert layout.section_file("x").read_text() == "# Spec X\n"
        assert not proposal_dir.exists()

    def test_activate_persists_state_file(self, workspace):
        slug = workspace.lifecycle.create("Auth")
        workspace.lifecycle.activate(slug)

        state = workspace.store.load()
        assert state.active == ["auth"]
        assert set(state.hashes["auth"]) == {"specification.md", "design.md", "implementation.md"}

    def test_edit_on_disk_detected(self, workspace):
        slug = workspace.lifecycle.create("Auth")
        workspace.lifecycle.activate(slug)
        (workspace.layout.proposal_dir(slug) / "specification.md").write_text("# Changed\n")

        context = workspace.lifecycle.current_context()

        assert context.mismatch.changed_files == ["specification.md"]

    def test_add_rule(self, workspace):
        slug = workspace.add_rule("Code Style")
        assert slug == "code-style"
        assert workspace.layout.rule_file(slug).read_text().startswith("# Code Style")
