"""
Workspace repository.

All document reads and writes go through a WorkspaceRepository so the
lifecycle and scheduling logic never touches paths directly. FileRepository
is the on-disk implementation; tests substitute an in-memory one.
"""

import logging
import shutil
from pathlib import Path

from specflow.lib.config import WorkspaceLayout
from specflow.lib.constants import SPECIFICATION_DOC
from specflow.lib.errors import IOFailure, NotFound

logger = logging.getLogger(__name__)


class WorkspaceRepository:
    """Interface over the proposal, section, archive, maintenance and rule areas."""

    # Proposals
    def list_proposals(self) -> list[str]:
        raise NotImplementedError

    def proposal_exists(self, slug: str) -> bool:
        raise NotImplementedError

    def create_proposal(self, slug: str, documents: dict[str, str]) -> None:
        raise NotImplementedError

    def read_bytes(self, slug: str, filename: str) -> bytes | None:
        raise NotImplementedError

    def write_document(self, slug: str, filename: str, content: str) -> None:
        raise NotImplementedError

    def delete_proposal(self, slug: str) -> None:
        raise NotImplementedError

    def location(self, slug: str) -> str:
        return slug

    def read_document(self, slug: str, filename: str) -> str | None:
        content = self.read_bytes(slug, filename)
        return content.decode("utf-8") if content is not None else None

    # Completed specifications
    def list_completed(self) -> list[str]:
        raise NotImplementedError

    def completed_exists(self, slug: str) -> bool:
        return slug in self.list_completed()

    def read_completed(self, slug: str) -> str | None:
        raise NotImplementedError

    def promote_specification(self, slug: str) -> None:
        raise NotImplementedError

    # Archive
    def archive_documents(self, slug: str, filenames: list[str], marker: str = None) -> list[str]:
        raise NotImplementedError

    def list_archived(self) -> list[str]:
        raise NotImplementedError

    def archive_has_marker(self, slug: str, marker: str) -> bool:
        raise NotImplementedError

    # Maintenance
    def list_maintenance(self) -> list[str]:
        raise NotImplementedError

    def maintenance_exists(self, slug: str) -> bool:
        return slug in self.list_maintenance()

    def read_maintenance(self, slug: str) -> str:
        raise NotImplementedError

    def write_maintenance(self, slug: str, content: str) -> None:
        raise NotImplementedError

    def delete_maintenance(self, slug: str) -> None:
        raise NotImplementedError

    # Rules and project design
    def list_rules(self) -> list[str]:
        raise NotImplementedError

    def read_rule(self, slug: str) -> str | None:
        raise NotImplementedError

    def write_rule(self, slug: str, content: str) -> None:
        raise NotImplementedError

    def read_project(self) -> str | None:
        raise NotImplementedError


def _list_markdown(directory: Path) -> list[str]:
    """Sorted stems of .md files in a directory. Missing directory is empty."""
    if not directory.exists():
        return []
    return sorted(p.stem for p in directory.iterdir() if p.is_file() and p.suffix == ".md")


class FileRepository(WorkspaceRepository):
    """WorkspaceRepository backed by the workspace directory tree."""

    def __init__(self, layout: WorkspaceLayout):
        self.layout = layout

    def _read_text(self, path: Path) -> str | None:
        try:
            return path.read_text()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise IOFailure("read", path, e) from e

    def _write_text(self, path: Path, content: str) -> None:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content)
        except OSError as e:
            raise IOFailure("write", path, e) from e

    # Proposals
    def list_proposals(self) -> list[str]:
        proposals_dir = self.layout.proposals_dir
        if not proposals_dir.exists():
            return []
        return sorted(d.name for d in proposals_dir.iterdir() if d.is_dir())

    def proposal_exists(self, slug: str) -> bool:
        return self.layout.proposal_dir(slug).is_dir()

    def create_proposal(self, slug: str, documents: dict[str, str]) -> None:
        proposal_dir = self.layout.proposal_dir(slug)
        try:
            proposal_dir.mkdir(parents=True)
        except OSError as e:
            raise IOFailure("create proposal directory", proposal_dir, e) from e
        for filename, content in documents.items():
            self._write_text(proposal_dir / filename, content)

    def read_bytes(self, slug: str, filename: str) -> bytes | None:
        path = self.layout.proposal_dir(slug) / filename
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise IOFailure("read", path, e) from e

    def write_document(self, slug: str, filename: str, content: str) -> None:
        if not self.proposal_exists(slug):
            raise NotFound("Proposal", slug)
        self._write_text(self.layout.proposal_dir(slug) / filename, content)

    def delete_proposal(self, slug: str) -> None:
        proposal_dir = self.layout.proposal_dir(slug)
        try:
            shutil.rmtree(proposal_dir)
        except OSError as e:
            raise IOFailure("remove proposal directory", proposal_dir, e) from e

    def location(self, slug: str) -> str:
        return str(self.layout.proposal_dir(slug))

    # Completed specifications
    def list_completed(self) -> list[str]:
        return _list_markdown(self.layout.sections_dir)

    def completed_exists(self, slug: str) -> bool:
        return self.layout.section_file(slug).is_file()

    def read_completed(self, slug: str) -> str | None:
        return self._read_text(self.layout.section_file(slug))

    def promote_specification(self, slug: str) -> None:
        src = self.layout.proposal_dir(slug) / SPECIFICATION_DOC
        dst = self.layout.section_file(slug)
        try:
            dst.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(src, dst)
        except OSError as e:
            raise IOFailure("promote specification to", dst, e) from e

    # Archive
    def archive_documents(self, slug: str, filenames: list[str], marker: str = None) -> list[str]:
        """Copy the named documents that exist into archive/<slug>/.

        The archive directory is only created when there is something to put in it.
        """
        proposal_dir = self.layout.proposal_dir(slug)
        archive_dir = self.layout.archive_dir(slug)
        present = [f for f in filenames if (proposal_dir / f).is_file()]
        if not present and marker is None:
            return []

        try:
            archive_dir.mkdir(parents=True, exist_ok=True)
            for filename in present:
                shutil.copyfile(proposal_dir / filename, archive_dir / filename)
        except OSError as e:
            raise IOFailure("archive documents to", archive_dir, e) from e

        if marker is not None:
            marker_path = archive_dir / marker
            try:
                marker_path.write_text("")
            except OSError as e:
                logger.warning(f"Failed to create marker {marker_path}: {e}")

        return present

    def list_archived(self) -> list[str]:
        archive_root = self.layout.archive_root
        if not archive_root.exists():
            return []
        return sorted(d.name for d in archive_root.iterdir() if d.is_dir())

    def archive_has_marker(self, slug: str, marker: str) -> bool:
        return (self.layout.archive_dir(slug) / marker).is_file()

    # Maintenance
    def list_maintenance(self) -> list[str]:
        return _list_markdown(self.layout.maintenance_dir)

    def maintenance_exists(self, slug: str) -> bool:
        return self.layout.maintenance_file(slug).is_file()

    def read_maintenance(self, slug: str) -> str:
        content = self._read_text(self.layout.maintenance_file(slug))
        if content is None:
            raise NotFound("Maintenance item", slug)
        return content

    def write_maintenance(self, slug: str, content: str) -> None:
        self._write_text(self.layout.maintenance_file(slug), content)

    def delete_maintenance(self, slug: str) -> None:
        path = self.layout.maintenance_file(slug)
        try:
            path.unlink()
        except FileNotFoundError:
            raise NotFound("Maintenance item", slug) from None
        except OSError as e:
            raise IOFailure("remove", path, e) from e

    # Rules and project design
    def list_rules(self) -> list[str]:
        return _list_markdown(self.layout.rules_dir)

    def read_rule(self, slug: str) -> str | None:
        return self._read_text(self.layout.rule_file(slug))

    def write_rule(self, slug: str, content: str) -> None:
        self._write_text(self.layout.rule_file(slug), content)

    def read_project(self) -> str | None:
        return self._read_text(self.layout.project_file)
