"""
Integrity hashes for proposal documents.

Hashes are captured when a proposal is activated and checked before the
active proposal's context is handed out. Only additions and modifications
are flagged; a document absent both at capture time and now is ignored.
"""

import hashlib
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from specflow.lib.constants import PROPOSAL_DOC_FILES
from specflow.lib.errors import IOFailure

logger = logging.getLogger(__name__)

Reader = Callable[[str], bytes | None]


@dataclass
class IntegrityReport:
    """Result of verifying a proposal against its stored hashes."""
    slug: str
    changed_files: list[str] = field(default_factory=list)
    hashes_stored: bool = True  # False when the proposal was never activated

    @property
    def requires_confirmation(self) -> bool:
        return bool(self.changed_files)


def hash_content(content: bytes) -> str:
    """SHA-256 hex digest of document content."""
    return hashlib.sha256(content).hexdigest()


def capture(read: Reader) -> dict[str, str]:
    """Hash every tracked document ``read`` can produce. Absent documents are omitted."""
    hashes = {}
    for filename in PROPOSAL_DOC_FILES:
        content = read(filename)
        if content is not None:
            hashes[filename] = hash_content(content)
    return hashes


def compare(read: Reader, stored: dict[str, str]) -> list[str]:
    """Return tracked filenames that were added or modified since capture."""
    changed = []
    for filename in PROPOSAL_DOC_FILES:
        content = read(filename)
        current = hash_content(content) if content is not None else None
        previous = stored.get(filename)

        if previous is None and current is not None:
            # New file since activation
            changed.append(filename)
        elif previous is not None and current != previous:
            changed.append(filename)
    return changed


def _path_reader(proposal_path: Path) -> Reader:
    def read(filename: str) -> bytes | None:
        path = proposal_path / filename
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise IOFailure("hash", path, e) from e
    return read


def capture_hashes(proposal_path: Path) -> dict[str, str]:
    """Compute hashes for the tracked documents in a proposal directory."""
    return capture(_path_reader(proposal_path))


def verify(proposal_path: Path, stored_hashes: dict[str, str]) -> list[str]:
    """Check a proposal directory against stored hashes. Returns changed filenames."""
    changed = compare(_path_reader(proposal_path), stored_hashes)
    if changed:
        logger.info(f"Integrity drift in {proposal_path.name}: {', '.join(changed)}")
    return changed
