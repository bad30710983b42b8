"""
Git snapshot of a workspace.

Used after `proposal complete` when git.auto_commit is set. Every command
runs as ``git -C <root> ...`` and never raises: a timeout or a missing git
binary comes back as a failed GitResult, so the caller can log it and move on.
"""

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

GIT_TIMEOUT = 30
GIT_NOT_FOUND = 127


@dataclass
class GitResult:
    returncode: int
    stdout: str = ""
    stderr: str = ""
    timed_out: bool = False
    command: str = ""  # e.g. "git commit"

    @property
    def success(self) -> bool:
        return self.returncode == 0 and not self.timed_out

    @property
    def error(self) -> str:
        """First line of stderr, or the exit status when git printed nothing."""
        lines = self.stderr.strip().splitlines()
        if lines:
            return lines[0]
        return f"{self.command or 'git'} exited with status {self.returncode}"


def run_git(args: list[str], cwd: Path, timeout: int = GIT_TIMEOUT) -> GitResult:
    command = f"git {args[0]}" if args else "git"
    logger.debug(f"Running git {' '.join(args)} in {cwd}")
    try:
        proc = subprocess.run(
            ["git", "-C", str(cwd), *args],
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired:
        return GitResult(-1, stderr=f"{command} timed out after {timeout}s", timed_out=True, command=command)
    except FileNotFoundError:
        return GitResult(GIT_NOT_FOUND, stderr="git executable not found", command=command)
    return GitResult(proc.returncode, proc.stdout, proc.stderr, command=command)


def is_work_tree(path: Path) -> bool:
    """True if ``path`` sits inside a git work tree."""
    result = run_git(["rev-parse", "--is-inside-work-tree"], path)
    return result.success and result.stdout.strip() == "true"


def stage_path(worktree: Path, path: Path) -> GitResult:
    """Stage every change (new, modified, deleted) under ``path``."""
    return run_git(["add", "-A", "--", str(path)], worktree)


def has_staged_changes(worktree: Path) -> bool:
    # diff --quiet exits 1 when the index differs from HEAD
    return run_git(["diff", "--cached", "--quiet"], worktree).returncode == 1


def commit(worktree: Path, message: str) -> GitResult:
    return run_git(["commit", "-m", message], worktree)


def commit_workspace(root: Path, message: str) -> GitResult | None:
    """Stage and commit everything under the workspace root.

    Returns None when there is nothing to commit, otherwise the result of
    the first failing step or of the commit itself.
    """
    staged = stage_path(root, root)
    if not staged.success:
        return staged
    if not has_staged_changes(root):
        return None
    result = commit(root, message)
    if result.success:
        logger.info(f"Committed workspace snapshot: {message}")
    return result
