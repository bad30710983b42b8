"""Git snapshot support for specflow.

GitResult-returning functions never raise; check .success before using output.
"""

from specflow.git.commit import (
    GitResult,
    commit,
    commit_workspace,
    has_staged_changes,
    is_work_tree,
    run_git,
    stage_path,
)

__all__ = [
    "GitResult",
    "commit",
    "commit_workspace",
    "has_staged_changes",
    "is_work_tree",
    "run_git",
    "stage_path",
]
