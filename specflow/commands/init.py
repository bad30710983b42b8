"""
specflow init - Create the workspace directory tree.

Creates:
- rule/, proposal/, archive/, section/, maintenance/
- project.md and specflow.yaml (left alone if present)
"""

from specflow.workspace import Workspace


def cmd_init(args, workspace: Workspace) -> int:
    created = workspace.init()
    if not created:
        print(f"Workspace already initialised at {workspace.root}")
        return 0

    print(f"Initialised workspace at {workspace.root}")
    for path in created:
        print(f"  created {path}")
    return 0
