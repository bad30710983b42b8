"""
specflow status - Active proposals and integrity of the primary.
"""

from specflow.lib.errors import NotFound
from specflow.workspace import Workspace


def cmd_status(args, workspace: Workspace) -> int:
    active = [s for s in workspace.lifecycle.list_proposals() if s.active]
    if not active:
        print("No active proposal")
        return 0

    print("Active proposals")
    print("-" * 60)
    for s in active:
        role = "primary" if s.primary else "secondary"
        print(f"  {s.slug:<28} {role:<10} {s.tasks_done}/{s.tasks_total} tasks")
    print()

    try:
        context = workspace.lifecycle.current_tasks()
    except NotFound:
        return 0
    if context.blocked:
        print(f"Integrity: changed since activation ({', '.join(context.mismatch.changed_files)})")
    elif context.unverified:
        print("Integrity: unknown, no hashes stored")
        print(f"  Re-activate to enable change detection: specflow proposal activate {context.slug}")
    else:
        print("Integrity: ok")
    return 0
