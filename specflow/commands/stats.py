"""
specflow stats - Requirement counts, proposal counts and current progress.
"""

from specflow.workspace import Workspace


def progress_bar(done: int, total: int, width: int = 20) -> str:
    filled = done * width // total if total else 0
    return "[" + "#" * filled + "-" * (width - filled) + "]"


def cmd_stats(args, workspace: Workspace) -> int:
    stats = workspace.lifecycle.stats()

    print("Specifications")
    print(f"  Completed: {stats.completed}")
    line = f"  Requirements: {stats.requirements}"
    parts = [
        f"{label}: {count}"
        for label, count in (("MUST", stats.must), ("SHOULD", stats.should), ("MAY", stats.may))
        if count
    ]
    if parts:
        line += f" ({', '.join(parts)})"
    print(line)
    print()

    print("Proposals")
    print(f"  Active: {stats.active}")
    print(f"  Pending: {stats.pending}")
    if stats.archived:
        print(f"  Archived: {stats.archived} "
              f"({stats.archived_completed} completed, {stats.archived_abandoned} abandoned)")
    else:
        print("  Archived: 0")
    print()

    print("Progress")
    if not stats.current:
        print("  Current: no active proposal")
        return 0
    print(f"  Current: {stats.current}")
    if stats.tasks_total:
        percent = stats.tasks_done * 100 // stats.tasks_total
        bar = progress_bar(stats.tasks_done, stats.tasks_total)
        print(f"  Tasks: {bar} {stats.tasks_done}/{stats.tasks_total} ({percent}%)")
    else:
        print("  Tasks: no tasks defined")
    return 0
