"""
specflow proposal - Create, activate and finish proposals.
"""

from specflow.workspace import Workspace


def cmd_proposal_create(args, workspace: Workspace) -> int:
    slug = workspace.lifecycle.create(args.name)
    print(f"Created proposal: {slug}")
    print(f"  {workspace.repository.location(slug)}")
    print()
    print("Next: fill in specification.md, then run")
    print(f"  specflow proposal activate {slug}")
    return 0


def cmd_proposal_list(args, workspace: Workspace) -> int:
    """List proposals with activation state and task progress."""
    summaries = workspace.lifecycle.list_proposals()
    if not summaries:
        print("Proposals: none")
        print()
        print("Get started:")
        print("  specflow proposal create \"<name>\"")
        return 0

    print("Proposals")
    print("-" * 60)
    for s in summaries:
        marker = "*" if s.primary else ("+" if s.active else " ")
        progress = f"{s.tasks_done}/{s.tasks_total} ({s.progress}%)" if s.tasks_total else "no tasks"
        line = f"{marker} {s.slug:<28} {progress}"
        if s.unmet:
            line += f"  blocked by: {', '.join(s.unmet)}"
        print(line)
    print()
    print("* primary  + active")
    return 0


def cmd_proposal_activate(args, workspace: Workspace) -> int:
    hashes = workspace.lifecycle.activate(args.slug)
    print(f"Activated proposal: {args.slug}")
    for filename in sorted(hashes):
        print(f"  tracking {filename}")
    return 0


def cmd_proposal_deactivate(args, workspace: Workspace) -> int:
    slug = workspace.lifecycle.deactivate(args.slug)
    print(f"Deactivated proposal: {slug}")
    return 0


def cmd_proposal_validate(args, workspace: Workspace) -> int:
    """Report document errors and warnings. Exit 2 if invalid."""
    report = workspace.lifecycle.validate(args.slug)
    errors = report.all_errors
    warnings = report.all_warnings

    if errors:
        print("Errors:")
        for e in errors:
            print(f"  - {e}")
    if warnings:
        print("Warnings:")
        for w in warnings:
            print(f"  - {w}")

    if not errors and not warnings:
        print(f"Proposal '{args.slug}' is valid")
    elif not errors:
        print(f"Proposal '{args.slug}' is valid with {len(warnings)} warning(s)")
    else:
        print(f"Proposal '{args.slug}' has {len(errors)} error(s)")
        return 2
    return 0


def cmd_proposal_complete(args, workspace: Workspace) -> int:
    result = workspace.lifecycle.complete(args.slug)
    print(f"Completed proposal: {result.slug}")
    print(f"  specification -> {workspace.layout.section_file(result.slug)}")
    if result.archived:
        print(f"  archived: {', '.join(result.archived)}")
    if result.committed:
        print("  committed workspace snapshot")
    return 0


def cmd_proposal_remove(args, workspace: Workspace) -> int:
    workspace.lifecycle.remove(args.slug, force=args.force)
    print(f"Removed proposal: {args.slug}")
    return 0


def cmd_proposal_abandon(args, workspace: Workspace) -> int:
    archived = workspace.lifecycle.abandon(args.slug)
    print(f"Abandoned proposal: {args.slug}")
    if archived:
        print(f"  archived: {', '.join(archived)}")
    return 0
