"""
specflow maintenance - Recurring requirements and their due status.
"""

from specflow.workspace import Workspace


def cmd_maintenance_add(args, workspace: Workspace) -> int:
    slug = workspace.maintenance.add(args.name)
    print(f"Created maintenance item: {slug}")
    print(f"  {workspace.layout.maintenance_file(slug)}")
    return 0


def cmd_maintenance_list(args, workspace: Workspace) -> int:
    items = workspace.maintenance.list_items()
    if not items:
        print("Maintenance items: none")
        return 0

    print("Maintenance")
    print("-" * 60)
    for item in items:
        if item.error:
            print(f"  {item.slug:<28} [ERROR] {item.error}")
        else:
            print(f"  {item.slug:<28} {item.due}/{item.total} due")
    return 0


def cmd_maintenance_show(args, workspace: Workspace) -> int:
    """Show requirements of an item (only due ones with --due)."""
    requirements = workspace.maintenance.requirements(args.slug)
    if args.due:
        requirements = [r for r in requirements if r.due]

    if not requirements:
        print("Nothing due" if args.due else "No requirements")
        return 0

    for req in requirements:
        status = "DUE" if req.due else "ok "
        freq = req.freq or "always"
        last = req.last_actioned or "never"
        print(f"  [{status}] {req.id:<16} {freq:<10} last: {last}")
        print(f"          {req.text}")
    return 0


def cmd_maintenance_actioned(args, workspace: Workspace) -> int:
    timestamp = workspace.maintenance.mark_actioned(args.slug, args.id)
    print(f"Marked {args.slug}/{args.id} actioned at {timestamp}")
    return 0


def cmd_maintenance_remove(args, workspace: Workspace) -> int:
    workspace.maintenance.remove(args.slug)
    print(f"Removed maintenance item: {args.slug}")
    return 0
