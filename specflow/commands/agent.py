"""
specflow agent - Context of the primary proposal for coding agents.

Output is withheld when tracked documents changed since activation,
unless --confirm is given.
"""

from specflow.lib.integrity import IntegrityReport
from specflow.workspace import Workspace


def print_mismatch(report: IntegrityReport) -> None:
    print(f"ERROR: Proposal '{report.slug}' changed since activation:")
    for filename in report.changed_files:
        print(f"  - {filename}")
    print()
    print("Re-activate to accept the changes:")
    print(f"  specflow proposal activate {report.slug}")
    print("or proceed anyway with --confirm")


def cmd_agent_current(args, workspace: Workspace) -> int:
    """Print project, rules, specification and design of the primary proposal."""
    context = workspace.lifecycle.current_context(confirm=args.confirm)
    if context.blocked:
        print_mismatch(context.mismatch)
        return 2

    if context.project:
        print(context.project.rstrip())
        print()
    for rule, content in context.rules.items():
        print(f"<!-- rule: {rule} -->")
        print(content.rstrip())
        print()
    for filename, content in context.documents.items():
        print(f"<!-- {context.slug}/{filename} -->")
        print(content.rstrip())
        print()
    return 0


def cmd_agent_tasks(args, workspace: Workspace) -> int:
    """Print the implementation tasks of the primary proposal."""
    context = workspace.lifecycle.current_tasks(confirm=args.confirm)
    if context.blocked:
        print_mismatch(context.mismatch)
        return 2

    if not context.documents:
        print(f"Proposal '{context.slug}' has no implementation.md")
        return 0
    for content in context.documents.values():
        print(content.rstrip())
    return 0


def print_project(rules: dict[str, str], project: str | None) -> None:
    if rules:
        print("# Rules")
        print()
        for content in rules.values():
            print(content.rstrip())
            print()
    if project:
        if rules:
            print("---")
            print()
        print("# Project Design")
        print()
        print(project.rstrip())
        print()


def print_specifications(specs: dict[str, str]) -> None:
    print("# Specifications")
    print()
    for i, (slug, content) in enumerate(specs.items()):
        if i > 0:
            print("---")
            print()
        print(f"## {slug}")
        print()
        print(content.rstrip())
        print()


def cmd_agent_project(args, workspace: Workspace) -> int:
    """Print every rule and the project design document."""
    context = workspace.lifecycle.project_context()
    if context.empty:
        print("No project context found (no rules or project.md)")
        return 0
    print_project(context.rules, context.project)
    return 0


def cmd_agent_specifications(args, workspace: Workspace) -> int:
    """Print every completed specification."""
    specs = workspace.lifecycle.specifications()
    if not specs:
        print("No specifications found")
        print("Complete a proposal with 'specflow proposal complete <slug>' to create one")
        return 0
    print_specifications(specs)
    return 0


def cmd_agent_summary(args, workspace: Workspace) -> int:
    """Print rules, project, completed specifications and the primary proposal."""
    context = workspace.lifecycle.summary(confirm=args.confirm)
    if context.proposal is not None and context.proposal.blocked:
        print_mismatch(context.proposal.mismatch)
        return 2
    if context.empty:
        print("No project context found")
        print("Add rules, project.md or specifications, or activate a proposal")
        return 0

    printed = False
    if context.rules or context.project:
        print_project(context.rules, context.project)
        printed = True
    if context.specifications:
        if printed:
            print("---")
            print()
        print_specifications(context.specifications)
        printed = True
    if context.proposal is not None:
        if printed:
            print("---")
            print()
        print(f"# Active Proposal: {context.proposal.slug}")
        print()
        for filename, content in context.proposal.documents.items():
            print(f"<!-- {context.proposal.slug}/{filename} -->")
            print(content.rstrip())
            print()
    return 0
