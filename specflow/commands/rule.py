"""
specflow rule - Permanent rules handed to every agent context.
"""

from specflow.lib.errors import NotFound
from specflow.workspace import Workspace


def cmd_rule_add(args, workspace: Workspace) -> int:
    slug = workspace.add_rule(args.name)
    print(f"Created rule: {slug}")
    print(f"  {workspace.layout.rule_file(slug)}")
    return 0


def cmd_rule_list(args, workspace: Workspace) -> int:
    rules = workspace.repository.list_rules()
    if not rules:
        print("Rules: none")
        return 0
    for rule in rules:
        print(f"  {rule}")
    return 0


def cmd_rule_show(args, workspace: Workspace) -> int:
    """Print one rule, or every rule when no slug is given."""
    repository = workspace.repository
    if args.slug:
        content = repository.read_rule(args.slug)
        if content is None:
            raise NotFound("Rule", args.slug)
        print(content.rstrip())
        return 0

    rules = repository.list_rules()
    if not rules:
        print("No rules found")
        print("Use 'specflow rule add <name>' to add a rule")
        return 0

    print(f"Rules ({len(rules)})")
    print()
    for i, rule in enumerate(rules):
        if i > 0:
            print("---")
            print()
        print((repository.read_rule(rule) or "").rstrip())
        print()
    return 0
