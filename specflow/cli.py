#!/usr/bin/env python3
"""specflow CLI entrypoint."""

import argparse
import logging
import sys

from specflow import __version__
from specflow.commands import agent as cmd_agent_module
from specflow.commands import graph as cmd_graph_module
from specflow.commands import init as cmd_init_module
from specflow.commands import maintenance as cmd_maintenance_module
from specflow.commands import proposal as cmd_proposal_module
from specflow.commands import rule as cmd_rule_module
from specflow.commands import stats as cmd_stats_module
from specflow.commands import status as cmd_status_module
from specflow.commands import watch as cmd_watch_module
from specflow.lib.config import resolve_root
from specflow.lib.errors import SpecflowError
from specflow.workspace import Workspace


def get_workspace(args) -> Workspace:
    """Build the engine for --root, $SPECFLOW_ROOT or ./spec."""
    return Workspace(resolve_root(args.root))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="specflow", description="Specification workspace manager")
    parser.add_argument("--root", help="Workspace root (default: $SPECFLOW_ROOT or ./spec)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log progress")
    parser.add_argument("--version", action="version", version=f"specflow {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # init
    p_init = subparsers.add_parser("init", help="Create the workspace directories")
    p_init.set_defaults(func=cmd_init_module.cmd_init)

    # status
    p_status = subparsers.add_parser("status", help="Show active proposals")
    p_status.set_defaults(func=cmd_status_module.cmd_status)

    # stats
    p_stats = subparsers.add_parser("stats", help="Requirement counts, proposal counts and progress")
    p_stats.set_defaults(func=cmd_stats_module.cmd_stats)

    # proposal
    p_proposal = subparsers.add_parser("proposal", help="Manage proposals")
    proposal_sub = p_proposal.add_subparsers(dest="proposal_command", required=True)

    p_create = proposal_sub.add_parser("create", help="Create proposal from templates")
    p_create.add_argument("name", help="Human-readable name (slugified)")
    p_create.set_defaults(func=cmd_proposal_module.cmd_proposal_create)

    p_list = proposal_sub.add_parser("list", help="List proposals")
    p_list.set_defaults(func=cmd_proposal_module.cmd_proposal_list)

    p_activate = proposal_sub.add_parser("activate", help="Activate and make primary")
    p_activate.add_argument("slug")
    p_activate.set_defaults(func=cmd_proposal_module.cmd_proposal_activate)

    p_deactivate = proposal_sub.add_parser("deactivate", help="Deactivate (default: primary)")
    p_deactivate.add_argument("slug", nargs="?")
    p_deactivate.set_defaults(func=cmd_proposal_module.cmd_proposal_deactivate)

    p_validate = proposal_sub.add_parser("validate", help="Check documents and dependencies")
    p_validate.add_argument("slug")
    p_validate.set_defaults(func=cmd_proposal_module.cmd_proposal_validate)

    p_complete = proposal_sub.add_parser("complete", help="Promote specification and archive the rest")
    p_complete.add_argument("slug")
    p_complete.set_defaults(func=cmd_proposal_module.cmd_proposal_complete)

    p_remove = proposal_sub.add_parser("remove", help="Delete a proposal")
    p_remove.add_argument("slug")
    p_remove.add_argument("--force", action="store_true", help="Remove even if active")
    p_remove.set_defaults(func=cmd_proposal_module.cmd_proposal_remove)

    p_abandon = proposal_sub.add_parser("abandon", help="Archive all documents and drop the proposal")
    p_abandon.add_argument("slug")
    p_abandon.set_defaults(func=cmd_proposal_module.cmd_proposal_abandon)

    # graph
    p_graph = subparsers.add_parser("graph", help="Show dependency graph")
    p_graph.add_argument("slug", nargs="?", help="Only show this proposal's dependencies and dependents")
    p_graph.add_argument("--format", choices=["tree", "dot"], default="tree")
    p_graph.set_defaults(func=cmd_graph_module.cmd_graph)

    # maintenance
    p_maint = subparsers.add_parser("maintenance", help="Manage maintenance items")
    p_maint.set_defaults(func=cmd_maintenance_module.cmd_maintenance_list)
    maint_sub = p_maint.add_subparsers(dest="maintenance_command")

    p_maint_add = maint_sub.add_parser("add", help="Create maintenance item")
    p_maint_add.add_argument("name")
    p_maint_add.set_defaults(func=cmd_maintenance_module.cmd_maintenance_add)

    p_maint_list = maint_sub.add_parser("list", help="List items with due counts")
    p_maint_list.set_defaults(func=cmd_maintenance_module.cmd_maintenance_list)

    p_maint_show = maint_sub.add_parser("show", help="Show requirements")
    p_maint_show.add_argument("slug")
    p_maint_show.add_argument("--due", action="store_true", help="Only due requirements")
    p_maint_show.set_defaults(func=cmd_maintenance_module.cmd_maintenance_show)

    p_maint_done = maint_sub.add_parser("actioned", help="Mark a requirement actioned now")
    p_maint_done.add_argument("slug")
    p_maint_done.add_argument("id")
    p_maint_done.set_defaults(func=cmd_maintenance_module.cmd_maintenance_actioned)

    p_maint_rm = maint_sub.add_parser("remove", help="Delete maintenance item")
    p_maint_rm.add_argument("slug")
    p_maint_rm.set_defaults(func=cmd_maintenance_module.cmd_maintenance_remove)

    # rule
    p_rule = subparsers.add_parser("rule", help="Manage rules")
    p_rule.set_defaults(func=cmd_rule_module.cmd_rule_list)
    rule_sub = p_rule.add_subparsers(dest="rule_command")

    p_rule_add = rule_sub.add_parser("add", help="Create rule")
    p_rule_add.add_argument("name")
    p_rule_add.set_defaults(func=cmd_rule_module.cmd_rule_add)

    p_rule_list = rule_sub.add_parser("list", help="List rules")
    p_rule_list.set_defaults(func=cmd_rule_module.cmd_rule_list)

    p_rule_show = rule_sub.add_parser("show", help="Print rules")
    p_rule_show.add_argument("slug", nargs="?", help="Only this rule")
    p_rule_show.set_defaults(func=cmd_rule_module.cmd_rule_show)

    # agent
    p_agent = subparsers.add_parser("agent", help="Context for coding agents")
    agent_sub = p_agent.add_subparsers(dest="agent_command", required=True)

    p_current = agent_sub.add_parser("current", help="Specification and design of the primary proposal")
    p_current.add_argument("--confirm", action="store_true", help="Proceed even if documents changed")
    p_current.set_defaults(func=cmd_agent_module.cmd_agent_current)

    p_tasks = agent_sub.add_parser("tasks", help="Implementation tasks of the primary proposal")
    p_tasks.add_argument("--confirm", action="store_true", help="Proceed even if documents changed")
    p_tasks.set_defaults(func=cmd_agent_module.cmd_agent_tasks)

    p_project = agent_sub.add_parser("project", help="Rules and project design")
    p_project.set_defaults(func=cmd_agent_module.cmd_agent_project)

    p_specs = agent_sub.add_parser("specifications", help="All completed specifications")
    p_specs.set_defaults(func=cmd_agent_module.cmd_agent_specifications)

    p_summary = agent_sub.add_parser("summary", help="Project, specifications and the primary proposal")
    p_summary.add_argument("--confirm", action="store_true", help="Proceed even if documents changed")
    p_summary.set_defaults(func=cmd_agent_module.cmd_agent_summary)

    # watch
    p_watch = subparsers.add_parser("watch", help="Live dashboard")
    p_watch.set_defaults(func=cmd_watch_module.cmd_watch)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        return args.func(args, get_workspace(args))
    except SpecflowError as e:
        print(f"ERROR: {e}")
        return e.exit_code


if __name__ == "__main__":
    sys.exit(main())
