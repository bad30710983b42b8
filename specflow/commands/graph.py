"""
specflow graph - Show proposal dependencies as a tree or Graphviz DOT.
"""

from specflow.lib import graph
from specflow.workspace import Workspace


def cmd_graph(args, workspace: Workspace) -> int:
    nodes = workspace.lifecycle.dependency_graph()
    if not nodes:
        print("No proposals or completed specifications")
        return 0

    if args.format == "dot":
        print(graph.render_dot(nodes, args.slug), end="")
        return 0

    print(graph.render_tree(nodes, args.slug))

    if args.slug:
        cycles = graph.cycles_involving(nodes, args.slug)
    else:
        cycles = graph.detect_cycles(nodes)
    if cycles:
        print("Circular dependencies:")
        for cycle in cycles:
            print(f"  {' -> '.join(cycle)}")
        return 2
    return 0
