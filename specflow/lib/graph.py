"""
Proposal dependency graph.

Nodes are built fresh from the workspace on every query: one per completed
specification (no dependencies) and one per proposal directory (dependencies
read from the "Depends on" field of its specification). Never persisted.
"""

import logging
from collections import deque
from dataclasses import dataclass, field

from specflow.lib.constants import SPECIFICATION_DOC
from specflow.lib.errors import NotFound
from specflow.lib.fields import find_field, split_list
from specflow.lib.repository import WorkspaceRepository
from specflow.lib.state import WorkspaceState

logger = logging.getLogger(__name__)

DEPENDS_ON_FIELD = "Depends on"


@dataclass
class ProposalNode:
    slug: str
    dependencies: list[str] = field(default_factory=list)
    is_completed: bool = False
    is_active: bool = False

    @property
    def status(self) -> str:
        if self.is_completed:
            return "completed"
        if self.is_active:
            return "active"
        return "pending"


def parse_depends_on(content: str) -> list[str]:
    """Extract dependency slugs from the "Depends on" field of a specification.

    Empty, "none" or an unfilled template placeholder mean no dependencies.
    """
    found = find_field(content, DEPENDS_ON_FIELD)
    if found is None:
        return []
    if not found.value or found.value.lower() == "none" or found.placeholder:
        return []
    return split_list(found.value)


def proposal_dependencies(repository: WorkspaceRepository, slug: str) -> list[str]:
    """Dependencies declared by a proposal. No specification means none."""
    content = repository.read_document(slug, SPECIFICATION_DOC)
    if content is None:
        return []
    return parse_depends_on(content)


def build(repository: WorkspaceRepository, state: WorkspaceState) -> dict[str, ProposalNode]:
    """Build the graph for a workspace."""
    nodes: dict[str, ProposalNode] = {}

    for slug in repository.list_completed():
        nodes[slug] = ProposalNode(slug=slug, is_completed=True)

    for slug in repository.list_proposals():
        if slug in nodes:
            logger.warning(f"Proposal '{slug}' also exists as a completed specification")
        nodes[slug] = ProposalNode(
            slug=slug,
            dependencies=proposal_dependencies(repository, slug),
            is_active=state.is_active(slug),
        )

    return nodes


def detect_cycles(nodes: dict[str, ProposalNode]) -> list[list[str]]:
    """Find dependency cycles by depth-first search.

    Each cycle is reported as the path from the repeated node back to
    itself, e.g. ["a", "b", "a"]. Advisory: the graph is never modified.
    """
    cycles: list[list[str]] = []
    visited: set[str] = set()
    on_stack: set[str] = set()
    path: list[str] = []

    def dfs(slug: str) -> None:
        visited.add(slug)
        on_stack.add(slug)
        path.append(slug)

        node = nodes.get(slug)
        if node is not None:
            for dep in node.dependencies:
                if dep in on_stack:
                    start = path.index(dep)
                    cycles.append(path[start:] + [dep])
                elif dep not in visited and dep in nodes:
                    dfs(dep)

        path.pop()
        on_stack.discard(slug)

    for slug in sorted(nodes):
        if slug not in visited:
            dfs(slug)

    return cycles


def cycles_containing(cycles: list[list[str]], slug: str) -> list[list[str]]:
    return [c for c in cycles if slug in c]


def cycle_through(nodes: dict[str, ProposalNode], slug: str) -> list[str] | None:
    """A dependency path from ``slug`` back to itself, or None if it cannot reach itself.

    Unlike detect_cycles this finds ``slug`` on every cycle it belongs to,
    including ones a shorter edge closed first during the full search.
    """
    if slug not in nodes:
        return None

    parent: dict[str, str] = {}
    queue = deque([slug])
    seen = {slug}
    while queue:
        current = queue.popleft()
        for dep in nodes[current].dependencies:
            if dep == slug:
                path = [current]
                while path[-1] != slug:
                    path.append(parent[path[-1]])
                return [slug] + path[::-1][1:] + [slug]
            if dep in nodes and dep not in seen:
                seen.add(dep)
                parent[dep] = current
                queue.append(dep)
    return None


def cycles_involving(nodes: dict[str, ProposalNode], slug: str) -> list[list[str]]:
    """Cycles from detect_cycles that contain ``slug``, else the one found by cycle_through."""
    cycles = cycles_containing(detect_cycles(nodes), slug)
    if not cycles:
        path = cycle_through(nodes, slug)
        if path:
            cycles = [path]
    return cycles


def dependents_of(nodes: dict[str, ProposalNode], slug: str) -> list[str]:
    """Slugs whose dependency list names ``slug``."""
    return sorted(s for s, node in nodes.items() if slug in node.dependencies)


def relevant_subgraph(nodes: dict[str, ProposalNode], slug: str) -> dict[str, ProposalNode]:
    """The node, its transitive dependencies and its transitive dependents."""
    if slug not in nodes:
        raise NotFound("Proposal", slug)

    relevant = {slug: nodes[slug]}

    # Ancestors: follow "depends on" edges
    queue = deque([slug])
    seen = {slug}
    while queue:
        current = queue.popleft()
        for dep in nodes[current].dependencies:
            if dep in nodes and dep not in seen:
                seen.add(dep)
                relevant[dep] = nodes[dep]
                queue.append(dep)

    # Descendants: scan every node for edges pointing back
    queue = deque([slug])
    seen = {slug}
    while queue:
        current = queue.popleft()
        for other in dependents_of(nodes, current):
            if other not in seen:
                seen.add(other)
                relevant[other] = nodes[other]
                queue.append(other)

    return relevant


def missing_dependencies(nodes: dict[str, ProposalNode], slug: str) -> list[str]:
    """Declared dependencies of ``slug`` that are not completed specifications."""
    node = nodes.get(slug)
    if node is None:
        return []
    missing = [d for d in node.dependencies if d not in nodes or not nodes[d].is_completed]
    return sorted(set(missing))


def _dependency_status(nodes: dict[str, ProposalNode], dep: str) -> str:
    node = nodes.get(dep)
    if node is None:
        return "missing"
    return "completed" if node.is_completed else "pending"


def render_tree(nodes: dict[str, ProposalNode], filter_slug: str | None = None) -> str:
    """Text view: each node with its "depends on" and "blocks" lines."""
    shown = relevant_subgraph(nodes, filter_slug) if filter_slug else nodes

    dependents: dict[str, list[str]] = {}
    for slug in sorted(shown):
        for dep in shown[slug].dependencies:
            dependents.setdefault(dep, []).append(slug)

    lines = ["Dependency Graph", ""]
    for slug in sorted(shown):
        node = shown[slug]
        blocks = dependents.get(slug, [])
        lines.append(f"  {slug} [{node.status}]")

        for i, dep in enumerate(node.dependencies):
            last = i == len(node.dependencies) - 1 and not blocks
            prefix = "└──" if last else "├──"
            lines.append(f"    {prefix} depends on: {dep} ({_dependency_status(nodes, dep)})")

        for i, other in enumerate(blocks):
            prefix = "└──" if i == len(blocks) - 1 else "├──"
            lines.append(f"    {prefix} blocks: {other}")

        lines.append("")

    return "\n".join(lines)


DOT_STYLES = {
    "completed": "style=filled,fillcolor=lightgreen",
    "active": "style=filled,fillcolor=lightblue",
    "pending": "style=solid",
}


def render_dot(nodes: dict[str, ProposalNode], filter_slug: str | None = None) -> str:
    """Graphviz DOT view: one node declaration and one edge per dependency."""
    shown = relevant_subgraph(nodes, filter_slug) if filter_slug else nodes

    lines = [
        "digraph dependencies {",
        "  rankdir=BT;",
        "  node [shape=box];",
        "",
    ]
    for slug in sorted(shown):
        lines.append(f'  "{slug}" [{DOT_STYLES[shown[slug].status]}];')
    lines.append("")
    for slug in sorted(shown):
        for dep in shown[slug].dependencies:
            lines.append(f'  "{slug}" -> "{dep}";')
    lines.append("}")
    return "\n".join(lines) + "\n"
