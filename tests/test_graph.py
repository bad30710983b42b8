"""Tests for specflow.lib.graph module."""

import pytest

from specflow.lib import graph
from specflow.lib.errors import NotFound
from specflow.lib.graph import ProposalNode
from specflow.lib.state import WorkspaceState

from conftest import spec_doc


def make_nodes(edges: dict[str, list[str]], completed=()) -> dict[str, ProposalNode]:
    nodes = {slug: ProposalNode(slug=slug, dependencies=deps) for slug, deps in edges.items()}
    for slug in completed:
        nodes[slug] = ProposalNode(slug=slug, is_completed=True)
    return nodes


class TestParseDependsOn:
    def test_comma_separated(self):
        assert graph.parse_depends_on("**Depends on**: auth, billing\n") == ["auth", "billing"]

    def test_none_literal(self):
        assert graph.parse_depends_on("Depends on: None\n") == []

    def test_template_placeholder(self):
        assert graph.parse_depends_on('**Depends on**: <!-- comma-separated, or "none" -->\n') == []

    def test_missing_field(self):
        assert graph.parse_depends_on("# Spec\n") == []


class TestBuild:
    def test_completed_and_proposals(self, repo):
        repo.completed["base"] = "# Base\n"
        repo.add_proposal("auth", specification=spec_doc(depends="base"))
        repo.add_proposal("notes", design="# Design: Notes\n")
        state = WorkspaceState()
        state.activate("auth", {})

        nodes = graph.build(repo, state)

        assert nodes["base"].status == "completed"
        assert nodes["auth"].dependencies == ["base"]
        assert nodes["auth"].status == "active"
        assert nodes["notes"].dependencies == []
        assert nodes["notes"].status == "pending"


class TestDetectCycles:
    def test_acyclic(self):
        nodes = make_nodes({"a": ["b"], "b": ["c"], "c": [], "d": ["b", "c"]})
        assert graph.detect_cycles(nodes) == []

    def test_two_node_cycle(self):
        nodes = make_nodes({"a": ["b"], "b": ["a"]})
        cycles = graph.detect_cycles(nodes)
        assert len(cycles) == 1
        assert set(cycles[0]) == {"a", "b"}
        assert cycles[0][0] == cycles[0][-1]

    @pytest.mark.parametrize("n", [1, 2, 3, 5, 8])
    def test_closing_edge_reports_cycle_of_n_nodes(self, n):
        slugs = [f"p{i}" for i in range(n)]
        edges = {slug: [slugs[i + 1]] if i + 1 < n else [] for i, slug in enumerate(slugs)}
        edges["outside"] = [slugs[0]]
        assert graph.detect_cycles(make_nodes(edges)) == []

        edges[slugs[-1]] = [slugs[0]]
        cycles = graph.detect_cycles(make_nodes(edges))
        assert any(set(c) == set(slugs) and len(c) == n + 1 for c in cycles)

    def test_missing_dependency_is_not_a_cycle(self):
        nodes = make_nodes({"a": ["ghost"]})
        assert graph.detect_cycles(nodes) == []

    def test_cycles_containing(self):
        cycles = [["a", "b", "a"], ["c", "c"]]
        assert graph.cycles_containing(cycles, "b") == [["a", "b", "a"]]
        assert graph.cycles_containing(cycles, "z") == []


class TestCyclesInvolving:
    @pytest.fixture
    def shortcut(self):
        # u -> w -> v -> u, plus u -> v closing a shorter cycle first
        return make_nodes({"u": ["v", "w"], "w": ["v"], "v": ["u"]})

    def test_detect_cycles_reports_only_the_shorter_cycle(self, shortcut):
        assert graph.detect_cycles(shortcut) == [["u", "v", "u"]]

    def test_node_on_longer_cycle_found(self, shortcut):
        assert graph.cycle_through(shortcut, "w") == ["w", "v", "u", "w"]
        assert graph.cycles_involving(shortcut, "w") == [["w", "v", "u", "w"]]

    def test_prefers_detected_cycles(self, shortcut):
        assert graph.cycles_involving(shortcut, "v") == [["u", "v", "u"]]

    def test_self_dependency(self):
        assert graph.cycle_through(make_nodes({"a": ["a"]}), "a") == ["a", "a"]

    def test_not_on_a_cycle(self):
        nodes = make_nodes({"a": ["b"], "b": ["c"], "c": ["b"]})
        assert graph.cycle_through(nodes, "a") is None
        assert graph.cycles_involving(nodes, "a") == []
        assert graph.cycle_through(nodes, "ghost") is None


class TestRelevantSubgraph:
    @pytest.fixture
    def nodes(self):
        # a -> b -> c, d -> b, f -> e
        return make_nodes({"a": ["b"], "b": ["c"], "c": [], "d": ["b"], "e": [], "f": ["e"]})

    def test_both_directions(self, nodes):
        assert set(graph.relevant_subgraph(nodes, "b")) == {"a", "b", "c", "d"}

    def test_does_not_mix_directions(self, nodes):
        # d shares the dependency b with a but is not reachable from a
        assert set(graph.relevant_subgraph(nodes, "a")) == {"a", "b", "c"}

    def test_leaf_includes_all_dependents(self, nodes):
        assert set(graph.relevant_subgraph(nodes, "c")) == {"a", "b", "c", "d"}

    def test_isolated_component_excluded(self, nodes):
        assert set(graph.relevant_subgraph(nodes, "e")) == {"e", "f"}

    def test_unknown_slug(self, nodes):
        with pytest.raises(NotFound):
            graph.relevant_subgraph(nodes, "zzz")

    def test_terminates_on_cycle(self):
        nodes = make_nodes({"a": ["b"], "b": ["a"], "c": []})
        assert set(graph.relevant_subgraph(nodes, "a")) == {"a", "b"}


class TestMissingDependencies:
    def test_pending_and_absent_are_missing(self):
        nodes = make_nodes({"a": ["base", "b", "ghost"], "b": []}, completed=["base"])
        assert graph.missing_dependencies(nodes, "a") == ["b", "ghost"]

    def test_all_completed(self):
        nodes = make_nodes({"a": ["base"]}, completed=["base"])
        assert graph.missing_dependencies(nodes, "a") == []


class TestRenderers:
    @pytest.fixture
    def nodes(self):
        nodes = make_nodes({"auth": ["base", "ghost"], "billing": ["auth"]}, completed=["base"])
        nodes["auth"].is_active = True
        return nodes

    def test_tree(self, nodes):
        out = graph.render_tree(nodes)
        assert out.startswith("Dependency Graph")
        assert "  auth [active]" in out
        assert "    ├── depends on: base (completed)" in out
        assert "    ├── depends on: ghost (missing)" in out
        assert "    └── blocks: billing" in out
        assert "    └── depends on: auth (pending)" in out
        assert "  base [completed]" in out

    def test_tree_filtered(self, nodes):
        nodes["other"] = ProposalNode(slug="other")
        out = graph.render_tree(nodes, "billing")
        assert "billing" in out
        assert "other" not in out

    def test_dot(self, nodes):
        out = graph.render_dot(nodes)
        assert out.startswith("digraph dependencies {")
        assert "rankdir=BT;" in out
        assert '"base" [style=filled,fillcolor=lightgreen];' in out
        assert '"auth" [style=filled,fillcolor=lightblue];' in out
        assert '"billing" [style=solid];' in out
        assert '"billing" -> "auth";' in out
        assert '"auth" -> "ghost";' in out
        assert out.rstrip().endswith("}")
