"""Tests for backward path enumeration and forward reachability."""

from __future__ import annotations

import pytest

from codenav.api.indexing.call_facts import CallEdge
from codenav.api.indexing.call_graph_index import CallGraphIndex
from codenav.api.navigation.cancellation import CancellationToken
from codenav.api.navigation.path_finder import (
    CallPath,
    InvalidDepthError,
    PathFinder,
    PathFinderConfig,
    PathsToResult,
    ReachabilityResult,
)


def short(names) -> list[str]:
    return [name.rsplit(".", 1)[-1] for name in names]


def short_paths(result: PathsToResult) -> list[list[str]]:
    return [short(path) for path in result.paths]


def short_levels(result: ReachabilityResult) -> dict[int, list[str]]:
    return {depth: short(names) for depth, names in result.levels.items()}


class _CancelAfter(CancellationToken):
    """Token that reports cancellation after a number of polls."""

    def __init__(self, polls: int):
        super().__init__()
        self._polls = polls

    @property
    def is_cancelled(self) -> bool:
        self._polls -= 1
        return self._polls < 0


# =============================================================================
# Result Type Tests
# =============================================================================


class TestResultTypes:
    """Tests for path result value objects."""

    def test_call_path(self):
        """Test CallPath length and hop count."""
        path = CallPath(nodes=("A", "B", "C"))
        assert len(path) == 3
        assert path.hops == 2
        assert path.truncated is False

    def test_paths_to_result_to_dict(self):
        """Test dictionary conversion."""
        result = PathsToResult(
            target="C",
            call_paths=[CallPath(("A", "C")), CallPath(("B", "C"), truncated=True)],
            max_depth_reached=True,
        )
        data = result.to_dict()
        assert data["paths"] == [["A", "C"], ["B", "C"]]
        assert data["truncated"] == [False, True]
        assert data["max_depth_reached"] is True
        assert result.complete_paths == [["A", "C"]]
        assert result.is_complete is False

    def test_reachability_result(self):
        """Test reachable ordering and depth lookup."""
        result = ReachabilityResult(start="A", levels={0: ["A"], 1: ["B", "C"]})
        assert result.reachable == ["A", "B", "C"]
        assert result.depth_of("C") == 1
        assert result.depth_of("Z") is None
        assert result.to_dict()["levels"] == {"0": ["A"], "1": ["B", "C"]}


# =============================================================================
# find_paths_to Tests
# =============================================================================


class TestFindPathsTo:
    """Tests for PathFinder.find_paths_to()."""

    def test_two_routes(self, graph):
        """Test A->C and A->B->C give exactly two paths."""
        finder = PathFinder(graph("A->B", "B->C", "A->C"))

        result = finder.find_paths_to("App.Flow.C", 5)

        assert short_paths(result) == [["A", "B", "C"], ["A", "C"]]
        assert result.is_complete is True

    def test_discovery_order_follows_insertion(self, graph):
        """Test path order follows caller insertion order."""
        finder = PathFinder(graph("A->C", "A->B", "B->C"))

        result = finder.find_paths_to("App.Flow.C", 5)

        assert short_paths(result) == [["A", "C"], ["A", "B", "C"]]

    def test_shared_intermediate_in_several_paths(self, graph):
        """Test one method may appear in several completed paths."""
        finder = PathFinder(graph("X->M", "Y->M", "M->T"))

        result = finder.find_paths_to("App.Flow.T", 5)

        assert short_paths(result) == [["X", "M", "T"], ["Y", "M", "T"]]

    def test_entry_point_target(self, graph):
        """Test a target without callers is its own single path."""
        finder = PathFinder(graph("A->B"))
        assert short_paths(finder.find_paths_to("App.Flow.A", 3)) == [["A"]]

    def test_unknown_target(self, graph):
        """Test unknown targets give an empty, complete result."""
        result = PathFinder(graph("A->B")).find_paths_to("App.Flow.Missing", 3)
        assert result.paths == []
        assert result.is_complete is True

    def test_depth_truncation(self, graph):
        """Test paths cut at max_depth are emitted and flagged."""
        finder = PathFinder(graph("A->B", "B->C", "A->C"))

        result = finder.find_paths_to("App.Flow.C", 1)

        assert short_paths(result) == [["B", "C"], ["A", "C"]]
        assert [p.truncated for p in result.call_paths] == [True, False]
        assert short(result.complete_paths[0]) == ["A", "C"]
        assert result.max_depth_reached is True
        assert result.is_complete is False

    def test_paths_respect_hop_limit(self, graph):
        """Test no path exceeds max_depth hops."""
        finder = PathFinder(graph("A->B", "B->C", "C->D", "D->E"))

        result = finder.find_paths_to("App.Flow.E", 2)

        assert all(path.hops <= 2 for path in result.call_paths)
        assert short_paths(result) == [["C", "D", "E"]]

    def test_cycle_terminates(self, graph):
        """Test a three-method cycle does not recurse forever."""
        finder = PathFinder(graph("A->B", "B->C", "C->A"))

        result = finder.find_paths_to("App.Flow.A", 5)

        assert result.paths == []
        assert result.is_complete is True

    def test_cycle_with_entry_point(self, graph):
        """Test paths from an entry point pass through a cycle once."""
        finder = PathFinder(graph("Main->A", "A->B", "B->C", "C->B"))

        result = finder.find_paths_to("App.Flow.C", 10)

        assert short_paths(result) == [["Main", "A", "B", "C"]]

    def test_paths_are_simple(self, graph):
        """Test no node repeats within a path."""
        finder = PathFinder(graph("Main->A", "A->B", "B->A", "B->C", "A->C"))

        result = finder.find_paths_to("App.Flow.C", 10)

        for path in result.paths:
            assert len(path) == len(set(path))
        assert sorted(short_paths(result)) == [
            ["Main", "A", "B", "C"],
            ["Main", "A", "C"],
        ]

    def test_self_recursion(self, graph):
        """Test a self-call does not extend paths."""
        finder = PathFinder(graph("Main->Loop", "Loop->Loop"))
        assert short_paths(finder.find_paths_to("App.Flow.Loop", 5)) == [["Main", "Loop"]]

    def test_multiple_sites_from_one_caller(self):
        """Test several call sites from one caller give one branch."""
        index = CallGraphIndex.build(
            [
                CallEdge.between("App.Flow.A", "App.Flow.B", line_number=1),
                CallEdge.between("App.Flow.A", "App.Flow.B", line_number=2),
            ]
        )

        result = PathFinder(index).find_paths_to("App.Flow.B", 5)

        assert short_paths(result) == [["A", "B"]]

    def test_invalid_depth(self, graph):
        """Test max_depth < 1 is rejected before traversal."""
        finder = PathFinder(graph("A->B"))
        with pytest.raises(InvalidDepthError):
            finder.find_paths_to("App.Flow.B", 0)
        with pytest.raises(ValueError):
            finder.find_paths_to("App.Flow.Missing", -1)


class TestPathLimit:
    """Tests for PathFinderConfig.max_paths."""

    def test_limit_stops_enumeration(self, graph):
        """Test enumeration stops once max_paths paths exist."""
        finder = PathFinder(
            graph("X->T", "Y->T", "Z->T"), PathFinderConfig(max_paths=2)
        )

        result = finder.find_paths_to("App.Flow.T", 5)

        assert short_paths(result) == [["X", "T"], ["Y", "T"]]
        assert result.path_limit_reached is True
        assert result.is_complete is False

    def test_limit_equal_to_total(self, graph):
        """Test reaching the limit with nothing left is still complete."""
        finder = PathFinder(graph("X->T", "Y->T"), PathFinderConfig(max_paths=2))

        result = finder.find_paths_to("App.Flow.T", 5)

        assert len(result.paths) == 2
        assert result.path_limit_reached is False
        assert result.is_complete is True


# =============================================================================
# find_paths_from Tests
# =============================================================================


class TestFindPathsFrom:
    """Tests for PathFinder.find_paths_from()."""

    def test_bfs_depth_grouping(self, graph):
        """Test a method is reported once, at its shortest depth."""
        finder = PathFinder(graph("A->B", "A->C", "B->C"))

        result = finder.find_paths_from("App.Flow.A", 5)

        assert short_levels(result) == {0: ["A"], 1: ["B", "C"]}

    def test_cycle_terminates(self, graph):
        """Test reachability over a cycle covers each method once."""
        finder = PathFinder(graph("A->B", "B->C", "C->A"))

        result = finder.find_paths_from("App.Flow.A", 5)

        assert set(short(result.reachable)) == {"A", "B", "C"}
        assert short_levels(result) == {0: ["A"], 1: ["B"], 2: ["C"]}

    def test_depth_limit(self, graph):
        """Test nothing beyond max_depth is reported."""
        finder = PathFinder(graph("A->B", "B->C", "C->D"))

        result = finder.find_paths_from("App.Flow.A", 2)

        assert short_levels(result) == {0: ["A"], 1: ["B"], 2: ["C"]}

    def test_leaf_start(self, graph):
        """Test a method without callees reaches only itself."""
        result = PathFinder(graph("A->B")).find_paths_from("App.Flow.B", 3)
        assert short_levels(result) == {0: ["B"]}

    def test_unknown_start(self, graph):
        """Test unknown starts give empty levels."""
        result = PathFinder(graph("A->B")).find_paths_from("App.Flow.Missing", 3)
        assert result.levels == {}
        assert result.is_complete is True

    def test_invalid_depth(self, graph):
        """Test max_depth < 1 is rejected."""
        with pytest.raises(InvalidDepthError):
            PathFinder(graph("A->B")).find_paths_from("App.Flow.A", 0)


class TestFindPathBetween:
    """Tests for shortest path and has_path."""

    def test_shortest_path(self, graph):
        """Test the shortest forward route is returned."""
        finder = PathFinder(graph("A->B", "B->C", "A->C"))
        assert short(finder.find_path_between("App.Flow.A", "App.Flow.C", 5)) == [
            "A",
            "C",
        ]

    def test_no_path(self, graph):
        """Test unreachable targets give an empty path."""
        finder = PathFinder(graph("A->B", "C->D"))
        assert finder.find_path_between("App.Flow.A", "App.Flow.D", 5) == []
        assert finder.has_path("App.Flow.A", "App.Flow.D", 5) is False

    def test_depth_bounded(self, graph):
        """Test paths longer than max_depth are not found."""
        finder = PathFinder(graph("A->B", "B->C", "C->D"))
        assert finder.has_path("App.Flow.A", "App.Flow.D", 2) is False
        assert finder.has_path("App.Flow.A", "App.Flow.D", 3) is True

    def test_same_method(self, graph):
        """Test a known method has a zero-hop path to itself."""
        finder = PathFinder(graph("A->B"))
        assert finder.find_path_between("App.Flow.A", "App.Flow.A", 1) == ["App.Flow.A"]


# =============================================================================
# Cancellation Tests
# =============================================================================


class TestCancellation:
    """Tests for cooperative cancellation during traversal."""

    def test_pre_cancelled_paths_to(self, graph):
        """Test a cancelled token yields an empty, flagged result."""
        token = CancellationToken()
        token.cancel()

        result = PathFinder(graph("A->B")).find_paths_to("App.Flow.B", 5, token)

        assert result.paths == []
        assert result.cancelled is True
        assert result.is_complete is False

    def test_partial_paths_to(self, graph):
        """Test paths found before cancellation are kept."""
        finder = PathFinder(graph("X->T", "Y->T", "Z->T"))

        # Polls: T, (T,X) emit, then cancel before (T,Y)
        result = finder.find_paths_to("App.Flow.T", 5, _CancelAfter(2))

        assert short_paths(result) == [["X", "T"]]
        assert result.cancelled is True

    def test_partial_reachability(self, graph):
        """Test levels found before cancellation are kept."""
        finder = PathFinder(graph("A->B", "B->C"))

        result = finder.find_paths_from("App.Flow.A", 5, _CancelAfter(2))

        assert short_levels(result) == {0: ["A"], 1: ["B"]}
        assert result.cancelled is True

    def test_cancelled_path_between(self, graph):
        """Test a cancelled shortest-path search finds nothing."""
        token = CancellationToken()
        token.cancel()
        finder = PathFinder(graph("A->B"))
        assert finder.find_path_between("App.Flow.A", "App.Flow.B", 5, token) == []
