"""Call path navigation over a CallGraphIndex.

Two walks with different visited-set semantics:
- find_paths_to: backward depth-first enumeration of simple paths from entry
  points to a target. Visited state is path-local, so one method may appear
  in several completed paths but never twice within one path.
- find_paths_from: forward breadth-first reachability. Visited state is
  global, so each method is reported once, at its shortest depth.

Both walks poll an optional CancellationToken on every expansion step and
return partial results flagged as incomplete when it fires.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Optional

from codenav.api.indexing.call_facts import CallGraphError, CallRef
from codenav.api.indexing.call_graph_index import CallGraphIndex
from codenav.api.navigation.cancellation import CancellationToken

logger = logging.getLogger(__name__)


# =============================================================================
# Exceptions
# =============================================================================


class InvalidDepthError(CallGraphError, ValueError):
    """Raised when a traversal is requested with max_depth < 1."""

    def __init__(self, max_depth: int):
        self.max_depth = max_depth
        super().__init__(f"max_depth must be at least 1, got {max_depth}")


# =============================================================================
# Configuration
# =============================================================================


@dataclass
class PathFinderConfig:
    """Configuration for path enumeration.

    Args:
        max_paths: Stop enumerating after this many paths (None = unlimited)
    """

    max_paths: Optional[int] = None


# =============================================================================
# Result Types
# =============================================================================


@dataclass(frozen=True)
class CallPath:
    """One path from an entry point (or the depth horizon) to a target."""

    nodes: tuple[str, ...]
    truncated: bool = False

    def __len__(self) -> int:
        return len(self.nodes)

    @property
    def hops(self) -> int:
        """Number of call edges on the path."""
        return len(self.nodes) - 1


@dataclass
class PathsToResult:
    """Result of a backward path enumeration."""

    target: str
    call_paths: list[CallPath] = field(default_factory=list)
    max_depth_reached: bool = False
    path_limit_reached: bool = False
    cancelled: bool = False

    @property
    def paths(self) -> list[list[str]]:
        """Paths as lists of FQNs, in discovery order."""
        return [list(p.nodes) for p in self.call_paths]

    @property
    def complete_paths(self) -> list[list[str]]:
        """Paths that start at an entry point."""
        return [list(p.nodes) for p in self.call_paths if not p.truncated]

    @property
    def is_complete(self) -> bool:
        """Whether the enumeration covered the whole search space."""
        return not (self.max_depth_reached or self.path_limit_reached or self.cancelled)

    def to_dict(self) -> dict[str, Any]:
        """Convert result to dictionary."""
        return {
            "target": self.target,
            "paths": self.paths,
            "truncated": [p.truncated for p in self.call_paths],
            "max_depth_reached": self.max_depth_reached,
            "path_limit_reached": self.path_limit_reached,
            "cancelled": self.cancelled,
        }


@dataclass
class ReachabilityResult:
    """Result of a forward reachability walk."""

    start: str
    levels: dict[int, list[str]] = field(default_factory=dict)
    cancelled: bool = False

    @property
    def reachable(self) -> list[str]:
        """All reached methods in breadth-first order."""
        return [fqn for depth in sorted(self.levels) for fqn in self.levels[depth]]

    def depth_of(self, fqn: str) -> Optional[int]:
        """Shortest depth at which fqn was reached."""
        for depth, names in self.levels.items():
            if fqn in names:
                return depth
        return None

    @property
    def is_complete(self) -> bool:
        """Whether the walk finished without cancellation."""
        return not self.cancelled

    def to_dict(self) -> dict[str, Any]:
        """Convert result to dictionary."""
        return {
            "start": self.start,
            "levels": {str(depth): list(names) for depth, names in self.levels.items()},
            "cancelled": self.cancelled,
        }


# =============================================================================
# Path Finder
# =============================================================================


def _distinct(refs: tuple[CallRef, ...]) -> list[str]:
    """FQNs of adjacency entries, first occurrence only."""
    return list(dict.fromkeys(ref.fqn for ref in refs))


def _check_depth(max_depth: int) -> None:
    if max_depth < 1:
        raise InvalidDepthError(max_depth)


class PathFinder:
    """Answers path queries against one immutable index snapshot."""

    def __init__(
        self,
        index: CallGraphIndex,
        config: Optional[PathFinderConfig] = None,
    ):
        self._index = index
        self._config = config or PathFinderConfig()

    @property
    def index(self) -> CallGraphIndex:
        """Index being navigated."""
        return self._index

    @property
    def config(self) -> PathFinderConfig:
        """Path finder configuration."""
        return self._config

    def find_paths_to(
        self,
        target: str,
        max_depth: int,
        cancellation: Optional[CancellationToken] = None,
    ) -> PathsToResult:
        """Enumerate simple call paths that end at target.

        Args:
            target: FQN of the method being reached
            max_depth: Maximum number of hops per path
            cancellation: Optional token polled on every expansion step

        Returns:
            PathsToResult with paths ordered entry point first. Paths cut at
            max_depth are marked truncated. Unknown targets yield no paths.

        Raises:
            InvalidDepthError: If max_depth < 1
        """
        _check_depth(max_depth)
        result = PathsToResult(target=target)
        if not self._index.has_method(target):
            return result

        max_paths = self._config.max_paths

        # Paths are held target-first; a LIFO stack keeps recursive DFS order
        stack: list[tuple[str, ...]] = [(target,)]
        while stack:
            if cancellation is not None and cancellation.is_cancelled:
                result.cancelled = True
                logger.debug(f"Path enumeration to {target} cancelled")
                break

            path = stack.pop()
            callers = _distinct(self._index.get_callers(path[-1]))

            if not callers:
                result.call_paths.append(CallPath(nodes=tuple(reversed(path))))
            elif len(path) - 1 >= max_depth:
                result.call_paths.append(
                    CallPath(nodes=tuple(reversed(path)), truncated=True)
                )
                result.max_depth_reached = True
            else:
                for caller in reversed(callers):
                    if caller not in path:
                        stack.append(path + (caller,))
                continue

            if max_paths is not None and len(result.call_paths) >= max_paths:
                result.path_limit_reached = bool(stack)
                break

        if result.max_depth_reached:
            logger.debug(f"Path enumeration to {target} truncated at depth {max_depth}")
        return result

    def find_paths_from(
        self,
        start: str,
        max_depth: int,
        cancellation: Optional[CancellationToken] = None,
    ) -> ReachabilityResult:
        """Find every method reachable from start within max_depth hops.

        Args:
            start: FQN of the method to walk from
            max_depth: Maximum number of hops
            cancellation: Optional token polled on every expansion step

        Returns:
            ReachabilityResult grouping methods by shortest discovery depth,
            with start at depth 0. Unknown starts yield no levels.

        Raises:
            InvalidDepthError: If max_depth < 1
        """
        _check_depth(max_depth)
        result = ReachabilityResult(start=start)
        if not self._index.has_method(start):
            return result

        visited: set[str] = set()
        queue: deque[tuple[str, int]] = deque([(start, 0)])
        while queue:
            if cancellation is not None and cancellation.is_cancelled:
                result.cancelled = True
                logger.debug(f"Reachability walk from {start} cancelled")
                break

            node, depth = queue.popleft()
            if node in visited:
                continue

            visited.add(node)
            result.levels.setdefault(depth, []).append(node)

            if depth < max_depth:
                for callee in _distinct(self._index.get_callees(node)):
                    if callee not in visited:
                        queue.append((callee, depth + 1))

        return result

    def find_path_between(
        self,
        source: str,
        target: str,
        max_depth: int,
        cancellation: Optional[CancellationToken] = None,
    ) -> list[str]:
        """Find the shortest forward call path from source to target.

        Returns:
            FQNs from source to target inclusive, or [] if no path exists
            within max_depth hops (or the walk was cancelled)

        Raises:
            InvalidDepthError: If max_depth < 1
        """
        _check_depth(max_depth)
        if not (self._index.has_method(source) and self._index.has_method(target)):
            return []
        if source == target:
            return [source]

        visited: set[str] = {source}
        queue: deque[tuple[str, ...]] = deque([(source,)])
        while queue:
            if cancellation is not None and cancellation.is_cancelled:
                logger.debug(f"Path search {source} -> {target} cancelled")
                return []

            path = queue.popleft()
            if len(path) - 1 >= max_depth:
                continue

            for callee in _distinct(self._index.get_callees(path[-1])):
                if callee == target:
                    return list(path + (callee,))
                if callee not in visited:
                    visited.add(callee)
                    queue.append(path + (callee,))

        return []

    def has_path(self, source: str, target: str, max_depth: int) -> bool:
        """Check if target is reachable from source within max_depth hops."""
        return bool(self.find_path_between(source, target, max_depth))
