"""Bidirectional call graph index.

Built once from a stream of canonical CallEdges, then read-only:
- forward: caller FQN -> ordered (callee FQN, site) entries
- reverse: callee FQN -> ordered (caller FQN, site) entries
- known: every FQN seen as caller or callee, with registry metadata

Adjacency order is first-seen insertion order. Duplicate edges (same caller,
callee and site) are merged. A built index is safe to share across threads
without locking; re-analysis produces a new index.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Iterable, Iterator, Optional

from codenav.api.indexing.call_facts import (
    CallEdge,
    CallGraphError,
    CallRef,
    MethodInfo,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Exceptions
# =============================================================================


class IndexAlreadyBuiltError(CallGraphError):
    """Raised when a sealed builder is modified or built twice."""

    pass


# =============================================================================
# Call Graph Index
# =============================================================================


class CallGraphIndex:
    """Immutable call graph snapshot.

    Instances are produced by CallGraphIndexBuilder.build() or
    CallGraphIndex.build(); lookups on unknown names return empty results.
    """

    def __init__(
        self,
        forward: dict[str, tuple[CallRef, ...]],
        reverse: dict[str, tuple[CallRef, ...]],
        methods: dict[str, MethodInfo],
        edges: tuple[CallEdge, ...],
    ):
        self._forward = forward
        self._reverse = reverse
        self._methods = methods
        self._edges = edges
        self._classes = frozenset(
            info.class_fqn.lower() for info in methods.values() if info.class_name
        ) | frozenset(
            info.class_name.lower() for info in methods.values() if info.class_name
        )

    @classmethod
    def build(cls, edges: Iterable[CallEdge]) -> "CallGraphIndex":
        """Build an index from canonical edges in a single pass."""
        builder = CallGraphIndexBuilder()
        builder.add_all(edges)
        return builder.build()

    @classmethod
    def empty(cls) -> "CallGraphIndex":
        """Create an index with no methods."""
        return cls(forward={}, reverse={}, methods={}, edges=())

    # -------------------------------------------------------------------------
    # Adjacency
    # -------------------------------------------------------------------------

    def get_callees(self, fqn: str) -> tuple[CallRef, ...]:
        """Get methods called by fqn, in first-seen order."""
        return self._forward.get(fqn, ())

    def get_callers(self, fqn: str) -> tuple[CallRef, ...]:
        """Get methods calling fqn, in first-seen order."""
        return self._reverse.get(fqn, ())

    def has_method(self, fqn: str) -> bool:
        """Check if fqn was seen as a caller or callee."""
        return fqn in self._methods

    def has_class(self, class_fqn: str) -> bool:
        """Check if a type (Namespace.Type or bare Type) declares a known method."""
        return class_fqn.lower() in self._classes

    def get_method(self, fqn: str) -> Optional[MethodInfo]:
        """Get registry metadata for a known method."""
        return self._methods.get(fqn)

    # -------------------------------------------------------------------------
    # Enumeration
    # -------------------------------------------------------------------------

    def methods(self) -> Iterator[str]:
        """Iterate known FQNs in first-seen order."""
        return iter(self._methods)

    def edges(self) -> Iterator[CallEdge]:
        """Iterate distinct edges in insertion order."""
        return iter(self._edges)

    def entry_points(self) -> list[str]:
        """Get known methods with no incoming edges."""
        return [fqn for fqn in self._methods if fqn not in self._reverse]

    @property
    def method_count(self) -> int:
        """Number of known methods."""
        return len(self._methods)

    @property
    def relationship_count(self) -> int:
        """Number of distinct edges."""
        return len(self._edges)

    def get_stats(self) -> dict[str, Any]:
        """Get statistics about the index."""
        return {
            "method_count": self.method_count,
            "relationship_count": self.relationship_count,
            "entry_point_count": len(self.entry_points()),
            "methods_with_callees": len(self._forward),
            "methods_with_callers": len(self._reverse),
        }

    def __repr__(self) -> str:
        return (
            f"CallGraphIndex(methods={self.method_count}, "
            f"relationships={self.relationship_count})"
        )


# =============================================================================
# Builder
# =============================================================================


class CallGraphIndexBuilder:
    """Accumulates edges and seals them into a CallGraphIndex.

    add() is serialized by a lock so several producers can feed one builder.
    """

    def __init__(self):
        self._lock = threading.Lock()
        # Dicts double as insertion-ordered sets
        self._forward: dict[str, dict[CallRef, None]] = {}
        self._reverse: dict[str, dict[CallRef, None]] = {}
        self._methods: dict[str, MethodInfo] = {}
        self._edges: dict[tuple, CallEdge] = {}
        self._built = False

    @property
    def edge_count(self) -> int:
        """Number of distinct edges accumulated so far."""
        return len(self._edges)

    def add(self, edge: CallEdge) -> bool:
        """Add an edge.

        Returns:
            False if an identical edge was already added

        Raises:
            IndexAlreadyBuiltError: If build() has already been called
        """
        with self._lock:
            self._check_open()

            if edge.key in self._edges:
                return False

            self._edges[edge.key] = edge
            self._register(edge.caller_fqn, edge.caller_type, edge.caller_namespace)
            self._register(edge.callee_fqn, edge.callee_type, edge.callee_namespace)

            self._forward.setdefault(edge.caller_fqn, {})[
                CallRef(fqn=edge.callee_fqn, site=edge.site)
            ] = None
            self._reverse.setdefault(edge.callee_fqn, {})[
                CallRef(fqn=edge.caller_fqn, site=edge.site)
            ] = None
            return True

    def add_all(self, edges: Iterable[CallEdge]) -> int:
        """Add edges, returning how many were new."""
        return sum(1 for edge in edges if self.add(edge))

    def build(self) -> CallGraphIndex:
        """Seal the builder and return the index."""
        with self._lock:
            self._check_open()
            self._built = True

            index = CallGraphIndex(
                forward={k: tuple(v) for k, v in self._forward.items()},
                reverse={k: tuple(v) for k, v in self._reverse.items()},
                methods=dict(self._methods),
                edges=tuple(self._edges.values()),
            )

        logger.debug(f"Built {index!r}")
        return index

    def _check_open(self) -> None:
        if self._built:
            raise IndexAlreadyBuiltError("Call graph index has already been built")

    def _register(self, fqn: str, class_name: str, namespace: str) -> None:
        if fqn in self._methods:
            return
        self._methods[fqn] = MethodInfo(
            fqn=fqn,
            method_name=fqn.rsplit(".", 1)[-1],
            class_name=class_name,
            namespace=namespace,
        )
