"""Relationship queries (callers, callees, class references, call paths).

This module provides the calling-layer view over one CallGraphIndex:
- get_callers / get_callees: level-by-level walks with per-entry depth and site
- get_class_references: classes whose methods call into a class
- find_paths_to / find_paths_from: PathFinder with configured limits

Unlike the engine, this layer treats unknown methods and classes as errors
and validates depth against the configured limit.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from codenav.api.indexing.call_facts import CallGraphError, CallRef, CallSite, qualify
from codenav.api.indexing.call_graph_index import CallGraphIndex
from codenav.api.navigation.cancellation import CancellationToken, Deadline
from codenav.api.navigation.path_finder import (
    PathFinder,
    PathFinderConfig,
    PathsToResult,
    ReachabilityResult,
)
from codenav.api.settings import Settings, get_settings

logger = logging.getLogger(__name__)

CALLS_RELATIONSHIP = "calls"


# =============================================================================
# Exceptions
# =============================================================================


class RelationshipError(CallGraphError):
    """Base exception for relationship query errors."""

    pass


class InvalidInputError(RelationshipError):
    """Raised when query input is invalid."""

    pass


class MethodNotFoundError(RelationshipError):
    """Raised when a method is not present in the index."""

    pass


class ClassNotFoundError(RelationshipError):
    """Raised when a class is not present in the index."""

    pass


# =============================================================================
# Result Types
# =============================================================================


@dataclass
class RelatedMethod:
    """A caller or callee found by a relationship walk.

    Depth 0 is the queried method itself (include_self); site is None there.
    """

    fully_qualified_name: str
    method_name: str
    class_name: str
    namespace: str
    depth: int
    site: Optional[CallSite] = None

    @property
    def file_path(self) -> str:
        return self.site.file_path if self.site else ""

    @property
    def line_number(self) -> int:
        return self.site.line_number if self.site else 0

    def to_dict(self) -> dict[str, Any]:
        """Convert entry to dictionary."""
        return {
            "fully_qualified_name": self.fully_qualified_name,
            "method_name": self.method_name,
            "class_name": self.class_name,
            "namespace": self.namespace,
            "depth": self.depth,
            "file_path": self.file_path,
            "line_number": self.line_number,
        }


@dataclass
class CallersResponse:
    """Callers of a method."""

    method_fully_qualified_name: str
    callers: list[RelatedMethod] = field(default_factory=list)
    max_depth: int = 0

    @property
    def total_count(self) -> int:
        return len(self.callers)


@dataclass
class CalleesResponse:
    """Callees of a method."""

    method_fully_qualified_name: str
    callees: list[RelatedMethod] = field(default_factory=list)
    max_depth: int = 0

    @property
    def total_count(self) -> int:
        return len(self.callees)


@dataclass
class ClassReference:
    """A class referencing another class."""

    fully_qualified_name: str
    class_name: str
    namespace: str
    relationship_type: str
    site: CallSite


@dataclass
class ClassReferencesResponse:
    """Classes referencing a class."""

    class_fully_qualified_name: str
    references: list[ClassReference] = field(default_factory=list)

    @property
    def total_count(self) -> int:
        return len(self.references)


# =============================================================================
# Relationship Service
# =============================================================================


class RelationshipService:
    """Relationship queries against one index snapshot."""

    def __init__(
        self,
        index: CallGraphIndex,
        settings: Optional[Settings] = None,
    ):
        self._index = index
        self._settings = settings or get_settings()
        self._path_finder = PathFinder(
            index,
            PathFinderConfig(max_paths=self._settings.max_paths),
        )

    @property
    def index(self) -> CallGraphIndex:
        """Index being queried."""
        return self._index

    # -------------------------------------------------------------------------
    # Callers / Callees
    # -------------------------------------------------------------------------

    def get_callers(
        self,
        method_fqn: str,
        depth: Optional[int] = None,
        include_self: bool = False,
    ) -> CallersResponse:
        """Get methods calling method_fqn, transitively up to depth levels.

        Raises:
            InvalidInputError: If the FQN is blank or depth is out of range
            MethodNotFoundError: If the method is not in the index
        """
        method_fqn, depth = self._validate_method_query(method_fqn, depth)
        entries, reached = self._walk(
            method_fqn, depth, include_self, self._index.get_callers
        )
        return CallersResponse(
            method_fully_qualified_name=method_fqn,
            callers=entries,
            max_depth=reached,
        )

    def get_callees(
        self,
        method_fqn: str,
        depth: Optional[int] = None,
        include_self: bool = False,
    ) -> CalleesResponse:
        """Get methods called by method_fqn, transitively up to depth levels.

        Raises:
            InvalidInputError: If the FQN is blank or depth is out of range
            MethodNotFoundError: If the method is not in the index
        """
        method_fqn, depth = self._validate_method_query(method_fqn, depth)
        entries, reached = self._walk(
            method_fqn, depth, include_self, self._index.get_callees
        )
        return CalleesResponse(
            method_fully_qualified_name=method_fqn,
            callees=entries,
            max_depth=reached,
        )

    def _walk(
        self,
        method_fqn: str,
        depth: int,
        include_self: bool,
        neighbours: Callable[[str], tuple[CallRef, ...]],
    ) -> tuple[list[RelatedMethod], int]:
        """Level-by-level walk with a global visited set.

        A method is reported only at the first level that reaches it, once
        per distinct call site.
        """
        entries: list[RelatedMethod] = []
        if include_self:
            entries.append(self._related(method_fqn, 0, None))

        visited: set[str] = {method_fqn}
        seen_entries: set[CallRef] = set()
        current_level: list[str] = [method_fqn]
        reached = 0

        for current_depth in range(1, depth + 1):
            next_level: dict[str, None] = {}
            reached = current_depth

            for method in current_level:
                for ref in neighbours(method):
                    if ref.fqn in visited or ref in seen_entries:
                        continue
                    seen_entries.add(ref)
                    entries.append(self._related(ref.fqn, current_depth, ref.site))
                    next_level[ref.fqn] = None

            if not next_level:
                break
            visited.update(next_level)
            current_level = list(next_level)

        return entries, reached

    def _related(self, fqn: str, depth: int, site: Optional[CallSite]) -> RelatedMethod:
        info = self._index.get_method(fqn)
        return RelatedMethod(
            fully_qualified_name=fqn,
            method_name=info.method_name if info else fqn.rsplit(".", 1)[-1],
            class_name=info.class_name if info else "",
            namespace=info.namespace if info else "",
            depth=depth,
            site=site,
        )

    # -------------------------------------------------------------------------
    # Class References
    # -------------------------------------------------------------------------

    def get_class_references(
        self,
        class_fqn: str,
        relationship_type: Optional[str] = None,
    ) -> ClassReferencesResponse:
        """Get classes whose methods call methods of class_fqn.

        Args:
            class_fqn: Namespace.Type or bare Type, matched case-insensitively
            relationship_type: Optional filter; only "calls" is recorded

        Raises:
            InvalidInputError: If class_fqn is blank
            ClassNotFoundError: If no indexed method belongs to the class
        """
        if not class_fqn or not class_fqn.strip():
            raise InvalidInputError("class_fqn is required")
        class_fqn = class_fqn.strip()

        if not self._index.has_class(class_fqn):
            raise ClassNotFoundError(f"Class not found: {class_fqn}")

        response = ClassReferencesResponse(class_fully_qualified_name=class_fqn)
        if relationship_type and relationship_type.lower() != CALLS_RELATIONSHIP:
            return response

        wanted = class_fqn.lower()
        references: dict[str, ClassReference] = {}
        for edge in self._index.edges():
            callee_class = qualify(edge.callee_namespace, edge.callee_type)
            if wanted not in (callee_class.lower(), edge.callee_type.lower()):
                continue

            caller_class = qualify(edge.caller_namespace, edge.caller_type)
            if caller_class.lower() in (wanted, callee_class.lower()):
                continue
            if caller_class in references:
                continue

            references[caller_class] = ClassReference(
                fully_qualified_name=caller_class,
                class_name=edge.caller_type,
                namespace=edge.caller_namespace,
                relationship_type=CALLS_RELATIONSHIP,
                site=edge.site,
            )

        response.references = list(references.values())
        return response

    # -------------------------------------------------------------------------
    # Paths
    # -------------------------------------------------------------------------

    def find_paths_to(
        self,
        target: str,
        depth: Optional[int] = None,
        cancellation: Optional[CancellationToken] = None,
    ) -> PathsToResult:
        """Enumerate call paths from entry points to target."""
        target, depth = self._validate_method_query(target, depth)
        result = self._path_finder.find_paths_to(
            target, depth, self._cancellation(cancellation)
        )
        if not result.is_complete:
            logger.info(
                f"Partial path result for {target}: "
                f"depth_reached={result.max_depth_reached} "
                f"limit_reached={result.path_limit_reached} "
                f"cancelled={result.cancelled}"
            )
        return result

    def find_paths_from(
        self,
        start: str,
        depth: Optional[int] = None,
        cancellation: Optional[CancellationToken] = None,
    ) -> ReachabilityResult:
        """Group methods reachable from start by shortest depth."""
        start, depth = self._validate_method_query(start, depth)
        return self._path_finder.find_paths_from(
            start, depth, self._cancellation(cancellation)
        )

    def _cancellation(
        self, cancellation: Optional[CancellationToken]
    ) -> Optional[CancellationToken]:
        timeout = self._settings.traversal_timeout_seconds
        if timeout is None:
            return cancellation
        return CancellationToken.combine(cancellation, Deadline.after(timeout))

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    def _validate_method_query(
        self, method_fqn: str, depth: Optional[int]
    ) -> tuple[str, int]:
        if not method_fqn or not method_fqn.strip():
            raise InvalidInputError("method_fqn is required")
        method_fqn = method_fqn.strip()

        if depth is None:
            depth = self._settings.default_depth
        if depth < 1:
            raise InvalidInputError(f"depth must be at least 1, got {depth}")
        if depth > self._settings.max_depth_limit:
            raise InvalidInputError(
                f"depth must be at most {self._settings.max_depth_limit}, got {depth}"
            )

        if not self._index.has_method(method_fqn):
            raise MethodNotFoundError(f"Method not found: {method_fqn}")

        return method_fqn, depth
