"""Call graph navigation module.

This module provides:
- Backward path enumeration (entry points -> target)
- Forward reachability grouped by depth
- Cooperative cancellation and deadlines for traversals
- Relationship queries (callers, callees, class references)
"""

from codenav.api.navigation.cancellation import (
    CancellationToken,
    Deadline,
)

from codenav.api.navigation.path_finder import (
    # Core types
    CallPath,
    PathsToResult,
    ReachabilityResult,
    # Finder
    PathFinder,
    PathFinderConfig,
    # Exceptions
    InvalidDepthError,
)

from codenav.api.navigation.relationships import (
    # Result types
    RelatedMethod,
    CallersResponse,
    CalleesResponse,
    ClassReference,
    ClassReferencesResponse,
    # Service
    RelationshipService,
    # Exceptions
    RelationshipError,
    InvalidInputError,
    MethodNotFoundError,
    ClassNotFoundError,
)

__all__ = [
    # Cancellation
    "CancellationToken",
    "Deadline",
    # Path finding
    "CallPath",
    "PathsToResult",
    "ReachabilityResult",
    "PathFinder",
    "PathFinderConfig",
    "InvalidDepthError",
    # Relationships
    "RelatedMethod",
    "CallersResponse",
    "CalleesResponse",
    "ClassReference",
    "ClassReferencesResponse",
    "RelationshipService",
    "RelationshipError",
    "InvalidInputError",
    "MethodNotFoundError",
    "ClassNotFoundError",
]
