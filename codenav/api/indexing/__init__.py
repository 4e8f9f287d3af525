"""Call graph construction module.

This module provides:
- Call fact data model (symbol descriptors, raw facts, canonical edges)
- Dispatch normalization (overrides, interfaces, extension methods)
- Call fact metadata validation
- Bidirectional call graph index
- Fact-to-index construction pipeline
"""

from codenav.api.indexing.call_facts import (
    # Core types
    DispatchKind,
    SymbolDescriptor,
    RawCallFact,
    CallSite,
    CallRef,
    CallEdge,
    MethodInfo,
    # Exceptions
    CallGraphError,
    InvalidSymbolError,
    InvalidRecordError,
)

from codenav.api.indexing.symbol_normalizer import (
    SymbolNormalizer,
    NormalizationError,
    NormalizationOverflowError,
)

from codenav.api.indexing.metadata_validation import (
    MetadataValidator,
    MetadataValidationResult,
    MalformedFactError,
)

from codenav.api.indexing.call_graph_index import (
    CallGraphIndex,
    CallGraphIndexBuilder,
    IndexAlreadyBuiltError,
)

from codenav.api.indexing.graph_builder import (
    CallGraphBuilder,
    CallGraphBuildResult,
    CallGraphBuildSummary,
    build_call_graph,
)

__all__ = [
    # Call facts
    "DispatchKind",
    "SymbolDescriptor",
    "RawCallFact",
    "CallSite",
    "CallRef",
    "CallEdge",
    "MethodInfo",
    "CallGraphError",
    "InvalidSymbolError",
    "InvalidRecordError",
    # Normalization
    "SymbolNormalizer",
    "NormalizationError",
    "NormalizationOverflowError",
    # Validation
    "MetadataValidator",
    "MetadataValidationResult",
    "MalformedFactError",
    # Index
    "CallGraphIndex",
    "CallGraphIndexBuilder",
    "IndexAlreadyBuiltError",
    # Construction
    "CallGraphBuilder",
    "CallGraphBuildResult",
    "CallGraphBuildSummary",
    "build_call_graph",
]
