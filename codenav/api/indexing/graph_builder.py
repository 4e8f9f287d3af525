"""Call graph construction from analyzer facts.

Pipeline per fact: decode -> normalize callee -> validate -> index.
A fact that fails any stage is skipped and its error recorded; one bad
fact never aborts the run.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from codenav.api.indexing.call_facts import (
    CallEdge,
    CallGraphError,
    RawCallFact,
)
from codenav.api.indexing.call_graph_index import CallGraphIndex, CallGraphIndexBuilder
from codenav.api.indexing.metadata_validation import MetadataValidator
from codenav.api.indexing.symbol_normalizer import SymbolNormalizer
from codenav.api.settings import get_settings

logger = logging.getLogger(__name__)


@dataclass
class CallGraphBuildSummary:
    """Summary stats for a graph construction run."""

    facts_processed: int = 0
    edges_indexed: int = 0
    duplicate_edges: int = 0
    facts_skipped: int = 0
    duration_ms: float = 0.0
    errors: list[str] = field(default_factory=list)

    @property
    def is_successful(self) -> bool:
        """Whether every fact was accepted."""
        return not self.errors

    def to_dict(self) -> dict[str, Any]:
        """Convert summary to dictionary."""
        return {
            "facts_processed": self.facts_processed,
            "edges_indexed": self.edges_indexed,
            "duplicate_edges": self.duplicate_edges,
            "facts_skipped": self.facts_skipped,
            "duration_ms": self.duration_ms,
            "errors": list(self.errors),
        }


@dataclass
class CallGraphBuildResult:
    """Built index together with the run summary."""

    index: CallGraphIndex
    summary: CallGraphBuildSummary


class CallGraphBuilder:
    """Turns raw call facts into a CallGraphIndex."""

    def __init__(
        self,
        normalizer: Optional[SymbolNormalizer] = None,
        validator: Optional[MetadataValidator] = None,
    ):
        self._normalizer = normalizer or SymbolNormalizer(
            max_hops=get_settings().normalization_max_hops
        )
        self._validator = validator or MetadataValidator()

    def build(self, facts: Iterable[RawCallFact]) -> CallGraphBuildResult:
        """Build an index from raw facts."""
        start = time.perf_counter()
        summary = CallGraphBuildSummary()
        builder = CallGraphIndexBuilder()

        for fact in facts:
            self._ingest(fact, builder, summary)

        return self._finish(builder, summary, start)

    def build_from_records(self, records: Iterable[dict[str, Any]]) -> CallGraphBuildResult:
        """Build an index from analyzer records (see RawCallFact.from_dict)."""
        start = time.perf_counter()
        summary = CallGraphBuildSummary()
        builder = CallGraphIndexBuilder()

        for position, record in enumerate(records):
            try:
                fact = RawCallFact.from_dict(record)
            except (CallGraphError, KeyError, TypeError, ValueError) as exc:
                summary.facts_processed += 1
                self._skip(summary, f"record {position}", [f"Undecodable record: {exc}"])
                continue
            self._ingest(fact, builder, summary)

        return self._finish(builder, summary, start)

    def to_edge(self, fact: RawCallFact) -> CallEdge:
        """Normalize and validate one fact into an edge.

        Raises:
            NormalizationOverflowError: If the callee's dispatch chain is malformed
            MalformedFactError: If required fields are missing or invalid
        """
        original = fact.callee
        if original is not None:
            fact = RawCallFact(
                caller=fact.caller,
                callee=self._normalizer.normalize(original),
                file_path=fact.file_path,
                line_number=fact.line_number,
            )

        normalized = self._validator.validate_and_normalize(fact).raise_for_errors()

        resolved_from = ""
        if original is not None:
            original_fqn = str(original.fully_qualified_name or "").strip()
            if original_fqn != normalized.callee.fully_qualified_name:
                resolved_from = original_fqn

        return CallEdge.from_fact(normalized, resolved_from=resolved_from)

    def _ingest(
        self,
        fact: RawCallFact,
        builder: CallGraphIndexBuilder,
        summary: CallGraphBuildSummary,
    ) -> None:
        summary.facts_processed += 1
        location = f"{fact.file_path}:{fact.line_number}"

        try:
            edge = self.to_edge(fact)
        except CallGraphError as exc:
            self._skip(summary, location, getattr(exc, "errors", [str(exc)]))
            return

        if builder.add(edge):
            summary.edges_indexed += 1
        else:
            summary.duplicate_edges += 1

    def _skip(self, summary: CallGraphBuildSummary, location: str, errors: list[str]) -> None:
        summary.facts_skipped += 1
        for error in errors:
            summary.errors.append(f"{location}: {error}")
        logger.warning(f"Skipping call fact at {location}: {'; '.join(errors)}")

    def _finish(
        self,
        builder: CallGraphIndexBuilder,
        summary: CallGraphBuildSummary,
        start: float,
    ) -> CallGraphBuildResult:
        index = builder.build()
        summary.duration_ms = (time.perf_counter() - start) * 1000
        logger.info(
            f"Call graph built: {summary.edges_indexed} edges, "
            f"{index.method_count} methods, {summary.facts_skipped} facts skipped "
            f"in {summary.duration_ms:.1f}ms"
        )
        return CallGraphBuildResult(index=index, summary=summary)


def build_call_graph(facts: Iterable[RawCallFact]) -> CallGraphIndex:
    """Build an index with default components, discarding the summary."""
    return CallGraphBuilder().build(facts).index
