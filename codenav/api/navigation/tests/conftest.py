"""Shared graph fixtures for navigation tests."""

from __future__ import annotations

from typing import Callable

import pytest

from codenav.api.indexing.call_facts import CallEdge
from codenav.api.indexing.call_graph_index import CallGraphIndex


@pytest.fixture
def graph() -> Callable[..., CallGraphIndex]:
    """Build an index from "Caller->Callee" pairs of bare method names.

    Names are placed in the App.Flow type; pairs are indexed in order with
    one call site per pair.
    """

    def _build(*pairs: str) -> CallGraphIndex:
        edges = []
        for line, pair in enumerate(pairs, start=1):
            caller, callee = pair.split("->")
            edges.append(
                CallEdge.between(
                    f"App.Flow.{caller.strip()}",
                    f"App.Flow.{callee.strip()}",
                    line_number=line,
                )
            )
        return CallGraphIndex.build(edges)

    return _build
