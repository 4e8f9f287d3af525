"""Shared fixtures for call graph construction tests."""

from __future__ import annotations

from typing import Any, Callable

import pytest

from codenav.api.indexing.call_facts import (
    CallEdge,
    RawCallFact,
    SymbolDescriptor,
)


@pytest.fixture
def caller_symbol() -> SymbolDescriptor:
    """Create a caller method descriptor."""
    return SymbolDescriptor(
        fully_qualified_name="Namespace.Class.Method",
        containing_type="Class",
        containing_namespace="Namespace",
    )


@pytest.fixture
def callee_symbol() -> SymbolDescriptor:
    """Create a callee method descriptor."""
    return SymbolDescriptor(
        fully_qualified_name="OtherNamespace.OtherClass.OtherMethod",
        containing_type="OtherClass",
        containing_namespace="OtherNamespace",
    )


@pytest.fixture
def valid_fact(caller_symbol, callee_symbol) -> RawCallFact:
    """Create a fact that passes validation."""
    return RawCallFact(
        caller=caller_symbol,
        callee=callee_symbol,
        file_path="src/Namespace/Class.cs",
        line_number=42,
    )


@pytest.fixture
def make_fact() -> Callable[..., RawCallFact]:
    """Factory for facts between two ordinary methods."""

    def _make(
        caller: str,
        callee: str | SymbolDescriptor,
        file_path: str = "Program.cs",
        line_number: int = 1,
    ) -> RawCallFact:
        if isinstance(callee, str):
            callee = SymbolDescriptor.ordinary(callee)
        return RawCallFact(
            caller=SymbolDescriptor.ordinary(caller),
            callee=callee,
            file_path=file_path,
            line_number=line_number,
        )

    return _make


@pytest.fixture
def diamond_edges() -> list[CallEdge]:
    """Edges A->B, B->C, A->C in the App.Flow type."""
    return [
        CallEdge.between("App.Flow.A", "App.Flow.B", line_number=10),
        CallEdge.between("App.Flow.B", "App.Flow.C", line_number=20),
        CallEdge.between("App.Flow.A", "App.Flow.C", line_number=11),
    ]


@pytest.fixture
def override_record() -> dict[str, Any]:
    """Analyzer record for a call bound to an override of a virtual method."""
    base = {
        "fully_qualified_name": "Virtual.Dispatch.Base.Do",
        "containing_type": "Base",
        "containing_namespace": "Virtual.Dispatch",
        "dispatch_kind": "ordinary",
        "targets": [],
    }
    return {
        "caller": {
            "fully_qualified_name": "Virtual.Dispatch.Uses.Run",
            "containing_type": "Uses",
            "containing_namespace": "Virtual.Dispatch",
        },
        "callee": {
            "fully_qualified_name": "Virtual.Dispatch.Derived.Do",
            "containing_type": "Derived",
            "containing_namespace": "Virtual.Dispatch",
            "dispatch_kind": "override",
            "targets": [base],
        },
        "file_path": "TestData/Virtual/VirtualDispatch.cs",
        "line_number": 18,
    }
