"""Call fact data model.

This module defines the values that flow through call graph construction:
- SymbolDescriptor: a method-like symbol as resolved by the semantic analyzer
- RawCallFact: one observed call site, before normalization and validation
- CallSite / CallRef / CallEdge: the canonical, index-ready form
- MethodInfo: registry metadata for a known fully qualified name

Dispatch kinds:
- ORDINARY: statically bound, canonical as-is
- INTERFACE_MEMBER: member declared on an interface, canonical as-is
- OVERRIDE: override of a base declaration (one target: the base)
- EXPLICIT_INTERFACE_IMPL: explicit interface implementation (targets: members)
- EXTENSION_REDUCED: receiver-reduced extension call (one target: the origin)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


# =============================================================================
# Exceptions
# =============================================================================


class CallGraphError(Exception):
    """Base exception for call graph errors."""

    pass


class InvalidSymbolError(CallGraphError):
    """Raised when a symbol descriptor is structurally malformed."""

    pass


class InvalidRecordError(CallGraphError):
    """Raised when an analyzer record cannot be decoded into a call fact."""

    pass


# =============================================================================
# Dispatch Kind
# =============================================================================


class DispatchKind(str, Enum):
    """How a call to a symbol is dispatched."""

    ORDINARY = "ordinary"
    INTERFACE_MEMBER = "interface_member"
    OVERRIDE = "override"
    EXPLICIT_INTERFACE_IMPL = "explicit_interface_impl"
    EXTENSION_REDUCED = "extension_reduced"

    @property
    def is_chained(self) -> bool:
        """Check if this kind points at exactly one resolution target."""
        return self in (DispatchKind.OVERRIDE, DispatchKind.EXTENSION_REDUCED)

    @property
    def is_canonical(self) -> bool:
        """Check if a descriptor of this kind is already a canonical target."""
        return self in (DispatchKind.ORDINARY, DispatchKind.INTERFACE_MEMBER)


# =============================================================================
# Symbol Descriptor
# =============================================================================


@dataclass(frozen=True)
class SymbolDescriptor:
    """Identity of a method-like entity as understood by the analyzer.

    Args:
        fully_qualified_name: Namespace.Type.Member (namespace may be empty)
        containing_type: Simple name of the declaring type
        containing_namespace: Declaring namespace ("" for the global namespace)
        dispatch_kind: How calls to this symbol are dispatched
        targets: Resolution targets for chained and explicit-impl kinds
    """

    fully_qualified_name: str
    containing_type: str = ""
    containing_namespace: str = ""
    dispatch_kind: DispatchKind = DispatchKind.ORDINARY
    targets: tuple["SymbolDescriptor", ...] = ()

    def __post_init__(self) -> None:
        if isinstance(self.targets, list):
            object.__setattr__(self, "targets", tuple(self.targets))

        if self.dispatch_kind.is_chained and len(self.targets) != 1:
            raise InvalidSymbolError(
                f"{self.dispatch_kind.value} symbol {self.fully_qualified_name!r} "
                f"requires exactly one target, got {len(self.targets)}"
            )
        if self.dispatch_kind.is_canonical and self.targets:
            raise InvalidSymbolError(
                f"{self.dispatch_kind.value} symbol {self.fully_qualified_name!r} "
                "cannot carry resolution targets"
            )

    def __str__(self) -> str:
        return self.fully_qualified_name

    @property
    def base(self) -> Optional["SymbolDescriptor"]:
        """Overridden base declaration, for OVERRIDE descriptors."""
        if self.dispatch_kind == DispatchKind.OVERRIDE:
            return self.targets[0]
        return None

    @property
    def origin(self) -> Optional["SymbolDescriptor"]:
        """Original static definition, for EXTENSION_REDUCED descriptors."""
        if self.dispatch_kind == DispatchKind.EXTENSION_REDUCED:
            return self.targets[0]
        return None

    @property
    def member_name(self) -> str:
        """Last segment of the fully qualified name."""
        return (self.fully_qualified_name or "").rsplit(".", 1)[-1]

    @property
    def class_fqn(self) -> str:
        """Namespace-qualified containing type."""
        return qualify(self.containing_namespace, self.containing_type)

    # -------------------------------------------------------------------------
    # Factories
    # -------------------------------------------------------------------------

    @classmethod
    def from_fqn(
        cls,
        fqn: str,
        dispatch_kind: DispatchKind = DispatchKind.ORDINARY,
        targets: tuple["SymbolDescriptor", ...] = (),
    ) -> "SymbolDescriptor":
        """Create a descriptor by splitting Namespace.Type.Member."""
        parts = fqn.split(".")
        containing_type = parts[-2] if len(parts) >= 2 else ""
        namespace = ".".join(parts[:-2]) if len(parts) > 2 else ""
        return cls(
            fully_qualified_name=fqn,
            containing_type=containing_type,
            containing_namespace=namespace,
            dispatch_kind=dispatch_kind,
            targets=targets,
        )

    @classmethod
    def ordinary(cls, fqn: str) -> "SymbolDescriptor":
        """Create a statically bound method descriptor."""
        return cls.from_fqn(fqn)

    @classmethod
    def interface_member(cls, fqn: str) -> "SymbolDescriptor":
        """Create an interface member descriptor."""
        return cls.from_fqn(fqn, DispatchKind.INTERFACE_MEMBER)

    @classmethod
    def override(cls, fqn: str, base: "SymbolDescriptor") -> "SymbolDescriptor":
        """Create an override descriptor pointing at its base declaration."""
        return cls.from_fqn(fqn, DispatchKind.OVERRIDE, (base,))

    @classmethod
    def explicit_interface_impl(
        cls, fqn: str, targets: list["SymbolDescriptor"] | tuple["SymbolDescriptor", ...]
    ) -> "SymbolDescriptor":
        """Create an explicit interface implementation descriptor."""
        return cls.from_fqn(fqn, DispatchKind.EXPLICIT_INTERFACE_IMPL, tuple(targets))

    @classmethod
    def extension_reduced(cls, fqn: str, origin: "SymbolDescriptor") -> "SymbolDescriptor":
        """Create a reduced extension method descriptor."""
        return cls.from_fqn(fqn, DispatchKind.EXTENSION_REDUCED, (origin,))

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Convert descriptor to dictionary."""
        return {
            "fully_qualified_name": self.fully_qualified_name,
            "containing_type": self.containing_type,
            "containing_namespace": self.containing_namespace,
            "dispatch_kind": self.dispatch_kind.value,
            "targets": [t.to_dict() for t in self.targets],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SymbolDescriptor":
        """Create descriptor from dictionary."""
        if not isinstance(data, dict):
            raise InvalidSymbolError(
                f"Symbol descriptor must be a mapping, got {type(data).__name__}"
            )
        try:
            kind = DispatchKind(data.get("dispatch_kind", DispatchKind.ORDINARY.value))
        except ValueError:
            raise InvalidSymbolError(f"Unknown dispatch kind: {data.get('dispatch_kind')}")

        return cls(
            fully_qualified_name=data.get("fully_qualified_name"),
            containing_type=data.get("containing_type"),
            containing_namespace=data.get("containing_namespace"),
            dispatch_kind=kind,
            targets=tuple(cls.from_dict(t) for t in data.get("targets") or []),
        )


def qualify(namespace: Optional[str], name: Optional[str]) -> str:
    """Join a namespace and a name, skipping an empty namespace."""
    if not namespace:
        return name or ""
    return f"{namespace}.{name}" if name else namespace


# =============================================================================
# Raw Call Fact
# =============================================================================


@dataclass(frozen=True)
class RawCallFact:
    """One observed call site, pre-normalization.

    Fields may arrive empty or None; MetadataValidator decides admissibility.
    """

    caller: Optional[SymbolDescriptor]
    callee: Optional[SymbolDescriptor]
    file_path: Optional[str]
    line_number: int

    def __str__(self) -> str:
        return f"{self.caller} -> {self.callee} (line {self.line_number} in {self.file_path})"

    def to_dict(self) -> dict[str, Any]:
        """Convert fact to dictionary."""
        return {
            "caller": self.caller.to_dict() if self.caller else None,
            "callee": self.callee.to_dict() if self.callee else None,
            "file_path": self.file_path,
            "line_number": self.line_number,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RawCallFact":
        """Create fact from dictionary.

        Raises:
            InvalidRecordError: If the record or its line number has the wrong type
            InvalidSymbolError: If a descriptor is malformed
        """
        if not isinstance(data, dict):
            raise InvalidRecordError(f"Record must be a mapping, got {type(data).__name__}")

        caller = data.get("caller")
        callee = data.get("callee")
        return cls(
            caller=SymbolDescriptor.from_dict(caller) if caller is not None else None,
            callee=SymbolDescriptor.from_dict(callee) if callee is not None else None,
            file_path=data.get("file_path"),
            line_number=_parse_line_number(data.get("line_number", 0)),
        )


def _parse_line_number(value: Any) -> int:
    """Accept ints and integral strings; anything else is undecodable."""
    if isinstance(value, bool):
        raise InvalidRecordError(f"Invalid line_number: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            raise InvalidRecordError(f"Invalid line_number: {value!r}")
    raise InvalidRecordError(f"Invalid line_number: {value!r}")


# =============================================================================
# Index-ready Types
# =============================================================================


@dataclass(frozen=True)
class CallSite:
    """Location of a call expression (1-based line)."""

    file_path: str
    line_number: int

    def __str__(self) -> str:
        return f"{self.file_path}:{self.line_number}"


@dataclass(frozen=True)
class CallRef:
    """Adjacency entry: the method on the other end of an edge and the site."""

    fqn: str
    site: CallSite


@dataclass(frozen=True)
class CallEdge:
    """A canonical call edge.

    Identity is (caller_fqn, callee_fqn, site). The remaining fields are
    metadata recorded for the method registry and for drill-down.
    """

    caller_fqn: str
    callee_fqn: str
    site: CallSite
    caller_type: str = field(default="", compare=False)
    caller_namespace: str = field(default="", compare=False)
    callee_type: str = field(default="", compare=False)
    callee_namespace: str = field(default="", compare=False)
    resolved_from: str = field(default="", compare=False)

    def __str__(self) -> str:
        return f"{self.caller_fqn} -> {self.callee_fqn} ({self.site})"

    @property
    def key(self) -> tuple[str, str, CallSite]:
        """Identity tuple used for de-duplication."""
        return (self.caller_fqn, self.callee_fqn, self.site)

    @classmethod
    def from_fact(cls, fact: RawCallFact, resolved_from: str = "") -> "CallEdge":
        """Create an edge from a validated, normalized fact."""
        if fact.caller is None or fact.callee is None or fact.file_path is None:
            raise CallGraphError(f"Cannot build edge from incomplete fact: {fact}")
        return cls(
            caller_fqn=fact.caller.fully_qualified_name,
            callee_fqn=fact.callee.fully_qualified_name,
            site=CallSite(file_path=fact.file_path, line_number=fact.line_number),
            caller_type=fact.caller.containing_type,
            caller_namespace=fact.caller.containing_namespace,
            callee_type=fact.callee.containing_type,
            callee_namespace=fact.callee.containing_namespace,
            resolved_from=resolved_from,
        )

    @classmethod
    def between(
        cls,
        caller_fqn: str,
        callee_fqn: str,
        file_path: str = "Program.cs",
        line_number: int = 1,
    ) -> "CallEdge":
        """Create an edge from two FQNs, deriving type and namespace."""
        caller = SymbolDescriptor.from_fqn(caller_fqn)
        callee = SymbolDescriptor.from_fqn(callee_fqn)
        return cls(
            caller_fqn=caller_fqn,
            callee_fqn=callee_fqn,
            site=CallSite(file_path=file_path, line_number=line_number),
            caller_type=caller.containing_type,
            caller_namespace=caller.containing_namespace,
            callee_type=callee.containing_type,
            callee_namespace=callee.containing_namespace,
        )


@dataclass(frozen=True)
class MethodInfo:
    """Registry metadata for a known method."""

    fqn: str
    method_name: str
    class_name: str = ""
    namespace: str = ""

    @property
    def class_fqn(self) -> str:
        """Namespace-qualified containing type."""
        return qualify(self.namespace, self.class_name)
