"""Dispatch normalization for call targets.

Collapses polymorphic call targets onto one canonical symbol so that call
sites bound through overrides, explicit interface implementations and
reduced extension methods land on the same graph node.

Rules (first match wins, repeated until a fixed point):
1. Explicit interface implementation with targets -> first target
2. Interface member -> as-is
3. Reduced extension method -> origin
4. Override -> base (walks to the least-derived declaration)
5. Ordinary -> as-is
"""

from __future__ import annotations

import logging
from typing import Optional

from codenav.api.indexing.call_facts import (
    CallGraphError,
    DispatchKind,
    SymbolDescriptor,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_HOPS = 64


# =============================================================================
# Exceptions
# =============================================================================


class NormalizationError(CallGraphError):
    """Base exception for normalization errors."""

    pass


class NormalizationOverflowError(NormalizationError):
    """Raised when a dispatch chain exceeds the hop limit."""

    def __init__(self, symbol: SymbolDescriptor, max_hops: int):
        self.symbol = symbol
        self.max_hops = max_hops
        super().__init__(
            f"Dispatch chain for '{symbol.fully_qualified_name}' "
            f"exceeds {max_hops} hops"
        )


# =============================================================================
# Symbol Normalizer
# =============================================================================


class SymbolNormalizer:
    """Canonicalizes callee descriptors. Stateless and side-effect free."""

    def __init__(self, max_hops: Optional[int] = None):
        if max_hops is None:
            max_hops = DEFAULT_MAX_HOPS
        if max_hops < 1:
            raise ValueError(f"max_hops must be at least 1, got {max_hops}")
        self._max_hops = max_hops

    @property
    def max_hops(self) -> int:
        """Maximum number of rewrites before a chain is rejected."""
        return self._max_hops

    def normalize(self, callee: SymbolDescriptor) -> SymbolDescriptor:
        """Resolve a callee to its canonical descriptor.

        Args:
            callee: Descriptor as bound at the call site

        Returns:
            Descriptor of kind ORDINARY or INTERFACE_MEMBER, or an explicit
            implementation without targets

        Raises:
            NormalizationOverflowError: If the chain does not settle within
                max_hops rewrites
        """
        current = callee
        for _ in range(self._max_hops + 1):
            following = self._step(current)
            if following is None:
                return current
            current = following

        logger.debug(f"Normalization overflow at {current.fully_qualified_name}")
        raise NormalizationOverflowError(callee, self._max_hops)

    def _step(self, symbol: SymbolDescriptor) -> Optional[SymbolDescriptor]:
        """Apply one rewrite rule, or return None at a fixed point."""
        kind = symbol.dispatch_kind

        if kind == DispatchKind.EXPLICIT_INTERFACE_IMPL:
            return symbol.targets[0] if symbol.targets else None

        if kind == DispatchKind.INTERFACE_MEMBER:
            return None

        if kind == DispatchKind.EXTENSION_REDUCED:
            return symbol.origin

        if kind == DispatchKind.OVERRIDE:
            return symbol.base

        return None


def normalize(callee: SymbolDescriptor) -> SymbolDescriptor:
    """Normalize with the default hop limit."""
    return SymbolNormalizer().normalize(callee)
