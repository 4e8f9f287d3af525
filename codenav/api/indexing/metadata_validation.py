"""Call fact metadata validation and normalization.

Every field of a RawCallFact is checked independently so one pass reports
all problems. The normalized fact is always populated: strings are trimmed,
missing strings become "", and invalid line numbers are clamped to 1.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Optional

from codenav.api.indexing.call_facts import (
    CallGraphError,
    RawCallFact,
    SymbolDescriptor,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Exceptions
# =============================================================================


class MalformedFactError(CallGraphError):
    """Raised when a call fact fails required-field checks."""

    def __init__(self, fact: RawCallFact, errors: list[str]):
        self.fact = fact
        self.errors = list(errors)
        super().__init__(f"Malformed call fact: {'; '.join(errors)}")


# =============================================================================
# Result Types
# =============================================================================


@dataclass
class MetadataValidationResult:
    """Result of validating and normalizing one call fact."""

    is_valid: bool
    errors: list[str] = field(default_factory=list)
    normalized: Optional[RawCallFact] = None

    def raise_for_errors(self) -> RawCallFact:
        """Return the normalized fact, or raise MalformedFactError."""
        if not self.is_valid:
            raise MalformedFactError(self.normalized, self.errors)
        return self.normalized


# =============================================================================
# Validator
# =============================================================================


def _missing(name: str) -> str:
    return f"Required field '{name}' is missing or empty"


def _is_line(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _clean(value: Optional[str]) -> str:
    # Non-string values count as missing
    if not isinstance(value, str):
        return ""
    return value.strip()


class MetadataValidator:
    """Validates required call fact fields and trims accepted values."""

    def validate_and_normalize(self, fact: RawCallFact) -> MetadataValidationResult:
        """Validate a raw call fact.

        Args:
            fact: Fact as produced by the analyzer

        Returns:
            MetadataValidationResult with every error found and a normalized
            copy of the fact
        """
        errors: list[str] = []

        caller = self._normalize_descriptor(fact.caller, "caller", errors)
        callee = self._normalize_descriptor(fact.callee, "callee", errors)

        file_path = _clean(fact.file_path)
        if not file_path:
            errors.append(_missing("file_path"))

        line_number = fact.line_number
        if not _is_line(line_number) or line_number < 1:
            errors.append(f"Required field 'line_number' must be >= 1, got {line_number}")
            line_number = 1

        normalized = RawCallFact(
            caller=caller,
            callee=callee,
            file_path=file_path,
            line_number=line_number,
        )
        return MetadataValidationResult(
            is_valid=not errors,
            errors=errors,
            normalized=normalized,
        )

    def _normalize_descriptor(
        self,
        descriptor: Optional[SymbolDescriptor],
        role: str,
        errors: list[str],
    ) -> SymbolDescriptor:
        """Check and trim the name, type and namespace of one side."""
        if descriptor is None:
            errors.append(_missing(role))
            errors.append(_missing(f"{role}_class"))
            return SymbolDescriptor(fully_qualified_name="")

        fqn = _clean(descriptor.fully_qualified_name)
        if not fqn:
            errors.append(_missing(role))

        containing_type = _clean(descriptor.containing_type)
        if not containing_type:
            errors.append(_missing(f"{role}_class"))

        return replace(
            descriptor,
            fully_qualified_name=fqn,
            containing_type=containing_type,
            containing_namespace=_clean(descriptor.containing_namespace),
        )


def validate_and_normalize(fact: RawCallFact) -> MetadataValidationResult:
    """Validate a fact with a default validator."""
    return MetadataValidator().validate_and_normalize(fact)
