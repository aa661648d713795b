# ──────────────────────────────────────────────────────────────────────
# Petri Inherit — Error Taxonomy
# © 1998–2026 Miroslav Šotek. All rights reserved.
# Contact: www.anulum.li | protoscience@anulum.li
# ORCID: https://orcid.org/0009-0009-3560-0851
# License: GNU AGPL v3 | Commercial licensing available
# ──────────────────────────────────────────────────────────────────────
"""Exceptions raised by inheritance verification, merge and clone."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .analysis.result import CompareResult


class InheritanceError(RuntimeError):
    """Base class for all terminal verification failures."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class PolicyViolationError(InheritanceError):
    """Raised when the child declares a kind disabled by configuration."""


class ConformanceError(InheritanceError):
    """Raised when the child's graph does not conform to the parent's."""

    def __init__(self, reason: str, result: Optional["CompareResult"] = None) -> None:
        super().__init__(reason)
        self.result = result


class StructuralConflictError(InheritanceError):
    """Raised on duplicate identifiers during merge, clone or validation."""

    def __init__(self, reason: str, kind: str, identifier: str) -> None:
        super().__init__(reason)
        self.kind = kind
        self.identifier = identifier


class UnsupportedInheritanceError(InheritanceError):
    """Raised when the declared inheritance kind is not recognised."""


class StateSpaceLimitError(InheritanceError):
    """Raised when reachability exploration exceeds its node or time budget."""


class NetValidationError(InheritanceError, ValueError):
    """Raised when a net's arcs reference missing nodes or are malformed."""
