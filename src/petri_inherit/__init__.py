# ──────────────────────────────────────────────────────────────────────
# Petri Inherit — Package Init
# © 1998–2026 Miroslav Šotek. All rights reserved.
# Contact: www.anulum.li | protoscience@anulum.li
# ORCID: https://orcid.org/0009-0009-3560-0851
# License: GNU AGPL v3 | Commercial licensing available
# ──────────────────────────────────────────────────────────────────────
"""Petri net inheritance verification.

Decides whether a child net is a protocol or projection specialisation of
its parent by comparing reachability graphs, and merges verified children
with their parents.
"""

__version__ = "1.0.0"

from .errors import (
    ConformanceError,
    InheritanceError,
    NetValidationError,
    PolicyViolationError,
    StateSpaceLimitError,
    StructuralConflictError,
    UnsupportedInheritanceError,
)
from .net import ArcKind, Marking, PetriNet
from .core.config_schema import InheritanceSettings, load_settings
from .analysis.result import CompareResult, MatchPolicy
from .analysis.reachability import ReachabilityGraph, build_reachability_graph
from .analysis.protocol import compare_reachability_graphs, filter_graph
from .analysis.projection import check_projection_inheritance
from .analysis.resolver import InheritanceType, determine_inheritance_type
from .net.merger import merge_parent_into_child
from .net.cloner import clone_with_fresh_identities, validate_against_parent

__all__ = [
    "ArcKind",
    "CompareResult",
    "ConformanceError",
    "InheritanceError",
    "InheritanceSettings",
    "InheritanceType",
    "Marking",
    "MatchPolicy",
    "NetValidationError",
    "PetriNet",
    "PolicyViolationError",
    "ReachabilityGraph",
    "StateSpaceLimitError",
    "StructuralConflictError",
    "UnsupportedInheritanceError",
    "build_reachability_graph",
    "check_projection_inheritance",
    "clone_with_fresh_identities",
    "compare_reachability_graphs",
    "determine_inheritance_type",
    "filter_graph",
    "load_settings",
    "merge_parent_into_child",
    "validate_against_parent",
]
