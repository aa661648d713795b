# ──────────────────────────────────────────────────────────────────────
# Petri Inherit — Inheritance Resolver
# © 1998–2026 Miroslav Šotek. All rights reserved.
# Contact: www.anulum.li | protoscience@anulum.li
# ORCID: https://orcid.org/0009-0009-3560-0851
# License: GNU AGPL v3 | Commercial licensing available
# ──────────────────────────────────────────────────────────────────────
"""Single entry point deciding which inheritance relation a child satisfies.

Decision table (evaluated in order) on the child's declared kind:

==============  ======================  ==========================================
declared kind   switch                  outcome
==============  ======================  ==========================================
none / unset    any                     ``No Inheritance``
protocol        protocol disabled       PolicyViolationError
projection      projection disabled     PolicyViolationError
protocol        enabled                 filtered graph comparison
projection      enabled                 tau-simulation check
other           n/a                     UnsupportedInheritanceError
==============  ======================  ==========================================

Policy failures are raised before any graph is built.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

from ..core.config_schema import InheritanceSettings
from ..errors import ConformanceError, PolicyViolationError, UnsupportedInheritanceError
from ..io.logging_config import net_logger
from ..net.structure import PetriNet
from .projection import check_projection_inheritance
from .protocol import compare_reachability_graphs, filter_graph
from .reachability import ReachabilityGraph, build_reachability_graph

logger = logging.getLogger(__name__)


class DeclaredKind(str, Enum):
    NONE = "none"
    PROTOCOL = "protocol"
    PROJECTION = "projection"


class InheritanceType(str, Enum):
    NONE = "No Inheritance"
    PROTOCOL = "Protocol Inheritance"
    PROJECTION = "Projection Inheritance"

    def __str__(self) -> str:
        return self.value


def parse_declared_kind(value: Optional[str]) -> DeclaredKind:
    """Normalise a net's declared kind; None and blank mean no inheritance."""
    if value is None or not str(value).strip():
        return DeclaredKind.NONE
    try:
        return DeclaredKind(str(value).strip().lower())
    except ValueError:
        raise UnsupportedInheritanceError(f"Unknown inheritance {value}") from None


def _build_graphs(
    parent: PetriNet,
    child: PetriNet,
    settings: InheritanceSettings,
) -> tuple[ReachabilityGraph, ReachabilityGraph]:
    for net in (parent, child):
        report = net.validate_topology()
        if report["dead_places"] or report["dead_transitions"]:
            net_logger(logger, net.id).debug(
                "Topology diagnostics for net '%s': %s", net.id, report
            )
    parent_graph = build_reachability_graph(
        parent, max_markings=settings.max_markings, max_seconds=settings.max_seconds
    )
    child_graph = build_reachability_graph(
        child, max_markings=settings.max_markings, max_seconds=settings.max_seconds
    )
    return parent_graph, child_graph


def determine_inheritance_type(
    parent: PetriNet,
    child: PetriNet,
    settings: Optional[InheritanceSettings] = None,
) -> InheritanceType:
    """Classify ``child`` against ``parent`` or raise a terminal failure.

    Parameters
    ----------
    parent, child : PetriNet
        Fully materialised nets; neither is modified.
    settings : InheritanceSettings | None
        Enablement switches, exploration budget and match policies.
        Defaults to ``InheritanceSettings()``.

    Returns
    -------
    InheritanceType

    Raises
    ------
    PolicyViolationError
        The declared kind is disabled.
    ConformanceError
        Graphs were built but the child does not conform.
    UnsupportedInheritanceError
        The declared kind is unknown.
    StateSpaceLimitError
        Exploration exceeded the configured budget.
    """
    settings = settings or InheritanceSettings()
    kind = parse_declared_kind(child.inheritance_type)
    log = net_logger(logger, child.id, parent_id=parent.id, declared=kind.value)
    log.info(
        "Determining inheritance: parent='%s' child='%s' declared=%s",
        parent.id,
        child.id,
        kind.value,
    )

    if kind is DeclaredKind.NONE:
        return InheritanceType.NONE
    if kind is DeclaredKind.PROTOCOL and not settings.protocol_enabled:
        raise PolicyViolationError("Protocol inheritance is forbidden")
    if kind is DeclaredKind.PROJECTION and not settings.projection_enabled:
        raise PolicyViolationError("Projection inheritance is forbidden")

    parent_graph, child_graph = _build_graphs(parent, child, settings)
    parent_ids = set(parent.transition_ids)

    if kind is DeclaredKind.PROTOCOL:
        protocol_child = filter_graph(child_graph, parent_ids)
        result = compare_reachability_graphs(
            parent_graph, protocol_child, settings.protocol_match_policy
        )
        if not result:
            log.info("Protocol check failed: %s", result.mismatch_reason)
            raise ConformanceError(
                "Child PetriNet does not meet PROTOCOL inheritance requirements.\n"
                f"Reason: {result.mismatch_reason}",
                result,
            )
        return InheritanceType.PROTOCOL

    result = check_projection_inheritance(
        parent_graph, child_graph, parent_ids, settings.projection_match_policy
    )
    if not result:
        log.info("Projection check failed: %s", result.mismatch_reason)
        raise ConformanceError(
            "Child PetriNet does not meet PROJECTION inheritance requirements.\n"
            f"Reason: {result.mismatch_reason}",
            result,
        )
    return InheritanceType.PROJECTION
