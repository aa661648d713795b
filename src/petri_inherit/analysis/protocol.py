# ──────────────────────────────────────────────────────────────────────
# Petri Inherit — Protocol Inheritance Checker
# © 1998–2026 Miroslav Šotek. All rights reserved.
# Contact: www.anulum.li | protoscience@anulum.li
# ORCID: https://orcid.org/0009-0009-3560-0851
# License: GNU AGPL v3 | Commercial licensing available
# ──────────────────────────────────────────────────────────────────────
"""Protocol conformance: marking-graph comparison on parent-relevant places.

The child graph is first restricted to the parent's transitions
(:func:`filter_graph`).  Then, for every parent marking, a child marking
agreeing with it on every parent place must exist, and every parent edge
``t -> m'`` must leave that child marking with a target agreeing with
``m'``.  Places known only to the child never take part in a comparison.

The comparison short-circuits on the first mismatch.
"""

from __future__ import annotations

import logging
from typing import Iterable, List

from ..net.marking import Marking
from .reachability import Edges, ReachabilityGraph
from .result import CompareResult, MatchPolicy, resolve_candidates

logger = logging.getLogger(__name__)


def filter_graph(
    graph: ReachabilityGraph,
    allowed_transition_ids: Iterable[str],
) -> ReachabilityGraph:
    """Keep only edges whose transition id is in ``allowed_transition_ids``."""
    return graph.filter(allowed_transition_ids)


def _compare_state(
    parent_marking: Marking,
    parent_edges: Edges,
    child_marking: Marking,
    child_edges: Edges,
) -> CompareResult:
    for t, parent_target in parent_edges.items():
        if t not in child_edges:
            return CompareResult.mismatch(
                f"Transition '{t}' enabled in parent state {parent_marking} "
                f"is missing in child state {child_marking}."
            )
        child_target = child_edges[t]
        if not parent_target.matches(child_target):
            return CompareResult.mismatch(
                f"Transition '{t}' from parent state {parent_marking} leads to "
                f"{parent_target}, but from child state {child_marking} it leads to "
                f"{child_target}."
            )
    return CompareResult.ok()


def compare_reachability_graphs(
    parent_graph: ReachabilityGraph,
    child_graph: ReachabilityGraph,
    policy: MatchPolicy = MatchPolicy.FIRST,
) -> CompareResult:
    """Compare a parent graph against an already filtered child graph.

    Parameters
    ----------
    parent_graph : ReachabilityGraph
        Reachability graph of the parent net.
    child_graph : ReachabilityGraph
        Child graph restricted to the parent's transition ids.
    policy : MatchPolicy
        ``FIRST`` inspects the first matching child marking only,
        ``ANY`` accepts if some matching child marking conforms,
        ``ALL`` requires every matching child marking to conform.

    Returns
    -------
    CompareResult
        First mismatch found, or a matching verdict.
    """
    policy = MatchPolicy(policy)

    for parent_marking, parent_edges in parent_graph.items():
        candidates: List[Marking] = child_graph.find_matching(parent_marking)
        if not candidates:
            logger.info("No child marking matches parent state %s", parent_marking)
            return CompareResult.mismatch(
                f"No matching marking in child for parent state {parent_marking}."
            )

        def evaluate(child_marking: Marking) -> CompareResult:
            result = _compare_state(
                parent_marking,
                parent_edges,
                child_marking,
                child_graph.edges(child_marking),
            )
            logger.debug(
                "parent %s vs child %s: %s",
                parent_marking,
                child_marking,
                "ok" if result else result.mismatch_reason,
            )
            return result

        verdict = resolve_candidates(candidates, evaluate, policy)
        if not verdict:
            logger.info("Protocol mismatch: %s", verdict.mismatch_reason)
            return verdict

    return CompareResult.ok()
