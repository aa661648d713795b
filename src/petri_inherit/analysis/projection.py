# ──────────────────────────────────────────────────────────────────────
# Petri Inherit — Projection Inheritance Checker
# © 1998–2026 Miroslav Šotek. All rights reserved.
# Contact: www.anulum.li | protoscience@anulum.li
# ORCID: https://orcid.org/0009-0009-3560-0851
# License: GNU AGPL v3 | Commercial licensing available
# ──────────────────────────────────────────────────────────────────────
"""Projection conformance via weak simulation with tau-closure.

Every child transition whose id is not a parent transition id is *silent*
(tau).  For every parent marking ``mP`` and parent edge ``t -> mP'`` the
child must, from a marking agreeing with ``mP`` on the parent's places,
reach a state where ``t`` fires using only tau steps, and the tau-closure of
``t``'s target must contain a marking agreeing with ``mP'``.

Silent steps must be invisible to the parent: a tau edge that changes the
token count of any parent place rejects the simulation attempt it occurs in.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import AbstractSet, Iterable, List, Optional, Set

from ..net.marking import Marking
from .reachability import ReachabilityGraph
from .result import CompareResult, MatchPolicy, resolve_candidates

logger = logging.getLogger(__name__)


@dataclass
class TauClosure:
    """States reachable through admissible tau steps, in BFS order.

    ``violation`` describes the first tau edge skipped because it changed a
    guarded place.
    """

    states: List[Marking] = field(default_factory=list)
    violation: Optional[str] = None


def is_tau(transition_id: str, parent_transition_ids: AbstractSet[str]) -> bool:
    return transition_id not in parent_transition_ids


def tau_transitions(
    graph: ReachabilityGraph,
    parent_transition_ids: Iterable[str],
) -> Set[str]:
    """Transition ids labelling edges of ``graph`` that the parent does not know."""
    known = set(parent_transition_ids)
    return {t for t in graph.transition_ids() if is_tau(t, known)}


def tau_closure(
    graph: ReachabilityGraph,
    start: Marking,
    parent_transition_ids: AbstractSet[str],
    guarded_places: Iterable[str] = (),
) -> TauClosure:
    """BFS over tau edges from ``start``.

    Tau edges changing any of ``guarded_places`` are not followed.
    """
    guarded = tuple(guarded_places)
    closure = TauClosure(states=[start])
    visited: Set[Marking] = {start}
    queue: deque[Marking] = deque([start])

    while queue:
        state = queue.popleft()
        for t, target in graph.edges(state).items():
            if not is_tau(t, parent_transition_ids):
                continue
            changed = state.changed_places(target, guarded)
            if changed:
                if closure.violation is None:
                    closure.violation = (
                        f"silent transition '{t}' in child state {state} changes "
                        f"parent place(s) {', '.join(changed)}"
                    )
                continue
            if target not in visited:
                visited.add(target)
                closure.states.append(target)
                queue.append(target)
    return closure


def simulate_transition(
    child_graph: ReachabilityGraph,
    start: Marking,
    transition_id: str,
    parent_marking: Marking,
    parent_target: Marking,
    parent_transition_ids: AbstractSet[str],
) -> CompareResult:
    """Try to simulate parent edge ``parent_marking -t-> parent_target`` from ``start``.

    Each visited child state first has its tau edges expanded (any tau edge
    touching a parent place rejects the attempt), then is checked for a
    direct ``t`` edge whose target's tau-closure matches ``parent_target``.
    """
    guarded = parent_marking.places
    visited: Set[Marking] = {start}
    queue: deque[Marking] = deque([start])
    last_failure: Optional[str] = None

    while queue:
        state = queue.popleft()
        edges = child_graph.edges(state)

        for t, target in edges.items():
            if not is_tau(t, parent_transition_ids):
                continue
            changed = state.changed_places(target, guarded)
            if changed:
                return CompareResult.mismatch(
                    f"silent transition '{t}' in child state {state} changes parent "
                    f"place(s) {', '.join(changed)} before '{transition_id}' fires"
                )
            if target not in visited:
                visited.add(target)
                queue.append(target)

        if transition_id not in edges:
            continue

        after = edges[transition_id]
        closure = tau_closure(
            child_graph, after, parent_transition_ids, parent_target.places
        )
        for candidate in closure.states:
            if parent_target.matches(candidate):
                logger.debug(
                    "  '%s' simulated: child %s -> %s matches parent %s",
                    transition_id,
                    state,
                    candidate,
                    parent_target,
                )
                return CompareResult.ok()
        last_failure = (
            f"'{transition_id}' from child state {state} leads to {after}, "
            f"which does not match parent state {parent_target}"
        )
        if closure.violation is not None:
            last_failure += f" ({closure.violation})"

    if last_failure is None:
        last_failure = (
            f"'{transition_id}' is never enabled in the tau-closure of child state {start}"
        )
    return CompareResult.mismatch(last_failure)


def check_projection_inheritance(
    parent_graph: ReachabilityGraph,
    child_graph: ReachabilityGraph,
    parent_transition_ids: Iterable[str],
    policy: MatchPolicy = MatchPolicy.ANY,
) -> CompareResult:
    """Check that the child weakly simulates every parent transition firing.

    Parameters
    ----------
    parent_graph : ReachabilityGraph
        Reachability graph of the parent net.
    child_graph : ReachabilityGraph
        Unfiltered reachability graph of the child net.
    parent_transition_ids : iterable of str
        Transition ids declared by the parent; every other id is tau.
    policy : MatchPolicy
        Which child markings matching a parent marking must succeed:
        ``ANY`` (default), ``FIRST`` or ``ALL``.

    Returns
    -------
    CompareResult
        ``matches`` is True iff every parent edge is simulated; otherwise
        ``mismatch_reason`` names the first parent transition and state
        that could not be simulated.
    """
    policy = MatchPolicy(policy)
    parent_ids = frozenset(parent_transition_ids)
    logger.debug(
        "Checking projection inheritance: %d parent markings, %d child markings, tau=%s",
        len(parent_graph),
        len(child_graph),
        sorted(tau_transitions(child_graph, parent_ids)),
    )

    for parent_marking, parent_edges in parent_graph.items():
        candidates = child_graph.find_matching(parent_marking)
        if not candidates:
            reason = f"No matching marking in child for parent state {parent_marking}."
            logger.info("Projection mismatch: %s", reason)
            return CompareResult.mismatch(reason)

        for t, parent_target in parent_edges.items():
            if t not in parent_ids:
                continue

            def evaluate(child_marking: Marking) -> CompareResult:
                return simulate_transition(
                    child_graph,
                    child_marking,
                    t,
                    parent_marking,
                    parent_target,
                    parent_ids,
                )

            verdict = resolve_candidates(candidates, evaluate, policy)
            if not verdict:
                reason = (
                    f"Parent transition '{t}' from parent state {parent_marking} "
                    f"cannot be simulated by the child: {verdict.mismatch_reason}."
                )
                logger.info("Projection mismatch: %s", reason)
                return CompareResult.mismatch(reason)
            logger.debug("parent %s: '%s' simulated", parent_marking, t)

    logger.info("Projection inheritance confirmed.")
    return CompareResult.ok()
