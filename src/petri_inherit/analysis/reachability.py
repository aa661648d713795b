# ──────────────────────────────────────────────────────────────────────
# Petri Inherit — Reachability Graph
# © 1998–2026 Miroslav Šotek. All rights reserved.
# Contact: www.anulum.li | protoscience@anulum.li
# ORCID: https://orcid.org/0009-0009-3560-0851
# License: GNU AGPL v3 | Commercial licensing available
# ──────────────────────────────────────────────────────────────────────
"""Reachability graph generation for place/transition nets.

Enablement (per input arc of a transition):
  - Inhibitor: the place must be empty.
  - Read: the place must hold at least one token; multiplicity is ignored.
  - Reset: no precondition.
  - Regular: the place must hold at least ``multiplicity`` tokens.  Parallel
    Regular arcs from one place are summed into a single demand.

Firing semantics:
  - Regular input arcs subtract ``multiplicity``.
  - Reset input arcs then empty their place.
  - Regular output arcs add ``multiplicity``.
  - Read and Inhibitor arcs never change token counts.

The graph is finite only when the net is bounded.  ``max_markings`` and
``max_seconds`` cap the exploration and raise ``StateSpaceLimitError``.
"""

from __future__ import annotations

import logging
import time
from collections import deque
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Set, Tuple

import numpy as np
from numpy.typing import NDArray

from ..errors import StateSpaceLimitError
from ..io.logging_config import net_logger
from ..net.arcs import Arc, ArcKind, arc_enables, consumed_tokens
from ..net.marking import Marking
from ..net.structure import ArcMap, IntArray, PetriNet, Transition

logger = logging.getLogger(__name__)

DEFAULT_MAX_MARKINGS = 100_000

Edges = Dict[str, Marking]


class ReachabilityGraph:
    """Labelled transition system: marking -> {transition id -> marking}.

    Markings are kept in discovery (BFS) order, which makes iteration and
    therefore first-match lookups deterministic.
    """

    def __init__(
        self,
        initial: Marking,
        transitions: Optional[Mapping[str, Transition]] = None,
    ) -> None:
        self.initial = initial
        self.transitions: Dict[str, Transition] = dict(transitions or {})
        self._edges: Dict[Marking, Edges] = {initial: {}}

    # ── Construction ─────────────────────────────────────────────────────────

    def add_marking(self, marking: Marking) -> bool:
        """Register ``marking``; return True if it was not known yet."""
        if marking in self._edges:
            return False
        self._edges[marking] = {}
        return True

    def add_edge(self, source: Marking, transition_id: str, target: Marking) -> None:
        self.add_marking(source)
        self.add_marking(target)
        self._edges[source][transition_id] = target

    # ── Queries ──────────────────────────────────────────────────────────────

    def __contains__(self, marking: object) -> bool:
        return marking in self._edges

    def __iter__(self) -> Iterator[Marking]:
        return iter(self._edges)

    def __len__(self) -> int:
        return len(self._edges)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ReachabilityGraph):
            return NotImplemented
        return self.initial == other.initial and self._edges == other._edges

    @property
    def markings(self) -> List[Marking]:
        return list(self._edges)

    def edges(self, marking: Marking) -> Edges:
        """Outgoing edges of ``marking`` (empty for unknown markings)."""
        return dict(self._edges.get(marking, {}))

    def items(self) -> Iterator[Tuple[Marking, Edges]]:
        for marking, edges in self._edges.items():
            yield marking, dict(edges)

    @property
    def edge_count(self) -> int:
        return sum(len(e) for e in self._edges.values())

    def transition_ids(self) -> Set[str]:
        """Ids of transitions labelling at least one edge."""
        return {t for edges in self._edges.values() for t in edges}

    def deadlocks(self) -> List[Marking]:
        """Markings without outgoing edges."""
        return [m for m, edges in self._edges.items() if not edges]

    def find_matching(self, parent_marking: Marking) -> List[Marking]:
        """Markings agreeing with ``parent_marking`` on all its places, in BFS order."""
        return [m for m in self._edges if parent_marking.matches(m)]

    def filter(self, allowed_transition_ids: Iterable[str]) -> "ReachabilityGraph":
        """Return a copy keeping only edges labelled by an allowed transition.

        Every marking is kept, so filtering can only remove edges.
        """
        allowed = set(allowed_transition_ids)
        filtered = ReachabilityGraph(
            self.initial,
            {t: tr for t, tr in self.transitions.items() if t in allowed},
        )
        for marking, edges in self._edges.items():
            filtered.add_marking(marking)
            for t, target in edges.items():
                if t in allowed:
                    filtered._edges[marking][t] = target
        return filtered

    def to_dict(self) -> Dict[str, object]:
        """JSON-friendly export keyed by canonical marking strings."""
        return {
            "initial": self.initial.canonical(),
            "markings": [
                {
                    "marking": marking.as_dict(),
                    "edges": {t: target.as_dict() for t, target in edges.items()},
                }
                for marking, edges in self._edges.items()
            ],
            "marking_count": len(self),
            "edge_count": self.edge_count,
        }


# ── Transition Enablement & Firing ──────────────────────────────────────


def regular_demand(input_arcs: List[Arc]) -> Dict[str, int]:
    """Tokens a transition takes from each place, parallel Regular arcs summed."""
    demand: Dict[str, int] = {}
    for arc in input_arcs:
        if arc.kind is ArcKind.REGULAR:
            demand[arc.source] = demand.get(arc.source, 0) + arc.multiplicity
    return demand


def is_enabled(marking: Marking, input_arcs: List[Arc]) -> bool:
    """A transition is enabled iff every one of its input arcs allows it.

    Regular arcs from the same place must be satisfiable together.
    """
    if not all(
        arc_enables(arc.kind, marking[arc.source], arc.multiplicity)
        for arc in input_arcs
    ):
        return False
    return all(
        marking[place] >= need for place, need in regular_demand(input_arcs).items()
    )


def fire_transition(
    marking: Marking,
    input_arcs: List[Arc],
    output_arcs: List[Arc],
) -> Marking:
    """Fire a transition and return the new marking.

    Caller is responsible for checking enablement.  Regular consumption is
    applied first, then the other input arcs (resets), then production.
    """
    counts: Dict[str, int] = {
        place: marking[place] - need
        for place, need in regular_demand(input_arcs).items()
    }

    for arc in input_arcs:
        if arc.kind is ArcKind.REGULAR:
            continue
        current = counts.get(arc.source, marking[arc.source])
        updated = consumed_tokens(arc.kind, current, arc.multiplicity)
        if updated is not None:
            counts[arc.source] = updated

    # Produce on the output side.
    for arc in output_arcs:
        current = counts.get(arc.destination, marking[arc.destination])
        counts[arc.destination] = current + arc.multiplicity

    return marking.with_counts(counts)


def enabled_transitions(
    net: PetriNet,
    marking: Marking,
    input_map: Optional[ArcMap] = None,
) -> List[str]:
    """Ids of transitions enabled under ``marking``, in net order."""
    if input_map is None:
        input_map, _ = net.arcs_by_transition()
    return [t for t in net.transition_ids if is_enabled(marking, input_map[t])]


def regular_enablement_mask(
    demand: IntArray, place_ids: List[str], marking: Marking
) -> NDArray[np.bool_]:
    """Vectorised Regular-arc check for every transition at once.

    ``demand`` is ``PetriNet.demand_matrix()``; entry ``i`` of the result is
    False when transition ``i`` cannot possibly fire under ``marking``.
    Read, Inhibitor and Reset arcs are not covered, so a True entry still
    has to pass :func:`is_enabled`.
    """
    tokens = np.fromiter(
        (marking[p] for p in place_ids), dtype=np.int64, count=len(place_ids)
    )
    result: NDArray[np.bool_] = np.all(demand <= tokens, axis=1)
    return result


# ── Reachability Graph ──────────────────────────────────────────────────


def build_reachability_graph(
    net: PetriNet,
    max_markings: int = DEFAULT_MAX_MARKINGS,
    max_seconds: Optional[float] = None,
) -> ReachabilityGraph:
    """BFS over all markings reachable from the net's initial marking.

    For each reachable marking, tries firing each transition individually
    and records an edge for every enabled one, including edges back to
    already visited markings.

    Parameters
    ----------
    net : PetriNet
        The net to explore.  Its arcs are validated first.
    max_markings : int
        Safety limit on graph size to prevent runaway exploration.
    max_seconds : float | None
        Optional wall-clock budget, checked between BFS steps.

    Returns
    -------
    ReachabilityGraph
        Graph closed under firing.

    Raises
    ------
    NetValidationError
        If an arc references a missing node.
    StateSpaceLimitError
        If the graph exceeds ``max_markings`` or the time budget runs out.
    """
    net.validate()
    log = net_logger(logger, net.id)
    t_start = time.perf_counter()

    trans_names = net.transition_ids
    place_ids = net.place_ids
    input_map, output_map = net.arcs_by_transition()
    demand = net.demand_matrix()

    m0 = net.initial_marking()
    graph = ReachabilityGraph(m0, net.transitions)
    queue: deque[Marking] = deque([m0])

    while queue:
        if max_seconds is not None and time.perf_counter() - t_start > max_seconds:
            raise StateSpaceLimitError(
                f"Reachability exploration of net '{net.id}' exceeded "
                f"{max_seconds:.3f}s after {len(graph)} markings."
            )
        current = queue.popleft()
        candidates = regular_enablement_mask(demand, place_ids, current)

        for t, possible in zip(trans_names, candidates):
            if not possible or not is_enabled(current, input_map[t]):
                continue
            successor = fire_transition(current, input_map[t], output_map[t])
            if successor not in graph:
                if len(graph) >= max_markings:
                    raise StateSpaceLimitError(
                        f"Reachability graph of net '{net.id}' exceeded "
                        f"{max_markings} markings; net may be unbounded or too large."
                    )
                graph.add_marking(successor)
                queue.append(successor)
            graph.add_edge(current, t, successor)

    log.info(
        "Built reachability graph for net '%s': %d markings, %d edges (%.1f ms)",
        net.id,
        len(graph),
        graph.edge_count,
        (time.perf_counter() - t_start) * 1000.0,
        extra={"net_context": {"markings": len(graph), "edges": graph.edge_count}},
    )
    return graph
