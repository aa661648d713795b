# ──────────────────────────────────────────────────────────────────────
# Petri Inherit — Petri Net Structure
# © 1998–2026 Miroslav Šotek. All rights reserved.
# Contact: www.anulum.li | protoscience@anulum.li
# ORCID: https://orcid.org/0009-0009-3560-0851
# License: GNU AGPL v3 | Commercial licensing available
# ──────────────────────────────────────────────────────────────────────
"""
Place/transition net definition with typed arcs.

Arcs are stored per source id, the way imported process documents index
them.  ``compile()`` additionally builds two sparse matrices over the
Regular arcs:
    W_in  : (n_transitions, n_places)  input arc multiplicities
    W_out : (n_places, n_transitions)  output arc multiplicities
Parallel arcs between the same pair of nodes are summed.  The reachability
builder reads W_in through ``demand_matrix()`` to pre-screen enablement.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Dict, List, Mapping, Optional, Set, Tuple

import numpy as np
from numpy.typing import NDArray
from scipy import sparse  # type: ignore[import-untyped]

from ..errors import NetValidationError
from .arcs import Arc, ArcKind
from .marking import Marking

IntArray = NDArray[np.int64]
ArcMap = Dict[str, List[Arc]]


class _NodeKind(Enum):
    PLACE = auto()
    TRANSITION = auto()


@dataclass(frozen=True)
class Place:
    id: str
    tokens: int = 0
    title: str = ""


@dataclass(frozen=True)
class Transition:
    id: str
    title: str = ""


class PetriNet:
    """Petri net with Regular, Read, Inhibitor and Reset arcs.

    Roles, data fields and functions are carried opaquely (id → payload) so
    that merge and clone can detect identifier conflicts on them.

    Usage::

        net = PetriNet("order", inheritance_type="protocol")
        net.add_place("p_new", tokens=1)
        net.add_place("p_done")
        net.add_transition("t_finish", title="Finish")
        net.add_arc("p_new", "t_finish")
        net.add_arc("t_finish", "p_done")
    """

    def __init__(
        self,
        net_id: str = "net",
        title: str = "",
        inheritance_type: Optional[str] = None,
    ) -> None:
        self.id = net_id
        self.title = title
        self.inheritance_type = inheritance_type

        # Ordered registries -------------------------------------------------
        self._places: Dict[str, Place] = {}
        self._transitions: Dict[str, Transition] = {}
        self._kind: Dict[str, _NodeKind] = {}

        # Arcs by source id ---------------------------------------------------
        self._arcs: ArcMap = {}

        # Opaque elements -----------------------------------------------------
        self._roles: Dict[str, Any] = {}
        self._data_fields: Dict[str, Any] = {}
        self._functions: Dict[str, Any] = {}

        # Compiled products ----------------------------------------------------
        self.W_in: sparse.csr_matrix | None = None   # (nT, nP)
        self.W_out: sparse.csr_matrix | None = None   # (nP, nT)
        self._compiled: bool = False

    # ── Builder API ──────────────────────────────────────────────────────────

    def add_place(self, place_id: str, tokens: int = 0, title: str = "") -> None:
        """Add a place holding ``tokens`` in the initial marking."""
        if place_id in self._kind:
            raise ValueError(f"Node '{place_id}' already exists.")
        if int(tokens) != tokens or tokens < 0:
            raise ValueError(f"tokens must be a non-negative integer, got {tokens}")
        self._places[place_id] = Place(place_id, int(tokens), title)
        self._kind[place_id] = _NodeKind.PLACE
        self._compiled = False

    def add_transition(self, transition_id: str, title: str = "") -> None:
        if transition_id in self._kind:
            raise ValueError(f"Node '{transition_id}' already exists.")
        self._transitions[transition_id] = Transition(transition_id, title)
        self._kind[transition_id] = _NodeKind.TRANSITION
        self._compiled = False

    def add_arc(
        self,
        source: str,
        destination: str,
        kind: ArcKind | str = ArcKind.REGULAR,
        multiplicity: int = 1,
        arc_id: Optional[str] = None,
    ) -> Arc:
        """Add a directed arc between a Place and a Transition (either direction).

        Valid arcs:
            Place      -> Transition  (input arc, any kind)
            Transition -> Place       (output arc, Regular only)

        Raises ``NetValidationError`` for unknown nodes, same-kind
        connections, non-positive multiplicities or an arc id already used
        by another arc with the same source.
        """
        arc_kind = ArcKind.parse(kind)
        if int(multiplicity) != multiplicity or multiplicity < 1:
            raise NetValidationError(f"multiplicity must be a positive integer, got {multiplicity}")

        bucket = self._arcs.get(source, [])
        if arc_id is None:
            arc_id = f"{source}->{destination}"
            suffix = 1
            while any(a.id == arc_id for a in bucket):
                suffix += 1
                arc_id = f"{source}->{destination}#{suffix}"
        elif any(a.id == arc_id for a in bucket):
            raise NetValidationError(f"Arc '{arc_id}' already exists for source '{source}'.")

        arc = Arc(arc_id, source, destination, arc_kind, int(multiplicity))
        self._check_arc(arc)
        self._arcs.setdefault(source, []).append(arc)
        self._compiled = False
        return arc

    def add_role(self, role_id: str, payload: Any = None) -> None:
        if role_id in self._roles:
            raise ValueError(f"Role '{role_id}' already exists.")
        self._roles[role_id] = payload

    def add_data_field(self, field_id: str, payload: Any = None) -> None:
        if field_id in self._data_fields:
            raise ValueError(f"Data field '{field_id}' already exists.")
        self._data_fields[field_id] = payload

    def add_function(self, import_id: str, payload: Any = None) -> None:
        if import_id in self._functions:
            raise ValueError(f"Function '{import_id}' already exists.")
        self._functions[import_id] = payload

    # ── Validation ───────────────────────────────────────────────────────────

    def _check_arc(self, arc: Arc) -> None:
        if arc.source not in self._kind:
            raise NetValidationError(f"Arc '{arc.id}' references unknown node '{arc.source}'.")
        if arc.destination not in self._kind:
            raise NetValidationError(
                f"Arc '{arc.id}' references unknown node '{arc.destination}'."
            )
        src_kind = self._kind[arc.source]
        dst_kind = self._kind[arc.destination]
        if src_kind == dst_kind:
            raise NetValidationError(
                f"Arc must connect Place<->Transition, got "
                f"{src_kind.name}->{dst_kind.name} ('{arc.source}'->'{arc.destination}')."
            )
        if arc.kind is not ArcKind.REGULAR and src_kind is not _NodeKind.PLACE:
            raise NetValidationError(
                f"{arc.kind.value} arcs are only supported for Place->Transition "
                f"(arc '{arc.id}')."
            )

    def validate(self) -> None:
        """Check every stored arc against the current places and transitions."""
        for source, bucket in self._arcs.items():
            for arc in bucket:
                if arc.source != source:
                    raise NetValidationError(
                        f"Arc '{arc.id}' is indexed under '{source}' but starts at '{arc.source}'."
                    )
                if arc.multiplicity < 1:
                    raise NetValidationError(
                        f"Arc '{arc.id}' has non-positive multiplicity {arc.multiplicity}."
                    )
                self._check_arc(arc)

    def validate_topology(self) -> Dict[str, List[str]]:
        """Return topology diagnostics without mutating the net.

        Diagnostics:
        - ``dead_places``: places with no arcs at all.
        - ``dead_transitions``: transitions with no arcs at all.
        - ``source_transitions``: transitions without input arcs (always enabled).
        """
        degree = {node: 0 for node in self._kind}
        has_input = {t: False for t in self._transitions}
        for arc in self.iter_arcs():
            degree[arc.source] += 1
            degree[arc.destination] += 1
            if arc.destination in has_input:
                has_input[arc.destination] = True

        return {
            "dead_places": sorted(p for p in self._places if degree[p] == 0),
            "dead_transitions": sorted(t for t in self._transitions if degree[t] == 0),
            "source_transitions": sorted(t for t, flag in has_input.items() if not flag),
        }

    # ── Compile ──────────────────────────────────────────────────────────────

    def compile(self) -> None:
        """Build sparse W_in and W_out matrices from the Regular arcs."""
        self.W_in, self.W_out = self._regular_matrices()
        self._compiled = True

    def _regular_matrices(self) -> Tuple[sparse.csr_matrix, sparse.csr_matrix]:
        nP = len(self._places)
        nT = len(self._transitions)
        place_idx = {p: i for i, p in enumerate(self._places)}
        trans_idx = {t: i for i, t in enumerate(self._transitions)}

        # COO accumulators
        in_rows: List[int] = []
        in_cols: List[int] = []
        in_vals: List[int] = []

        out_rows: List[int] = []
        out_cols: List[int] = []
        out_vals: List[int] = []

        for arc in self.iter_arcs():
            if arc.kind is not ArcKind.REGULAR:
                continue
            if self._kind[arc.source] is _NodeKind.PLACE:
                in_rows.append(trans_idx[arc.destination])
                in_cols.append(place_idx[arc.source])
                in_vals.append(arc.multiplicity)
            else:
                out_rows.append(place_idx[arc.destination])
                out_cols.append(trans_idx[arc.source])
                out_vals.append(arc.multiplicity)

        # csr_matrix sums duplicate COO entries, so parallel arcs add up.
        w_in = sparse.csr_matrix(
            (in_vals, (in_rows, in_cols)), shape=(nT, nP), dtype=np.int64
        )
        w_out = sparse.csr_matrix(
            (out_vals, (out_rows, out_cols)), shape=(nP, nT), dtype=np.int64
        )
        return w_in, w_out

    def demand_matrix(self) -> IntArray:
        """Dense (n_transitions, n_places) Regular input demand.

        Row ``i`` holds the tokens transition ``transition_ids[i]`` takes from
        each place of ``place_ids``.  Uses the compiled W_in when available and
        otherwise builds it without caching, so the net is left untouched.
        """
        w_in = self.W_in if self._compiled else self._regular_matrices()[0]
        assert w_in is not None
        return np.asarray(w_in.toarray(), dtype=np.int64)

    def incidence_matrix(self) -> IntArray:
        """Return the dense (n_places, n_transitions) incidence ``W_out - W_in^T``."""
        if not self._compiled:
            self.compile()
        assert self.W_in is not None
        assert self.W_out is not None
        return np.asarray((self.W_out - self.W_in.T).toarray(), dtype=np.int64)

    # ── Accessors ────────────────────────────────────────────────────────────

    @property
    def places(self) -> Mapping[str, Place]:
        return dict(self._places)

    @property
    def transitions(self) -> Mapping[str, Transition]:
        return dict(self._transitions)

    @property
    def arcs(self) -> Mapping[str, List[Arc]]:
        """Arcs indexed by source id (copies of the buckets)."""
        return {src: list(bucket) for src, bucket in self._arcs.items()}

    @property
    def roles(self) -> Mapping[str, Any]:
        return dict(self._roles)

    @property
    def data_fields(self) -> Mapping[str, Any]:
        return dict(self._data_fields)

    @property
    def functions(self) -> Mapping[str, Any]:
        return dict(self._functions)

    @property
    def place_ids(self) -> List[str]:
        return list(self._places)

    @property
    def transition_ids(self) -> List[str]:
        return list(self._transitions)

    @property
    def n_places(self) -> int:
        return len(self._places)

    @property
    def n_transitions(self) -> int:
        return len(self._transitions)

    @property
    def is_compiled(self) -> bool:
        return self._compiled

    @property
    def node_ids(self) -> Set[str]:
        """Ids of all places and transitions."""
        return set(self._kind)

    def is_place(self, node_id: str) -> bool:
        return self._kind.get(node_id) is _NodeKind.PLACE

    def is_transition(self, node_id: str) -> bool:
        return self._kind.get(node_id) is _NodeKind.TRANSITION

    def iter_arcs(self) -> List[Arc]:
        return [arc for bucket in self._arcs.values() for arc in bucket]

    def arcs_by_transition(self) -> Tuple[ArcMap, ArcMap]:
        """Per-transition input (Place -> T) and output (T -> Place) arc lists."""
        input_map: ArcMap = {t: [] for t in self._transitions}
        output_map: ArcMap = {t: [] for t in self._transitions}
        for arc in self.iter_arcs():
            if self._kind.get(arc.source) is _NodeKind.PLACE:
                input_map[arc.destination].append(arc)
            else:
                output_map[arc.source].append(arc)
        return input_map, output_map

    def input_arcs(self, transition_id: str) -> List[Arc]:
        return [a for a in self.iter_arcs() if a.destination == transition_id]

    def output_arcs(self, transition_id: str) -> List[Arc]:
        return list(self._arcs.get(transition_id, []))

    def initial_marking(self) -> Marking:
        """Marking built from every place's initial token count."""
        return Marking({p.id: p.tokens for p in self._places.values()})

    def copy(self) -> "PetriNet":
        """Deep copy; the copy shares no mutable state with this net."""
        return copy.deepcopy(self)

    def summary(self) -> str:
        """Human-readable summary of the net."""
        lines = [
            f"PetriNet '{self.id}'  type={self.inheritance_type or 'none'}  "
            f"P={self.n_places}  T={self.n_transitions}  "
            f"Arcs={len(self.iter_arcs())}  compiled={self._compiled}",
            "",
            "Places:",
        ]
        for i, place in enumerate(self._places.values()):
            lines.append(f"  [{i}] {place.id:20s}  tokens={place.tokens}")

        lines.append("")
        lines.append("Transitions:")
        for i, transition in enumerate(self._transitions.values()):
            lines.append(f"  [{i}] {transition.id:20s}  title={transition.title!r}")

        lines.append("")
        lines.append("Arcs:")
        for arc in self.iter_arcs():
            extra = "" if arc.kind is ArcKind.REGULAR else f" [{arc.kind.value}]"
            lines.append(f"  {arc.source} --({arc.multiplicity})--> {arc.destination}{extra}")

        if self._compiled:
            assert self.W_in is not None
            assert self.W_out is not None
            lines.append("")
            lines.append(
                f"W_in  (nT={self.W_in.shape[0]}, nP={self.W_in.shape[1]})  "
                f"nnz={self.W_in.nnz}"
            )
            lines.append(
                f"W_out (nP={self.W_out.shape[0]}, nT={self.W_out.shape[1]})  "
                f"nnz={self.W_out.nnz}"
            )
        return "\n".join(lines)
