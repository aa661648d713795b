# ──────────────────────────────────────────────────────────────────────
# Petri Inherit — Net Merger
# © 1998–2026 Miroslav Šotek. All rights reserved.
# Contact: www.anulum.li | protoscience@anulum.li
# ORCID: https://orcid.org/0009-0009-3560-0851
# License: GNU AGPL v3 | Commercial licensing available
# ──────────────────────────────────────────────────────────────────────
"""Structural union of a parent net into a copy of its child."""

from __future__ import annotations

import copy
import logging

from ..errors import StructuralConflictError
from .structure import PetriNet

logger = logging.getLogger(__name__)


def _conflict(kind: str, identifier: str) -> StructuralConflictError:
    return StructuralConflictError(
        f"Conflict: Child PetriNet already contains {kind} with ID '{identifier}' from parent.",
        kind=kind,
        identifier=identifier,
    )


def merge_parent_into_child(parent: PetriNet, child: PetriNet) -> PetriNet:
    """Return a new net holding every child element plus every parent element.

    Neither input is modified.  Any parent place, transition, role, data
    field, function or arc (by id within its source bucket) whose id is
    already present in the accumulating merged net raises
    ``StructuralConflictError``.  Callers are expected to have made the id
    spaces disjoint beforehand (see :mod:`petri_inherit.net.cloner`).
    """
    merged = child.copy()

    for place in parent.places.values():
        if place.id in merged.node_ids:
            raise _conflict("Place", place.id)
        merged.add_place(place.id, tokens=place.tokens, title=place.title)

    for transition in parent.transitions.values():
        if transition.id in merged.node_ids:
            raise _conflict("Transition", transition.id)
        merged.add_transition(transition.id, title=transition.title)

    for role_id, payload in parent.roles.items():
        if role_id in merged.roles:
            raise _conflict("Role", role_id)
        merged.add_role(role_id, copy.deepcopy(payload))

    for field_id, payload in parent.data_fields.items():
        if field_id in merged.data_fields:
            raise _conflict("Field", field_id)
        merged.add_data_field(field_id, copy.deepcopy(payload))

    for import_id, payload in parent.functions.items():
        if import_id in merged.functions:
            raise _conflict("Function", import_id)
        merged.add_function(import_id, copy.deepcopy(payload))

    merged_arcs = merged.arcs
    for source, bucket in parent.arcs.items():
        existing = {arc.id for arc in merged_arcs.get(source, [])}
        for arc in bucket:
            if arc.id in existing:
                raise _conflict("Arc", arc.id)
            merged.add_arc(
                arc.source,
                arc.destination,
                kind=arc.kind,
                multiplicity=arc.multiplicity,
                arc_id=arc.id,
            )
            existing.add(arc.id)

    logger.info(
        "Merged parent '%s' into child '%s': P=%d T=%d",
        parent.id,
        child.id,
        merged.n_places,
        merged.n_transitions,
    )
    return merged
