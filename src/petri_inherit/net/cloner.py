# ──────────────────────────────────────────────────────────────────────
# Petri Inherit — Net Cloner / Validator
# © 1998–2026 Miroslav Šotek. All rights reserved.
# Contact: www.anulum.li | protoscience@anulum.li
# ORCID: https://orcid.org/0009-0009-3560-0851
# License: GNU AGPL v3 | Commercial licensing available
# ──────────────────────────────────────────────────────────────────────
"""Identity-rewriting clone of a net, used before structural union.

Every place and transition receives a freshly generated id; every arc
endpoint is rewritten through the old -> new map and arcs are re-indexed by
their new source ids.  The input net is never modified.
"""

from __future__ import annotations

import copy
import logging
import uuid
from typing import Callable, Dict, Optional

from ..errors import StructuralConflictError
from .structure import PetriNet

logger = logging.getLogger(__name__)

IdFactory = Callable[[], str]


def new_object_id() -> str:
    """24-hex-digit identifier, the shape of document-store object ids."""
    return uuid.uuid4().hex[:24]


def _fresh_ids(
    kind: str,
    old_ids: list,
    reserved: set,
    id_factory: IdFactory,
) -> Dict[str, str]:
    mapping: Dict[str, str] = {}
    issued: set = set()
    for old_id in old_ids:
        new_id = str(id_factory())
        if new_id in issued or new_id in reserved:
            raise StructuralConflictError(
                f"Duplicate {kind} ID detected during cloning: {new_id}",
                kind=kind,
                identifier=new_id,
            )
        issued.add(new_id)
        mapping[old_id] = new_id
    return mapping


def clone_with_fresh_identities(
    net: PetriNet,
    id_factory: Optional[IdFactory] = None,
) -> PetriNet:
    """Return a copy of ``net`` whose places and transitions have fresh ids.

    The net itself also receives a fresh id.  Generated ids must be unique
    among themselves and distinct from every id of the original net;
    otherwise ``StructuralConflictError`` is raised.
    """
    id_factory = id_factory or new_object_id
    reserved = set(net.node_ids)

    transition_map = _fresh_ids("Transition", net.transition_ids, reserved, id_factory)
    reserved.update(transition_map.values())
    place_map = _fresh_ids("Place", net.place_ids, reserved, id_factory)
    id_map = {**transition_map, **place_map}

    clone = PetriNet(
        str(id_factory()),
        title=net.title,
        inheritance_type=net.inheritance_type,
    )
    for transition in net.transitions.values():
        clone.add_transition(transition_map[transition.id], title=transition.title)
    for place in net.places.values():
        clone.add_place(place_map[place.id], tokens=place.tokens, title=place.title)

    for arc in net.iter_arcs():
        moved = arc.retarget(id_map)
        clone.add_arc(
            moved.source,
            moved.destination,
            kind=moved.kind,
            multiplicity=moved.multiplicity,
            arc_id=moved.id,
        )

    for role_id, payload in net.roles.items():
        clone.add_role(role_id, copy.deepcopy(payload))
    for field_id, payload in net.data_fields.items():
        clone.add_data_field(field_id, copy.deepcopy(payload))
    for import_id, payload in net.functions.items():
        clone.add_function(import_id, copy.deepcopy(payload))

    logger.debug("Cloned net '%s' as '%s' with %d fresh ids", net.id, clone.id, len(id_map))
    return clone


def validate_against_parent(
    child: PetriNet,
    parent: PetriNet,
    id_factory: Optional[IdFactory] = None,
) -> PetriNet:
    """Reject child ids already used by the parent, then clone the child.

    Raises
    ------
    StructuralConflictError
        If a child transition or place id exists in the parent.
    """
    parent_transitions = set(parent.transition_ids)
    for child_id in child.transition_ids:
        if child_id in parent_transitions:
            raise StructuralConflictError(
                f"Transition ID '{child_id}' already exists in parent PetriNet.",
                kind="Transition",
                identifier=child_id,
            )
    parent_places = set(parent.place_ids)
    for child_id in child.place_ids:
        if child_id in parent_places:
            raise StructuralConflictError(
                f"Place ID '{child_id}' already exists in parent PetriNet.",
                kind="Place",
                identifier=child_id,
            )
    return clone_with_fresh_identities(child, id_factory)
