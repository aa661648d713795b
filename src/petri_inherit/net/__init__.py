# ──────────────────────────────────────────────────────────────────────
# Petri Inherit — Net Package Init
# © 1998–2026 Miroslav Šotek. All rights reserved.
# Contact: www.anulum.li | protoscience@anulum.li
# ORCID: https://orcid.org/0009-0009-3560-0851
# License: GNU AGPL v3 | Commercial licensing available
# ──────────────────────────────────────────────────────────────────────
"""Net model: markings, arcs, the net builder, merge and clone."""

from .arcs import Arc, ArcKind
from .cloner import clone_with_fresh_identities, new_object_id, validate_against_parent
from .marking import Marking
from .merger import merge_parent_into_child
from .structure import PetriNet, Place, Transition

__all__ = [
    "Arc",
    "ArcKind",
    "Marking",
    "PetriNet",
    "Place",
    "Transition",
    "clone_with_fresh_identities",
    "merge_parent_into_child",
    "new_object_id",
    "validate_against_parent",
]
