# ──────────────────────────────────────────────────────────────────────
# Petri Inherit — Arc Classifier
# © 1998–2026 Miroslav Šotek. All rights reserved.
# Contact: www.anulum.li | protoscience@anulum.li
# ORCID: https://orcid.org/0009-0009-3560-0851
# License: GNU AGPL v3 | Commercial licensing available
# ──────────────────────────────────────────────────────────────────────
"""Arc kinds and their enablement / firing rules.

Kinds
-----
REGULAR     consumes ``multiplicity`` tokens on the input side and produces
            ``multiplicity`` tokens on the output side
READ        requires at least one token whatever the multiplicity, never consumes
INHIBITOR   requires the place to be empty, never consumes
RESET       no precondition, empties the place on firing

Only REGULAR arcs may point from a transition to a place; the other kinds
are input arcs by construction.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ArcKind(str, Enum):
    REGULAR = "regular"
    READ = "read"
    INHIBITOR = "inhibitor"
    RESET = "reset"

    @classmethod
    def parse(cls, value: "str | ArcKind") -> "ArcKind":
        if isinstance(value, ArcKind):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            valid = ", ".join(k.value for k in cls)
            raise ValueError(f"Unknown arc kind '{value}'. Expected one of: {valid}") from None

    @property
    def consumes(self) -> bool:
        return self is ArcKind.REGULAR


@dataclass(frozen=True)
class Arc:
    """Directed arc between a place and a transition."""

    id: str
    source: str
    destination: str
    kind: ArcKind = ArcKind.REGULAR
    multiplicity: int = 1

    def retarget(self, id_map: "dict[str, str]") -> "Arc":
        """Return a copy with both endpoints rewritten through ``id_map``."""
        return Arc(
            id=self.id,
            source=id_map.get(self.source, self.source),
            destination=id_map.get(self.destination, self.destination),
            kind=self.kind,
            multiplicity=self.multiplicity,
        )


def arc_enables(kind: ArcKind, tokens: int, multiplicity: int) -> bool:
    """Enablement rule of a single input arc given its place's token count."""
    if kind is ArcKind.INHIBITOR:
        return tokens == 0
    if kind is ArcKind.READ:
        return tokens >= 1
    if kind is ArcKind.RESET:
        return True
    return tokens >= multiplicity


def consumed_tokens(kind: ArcKind, tokens: int, multiplicity: int) -> Optional[int]:
    """New token count of an input place after firing, or None if unchanged."""
    if kind is ArcKind.RESET:
        return 0
    if kind is ArcKind.REGULAR:
        return tokens - multiplicity
    return None
