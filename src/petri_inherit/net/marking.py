# ──────────────────────────────────────────────────────────────────────
# Petri Inherit — Marking Value Type
# © 1998–2026 Miroslav Šotek. All rights reserved.
# Contact: www.anulum.li | protoscience@anulum.li
# ORCID: https://orcid.org/0009-0009-3560-0851
# License: GNU AGPL v3 | Commercial licensing available
# ──────────────────────────────────────────────────────────────────────
"""Immutable token-count snapshot over a net's places.

A :class:`Marking` remembers the places it was built over (its *domain*) so
that projection matching can ask "does the child agree on every place the
parent knows about?", while equality and hashing treat a missing place as
holding zero tokens.  Two markings over different domains are therefore
equal when their non-zero counts coincide.
"""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, Mapping, Tuple


class Marking:
    """Token counts per place id.

    Usage::

        m = Marking({"p1": 1, "p2": 0})
        m["p1"]            # 1
        m["unknown"]       # 0
        m2 = m.with_counts({"p1": 0, "p2": 1})
    """

    __slots__ = ("_counts", "_key", "_hash")

    def __init__(self, counts: Mapping[str, int] | None = None) -> None:
        normalized: Dict[str, int] = {}
        for place, tokens in (counts or {}).items():
            value = int(tokens)
            if value < 0:
                raise ValueError(
                    f"token count must be >= 0, got {value} for place '{place}'"
                )
            normalized[str(place)] = value
        self._counts = normalized
        self._key: Tuple[Tuple[str, int], ...] = tuple(
            sorted((p, c) for p, c in normalized.items() if c != 0)
        )
        self._hash = hash(self._key)

    # ── Value semantics ──────────────────────────────────────────────────────

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Marking):
            return NotImplemented
        return self._key == other._key

    def __hash__(self) -> int:
        return self._hash

    def __lt__(self, other: "Marking") -> bool:
        return self._key < other._key

    def __repr__(self) -> str:
        return f"Marking({self.canonical()})"

    def __str__(self) -> str:
        return "{" + self.canonical() + "}"

    # ── Accessors ────────────────────────────────────────────────────────────

    def __getitem__(self, place: str) -> int:
        return self._counts.get(place, 0)

    def __contains__(self, place: object) -> bool:
        return place in self._counts

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._counts))

    def __len__(self) -> int:
        return len(self._counts)

    @property
    def places(self) -> Tuple[str, ...]:
        """Sorted place ids this marking was built over."""
        return tuple(sorted(self._counts))

    def items(self) -> Iterable[Tuple[str, int]]:
        return ((p, self._counts[p]) for p in self.places)

    def as_dict(self) -> Dict[str, int]:
        return dict(self.items())

    @property
    def total_tokens(self) -> int:
        return sum(self._counts.values())

    def canonical(self) -> str:
        """Sorted ``place:count`` pairs, for logs and JSON export."""
        return ", ".join(f"{p}:{c}" for p, c in self.items())

    # ── Derivation ───────────────────────────────────────────────────────────

    def with_counts(self, updates: Mapping[str, int]) -> "Marking":
        """Return a new marking with ``updates`` applied on top of this one."""
        merged = dict(self._counts)
        merged.update(updates)
        return Marking(merged)

    def matches(self, other: "Marking") -> bool:
        """True if ``other`` agrees with this marking on every place of its domain.

        Places known only to ``other`` are ignored.  This is the
        parent-relevant projection used by both conformance checkers, with
        ``self`` being the parent marking.
        """
        return all(other[p] == c for p, c in self._counts.items())

    def changed_places(self, other: "Marking", places: Iterable[str]) -> Tuple[str, ...]:
        """Places among ``places`` whose count differs between the two markings."""
        return tuple(p for p in places if self[p] != other[p])
