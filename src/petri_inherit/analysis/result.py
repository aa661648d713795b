# ──────────────────────────────────────────────────────────────────────
# Petri Inherit — Comparison Results
# © 1998–2026 Miroslav Šotek. All rights reserved.
# Contact: www.anulum.li | protoscience@anulum.li
# ORCID: https://orcid.org/0009-0009-3560-0851
# License: GNU AGPL v3 | Commercial licensing available
# ──────────────────────────────────────────────────────────────────────
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Sequence

from ..net.marking import Marking


class MatchPolicy(str, Enum):
    """How many child markings matching a parent marking must pass.

    FIRST  only the first match in BFS order is inspected
    ANY    at least one match must pass
    ALL    every match must pass
    """

    FIRST = "first"
    ANY = "any"
    ALL = "all"


@dataclass(frozen=True)
class CompareResult:
    """Verdict plus the first mismatch found (None when matching)."""

    matches: bool
    mismatch_reason: Optional[str] = None

    def __bool__(self) -> bool:
        return self.matches

    @classmethod
    def ok(cls) -> "CompareResult":
        return cls(True, None)

    @classmethod
    def mismatch(cls, reason: str) -> "CompareResult":
        return cls(False, reason)


def resolve_candidates(
    candidates: Sequence[Marking],
    evaluate: Callable[[Marking], CompareResult],
    policy: MatchPolicy,
) -> CompareResult:
    """Apply ``policy`` to the per-candidate verdicts produced by ``evaluate``.

    Candidates are evaluated lazily in order; the first failure is reported
    when the policy rejects.
    """
    if policy is MatchPolicy.FIRST:
        candidates = candidates[:1]

    first_failure: Optional[CompareResult] = None
    for candidate in candidates:
        result = evaluate(candidate)
        if result:
            if policy is not MatchPolicy.ALL:
                return result
            continue
        if policy is not MatchPolicy.ANY:
            return result
        if first_failure is None:
            first_failure = result

    if first_failure is not None:
        return first_failure
    if not candidates:
        return CompareResult.mismatch("No candidate markings to compare.")
    return CompareResult.ok()
