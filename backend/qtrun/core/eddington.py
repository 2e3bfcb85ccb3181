"""Eddington number: the largest E such that E activities each covered at least E units."""

from typing import Iterable

from qtrun.schemas.metrics import EddingtonResult


def calculate_eddington(distances: Iterable[float]) -> EddingtonResult:
    """Compute the Eddington number and progress toward the next one.

    Distances must already be in the unit the number is reported in
    (km or mi). The scan walks the distances longest-first and stops at
    the first position i where the i-th longest is shorter than i + 1.

    ``needed_for_next`` is E + 1 minus the number of activities at least
    E + 1 long. It is reported as-is, without clamping.
    """
    values = list(distances)
    ranked = sorted(values, reverse=True)

    eddington = 0
    for i, distance in enumerate(ranked):
        if distance >= i + 1:
            eddington = i + 1
        else:
            break

    next_target = eddington + 1
    reached = sum(1 for d in values if d >= next_target)

    return EddingtonResult(
        eddington=eddington,
        next=next_target,
        needed_for_next=next_target - reached,
    )
