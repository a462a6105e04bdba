from __future__ import annotations

from dataclasses import replace
from typing import Sequence

from slosim.config.models import LatencyBucket
from slosim.distribution.percentages import (
    TOTAL_PERCENT,
    clamp_int,
    normalize_integer_percentages,
    round_half_up,
)


def _with_percentages(buckets: Sequence[LatencyBucket], values: Sequence[int]) -> list[LatencyBucket]:
    return [replace(bucket, percentage=value) for bucket, value in zip(buckets, values)]


def rebalance_with_selected_bucket(
    buckets: Sequence[LatencyBucket],
    selected_id: str,
    target_pct: float,
) -> list[LatencyBucket]:
    if not buckets:
        return []
    if len(buckets) == 1:
        return [replace(buckets[0], percentage=TOTAL_PERCENT)]

    selected = next((i for i, b in enumerate(buckets) if b.id == selected_id), None)
    if selected is None:
        normalized = normalize_integer_percentages([b.percentage for b in buckets], TOTAL_PERCENT)
        return _with_percentages(buckets, normalized)

    selected_pct = clamp_int(target_pct, 0, TOTAL_PERCENT)
    others = normalize_integer_percentages(
        [b.percentage for i, b in enumerate(buckets) if i != selected],
        TOTAL_PERCENT - selected_pct,
    )
    values = others[:selected] + [selected_pct] + others[selected:]
    return _with_percentages(buckets, values)


def redistribute_after_removal(buckets: Sequence[LatencyBucket], removed_id: str) -> list[LatencyBucket]:
    remaining = [b for b in buckets if b.id != removed_id]
    if not remaining:
        return []
    if len(remaining) == 1:
        return [replace(remaining[0], percentage=TOTAL_PERCENT)]
    normalized = normalize_integer_percentages([b.percentage for b in remaining], TOTAL_PERCENT)
    return _with_percentages(remaining, normalized)


def steal_evenly(values: Sequence[int], requested: float) -> tuple[list[int], int]:
    """Take up to ``requested`` units from ``values`` in equal whole-unit rounds.

    Returns the reduced values and the number of units actually taken. A donor
    never gives more than it holds.
    """
    result = list(values)
    wanted = max(0, round_half_up(requested))
    remaining = wanted
    while remaining > 0:
        eligible = [i for i, value in enumerate(result) if value > 0]
        if not eligible:
            break
        base, extra = divmod(remaining, len(eligible))
        taken = 0
        for pos, index in enumerate(eligible):
            planned = base + (1 if pos < extra else 0)
            take = min(planned, result[index])
            result[index] -= take
            taken += take
        if taken <= 0:
            break
        remaining -= taken
    return result, wanted - remaining


def allocate_for_new_bucket_even_steal(
    buckets: Sequence[LatencyBucket],
    new_bucket: LatencyBucket,
) -> list[LatencyBucket]:
    if not buckets:
        return [replace(new_bucket, percentage=TOTAL_PERCENT)]

    existing = normalize_integer_percentages([b.percentage for b in buckets], TOTAL_PERCENT)
    target = round_half_up(TOTAL_PERCENT / (len(buckets) + 1))
    after_steal, stolen = steal_evenly(existing, target)
    return _with_percentages(buckets, after_steal) + [replace(new_bucket, percentage=stolen)]
