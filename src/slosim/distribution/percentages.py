from __future__ import annotations

import math
from typing import Sequence

TOTAL_PERCENT = 100


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def clamp_int(value: float, low: int, high: int) -> int:
    return max(low, min(high, round_half_up(value)))


def even_split_integers(count: int, total: int) -> list[int]:
    if count <= 0:
        return []
    total = max(0, total)
    base, extra = divmod(total, count)
    return [base + 1 if index < extra else base for index in range(count)]


def normalize_integer_percentages(weights: Sequence[float], total: float) -> list[int]:
    """Scale ``weights`` to non-negative integers summing to ``total``.

    Uses the largest-remainder method: every share is floored, then the
    leftover units go one at a time to the largest fractional remainders,
    ties broken by ascending index.
    """
    target = max(0, round_half_up(total))
    if not weights:
        return []

    safe = [w if math.isfinite(w) and w > 0 else 0.0 for w in weights]
    weight_sum = sum(safe)
    if weight_sum <= 0:
        return even_split_integers(len(weights), target)

    exact = [w * target / weight_sum for w in safe]
    result = [math.floor(x) for x in exact]
    remaining = target - sum(result)
    ranked = sorted(range(len(exact)), key=lambda i: (-(exact[i] - result[i]), i))
    for index in ranked:
        if remaining <= 0:
            break
        result[index] += 1
        remaining -= 1
    return result
