from __future__ import annotations

import math


def _clamp(value: float, low: float, high: float) -> float:
    return min(high, max(low, value))


def compute_sli_pct(good_count: int, total_count: int) -> float | None:
    if total_count <= 0:
        return None
    return good_count / total_count * 100


def compute_error_budget_remaining_pct(sli_pct: float | None, slo_target_pct: float) -> float | None:
    """Share of the allowed failure budget that is still unused, in percent."""
    if sli_pct is None:
        return None
    denominator = 100 - slo_target_pct
    if denominator <= 0:
        return 100.0 if sli_pct >= 100 else 0.0
    return _clamp((sli_pct - slo_target_pct) / denominator, 0.0, 1.0) * 100


def compute_burn_rate(sli_pct: float | None, slo_target_pct: float) -> float | None:
    """Actual failure ratio over the failure ratio the target allows.

    1.0 means the budget is being spent exactly at the sustainable pace.
    """
    if sli_pct is None:
        return None
    allowed_bad_ratio = (100 - slo_target_pct) / 100
    if allowed_bad_ratio <= 0:
        return 0.0 if sli_pct >= 100 else math.inf
    return ((100 - sli_pct) / 100) / allowed_bad_ratio
