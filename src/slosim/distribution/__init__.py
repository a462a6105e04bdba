from __future__ import annotations

from slosim.distribution.percentages import (
    TOTAL_PERCENT,
    even_split_integers,
    normalize_integer_percentages,
)
from slosim.distribution.rebalance import (
    allocate_for_new_bucket_even_steal,
    rebalance_with_selected_bucket,
    redistribute_after_removal,
)

__all__ = [
    "TOTAL_PERCENT",
    "allocate_for_new_bucket_even_steal",
    "even_split_integers",
    "normalize_integer_percentages",
    "rebalance_with_selected_bucket",
    "redistribute_after_removal",
]
