from __future__ import annotations

from slosim.analysis.signals import SignalWindow, budget_exhausted_windows, fast_burn_windows
from slosim.analysis.status import Status, burn_rate_status, error_budget_status, format_burn_rate, format_pct

__all__ = [
    "SignalWindow",
    "Status",
    "budget_exhausted_windows",
    "burn_rate_status",
    "error_budget_status",
    "fast_burn_windows",
    "format_burn_rate",
    "format_pct",
]
