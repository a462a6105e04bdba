from __future__ import annotations

from slosim.metrics.formulas import (
    compute_burn_rate,
    compute_error_budget_remaining_pct,
    compute_sli_pct,
)
from slosim.metrics.models import EngineStatus, MetricSeriesPoint, MetricSnapshot, SimulationSnapshot
from slosim.metrics.series import combined_series_frame, series_frame, snapshot_frame
from slosim.metrics.window import BIN_MS, CHART_RETENTION_MS, BinnedWindow, SlidingWindowMetricState

__all__ = [
    "BIN_MS",
    "BinnedWindow",
    "CHART_RETENTION_MS",
    "EngineStatus",
    "MetricSeriesPoint",
    "MetricSnapshot",
    "SimulationSnapshot",
    "SlidingWindowMetricState",
    "combined_series_frame",
    "compute_burn_rate",
    "compute_error_budget_remaining_pct",
    "compute_sli_pct",
    "series_frame",
    "snapshot_frame",
]
