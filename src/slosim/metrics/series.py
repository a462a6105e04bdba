from __future__ import annotations

from typing import Iterable, Mapping

import numpy as np
import pandas as pd

from slosim.metrics.models import MetricSeriesPoint, SimulationSnapshot

SERIES_COLUMNS = ["sim_time_sec", "sli_pct", "error_budget_remaining_pct", "burn_rate"]


def _value(x: float | None) -> float:
    return np.nan if x is None else float(x)


def series_frame(points: Iterable[MetricSeriesPoint]) -> pd.DataFrame:
    rows = [
        {
            "sim_time_sec": p.sim_time_ms / 1000.0,
            "sli_pct": _value(p.sli_pct),
            "error_budget_remaining_pct": _value(p.error_budget_remaining_pct),
            "burn_rate": _value(p.burn_rate),
        }
        for p in points
    ]
    return pd.DataFrame(rows, columns=SERIES_COLUMNS)


def snapshot_frame(snapshot: SimulationSnapshot, names: Mapping[str, str] | None = None) -> pd.DataFrame:
    names = names or {}
    rows = [
        {
            "metric_id": metric_id,
            "name": names.get(metric_id, metric_id),
            "sli_pct": _value(m.sli_pct),
            "error_budget_remaining_pct": _value(m.error_budget_remaining_pct),
            "burn_rate": _value(m.burn_rate),
            "good_count": m.good_count,
            "total_count": m.total_count,
            "burn_good_count": m.burn_good_count,
            "burn_total_count": m.burn_total_count,
        }
        for metric_id, m in snapshot.metrics.items()
    ]
    return pd.DataFrame(rows)


def combined_series_frame(snapshot: SimulationSnapshot, names: Mapping[str, str] | None = None) -> pd.DataFrame:
    """Long-format frame of every metric's chart series."""
    names = names or {}
    frames = []
    for metric_id, points in snapshot.chart_series.items():
        frame = series_frame(points)
        frame.insert(0, "metric", names.get(metric_id, metric_id))
        frames.append(frame)
    if not frames:
        return pd.DataFrame(columns=["metric", *SERIES_COLUMNS])
    return pd.concat(frames, ignore_index=True)
