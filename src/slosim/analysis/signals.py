from __future__ import annotations

from dataclasses import dataclass

import pandas as pd


@dataclass(frozen=True, slots=True)
class SignalWindow:
    start_sec: float
    end_sec: float
    label: str


def _windows(series: pd.DataFrame, flagged: pd.Series, label: str) -> list[SignalWindow]:
    windows: list[SignalWindow] = []
    if series.empty:
        return windows
    times = series["sim_time_sec"].tolist()
    start: float | None = None
    prev: float | None = None
    for t, hit in zip(times, flagged.fillna(False).astype(bool).tolist()):
        if hit and start is None:
            start = t
        elif not hit and start is not None:
            windows.append(SignalWindow(start, t, label))
            start = None
        prev = t
    if start is not None and prev is not None:
        windows.append(SignalWindow(start, prev, label))
    return windows


def fast_burn_windows(series: pd.DataFrame, threshold: float = 2.0) -> list[SignalWindow]:
    if series.empty:
        return []
    return _windows(series, series["burn_rate"] > threshold, "fast_burn")


def budget_exhausted_windows(series: pd.DataFrame) -> list[SignalWindow]:
    if series.empty:
        return []
    return _windows(series, series["error_budget_remaining_pct"] <= 0, "budget_exhausted")
