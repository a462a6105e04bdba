from __future__ import annotations

import math
from collections import deque

from slosim.config.models import SliMetricConfig
from slosim.metrics.formulas import (
    compute_burn_rate,
    compute_error_budget_remaining_pct,
    compute_sli_pct,
)
from slosim.metrics.models import MetricSeriesPoint, MetricSnapshot

BIN_MS = 100
CHART_RETENTION_MS = 10 * 60 * 1000


def bin_for(sim_time_ms: float) -> int:
    return math.floor(sim_time_ms / BIN_MS)


class BinnedWindow:
    """Good/total completion counts over a trailing window of fixed-size bins.

    Bins live in a circular buffer; advancing re-zeroes every slot the window
    slides over, so expired counts leave the rolling totals exactly once.
    """

    __slots__ = ("window_bins", "good_bins", "total_bins", "rolling_good", "rolling_total", "current_bin")

    def __init__(self, window_sec: float, initial_sim_time_ms: float) -> None:
        self.window_bins = max(1, math.ceil(window_sec * 1000 / BIN_MS))
        self.good_bins = [0] * self.window_bins
        self.total_bins = [0] * self.window_bins
        self.rolling_good = 0
        self.rolling_total = 0
        self.current_bin = bin_for(initial_sim_time_ms)

    def advance_to(self, sim_time_ms: float) -> None:
        target_bin = bin_for(sim_time_ms)
        if target_bin <= self.current_bin:
            return
        if target_bin - self.current_bin >= self.window_bins:
            self._clear()
        else:
            for b in range(self.current_bin + 1, target_bin + 1):
                slot = b % self.window_bins
                self.rolling_good -= self.good_bins[slot]
                self.rolling_total -= self.total_bins[slot]
                self.good_bins[slot] = 0
                self.total_bins[slot] = 0
        self.current_bin = target_bin

    def record(self, completion_time_ms: float, good: bool) -> bool:
        completion_bin = bin_for(completion_time_ms)
        if completion_bin < self.current_bin - self.window_bins + 1:
            return False
        slot = completion_bin % self.window_bins
        self.total_bins[slot] += 1
        self.rolling_total += 1
        if good:
            self.good_bins[slot] += 1
            self.rolling_good += 1
        return True

    def _clear(self) -> None:
        self.good_bins = [0] * self.window_bins
        self.total_bins = [0] * self.window_bins
        self.rolling_good = 0
        self.rolling_total = 0


class SlidingWindowMetricState:
    def __init__(self, metric: SliMetricConfig, initial_sim_time_ms: float = 0) -> None:
        self.metric = metric
        self._sli = BinnedWindow(metric.window_sec, initial_sim_time_ms)
        self._burn = BinnedWindow(metric.burn_window_sec, initial_sim_time_ms)
        self._series: deque[MetricSeriesPoint] = deque()

    @property
    def id(self) -> str:
        return self.metric.id

    @property
    def window_bins(self) -> int:
        return self._sli.window_bins

    @property
    def burn_window_bins(self) -> int:
        return self._burn.window_bins

    def advance_to(self, sim_time_ms: float) -> None:
        self._sli.advance_to(sim_time_ms)
        self._burn.advance_to(sim_time_ms)

    def record_latency(self, completion_time_ms: float, latency_ms: float) -> None:
        good = latency_ms <= self.metric.threshold_ms
        self._sli.record(completion_time_ms, good)
        self._burn.record(completion_time_ms, good)

    def get_snapshot(self, sim_time_ms: float) -> MetricSnapshot:
        target = self.metric.slo_target_pct
        sli_pct = compute_sli_pct(self._sli.rolling_good, self._sli.rolling_total)
        burn_sli_pct = compute_sli_pct(self._burn.rolling_good, self._burn.rolling_total)
        return MetricSnapshot(
            sim_time_ms=sim_time_ms,
            sli_pct=sli_pct,
            error_budget_remaining_pct=compute_error_budget_remaining_pct(sli_pct, target),
            burn_rate=compute_burn_rate(burn_sli_pct, target),
            good_count=self._sli.rolling_good,
            total_count=self._sli.rolling_total,
            burn_good_count=self._burn.rolling_good,
            burn_total_count=self._burn.rolling_total,
        )

    def append_series_point(self, sim_time_ms: float) -> MetricSeriesPoint:
        snapshot = self.get_snapshot(sim_time_ms)
        point = MetricSeriesPoint(
            sim_time_ms=sim_time_ms,
            sli_pct=snapshot.sli_pct,
            error_budget_remaining_pct=snapshot.error_budget_remaining_pct,
            burn_rate=snapshot.burn_rate,
        )
        self._series.append(point)
        while self._series and sim_time_ms - self._series[0].sim_time_ms > CHART_RETENTION_MS:
            self._series.popleft()
        return point

    def series(self) -> list[MetricSeriesPoint]:
        return list(self._series)
