from __future__ import annotations

import logging
import math
from random import Random
from typing import Callable

from slosim.config.models import SimulationConfig, SliMetricConfig
from slosim.engine.queue import CompletionEvent, CompletionQueue
from slosim.engine.sampler import LatencySampler
from slosim.engine.ticker import LoopTicker, Ticker
from slosim.metrics.models import EngineStatus, MetricSeriesPoint, MetricSnapshot, SimulationSnapshot
from slosim.metrics.window import SlidingWindowMetricState

logger = logging.getLogger(__name__)

UpdateCallback = Callable[[SimulationSnapshot], None]


def metrics_structurally_equal(left: tuple[SliMetricConfig, ...], right: tuple[SliMetricConfig, ...]) -> bool:
    """True when both metric sets share ids, thresholds and window sizes, in any order."""
    if len(left) != len(right):
        return False
    return {m.structural_key() for m in left} == {m.structural_key() for m in right}


class SimulationEngine:
    """Discrete-time simulation of one request-serving endpoint.

    Each tick runs ``speed_multiplier`` steps of ``tick_ms`` simulated
    milliseconds. A step schedules new arrivals on the completion queue,
    slides every metric window forward and feeds due completions into them.
    """

    def __init__(
        self,
        config: SimulationConfig,
        on_update: UpdateCallback | None = None,
        *,
        rng: Random | None = None,
        ticker: Ticker | None = None,
    ) -> None:
        self._config = config
        self._on_update = on_update
        self._rng = rng or Random()
        self._ticker: Ticker = ticker if ticker is not None else LoopTicker()
        self._queue = CompletionQueue()
        self._sampler = LatencySampler(config.buckets, self._rng)
        self._states: dict[str, SlidingWindowMetricState] = {}
        self._status = EngineStatus.IDLE
        self._sim_time_ms = 0.0
        self._arrival_accumulator = 0.0
        self._total_started = 0
        self._total_completed = 0
        self._last_series_second = 0
        self._rebuild_metric_states()

    @property
    def config(self) -> SimulationConfig:
        return self._config

    @property
    def status(self) -> EngineStatus:
        return self._status

    @property
    def sim_time_ms(self) -> float:
        return self._sim_time_ms

    @property
    def in_flight(self) -> int:
        return len(self._queue)

    def start(self) -> None:
        if self._status is not EngineStatus.RUNNING:
            self._ticker.start(self._config.tick_ms, self.tick)
            self._status = EngineStatus.RUNNING
            logger.info("Simulation started at %.0f ms (tick=%d ms, speed=%dx)",
                        self._sim_time_ms, self._config.tick_ms, self._config.speed_multiplier)
        self._publish()

    def pause(self) -> None:
        if self._status is EngineStatus.RUNNING:
            self._ticker.stop()
            self._status = EngineStatus.PAUSED
            logger.info("Simulation paused at %.0f ms", self._sim_time_ms)
        self._publish()

    def reset(self) -> None:
        self._ticker.stop()
        self._status = EngineStatus.IDLE
        self._sim_time_ms = 0.0
        self._arrival_accumulator = 0.0
        self._total_started = 0
        self._total_completed = 0
        self._last_series_second = 0
        self._queue.clear()
        self._rebuild_metric_states()
        logger.info("Simulation reset")
        self._publish()

    def close(self) -> None:
        if self._status is EngineStatus.RUNNING:
            self._ticker.stop()
            self._status = EngineStatus.PAUSED
        self._on_update = None

    def update_config(self, next_config: SimulationConfig) -> None:
        previous = self._config
        self._config = next_config
        self._sampler = LatencySampler(next_config.buckets, self._rng)

        if metrics_structurally_equal(previous.metrics, next_config.metrics):
            self._states = {m.id: self._states[m.id] for m in next_config.metrics}
            for metric in next_config.metrics:
                self._states[metric.id].metric = metric
        else:
            logger.debug("Metric set changed; rebuilding %d metric states", len(next_config.metrics))
            self._rebuild_metric_states()

        if previous.tick_ms != next_config.tick_ms and self._status is EngineStatus.RUNNING:
            self._ticker.stop()
            self._ticker.start(next_config.tick_ms, self.tick)
            logger.debug("Ticker restarted with %d ms interval", next_config.tick_ms)

        self._publish()

    def get_snapshot(self) -> SimulationSnapshot:
        self._advance_metric_states(self._sim_time_ms)
        metrics: dict[str, MetricSnapshot] = {}
        chart_series: dict[str, list[MetricSeriesPoint]] = {}
        for metric_id, state in self._states.items():
            metrics[metric_id] = state.get_snapshot(self._sim_time_ms)
            chart_series[metric_id] = state.series()
        return SimulationSnapshot(
            sim_time_ms=self._sim_time_ms,
            total_started=self._total_started,
            total_completed=self._total_completed,
            status=self._status,
            metrics=metrics,
            chart_series=chart_series,
        )

    def tick(self) -> None:
        for _ in range(int(self._config.speed_multiplier)):
            self._run_step(self._config.tick_ms)
        self._publish()

    def _run_step(self, step_ms: float) -> None:
        step_start = self._sim_time_ms
        step_end = step_start + step_ms
        self._generate_arrivals(step_start, step_ms)
        self._advance_metric_states(step_end)
        self._process_completions(step_end)
        self._sim_time_ms = step_end
        self._maybe_append_series()

    def _generate_arrivals(self, step_start: float, step_ms: float) -> None:
        expected = self._config.rps * step_ms / 1000 + self._arrival_accumulator
        arrivals = math.floor(expected)
        self._arrival_accumulator = expected - arrivals
        for _ in range(arrivals):
            arrival_ms = step_start + self._rng.random() * step_ms
            latency_ms = self._sampler.sample()
            self._queue.push(CompletionEvent(arrival_ms + latency_ms, latency_ms))
        self._total_started += arrivals

    def _process_completions(self, step_end: float) -> None:
        while True:
            head = self._queue.peek()
            if head is None or head.completion_time_ms > step_end:
                return
            event = self._queue.pop()
            if event is None:
                return
            self._total_completed += 1
            for state in self._states.values():
                state.record_latency(event.completion_time_ms, event.latency_ms)

    def _advance_metric_states(self, sim_time_ms: float) -> None:
        for state in self._states.values():
            state.advance_to(sim_time_ms)

    def _maybe_append_series(self) -> None:
        current_second = math.floor(self._sim_time_ms / 1000)
        if current_second <= self._last_series_second:
            return
        for state in self._states.values():
            state.append_series_point(self._sim_time_ms)
        self._last_series_second = current_second

    def _rebuild_metric_states(self) -> None:
        self._states = {
            metric.id: SlidingWindowMetricState(metric, self._sim_time_ms) for metric in self._config.metrics
        }
        for state in self._states.values():
            state.append_series_point(self._sim_time_ms)

    def _publish(self) -> None:
        if self._on_update is None:
            return
        self._on_update(self.get_snapshot())
