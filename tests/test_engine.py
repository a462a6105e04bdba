from __future__ import annotations

import asyncio
from dataclasses import replace
from random import Random

from slosim.config import LatencyBucket, SimulationConfig, SliMetricConfig, SpeedMultiplier
from slosim.engine import ManualTicker, SimulationEngine, metrics_structurally_equal
from slosim.metrics import EngineStatus, SimulationSnapshot


def _metric(metric_id: str, window_sec: int = 30, burn_window_sec: int = 5) -> SliMetricConfig:
    return SliMetricConfig(
        id=metric_id,
        name=metric_id,
        threshold_ms=1000,
        window_sec=window_sec,
        burn_window_sec=burn_window_sec,
        slo_target_pct=90,
    )


def _config(**overrides: object) -> SimulationConfig:
    base = SimulationConfig(
        rps=100,
        speed_multiplier=SpeedMultiplier.REALTIME,
        tick_ms=100,
        buckets=(
            LatencyBucket("a", 70, 500),
            LatencyBucket("b", 20, 900),
            LatencyBucket("c", 10, 1100),
        ),
        metrics=(_metric("fast"), _metric("slow", window_sec=300)),
    )
    return replace(base, **overrides)


def _engine(config: SimulationConfig | None = None) -> tuple[SimulationEngine, ManualTicker, list[SimulationSnapshot]]:
    published: list[SimulationSnapshot] = []
    ticker = ManualTicker()
    engine = SimulationEngine(config or _config(), published.append, rng=Random(11), ticker=ticker)
    return engine, ticker, published


def test_initial_snapshot_is_empty() -> None:
    engine, _, _ = _engine()
    snapshot = engine.get_snapshot()
    assert snapshot.status is EngineStatus.IDLE
    assert (snapshot.total_started, snapshot.total_completed) == (0, 0)
    assert snapshot.metrics["fast"].burn_good_count == 0
    assert snapshot.metrics["fast"].burn_total_count == 0
    assert snapshot.metrics["fast"].sli_pct is None
    assert len(snapshot.chart_series["fast"]) == 1


def test_control_calls_publish_and_are_idempotent() -> None:
    engine, ticker, published = _engine()
    engine.start()
    engine.start()
    assert engine.status is EngineStatus.RUNNING
    assert ticker.running
    engine.pause()
    engine.pause()
    assert engine.status is EngineStatus.PAUSED
    assert not ticker.running
    assert len(published) == 4
    assert published[-1].status is EngineStatus.PAUSED


def test_each_tick_publishes() -> None:
    engine, ticker, published = _engine()
    engine.start()
    ticker.fire(5)
    assert len(published) == 6
    assert published[-1].sim_time_ms == 500


def test_arrival_accumulator_keeps_fractions() -> None:
    engine, ticker, _ = _engine(_config(rps=15))
    engine.start()
    ticker.fire(10)
    assert engine.get_snapshot().total_started == 15


def test_speed_multiplier_runs_inner_steps() -> None:
    engine, ticker, _ = _engine(_config(speed_multiplier=SpeedMultiplier.FAST))
    engine.start()
    ticker.fire(1)
    snapshot = engine.get_snapshot()
    assert snapshot.sim_time_ms == 1000
    assert snapshot.total_started == 100
    assert len(snapshot.chart_series["fast"]) == 2


def test_started_never_below_completed() -> None:
    engine, ticker, _ = _engine()
    engine.start()
    completed = 0
    for _ in range(100):
        ticker.fire()
        snapshot = engine.get_snapshot()
        assert snapshot.total_started >= snapshot.total_completed
        assert snapshot.total_completed >= completed
        assert snapshot.total_started - snapshot.total_completed == engine.in_flight
        completed = snapshot.total_completed
    assert completed > 0


def test_all_fast_requests_meet_slo() -> None:
    config = _config(buckets=(LatencyBucket("a", 100, 50),))
    engine, ticker, _ = _engine(config)
    engine.start()
    ticker.fire(50)
    m = engine.get_snapshot().metrics["fast"]
    assert m.total_count > 0
    assert m.sli_pct == 100
    assert m.error_budget_remaining_pct == 100
    assert m.burn_rate == 0


def test_series_gets_one_point_per_second() -> None:
    engine, ticker, _ = _engine()
    engine.start()
    ticker.fire(50)
    series = engine.get_snapshot().chart_series["slow"]
    assert [p.sim_time_ms for p in series] == [0, 1000, 2000, 3000, 4000, 5000]


def test_reset_returns_to_idle() -> None:
    engine, ticker, published = _engine()
    engine.start()
    ticker.fire(20)
    engine.reset()
    snapshot = published[-1]
    assert snapshot.status is EngineStatus.IDLE
    assert (snapshot.sim_time_ms, snapshot.total_started, snapshot.total_completed) == (0, 0, 0)
    assert engine.in_flight == 0
    assert not ticker.running
    assert len(snapshot.chart_series["fast"]) == 1


def test_reorder_keeps_metric_history() -> None:
    engine, ticker, _ = _engine()
    engine.start()
    ticker.fire(20)
    before = engine.get_snapshot().metrics["fast"]
    reordered = _config(metrics=(_metric("slow", window_sec=300), replace(_metric("fast"), name="renamed")))
    engine.update_config(reordered)
    snapshot = engine.get_snapshot()
    assert list(snapshot.metrics) == ["slow", "fast"]
    assert snapshot.metrics["fast"].total_count == before.total_count
    assert len(snapshot.chart_series["fast"]) == 3


def test_structural_change_rebuilds_states() -> None:
    engine, ticker, _ = _engine()
    engine.start()
    ticker.fire(20)
    in_flight = engine.in_flight
    engine.update_config(_config(metrics=(_metric("fast", window_sec=60), _metric("slow", window_sec=300))))
    snapshot = engine.get_snapshot()
    assert snapshot.metrics["fast"].total_count == 0
    assert [p.sim_time_ms for p in snapshot.chart_series["fast"]] == [2000]
    assert engine.in_flight == in_flight


def test_tick_change_restarts_ticker() -> None:
    engine, ticker, _ = _engine()
    engine.start()
    engine.update_config(_config(tick_ms=50))
    assert ticker.running
    assert ticker.interval_ms == 50
    ticker.fire(2)
    assert engine.sim_time_ms == 100


def test_structural_equality_ignores_order_and_slo() -> None:
    a, b = _metric("a"), _metric("b")
    assert metrics_structurally_equal((a, b), (b, replace(a, slo_target_pct=99)))
    assert not metrics_structurally_equal((a, b), (a, replace(b, threshold_ms=200)))
    assert not metrics_structurally_equal((a,), (a, b))


def test_no_metrics_yields_empty_maps() -> None:
    engine, ticker, _ = _engine(_config(metrics=()))
    engine.start()
    ticker.fire(5)
    snapshot = engine.get_snapshot()
    assert snapshot.metrics == {}
    assert snapshot.chart_series == {}
    assert snapshot.total_started == 50


def test_runs_on_event_loop_ticker() -> None:
    async def scenario() -> SimulationSnapshot:
        engine = SimulationEngine(_config(tick_ms=1), rng=Random(5))
        engine.start()
        await asyncio.sleep(0.05)
        engine.pause()
        return engine.get_snapshot()

    snapshot = asyncio.run(scenario())
    assert snapshot.status is EngineStatus.PAUSED
    assert snapshot.sim_time_ms > 0
