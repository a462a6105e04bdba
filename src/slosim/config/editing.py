from __future__ import annotations

from dataclasses import replace
from typing import Any

from slosim.config.models import LatencyBucket, SimulationConfig, SpeedMultiplier, default_metric, new_id
from slosim.config.validation import MAX_RPS, MIN_RPS
from slosim.distribution import (
    allocate_for_new_bucket_even_steal,
    rebalance_with_selected_bucket,
    redistribute_after_removal,
)
from slosim.distribution.percentages import clamp_int

NEW_BUCKET_LATENCY_MS = 1000
MIN_BUCKET_LATENCY_MS = 1
MAX_BUCKET_LATENCY_MS = 10_000


def set_rps(config: SimulationConfig, rps: float) -> SimulationConfig:
    return replace(config, rps=clamp_int(rps, MIN_RPS, MAX_RPS))


def set_speed(config: SimulationConfig, speed: int) -> SimulationConfig:
    return replace(config, speed_multiplier=SpeedMultiplier(speed))


def add_bucket(config: SimulationConfig, latency_ms: float = NEW_BUCKET_LATENCY_MS) -> SimulationConfig:
    bucket = LatencyBucket(id=new_id(), percentage=0, latency_ms=latency_ms)
    return replace(config, buckets=tuple(allocate_for_new_bucket_even_steal(config.buckets, bucket)))


def set_bucket_percentage(config: SimulationConfig, bucket_id: str, percentage: float) -> SimulationConfig:
    return replace(config, buckets=tuple(rebalance_with_selected_bucket(config.buckets, bucket_id, percentage)))


def set_bucket_latency(config: SimulationConfig, bucket_id: str, latency_ms: float) -> SimulationConfig:
    latency = clamp_int(latency_ms, MIN_BUCKET_LATENCY_MS, MAX_BUCKET_LATENCY_MS)
    buckets = tuple(replace(b, latency_ms=latency) if b.id == bucket_id else b for b in config.buckets)
    return replace(config, buckets=buckets)


def remove_bucket(config: SimulationConfig, bucket_id: str) -> SimulationConfig:
    # The last bucket stays; an empty distribution is never produced here.
    if len(config.buckets) <= 1:
        return config
    return replace(config, buckets=tuple(redistribute_after_removal(config.buckets, bucket_id)))


def add_metric(config: SimulationConfig) -> SimulationConfig:
    return replace(config, metrics=config.metrics + (default_metric(),))


def update_metric(config: SimulationConfig, metric_id: str, **changes: Any) -> SimulationConfig:
    metrics = []
    for metric in config.metrics:
        if metric.id == metric_id:
            metric = replace(metric, **changes)
            if metric.burn_window_sec > metric.window_sec:
                metric = replace(metric, burn_window_sec=metric.window_sec)
        metrics.append(metric)
    return replace(config, metrics=tuple(metrics))


def remove_metric(config: SimulationConfig, metric_id: str) -> SimulationConfig:
    if len(config.metrics) <= 1:
        return config
    return replace(config, metrics=tuple(m for m in config.metrics if m.id != metric_id))


def move_metric(config: SimulationConfig, metric_id: str, offset: int) -> SimulationConfig:
    metrics = list(config.metrics)
    index = next((i for i, m in enumerate(metrics) if m.id == metric_id), None)
    if index is None:
        return config
    target = max(0, min(len(metrics) - 1, index + offset))
    if target == index:
        return config
    metrics.insert(target, metrics.pop(index))
    return replace(config, metrics=tuple(metrics))


def set_burn_window_for_all(config: SimulationConfig, burn_window_sec: int) -> SimulationConfig:
    metrics = tuple(replace(m, burn_window_sec=min(burn_window_sec, m.window_sec)) for m in config.metrics)
    return replace(config, metrics=metrics)
