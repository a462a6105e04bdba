from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum


class SpeedMultiplier(int, Enum):
    REALTIME = 1
    FAST = 10
    MINUTE_PER_SECOND = 60


def new_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True, slots=True)
class LatencyBucket:
    id: str
    percentage: int
    latency_ms: float


@dataclass(frozen=True, slots=True)
class SliMetricConfig:
    id: str
    name: str
    threshold_ms: float
    window_sec: int
    burn_window_sec: int
    slo_target_pct: float

    def structural_key(self) -> tuple[str, float, int, int]:
        """Fields whose change invalidates the metric's binned history."""
        return (self.id, self.threshold_ms, self.window_sec, self.burn_window_sec)


@dataclass(frozen=True, slots=True)
class SimulationConfig:
    rps: float
    speed_multiplier: SpeedMultiplier = SpeedMultiplier.REALTIME
    tick_ms: int = 100
    buckets: tuple[LatencyBucket, ...] = field(default_factory=tuple)
    metrics: tuple[SliMetricConfig, ...] = field(default_factory=tuple)


def default_buckets() -> tuple[LatencyBucket, ...]:
    return (
        LatencyBucket(id=new_id(), percentage=95, latency_ms=800),
        LatencyBucket(id=new_id(), percentage=5, latency_ms=1200),
    )


def default_metric(window_sec: int = 60, burn_window_sec: int = 5) -> SliMetricConfig:
    return SliMetricConfig(
        id=new_id(),
        name=f"SLI <= 1000ms / {window_sec}s",
        threshold_ms=1000,
        window_sec=window_sec,
        burn_window_sec=burn_window_sec,
        slo_target_pct=90,
    )


def default_config() -> SimulationConfig:
    return SimulationConfig(
        rps=100,
        speed_multiplier=SpeedMultiplier.REALTIME,
        tick_ms=100,
        buckets=default_buckets(),
        metrics=tuple(default_metric(window) for window in (30, 60, 300)),
    )
