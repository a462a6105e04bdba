from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Sequence

from slosim.config.models import LatencyBucket, SimulationConfig, SliMetricConfig, SpeedMultiplier

BUCKET_SUM_EPSILON = 0.001

MIN_RPS = 1
MAX_RPS = 1000
MIN_THRESHOLD_MS = 1
MAX_THRESHOLD_MS = 5000
MIN_WINDOW_SEC = 10
MAX_WINDOW_SEC = 3600
MIN_SLO_TARGET_PCT = 90.0
MAX_SLO_TARGET_PCT = 99.99


@dataclass(frozen=True, slots=True)
class ValidationResult:
    ok: bool
    errors: list[str] = field(default_factory=list)


def _result(errors: list[str]) -> ValidationResult:
    return ValidationResult(ok=not errors, errors=errors)


def _finite(value: float) -> bool:
    return isinstance(value, (int, float)) and math.isfinite(value)


def validate_latency_buckets(buckets: Sequence[LatencyBucket]) -> ValidationResult:
    errors: list[str] = []
    if not buckets:
        errors.append("At least one latency bucket is required.")

    total = 0.0
    for index, bucket in enumerate(buckets, start=1):
        if not _finite(bucket.percentage) or bucket.percentage < 0:
            errors.append(f"Bucket #{index} percentage must be a non-negative number.")
        if not _finite(bucket.latency_ms) or bucket.latency_ms <= 0:
            errors.append(f"Bucket #{index} latency must be greater than 0 ms.")
        total += bucket.percentage

    if abs(total - 100) > BUCKET_SUM_EPSILON:
        errors.append(f"Bucket percentages must add up to 100%. Current total: {total:.3f}%.")
    return _result(errors)


def validate_sli_metric(metric: SliMetricConfig) -> ValidationResult:
    errors: list[str] = []
    if not metric.name.strip():
        errors.append("Metric name is required.")
    if not _finite(metric.threshold_ms) or not MIN_THRESHOLD_MS <= metric.threshold_ms <= MAX_THRESHOLD_MS:
        errors.append(f"Threshold must be between {MIN_THRESHOLD_MS} and {MAX_THRESHOLD_MS} ms.")
    if not _finite(metric.window_sec) or not MIN_WINDOW_SEC <= metric.window_sec <= MAX_WINDOW_SEC:
        errors.append(f"Window must be between {MIN_WINDOW_SEC} and {MAX_WINDOW_SEC} seconds.")
    if not _finite(metric.burn_window_sec) or metric.burn_window_sec < 1:
        errors.append("Burn window must be at least 1 second.")
    elif metric.burn_window_sec > metric.window_sec:
        errors.append("Burn window cannot be longer than the SLI window.")
    if not _finite(metric.slo_target_pct) or not MIN_SLO_TARGET_PCT <= metric.slo_target_pct <= MAX_SLO_TARGET_PCT:
        errors.append(f"SLO target must be between {MIN_SLO_TARGET_PCT:g} and {MAX_SLO_TARGET_PCT:g} percent.")
    return _result(errors)


def validate_sli_metrics(metrics: Sequence[SliMetricConfig]) -> ValidationResult:
    errors: list[str] = []
    if not metrics:
        errors.append("At least one SLI metric is required.")
    for index, metric in enumerate(metrics, start=1):
        errors.extend(f"Metric #{index}: {error}" for error in validate_sli_metric(metric).errors)
    return _result(errors)


def validate_config(config: SimulationConfig) -> ValidationResult:
    errors: list[str] = []
    if not _finite(config.rps) or not MIN_RPS <= config.rps <= MAX_RPS:
        errors.append(f"Arrival rate must be between {MIN_RPS} and {MAX_RPS} requests per second.")
    if config.tick_ms <= 0:
        errors.append("Tick length must be greater than 0 ms.")
    if config.speed_multiplier not in set(SpeedMultiplier):
        errors.append(f"Speed multiplier must be one of {', '.join(str(s.value) for s in SpeedMultiplier)}.")
    errors.extend(validate_latency_buckets(config.buckets).errors)
    errors.extend(validate_sli_metrics(config.metrics).errors)
    return _result(errors)
