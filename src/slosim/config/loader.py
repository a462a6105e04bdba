from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

import yaml

from slosim.config.models import (
    LatencyBucket,
    SimulationConfig,
    SliMetricConfig,
    SpeedMultiplier,
    new_id,
)


class ConfigError(ValueError):
    """Raised when a configuration document is structurally malformed."""


def load_config(path: Path | str) -> SimulationConfig:
    with open(path, encoding="utf-8") as fh:
        try:
            raw = yaml.safe_load(fh)
        except yaml.YAMLError as exc:
            msg = f"Invalid config in {path}: {exc}"
            raise ConfigError(msg) from exc
    if not isinstance(raw, Mapping):
        msg = f"Invalid config in {path}: top level must be a mapping"
        raise ConfigError(msg)
    return config_from_mapping(raw)


def config_from_mapping(raw: Mapping[str, Any]) -> SimulationConfig:
    buckets = _req_list(raw, "buckets")
    metrics = _req_list(raw, "metrics")
    speed_value = _integer(raw.get("speed_multiplier", 1), "speed_multiplier")
    try:
        speed = SpeedMultiplier(speed_value)
    except ValueError as exc:
        msg = f"Invalid config: 'speed_multiplier' must be one of {[s.value for s in SpeedMultiplier]}"
        raise ConfigError(msg) from exc
    return SimulationConfig(
        rps=_number(_req(raw, "rps"), "rps"),
        speed_multiplier=speed,
        tick_ms=_integer(raw.get("tick_ms", 100), "tick_ms"),
        buckets=tuple(_bucket(item, f"buckets[{i}]") for i, item in enumerate(buckets)),
        metrics=tuple(_metric(item, f"metrics[{i}]") for i, item in enumerate(metrics)),
    )


def config_to_mapping(config: SimulationConfig) -> dict[str, Any]:
    return {
        "rps": config.rps,
        "speed_multiplier": int(config.speed_multiplier),
        "tick_ms": config.tick_ms,
        "buckets": [
            {"id": b.id, "percentage": b.percentage, "latency_ms": b.latency_ms}
            for b in config.buckets
        ],
        "metrics": [
            {
                "id": m.id,
                "name": m.name,
                "threshold_ms": m.threshold_ms,
                "window_sec": m.window_sec,
                "burn_window_sec": m.burn_window_sec,
                "slo_target_pct": m.slo_target_pct,
            }
            for m in config.metrics
        ],
    }


def _bucket(raw: Any, path: str) -> LatencyBucket:
    if not isinstance(raw, Mapping):
        raise ConfigError(f"Invalid config: '{path}' must be a mapping")
    return LatencyBucket(
        id=str(raw.get("id") or new_id()),
        percentage=_integer(_req(raw, "percentage", path), f"{path}.percentage"),
        latency_ms=_number(_req(raw, "latency_ms", path), f"{path}.latency_ms"),
    )


def _metric(raw: Any, path: str) -> SliMetricConfig:
    if not isinstance(raw, Mapping):
        raise ConfigError(f"Invalid config: '{path}' must be a mapping")
    threshold_ms = _number(_req(raw, "threshold_ms", path), f"{path}.threshold_ms")
    window_sec = _integer(_req(raw, "window_sec", path), f"{path}.window_sec")
    burn_window_sec = _integer(raw.get("burn_window_sec", min(5, window_sec)), f"{path}.burn_window_sec")
    return SliMetricConfig(
        id=str(raw.get("id") or new_id()),
        name=str(raw.get("name") or f"SLI <= {threshold_ms:g}ms / {window_sec}s"),
        threshold_ms=threshold_ms,
        window_sec=window_sec,
        burn_window_sec=burn_window_sec,
        slo_target_pct=_number(_req(raw, "slo_target_pct", path), f"{path}.slo_target_pct"),
    )


def _req(d: Mapping[str, Any], key: str, path: str = "") -> Any:
    if key not in d:
        where = f"{path}.{key}" if path else key
        raise ConfigError(f"Invalid config: required field '{where}' is missing")
    return d[key]


def _req_list(d: Mapping[str, Any], key: str) -> list[Any]:
    value = _req(d, key)
    if not isinstance(value, list):
        raise ConfigError(f"Invalid config: '{key}' must be a list")
    return value


def _number(value: Any, path: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"Invalid config: '{path}' must be a number, got {value!r}")
    return value


def _integer(value: Any, path: str) -> int:
    number = _number(value, path)
    if isinstance(number, float) and not number.is_integer():
        raise ConfigError(f"Invalid config: '{path}' must be a whole number, got {value!r}")
    return int(number)
