from __future__ import annotations

from dataclasses import replace
from pathlib import Path

import pytest

from slosim.config import (
    ConfigError,
    LatencyBucket,
    SpeedMultiplier,
    config_from_mapping,
    config_to_mapping,
    default_config,
    load_config,
    validate_config,
)
from slosim.config import editing
from slosim.config.validation import validate_latency_buckets, validate_sli_metrics

CONFIG_YAML = """
rps: 250
speed_multiplier: 10
tick_ms: 50
buckets:
  - id: fast
    percentage: 90
    latency_ms: 200
  - percentage: 10
    latency_ms: 1500
metrics:
  - id: checkout
    name: Checkout p90
    threshold_ms: 500
    window_sec: 60
    burn_window_sec: 10
    slo_target_pct: 99
  - threshold_ms: 1000
    window_sec: 30
    slo_target_pct: 95
"""


def test_default_config_is_valid() -> None:
    config = default_config()
    assert validate_config(config).ok
    assert [m.window_sec for m in config.metrics] == [30, 60, 300]
    assert sum(b.percentage for b in config.buckets) == 100


def test_load_config_from_yaml(tmp_path: Path) -> None:
    path = tmp_path / "sim.yaml"
    path.write_text(CONFIG_YAML, encoding="utf-8")
    config = load_config(path)
    assert config.rps == 250
    assert config.speed_multiplier is SpeedMultiplier.FAST
    assert config.tick_ms == 50
    assert config.buckets[0].id == "fast"
    assert config.buckets[1].id
    assert config.metrics[0].name == "Checkout p90"
    assert config.metrics[1].burn_window_sec == 5
    assert config.metrics[1].name == "SLI <= 1000ms / 30s"
    assert validate_config(config).ok
    assert config_from_mapping(config_to_mapping(config)) == config


def test_loader_rejects_malformed_documents(tmp_path: Path) -> None:
    path = tmp_path / "bad.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(path)
    with pytest.raises(ConfigError, match="rps"):
        config_from_mapping({"buckets": [], "metrics": []})
    with pytest.raises(ConfigError, match="speed_multiplier"):
        config_from_mapping({"rps": 1, "speed_multiplier": 3, "buckets": [], "metrics": []})
    with pytest.raises(ConfigError, match="latency_ms"):
        config_from_mapping({"rps": 1, "buckets": [{"percentage": 100}], "metrics": []})


def test_bucket_validation_messages() -> None:
    result = validate_latency_buckets([LatencyBucket("a", 60, 0), LatencyBucket("b", -1, 100)])
    assert not result.ok
    assert "Bucket #1 latency must be greater than 0 ms." in result.errors
    assert "Bucket #2 percentage must be a non-negative number." in result.errors
    assert any("add up to 100%" in e for e in result.errors)
    assert validate_latency_buckets([]).errors[0] == "At least one latency bucket is required."


def test_metric_validation_messages() -> None:
    metric = default_config().metrics[0]
    bad = replace(metric, name=" ", burn_window_sec=metric.window_sec + 1, slo_target_pct=80)
    errors = validate_sli_metrics([metric, bad]).errors
    assert "Metric #2: Metric name is required." in errors
    assert "Metric #2: Burn window cannot be longer than the SLI window." in errors
    assert any(e.startswith("Metric #2: SLO target") for e in errors)
    assert not any(e.startswith("Metric #1") for e in errors)
    assert validate_sli_metrics([]).errors == ["At least one SLI metric is required."]


def test_config_validation_checks_traffic() -> None:
    result = validate_config(replace(default_config(), rps=0, tick_ms=0))
    assert len(result.errors) == 2


def test_bucket_editing_keeps_hundred_percent() -> None:
    config = default_config()
    config = editing.add_bucket(config)
    assert [b.percentage for b in config.buckets] == [67, 0, 33]
    new_id = config.buckets[-1].id
    config = editing.set_bucket_percentage(config, new_id, 50)
    assert sum(b.percentage for b in config.buckets) == 100
    assert config.buckets[-1].percentage == 50
    config = editing.set_bucket_latency(config, new_id, 20_000)
    assert config.buckets[-1].latency_ms == 10_000
    config = editing.remove_bucket(config, new_id)
    assert sum(b.percentage for b in config.buckets) == 100
    config = editing.remove_bucket(config, config.buckets[0].id)
    assert [b.percentage for b in config.buckets] == [100]
    assert editing.remove_bucket(config, config.buckets[0].id) == config


def test_traffic_editing() -> None:
    config = editing.set_rps(default_config(), 5000.4)
    assert config.rps == 1000
    assert editing.set_rps(config, 0).rps == 1
    assert editing.set_speed(config, 60).speed_multiplier is SpeedMultiplier.MINUTE_PER_SECOND


def test_metric_editing() -> None:
    config = default_config()
    first, second, third = (m.id for m in config.metrics)
    config = editing.update_metric(config, first, window_sec=20, burn_window_sec=30)
    assert config.metrics[0].burn_window_sec == 20
    config = editing.move_metric(config, third, -1)
    assert [m.id for m in config.metrics] == [first, third, second]
    assert editing.move_metric(config, first, -1) == config
    config = editing.set_burn_window_for_all(config, 30)
    assert [m.burn_window_sec for m in config.metrics] == [20, 30, 30]
    config = editing.add_metric(config)
    assert len(config.metrics) == 4
    config = editing.remove_metric(config, second)
    assert second not in {m.id for m in config.metrics}


def test_loader_wraps_yaml_syntax_errors(tmp_path: Path) -> None:
    path = tmp_path / "broken.yaml"
    path.write_text("rps: [100\nbuckets: {\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="broken.yaml"):
        load_config(path)


def test_loader_rejects_null_speed() -> None:
    with pytest.raises(ConfigError, match="speed_multiplier"):
        config_from_mapping({"rps": 1, "speed_multiplier": None, "buckets": [], "metrics": []})


def test_loader_rejects_fractional_integers() -> None:
    buckets = [{"percentage": 33.5, "latency_ms": 100}, {"percentage": 66.5, "latency_ms": 200}]
    with pytest.raises(ConfigError, match=r"buckets\[0\].percentage"):
        config_from_mapping({"rps": 1, "buckets": buckets, "metrics": []})
    metric = {"threshold_ms": 500, "window_sec": 30.5, "slo_target_pct": 99}
    with pytest.raises(ConfigError, match=r"metrics\[0\].window_sec"):
        config_from_mapping({"rps": 1, "buckets": [], "metrics": [metric]})
    whole = config_from_mapping({"rps": 1, "buckets": [{"percentage": 100.0, "latency_ms": 5}], "metrics": []})
    assert whole.buckets[0].percentage == 100
    assert isinstance(whole.buckets[0].percentage, int)
