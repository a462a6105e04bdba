from __future__ import annotations

from slosim.config.loader import ConfigError, config_from_mapping, config_to_mapping, load_config
from slosim.config.models import (
    LatencyBucket,
    SimulationConfig,
    SliMetricConfig,
    SpeedMultiplier,
    default_config,
    default_metric,
    new_id,
)
from slosim.config.validation import ValidationResult, validate_config

__all__ = [
    "ConfigError",
    "LatencyBucket",
    "SimulationConfig",
    "SliMetricConfig",
    "SpeedMultiplier",
    "ValidationResult",
    "config_from_mapping",
    "config_to_mapping",
    "default_config",
    "default_metric",
    "load_config",
    "new_id",
    "validate_config",
]
