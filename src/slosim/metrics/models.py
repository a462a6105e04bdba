from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping


class EngineStatus(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"


@dataclass(frozen=True, slots=True)
class MetricSnapshot:
    sim_time_ms: float
    sli_pct: float | None
    error_budget_remaining_pct: float | None
    burn_rate: float | None
    good_count: int
    total_count: int
    burn_good_count: int
    burn_total_count: int


@dataclass(frozen=True, slots=True)
class MetricSeriesPoint:
    sim_time_ms: float
    sli_pct: float | None
    error_budget_remaining_pct: float | None
    burn_rate: float | None


@dataclass(frozen=True, slots=True)
class SimulationSnapshot:
    sim_time_ms: float
    total_started: int
    total_completed: int
    status: EngineStatus = EngineStatus.IDLE
    metrics: Mapping[str, MetricSnapshot] = field(default_factory=dict)
    chart_series: Mapping[str, list[MetricSeriesPoint]] = field(default_factory=dict)

    @property
    def in_flight(self) -> int:
        return self.total_started - self.total_completed
