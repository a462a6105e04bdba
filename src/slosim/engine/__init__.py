from __future__ import annotations

from slosim.engine.engine import SimulationEngine, UpdateCallback, metrics_structurally_equal
from slosim.engine.queue import CompletionEvent, CompletionQueue
from slosim.engine.sampler import FALLBACK_LATENCY_MS, LatencySampler
from slosim.engine.ticker import LoopTicker, ManualTicker, Ticker

__all__ = [
    "CompletionEvent",
    "CompletionQueue",
    "FALLBACK_LATENCY_MS",
    "LatencySampler",
    "LoopTicker",
    "ManualTicker",
    "SimulationEngine",
    "Ticker",
    "UpdateCallback",
    "metrics_structurally_equal",
]
