from __future__ import annotations

import math
from random import Random
from typing import Sequence

from slosim.config.models import LatencyBucket

FALLBACK_LATENCY_MS = 1000.0


class LatencySampler:
    """Draws completion latencies from a weighted set of buckets.

    Buckets with no weight or an unusable latency are ignored; if nothing is
    left the sampler returns ``FALLBACK_LATENCY_MS`` for every draw.
    """

    def __init__(self, buckets: Sequence[LatencyBucket], rng: Random | None = None) -> None:
        self._rng = rng or Random()
        valid = [
            b
            for b in buckets
            if b.percentage > 0 and math.isfinite(b.latency_ms) and b.latency_ms > 0
        ]
        total = sum(b.percentage for b in valid)
        self._cumulative: list[tuple[float, float]] = []
        if total <= 0:
            return
        running = 0.0
        for bucket in valid:
            running += bucket.percentage / total
            self._cumulative.append((running, float(bucket.latency_ms)))
        self._cumulative[-1] = (1.0, self._cumulative[-1][1])

    @property
    def is_fallback(self) -> bool:
        return not self._cumulative

    def sample(self) -> float:
        if not self._cumulative:
            return FALLBACK_LATENCY_MS
        draw = self._rng.random()
        for threshold, latency_ms in self._cumulative:
            if draw <= threshold:
                return latency_ms
        return self._cumulative[-1][1]

    __call__ = sample
