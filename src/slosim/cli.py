from __future__ import annotations

import argparse
import logging
import math
import sys
from dataclasses import replace
from random import Random

from slosim.analysis import (
    budget_exhausted_windows,
    burn_rate_status,
    error_budget_status,
    fast_burn_windows,
    format_burn_rate,
    format_pct,
)
from slosim.config import (
    ConfigError,
    SimulationConfig,
    SpeedMultiplier,
    default_config,
    load_config,
    validate_config,
)
from slosim.engine import ManualTicker, SimulationEngine
from slosim.metrics import combined_series_frame, series_frame

logger = logging.getLogger("slosim")


def _build_config(args: argparse.Namespace) -> SimulationConfig:
    config = load_config(args.config) if args.config else default_config()
    if args.rps is not None:
        config = replace(config, rps=args.rps)
    if args.speed is not None:
        config = replace(config, speed_multiplier=SpeedMultiplier(args.speed))
    if args.tick_ms is not None:
        config = replace(config, tick_ms=args.tick_ms)
    return config


def _print_report(engine: SimulationEngine) -> None:
    snapshot = engine.get_snapshot()
    print(
        f"t={snapshot.sim_time_ms / 1000:.1f}s started={snapshot.total_started} "
        f"completed={snapshot.total_completed} in_flight={snapshot.in_flight}"
    )
    for metric in engine.config.metrics:
        m = snapshot.metrics[metric.id]
        budget_status = error_budget_status(m.error_budget_remaining_pct).value
        burn_status = burn_rate_status(m.burn_rate).value
        print(
            f"  {metric.name}: SLI {format_pct(m.sli_pct)} ({m.good_count}/{m.total_count}) "
            f"budget {format_pct(m.error_budget_remaining_pct)} [{budget_status}] "
            f"burn {format_burn_rate(m.burn_rate)} [{burn_status}]"
        )
        frame = series_frame(snapshot.chart_series[metric.id])
        for signal in fast_burn_windows(frame) + budget_exhausted_windows(frame):
            print(f"    {signal.label}: {signal.start_sec:.0f}s -> {signal.end_sec:.0f}s")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="SLO burn-rate simulator")
    parser.add_argument("--config", help="YAML simulation config (defaults to the stock scenario)")
    parser.add_argument("--duration", type=float, default=300.0, help="Simulated seconds to run")
    parser.add_argument("--rps", type=float)
    parser.add_argument("--speed", type=int, choices=[s.value for s in SpeedMultiplier])
    parser.add_argument("--tick-ms", type=int)
    parser.add_argument("--seed", type=int, default=7)
    parser.add_argument("--csv", help="Write every metric's chart series to this CSV file")
    parser.add_argument("--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"])

    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    try:
        config = _build_config(args)
    except (ConfigError, OSError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    result = validate_config(config)
    if not result.ok:
        for error in result.errors:
            print(f"error: {error}", file=sys.stderr)
        return 2

    ticker = ManualTicker()
    engine = SimulationEngine(config, rng=Random(args.seed), ticker=ticker)
    engine.start()
    per_tick_ms = config.tick_ms * int(config.speed_multiplier)
    ticks = ticker.fire(math.ceil(args.duration * 1000 / per_tick_ms))
    engine.pause()
    logger.info("Ran %d ticks", ticks)

    _print_report(engine)
    if args.csv:
        names = {m.id: m.name for m in config.metrics}
        combined_series_frame(engine.get_snapshot(), names).to_csv(args.csv, index=False)
        print(f"Series written to {args.csv}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
