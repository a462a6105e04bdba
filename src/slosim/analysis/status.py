from __future__ import annotations

import math
from enum import Enum


class Status(str, Enum):
    GREEN = "green"
    YELLOW = "yellow"
    RED = "red"
    EXHAUSTED = "exhausted"
    NA = "na"


BURN_YELLOW_AT = 1.0
BURN_RED_ABOVE = 2.0
BUDGET_RED_BELOW = 20.0
BUDGET_YELLOW_BELOW = 50.0


def burn_rate_status(burn_rate: float | None) -> Status:
    if burn_rate is None or not math.isfinite(burn_rate):
        return Status.NA
    if burn_rate < BURN_YELLOW_AT:
        return Status.GREEN
    if burn_rate <= BURN_RED_ABOVE:
        return Status.YELLOW
    return Status.RED


def error_budget_status(remaining_pct: float | None) -> Status:
    if remaining_pct is None or not math.isfinite(remaining_pct):
        return Status.NA
    if remaining_pct <= 0:
        return Status.EXHAUSTED
    if remaining_pct < BUDGET_RED_BELOW:
        return Status.RED
    if remaining_pct < BUDGET_YELLOW_BELOW:
        return Status.YELLOW
    return Status.GREEN


def format_pct(value: float | None) -> str:
    return "N/A" if value is None else f"{value:.2f}%"


def format_burn_rate(value: float | None) -> str:
    if value is None:
        return "N/A"
    if not math.isfinite(value):
        return "INF"
    return f"{value:.2f}x"
