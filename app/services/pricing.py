"""Tiered pricing for console sessions.

The price of a session depends only on its duration. The duration is turned
into whole minutes (rounded half up) and walked through an ordered tier
table:

* below the grace period nothing is charged;
* the hour tier repeats while at least 40 minutes remain, charging a full
  block and consuming 60 minutes each time (the remainder may go negative);
* the half-hour tier charges once for a remainder of 20-30 minutes;
* the quarter-hour tier charges once for a remainder of 10-15 minutes;
* whatever is left is dropped.

Remainders of 16-19 and 31-39 minutes match no tier and earn nothing. That
gap is part of the tariff, so it lives in the table rather than in code.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from functools import lru_cache

from ..core.config import AppSettings, settings


@dataclass(frozen=True, slots=True)
class PriceTier:
    label: str
    min_minutes: int
    max_minutes: int | None  # None means unbounded
    amount: float
    consumes: int
    repeat: bool = False

    def applies(self, minutes_left: int) -> bool:
        if minutes_left < self.min_minutes:
            return False
        return self.max_minutes is None or minutes_left <= self.max_minutes


@dataclass(frozen=True, slots=True)
class TierTable:
    grace_minutes: int
    tiers: tuple[PriceTier, ...]


def build_tier_table(
    *,
    grace_minutes: int = 10,
    hour_price: float = 25,
    half_hour_price: float = 15,
    quarter_hour_price: float = 10,
) -> TierTable:
    return TierTable(
        grace_minutes=grace_minutes,
        tiers=(
            PriceTier("hour", 40, None, float(hour_price), 60, repeat=True),
            PriceTier("half_hour", 20, 30, float(half_hour_price), 30),
            PriceTier("quarter_hour", 10, 15, float(quarter_hour_price), 15),
        ),
    )


STANDARD_TIER_TABLE = build_tier_table()


def tier_table_from_settings(cfg: AppSettings) -> TierTable:
    return build_tier_table(
        grace_minutes=cfg.GRACE_MINUTES,
        hour_price=cfg.HOUR_TIER_PRICE,
        half_hour_price=cfg.HALF_HOUR_TIER_PRICE,
        quarter_hour_price=cfg.QUARTER_HOUR_TIER_PRICE,
    )


@lru_cache(maxsize=1)
def configured_tier_table() -> TierTable:
    return tier_table_from_settings(settings)


def duration_to_minutes(duration_hours: float) -> int:
    """Whole minutes in ``duration_hours``, halves rounded up."""

    return int(math.floor(duration_hours * 60 + 0.5))


def price_for_minutes(total_minutes: int, table: TierTable | None = None) -> float:
    table = table or configured_tier_table()
    if total_minutes < table.grace_minutes:
        return 0.0

    price = 0.0
    minutes_left = total_minutes
    for tier in table.tiers:
        while tier.applies(minutes_left):
            price += tier.amount
            minutes_left -= tier.consumes
            if not tier.repeat:
                break
    return price


def price_for_duration(duration_hours: float, table: TierTable | None = None) -> float:
    """Price of a session lasting ``duration_hours`` (pure, never negative)."""

    return price_for_minutes(duration_to_minutes(duration_hours), table)


__all__ = [
    "PriceTier",
    "STANDARD_TIER_TABLE",
    "TierTable",
    "build_tier_table",
    "configured_tier_table",
    "duration_to_minutes",
    "price_for_duration",
    "price_for_minutes",
    "tier_table_from_settings",
]
