# hr_insights/generation/sampling.py

from datetime import date, timedelta
from typing import Optional, Sequence, TypeVar

import numpy as np

from hr_insights.exceptions import EmptyPopulationError

T = TypeVar("T")


def make_rng(seed: Optional[int] = None) -> np.random.Generator:
    """Seeded generator when a seed is given, fresh OS entropy otherwise."""
    return np.random.default_rng(seed)


def choose(pool: Sequence[T], rng: np.random.Generator) -> T:
    """Uniform choice from pool. Raises EmptyPopulationError on an empty pool."""
    if len(pool) == 0:
        raise EmptyPopulationError("Cannot choose from an empty candidate pool")
    return pool[int(rng.integers(0, len(pool)))]


def randint_inclusive(rng: np.random.Generator, low: int, high: int) -> int:
    return int(rng.integers(low, high + 1))


def days_before(rng: np.random.Generator, as_of: date, lookback_days: int) -> date:
    """A date uniformly in [as_of - (lookback_days - 1), as_of]."""
    return as_of - timedelta(days=int(rng.integers(0, lookback_days)))


def add_months(day: date, months: int) -> date:
    """First of the month `months` away from day's month."""
    index = day.year * 12 + (day.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def month_starts(as_of: date, window_months: int) -> list[date]:
    """
    Every first-of-month from (as_of month - window_months) through the
    as_of month, inclusive and ascending.
    """
    start = add_months(as_of, -window_months)
    return [add_months(start, i) for i in range(window_months + 1)]


def sample_without_replacement(candidates: Sequence[T],
                               rng: np.random.Generator,
                               min_count: int,
                               max_count: int) -> list[T]:
    """
    Pick a random-size subset of candidates.

    Each candidate gets an independent random rank; the candidates are
    sorted by that rank and a prefix of length uniform in
    [min_count, max_count] (capped at len(candidates)) is kept.
    The result is returned in the original candidate order.
    """
    if len(candidates) == 0:
        return []
    keep = min(randint_inclusive(rng, min_count, max_count), len(candidates))
    ranks = rng.random(len(candidates))
    chosen = np.sort(np.argsort(ranks, kind="stable")[:keep])
    return [candidates[int(i)] for i in chosen]
