"""Weighted statistics over release years"""
import math
from typing import NamedTuple, Sequence


class WeightedYear(NamedTuple):
    year: int
    weight: float


def weighted_median_release_year(data: Sequence[WeightedYear], default_year: int) -> int:
    """
    First year, in ascending order, at which the cumulative weight reaches
    half of the total. `default_year` is returned for empty or weightless data.
    """
    ordered = sorted(data, key=lambda item: item.year)
    total = sum(item.weight for item in ordered)
    if not ordered or total <= 0:
        return default_year

    target = total / 2
    cumulative = 0.0
    for item in ordered:
        cumulative += item.weight
        if cumulative >= target:
            return item.year
    return ordered[-1].year


def weighted_standard_deviation(data: Sequence[WeightedYear], weighted_mean: float) -> float:
    total = sum(item.weight for item in data)
    if not data or total <= 0:
        return 0.0
    variance = sum(item.weight * (item.year - weighted_mean) ** 2 for item in data) / total
    return math.sqrt(variance)
