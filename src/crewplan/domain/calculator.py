"""
Planned-hours calculation for same-day allocations.

An employee's daily capacity is split evenly across all of their
allocations on one day. Shares are rounded to two decimals; the most
recently created allocation absorbs the rounding remainder so the day
always sums to exactly the capacity.
"""

from typing import Dict, Sequence

from crewplan.domain.entities import Allocation


class AllocationCalculator:
    """Stateless helper for hour distribution."""

    @staticmethod
    def calculate_planned_hours(daily_hours: float, allocations_on_same_day: int) -> float:
        """
        Even share of ``daily_hours`` for one of ``allocations_on_same_day``.

        Raises:
            ValueError: if fewer than one allocation is given
        """
        if allocations_on_same_day < 1:
            raise ValueError("At least one allocation is required")
        return round(daily_hours / allocations_on_same_day, 2)

    @classmethod
    def redistribute(
        cls,
        daily_hours: float,
        allocations: Sequence[Allocation],
    ) -> Dict[str, float]:
        """
        Map allocation id to its planned hours after an even split.

        Ordering is by ``created_at`` then ``id``; the last one receives
        ``daily_hours`` minus the sum of the other shares.
        """
        if not allocations:
            return {}

        ordered = sorted(allocations, key=lambda a: (a.created_at, a.id))
        share = cls.calculate_planned_hours(daily_hours, len(ordered))
        hours = {a.id: share for a in ordered[:-1]}
        hours[ordered[-1].id] = round(daily_hours - share * (len(ordered) - 1), 2)
        return hours
