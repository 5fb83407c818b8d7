from __future__ import annotations

import statistics
from collections import Counter
from collections.abc import Iterable, Mapping

DEFAULT_MAX_WEEKLY_HOURS = 40


def resolve_max_weekly_hours(requested_max_hours: int | None, default: int = DEFAULT_MAX_WEEKLY_HOURS) -> int:
    if requested_max_hours is None:
        return default
    if requested_max_hours < 0:
        return 0
    return requested_max_hours


def workload_from_faculty_ids(faculty_ids: Iterable[str | None]) -> dict[str, int]:
    counts = Counter(faculty_id for faculty_id in faculty_ids if faculty_id)
    return dict(counts)


def active_workload_values(workload: Mapping[str, int]) -> list[int]:
    return [hours for hours in workload.values() if hours >= 1]


def workload_stddev(workload: Mapping[str, int]) -> float:
    # Population deviation over faculty who teach at least one session.
    values = active_workload_values(workload)
    if len(values) < 2:
        return 0.0
    return statistics.pstdev(values)


def workload_variance(workload: Mapping[str, int]) -> float:
    values = active_workload_values(workload)
    if len(values) < 2:
        return 0.0
    return statistics.pvariance(values)
