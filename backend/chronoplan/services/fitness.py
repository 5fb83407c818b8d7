from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from chronoplan.services.candidate_generator import CandidateResult
from chronoplan.services.schedule import Schedule
from chronoplan.services.workload import active_workload_values, workload_stddev, workload_variance

STDDEV_PENALTY = 2.0


@dataclass(frozen=True)
class FitnessResult:
    score: float
    components: dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {"score": self.score, "components": dict(self.components)}


def _percent(part: int, whole: int) -> float:
    if whole <= 0:
        return 0.0
    return round(part / whole * 100, 2)


def score_schedule(
    schedule: Schedule,
    faculty_workload: Mapping[str, int],
    *,
    grid_size: int,
    classroom_count: int,
) -> FitnessResult:
    """Score a schedule by how evenly it spreads teaching across faculty.

    Only the workload deviation moves the score. Utilization figures are
    reported alongside it for display.
    """
    stddev = workload_stddev(faculty_workload)
    score = max(0.0, min(100.0, 100.0 - STDDEV_PENALTY * stddev))

    slot_utilization = _percent(len(schedule.occupied_slots()), grid_size)
    rooms_used = {item.classroom_id for item in schedule if item.classroom_id}
    room_utilization = _percent(len(rooms_used), classroom_count)

    return FitnessResult(
        score=round(score, 2),
        components={
            "workload_variance": round(workload_variance(faculty_workload), 4),
            "workload_stddev": round(stddev, 4),
            "utilization_rate": round((slot_utilization + room_utilization) / 2, 2),
            "room_utilization": room_utilization,
            "slot_utilization": slot_utilization,
            "faculty_count": len(active_workload_values(faculty_workload)),
        },
    )


def rank_candidates(
    results: Iterable[tuple[CandidateResult, FitnessResult]],
) -> list[tuple[CandidateResult, FitnessResult]]:
    return sorted(
        results,
        key=lambda pair: (-pair[1].score, pair[0].unresolved_sessions, pair[0].index),
    )
