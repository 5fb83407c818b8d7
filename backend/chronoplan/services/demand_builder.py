from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from chronoplan.services.resource_pools import SubjectRecord

DEFAULT_SESSIONS = 3


@dataclass
class SessionDemand:
    subject_id: str
    faculty_id: str | None
    required_sessions: int
    remaining: int | None = None

    def __post_init__(self) -> None:
        if self.required_sessions < 0:
            raise ValueError("required_sessions cannot be negative")
        if self.remaining is None:
            self.remaining = self.required_sessions
        elif not 0 <= self.remaining <= self.required_sessions:
            raise ValueError(
                f"remaining must be between 0 and {self.required_sessions}, got {self.remaining}"
            )

    @property
    def placed(self) -> int:
        return self.required_sessions - self.remaining

    def consume(self) -> None:
        if self.remaining <= 0:
            raise ValueError(f"Demand for subject {self.subject_id} has no remaining sessions")
        self.remaining -= 1

    def fresh_copy(self) -> "SessionDemand":
        return SessionDemand(
            subject_id=self.subject_id,
            faculty_id=self.faculty_id,
            required_sessions=self.required_sessions,
        )

    def to_dict(self) -> dict:
        return {
            "subject_id": self.subject_id,
            "faculty_id": self.faculty_id,
            "required_sessions": self.required_sessions,
            "remaining": self.remaining,
        }


def required_sessions_for(subject: SubjectRecord, default_sessions: int = DEFAULT_SESSIONS) -> int:
    if subject.teaching_hours:
        return subject.teaching_hours
    if subject.credits:
        return subject.credits
    return default_sessions


def build_demands(
    subjects: Iterable[SubjectRecord],
    *,
    default_sessions: int = DEFAULT_SESSIONS,
) -> list[SessionDemand]:
    # Input order is placement priority: earlier subjects claim scarce slots first.
    return [
        SessionDemand(
            subject_id=subject.id,
            faculty_id=subject.faculty_id or None,
            required_sessions=required_sessions_for(subject, default_sessions),
        )
        for subject in subjects
    ]
