from __future__ import annotations

from datetime import datetime

from pydantic import ConfigDict, Field, field_validator

from chronoplan.models.timetable_version import TimetableStatus
from chronoplan.schemas.common import CamelModel
from chronoplan.services.demand_builder import SessionDemand
from chronoplan.services.schedule import Assignment, Schedule
from chronoplan.services.slot_grid import AVAILABILITY_VALUES, TimeSlot


class AssignmentPayload(CamelModel):
    day: str
    slot_index: int = Field(ge=0, le=47)
    label: str | None = Field(default=None, max_length=50)
    subject_id: str = Field(min_length=1, max_length=36)
    faculty_id: str | None = Field(default=None, max_length=36)
    classroom_id: str | None = Field(default=None, max_length=36)
    fixed: bool = False

    @field_validator("day")
    @classmethod
    def validate_day(cls, value: str) -> str:
        day = value.strip()
        if day not in AVAILABILITY_VALUES:
            raise ValueError("Invalid day value")
        return day

    def to_assignment(self) -> Assignment:
        return Assignment(
            slot=TimeSlot(day=self.day, slot_index=self.slot_index, label=self.label),
            subject_id=self.subject_id,
            faculty_id=self.faculty_id,
            classroom_id=self.classroom_id,
            fixed=self.fixed,
        )


class AssignmentOut(AssignmentPayload):
    slot_key: str

    @classmethod
    def from_assignment(cls, assignment: Assignment) -> "AssignmentOut":
        return cls(
            day=assignment.slot.day,
            slot_index=assignment.slot.slot_index,
            label=assignment.slot.label,
            subject_id=assignment.subject_id,
            faculty_id=assignment.faculty_id,
            classroom_id=assignment.classroom_id,
            fixed=assignment.fixed,
            slot_key=assignment.slot_key,
        )


class SessionDemandOut(CamelModel):
    subject_id: str
    faculty_id: str | None = None
    required_sessions: int
    remaining: int

    @classmethod
    def from_demand(cls, demand: SessionDemand) -> "SessionDemandOut":
        return cls(
            subject_id=demand.subject_id,
            faculty_id=demand.faculty_id,
            required_sessions=demand.required_sessions,
            remaining=demand.remaining,
        )


class SchedulePayload(CamelModel):
    assignments: list[AssignmentPayload] = Field(default_factory=list, max_length=2000)

    def to_schedule(self) -> Schedule:
        return Schedule(item.to_assignment() for item in self.assignments)


class TimetableVersionCreate(SchedulePayload):
    label: str | None = Field(default=None, min_length=1, max_length=100)
    department: str = Field(min_length=1, max_length=36)
    semester: int = Field(ge=1, le=20)
    academic_year: str = Field(min_length=4, max_length=20)
    parent_id: str | None = Field(default=None, max_length=36)
    status: TimetableStatus = TimetableStatus.draft
    summary: dict = Field(default_factory=dict)


class TimetableVersionStatusUpdate(CamelModel):
    status: TimetableStatus


class TimetableVersionOut(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    label: str
    department: str = Field(validation_alias="department_id")
    semester: int
    academic_year: str
    status: TimetableStatus
    parent_id: str | None = None
    assignments: list[AssignmentOut] = Field(default_factory=list)
    summary: dict = Field(default_factory=dict)
    fitness_score: float | None = None
    created_at: datetime | None = None

    @field_validator("assignments", mode="before")
    @classmethod
    def expand_stored_assignments(cls, value: list) -> list:
        expanded = []
        for item in value or []:
            if isinstance(item, dict) and "slot_index" in item:
                expanded.append(AssignmentOut.from_assignment(Assignment.from_dict(item)))
            else:
                expanded.append(item)
        return expanded


class TimetableLineageOut(CamelModel):
    version_id: str
    lineage: list[TimetableVersionOut]
