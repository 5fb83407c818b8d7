from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import ConfigDict, Field, field_validator

from chronoplan.models.generation_log import GenerationStatus
from chronoplan.schemas.common import CamelModel
from chronoplan.schemas.conflict import ConflictReport
from chronoplan.schemas.constraints import ViolationReport
from chronoplan.schemas.timetable import AssignmentOut, SessionDemandOut
from chronoplan.services.slot_grid import AVAILABILITY_VALUES

SolverStrategy = Literal["greedy", "randomized"]


class GenerateTimetableRequest(CamelModel):
    academic_year: str = Field(min_length=4, max_length=20)
    semester: int = Field(ge=1, le=20)
    department: str = Field(min_length=1, max_length=36)
    days: list[str] | None = Field(default=None, max_length=7)
    slots_per_day: int | None = Field(default=None, ge=1, le=24)
    slot_times: list[str] | None = Field(default=None, max_length=24)
    options: int = Field(default=1, ge=1, le=100)
    strategy: SolverStrategy | None = None
    seed: int | None = Field(default=None, ge=0, le=2_000_000_000)
    constraint_set_id: str | None = Field(default=None, max_length=36)
    debug: bool = False

    @field_validator("days")
    @classmethod
    def validate_days(cls, value: list[str] | None) -> list[str] | None:
        if value is None:
            return None
        days = [item.strip() for item in value]
        if not days:
            raise ValueError("days cannot be empty")
        invalid = [item for item in days if item not in AVAILABILITY_VALUES]
        if invalid:
            raise ValueError(f"Invalid day value(s): {', '.join(invalid)}")
        if len(set(days)) != len(days):
            raise ValueError("days must not repeat")
        return days


class FitnessOut(CamelModel):
    score: float
    components: dict[str, float] = Field(default_factory=dict)


class GeneratedOption(CamelModel):
    id: int
    rank: int
    solver: str
    assignments: dict[str, AssignmentOut] = Field(default_factory=dict)
    unresolved: list[SessionDemandOut] = Field(default_factory=list)
    fitness: FitnessOut
    conflicts: ConflictReport
    violations: ViolationReport | None = None
    timed_out: bool = False


class ConflictReportEntry(CamelModel):
    type: str
    message: str
    details: dict[str, Any] = Field(default_factory=dict)


class GenerateTimetableResponse(CamelModel):
    ok: bool
    message: str
    options: list[GeneratedOption] = Field(default_factory=list)
    conflict_report: list[ConflictReportEntry] = Field(default_factory=list)
    generation_log_id: str | None = None
    debug: dict[str, Any] | None = None


class GenerationLogOut(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    department: str = Field(validation_alias="department_id")
    semester: int
    academic_year: str
    solver: str
    status: GenerationStatus
    execution_ms: int
    option_count: int
    best_fitness: float | None = None
    unresolved_sessions: int
    fixed_collisions: int
    input_counts: dict[str, int] = Field(default_factory=dict)
    error_message: str | None = None
    created_at: datetime | None = None


class TimetableReportOut(CamelModel):
    version_id: str
    conflicts: ConflictReport
    violations: ViolationReport
    fitness: FitnessOut
