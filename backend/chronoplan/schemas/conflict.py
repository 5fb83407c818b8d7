from typing import Literal

from pydantic import Field

from chronoplan.schemas.common import CamelModel
from chronoplan.schemas.timetable import AssignmentOut, SchedulePayload


class ConflictDetail(CamelModel):
    id: str
    conflict_type: Literal["faculty_double_booking", "classroom_double_booking"]
    slot_key: str
    resource_id: str
    description: str
    severity: Literal["high"] = "high"
    assignments: list[AssignmentOut]


class ConflictSummary(CamelModel):
    faculty_conflicts: int = 0
    classroom_conflicts: int = 0
    total: int = 0


class ResolutionAction(CamelModel):
    action_type: Literal["move_slot", "change_room"]
    description: str
    conflict_id: str
    target: AssignmentOut
    parameters: dict = Field(default_factory=dict)


class ConflictReport(CamelModel):
    faculty_conflicts: list[ConflictDetail] = Field(default_factory=list)
    classroom_conflicts: list[ConflictDetail] = Field(default_factory=list)
    summary: ConflictSummary = Field(default_factory=ConflictSummary)
    suggested_resolutions: list[ResolutionAction] = Field(default_factory=list)

    @property
    def conflicts(self) -> list[ConflictDetail]:
        return [*self.faculty_conflicts, *self.classroom_conflicts]


class ConflictDetectRequest(SchedulePayload):
    include_resolutions: bool = True
