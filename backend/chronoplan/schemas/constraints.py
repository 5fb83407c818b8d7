from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import ConfigDict, Field

from chronoplan.schemas.common import CamelModel
from chronoplan.schemas.timetable import AssignmentOut


class ConstraintDeclaration(CamelModel):
    # Fields stay loosely typed so malformed declarations reach the engine and
    # come back as readable errors instead of a schema rejection.
    type: Any = None
    condition: Any = None
    weight: Any = None
    description: str | None = Field(default=None, max_length=500)
    parameters: Any = Field(default_factory=dict)


class ConstraintValidateRequest(CamelModel):
    hard_constraints: list[ConstraintDeclaration] = Field(default_factory=list, max_length=200)
    soft_constraints: list[ConstraintDeclaration] = Field(default_factory=list, max_length=200)


class ConstraintValidationOut(CamelModel):
    is_valid: bool
    errors: list[str] = Field(default_factory=list)


class ConstraintSetCreate(ConstraintValidateRequest):
    name: str = Field(min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=500)
    department: str | None = Field(default=None, max_length=36)


class ConstraintSetOut(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: str | None = None
    department: str | None = Field(default=None, validation_alias="department_id")
    hard_constraints: list[dict] = Field(default_factory=list)
    soft_constraints: list[dict] = Field(default_factory=list)
    created_at: datetime | None = None


class Violation(CamelModel):
    constraint_type: str
    severity: Literal["high", "medium", "low"]
    description: str
    slot_key: str | None = None
    resource_id: str | None = None
    weight: float | None = None
    assignments: list[AssignmentOut] = Field(default_factory=list)


class ViolationReport(CamelModel):
    hard_violations: list[Violation] = Field(default_factory=list)
    soft_violations: list[Violation] = Field(default_factory=list)
    soft_penalty: float = 0.0

    @property
    def is_valid(self) -> bool:
        return not self.hard_violations
