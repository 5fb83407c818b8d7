"""Constraint declarations, their validation and post-hoc violation checks.

Declarations arrive as loose mappings (request bodies or stored constraint
sets). ``validate_constraints`` turns them into typed ``HardConstraint`` and
``SoftConstraint`` values, and ``detect_violations`` judges a schedule against
them. The always-on hard rules (double booking, room capacity, equipment) are
checked whether or not they were declared.
"""

from __future__ import annotations

import logging
import math
from collections import defaultdict
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from chronoplan.core.exceptions import ConstraintValidationError
from chronoplan.schemas.constraints import Violation, ViolationReport
from chronoplan.schemas.timetable import AssignmentOut
from chronoplan.services.conflict_service import ConflictDetector
from chronoplan.services.resource_pools import ResourceCatalog
from chronoplan.services.schedule import Assignment, Schedule
from chronoplan.services.workload import workload_from_faculty_ids

logger = logging.getLogger(__name__)


class ConstraintType(str, Enum):
    faculty_availability = "faculty_availability"
    classroom_availability = "classroom_availability"
    room_capacity = "room_capacity"
    subject_prerequisites = "subject_prerequisites"
    equipment_requirements = "equipment_requirements"
    max_daily_hours = "max_daily_hours"
    consecutive_classes = "consecutive_classes"
    time_preferences = "time_preferences"
    workload_distribution = "workload_distribution"
    faculty_preferences = "faculty_preferences"


@dataclass(frozen=True)
class HardConstraint:
    type: ConstraintType
    condition: str
    parameters: dict = field(default_factory=dict)
    description: str | None = None

    def to_dict(self) -> dict:
        return {
            "type": self.type.value,
            "condition": self.condition,
            "parameters": dict(self.parameters),
            "description": self.description,
        }


@dataclass(frozen=True)
class SoftConstraint:
    type: ConstraintType
    weight: float
    condition: str | None = None
    parameters: dict = field(default_factory=dict)
    description: str | None = None

    @property
    def severity(self) -> str:
        return "medium" if self.weight >= 0.5 else "low"

    def to_dict(self) -> dict:
        return {
            "type": self.type.value,
            "condition": self.condition,
            "weight": self.weight,
            "parameters": dict(self.parameters),
            "description": self.description,
        }


@dataclass
class ConstraintValidationResult:
    is_valid: bool
    errors: list[str] = field(default_factory=list)
    hard_constraints: list[HardConstraint] = field(default_factory=list)
    soft_constraints: list[SoftConstraint] = field(default_factory=list)


def _parse_type(raw: Any, prefix: str, errors: list[str]) -> ConstraintType | None:
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        errors.append(f"{prefix}: constraint type is required")
        return None
    try:
        return ConstraintType(str(raw).strip())
    except ValueError:
        errors.append(f"{prefix}: unknown constraint type '{raw}'")
        return None


def _is_count(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def _is_bound(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
        and value >= 0
    )


def _is_str_list(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(item, str) for item in value)


def _is_count_list(value: Any) -> bool:
    return isinstance(value, list) and all(_is_count(item) for item in value)


# Keys the checkers read, with the shape they rely on.
PARAMETER_RULES: dict[str, tuple[Callable[[Any], bool], str]] = {
    "max_hours": (_is_count, "a non-negative integer"),
    "max_consecutive": (_is_count, "a non-negative integer"),
    "max_deviation": (_is_bound, "a non-negative number"),
    "faculty_id": (lambda value: isinstance(value, str), "a string"),
    "classroom_id": (lambda value: isinstance(value, str), "a string"),
    "avoid_days": (_is_str_list, "a list of day names"),
    "unavailable_days": (_is_str_list, "a list of day names"),
    "avoid_slots": (_is_count_list, "a list of slot indexes"),
    "unavailable_slots": (_is_count_list, "a list of slot indexes"),
}


def _parse_parameters(raw: Any, prefix: str, errors: list[str]) -> dict | None:
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        errors.append(f"{prefix}: parameters must be an object")
        return None
    parameters = dict(raw)
    valid = True
    for key, (check, expected) in PARAMETER_RULES.items():
        if key in parameters and not check(parameters[key]):
            errors.append(f"{prefix}: parameters.{key} must be {expected}, got {parameters[key]!r}")
            valid = False
    return parameters if valid else None


def _parse_weight(raw: Any, prefix: str, errors: list[str]) -> float | None:
    if raw is None:
        errors.append(f"{prefix}: weight is required")
        return None
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        errors.append(f"{prefix}: weight must be a number")
        return None
    weight = float(raw)
    if not math.isfinite(weight):
        errors.append(f"{prefix}: weight must be a finite number")
        return None
    if weight < 0 or weight > 1:
        errors.append(f"{prefix}: weight must be between 0 and 1, got {raw}")
        return None
    return weight


def validate_constraints(
    hard: Iterable[Mapping[str, Any]],
    soft: Iterable[Mapping[str, Any]],
) -> ConstraintValidationResult:
    """Check every declaration and collect all errors, not just the first.

    Typed constraints are only returned when the whole batch is valid.
    """
    errors: list[str] = []
    hard_constraints: list[HardConstraint] = []
    soft_constraints: list[SoftConstraint] = []

    for index, item in enumerate(hard):
        prefix = f"hard[{index}]"
        constraint_type = _parse_type(item.get("type"), prefix, errors)
        parameters = _parse_parameters(item.get("parameters"), prefix, errors)
        condition = item.get("condition")
        if not isinstance(condition, str) or not condition.strip():
            errors.append(f"{prefix}: condition is required for hard constraints")
            condition = None
        if constraint_type is None or parameters is None or condition is None:
            continue
        hard_constraints.append(
            HardConstraint(
                type=constraint_type,
                condition=condition.strip(),
                parameters=parameters,
                description=item.get("description"),
            )
        )

    for index, item in enumerate(soft):
        prefix = f"soft[{index}]"
        constraint_type = _parse_type(item.get("type"), prefix, errors)
        parameters = _parse_parameters(item.get("parameters"), prefix, errors)
        weight = _parse_weight(item.get("weight"), prefix, errors)
        condition = item.get("condition")
        if constraint_type is None or parameters is None or weight is None:
            continue
        soft_constraints.append(
            SoftConstraint(
                type=constraint_type,
                weight=weight,
                condition=condition if isinstance(condition, str) and condition.strip() else None,
                parameters=parameters,
                description=item.get("description"),
            )
        )

    if errors:
        return ConstraintValidationResult(is_valid=False, errors=errors)
    return ConstraintValidationResult(
        is_valid=True,
        hard_constraints=hard_constraints,
        soft_constraints=soft_constraints,
    )


def require_valid_constraints(
    hard: Iterable[Mapping[str, Any]],
    soft: Iterable[Mapping[str, Any]],
) -> ConstraintValidationResult:
    result = validate_constraints(hard, soft)
    if not result.is_valid:
        logger.info("CONSTRAINT VALIDATION FAILED | errors=%s", len(result.errors))
        raise ConstraintValidationError(result.errors)
    return result


def _out(assignments: Iterable[Assignment]) -> list[AssignmentOut]:
    return [AssignmentOut.from_assignment(item) for item in assignments]


def _faculty_days(schedule: Schedule) -> dict[tuple[str, str], list[Assignment]]:
    grouped: dict[tuple[str, str], list[Assignment]] = defaultdict(list)
    for assignment in schedule:
        if assignment.faculty_id:
            grouped[(assignment.faculty_id, assignment.slot.day)].append(assignment)
    for items in grouped.values():
        items.sort(key=lambda item: item.slot.slot_index)
    return grouped


def _room_violations(schedule: Schedule, catalog: ResourceCatalog) -> list[Violation]:
    violations = []
    for assignment in schedule:
        room = catalog.classroom_map.get(assignment.classroom_id or "")
        if room is None:
            continue
        needed = catalog.expected_students(assignment.subject_id)
        if needed > room.capacity:
            violations.append(
                Violation(
                    constraint_type=ConstraintType.room_capacity.value,
                    severity="high",
                    description=(
                        f"Classroom {room.name or room.id} holds {room.capacity} but "
                        f"{assignment.subject_id} expects {needed} students"
                    ),
                    slot_key=assignment.slot_key,
                    resource_id=room.id,
                    assignments=_out([assignment]),
                )
            )
        required = catalog.equipment_required(assignment.subject_id)
        if required and not room.has_equipment(required):
            missing = sorted(
                item for item in required if not room.has_equipment([item])
            )
            violations.append(
                Violation(
                    constraint_type=ConstraintType.equipment_requirements.value,
                    severity="high",
                    description=(
                        f"Classroom {room.name or room.id} lacks {', '.join(missing)} "
                        f"required by {assignment.subject_id}"
                    ),
                    slot_key=assignment.slot_key,
                    resource_id=room.id,
                    assignments=_out([assignment]),
                )
            )
    return violations


def _unavailability_violations(
    schedule: Schedule,
    constraint: HardConstraint,
    resource_attr: str,
    label: str,
) -> list[Violation]:
    params = constraint.parameters
    target = params.get(resource_attr)
    days = set(params.get("unavailable_days", ()))
    slots = set(params.get("unavailable_slots", ()))
    violations = []
    for assignment in schedule:
        resource_id = getattr(assignment, resource_attr)
        if not resource_id or (target and resource_id != target):
            continue
        if assignment.slot.day in days or assignment.slot.slot_index in slots:
            violations.append(
                Violation(
                    constraint_type=constraint.type.value,
                    severity="high",
                    description=f"{label} {resource_id} is unavailable at {assignment.slot_key}",
                    slot_key=assignment.slot_key,
                    resource_id=resource_id,
                    assignments=_out([assignment]),
                )
            )
    return violations


def _check_faculty_availability(schedule: Schedule, constraint: HardConstraint, catalog: ResourceCatalog):
    return _unavailability_violations(schedule, constraint, "faculty_id", "Faculty")


def _check_classroom_availability(schedule: Schedule, constraint: HardConstraint, catalog: ResourceCatalog):
    return _unavailability_violations(schedule, constraint, "classroom_id", "Classroom")


def _check_max_daily_hours(schedule: Schedule, constraint: SoftConstraint, catalog: ResourceCatalog):
    max_hours = constraint.parameters.get("max_hours", 8)
    target = constraint.parameters.get("faculty_id")
    violations = []
    for (faculty_id, day), items in _faculty_days(schedule).items():
        if target and faculty_id != target:
            continue
        if len(items) > max_hours:
            violations.append(
                Violation(
                    constraint_type=constraint.type.value,
                    severity=constraint.severity,
                    description=f"Faculty {faculty_id} teaches {len(items)} sessions on {day} (limit {max_hours})",
                    resource_id=faculty_id,
                    weight=constraint.weight,
                    assignments=_out(items),
                )
            )
    return violations


def _check_consecutive_classes(schedule: Schedule, constraint: SoftConstraint, catalog: ResourceCatalog):
    max_consecutive = constraint.parameters.get("max_consecutive", 3)
    target = constraint.parameters.get("faculty_id")
    violations = []
    for (faculty_id, day), items in _faculty_days(schedule).items():
        if target and faculty_id != target:
            continue
        runs: list[list[Assignment]] = []
        for item in items:
            if runs and item.slot.slot_index == runs[-1][-1].slot.slot_index + 1:
                runs[-1].append(item)
            elif runs and item.slot.slot_index == runs[-1][-1].slot.slot_index:
                # Double booking at one slot is a hard conflict, not a longer run.
                continue
            else:
                runs.append([item])
        for run in runs:
            if len(run) > max_consecutive:
                violations.append(
                    Violation(
                        constraint_type=constraint.type.value,
                        severity=constraint.severity,
                        description=(
                            f"Faculty {faculty_id} has {len(run)} back-to-back sessions on {day} "
                            f"starting at {run[0].slot_key} (limit {max_consecutive})"
                        ),
                        slot_key=run[0].slot_key,
                        resource_id=faculty_id,
                        weight=constraint.weight,
                        assignments=_out(run),
                    )
                )
    return violations


def _check_time_preferences(schedule: Schedule, constraint: SoftConstraint, catalog: ResourceCatalog):
    target = constraint.parameters.get("faculty_id")
    avoid_days = set(constraint.parameters.get("avoid_days", ()))
    avoid_slots = set(constraint.parameters.get("avoid_slots", ()))
    if not avoid_days and not avoid_slots:
        return []
    violations = []
    for assignment in schedule:
        if target and assignment.faculty_id != target:
            continue
        if assignment.slot.day in avoid_days or assignment.slot.slot_index in avoid_slots:
            violations.append(
                Violation(
                    constraint_type=constraint.type.value,
                    severity=constraint.severity,
                    description=f"{assignment.subject_id} is placed at avoided time {assignment.slot_key}",
                    slot_key=assignment.slot_key,
                    resource_id=assignment.faculty_id,
                    weight=constraint.weight,
                    assignments=_out([assignment]),
                )
            )
    return violations


def _check_workload_distribution(schedule: Schedule, constraint: SoftConstraint, catalog: ResourceCatalog):
    max_deviation = constraint.parameters.get("max_deviation", 2.0)
    workload = workload_from_faculty_ids(item.faculty_id for item in schedule)
    if len(workload) < 2:
        return []
    mean = sum(workload.values()) / len(workload)
    violations = []
    for faculty_id, count in sorted(workload.items()):
        if abs(count - mean) > max_deviation:
            violations.append(
                Violation(
                    constraint_type=constraint.type.value,
                    severity=constraint.severity,
                    description=(
                        f"Faculty {faculty_id} teaches {count} sessions, "
                        f"{abs(count - mean):.2f} away from the mean of {mean:.2f}"
                    ),
                    resource_id=faculty_id,
                    weight=constraint.weight,
                    assignments=[],
                )
            )
    return violations


HARD_CHECKERS: dict[ConstraintType, Callable[[Schedule, HardConstraint, ResourceCatalog], list[Violation]]] = {
    ConstraintType.faculty_availability: _check_faculty_availability,
    ConstraintType.classroom_availability: _check_classroom_availability,
}

SOFT_CHECKERS: dict[ConstraintType, Callable[[Schedule, SoftConstraint, ResourceCatalog], list[Violation]]] = {
    ConstraintType.max_daily_hours: _check_max_daily_hours,
    ConstraintType.consecutive_classes: _check_consecutive_classes,
    ConstraintType.time_preferences: _check_time_preferences,
    ConstraintType.workload_distribution: _check_workload_distribution,
}


def detect_violations(
    schedule: Schedule,
    constraints: Sequence[HardConstraint | SoftConstraint],
    catalog: ResourceCatalog,
) -> ViolationReport:
    hard_violations: list[Violation] = []
    conflicts = ConflictDetector(schedule).detect()
    for conflict in conflicts.conflicts:
        hard_violations.append(
            Violation(
                constraint_type=conflict.conflict_type,
                severity="high",
                description=conflict.description,
                slot_key=conflict.slot_key,
                resource_id=conflict.resource_id,
                assignments=conflict.assignments,
            )
        )
    hard_violations.extend(_room_violations(schedule, catalog))

    soft_violations: list[Violation] = []
    soft_penalty = 0.0
    for constraint in constraints:
        if isinstance(constraint, HardConstraint):
            hard_checker = HARD_CHECKERS.get(constraint.type)
            if hard_checker is not None:
                hard_violations.extend(hard_checker(schedule, constraint, catalog))
            continue
        checker = SOFT_CHECKERS.get(constraint.type)
        if checker is None:
            continue
        found = checker(schedule, constraint, catalog)
        soft_violations.extend(found)
        soft_penalty += constraint.weight * len(found)

    return ViolationReport(
        hard_violations=hard_violations,
        soft_violations=soft_violations,
        soft_penalty=round(soft_penalty, 4),
    )
