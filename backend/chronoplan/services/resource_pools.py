"""Resource snapshots and the per-run booking state of one candidate.

``ResourceCatalog`` is the read-only view of subjects, faculty and classrooms
fetched once before generation. ``ResourceState`` is the mutable scheduling
state of a single candidate run; every candidate gets its own instance and
nothing in it is shared across runs.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass, field

from chronoplan.services.slot_grid import TimeSlot
from chronoplan.services.workload import DEFAULT_MAX_WEEKLY_HOURS, resolve_max_weekly_hours

DEFAULT_EXPECTED_STUDENTS = 60


@dataclass(frozen=True)
class SubjectRecord:
    id: str
    code: str = ""
    name: str = ""
    teaching_hours: int | None = None
    credits: int | None = None
    faculty_id: str | None = None
    max_students: int | None = None
    equipment_required: tuple[str, ...] = ()


@dataclass(frozen=True)
class FacultyRecord:
    id: str
    name: str = ""
    max_weekly_hours: int | None = None
    subjects_assigned: tuple[str, ...] = ()

    def is_qualified_for(self, subject_id: str) -> bool:
        if not self.subjects_assigned:
            return True
        return subject_id in self.subjects_assigned


@dataclass(frozen=True)
class ClassroomRecord:
    id: str
    name: str = ""
    capacity: int = 0
    facilities: tuple[str, ...] = ()

    def has_equipment(self, required: Iterable[str]) -> bool:
        available = {item.strip().lower() for item in self.facilities}
        return all(item.strip().lower() in available for item in required)


class ResourceCatalog:
    def __init__(
        self,
        *,
        subjects: Iterable[SubjectRecord],
        faculty: Iterable[FacultyRecord],
        classrooms: Iterable[ClassroomRecord],
        default_max_weekly_hours: int = DEFAULT_MAX_WEEKLY_HOURS,
        default_expected_students: int = DEFAULT_EXPECTED_STUDENTS,
    ) -> None:
        self.subjects = {item.id: item for item in subjects}
        self.faculty = {item.id: item for item in faculty}
        # Classroom order is the deterministic room scan order of the Placer.
        self.classrooms: tuple[ClassroomRecord, ...] = tuple(classrooms)
        self.classroom_map = {item.id: item for item in self.classrooms}
        self.default_max_weekly_hours = default_max_weekly_hours
        self.default_expected_students = default_expected_students

    def max_weekly_hours(self, faculty_id: str) -> int:
        record = self.faculty.get(faculty_id)
        requested = record.max_weekly_hours if record is not None else None
        return resolve_max_weekly_hours(requested, default=self.default_max_weekly_hours)

    def expected_students(self, subject_id: str) -> int:
        subject = self.subjects.get(subject_id)
        if subject is None or subject.max_students is None:
            return self.default_expected_students
        return subject.max_students

    def equipment_required(self, subject_id: str) -> tuple[str, ...]:
        subject = self.subjects.get(subject_id)
        return subject.equipment_required if subject is not None else ()


@dataclass
class FacultyState:
    assigned_count: int = 0
    per_day_count: dict[str, int] = field(default_factory=dict)
    booked_slots: set[TimeSlot] = field(default_factory=set)


@dataclass
class ClassroomState:
    booked_slots: set[TimeSlot] = field(default_factory=set)


class ResourceState:
    def __init__(self) -> None:
        self.faculty: dict[str, FacultyState] = defaultdict(FacultyState)
        self.classrooms: dict[str, ClassroomState] = defaultdict(ClassroomState)

    def is_classroom_booked(self, classroom_id: str, slot: TimeSlot) -> bool:
        state = self.classrooms.get(classroom_id)
        return state is not None and slot in state.booked_slots

    def is_faculty_booked(self, faculty_id: str, slot: TimeSlot) -> bool:
        state = self.faculty.get(faculty_id)
        return state is not None and slot in state.booked_slots

    def assigned_count(self, faculty_id: str) -> int:
        state = self.faculty.get(faculty_id)
        return state.assigned_count if state is not None else 0

    def book_classroom(self, classroom_id: str, slot: TimeSlot) -> None:
        self.classrooms[classroom_id].booked_slots.add(slot)

    def book_faculty(self, faculty_id: str, slot: TimeSlot) -> None:
        state = self.faculty[faculty_id]
        state.booked_slots.add(slot)
        state.assigned_count += 1
        state.per_day_count[slot.day] = state.per_day_count.get(slot.day, 0) + 1

    def faculty_workload(self) -> dict[str, int]:
        return {
            faculty_id: state.assigned_count
            for faculty_id, state in self.faculty.items()
            if state.assigned_count > 0
        }

    def copy(self) -> "ResourceState":
        clone = ResourceState()
        for faculty_id, state in self.faculty.items():
            clone.faculty[faculty_id] = FacultyState(
                assigned_count=state.assigned_count,
                per_day_count=dict(state.per_day_count),
                booked_slots=set(state.booked_slots),
            )
        for classroom_id, state in self.classrooms.items():
            clone.classrooms[classroom_id] = ClassroomState(booked_slots=set(state.booked_slots))
        return clone
