from __future__ import annotations

import logging
from dataclasses import dataclass, field

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from chronoplan.core.exceptions import ResourceNotFoundError
from chronoplan.models.classroom import Classroom
from chronoplan.models.department import Department
from chronoplan.models.faculty import Faculty
from chronoplan.models.subject import Subject
from chronoplan.models.timetable_version import SEEDING_STATUSES, TimetableVersion
from chronoplan.services.fixed_assignments import ExistingAssignment
from chronoplan.services.resource_pools import ClassroomRecord, FacultyRecord, SubjectRecord

logger = logging.getLogger(__name__)


@dataclass
class GenerationInputs:
    department: Department
    subjects: list[SubjectRecord] = field(default_factory=list)
    faculty: list[FacultyRecord] = field(default_factory=list)
    classrooms: list[ClassroomRecord] = field(default_factory=list)
    existing: list[ExistingAssignment] = field(default_factory=list)

    def counts(self) -> dict[str, int]:
        return {
            "subjects": len(self.subjects),
            "faculties": len(self.faculty),
            "classrooms": len(self.classrooms),
            "fixed_assignments": len(self.existing),
        }


def subject_record(subject: Subject) -> SubjectRecord:
    return SubjectRecord(
        id=subject.id,
        code=subject.code,
        name=subject.name,
        teaching_hours=subject.teaching_hours,
        credits=subject.credits,
        faculty_id=subject.faculty_id,
        max_students=subject.max_students,
        equipment_required=tuple(subject.equipment_required or ()),
    )


def faculty_record(member: Faculty) -> FacultyRecord:
    return FacultyRecord(
        id=member.id,
        name=member.name,
        max_weekly_hours=member.max_weekly_hours,
        subjects_assigned=tuple(member.subjects_assigned or ()),
    )


def classroom_record(room: Classroom) -> ClassroomRecord:
    return ClassroomRecord(
        id=room.id,
        name=room.name,
        capacity=room.capacity,
        facilities=tuple(room.facilities or ()),
    )


def get_department(db: Session, department_id: str) -> Department:
    department = db.get(Department, department_id)
    if department is None:
        raise ResourceNotFoundError("Department", department_id)
    return department


def load_classrooms(db: Session, department_id: str) -> list[ClassroomRecord]:
    # Department rooms and shared rooms (no department) are both eligible.
    rooms = (
        db.execute(
            select(Classroom)
            .where(or_(Classroom.department_id == department_id, Classroom.department_id.is_(None)))
            .order_by(Classroom.name, Classroom.id)
        )
        .scalars()
        .all()
    )
    return [classroom_record(room) for room in rooms]


def load_fixed_seed(
    db: Session,
    department_id: str,
    semester: int,
    academic_year: str,
) -> list[ExistingAssignment]:
    versions = (
        db.execute(
            select(TimetableVersion)
            .where(
                TimetableVersion.department_id == department_id,
                TimetableVersion.semester == semester,
                TimetableVersion.academic_year == academic_year,
                TimetableVersion.status.in_(SEEDING_STATUSES),
            )
            .order_by(TimetableVersion.created_at, TimetableVersion.id)
        )
        .scalars()
        .all()
    )
    existing: list[ExistingAssignment] = []
    for version in versions:
        for row in version.assignments or []:
            try:
                existing.append(
                    ExistingAssignment(
                        day=str(row["day"]),
                        slot_index=int(row["slot_index"]),
                        subject_id=str(row["subject_id"]),
                        faculty_id=row.get("faculty_id"),
                        classroom_id=row.get("classroom_id"),
                        label=row.get("label"),
                        source_id=version.id,
                    )
                )
            except (KeyError, TypeError, ValueError):
                logger.warning("SKIPPING MALFORMED STORED ASSIGNMENT | version=%s | row=%s", version.id, row)
    return existing


def load_generation_inputs(
    db: Session,
    department_id: str,
    semester: int,
    academic_year: str,
) -> GenerationInputs:
    """Read every upstream snapshot a generation run needs, once."""
    department = get_department(db, department_id)

    subjects = (
        db.execute(
            select(Subject)
            .where(Subject.department_id == department_id, Subject.semester == semester)
            .order_by(Subject.code, Subject.id)
        )
        .scalars()
        .all()
    )
    faculty = (
        db.execute(select(Faculty).where(Faculty.department_id == department_id).order_by(Faculty.name, Faculty.id))
        .scalars()
        .all()
    )

    return GenerationInputs(
        department=department,
        subjects=[subject_record(item) for item in subjects],
        faculty=[faculty_record(item) for item in faculty],
        classrooms=load_classrooms(db, department_id),
        existing=load_fixed_seed(db, department_id, semester, academic_year),
    )
