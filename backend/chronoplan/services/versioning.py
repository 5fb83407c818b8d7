from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from chronoplan.core.exceptions import ResourceNotFoundError
from chronoplan.models.timetable_version import TimetableStatus, TimetableVersion
from chronoplan.services.schedule import Schedule

logger = logging.getLogger(__name__)


def next_version_label(db: Session, department_id: str) -> str:
    labels = (
        db.execute(select(TimetableVersion.label).where(TimetableVersion.department_id == department_id))
        .scalars()
        .all()
    )
    numeric = []
    for label in labels:
        if not label.startswith("v"):
            continue
        suffix = label[1:]
        if suffix.isdigit():
            numeric.append(int(suffix))
    next_index = (max(numeric) + 1) if numeric else 1
    return f"v{next_index}"


def get_version(db: Session, version_id: str) -> TimetableVersion:
    version = db.get(TimetableVersion, version_id)
    if version is None:
        raise ResourceNotFoundError("Timetable version", version_id)
    return version


def save_version(
    db: Session,
    *,
    schedule: Schedule,
    department_id: str,
    semester: int,
    academic_year: str,
    label: str | None = None,
    parent_id: str | None = None,
    status: TimetableStatus = TimetableStatus.draft,
    summary: dict | None = None,
    fitness_score: float | None = None,
) -> TimetableVersion:
    """Store a schedule as a new version row; earlier versions are never rewritten."""
    if parent_id is not None:
        get_version(db, parent_id)

    version = TimetableVersion(
        label=label or next_version_label(db, department_id),
        department_id=department_id,
        semester=semester,
        academic_year=academic_year,
        status=status,
        parent_id=parent_id,
        assignments=schedule.to_dicts(),
        summary=summary or {},
        fitness_score=fitness_score,
    )
    db.add(version)
    db.flush()
    logger.info(
        "TIMETABLE VERSION SAVED | version_id=%s | label=%s | parent_id=%s | assignments=%s",
        version.id,
        version.label,
        parent_id,
        len(schedule),
    )
    return version


def version_lineage(db: Session, version_id: str) -> list[TimetableVersion]:
    """Return the version followed by its ancestors, newest first."""
    lineage: list[TimetableVersion] = []
    seen: set[str] = set()
    current: TimetableVersion | None = get_version(db, version_id)
    while current is not None and current.id not in seen:
        seen.add(current.id)
        lineage.append(current)
        current = db.get(TimetableVersion, current.parent_id) if current.parent_id else None
    return lineage


def update_version_status(db: Session, version_id: str, status: TimetableStatus) -> TimetableVersion:
    version = get_version(db, version_id)
    previous = version.status
    version.status = status
    db.flush()
    logger.info(
        "TIMETABLE VERSION STATUS | version_id=%s | from=%s | to=%s",
        version.id,
        previous.value if previous is not None else None,
        status.value,
    )
    return version
