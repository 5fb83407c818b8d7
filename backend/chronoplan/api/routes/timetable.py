from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.orm import Session

from chronoplan.api.deps import get_db
from chronoplan.core.config import Settings, get_settings
from chronoplan.models.generation_log import GenerationLog
from chronoplan.schemas.generator import GenerationLogOut, TimetableReportOut
from chronoplan.schemas.timetable import (
    TimetableLineageOut,
    TimetableVersionCreate,
    TimetableVersionOut,
    TimetableVersionStatusUpdate,
)
from chronoplan.services.generation import version_report
from chronoplan.services.versioning import get_version, save_version, update_version_status, version_lineage

router = APIRouter()


@router.get("/generation-logs", response_model=list[GenerationLogOut])
def list_generation_logs(
    department: str | None = Query(default=None, max_length=36),
    limit: int = Query(default=50, ge=1, le=500),
    db: Session = Depends(get_db),
) -> list[GenerationLogOut]:
    query = select(GenerationLog).order_by(GenerationLog.created_at.desc(), GenerationLog.id)
    if department:
        query = query.where(GenerationLog.department_id == department)
    logs = db.execute(query.limit(limit)).scalars().all()
    return [GenerationLogOut.model_validate(item) for item in logs]


@router.post("/versions", response_model=TimetableVersionOut, status_code=201)
def create_version(payload: TimetableVersionCreate, db: Session = Depends(get_db)) -> TimetableVersionOut:
    version = save_version(
        db,
        schedule=payload.to_schedule(),
        department_id=payload.department,
        semester=payload.semester,
        academic_year=payload.academic_year,
        label=payload.label,
        parent_id=payload.parent_id,
        status=payload.status,
        summary=payload.summary,
    )
    db.commit()
    db.refresh(version)
    return TimetableVersionOut.model_validate(version)


@router.get("/versions/{version_id}", response_model=TimetableVersionOut)
def read_version(version_id: str, db: Session = Depends(get_db)) -> TimetableVersionOut:
    return TimetableVersionOut.model_validate(get_version(db, version_id))


@router.get("/versions/{version_id}/lineage", response_model=TimetableLineageOut)
def read_version_lineage(version_id: str, db: Session = Depends(get_db)) -> TimetableLineageOut:
    lineage = version_lineage(db, version_id)
    return TimetableLineageOut(
        version_id=version_id,
        lineage=[TimetableVersionOut.model_validate(item) for item in lineage],
    )


@router.patch("/versions/{version_id}/status", response_model=TimetableVersionOut)
def change_version_status(
    version_id: str,
    payload: TimetableVersionStatusUpdate,
    db: Session = Depends(get_db),
) -> TimetableVersionOut:
    version = update_version_status(db, version_id, payload.status)
    db.commit()
    db.refresh(version)
    return TimetableVersionOut.model_validate(version)


@router.get("/versions/{version_id}/report", response_model=TimetableReportOut)
def read_version_report(
    version_id: str,
    constraint_set_id: str | None = Query(default=None, alias="constraintSetId", max_length=36),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> TimetableReportOut:
    version = get_version(db, version_id)
    return version_report(db, version, settings, constraint_set_id)
