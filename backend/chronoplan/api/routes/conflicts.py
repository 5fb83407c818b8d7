from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from chronoplan.api.deps import get_db
from chronoplan.models.classroom import Classroom
from chronoplan.models.faculty import Faculty
from chronoplan.schemas.conflict import ConflictDetectRequest, ConflictReport
from chronoplan.services.conflict_service import ConflictDetector

router = APIRouter()


@router.post("/detect", response_model=ConflictReport)
def detect_conflicts(payload: ConflictDetectRequest, db: Session = Depends(get_db)) -> ConflictReport:
    schedule = payload.to_schedule()

    # Names only make descriptions readable; unknown ids fall back to the id itself.
    faculty_ids = {item.faculty_id for item in schedule if item.faculty_id}
    room_ids = {item.classroom_id for item in schedule if item.classroom_id}
    faculty_names = dict(
        db.execute(select(Faculty.id, Faculty.name).where(Faculty.id.in_(faculty_ids))).tuples().all()
    ) if faculty_ids else {}
    room_names = dict(
        db.execute(select(Classroom.id, Classroom.name).where(Classroom.id.in_(room_ids))).tuples().all()
    ) if room_ids else {}

    detector = ConflictDetector(schedule, faculty_names=faculty_names, room_names=room_names)
    if payload.include_resolutions:
        return detector.detect_with_resolutions()
    return detector.detect()
