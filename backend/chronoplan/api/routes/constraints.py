import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from chronoplan.api.deps import get_db
from chronoplan.core.exceptions import AppError, ResourceNotFoundError
from chronoplan.models.constraint_set import ConstraintSet
from chronoplan.schemas.constraints import (
    ConstraintSetCreate,
    ConstraintSetOut,
    ConstraintValidateRequest,
    ConstraintValidationOut,
)
from chronoplan.services.constraint_engine import require_valid_constraints, validate_constraints

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/validate", response_model=ConstraintValidationOut)
def validate(payload: ConstraintValidateRequest) -> ConstraintValidationOut:
    result = validate_constraints(
        [item.model_dump() for item in payload.hard_constraints],
        [item.model_dump() for item in payload.soft_constraints],
    )
    return ConstraintValidationOut(is_valid=result.is_valid, errors=result.errors)


@router.post("/sets", response_model=ConstraintSetOut, status_code=201)
def create_constraint_set(payload: ConstraintSetCreate, db: Session = Depends(get_db)) -> ConstraintSetOut:
    validated = require_valid_constraints(
        [item.model_dump() for item in payload.hard_constraints],
        [item.model_dump() for item in payload.soft_constraints],
    )
    record = ConstraintSet(
        name=payload.name,
        description=payload.description,
        department_id=payload.department,
        hard_constraints=[item.to_dict() for item in validated.hard_constraints],
        soft_constraints=[item.to_dict() for item in validated.soft_constraints],
    )
    db.add(record)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise AppError(
            f"Constraint set '{payload.name}' already exists",
            status_code=409,
            details={"name": payload.name, "department": payload.department},
        ) from exc
    db.refresh(record)
    logger.info(
        "CONSTRAINT SET CREATED | id=%s | name=%s | hard=%s | soft=%s",
        record.id,
        record.name,
        len(record.hard_constraints),
        len(record.soft_constraints),
    )
    return ConstraintSetOut.model_validate(record)


@router.get("/sets", response_model=list[ConstraintSetOut])
def list_constraint_sets(
    department: str | None = Query(default=None, max_length=36),
    db: Session = Depends(get_db),
) -> list[ConstraintSetOut]:
    query = select(ConstraintSet).order_by(ConstraintSet.name, ConstraintSet.id)
    if department:
        query = query.where(ConstraintSet.department_id == department)
    return [ConstraintSetOut.model_validate(item) for item in db.execute(query).scalars().all()]


@router.get("/sets/{constraint_set_id}", response_model=ConstraintSetOut)
def read_constraint_set(constraint_set_id: str, db: Session = Depends(get_db)) -> ConstraintSetOut:
    record = db.get(ConstraintSet, constraint_set_id)
    if record is None:
        raise ResourceNotFoundError("Constraint set", constraint_set_id)
    return ConstraintSetOut.model_validate(record)
