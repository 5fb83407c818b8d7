import logging
from time import perf_counter

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from chronoplan.api.deps import get_db
from chronoplan.core.config import Settings, get_settings
from chronoplan.core.exceptions import AppError
from chronoplan.models.generation_log import GenerationStatus
from chronoplan.schemas.generator import GenerateTimetableRequest, GenerateTimetableResponse
from chronoplan.services.audit import record_generation
from chronoplan.services.generation import generate_timetable

logger = logging.getLogger(__name__)

router = APIRouter()


def _record_failure(
    db: Session,
    payload: GenerateTimetableRequest,
    settings: Settings,
    *,
    elapsed_ms: int,
    error_message: str,
) -> None:
    try:
        record_generation(
            db,
            department_id=payload.department,
            semester=payload.semester,
            academic_year=payload.academic_year,
            solver=payload.strategy or settings.solver_strategy,
            status=GenerationStatus.failed,
            execution_ms=elapsed_ms,
            error_message=error_message,
        )
        db.commit()
    except Exception:
        db.rollback()
        logger.exception(
            "GENERATION LOG WRITE FAILED | department=%s | semester=%s",
            payload.department,
            payload.semester,
        )


@router.post("/timetable/generate", response_model=GenerateTimetableResponse)
def generate(
    payload: GenerateTimetableRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> GenerateTimetableResponse:
    started = perf_counter()
    logger.info(
        "TIMETABLE GENERATION START | department=%s | semester=%s | academic_year=%s | options=%s | strategy=%s",
        payload.department,
        payload.semester,
        payload.academic_year,
        payload.options,
        payload.strategy or settings.solver_strategy,
    )
    try:
        run = generate_timetable(db, payload, settings)
        elapsed_ms = int((perf_counter() - started) * 1000)
        log = record_generation(
            db,
            department_id=payload.department,
            semester=payload.semester,
            academic_year=payload.academic_year,
            solver=run.solver,
            status=run.status,
            execution_ms=elapsed_ms,
            option_count=run.option_count,
            best_fitness=run.best_fitness,
            unresolved_sessions=run.unresolved_sessions,
            fixed_collisions=run.fixed_collisions,
            input_counts=run.input_counts,
        )
        db.commit()
        run.response.generation_log_id = log.id

        logger.info(
            "TIMETABLE GENERATION COMPLETE | department=%s | semester=%s | status=%s | options=%s | best_fitness=%s | unresolved_sessions=%s | wall_ms=%s",
            payload.department,
            payload.semester,
            run.status.value,
            run.option_count,
            run.best_fitness,
            run.unresolved_sessions,
            elapsed_ms,
        )
        return run.response
    except AppError as exc:
        elapsed_ms = int((perf_counter() - started) * 1000)
        db.rollback()
        logger.warning(
            "TIMETABLE GENERATION REJECTED | department=%s | semester=%s | status_code=%s | reason=%s | wall_ms=%s",
            payload.department,
            payload.semester,
            exc.status_code,
            exc.message,
            elapsed_ms,
        )
        _record_failure(db, payload, settings, elapsed_ms=elapsed_ms, error_message=exc.message)
        raise
    except Exception as exc:
        elapsed_ms = int((perf_counter() - started) * 1000)
        db.rollback()
        logger.exception(
            "TIMETABLE GENERATION FAILED | department=%s | semester=%s | wall_ms=%s",
            payload.department,
            payload.semester,
            elapsed_ms,
        )
        _record_failure(db, payload, settings, elapsed_ms=elapsed_ms, error_message=type(exc).__name__)
        raise AppError("Internal error while generating timetable.", status_code=500) from exc
