from __future__ import annotations

from sqlalchemy.orm import Session

from chronoplan.models.generation_log import GenerationLog, GenerationStatus


def record_generation(
    db: Session,
    *,
    department_id: str,
    semester: int,
    academic_year: str,
    solver: str,
    status: GenerationStatus,
    execution_ms: int,
    option_count: int = 0,
    best_fitness: float | None = None,
    unresolved_sessions: int = 0,
    fixed_collisions: int = 0,
    input_counts: dict | None = None,
    error_message: str | None = None,
) -> GenerationLog:
    record = GenerationLog(
        department_id=department_id,
        semester=semester,
        academic_year=academic_year,
        solver=solver,
        status=status,
        execution_ms=execution_ms,
        option_count=option_count,
        best_fitness=best_fitness,
        unresolved_sessions=unresolved_sessions,
        fixed_collisions=fixed_collisions,
        input_counts=input_counts or {},
        error_message=error_message[:500] if error_message else None,
    )
    db.add(record)
    # Flush so the caller can hand the id back before committing.
    db.flush()
    return record
