from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, Enum as SAEnum, Float, Integer, JSON, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from chronoplan.db.base import Base


class GenerationStatus(str, Enum):
    success = "success"
    partial_success = "partial_success"
    failed = "failed"
    timeout = "timeout"


class GenerationLog(Base):
    __tablename__ = "generation_logs"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    department_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    semester: Mapped[int] = mapped_column(Integer, nullable=False)
    academic_year: Mapped[str] = mapped_column(String(20), nullable=False)
    solver: Mapped[str] = mapped_column(String(40), nullable=False)
    status: Mapped[GenerationStatus] = mapped_column(
        SAEnum(GenerationStatus, name="generation_status"),
        nullable=False,
        index=True,
    )
    execution_ms: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    option_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    best_fitness: Mapped[float | None] = mapped_column(Float, nullable=True)
    unresolved_sessions: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    fixed_collisions: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    input_counts: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    error_message: Mapped[str | None] = mapped_column(String(500), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
