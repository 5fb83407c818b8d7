import uuid
from datetime import datetime

from sqlalchemy import DateTime, JSON, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from chronoplan.db.base import Base


class ConstraintSet(Base):
    __tablename__ = "constraint_sets"
    __table_args__ = (UniqueConstraint("name", "department_id", name="uq_constraint_sets_name_department"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)
    department_id: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)
    hard_constraints: Mapped[list[dict]] = mapped_column(JSON, nullable=False, default=list)
    soft_constraints: Mapped[list[dict]] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
