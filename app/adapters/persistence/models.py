"""SQLAlchemy ORM models — service tasks, assignments and their audit trail."""

from datetime import datetime

from sqlalchemy import (
    BigInteger,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.adapters.persistence.database import Base

# SQLite only autoincrements INTEGER primary keys.
_Id = BigInteger().with_variant(Integer, "sqlite")


class ServiceTaskModel(Base):
    __tablename__ = "service_tasks"

    id: Mapped[int] = mapped_column(_Id, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    client_address: Mapped[str] = mapped_column(String(500), nullable=False)
    priority: Mapped[str] = mapped_column(String(20), nullable=False)
    estimated_duration: Mapped[int | None] = mapped_column(Integer, nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="UNASSIGNED")
    assigned_technician_id: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    created_by: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )
    started_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    work_summary: Mapped[str | None] = mapped_column(Text, nullable=True)

    assignments: Mapped[list["AssignmentModel"]] = relationship(back_populates="task")

    __table_args__ = (
        Index("idx_service_tasks_status", "status"),
        Index("idx_service_tasks_priority", "priority"),
        Index("idx_service_tasks_created_at", "created_at"),
        Index("idx_service_tasks_created_by", "created_by"),
        Index("idx_service_tasks_started_at", "started_at"),
        Index("idx_service_tasks_status_priority", "status", "priority"),
        Index("idx_service_tasks_assigned_technician", "assigned_technician_id"),
    )


class AssignmentModel(Base):
    __tablename__ = "assignments"

    id: Mapped[int] = mapped_column(_Id, primary_key=True, autoincrement=True)
    task_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("service_tasks.id", ondelete="CASCADE"), nullable=False
    )
    technician_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    assigned_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )
    assigned_by: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="ACTIVE")
    reason: Mapped[str | None] = mapped_column(String(500), nullable=True)

    task: Mapped["ServiceTaskModel"] = relationship(back_populates="assignments")

    __table_args__ = (
        Index("idx_assignments_task_status", "task_id", "status"),
        Index("idx_assignments_technician_status", "technician_id", "status"),
        # At most one ACTIVE assignment per task
        Index(
            "uq_assignments_one_active_per_task",
            "task_id",
            unique=True,
            postgresql_where=text("status = 'ACTIVE'"),
            sqlite_where=text("status = 'ACTIVE'"),
        ),
    )


class AssignmentHistoryModel(Base):
    __tablename__ = "assignment_history"

    id: Mapped[int] = mapped_column(_Id, primary_key=True, autoincrement=True)
    assignment_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("assignments.id"), nullable=False
    )
    task_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("service_tasks.id"), nullable=False
    )
    technician_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    previous_technician_id: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    action: Mapped[str] = mapped_column(String(20), nullable=False)
    action_by: Mapped[str] = mapped_column(String(255), nullable=False)
    action_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )
    reason: Mapped[str | None] = mapped_column(String(500), nullable=True)

    __table_args__ = (
        Index("idx_assignment_history_task", "task_id"),
        Index("idx_assignment_history_technician", "technician_id"),
    )
