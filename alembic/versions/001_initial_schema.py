"""Initial schema — service tasks, assignments, assignment history.

Revision ID: 001
Revises: None
Create Date: 2026-10-16
"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Service tasks
    op.create_table(
        "service_tasks",
        sa.Column("id", sa.BigInteger, primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("client_address", sa.String(500), nullable=False),
        sa.Column("priority", sa.String(20), nullable=False),
        sa.Column("estimated_duration", sa.Integer, nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="UNASSIGNED"),
        sa.Column("assigned_technician_id", sa.BigInteger, nullable=True),
        sa.Column("created_by", sa.String(255), nullable=True),
        sa.Column("created_at", sa.DateTime, nullable=False, server_default=sa.func.now()),
        sa.Column("started_at", sa.DateTime, nullable=True),
        sa.Column("completed_at", sa.DateTime, nullable=True),
        sa.Column("work_summary", sa.Text, nullable=True),
        sa.CheckConstraint("LENGTH(TRIM(title)) >= 3", name="chk_title_not_empty"),
        sa.CheckConstraint(
            "LENGTH(TRIM(client_address)) > 0", name="chk_client_address_not_empty"
        ),
        sa.CheckConstraint(
            "priority IN ('LOW', 'MEDIUM', 'HIGH', 'URGENT')", name="chk_priority_valid"
        ),
        sa.CheckConstraint(
            "status IN ('UNASSIGNED', 'ASSIGNED', 'IN_PROGRESS', 'COMPLETED')",
            name="chk_status_valid",
        ),
        sa.CheckConstraint(
            "estimated_duration IS NULL OR estimated_duration > 0",
            name="chk_estimated_duration_positive",
        ),
    )
    op.create_index("idx_service_tasks_status", "service_tasks", ["status"])
    op.create_index("idx_service_tasks_priority", "service_tasks", ["priority"])
    op.create_index("idx_service_tasks_created_at", "service_tasks", ["created_at"])
    op.create_index("idx_service_tasks_created_by", "service_tasks", ["created_by"])
    op.create_index("idx_service_tasks_started_at", "service_tasks", ["started_at"])
    op.create_index("idx_service_tasks_status_priority", "service_tasks", ["status", "priority"])
    op.create_index(
        "idx_service_tasks_assigned_technician", "service_tasks", ["assigned_technician_id"]
    )

    # Assignments
    op.create_table(
        "assignments",
        sa.Column("id", sa.BigInteger, primary_key=True, autoincrement=True),
        sa.Column(
            "task_id",
            sa.BigInteger,
            sa.ForeignKey("service_tasks.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("technician_id", sa.BigInteger, nullable=False),
        sa.Column("assigned_at", sa.DateTime, nullable=False, server_default=sa.func.now()),
        sa.Column("assigned_by", sa.String(255), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="ACTIVE"),
        sa.Column("reason", sa.String(500), nullable=True),
        sa.CheckConstraint(
            "status IN ('ACTIVE', 'COMPLETED', 'REASSIGNED', 'CANCELLED')",
            name="chk_assignment_status_valid",
        ),
    )
    op.create_index("idx_assignments_task_status", "assignments", ["task_id", "status"])
    op.create_index(
        "idx_assignments_technician_status", "assignments", ["technician_id", "status"]
    )
    # At most one ACTIVE assignment per task
    op.create_index(
        "uq_assignments_one_active_per_task",
        "assignments",
        ["task_id"],
        unique=True,
        postgresql_where=sa.text("status = 'ACTIVE'"),
    )

    # Assignment history (append-only)
    op.create_table(
        "assignment_history",
        sa.Column("id", sa.BigInteger, primary_key=True, autoincrement=True),
        sa.Column(
            "assignment_id", sa.BigInteger, sa.ForeignKey("assignments.id"), nullable=False
        ),
        sa.Column("task_id", sa.BigInteger, sa.ForeignKey("service_tasks.id"), nullable=False),
        sa.Column("technician_id", sa.BigInteger, nullable=False),
        sa.Column("previous_technician_id", sa.BigInteger, nullable=True),
        sa.Column("action", sa.String(20), nullable=False),
        sa.Column("action_by", sa.String(255), nullable=False),
        sa.Column("action_at", sa.DateTime, nullable=False, server_default=sa.func.now()),
        sa.Column("reason", sa.String(500), nullable=True),
    )
    op.create_index("idx_assignment_history_task", "assignment_history", ["task_id"])
    op.create_index(
        "idx_assignment_history_technician", "assignment_history", ["technician_id"]
    )


def downgrade() -> None:
    op.drop_table("assignment_history")
    op.drop_table("assignments")
    op.drop_table("service_tasks")
