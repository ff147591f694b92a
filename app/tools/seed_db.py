"""Seed the database with sample service tasks for local development.

Usage:
    python -m app.tools.seed_db
    python -m app.tools.seed_db --drop  # drop existing data first
    python -m app.tools.seed_db --verify-only
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.adapters.clock.system_clock import SystemClock
from app.adapters.identity.identity_client import IdentityServiceClient
from app.adapters.persistence.database import async_session_factory
from app.adapters.persistence.models import (
    AssignmentHistoryModel,
    AssignmentModel,
    ServiceTaskModel,
)
from app.adapters.persistence.repositories import (
    SqlAssignmentHistoryRepository,
    SqlAssignmentRepository,
    SqlTaskRepository,
    SqlUnitOfWork,
)
from app.application.use_cases.assign_task import AssignTaskUseCase
from app.application.use_cases.manage_tasks import CreateTaskUseCase, TaskInput
from app.application.use_cases.technician_tasks import UpdateTaskStatusUseCase

logging.basicConfig(level=logging.INFO, format="%(levelname)s | %(message)s")
logger = logging.getLogger(__name__)

SEED_USER = "dispatcher@fsm.com"

SAMPLE_TASKS: list[TaskInput] = [
    TaskInput(
        title="AC Unit Repair",
        description="Air conditioning unit not cooling properly. Warm air coming from vents.",
        client_address="123 Main Street, New York, NY 10001",
        priority="HIGH",
        estimated_duration=120,
    ),
    TaskInput(
        title="Plumbing Leak Fix",
        description="Kitchen sink leaking underneath. Needs urgent attention.",
        client_address="456 Oak Avenue, Brooklyn, NY 11201",
        priority="URGENT",
        estimated_duration=90,
    ),
    TaskInput(
        title="Electrical Panel Inspection",
        description="Annual electrical panel safety inspection and maintenance.",
        client_address="789 Elm Street, Queens, NY 11375",
        priority="MEDIUM",
        estimated_duration=60,
    ),
    TaskInput(
        title="HVAC System Maintenance",
        description="Routine HVAC system check-up and filter replacement.",
        client_address="321 Pine Road, Manhattan, NY 10014",
        priority="LOW",
        estimated_duration=90,
    ),
    TaskInput(
        title="Water Heater Installation",
        description="Replace old water heater with new energy-efficient model.",
        client_address="654 Maple Drive, Bronx, NY 10451",
        priority="MEDIUM",
        estimated_duration=180,
    ),
]

# (task index, technician id, start work?)
SAMPLE_ASSIGNMENTS: list[tuple[int, int, bool]] = [
    (0, 101, True),
    (1, 102, False),
    (2, 101, False),
    (4, 103, False),
]


async def _drop_data(session: AsyncSession) -> None:
    """Delete all data in correct order (respecting FK constraints)."""
    for model in [AssignmentHistoryModel, AssignmentModel, ServiceTaskModel]:
        await session.execute(delete(model))
    await session.commit()
    logger.info("Dropped all existing data")


async def seed(drop: bool = False) -> dict[str, int]:
    """Create the sample tasks and dispatch some of them. Returns counts."""
    counts = {"tasks": 0, "assignments": 0, "started": 0}
    clock = SystemClock()

    async with async_session_factory() as session:
        if drop:
            await _drop_data(session)

        tasks = SqlTaskRepository(session)
        assignments = SqlAssignmentRepository(session)
        history = SqlAssignmentHistoryRepository(session)
        uow = SqlUnitOfWork(session)

        existing = await session.scalar(select(func.count()).select_from(ServiceTaskModel))
        if existing:
            logger.info("%d tasks already present, skipping seed (use --drop to reset)", existing)
            return counts

        create = CreateTaskUseCase(tasks, uow, clock)
        created = []
        for data in SAMPLE_TASKS:
            created.append(await create.execute(data, created_by=SEED_USER))
            counts["tasks"] += 1

        # Sample technicians are not expected to exist in a local directory.
        assign = AssignTaskUseCase(
            tasks, assignments, history,
            IdentityServiceClient(enabled=False), uow, clock,
        )
        start = UpdateTaskStatusUseCase(tasks, assignments, history, uow, clock)
        for index, technician_id, started in SAMPLE_ASSIGNMENTS:
            task = created[index]
            await assign.execute(task.id, technician_id, assigned_by=SEED_USER)
            counts["assignments"] += 1
            if started:
                await start.execute(task.id, "IN_PROGRESS", technician_id)
                counts["started"] += 1

    logger.info(
        "Seed complete: %d tasks, %d assignments, %d started",
        counts["tasks"], counts["assignments"], counts["started"],
    )
    return counts


async def _verify_data() -> None:
    """Print sanity checks after seeding."""
    async with async_session_factory() as session:
        tasks = (await session.execute(select(ServiceTaskModel))).scalars().all()
        assignments = (await session.execute(select(AssignmentModel))).scalars().all()
        history = (await session.execute(select(AssignmentHistoryModel))).scalars().all()

        print(f"\n{'='*50}")
        print("SEED VERIFICATION")
        print(f"{'='*50}")
        print(f"Tasks:         {len(tasks)}")
        print(f"Assignments:   {len(assignments)}")
        print(f"History rows:  {len(history)}")

        statuses: dict[str, int] = {}
        for t in tasks:
            statuses[t.status] = statuses.get(t.status, 0) + 1
        print(f"Status distribution: {statuses}")

        active: dict[int, int] = {}
        for a in assignments:
            if a.status == "ACTIVE":
                active[a.technician_id] = active.get(a.technician_id, 0) + 1
        print(f"Active assignments per technician: {active}")
        print(f"{'='*50}\n")


def main():
    parser = argparse.ArgumentParser(description="Seed the FSM task database with sample data")
    parser.add_argument(
        "--drop", action="store_true",
        help="Drop existing data before seeding",
    )
    parser.add_argument(
        "--verify-only", action="store_true",
        help="Only run verification, don't seed",
    )
    args = parser.parse_args()

    async def run_all():
        if not args.verify_only:
            await seed(drop=args.drop)
        await _verify_data()

    try:
        asyncio.run(run_all())
    except Exception:
        logger.exception("Seeding failed")
        sys.exit(1)


if __name__ == "__main__":
    main()
