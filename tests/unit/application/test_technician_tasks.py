"""Tests for the technician-side use cases."""

from __future__ import annotations

import pytest

from app.domain.errors import InvalidStatusTransitionError, TaskNotFoundError, ValidationError
from app.domain.value_objects.enums import AssignmentStatus, HistoryAction, TaskStatus


async def _assigned(dispatch, technician_id=101, title="Repair HVAC System", priority="HIGH"):
    task = await dispatch.new_task(title, priority)
    await dispatch.assign_uc().execute(task.id, technician_id, "dispatcher")
    return task


# ─── update_task_status ─────────────────────────────────────────────


@pytest.mark.asyncio
async def test_start_work(dispatch):
    t1 = await _assigned(dispatch)
    dispatch.clock.advance(hours=1)

    task = await dispatch.status_uc().execute(t1.id, "in_progress", 101)

    assert task.status == TaskStatus.IN_PROGRESS
    assert task.started_at == dispatch.clock.now()
    stored = dispatch.stored_task(t1.id)
    assert stored.status == TaskStatus.IN_PROGRESS

    history = await dispatch.history_uc().execute(t1.id)
    assert history[0].action == HistoryAction.STATUS_CHANGED
    assert history[0].action_by == "technician:101"
    assert history[0].reason == "ASSIGNED -> IN_PROGRESS"


@pytest.mark.asyncio
async def test_start_by_other_technician_rejected(dispatch):
    t1 = await _assigned(dispatch)
    with pytest.raises(InvalidStatusTransitionError, match="not assigned"):
        await dispatch.status_uc().execute(t1.id, "IN_PROGRESS", 102)
    assert dispatch.task_status(t1.id) == TaskStatus.ASSIGNED


@pytest.mark.asyncio
async def test_previous_holder_cannot_start_after_reassign(dispatch):
    t1 = await _assigned(dispatch)
    await dispatch.reassign_uc().execute(t1.id, 102, "rebalancing", "dispatcher")

    with pytest.raises(InvalidStatusTransitionError):
        await dispatch.status_uc().execute(t1.id, "IN_PROGRESS", 101)


@pytest.mark.asyncio
@pytest.mark.parametrize("target", ["COMPLETED", "ASSIGNED", "UNASSIGNED", "PAUSED"])
async def test_only_start_transition_allowed(dispatch, target):
    t1 = await _assigned(dispatch)
    with pytest.raises(InvalidStatusTransitionError):
        await dispatch.status_uc().execute(t1.id, target, 101)


@pytest.mark.asyncio
async def test_start_twice_rejected(dispatch):
    t1 = await _assigned(dispatch)
    await dispatch.status_uc().execute(t1.id, "IN_PROGRESS", 101)
    with pytest.raises(InvalidStatusTransitionError):
        await dispatch.status_uc().execute(t1.id, "IN_PROGRESS", 101)


@pytest.mark.asyncio
async def test_start_unassigned_task_rejected(dispatch):
    t1 = await dispatch.new_task()
    with pytest.raises(InvalidStatusTransitionError):
        await dispatch.status_uc().execute(t1.id, "IN_PROGRESS", 101)


@pytest.mark.asyncio
async def test_start_unknown_task(dispatch):
    with pytest.raises(TaskNotFoundError):
        await dispatch.status_uc().execute(77, "IN_PROGRESS", 101)


# ─── complete_task ──────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_complete_work(dispatch):
    t1 = await _assigned(dispatch)
    await dispatch.status_uc().execute(t1.id, "IN_PROGRESS", 101)
    dispatch.clock.advance(hours=2)

    task = await dispatch.complete_uc().execute(t1.id, 101, "  Replaced compressor ")

    assert task.status == TaskStatus.COMPLETED
    assert task.completed_at == dispatch.clock.now()
    assert task.work_summary == "Replaced compressor"
    assert dispatch.active_assignments(t1.id) == []
    assert dispatch.store.assignments[1].status == AssignmentStatus.COMPLETED

    history = await dispatch.history_uc().execute(t1.id)
    assert [h.action for h in history] == [
        HistoryAction.COMPLETED,
        HistoryAction.STATUS_CHANGED,
        HistoryAction.CREATED,
    ]
    assert await dispatch.assignments.count_active_for_technician(101) == 0


@pytest.mark.asyncio
async def test_complete_requires_in_progress(dispatch):
    t1 = await _assigned(dispatch)
    with pytest.raises(InvalidStatusTransitionError, match="must be IN_PROGRESS"):
        await dispatch.complete_uc().execute(t1.id, 101, "done")


@pytest.mark.asyncio
async def test_complete_requires_summary(dispatch):
    t1 = await _assigned(dispatch)
    await dispatch.status_uc().execute(t1.id, "IN_PROGRESS", 101)
    with pytest.raises(ValidationError):
        await dispatch.complete_uc().execute(t1.id, 101, "   ")
    assert dispatch.task_status(t1.id) == TaskStatus.IN_PROGRESS


@pytest.mark.asyncio
async def test_complete_by_other_technician_rejected(dispatch):
    t1 = await _assigned(dispatch)
    await dispatch.status_uc().execute(t1.id, "IN_PROGRESS", 101)
    with pytest.raises(InvalidStatusTransitionError):
        await dispatch.complete_uc().execute(t1.id, 102, "done")


# ─── get_technician_tasks ───────────────────────────────────────────


@pytest.mark.asyncio
async def test_technician_sees_own_tasks_in_priority_order(dispatch):
    low = await _assigned(dispatch, title="Low job", priority="LOW")
    dispatch.clock.advance(minutes=5)
    high_old = await _assigned(dispatch, title="High job old", priority="HIGH")
    dispatch.clock.advance(minutes=5)
    high_new = await _assigned(dispatch, title="High job new", priority="HIGH")
    await _assigned(dispatch, technician_id=102, title="Someone else's job")

    entries = await dispatch.technician_tasks_uc().execute(101)
    assert [e.task.id for e in entries] == [high_old.id, high_new.id, low.id]


@pytest.mark.asyncio
async def test_completed_yesterday_hidden_but_old_open_work_shown(dispatch):
    done = await _assigned(dispatch, title="Finished job")
    await dispatch.status_uc().execute(done.id, "IN_PROGRESS", 101)
    await dispatch.complete_uc().execute(done.id, 101, "done")
    open_task = await _assigned(dispatch, title="Still open job")

    dispatch.clock.advance(days=1)
    entries = await dispatch.technician_tasks_uc().execute(101)
    assert [e.task.id for e in entries] == [open_task.id]


@pytest.mark.asyncio
async def test_completed_today_visible_with_filter(dispatch):
    done = await _assigned(dispatch, title="Finished job")
    await dispatch.status_uc().execute(done.id, "IN_PROGRESS", 101)
    await dispatch.complete_uc().execute(done.id, 101, "done")
    await _assigned(dispatch, title="Open job")

    entries = await dispatch.technician_tasks_uc().execute(101, "completed")
    assert [e.task.id for e in entries] == [done.id]


@pytest.mark.asyncio
async def test_reassigned_away_task_stays_listed_for_previous_holder(dispatch):
    first_assigned = dispatch.clock.now()
    t1 = await _assigned(dispatch)
    dispatch.clock.advance(hours=1)
    await dispatch.reassign_uc().execute(t1.id, 102, "101 on leave", "dispatcher")

    previous = await dispatch.technician_tasks_uc().execute(101)
    assert [e.task.id for e in previous] == [t1.id]
    assert previous[0].task.assigned_technician_id == 102
    assert previous[0].assigned_at == first_assigned

    current = await dispatch.technician_tasks_uc().execute(102)
    assert [e.task.id for e in current] == [t1.id]
    assert current[0].assigned_at == dispatch.clock.now()


@pytest.mark.asyncio
async def test_previous_holder_filters_and_completion_cutoff_apply(dispatch):
    t1 = await _assigned(dispatch)
    await dispatch.reassign_uc().execute(t1.id, 102, "101 on leave", "dispatcher")
    await dispatch.status_uc().execute(t1.id, "IN_PROGRESS", 102)
    await dispatch.complete_uc().execute(t1.id, 102, "done")

    entries = await dispatch.technician_tasks_uc().execute(101, "completed")
    assert [e.task.id for e in entries] == [t1.id]
    assert await dispatch.technician_tasks_uc().execute(101, "assigned") == []

    dispatch.clock.advance(days=1)
    assert await dispatch.technician_tasks_uc().execute(101) == []
