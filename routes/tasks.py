# routes/tasks.py
from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session, select, func
from sqlalchemy.orm import selectinload
from typing import Optional
import logging
import uuid

from core.database import get_session, transaction
from core.exceptions import InvalidInputError
from core.security import get_current_user_id
from models.models import Task, TaskStatus, utcnow
from schemas import (
    MessageResponse, Pagination, ProjectSummaryView, TaskCreate, TaskList, TaskRead,
    TaskUpdate, normalize_page
)
from services.lookups import get_active_member, get_active_task, get_owned_project
from services.summary import SummaryComposer
from services.time_ledger import TimeLedger
from services.variance import task_view

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Tasks"])


# ================================================================
#  ✅ Helper: load a task the caller may act on
# ================================================================
def _get_owned_task(session: Session, task_id: uuid.UUID, user_id: uuid.UUID) -> Task:
    task = get_active_task(session, task_id)
    get_owned_project(session, task.project_id, user_id)
    return task


# ================================================================
#  ✅ Create Task under a Project
# ================================================================
@router.post(
    "/projects/{project_id}/tasks",
    response_model=TaskRead,
    status_code=status.HTTP_201_CREATED,
)
def create_task(
    project_id: uuid.UUID,
    payload: TaskCreate,
    session: Session = Depends(get_session),
    user_id: uuid.UUID = Depends(get_current_user_id),
):
    get_owned_project(session, project_id, user_id)
    if payload.assignee_id:
        get_active_member(session, payload.assignee_id)

    task = Task(
        project_id=project_id,
        assignee_id=payload.assignee_id,
        name=payload.name,
        description=payload.description,
        planned_hours=payload.planned_hours,
        status=payload.status.value,
        start_date=payload.start_date,
        end_date=payload.end_date,
    )
    with transaction(session):
        session.add(task)
    session.refresh(task)

    logger.info("Task %s created in project %s", task.id, project_id)
    return task_view(task)


# ================================================================
#  ✅ List Tasks of a Project
# ================================================================
@router.get("/projects/{project_id}/tasks", response_model=TaskList)
def list_tasks(
    project_id: uuid.UUID,
    status_filter: Optional[TaskStatus] = Query(None, alias="status"),
    page: Optional[int] = None,
    per_page: Optional[int] = None,
    session: Session = Depends(get_session),
    user_id: uuid.UUID = Depends(get_current_user_id),
):
    get_owned_project(session, project_id, user_id)
    page, per_page = normalize_page(page, per_page)

    query = select(Task).where(Task.project_id == project_id, Task.deleted_at.is_(None))
    if status_filter:
        query = query.where(Task.status == status_filter.value)

    total = session.exec(select(func.count()).select_from(query.subquery())).one()
    tasks = session.exec(
        query.options(selectinload(Task.assignee))
        .order_by(Task.created_at, Task.id)
        .offset((page - 1) * per_page)
        .limit(per_page)
    ).all()

    return TaskList(
        tasks=[task_view(t) for t in tasks],
        pagination=Pagination.build(page, per_page, total),
    )


# ================================================================
#  ✅ Project Summary (planned vs. actual hours)
# ================================================================
@router.get("/projects/{project_id}/summary", response_model=ProjectSummaryView)
def get_project_summary(
    project_id: uuid.UUID,
    session: Session = Depends(get_session),
    user_id: uuid.UUID = Depends(get_current_user_id),
):
    get_owned_project(session, project_id, user_id)
    return SummaryComposer(session).project_summary(project_id)


# ================================================================
#  ✅ Get / Update / Delete a Task
# ================================================================
@router.get("/tasks/{task_id}", response_model=TaskRead)
def get_task(
    task_id: uuid.UUID,
    session: Session = Depends(get_session),
    user_id: uuid.UUID = Depends(get_current_user_id),
):
    return task_view(_get_owned_task(session, task_id, user_id))


@router.put("/tasks/{task_id}", response_model=TaskRead)
def update_task(
    task_id: uuid.UUID,
    payload: TaskUpdate,
    session: Session = Depends(get_session),
    user_id: uuid.UUID = Depends(get_current_user_id),
):
    task = _get_owned_task(session, task_id, user_id)

    changes = payload.model_dump(exclude_unset=True)
    if changes.get("status") is not None:
        changes["status"] = changes["status"].value
    for field in ("name", "planned_hours", "status"):
        if field in changes and changes[field] is None:
            changes.pop(field)
    if changes.get("assignee_id"):
        get_active_member(session, changes["assignee_id"])

    start = changes.get("start_date", task.start_date)
    end = changes.get("end_date", task.end_date)
    if start and end and end < start:
        raise InvalidInputError.for_field("end_date", "end_date must not be before start_date")

    with transaction(session):
        for field, value in changes.items():
            setattr(task, field, value)
        task.updated_at = utcnow()
        session.add(task)
    session.refresh(task)

    logger.info("Task %s updated (%s)", task_id, ", ".join(sorted(changes)) or "no changes")
    return task_view(task)


@router.delete("/tasks/{task_id}", response_model=MessageResponse)
def delete_task(
    task_id: uuid.UUID,
    session: Session = Depends(get_session),
    user_id: uuid.UUID = Depends(get_current_user_id),
):
    task = _get_owned_task(session, task_id, user_id)

    with transaction(session):
        task.deleted_at = utcnow()
        session.add(task)

    logger.info("Task %s deleted", task_id)
    return MessageResponse(message="Task deleted successfully")


# ================================================================
#  ✅ Rebuild actual hours from the time ledger
# ================================================================
@router.post("/tasks/{task_id}/reconcile-hours", response_model=TaskRead)
def reconcile_task_hours(
    task_id: uuid.UUID,
    session: Session = Depends(get_session),
    user_id: uuid.UUID = Depends(get_current_user_id),
):
    _get_owned_task(session, task_id, user_id)
    task = TimeLedger(session).reconcile_task_hours(task_id)
    return task_view(task)
