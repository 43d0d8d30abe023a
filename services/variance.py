# services/variance.py
"""Planned vs. actual hours, per task and rolled up per project."""
from dataclasses import dataclass
from typing import Tuple
import uuid

from sqlmodel import Session, select, func

from models.models import Task, TaskStatus
from schemas import MemberBrief, TaskRead


def task_variance(task: Task) -> Tuple[float, float]:
    """Return ``(variance_hours, variance_percentage)`` for a task.

    The percentage is 0 when nothing was planned.
    """
    variance_hours = task.actual_hours - task.planned_hours
    if task.planned_hours <= 0:
        return variance_hours, 0.0
    return variance_hours, variance_hours / task.planned_hours * 100


def task_view(task: Task) -> TaskRead:
    variance_hours, variance_percentage = task_variance(task)
    return TaskRead(
        **task.model_dump(),
        variance_hours=variance_hours,
        variance_percentage=variance_percentage,
        assignee=MemberBrief.model_validate(task.assignee) if task.assignee else None,
    )


@dataclass
class ProjectTaskSummary:
    project_id: uuid.UUID
    total_tasks: int = 0
    total_planned_hours: float = 0.0
    total_actual_hours: float = 0.0
    todo_tasks: int = 0
    in_progress_tasks: int = 0
    completed_tasks: int = 0
    blocked_tasks: int = 0

    @property
    def variance_hours(self) -> float:
        return self.total_actual_hours - self.total_planned_hours

    @property
    def variance_percentage(self) -> float:
        if self.total_planned_hours <= 0:
            return 0.0
        return self.variance_hours / self.total_planned_hours * 100

    @property
    def completion_rate(self) -> float:
        if self.total_tasks == 0:
            return 0.0
        return self.completed_tasks / self.total_tasks * 100

    @property
    def is_over_budget(self) -> bool:
        return self.variance_hours > 0


_STATUS_BUCKETS = {
    TaskStatus.TODO.value: "todo_tasks",
    TaskStatus.IN_PROGRESS.value: "in_progress_tasks",
    TaskStatus.COMPLETED.value: "completed_tasks",
    TaskStatus.BLOCKED.value: "blocked_tasks",
}


def project_task_summary(session: Session, project_id: uuid.UUID) -> ProjectTaskSummary:
    """Aggregate the project's active tasks by status."""
    rows = session.exec(
        select(
            Task.status,
            func.count(Task.id),
            func.coalesce(func.sum(Task.planned_hours), 0.0),
            func.coalesce(func.sum(Task.actual_hours), 0.0),
        )
        .where(Task.project_id == project_id, Task.deleted_at.is_(None))
        .group_by(Task.status)
    ).all()

    summary = ProjectTaskSummary(project_id=project_id)
    for status, count, planned, actual in rows:
        summary.total_tasks += count
        summary.total_planned_hours += float(planned)
        summary.total_actual_hours += float(actual)
        bucket = _STATUS_BUCKETS.get(status)
        if bucket:
            setattr(summary, bucket, getattr(summary, bucket) + count)
    return summary
