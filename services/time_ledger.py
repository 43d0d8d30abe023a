# services/time_ledger.py
"""
Time ledger: the record of hours worked per (task, member, date).

Each entry freezes the member's hourly rate at the moment it is recorded, so
later rate changes never alter recorded cost. Every mutation adjusts the
owning task's ``actual_hours`` by its own delta inside the same transaction
as the ledger write, with the task row locked where the backend allows it.
"""
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Optional, Tuple
import logging
import math
import uuid

from sqlalchemy.orm import selectinload
from sqlmodel import Session, select, func

from core.database import transaction
from core.exceptions import InvalidInputError, NotFoundError
from models.models import Project, Task, TimeEntry, utcnow
from services.lookups import get_active_member, get_active_task

logger = logging.getLogger(__name__)

MAX_HOURS_PER_ENTRY = 24.0
# Float noise from repeated +/- deltas is rounded away at this precision
HOURS_PRECISION = 6

REVISABLE_FIELDS = {"work_date", "hours", "comment"}


@dataclass
class TimeEntryFilter:
    # Restricts the listing to active projects owned by this user
    owner_id: Optional[uuid.UUID] = None
    project_id: Optional[uuid.UUID] = None
    task_id: Optional[uuid.UUID] = None
    member_id: Optional[uuid.UUID] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


def _validate_hours(hours: float) -> None:
    if hours is None or not math.isfinite(hours) or not (0 < hours <= MAX_HOURS_PER_ENTRY):
        raise InvalidInputError.for_field("hours", "hours must be greater than 0 and at most 24")


class TimeLedger:
    def __init__(self, session: Session):
        self.session = session

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def get_entry(self, entry_id: uuid.UUID) -> TimeEntry:
        entry = self.session.exec(
            select(TimeEntry)
            .where(TimeEntry.id == entry_id)
            .options(selectinload(TimeEntry.member))
        ).first()
        if not entry:
            raise NotFoundError("TimeEntry")
        return entry

    def list_entries(
        self,
        filters: TimeEntryFilter,
        page: int = 1,
        per_page: int = 20,
    ) -> Tuple[List[TimeEntry], int]:
        # Entries on soft-deleted tasks are left out, as in the cost rollups
        query = select(TimeEntry).join(Task, Task.id == TimeEntry.task_id).where(
            Task.deleted_at.is_(None)
        )

        if filters.project_id:
            query = query.where(Task.project_id == filters.project_id)
        if filters.owner_id:
            query = query.join(Project, Project.id == Task.project_id).where(
                Project.owner_id == filters.owner_id,
                Project.deleted_at.is_(None),
            )
        if filters.task_id:
            query = query.where(TimeEntry.task_id == filters.task_id)
        if filters.member_id:
            query = query.where(TimeEntry.member_id == filters.member_id)
        if filters.start_date:
            query = query.where(TimeEntry.work_date >= filters.start_date)
        if filters.end_date:
            query = query.where(TimeEntry.work_date <= filters.end_date)

        total = self.session.exec(
            select(func.count()).select_from(query.subquery())
        ).one()

        entries = self.session.exec(
            query.options(selectinload(TimeEntry.member))
            .order_by(TimeEntry.work_date.desc(), TimeEntry.created_at.desc(), TimeEntry.id)
            .offset((page - 1) * per_page)
            .limit(per_page)
        ).all()
        return list(entries), total

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    def record_entry(
        self,
        user_id: uuid.UUID,
        task_id: uuid.UUID,
        member_id: uuid.UUID,
        work_date: date,
        hours: float,
        comment: Optional[str] = None,
    ) -> TimeEntry:
        _validate_hours(hours)

        with transaction(self.session):
            task = get_active_task(self.session, task_id, for_update=True)
            member = get_active_member(self.session, member_id)

            entry = TimeEntry(
                task_id=task.id,
                member_id=member.id,
                user_id=user_id,
                work_date=work_date,
                hours=hours,
                hourly_rate_snapshot=member.hourly_rate,
                comment=comment,
            )
            self.session.add(entry)
            self._adjust_task_hours(task, hours)

        logger.info(
            "Recorded time entry %s: task=%s member=%s hours=%s rate=%s",
            entry.id, task_id, member_id, hours, entry.hourly_rate_snapshot,
        )
        return self.get_entry(entry.id)

    def revise_entry(self, entry_id: uuid.UUID, changes: Dict[str, Any]) -> TimeEntry:
        unknown = set(changes) - REVISABLE_FIELDS
        if unknown:
            raise InvalidInputError.for_fields(
                [{"field": name, "message": "field cannot be changed"} for name in sorted(unknown)]
            )
        if "hours" in changes:
            _validate_hours(changes["hours"])

        with transaction(self.session):
            entry = self.get_entry(entry_id)
            old_hours = entry.hours

            if changes.get("work_date") is not None:
                entry.work_date = changes["work_date"]
            if "comment" in changes:
                entry.comment = changes["comment"]
            if changes.get("hours") is not None:
                entry.hours = changes["hours"]
            entry.updated_at = utcnow()
            self.session.add(entry)

            delta = entry.hours - old_hours
            if delta:
                task = self._lock_task(entry.task_id)
                self._adjust_task_hours(task, delta)

        logger.info("Revised time entry %s (hours %s -> %s)", entry_id, old_hours, entry.hours)
        return self.get_entry(entry_id)

    def remove_entry(self, entry_id: uuid.UUID) -> None:
        with transaction(self.session):
            entry = self.get_entry(entry_id)
            task_id, hours = entry.task_id, entry.hours
            task = self._lock_task(task_id)
            self._adjust_task_hours(task, -hours)
            self.session.delete(entry)

        logger.info("Removed time entry %s (%s hours) from task %s", entry_id, hours, task_id)

    def reconcile_task_hours(self, task_id: uuid.UUID) -> Task:
        """Recompute a task's actual hours from the full ledger."""
        with transaction(self.session):
            task = self._lock_task(task_id)
            ledger_hours = self.session.exec(
                select(func.coalesce(func.sum(TimeEntry.hours), 0.0)).where(
                    TimeEntry.task_id == task_id
                )
            ).one()
            if task.actual_hours != ledger_hours:
                logger.warning(
                    "Task %s actual hours drifted: stored=%s ledger=%s",
                    task_id, task.actual_hours, ledger_hours,
                )
            task.actual_hours = round(float(ledger_hours), HOURS_PRECISION)
            task.updated_at = utcnow()
            self.session.add(task)

        self.session.refresh(task)
        return task

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _lock_task(self, task_id: uuid.UUID) -> Task:
        # The running total belongs to the row even if the task was soft-deleted
        task = self.session.exec(
            select(Task).where(Task.id == task_id).with_for_update()
        ).first()
        if not task:
            raise NotFoundError("Task")
        return task

    def _adjust_task_hours(self, task: Task, delta: float) -> None:
        task.actual_hours = max(0.0, round(task.actual_hours + delta, HOURS_PRECISION))
        task.updated_at = utcnow()
        self.session.add(task)
