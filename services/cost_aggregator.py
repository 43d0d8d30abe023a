# services/cost_aggregator.py
"""
Labor cost rollups over the time ledger.

Cost is always ``hours * hourly_rate_snapshot`` per entry, with a missing
snapshot counting as 0. Entries on soft-deleted tasks are left out.
"""
from dataclasses import dataclass
from typing import List
import uuid

from sqlmodel import Session, select, func

from models.models import Member, Task, TimeEntry


@dataclass
class CostSummary:
    total_hours: float
    total_cost: float
    average_rate: float


@dataclass
class MemberCostLine:
    member_id: uuid.UUID
    member_name: str
    hours: float
    average_hourly_rate: float
    cost: float
    percentage: float


@dataclass
class TaskCostLine:
    task_id: uuid.UUID
    task_name: str
    hours: float
    cost: float


def _entry_cost():
    return TimeEntry.hours * func.coalesce(TimeEntry.hourly_rate_snapshot, 0.0)


def _share(part: float, total: float) -> float:
    if total <= 0:
        return 0.0
    return part / total * 100


class CostAggregator:
    def __init__(self, session: Session):
        self.session = session

    def project_cost_summary(self, project_id: uuid.UUID) -> CostSummary:
        total_hours, total_cost = self.session.exec(
            select(
                func.coalesce(func.sum(TimeEntry.hours), 0.0),
                func.coalesce(func.sum(_entry_cost()), 0.0),
            )
            .join(Task, Task.id == TimeEntry.task_id)
            .where(Task.project_id == project_id, Task.deleted_at.is_(None))
        ).one()

        total_hours = float(total_hours)
        total_cost = float(total_cost)
        average_rate = total_cost / total_hours if total_hours > 0 else 0.0
        return CostSummary(total_hours=total_hours, total_cost=total_cost, average_rate=average_rate)

    def member_cost_breakdown(self, project_id: uuid.UUID) -> List[MemberCostLine]:
        # Rate is the plain mean of the entries' snapshots (AVG skips missing ones),
        # not an hours-weighted effective rate.
        rows = self.session.exec(
            select(
                TimeEntry.member_id,
                Member.name,
                func.sum(TimeEntry.hours),
                func.coalesce(func.avg(TimeEntry.hourly_rate_snapshot), 0.0),
                func.coalesce(func.sum(_entry_cost()), 0.0),
            )
            .join(Task, Task.id == TimeEntry.task_id)
            .join(Member, Member.id == TimeEntry.member_id)
            .where(Task.project_id == project_id, Task.deleted_at.is_(None))
            .group_by(TimeEntry.member_id, Member.name)
            .order_by(TimeEntry.member_id)
        ).all()

        total_cost = sum(float(row[4]) for row in rows)
        return [
            MemberCostLine(
                member_id=member_id,
                member_name=name,
                hours=float(hours),
                average_hourly_rate=float(avg_rate),
                cost=float(cost),
                percentage=_share(float(cost), total_cost),
            )
            for member_id, name, hours, avg_rate, cost in rows
        ]

    def task_cost_breakdown(self, project_id: uuid.UUID) -> List[TaskCostLine]:
        rows = self.session.exec(
            select(
                TimeEntry.task_id,
                Task.name,
                func.sum(TimeEntry.hours),
                func.coalesce(func.sum(_entry_cost()), 0.0),
            )
            .join(Task, Task.id == TimeEntry.task_id)
            .where(Task.project_id == project_id, Task.deleted_at.is_(None))
            .group_by(TimeEntry.task_id, Task.name)
            .order_by(TimeEntry.task_id)
        ).all()

        return [
            TaskCostLine(task_id=task_id, task_name=name, hours=float(hours), cost=float(cost))
            for task_id, name, hours, cost in rows
        ]
