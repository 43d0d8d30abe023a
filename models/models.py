# models/models.py
from typing import Optional
from datetime import date, datetime, timezone
from enum import Enum
import uuid

from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import UniqueConstraint


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ============================================================
# ENUMS
# ============================================================
class ProjectStatus(str, Enum):
    PLANNING = "planning"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    ON_HOLD = "on_hold"


class TaskStatus(str, Enum):
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    BLOCKED = "blocked"


# ============================================================
# PROJECT
# ============================================================
class Project(SQLModel, table=True):
    __tablename__ = "projects"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    owner_id: uuid.UUID = Field(index=True, nullable=False)
    name: str = Field(max_length=200, index=True)
    description: Optional[str] = Field(default=None)
    status: str = Field(default=ProjectStatus.PLANNING.value, max_length=20, index=True)
    budget_amount: Optional[float] = Field(default=None, ge=0)
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    deleted_at: Optional[datetime] = Field(default=None, index=True)


# ============================================================
# MEMBER
# ============================================================
class Member(SQLModel, table=True):
    __tablename__ = "members"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    user_id: Optional[uuid.UUID] = Field(default=None, index=True)
    name: str = Field(max_length=100)
    email: str = Field(max_length=255, index=True)
    role: Optional[str] = Field(default=None, max_length=50)
    hourly_rate: float = Field(default=0.0, ge=0)
    department: Optional[str] = Field(default=None, max_length=100)

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    deleted_at: Optional[datetime] = Field(default=None, index=True)


# ============================================================
# TASK
# ============================================================
class Task(SQLModel, table=True):
    __tablename__ = "tasks"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    project_id: uuid.UUID = Field(foreign_key="projects.id", index=True, nullable=False)
    assignee_id: Optional[uuid.UUID] = Field(default=None, foreign_key="members.id", index=True)
    name: str = Field(max_length=200)
    description: Optional[str] = Field(default=None)
    planned_hours: float = Field(default=0.0, ge=0)
    # Running total of the task's time entries, maintained by the time ledger
    actual_hours: float = Field(default=0.0, ge=0)
    status: str = Field(default=TaskStatus.TODO.value, max_length=20, index=True)
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    deleted_at: Optional[datetime] = Field(default=None, index=True)

    # Relationships
    assignee: Optional["Member"] = Relationship()


# ============================================================
# PROJECT MEMBER (assignment)
# ============================================================
class ProjectMember(SQLModel, table=True):
    __tablename__ = "project_members"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    project_id: uuid.UUID = Field(foreign_key="projects.id", index=True, nullable=False)
    member_id: uuid.UUID = Field(foreign_key="members.id", index=True, nullable=False)
    joined_at: date = Field(default_factory=date.today)
    left_at: Optional[date] = None
    allocation_rate: float = Field(default=1.0, ge=0, le=1)
    hourly_rate_snapshot: Optional[float] = Field(default=None, ge=0)

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    member: Optional["Member"] = Relationship()

    @property
    def is_active(self) -> bool:
        return self.left_at is None


# ============================================================
# TIME ENTRY
# ============================================================
class TimeEntry(SQLModel, table=True):
    __tablename__ = "time_entries"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    task_id: uuid.UUID = Field(foreign_key="tasks.id", index=True, nullable=False)
    member_id: uuid.UUID = Field(foreign_key="members.id", index=True, nullable=False)
    user_id: uuid.UUID = Field(index=True, nullable=False)
    work_date: date = Field(index=True, nullable=False)
    hours: float = Field(gt=0, le=24)
    # Member's rate at the moment the entry was recorded; never rewritten
    hourly_rate_snapshot: Optional[float] = Field(default=None, ge=0)
    comment: Optional[str] = Field(default=None)

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    member: Optional["Member"] = Relationship()

    @property
    def cost(self) -> float:
        if self.hourly_rate_snapshot is None:
            return 0.0
        return self.hours * self.hourly_rate_snapshot


# ============================================================
# BUDGET
# ============================================================
class Budget(SQLModel, table=True):
    __tablename__ = "budgets"
    __table_args__ = (UniqueConstraint("project_id", name="uq_budget_project"),)

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    project_id: uuid.UUID = Field(foreign_key="projects.id", index=True, nullable=False)
    revenue: float = Field(default=0.0, ge=0)
    total_cost: float = Field(default=0.0)
    profit: float = Field(default=0.0)
    profit_rate: float = Field(default=0.0)
    currency: str = Field(default="JPY", max_length=3)

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    def calculate_profit(self) -> None:
        """Bring profit and profit rate in line with current revenue and total cost."""
        self.profit = self.revenue - self.total_cost
        if self.revenue > 0:
            self.profit_rate = (self.profit / self.revenue) * 100
        else:
            self.profit_rate = 0.0

    @property
    def is_deficit(self) -> bool:
        return self.profit < 0
