# project_schema.py
from pydantic import BaseModel, Field, ConfigDict, model_validator
from typing import List, Optional
from datetime import date, datetime
import uuid

from models.models import ProjectStatus
from schemas.common_schema import Pagination


def _check_date_range(start: Optional[date], end: Optional[date]) -> None:
    if start and end and end < start:
        raise ValueError("end_date must not be before start_date")


class ProjectCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    status: ProjectStatus = ProjectStatus.PLANNING
    budget_amount: Optional[float] = Field(default=None, ge=0)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    # owner is set server-side from the caller's identity

    model_config = ConfigDict(allow_inf_nan=False)

    @model_validator(mode="after")
    def check_dates(self):
        _check_date_range(self.start_date, self.end_date)
        return self


class ProjectUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    status: Optional[ProjectStatus] = None
    budget_amount: Optional[float] = Field(default=None, ge=0)
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    model_config = ConfigDict(allow_inf_nan=False)


class ProjectRead(BaseModel):
    id: uuid.UUID
    owner_id: uuid.UUID
    name: str
    description: Optional[str] = None
    status: str
    budget_amount: Optional[float] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProjectStats(BaseModel):
    total_tasks: int = 0
    completed_tasks: int = 0
    total_planned_hours: float = 0.0
    total_actual_hours: float = 0.0
    completion_rate: float = 0.0


class ProjectDetail(ProjectRead):
    stats: Optional[ProjectStats] = None


class ProjectList(BaseModel):
    projects: List[ProjectRead]
    pagination: Pagination


class ProjectSummaryView(BaseModel):
    project_id: uuid.UUID
    total_tasks: int
    total_planned_hours: float
    total_actual_hours: float
    variance_hours: float
    variance_percentage: float
    is_over_budget: bool
    completed_tasks: int
    in_progress_tasks: int
    todo_tasks: int
    blocked_tasks: int
    completion_rate: float
