# task_schema.py
from pydantic import BaseModel, Field, ConfigDict, model_validator
from typing import Optional, List
from datetime import date, datetime
import uuid

from models.models import TaskStatus
from schemas.common_schema import MemberBrief, Pagination


class TaskCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    assignee_id: Optional[uuid.UUID] = None
    planned_hours: float = Field(default=0.0, ge=0)
    status: TaskStatus = TaskStatus.TODO
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    model_config = ConfigDict(allow_inf_nan=False)

    @model_validator(mode="after")
    def check_dates(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class TaskUpdate(BaseModel):
    # actual_hours is owned by the time ledger and cannot be set here
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    assignee_id: Optional[uuid.UUID] = None
    planned_hours: Optional[float] = Field(default=None, ge=0)
    status: Optional[TaskStatus] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    model_config = ConfigDict(extra="forbid", allow_inf_nan=False)


class TaskRead(BaseModel):
    id: uuid.UUID
    project_id: uuid.UUID
    assignee_id: Optional[uuid.UUID] = None
    name: str
    description: Optional[str] = None
    planned_hours: float
    actual_hours: float
    variance_hours: float
    variance_percentage: float
    status: str
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    created_at: datetime
    updated_at: datetime
    assignee: Optional[MemberBrief] = None

    model_config = ConfigDict(from_attributes=True)


class TaskList(BaseModel):
    tasks: List[TaskRead]
    pagination: Pagination
