# schemas/time_entry_schema.py
from typing import Optional, List
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime, date
import uuid

from schemas.common_schema import MemberBrief, Pagination


class TimeEntryCreate(BaseModel):
    task_id: uuid.UUID
    member_id: uuid.UUID
    work_date: date
    hours: float = Field(..., gt=0, le=24)
    comment: Optional[str] = None

    model_config = ConfigDict(allow_inf_nan=False)


class TimeEntryUpdate(BaseModel):
    # The rate snapshot is frozen at creation and is not editable
    work_date: Optional[date] = None
    hours: Optional[float] = Field(default=None, gt=0, le=24)
    comment: Optional[str] = None

    model_config = ConfigDict(extra="forbid", allow_inf_nan=False)


class TimeEntryRead(BaseModel):
    id: uuid.UUID
    task_id: uuid.UUID
    member_id: uuid.UUID
    user_id: uuid.UUID
    work_date: date
    hours: float
    hourly_rate_snapshot: Optional[float] = None
    cost: float
    comment: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    member: Optional[MemberBrief] = None

    model_config = ConfigDict(from_attributes=True)


class TimeEntryPageSummary(BaseModel):
    total_hours: float = 0.0
    total_cost: float = 0.0


class TimeEntryList(BaseModel):
    time_entries: List[TimeEntryRead]
    pagination: Pagination
    summary: TimeEntryPageSummary
