# member_schema.py
from pydantic import BaseModel, EmailStr, Field, ConfigDict
from typing import Optional, List
from datetime import date, datetime
import uuid

from schemas.common_schema import Pagination


# ---------------------------
# Create / Update
# ---------------------------
class MemberCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr = Field(..., max_length=255)
    role: Optional[str] = Field(default=None, max_length=50)
    hourly_rate: float = Field(default=0.0, ge=0)
    department: Optional[str] = Field(default=None, max_length=100)
    user_id: Optional[uuid.UUID] = None

    model_config = ConfigDict(allow_inf_nan=False)


class MemberUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    email: Optional[EmailStr] = Field(default=None, max_length=255)
    role: Optional[str] = Field(default=None, max_length=50)
    hourly_rate: Optional[float] = Field(default=None, ge=0)
    department: Optional[str] = Field(default=None, max_length=100)

    model_config = ConfigDict(allow_inf_nan=False)


# ---------------------------
# Read
# ---------------------------
class MemberRead(BaseModel):
    id: uuid.UUID
    user_id: Optional[uuid.UUID] = None
    name: str
    email: str
    role: Optional[str] = None
    hourly_rate: float
    department: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class MemberList(BaseModel):
    members: List[MemberRead]
    pagination: Pagination


# ---------------------------
# Project assignment
# ---------------------------
class AssignMemberRequest(BaseModel):
    member_id: uuid.UUID
    allocation_rate: Optional[float] = Field(default=None, ge=0, le=1)
    hourly_rate_snapshot: Optional[float] = Field(default=None, ge=0)

    model_config = ConfigDict(allow_inf_nan=False)


class ProjectMemberRead(BaseModel):
    id: uuid.UUID
    project_id: uuid.UUID
    member_id: uuid.UUID
    joined_at: date
    left_at: Optional[date] = None
    allocation_rate: float
    hourly_rate_snapshot: Optional[float] = None
    is_active: bool
    member: Optional[MemberRead] = None

    model_config = ConfigDict(from_attributes=True)
