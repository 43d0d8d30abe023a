# routes/time_entries.py
from fastapi import APIRouter, Depends, status
from sqlmodel import Session
from typing import Optional
from datetime import date
import uuid

from core.database import get_session
from core.exceptions import InvalidInputError, NotFoundError
from core.security import get_current_user_id
from models.models import Task, TimeEntry
from schemas import (
    MessageResponse, Pagination, TimeEntryCreate, TimeEntryList, TimeEntryPageSummary,
    TimeEntryRead, TimeEntryUpdate, normalize_page
)
from services.lookups import get_active_task, get_owned_project
from services.time_ledger import TimeEntryFilter, TimeLedger

router = APIRouter(prefix="/time-entries", tags=["Time Entries"])


# ================================================================
#  ✅ Helper: an entry is visible to the owner of its task's project
# ================================================================
def _check_entry_access(session: Session, entry: TimeEntry, user_id: uuid.UUID) -> None:
    task = session.get(Task, entry.task_id)
    if not task:
        raise NotFoundError("Task")
    get_owned_project(session, task.project_id, user_id)


# ================================================================
#  ✅ Record Time
# ================================================================
@router.post("", response_model=TimeEntryRead, status_code=status.HTTP_201_CREATED)
def create_time_entry(
    payload: TimeEntryCreate,
    session: Session = Depends(get_session),
    user_id: uuid.UUID = Depends(get_current_user_id),
):
    task = get_active_task(session, payload.task_id)
    get_owned_project(session, task.project_id, user_id)

    return TimeLedger(session).record_entry(
        user_id=user_id,
        task_id=payload.task_id,
        member_id=payload.member_id,
        work_date=payload.work_date,
        hours=payload.hours,
        comment=payload.comment,
    )


# ================================================================
#  ✅ List Time Entries (caller's projects only)
# ================================================================
@router.get("", response_model=TimeEntryList)
def list_time_entries(
    project_id: Optional[uuid.UUID] = None,
    task_id: Optional[uuid.UUID] = None,
    member_id: Optional[uuid.UUID] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    page: Optional[int] = None,
    per_page: Optional[int] = None,
    session: Session = Depends(get_session),
    user_id: uuid.UUID = Depends(get_current_user_id),
):
    if start_date and end_date and end_date < start_date:
        raise InvalidInputError.for_field("end_date", "end_date must not be before start_date")
    if project_id:
        get_owned_project(session, project_id, user_id)
    if task_id:
        task = get_active_task(session, task_id)
        get_owned_project(session, task.project_id, user_id)

    page, per_page = normalize_page(page, per_page)
    filters = TimeEntryFilter(
        owner_id=user_id,
        project_id=project_id,
        task_id=task_id,
        member_id=member_id,
        start_date=start_date,
        end_date=end_date,
    )
    entries, total = TimeLedger(session).list_entries(filters, page, per_page)

    return TimeEntryList(
        time_entries=[TimeEntryRead.model_validate(e) for e in entries],
        pagination=Pagination.build(page, per_page, total),
        summary=TimeEntryPageSummary(
            total_hours=sum(e.hours for e in entries),
            total_cost=sum(e.cost for e in entries),
        ),
    )


# ================================================================
#  ✅ Get / Update / Delete a Time Entry
# ================================================================
@router.get("/{entry_id}", response_model=TimeEntryRead)
def get_time_entry(
    entry_id: uuid.UUID,
    session: Session = Depends(get_session),
    user_id: uuid.UUID = Depends(get_current_user_id),
):
    entry = TimeLedger(session).get_entry(entry_id)
    _check_entry_access(session, entry, user_id)
    return entry


@router.put("/{entry_id}", response_model=TimeEntryRead)
def update_time_entry(
    entry_id: uuid.UUID,
    payload: TimeEntryUpdate,
    session: Session = Depends(get_session),
    user_id: uuid.UUID = Depends(get_current_user_id),
):
    ledger = TimeLedger(session)
    _check_entry_access(session, ledger.get_entry(entry_id), user_id)
    return ledger.revise_entry(entry_id, payload.model_dump(exclude_unset=True))


@router.delete("/{entry_id}", response_model=MessageResponse)
def delete_time_entry(
    entry_id: uuid.UUID,
    session: Session = Depends(get_session),
    user_id: uuid.UUID = Depends(get_current_user_id),
):
    ledger = TimeLedger(session)
    _check_entry_access(session, ledger.get_entry(entry_id), user_id)
    ledger.remove_entry(entry_id)
    return MessageResponse(message="Time entry deleted successfully")
