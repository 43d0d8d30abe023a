# routes/members.py
from fastapi import APIRouter, Depends, status
from sqlmodel import Session, select, func
from sqlalchemy import or_
from typing import Optional
import logging
import uuid

from core.database import get_session, transaction
from core.exceptions import ConflictError
from core.security import get_current_user_id
from models.models import Member, utcnow
from schemas import (
    MemberCreate, MemberList, MemberRead, MemberUpdate, MessageResponse, Pagination, normalize_page
)
from services.lookups import find_member_by_email, get_active_member

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/members", tags=["Members"])


# ==================================================================
#  ✅ Create Member
# ==================================================================
@router.post("", response_model=MemberRead, status_code=status.HTTP_201_CREATED)
def create_member(
    data: MemberCreate,
    session: Session = Depends(get_session),
    user_id: uuid.UUID = Depends(get_current_user_id),
):
    if find_member_by_email(session, data.email):
        raise ConflictError("A member with this email already exists")

    member = Member(**data.model_dump())
    with transaction(session):
        session.add(member)
    session.refresh(member)

    logger.info("Member %s created by %s", member.id, user_id)
    return member


# ==================================================================
#  ✅ List Members (search by name/email, filter by department)
# ==================================================================
@router.get("", response_model=MemberList)
def list_members(
    search: Optional[str] = None,
    department: Optional[str] = None,
    page: Optional[int] = None,
    per_page: Optional[int] = None,
    session: Session = Depends(get_session),
    user_id: uuid.UUID = Depends(get_current_user_id),
):
    page, per_page = normalize_page(page, per_page)

    query = select(Member).where(Member.deleted_at.is_(None))
    if search:
        pattern = f"%{search}%"
        query = query.where(or_(Member.name.ilike(pattern), Member.email.ilike(pattern)))
    if department:
        query = query.where(Member.department == department)

    total = session.exec(select(func.count()).select_from(query.subquery())).one()
    members = session.exec(
        query.order_by(Member.name, Member.id)
        .offset((page - 1) * per_page)
        .limit(per_page)
    ).all()

    return MemberList(
        members=[MemberRead.model_validate(m) for m in members],
        pagination=Pagination.build(page, per_page, total),
    )


# ==================================================================
#  ✅ Get / Update / Delete Member
# ==================================================================
@router.get("/{member_id}", response_model=MemberRead)
def get_member(
    member_id: uuid.UUID,
    session: Session = Depends(get_session),
    user_id: uuid.UUID = Depends(get_current_user_id),
):
    return get_active_member(session, member_id)


@router.put("/{member_id}", response_model=MemberRead)
def update_member(
    member_id: uuid.UUID,
    data: MemberUpdate,
    session: Session = Depends(get_session),
    user_id: uuid.UUID = Depends(get_current_user_id),
):
    member = get_active_member(session, member_id)

    changes = data.model_dump(exclude_unset=True)
    for field in ("name", "email", "hourly_rate"):
        if field in changes and changes[field] is None:
            changes.pop(field)
    if changes.get("email") and changes["email"] != member.email:
        other = find_member_by_email(session, changes["email"])
        if other and other.id != member.id:
            raise ConflictError("A member with this email already exists")

    # Existing time entries and assignments keep the rate they captured
    with transaction(session):
        for field, value in changes.items():
            setattr(member, field, value)
        member.updated_at = utcnow()
        session.add(member)
    session.refresh(member)

    logger.info("Member %s updated (%s)", member_id, ", ".join(sorted(changes)) or "no changes")
    return member


@router.delete("/{member_id}", response_model=MessageResponse)
def delete_member(
    member_id: uuid.UUID,
    session: Session = Depends(get_session),
    user_id: uuid.UUID = Depends(get_current_user_id),
):
    member = get_active_member(session, member_id)

    with transaction(session):
        member.deleted_at = utcnow()
        session.add(member)

    logger.info("Member %s deleted", member_id)
    return MessageResponse(message="Member deleted successfully")
