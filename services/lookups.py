# services/lookups.py
"""Active-record lookups shared by the services and routes."""
from typing import Optional
import uuid

from sqlmodel import Session, select

from core.exceptions import ForbiddenError, NotFoundError
from models.models import Member, Project, Task


def get_active_project(session: Session, project_id: uuid.UUID) -> Project:
    project = session.exec(
        select(Project).where(Project.id == project_id, Project.deleted_at.is_(None))
    ).first()
    if not project:
        raise NotFoundError("Project")
    return project


def get_owned_project(session: Session, project_id: uuid.UUID, user_id: uuid.UUID) -> Project:
    """Fetch an active project and check the caller owns it."""
    project = get_active_project(session, project_id)
    if project.owner_id != user_id:
        raise ForbiddenError()
    return project


def get_active_task(session: Session, task_id: uuid.UUID, for_update: bool = False) -> Task:
    query = select(Task).where(Task.id == task_id, Task.deleted_at.is_(None))
    if for_update:
        query = query.with_for_update()
    task = session.exec(query).first()
    if not task:
        raise NotFoundError("Task")
    return task


def get_active_member(session: Session, member_id: uuid.UUID) -> Member:
    member = session.exec(
        select(Member).where(Member.id == member_id, Member.deleted_at.is_(None))
    ).first()
    if not member:
        raise NotFoundError("Member")
    return member


def find_member_by_email(session: Session, email: str) -> Optional[Member]:
    return session.exec(
        select(Member).where(Member.email == email, Member.deleted_at.is_(None))
    ).first()
