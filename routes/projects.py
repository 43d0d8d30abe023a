# routes/projects.py
from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session, select, func
from sqlalchemy import asc, desc
from sqlalchemy.orm import selectinload
from typing import List, Optional
from datetime import date
import logging
import uuid

from core.database import get_session, transaction
from core.exceptions import ConflictError, InvalidInputError, NotFoundError
from core.security import get_current_user_id
from models.models import Project, ProjectMember, ProjectStatus, utcnow
from schemas import (
    AssignMemberRequest, MessageResponse, Pagination, ProjectCreate, ProjectDetail,
    ProjectList, ProjectMemberRead, ProjectRead, ProjectStats, ProjectUpdate, normalize_page
)
from services.lookups import get_active_member, get_owned_project
from services.variance import project_task_summary

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/projects", tags=["Projects"])

PROJECTS_PER_PAGE = 10

SORTABLE_FIELDS = {
    "created_at": Project.created_at,
    "updated_at": Project.updated_at,
    "name": Project.name,
    "start_date": Project.start_date,
    "end_date": Project.end_date,
}


# ==================================================================
#  ✅ Create New Project (owned by the caller)
# ==================================================================
@router.post("", response_model=ProjectRead, status_code=status.HTTP_201_CREATED)
def create_project(
    data: ProjectCreate,
    session: Session = Depends(get_session),
    user_id: uuid.UUID = Depends(get_current_user_id),
):
    project = Project(
        owner_id=user_id,
        name=data.name,
        description=data.description,
        status=data.status.value,
        budget_amount=data.budget_amount,
        start_date=data.start_date,
        end_date=data.end_date,
    )
    with transaction(session):
        session.add(project)
    session.refresh(project)

    logger.info("Project %s created by %s", project.id, user_id)
    return project


# ==================================================================
#  ✅ List Projects (caller's own, filter / search / sort / paginate)
# ==================================================================
@router.get("", response_model=ProjectList)
def list_projects(
    status_filter: Optional[ProjectStatus] = Query(None, alias="status"),
    search: Optional[str] = None,
    sort: Optional[str] = "created_at",
    order: Optional[str] = "desc",
    page: Optional[int] = None,
    per_page: Optional[int] = None,
    session: Session = Depends(get_session),
    user_id: uuid.UUID = Depends(get_current_user_id),
):
    page, per_page = normalize_page(page, per_page, default_per_page=PROJECTS_PER_PAGE, clamp_to_max=True)

    query = select(Project).where(Project.owner_id == user_id, Project.deleted_at.is_(None))
    if status_filter:
        query = query.where(Project.status == status_filter.value)
    if search:
        query = query.where(Project.name.ilike(f"%{search}%"))

    total = session.exec(select(func.count()).select_from(query.subquery())).one()

    sort_column = SORTABLE_FIELDS.get(sort or "", Project.created_at)
    direction = asc if (order or "").lower() == "asc" else desc
    projects = session.exec(
        query.order_by(direction(sort_column), Project.id)
        .offset((page - 1) * per_page)
        .limit(per_page)
    ).all()

    return ProjectList(
        projects=[ProjectRead.model_validate(p) for p in projects],
        pagination=Pagination.build(page, per_page, total),
    )


# ==================================================================
#  ✅ Get Single Project (with task stats)
# ==================================================================
@router.get("/{project_id}", response_model=ProjectDetail)
def get_project(
    project_id: uuid.UUID,
    session: Session = Depends(get_session),
    user_id: uuid.UUID = Depends(get_current_user_id),
):
    project = get_owned_project(session, project_id, user_id)
    summary = project_task_summary(session, project_id)

    detail = ProjectDetail.model_validate(project)
    detail.stats = ProjectStats(
        total_tasks=summary.total_tasks,
        completed_tasks=summary.completed_tasks,
        total_planned_hours=summary.total_planned_hours,
        total_actual_hours=summary.total_actual_hours,
        completion_rate=summary.completion_rate,
    )
    return detail


# ==================================================================
#  ✅ Update Project
# ==================================================================
@router.put("/{project_id}", response_model=ProjectRead)
def update_project(
    project_id: uuid.UUID,
    data: ProjectUpdate,
    session: Session = Depends(get_session),
    user_id: uuid.UUID = Depends(get_current_user_id),
):
    project = get_owned_project(session, project_id, user_id)

    changes = data.model_dump(exclude_unset=True)
    if changes.get("status") is not None:
        changes["status"] = changes["status"].value
    if "name" in changes and changes["name"] is None:
        changes.pop("name")

    start = changes.get("start_date", project.start_date)
    end = changes.get("end_date", project.end_date)
    if start and end and end < start:
        raise InvalidInputError.for_field("end_date", "end_date must not be before start_date")

    with transaction(session):
        for field, value in changes.items():
            setattr(project, field, value)
        project.updated_at = utcnow()
        session.add(project)
    session.refresh(project)

    logger.info("Project %s updated (%s)", project_id, ", ".join(sorted(changes)) or "no changes")
    return project


# ==================================================================
#  ✅ Delete Project (soft delete)
# ==================================================================
@router.delete("/{project_id}", response_model=MessageResponse)
def delete_project(
    project_id: uuid.UUID,
    session: Session = Depends(get_session),
    user_id: uuid.UUID = Depends(get_current_user_id),
):
    project = get_owned_project(session, project_id, user_id)

    with transaction(session):
        project.deleted_at = utcnow()
        session.add(project)

    logger.info("Project %s deleted", project_id)
    return MessageResponse(message="Project deleted successfully")


# ==================================================================
#  ✅ Project Members (assignments)
# ==================================================================
@router.get("/{project_id}/members", response_model=List[ProjectMemberRead])
def list_project_members(
    project_id: uuid.UUID,
    include_inactive: bool = False,
    session: Session = Depends(get_session),
    user_id: uuid.UUID = Depends(get_current_user_id),
):
    get_owned_project(session, project_id, user_id)

    query = (
        select(ProjectMember)
        .where(ProjectMember.project_id == project_id)
        .options(selectinload(ProjectMember.member))
    )
    if not include_inactive:
        query = query.where(ProjectMember.left_at.is_(None))

    return session.exec(query.order_by(ProjectMember.joined_at, ProjectMember.id)).all()


@router.post(
    "/{project_id}/members",
    response_model=ProjectMemberRead,
    status_code=status.HTTP_201_CREATED,
)
def assign_member(
    project_id: uuid.UUID,
    data: AssignMemberRequest,
    session: Session = Depends(get_session),
    user_id: uuid.UUID = Depends(get_current_user_id),
):
    get_owned_project(session, project_id, user_id)
    member = get_active_member(session, data.member_id)

    existing = session.exec(
        select(ProjectMember).where(
            ProjectMember.project_id == project_id,
            ProjectMember.member_id == member.id,
            ProjectMember.left_at.is_(None),
        )
    ).first()
    if existing:
        raise ConflictError("Member is already assigned to this project")

    # Rate is frozen at assignment time unless the caller supplies one
    assignment = ProjectMember(
        project_id=project_id,
        member_id=member.id,
        allocation_rate=data.allocation_rate if data.allocation_rate is not None else 1.0,
        hourly_rate_snapshot=(
            data.hourly_rate_snapshot if data.hourly_rate_snapshot is not None else member.hourly_rate
        ),
    )
    with transaction(session):
        session.add(assignment)
    session.refresh(assignment)

    logger.info("Member %s assigned to project %s", member.id, project_id)
    return assignment


@router.delete("/{project_id}/members/{member_id}", response_model=MessageResponse)
def remove_member(
    project_id: uuid.UUID,
    member_id: uuid.UUID,
    session: Session = Depends(get_session),
    user_id: uuid.UUID = Depends(get_current_user_id),
):
    get_owned_project(session, project_id, user_id)

    assignment = session.exec(
        select(ProjectMember).where(
            ProjectMember.project_id == project_id,
            ProjectMember.member_id == member_id,
            ProjectMember.left_at.is_(None),
        )
    ).first()
    if not assignment:
        raise NotFoundError("Project member")

    with transaction(session):
        assignment.left_at = date.today()
        assignment.updated_at = utcnow()
        session.add(assignment)

    logger.info("Member %s removed from project %s", member_id, project_id)
    return MessageResponse(message="Member removed from project")
