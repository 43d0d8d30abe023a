"""Entity factories for service and API tests."""

import uuid
from datetime import date

from models.models import Member, Project, Task

WORK_DATE = date(2024, 4, 1)


def make_project(session, owner_id, **overrides):
    data = {"name": "Website Renewal", "owner_id": owner_id}
    data.update(overrides)
    project = Project(**data)
    session.add(project)
    session.commit()
    session.refresh(project)
    return project


def make_member(session, name="Aiko", hourly_rate=5000.0, **overrides):
    data = {
        "name": name,
        "email": f"{name.lower().replace(' ', '.')}-{uuid.uuid4().hex[:6]}@example.com",
        "hourly_rate": hourly_rate,
    }
    data.update(overrides)
    member = Member(**data)
    session.add(member)
    session.commit()
    session.refresh(member)
    return member


def make_task(session, project, planned_hours=10.0, **overrides):
    data = {"project_id": project.id, "name": "Build pages", "planned_hours": planned_hours}
    data.update(overrides)
    task = Task(**data)
    session.add(task)
    session.commit()
    session.refresh(task)
    return task
