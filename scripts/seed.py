# scripts/seed.py

import os
import sys
import argparse
import uuid
from datetime import date, timedelta

from dotenv import load_dotenv
from sqlmodel import Session, select

# Ensure root path for relative imports
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# ✅ Load environment variables before settings are read
load_dotenv()

from core.database import engine, create_db_and_tables
from core.security import create_access_token
from models.models import Member, Project, ProjectMember, ProjectStatus, Task, TaskStatus
from services.budget_ledger import BudgetLedger
from services.time_ledger import TimeLedger

DEMO_OWNER_ID = uuid.UUID("00000000-0000-4000-8000-000000000001")
DEMO_PROJECT_NAME = "Demo Website Renewal"


def seed_dev_data(owner_id: uuid.UUID) -> None:
    """Seed a demo project with members, tasks, logged time and revenue."""
    print("🌱 Seeding development data...")
    create_db_and_tables()

    with Session(engine) as session:
        project = session.exec(
            select(Project).where(Project.name == DEMO_PROJECT_NAME, Project.owner_id == owner_id)
        ).first()
        if project:
            print("ℹ️ Demo project already exists, skipping")
            return

        # -----------------------------
        # 👥 Members
        # -----------------------------
        members = []
        for name, email, rate, department in [
            ("Aiko Tanaka", "aiko@demo.com", 5000.0, "Engineering"),
            ("Ben Carter", "ben@demo.com", 4000.0, "Design"),
        ]:
            member = session.exec(select(Member).where(Member.email == email)).first()
            if not member:
                member = Member(name=name, email=email, hourly_rate=rate, department=department)
                session.add(member)
            members.append(member)
        session.commit()
        print("✅ Added demo members")

        # -----------------------------
        # 📁 Project + assignments
        # -----------------------------
        project = Project(
            owner_id=owner_id,
            name=DEMO_PROJECT_NAME,
            description="Sample project seeded for local development",
            status=ProjectStatus.IN_PROGRESS.value,
            budget_amount=500000.0,
            start_date=date.today() - timedelta(days=14),
            end_date=date.today() + timedelta(days=30),
        )
        session.add(project)
        session.commit()
        session.refresh(project)

        for member in members:
            session.add(ProjectMember(
                project_id=project.id,
                member_id=member.id,
                hourly_rate_snapshot=member.hourly_rate,
            ))

        tasks = [
            Task(project_id=project.id, name="Requirements", planned_hours=16,
                 status=TaskStatus.COMPLETED.value, assignee_id=members[0].id),
            Task(project_id=project.id, name="UI design", planned_hours=24,
                 status=TaskStatus.IN_PROGRESS.value, assignee_id=members[1].id),
            Task(project_id=project.id, name="Implementation", planned_hours=60,
                 status=TaskStatus.TODO.value, assignee_id=members[0].id),
        ]
        session.add_all(tasks)
        session.commit()
        print("✅ Created demo project with tasks")

        # -----------------------------
        # ⏱️ Time entries + revenue
        # -----------------------------
        ledger = TimeLedger(session)
        for offset, (task, member, hours) in enumerate([
            (tasks[0], members[0], 8.0),
            (tasks[0], members[0], 6.5),
            (tasks[1], members[1], 7.0),
            (tasks[1], members[1], 5.0),
        ]):
            ledger.record_entry(
                user_id=owner_id,
                task_id=task.id,
                member_id=member.id,
                work_date=date.today() - timedelta(days=10 - offset),
                hours=hours,
            )

        BudgetLedger(session).set_revenue(project.id, 300000.0)
        print("✅ Logged sample time and set revenue")
        print(f"📁 Project id: {project.id}")

    print("🌱 Development data seeding complete.")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed the budget tracker database.")
    parser.add_argument(
        "--owner-id",
        type=uuid.UUID,
        default=DEMO_OWNER_ID,
        help="User id that owns the seeded project",
    )
    parser.add_argument(
        "--token-only",
        action="store_true",
        help="Only print a development bearer token for the owner",
    )
    args = parser.parse_args()

    if not args.token_only:
        seed_dev_data(args.owner_id)

    print("🔑 Development bearer token:")
    print(create_access_token({"user_id": args.owner_id}))
