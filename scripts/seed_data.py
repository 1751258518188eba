#!/usr/bin/env python
"""
Seed script to populate the database with sample data for local development.

Usage:
    python scripts/seed_data.py --projects 3
"""

import argparse
from decimal import Decimal

from projectdesk.auth.jwt import Identity, get_password_hash
from projectdesk.config import Base, SessionLocal, engine
from projectdesk.constants import ROLE_NAMES
from projectdesk.models.models import Project, User
from projectdesk.services import budget_items as budget_item_service
from projectdesk.services import projects as project_service
from projectdesk.services import workflow as workflow_service

SAMPLE_ITEMS = [
    {"budget_item_id": "BI-001", "category": "Labor", "estimated_cost": Decimal("12000.00"), "actual_cost": Decimal("4500.00"), "fiscal_period": "Q1-2025"},
    {"budget_item_id": "BI-002", "category": "Licenses", "estimated_cost": Decimal("3000.00"), "actual_cost": Decimal("3400.00"), "fiscal_period": "FY2025"},
]


def ensure_user(session, role: str) -> User:
    email = f"{role}@example.com"
    user = session.query(User).filter(User.email == email).first()
    if user:
        return user
    user = User(
        email=email,
        name=role.replace("_", " ").title(),
        hashed_password=get_password_hash("changeme"),
        role=role,
    )
    session.add(user)
    session.commit()
    return user


def seed_database(project_count: int) -> None:
    Base.metadata.create_all(bind=engine)
    with SessionLocal() as session:
        users = {role: ensure_user(session, role) for role in ROLE_NAMES}
        manager = users["manager"]
        actor = Identity(id=manager.id, role=manager.role, email=manager.email)

        existing = session.query(Project).count()
        targets = max(project_count, 0)
        for offset in range(targets):
            index = existing + offset + 1
            project = project_service.create_project(
                session, f"Sample Project {index}", f"Demo project number {index}.", actor
            )
            for payload in SAMPLE_ITEMS:
                item = budget_item_service.create_budget_item(session, project.id, dict(payload), actor)
                if payload["budget_item_id"] == "BI-001":
                    budget_item_service.decide_budget_item(session, item.id, "approved", actor)
            workflow_service.transition_project(session, project.id, "scoping", actor)

        print(f"Seed complete. Created {targets} projects; every role has <role>@example.com / 'changeme'.")


def main():
    parser = argparse.ArgumentParser(description="Seed the ProjectDesk database with sample data.")
    parser.add_argument("--projects", type=int, default=3, help="Number of sample projects to create")
    args = parser.parse_args()
    seed_database(args.projects)


if __name__ == "__main__":
    main()
