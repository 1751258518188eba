from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session, joinedload

from ..auth.jwt import Identity
from ..models.models import Project, utcnow
from .audit import record_audit

UPDATABLE_FIELDS = ("name", "description")


class ProjectNotFoundError(LookupError):
    pass


def list_projects(session: Session) -> List[Project]:
    return (
        session.query(Project)
        .options(joinedload(Project.owner))
        .order_by(Project.created_at.desc(), Project.id.desc())
        .all()
    )


def get_project(session: Session, project_id: int) -> Project:
    project = (
        session.query(Project)
        .options(joinedload(Project.owner), joinedload(Project.budget_items))
        .filter(Project.id == project_id)
        .first()
    )
    if project is None:
        raise ProjectNotFoundError("Project not found")
    return project


def create_project(session: Session, name: str, description: Optional[str], actor: Identity) -> Project:
    if not name or not name.strip():
        raise ValueError("Project name is required")
    project = Project(
        name=name.strip(),
        description=description or "",
        status="draft",
        owner_id=actor.id,
    )
    session.add(project)
    session.commit()
    session.refresh(project)

    record_audit(
        session,
        entity_type="project",
        entity_id=project.id,
        user_id=actor.id,
        action="create",
        changes={"name": project.name, "description": project.description, "status": "draft"},
    )
    return project


def update_project(session: Session, project_id: int, changes: Dict[str, Any], actor: Identity) -> Project:
    if changes.get("status") is not None:
        raise ValueError("Project status can only be changed through a workflow transition")
    updates = {key: value for key, value in changes.items() if key in UPDATABLE_FIELDS and value is not None}
    if not updates:
        raise ValueError("No fields to update")
    if "name" in updates and not str(updates["name"]).strip():
        raise ValueError("Project name is required")

    project = session.get(Project, project_id)
    if project is None:
        raise ProjectNotFoundError("Project not found")

    for field, value in updates.items():
        setattr(project, field, value)
    project.updated_at = utcnow()
    session.commit()
    session.refresh(project)

    record_audit(
        session,
        entity_type="project",
        entity_id=project.id,
        user_id=actor.id,
        action="update",
        changes=updates,
    )
    return project
