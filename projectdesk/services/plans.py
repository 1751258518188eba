from __future__ import annotations

from typing import Any, Dict

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..auth.jwt import Identity
from ..constants import PLAN_FIELDS
from ..models.models import BudgetItem, Project, ProjectPlan, utcnow
from .audit import record_audit
from .projects import ProjectNotFoundError


class PlanNotFoundError(LookupError):
    pass


def get_plan_for_project(session: Session, project_id: int) -> ProjectPlan:
    project = session.get(Project, project_id)
    if project is None:
        raise ProjectNotFoundError("Project not found")
    if project.plan is None:
        raise PlanNotFoundError("Plan not found")
    return project.plan


def create_plan(session: Session, project_id: int, fields: Dict[str, Any], actor: Identity) -> ProjectPlan:
    project = session.get(Project, project_id)
    if project is None:
        raise ProjectNotFoundError("Project not found")

    approved_count = (
        session.query(func.count(BudgetItem.id))
        .filter(BudgetItem.project_id == project_id, BudgetItem.approval_status == "approved")
        .scalar()
    )
    if not approved_count:
        raise ValueError("Approve at least one budget item first")

    if project.plan is not None:
        raise ValueError("A plan already exists for this project")

    values = {key: fields.get(key) for key in PLAN_FIELDS}
    plan = ProjectPlan(project_id=project_id, planning_start_date=utcnow(), **values)
    session.add(plan)
    session.commit()
    session.refresh(plan)

    record_audit(
        session,
        entity_type="project_plan",
        entity_id=plan.id,
        user_id=actor.id,
        action="create",
        changes={key: value for key, value in values.items() if value is not None},
    )
    return plan


def update_plan(session: Session, plan_id: int, changes: Dict[str, Any], actor: Identity) -> ProjectPlan:
    # Explicit nulls clear a field; omitted keys are left alone.
    updates = {key: value for key, value in changes.items() if key in PLAN_FIELDS}
    if not updates:
        raise ValueError("No fields to update")

    plan = session.get(ProjectPlan, plan_id)
    if plan is None:
        raise PlanNotFoundError("Plan not found")

    for field, value in updates.items():
        setattr(plan, field, value)
    plan.updated_at = utcnow()
    session.commit()
    session.refresh(plan)

    record_audit(
        session,
        entity_type="project_plan",
        entity_id=plan.id,
        user_id=actor.id,
        action="update",
        changes=updates,
    )
    return plan
