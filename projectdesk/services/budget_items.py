from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session, joinedload

from ..auth import permissions
from ..auth.jwt import Identity
from ..constants import APPROVAL_DECISIONS, BUDGET_ITEM_EDITABLE_FIELDS, DEFAULT_CONTINGENCY_PERCENTAGE
from ..models.models import BudgetItem, Project, utcnow
from .audit import record_audit
from .calculations import calculate_forecast_remaining, calculate_variance
from .projects import ProjectNotFoundError

logger = logging.getLogger(__name__)


class BudgetItemNotFoundError(LookupError):
    pass


def list_budget_items(session: Session, project_id: int) -> List[BudgetItem]:
    return (
        session.query(BudgetItem)
        .options(joinedload(BudgetItem.approver))
        .filter(BudgetItem.project_id == project_id)
        .order_by(BudgetItem.created_at.desc(), BudgetItem.id.desc())
        .all()
    )


def create_budget_item(session: Session, project_id: int, payload: Dict[str, Any], actor: Identity) -> BudgetItem:
    if session.get(Project, project_id) is None:
        raise ProjectNotFoundError("Project not found")

    estimated = payload.get("estimated_cost")
    actual = payload.get("actual_cost") or 0
    contingency = payload.get("contingency_percentage")
    item = BudgetItem(
        project_id=project_id,
        budget_item_id=payload["budget_item_id"],
        category=payload["category"],
        estimated_cost=estimated,
        actual_cost=actual,
        variance=calculate_variance(estimated, actual),
        forecast_remaining=calculate_forecast_remaining(estimated, actual),
        fiscal_period=payload.get("fiscal_period"),
        cost_center=payload.get("cost_center"),
        contingency_percentage=contingency if contingency is not None else DEFAULT_CONTINGENCY_PERCENTAGE,
        justification=payload.get("justification"),
        funding_source=payload.get("funding_source"),
        approval_status="pending",
    )
    session.add(item)
    session.commit()
    session.refresh(item)

    record_audit(
        session,
        entity_type="budget_item",
        entity_id=item.id,
        user_id=actor.id,
        action="create",
        changes=payload,
    )
    return item


def update_budget_item(session: Session, budget_item_id: int, changes: Dict[str, Any], actor: Identity) -> BudgetItem:
    updates = {key: value for key, value in changes.items() if key in BUDGET_ITEM_EDITABLE_FIELDS}
    if not updates:
        raise ValueError("No fields to update")

    item = session.get(BudgetItem, budget_item_id)
    if item is None:
        raise BudgetItemNotFoundError("Budget item not found")

    for field, value in updates.items():
        setattr(item, field, value)
    if "estimated_cost" in updates or "actual_cost" in updates:
        item.variance = calculate_variance(item.estimated_cost, item.actual_cost)
        item.forecast_remaining = calculate_forecast_remaining(item.estimated_cost, item.actual_cost)
    item.updated_at = utcnow()
    session.commit()
    session.refresh(item)

    record_audit(
        session,
        entity_type="budget_item",
        entity_id=item.id,
        user_id=actor.id,
        action="update",
        changes=updates,
    )
    return item


def delete_budget_item(session: Session, budget_item_id: int, actor: Identity) -> None:
    item = session.get(BudgetItem, budget_item_id)
    if item is None:
        raise BudgetItemNotFoundError("Budget item not found")
    session.delete(item)
    session.commit()

    record_audit(
        session,
        entity_type="budget_item",
        entity_id=budget_item_id,
        user_id=actor.id,
        action="delete",
        changes={},
    )


def decide_budget_item(
    session: Session,
    budget_item_id: int,
    decision: Optional[str],
    actor: Identity,
) -> BudgetItem:
    """Approve or reject a pending budget item.

    Checks run in order: approver role, decision value, item existence,
    pending state. Nothing is written until all of them pass.
    """
    if not permissions.can_approve(actor.role):
        raise PermissionError("Insufficient permissions")
    if not decision:
        raise ValueError("Approval status is required")
    if decision not in APPROVAL_DECISIONS:
        raise ValueError('Invalid approval status. Must be "approved" or "rejected"')

    item = session.get(BudgetItem, budget_item_id)
    if item is None:
        raise BudgetItemNotFoundError("Budget item not found")

    now = utcnow()
    updated = (
        session.query(BudgetItem)
        .filter(BudgetItem.id == budget_item_id, BudgetItem.approval_status == "pending")
        .update(
            {
                BudgetItem.approval_status: decision,
                BudgetItem.approved_by: actor.id,
                BudgetItem.approval_date: now,
                BudgetItem.last_review_date: now,
                BudgetItem.updated_at: now,
            },
            synchronize_session=False,
        )
    )
    if not updated:
        session.rollback()
        raise ValueError(f"Budget item has already been {item.approval_status}")
    session.commit()
    session.refresh(item)
    logger.info("Budget item %s %s by user %s.", budget_item_id, decision, actor.id)

    record_audit(
        session,
        entity_type="budget_item",
        entity_id=budget_item_id,
        user_id=actor.id,
        action="approve",
        changes={"approval_status": decision},
    )
    return item
