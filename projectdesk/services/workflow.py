from __future__ import annotations

import logging
from typing import Dict, Optional

from sqlalchemy.orm import Session, selectinload

from ..auth.jwt import Identity
from ..config import settings
from ..constants import ON_HOLD_STATUS, PROJECT_STATUSES, TRANSITION_COMPLETED, WORKFLOW_SEQUENCE
from ..models.models import Project, WorkflowTransition, utcnow
from .audit import record_audit
from .projects import ProjectNotFoundError

logger = logging.getLogger(__name__)

NEXT_STATUS: Dict[str, str] = dict(zip(WORKFLOW_SEQUENCE, WORKFLOW_SEQUENCE[1:]))

TERMINAL_STATUSES = frozenset(status for status in WORKFLOW_SEQUENCE if status not in NEXT_STATUS)


class InvalidTargetError(ValueError):
    pass


class InvalidTransitionError(ValueError):
    pass


class TransitionConflictError(Exception):
    """The project status changed between the read and the write."""


def next_status(current: Optional[str]) -> Optional[str]:
    return NEXT_STATUS.get(current or "")


def is_transition_allowed(current: str, target: str) -> bool:
    if target not in PROJECT_STATUSES or current == target:
        return False
    if target == ON_HOLD_STATUS:
        return current in NEXT_STATUS
    if current == ON_HOLD_STATUS:
        return target in WORKFLOW_SEQUENCE
    return NEXT_STATUS.get(current) == target


def transition_project(
    session: Session,
    project_id: int,
    target_status: Optional[str],
    actor: Identity,
    enforce_sequence: Optional[bool] = None,
) -> WorkflowTransition:
    """Move a project to ``target_status`` and record the transition.

    The status read, the status update and the transition insert share one
    transaction. The project row is locked where the backend supports it, and
    the update only applies while the status is still the one that was read,
    so of two concurrent transitions at most one commits; the other raises
    ``TransitionConflictError``. On any failure the transaction is rolled back
    and nothing is written.
    """
    if actor is None:
        raise PermissionError("Unauthorized")
    if not target_status:
        raise InvalidTargetError("Target workflow is required")
    if target_status not in PROJECT_STATUSES:
        raise InvalidTargetError(f"Unknown workflow status: {target_status}")
    if enforce_sequence is None:
        enforce_sequence = settings.workflow_enforce_sequence

    try:
        project = (
            session.query(Project)
            .filter(Project.id == project_id)
            .with_for_update()
            .one_or_none()
        )
        if project is None:
            raise ProjectNotFoundError("Project not found")

        current_status = project.status
        if enforce_sequence and not is_transition_allowed(current_status, target_status):
            raise InvalidTransitionError(f"Cannot transition from {current_status} to {target_status}.")

        now = utcnow()
        # Compare-and-set on the prior status; backends without row locks
        # (SQLite) still let only one concurrent writer through.
        updated = (
            session.query(Project)
            .filter(Project.id == project_id, Project.status == current_status)
            .update({Project.status: target_status, Project.updated_at: now}, synchronize_session=False)
        )
        if not updated:
            raise TransitionConflictError(
                f"Project {project_id} is no longer {current_status}; reload and retry."
            )
        transition = WorkflowTransition(
            project_id=project.id,
            from_status=current_status,
            to_status=target_status,
            transitioned_by=actor.id,
            transitioned_at=now,
            status=TRANSITION_COMPLETED,
        )
        session.add(transition)
        session.flush()
        session.commit()
    except (ProjectNotFoundError, InvalidTransitionError):
        session.rollback()
        raise
    except TransitionConflictError:
        session.rollback()
        logger.warning("Concurrent transition detected for project %s; rolled back.", project_id)
        raise
    except Exception:
        session.rollback()
        logger.exception("Workflow transition failed for project %s; rolled back.", project_id)
        raise

    logger.info(
        "Project %s transitioned %s -> %s by user %s.", project_id, current_status, target_status, actor.id
    )
    record_audit(
        session,
        entity_type="project",
        entity_id=project_id,
        user_id=actor.id,
        action="workflow_transition",
        changes={"from": current_status, "to": target_status},
    )
    return transition


def get_workflow_state(session: Session, project_id: int) -> dict:
    project = (
        session.query(Project)
        .options(selectinload(Project.transitions).joinedload(WorkflowTransition.actor))
        .filter(Project.id == project_id)
        .first()
    )
    if project is None:
        raise ProjectNotFoundError("Project not found")
    return {
        "project_id": project.id,
        "current_status": project.status,
        "next_status": next_status(project.status),
        "is_terminal": project.status in TERMINAL_STATUSES,
        "transitions": list(project.transitions),
    }
