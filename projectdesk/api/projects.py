from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..api.budget_items import serialize_budget_item
from ..api.dependencies import get_db
from ..auth.jwt import Identity, get_current_user
from ..auth.permissions import can_edit, require_capability
from ..schemas.schemas import (
    ApiResponse,
    BudgetItemCreate,
    BudgetItemRead,
    ProjectCreate,
    ProjectDetail,
    ProjectPlanFields,
    ProjectPlanRead,
    ProjectRead,
    ProjectUpdate,
    WorkflowState,
    WorkflowTransitionRequest,
)
from ..services import budget_items as budget_item_service
from ..services import plans as plan_service
from ..services import projects as project_service
from ..services import workflow as workflow_service
from ..services.calculations import calculate_project_progress

router = APIRouter(prefix="/projects", tags=["projects"])

require_editor = require_capability(can_edit)


@router.get("", response_model=ApiResponse[List[ProjectRead]])
def list_projects(
    db: Session = Depends(get_db),
    _: Identity = Depends(get_current_user),
) -> ApiResponse[List[ProjectRead]]:
    projects = project_service.list_projects(db)
    return ApiResponse[List[ProjectRead]](data=[ProjectRead.model_validate(project) for project in projects])


@router.post("", response_model=ApiResponse[ProjectRead], status_code=status.HTTP_201_CREATED)
def create_project(
    payload: ProjectCreate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_user),
) -> ApiResponse[ProjectRead]:
    try:
        project = project_service.create_project(db, payload.name, payload.description, identity)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return ApiResponse[ProjectRead](data=ProjectRead.model_validate(project))


@router.get("/{project_id}", response_model=ApiResponse[ProjectDetail])
def get_project(
    project_id: int,
    db: Session = Depends(get_db),
    _: Identity = Depends(get_current_user),
) -> ApiResponse[ProjectDetail]:
    try:
        project = project_service.get_project(db, project_id)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    detail = ProjectDetail.model_validate(project).model_copy(
        update={"budget_progress": calculate_project_progress(project.budget_items)}
    )
    return ApiResponse[ProjectDetail](data=detail)


@router.patch("/{project_id}", response_model=ApiResponse[ProjectRead])
def update_project(
    project_id: int,
    payload: ProjectUpdate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_editor),
) -> ApiResponse[ProjectRead]:
    try:
        project = project_service.update_project(db, project_id, payload.model_dump(exclude_unset=True), identity)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return ApiResponse[ProjectRead](data=ProjectRead.model_validate(project))


@router.get("/{project_id}/workflow", response_model=ApiResponse[WorkflowState])
def get_workflow(
    project_id: int,
    db: Session = Depends(get_db),
    _: Identity = Depends(get_current_user),
) -> ApiResponse[WorkflowState]:
    try:
        state = workflow_service.get_workflow_state(db, project_id)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return ApiResponse[WorkflowState](data=WorkflowState.model_validate(state, from_attributes=True))


@router.post("/{project_id}/workflow/transition", response_model=ApiResponse[None])
def transition_workflow(
    project_id: int,
    payload: WorkflowTransitionRequest,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_user),
) -> ApiResponse[None]:
    try:
        workflow_service.transition_project(db, project_id, payload.to_workflow, identity)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except workflow_service.TransitionConflictError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except SQLAlchemyError as exc:
        raise HTTPException(status_code=500, detail="Failed to transition workflow") from exc
    return ApiResponse[None](message="Workflow transitioned successfully")


@router.get("/{project_id}/budget-items", response_model=ApiResponse[List[BudgetItemRead]])
def list_budget_items(
    project_id: int,
    db: Session = Depends(get_db),
    _: Identity = Depends(get_current_user),
) -> ApiResponse[List[BudgetItemRead]]:
    items = budget_item_service.list_budget_items(db, project_id)
    return ApiResponse[List[BudgetItemRead]](data=[serialize_budget_item(item) for item in items])


@router.post(
    "/{project_id}/budget-items",
    response_model=ApiResponse[BudgetItemRead],
    status_code=status.HTTP_201_CREATED,
)
def create_budget_item(
    project_id: int,
    payload: BudgetItemCreate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_editor),
) -> ApiResponse[BudgetItemRead]:
    try:
        item = budget_item_service.create_budget_item(db, project_id, payload.model_dump(), identity)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return ApiResponse[BudgetItemRead](data=serialize_budget_item(item))


@router.get("/{project_id}/plan", response_model=ApiResponse[ProjectPlanRead])
def get_plan(
    project_id: int,
    db: Session = Depends(get_db),
    _: Identity = Depends(get_current_user),
) -> ApiResponse[ProjectPlanRead]:
    try:
        plan = plan_service.get_plan_for_project(db, project_id)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return ApiResponse[ProjectPlanRead](data=ProjectPlanRead.model_validate(plan))


@router.post("/{project_id}/plan", response_model=ApiResponse[ProjectPlanRead], status_code=status.HTTP_201_CREATED)
def create_plan(
    project_id: int,
    payload: ProjectPlanFields,
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_editor),
) -> ApiResponse[ProjectPlanRead]:
    try:
        plan = plan_service.create_plan(db, project_id, payload.model_dump(), identity)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return ApiResponse[ProjectPlanRead](data=ProjectPlanRead.model_validate(plan))
