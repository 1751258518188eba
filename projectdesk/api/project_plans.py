from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..api.dependencies import get_db
from ..auth.jwt import Identity, get_current_user
from ..schemas.schemas import ApiResponse, ProjectPlanFields, ProjectPlanRead
from ..services import plans as plan_service

router = APIRouter(prefix="/project-plans", tags=["planning"])


@router.patch("/{plan_id}", response_model=ApiResponse[ProjectPlanRead])
def update_plan(
    plan_id: int,
    payload: ProjectPlanFields,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_user),
) -> ApiResponse[ProjectPlanRead]:
    try:
        plan = plan_service.update_plan(db, plan_id, payload.model_dump(exclude_unset=True), identity)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return ApiResponse[ProjectPlanRead](data=ProjectPlanRead.model_validate(plan))
