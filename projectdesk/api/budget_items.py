from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..api.dependencies import get_db
from ..auth.jwt import Identity, get_current_user
from ..auth.permissions import can_approve, can_delete, can_edit, require_capability
from ..models.models import BudgetItem
from ..schemas.schemas import ApiResponse, ApprovalDecision, BudgetItemRead, BudgetItemUpdate
from ..services import budget_items as budget_item_service
from ..services.calculations import calculate_budget_status, calculate_contingency

router = APIRouter(prefix="/budget-items", tags=["budget"])


def serialize_budget_item(item: BudgetItem) -> BudgetItemRead:
    return BudgetItemRead.model_validate(item).model_copy(
        update={
            "contingency_amount": calculate_contingency(item.estimated_cost, item.contingency_percentage),
            "budget_status": calculate_budget_status(item.estimated_cost, item.actual_cost),
        }
    )


@router.patch("/{budget_item_id}", response_model=ApiResponse[BudgetItemRead])
def update_budget_item(
    budget_item_id: int,
    payload: BudgetItemUpdate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_capability(can_edit)),
) -> ApiResponse[BudgetItemRead]:
    try:
        item = budget_item_service.update_budget_item(
            db, budget_item_id, payload.model_dump(exclude_unset=True), identity
        )
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return ApiResponse[BudgetItemRead](data=serialize_budget_item(item))


@router.delete("/{budget_item_id}", response_model=ApiResponse[None])
def delete_budget_item(
    budget_item_id: int,
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_capability(can_delete)),
) -> ApiResponse[None]:
    try:
        budget_item_service.delete_budget_item(db, budget_item_id, identity)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return ApiResponse[None](message="Budget item deleted successfully")


@router.post("/{budget_item_id}/approve", response_model=ApiResponse[BudgetItemRead])
def approve_budget_item(
    budget_item_id: int,
    payload: ApprovalDecision,
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_capability(can_approve)),
) -> ApiResponse[BudgetItemRead]:
    try:
        item = budget_item_service.decide_budget_item(db, budget_item_id, payload.approval_status, identity)
    except PermissionError as exc:
        raise HTTPException(status_code=403, detail=str(exc)) from exc
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return ApiResponse[BudgetItemRead](data=serialize_budget_item(item))
