from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..api.dependencies import get_db
from ..auth.jwt import Identity, get_current_user
from ..schemas.schemas import ApiResponse, BudgetSummary, StatusCount
from ..services import analytics as analytics_service

router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.get("/budget-summary", response_model=ApiResponse[BudgetSummary])
def budget_summary(
    db: Session = Depends(get_db),
    _: Identity = Depends(get_current_user),
) -> ApiResponse[BudgetSummary]:
    return ApiResponse[BudgetSummary](data=BudgetSummary(**analytics_service.budget_summary(db)))


@router.get("/project-status", response_model=ApiResponse[List[StatusCount]])
def project_status(
    db: Session = Depends(get_db),
    _: Identity = Depends(get_current_user),
) -> ApiResponse[List[StatusCount]]:
    rows = analytics_service.project_status_distribution(db)
    return ApiResponse[List[StatusCount]](data=[StatusCount(**row) for row in rows])
