from __future__ import annotations

from typing import Dict, List

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..models.models import BudgetItem, Project


def _as_float(value) -> float:
    return float(value) if value is not None else 0.0


def budget_summary(session: Session) -> Dict[str, float]:
    row = session.query(
        func.coalesce(func.sum(BudgetItem.estimated_cost), 0),
        func.coalesce(func.sum(BudgetItem.actual_cost), 0),
        func.coalesce(func.sum(BudgetItem.variance), 0),
        func.coalesce(func.sum(BudgetItem.forecast_remaining), 0),
    ).one()
    total_estimated, total_actual, total_variance, total_forecast = row
    return {
        "total_estimated": _as_float(total_estimated),
        "total_actual": _as_float(total_actual),
        "total_variance": _as_float(total_variance),
        "total_forecast_remaining": _as_float(total_forecast),
    }


def project_status_distribution(session: Session) -> List[Dict[str, object]]:
    count = func.count(Project.id).label("count")
    rows = (
        session.query(Project.status, count)
        .group_by(Project.status)
        .order_by(count.desc(), Project.status.asc())
        .all()
    )
    return [{"status": status, "count": int(total)} for status, total in rows]
