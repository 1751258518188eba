import logging
from typing import Dict

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..api.dependencies import get_db
from ..core.version import get_version_info
from ..schemas.schemas import ApiResponse, HealthStatus

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/system", tags=["system"])


@router.get("/health", response_model=ApiResponse[HealthStatus])
def health(db: Session = Depends(get_db)):
    """Report whether the database answers a trivial query."""
    try:
        timestamp = db.execute(text("SELECT CURRENT_TIMESTAMP")).scalar()
    except SQLAlchemyError as exc:
        logger.error("Health check failed: %s", exc)
        body = ApiResponse[HealthStatus](
            success=False,
            data=HealthStatus(healthy=False, error="Database unavailable"),
            error="Database unavailable",
        )
        return JSONResponse(status_code=503, content=body.model_dump(mode="json"))
    return ApiResponse[HealthStatus](data=HealthStatus(healthy=True, timestamp=timestamp))


@router.get("/version", response_model=ApiResponse[Dict[str, str]])
def version() -> ApiResponse[Dict[str, str]]:
    return ApiResponse[Dict[str, str]](data=get_version_info())
