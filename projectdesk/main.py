import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api import analytics, audit_logs, auth, budget_items, project_plans, projects, system
from .config import Base, engine, settings
from .core.errors import register_exception_handlers
from .core.logging import configure_logging
from .core.request_context import request_context_middleware
from .core.security import SecurityHeadersMiddleware, log_security_warnings
from .core.version import APP_VERSION

# Import the full models module so every table registers with Base metadata.
from .models import models as _all_models  # noqa: F401

configure_logging(settings.log_level, settings.log_format)

logger = logging.getLogger(__name__)

app = FastAPI(title="ProjectDesk", version=APP_VERSION)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(SecurityHeadersMiddleware)
app.middleware("http")(request_context_middleware)

register_exception_handlers(app)


@app.on_event("startup")
def startup() -> None:
    # In dev we make sure tables exist; production schemas are managed out of band.
    Base.metadata.create_all(bind=engine)
    log_security_warnings(settings)
    logger.info("ProjectDesk %s started.", APP_VERSION)


app.include_router(auth.router)
app.include_router(projects.router)
app.include_router(budget_items.router)
app.include_router(project_plans.router)
app.include_router(analytics.router)
app.include_router(audit_logs.router)
app.include_router(system.router)
