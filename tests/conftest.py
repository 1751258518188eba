import sys
from collections.abc import Callable, Generator
from decimal import Decimal
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from projectdesk.config import Base  # noqa: E402
import projectdesk.config as app_config  # noqa: E402
import projectdesk.main as app_main  # noqa: E402
from projectdesk.api.dependencies import get_db  # noqa: E402
from projectdesk.auth.jwt import Identity, get_current_user, get_password_hash  # noqa: E402
from projectdesk.core.rate_limit import limiter  # noqa: E402
# Import the full models module so all tables register with Base metadata.
from projectdesk.models import models as _all_models  # noqa: E402,F401
from projectdesk.models.models import BudgetItem, Project, User  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def _configure_global_test_db(tmp_path_factory):
    """Configure the app-wide SessionLocal/engine so TestClient uses a DB with all tables."""
    db_dir = tmp_path_factory.mktemp("globaldb")
    db_path = db_dir / "app.db"
    engine = create_engine(f"sqlite:///{db_path}")
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine)
    app_config.SessionLocal = SessionLocal
    app_config.engine = engine
    app_main.engine = engine
    yield
    engine.dispose()


@pytest.fixture(autouse=True)
def _reset_rate_limiter():
    limiter.reset()
    yield
    limiter.reset()


@pytest.fixture
def db_session(tmp_path) -> Generator[Session, None, None]:
    """Provide a fresh SQLite database for each test."""
    db_path = tmp_path / "test.db"
    engine = create_engine(f"sqlite:///{db_path}")
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(engine)
        engine.dispose()


def identity_for(user: User) -> Identity:
    return Identity(id=user.id, role=user.role, email=user.email)


@pytest.fixture
def create_user(db_session: Session) -> Callable[..., User]:
    def _create(email: str = "user@example.com", role: str = "admin", name: str = "Test User") -> User:
        user = User(email=email, name=name, hashed_password=get_password_hash("changeme"), role=role)
        db_session.add(user)
        db_session.commit()
        return user

    return _create


@pytest.fixture
def create_project(db_session: Session) -> Callable[..., Project]:
    def _create(owner: User, name: str = "Website Revamp", status: str = "draft") -> Project:
        project = Project(name=name, description="", status=status, owner_id=owner.id)
        db_session.add(project)
        db_session.commit()
        return project

    return _create


@pytest.fixture
def create_budget_item(db_session: Session) -> Callable[..., BudgetItem]:
    def _create(
        project: Project,
        estimated: str = "1000.00",
        actual: str = "0",
        approval_status: str = "pending",
    ) -> BudgetItem:
        estimated_cost = Decimal(estimated)
        actual_cost = Decimal(actual)
        item = BudgetItem(
            project_id=project.id,
            budget_item_id=f"BI-{project.id}-{estimated}",
            category="Labor",
            estimated_cost=estimated_cost,
            actual_cost=actual_cost,
            variance=actual_cost - estimated_cost,
            forecast_remaining=max(estimated_cost - actual_cost, Decimal("0")),
            approval_status=approval_status,
        )
        db_session.add(item)
        db_session.commit()
        return item

    return _create


@pytest.fixture
def client(db_session: Session) -> Generator[TestClient, None, None]:
    def _override_get_db():
        try:
            yield db_session
        finally:
            pass

    app_main.app.dependency_overrides[get_db] = _override_get_db
    test_client = TestClient(app_main.app)
    try:
        yield test_client
    finally:
        test_client.close()
        app_main.app.dependency_overrides.clear()


@pytest.fixture
def login_as() -> Callable[[User], Identity]:
    """Make every request authenticate as ``user`` without a token."""

    def _login(user: User) -> Identity:
        identity = identity_for(user)
        app_main.app.dependency_overrides[get_current_user] = lambda: identity
        return identity

    return _login
