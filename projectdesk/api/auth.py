import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ..api.dependencies import get_db
from ..auth.jwt import Identity, create_access_token, get_current_user, get_password_hash, verify_password
from ..auth.permissions import describe_permissions
from ..config import settings
from ..core.rate_limit import RateLimit
from ..models.models import User
from ..schemas.schemas import ApiResponse, CurrentUserRead, LoginRequest, Token, UserCreate, UserRead
from ..services.audit import record_audit

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/register",
    response_model=ApiResponse[UserRead],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(RateLimit("auth.register"))],
)
def register_user(payload: UserCreate, db: Session = Depends(get_db)) -> ApiResponse[UserRead]:
    email = payload.email.lower()
    existing = db.query(User).filter(User.email == email).first()
    if existing:
        raise HTTPException(status_code=400, detail="Email already registered")

    user = User(
        email=email,
        name=payload.name,
        hashed_password=get_password_hash(payload.password),
        role=payload.role,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Registered user %s with role %s.", user.id, user.role)

    record_audit(
        db,
        entity_type="user",
        entity_id=user.id,
        user_id=user.id,
        action="create",
        changes={"email": user.email, "name": user.name, "role": user.role},
    )
    return ApiResponse[UserRead](data=UserRead.model_validate(user))


@router.post(
    "/login",
    response_model=ApiResponse[Token],
    dependencies=[Depends(RateLimit("auth.login"))],
)
def login(payload: LoginRequest, db: Session = Depends(get_db)) -> ApiResponse[Token]:
    user = db.query(User).filter(User.email == payload.email.lower()).first()
    if not user or not verify_password(payload.password, user.hashed_password):
        raise HTTPException(status_code=401, detail="Invalid email or password")
    token = Token(
        access_token=create_access_token(user),
        role=user.role,
        expires_in=settings.access_token_expire_minutes * 60,
    )
    return ApiResponse[Token](data=token)


@router.get("/me", response_model=ApiResponse[CurrentUserRead])
def read_current_user(
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_current_user),
) -> ApiResponse[CurrentUserRead]:
    user = db.get(User, identity.id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    data = CurrentUserRead.model_validate(user).model_copy(update={"permissions": describe_permissions(user.role)})
    return ApiResponse[CurrentUserRead](data=data)
