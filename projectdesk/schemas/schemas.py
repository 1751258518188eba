import re
from datetime import datetime
from decimal import Decimal
from typing import Any, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from ..constants import MIN_PASSWORD_LENGTH, ROLE_NAMES

DataT = TypeVar("DataT")

FISCAL_PERIOD_PATTERN = re.compile(r"^(Q[1-4]-\d{4}|FY\d{4})$")


def sanitize_text(value: Any) -> Any:
    if not isinstance(value, str):
        return value
    return value.strip().replace("<", "").replace(">", "")


class ApiResponse(BaseModel, Generic[DataT]):
    success: bool = True
    data: Optional[DataT] = None
    error: Optional[str] = None
    message: Optional[str] = None


# --- Accounts ---


class UserCreate(BaseModel):
    email: EmailStr
    password: str
    name: str = Field(min_length=1)
    role: str

    @field_validator("password")
    @classmethod
    def _password_length(cls, value: str) -> str:
        if len(value) < MIN_PASSWORD_LENGTH:
            raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        return value

    @field_validator("role")
    @classmethod
    def _known_role(cls, value: str) -> str:
        if value not in ROLE_NAMES:
            raise ValueError("Invalid role")
        return value

    @field_validator("name")
    @classmethod
    def _clean_name(cls, value: str) -> str:
        return sanitize_text(value)


class UserRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    name: str
    role: str
    created_at: datetime
    updated_at: Optional[datetime] = None


class CurrentUserRead(UserRead):
    permissions: List[str] = []


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    role: str
    expires_in: int


# --- Projects ---


class ProjectCreate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None

    @field_validator("name", "description")
    @classmethod
    def _clean(cls, value: Optional[str]) -> Optional[str]:
        return sanitize_text(value)


class ProjectUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None

    @field_validator("name", "description")
    @classmethod
    def _clean(cls, value: Optional[str]) -> Optional[str]:
        return sanitize_text(value)


class ProjectRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str]
    status: str
    owner_id: Optional[int]
    owner_name: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class ProjectDetail(ProjectRead):
    budget_progress: float = 0.0


# --- Workflow ---


class WorkflowTransitionRequest(BaseModel):
    to_workflow: Optional[str] = None


class WorkflowTransitionRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    project_id: int
    from_status: str
    to_status: str
    transitioned_by: Optional[int]
    transitioned_by_name: Optional[str] = None
    transitioned_at: datetime
    status: str


class WorkflowState(BaseModel):
    project_id: int
    current_status: str
    next_status: Optional[str]
    is_terminal: bool
    transitions: List[WorkflowTransitionRead] = []


# --- Budget items ---


class BudgetItemBase(BaseModel):
    fiscal_period: Optional[str] = None
    cost_center: Optional[str] = None
    contingency_percentage: Optional[Decimal] = Field(default=None, ge=0, le=100)
    justification: Optional[str] = None
    funding_source: Optional[str] = None

    @field_validator("fiscal_period")
    @classmethod
    def _fiscal_period_format(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not FISCAL_PERIOD_PATTERN.match(value):
            raise ValueError("Fiscal period must look like Q1-2024 or FY2024")
        return value

    @field_validator("cost_center", "justification", "funding_source")
    @classmethod
    def _clean(cls, value: Optional[str]) -> Optional[str]:
        return sanitize_text(value)


class BudgetItemCreate(BudgetItemBase):
    budget_item_id: str = Field(min_length=1)
    category: str = Field(min_length=1)
    estimated_cost: Decimal = Field(ge=0)
    actual_cost: Optional[Decimal] = Field(default=None, ge=0)


class BudgetItemUpdate(BudgetItemBase):
    budget_item_id: Optional[str] = Field(default=None, min_length=1)
    category: Optional[str] = Field(default=None, min_length=1)
    estimated_cost: Optional[Decimal] = Field(default=None, ge=0)
    actual_cost: Optional[Decimal] = Field(default=None, ge=0)


class BudgetItemRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    project_id: int
    budget_item_id: str
    category: str
    estimated_cost: Decimal
    actual_cost: Decimal
    variance: Decimal
    forecast_remaining: Decimal
    fiscal_period: Optional[str]
    cost_center: Optional[str]
    contingency_percentage: Decimal
    contingency_amount: Decimal = Decimal("0")
    budget_status: str = "on_track"
    justification: Optional[str]
    funding_source: Optional[str]
    approval_status: str
    approved_by: Optional[int]
    approved_by_name: Optional[str] = None
    approval_date: Optional[datetime]
    last_review_date: Optional[datetime]
    created_at: datetime
    updated_at: datetime


class ApprovalDecision(BaseModel):
    approval_status: Optional[str] = None


# --- Plans ---


class ProjectPlanFields(BaseModel):
    methodology: Optional[str] = None
    tools_to_be_used: Optional[str] = None
    deliverables: Optional[str] = None
    dependencies: Optional[str] = None
    quality_standards: Optional[str] = None
    communication_plan: Optional[str] = None
    change_control_process: Optional[str] = None
    planning_assumptions: Optional[str] = None
    planning_constraints: Optional[str] = None
    planning_risks: Optional[str] = None
    baseline_scope: Optional[str] = None
    baseline_schedule: Optional[str] = None


class ProjectPlanRead(ProjectPlanFields):
    model_config = ConfigDict(from_attributes=True)

    id: int
    project_id: int
    planning_start_date: datetime
    created_at: datetime
    updated_at: datetime


# --- Analytics ---


class BudgetSummary(BaseModel):
    total_estimated: float
    total_actual: float
    total_variance: float
    total_forecast_remaining: float


class StatusCount(BaseModel):
    status: str
    count: int


# --- Audit ---


class AuditLogEntry(BaseModel):
    id: int
    entity_type: str
    entity_id: str
    user_id: Optional[int]
    user_name: Optional[str]
    action: str
    changes: Any = None
    created_at: datetime


# --- System ---


class HealthStatus(BaseModel):
    healthy: bool
    timestamp: Optional[datetime] = None
    error: Optional[str] = None
