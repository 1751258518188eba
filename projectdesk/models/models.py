from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship as orm_relationship

from ..config import Base
from ..constants import DEFAULT_CONTINGENCY_PERCENTAGE


def utcnow():
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=False)
    hashed_password = Column(String, nullable=False)
    role = Column(String, nullable=False, default="viewer")
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    projects = orm_relationship("Project", back_populates="owner")
    audit_logs = orm_relationship("AuditLog", back_populates="user")


class Project(Base):
    __tablename__ = "projects"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    status = Column(String, nullable=False, default="draft", index=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    owner = orm_relationship("User", back_populates="projects")
    budget_items = orm_relationship("BudgetItem", back_populates="project")
    transitions = orm_relationship(
        "WorkflowTransition",
        back_populates="project",
        order_by="WorkflowTransition.id",
    )
    plan = orm_relationship("ProjectPlan", back_populates="project", uselist=False)

    @property
    def owner_name(self):
        return self.owner.name if self.owner else None


class WorkflowTransition(Base):
    __tablename__ = "workflow_transitions"

    id = Column(Integer, primary_key=True, index=True)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=False, index=True)
    from_status = Column(String, nullable=False)
    to_status = Column(String, nullable=False)
    transitioned_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    transitioned_at = Column(DateTime, default=utcnow, nullable=False)
    status = Column(String, nullable=False, default="completed")

    project = orm_relationship("Project", back_populates="transitions")
    actor = orm_relationship("User")

    @property
    def transitioned_by_name(self):
        return self.actor.name if self.actor else None


class BudgetItem(Base):
    __tablename__ = "budget_items"

    id = Column(Integer, primary_key=True, index=True)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=False, index=True)
    budget_item_id = Column(String, nullable=False)
    category = Column(String, nullable=False)
    estimated_cost = Column(Numeric(14, 2), nullable=False, default=0)
    actual_cost = Column(Numeric(14, 2), nullable=False, default=0)
    variance = Column(Numeric(14, 2), nullable=False, default=0)
    forecast_remaining = Column(Numeric(14, 2), nullable=False, default=0)
    fiscal_period = Column(String, nullable=True)
    cost_center = Column(String, nullable=True)
    contingency_percentage = Column(Numeric(5, 2), nullable=False, default=DEFAULT_CONTINGENCY_PERCENTAGE)
    justification = Column(Text, nullable=True)
    funding_source = Column(String, nullable=True)
    approval_status = Column(String, nullable=False, default="pending", index=True)
    approved_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    approval_date = Column(DateTime, nullable=True)
    last_review_date = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    project = orm_relationship("Project", back_populates="budget_items")
    approver = orm_relationship("User")

    @property
    def approved_by_name(self):
        return self.approver.name if self.approver else None


class ProjectPlan(Base):
    __tablename__ = "project_plans"

    id = Column(Integer, primary_key=True, index=True)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=False, unique=True, index=True)
    planning_start_date = Column(DateTime, default=utcnow, nullable=False)
    methodology = Column(String, nullable=True)
    tools_to_be_used = Column(Text, nullable=True)
    deliverables = Column(Text, nullable=True)
    dependencies = Column(Text, nullable=True)
    quality_standards = Column(Text, nullable=True)
    communication_plan = Column(Text, nullable=True)
    change_control_process = Column(Text, nullable=True)
    planning_assumptions = Column(Text, nullable=True)
    planning_constraints = Column(Text, nullable=True)
    planning_risks = Column(Text, nullable=True)
    baseline_scope = Column(Text, nullable=True)
    baseline_schedule = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    project = orm_relationship("Project", back_populates="plan")


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True)
    entity_type = Column(String, nullable=False, index=True)
    entity_id = Column(String, nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    action = Column(String, nullable=False)
    changes = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=utcnow, index=True, nullable=False)

    user = orm_relationship("User", back_populates="audit_logs")
