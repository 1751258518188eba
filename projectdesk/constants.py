DEFAULT_ROLES = [
    ("admin", "Administrator with full access"),
    ("manager", "Project manager who approves budgets"),
    ("team_member", "Team member who edits project data"),
    ("viewer", "Read-only stakeholder"),
]

ROLE_NAMES = tuple(name for name, _ in DEFAULT_ROLES)

PROJECT_STATUSES = (
    "draft",
    "budgeting",
    "planning",
    "in_progress",
    "completed",
    "on_hold",
)

# Canonical forward path; on_hold sits outside of it.
WORKFLOW_SEQUENCE = (
    "draft",
    "budgeting",
    "planning",
    "in_progress",
    "completed",
)

ON_HOLD_STATUS = "on_hold"

TRANSITION_COMPLETED = "completed"

APPROVAL_DECISIONS = ("approved", "rejected")

DEFAULT_CONTINGENCY_PERCENTAGE = 10

MIN_PASSWORD_LENGTH = 6

PLAN_FIELDS = (
    "methodology",
    "tools_to_be_used",
    "deliverables",
    "dependencies",
    "quality_standards",
    "communication_plan",
    "change_control_process",
    "planning_assumptions",
    "planning_constraints",
    "planning_risks",
    "baseline_scope",
    "baseline_schedule",
)

BUDGET_ITEM_EDITABLE_FIELDS = (
    "budget_item_id",
    "category",
    "estimated_cost",
    "actual_cost",
    "fiscal_period",
    "cost_center",
    "contingency_percentage",
    "justification",
    "funding_source",
)
