from projectdesk.models.models import AuditLog, Project, ProjectPlan


def test_create_project_starts_in_draft(client, db_session, create_user, login_as):
    user = create_user(role="viewer", name="Val Viewer")
    login_as(user)

    response = client.post("/projects", json={"name": "  <b>Intranet</b>  ", "description": "Portal"})

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["status"] == "draft"
    assert data["name"] == "bIntranet/b"
    assert data["owner_id"] == user.id
    assert data["owner_name"] == "Val Viewer"
    assert db_session.query(AuditLog).filter(AuditLog.action == "create").count() == 1


def test_create_project_requires_name(client, db_session, create_user, login_as):
    login_as(create_user())

    response = client.post("/projects", json={"description": "No name"})

    assert response.status_code == 400
    assert response.json()["error"] == "Project name is required"
    assert db_session.query(Project).count() == 0


def test_list_and_get_projects(client, create_user, create_project, create_budget_item, login_as):
    user = create_user()
    first = create_project(user, name="First")
    create_project(user, name="Second")
    create_budget_item(first, estimated="1000.00", actual="2500.00")
    login_as(user)

    listed = client.get("/projects").json()["data"]
    detail = client.get(f"/projects/{first.id}").json()["data"]

    assert {project["name"] for project in listed} == {"First", "Second"}
    assert detail["name"] == "First"
    assert detail["budget_progress"] == 100.0


def test_get_missing_project_returns_404(client, create_user, login_as):
    login_as(create_user())

    response = client.get("/projects/12345")

    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "Project not found"}


def test_patch_updates_name(client, db_session, create_user, create_project, login_as):
    user = create_user(role="team_member")
    project = create_project(user)
    login_as(user)

    response = client.patch(f"/projects/{project.id}", json={"name": "Renamed"})

    assert response.status_code == 200
    assert response.json()["data"]["name"] == "Renamed"
    entry = db_session.query(AuditLog).filter(AuditLog.action == "update").one()
    assert entry.changes == {"name": "Renamed"}


def test_patch_refuses_status_change(client, db_session, create_user, create_project, login_as):
    user = create_user()
    project = create_project(user)
    login_as(user)

    response = client.patch(f"/projects/{project.id}", json={"status": "completed"})

    assert response.status_code == 400
    db_session.refresh(project)
    assert project.status == "draft"


def test_viewer_cannot_patch_project(client, create_user, create_project, login_as):
    viewer = create_user(role="viewer")
    project = create_project(viewer)
    login_as(viewer)

    response = client.patch(f"/projects/{project.id}", json={"name": "Nope"})

    assert response.status_code == 403
    assert response.json()["error"] == "Insufficient permissions"


def test_plan_requires_approved_budget_item(client, db_session, create_user, create_project, create_budget_item, login_as):
    user = create_user(role="manager")
    project = create_project(user)
    create_budget_item(project)
    login_as(user)

    response = client.post(f"/projects/{project.id}/plan", json={"methodology": "Scrum"})

    assert response.status_code == 400
    assert response.json()["error"] == "Approve at least one budget item first"
    assert db_session.query(ProjectPlan).count() == 0


def test_plan_lifecycle(client, db_session, create_user, create_project, create_budget_item, login_as):
    user = create_user(role="manager")
    project = create_project(user)
    create_budget_item(project, approval_status="approved")
    login_as(user)

    assert client.get(f"/projects/{project.id}/plan").status_code == 404

    created = client.post(f"/projects/{project.id}/plan", json={"methodology": "Scrum", "deliverables": "MVP"})
    assert created.status_code == 201
    plan = created.json()["data"]
    assert plan["methodology"] == "Scrum"
    assert plan["planning_start_date"]

    duplicate = client.post(f"/projects/{project.id}/plan", json={"methodology": "Kanban"})
    assert duplicate.status_code == 400
    assert duplicate.json()["error"] == "A plan already exists for this project"

    updated = client.patch(f"/project-plans/{plan['id']}", json={"baseline_scope": "Phase one"})
    assert updated.status_code == 200
    assert updated.json()["data"]["baseline_scope"] == "Phase one"
    assert updated.json()["data"]["methodology"] == "Scrum"

    fetched = client.get(f"/projects/{project.id}/plan").json()["data"]
    assert fetched["baseline_scope"] == "Phase one"
    actions = [entry.action for entry in db_session.query(AuditLog).filter(AuditLog.entity_type == "project_plan")]
    assert sorted(actions) == ["create", "update"]


def test_plan_patch_rules(client, db_session, create_user, create_project, login_as):
    member = create_user(email="member@example.com", role="team_member")
    viewer = create_user(email="viewer@example.com", role="viewer")
    plan = ProjectPlan(project_id=create_project(member).id, methodology="Waterfall")
    db_session.add(plan)
    db_session.commit()

    login_as(member)
    assert client.patch(f"/project-plans/{plan.id}", json={}).status_code == 400
    assert client.patch("/project-plans/999", json={"methodology": "Scrum"}).status_code == 404

    login_as(viewer)
    response = client.patch(f"/project-plans/{plan.id}", json={"methodology": "Scrum"})
    assert response.status_code == 200
    db_session.refresh(plan)
    assert plan.methodology == "Scrum"


def test_plan_patch_without_token_is_401(client, db_session, create_user, create_project):
    plan = ProjectPlan(project_id=create_project(create_user()).id, methodology="Waterfall")
    db_session.add(plan)
    db_session.commit()

    assert client.patch(f"/project-plans/{plan.id}", json={"methodology": "Scrum"}).status_code == 401


def test_plan_patch_null_clears_field(client, db_session, create_user, create_project, login_as):
    user = create_user()
    plan = ProjectPlan(project_id=create_project(user).id, methodology="Waterfall", deliverables="MVP")
    db_session.add(plan)
    db_session.commit()
    login_as(user)

    response = client.patch(f"/project-plans/{plan.id}", json={"methodology": None})

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["methodology"] is None
    assert data["deliverables"] == "MVP"
    db_session.refresh(plan)
    assert plan.methodology is None
