from projectdesk.services import analytics as analytics_service


def test_budget_summary_with_no_items_is_zero(db_session):
    assert analytics_service.budget_summary(db_session) == {
        "total_estimated": 0.0,
        "total_actual": 0.0,
        "total_variance": 0.0,
        "total_forecast_remaining": 0.0,
    }


def test_budget_summary_totals(db_session, create_user, create_project, create_budget_item):
    project = create_project(create_user())
    create_budget_item(project, estimated="1000.00", actual="400.00")
    create_budget_item(project, estimated="500.00", actual="750.00")

    summary = analytics_service.budget_summary(db_session)

    assert summary["total_estimated"] == 1500.0
    assert summary["total_actual"] == 1150.0
    assert summary["total_variance"] == -350.0
    assert summary["total_forecast_remaining"] == 600.0


def test_status_distribution_orders_by_count(db_session, create_user, create_project):
    user = create_user()
    create_project(user, name="A", status="draft")
    create_project(user, name="B", status="planning")
    create_project(user, name="C", status="planning")
    create_project(user, name="D", status="budgeting")

    rows = analytics_service.project_status_distribution(db_session)

    assert rows == [
        {"status": "planning", "count": 2},
        {"status": "budgeting", "count": 1},
        {"status": "draft", "count": 1},
    ]


def test_analytics_endpoints_require_token(client):
    assert client.get("/analytics/budget-summary").status_code == 401
    assert client.get("/analytics/project-status").status_code == 401


def test_status_endpoint_envelope(client, create_user, create_project, login_as):
    user = create_user()
    create_project(user)
    login_as(user)

    response = client.get("/analytics/project-status")

    assert response.status_code == 200
    assert response.json()["data"] == [{"status": "draft", "count": 1}]
