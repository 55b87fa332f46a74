"""
Integration tests for API endpoints.
"""
import pytest
from fastapi.testclient import TestClient
from app.core.config import reload_settings
from app.core.rate_limit import limiter
from app.services.workspaces import reset_registry
from main import app


@pytest.fixture
def client():
    """Create a test client with a fresh registry and rate limit window."""
    limiter.reset()
    reset_registry()
    return TestClient(app)


@pytest.fixture
def project_id(client):
    response = client.post("/api/projects")
    assert response.status_code == 201
    return response.json()["id"]


def _add(client, project_id, visual_type="kpi-card", **coords):
    response = client.post(f"/api/projects/{project_id}/visuals", json={"type": visual_type, **coords})
    assert response.status_code == 201
    return response.json()


@pytest.mark.integration
def test_health_check(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


@pytest.mark.integration
def test_root_endpoint(client):
    response = client.get("/")
    assert response.status_code == 200
    assert "message" in response.json()


@pytest.mark.integration
def test_correlation_id_is_echoed(client):
    response = client.get("/api/health", headers={"X-Correlation-ID": "trace-42"})
    assert response.headers["X-Correlation-ID"] == "trace-42"

    generated = client.get("/api/health").headers["X-Correlation-ID"]
    assert generated and generated != "trace-42"


@pytest.mark.integration
def test_analyze_dataset(client, sales_rows):
    response = client.post("/api/analyze", json={"rows": sales_rows})

    assert response.status_code == 200
    data = response.json()
    assert data["total_rows"] == 12
    assert data["suggested_title"] == "Revenue Analysis"
    assert [c["name"] for c in data["filter_columns"]] == ["Region"]


@pytest.mark.integration
def test_analyze_empty_dataset(client):
    response = client.post("/api/analyze", json={"rows": []})
    assert response.status_code == 200
    assert response.json()["warnings"] == ["No data provided"]


@pytest.mark.integration
def test_analyze_rejects_bad_column_names(client):
    response = client.post("/api/analyze", json={"rows": [{"bad\u0000name": 1}]})

    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "INVALID_DATASET"


@pytest.mark.integration
def test_analyze_rejects_non_object_rows(client):
    response = client.post("/api/analyze", json={"rows": [1, 2, 3]})
    assert response.status_code == 422


@pytest.mark.integration
def test_analyze_is_rate_limited(client, monkeypatch, sales_rows):
    monkeypatch.setenv("RATE_LIMIT_PER_MINUTE", "2")
    reload_settings()
    try:
        statuses = [client.post("/api/analyze", json={"rows": sales_rows}).status_code for _ in range(3)]
    finally:
        monkeypatch.undo()
        reload_settings()
        limiter.reset()

    assert statuses == [200, 200, 429]


@pytest.mark.integration
def test_layouts_endpoint(client, sales_rows):
    analysis = client.post("/api/analyze", json={"rows": sales_rows}).json()
    response = client.post("/api/layouts", json=analysis)

    assert response.status_code == 200
    assert [l["id"] for l in response.json()] == ["executive", "detailed", "compact"]


@pytest.mark.integration
def test_grid_pixels_endpoint(client):
    response = client.post("/api/grid/pixels", json={
        "position": {"row": 0, "col": 0, "row_span": 1, "col_span": 1},
        "grid_columns": 4,
        "grid_rows": 4,
    })

    assert response.status_code == 200
    assert response.json() == {"x": 20, "y": 20, "width": 458, "height": 248}


@pytest.mark.integration
def test_grid_pixels_custom_canvas(client):
    response = client.post("/api/grid/pixels", json={
        "position": {"row": 0, "col": 1},
        "grid_columns": 2,
        "grid_rows": 1,
        "canvas": {"width": 1000, "height": 500},
        "padding": 0,
        "gap": 0,
    })
    assert response.json() == {"x": 500, "y": 0, "width": 500, "height": 500}


@pytest.mark.integration
def test_project_lifecycle(client, project_id):
    project = client.get(f"/api/projects/{project_id}").json()
    assert project["project_name"] == "Untitled Dashboard"
    assert project["visuals"] == []
    assert project["can_undo"] is False

    renamed = client.patch(f"/api/projects/{project_id}", json={"project_name": "Q3 Review"})
    assert renamed.json()["project_name"] == "Q3 Review"

    assert client.delete(f"/api/projects/{project_id}").json() == {"deleted": True}
    missing = client.get(f"/api/projects/{project_id}")
    assert missing.status_code == 404
    assert missing.json()["detail"]["code"] == "PROJECT_NOT_FOUND"


@pytest.mark.integration
def test_auto_layout_flow(client, project_id, sales_rows):
    analyzed = client.post(f"/api/projects/{project_id}/auto-layout/analyze", json={"rows": sales_rows})
    assert analyzed.status_code == 200
    assert analyzed.json()["selected_layout_id"] == "executive"

    selected = client.post(f"/api/projects/{project_id}/auto-layout/select", json={"layout_id": "compact"})
    assert selected.json()["selected_layout_id"] == "compact"

    applied = client.post(f"/api/projects/{project_id}/auto-layout/apply").json()
    assert applied["project_name"] == "Revenue Analysis"
    assert [v["type"] for v in applied["visuals"]] == ["kpi-card", "line-chart"]
    assert applied["can_undo"] is True

    undone = client.post(f"/api/projects/{project_id}/undo").json()
    assert undone["visuals"] == []


@pytest.mark.integration
def test_auto_layout_errors(client, project_id):
    apply = client.post(f"/api/projects/{project_id}/auto-layout/apply")
    assert apply.status_code == 409
    assert apply.json()["detail"]["code"] == "NO_ANALYSIS"

    select = client.post(f"/api/projects/{project_id}/auto-layout/select", json={"layout_id": "nope"})
    assert select.status_code == 404
    assert select.json()["detail"]["code"] == "LAYOUT_NOT_FOUND"


@pytest.mark.integration
def test_visual_editing(client, project_id):
    visual = _add(client, project_id, "bar-chart", x=100, y=120)
    assert visual["position"]["x"] == 100

    patched = client.patch(
        f"/api/projects/{project_id}/visuals/{visual['id']}",
        json={"position": {"width": 640}, "style": {"title": "Sales"}},
    ).json()
    assert patched["position"] == {"x": 100, "y": 120, "width": 640, "height": 300}
    assert patched["style"] == {"title": "Sales"}

    duplicate = client.post(f"/api/projects/{project_id}/visuals/{visual['id']}/duplicate").json()
    assert (duplicate["position"]["x"], duplicate["position"]["y"]) == (120, 140)

    project = client.delete(f"/api/projects/{project_id}/visuals/{visual['id']}").json()
    assert [v["id"] for v in project["visuals"]] == [duplicate["id"]]

    missing = client.patch(f"/api/projects/{project_id}/visuals/{visual['id']}", json={})
    assert missing.status_code == 404
    assert missing.json()["detail"]["code"] == "VISUAL_NOT_FOUND"


@pytest.mark.integration
def test_selection_and_geometry(client, project_id):
    a = _add(client, project_id, "kpi-card", x=0, y=0)
    b = _add(client, project_id, "kpi-card", x=400, y=60)
    c = _add(client, project_id, "kpi-card", x=900, y=100)

    box = client.post(
        f"/api/projects/{project_id}/selection/box",
        json={"rect": {"x": 1200, "y": 300, "width": -1250, "height": -300}},
    ).json()
    assert box["selected_visual_ids"] == [a["id"], b["id"], c["id"]]

    aligned = client.post(f"/api/projects/{project_id}/align", json={"alignment": "top"}).json()
    assert {v["position"]["y"] for v in aligned["visuals"]} == {0}

    distributed = client.post(f"/api/projects/{project_id}/distribute", json={"axis": "horizontal"}).json()
    assert [v["position"]["x"] for v in distributed["visuals"]] == [0, 450, 900]

    selection = client.post(f"/api/projects/{project_id}/selection", json={"ids": [a["id"], b["id"]]}).json()
    assert selection["selected_visual_ids"] == [a["id"], b["id"]]

    matched = client.post(
        f"/api/projects/{project_id}/match-size", json={"dimension": "width", "value": 333}
    ).json()
    assert [v["position"]["width"] for v in matched["visuals"]] == [333, 333, 250]

    client.patch(f"/api/projects/{project_id}/visuals/{b['id']}", json={"position": {"x": 455, "y": 9}})
    snapped = client.post(f"/api/projects/{project_id}/snap").json()
    b_after = next(v for v in snapped["visuals"] if v["id"] == b["id"])
    assert (b_after["position"]["x"], b_after["position"]["y"]) == (460, 0)


@pytest.mark.integration
def test_undo_redo_endpoints(client, project_id):
    visual = _add(client, project_id, "gauge")

    undone = client.post(f"/api/projects/{project_id}/undo").json()
    assert undone == {"visuals": [], "can_undo": False, "can_redo": True}

    boundary = client.post(f"/api/projects/{project_id}/undo").json()
    assert boundary["visuals"] is None

    redone = client.post(f"/api/projects/{project_id}/redo").json()
    assert [v["id"] for v in redone["visuals"]] == [visual["id"]]
    assert redone["can_redo"] is False


@pytest.mark.integration
def test_metrics_endpoint(client, project_id, sales_rows):
    client.post("/api/analyze", json={"rows": sales_rows})
    data = client.get("/api/metrics").json()

    assert data["workspaces"] == 1
    assert data["performance"]["analyze_dataset"]["count"] >= 1
    assert "request_duration" in data["performance"]
