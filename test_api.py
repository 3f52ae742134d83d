import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import verifyx.models  # noqa: F401
from verifyx.core.risk_scorer import RiskScorer
from verifyx.database import Base, get_db
from verifyx.main import app
from verifyx.models import Report

SCAM_OFFER = (
    "Pay ₹500 registration fee to confirm your selection, "
    "contact hr@gmail.com, send to upi@ybl"
)

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def client():
    Base.metadata.create_all(bind=engine)

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()
    Base.metadata.drop_all(bind=engine)


def _submit(client, value, score, reasons=None):
    response = client.post("/api/report", json={
        "type": "text",
        "value": value,
        "reasons": reasons or [],
        "score": score,
    })
    assert response.status_code == 200
    return response.json()["id"]


# ===== VERIFY =====

def test_verify_scam_offer(client):
    response = client.post("/api/verify", json={"type": "text", "value": SCAM_OFFER})

    assert response.status_code == 200
    data = response.json()
    assert data["category"] == "high"
    assert data["level"] == "red"
    assert data["score"] >= 60
    assert "Using free email provider (hr@gmail.com)" in data["reasons"]
    assert data["features"]["freeEmailCount"] == 1


def test_verify_defaults_type_to_text(client):
    response = client.post("/api/verify", json={"value": "Please pay now"})

    assert response.status_code == 200
    assert response.json()["features"]["inputType"] == "text"
    assert response.json()["score"] == 33


def test_verify_accepts_numeric_value(client):
    response = client.post("/api/verify", json={"value": 9876543210})

    assert response.status_code == 200
    assert response.json()["features"]["phoneCount"] == 1


@pytest.mark.parametrize("value", [0, False])
def test_verify_treats_falsy_scalar_as_missing(client, value):
    response = client.post("/api/verify", json={"value": value})

    assert response.status_code == 400
    assert response.json()["detail"] == "missing value"


@pytest.mark.parametrize("body", [{}, {"type": "text"}, {"type": "text", "value": ""}])
def test_verify_rejects_missing_value(client, body):
    response = client.post("/api/verify", json=body)

    assert response.status_code == 400
    assert response.json()["detail"] == "missing value"


def test_verify_without_body(client):
    assert client.post("/api/verify").status_code == 400


def test_verify_rejects_oversized_value(client):
    response = client.post("/api/verify", json={"value": "a" * (200 * 1024 + 1)})
    assert response.status_code == 413


def test_verify_reports_analysis_failure(client, monkeypatch):
    def boom(self, input_type, text):
        raise RuntimeError("boom")

    monkeypatch.setattr(RiskScorer, "analyze", boom)
    response = client.post("/api/verify", json={"value": "anything"})

    assert response.status_code == 500
    assert response.json()["detail"] == "Analysis failed: boom"


def test_verify_query_endpoint(client):
    response = client.get("/api/verify", params={"value": "Register at http://job-apply-now.xyz"})

    assert response.status_code == 200
    data = response.json()
    assert data["category"] == "medium"
    assert data["features"]["suspiciousTLD"] is True


def test_verify_query_endpoint_requires_value(client):
    response = client.get("/api/verify")

    assert response.status_code == 400
    assert "missing value" in response.json()["detail"]


# ===== REPORTS =====

def test_report_round_trip(client):
    verdict = client.post("/api/verify", json={"value": SCAM_OFFER}).json()
    report_id = _submit(client, SCAM_OFFER, verdict["score"], verdict["reasons"])

    response = client.get("/api/reports")
    assert response.status_code == 200
    rows = response.json()
    assert len(rows) == 1
    assert rows[0]["id"] == report_id
    assert rows[0]["value"] == SCAM_OFFER
    assert rows[0]["reasons"] == verdict["reasons"]
    assert rows[0]["score"] == verdict["score"]
    assert rows[0]["category"] == "high"
    assert rows[0]["created_at"] is not None


def test_report_requires_value(client):
    response = client.post("/api/report", json={"reasons": ["x"], "score": 10})

    assert response.status_code == 400
    assert response.json()["detail"] == "missing value"


def test_report_accepts_numeric_value(client):
    response = client.post("/api/report", json={"value": 123, "score": 0})

    assert response.status_code == 200
    report = client.get(f"/api/reports/{response.json()['id']}").json()
    assert report["value"] == "123"


def test_report_rejects_out_of_range_score(client):
    response = client.post("/api/report", json={"value": "x", "score": 150})
    assert response.status_code == 422


def test_reports_are_newest_first_and_filterable(client):
    low_id = _submit(client, "hello", 0)
    medium_id = _submit(client, "pay now", 33)
    high_id = _submit(client, "scam", 90)

    rows = client.get("/api/reports").json()
    assert [r["id"] for r in rows] == [high_id, medium_id, low_id]

    rows = client.get("/api/reports", params={"category": "medium"}).json()
    assert [r["id"] for r in rows] == [medium_id]

    rows = client.get("/api/reports", params={"limit": 1}).json()
    assert len(rows) == 1

    assert client.get("/api/reports", params={"category": "extreme"}).status_code == 422


def test_malformed_stored_reasons_become_empty_list(client):
    db = TestingSessionLocal()
    db.add(Report(type="text", value="legacy", reasons={"not": "a list"}, score=5))
    db.commit()
    db.close()

    rows = client.get("/api/reports").json()
    assert rows[0]["reasons"] == []


def test_get_and_delete_report(client):
    report_id = _submit(client, "pay now", 33, ["Detected payment-related keywords (1)"])

    response = client.get(f"/api/reports/{report_id}")
    assert response.status_code == 200
    assert response.json()["reasons"] == ["Detected payment-related keywords (1)"]

    assert client.delete(f"/api/reports/{report_id}").json() == {"ok": True, "id": report_id}
    assert client.get(f"/api/reports/{report_id}").status_code == 404
    assert client.delete(f"/api/reports/{report_id}").status_code == 404


def test_statistics(client):
    _submit(client, "hello", 0)
    _submit(client, "pay now", 33)
    _submit(client, "scam", 90)
    _submit(client, "scam again", 60)

    data = client.get("/api/statistics").json()
    assert data["total_reports"] == 4
    assert data["high"] == 2
    assert data["medium"] == 1
    assert data["low"] == 1
    assert data["avg_score"] == pytest.approx(45.75)
    assert len(data["recent_reports"]) == 4


# ===== MISC =====

def test_health_and_root(client):
    assert client.get("/api/health").json()["status"] == "healthy"
    assert "verify" in client.get("/").json()["message"]
