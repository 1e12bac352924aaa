from datetime import datetime

from fastapi.testclient import TestClient

from feedback_api.config import refresh_settings
from feedback_api.db.database import reset_database
from feedback_api.db.migrations import init_db
from feedback_api.db.models import ServiceFeedback, UIFeedback, UIFeedbackResponse, UIFeedbackVote
from feedback_api.db.utils import get_db
from feedback_api.services.feedback import FeedbackService

SERVICE_BODY = {
    "customerName": "Jo Bolt",
    "companyName": "Bolt Logistics",
    "contactInfo": "jo@bolt.io",
    "serviceDate": "2024-05-01",
    "serviceType": ["fuel-delivery", "technical-support"],
    "easeOfOrdering": 5,
    "orderProcessingAccuracy": 4,
    "orderChannelKnowledge": 4,
    "serviceTimeliness": 3,
    "orderAccuracy": 5,
    "productQuality": 5,
    "quantityAccuracy": 4,
    "staffProfessionalism": 5,
    "responsiveness": 4,
    "overallSatisfaction": 4,
    "priceCompetitiveness": 3,
    "stockAvailability": 4,
    "technicalInstruction": 2,
    "mostLiked": "Fast delivery",
    "followUpRequested": True,
    "preferredContactMethod": "phone",
}


def _create_app(tmp_path, monkeypatch):
    db_path = tmp_path / "feedback_api.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{db_path}")
    monkeypatch.setenv("DB_MAX_RETRIES", "3")
    monkeypatch.setenv("DB_RETRY_BASE_DELAY", "0")
    refresh_settings()
    reset_database()
    init_db()
    from feedback_api.main import create_app

    return create_app()


def _seed_service(**fields) -> str:
    values = {
        "service_date": "2024-03-01",
        "service_type": ["lubricant-supply"],
        "ease_of_ordering": 3,
        "order_processing_accuracy": 3,
        "order_channel_knowledge": 3,
        "service_timeliness": 3,
        "order_accuracy": 3,
        "product_quality": 3,
        "quantity_accuracy": 3,
        "staff_professionalism": 3,
        "responsiveness": 3,
        "overall_satisfaction": 3,
        "price_competitiveness": 3,
        "stock_availability": 3,
        "technical_instruction": 3,
    }
    values.update(fields)
    with get_db() as db:
        record = ServiceFeedback(**values)
        db.add(record)
        db.commit()
        return record.id


def test_submit_ui_feedback(tmp_path, monkeypatch):
    app = _create_app(tmp_path, monkeypatch)
    client = TestClient(app)

    response = client.post(
        "/api/feedback",
        json={
            "userName": "Ada",
            "userEmail": "",
            "feedbackType": "BUG",
            "severity": "HIGH",
            "title": "Checkout button hidden",
            "overallRating": 2,
            "tags": ["checkout", "mobile"],
        },
    )

    assert response.status_code == 201
    payload = response.json()
    assert payload["message"] == "Feedback submitted successfully"

    with get_db() as db:
        stored = db.get(UIFeedback, payload["id"])
        assert stored is not None
        assert stored.title == "Checkout button hidden"
        assert stored.user_email is None
        assert stored.tags == ["checkout", "mobile"]


def test_submit_service_feedback(tmp_path, monkeypatch):
    app = _create_app(tmp_path, monkeypatch)
    client = TestClient(app)

    response = client.post("/api/feedback", json=SERVICE_BODY)

    assert response.status_code == 201
    payload = response.json()
    assert payload["message"] == "Service feedback submitted successfully"

    with get_db() as db:
        stored = db.get(ServiceFeedback, payload["id"])
        assert stored.company_name == "Bolt Logistics"
        assert stored.follow_up_requested is True
        assert stored.service_type == ["fuel-delivery", "technical-support"]


def test_submit_service_feedback_validation_error(tmp_path, monkeypatch):
    app = _create_app(tmp_path, monkeypatch)
    client = TestClient(app)

    body = dict(SERVICE_BODY, serviceType=[], overallSatisfaction=9)
    response = client.post("/api/feedback", json=body)

    assert response.status_code == 400
    payload = response.json()
    assert payload["error"] == "Validation failed"
    fields = {detail["field"] for detail in payload["details"]}
    assert fields == {"serviceType", "overallSatisfaction"}


def test_body_without_both_service_markers_is_ui_feedback(tmp_path, monkeypatch):
    app = _create_app(tmp_path, monkeypatch)
    client = TestClient(app)

    response = client.post("/api/feedback", json={"serviceDate": "2024-05-01", "title": "Partial"})

    assert response.status_code == 201
    assert response.json()["message"] == "Feedback submitted successfully"


def test_submit_rejects_invalid_ui_payload(tmp_path, monkeypatch):
    app = _create_app(tmp_path, monkeypatch)
    client = TestClient(app)

    response = client.post("/api/feedback", json={"userEmail": "nope", "title": "x" * 101})

    assert response.status_code == 400
    fields = {detail["field"].split(".")[0] for detail in response.json()["details"]}
    assert fields == {"userEmail", "title"}


def test_submit_rejects_non_object_body(tmp_path, monkeypatch):
    app = _create_app(tmp_path, monkeypatch)
    client = TestClient(app)

    response = client.post("/api/feedback", json=["not", "an", "object"])

    assert response.status_code == 400
    assert response.json()["error"] == "Validation failed"


def test_submit_rejects_malformed_json(tmp_path, monkeypatch):
    app = _create_app(tmp_path, monkeypatch)
    client = TestClient(app)

    response = client.post(
        "/api/feedback",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json()["error"] == "Validation failed"


def test_submit_retries_transient_store_failure(tmp_path, monkeypatch):
    app = _create_app(tmp_path, monkeypatch)
    client = TestClient(app)

    original = FeedbackService.create_ui_feedback
    calls = {"count": 0}

    def flaky(self, payload):
        calls["count"] += 1
        if calls["count"] < 3:
            raise ConnectionError("Connection refused")
        return original(self, payload)

    monkeypatch.setattr(FeedbackService, "create_ui_feedback", flaky)

    response = client.post("/api/feedback", json={"title": "Retry me"})

    assert response.status_code == 201
    assert calls["count"] == 3
    with get_db() as db:
        assert db.query(UIFeedback).count() == 1


def test_submit_returns_500_after_exhausting_retries(tmp_path, monkeypatch):
    app = _create_app(tmp_path, monkeypatch)
    client = TestClient(app)
    calls = {"count": 0}

    def always_down(self, payload):
        calls["count"] += 1
        raise ConnectionError("Connection terminated unexpectedly")

    monkeypatch.setattr(FeedbackService, "create_service_feedback", always_down)

    response = client.post("/api/feedback", json=SERVICE_BODY)

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}
    assert calls["count"] == 3


def test_submit_does_not_retry_terminal_store_failure(tmp_path, monkeypatch):
    app = _create_app(tmp_path, monkeypatch)
    client = TestClient(app)
    calls = {"count": 0}

    def broken(self, payload):
        calls["count"] += 1
        raise RuntimeError("constraint violation")

    monkeypatch.setattr(FeedbackService, "create_ui_feedback", broken)

    response = client.post("/api/feedback", json={"title": "Broken"})

    assert response.status_code == 500
    assert calls["count"] == 1


def test_list_feedback_returns_both_kinds_newest_first(tmp_path, monkeypatch):
    app = _create_app(tmp_path, monkeypatch)
    client = TestClient(app)

    with get_db() as db:
        older = UIFeedback(title="Older", created_at=datetime(2024, 1, 1))
        newer = UIFeedback(title="Newer", created_at=datetime(2024, 2, 1))
        db.add_all([older, newer])
        db.flush()
        db.add(UIFeedbackResponse(feedback_id=older.id, responder_name="PM", message="On it"))
        db.add(UIFeedbackVote(feedback_id=older.id, voter_id="u1", value=1))
        db.commit()
    service_id = _seed_service()

    response = client.get("/api/feedback")

    assert response.status_code == 200
    payload = response.json()
    assert [item["title"] for item in payload["uiFeedback"]] == ["Newer", "Older"]
    assert payload["uiFeedback"][1]["responses"][0]["message"] == "On it"
    assert payload["uiFeedback"][1]["votes"][0]["voterId"] == "u1"
    assert payload["uiFeedback"][0]["feedbackType"] == "OTHER"
    assert [item["id"] for item in payload["serviceFeedback"]] == [service_id]
    assert payload["serviceFeedback"][0]["serviceType"] == ["lubricant-supply"]


def test_list_feedback_returns_500_when_store_fails(tmp_path, monkeypatch):
    app = _create_app(tmp_path, monkeypatch)
    client = TestClient(app)

    def broken(self, filters=None):
        raise RuntimeError("boom")

    monkeypatch.setattr(FeedbackService, "list_service_feedback", broken)

    response = client.get("/api/feedback")

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}


def test_filter_service_feedback(tmp_path, monkeypatch):
    app = _create_app(tmp_path, monkeypatch)
    client = TestClient(app)

    acme = _seed_service(
        company_name="Acme Mining",
        service_type=["fuel-delivery"],
        follow_up_requested=True,
        overall_satisfaction=5,
        created_at=datetime(2024, 4, 2, 18, 0),
    )
    _seed_service(customer_name="Other", created_at=datetime(2024, 4, 5, 9, 0))

    response = client.get(
        "/api/feedback/service",
        params={
            "search": "acme",
            "serviceType": "fuel-delivery",
            "followUp": "true",
            "overallSatisfaction": 5,
            "dateFrom": "2024-04-01",
            "dateTo": "2024-04-02",
        },
    )

    assert response.status_code == 200
    payload = response.json()
    assert payload["total"] == 1
    assert [item["id"] for item in payload["serviceFeedback"]] == [acme]
    assert payload["serviceTypes"] == ["fuel-delivery", "lubricant-supply"]


def test_filter_service_feedback_all_means_unfiltered(tmp_path, monkeypatch):
    app = _create_app(tmp_path, monkeypatch)
    client = TestClient(app)
    _seed_service()
    _seed_service(service_type=["other"])

    response = client.get("/api/feedback/service", params={"serviceType": "all"})

    assert response.status_code == 200
    assert response.json()["total"] == 2


def test_filter_service_feedback_rejects_bad_rating(tmp_path, monkeypatch):
    app = _create_app(tmp_path, monkeypatch)
    client = TestClient(app)

    response = client.get("/api/feedback/service", params={"overallSatisfaction": 7})

    assert response.status_code == 400
    assert response.json()["details"][0]["field"] == "query.overallSatisfaction"


def test_get_feedback_by_id(tmp_path, monkeypatch):
    app = _create_app(tmp_path, monkeypatch)
    client = TestClient(app)

    created = client.post("/api/feedback", json={"title": "Lookup"}).json()
    service_id = _seed_service()

    ui_response = client.get(f"/api/feedback/ui/{created['id']}")
    assert ui_response.status_code == 200
    assert ui_response.json()["title"] == "Lookup"

    service_response = client.get(f"/api/feedback/service/{service_id}")
    assert service_response.status_code == 200
    assert service_response.json()["serviceDate"] == "2024-03-01"


def test_get_feedback_missing_returns_404(tmp_path, monkeypatch):
    app = _create_app(tmp_path, monkeypatch)
    client = TestClient(app)

    assert client.get("/api/feedback/ui/missing").status_code == 404
    response = client.get("/api/feedback/service/missing")
    assert response.status_code == 404
    assert response.json() == {"error": "Service feedback not found"}


def test_health_reports_database(tmp_path, monkeypatch):
    app = _create_app(tmp_path, monkeypatch)
    with TestClient(app) as client:
        response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "checks": {"database": "ok"}}


def test_get_feedback_missing_id_with_driver_text_returns_404(tmp_path, monkeypatch):
    app = _create_app(tmp_path, monkeypatch)
    client = TestClient(app)
    calls = {"count": 0}
    original = FeedbackService.get_service_feedback

    def counting(self, feedback_id):
        calls["count"] += 1
        return original(self, feedback_id)

    monkeypatch.setattr(FeedbackService, "get_service_feedback", counting)

    response = client.get("/api/feedback/service/Connection refused")

    assert response.status_code == 404
    assert calls["count"] == 1
