"""HTTP surface tests using FastAPI's TestClient with an overridden workflow."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from auction_publisher.app.dependencies import get_workflow_factory
from auction_publisher.app.server import create_app
from auction_publisher.errors import (
    PartialPublishError,
    RemoteHttpError,
    StagingError,
    ValidationError,
)
from auction_publisher.services.auction_models import SubmissionRequest
from auction_publisher.services.auction_workflow import preview_listing
from auction_publisher.settings import (
    AppConfig,
    LoggingSettings,
    PollingSettings,
    ServerSettings,
    ShopifySettings,
)

FORM = {
    "Titulo de la Subasta": "Vintage Lamp",
    "Nombre del Vendedor": "Ana",
    "Precio Inicial": "100",
    "Monto Minimo de Oferta": "5 Pesos",
}


class RecordingWorkflow:
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.requests: list[SubmissionRequest] = []
        self.closed = False

    def close(self) -> None:
        self.closed = True

    def publish(self, request: SubmissionRequest, *, dry_run: bool = False, cancel_event=None):
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        result = preview_listing(request)
        result.article = {"id": 555, **result.article}
        return result


@pytest.fixture
def workflow() -> RecordingWorkflow:
    return RecordingWorkflow()


@pytest.fixture
def client(workflow: RecordingWorkflow) -> TestClient:
    app = create_app()
    app.dependency_overrides[get_workflow_factory] = lambda: (lambda: workflow)
    return TestClient(app)


def test_health(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_create_auction_success_preserves_image_order(
    client: TestClient, workflow: RecordingWorkflow
) -> None:
    files = [
        ("images", ("img1.jpg", b"one", "image/jpeg")),
        ("images", ("img2.png", b"two", "image/png")),
    ]

    response = client.post("/create-auction", data=FORM, files=files)

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["article"]["id"] == 555
    assert body["article"]["title"] == "Vintage Lamp"
    submitted = workflow.requests[0]
    assert submitted.seller_name == "Ana"
    assert [(image.file_name, image.content_type, image.data) for image in submitted.images] == [
        ("img1.jpg", "image/jpeg", b"one"),
        ("img2.png", "image/png", b"two"),
    ]


def test_create_auction_without_images(client: TestClient, workflow: RecordingWorkflow) -> None:
    response = client.post("/create-auction", data=FORM)

    assert response.status_code == 200
    assert workflow.requests[0].images == []


def _client_failing_with(error: Exception) -> TestClient:
    app = create_app()
    failing = RecordingWorkflow(error)
    app.dependency_overrides[get_workflow_factory] = lambda: (lambda: failing)
    return TestClient(app)


def test_validation_error_is_400() -> None:
    client = _client_failing_with(
        ValidationError("Missing required fields: Precio Inicial", fields=["Precio Inicial"])
    )

    response = client.post("/create-auction", data=FORM)

    assert response.status_code == 400
    assert response.json() == {
        "success": False,
        "message": "Missing required fields: Precio Inicial",
        "error": "validation",
        "fields": ["Precio Inicial"],
    }


def test_stage_error_is_400_and_names_file() -> None:
    client = _client_failing_with(StagingError("Invalid file type", file_name="bad.gif"))

    response = client.post("/create-auction", data=FORM)

    body = response.json()
    assert response.status_code == 400
    assert body["success"] is False
    assert body["stage"] == "staging"
    assert body["file"] == "bad.gif"
    assert "bad.gif" in body["message"]


def test_partial_publish_is_500_with_article() -> None:
    error = PartialPublishError(
        "Article 555 created but metafields could not be attached: Precio Inicial",
        article_id=555,
        article={"id": 555, "title": "Vintage Lamp"},
        created=["Nombre del Vendedor"],
        failed=["Precio Inicial"],
    )
    client = _client_failing_with(error)

    response = client.post("/create-auction", data=FORM)

    body = response.json()
    assert response.status_code == 500
    assert body["error"] == "partial_publish"
    assert body["article"] == {"id": 555, "title": "Vintage Lamp"}
    assert body["failedMetafields"] == ["Precio Inicial"]


def test_remote_error_is_500() -> None:
    client = _client_failing_with(RemoteHttpError("Shopify returned HTTP 502", status=502))

    response = client.post("/create-auction", data=FORM)

    assert response.status_code == 500
    assert response.json() == {
        "success": False,
        "message": "Shopify returned HTTP 502",
        "error": "RemoteHttpError",
    }


def test_unexpected_error_is_500() -> None:
    client = _client_failing_with(KeyError("id"))

    response = client.post("/create-auction", data=FORM)

    assert response.status_code == 500
    assert response.json() == {"success": False, "message": "id", "error": "internal"}


def test_configuration_error_is_json_500() -> None:
    app = create_app()

    def broken_factory():
        raise RuntimeError("Shopify store domain is not configured")

    app.dependency_overrides[get_workflow_factory] = lambda: broken_factory

    response = TestClient(app).post("/create-auction", data=FORM)

    assert response.status_code == 500
    assert response.json()["message"] == "Shopify store domain is not configured"


def test_workflow_is_closed_after_success(client: TestClient, workflow: RecordingWorkflow) -> None:
    client.post("/create-auction", data=FORM)

    assert workflow.closed is True


def test_workflow_is_closed_after_failure() -> None:
    app = create_app()
    failing = RecordingWorkflow(StagingError("Invalid file type", file_name="bad.gif"))
    app.dependency_overrides[get_workflow_factory] = lambda: (lambda: failing)

    response = TestClient(app).post("/create-auction", data=FORM)

    assert response.status_code == 400
    assert failing.closed is True


def test_malformed_multipart_body_is_400(client: TestClient, workflow: RecordingWorkflow) -> None:
    response = client.post(
        "/create-auction",
        content=b"garbage",
        headers={"Content-Type": "multipart/form-data"},
    )

    body = response.json()
    assert response.status_code == 400
    assert body["success"] is False
    assert body["error"] == "bad_request"
    assert "boundary" in body["message"]
    assert workflow.requests == []


@pytest.fixture
def tokenless_client(monkeypatch: pytest.MonkeyPatch) -> TestClient:
    monkeypatch.delenv("SHOPIFY_ACCESS_TOKEN", raising=False)
    config = AppConfig(
        shopify=ShopifySettings(store_domain="demo.myshopify.com", blog_id="42"),
        polling=PollingSettings(),
        server=ServerSettings(),
        logging=LoggingSettings(),
    )
    return TestClient(create_app(config))


def test_invalid_price_is_rejected_before_credentials_are_needed(
    tokenless_client: TestClient,
) -> None:
    form = {**FORM, "Precio Inicial": "100.50"}
    files = [("images", ("img1.jpg", b"one", "image/jpeg"))]

    response = tokenless_client.post("/create-auction", data=form, files=files)

    body = response.json()
    assert response.status_code == 400
    assert body["success"] is False
    assert body["error"] == "validation"
    assert body["fields"] == ["Precio Inicial"]


def test_missing_form_fields_are_named(tokenless_client: TestClient) -> None:
    response = tokenless_client.post(
        "/create-auction", data={"Titulo de la Subasta": "Vintage Lamp"}
    )

    assert response.status_code == 400
    assert response.json()["fields"] == [
        "Nombre del Vendedor",
        "Precio Inicial",
        "Monto Minimo de Oferta",
    ]


def test_valid_form_without_token_is_500(tokenless_client: TestClient) -> None:
    response = tokenless_client.post("/create-auction", data=FORM)

    body = response.json()
    assert response.status_code == 500
    assert body["success"] is False
    assert "SHOPIFY_ACCESS_TOKEN" in body["message"]
