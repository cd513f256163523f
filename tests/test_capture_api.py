"""
Tests for the capture API endpoints.

Tests the FastAPI endpoints including:
- Request/response validation
- Mapping pipeline errors to status codes
- Credentials and camera controls
"""

import pytest
from fastapi.testclient import TestClient
from unittest.mock import Mock

from passthrough_vlm.api.main import create_app
from passthrough_vlm.api.dependencies.pipeline import get_pipeline
from passthrough_vlm.pipeline.capture.orchestrator import CapturePipeline, BUSY_MESSAGE
from passthrough_vlm.pipeline.capture.types import Failure, Success, PipelineState, RunResult


@pytest.fixture
def pipeline(credentials, fake_transport_cls, red_pixel_source):
    return CapturePipeline(credentials, fake_transport_cls(), red_pixel_source, capture_width=4, capture_height=4)


@pytest.fixture
def client(pipeline):
    return TestClient(create_app(pipeline=pipeline))


class TestCaptureEndpoint:
    """Test suite for POST /api/v1/capture"""

    def test_capture_success(self, client, pipeline):
        response = client.post("/api/v1/capture", json={"prompt": "What is this?"})

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["data"]["text"] == "I can see a red pixel in this image."
        assert data["data"]["processing_time"] >= 0
        wire_text, token = pipeline.transport.calls[0]
        assert "What is this?" in wire_text
        assert "data:image/png;base64," in wire_text
        assert token == "sk-or-test-key"

    def test_capture_without_body_uses_default_prompt(self, client, pipeline):
        response = client.post("/api/v1/capture")

        assert response.status_code == 200
        assert pipeline.default_prompt in pipeline.transport.calls[0][0]

    def test_raw_body_fallback_metadata(self, credentials, fake_transport_cls, red_pixel_source):
        transport = fake_transport_cls(outcome=Success('{"choices":[]}'))
        client = TestClient(create_app(pipeline=CapturePipeline(credentials, transport, red_pixel_source)))

        response = client.post("/api/v1/capture", json={})

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["text"] == '{"choices":[]}'
        assert data["metadata"] == {"extraction": "NotFound"}

    def test_reply_with_unpaired_surrogate(self, credentials, fake_transport_cls):
        """
        Test: 200 reply whose content holds a lone \\ud800 escape
        Ensures: the reply is returned instead of failing to serialize
        """
        body = '{"choices":[{"message":{"content":"hi \\ud800 there"}}]}'
        transport = fake_transport_cls(outcome=Success(body))
        client = TestClient(create_app(pipeline=CapturePipeline(credentials, transport)))

        response = client.post("/api/v1/capture/text", json={"prompt": "hi"})

        assert response.status_code == 200
        text = response.json()["data"]["text"]
        assert text.startswith("hi ") and text.endswith(" there")

    def test_transport_failure(self, credentials, fake_transport_cls, red_pixel_source):
        transport = fake_transport_cls(outcome=Failure("HTTP 401 Unauthorized", '{"error":"bad key"}'))
        client = TestClient(create_app(pipeline=CapturePipeline(credentials, transport, red_pixel_source)))

        response = client.post("/api/v1/capture", json={"prompt": "hi"})

        assert response.status_code == 502
        assert response.json()["detail"] == 'Error: HTTP 401 Unauthorized - {"error":"bad key"}'

    def test_missing_api_key(self, empty_credentials, fake_transport_cls, red_pixel_source):
        transport = fake_transport_cls()
        client = TestClient(create_app(pipeline=CapturePipeline(empty_credentials, transport, red_pixel_source)))

        response = client.post("/api/v1/capture")

        assert response.status_code == 400
        assert response.json()["detail"] == "API key not set"
        assert transport.calls == []

    def test_capture_failure(self, client, pipeline):
        pipeline.stop_camera()

        response = client.post("/api/v1/capture")

        assert response.status_code == 500
        assert "not available or not enabled" in response.json()["detail"]

    def test_busy(self, client, pipeline):
        assert pipeline._try_enter(PipelineState.PROCESSING)

        response = client.post("/api/v1/capture")

        assert response.status_code == 409
        assert response.json()["detail"] == BUSY_MESSAGE
        assert pipeline.transport.calls == []

    def test_text_prompt(self, client, pipeline):
        response = client.post("/api/v1/capture/text", json={"prompt": "Hello"})

        assert response.status_code == 200
        assert "image_url" not in pipeline.transport.calls[0][0]

    def test_text_prompt_empty(self, client):
        response = client.post("/api/v1/capture/text", json={"prompt": "   "})
        assert response.status_code == 422

    def test_text_prompt_missing(self, client):
        response = client.post("/api/v1/capture/text", json={})
        assert response.status_code == 422


class TestDependencyOverride:

    def test_error_result_with_mocked_pipeline(self):
        app = create_app()
        mock_pipeline = Mock(spec=CapturePipeline)

        mock_pipeline.capture_and_send.return_value = RunResult("error", "Unexpected error: boom")
        app.dependency_overrides[get_pipeline] = lambda: mock_pipeline

        response = TestClient(app).post("/api/v1/capture", json={"prompt": "x"})

        assert response.status_code == 500
        assert response.json()["detail"] == "Unexpected error: boom"

    def test_uninitialized_pipeline(self):
        app = create_app()
        response = TestClient(app).post("/api/v1/capture")
        assert response.status_code == 503


class TestCredentialsEndpoint:

    def test_status(self, client):
        response = client.get("/api/v1/credentials")
        assert response.status_code == 200
        assert response.json()["has_api_key"] is True

    def test_set_key(self, empty_credentials, fake_transport_cls):
        pipeline = CapturePipeline(empty_credentials, fake_transport_cls())
        client = TestClient(create_app(pipeline=pipeline))
        assert client.get("/api/v1/credentials").json()["has_api_key"] is False

        response = client.put("/api/v1/credentials", json={"api_key": "  sk-or-new  "})

        assert response.status_code == 200
        assert response.json()["has_api_key"] is True
        assert empty_credentials.get() == "sk-or-new"
        assert "sk-or-new" not in response.text

    def test_set_empty_key(self, client):
        response = client.put("/api/v1/credentials", json={"api_key": ""})
        assert response.status_code == 422


class TestCameraEndpoint:

    def test_status(self, client):
        data = client.get("/api/v1/camera").json()
        assert data["source"] == "static image"
        assert data["enabled"] is True

    def test_stop_and_start(self, client, pipeline):
        response = client.post("/api/v1/camera/stop")
        assert response.status_code == 200
        assert response.json()["enabled"] is False
        assert not pipeline.source.enabled

        response = client.post("/api/v1/camera/start")
        assert response.json()["enabled"] is True

    def test_no_source(self, credentials, fake_transport_cls):
        client = TestClient(create_app(pipeline=CapturePipeline(credentials, fake_transport_cls())))
        assert client.post("/api/v1/camera/start").status_code == 404
        assert client.get("/api/v1/camera").json()["success"] is False

    def test_preview(self, client):
        response = client.get("/api/v1/camera/preview")
        assert response.status_code == 200
        assert response.headers["content-type"] == "image/png"
        assert response.content.startswith(b"\x89PNG")

    def test_preview_disabled(self, client):
        client.post("/api/v1/camera/stop")
        assert client.get("/api/v1/camera/preview").status_code == 404


class TestHealthEndpoint:

    def test_health(self, client):
        response = client.get("/health/")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["pipeline_state"] == "idle"
        assert data["dependencies"]["credentials"] == "available"
        assert data["dependencies"]["image_source"] == "static image enabled"

    def test_ready(self, client):
        assert client.get("/health/ready").json()["ready"] is True

    def test_not_ready_while_busy(self, client, pipeline):
        pipeline._try_enter(PipelineState.CAPTURING)
        data = client.get("/health/ready").json()
        assert data["ready"] is False
        assert data["reason"] == "Pipeline capturing"

    def test_root(self, client):
        data = client.get("/").json()
        assert data["status"] == "operational"
        assert data["endpoints"]["capture"] == "/api/v1/capture"
