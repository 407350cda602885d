"""
Mockup Approval Proxy - HTTP Route Tests
==========================================

What:  The FastAPI surface: status codes, body shapes, headers.
How:   httpx AsyncClient over ASGITransport; services are patched where a
       real upstream would be needed.

What we test:
    ✅ Liveness, health, and limits routes
    ✅ POST /send-to-docusign success, 400 and provider-failure 500 shapes
    ✅ Unexpected errors still carry the request id
    ✅ GET /api/docusign-logs with date filters and bad input
    ✅ Brightpearl configuration and upstream error mapping
    ✅ Image routes: missing parameters and URL proxy streaming
    ✅ X-Request-ID is echoed
"""

import base64
from unittest.mock import AsyncMock, patch

import httpx
import pytest
import pytest_asyncio
import respx

from mockup_proxy.exceptions import AuthenticationError, SubmissionError, UpstreamError
from mockup_proxy.schemas.send_log import SendLogEntry
from mockup_proxy.schemas.signature import SendResponse
from mockup_proxy.services.http_client import close_http_client
from mockup_proxy.services.send_log_store import SendLogger

VALID_SEND = {
    "pdfBase64": base64.b64encode(b"%PDF-1.4").decode(),
    "recipientEmail": "a@b.com",
    "recipientName": "A B",
    "signaturePositions": [{"page": 1, "x": 50, "y": 60}],
}


@pytest_asyncio.fixture(autouse=True)
async def _fresh_http_client():
    yield
    await close_http_client()


class TestHealthRoutes:

    @pytest.mark.asyncio
    async def test_root_banner(self, test_client):
        response = await test_client.get("/")
        assert response.status_code == 200
        assert response.text == "SFTP Proxy for Mockup Sheets is running"

    @pytest.mark.asyncio
    async def test_health_reports_unconfigured_integrations(self, test_client):
        response = await test_client.get("/health")
        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "degraded"
        assert data["send_log"] == "json_file"
        assert data["integrations"]["DocuSign"] == "configured"
        assert data["integrations"]["Brightpearl"] == "not_configured"
        assert data["integrations"]["SFTP"] == "not_configured"

    @pytest.mark.asyncio
    async def test_check_limits(self, test_client):
        response = await test_client.get("/check-limits")
        assert response.json() == {"message": "Server is configured", "limits": "50mb"}

    @pytest.mark.asyncio
    async def test_request_id_echoed(self, test_client):
        response = await test_client.get("/check-limits", headers={"X-Request-ID": "abc12345"})
        assert response.headers["X-Request-ID"] == "abc12345"

    @pytest.mark.asyncio
    async def test_request_id_generated(self, test_client):
        response = await test_client.get("/check-limits")
        assert len(response.headers["X-Request-ID"]) == 8


class TestSendToDocuSignRoute:

    @pytest.mark.asyncio
    async def test_success(self, test_client):
        mock_send = AsyncMock(return_value=SendResponse(envelope_id="EV-1", status="sent"))
        with patch("mockup_proxy.routes.signature.signature_service.send_for_signature", mock_send):
            response = await test_client.post(
                "/send-to-docusign",
                json={
                    "pdfBase64": base64.b64encode(b"%PDF-1.4").decode(),
                    "recipientEmail": "a@b.com",
                    "recipientName": "A B",
                    "signaturePositions": [{"page": 1, "x": 50, "y": 60}],
                },
                headers={"User-Agent": "mockup-editor/2.0"},
            )

        assert response.status_code == 200
        assert response.json() == {"success": True, "envelopeId": "EV-1", "status": "sent"}
        kwargs = mock_send.await_args.kwargs
        assert kwargs["user_agent"] == "mockup-editor/2.0"

    @pytest.mark.asyncio
    async def test_missing_fields(self, test_client):
        response = await test_client.post("/send-to-docusign", json={"pdfBase64": "JVBERg=="})

        assert response.status_code == 400
        data = response.json()
        assert data["success"] is False
        assert data["error"] == "Missing required fields: recipientEmail, recipientName"
        assert "request_id" in data

    @pytest.mark.asyncio
    async def test_positions_not_a_list(self, test_client):
        response = await test_client.post(
            "/send-to-docusign",
            json={
                "pdfBase64": "JVBERg==",
                "recipientEmail": "a@b.com",
                "recipientName": "A B",
                "signaturePositions": "top-left",
            },
        )

        assert response.status_code == 400
        assert response.json()["error"] == "signaturePositions must be an array"

    @pytest.mark.asyncio
    async def test_submission_rejected(self, test_client):
        mock_send = AsyncMock(
            side_effect=SubmissionError(message="ENVELOPE_IS_INCOMPLETE", status_code=400)
        )
        with patch("mockup_proxy.routes.signature.signature_service.send_for_signature", mock_send):
            response = await test_client.post(
                "/send-to-docusign",
                json=VALID_SEND,
                headers={"X-Request-ID": "sub00001"},
            )

        assert response.status_code == 500
        assert response.json() == {
            "success": False,
            "error": "ENVELOPE_IS_INCOMPLETE",
            "request_id": "sub00001",
        }

    @pytest.mark.asyncio
    async def test_authentication_rejected(self, test_client):
        mock_send = AsyncMock(side_effect=AuthenticationError(message="consent_required"))
        with patch("mockup_proxy.routes.signature.signature_service.send_for_signature", mock_send):
            response = await test_client.post("/send-to-docusign", json=VALID_SEND)

        assert response.status_code == 500
        assert response.json()["success"] is False
        assert response.json()["error"] == "consent_required"

    @pytest.mark.asyncio
    async def test_unexpected_error_keeps_request_id(self):
        from mockup_proxy.main import app

        transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
        mock_send = AsyncMock(side_effect=RuntimeError("boom"))
        with patch("mockup_proxy.routes.signature.signature_service.send_for_signature", mock_send):
            async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
                response = await client.post(
                    "/send-to-docusign",
                    json=VALID_SEND,
                    headers={"X-Request-ID": "err00001"},
                )

        assert response.status_code == 500
        data = response.json()
        assert data["error"] == "An unexpected error occurred. Please try again or contact support."
        assert data["request_id"] == "err00001"

    @pytest.mark.asyncio
    async def test_malformed_json(self, test_client):
        response = await test_client.post(
            "/send-to-docusign",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["success"] is False


class TestSendLogRoute:

    @pytest.mark.asyncio
    async def test_list_with_filters(self, test_client, json_store):
        await json_store.append(SendLogEntry.model_validate({
            "timestamp": "2025-01-10T10:00:00Z", "envelopeId": "OLD", "status": "sent",
        }))
        await json_store.append(SendLogEntry.model_validate({
            "timestamp": "2025-01-20T10:00:00Z", "envelopeId": "NEW", "status": "sent",
        }))

        with patch("mockup_proxy.routes.send_logs.get_send_logger", return_value=SendLogger(json_store)):
            response = await test_client.get(
                "/api/docusign-logs", params={"startDate": "2025-01-15", "limit": 10}
            )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["total"] == 2
        assert data["returned"] == 1
        assert data["logs"][0]["envelopeId"] == "NEW"

    @pytest.mark.asyncio
    async def test_invalid_date(self, test_client, json_store):
        with patch("mockup_proxy.routes.send_logs.get_send_logger", return_value=SendLogger(json_store)):
            response = await test_client.get("/api/docusign-logs", params={"startDate": "last week"})

        assert response.status_code == 400
        assert "startDate" in response.json()["error"]

    @pytest.mark.asyncio
    async def test_limit_out_of_range(self, test_client):
        response = await test_client.get("/api/docusign-logs", params={"limit": 0})
        assert response.status_code == 400


class TestBrightpearlRoutes:

    @pytest.mark.asyncio
    async def test_unconfigured(self, test_client):
        response = await test_client.get("/api/brightpearl/order/1")

        assert response.status_code == 500
        assert response.json()["error"] == "Brightpearl credentials not configured"

    @pytest.mark.asyncio
    async def test_upstream_status_mirrored(self, test_client):
        mock_get = AsyncMock(side_effect=UpstreamError(message="Order not found", status_code=404))
        with patch("mockup_proxy.routes.brightpearl.brightpearl_service.get_order", mock_get):
            response = await test_client.get("/api/brightpearl/order/999")

        assert response.status_code == 404
        assert response.json()["error"] == "Order not found"

    @pytest.mark.asyncio
    async def test_proof_required_serialized_camel_case(self, test_client):
        from mockup_proxy.schemas.brightpearl import ProofOrder

        mock_list = AsyncMock(return_value=[ProofOrder(order_id=7, order_reference="R7", customer_name="C")])
        with patch("mockup_proxy.routes.brightpearl.brightpearl_service.list_proof_required", mock_list):
            response = await test_client.get("/api/brightpearl/proof-required")

        assert response.status_code == 200
        assert response.json() == [{
            "orderId": 7,
            "orderReference": "R7",
            "customerName": "C",
            "placedOn": None,
            "deliveryDate": None,
        }]


class TestImageRoutes:

    @pytest.mark.asyncio
    async def test_image_missing_code(self, test_client):
        response = await test_client.get("/image")
        assert response.status_code == 400
        assert response.json()["error"] == 'Missing "code" query parameter'

    @pytest.mark.asyncio
    async def test_image_success(self, test_client):
        mock_fetch = AsyncMock(return_value=b"\xff\xd8jpeg")
        with patch("mockup_proxy.routes.images.image_service.fetch_sftp_image", mock_fetch):
            response = await test_client.get("/image", params={"code": "ABC"})

        assert response.status_code == 200
        assert response.headers["content-type"] == "image/jpeg"
        assert response.content == b"\xff\xd8jpeg"
        mock_fetch.assert_awaited_once_with("ABC")

    @pytest.mark.asyncio
    async def test_fetch_image_missing_url(self, test_client):
        response = await test_client.get("/fetch-image")
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_fetch_image_streams(self, test_client):
        url = "https://cdn.example.com/logo.png"
        with respx.mock(assert_all_called=True) as router:
            router.get(url).mock(
                return_value=httpx.Response(200, content=b"PNGDATA", headers={"content-type": "image/png"})
            )
            response = await test_client.get("/fetch-image", params={"url": url})

        assert response.status_code == 200
        assert response.headers["content-type"] == "image/png"
        assert response.content == b"PNGDATA"

    @pytest.mark.asyncio
    async def test_fetch_image_upstream_failure(self, test_client):
        url = "https://cdn.example.com/missing.png"
        with respx.mock() as router:
            router.get(url).mock(return_value=httpx.Response(404))
            response = await test_client.get("/fetch-image", params={"url": url})

        assert response.status_code == 500
        assert response.json()["error"] == f"Error proxying image: Failed to fetch {url}"
