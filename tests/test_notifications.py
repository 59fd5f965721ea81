import asyncio

import httpx
import respx

from src.models.procurement import Requisition
from src.services.notifications import NotificationService


def requisition() -> Requisition:
    return Requisition(
        id="pr-001", pr_number="PR-ALPHA-001", project_id="1",
        total_value=15000, currency="AED", status="pending_approval",
    )


def test_notification_skips_without_webhook():
    service = NotificationService(webhook_url=None)

    result = asyncio.run(service.send_approval_required(requisition(), 2, ["approver"]))

    assert result["status"] == "skipped"


@respx.mock
def test_approval_required_posts_adaptive_card():
    route = respx.post("https://example.com/webhook").mock(return_value=httpx.Response(200))
    service = NotificationService(webhook_url="https://example.com/webhook", api_base_url="https://approvals.local")

    result = asyncio.run(service.send_approval_required(requisition(), 2, ["approver"]))

    assert result == {"status": "sent", "http_status": 200}
    card = route.calls.last.request.content.decode()
    assert "Approval Required" in card
    assert "PR-ALPHA-001" in card
    assert "https://approvals.local/requisitions/pr-001" in card


@respx.mock
def test_webhook_error_status_is_reported():
    respx.post("https://example.com/webhook").mock(return_value=httpx.Response(500))
    service = NotificationService(webhook_url="https://example.com/webhook")

    result = asyncio.run(service.send_fully_approved(requisition()))

    assert result["http_status"] == 500
