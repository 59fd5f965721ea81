import json
from typing import Optional

import httpx

from ..models.approval import ApprovalDecision
from ..models.procurement import Requisition

# Lightweight approval notifications: post an Adaptive Card to a Teams Incoming Webhook.
# Constructed explicitly and handed to the caller that triggers it.

ADAPTIVE_CARD_TEMPLATE = {
    "type": "message",
    "attachments": [{
        "contentType": "application/vnd.microsoft.card.adaptive",
        "content": {
            "$schema": "http://adaptivecards.io/schemas/adaptive-card.json",
            "type": "AdaptiveCard",
            "version": "1.4",
            "body": [
                {"type": "TextBlock", "weight": "Bolder", "size": "Medium", "text": "Purchase Requisition"},
                {"type": "FactSet", "facts": []}
            ],
            "actions": []
        }
    }]
}


class NotificationService:
    def __init__(self, webhook_url: Optional[str] = None, api_base_url: str = "http://127.0.0.1:8000", timeout: float = 10):
        self.webhook_url = webhook_url
        self.api_base_url = api_base_url
        self.timeout = timeout

    def _build_card(self, title: str, requisition: Requisition, extra_facts: dict) -> dict:
        card = json.loads(json.dumps(ADAPTIVE_CARD_TEMPLATE))
        content = card["attachments"][0]["content"]
        content["body"][0]["text"] = title

        facts = content["body"][1]["facts"]
        for k in ["pr_number", "project_id", "total_value", "currency", "status"]:
            value = getattr(requisition, k)
            if value is not None:
                facts.append({"title": k, "value": str(value)})
        for k, value in extra_facts.items():
            if value is not None:
                facts.append({"title": k, "value": str(value)})

        content["actions"] = [{
            "type": "Action.OpenUrl",
            "title": "View requisition",
            "url": f"{self.api_base_url}/requisitions/{requisition.id}"
        }]
        return card

    async def _post(self, card: dict) -> dict:
        if not self.webhook_url:
            return {"status": "skipped", "reason": "TEAMS_WEBHOOK_URL not set"}

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            r = await client.post(self.webhook_url, json=card)
            return {"status": "sent", "http_status": r.status_code}

    async def send_approval_required(self, requisition: Requisition, level: int, approver_roles: list[str]) -> dict:
        card = self._build_card(
            "Approval Required",
            requisition,
            {"approval_level": level, "approver_roles": ", ".join(approver_roles) or None},
        )
        return await self._post(card)

    async def send_decision_recorded(self, requisition: Requisition, decision: ApprovalDecision) -> dict:
        card = self._build_card(
            f"Level {decision.approval_level} {decision.status}",
            requisition,
            {
                "approver": decision.approver_name or decision.approver_id,
                "comments": decision.comments,
            },
        )
        return await self._post(card)

    async def send_fully_approved(self, requisition: Requisition) -> dict:
        card = self._build_card(
            "Requisition Approved",
            requisition,
            {"approved_by": requisition.approved_by_name or requisition.approved_by},
        )
        return await self._post(card)

    async def send_rejected(self, requisition: Requisition, decision: ApprovalDecision) -> dict:
        card = self._build_card(
            "Requisition Rejected",
            requisition,
            {
                "rejected_by": decision.approver_name or decision.approver_id,
                "reason": requisition.rejection_reason or decision.comments,
            },
        )
        return await self._post(card)
