from datetime import datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ...models.procurement import PurchaseOrder
from ...services.approval_workflow import ApprovalWorkflow
from ..deps import get_workflow

router = APIRouter(prefix="/purchase-orders", tags=["purchase-orders"])


class SendRequest(BaseModel):
    sender_id: str | None = None
    sender_name: str | None = None
    message: str | None = None


class AcknowledgeRequest(BaseModel):
    acknowledged_by: str
    acknowledgment_date: datetime
    estimated_delivery_date: str | None = None
    comments: str | None = None


@router.get("/{order_id}", response_model=PurchaseOrder)
async def get_order(order_id: str, workflow: ApprovalWorkflow = Depends(get_workflow)):
    return workflow.orders.require(order_id)


@router.post("/{order_id}/send", response_model=PurchaseOrder)
async def send_order(order_id: str, req: SendRequest, workflow: ApprovalWorkflow = Depends(get_workflow)):
    """Send a generated PO to the supplier"""
    return workflow.send_order(order_id, req.sender_id, req.sender_name, req.message)


@router.post("/{order_id}/acknowledge", response_model=PurchaseOrder)
async def acknowledge_order(order_id: str, req: AcknowledgeRequest, workflow: ApprovalWorkflow = Depends(get_workflow)):
    """Record the supplier's acknowledgment of a sent PO"""
    return workflow.acknowledge_order(
        order_id,
        req.acknowledged_by,
        req.acknowledgment_date,
        req.estimated_delivery_date,
        req.comments,
    )
