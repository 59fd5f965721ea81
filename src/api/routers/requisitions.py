from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from ...models.procurement import PurchaseOrder, Requisition, StatusHistoryEntry
from ...services.approval_workflow import ApprovalWorkflow, DecisionOutcome
from ..deps import get_workflow

router = APIRouter(prefix="/requisitions", tags=["requisitions"])


class CreateRequisitionRequest(BaseModel):
    project_id: str
    total_value: float = Field(ge=0)
    currency: str = "USD"
    created_by: str | None = None
    pr_number: str | None = None


class SubmitRequest(BaseModel):
    actor_id: str
    actor_name: str | None = None


class ApproveRequest(BaseModel):
    approver_id: str | None = None
    approver_name: str | None = None
    comments: str | None = None


class RejectRequest(BaseModel):
    approver_id: str | None = None
    approver_name: str | None = None
    reason: str | None = None
    comments: str | None = None


@router.post("", response_model=Requisition, status_code=status.HTTP_201_CREATED)
async def create_requisition(req: CreateRequisitionRequest, workflow: ApprovalWorkflow = Depends(get_workflow)):
    return workflow.create_requisition(
        req.project_id, req.total_value, req.currency, req.created_by, req.pr_number
    )


@router.get("/{requisition_id}", response_model=Requisition)
async def get_requisition(requisition_id: str, workflow: ApprovalWorkflow = Depends(get_workflow)):
    return workflow.requisitions.require(requisition_id)


@router.get("/{requisition_id}/history", response_model=list[StatusHistoryEntry])
async def requisition_history(requisition_id: str, workflow: ApprovalWorkflow = Depends(get_workflow)):
    return workflow.history(requisition_id)


@router.get("/{requisition_id}/purchase-order", response_model=PurchaseOrder)
async def requisition_order(requisition_id: str, workflow: ApprovalWorkflow = Depends(get_workflow)):
    workflow.requisitions.require(requisition_id)
    order = workflow.order_for(requisition_id)
    if order is None:
        raise HTTPException(status_code=404, detail="No purchase order generated for this requisition")
    return order


@router.post("/{requisition_id}/submit", response_model=Requisition)
async def submit_requisition(requisition_id: str, req: SubmitRequest, workflow: ApprovalWorkflow = Depends(get_workflow)):
    """Send a draft into approval (approved immediately when no band applies)"""
    return await workflow.submit(requisition_id, req.actor_id, req.actor_name)


@router.post("/{requisition_id}/approve", response_model=DecisionOutcome)
async def approve_requisition(requisition_id: str, req: ApproveRequest, workflow: ApprovalWorkflow = Depends(get_workflow)):
    """
    Approve the next pending level.

    Returns 400 when no approval is outstanding and 409 once the
    requisition has been rejected.
    """
    return await workflow.approve_next(
        requisition_id, req.approver_id, req.approver_name, req.comments
    )


@router.post("/{requisition_id}/reject", response_model=DecisionOutcome)
async def reject_requisition(requisition_id: str, req: RejectRequest, workflow: ApprovalWorkflow = Depends(get_workflow)):
    return await workflow.reject(
        requisition_id, req.approver_id, req.reason, req.approver_name, req.comments
    )
