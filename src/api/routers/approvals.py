from fastapi import APIRouter, Depends, Query, status
from loguru import logger
from pydantic import BaseModel

from ...models.approval import ApprovalDecision, ApprovalState, ThresholdBand
from ...services.approval_resolver import ApprovalResolver
from ...services.approval_workflow import ApprovalWorkflow
from ..deps import get_resolver, get_workflow

router = APIRouter(prefix="/approvals", tags=["approvals"])


class DecisionRequest(BaseModel):
    """Request body for POST /approvals/decisions"""
    requisition_id: str
    level: int
    status: str  # validated by the ledger so unknown values map to 400
    approver_id: str | None = None
    approver_name: str | None = None
    comments: str | None = None


@router.get("/required-levels", response_model=list[ThresholdBand])
async def required_levels(
    project_id: str = Query(...),
    value: float = Query(..., ge=0),
    resolver: ApprovalResolver = Depends(get_resolver),
):
    """
    Bands that apply to a requisition of the given value.

    An empty list means no approval is required; an unknown project is a 404.
    """
    return resolver.required_levels(project_id, value)


@router.get("/state", response_model=ApprovalState)
async def approval_state(
    requisition_id: str = Query(...),
    workflow: ApprovalWorkflow = Depends(get_workflow),
):
    """
    Approval sub-state of a requisition.

    Example response:
    {
        "requisition_id": "pr-001",
        "next_pending_level": 2,
        "is_fully_approved": false,
        "is_rejected": false,
        "required_levels": [...],
        "approver_roles": ["approver"]
    }
    """
    return workflow.state(requisition_id)


@router.get("/decisions", response_model=list[ApprovalDecision])
async def list_decisions(
    requisition_id: str = Query(...),
    workflow: ApprovalWorkflow = Depends(get_workflow),
):
    """Ledger entries for a requisition, in the order they were recorded"""
    return workflow.view(requisition_id).decisions


@router.post("/decisions", response_model=ApprovalDecision, status_code=status.HTTP_201_CREATED)
async def record_decision(req: DecisionRequest, workflow: ApprovalWorkflow = Depends(get_workflow)):
    """
    Append a decision to the requisition's ledger.

    Errors:
    - 400: level < 1, unknown status, missing approver_id for approved/rejected
    - 404: unknown requisition
    - 409: the level already has an approved decision
    """
    logger.info(
        "Decision request received",
        requisition_id=req.requisition_id,
        level=req.level,
        status=req.status,
        approver_id=req.approver_id,
    )
    outcome = await workflow.record_decision(
        req.requisition_id,
        req.level,
        req.status,
        req.approver_id,
        req.approver_name,
        req.comments,
    )
    return outcome.decision
