from datetime import datetime, UTC
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

DecisionStatus = Literal["pending", "approved", "rejected"]
DECISION_STATUSES: tuple[str, ...] = ("pending", "approved", "rejected")


def utcnow() -> datetime:
    return datetime.now(UTC)


class ThresholdBand(BaseModel):
    """One row of a project's authorization matrix: [threshold_min, threshold_max) -> level/role"""
    id: str | None = Field(default=None)
    project_id: str
    approval_level: int = Field(ge=1)
    threshold_min: float = Field(ge=0)
    threshold_max: float
    approver_role: str
    is_active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    def matches(self, total_value: float) -> bool:
        """Lower bound inclusive, upper bound exclusive"""
        return self.threshold_min <= total_value < self.threshold_max


class ApprovalDecision(BaseModel):
    """Append-only ledger entry; never edited once recorded"""
    model_config = ConfigDict(frozen=True)

    id: str
    requisition_id: str
    sequence: int
    approval_level: int
    status: DecisionStatus
    approver_id: str | None = None
    approver_name: str | None = None
    comments: str | None = None
    decided_at: datetime | None = None
    created_at: datetime = Field(default_factory=utcnow)


class RequisitionApprovalView(BaseModel):
    """Read-only projection of a requisition as consumed by the resolver"""
    requisition_id: str | None = None
    project_id: str
    total_value: float
    currency: str = "USD"
    decisions: list[ApprovalDecision] = Field(default_factory=list)


class ApprovalState(BaseModel):
    requisition_id: str | None = None
    next_pending_level: int
    is_fully_approved: bool
    is_rejected: bool
    required_levels: list[ThresholdBand] = Field(default_factory=list)
    approver_roles: list[str] = Field(default_factory=list)
