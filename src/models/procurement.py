from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from .approval import utcnow

RequisitionStatus = Literal["draft", "pending_approval", "approved", "rejected"]
OrderStatus = Literal["generated", "sent", "acknowledged"]
EntityType = Literal["purchase_requisition", "purchase_order"]


class Project(BaseModel):
    id: str
    name: str
    code: str | None = None
    description: str | None = None
    status: Literal["active", "inactive", "completed"] = "active"


class StatusHistoryEntry(BaseModel):
    id: str
    entity_type: EntityType
    entity_id: str
    previous_status: str | None = None
    status: str
    changed_by: str
    changed_by_name: str | None = None
    comments: str | None = None
    changed_at: datetime = Field(default_factory=utcnow)


class Requisition(BaseModel):
    id: str
    pr_number: str
    project_id: str
    total_value: float = Field(ge=0)
    currency: str = "USD"
    status: RequisitionStatus = "draft"
    created_by: str | None = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    submitted_at: datetime | None = None
    approved_at: datetime | None = None
    approved_by: str | None = None
    approved_by_name: str | None = None
    rejected_at: datetime | None = None
    rejected_by: str | None = None
    rejection_reason: str | None = None
    status_history: list[StatusHistoryEntry] = Field(default_factory=list)


class PurchaseOrder(BaseModel):
    id: str
    po_number: str
    requisition_id: str
    project_id: str
    total_value: float
    currency: str = "USD"
    status: OrderStatus = "generated"
    created_by: str | None = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    sent_at: datetime | None = None
    sent_by: str | None = None
    acknowledged_at: datetime | None = None
    acknowledged_by: str | None = None
    delivery_date: str | None = None
    status_history: list[StatusHistoryEntry] = Field(default_factory=list)
