"""
Lifecycle status tracking for requisitions and purchase orders.

Requisitions: draft -> pending_approval -> approved | rejected
Orders:       generated -> sent -> acknowledged

Every transition appends one StatusHistoryEntry (prior status, new status,
actor, timestamp, comments) to the document. The approval-gated moves are
driven solely by the ApprovalState the resolver produces.
"""

import uuid
from datetime import datetime
from typing import Optional, Union

from loguru import logger

from ..core.errors import ApprovalValidationError, InvalidTransitionError
from ..models.approval import ApprovalState, utcnow
from ..models.procurement import PurchaseOrder, Requisition, StatusHistoryEntry

Document = Union[Requisition, PurchaseOrder]

REQUISITION_TRANSITIONS: dict[str, set[str]] = {
    "draft": {"pending_approval"},
    "pending_approval": {"approved", "rejected"},
    "approved": set(),
    "rejected": set(),
}

ORDER_TRANSITIONS: dict[str, set[str]] = {
    "generated": {"sent"},
    "sent": {"acknowledged"},
    "acknowledged": set(),
}

SYSTEM_ACTOR = "system"


def _entity_type(document: Document) -> str:
    return "purchase_order" if isinstance(document, PurchaseOrder) else "purchase_requisition"


def _transitions_for(document: Document) -> dict[str, set[str]]:
    return ORDER_TRANSITIONS if isinstance(document, PurchaseOrder) else REQUISITION_TRANSITIONS


class WorkflowStatusTracker:
    """
    Moves documents between lifecycle states and keeps their audit trail.

    The tracker mutates the documents it is given; persisting them is the
    caller's job.
    """

    def can_transition(self, document: Document, new_status: str) -> bool:
        return new_status in _transitions_for(document).get(document.status, set())

    def _history_entry(
        self,
        document: Document,
        previous_status: Optional[str],
        new_status: str,
        actor_id: str,
        actor_name: Optional[str],
        comments: Optional[str],
        changed_at: datetime,
    ) -> StatusHistoryEntry:
        entity_type = _entity_type(document)
        prefix = "posh" if entity_type == "purchase_order" else "prsh"
        return StatusHistoryEntry(
            id=f"{prefix}-{uuid.uuid4().hex[:12]}",
            entity_type=entity_type,
            entity_id=document.id,
            previous_status=previous_status,
            status=new_status,
            changed_by=actor_id,
            changed_by_name=actor_name,
            comments=comments,
            changed_at=changed_at,
        )

    def transition(
        self,
        document: Document,
        new_status: str,
        actor_id: str,
        actor_name: Optional[str] = None,
        comments: Optional[str] = None,
    ) -> StatusHistoryEntry:
        """
        Move a document to a new status and record the change.

        Raises:
            InvalidTransitionError: if the move is not allowed from the current status
        """
        if not self.can_transition(document, new_status):
            raise InvalidTransitionError(_entity_type(document), document.id, document.status, new_status)

        now = utcnow()
        entry = self._history_entry(
            document, document.status, new_status, actor_id, actor_name, comments, now
        )
        document.status = new_status
        document.updated_at = now
        document.status_history.append(entry)

        logger.info(
            "Status transition",
            entity_type=entry.entity_type,
            entity_id=document.id,
            previous_status=entry.previous_status,
            status=new_status,
            actor=actor_id,
        )
        return entry

    def submit(self, requisition: Requisition, actor_id: str, actor_name: Optional[str] = None) -> StatusHistoryEntry:
        """Send a draft requisition into the approval queue"""
        entry = self.transition(
            requisition, "pending_approval", actor_id, actor_name, "Submitted for approval"
        )
        requisition.submitted_at = entry.changed_at
        return entry

    def apply_approval_state(
        self,
        requisition: Requisition,
        state: ApprovalState,
        actor_id: str,
        actor_name: Optional[str] = None,
        comments: Optional[str] = None,
        rejection_reason: Optional[str] = None,
    ) -> list[StatusHistoryEntry]:
        """
        Gate a pending requisition on its approval sub-state.

        A rejection is terminal and wins over the level arithmetic; a fully
        approved state moves the requisition to approved; anything else leaves
        it pending. Requisitions not awaiting approval are left untouched.

        Returns:
            The history entries appended (zero or one)
        """
        if requisition.status != "pending_approval":
            return []

        if state.is_rejected:
            entry = self.transition(requisition, "rejected", actor_id, actor_name, comments or rejection_reason)
            requisition.rejected_at = entry.changed_at
            requisition.rejected_by = actor_id
            requisition.rejection_reason = rejection_reason or comments
            return [entry]

        if state.is_fully_approved:
            entry = self.transition(requisition, "approved", actor_id, actor_name, comments)
            requisition.approved_at = entry.changed_at
            requisition.approved_by = actor_id
            requisition.approved_by_name = actor_name
            return [entry]

        return []

    def generate_order(self, requisition: Requisition, actor_id: str = SYSTEM_ACTOR) -> PurchaseOrder:
        """
        Create the purchase order for an approved requisition.

        Raises:
            InvalidTransitionError: if the requisition is not approved
        """
        if requisition.status != "approved":
            raise InvalidTransitionError("purchase_requisition", requisition.id, requisition.status, "generated")

        now = utcnow()
        suffix = requisition.pr_number.removeprefix("PR-")
        order = PurchaseOrder(
            id=f"po-{uuid.uuid4().hex[:12]}",
            po_number=f"PO-{suffix}",
            requisition_id=requisition.id,
            project_id=requisition.project_id,
            total_value=requisition.total_value,
            currency=requisition.currency,
            status="generated",
            created_by=actor_id,
            created_at=now,
            updated_at=now,
        )
        order.status_history.append(self._history_entry(
            order, None, "generated", actor_id, None,
            f"Generated from {requisition.pr_number}", now,
        ))

        logger.info(
            "Purchase order generated",
            po_id=order.id,
            po_number=order.po_number,
            requisition_id=requisition.id,
            total_value=order.total_value,
        )
        return order

    def send_order(
        self,
        order: PurchaseOrder,
        actor_id: Optional[str] = None,
        actor_name: Optional[str] = None,
        message: Optional[str] = None,
    ) -> StatusHistoryEntry:
        actor_id = actor_id or SYSTEM_ACTOR
        entry = self.transition(
            order, "sent", actor_id, actor_name or "System", message or "PO sent to supplier"
        )
        order.sent_at = entry.changed_at
        order.sent_by = actor_id
        return entry

    def acknowledge_order(
        self,
        order: PurchaseOrder,
        acknowledged_by: str,
        acknowledgment_date: datetime,
        delivery_date: Optional[str] = None,
        comments: Optional[str] = None,
    ) -> StatusHistoryEntry:
        if not acknowledged_by:
            raise ApprovalValidationError("acknowledged_by is required")

        entry = self.transition(
            order, "acknowledged", acknowledged_by, acknowledged_by,
            comments or "PO acknowledged by supplier",
        )
        order.acknowledged_at = acknowledgment_date
        order.acknowledged_by = acknowledged_by
        if delivery_date:
            order.delivery_date = delivery_date
        return entry
