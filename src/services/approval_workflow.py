"""
Requisition approval workflow.

Ties the pieces together for one requisition at a time:
ledger append -> resolver -> status tracker -> PO generation, then the
side effects (Service Bus event, Teams card). Side effects run after the
decision is stored and can never undo or fail it.
"""

import uuid
from datetime import datetime
from typing import Optional

from loguru import logger
from pydantic import BaseModel

from ..core.errors import ApprovalValidationError, ConflictError
from ..core.locks import KeyedLock
from ..models.approval import ApprovalDecision, ApprovalState, RequisitionApprovalView
from ..models.procurement import PurchaseOrder, Requisition, StatusHistoryEntry
from .approval_resolver import ApprovalResolver
from .events.event_publisher import ApprovalDecisionRecordedEvent, EventPublisher
from .notifications import NotificationService
from .storage.documents import DocumentStoreBase, InMemoryPurchaseOrderStore
from .storage.ledger_base import ApprovalLedgerBase
from .workflow_tracker import SYSTEM_ACTOR, WorkflowStatusTracker


class DecisionOutcome(BaseModel):
    decision: ApprovalDecision
    state: ApprovalState
    requisition: Requisition
    purchase_order: Optional[PurchaseOrder] = None


class ApprovalWorkflow:
    def __init__(
        self,
        resolver: ApprovalResolver,
        ledger: ApprovalLedgerBase,
        requisitions: DocumentStoreBase[Requisition],
        orders: InMemoryPurchaseOrderStore,
        tracker: WorkflowStatusTracker,
        notifications: NotificationService,
        events: EventPublisher,
    ):
        self.resolver = resolver
        self.ledger = ledger
        self.requisitions = requisitions
        self.orders = orders
        self.tracker = tracker
        self.notifications = notifications
        self.events = events
        self._locks = KeyedLock()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def _view(self, requisition: Requisition) -> RequisitionApprovalView:
        return RequisitionApprovalView(
            requisition_id=requisition.id,
            project_id=requisition.project_id,
            total_value=requisition.total_value,
            currency=requisition.currency,
            decisions=self.ledger.decisions_for(requisition.id),
        )

    def view(self, requisition_id: str) -> RequisitionApprovalView:
        """
        Raises:
            NotFoundError: if the requisition does not exist
        """
        return self._view(self.requisitions.require(requisition_id))

    def state(self, requisition_id: str) -> ApprovalState:
        return self.resolver.approval_state(self.view(requisition_id))

    def history(self, requisition_id: str) -> list[StatusHistoryEntry]:
        return self.requisitions.require(requisition_id).status_history

    # ------------------------------------------------------------------
    # Requisition lifecycle
    # ------------------------------------------------------------------

    def create_requisition(
        self,
        project_id: str,
        total_value: float,
        currency: str = "USD",
        created_by: Optional[str] = None,
        pr_number: Optional[str] = None,
    ) -> Requisition:
        """
        Register a draft requisition.

        Raises:
            UnknownProjectError: if the project is not registered
        """
        # Resolving against the matrix doubles as the project existence check
        self.resolver.required_levels(project_id, total_value)

        requisition_id = f"pr-{uuid.uuid4().hex[:12]}"
        requisition = Requisition(
            id=requisition_id,
            pr_number=pr_number or f"PR-{requisition_id[3:11].upper()}",
            project_id=project_id,
            total_value=total_value,
            currency=currency,
            created_by=created_by,
        )
        self.requisitions.save(requisition)
        logger.info(
            "Requisition created",
            requisition_id=requisition.id,
            project_id=project_id,
            total_value=total_value,
            currency=currency,
        )
        return requisition

    async def submit(self, requisition_id: str, actor_id: str, actor_name: Optional[str] = None) -> Requisition:
        """
        Move a draft requisition to pending_approval.

        A requisition that needs no approval is approved straight away and its
        purchase order generated.
        """
        with self._locks.hold(requisition_id):
            requisition = self.requisitions.require(requisition_id)
            self.tracker.submit(requisition, actor_id, actor_name)

            state = self.resolver.approval_state(self._view(requisition))
            self.tracker.apply_approval_state(
                requisition, state, SYSTEM_ACTOR, "System", "No approval required"
            )
            self._generate_order_if_approved(requisition)
            self.requisitions.save(requisition)

        try:
            if requisition.status == "approved":
                await self.notifications.send_fully_approved(requisition)
            else:
                await self.notifications.send_approval_required(
                    requisition, state.next_pending_level, state.approver_roles
                )
        except Exception as e:
            logger.warning(f"Failed to send submission notification: {e}")

        return requisition

    # ------------------------------------------------------------------
    # Decisions
    # ------------------------------------------------------------------

    async def record_decision(
        self,
        requisition_id: str,
        level: int,
        status: str,
        approver_id: Optional[str] = None,
        approver_name: Optional[str] = None,
        comments: Optional[str] = None,
        rejection_reason: Optional[str] = None,
    ) -> DecisionOutcome:
        """
        Append a decision and apply its effect on the requisition lifecycle.

        Raises:
            NotFoundError: unknown requisition
            ApprovalValidationError: malformed decision
            ConflictError: level already approved, or the requisition was
                rejected and the decision is not a pending marker
        """
        with self._locks.hold(requisition_id):
            requisition = self.requisitions.require(requisition_id)
            was_approved = requisition.status == "approved"

            # A rejection is terminal for every decision path
            if status in ("approved", "rejected") and self.resolver.is_rejected(self._view(requisition)):
                raise ConflictError(f"Requisition {requisition_id} has already been rejected")

            decision = self.ledger.append(
                requisition_id, level, status, approver_id, approver_name, comments
            )

            state = self.resolver.approval_state(self._view(requisition))
            self.tracker.apply_approval_state(
                requisition, state, approver_id or SYSTEM_ACTOR, approver_name, comments, rejection_reason
            )
            order = self._generate_order_if_approved(requisition)
            self.requisitions.save(requisition)

        outcome = DecisionOutcome(decision=decision, state=state, requisition=requisition, purchase_order=order)
        await self._dispatch(outcome, became_approved=not was_approved and requisition.status == "approved")
        return outcome

    async def approve_next(
        self,
        requisition_id: str,
        approver_id: str,
        approver_name: Optional[str] = None,
        comments: Optional[str] = None,
    ) -> DecisionOutcome:
        """
        Approve whichever level the resolver says is next.

        Raises:
            ConflictError: the requisition was already rejected
            ApprovalValidationError: nothing left to approve, or no approver given
        """
        if not approver_id:
            raise ApprovalValidationError("approver_id is required")

        state = self.state(requisition_id)
        if state.next_pending_level == 0:
            raise ApprovalValidationError("No approval required or all approvals completed")

        return await self.record_decision(
            requisition_id, state.next_pending_level, "approved",
            approver_id, approver_name or approver_id, comments,
        )

    async def reject(
        self,
        requisition_id: str,
        approver_id: str,
        reason: str,
        approver_name: Optional[str] = None,
        comments: Optional[str] = None,
    ) -> DecisionOutcome:
        """
        Record a rejection at the level currently awaiting sign-off.

        Raises:
            ConflictError: the requisition was already rejected
            ApprovalValidationError: missing approver or reason
        """
        if not approver_id or not reason:
            raise ApprovalValidationError("approver_id and reason are required")

        state = self.state(requisition_id)
        return await self.record_decision(
            requisition_id, state.next_pending_level or 1, "rejected",
            approver_id, approver_name or approver_id, comments or reason,
            rejection_reason=reason,
        )

    def _generate_order_if_approved(self, requisition: Requisition) -> Optional[PurchaseOrder]:
        if requisition.status != "approved":
            return None
        if self.orders.find_by_requisition(requisition.id) is not None:
            return None

        order = self.tracker.generate_order(requisition)
        self.orders.save(order)
        return order

    async def _dispatch(self, outcome: DecisionOutcome, became_approved: bool) -> None:
        requisition, decision, state = outcome.requisition, outcome.decision, outcome.state

        # Publish ApprovalDecisionRecorded event to Service Bus
        try:
            event = ApprovalDecisionRecordedEvent.from_decision(
                decision, state, requisition.total_value, requisition.currency
            )
            self.events.publish_decision_recorded(event)
        except Exception as e:
            # Don't fail the decision if event publishing fails
            logger.warning(f"Failed to publish event: {e}")

        try:
            if decision.status == "rejected":
                await self.notifications.send_rejected(requisition, decision)
            elif became_approved:
                await self.notifications.send_fully_approved(requisition)
            else:
                await self.notifications.send_decision_recorded(requisition, decision)
                if state.next_pending_level and not state.is_rejected:
                    await self.notifications.send_approval_required(
                        requisition, state.next_pending_level, state.approver_roles
                    )
        except Exception as e:
            logger.warning(f"Failed to send approval notification: {e}")

    # ------------------------------------------------------------------
    # Purchase orders
    # ------------------------------------------------------------------

    def order_for(self, requisition_id: str) -> Optional[PurchaseOrder]:
        return self.orders.find_by_requisition(requisition_id)

    def send_order(
        self,
        order_id: str,
        sender_id: Optional[str] = None,
        sender_name: Optional[str] = None,
        message: Optional[str] = None,
    ) -> PurchaseOrder:
        with self._locks.hold(order_id):
            order = self.orders.require(order_id)
            self.tracker.send_order(order, sender_id, sender_name, message)
            self.orders.save(order)
        return order

    def acknowledge_order(
        self,
        order_id: str,
        acknowledged_by: str,
        acknowledgment_date: datetime,
        delivery_date: Optional[str] = None,
        comments: Optional[str] = None,
    ) -> PurchaseOrder:
        with self._locks.hold(order_id):
            order = self.orders.require(order_id)
            self.tracker.acknowledge_order(order, acknowledged_by, acknowledgment_date, delivery_date, comments)
            self.orders.save(order)
        return order
