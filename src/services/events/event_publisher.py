"""
Azure Service Bus event publishing for approval decisions.

Enables downstream systems to react to requisition approvals:
- Purchasing systems can start PO processing once a requisition is approved
- Audit systems can track every recorded decision
- Analytics systems can monitor approval turnaround
"""

import json
from datetime import datetime, UTC
from typing import Optional
from dataclasses import dataclass, asdict

from ...models.approval import ApprovalDecision, ApprovalState


@dataclass
class ApprovalDecisionRecordedEvent:
    """
    Event published after a decision is appended to the ledger.

    Carries the decision plus the approval sub-state it produced, so
    consumers do not need to query the engine again.
    """

    decision_id: str
    requisition_id: str
    approval_level: int
    status: str
    approver_id: Optional[str]
    next_pending_level: int
    is_fully_approved: bool
    is_rejected: bool
    total_value: float
    currency: str
    event_type: str = "ApprovalDecisionRecorded"
    timestamp: Optional[str] = None

    def __post_init__(self):
        """Set timestamp if not provided"""
        if self.timestamp is None:
            self.timestamp = datetime.now(UTC).isoformat()

    @classmethod
    def from_decision(
        cls,
        decision: ApprovalDecision,
        state: ApprovalState,
        total_value: float,
        currency: str,
    ) -> "ApprovalDecisionRecordedEvent":
        return cls(
            decision_id=decision.id,
            requisition_id=decision.requisition_id,
            approval_level=decision.approval_level,
            status=decision.status,
            approver_id=decision.approver_id,
            next_pending_level=state.next_pending_level,
            is_fully_approved=state.is_fully_approved,
            is_rejected=state.is_rejected,
            total_value=total_value,
            currency=currency,
        )

    def to_dict(self) -> dict:
        """
        Convert event to dictionary for JSON serialization.

        Returns:
            Dictionary representation suitable for Service Bus message body
        """
        return asdict(self)

    def to_json(self) -> str:
        return json.dumps(self.to_dict())


class EventPublisher:
    """
    Publishes events to Azure Service Bus (Queue or Topic).

    Usage:
        from azure.servicebus import ServiceBusClient
        client = ServiceBusClient.from_connection_string(conn_str)
        sender = client.get_queue_sender(queue_name="approval-events")
        publisher = EventPublisher(service_bus_sender=sender)

        # Disabled mode (no Service Bus configured)
        publisher = EventPublisher(service_bus_sender=None)
    """

    def __init__(
        self,
        service_bus_sender: Optional[object] = None,
        entity_name: str = "approval-events"
    ):
        """
        Initialize event publisher.

        Args:
            service_bus_sender: Azure Service Bus sender (ServiceBusSender) or None to disable
            entity_name: Service Bus queue or topic name (default: approval-events)
        """
        self.service_bus_sender = service_bus_sender
        self.entity_name = entity_name

    @property
    def enabled(self) -> bool:
        return self.service_bus_sender is not None

    def publish_decision_recorded(self, event: ApprovalDecisionRecordedEvent) -> None:
        """
        Publish an approval decision event to Service Bus.

        Note:
            If service_bus_sender is None, this is a no-op (disabled mode).
        """
        if self.service_bus_sender is None:
            return

        from azure.servicebus import ServiceBusMessage

        message = ServiceBusMessage(
            event.to_json(),
            content_type="application/json",
            subject=event.event_type,
            application_properties={"requisition_id": event.requisition_id},
        )
        self.service_bus_sender.send_messages(message)


def create_event_publisher(connection_string: Optional[str], entity_name: str) -> EventPublisher:
    """
    Build a publisher from configuration.

    Returns a disabled publisher when no connection string is configured.
    """
    if not connection_string:
        return EventPublisher(service_bus_sender=None, entity_name=entity_name)

    from azure.servicebus import ServiceBusClient

    client = ServiceBusClient.from_connection_string(connection_string)
    sender = client.get_queue_sender(queue_name=entity_name)
    return EventPublisher(service_bus_sender=sender, entity_name=entity_name)
