"""
Tests for Service Bus event publishing.

Verifies that recorded approval decisions are published to Azure Service Bus
for downstream processing (PO systems, audit, analytics).
"""

import json
from unittest.mock import Mock

import pytest

from src.models.approval import ApprovalDecision, ApprovalState
from src.services.events.event_publisher import (
    ApprovalDecisionRecordedEvent,
    EventPublisher,
    create_event_publisher,
)


@pytest.fixture
def mock_service_bus_sender():
    """Create a mock Service Bus sender matching Azure SDK interface"""
    return Mock()


@pytest.fixture
def event_publisher(mock_service_bus_sender):
    return EventPublisher(service_bus_sender=mock_service_bus_sender)


def make_event(**overrides) -> ApprovalDecisionRecordedEvent:
    values = dict(
        decision_id="pra-001",
        requisition_id="pr-001",
        approval_level=2,
        status="approved",
        approver_id="user-003",
        next_pending_level=0,
        is_fully_approved=True,
        is_rejected=False,
        total_value=15000.0,
        currency="AED",
    )
    values.update(overrides)
    return ApprovalDecisionRecordedEvent(**values)


def test_event_from_decision():
    decision = ApprovalDecision(
        id="pra-002", requisition_id="pr-009", sequence=1,
        approval_level=1, status="rejected", approver_id="user-004",
    )
    state = ApprovalState(
        requisition_id="pr-009", next_pending_level=1,
        is_fully_approved=False, is_rejected=True,
    )

    event = ApprovalDecisionRecordedEvent.from_decision(decision, state, 30000, "USD")

    assert event.decision_id == "pra-002"
    assert event.status == "rejected"
    assert event.is_rejected is True
    assert event.next_pending_level == 1
    assert event.total_value == 30000
    assert event.event_type == "ApprovalDecisionRecorded"


def test_event_serializes_to_json():
    data = json.loads(make_event().to_json())

    assert data["requisition_id"] == "pr-001"
    assert data["approval_level"] == 2
    assert data["is_fully_approved"] is True
    assert data["event_type"] == "ApprovalDecisionRecorded"
    # Timestamp should be ISO format
    assert "T" in data["timestamp"]


def test_publish_decision_recorded(event_publisher, mock_service_bus_sender):
    event_publisher.publish_decision_recorded(make_event())

    mock_service_bus_sender.send_messages.assert_called_once()
    message = mock_service_bus_sender.send_messages.call_args[0][0]
    assert message.subject == "ApprovalDecisionRecorded"
    assert message.application_properties["requisition_id"] == "pr-001"


def test_publish_multiple_events(event_publisher, mock_service_bus_sender):
    event_publisher.publish_decision_recorded(make_event(decision_id="pra-1"))
    event_publisher.publish_decision_recorded(make_event(decision_id="pra-2"))

    assert mock_service_bus_sender.send_messages.call_count == 2


def test_publish_with_null_service_bus_sender():
    """Publisher is a no-op when no sender is configured (disabled mode)"""
    publisher = EventPublisher(service_bus_sender=None)

    assert publisher.enabled is False
    publisher.publish_decision_recorded(make_event())


def test_create_publisher_without_connection_string():
    publisher = create_event_publisher(None, "requisition-approvals")

    assert publisher.enabled is False
    assert publisher.entity_name == "requisition-approvals"
