"""
Tests for lifecycle transitions and the status-history audit trail.
"""

from datetime import datetime, UTC

import pytest

from src.core.errors import ConflictError, InvalidTransitionError
from src.models.approval import ApprovalState
from src.models.procurement import Requisition
from src.services.workflow_tracker import WorkflowStatusTracker


@pytest.fixture
def tracker():
    return WorkflowStatusTracker()


def requisition(status="draft") -> Requisition:
    return Requisition(
        id="pr-001", pr_number="PR-ALPHA-001", project_id="1",
        total_value=15000, currency="AED", status=status,
    )


def state(next_level=0, fully=False, rejected=False) -> ApprovalState:
    return ApprovalState(
        requisition_id="pr-001",
        next_pending_level=next_level,
        is_fully_approved=fully,
        is_rejected=rejected,
    )


def test_submit_records_history_entry(tracker):
    pr = requisition()

    entry = tracker.submit(pr, "user-002", "Jane Smith")

    assert pr.status == "pending_approval"
    assert pr.submitted_at == entry.changed_at
    assert entry.entity_type == "purchase_requisition"
    assert entry.entity_id == "pr-001"
    assert entry.previous_status == "draft"
    assert entry.status == "pending_approval"
    assert entry.changed_by == "user-002"
    assert entry.changed_by_name == "Jane Smith"
    assert pr.status_history == [entry]


def test_invalid_transition_raises_conflict(tracker):
    pr = requisition("draft")

    with pytest.raises(InvalidTransitionError) as exc_info:
        tracker.transition(pr, "approved", "user-001")

    assert isinstance(exc_info.value, ConflictError)
    assert exc_info.value.from_status == "draft"
    assert pr.status == "draft"
    assert pr.status_history == []


def test_pending_state_leaves_requisition_pending(tracker):
    pr = requisition("pending_approval")

    entries = tracker.apply_approval_state(pr, state(next_level=2), "user-001")

    assert entries == []
    assert pr.status == "pending_approval"


def test_fully_approved_state_approves(tracker):
    pr = requisition("pending_approval")

    entries = tracker.apply_approval_state(pr, state(fully=True), "user-003", "Approver", "All good")

    assert pr.status == "approved"
    assert pr.approved_by == "user-003"
    assert pr.approved_by_name == "Approver"
    assert pr.approved_at is not None
    assert len(entries) == 1
    assert entries[0].previous_status == "pending_approval"
    assert entries[0].comments == "All good"


def test_rejection_wins_over_full_approval(tracker):
    pr = requisition("pending_approval")

    tracker.apply_approval_state(
        pr, state(fully=True, rejected=True), "user-004", rejection_reason="Over budget"
    )

    assert pr.status == "rejected"
    assert pr.rejected_by == "user-004"
    assert pr.rejection_reason == "Over budget"


def test_terminal_requisitions_are_left_alone(tracker):
    pr = requisition("rejected")

    assert tracker.apply_approval_state(pr, state(fully=True), "user-001") == []
    assert pr.status == "rejected"


def test_draft_requisitions_are_not_gated(tracker):
    pr = requisition("draft")

    assert tracker.apply_approval_state(pr, state(fully=True), "user-001") == []
    assert pr.status == "draft"


def test_generate_order_requires_approved_requisition(tracker):
    with pytest.raises(InvalidTransitionError):
        tracker.generate_order(requisition("pending_approval"))


def test_order_lifecycle(tracker):
    pr = requisition("approved")

    order = tracker.generate_order(pr)
    assert order.po_number == "PO-ALPHA-001"
    assert order.status == "generated"
    assert order.total_value == 15000
    assert order.currency == "AED"
    assert order.status_history[0].previous_status is None
    assert order.status_history[0].status == "generated"

    tracker.send_order(order, "user-002", "Jane Smith", "Please confirm")
    assert order.status == "sent"
    assert order.sent_by == "user-002"

    ack_date = datetime(2025, 3, 1, tzinfo=UTC)
    tracker.acknowledge_order(order, "supplier@abc.com", ack_date, delivery_date="2025-03-15")
    assert order.status == "acknowledged"
    assert order.acknowledged_at == ack_date
    assert order.delivery_date == "2025-03-15"

    assert [(h.previous_status, h.status) for h in order.status_history] == [
        (None, "generated"),
        ("generated", "sent"),
        ("sent", "acknowledged"),
    ]
    assert all(h.entity_type == "purchase_order" for h in order.status_history)


def test_send_order_defaults_to_system_actor(tracker):
    order = tracker.generate_order(requisition("approved"))

    entry = tracker.send_order(order)

    assert entry.changed_by == "system"
    assert entry.comments == "PO sent to supplier"


def test_cannot_acknowledge_unsent_order(tracker):
    order = tracker.generate_order(requisition("approved"))

    with pytest.raises(InvalidTransitionError):
        tracker.acknowledge_order(order, "supplier@abc.com", datetime.now(UTC))
