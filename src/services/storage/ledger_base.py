"""
Abstract base class for the approval decision ledger.

The ledger is append-only: decisions are recorded once and never edited or
deleted. It is the sole source of truth for how far a requisition has
progressed through its approval levels.
"""

from abc import ABC, abstractmethod
from typing import Optional

from ...core.errors import ApprovalValidationError
from ...models.approval import ApprovalDecision, DECISION_STATUSES


def validate_decision(requisition_id: str, level: int, status: str, approver_id: Optional[str]) -> None:
    """
    Reject malformed decisions before they reach storage.

    Raises:
        ApprovalValidationError: empty requisition id, level < 1, unknown
            status, or missing approver for an approved/rejected decision
    """
    if not requisition_id:
        raise ApprovalValidationError("requisition_id is required")
    if isinstance(level, bool) or not isinstance(level, int) or level < 1:
        raise ApprovalValidationError(f"approval level must be a positive integer (got {level!r})")
    if status not in DECISION_STATUSES:
        raise ApprovalValidationError(
            f"unknown decision status {status!r} (expected one of {', '.join(DECISION_STATUSES)})"
        )
    if status != "pending" and not (approver_id or "").strip():
        raise ApprovalValidationError(f"approver_id is required for {status} decisions")


class ApprovalLedgerBase(ABC):
    """
    Abstract base class for approval decision storage.

    Appends for the same requisition must be serialized so two concurrent
    "approve level N" submissions cannot both pass the duplicate check.
    Appends for different requisitions are independent.
    """

    @abstractmethod
    def append(
        self,
        requisition_id: str,
        level: int,
        status: str,
        approver_id: Optional[str] = None,
        approver_name: Optional[str] = None,
        comments: Optional[str] = None,
    ) -> ApprovalDecision:
        """
        Record a decision against a requisition.

        Args:
            requisition_id: Requisition the decision belongs to
            level: Approval level (>= 1)
            status: One of 'pending', 'approved', 'rejected'
            approver_id: Required for approved/rejected decisions
            approver_name: Display name of the approver
            comments: Free-text comments

        Returns:
            The recorded ApprovalDecision

        Raises:
            ApprovalValidationError: if the decision is malformed
            ConflictError: if the level already has an approved decision
        """
        pass

    @abstractmethod
    def decisions_for(self, requisition_id: str) -> list[ApprovalDecision]:
        """
        All decisions recorded for a requisition, in append order.

        Returns an empty list for requisitions with no decisions.
        """
        pass
