"""
In-memory approval ledger (for tests and the demo deployment).
In production, use the SQLite ledger or a database-backed implementation.
"""
import uuid
from typing import Dict, Optional

from loguru import logger

from ...core.errors import ConflictError
from ...core.locks import KeyedLock
from ...models.approval import ApprovalDecision, utcnow
from .ledger_base import ApprovalLedgerBase, validate_decision


class InMemoryApprovalLedger(ApprovalLedgerBase):
    def __init__(self):
        self._decisions: Dict[str, list[ApprovalDecision]] = {}
        self._locks = KeyedLock()

    def append(
        self,
        requisition_id: str,
        level: int,
        status: str,
        approver_id: Optional[str] = None,
        approver_name: Optional[str] = None,
        comments: Optional[str] = None,
    ) -> ApprovalDecision:
        validate_decision(requisition_id, level, status, approver_id)

        with self._locks.hold(requisition_id):
            entries = self._decisions.setdefault(requisition_id, [])

            if status == "approved" and any(
                d.status == "approved" and d.approval_level == level for d in entries
            ):
                raise ConflictError(
                    f"Level {level} is already approved for requisition {requisition_id}"
                )

            now = utcnow()
            decision = ApprovalDecision(
                id=f"pra-{uuid.uuid4()}",
                requisition_id=requisition_id,
                sequence=len(entries) + 1,
                approval_level=level,
                status=status,
                approver_id=approver_id,
                approver_name=approver_name,
                comments=comments,
                decided_at=None if status == "pending" else now,
                created_at=now,
            )
            entries.append(decision)

        logger.info(
            "Approval decision recorded",
            requisition_id=requisition_id,
            level=level,
            status=status,
            approver_id=approver_id,
            sequence=decision.sequence,
        )
        return decision

    def decisions_for(self, requisition_id: str) -> list[ApprovalDecision]:
        """Snapshot of the requisition's decisions"""
        with self._locks.hold(requisition_id):
            return list(self._decisions.get(requisition_id, []))
