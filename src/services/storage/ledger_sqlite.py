"""
SQLite-based approval ledger.

Decisions are an append-only log keyed by (requisition_id, sequence). A partial
unique index on (requisition_id, approval_level) for approved rows backs the
"one approval per level" rule, and every append runs inside a
``BEGIN IMMEDIATE`` transaction so writers for a requisition are serialized.
"""

import sqlite3
import uuid
from datetime import datetime, UTC
from typing import Optional

from loguru import logger

from ...core.errors import ConflictError
from ...models.approval import ApprovalDecision
from .ledger_base import ApprovalLedgerBase, validate_decision


class SQLiteApprovalLedger(ApprovalLedgerBase):
    """
    SQLite-backed approval ledger with persistent storage.

    Features:
    - Persistent decisions across application restarts
    - Append-only: no UPDATE or DELETE statements are ever issued
    - Duplicate approvals rejected by the database itself
    """

    def __init__(self, db_path: str = "approvals.db", timeout: float = 30.0):
        """
        Initialize ledger with database path.

        Args:
            db_path: Path to SQLite database file (default: approvals.db)
            timeout: Seconds to wait for a competing writer's lock
        """
        self.db_path = db_path
        self.timeout = timeout
        self._init_database()

    def _init_database(self):
        """Create approval_decisions table if it doesn't exist"""
        conn = sqlite3.connect(self.db_path, timeout=self.timeout)
        cursor = conn.cursor()

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS approval_decisions (
                id TEXT NOT NULL UNIQUE,
                requisition_id TEXT NOT NULL,
                sequence INTEGER NOT NULL,
                approval_level INTEGER NOT NULL,
                status TEXT NOT NULL,
                approver_id TEXT,
                approver_name TEXT,
                comments TEXT,
                decided_at TEXT,
                created_at TEXT NOT NULL,
                PRIMARY KEY (requisition_id, sequence),
                CHECK (status IN ('pending', 'approved', 'rejected')),
                CHECK (approval_level >= 1)
            )
        """)

        cursor.execute("""
            CREATE UNIQUE INDEX IF NOT EXISTS idx_decisions_approved_level
            ON approval_decisions(requisition_id, approval_level)
            WHERE status = 'approved'
        """)

        conn.commit()
        conn.close()

    def _get_connection(self) -> sqlite3.Connection:
        """Get autocommit connection with row factory (transactions are explicit)"""
        conn = sqlite3.connect(self.db_path, timeout=self.timeout, isolation_level=None)
        conn.row_factory = sqlite3.Row
        return conn

    @staticmethod
    def _row_to_decision(row: sqlite3.Row) -> ApprovalDecision:
        return ApprovalDecision(
            id=row["id"],
            requisition_id=row["requisition_id"],
            sequence=row["sequence"],
            approval_level=row["approval_level"],
            status=row["status"],
            approver_id=row["approver_id"],
            approver_name=row["approver_name"],
            comments=row["comments"],
            decided_at=row["decided_at"],
            created_at=row["created_at"],
        )

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

        now = datetime.now(UTC).isoformat()
        decision_id = f"pra-{uuid.uuid4()}"
        conflict = ConflictError(f"Level {level} is already approved for requisition {requisition_id}")

        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("BEGIN IMMEDIATE")

            if status == "approved":
                cursor.execute("""
                    SELECT 1 FROM approval_decisions
                    WHERE requisition_id = ? AND approval_level = ? AND status = 'approved'
                """, (requisition_id, level))
                if cursor.fetchone() is not None:
                    cursor.execute("ROLLBACK")
                    raise conflict

            cursor.execute("""
                SELECT COALESCE(MAX(sequence), 0) FROM approval_decisions
                WHERE requisition_id = ?
            """, (requisition_id,))
            sequence = cursor.fetchone()[0] + 1

            try:
                cursor.execute("""
                    INSERT INTO approval_decisions (
                        id, requisition_id, sequence, approval_level, status,
                        approver_id, approver_name, comments, decided_at, created_at
                    )
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """, (
                    decision_id, requisition_id, sequence, level, status,
                    approver_id, approver_name, comments,
                    None if status == "pending" else now, now,
                ))
            except sqlite3.IntegrityError as e:
                cursor.execute("ROLLBACK")
                raise conflict from e

            cursor.execute("COMMIT")

            cursor.execute("""
                SELECT * FROM approval_decisions WHERE id = ?
            """, (decision_id,))
            row = cursor.fetchone()
        finally:
            conn.close()

        logger.info(
            "Approval decision recorded",
            requisition_id=requisition_id,
            level=level,
            status=status,
            approver_id=approver_id,
            sequence=sequence,
        )
        return self._row_to_decision(row)

    def decisions_for(self, requisition_id: str) -> list[ApprovalDecision]:
        conn = self._get_connection()
        cursor = conn.cursor()

        cursor.execute("""
            SELECT * FROM approval_decisions
            WHERE requisition_id = ?
            ORDER BY sequence ASC
        """, (requisition_id,))

        rows = cursor.fetchall()
        conn.close()

        return [self._row_to_decision(row) for row in rows]
