"""
SQLite-based threshold matrix.

Bands are stored one row per (project_id, approval_level).
"""

import sqlite3
import uuid
from datetime import datetime, UTC
from typing import Optional

from ...core.errors import NotFoundError
from ...models.approval import ThresholdBand
from .threshold_matrix_base import ThresholdMatrixStoreBase, validate_band

_COLUMNS = """
    id, project_id, approval_level, threshold_min, threshold_max,
    approver_role, is_active, created_at, updated_at
"""


class SQLiteThresholdMatrixStore(ThresholdMatrixStoreBase):
    """
    SQLite-backed authorization matrix.

    Features:
    - Persistent configuration across restarts
    - Primary key on (project_id, approval_level)
    - Index on active bands per project for lookups
    """

    def __init__(self, db_path: str = "approvals.db"):
        """
        Initialize store with database path.

        Args:
            db_path: Path to SQLite database file (default: approvals.db)
        """
        self.db_path = db_path
        self._init_database()

    def _init_database(self):
        """Create threshold_bands table if it doesn't exist"""
        conn = sqlite3.connect(self.db_path)
        cursor = conn.cursor()

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS threshold_bands (
                id TEXT NOT NULL,
                project_id TEXT NOT NULL,
                approval_level INTEGER NOT NULL,
                threshold_min REAL NOT NULL,
                threshold_max REAL NOT NULL,
                approver_role TEXT NOT NULL,
                is_active INTEGER NOT NULL DEFAULT 1,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL,
                PRIMARY KEY (project_id, approval_level),
                CHECK (approval_level >= 1),
                CHECK (threshold_max > threshold_min)
            )
        """)

        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_bands_project_active
            ON threshold_bands(project_id, is_active)
        """)

        conn.commit()
        conn.close()

    def _get_connection(self) -> sqlite3.Connection:
        """Get database connection with row factory"""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    @staticmethod
    def _row_to_band(row: sqlite3.Row) -> ThresholdBand:
        return ThresholdBand(
            id=row["id"],
            project_id=row["project_id"],
            approval_level=row["approval_level"],
            threshold_min=row["threshold_min"],
            threshold_max=row["threshold_max"],
            approver_role=row["approver_role"],
            is_active=bool(row["is_active"]),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def lookup(self, project_id: str) -> list[ThresholdBand]:
        conn = self._get_connection()
        cursor = conn.cursor()

        cursor.execute(f"""
            SELECT {_COLUMNS}
            FROM threshold_bands
            WHERE project_id = ? AND is_active = 1
            ORDER BY approval_level ASC
        """, (project_id,))

        rows = cursor.fetchall()
        conn.close()

        return [self._row_to_band(row) for row in rows]

    def list_bands(self, project_id: Optional[str] = None) -> list[ThresholdBand]:
        conn = self._get_connection()
        cursor = conn.cursor()

        if project_id is None:
            cursor.execute(f"""
                SELECT {_COLUMNS}
                FROM threshold_bands
                ORDER BY project_id, approval_level
            """)
        else:
            cursor.execute(f"""
                SELECT {_COLUMNS}
                FROM threshold_bands
                WHERE project_id = ?
                ORDER BY approval_level
            """, (project_id,))

        rows = cursor.fetchall()
        conn.close()

        return [self._row_to_band(row) for row in rows]

    def _get(self, cursor: sqlite3.Cursor, project_id: str, approval_level: int) -> Optional[sqlite3.Row]:
        cursor.execute(f"""
            SELECT {_COLUMNS}
            FROM threshold_bands
            WHERE project_id = ? AND approval_level = ?
        """, (project_id, approval_level))
        return cursor.fetchone()

    def upsert(self, band: ThresholdBand) -> ThresholdBand:
        validate_band(band)
        now = datetime.now(UTC).isoformat()

        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            existing = self._get(cursor, band.project_id, band.approval_level)
            band_id = band.id or (existing["id"] if existing else f"am-{uuid.uuid4().hex[:8]}")
            created_at = existing["created_at"] if existing else band.created_at.isoformat()

            cursor.execute("""
                INSERT INTO threshold_bands (
                    id, project_id, approval_level, threshold_min, threshold_max,
                    approver_role, is_active, created_at, updated_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT (project_id, approval_level) DO UPDATE SET
                    id = excluded.id,
                    threshold_min = excluded.threshold_min,
                    threshold_max = excluded.threshold_max,
                    approver_role = excluded.approver_role,
                    is_active = excluded.is_active,
                    updated_at = excluded.updated_at
            """, (
                band_id, band.project_id, band.approval_level, band.threshold_min,
                band.threshold_max, band.approver_role, int(band.is_active), created_at, now,
            ))
            conn.commit()

            row = self._get(cursor, band.project_id, band.approval_level)
        finally:
            conn.close()

        return self._row_to_band(row)

    def deactivate(self, project_id: str, approval_level: int) -> ThresholdBand:
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            cursor.execute("""
                UPDATE threshold_bands
                SET is_active = 0,
                    updated_at = ?
                WHERE project_id = ? AND approval_level = ?
            """, (datetime.now(UTC).isoformat(), project_id, approval_level))

            if cursor.rowcount == 0:
                raise NotFoundError("Threshold band", f"{project_id}/{approval_level}")

            conn.commit()
            row = self._get(cursor, project_id, approval_level)
        finally:
            conn.close()

        return self._row_to_band(row)
