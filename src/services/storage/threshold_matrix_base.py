"""
Abstract base class for authorization matrix storage.

Bands are admin-managed configuration keyed by (project_id, approval_level)
and soft-disabled through ``is_active`` rather than deleted.
"""

from abc import ABC, abstractmethod
from typing import Optional

from ...core.errors import ApprovalValidationError
from ...models.approval import ThresholdBand


def validate_band(band: ThresholdBand) -> None:
    """
    Check a band before it is written.

    Contiguity and overlap across a project's bands are not checked: bands
    are independent records.
    """
    if not band.project_id:
        raise ApprovalValidationError("project_id is required")
    if not band.approver_role:
        raise ApprovalValidationError("approver_role is required")
    if band.approval_level < 1:
        raise ApprovalValidationError("approval_level must be a positive integer")
    if band.threshold_min < 0:
        raise ApprovalValidationError("threshold_min must be non-negative")
    if band.threshold_max <= band.threshold_min:
        raise ApprovalValidationError("threshold_max must be greater than threshold_min")


class ThresholdMatrixStoreBase(ABC):
    """
    Abstract base class for the threshold matrix.

    Implementations:
    - In-memory (tests, demo)
    - SQLite (single-instance deployments)
    """

    @abstractmethod
    def lookup(self, project_id: str) -> list[ThresholdBand]:
        """
        Active bands for a project, ascending by approval level.

        An empty list means "no approval required" and is a valid result.
        """
        pass

    @abstractmethod
    def list_bands(self, project_id: Optional[str] = None) -> list[ThresholdBand]:
        """All bands (active and inactive), optionally scoped to one project"""
        pass

    @abstractmethod
    def upsert(self, band: ThresholdBand) -> ThresholdBand:
        """
        Create or replace the band at (project_id, approval_level).

        Raises:
            ApprovalValidationError: if the band is malformed
        """
        pass

    @abstractmethod
    def deactivate(self, project_id: str, approval_level: int) -> ThresholdBand:
        """
        Soft-disable a band.

        Raises:
            NotFoundError: if no band exists at that key
        """
        pass
