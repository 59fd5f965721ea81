"""
In-memory threshold matrix (for tests and the demo deployment).
"""
import threading
import uuid
from typing import Dict, Optional, Tuple

from ...core.errors import NotFoundError
from ...models.approval import ThresholdBand, utcnow
from .threshold_matrix_base import ThresholdMatrixStoreBase, validate_band


class InMemoryThresholdMatrixStore(ThresholdMatrixStoreBase):
    def __init__(self, bands: Optional[list[ThresholdBand]] = None):
        self._bands: Dict[Tuple[str, int], ThresholdBand] = {}
        self._lock = threading.Lock()
        for band in bands or []:
            self.upsert(band)

    def lookup(self, project_id: str) -> list[ThresholdBand]:
        """Active bands for the project, lowest level first"""
        with self._lock:
            bands = [b for b in self._bands.values() if b.project_id == project_id and b.is_active]
        return sorted(bands, key=lambda b: b.approval_level)

    def list_bands(self, project_id: Optional[str] = None) -> list[ThresholdBand]:
        with self._lock:
            bands = [
                b for b in self._bands.values()
                if project_id is None or b.project_id == project_id
            ]
        return sorted(bands, key=lambda b: (b.project_id, b.approval_level))

    def upsert(self, band: ThresholdBand) -> ThresholdBand:
        validate_band(band)
        key = (band.project_id, band.approval_level)

        with self._lock:
            existing = self._bands.get(key)
            stored = band.model_copy(update={
                "id": band.id or (existing.id if existing else f"am-{uuid.uuid4().hex[:8]}"),
                "created_at": existing.created_at if existing else band.created_at,
                "updated_at": utcnow(),
            })
            self._bands[key] = stored
        return stored

    def deactivate(self, project_id: str, approval_level: int) -> ThresholdBand:
        key = (project_id, approval_level)
        with self._lock:
            existing = self._bands.get(key)
            if existing is None:
                raise NotFoundError("Threshold band", f"{project_id}/{approval_level}")
            stored = existing.model_copy(update={"is_active": False, "updated_at": utcnow()})
            self._bands[key] = stored
        return stored
