from fastapi import APIRouter, Depends
from loguru import logger
from pydantic import BaseModel

from ...core.errors import UnknownProjectError
from ...models.approval import ThresholdBand
from ...services.storage.projects import ProjectRegistryBase
from ...services.storage.threshold_matrix_base import ThresholdMatrixStoreBase, validate_band
from ..deps import get_matrix, get_projects

router = APIRouter(prefix="/admin/authorization-matrix", tags=["admin"])


class MatrixUpdateRequest(BaseModel):
    matrix: list[ThresholdBand]


class MatrixUpdateResponse(BaseModel):
    message: str
    matrix: list[ThresholdBand]


@router.get("", response_model=list[ThresholdBand])
async def list_matrix(project_id: str | None = None, matrix: ThresholdMatrixStoreBase = Depends(get_matrix)):
    """All configured bands, including inactive ones"""
    return matrix.list_bands(project_id)


@router.put("", response_model=MatrixUpdateResponse)
async def update_matrix(
    req: MatrixUpdateRequest,
    matrix: ThresholdMatrixStoreBase = Depends(get_matrix),
    projects: ProjectRegistryBase = Depends(get_projects),
):
    """
    Create or replace bands keyed by (project_id, approval_level).

    The whole batch is validated before anything is written; every band
    must belong to a registered project (404 otherwise).
    """
    for band in req.matrix:
        validate_band(band)
        if not projects.exists(band.project_id):
            raise UnknownProjectError(band.project_id)

    updated = [matrix.upsert(band) for band in req.matrix]
    logger.info("Authorization matrix updated", bands=len(updated))
    return MatrixUpdateResponse(message="Authorization matrix updated successfully", matrix=updated)


@router.delete("/{project_id}/{approval_level}", response_model=ThresholdBand)
async def deactivate_band(project_id: str, approval_level: int, matrix: ThresholdMatrixStoreBase = Depends(get_matrix)):
    """Soft-disable a band; it stays listed but no longer matches"""
    band = matrix.deactivate(project_id, approval_level)
    logger.info("Threshold band deactivated", project_id=project_id, approval_level=approval_level)
    return band
