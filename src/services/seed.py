"""
Demo projects and authorization matrix loaded on startup (SEED_DEMO_DATA).
"""

from ..models.approval import ThresholdBand
from ..models.procurement import Project
from .storage.projects import ProjectRegistryBase
from .storage.threshold_matrix_base import ThresholdMatrixStoreBase

DEMO_PROJECTS = [
    Project(id="1", name="Project Alpha", code="ALPHA"),
    # No bands configured: requisitions here need no approval
    Project(id="2", name="Project Beta", code="BETA"),
]

DEMO_BANDS = [
    ThresholdBand(id="am-001", project_id="1", approval_level=1,
                  threshold_min=0, threshold_max=5000, approver_role="procurement"),
    ThresholdBand(id="am-002", project_id="1", approval_level=2,
                  threshold_min=5000, threshold_max=25000, approver_role="approver"),
    ThresholdBand(id="am-003", project_id="1", approval_level=3,
                  threshold_min=25000, threshold_max=100000, approver_role="admin"),
]


def seed_demo_data(projects: ProjectRegistryBase, matrix: ThresholdMatrixStoreBase) -> None:
    for project in DEMO_PROJECTS:
        projects.register(project)
    # Keep admin edits made to a persistent matrix
    if not matrix.list_bands("1"):
        for band in DEMO_BANDS:
            matrix.upsert(band)
