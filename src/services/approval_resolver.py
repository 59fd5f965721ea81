"""
Business rules for requisition approval levels.

Resolves which approval levels a requisition needs from its project's
authorization matrix, and compares them against the decisions recorded in
the ledger. Everything here is a pure function of its inputs: no state is
kept between calls and nothing is written.
"""

from loguru import logger

from ..core.errors import UnknownProjectError
from ..models.approval import ApprovalState, RequisitionApprovalView, ThresholdBand
from .storage.projects import ProjectRegistryBase
from .storage.threshold_matrix_base import ThresholdMatrixStoreBase


def _max_approved_level(view: RequisitionApprovalView) -> int:
    return max(
        (d.approval_level for d in view.decisions if d.status == "approved"),
        default=0,
    )


class ApprovalResolver:
    """
    Encapsulates the threshold-band approval rules.

    Rules:
    - A band applies when threshold_min <= total_value < threshold_max
      (only active bands are considered; overlapping bands all apply)
    - The requisition is complete once the highest approved level reaches
      the highest required level
    - The next level to approve is one past the highest approved level

    Known gaps, kept as-is pending a product decision:
    - The next level is a blind +1 and may name a level no band requires
      (a 15,000 requisition that only needs level 2 is still asked for
      level 1 first)
    - A value above every band requires no approval at all
    - Rejections do not change the level arithmetic; see is_rejected()
    """

    def __init__(self, matrix: ThresholdMatrixStoreBase, projects: ProjectRegistryBase):
        self.matrix = matrix
        self.projects = projects

    def _bands_for(self, project_id: str) -> list[ThresholdBand]:
        if not self.projects.exists(project_id):
            raise UnknownProjectError(project_id)
        return self.matrix.lookup(project_id)

    def required_levels(self, project_id: str, total_value: float) -> list[ThresholdBand]:
        """
        Active bands whose range contains the value, lowest level first.

        Raises:
            UnknownProjectError: if the project is not registered
        """
        return [band for band in self._bands_for(project_id) if band.matches(total_value)]

    def _max_required_level(self, view: RequisitionApprovalView) -> int:
        return max(
            (band.approval_level for band in self.required_levels(view.project_id, view.total_value)),
            default=0,
        )

    def next_pending_level(self, view: RequisitionApprovalView) -> int:
        """
        Level that must be approved next, or 0 when nothing is outstanding.
        """
        max_required = self._max_required_level(view)
        max_approved = _max_approved_level(view)

        if max_required == 0 or max_approved >= max_required:
            return 0
        return max_approved + 1

    def is_fully_approved(self, view: RequisitionApprovalView) -> bool:
        max_required = self._max_required_level(view)
        if max_required == 0:
            return True

        max_approved = _max_approved_level(view)
        return max_approved > 0 and max_approved >= max_required

    def is_rejected(self, view: RequisitionApprovalView) -> bool:
        """
        True if any recorded decision is a rejection.

        The level arithmetic ignores rejections; callers decide whether a
        rejection halts the workflow.
        """
        return any(d.status == "rejected" for d in view.decisions)

    def approver_roles(self, project_id: str, level: int) -> list[str]:
        """Roles allowed to sign off the given level (one per active band at that level)"""
        return [band.approver_role for band in self._bands_for(project_id) if band.approval_level == level]

    def approval_state(self, view: RequisitionApprovalView) -> ApprovalState:
        """Bundle next level, completion and rejection into one answer"""
        required = self.required_levels(view.project_id, view.total_value)
        next_level = self.next_pending_level(view)

        state = ApprovalState(
            requisition_id=view.requisition_id,
            next_pending_level=next_level,
            is_fully_approved=self.is_fully_approved(view),
            is_rejected=self.is_rejected(view),
            required_levels=required,
            approver_roles=self.approver_roles(view.project_id, next_level) if next_level else [],
        )

        logger.debug(
            "Approval state resolved",
            requisition_id=view.requisition_id,
            project_id=view.project_id,
            total_value=view.total_value,
            required=[b.approval_level for b in required],
            next_pending_level=state.next_pending_level,
            fully_approved=state.is_fully_approved,
            rejected=state.is_rejected,
        )
        return state
