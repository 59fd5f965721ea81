from .documents import DocumentStoreBase, InMemoryPurchaseOrderStore, InMemoryRequisitionStore
from .ledger import InMemoryApprovalLedger
from .ledger_base import ApprovalLedgerBase
from .ledger_sqlite import SQLiteApprovalLedger
from .projects import InMemoryProjectRegistry, ProjectRegistryBase
from .threshold_matrix import InMemoryThresholdMatrixStore
from .threshold_matrix_base import ThresholdMatrixStoreBase
from .threshold_matrix_sqlite import SQLiteThresholdMatrixStore

__all__ = [
    "ApprovalLedgerBase",
    "DocumentStoreBase",
    "InMemoryApprovalLedger",
    "InMemoryProjectRegistry",
    "InMemoryPurchaseOrderStore",
    "InMemoryRequisitionStore",
    "InMemoryThresholdMatrixStore",
    "ProjectRegistryBase",
    "SQLiteApprovalLedger",
    "SQLiteThresholdMatrixStore",
    "ThresholdMatrixStoreBase",
]
