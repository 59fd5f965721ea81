"""
Requisition and purchase order stores.

Both documents are owned by the wider procurement application; the approval
engine reads requisitions and the workflow tracker writes status changes back.
"""
import threading
from abc import ABC, abstractmethod
from typing import Dict, Generic, Optional, TypeVar

from ...core.errors import NotFoundError
from ...models.procurement import PurchaseOrder, Requisition

T = TypeVar("T", Requisition, PurchaseOrder)


class DocumentStoreBase(ABC, Generic[T]):
    entity_name = "Document"

    @abstractmethod
    def get(self, document_id: str) -> Optional[T]:
        """Return the document or None if not found"""
        pass

    @abstractmethod
    def save(self, document: T) -> T:
        """Insert or replace a document"""
        pass

    @abstractmethod
    def list_all(self) -> list[T]:
        pass

    def require(self, document_id: str) -> T:
        """
        Like get(), but raises NotFoundError for unknown ids.
        """
        document = self.get(document_id)
        if document is None:
            raise NotFoundError(self.entity_name, document_id)
        return document


class _InMemoryDocumentStore(DocumentStoreBase[T]):
    def __init__(self):
        self._documents: Dict[str, T] = {}
        self._lock = threading.Lock()

    def get(self, document_id: str) -> Optional[T]:
        document = self._documents.get(document_id)
        # Callers mutate what they get back; hand out copies
        return document.model_copy(deep=True) if document is not None else None

    def save(self, document: T) -> T:
        with self._lock:
            self._documents[document.id] = document.model_copy(deep=True)
        return document

    def list_all(self) -> list[T]:
        with self._lock:
            return [d.model_copy(deep=True) for d in self._documents.values()]


class InMemoryRequisitionStore(_InMemoryDocumentStore[Requisition]):
    entity_name = "Purchase Requisition"


class InMemoryPurchaseOrderStore(_InMemoryDocumentStore[PurchaseOrder]):
    entity_name = "Purchase Order"

    def find_by_requisition(self, requisition_id: str) -> Optional[PurchaseOrder]:
        with self._lock:
            for order in self._documents.values():
                if order.requisition_id == requisition_id:
                    return order.model_copy(deep=True)
        return None
