"""
Document Store - Opaque key -> bytes persistence.

The core only needs get/put; delete is provided for housekeeping. Writes
are last-write-wins with no locking.
"""
from abc import ABC, abstractmethod
from typing import Dict, Optional

from sqlalchemy.orm import Session

from treeshop.models import StoredDocument


class DocumentStore(ABC):
    """Key -> JSON document bytes."""

    @abstractmethod
    def get(self, key: str) -> Optional[bytes]:
        """Return the stored payload, or None if the key has never been written."""
        pass

    @abstractmethod
    def put(self, key: str, payload: bytes) -> None:
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Remove a key. Returns True if it existed."""
        pass


class InMemoryDocumentStore(DocumentStore):
    """Dict-backed store for tests and the CLI's throwaway sessions."""

    def __init__(self, initial: Optional[Dict[str, bytes]] = None):
        self._documents: Dict[str, bytes] = dict(initial or {})

    def get(self, key: str) -> Optional[bytes]:
        return self._documents.get(key)

    def put(self, key: str, payload: bytes) -> None:
        self._documents[key] = payload

    def delete(self, key: str) -> bool:
        return self._documents.pop(key, None) is not None


class SqlDocumentStore(DocumentStore):
    """
    Store backed by the `documents` table.

    Each put commits immediately.
    """

    def __init__(self, session: Session):
        self.session = session

    def get(self, key: str) -> Optional[bytes]:
        row = self.session.get(StoredDocument, key)
        return row.payload if row else None

    def put(self, key: str, payload: bytes) -> None:
        row = self.session.get(StoredDocument, key)
        if row is None:
            self.session.add(StoredDocument(key=key, payload=payload))
        else:
            row.payload = payload
        self.session.commit()

    def delete(self, key: str) -> bool:
        row = self.session.get(StoredDocument, key)
        if row is None:
            return False
        self.session.delete(row)
        self.session.commit()
        return True
