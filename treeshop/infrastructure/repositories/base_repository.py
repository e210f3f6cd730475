"""
Base Repository - JSON collection stored under one document-store key.

Provides common CRUD operations and query helpers for all record types.
A payload that cannot be decoded is treated as an empty collection and
logged; the next write replaces it.
"""
import json
import logging
from typing import Callable, Generic, List, Optional, Type, TypeVar
from uuid import UUID

from treeshop.domain.entities.status import utcnow
from treeshop.domain.exceptions import RecordNotFoundError
from treeshop.infrastructure.document_store import DocumentStore

logger = logging.getLogger(__name__)

T = TypeVar('T')


class JsonCollectionRepository(Generic[T]):
    """
    Repository for a list of records serialized as one JSON array.

    Type Parameters:
        T: Entity class with `id`, `to_dict()` and `from_dict()`
    """

    key: str = ""
    record_type: str = "Record"

    def __init__(self, store: DocumentStore, entity_class: Type[T], key: Optional[str] = None):
        """
        Initialize the repository.

        Args:
            store: Document store holding the collection
            entity_class: Record class this repository manages
            key: Store key; defaults to the class-level key
        """
        self.store = store
        self.entity_class = entity_class
        self.key = key or self.key

    # =========================================================================
    # Serialization
    # =========================================================================

    def _load(self) -> List[T]:
        payload = self.store.get(self.key)
        if payload is None:
            return []
        try:
            items = json.loads(payload)
            return [self.entity_class.from_dict(item) for item in items]
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning(f"Could not decode '{self.key}' collection, treating as empty: {e}")
            return []

    def _save(self, records: List[T]) -> None:
        payload = json.dumps([record.to_dict() for record in records])
        self.store.put(self.key, payload.encode("utf-8"))

    # =========================================================================
    # CRUD
    # =========================================================================

    def list_all(self) -> List[T]:
        return self._load()

    def get(self, record_id) -> Optional[T]:
        """
        Retrieve a record by id.

        Args:
            record_id: UUID or its string form

        Returns:
            The record if found, None otherwise
        """
        record_id = UUID(str(record_id))
        for record in self._load():
            if record.id == record_id:
                return record
        return None

    def require(self, record_id) -> T:
        """Like get(), but raises RecordNotFoundError."""
        try:
            record = self.get(record_id)
        except ValueError:
            record = None
        if record is None:
            raise RecordNotFoundError(self.record_type, str(record_id))
        return record

    def add(self, record: T) -> T:
        records = self._load()
        records.append(record)
        self._save(records)
        return record

    def update(self, record: T) -> T:
        """
        Replace a stored record and stamp updated_at.

        Raises:
            RecordNotFoundError: If no record has this id
        """
        records = self._load()
        for index, existing in enumerate(records):
            if existing.id == record.id:
                record.updated_at = utcnow()
                records[index] = record
                self._save(records)
                return record
        raise RecordNotFoundError(self.record_type, str(record.id))

    def delete(self, record_id) -> bool:
        """
        Delete a record by id.

        Returns:
            True if the record was found and deleted, False otherwise
        """
        record_id = UUID(str(record_id))
        records = self._load()
        remaining = [record for record in records if record.id != record_id]
        if len(remaining) == len(records):
            return False
        self._save(remaining)
        return True

    # =========================================================================
    # Queries
    # =========================================================================

    def filter(self, predicate: Callable[[T], bool]) -> List[T]:
        return [record for record in self._load() if predicate(record)]

    def by_status(self, status) -> List[T]:
        return self.filter(lambda record: record.status == status)

    def search(self, text: str) -> List[T]:
        """Case-insensitive substring search over each record's search_text()."""
        if not text:
            return self.list_all()
        needle = text.lower()
        return self.filter(lambda record: needle in record.search_text().lower())
