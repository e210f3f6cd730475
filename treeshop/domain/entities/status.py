"""
Status transition support shared by the pipeline documents.

Each document class declares its own ALLOWED_TRANSITIONS table mapping a
status to the set of statuses it may move to. Terminal statuses map to an
empty set.
"""
from datetime import datetime, timezone
from typing import Optional

from treeshop.domain.exceptions import InvalidStatusTransitionError


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_datetime(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    return datetime.fromisoformat(value)


def format_datetime(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


class StatusTransitionMixin:
    """Adds can_transition/transition_to to a document with a `status` field."""

    DOCUMENT_TYPE = "Document"
    ALLOWED_TRANSITIONS: dict = {}

    def can_transition(self, target) -> bool:
        return target in self.ALLOWED_TRANSITIONS.get(self.status, set())

    @property
    def is_terminal(self) -> bool:
        return not self.ALLOWED_TRANSITIONS.get(self.status)

    def transition_to(self, target, now: Optional[datetime] = None) -> None:
        """
        Move to a new status.

        Raises:
            InvalidStatusTransitionError: If the table does not allow the move
        """
        if not self.can_transition(target):
            raise InvalidStatusTransitionError(self.DOCUMENT_TYPE, self.status.value, target.value)
        self.status = target
        self.updated_at = now or utcnow()
