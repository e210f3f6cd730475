"""
Work Order Entity - Scheduled field work derived from an accepted proposal.
"""
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional
from uuid import UUID, uuid4

from treeshop.domain.entities.pricing import PackageTier
from treeshop.domain.entities.status import (
    StatusTransitionMixin,
    format_datetime,
    parse_datetime,
    utcnow,
)
from treeshop.domain.exceptions import ValidationError
from treeshop.domain.money import to_decimal


class WorkOrderStatus(Enum):
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    ON_HOLD = "on_hold"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


def generate_work_order_number() -> str:
    return f"WO-{uuid4().hex[:8].upper()}"


@dataclass
class WorkOrder(StatusTransitionMixin):
    """
    Field work record.

    final_amount is stored and refreshed by recalculate() whenever costs are
    saved: final_amount = original_amount + additional_costs.
    """

    DOCUMENT_TYPE = "WorkOrder"
    ALLOWED_TRANSITIONS = {
        WorkOrderStatus.SCHEDULED: {WorkOrderStatus.IN_PROGRESS, WorkOrderStatus.CANCELLED},
        WorkOrderStatus.IN_PROGRESS: {
            WorkOrderStatus.ON_HOLD,
            WorkOrderStatus.COMPLETED,
            WorkOrderStatus.CANCELLED,
        },
        WorkOrderStatus.ON_HOLD: {WorkOrderStatus.IN_PROGRESS, WorkOrderStatus.CANCELLED},
        WorkOrderStatus.COMPLETED: set(),
        WorkOrderStatus.CANCELLED: set(),
    }

    id: UUID = field(default_factory=uuid4)
    proposal_id: Optional[UUID] = None
    work_order_number: str = field(default_factory=generate_work_order_number)
    customer_name: str = ""
    customer_email: str = ""
    customer_phone: str = ""
    customer_address: str = ""
    project_location: str = ""
    project_title: str = ""
    project_description: str = ""
    land_size: Decimal = Decimal("0")
    package_type: PackageTier = PackageTier.MEDIUM

    scheduled_start_date: Optional[datetime] = None
    scheduled_end_date: Optional[datetime] = None
    actual_start_date: Optional[datetime] = None
    actual_end_date: Optional[datetime] = None

    crew_assigned: List[str] = field(default_factory=list)
    equipment_used: List[str] = field(default_factory=list)
    hours_worked: Decimal = Decimal("0")
    completion_percentage: float = 0.0
    work_notes: str = ""

    original_amount: Decimal = Decimal("0")
    additional_costs: Decimal = Decimal("0")
    final_amount: Decimal = Decimal("0")

    status: WorkOrderStatus = WorkOrderStatus.SCHEDULED
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def recalculate(self) -> None:
        self.final_amount = self.original_amount + self.additional_costs

    def set_completion(self, fraction: float) -> None:
        """Set completion as a fraction in [0, 1]."""
        if not 0.0 <= fraction <= 1.0:
            raise ValidationError("completion_percentage", "must be between 0 and 1")
        self.completion_percentage = fraction

    def transition_to(self, target: WorkOrderStatus, now: Optional[datetime] = None) -> None:
        now = now or utcnow()
        super().transition_to(target, now)
        if target == WorkOrderStatus.IN_PROGRESS and self.actual_start_date is None:
            self.actual_start_date = now
        elif target == WorkOrderStatus.COMPLETED:
            self.actual_end_date = now

    def is_overdue(self, now: Optional[datetime] = None) -> bool:
        """Past the scheduled end date and not completed."""
        if self.scheduled_end_date is None:
            return False
        if self.status in (WorkOrderStatus.COMPLETED, WorkOrderStatus.CANCELLED):
            return False
        return (now or utcnow()) > self.scheduled_end_date

    def search_text(self) -> str:
        return " ".join([self.customer_name, self.work_order_number, self.project_title])

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            'id': str(self.id),
            'proposal_id': str(self.proposal_id) if self.proposal_id else None,
            'work_order_number': self.work_order_number,
            'customer_name': self.customer_name,
            'customer_email': self.customer_email,
            'customer_phone': self.customer_phone,
            'customer_address': self.customer_address,
            'project_location': self.project_location,
            'project_title': self.project_title,
            'project_description': self.project_description,
            'land_size': str(self.land_size),
            'package_type': self.package_type.value,
            'scheduled_start_date': format_datetime(self.scheduled_start_date),
            'scheduled_end_date': format_datetime(self.scheduled_end_date),
            'actual_start_date': format_datetime(self.actual_start_date),
            'actual_end_date': format_datetime(self.actual_end_date),
            'crew_assigned': list(self.crew_assigned),
            'equipment_used': list(self.equipment_used),
            'hours_worked': str(self.hours_worked),
            'completion_percentage': self.completion_percentage,
            'work_notes': self.work_notes,
            'original_amount': str(self.original_amount),
            'additional_costs': str(self.additional_costs),
            'final_amount': str(self.final_amount),
            'status': self.status.value,
            'created_at': format_datetime(self.created_at),
            'updated_at': format_datetime(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'WorkOrder':
        return cls(
            id=UUID(data['id']) if 'id' in data else uuid4(),
            proposal_id=UUID(data['proposal_id']) if data.get('proposal_id') else None,
            work_order_number=data.get('work_order_number') or generate_work_order_number(),
            customer_name=data.get('customer_name', ''),
            customer_email=data.get('customer_email', ''),
            customer_phone=data.get('customer_phone', ''),
            customer_address=data.get('customer_address', ''),
            project_location=data.get('project_location', ''),
            project_title=data.get('project_title', ''),
            project_description=data.get('project_description', ''),
            land_size=to_decimal(data.get('land_size', 0)),
            package_type=PackageTier.parse(data.get('package_type', 'medium')),
            scheduled_start_date=parse_datetime(data.get('scheduled_start_date')),
            scheduled_end_date=parse_datetime(data.get('scheduled_end_date')),
            actual_start_date=parse_datetime(data.get('actual_start_date')),
            actual_end_date=parse_datetime(data.get('actual_end_date')),
            crew_assigned=list(data.get('crew_assigned', [])),
            equipment_used=list(data.get('equipment_used', [])),
            hours_worked=to_decimal(data.get('hours_worked', 0)),
            completion_percentage=float(data.get('completion_percentage', 0.0)),
            work_notes=data.get('work_notes', ''),
            original_amount=to_decimal(data.get('original_amount', 0)),
            additional_costs=to_decimal(data.get('additional_costs', 0)),
            final_amount=to_decimal(data.get('final_amount', 0)),
            status=WorkOrderStatus(data.get('status', 'scheduled')),
            created_at=parse_datetime(data.get('created_at')) or utcnow(),
            updated_at=parse_datetime(data.get('updated_at')) or utcnow(),
        )
