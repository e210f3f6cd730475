"""
Proposal Entity - A priced offer sent to a customer.

Pricing fields are a snapshot taken when the proposal is created; later rate
table changes do not affect an existing proposal.
"""
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from treeshop.domain.entities.pricing import PackageTier
from treeshop.domain.entities.status import (
    StatusTransitionMixin,
    format_datetime,
    parse_datetime,
    utcnow,
)
from treeshop.domain.money import to_decimal

DEFAULT_VALID_DAYS = 30


class ProposalStatus(Enum):
    DRAFT = "draft"
    SENT = "sent"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    EXPIRED = "expired"


def _default_valid_until() -> datetime:
    return utcnow() + timedelta(days=DEFAULT_VALID_DAYS)


@dataclass
class Proposal(StatusTransitionMixin):
    DOCUMENT_TYPE = "Proposal"
    ALLOWED_TRANSITIONS = {
        ProposalStatus.DRAFT: {ProposalStatus.SENT},
        ProposalStatus.SENT: {
            ProposalStatus.ACCEPTED,
            ProposalStatus.REJECTED,
            ProposalStatus.EXPIRED,
        },
        ProposalStatus.ACCEPTED: set(),
        ProposalStatus.REJECTED: set(),
        ProposalStatus.EXPIRED: set(),
    }

    id: UUID = field(default_factory=uuid4)
    lead_id: Optional[UUID] = None
    customer_name: str = ""
    customer_email: str = ""
    customer_phone: str = ""
    customer_address: str = ""
    project_zip_code: str = ""
    project_title: str = ""
    project_description: str = ""
    land_size: Decimal = Decimal("0")
    package_type: PackageTier = PackageTier.MEDIUM
    transport_hours: Decimal = Decimal("2.0")
    debris_yards: Decimal = Decimal("0")

    # Pricing snapshot
    subtotal: Decimal = Decimal("0")
    tax_amount: Decimal = Decimal("0")
    total_amount: Decimal = Decimal("0")
    discount: Decimal = Decimal("0")
    deposit_amount: Decimal = Decimal("0")
    balance_due: Decimal = Decimal("0")

    notes: str = ""
    terms_accepted: bool = False
    status: ProposalStatus = ProposalStatus.DRAFT
    valid_until: datetime = field(default_factory=_default_valid_until)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """
        True once an open proposal is past valid_until.

        Computed only; the status is never moved to EXPIRED automatically.
        """
        if self.status not in (ProposalStatus.DRAFT, ProposalStatus.SENT):
            return False
        return (now or utcnow()) > self.valid_until

    def search_text(self) -> str:
        return " ".join([self.customer_name, self.project_title, self.customer_email])

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            'id': str(self.id),
            'lead_id': str(self.lead_id) if self.lead_id else None,
            'customer_name': self.customer_name,
            'customer_email': self.customer_email,
            'customer_phone': self.customer_phone,
            'customer_address': self.customer_address,
            'project_zip_code': self.project_zip_code,
            'project_title': self.project_title,
            'project_description': self.project_description,
            'land_size': str(self.land_size),
            'package_type': self.package_type.value,
            'transport_hours': str(self.transport_hours),
            'debris_yards': str(self.debris_yards),
            'subtotal': str(self.subtotal),
            'tax_amount': str(self.tax_amount),
            'total_amount': str(self.total_amount),
            'discount': str(self.discount),
            'deposit_amount': str(self.deposit_amount),
            'balance_due': str(self.balance_due),
            'notes': self.notes,
            'terms_accepted': self.terms_accepted,
            'status': self.status.value,
            'valid_until': format_datetime(self.valid_until),
            'created_at': format_datetime(self.created_at),
            'updated_at': format_datetime(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Proposal':
        return cls(
            id=UUID(data['id']) if 'id' in data else uuid4(),
            lead_id=UUID(data['lead_id']) if data.get('lead_id') else None,
            customer_name=data.get('customer_name', ''),
            customer_email=data.get('customer_email', ''),
            customer_phone=data.get('customer_phone', ''),
            customer_address=data.get('customer_address', ''),
            project_zip_code=data.get('project_zip_code', ''),
            project_title=data.get('project_title', ''),
            project_description=data.get('project_description', ''),
            land_size=to_decimal(data.get('land_size', 0)),
            package_type=PackageTier.parse(data.get('package_type', 'medium')),
            transport_hours=to_decimal(data.get('transport_hours', '2.0')),
            debris_yards=to_decimal(data.get('debris_yards', 0)),
            subtotal=to_decimal(data.get('subtotal', 0)),
            tax_amount=to_decimal(data.get('tax_amount', 0)),
            total_amount=to_decimal(data.get('total_amount', 0)),
            discount=to_decimal(data.get('discount', 0)),
            deposit_amount=to_decimal(data.get('deposit_amount', 0)),
            balance_due=to_decimal(data.get('balance_due', 0)),
            notes=data.get('notes', ''),
            terms_accepted=bool(data.get('terms_accepted', False)),
            status=ProposalStatus(data.get('status', 'draft')),
            valid_until=parse_datetime(data.get('valid_until')) or _default_valid_until(),
            created_at=parse_datetime(data.get('created_at')) or utcnow(),
            updated_at=parse_datetime(data.get('updated_at')) or utcnow(),
        )
