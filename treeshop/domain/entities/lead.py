"""
Lead Entity - A prospective customer enquiry.
"""
from dataclasses import dataclass, field
from datetime import datetime
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


class LeadStatus(Enum):
    NEW = "new"
    CONTACTED = "contacted"
    QUOTED = "quoted"
    QUALIFIED = "qualified"
    LOST = "lost"
    CONVERTED = "converted"


class LeadUrgency(Enum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"


class LeadSource(Enum):
    WEBSITE = "website"
    PHONE = "phone"
    REFERRAL = "referral"
    GOOGLE = "google"
    FACEBOOK = "facebook"
    WALK_IN = "walk_in"
    OTHER = "other"


@dataclass
class Lead(StatusTransitionMixin):
    """
    Customer contact and project details captured before a proposal.

    estimated_value seeds the proposal amount on conversion. package_tier is
    informational only: conversion always starts the proposal on the medium
    package.
    """

    DOCUMENT_TYPE = "Lead"
    ALLOWED_TRANSITIONS = {
        LeadStatus.NEW: {LeadStatus.CONTACTED},
        LeadStatus.CONTACTED: {LeadStatus.QUOTED},
        LeadStatus.QUOTED: {LeadStatus.QUALIFIED},
        LeadStatus.QUALIFIED: {LeadStatus.LOST, LeadStatus.CONVERTED},
        LeadStatus.LOST: set(),
        LeadStatus.CONVERTED: set(),
    }

    id: UUID = field(default_factory=uuid4)
    customer_first_name: str = ""
    customer_last_name: str = ""
    customer_email: str = ""
    customer_phone: str = ""
    customer_address: str = ""
    customer_city: str = ""
    customer_state: str = ""
    customer_zip_code: str = ""
    project_description: str = ""
    project_location: str = ""
    land_size: Decimal = Decimal("0")
    package_tier: Optional[PackageTier] = None
    urgency: LeadUrgency = LeadUrgency.NORMAL
    lead_source: LeadSource = LeadSource.WEBSITE
    estimated_value: Decimal = Decimal("0")
    notes: str = ""
    status: LeadStatus = LeadStatus.NEW
    follow_up_date: Optional[datetime] = None
    last_contact_date: Optional[datetime] = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    @property
    def full_name(self) -> str:
        return f"{self.customer_first_name} {self.customer_last_name}".strip()

    @property
    def full_address(self) -> str:
        parts = [
            self.customer_address,
            self.customer_city,
            self.customer_state,
            self.customer_zip_code,
        ]
        return ", ".join(part for part in parts if part)

    def search_text(self) -> str:
        return " ".join([
            self.full_name, self.customer_email, self.project_description, self.customer_phone,
        ])

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            'id': str(self.id),
            'customer_first_name': self.customer_first_name,
            'customer_last_name': self.customer_last_name,
            'customer_email': self.customer_email,
            'customer_phone': self.customer_phone,
            'customer_address': self.customer_address,
            'customer_city': self.customer_city,
            'customer_state': self.customer_state,
            'customer_zip_code': self.customer_zip_code,
            'project_description': self.project_description,
            'project_location': self.project_location,
            'land_size': str(self.land_size),
            'package_tier': self.package_tier.value if self.package_tier else None,
            'urgency': self.urgency.value,
            'lead_source': self.lead_source.value,
            'estimated_value': str(self.estimated_value),
            'notes': self.notes,
            'status': self.status.value,
            'follow_up_date': format_datetime(self.follow_up_date),
            'last_contact_date': format_datetime(self.last_contact_date),
            'created_at': format_datetime(self.created_at),
            'updated_at': format_datetime(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Lead':
        tier = data.get('package_tier')
        return cls(
            id=UUID(data['id']) if 'id' in data else uuid4(),
            customer_first_name=data.get('customer_first_name', ''),
            customer_last_name=data.get('customer_last_name', ''),
            customer_email=data.get('customer_email', ''),
            customer_phone=data.get('customer_phone', ''),
            customer_address=data.get('customer_address', ''),
            customer_city=data.get('customer_city', ''),
            customer_state=data.get('customer_state', ''),
            customer_zip_code=data.get('customer_zip_code', ''),
            project_description=data.get('project_description', ''),
            project_location=data.get('project_location', ''),
            land_size=to_decimal(data.get('land_size', 0)),
            package_tier=PackageTier.parse(tier) if tier else None,
            urgency=LeadUrgency(data.get('urgency', 'normal')),
            lead_source=LeadSource(data.get('lead_source', 'website')),
            estimated_value=to_decimal(data.get('estimated_value', 0)),
            notes=data.get('notes', ''),
            status=LeadStatus(data.get('status', 'new')),
            follow_up_date=parse_datetime(data.get('follow_up_date')),
            last_contact_date=parse_datetime(data.get('last_contact_date')),
            created_at=parse_datetime(data.get('created_at')) or utcnow(),
            updated_at=parse_datetime(data.get('updated_at')) or utcnow(),
        )
