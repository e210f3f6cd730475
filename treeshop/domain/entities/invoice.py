"""
Invoice Entity - Billing record with deposit/balance payment tracking.

Totals are recomputed from original_amount, additional_costs and
discount_amount by recalculate_totals(). Payment state (total_paid,
amount_due, is_fully_paid, is_overdue) is always derived, never stored.
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
from treeshop.domain.money import ZERO, to_decimal

DEFAULT_TAX_RATE = Decimal("0.0875")
DEFAULT_DEPOSIT_RATE = Decimal("0.25")

# Amount due at or below this counts as fully paid (rounding slack)
PAID_TOLERANCE = Decimal("0.01")


class InvoiceStatus(Enum):
    DRAFT = "draft"
    SENT = "sent"
    PARTIALLY_PAID = "partially_paid"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


class PaymentMethod(Enum):
    CASH = "cash"
    CHECK = "check"
    CREDIT_CARD = "credit_card"
    BANK_TRANSFER = "bank_transfer"
    FINANCING = "financing"


class PaymentTerms(Enum):
    DUE_ON_COMPLETION = "due_on_completion"
    NET_15 = "net_15"
    NET_30 = "net_30"
    NET_60 = "net_60"
    CUSTOM = "custom"

    @property
    def days(self) -> int:
        """Days from issue to due date. Custom terms default to 30."""
        return {
            PaymentTerms.DUE_ON_COMPLETION: 0,
            PaymentTerms.NET_15: 15,
            PaymentTerms.NET_30: 30,
            PaymentTerms.NET_60: 60,
            PaymentTerms.CUSTOM: 30,
        }[self]


# Statuses the overdue overlay applies to
OPEN_STATUSES = frozenset({
    InvoiceStatus.DRAFT,
    InvoiceStatus.SENT,
    InvoiceStatus.PARTIALLY_PAID,
})


def generate_invoice_number() -> str:
    return f"INV-{uuid4().hex[:8].upper()}"


def _default_due_date() -> datetime:
    return utcnow() + timedelta(days=PaymentTerms.NET_30.days)


@dataclass
class Invoice(StatusTransitionMixin):
    DOCUMENT_TYPE = "Invoice"
    # Paid and partially paid are reached only through reconcile_status()
    ALLOWED_TRANSITIONS = {
        InvoiceStatus.DRAFT: {InvoiceStatus.SENT, InvoiceStatus.CANCELLED},
        InvoiceStatus.SENT: {InvoiceStatus.CANCELLED},
        InvoiceStatus.PARTIALLY_PAID: {InvoiceStatus.CANCELLED},
        InvoiceStatus.OVERDUE: {InvoiceStatus.CANCELLED},
        InvoiceStatus.PAID: set(),
        InvoiceStatus.CANCELLED: set(),
    }

    id: UUID = field(default_factory=uuid4)
    work_order_id: Optional[UUID] = None
    invoice_number: str = field(default_factory=generate_invoice_number)
    customer_name: str = ""
    customer_email: str = ""
    customer_phone: str = ""
    customer_address: str = ""
    billing_address: str = ""
    project_title: str = ""
    project_description: str = ""
    work_completed_date: Optional[datetime] = None
    land_size: Decimal = Decimal("0")
    package_type: PackageTier = PackageTier.MEDIUM

    # Financial snapshot
    original_amount: Decimal = Decimal("0")
    additional_costs: Decimal = Decimal("0")
    discount_amount: Decimal = Decimal("0")
    subtotal: Decimal = Decimal("0")
    tax_rate: Decimal = DEFAULT_TAX_RATE
    tax_amount: Decimal = Decimal("0")
    total_amount: Decimal = Decimal("0")

    # Payments
    deposit_amount: Decimal = Decimal("0")
    deposit_paid: bool = False
    deposit_paid_date: Optional[datetime] = None
    balance_amount: Decimal = Decimal("0")
    balance_paid: bool = False
    balance_paid_date: Optional[datetime] = None
    payment_method: PaymentMethod = PaymentMethod.CHECK
    payment_terms: PaymentTerms = PaymentTerms.NET_30

    status: InvoiceStatus = InvoiceStatus.DRAFT
    due_date: datetime = field(default_factory=_default_due_date)
    notes: str = ""
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def recalculate_totals(self, deposit_rate: Decimal = DEFAULT_DEPOSIT_RATE) -> None:
        """Recompute subtotal, tax, total and the deposit/balance split."""
        self.subtotal = self.original_amount + self.additional_costs - self.discount_amount
        self.tax_amount = self.subtotal * self.tax_rate
        self.total_amount = self.subtotal + self.tax_amount
        self.deposit_amount = self.total_amount * deposit_rate
        self.balance_amount = self.total_amount - self.deposit_amount

    # =========================================================================
    # Derived payment state
    # =========================================================================

    @property
    def total_paid(self) -> Decimal:
        paid = ZERO
        if self.deposit_paid:
            paid += self.deposit_amount
        if self.balance_paid:
            paid += self.balance_amount
        return paid

    @property
    def amount_due(self) -> Decimal:
        return self.total_amount - self.total_paid

    @property
    def is_fully_paid(self) -> bool:
        return self.amount_due <= PAID_TOLERANCE

    def is_overdue(self, now: Optional[datetime] = None) -> bool:
        return (now or utcnow()) > self.due_date and not self.is_fully_paid

    def effective_status(self, now: Optional[datetime] = None) -> InvoiceStatus:
        """Stored status with the overdue overlay applied to open invoices."""
        if self.status in OPEN_STATUSES and self.is_overdue(now):
            return InvoiceStatus.OVERDUE
        return self.status

    # =========================================================================
    # Payments
    # =========================================================================

    def record_deposit_payment(
        self,
        paid_on: Optional[datetime] = None,
        method: Optional[PaymentMethod] = None,
    ) -> None:
        self.deposit_paid = True
        self.deposit_paid_date = paid_on or utcnow()
        if method is not None:
            self.payment_method = method

    def record_balance_payment(
        self,
        paid_on: Optional[datetime] = None,
        method: Optional[PaymentMethod] = None,
    ) -> None:
        self.balance_paid = True
        self.balance_paid_date = paid_on or utcnow()
        if method is not None:
            self.payment_method = method

    def reconcile_status(self, now: Optional[datetime] = None) -> InvoiceStatus:
        """
        Promote the stored status from payment state.

        Paid and cancelled invoices are left alone; a status is never
        demoted by reconciliation.
        """
        now = now or utcnow()
        if self.status in (InvoiceStatus.PAID, InvoiceStatus.CANCELLED):
            return self.status
        if self.is_fully_paid:
            self.status = InvoiceStatus.PAID
        elif self.total_paid > 0:
            self.status = InvoiceStatus.PARTIALLY_PAID
        elif self.is_overdue(now):
            self.status = InvoiceStatus.OVERDUE
        self.updated_at = now
        return self.status

    def search_text(self) -> str:
        return " ".join([self.customer_name, self.invoice_number, self.project_title])

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization. Derived payment fields are not stored."""
        return {
            'id': str(self.id),
            'work_order_id': str(self.work_order_id) if self.work_order_id else None,
            'invoice_number': self.invoice_number,
            'customer_name': self.customer_name,
            'customer_email': self.customer_email,
            'customer_phone': self.customer_phone,
            'customer_address': self.customer_address,
            'billing_address': self.billing_address,
            'project_title': self.project_title,
            'project_description': self.project_description,
            'work_completed_date': format_datetime(self.work_completed_date),
            'land_size': str(self.land_size),
            'package_type': self.package_type.value,
            'original_amount': str(self.original_amount),
            'additional_costs': str(self.additional_costs),
            'discount_amount': str(self.discount_amount),
            'subtotal': str(self.subtotal),
            'tax_rate': str(self.tax_rate),
            'tax_amount': str(self.tax_amount),
            'total_amount': str(self.total_amount),
            'deposit_amount': str(self.deposit_amount),
            'deposit_paid': self.deposit_paid,
            'deposit_paid_date': format_datetime(self.deposit_paid_date),
            'balance_amount': str(self.balance_amount),
            'balance_paid': self.balance_paid,
            'balance_paid_date': format_datetime(self.balance_paid_date),
            'payment_method': self.payment_method.value,
            'payment_terms': self.payment_terms.value,
            'status': self.status.value,
            'due_date': format_datetime(self.due_date),
            'notes': self.notes,
            'created_at': format_datetime(self.created_at),
            'updated_at': format_datetime(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Invoice':
        return cls(
            id=UUID(data['id']) if 'id' in data else uuid4(),
            work_order_id=UUID(data['work_order_id']) if data.get('work_order_id') else None,
            invoice_number=data.get('invoice_number') or generate_invoice_number(),
            customer_name=data.get('customer_name', ''),
            customer_email=data.get('customer_email', ''),
            customer_phone=data.get('customer_phone', ''),
            customer_address=data.get('customer_address', ''),
            billing_address=data.get('billing_address', ''),
            project_title=data.get('project_title', ''),
            project_description=data.get('project_description', ''),
            work_completed_date=parse_datetime(data.get('work_completed_date')),
            land_size=to_decimal(data.get('land_size', 0)),
            package_type=PackageTier.parse(data.get('package_type', 'medium')),
            original_amount=to_decimal(data.get('original_amount', 0)),
            additional_costs=to_decimal(data.get('additional_costs', 0)),
            discount_amount=to_decimal(data.get('discount_amount', 0)),
            subtotal=to_decimal(data.get('subtotal', 0)),
            tax_rate=to_decimal(data.get('tax_rate'), DEFAULT_TAX_RATE),
            tax_amount=to_decimal(data.get('tax_amount', 0)),
            total_amount=to_decimal(data.get('total_amount', 0)),
            deposit_amount=to_decimal(data.get('deposit_amount', 0)),
            deposit_paid=bool(data.get('deposit_paid', False)),
            deposit_paid_date=parse_datetime(data.get('deposit_paid_date')),
            balance_amount=to_decimal(data.get('balance_amount', 0)),
            balance_paid=bool(data.get('balance_paid', False)),
            balance_paid_date=parse_datetime(data.get('balance_paid_date')),
            payment_method=PaymentMethod(data.get('payment_method', 'check')),
            payment_terms=PaymentTerms(data.get('payment_terms', 'net_30')),
            status=InvoiceStatus(data.get('status', 'draft')),
            due_date=parse_datetime(data.get('due_date')) or _default_due_date(),
            notes=data.get('notes', ''),
            created_at=parse_datetime(data.get('created_at')) or utcnow(),
            updated_at=parse_datetime(data.get('updated_at')) or utcnow(),
        )
