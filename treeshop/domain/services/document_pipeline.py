"""
Document Pipeline - Lead -> Proposal -> WorkOrder -> Invoice.

Conversions are one-way copies: each creates a new document with its own
pricing snapshot and never modifies the source. Field loss is deliberate
and documented on each conversion.

Invoice payment reconciliation:
- total_paid = deposit (if paid) + balance (if paid)
- amount_due = total - total_paid; fully paid within 0.01
- on every update the stored status is promoted: paid, else partially_paid,
  else overdue. Paid and cancelled invoices are never reopened.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Dict, Iterable, Optional

from treeshop.domain.entities.invoice import (
    DEFAULT_DEPOSIT_RATE,
    DEFAULT_TAX_RATE,
    Invoice,
    InvoiceStatus,
    PaymentMethod,
    PaymentTerms,
)
from treeshop.domain.entities.lead import Lead
from treeshop.domain.entities.pricing import PackageTier, QuoteBreakdown
from treeshop.domain.entities.proposal import DEFAULT_VALID_DAYS, Proposal
from treeshop.domain.entities.status import utcnow
from treeshop.domain.entities.work_order import WorkOrder
from treeshop.domain.exceptions import DocumentStateError, ValidationError
from treeshop.domain.money import ZERO, to_decimal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InvoiceSummary:
    total_revenue: Decimal
    outstanding_amount: Decimal
    overdue_count: int
    status_counts: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            'total_revenue': float(self.total_revenue),
            'outstanding_amount': float(self.outstanding_amount),
            'overdue_count': self.overdue_count,
            'status_counts': dict(self.status_counts),
        }


class DocumentPipeline:
    """
    Derivation and reconciliation rules for pipeline documents.

    Proposal-stage deposit (deposit_percentage) and invoice-stage deposit
    (invoice_deposit_rate) are independent settings.
    """

    def __init__(
        self,
        proposal_valid_days: int = DEFAULT_VALID_DAYS,
        lead_default_package: PackageTier = PackageTier.MEDIUM,
        lead_default_transport_hours: Decimal = Decimal("2.0"),
        deposit_percentage: Decimal = Decimal("0.25"),
        invoice_tax_rate: Decimal = DEFAULT_TAX_RATE,
        invoice_deposit_rate: Decimal = DEFAULT_DEPOSIT_RATE,
        invoice_payment_terms: PaymentTerms = PaymentTerms.NET_30,
    ):
        self.proposal_valid_days = proposal_valid_days
        self.lead_default_package = PackageTier.parse(lead_default_package)
        self.lead_default_transport_hours = to_decimal(lead_default_transport_hours)
        self.deposit_percentage = to_decimal(deposit_percentage)
        self.invoice_tax_rate = to_decimal(invoice_tax_rate)
        self.invoice_deposit_rate = to_decimal(invoice_deposit_rate)
        self.invoice_payment_terms = invoice_payment_terms

    @classmethod
    def from_config(cls, config) -> 'DocumentPipeline':
        return cls(
            proposal_valid_days=config.proposal_valid_days,
            lead_default_package=config.lead_default_package,
            lead_default_transport_hours=config.lead_default_transport_hours,
            deposit_percentage=config.deposit_percentage,
            invoice_tax_rate=config.invoice_tax_rate,
            invoice_deposit_rate=config.invoice_deposit_rate,
            invoice_payment_terms=PaymentTerms(config.invoice_payment_terms),
        )

    # =========================================================================
    # Conversions
    # =========================================================================

    def lead_to_proposal(self, lead: Lead, now: Optional[datetime] = None) -> Proposal:
        """
        Create a draft proposal from a lead.

        Copies contact and project fields. subtotal = total = estimated value
        with no tax or discount. The lead's package tier is not carried over:
        the proposal starts on the default package with default transport
        hours and no debris.
        """
        now = now or utcnow()
        total = lead.estimated_value
        deposit = total * self.deposit_percentage
        proposal = Proposal(
            lead_id=lead.id,
            customer_name=lead.full_name,
            customer_email=lead.customer_email,
            customer_phone=lead.customer_phone,
            customer_address=lead.full_address,
            project_zip_code=lead.customer_zip_code,
            project_title=f"Forestry Mulching - {lead.project_location}",
            project_description=lead.project_description,
            land_size=lead.land_size,
            package_type=self.lead_default_package,
            transport_hours=self.lead_default_transport_hours,
            debris_yards=ZERO,
            subtotal=total,
            tax_amount=ZERO,
            total_amount=total,
            discount=ZERO,
            deposit_amount=deposit,
            balance_due=total - deposit,
            notes=lead.notes,
            valid_until=now + timedelta(days=self.proposal_valid_days),
            created_at=now,
            updated_at=now,
        )
        logger.info(f"Created proposal {proposal.id} from lead {lead.id}")
        return proposal

    def quote_to_proposal(
        self,
        quote: QuoteBreakdown,
        customer_name: str = "",
        customer_email: str = "",
        customer_phone: str = "",
        customer_address: str = "",
        project_zip_code: str = "",
        project_title: str = "",
        project_description: str = "",
        now: Optional[datetime] = None,
    ) -> Proposal:
        """Create a draft proposal carrying a quote's final price, tier and inputs."""
        now = now or utcnow()
        proposal = Proposal(
            customer_name=customer_name,
            customer_email=customer_email,
            customer_phone=customer_phone,
            customer_address=customer_address,
            project_zip_code=project_zip_code,
            project_title=project_title,
            project_description=project_description,
            land_size=quote.acres,
            package_type=quote.tier,
            transport_hours=quote.transport_hours,
            debris_yards=quote.manual_debris_yards,
            subtotal=quote.final_price,
            tax_amount=ZERO,
            total_amount=quote.final_price,
            discount=ZERO,
            deposit_amount=quote.deposit_amount,
            balance_due=quote.balance_due,
            valid_until=now + timedelta(days=self.proposal_valid_days),
            created_at=now,
            updated_at=now,
        )
        logger.info(f"Created proposal {proposal.id} from {quote.tier.value} quote")
        return proposal

    def proposal_to_work_order(self, proposal: Proposal, now: Optional[datetime] = None) -> WorkOrder:
        """
        Create a scheduled work order from a proposal.

        original_amount = proposal total. Crew, equipment, hours and
        completion start empty. The project location is the customer address.
        """
        now = now or utcnow()
        work_order = WorkOrder(
            proposal_id=proposal.id,
            customer_name=proposal.customer_name,
            customer_email=proposal.customer_email,
            customer_phone=proposal.customer_phone,
            customer_address=proposal.customer_address,
            project_location=proposal.customer_address,
            project_title=proposal.project_title,
            project_description=proposal.project_description,
            land_size=proposal.land_size,
            package_type=proposal.package_type,
            original_amount=proposal.total_amount,
            additional_costs=ZERO,
            created_at=now,
            updated_at=now,
        )
        work_order.recalculate()
        logger.info(f"Created work order {work_order.work_order_number} from proposal {proposal.id}")
        return work_order

    def work_order_to_invoice(
        self,
        work_order: WorkOrder,
        additional_costs=ZERO,
        discount_amount=ZERO,
        payment_terms: Optional[PaymentTerms] = None,
        now: Optional[datetime] = None,
    ) -> Invoice:
        """
        Create a draft invoice from a work order.

        original_amount is the work order's stored final_amount (which
        already includes its additional costs). Tax and the deposit split
        are recomputed at invoice rates.
        """
        now = now or utcnow()
        terms = payment_terms or self.invoice_payment_terms
        invoice = Invoice(
            work_order_id=work_order.id,
            customer_name=work_order.customer_name,
            customer_email=work_order.customer_email,
            customer_phone=work_order.customer_phone,
            customer_address=work_order.customer_address,
            billing_address=work_order.customer_address,
            project_title=work_order.project_title,
            project_description=work_order.project_description,
            work_completed_date=work_order.actual_end_date,
            land_size=work_order.land_size,
            package_type=work_order.package_type,
            original_amount=work_order.final_amount,
            additional_costs=to_decimal(additional_costs),
            discount_amount=to_decimal(discount_amount),
            tax_rate=self.invoice_tax_rate,
            payment_terms=terms,
            due_date=now + timedelta(days=terms.days),
            created_at=now,
            updated_at=now,
        )
        invoice.recalculate_totals(self.invoice_deposit_rate)
        logger.info(f"Created invoice {invoice.invoice_number} from work order {work_order.work_order_number}")
        return invoice

    # =========================================================================
    # Updates
    # =========================================================================

    @staticmethod
    def transition(document, target, now: Optional[datetime] = None):
        """Apply a manual status change; raises InvalidStatusTransitionError."""
        previous = document.status
        document.transition_to(target, now)
        logger.info(
            f"{document.DOCUMENT_TYPE} {document.id}: {previous.value} -> {target.value}"
        )
        return document

    @staticmethod
    def require_status(document, required, action: str):
        """Raise DocumentStateError unless the document is in the required status."""
        if document.status != required:
            raise DocumentStateError(
                document.DOCUMENT_TYPE, document.status.value, required.value, action,
            )
        return document

    @staticmethod
    def update_work_order_costs(
        work_order: WorkOrder,
        additional_costs=None,
        hours_worked=None,
        completion_percentage: Optional[float] = None,
        now: Optional[datetime] = None,
    ) -> WorkOrder:
        """Save cost/progress fields and refresh final_amount."""
        if additional_costs is not None:
            work_order.additional_costs = to_decimal(additional_costs)
        if hours_worked is not None:
            work_order.hours_worked = to_decimal(hours_worked)
        if completion_percentage is not None:
            work_order.set_completion(completion_percentage)
        work_order.recalculate()
        work_order.updated_at = now or utcnow()
        return work_order

    @staticmethod
    def update_invoice(invoice: Invoice, now: Optional[datetime] = None) -> Invoice:
        """Reconcile the stored status after any invoice edit."""
        previous = invoice.status
        status = invoice.reconcile_status(now)
        if status != previous:
            logger.info(f"Invoice {invoice.invoice_number}: {previous.value} -> {status.value}")
        return invoice

    def record_payment(
        self,
        invoice: Invoice,
        portion: str,
        paid_on: Optional[datetime] = None,
        method: Optional[PaymentMethod] = None,
        now: Optional[datetime] = None,
    ) -> Invoice:
        """
        Mark the deposit or balance as paid and reconcile.

        Args:
            portion: 'deposit' or 'balance'
        """
        if invoice.status == InvoiceStatus.CANCELLED:
            raise ValidationError("status", "cannot record a payment on a cancelled invoice")
        now = now or utcnow()
        if portion == "deposit":
            invoice.record_deposit_payment(paid_on or now, method)
        elif portion == "balance":
            invoice.record_balance_payment(paid_on or now, method)
        else:
            raise ValidationError("portion", f"expected 'deposit' or 'balance', got '{portion}'")
        return self.update_invoice(invoice, now)

    # =========================================================================
    # Reporting
    # =========================================================================

    @staticmethod
    def summarize_invoices(invoices: Iterable[Invoice], now: Optional[datetime] = None) -> InvoiceSummary:
        """
        Revenue and receivables across invoices.

        Revenue sums totals of paid invoices; outstanding sums amount due of
        every invoice that is neither paid nor cancelled.
        """
        now = now or utcnow()
        total_revenue = ZERO
        outstanding = ZERO
        overdue_count = 0
        status_counts: Dict[str, int] = {}

        for invoice in invoices:
            effective = invoice.effective_status(now)
            status_counts[effective.value] = status_counts.get(effective.value, 0) + 1
            if invoice.status == InvoiceStatus.PAID:
                total_revenue += invoice.total_amount
            elif invoice.status != InvoiceStatus.CANCELLED:
                outstanding += invoice.amount_due
            if effective == InvoiceStatus.OVERDUE:
                overdue_count += 1

        return InvoiceSummary(
            total_revenue=total_revenue,
            outstanding_amount=outstanding,
            overdue_count=overdue_count,
            status_counts=status_counts,
        )
