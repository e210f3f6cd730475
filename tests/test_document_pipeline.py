"""
Unit Tests for the Document Pipeline.

Tests business rules:
- Lead -> Proposal -> WorkOrder -> Invoice conversions
- Conversions never modify their source
- Status transition tables
- Work order cost and progress updates
"""
import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from treeshop.config import get_config
from treeshop.domain.entities.invoice import InvoiceStatus, PaymentTerms
from treeshop.domain.entities.lead import Lead, LeadStatus
from treeshop.domain.entities.pricing import PackageTier, PricingSettings, RateTable
from treeshop.domain.entities.proposal import Proposal, ProposalStatus
from treeshop.domain.entities.work_order import WorkOrder, WorkOrderStatus
from treeshop.domain.exceptions import DocumentStateError, InvalidStatusTransitionError, ValidationError
from treeshop.domain.services import DocumentPipeline, QuoteCalculator

NOW = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def pipeline():
    return DocumentPipeline()


@pytest.fixture
def lead():
    return Lead(
        customer_first_name="Dana",
        customer_last_name="Reyes",
        customer_email="dana@example.com",
        customer_phone="555-0100",
        customer_address="12 Pine St",
        customer_city="Ocala",
        customer_state="FL",
        customer_zip_code="34470",
        project_description="Clear two acres of palmetto",
        project_location="Ocala",
        land_size=Decimal("2"),
        package_tier=PackageTier.MAX_HEAVY,
        estimated_value=Decimal("10000"),
        notes="Gate code 1234",
    )


@pytest.fixture
def work_order():
    order = WorkOrder(
        customer_name="Dana Reyes",
        customer_address="12 Pine St, Ocala, FL, 34470",
        project_title="Forestry Mulching - Ocala",
        original_amount=Decimal("10000"),
        additional_costs=Decimal("500"),
    )
    order.recalculate()
    return order


# =============================================================================
# Conversions
# =============================================================================

class TestLeadToProposal:
    """Tests for DocumentPipeline.lead_to_proposal."""

    def test_copies_contact_fields(self, pipeline, lead):
        proposal = pipeline.lead_to_proposal(lead, now=NOW)

        assert proposal.lead_id == lead.id
        assert proposal.customer_name == "Dana Reyes"
        assert proposal.customer_email == "dana@example.com"
        assert proposal.customer_address == "12 Pine St, Ocala, FL, 34470"
        assert proposal.project_zip_code == "34470"
        assert proposal.project_title == "Forestry Mulching - Ocala"
        assert proposal.notes == "Gate code 1234"

    def test_pricing_from_estimated_value(self, pipeline, lead):
        proposal = pipeline.lead_to_proposal(lead, now=NOW)

        assert proposal.subtotal == Decimal("10000")
        assert proposal.total_amount == Decimal("10000")
        assert proposal.tax_amount == Decimal("0")
        assert proposal.deposit_amount == Decimal("2500")
        assert proposal.balance_due == Decimal("7500")

    def test_tier_not_carried_over(self, pipeline, lead):
        """The proposal always starts on the default package."""
        proposal = pipeline.lead_to_proposal(lead, now=NOW)
        assert proposal.package_type == PackageTier.MEDIUM
        assert proposal.transport_hours == Decimal("2.0")
        assert proposal.debris_yards == Decimal("0")

    def test_starts_as_draft_with_validity(self, pipeline, lead):
        proposal = pipeline.lead_to_proposal(lead, now=NOW)
        assert proposal.status == ProposalStatus.DRAFT
        assert proposal.valid_until == NOW + timedelta(days=30)

    def test_lead_unchanged(self, pipeline, lead):
        before = lead.to_dict()
        pipeline.lead_to_proposal(lead, now=NOW)
        assert lead.to_dict() == before

    def test_full_address_skips_blank_parts(self):
        lead = Lead(customer_address="1 Oak Ln", customer_zip_code="32801")
        assert lead.full_address == "1 Oak Ln, 32801"

    def test_from_config(self, lead):
        pipeline = DocumentPipeline.from_config(get_config())
        proposal = pipeline.lead_to_proposal(lead, now=NOW)
        assert proposal.deposit_amount == Decimal("2500.00")


class TestQuoteToProposal:
    """Tests for DocumentPipeline.quote_to_proposal."""

    def test_carries_quote_pricing(self, pipeline):
        quote = QuoteCalculator(RateTable(), PricingSettings()).calculate_quote(
            Decimal("2.5"), PackageTier.LARGE, Decimal("2"), Decimal("5"),
        )
        proposal = pipeline.quote_to_proposal(quote, customer_name="Dana Reyes", now=NOW)

        assert proposal.package_type == PackageTier.LARGE
        assert proposal.land_size == Decimal("2.5")
        assert proposal.debris_yards == Decimal("5")
        assert proposal.total_amount == quote.final_price
        assert proposal.deposit_amount == quote.deposit_amount
        assert proposal.balance_due == quote.balance_due
        assert proposal.lead_id is None


class TestProposalToWorkOrder:
    """Tests for DocumentPipeline.proposal_to_work_order."""

    def test_creates_scheduled_order(self, pipeline, lead):
        proposal = pipeline.lead_to_proposal(lead, now=NOW)
        work_order = pipeline.proposal_to_work_order(proposal, now=NOW)

        assert work_order.proposal_id == proposal.id
        assert work_order.status == WorkOrderStatus.SCHEDULED
        assert work_order.original_amount == Decimal("10000")
        assert work_order.final_amount == Decimal("10000")
        assert work_order.project_location == proposal.customer_address
        assert work_order.crew_assigned == []
        assert work_order.hours_worked == Decimal("0")
        assert work_order.completion_percentage == 0.0
        assert work_order.work_order_number.startswith("WO-")

    def test_proposal_unchanged(self, pipeline, lead):
        proposal = pipeline.lead_to_proposal(lead, now=NOW)
        before = proposal.to_dict()
        pipeline.proposal_to_work_order(proposal, now=NOW)
        assert proposal.to_dict() == before


class TestWorkOrderToInvoice:
    """Tests for DocumentPipeline.work_order_to_invoice."""

    def test_invoice_totals(self, pipeline, work_order):
        invoice = pipeline.work_order_to_invoice(
            work_order, additional_costs=Decimal("200"), discount_amount=Decimal("100"), now=NOW,
        )

        assert invoice.original_amount == Decimal("10500")
        assert invoice.subtotal == Decimal("10600")
        assert invoice.tax_amount == Decimal("927.5")
        assert invoice.total_amount == Decimal("11527.5")
        assert invoice.deposit_amount == Decimal("2881.875")
        assert invoice.balance_amount == Decimal("8645.625")
        assert invoice.status == InvoiceStatus.DRAFT

    def test_due_date_from_terms(self, pipeline, work_order):
        invoice = pipeline.work_order_to_invoice(work_order, now=NOW)
        assert invoice.payment_terms == PaymentTerms.NET_30
        assert invoice.due_date == NOW + timedelta(days=30)

    def test_due_on_completion(self, pipeline, work_order):
        invoice = pipeline.work_order_to_invoice(
            work_order, payment_terms=PaymentTerms.DUE_ON_COMPLETION, now=NOW,
        )
        assert invoice.due_date == NOW

    def test_completed_date_copied(self, pipeline, work_order):
        work_order.transition_to(WorkOrderStatus.IN_PROGRESS, NOW)
        work_order.transition_to(WorkOrderStatus.COMPLETED, NOW + timedelta(days=2))
        invoice = pipeline.work_order_to_invoice(work_order, now=NOW)
        assert invoice.work_completed_date == NOW + timedelta(days=2)

    def test_work_order_unchanged(self, pipeline, work_order):
        before = work_order.to_dict()
        pipeline.work_order_to_invoice(work_order, additional_costs=50, now=NOW)
        assert work_order.to_dict() == before


# =============================================================================
# Status Transitions
# =============================================================================

class TestStatusTransitions:
    """Tests for document status tables."""

    def test_lead_happy_path(self, pipeline, lead):
        for status in (LeadStatus.CONTACTED, LeadStatus.QUOTED, LeadStatus.QUALIFIED, LeadStatus.CONVERTED):
            pipeline.transition(lead, status, NOW)
        assert lead.status == LeadStatus.CONVERTED
        assert lead.is_terminal
        assert lead.updated_at == NOW

    def test_lead_cannot_skip(self, pipeline, lead):
        with pytest.raises(InvalidStatusTransitionError) as exc_info:
            pipeline.transition(lead, LeadStatus.QUALIFIED)
        assert exc_info.value.current == "new"
        assert exc_info.value.target == "qualified"
        assert lead.status == LeadStatus.NEW

    def test_proposal_transitions(self):
        proposal = Proposal()
        assert proposal.can_transition(ProposalStatus.SENT)
        assert not proposal.can_transition(ProposalStatus.ACCEPTED)
        proposal.transition_to(ProposalStatus.SENT)
        proposal.transition_to(ProposalStatus.REJECTED)
        with pytest.raises(InvalidStatusTransitionError):
            proposal.transition_to(ProposalStatus.SENT)

    def test_work_order_dates(self, work_order):
        later = NOW + timedelta(days=1)
        work_order.transition_to(WorkOrderStatus.IN_PROGRESS, NOW)
        work_order.transition_to(WorkOrderStatus.ON_HOLD, later)
        work_order.transition_to(WorkOrderStatus.IN_PROGRESS, later)

        # Resuming keeps the first start date
        assert work_order.actual_start_date == NOW
        work_order.transition_to(WorkOrderStatus.COMPLETED, later)
        assert work_order.actual_end_date == later

    def test_work_order_cancel_from_scheduled(self, work_order):
        work_order.transition_to(WorkOrderStatus.CANCELLED)
        assert work_order.is_terminal
        with pytest.raises(InvalidStatusTransitionError):
            work_order.transition_to(WorkOrderStatus.IN_PROGRESS)

    def test_work_order_cannot_complete_from_scheduled(self, work_order):
        with pytest.raises(InvalidStatusTransitionError):
            work_order.transition_to(WorkOrderStatus.COMPLETED)

    def test_invoice_paid_only_through_payments(self, pipeline, work_order):
        invoice = pipeline.work_order_to_invoice(work_order, now=NOW)
        pipeline.transition(invoice, InvoiceStatus.SENT, NOW)

        for target in (InvoiceStatus.PAID, InvoiceStatus.PARTIALLY_PAID):
            with pytest.raises(InvalidStatusTransitionError):
                pipeline.transition(invoice, target, NOW)
        assert invoice.status == InvoiceStatus.SENT

        pipeline.record_payment(invoice, "deposit", now=NOW)
        assert invoice.status == InvoiceStatus.PARTIALLY_PAID
        pipeline.transition(invoice, InvoiceStatus.CANCELLED, NOW)
        assert invoice.is_terminal


class TestRequireStatus:
    """Tests for DocumentPipeline.require_status."""

    def test_matching_status(self, pipeline):
        proposal = Proposal(status=ProposalStatus.ACCEPTED)
        assert pipeline.require_status(proposal, ProposalStatus.ACCEPTED, "create a work order") is proposal

    def test_other_status_rejected(self, pipeline):
        proposal = Proposal()
        with pytest.raises(DocumentStateError) as exc_info:
            pipeline.require_status(proposal, ProposalStatus.ACCEPTED, "create a work order")
        assert exc_info.value.current == "draft"
        assert exc_info.value.required == "accepted"
        assert exc_info.value.code == "INVALID_DOCUMENT_STATE"


class TestProposalExpiry:
    """Tests for Proposal.is_expired."""

    def test_open_proposal_past_validity(self):
        proposal = Proposal(valid_until=NOW)
        assert proposal.is_expired(NOW + timedelta(seconds=1))
        assert not proposal.is_expired(NOW)
        # Expiry is computed only
        assert proposal.status == ProposalStatus.DRAFT

    def test_closed_proposal_never_expires(self):
        proposal = Proposal(valid_until=NOW, status=ProposalStatus.ACCEPTED)
        assert not proposal.is_expired(NOW + timedelta(days=365))


# =============================================================================
# Work Order Updates
# =============================================================================

class TestWorkOrderUpdates:
    """Tests for cost and progress updates."""

    def test_update_costs_refreshes_final_amount(self, pipeline, work_order):
        pipeline.update_work_order_costs(
            work_order, additional_costs=Decimal("750"), hours_worked=Decimal("12.5"),
            completion_percentage=0.5, now=NOW,
        )
        assert work_order.final_amount == Decimal("10750")
        assert work_order.hours_worked == Decimal("12.5")
        assert work_order.completion_percentage == 0.5
        assert work_order.updated_at == NOW

    def test_completion_out_of_range(self, work_order):
        with pytest.raises(ValidationError):
            work_order.set_completion(1.5)
        with pytest.raises(ValidationError):
            work_order.set_completion(-0.1)

    def test_is_overdue(self, work_order):
        assert not work_order.is_overdue(NOW)
        work_order.scheduled_end_date = NOW
        assert work_order.is_overdue(NOW + timedelta(hours=1))
        work_order.transition_to(WorkOrderStatus.CANCELLED)
        assert not work_order.is_overdue(NOW + timedelta(hours=1))

    def test_dict_round_trip(self, work_order):
        work_order.scheduled_end_date = NOW
        restored = WorkOrder.from_dict(work_order.to_dict())
        assert restored == work_order
