"""
Document API Endpoints - Lead -> Proposal -> WorkOrder -> Invoice.

Implements:
- POST /api/v1/documents/leads - Create a lead
- GET /api/v1/documents/leads - List leads (optional ?q= search)
- POST /api/v1/documents/leads/{id}/status - Change lead status
- POST /api/v1/documents/leads/{id}/proposal - Convert a lead to a proposal
- POST /api/v1/documents/proposals/{id}/status - Change proposal status
- POST /api/v1/documents/proposals/{id}/work-order - Convert to a work order
- POST /api/v1/documents/work-orders/{id}/status - Change work order status
- PATCH /api/v1/documents/work-orders/{id}/costs - Costs and progress
- POST /api/v1/documents/work-orders/{id}/invoice - Convert to an invoice
- GET /api/v1/documents/invoices/summary - Revenue and receivables
- GET /api/v1/documents/invoices/{id} - Invoice with payment state
- POST /api/v1/documents/invoices/{id}/payments - Record a deposit/balance payment

Conversions never modify the source document.
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from treeshop.api.v1.dependencies import (
    get_pipeline,
    get_store,
    money,
    parse_enum,
    to_http_exception,
)
from treeshop.domain.entities.invoice import Invoice, PaymentMethod, PaymentTerms
from treeshop.domain.entities.lead import Lead, LeadSource, LeadStatus, LeadUrgency
from treeshop.domain.entities.pricing import PackageTier
from treeshop.domain.entities.proposal import ProposalStatus
from treeshop.domain.entities.work_order import WorkOrderStatus
from treeshop.domain.exceptions import DomainError
from treeshop.domain.services import DocumentPipeline
from treeshop.infrastructure.document_store import DocumentStore
from treeshop.infrastructure.repositories import (
    InvoiceRepository,
    LeadRepository,
    ProposalRepository,
    WorkOrderRepository,
)

router = APIRouter()


# =============================================================================
# Pydantic Models
# =============================================================================

class LeadCreate(BaseModel):
    """Request model for creating a lead."""
    customer_first_name: str = Field(..., min_length=1, max_length=100)
    customer_last_name: str = Field("", max_length=100)
    customer_email: str = ""
    customer_phone: str = ""
    customer_address: str = ""
    customer_city: str = ""
    customer_state: str = ""
    customer_zip_code: str = ""
    project_description: str = ""
    project_location: str = ""
    land_size: Decimal = Field(Decimal("0"), ge=0)
    package_tier: Optional[str] = None
    urgency: str = "normal"
    lead_source: str = "website"
    estimated_value: Decimal = Field(Decimal("0"), ge=0)
    notes: str = ""


class StatusChange(BaseModel):
    status: str = Field(..., description="Target status value")


class WorkOrderCostsUpdate(BaseModel):
    """Request model for work order cost/progress fields."""
    additional_costs: Optional[Decimal] = Field(None, ge=0)
    hours_worked: Optional[Decimal] = Field(None, ge=0)
    completion_percentage: Optional[float] = Field(None, description="Fraction in [0, 1]")


class InvoiceCreate(BaseModel):
    """Request model for converting a work order to an invoice."""
    additional_costs: Decimal = Field(Decimal("0"), ge=0)
    discount_amount: Decimal = Field(Decimal("0"), ge=0)
    payment_terms: Optional[str] = Field(None, description="Config default if omitted")


class PaymentCreate(BaseModel):
    """Request model for recording a payment."""
    portion: str = Field(..., pattern="^(deposit|balance)$")
    paid_on: Optional[datetime] = None
    method: Optional[str] = None


def _invoice_body(invoice: Invoice) -> dict:
    body = invoice.to_dict()
    body.update({
        'total_paid': money(invoice.total_paid),
        'amount_due': money(invoice.amount_due),
        'is_fully_paid': invoice.is_fully_paid,
        'is_overdue': invoice.is_overdue(),
        'effective_status': invoice.effective_status().value,
    })
    return body


# =============================================================================
# Leads
# =============================================================================

@router.post(
    "/leads",
    status_code=status.HTTP_201_CREATED,
    summary="Create a lead",
)
def create_lead(data: LeadCreate, store: DocumentStore = Depends(get_store)):
    try:
        lead = Lead(
            customer_first_name=data.customer_first_name,
            customer_last_name=data.customer_last_name,
            customer_email=data.customer_email,
            customer_phone=data.customer_phone,
            customer_address=data.customer_address,
            customer_city=data.customer_city,
            customer_state=data.customer_state,
            customer_zip_code=data.customer_zip_code,
            project_description=data.project_description,
            project_location=data.project_location,
            land_size=data.land_size,
            package_tier=PackageTier.parse(data.package_tier) if data.package_tier else None,
            urgency=parse_enum(LeadUrgency, data.urgency, "urgency"),
            lead_source=parse_enum(LeadSource, data.lead_source, "lead_source"),
            estimated_value=data.estimated_value,
            notes=data.notes,
        )
    except DomainError as e:
        raise to_http_exception(e)
    LeadRepository(store).add(lead)
    return lead.to_dict()


@router.get("/leads", summary="List leads")
def list_leads(q: Optional[str] = None, store: DocumentStore = Depends(get_store)):
    repo = LeadRepository(store)
    records = repo.search(q) if q else repo.list_all()
    return [lead.to_dict() for lead in records]


@router.post("/leads/{lead_id}/status", summary="Change lead status")
def change_lead_status(
    lead_id: str,
    change: StatusChange,
    store: DocumentStore = Depends(get_store),
):
    repo = LeadRepository(store)
    try:
        lead = repo.require(lead_id)
        DocumentPipeline.transition(lead, parse_enum(LeadStatus, change.status, "status"))
    except DomainError as e:
        raise to_http_exception(e)
    return repo.update(lead).to_dict()


@router.post(
    "/leads/{lead_id}/proposal",
    status_code=status.HTTP_201_CREATED,
    summary="Convert a lead to a proposal",
    description=(
        "Only a qualified lead can be converted; it is marked converted. "
        "The proposal starts on the default package; the lead's tier is not carried over."
    ),
)
def convert_lead(
    lead_id: str,
    store: DocumentStore = Depends(get_store),
    pipeline: DocumentPipeline = Depends(get_pipeline),
):
    repo = LeadRepository(store)
    try:
        lead = repo.require(lead_id)
        DocumentPipeline.transition(lead, LeadStatus.CONVERTED)
    except DomainError as e:
        raise to_http_exception(e)
    proposal = pipeline.lead_to_proposal(lead)
    ProposalRepository(store).add(proposal)
    repo.update(lead)
    return proposal.to_dict()


# =============================================================================
# Proposals
# =============================================================================

@router.post("/proposals/{proposal_id}/status", summary="Change proposal status")
def change_proposal_status(
    proposal_id: str,
    change: StatusChange,
    store: DocumentStore = Depends(get_store),
):
    repo = ProposalRepository(store)
    try:
        proposal = repo.require(proposal_id)
        DocumentPipeline.transition(proposal, parse_enum(ProposalStatus, change.status, "status"))
    except DomainError as e:
        raise to_http_exception(e)
    return repo.update(proposal).to_dict()


@router.post(
    "/proposals/{proposal_id}/work-order",
    status_code=status.HTTP_201_CREATED,
    summary="Convert a proposal to a work order",
    description="Only an accepted proposal can be scheduled.",
)
def convert_proposal(
    proposal_id: str,
    store: DocumentStore = Depends(get_store),
    pipeline: DocumentPipeline = Depends(get_pipeline),
):
    try:
        proposal = ProposalRepository(store).require(proposal_id)
        DocumentPipeline.require_status(proposal, ProposalStatus.ACCEPTED, "create a work order")
    except DomainError as e:
        raise to_http_exception(e)
    work_order = pipeline.proposal_to_work_order(proposal)
    WorkOrderRepository(store).add(work_order)
    return work_order.to_dict()


# =============================================================================
# Work Orders
# =============================================================================

@router.post("/work-orders/{work_order_id}/status", summary="Change work order status")
def change_work_order_status(
    work_order_id: str,
    change: StatusChange,
    store: DocumentStore = Depends(get_store),
):
    repo = WorkOrderRepository(store)
    try:
        work_order = repo.require(work_order_id)
        DocumentPipeline.transition(work_order, parse_enum(WorkOrderStatus, change.status, "status"))
    except DomainError as e:
        raise to_http_exception(e)
    return repo.update(work_order).to_dict()


@router.patch("/work-orders/{work_order_id}/costs", summary="Update work order costs and progress")
def update_work_order_costs(
    work_order_id: str,
    update: WorkOrderCostsUpdate,
    store: DocumentStore = Depends(get_store),
):
    repo = WorkOrderRepository(store)
    try:
        work_order = repo.require(work_order_id)
        DocumentPipeline.update_work_order_costs(
            work_order,
            additional_costs=update.additional_costs,
            hours_worked=update.hours_worked,
            completion_percentage=update.completion_percentage,
        )
    except DomainError as e:
        raise to_http_exception(e)
    return repo.update(work_order).to_dict()


@router.post(
    "/work-orders/{work_order_id}/invoice",
    status_code=status.HTTP_201_CREATED,
    summary="Convert a work order to an invoice",
)
def convert_work_order(
    work_order_id: str,
    data: InvoiceCreate,
    store: DocumentStore = Depends(get_store),
    pipeline: DocumentPipeline = Depends(get_pipeline),
):
    try:
        work_order = WorkOrderRepository(store).require(work_order_id)
        terms = (
            parse_enum(PaymentTerms, data.payment_terms, "payment_terms")
            if data.payment_terms else None
        )
    except DomainError as e:
        raise to_http_exception(e)
    invoice = pipeline.work_order_to_invoice(
        work_order,
        additional_costs=data.additional_costs,
        discount_amount=data.discount_amount,
        payment_terms=terms,
    )
    InvoiceRepository(store).add(invoice)
    return _invoice_body(invoice)


# =============================================================================
# Invoices
# =============================================================================

@router.get("/invoices/summary", summary="Invoice revenue and receivables")
def invoice_summary(store: DocumentStore = Depends(get_store)):
    summary = DocumentPipeline.summarize_invoices(InvoiceRepository(store).list_all())
    return summary.to_dict()


@router.get("/invoices/{invoice_id}", summary="Get an invoice with payment state")
def get_invoice(invoice_id: str, store: DocumentStore = Depends(get_store)):
    try:
        invoice = InvoiceRepository(store).require(invoice_id)
    except DomainError as e:
        raise to_http_exception(e)
    return _invoice_body(invoice)


@router.post("/invoices/{invoice_id}/payments", summary="Record a payment")
def record_payment(
    invoice_id: str,
    payment: PaymentCreate,
    store: DocumentStore = Depends(get_store),
    pipeline: DocumentPipeline = Depends(get_pipeline),
):
    repo = InvoiceRepository(store)
    try:
        invoice = repo.require(invoice_id)
        method = parse_enum(PaymentMethod, payment.method, "method") if payment.method else None
        pipeline.record_payment(invoice, payment.portion, paid_on=payment.paid_on, method=method)
    except DomainError as e:
        raise to_http_exception(e)
    return _invoice_body(repo.update(invoice))
