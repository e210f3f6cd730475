"""
Pricing API Endpoints - Rate table maintenance and quotes.

Implements:
- GET /api/v1/pricing/rates - Current rate table
- PUT /api/v1/pricing/rates/base - Set the base (medium) rate
- PUT /api/v1/pricing/rates/{tier} - Manually set a tier rate
- POST /api/v1/pricing/rates/{tier}/reset - Return a tier to auto-calculated
- POST /api/v1/pricing/quote - Price breakdown for quote inputs
"""
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from treeshop.api.v1.dependencies import get_app_config, get_store, money, to_http_exception
from treeshop.config import TreeShopConfig
from treeshop.domain.entities.pricing import RateTable
from treeshop.domain.exceptions import DomainError
from treeshop.domain.services import QuoteCalculator
from treeshop.infrastructure.document_store import DocumentStore
from treeshop.infrastructure.repositories import PricingRepository

router = APIRouter()


# =============================================================================
# Pydantic Models
# =============================================================================

class RateUpdate(BaseModel):
    """Request model for setting a rate."""
    rate: Decimal = Field(..., gt=0, description="Per-acre rate")


class RateEntryResponse(BaseModel):
    tier: str
    rate: float
    overridden: bool
    auto_derived: bool


class RateTableResponse(BaseModel):
    """Response model for the full rate table."""
    base_rate: float
    rates: List[RateEntryResponse]


class QuoteRequest(BaseModel):
    """Request model for a quote."""
    acres: Decimal = Field(..., ge=0, description="Land size in acres")
    tier: str = Field("medium", description="Package tier value, e.g. 'medium' or 'maxLight'")
    transport_hours: Optional[Decimal] = Field(None, ge=0, description="Round-trip hours; config default if omitted")
    manual_debris_yards: Decimal = Field(Decimal("0"), ge=0, description="Extra debris yards")


class QuoteResponse(BaseModel):
    """Response model for a quote, amounts rounded to cents."""
    tier: str
    acres: float
    transport_hours: float
    estimated_debris_yards: float
    manual_debris_yards: float
    base_cost: float
    transport_cost: float
    debris_cost: float
    subtotal: float
    final_price: float
    deposit_amount: float
    balance_due: float


def _rate_table_response(rate_table: RateTable) -> RateTableResponse:
    return RateTableResponse(
        base_rate=money(rate_table.base_rate),
        rates=[RateEntryResponse(**entry.to_dict()) for entry in rate_table.entries()],
    )


# =============================================================================
# Endpoints
# =============================================================================

@router.get(
    "/rates",
    response_model=RateTableResponse,
    summary="Get the rate table",
)
def get_rates(
    store: DocumentStore = Depends(get_store),
    config: TreeShopConfig = Depends(get_app_config),
):
    rate_table, _ = PricingRepository(store, config).load()
    return _rate_table_response(rate_table)


@router.put(
    "/rates/base",
    response_model=RateTableResponse,
    summary="Set the base rate",
    description="Set the medium rate. Non-overridden small/large/xlarge rates follow it.",
)
def set_base_rate(
    update: RateUpdate,
    store: DocumentStore = Depends(get_store),
    config: TreeShopConfig = Depends(get_app_config),
):
    repo = PricingRepository(store, config)
    rate_table, settings = repo.load()
    rate_table.set_base_rate(update.rate)
    repo.save(rate_table, settings)
    return _rate_table_response(rate_table)


@router.put(
    "/rates/{tier}",
    response_model=RateTableResponse,
    summary="Manually set a tier rate",
    description="Setting any tier other than medium marks it overridden.",
)
def set_tier_rate(
    tier: str,
    update: RateUpdate,
    store: DocumentStore = Depends(get_store),
    config: TreeShopConfig = Depends(get_app_config),
):
    repo = PricingRepository(store, config)
    rate_table, settings = repo.load()
    try:
        rate_table.set_rate(tier, update.rate)
    except DomainError as e:
        raise to_http_exception(e)
    repo.save(rate_table, settings)
    return _rate_table_response(rate_table)


@router.post(
    "/rates/{tier}/reset",
    response_model=RateTableResponse,
    summary="Reset a tier to auto-calculated",
)
def reset_tier_rate(
    tier: str,
    store: DocumentStore = Depends(get_store),
    config: TreeShopConfig = Depends(get_app_config),
):
    repo = PricingRepository(store, config)
    rate_table, settings = repo.load()
    try:
        rate_table.reset_to_auto(tier)
    except DomainError as e:
        raise to_http_exception(e)
    repo.save(rate_table, settings)
    return _rate_table_response(rate_table)


@router.post(
    "/quote",
    response_model=QuoteResponse,
    summary="Calculate a quote",
)
def calculate_quote(
    request: QuoteRequest,
    store: DocumentStore = Depends(get_store),
    config: TreeShopConfig = Depends(get_app_config),
):
    rate_table, settings = PricingRepository(store, config).load()
    calculator = QuoteCalculator(rate_table, settings)
    transport_hours = (
        request.transport_hours
        if request.transport_hours is not None else config.default_transport_hours
    )

    try:
        quote = calculator.calculate_quote(
            request.acres, request.tier, transport_hours, request.manual_debris_yards,
        )
    except DomainError as e:
        raise to_http_exception(e)

    return QuoteResponse(
        tier=quote.tier.value,
        acres=float(quote.acres),
        transport_hours=float(quote.transport_hours),
        estimated_debris_yards=float(quote.estimated_debris_yards),
        manual_debris_yards=float(quote.manual_debris_yards),
        base_cost=money(quote.base_cost),
        transport_cost=money(quote.transport_cost),
        debris_cost=money(quote.debris_cost),
        subtotal=money(quote.subtotal),
        final_price=money(quote.final_price),
        deposit_amount=money(quote.deposit_amount),
        balance_due=money(quote.balance_due),
    )
