"""
Equipment API Endpoints - Hourly cost calculation and the equipment fleet.

Implements:
- POST /api/v1/equipment/calculate - Costs, alerts and breakdown without saving
- POST /api/v1/equipment - Calculate and store a machine
- GET /api/v1/equipment - List machines (optional ?q= search)
"""
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from treeshop.api.v1.dependencies import (
    get_equipment_engine,
    get_app_config,
    get_store,
    money,
    parse_enum,
    to_http_exception,
)
from treeshop.config import TreeShopConfig
from treeshop.domain.entities.equipment import (
    Equipment,
    EquipmentCategory,
    EquipmentFinancial,
    EquipmentIdentity,
    EquipmentUsage,
    MaintenanceLevel,
    UsagePattern,
)
from treeshop.domain.exceptions import DomainError
from treeshop.domain.services import EquipmentCostEngine, calculate_estimated_resale
from treeshop.infrastructure.document_store import DocumentStore
from treeshop.infrastructure.repositories import EquipmentRepository

router = APIRouter()


# =============================================================================
# Pydantic Models
# =============================================================================

class EquipmentInput(BaseModel):
    """
    Request model for equipment cost inputs.

    days_per_year/hours_per_day default from usage_pattern when omitted.
    estimated_resale_value defaults to a share of purchase price.
    """
    equipment_name: str = Field("", max_length=200)
    year: int = Field(0, ge=0)
    make: str = Field("", max_length=100)
    model: str = Field("", max_length=100)
    serial_number: Optional[str] = Field(None, max_length=100)
    category: str = Field("other", description="Equipment category")
    usage_pattern: str = Field("moderate", description="light, moderate, heavy or custom")
    days_per_year: Optional[int] = Field(None, ge=0, le=366)
    hours_per_day: Optional[Decimal] = Field(None, ge=0, le=24)
    purchase_price: Decimal = Field(..., ge=0)
    years_of_service: int = Field(..., ge=0)
    estimated_resale_value: Optional[Decimal] = Field(None, ge=0)
    daily_fuel_cost: Decimal = Field(Decimal("0"), ge=0)
    annual_insurance_cost: Decimal = Field(Decimal("0"), ge=0)
    maintenance_level: str = Field("standard", description="minimal, standard, intense or custom")
    custom_maintenance_cost: Optional[Decimal] = Field(None, ge=0)
    annual_maintenance: Optional[Decimal] = Field(None, ge=0, description="Explicit annual maintenance")


class EquipmentAlertResponse(BaseModel):
    severity: str
    message: str


class CostBreakdownResponse(BaseModel):
    depreciation_pct: float
    fuel_pct: float
    maintenance_pct: float
    insurance_pct: float
    dominant_cost_factor: str


class EquipmentCostResponse(BaseModel):
    """Response model for an equipment cost calculation."""
    id: Optional[str] = None
    display_name: str
    annual_hours: float
    annual_depreciation: float
    annual_fuel: float
    annual_maintenance: float
    annual_insurance: float
    total_annual_cost: float
    hourly_cost: float
    recommended_rate: float
    monthly_operating_cost: float
    daily_operating_cost: float
    profit_per_hour: float
    profit_margin: float
    alerts: List[EquipmentAlertResponse]
    cost_breakdown: CostBreakdownResponse


def build_equipment(data: EquipmentInput, config: TreeShopConfig) -> Equipment:
    """Turn request inputs into an (uncalculated) Equipment record."""
    pattern = parse_enum(UsagePattern, data.usage_pattern, "usage_pattern")
    usage = EquipmentUsage.for_pattern(pattern)
    if data.days_per_year is not None:
        usage.days_per_year = data.days_per_year
    if data.hours_per_day is not None:
        usage.hours_per_day = data.hours_per_day

    resale = data.estimated_resale_value
    if resale is None:
        resale = calculate_estimated_resale(data.purchase_price, config.default_resale_percentage)

    return Equipment(
        identity=EquipmentIdentity(
            equipment_name=data.equipment_name,
            year=data.year,
            make=data.make,
            model=data.model,
            serial_number=data.serial_number,
            category=parse_enum(EquipmentCategory, data.category, "category"),
        ),
        usage=usage,
        financial=EquipmentFinancial(
            purchase_price=data.purchase_price,
            years_of_service=data.years_of_service,
            estimated_resale_value=resale,
            daily_fuel_cost=data.daily_fuel_cost,
            annual_insurance_cost=data.annual_insurance_cost,
            maintenance_level=parse_enum(MaintenanceLevel, data.maintenance_level, "maintenance_level"),
            custom_maintenance_cost=data.custom_maintenance_cost,
            annual_maintenance=data.annual_maintenance,
        ),
    )


def _cost_response(
    equipment: Equipment,
    engine: EquipmentCostEngine,
    include_id: bool = False,
) -> EquipmentCostResponse:
    calc = equipment.calculated
    return EquipmentCostResponse(
        id=str(equipment.id) if include_id else None,
        display_name=equipment.identity.display_name,
        annual_hours=float(calc.annual_hours),
        annual_depreciation=money(calc.annual_depreciation),
        annual_fuel=money(calc.annual_fuel),
        annual_maintenance=money(calc.annual_maintenance),
        annual_insurance=money(calc.annual_insurance),
        total_annual_cost=money(calc.total_annual_cost),
        hourly_cost=money(calc.hourly_cost),
        recommended_rate=money(calc.recommended_rate),
        monthly_operating_cost=money(calc.monthly_operating_cost),
        daily_operating_cost=money(calc.daily_operating_cost),
        profit_per_hour=money(calc.profit_per_hour),
        profit_margin=round(calc.profit_margin, 2),
        alerts=[EquipmentAlertResponse(**alert.to_dict()) for alert in engine.validate(equipment)],
        cost_breakdown=CostBreakdownResponse(**engine.analyze_cost_breakdown(calc).to_dict()),
    )


# =============================================================================
# Endpoints
# =============================================================================

@router.post(
    "/calculate",
    response_model=EquipmentCostResponse,
    summary="Calculate equipment hourly cost",
    description="Returns costs, data quality alerts and a cost breakdown. Nothing is stored.",
)
def calculate_equipment_cost(
    data: EquipmentInput,
    engine: EquipmentCostEngine = Depends(get_equipment_engine),
    config: TreeShopConfig = Depends(get_app_config),
):
    try:
        equipment = engine.calculate(build_equipment(data, config))
    except DomainError as e:
        raise to_http_exception(e)
    return _cost_response(equipment, engine)


@router.post(
    "",
    response_model=EquipmentCostResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a machine to the fleet",
)
def create_equipment(
    data: EquipmentInput,
    store: DocumentStore = Depends(get_store),
    engine: EquipmentCostEngine = Depends(get_equipment_engine),
    config: TreeShopConfig = Depends(get_app_config),
):
    try:
        equipment = engine.calculate(build_equipment(data, config))
    except DomainError as e:
        raise to_http_exception(e)
    EquipmentRepository(store).add(equipment)
    return _cost_response(equipment, engine, include_id=True)


@router.get(
    "",
    response_model=List[EquipmentCostResponse],
    summary="List fleet equipment",
)
def list_equipment(
    q: Optional[str] = None,
    store: DocumentStore = Depends(get_store),
    engine: EquipmentCostEngine = Depends(get_equipment_engine),
):
    repo = EquipmentRepository(store)
    records = repo.search(q) if q else repo.list_all()
    return [
        _cost_response(engine.calculate(equipment), engine, include_id=True)
        for equipment in records
    ]
