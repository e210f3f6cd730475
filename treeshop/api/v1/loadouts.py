"""
Loadout API Endpoints - Crew + equipment billing rates.

Implements:
- POST /api/v1/loadouts/calculate - Roll stored members up into a billing rate
- POST /api/v1/loadouts - Calculate and store a loadout
"""
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from treeshop.api.v1.dependencies import (
    get_app_config,
    get_employee_engine,
    get_loadout_engine,
    get_store,
    money,
    parse_enum,
    to_http_exception,
)
from treeshop.config import TreeShopConfig
from treeshop.domain.entities.loadout import Loadout, LoadoutCategory, LoadoutCrew, LoadoutPricing
from treeshop.domain.exceptions import DomainError
from treeshop.domain.services import EmployeeCostEngine, LoadoutCostEngine
from treeshop.infrastructure.document_store import DocumentStore
from treeshop.infrastructure.repositories import (
    EmployeeRepository,
    EquipmentRepository,
    LoadoutRepository,
)

router = APIRouter()


class LoadoutRequest(BaseModel):
    """Request model for a loadout; members reference stored records."""
    name: str = Field("", max_length=200)
    category: str = Field("forestry_mulching")
    description: Optional[str] = None
    employee_ids: List[UUID] = Field(default_factory=list)
    equipment_ids: List[UUID] = Field(default_factory=list)
    markup_multiplier: Optional[Decimal] = Field(None, gt=0, description="Config default if omitted")
    custom_rate_override: Optional[Decimal] = Field(None, ge=0)
    times_used: int = Field(0, ge=0)


class OptimizationResponse(BaseModel):
    type: str
    priority: str
    message: str
    impact: str


class LoadoutResponse(BaseModel):
    """Response model for a loadout calculation."""
    id: str
    name: str
    total_employee_cost: float
    total_equipment_cost: float
    total_operating_cost: float
    billing_rate: float
    hourly_profit: float
    profit_margin: float
    daily_revenue: float
    weekly_revenue: float
    monthly_revenue: float
    daily_profit: float
    profitability: str
    cost_efficiency_ratio: float
    optimizations: List[OptimizationResponse]


def _calculate(
    request: LoadoutRequest,
    store: DocumentStore,
    config: TreeShopConfig,
    employee_engine: EmployeeCostEngine,
    loadout_engine: LoadoutCostEngine,
) -> Loadout:
    markup = request.markup_multiplier
    loadout = Loadout(
        name=request.name,
        category=parse_enum(LoadoutCategory, request.category, "category"),
        description=request.description,
        crew=LoadoutCrew(
            employee_ids=list(request.employee_ids),
            equipment_ids=list(request.equipment_ids),
        ),
        pricing=LoadoutPricing(
            markup_multiplier=markup if markup is not None else config.loadout_default_markup,
            custom_rate_override=request.custom_rate_override,
        ),
        times_used=request.times_used,
    )
    # Employee calculations are not stored, so refresh them before the rollup
    employees_by_id = {
        employee.id: employee_engine.calculate(employee)
        for employee in EmployeeRepository(store).list_all()
    }
    equipment_by_id = {item.id: item for item in EquipmentRepository(store).list_all()}
    return loadout_engine.refresh(loadout, employees_by_id, equipment_by_id)


def _loadout_response(loadout: Loadout) -> LoadoutResponse:
    calc = loadout.calculated
    return LoadoutResponse(
        id=str(loadout.id),
        name=loadout.display_name,
        total_employee_cost=money(calc.total_employee_cost),
        total_equipment_cost=money(calc.total_equipment_cost),
        total_operating_cost=money(calc.total_operating_cost),
        billing_rate=money(calc.billing_rate),
        hourly_profit=money(calc.hourly_profit),
        profit_margin=round(calc.profit_margin, 4),
        daily_revenue=money(calc.daily_revenue),
        weekly_revenue=money(calc.weekly_revenue),
        monthly_revenue=money(calc.monthly_revenue),
        daily_profit=money(calc.daily_profit),
        profitability=calc.profitability.value,
        cost_efficiency_ratio=round(calc.cost_efficiency_ratio, 4),
        optimizations=[
            OptimizationResponse(**item.to_dict())
            for item in LoadoutCostEngine.optimization_suggestions(loadout)
        ],
    )


@router.post(
    "/calculate",
    response_model=LoadoutResponse,
    summary="Calculate a loadout billing rate",
    description="Unknown member ids are skipped. Nothing is stored.",
)
def calculate_loadout(
    request: LoadoutRequest,
    store: DocumentStore = Depends(get_store),
    config: TreeShopConfig = Depends(get_app_config),
    employee_engine: EmployeeCostEngine = Depends(get_employee_engine),
    loadout_engine: LoadoutCostEngine = Depends(get_loadout_engine),
):
    try:
        loadout = _calculate(request, store, config, employee_engine, loadout_engine)
    except DomainError as e:
        raise to_http_exception(e)
    return _loadout_response(loadout)


@router.post(
    "",
    response_model=LoadoutResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Save a loadout",
)
def create_loadout(
    request: LoadoutRequest,
    store: DocumentStore = Depends(get_store),
    config: TreeShopConfig = Depends(get_app_config),
    employee_engine: EmployeeCostEngine = Depends(get_employee_engine),
    loadout_engine: LoadoutCostEngine = Depends(get_loadout_engine),
):
    try:
        loadout = _calculate(request, store, config, employee_engine, loadout_engine)
    except DomainError as e:
        raise to_http_exception(e)
    LoadoutRepository(store).add(loadout)
    return _loadout_response(loadout)
