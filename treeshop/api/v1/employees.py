"""
Employee API Endpoints - Crew members and their true hourly cost.

Implements:
- POST /api/v1/employees - Add a crew member
- GET /api/v1/employees - List crew members (optional ?q= search)
"""
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from treeshop.api.v1.dependencies import (
    get_employee_engine,
    get_store,
    money,
    parse_enum,
    to_http_exception,
)
from treeshop.domain.entities.employee import (
    CrossTraining,
    DriverClass,
    Employee,
    EmployeeCompensation,
    EmployeeQualifications,
    EquipmentLevel,
    LeadershipLevel,
    PrimaryRole,
    ProfessionalCertification,
)
from treeshop.domain.exceptions import DomainError
from treeshop.domain.services import EmployeeCostEngine, build_qualification_code
from treeshop.infrastructure.document_store import DocumentStore
from treeshop.infrastructure.repositories import EmployeeRepository

router = APIRouter()


class CrossTrainingInput(BaseModel):
    role: str
    tier: int = Field(..., ge=1, le=5)


class EmployeeCreate(BaseModel):
    """Request model for adding a crew member."""
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field("", max_length=100)
    employee_number: str = Field("", max_length=50)
    email: Optional[str] = None
    phone: Optional[str] = None
    primary_role: str = Field("LCL", description="Role code, e.g. TRS")
    tier: int = Field(1, ge=1, le=5)
    leadership_level: str = Field("none", description="none, +L, +S, +M or +D")
    equipment_certifications: List[str] = Field(default_factory=list)
    driver_classification: Optional[str] = None
    professional_certifications: List[str] = Field(default_factory=list)
    cross_training: List[CrossTrainingInput] = Field(default_factory=list)
    base_hourly_rate: Decimal = Field(..., ge=0)


class EmployeeResponse(BaseModel):
    id: str
    full_name: str
    employee_number: str
    status: str
    qualification_code: str
    true_hourly_cost: float
    billing_rate: float
    profit_margin: float


def _employee_response(employee: Employee) -> EmployeeResponse:
    calc = employee.calculated
    return EmployeeResponse(
        id=str(employee.id),
        full_name=employee.full_name,
        employee_number=employee.employee_number,
        status=employee.status.value,
        qualification_code=build_qualification_code(employee.qualifications),
        true_hourly_cost=money(calc.true_hourly_cost),
        billing_rate=money(calc.billing_rate),
        profit_margin=round(calc.profit_margin, 2),
    )


def build_employee(data: EmployeeCreate) -> Employee:
    driver = data.driver_classification
    return Employee(
        first_name=data.first_name,
        last_name=data.last_name,
        employee_number=data.employee_number,
        email=data.email,
        phone=data.phone,
        qualifications=EmployeeQualifications(
            primary_role=parse_enum(PrimaryRole, data.primary_role, "primary_role"),
            tier=data.tier,
            leadership_level=parse_enum(LeadershipLevel, data.leadership_level, "leadership_level"),
            equipment_certifications=[
                parse_enum(EquipmentLevel, value, "equipment_certifications")
                for value in data.equipment_certifications
            ],
            driver_classification=(
                parse_enum(DriverClass, driver, "driver_classification") if driver else None
            ),
            professional_certifications=[
                parse_enum(ProfessionalCertification, value, "professional_certifications")
                for value in data.professional_certifications
            ],
            cross_training=[
                CrossTraining(role=parse_enum(PrimaryRole, item.role, "cross_training"), tier=item.tier)
                for item in data.cross_training
            ],
        ),
        compensation=EmployeeCompensation(base_hourly_rate=data.base_hourly_rate),
    )


@router.post(
    "",
    response_model=EmployeeResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a crew member",
)
def create_employee(
    data: EmployeeCreate,
    store: DocumentStore = Depends(get_store),
    engine: EmployeeCostEngine = Depends(get_employee_engine),
):
    try:
        employee = engine.calculate(build_employee(data))
    except DomainError as e:
        raise to_http_exception(e)
    EmployeeRepository(store).add(employee)
    return _employee_response(employee)


@router.get(
    "",
    response_model=List[EmployeeResponse],
    summary="List crew members",
)
def list_employees(
    q: Optional[str] = None,
    store: DocumentStore = Depends(get_store),
    engine: EmployeeCostEngine = Depends(get_employee_engine),
):
    repo = EmployeeRepository(store)
    records = repo.search(q) if q else repo.list_all()
    return [_employee_response(engine.calculate(employee)) for employee in records]
