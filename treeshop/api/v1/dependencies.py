"""
Shared FastAPI dependencies and error mapping for the v1 endpoints.
"""
from decimal import Decimal
from enum import Enum
from typing import Type, TypeVar

from fastapi import Depends, HTTPException, status
from sqlalchemy.orm import Session

from treeshop.config import TreeShopConfig, get_config
from treeshop.domain.exceptions import (
    BaseRateOverrideError,
    DocumentStateError,
    DomainError,
    InvalidStatusTransitionError,
    RecordNotFoundError,
    UnknownTierError,
    ValidationError,
)
from treeshop.domain.money import quantize_currency
from treeshop.domain.services import (
    DocumentPipeline,
    EmployeeCostEngine,
    EquipmentCostEngine,
    LoadoutCostEngine,
)
from treeshop.infrastructure.document_store import DocumentStore, SqlDocumentStore
from treeshop.models import get_db

E = TypeVar('E', bound=Enum)

ERROR_STATUS_CODES = [
    (RecordNotFoundError, status.HTTP_404_NOT_FOUND),
    (InvalidStatusTransitionError, status.HTTP_409_CONFLICT),
    (DocumentStateError, status.HTTP_409_CONFLICT),
    (BaseRateOverrideError, status.HTTP_409_CONFLICT),
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (UnknownTierError, status.HTTP_400_BAD_REQUEST),
]


def to_http_exception(error: DomainError) -> HTTPException:
    """Map a domain error to the HTTP status it is reported with."""
    for error_type, status_code in ERROR_STATUS_CODES:
        if isinstance(error, error_type):
            return HTTPException(status_code=status_code, detail=error.message)
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error.message)


def parse_enum(enum_class: Type[E], value: str, field: str) -> E:
    """Parse a request value into an enum, raising ValidationError."""
    try:
        return enum_class(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_class)
        raise ValidationError(field, f"'{value}' is not one of: {allowed}")


def money(value: Decimal) -> float:
    """Currency amount rounded to cents for a response body."""
    return float(quantize_currency(value))


# =============================================================================
# Dependencies
# =============================================================================

def get_app_config() -> TreeShopConfig:
    return get_config()


def get_store(db: Session = Depends(get_db)) -> DocumentStore:
    return SqlDocumentStore(db)


def get_pipeline(config: TreeShopConfig = Depends(get_app_config)) -> DocumentPipeline:
    return DocumentPipeline.from_config(config)


def get_equipment_engine(config: TreeShopConfig = Depends(get_app_config)) -> EquipmentCostEngine:
    return EquipmentCostEngine.from_config(config)


def get_employee_engine(config: TreeShopConfig = Depends(get_app_config)) -> EmployeeCostEngine:
    return EmployeeCostEngine(labor_markup=config.labor_markup)


def get_loadout_engine(config: TreeShopConfig = Depends(get_app_config)) -> LoadoutCostEngine:
    return LoadoutCostEngine.from_config(config)
