"""
API v1 - REST endpoints over the pricing engine and document pipeline.

- Pricing endpoints (rate table, quotes)
- Equipment and employee endpoints (hourly costs)
- Loadout endpoints (crew billing rates)
- Document endpoints (lead/proposal/work order/invoice pipeline)
"""
from fastapi import APIRouter

from .pricing import router as pricing_router
from .equipment import router as equipment_router
from .employees import router as employees_router
from .loadouts import router as loadouts_router
from .documents import router as documents_router

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(pricing_router, prefix="/pricing", tags=["Pricing"])
api_router.include_router(equipment_router, prefix="/equipment", tags=["Equipment"])
api_router.include_router(employees_router, prefix="/employees", tags=["Employees"])
api_router.include_router(loadouts_router, prefix="/loadouts", tags=["Loadouts"])
api_router.include_router(documents_router, prefix="/documents", tags=["Documents"])
