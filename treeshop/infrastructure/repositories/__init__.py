"""
Repository implementations for the document store.
"""
from .base_repository import JsonCollectionRepository
from .pricing_repository import PricingRepository
from .document_repositories import (
    LeadRepository,
    ProposalRepository,
    WorkOrderRepository,
    InvoiceRepository,
    EquipmentRepository,
    EmployeeRepository,
    LoadoutRepository,
)

__all__ = [
    'JsonCollectionRepository',
    'PricingRepository',
    'LeadRepository',
    'ProposalRepository',
    'WorkOrderRepository',
    'InvoiceRepository',
    'EquipmentRepository',
    'EmployeeRepository',
    'LoadoutRepository',
]
