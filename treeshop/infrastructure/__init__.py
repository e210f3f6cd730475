"""
Infrastructure Layer - Document store and repository implementations.
"""

from .document_store import DocumentStore, InMemoryDocumentStore, SqlDocumentStore
from .repositories import (
    JsonCollectionRepository,
    PricingRepository,
    LeadRepository,
    ProposalRepository,
    WorkOrderRepository,
    InvoiceRepository,
    EquipmentRepository,
    EmployeeRepository,
    LoadoutRepository,
)

__all__ = [
    'DocumentStore',
    'InMemoryDocumentStore',
    'SqlDocumentStore',
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
