"""
Record repositories - one JSON collection per record type.
"""
from datetime import datetime
from typing import List, Optional

from treeshop.domain.entities.employee import Employee, EmployeeStatus
from treeshop.domain.entities.equipment import Equipment
from treeshop.domain.entities.invoice import Invoice, InvoiceStatus
from treeshop.domain.entities.lead import Lead
from treeshop.domain.entities.loadout import Loadout
from treeshop.domain.entities.proposal import Proposal
from treeshop.domain.entities.work_order import WorkOrder
from treeshop.infrastructure.document_store import DocumentStore
from .base_repository import JsonCollectionRepository


class LeadRepository(JsonCollectionRepository[Lead]):
    key = "leads"
    record_type = "Lead"

    def __init__(self, store: DocumentStore):
        super().__init__(store, Lead)


class ProposalRepository(JsonCollectionRepository[Proposal]):
    key = "proposals"
    record_type = "Proposal"

    def __init__(self, store: DocumentStore):
        super().__init__(store, Proposal)

    def get_expired(self, now: Optional[datetime] = None) -> List[Proposal]:
        """Open proposals past their valid-until date."""
        return self.filter(lambda proposal: proposal.is_expired(now))


class WorkOrderRepository(JsonCollectionRepository[WorkOrder]):
    key = "work_orders"
    record_type = "WorkOrder"

    def __init__(self, store: DocumentStore):
        super().__init__(store, WorkOrder)

    def get_overdue(self, now: Optional[datetime] = None) -> List[WorkOrder]:
        return self.filter(lambda work_order: work_order.is_overdue(now))


class InvoiceRepository(JsonCollectionRepository[Invoice]):
    key = "invoices"
    record_type = "Invoice"

    def __init__(self, store: DocumentStore):
        super().__init__(store, Invoice)

    def by_effective_status(self, status: InvoiceStatus, now: Optional[datetime] = None) -> List[Invoice]:
        """Filter on status with the overdue overlay applied."""
        return self.filter(lambda invoice: invoice.effective_status(now) == status)


class EquipmentRepository(JsonCollectionRepository[Equipment]):
    key = "equipment"
    record_type = "Equipment"

    def __init__(self, store: DocumentStore):
        super().__init__(store, Equipment)


class EmployeeRepository(JsonCollectionRepository[Employee]):
    key = "employees"
    record_type = "Employee"

    def __init__(self, store: DocumentStore):
        super().__init__(store, Employee)

    def get_available(self) -> List[Employee]:
        return self.by_status(EmployeeStatus.ACTIVE)


class LoadoutRepository(JsonCollectionRepository[Loadout]):
    key = "loadouts"
    record_type = "Loadout"

    def __init__(self, store: DocumentStore):
        super().__init__(store, Loadout)
