"""
Domain Entities - Pricing configuration, cost inputs and pipeline documents.
"""

from .pricing import (
    PackageTier, RateEntry, RateTable, PricingSettings, QuoteBreakdown,
    TIER_MULTIPLIERS, BASE_TIER,
)
from .equipment import (
    Equipment, EquipmentIdentity, EquipmentUsage, EquipmentFinancial,
    EquipmentCalculation, EquipmentCategory, EquipmentStatus,
    UsagePattern, MaintenanceLevel,
)
from .employee import (
    Employee, EmployeeQualifications, EmployeeCompensation, EmployeeCalculation,
    PrimaryRole, LeadershipLevel, EquipmentLevel, DriverClass,
    ProfessionalCertification, CrossTraining, EmployeeStatus,
)
from .loadout import (
    Loadout, LoadoutCrew, LoadoutPricing, LoadoutCalculation,
    LoadoutCategory, LoadoutStatus, ProfitabilityCategory,
)
from .lead import Lead, LeadStatus, LeadUrgency, LeadSource
from .proposal import Proposal, ProposalStatus
from .work_order import WorkOrder, WorkOrderStatus
from .invoice import Invoice, InvoiceStatus, PaymentMethod, PaymentTerms

__all__ = [
    'PackageTier', 'RateEntry', 'RateTable', 'PricingSettings', 'QuoteBreakdown',
    'TIER_MULTIPLIERS', 'BASE_TIER',
    'Equipment', 'EquipmentIdentity', 'EquipmentUsage', 'EquipmentFinancial',
    'EquipmentCalculation', 'EquipmentCategory', 'EquipmentStatus',
    'UsagePattern', 'MaintenanceLevel',
    'Employee', 'EmployeeQualifications', 'EmployeeCompensation', 'EmployeeCalculation',
    'PrimaryRole', 'LeadershipLevel', 'EquipmentLevel', 'DriverClass',
    'ProfessionalCertification', 'CrossTraining', 'EmployeeStatus',
    'Loadout', 'LoadoutCrew', 'LoadoutPricing', 'LoadoutCalculation',
    'LoadoutCategory', 'LoadoutStatus', 'ProfitabilityCategory',
    'Lead', 'LeadStatus', 'LeadUrgency', 'LeadSource',
    'Proposal', 'ProposalStatus',
    'WorkOrder', 'WorkOrderStatus',
    'Invoice', 'InvoiceStatus', 'PaymentMethod', 'PaymentTerms',
]
