"""
Domain Services - Pricing calculators, cost engines and the document pipeline.
"""

from .quote_calculator import QuoteCalculator, QuoteSession
from .transport_estimator import TransportEstimator, RoutingClient, round_to_increment
from .equipment_cost_engine import (
    EquipmentCostEngine, EquipmentAlert, AlertSeverity, CostBreakdown,
    calculate_estimated_resale,
)
from .employee_cost_engine import EmployeeCostEngine, build_qualification_code
from .loadout_cost_engine import (
    LoadoutCostEngine, LoadoutOptimization, OptimizationType, OptimizationPriority,
)
from .document_pipeline import DocumentPipeline, InvoiceSummary

__all__ = [
    'QuoteCalculator',
    'QuoteSession',
    'TransportEstimator',
    'RoutingClient',
    'round_to_increment',
    'EquipmentCostEngine',
    'EquipmentAlert',
    'AlertSeverity',
    'CostBreakdown',
    'calculate_estimated_resale',
    'EmployeeCostEngine',
    'build_qualification_code',
    'LoadoutCostEngine',
    'LoadoutOptimization',
    'OptimizationType',
    'OptimizationPriority',
    'DocumentPipeline',
    'InvoiceSummary',
]
