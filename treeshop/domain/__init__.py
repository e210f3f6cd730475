"""
Domain Layer - Pricing, cost models and the document pipeline.

This module contains:
- entities/: Value records (RateTable, Equipment, Employee, Loadout, Lead, Proposal, WorkOrder, Invoice)
- services/: Calculators and the DocumentPipeline
"""
