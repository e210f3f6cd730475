"""TreeShop Ops - pricing, cost rollups and the lead-to-invoice pipeline."""

__version__ = "1.0.0"
