"""
Pricing Repository - Persists the rate table and pricing settings.

Both live in one document under the 'pricing' key. When nothing has been
saved yet, or the stored document cannot be decoded, the configured
defaults are returned.
"""
import json
import logging
from typing import Optional, Tuple

from treeshop.config import TreeShopConfig, get_config
from treeshop.domain.entities.pricing import PricingSettings, RateTable
from treeshop.domain.exceptions import DomainError
from treeshop.infrastructure.document_store import DocumentStore

logger = logging.getLogger(__name__)


class PricingRepository:
    """Load/save the process-wide pricing configuration."""

    key = "pricing"

    def __init__(self, store: DocumentStore, config: Optional[TreeShopConfig] = None):
        self.store = store
        self.config = config or get_config()

    def defaults(self) -> Tuple[RateTable, PricingSettings]:
        return RateTable.from_config(self.config), PricingSettings.from_config(self.config)

    def load(self) -> Tuple[RateTable, PricingSettings]:
        """
        Load the saved rate table and settings.

        Returns:
            (RateTable, PricingSettings), falling back to configuration
            defaults when no usable document is stored
        """
        payload = self.store.get(self.key)
        if payload is None:
            return self.defaults()

        try:
            data = json.loads(payload)
            rate_table = RateTable.from_dict(data['rate_table'])
            settings = PricingSettings.from_dict(data['settings'])
        except (ValueError, KeyError, TypeError, AttributeError, DomainError) as e:
            logger.warning(f"Could not decode pricing document, using configured defaults: {e}")
            return self.defaults()

        return rate_table, settings

    def save(self, rate_table: RateTable, settings: PricingSettings) -> None:
        payload = json.dumps({
            'rate_table': rate_table.to_dict(),
            'settings': settings.to_dict(),
        })
        self.store.put(self.key, payload.encode("utf-8"))
        logger.info(f"Saved pricing (base rate {rate_table.base_rate})")
