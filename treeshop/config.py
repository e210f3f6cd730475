"""
Configuration loader for TreeShop Ops.

Loads settings from treeshop_config.yaml and provides typed access
to all configuration sections.
"""
import os
from decimal import Decimal
from pathlib import Path
from typing import Any, Optional
from functools import lru_cache

import yaml


# Default config path relative to project root
DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "treeshop_config.yaml"
CONFIG_PATH_ENV = "TREESHOP_CONFIG"


class ConfigurationError(Exception):
    """Raised when configuration loading or validation fails."""
    pass


def _decimal(value: Any) -> Decimal:
    """Convert a YAML scalar to Decimal without float artifacts."""
    return Decimal(str(value))


class TreeShopConfig:
    """
    Configuration manager for TreeShop Ops.

    Loads YAML configuration and provides typed access to all sections.
    Use get_config() to obtain the singleton instance.
    """

    def __init__(self, config_path: Optional[Path] = None):
        env_path = os.environ.get(CONFIG_PATH_ENV)
        self._config_path = config_path or (Path(env_path) if env_path else DEFAULT_CONFIG_PATH)
        self._config: dict = {}
        self._load()

    def _load(self) -> None:
        """Load configuration from YAML file."""
        if not self._config_path.exists():
            raise ConfigurationError(f"Config file not found: {self._config_path}")

        try:
            with open(self._config_path, 'r') as f:
                self._config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in config file: {e}")

        if not isinstance(self._config, dict):
            raise ConfigurationError("Config file must contain a YAML mapping")

    def reload(self) -> None:
        """Reload configuration from disk."""
        self._load()
        # Clear the cached singleton to force reload on next get_config()
        get_config.cache_clear()

    @property
    def path(self) -> Path:
        """Path the configuration was loaded from."""
        return self._config_path

    @property
    def version(self) -> str:
        """Configuration file version."""
        return self._config.get("version", "unknown")

    # =========================================================================
    # Database & Logging
    # =========================================================================

    @property
    def database_url(self) -> str:
        """SQLAlchemy URL for the document store."""
        return self._config.get("database", {}).get("url", "sqlite:///./treeshop.db")

    @property
    def logging_level(self) -> str:
        return self._config.get("logging", {}).get("level", "INFO")

    @property
    def logging_format(self) -> str:
        return self._config.get("logging", {}).get(
            "format", '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

    # =========================================================================
    # Pricing
    # =========================================================================

    @property
    def pricing(self) -> dict:
        """Pricing configuration."""
        return self._config.get("pricing", {})

    @property
    def package_rates(self) -> dict[str, Decimal]:
        """Per-acre rate for every package tier, keyed by tier value."""
        rates = self.pricing.get("package_rates", {
            "small": 2125.0,
            "medium": 2500.0,
            "large": 3375.0,
            "xlarge": 4250.0,
            "maxLight": 8000.0,
            "maxMedium": 12000.0,
            "maxHeavy": 18000.0,
        })
        return {key: _decimal(value) for key, value in rates.items()}

    @property
    def transport_rate_per_hour(self) -> Decimal:
        return _decimal(self.pricing.get("transport_rate_per_hour", 150.0))

    @property
    def debris_rate_per_yard(self) -> Decimal:
        return _decimal(self.pricing.get("debris_rate_per_yard", 20.0))

    @property
    def final_markup_multiplier(self) -> Decimal:
        return _decimal(self.pricing.get("final_markup_multiplier", 1.15))

    @property
    def deposit_percentage(self) -> Decimal:
        return _decimal(self.pricing.get("deposit_percentage", 0.25))

    @property
    def debris_estimates(self) -> dict[str, Decimal]:
        """Debris yards per acre for max tiers."""
        estimates = self.pricing.get("debris_estimates", {
            "maxLight": 500.0,
            "maxMedium": 750.0,
            "maxHeavy": 1000.0,
        })
        return {key: _decimal(value) for key, value in estimates.items()}

    @property
    def business(self) -> dict:
        """Business profile used on quotes (name, base address, contact)."""
        return self.pricing.get("business", {"name": "TreeShop"})

    # =========================================================================
    # Transport
    # =========================================================================

    @property
    def transport(self) -> dict:
        return self._config.get("transport", {})

    @property
    def default_transport_hours(self) -> Decimal:
        return _decimal(self.transport.get("default_hours", 2.0))

    @property
    def transport_rounding_increment(self) -> Decimal:
        return _decimal(self.transport.get("rounding_increment", 0.5))

    # =========================================================================
    # Equipment
    # =========================================================================

    @property
    def equipment(self) -> dict:
        """Equipment cost model configuration."""
        return self._config.get("equipment", {})

    @property
    def recommended_markup(self) -> Decimal:
        """Markup applied to equipment hourly cost for its recommended rate."""
        return _decimal(self.equipment.get("recommended_markup", 1.3))

    @property
    def default_resale_percentage(self) -> Decimal:
        return _decimal(self.equipment.get("default_resale_percentage", 0.2))

    def get_maintenance_cost(self, level: str) -> Decimal:
        """
        Get the annual maintenance cost for a maintenance level.

        Args:
            level: One of 'minimal', 'standard', 'intense', 'custom'

        Returns:
            Annual cost (standard cost for unknown levels)
        """
        levels = self.equipment.get("maintenance_levels", {
            "minimal": 1300.0,
            "standard": 2600.0,
            "intense": 4550.0,
            "custom": 0.0,
        })
        return _decimal(levels.get(level, levels.get("standard", 2600.0)))

    @property
    def equipment_alert_thresholds(self) -> dict[str, Decimal]:
        """Thresholds for equipment data quality alerts."""
        defaults = {
            "low_hourly_cost": 10.0,
            "high_hourly_cost": 200.0,
            "min_recommended_rate": 25.0,
            "min_annual_hours": 400.0,
            "replacement_age_years": 15,
            "replacement_hourly_cost": 100.0,
        }
        defaults.update(self.equipment.get("alerts", {}))
        return {key: _decimal(value) for key, value in defaults.items()}

    # =========================================================================
    # Employees & Loadouts
    # =========================================================================

    @property
    def labor_markup(self) -> Decimal:
        """Markup applied to an employee's true hourly cost."""
        return _decimal(self._config.get("employees", {}).get("labor_markup", 2.5))

    @property
    def loadouts(self) -> dict:
        return self._config.get("loadouts", {})

    @property
    def loadout_default_markup(self) -> Decimal:
        return _decimal(self.loadouts.get("default_markup", 2.5))

    @property
    def loadout_hours(self) -> dict[str, Decimal]:
        """Hours per day/week/month used for revenue projections."""
        hours = self.loadouts.get("hours", {"daily": 8, "weekly": 40, "monthly": 160})
        return {key: _decimal(value) for key, value in hours.items()}

    @property
    def profitability_bands(self) -> dict[str, float]:
        """Minimum profit margin (fraction) for each profitability category."""
        bands = self.loadouts.get("profitability_bands", {
            "excellent": 0.50,
            "good": 0.35,
            "acceptable": 0.20,
        })
        return {key: float(value) for key, value in bands.items()}

    # =========================================================================
    # Documents
    # =========================================================================

    @property
    def documents(self) -> dict:
        """Lead/Proposal/WorkOrder/Invoice pipeline configuration."""
        return self._config.get("documents", {})

    @property
    def proposal_valid_days(self) -> int:
        return int(self.documents.get("proposal_valid_days", 30))

    @property
    def lead_default_package(self) -> str:
        return self.documents.get("lead_default_package", "medium")

    @property
    def lead_default_transport_hours(self) -> Decimal:
        return _decimal(self.documents.get("lead_default_transport_hours", 2.0))

    @property
    def invoice_tax_rate(self) -> Decimal:
        return _decimal(self.documents.get("invoice_tax_rate", 0.0875))

    @property
    def invoice_deposit_rate(self) -> Decimal:
        return _decimal(self.documents.get("invoice_deposit_rate", 0.25))

    @property
    def invoice_payment_terms(self) -> str:
        return self.documents.get("invoice_payment_terms", "net_30")

    # =========================================================================
    # Raw Access
    # =========================================================================

    def get(self, key: str, default: Any = None) -> Any:
        """Get a top-level config value by key."""
        return self._config.get(key, default)

    def __getitem__(self, key: str) -> Any:
        """Dictionary-style access to config."""
        return self._config[key]

    def __contains__(self, key: str) -> bool:
        """Check if key exists in config."""
        return key in self._config


@lru_cache(maxsize=1)
def get_config(config_path: Optional[str] = None) -> TreeShopConfig:
    """
    Get the singleton configuration instance.

    Args:
        config_path: Optional path to config file. Only used on first call.

    Returns:
        TreeShopConfig singleton instance
    """
    path = Path(config_path) if config_path else None
    return TreeShopConfig(path)


def reload_config() -> TreeShopConfig:
    """Reload configuration from disk and return new instance."""
    get_config.cache_clear()
    return get_config()
