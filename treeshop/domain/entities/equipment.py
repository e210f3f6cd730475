"""
Equipment Entity - Purchase, usage and maintenance inputs for one machine.

The derived EquipmentCalculation is produced by EquipmentCostEngine and
stored alongside the inputs as a snapshot.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from treeshop.domain.money import to_decimal, decimal_or_none


class EquipmentCategory(Enum):
    FORESTRY_MULCHER = "forestry_mulcher"
    SKID_STEER = "skid_steer"
    PICKUP_TRUCK = "pickup_truck"
    DUMP_TRUCK = "dump_truck"
    CHIPPER = "chipper"
    STUMP_GRINDER = "stump_grinder"
    OTHER = "other"


class UsagePattern(Enum):
    """Typical utilisation profile, with default days/hours."""
    LIGHT = "light"
    MODERATE = "moderate"
    HEAVY = "heavy"
    CUSTOM = "custom"

    @property
    def default_days_per_year(self) -> int:
        return {
            UsagePattern.LIGHT: 150,
            UsagePattern.MODERATE: 200,
            UsagePattern.HEAVY: 250,
            UsagePattern.CUSTOM: 200,
        }[self]

    @property
    def default_hours_per_day(self) -> Decimal:
        return {
            UsagePattern.LIGHT: Decimal("3"),
            UsagePattern.MODERATE: Decimal("6"),
            UsagePattern.HEAVY: Decimal("10"),
            UsagePattern.CUSTOM: Decimal("6"),
        }[self]


class MaintenanceLevel(Enum):
    MINIMAL = "minimal"
    STANDARD = "standard"
    INTENSE = "intense"
    CUSTOM = "custom"


class EquipmentStatus(Enum):
    ACTIVE = "active"
    MAINTENANCE = "maintenance"
    RETIRED = "retired"
    SOLD = "sold"


@dataclass
class EquipmentIdentity:
    equipment_name: str = ""
    year: int = 0
    make: str = ""
    model: str = ""
    serial_number: Optional[str] = None
    category: EquipmentCategory = EquipmentCategory.OTHER

    @property
    def display_name(self) -> str:
        return self.equipment_name or f"{self.year} {self.make} {self.model}".strip()


@dataclass
class EquipmentUsage:
    days_per_year: int = 200
    hours_per_day: Decimal = Decimal("6")
    usage_pattern: UsagePattern = UsagePattern.MODERATE

    @classmethod
    def for_pattern(cls, pattern: UsagePattern) -> 'EquipmentUsage':
        return cls(
            days_per_year=pattern.default_days_per_year,
            hours_per_day=pattern.default_hours_per_day,
            usage_pattern=pattern,
        )


@dataclass
class EquipmentFinancial:
    """
    Cost inputs for a machine.

    annual_maintenance is resolved by EquipmentCostEngine: a positive
    custom_maintenance_cost wins over the maintenance level's standard cost.
    When built directly, annual_maintenance can also be given explicitly.
    """

    purchase_price: Decimal = Decimal("0")
    years_of_service: int = 1
    estimated_resale_value: Decimal = Decimal("0")
    daily_fuel_cost: Decimal = Decimal("0")
    annual_insurance_cost: Decimal = Decimal("0")
    maintenance_level: MaintenanceLevel = MaintenanceLevel.STANDARD
    custom_maintenance_cost: Optional[Decimal] = None
    annual_maintenance: Optional[Decimal] = None


@dataclass(frozen=True)
class EquipmentCalculation:
    """Annual and hourly cost figures derived from usage and financial inputs."""

    annual_hours: Decimal
    annual_depreciation: Decimal
    annual_fuel: Decimal
    annual_maintenance: Decimal
    annual_insurance: Decimal
    total_annual_cost: Decimal
    hourly_cost: Decimal
    recommended_rate: Decimal

    @property
    def monthly_operating_cost(self) -> Decimal:
        return self.total_annual_cost / 12

    @property
    def daily_operating_cost(self) -> Decimal:
        return self.hourly_cost * 8

    @property
    def profit_per_hour(self) -> Decimal:
        return self.recommended_rate - self.hourly_cost

    @property
    def profit_margin(self) -> float:
        """Profit margin on the recommended rate, as a percentage."""
        if self.recommended_rate <= 0:
            return 0.0
        return float(self.profit_per_hour / self.recommended_rate) * 100

    def to_dict(self) -> dict:
        return {
            'annual_hours': str(self.annual_hours),
            'annual_depreciation': str(self.annual_depreciation),
            'annual_fuel': str(self.annual_fuel),
            'annual_maintenance': str(self.annual_maintenance),
            'annual_insurance': str(self.annual_insurance),
            'total_annual_cost': str(self.total_annual_cost),
            'hourly_cost': str(self.hourly_cost),
            'recommended_rate': str(self.recommended_rate),
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'EquipmentCalculation':
        return cls(**{key: to_decimal(data.get(key)) for key in (
            'annual_hours', 'annual_depreciation', 'annual_fuel', 'annual_maintenance',
            'annual_insurance', 'total_annual_cost', 'hourly_cost', 'recommended_rate',
        )})


@dataclass
class Equipment:
    """A machine in the fleet with its cost inputs and last calculation."""

    id: UUID = field(default_factory=uuid4)
    identity: EquipmentIdentity = field(default_factory=EquipmentIdentity)
    usage: EquipmentUsage = field(default_factory=EquipmentUsage)
    financial: EquipmentFinancial = field(default_factory=EquipmentFinancial)
    calculated: Optional[EquipmentCalculation] = None
    status: EquipmentStatus = EquipmentStatus.ACTIVE
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def search_text(self) -> str:
        identity = self.identity
        return " ".join([identity.display_name, identity.make, identity.model, identity.serial_number or ""])

    def age(self, year: int) -> int:
        """Age in years relative to the given calendar year; 0 when the model year is unknown."""
        if not self.identity.year:
            return 0
        return year - self.identity.year

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        financial = self.financial
        return {
            'id': str(self.id),
            'identity': {
                'equipment_name': self.identity.equipment_name,
                'year': self.identity.year,
                'make': self.identity.make,
                'model': self.identity.model,
                'serial_number': self.identity.serial_number,
                'category': self.identity.category.value,
            },
            'usage': {
                'days_per_year': self.usage.days_per_year,
                'hours_per_day': str(self.usage.hours_per_day),
                'usage_pattern': self.usage.usage_pattern.value,
            },
            'financial': {
                'purchase_price': str(financial.purchase_price),
                'years_of_service': financial.years_of_service,
                'estimated_resale_value': str(financial.estimated_resale_value),
                'daily_fuel_cost': str(financial.daily_fuel_cost),
                'annual_insurance_cost': str(financial.annual_insurance_cost),
                'maintenance_level': financial.maintenance_level.value,
                'custom_maintenance_cost': (
                    str(financial.custom_maintenance_cost)
                    if financial.custom_maintenance_cost is not None else None
                ),
                'annual_maintenance': (
                    str(financial.annual_maintenance)
                    if financial.annual_maintenance is not None else None
                ),
            },
            'calculated': self.calculated.to_dict() if self.calculated else None,
            'status': self.status.value,
            'created_at': self.created_at.isoformat(),
            'updated_at': self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Equipment':
        identity = data.get('identity', {})
        usage = data.get('usage', {})
        financial = data.get('financial', {})
        calculated = data.get('calculated')
        return cls(
            id=UUID(data['id']) if 'id' in data else uuid4(),
            identity=EquipmentIdentity(
                equipment_name=identity.get('equipment_name', ''),
                year=int(identity.get('year', 0)),
                make=identity.get('make', ''),
                model=identity.get('model', ''),
                serial_number=identity.get('serial_number'),
                category=EquipmentCategory(identity.get('category', 'other')),
            ),
            usage=EquipmentUsage(
                days_per_year=int(usage.get('days_per_year', 200)),
                hours_per_day=to_decimal(usage.get('hours_per_day', 6)),
                usage_pattern=UsagePattern(usage.get('usage_pattern', 'moderate')),
            ),
            financial=EquipmentFinancial(
                purchase_price=to_decimal(financial.get('purchase_price', 0)),
                years_of_service=int(financial.get('years_of_service', 1)),
                estimated_resale_value=to_decimal(financial.get('estimated_resale_value', 0)),
                daily_fuel_cost=to_decimal(financial.get('daily_fuel_cost', 0)),
                annual_insurance_cost=to_decimal(financial.get('annual_insurance_cost', 0)),
                maintenance_level=MaintenanceLevel(financial.get('maintenance_level', 'standard')),
                custom_maintenance_cost=decimal_or_none(financial.get('custom_maintenance_cost')),
                annual_maintenance=decimal_or_none(financial.get('annual_maintenance')),
            ),
            calculated=EquipmentCalculation.from_dict(calculated) if calculated else None,
            status=EquipmentStatus(data.get('status', 'active')),
            created_at=datetime.fromisoformat(data['created_at']) if data.get('created_at') else datetime.now(timezone.utc),
            updated_at=datetime.fromisoformat(data['updated_at']) if data.get('updated_at') else datetime.now(timezone.utc),
        )
