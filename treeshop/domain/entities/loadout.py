"""
Loadout Entity - A crew + equipment bundle billed at one hourly rate.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import List, Optional
from uuid import UUID, uuid4

from treeshop.domain.money import to_decimal, decimal_or_none


class LoadoutCategory(Enum):
    TREE_REMOVAL = "tree_removal"
    TREE_PRUNING = "tree_pruning"
    LAND_CLEARING = "land_clearing"
    FORESTRY_MULCHING = "forestry_mulching"
    STUMP_GRINDING = "stump_grinding"
    EMERGENCY_RESPONSE = "emergency_response"
    LANDSCAPING = "landscaping"
    MAINTENANCE = "maintenance"
    CUSTOM = "custom"


class LoadoutStatus(Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    ON_PROJECT = "on_project"
    MAINTENANCE = "maintenance"
    RETIRED = "retired"


class ProfitabilityCategory(Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    ACCEPTABLE = "acceptable"
    POOR = "poor"


@dataclass
class LoadoutCrew:
    """Employee and equipment references making up the loadout."""
    employee_ids: List[UUID] = field(default_factory=list)
    equipment_ids: List[UUID] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.employee_ids and not self.equipment_ids

    @property
    def member_count(self) -> int:
        return len(self.employee_ids) + len(self.equipment_ids)

    @property
    def equipment_ratio(self) -> float:
        """Equipment pieces per crew member (at least one member assumed)."""
        return len(self.equipment_ids) / max(1, len(self.employee_ids))


@dataclass
class LoadoutPricing:
    markup_multiplier: Decimal = Decimal("2.5")
    custom_rate_override: Optional[Decimal] = None

    @property
    def has_custom_pricing(self) -> bool:
        return self.custom_rate_override is not None and self.custom_rate_override > 0


@dataclass(frozen=True)
class LoadoutCalculation:
    """
    Aggregate hourly economics of a loadout.

    profit_margin is a fraction of the billing rate (0.6 == 60%).
    """

    total_employee_cost: Decimal
    total_equipment_cost: Decimal
    total_operating_cost: Decimal
    billing_rate: Decimal
    hourly_profit: Decimal
    profit_margin: float
    daily_revenue: Decimal
    weekly_revenue: Decimal
    monthly_revenue: Decimal
    daily_profit: Decimal
    profitability: ProfitabilityCategory = ProfitabilityCategory.POOR

    @property
    def cost_efficiency_ratio(self) -> float:
        if self.total_operating_cost <= 0:
            return 0.0
        return float(self.billing_rate / self.total_operating_cost)

    def to_dict(self) -> dict:
        return {
            'total_employee_cost': float(self.total_employee_cost),
            'total_equipment_cost': float(self.total_equipment_cost),
            'total_operating_cost': float(self.total_operating_cost),
            'billing_rate': float(self.billing_rate),
            'hourly_profit': float(self.hourly_profit),
            'profit_margin': self.profit_margin,
            'daily_revenue': float(self.daily_revenue),
            'weekly_revenue': float(self.weekly_revenue),
            'monthly_revenue': float(self.monthly_revenue),
            'daily_profit': float(self.daily_profit),
            'profitability': self.profitability.value,
            'cost_efficiency_ratio': self.cost_efficiency_ratio,
        }


@dataclass
class Loadout:
    id: UUID = field(default_factory=uuid4)
    name: str = ""
    category: LoadoutCategory = LoadoutCategory.FORESTRY_MULCHING
    description: Optional[str] = None
    crew: LoadoutCrew = field(default_factory=LoadoutCrew)
    pricing: LoadoutPricing = field(default_factory=LoadoutPricing)
    calculated: Optional[LoadoutCalculation] = None
    status: LoadoutStatus = LoadoutStatus.ACTIVE
    times_used: int = 0
    total_revenue: Decimal = Decimal("0")
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def display_name(self) -> str:
        return self.name or "Untitled Loadout"

    def search_text(self) -> str:
        return " ".join([self.name, self.category.value, self.description or ""])

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization. The calculation is not stored."""
        return {
            'id': str(self.id),
            'name': self.name,
            'category': self.category.value,
            'description': self.description,
            'crew': {
                'employee_ids': [str(i) for i in self.crew.employee_ids],
                'equipment_ids': [str(i) for i in self.crew.equipment_ids],
            },
            'pricing': {
                'markup_multiplier': str(self.pricing.markup_multiplier),
                'custom_rate_override': (
                    str(self.pricing.custom_rate_override)
                    if self.pricing.custom_rate_override is not None else None
                ),
            },
            'status': self.status.value,
            'times_used': self.times_used,
            'total_revenue': str(self.total_revenue),
            'created_at': self.created_at.isoformat(),
            'updated_at': self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Loadout':
        crew = data.get('crew', {})
        pricing = data.get('pricing', {})
        return cls(
            id=UUID(data['id']) if 'id' in data else uuid4(),
            name=data.get('name', ''),
            category=LoadoutCategory(data.get('category', 'forestry_mulching')),
            description=data.get('description'),
            crew=LoadoutCrew(
                employee_ids=[UUID(i) for i in crew.get('employee_ids', [])],
                equipment_ids=[UUID(i) for i in crew.get('equipment_ids', [])],
            ),
            pricing=LoadoutPricing(
                markup_multiplier=to_decimal(pricing.get('markup_multiplier', '2.5')),
                custom_rate_override=decimal_or_none(pricing.get('custom_rate_override')),
            ),
            status=LoadoutStatus(data.get('status', 'active')),
            times_used=int(data.get('times_used', 0)),
            total_revenue=to_decimal(data.get('total_revenue', 0)),
            created_at=datetime.fromisoformat(data['created_at']) if data.get('created_at') else datetime.now(timezone.utc),
            updated_at=datetime.fromisoformat(data['updated_at']) if data.get('updated_at') else datetime.now(timezone.utc),
        )
