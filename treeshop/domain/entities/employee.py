"""
Employee Entity - Crew member qualifications and compensation.

Roles, leadership levels and certifications each carry a fixed hourly
premium or multiplier that feeds the true hourly cost computed by
EmployeeCostEngine.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import List, Optional
from uuid import UUID, uuid4

from treeshop.domain.money import to_decimal


class PrimaryRole(Enum):
    """Primary role codes with their base cost multiplier."""
    ATC = "ATC"  # Arborist Tree Care
    TRS = "TRS"  # Tree Removal Specialist
    FOR = "FOR"  # Forestry Specialist
    LCL = "LCL"  # Land Clearing
    MUL = "MUL"  # Mulching Specialist
    STG = "STG"  # Stump Grinding
    ESR = "ESR"  # Emergency Response
    LSC = "LSC"  # Landscape
    EQO = "EQO"  # Equipment Operator
    MNT = "MNT"  # Maintenance
    SAL = "SAL"  # Sales
    PMC = "PMC"  # Project Management Coordination
    ADM = "ADM"  # Administration
    FIN = "FIN"  # Finance
    SAF = "SAF"  # Safety
    TEC = "TEC"  # Technical

    @property
    def base_multiplier(self) -> Decimal:
        return ROLE_MULTIPLIERS[self]


ROLE_MULTIPLIERS = {
    PrimaryRole.ATC: Decimal("1.8"),
    PrimaryRole.TRS: Decimal("1.8"),
    PrimaryRole.FOR: Decimal("1.7"),
    PrimaryRole.MUL: Decimal("1.7"),
    PrimaryRole.LCL: Decimal("1.6"),
    PrimaryRole.STG: Decimal("1.6"),
    PrimaryRole.ESR: Decimal("2.0"),
    PrimaryRole.LSC: Decimal("1.5"),
    PrimaryRole.EQO: Decimal("1.7"),
    PrimaryRole.MNT: Decimal("1.9"),
    PrimaryRole.SAL: Decimal("1.4"),
    PrimaryRole.PMC: Decimal("1.4"),
    PrimaryRole.ADM: Decimal("1.3"),
    PrimaryRole.FIN: Decimal("1.3"),
    PrimaryRole.SAF: Decimal("1.6"),
    PrimaryRole.TEC: Decimal("1.6"),
}

# Added to the role multiplier; unknown tiers fall back to 0.1
SKILL_TIER_MULTIPLIERS = {
    1: Decimal("0.0"),
    2: Decimal("0.1"),
    3: Decimal("0.2"),
    4: Decimal("0.4"),
    5: Decimal("0.6"),
}


class LeadershipLevel(Enum):
    NONE = "none"
    TEAM_LEADER = "+L"
    SUPERVISOR = "+S"
    MANAGER = "+M"
    DIRECTOR = "+D"

    @property
    def premium(self) -> Decimal:
        return {
            LeadershipLevel.NONE: Decimal("0"),
            LeadershipLevel.TEAM_LEADER: Decimal("2.0"),
            LeadershipLevel.SUPERVISOR: Decimal("5.0"),
            LeadershipLevel.MANAGER: Decimal("10.0"),
            LeadershipLevel.DIRECTOR: Decimal("15.0"),
        }[self]


class EquipmentLevel(Enum):
    E1 = "+E1"
    E2 = "+E2"
    E3 = "+E3"
    E4 = "+E4"

    @property
    def premium(self) -> Decimal:
        return {
            EquipmentLevel.E1: Decimal("1.0"),
            EquipmentLevel.E2: Decimal("2.0"),
            EquipmentLevel.E3: Decimal("3.5"),
            EquipmentLevel.E4: Decimal("5.0"),
        }[self]


class DriverClass(Enum):
    D1 = "+D1"  # Standard license
    D2 = "+D2"  # CDL Class B
    D3 = "+D3"  # CDL Class A
    DH = "+DH"  # Hazmat endorsement

    @property
    def premium(self) -> Decimal:
        return {
            DriverClass.D1: Decimal("1.0"),
            DriverClass.D2: Decimal("2.5"),
            DriverClass.D3: Decimal("4.0"),
            DriverClass.DH: Decimal("6.0"),
        }[self]


class ProfessionalCertification(Enum):
    ISA = "+ISA"
    TRA = "+TRA"
    MUN = "+MUN"
    UTL = "+UTL"
    CRA = "+CRA"
    OSH = "+OSH"
    CPR = "+CPR"
    PPE = "+PPE"
    RFW = "+RFW"
    EMR = "+EMR"

    @property
    def premium(self) -> Decimal:
        return CERTIFICATION_PREMIUMS[self]


CERTIFICATION_PREMIUMS = {
    ProfessionalCertification.ISA: Decimal("3.0"),
    ProfessionalCertification.TRA: Decimal("2.5"),
    ProfessionalCertification.MUN: Decimal("2.0"),
    ProfessionalCertification.UTL: Decimal("2.0"),
    ProfessionalCertification.CRA: Decimal("1.5"),
    ProfessionalCertification.OSH: Decimal("1.0"),
    ProfessionalCertification.CPR: Decimal("0.5"),
    ProfessionalCertification.PPE: Decimal("0.5"),
    ProfessionalCertification.RFW: Decimal("1.5"),
    ProfessionalCertification.EMR: Decimal("2.0"),
}


@dataclass(frozen=True)
class CrossTraining:
    role: PrimaryRole
    tier: int

    @property
    def code(self) -> str:
        return f"X-{self.role.value}{self.tier}"

    @property
    def premium(self) -> Decimal:
        # $0.50 per tier level
        return Decimal(self.tier) * Decimal("0.5")


class EmployeeStatus(Enum):
    ACTIVE = "active"
    ON_PROJECT = "on_project"
    ON_LEAVE = "on_leave"
    UNAVAILABLE = "unavailable"
    TRAINING = "training"
    TERMINATED = "terminated"


@dataclass
class EmployeeQualifications:
    primary_role: PrimaryRole = PrimaryRole.LCL
    tier: int = 1
    leadership_level: LeadershipLevel = LeadershipLevel.NONE
    equipment_certifications: List[EquipmentLevel] = field(default_factory=list)
    driver_classification: Optional[DriverClass] = None
    professional_certifications: List[ProfessionalCertification] = field(default_factory=list)
    cross_training: List[CrossTraining] = field(default_factory=list)

    @property
    def total_certifications(self) -> int:
        return (
            len(self.equipment_certifications)
            + len(self.professional_certifications)
            + len(self.cross_training)
        )


@dataclass
class EmployeeCompensation:
    base_hourly_rate: Decimal = Decimal("0")
    overtime_multiplier: Decimal = Decimal("1.5")


@dataclass(frozen=True)
class EmployeeCalculation:
    base_multiplier: Decimal
    leadership_premium: Decimal
    equipment_premium: Decimal
    driver_premium: Decimal
    certification_premium: Decimal
    cross_training_premium: Decimal
    true_hourly_cost: Decimal
    billing_rate: Decimal
    profit_margin: float

    @property
    def annual_cost(self) -> Decimal:
        # 40 hours/week * 52 weeks
        return self.true_hourly_cost * 2080

    def to_dict(self) -> dict:
        return {
            'base_multiplier': str(self.base_multiplier),
            'leadership_premium': str(self.leadership_premium),
            'equipment_premium': str(self.equipment_premium),
            'driver_premium': str(self.driver_premium),
            'certification_premium': str(self.certification_premium),
            'cross_training_premium': str(self.cross_training_premium),
            'true_hourly_cost': str(self.true_hourly_cost),
            'billing_rate': str(self.billing_rate),
            'profit_margin': self.profit_margin,
        }


@dataclass
class Employee:
    """A crew member. true_hourly_cost feeds loadout rollups."""

    id: UUID = field(default_factory=uuid4)
    first_name: str = ""
    last_name: str = ""
    employee_number: str = ""
    email: Optional[str] = None
    phone: Optional[str] = None
    qualifications: EmployeeQualifications = field(default_factory=EmployeeQualifications)
    compensation: EmployeeCompensation = field(default_factory=EmployeeCompensation)
    calculated: Optional[EmployeeCalculation] = None
    status: EmployeeStatus = EmployeeStatus.ACTIVE
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def search_text(self) -> str:
        return " ".join([self.full_name, self.employee_number, self.qualifications.primary_role.value])

    @property
    def true_hourly_cost(self) -> Decimal:
        return self.calculated.true_hourly_cost if self.calculated else Decimal("0")

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization. The calculation is not stored."""
        q = self.qualifications
        return {
            'id': str(self.id),
            'first_name': self.first_name,
            'last_name': self.last_name,
            'employee_number': self.employee_number,
            'email': self.email,
            'phone': self.phone,
            'qualifications': {
                'primary_role': q.primary_role.value,
                'tier': q.tier,
                'leadership_level': q.leadership_level.value,
                'equipment_certifications': [e.value for e in q.equipment_certifications],
                'driver_classification': q.driver_classification.value if q.driver_classification else None,
                'professional_certifications': [c.value for c in q.professional_certifications],
                'cross_training': [{'role': x.role.value, 'tier': x.tier} for x in q.cross_training],
            },
            'compensation': {
                'base_hourly_rate': str(self.compensation.base_hourly_rate),
                'overtime_multiplier': str(self.compensation.overtime_multiplier),
            },
            'status': self.status.value,
            'created_at': self.created_at.isoformat(),
            'updated_at': self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Employee':
        q = data.get('qualifications', {})
        comp = data.get('compensation', {})
        driver = q.get('driver_classification')
        return cls(
            id=UUID(data['id']) if 'id' in data else uuid4(),
            first_name=data.get('first_name', ''),
            last_name=data.get('last_name', ''),
            employee_number=data.get('employee_number', ''),
            email=data.get('email'),
            phone=data.get('phone'),
            qualifications=EmployeeQualifications(
                primary_role=PrimaryRole(q.get('primary_role', 'LCL')),
                tier=int(q.get('tier', 1)),
                leadership_level=LeadershipLevel(q.get('leadership_level', 'none')),
                equipment_certifications=[EquipmentLevel(v) for v in q.get('equipment_certifications', [])],
                driver_classification=DriverClass(driver) if driver else None,
                professional_certifications=[
                    ProfessionalCertification(v) for v in q.get('professional_certifications', [])
                ],
                cross_training=[
                    CrossTraining(role=PrimaryRole(x['role']), tier=int(x['tier']))
                    for x in q.get('cross_training', [])
                ],
            ),
            compensation=EmployeeCompensation(
                base_hourly_rate=to_decimal(comp.get('base_hourly_rate', 0)),
                overtime_multiplier=to_decimal(comp.get('overtime_multiplier', '1.5')),
            ),
            status=EmployeeStatus(data.get('status', 'active')),
            created_at=datetime.fromisoformat(data['created_at']) if data.get('created_at') else datetime.now(timezone.utc),
            updated_at=datetime.fromisoformat(data['updated_at']) if data.get('updated_at') else datetime.now(timezone.utc),
        )
