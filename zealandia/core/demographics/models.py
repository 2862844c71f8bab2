"""Demographic slice domain model

A slice is one segment of the simulated population with its own political
baseline. Slices are created by world generation and only adjusted by GM
action; the engine reads them and never mutates them.
DB-independent plain data classes.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from zealandia.core.errors import InvalidRangeError
from zealandia.core.politics.position import PoliticalPosition, validate_position


class SocialClass(str, Enum):
    UPPER = "upper"
    MIDDLE = "middle"
    LOWER = "lower"
    OTHER = "other"


class Occupation(str, Enum):
    """Fixed 28-value occupation list"""

    # agriculture & livestock
    LANDOWNER_FARMER = "landowner-farmer"
    TENANT_FARMER = "tenant-farmer"
    AGRICULTURAL_LABORER = "agricultural-laborer"
    RANCHER = "rancher"
    # maritime & fishing
    FISHERMAN = "fisherman"
    WHALER = "whaler"
    SEALER = "sealer"
    MERCHANT_SAILOR = "merchant-sailor"
    # mining & quarrying
    COAL_MINER = "coal-miner"
    GOLD_MINER = "gold-miner"
    INDUSTRIAL_MINER = "industrial-miner"
    QUARRY_WORKER = "quarry-worker"
    # manufacturing & artisans
    MANUFACTURER = "manufacturer"
    ARTISAN = "artisan"
    CRAFTSMAN = "craftsman"
    # trade & commerce
    MERCHANT = "merchant"
    SHOPKEEPER = "shopkeeper"
    TRADER = "trader"
    # professionals
    LAWYER = "lawyer"
    DOCTOR = "doctor"
    TEACHER = "teacher"
    GOVERNMENT_OFFICIAL = "government-official"
    # labour & services
    DOMESTIC_SERVANT = "domestic-servant"
    GENERAL_LABORER = "general-laborer"
    # special
    MISSIONARY = "missionary"
    MILITARY = "military"
    FRONTIER_SURVEYOR = "frontier-surveyor"
    UNEMPLOYED = "unemployed"


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"


class PropertyOwnership(str, Enum):
    LANDOWNER = "landowner"
    TENANT = "tenant"
    NONE = "none"


class Settlement(str, Enum):
    URBAN = "urban"
    RURAL = "rural"


@dataclass(frozen=True)
class EconomicIdentity:
    social_class: SocialClass
    occupation: Occupation
    gender: Gender
    property_ownership: Optional[PropertyOwnership] = None


@dataclass(frozen=True)
class CulturalIdentity:
    ethnicity: str  # e.g. "english", "maori", "european-indigenous"
    religion: str  # e.g. "anglican", "indigenous-beliefs"
    indigenous: bool = False
    mixed: bool = False


@dataclass(frozen=True)
class LocationalIdentity:
    province: str
    settlement: Settlement
    urban_center: Optional[str] = None


@dataclass(frozen=True)
class SpecialInterest:
    group: str  # e.g. "temperance-movement"
    salience: float  # 0 ~ 1


@dataclass
class DemographicSlice:
    """One population segment"""

    slice_id: str
    economic: EconomicIdentity
    cultural: CulturalIdentity
    locational: LocationalIdentity
    population: int = 0
    can_vote: bool = False
    default_position: PoliticalPosition = field(default_factory=PoliticalPosition)
    special_interests: List[SpecialInterest] = field(default_factory=list)

    @property
    def province(self) -> str:
        return self.locational.province

    @property
    def eligible_voters(self) -> int:
        return self.population if self.can_vote else 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "slice_id": self.slice_id,
            "economic": {
                "class": self.economic.social_class.value,
                "occupation": self.economic.occupation.value,
                "gender": self.economic.gender.value,
                "property_ownership": (
                    self.economic.property_ownership.value
                    if self.economic.property_ownership
                    else None
                ),
            },
            "cultural": {
                "ethnicity": self.cultural.ethnicity,
                "religion": self.cultural.religion,
                "indigenous": self.cultural.indigenous,
                "mixed": self.cultural.mixed,
            },
            "locational": {
                "province": self.locational.province,
                "settlement": self.locational.settlement.value,
                "urban_center": self.locational.urban_center,
            },
            "special_interests": [
                {"group": s.group, "salience": s.salience}
                for s in self.special_interests
            ],
            "population": self.population,
            "can_vote": self.can_vote,
            "default_position": self.default_position.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DemographicSlice":
        econ = data["economic"]
        cult = data["cultural"]
        loc = data["locational"]
        ownership = econ.get("property_ownership")
        slice_ = cls(
            slice_id=data["slice_id"],
            economic=EconomicIdentity(
                social_class=SocialClass(econ["class"]),
                occupation=Occupation(econ["occupation"]),
                gender=Gender(econ["gender"]),
                property_ownership=PropertyOwnership(ownership) if ownership else None,
            ),
            cultural=CulturalIdentity(
                ethnicity=cult["ethnicity"],
                religion=cult["religion"],
                indigenous=bool(cult.get("indigenous", False)),
                mixed=bool(cult.get("mixed", False)),
            ),
            locational=LocationalIdentity(
                province=loc["province"],
                settlement=Settlement(loc["settlement"]),
                urban_center=loc.get("urban_center"),
            ),
            special_interests=[
                SpecialInterest(group=s["group"], salience=float(s["salience"]))
                for s in data.get("special_interests", [])
            ],
            population=int(data.get("population", 0)),
            can_vote=bool(data.get("can_vote", False)),
            default_position=PoliticalPosition.from_dict(data.get("default_position")),
        )
        validate_slice(slice_)
        return slice_


def validate_slice(slice_: DemographicSlice) -> None:
    """Invariant check: population >= 0, special-interest salience in [0, 1],
    default position in range."""
    if not slice_.slice_id:
        raise InvalidRangeError("slice_id must not be empty")
    if slice_.population < 0:
        raise InvalidRangeError(
            f"slice {slice_.slice_id}: population={slice_.population} is negative"
        )
    for interest in slice_.special_interests:
        if not 0.0 <= interest.salience <= 1.0:
            raise InvalidRangeError(
                f"slice {slice_.slice_id}: special interest {interest.group} "
                f"salience={interest.salience} outside [0, 1]"
            )
    validate_position(slice_.default_position)
