"""Political position model

A PoliticalPosition is the fingerprint shared by players, policies and
demographic slices: a 3-axis cube plus per-issue positions and saliences.
DB-independent plain data classes.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from zealandia.core.errors import InvalidRangeError

POSITION_MIN = -10.0
POSITION_MAX = 10.0
POSITION_SPAN = POSITION_MAX - POSITION_MIN  # 20

# Soft target only; comparators tolerate sums above it.
SALIENCE_SUM_TARGET = 10.0

CUBE_AXES: Tuple[str, ...] = ("economic", "authority", "social")

# Fixed issue catalogue. Sign convention per issue: -10 / +10
ISSUES: Tuple[str, ...] = (
    # governance & sovereignty
    "sovereignty",  # national / supranational
    "responsible_government",  # imperial / elected parliament
    "centralization",  # strong central / provincial autonomy
    # property & land
    "property_rights",  # absolute private / social responsibility
    "eminent_domain",  # public good / private protection
    "land_sales",  # accelerated acquisition / cessation
    # economy & trade
    "taxes",  # lower-flat / progressive
    "protectionism",  # tariffs / free trade
    "economic_intervention",  # laissez-faire / interventionist
    "business_regulation",  # deregulation / regulation
    "privatization",  # market-driven / public control
    # labour
    "worker_rights",  # employer flexibility / collective bargaining
    "minimum_wage",  # market-driven / living wage
    # welfare
    "welfare_state",  # limited state / comprehensive security
    "healthcare",  # private / universal
    "universal_income",  # work requirement / UBI
    # rights & suffrage
    "property_suffrage",  # restricted / universal
    "womens_suffrage",  # traditional roles / universal suffrage
    "indigenous_rights",  # assimilation / self-determination
    "gay_rights",  # traditional / expanded
    "trans_rights",  # traditional / expanded
    # indigenous issues
    "kingitanga",  # challenge to crown / unity and land protection
    "water_rights",  # centralized-economic / indigenous-ecological
    # immigration
    "immigration",  # strict control / openness
    # education
    "education_rights",  # local control / standardization
    # justice
    "death_penalty",  # retribution / abolition
    "justice",  # law and order / rehabilitation
    "police_reform",  # increased funding / reallocation
    # foreign policy
    "interventionism",  # isolationism / active engagement
    "globalism",  # national sovereignty / interdependence
    # social
    "privacy_rights",  # surveillance / civil liberties
    "animal_rights",  # welfare-utility / liberation
    "reproductive_rights",  # pro-life / pro-choice
    # environment
    "environmental_regulation",  # economic cost / ecological protection
    # equity
    "equity",  # equality of opportunity / of outcome
)


@dataclass
class PoliticalCube:
    """Coarse 3-axis position, each axis in [-10, 10]"""

    economic: float = 0.0  # regulation / laissez-faire
    authority: float = 0.0  # totalitarian / anarchist
    social: float = 0.0  # progressive / conservative

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.economic, self.authority, self.social)


def _zero_issues() -> Dict[str, float]:
    return {issue: 0.0 for issue in ISSUES}


@dataclass
class PoliticalPosition:
    """Cube + issue positions + issue salience.

    Missing issue keys read as 0 (position) and 0 (salience).
    """

    cube: PoliticalCube = field(default_factory=PoliticalCube)
    issues: Dict[str, float] = field(default_factory=_zero_issues)
    salience: Dict[str, float] = field(default_factory=_zero_issues)

    def issue(self, name: str) -> float:
        return self.issues.get(name, 0.0)

    def salience_of(self, name: str) -> float:
        return self.salience.get(name, 0.0)

    @property
    def salience_total(self) -> float:
        return sum(self.salience_of(i) for i in ISSUES)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cube": {axis: getattr(self.cube, axis) for axis in CUBE_AXES},
            "issues": {i: self.issue(i) for i in ISSUES},
            "salience": {i: self.salience_of(i) for i in ISSUES},
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "PoliticalPosition":
        data = data or {}
        cube_data = data.get("cube") or {}
        position = cls(
            cube=PoliticalCube(**{a: float(cube_data.get(a, 0.0)) for a in CUBE_AXES}),
            issues={**_zero_issues(), **_floats(data.get("issues"))},
            salience={**_zero_issues(), **_floats(data.get("salience"))},
        )
        validate_position(position)
        return position


def _floats(values: Optional[Dict[str, Any]]) -> Dict[str, float]:
    return {k: float(v) for k, v in (values or {}).items()}


def validate_position(position: PoliticalPosition) -> None:
    """Range check. Raises InvalidRangeError on the first offending value."""
    for axis, value in zip(CUBE_AXES, position.cube.as_tuple()):
        if not POSITION_MIN <= value <= POSITION_MAX:
            raise InvalidRangeError(f"cube.{axis}={value} outside [-10, 10]")

    for name, value in position.issues.items():
        if name not in ISSUES:
            raise InvalidRangeError(f"unknown issue: {name}")
        if not POSITION_MIN <= value <= POSITION_MAX:
            raise InvalidRangeError(f"issues.{name}={value} outside [-10, 10]")

    for name, value in position.salience.items():
        if name not in ISSUES:
            raise InvalidRangeError(f"unknown issue: {name}")
        if not 0.0 <= value <= 1.0:
            raise InvalidRangeError(f"salience.{name}={value} outside [0, 1]")


def make_position(
    economic: float = 0.0,
    authority: float = 0.0,
    social: float = 0.0,
    issues: Optional[Dict[str, float]] = None,
    salience: Optional[Dict[str, float]] = None,
) -> PoliticalPosition:
    """Convenience constructor: unspecified issues default to 0 / salience 0."""
    position = PoliticalPosition(
        cube=PoliticalCube(economic=economic, authority=authority, social=social),
        issues={**_zero_issues(), **(issues or {})},
        salience={**_zero_issues(), **(salience or {})},
    )
    validate_position(position)
    return position
