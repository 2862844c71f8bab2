"""Demographic model - public API"""

from zealandia.core.demographics.models import (
    CulturalIdentity,
    DemographicSlice,
    EconomicIdentity,
    Gender,
    LocationalIdentity,
    Occupation,
    PropertyOwnership,
    Settlement,
    SocialClass,
    SpecialInterest,
    validate_slice,
)
from zealandia.core.demographics.catalog import SliceCatalog

__all__ = [
    "CulturalIdentity",
    "DemographicSlice",
    "EconomicIdentity",
    "Gender",
    "LocationalIdentity",
    "Occupation",
    "PropertyOwnership",
    "Settlement",
    "SocialClass",
    "SpecialInterest",
    "validate_slice",
    "SliceCatalog",
]
