"""Slice catalog - read-only registry of demographic slices"""

from typing import Dict, Iterable, Iterator, List, Optional

from zealandia.core.demographics.models import (
    DemographicSlice,
    Settlement,
    validate_slice,
)
from zealandia.core.errors import InvalidRangeError, NotFoundError


def in_province(
    slices: Iterable[DemographicSlice], province: str
) -> List[DemographicSlice]:
    return [s for s in slices if s.province == province]


def in_city(slices: Iterable[DemographicSlice], city: str) -> List[DemographicSlice]:
    """Urban slices of one city; rural slices nearby do not count."""
    return [
        s
        for s in slices
        if s.locational.settlement == Settlement.URBAN
        and s.locational.urban_center == city
    ]


class SliceCatalog:
    """Id -> slice lookup with the filters the engine needs.

    Loaded once per world; `add` rejects duplicate ids.
    """

    def __init__(self, slices: Optional[Iterable[DemographicSlice]] = None) -> None:
        self._slices: Dict[str, DemographicSlice] = {}
        for slice_ in slices or []:
            self.add(slice_)

    def add(self, slice_: DemographicSlice) -> None:
        validate_slice(slice_)
        if slice_.slice_id in self._slices:
            raise InvalidRangeError(f"duplicate slice id: {slice_.slice_id}")
        self._slices[slice_.slice_id] = slice_

    def get(self, slice_id: str) -> DemographicSlice:
        try:
            return self._slices[slice_id]
        except KeyError:
            raise NotFoundError("slice", slice_id) from None

    def __contains__(self, slice_id: object) -> bool:
        return slice_id in self._slices

    def __iter__(self) -> Iterator[DemographicSlice]:
        return iter(self._slices.values())

    def __len__(self) -> int:
        return len(self._slices)

    def require(self, slice_ids: Iterable[str]) -> None:
        """Raise NotFoundError for the first unknown id."""
        for slice_id in slice_ids:
            if slice_id not in self._slices:
                raise NotFoundError("slice", slice_id)

    def in_province(self, province: str) -> List[DemographicSlice]:
        return in_province(self._slices.values(), province)

    def in_city(self, city: str) -> List[DemographicSlice]:
        return in_city(self._slices.values(), city)

    def voting(self) -> List[DemographicSlice]:
        return [s for s in self._slices.values() if s.can_vote]

    def largest_voting(self, limit: int) -> List[DemographicSlice]:
        return sorted(self.voting(), key=lambda s: s.population, reverse=True)[:limit]

    def total_population(self, province: Optional[str] = None) -> int:
        return sum(
            s.population
            for s in self._slices.values()
            if province is None or s.province == province
        )
