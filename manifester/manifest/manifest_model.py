"""
Row types of the generated manifest.

A Manifest is a fully resolved, ordered snapshot of the registry, the cache
and the gallery. Rendering it to text involves no further lookups.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from ..places.places_errors import IdentifierMismatch
from ..places.places_model import GeoPoint

_MONTH_RE = re.compile(r"\d{2}", re.ASCII)
_YEAR_RE = re.compile(r"\d+", re.ASCII)


class Month(Enum):
    """Calendar month; the value is the month number."""
    JAN = 1
    FEB = 2
    MAR = 3
    APR = 4
    MAY = 5
    JUN = 6
    JUL = 7
    AUG = 8
    SEP = 9
    OCT = 10
    NOV = 11
    DEC = 12

    @property
    def label(self) -> str:
        """Constructor name in the generated module, e.g. "Apr"."""
        return self.name.capitalize()

    @classmethod
    def from_text(cls, text: str) -> "Month":
        """
        Parse a two-digit month, "01" through "12".

        Raises:
            IdentifierMismatch: For anything else
        """
        if not _MONTH_RE.fullmatch(text) or not 1 <= int(text) <= 12:
            raise IdentifierMismatch(f"'{text}' is not a month between 01 and 12")
        return cls(int(text))


def is_year(text: str) -> bool:
    """True for a plain ASCII digit string such as "2018"."""
    return bool(_YEAR_RE.fullmatch(text))


@dataclass(frozen=True)
class TripDate:
    year: int
    month: Month


@dataclass(frozen=True)
class CountryRow:
    identifier: str
    name: str
    code: str
    local_name: Optional[str] = None


@dataclass(frozen=True)
class LocationRow:
    identifier: str
    name: str
    country: str
    point: GeoPoint
    local_name: Optional[str] = None


@dataclass(frozen=True)
class TripRow:
    identifier: str
    name: str
    description: str
    locations: List[str]
    dates: List[TripDate]


@dataclass(frozen=True)
class ImageRow:
    """A gallery image as listed in the manifest."""
    file: str
    relative_path: str
    date: TripDate
    location: str
    aspect_ratio: float
    description: str = ""


@dataclass
class Manifest:
    """Everything the renderer emits, in emission order."""
    countries: List[CountryRow] = field(default_factory=list)
    locations: List[LocationRow] = field(default_factory=list)
    trips: List[TripRow] = field(default_factory=list)
    geometries: Dict[str, List[GeoPoint]] = field(default_factory=dict)
    images: List[ImageRow] = field(default_factory=list)
