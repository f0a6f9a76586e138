"""
Identifier and display-name derivation.

Every string-to-identifier rule used by the manifester lives here so the
cache keys, gallery directory names and generated constructors all agree.
"""

import re
from typing import Dict

# City names that collide with their country identifier. The cache stores the
# plain display name; the identifier carries the suffix.
CITY_DISAMBIGUATIONS: Dict[str, str] = {
    "Singapore": "SingaporeCity",
    "HongKong": "HongKongCity",
}

_DISAMBIGUATED_CITIES = {value: key for key, value in CITY_DISAMBIGUATIONS.items()}

_IDENTIFIER_RE = re.compile(r"^[A-Z][A-Za-z0-9]*$")

MONTH_LABELS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
                "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

# Constructors the generated module defines or relies on besides the
# Country, Location and Trip variants. Record aliases define a constructor
# of the same name; the rest come from Elm's default imports.
RESERVED_CONSTRUCTORS = frozenset(
    ("Date", "Image", "LocationInformation", "TripInformation",
     "Just", "Nothing", "True", "False", "Ok", "Err", "LT", "EQ", "GT")
    + MONTH_LABELS
)


def canonicalize(display_name: str) -> str:
    """
    Convert a free-text display name to its cache key / location identifier.

    Spaces (and underscores, which gallery directories use instead of spaces)
    are removed, then the collision table is applied.

    Examples:
        "Ho Chi Minh City" -> "HoChiMinhCity"
        "Hong Kong"        -> "HongKongCity"
        "Saint_Petersburg" -> "SaintPetersburg"
    """
    key = display_name.replace(" ", "").replace("_", "")
    return CITY_DISAMBIGUATIONS.get(key, key)


def split_identifier(identifier: str) -> str:
    """Insert a space before every interior capital: "CzechRepublic" -> "Czech Republic"."""
    words = []
    for idx, char in enumerate(identifier):
        if idx > 0 and char.isupper():
            words.append(" ")
        words.append(char)
    return "".join(words)


def country_display_name(identifier: str) -> str:
    """Display name of a country identifier."""
    return split_identifier(identifier)


def location_display_name(identifier: str) -> str:
    """Display name of a location identifier, undoing the collision suffix."""
    return split_identifier(_DISAMBIGUATED_CITIES.get(identifier, identifier))


def country_key(display_name: str) -> str:
    """Country identifier for a country-code table name: "United Kingdom" -> "UnitedKingdom"."""
    return display_name.replace(" ", "")


def trip_identifier(description: str) -> str:
    """Trip identifier derived from its description by dropping spaces and slashes."""
    return description.replace(" ", "").replace("/", "")


def is_valid_identifier(identifier: str) -> bool:
    """True when the identifier can be emitted as a type constructor."""
    return bool(_IDENTIFIER_RE.match(identifier))
