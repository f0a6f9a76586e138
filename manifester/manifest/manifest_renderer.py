"""
Rendering of a Manifest as an Elm module.

The renderer emits closed custom types for countries, locations and trips
together with total case expressions over them: every variant appears exactly
once in every function over its type. The output is plain text laid out
close to elm-format style; running elm-format afterwards is optional.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

from ..config.logger_module import log_info
from ..places.places_cache import write_text_atomically
from ..places.places_model import GeoPoint
from .manifest_errors import ArtifactWriteError
from .manifest_model import ImageRow, Manifest, Month, TripDate

EXPOSED_NAMES = [
    "Country(..)",
    "Date",
    "Image",
    "Location(..)",
    "LocationInformation",
    "Month(..)",
    "Trip(..)",
    "TripInformation",
    "Year",
    "codeToCountry",
    "countryId",
    "countryList",
    "countryLocalName",
    "countryName",
    "locationInformation",
    "locationList",
    "locationLocalName",
    "locationName",
    "manifest",
    "stringToCountry",
    "stringToLocation",
    "stringToTrip",
    "tripCoordinates",
    "tripInformation",
    "tripList",
]


def elm_string(value: str) -> str:
    """Quote a Python string as an Elm string literal."""
    escaped = (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
    )
    return f'"{escaped}"'


def elm_float(value: float) -> str:
    """Fixed three-decimal rendering used for every coordinate and ratio."""
    return f"{value:.3f}"


def elm_point(point: GeoPoint) -> str:
    return f"( {elm_float(point.longitude)}, {elm_float(point.latitude)} )"


def elm_date(date: TripDate) -> str:
    return f"Date {date.year} {date.month.label}"


def elm_list(items: Sequence[str]) -> str:
    """Single-line list literal."""
    if not items:
        return "[]"
    return "[ " + ", ".join(items) + " ]"


def elm_maybe_string(value: Optional[str]) -> str:
    return "Nothing" if value is None else f"Just {elm_string(value)}"


class ManifestRenderer(ABC):
    """Abstract base class for manifest output formats."""

    @abstractmethod
    def render(self, manifest: Manifest) -> str:
        """
        Render the complete manifest module.

        Args:
            manifest: Fully resolved manifest

        Returns:
            Module source text
        """
        pass


class ElmManifestRenderer(ManifestRenderer):
    """Emits the `Manifest` Elm module consumed by the site."""

    def __init__(self, module_name: str = "Manifest"):
        self.module_name = module_name

    def render(self, manifest: Manifest) -> str:
        blocks: List[str] = [
            f"module {self.module_name} exposing ({', '.join(EXPOSED_NAMES)})",
            "-- COUNTRIES",
        ]
        blocks.extend(self._country_blocks(manifest))
        blocks.append("-- LOCATIONS")
        blocks.extend(self._location_blocks(manifest))
        blocks.append("-- TRIPS")
        blocks.extend(self._trip_blocks(manifest))
        blocks.extend(self._date_blocks())
        blocks.append("-- MANIFEST")
        blocks.extend(self._image_blocks(manifest.images))
        return "\n\n\n".join(blocks) + "\n"

    # ---- building blocks ----

    @staticmethod
    def _union(name: str, variants: Sequence[str]) -> str:
        if not variants:
            raise ValueError(f"type {name} needs at least one variant")
        lines = [f"type {name}", f"    = {variants[0]}"]
        lines.extend(f"    | {variant}" for variant in variants[1:])
        return "\n".join(lines)

    @staticmethod
    def _list_value(name: str, type_name: str, items: Sequence[str]) -> str:
        lines = [f"{name} : List {type_name}", f"{name} ="]
        if not items:
            lines.append("    []")
            return "\n".join(lines)
        lines.append(f"    [ {items[0]}")
        lines.extend(f"    , {item}" for item in items[1:])
        lines.append("    ]")
        return "\n".join(lines)

    @staticmethod
    def _case(signature: str,
              head: str,
              argument: str,
              arms: Sequence[Tuple[str, str]],
              wildcard: Optional[str] = None) -> str:
        """A function consisting of one case expression; arm bodies may span lines."""
        lines = [signature, head, f"    case {argument} of"]
        for pattern, body in arms:
            lines.append(f"        {pattern} ->")
            lines.extend(f"            {line}" for line in body.split("\n"))
            lines.append("")
        if wildcard is not None:
            lines.append("        _ ->")
            lines.append(f"            {wildcard}")
        elif lines[-1] == "":
            lines.pop()
        return "\n".join(lines)

    @staticmethod
    def _record(fields: Sequence[Tuple[str, str]]) -> str:
        lines = []
        for idx, (key, value) in enumerate(fields):
            lead = "{" if idx == 0 else ","
            lines.append(f"{lead} {key} = {value}")
        lines.append("}")
        return "\n".join(lines)

    @staticmethod
    def _record_alias(name: str, fields: Sequence[Tuple[str, str]]) -> str:
        lines = [f"type alias {name} ="]
        for idx, (key, type_name) in enumerate(fields):
            lead = "{" if idx == 0 else ","
            lines.append(f"    {lead} {key} : {type_name}")
        lines.append("    }")
        return "\n".join(lines)

    # ---- sections ----

    def _country_blocks(self, manifest: Manifest) -> List[str]:
        countries = manifest.countries
        ids = [c.identifier for c in countries]

        # Codes are unique per country in practice; the first wins if a table maps two names to one code.
        code_arms = []
        seen_codes = set()
        for country in countries:
            if country.code in seen_codes:
                continue
            seen_codes.add(country.code)
            code_arms.append((elm_string(country.code), f"Just {country.identifier}"))

        return [
            self._union("Country", ids),
            self._list_value("countryList", "Country", ids),
            self._case(
                "countryId : Country -> String", "countryId country =", "country",
                [(c.identifier, elm_string(c.code)) for c in countries],
            ),
            self._case(
                "countryName : Country -> String", "countryName country =", "country",
                [(c.identifier, elm_string(c.name)) for c in countries],
            ),
            self._case(
                "stringToCountry : String -> Maybe Country", "stringToCountry country =", "country",
                [(elm_string(c.name), f"Just {c.identifier}") for c in countries],
                wildcard="Nothing",
            ),
            self._case(
                "codeToCountry : String -> Maybe Country", "codeToCountry code =", "code",
                code_arms,
                wildcard="Nothing",
            ),
            self._case(
                "countryLocalName : Country -> Maybe String", "countryLocalName country =", "country",
                [(c.identifier, elm_maybe_string(c.local_name)) for c in countries],
            ),
        ]

    def _location_blocks(self, manifest: Manifest) -> List[str]:
        locations = manifest.locations
        ids = [loc.identifier for loc in locations]

        information_arms = [
            (loc.identifier, self._record([
                ("name", elm_string(loc.name)),
                ("country", loc.country),
                ("coordinates", elm_point(loc.point)),
            ]))
            for loc in locations
        ]

        return [
            self._union("Location", ids),
            self._list_value("locationList", "Location", ids),
            self._case(
                "locationName : Location -> String", "locationName location =", "location",
                [(loc.identifier, elm_string(loc.name)) for loc in locations],
            ),
            self._case(
                "stringToLocation : String -> Maybe Location", "stringToLocation location =",
                "location",
                [(elm_string(loc.name), f"Just {loc.identifier}") for loc in locations],
                wildcard="Nothing",
            ),
            self._case(
                "locationLocalName : Location -> Maybe String", "locationLocalName location =",
                "location",
                [(loc.identifier, elm_maybe_string(loc.local_name)) for loc in locations],
            ),
            self._record_alias("LocationInformation", [
                ("name", "String"),
                ("country", "Country"),
                ("coordinates", "( Float, Float )"),
            ]),
            self._case(
                "locationInformation : Location -> LocationInformation",
                "locationInformation location =", "location",
                information_arms,
            ),
        ]

    def _trip_blocks(self, manifest: Manifest) -> List[str]:
        trips = manifest.trips
        ids = [trip.identifier for trip in trips]

        information_arms = [
            (trip.identifier, self._record([
                ("name", elm_string(trip.name)),
                ("description", elm_string(trip.description)),
                ("locations", elm_list(trip.locations)),
                ("dates", elm_list([elm_date(date) for date in trip.dates])),
            ]))
            for trip in trips
        ]

        coordinate_arms = [
            (trip.identifier, elm_list([elm_point(p) for p in manifest.geometries[trip.identifier]]))
            for trip in trips
        ]

        return [
            self._union("Trip", ids),
            self._list_value("tripList", "Trip", ids),
            self._case(
                "stringToTrip : String -> Maybe Trip", "stringToTrip trip =", "trip",
                [(elm_string(trip.description), f"Just {trip.identifier}") for trip in trips],
                wildcard="Nothing",
            ),
            self._record_alias("TripInformation", [
                ("name", "String"),
                ("description", "String"),
                ("locations", "List Location"),
                ("dates", "List Date"),
            ]),
            self._case(
                "tripInformation : Trip -> TripInformation", "tripInformation trip =", "trip",
                information_arms,
            ),
            self._case(
                "tripCoordinates : Trip -> List ( Float, Float )", "tripCoordinates trip =", "trip",
                coordinate_arms,
            ),
        ]

    def _date_blocks(self) -> List[str]:
        return [
            "type alias Year =\n    Int",
            self._union("Month", [month.label for month in Month]),
            self._record_alias("Date", [("year", "Year"), ("month", "Month")]),
        ]

    def _image_blocks(self, images: Sequence[ImageRow]) -> List[str]:
        entries = [
            f"Image {elm_string(image.file)} ({elm_date(image.date)}) {image.location} "
            f"{elm_float(image.aspect_ratio)} {elm_string(image.description)}"
            for image in images
        ]
        return [
            self._record_alias("Image", [
                ("file", "String"),
                ("date", "Date"),
                ("location", "Location"),
                ("aspectRatio", "Float"),
                ("description", "String"),
            ]),
            self._list_value("manifest", "Image", entries),
        ]


def write_artifact(text: str, path: Union[str, Path]) -> None:
    """
    Write the rendered module atomically.

    Called only once rendering has finished, so a failed run never leaves a
    partial or stale-but-truncated artifact behind.

    Raises:
        ArtifactWriteError: If the file cannot be written
    """
    try:
        write_text_atomically(path, text)
    except OSError as e:
        raise ArtifactWriteError(f"Failed to write manifest {path}: {e}") from e
    log_info(f"Wrote manifest module to {path}")
