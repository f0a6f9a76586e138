"""
Persisted coordinate cache (world/cities.json) and trip geometry file.

The cache is a GeoJSON FeatureCollection of Point features whose properties
carry the display name, the optional local name and the ISO country code.
It is loaded once per run, only ever grows, and is written back atomically.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Dict, Iterable, List, Literal, Optional, Set, Union

from pydantic import BaseModel, Field, ValidationError

from ..config.logger_module import log_info, log_warning
from .places_errors import CacheParseError, CacheWriteError
from .places_model import CacheEntry, GeoPoint, TripGeometry
from .places_naming import canonicalize


class FeatureProperties(BaseModel):
    """Properties of a cache or trip feature; absent optionals are not written."""
    name: str
    localname: Optional[str] = None
    country: Optional[str] = None


class PointGeometry(BaseModel):
    type: Literal["Point"] = "Point"
    coordinates: List[float] = Field(min_length=2)


class PointFeature(BaseModel):
    type: Literal["Feature"] = "Feature"
    properties: FeatureProperties
    geometry: PointGeometry


class PointFeatureCollection(BaseModel):
    type: Literal["FeatureCollection"] = "FeatureCollection"
    features: List[PointFeature] = Field(default_factory=list)


class LineGeometry(BaseModel):
    type: Literal["LineString"] = "LineString"
    coordinates: List[List[float]] = Field(default_factory=list)


class LineFeature(BaseModel):
    type: Literal["Feature"] = "Feature"
    properties: FeatureProperties
    geometry: LineGeometry


class LineFeatureCollection(BaseModel):
    type: Literal["FeatureCollection"] = "FeatureCollection"
    features: List[LineFeature] = Field(default_factory=list)


def write_text_atomically(path: Union[str, Path], text: str) -> None:
    """
    Replace a file's contents in one step.

    The text goes to a temporary file in the target directory which is then
    renamed over the destination, so readers see either the old or the new
    file, never a partial one.

    Raises:
        OSError: On any filesystem failure (the destination is untouched)
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(text)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except OSError:
            pass
        raise


class PlaceCache:
    """
    In-memory view of the coordinate cache.

    Entries are keyed by the canonicalized display name, which is also the
    location identifier used by the configuration.
    """

    def __init__(self, entries: Optional[Iterable[CacheEntry]] = None):
        self._entries: Dict[str, CacheEntry] = {}
        for entry in entries or ():
            if entry.key in self._entries:
                raise CacheParseError(
                    f"Cache holds two entries for {entry.key} "
                    f"('{self._entries[entry.key].name}' and '{entry.name}')"
                )
            self._entries[entry.key] = entry

    @classmethod
    def load(cls, path: Union[str, Path]) -> "PlaceCache":
        """
        Load the cache, or start an empty one when the file does not exist.

        Raises:
            CacheParseError: If the file exists but cannot be parsed
        """
        path = Path(path)
        if not path.exists():
            log_info(f"No cache found at {path}, starting with an empty cache")
            return cls()

        try:
            with path.open("r", encoding="utf-8") as handle:
                raw = json.load(handle)
            collection = PointFeatureCollection.model_validate(raw)
        except OSError as e:
            raise CacheParseError(f"Cannot read cache {path}: {e}") from e
        except json.JSONDecodeError as e:
            raise CacheParseError(f"Invalid JSON in cache {path}: {e}") from e
        except ValidationError as e:
            raise CacheParseError(f"Unexpected cache structure in {path}: {e}") from e

        cache = cls.from_feature_collection(collection)
        log_info(f"Loaded {len(cache)} cached locations from {path}")
        return cache

    @classmethod
    def from_feature_collection(cls, collection: PointFeatureCollection) -> "PlaceCache":
        entries = []
        for feature in collection.features:
            props = feature.properties
            if not props.country:
                raise CacheParseError(f"Cached location '{props.name}' has no country code")
            lon, lat = feature.geometry.coordinates[:2]
            entries.append(CacheEntry(
                key=canonicalize(props.name),
                name=props.name,
                country_code=props.country,
                point=GeoPoint(longitude=lon, latitude=lat),
                local_name=props.localname,
            ))
        return cls(entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    @property
    def entries(self) -> List[CacheEntry]:
        return list(self._entries.values())

    def get(self, key: str) -> Optional[CacheEntry]:
        return self._entries.get(key)

    def point_for(self, key: str) -> Optional[GeoPoint]:
        entry = self._entries.get(key)
        return entry.point if entry is not None else None

    def codes(self) -> Set[str]:
        """ISO codes presently appearing in the cache."""
        return {entry.country_code for entry in self._entries.values()}

    def location_ids(self) -> Set[str]:
        return set(self._entries)

    def merge(self, entries: Iterable[CacheEntry]) -> int:
        """
        Add newly resolved entries.

        An entry whose key is already cached replaces the old one in place;
        nothing is ever removed.

        Returns:
            Number of entries added or replaced
        """
        changed = 0
        for entry in entries:
            previous = self._entries.get(entry.key)
            if previous is not None:
                log_warning(f"Replacing cached coordinates for {entry.key}")
            self._entries[entry.key] = entry
            changed += 1
        return changed

    def to_feature_collection(self) -> PointFeatureCollection:
        return PointFeatureCollection(features=[
            PointFeature(
                properties=FeatureProperties(
                    name=entry.name,
                    localname=entry.local_name,
                    country=entry.country_code,
                ),
                geometry=PointGeometry(coordinates=entry.point.as_list()),
            )
            for entry in self._entries.values()
        ])

    def to_json(self) -> str:
        return json.dumps(
            self.to_feature_collection().model_dump(exclude_none=True),
            ensure_ascii=False,
        )

    def persist(self, path: Union[str, Path]) -> None:
        """
        Write the cache atomically.

        Raises:
            CacheWriteError: If the file cannot be written (the old file survives)
        """
        try:
            write_text_atomically(path, self.to_json())
        except OSError as e:
            raise CacheWriteError(f"Failed to write cache {path}: {e}") from e
        log_info(f"Persisted {len(self)} cached locations to {path}")


def write_trip_geometries(geometries: List[TripGeometry], path: Union[str, Path]) -> None:
    """
    Write one LineString feature per trip.

    Raises:
        CacheWriteError: If the file cannot be written
    """
    collection = LineFeatureCollection(features=[
        LineFeature(
            properties=FeatureProperties(name=geometry.name),
            geometry=LineGeometry(coordinates=[p.as_list() for p in geometry.points]),
        )
        for geometry in geometries
    ])
    text = json.dumps(collection.model_dump(exclude_none=True), ensure_ascii=False)
    try:
        write_text_atomically(path, text)
    except OSError as e:
        raise CacheWriteError(f"Failed to write trip geometries {path}: {e}") from e
    log_info(f"Wrote {len(geometries)} trip geometries to {path}")
