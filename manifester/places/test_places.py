"""
Test suite for the places module.

Covers canonicalization, configuration loading, the coordinate cache with
its atomic persistence, and the pure diff/plan functions.
"""

import json
from unittest.mock import patch

import pytest

from .places_cache import PlaceCache, write_text_atomically, write_trip_geometries
from .places_config import (
    CountryCodeTable,
    PlaceRegistry,
    PlacesDocument,
    load_country_codes,
    load_place_config,
)
from .places_errors import (
    CacheParseError,
    CacheWriteError,
    ConfigParseError,
    IdentifierMismatch,
    MissingCoordinate,
)
from .places_model import CacheEntry, GeoPoint
from .places_naming import (
    CITY_DISAMBIGUATIONS,
    canonicalize,
    country_display_name,
    location_display_name,
    trip_identifier,
)
from .places_plan import (
    CacheDiff,
    ResolutionPolicy,
    build_trip_geometries,
    compute_diff,
    plan_resolutions,
)


def _entry(key, name, code, lon, lat, local=None):
    return CacheEntry(key=key, name=name, country_code=code,
                      point=GeoPoint(lon, lat), local_name=local)


KYOTO = _entry("Kyoto", "Kyoto", "JPN", 135.7681489, 35.0116363, "京都")
OSAKA = _entry("Osaka", "Osaka", "JPN", 135.5022535, 34.6937249)


# ==================== NAMING ====================

class TestCanonicalize:
    """Display name -> cache key."""

    def test_spaces_removed(self):
        assert canonicalize("Ho Chi Minh City") == "HoChiMinhCity"
        assert canonicalize("Gold Coast") == "GoldCoast"

    def test_underscores_removed(self):
        """Gallery directories use underscores in place of spaces."""
        assert canonicalize("Saint_Petersburg") == "SaintPetersburg"

    def test_city_collisions_are_suffixed(self):
        assert canonicalize("Singapore") == "SingaporeCity"
        assert canonicalize("Hong Kong") == "HongKongCity"
        assert canonicalize("HongKong") == "HongKongCity"

    def test_other_names_unaffected(self):
        assert canonicalize("Tokyo") == "Tokyo"
        assert canonicalize("Singapore Zoo") == "SingaporeZoo"

    def test_deterministic(self):
        assert canonicalize("Bells Beach") == canonicalize("Bells Beach")

    def test_exceptions_are_data(self):
        assert CITY_DISAMBIGUATIONS == {
            "Singapore": "SingaporeCity",
            "HongKong": "HongKongCity",
        }


class TestDisplayNames:
    """Identifier -> display name."""

    def test_country_display_name(self):
        assert country_display_name("CzechRepublic") == "Czech Republic"
        assert country_display_name("Japan") == "Japan"

    def test_location_display_name_undoes_collision_suffix(self):
        assert location_display_name("SingaporeCity") == "Singapore"
        assert location_display_name("HongKongCity") == "Hong Kong"

    def test_location_display_name_keeps_real_city_suffix(self):
        assert location_display_name("HoChiMinhCity") == "Ho Chi Minh City"

    def test_round_trip(self):
        for identifier in ["SingaporeCity", "HongKongCity", "HoChiMinhCity", "TheTwelveApostles"]:
            assert canonicalize(location_display_name(identifier)) == identifier

    def test_trip_identifier(self):
        assert trip_identifier("Japan 2018/19") == "Japan201819"


# ==================== CONFIG ====================

class TestLoadPlaceConfig:
    """YAML configuration loading."""

    def test_load_valid(self, write_yaml, japan_config):
        document = load_place_config(write_yaml(japan_config))

        assert list(document.places) == ["Japan"]
        assert document.places["Japan"]["Kyoto"] == "京都"
        assert document.places["Japan"]["Osaka"] is None
        assert document.trips[0].cities == ["Kyoto", "Osaka"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigParseError, match="Cannot read configuration"):
            load_place_config(tmp_path / "absent.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "odyssey.yaml"
        path.write_text("places: [unclosed", encoding="utf-8")
        with pytest.raises(ConfigParseError, match="Invalid YAML"):
            load_place_config(path)

    def test_wrong_shape(self, write_yaml):
        with pytest.raises(ConfigParseError, match="Invalid configuration"):
            load_place_config(write_yaml({"trips": []}))

    def test_empty_file(self, tmp_path):
        path = tmp_path / "odyssey.yaml"
        path.write_text("", encoding="utf-8")
        with pytest.raises(ConfigParseError, match="is empty"):
            load_place_config(path)


class TestCountryCodes:
    """Country-code table."""

    def test_load(self, country_codes_file):
        table = load_country_codes(country_codes_file)

        assert table.code_for("United Kingdom") == "GBR"
        assert table.identifier_for_code("GBR") == "UnitedKingdom"
        assert table.identifier_for_code("XXX") is None

    def test_load_malformed(self, tmp_path):
        path = tmp_path / "cca3.json"
        path.write_text(json.dumps([{"name": "Japan"}]), encoding="utf-8")
        with pytest.raises(ConfigParseError, match="Invalid country code table"):
            load_country_codes(path)


class TestPlaceRegistry:
    """Registry construction and identifier invariants."""

    def test_from_config(self, make_registry, japan_config):
        registry = make_registry(japan_config)

        japan = registry.country("Japan")
        assert japan.code == "JPN"
        assert japan.local_name == "日本"
        assert list(registry.locations) == ["Kyoto", "Osaka"]
        assert "Local" not in registry.locations
        assert registry.location("Kyoto").local_name == "京都"
        assert registry.trips[0].identifier == "Japan2018"

    def test_countries_sorted(self, make_registry, japan_config):
        japan_config["places"]["UnitedKingdom"] = {"London": None}
        japan_config["places"] = dict(reversed(list(japan_config["places"].items())))

        registry = make_registry(japan_config)

        assert list(registry.countries) == ["Japan", "UnitedKingdom"]

    def test_unknown_country(self, make_registry, japan_config):
        japan_config["places"]["Atlantis"] = {"Poseidonia": None}
        with pytest.raises(IdentifierMismatch, match="Atlantis does not exist"):
            make_registry(japan_config)

    def test_duplicate_location_across_countries(self, make_registry, japan_config):
        japan_config["places"]["Vietnam"] = {"Kyoto": None}
        with pytest.raises(ConfigParseError, match="declared under both"):
            make_registry(japan_config)

    def test_location_must_round_trip(self, make_registry, japan_config):
        japan_config["places"]["Singapore"] = {"Singapore": None}
        with pytest.raises(IdentifierMismatch, match="SingaporeCity"):
            make_registry(japan_config)

    def test_disambiguated_location_accepted(self, make_registry, japan_config):
        japan_config["places"]["Singapore"] = {"SingaporeCity": None}
        registry = make_registry(japan_config)
        assert registry.location("SingaporeCity").name == "Singapore"

    def test_invalid_identifier(self, make_registry, japan_config):
        japan_config["places"]["Japan"]["kyoto-west"] = None
        with pytest.raises(ConfigParseError, match="not a valid location identifier"):
            make_registry(japan_config)

    def test_duplicate_trip_identifier(self, make_registry, japan_config):
        trip = dict(japan_config["trips"][0], description="Japan/2018")
        japan_config["trips"].append(trip)
        with pytest.raises(ConfigParseError, match="share the identifier Japan2018"):
            make_registry(japan_config)

    def test_empty_trip_domain(self, make_registry, japan_config):
        japan_config["trips"] = []
        with pytest.raises(ConfigParseError, match="no trips"):
            make_registry(japan_config)

    def test_trip_named_like_country(self, make_registry, japan_config):
        """Test that a trip cannot reuse a country identifier as its constructor."""
        japan_config["places"]["Singapore"] = {"SingaporeCity": None, "Sentosa": None}
        japan_config["trips"].append({
            "name": "Lion City", "description": "Singapore",
            "cities": ["SingaporeCity", "Sentosa"], "dates": ["2019/02"],
        })
        with pytest.raises(IdentifierMismatch, match="Trip Singapore clashes with Country Singapore"):
            make_registry(japan_config)

    def test_location_named_like_country(self, make_registry, japan_config):
        japan_config["places"]["Vietnam"] = {"Japan": None}
        with pytest.raises(IdentifierMismatch, match="Location Japan clashes with Country Japan"):
            make_registry(japan_config)

    def test_trip_named_like_location(self, make_registry, japan_config):
        japan_config["trips"][0]["description"] = "Kyoto"
        with pytest.raises(IdentifierMismatch, match="Trip Kyoto clashes with Location Kyoto"):
            make_registry(japan_config)

    @pytest.mark.parametrize("reserved", ["May", "Date", "Image", "Nothing"])
    def test_reserved_names_rejected(self, make_registry, japan_config, reserved):
        japan_config["places"]["Japan"][reserved] = None
        with pytest.raises(IdentifierMismatch, match="reserved"):
            make_registry(japan_config)

    def test_reserved_trip_name_rejected(self, make_registry, japan_config):
        japan_config["trips"][0]["description"] = "Trip Information"
        with pytest.raises(IdentifierMismatch, match="TripInformation"):
            make_registry(japan_config)

    def test_sorted_locations(self, make_registry, japan_config):
        japan_config["places"]["Japan"]["Hiroshima"] = None
        registry = make_registry(japan_config)
        assert [loc.identifier for loc in registry.sorted_locations()] == [
            "Hiroshima", "Kyoto", "Osaka"
        ]


# ==================== CACHE ====================

class TestPlaceCache:
    """Coordinate cache loading, merging and persistence."""

    def test_load_missing_file_is_empty(self, tmp_path):
        cache = PlaceCache.load(tmp_path / "cities.json")
        assert len(cache) == 0

    def test_persist_and_load(self, tmp_path):
        path = tmp_path / "world" / "cities.json"
        PlaceCache([KYOTO, OSAKA]).persist(path)

        raw = json.loads(path.read_text(encoding="utf-8"))
        assert raw["type"] == "FeatureCollection"
        kyoto_feature = raw["features"][0]
        assert kyoto_feature["properties"] == {"name": "Kyoto", "localname": "京都", "country": "JPN"}
        assert kyoto_feature["geometry"] == {"type": "Point", "coordinates": [135.7681489, 35.0116363]}
        # Absent local names are omitted, not written as null
        assert "localname" not in raw["features"][1]["properties"]

        loaded = PlaceCache.load(path)
        assert loaded.get("Kyoto") == KYOTO
        assert loaded.point_for("Osaka") == OSAKA.point
        assert loaded.codes() == {"JPN"}

    def test_keys_are_canonicalized_names(self, tmp_path):
        path = tmp_path / "cities.json"
        path.write_text(json.dumps({
            "type": "FeatureCollection",
            "features": [{
                "type": "Feature",
                "properties": {"name": "Hong Kong", "country": "HKG"},
                "geometry": {"type": "Point", "coordinates": [114.16, 22.28]},
            }],
        }), encoding="utf-8")

        cache = PlaceCache.load(path)

        assert cache.location_ids() == {"HongKongCity"}
        assert cache.get("HongKongCity").name == "Hong Kong"

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "cities.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(CacheParseError, match="Invalid JSON"):
            PlaceCache.load(path)

    def test_wrong_structure(self, tmp_path):
        path = tmp_path / "cities.json"
        path.write_text(json.dumps({"type": "FeatureCollection", "features": [{"type": "Feature"}]}))
        with pytest.raises(CacheParseError, match="Unexpected cache structure"):
            PlaceCache.load(path)

    def test_missing_country_code(self, tmp_path):
        path = tmp_path / "cities.json"
        path.write_text(json.dumps({
            "type": "FeatureCollection",
            "features": [{
                "type": "Feature",
                "properties": {"name": "Kyoto"},
                "geometry": {"type": "Point", "coordinates": [135.7, 35.0]},
            }],
        }))
        with pytest.raises(CacheParseError, match="no country code"):
            PlaceCache.load(path)

    def test_duplicate_keys_rejected(self):
        with pytest.raises(CacheParseError, match="two entries for Kyoto"):
            PlaceCache([KYOTO, KYOTO])

    def test_merge_only_grows(self):
        cache = PlaceCache([KYOTO])
        before = cache.location_ids()

        changed = cache.merge([OSAKA])

        assert changed == 1
        assert cache.location_ids() >= before
        assert cache.location_ids() == {"Kyoto", "Osaka"}

    def test_merge_replaces_same_key(self):
        cache = PlaceCache([KYOTO])
        moved = _entry("Kyoto", "Kyoto", "JPN", 1.0, 2.0)

        assert cache.merge([moved]) == 1
        assert len(cache) == 1
        assert cache.point_for("Kyoto") == GeoPoint(1.0, 2.0)

    def test_failed_write_leaves_file_untouched(self, tmp_path):
        path = tmp_path / "cities.json"
        PlaceCache([KYOTO]).persist(path)
        original = path.read_bytes()

        with patch("manifester.places.places_cache.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(CacheWriteError, match="disk full"):
                PlaceCache([KYOTO, OSAKA]).persist(path)

        assert path.read_bytes() == original
        assert list(tmp_path.iterdir()) == [path]


class TestWriteHelpers:
    """Atomic text writes and trip geometry output."""

    def test_write_text_atomically_creates_parents(self, tmp_path):
        path = tmp_path / "a" / "b" / "out.txt"
        write_text_atomically(path, "hello")
        assert path.read_text(encoding="utf-8") == "hello"

    def test_write_trip_geometries(self, tmp_path, make_registry, japan_config):
        registry = make_registry(japan_config)
        geometries = build_trip_geometries(registry, PlaceCache([KYOTO, OSAKA]))
        path = tmp_path / "trips.json"

        write_trip_geometries(geometries, path)

        raw = json.loads(path.read_text(encoding="utf-8"))
        assert len(raw["features"]) == 1
        feature = raw["features"][0]
        assert feature["properties"] == {"name": "Kansai"}
        assert feature["geometry"]["type"] == "LineString"
        assert feature["geometry"]["coordinates"] == [
            [135.7681489, 35.0116363],
            [135.5022535, 34.6937249],
        ]


# ==================== DIFF / PLAN ====================

class TestComputeDiff:
    """Pure diff of configuration against cache."""

    def test_empty_cache(self, make_registry, japan_config, country_codes):
        registry = make_registry(japan_config)

        diff = compute_diff(PlaceCache(), registry, country_codes)

        assert diff.new_countries == ["Japan"]
        assert diff.new_locations == ["Kyoto", "Osaka"]
        assert not diff.is_empty()

    def test_fully_cached(self, make_registry, japan_config, country_codes):
        registry = make_registry(japan_config)

        diff = compute_diff(PlaceCache([KYOTO, OSAKA]), registry, country_codes)

        assert diff.is_empty()

    def test_new_location_under_known_country(self, make_registry, japan_config, country_codes):
        japan_config["places"]["Japan"]["Tokyo"] = None
        registry = make_registry(japan_config)

        diff = compute_diff(PlaceCache([KYOTO, OSAKA]), registry, country_codes)

        assert diff.new_countries == []
        assert diff.new_locations == ["Tokyo"]

    def test_local_never_in_diff(self, make_registry, japan_config, country_codes):
        registry = make_registry(japan_config)
        diff = compute_diff(PlaceCache(), registry, country_codes)
        assert "Local" not in diff.new_locations

    def test_country_matched_through_code_table(self, make_registry, country_codes):
        registry = make_registry({
            "places": {"UnitedKingdom": {"London": None}},
            "trips": [{"name": "UK", "description": "UK", "cities": ["London"], "dates": []}],
        })
        london = _entry("London", "London", "GBR", -0.1276, 51.5072)

        diff = compute_diff(PlaceCache([london]), registry, country_codes)

        assert diff.is_empty()


class TestPlanResolutions:
    """Lookup planning under both policies."""

    def test_queries(self, make_registry, japan_config):
        registry = make_registry(japan_config)
        diff = CacheDiff(new_countries=["Japan"], new_locations=["Kyoto", "Osaka"])

        plan = plan_resolutions(diff, registry)

        assert [r.query for r in plan] == ["Kyoto, Japan", "Osaka, Japan"]
        assert all(r.country_id == "Japan" for r in plan)

    def test_query_uses_display_names(self, make_registry):
        registry = make_registry({
            "places": {"HongKong": {"HongKongCity": None}},
            "trips": [{"name": "HK", "description": "HK", "cities": ["HongKongCity"], "dates": []}],
        })
        diff = CacheDiff(new_countries=["HongKong"], new_locations=["HongKongCity"])

        plan = plan_resolutions(diff, registry)

        assert plan[0].query == "Hong Kong, Hong Kong"

    def test_new_locations_policy_ignores_cached_members_of_new_country(self, make_registry, japan_config):
        registry = make_registry(japan_config)
        diff = CacheDiff(new_countries=["Japan"], new_locations=["Osaka"])

        plan = plan_resolutions(diff, registry, ResolutionPolicy.NEW_LOCATIONS)

        assert [r.location_id for r in plan] == ["Osaka"]

    def test_strict_policy_includes_every_location_of_new_country(self, make_registry, japan_config):
        registry = make_registry(japan_config)
        diff = CacheDiff(new_countries=["Japan"], new_locations=["Osaka"])

        plan = plan_resolutions(diff, registry, ResolutionPolicy.STRICT)

        assert [r.location_id for r in plan] == ["Kyoto", "Osaka"]

    def test_empty_diff_plans_nothing(self, make_registry, japan_config):
        registry = make_registry(japan_config)
        assert plan_resolutions(CacheDiff(), registry, ResolutionPolicy.STRICT) == []


class TestBuildTripGeometries:
    """Trip line reconstruction."""

    def test_ordered_points(self, make_registry, japan_config):
        japan_config["trips"][0]["cities"] = ["Osaka", "Kyoto", "Osaka"]
        registry = make_registry(japan_config)

        geometries = build_trip_geometries(registry, PlaceCache([KYOTO, OSAKA]))

        assert geometries[0].trip_id == "Japan2018"
        assert geometries[0].points == [OSAKA.point, KYOTO.point, OSAKA.point]

    def test_unconfigured_location(self, make_registry, japan_config):
        japan_config["trips"][0]["cities"] = ["Kyoto", "Nara"]
        registry = make_registry(japan_config)

        with pytest.raises(MissingCoordinate, match="Nara"):
            build_trip_geometries(registry, PlaceCache([KYOTO, OSAKA]))

    def test_unresolved_location(self, make_registry, japan_config):
        registry = make_registry(japan_config)

        with pytest.raises(MissingCoordinate, match="Osaka"):
            build_trip_geometries(registry, PlaceCache([KYOTO]))
