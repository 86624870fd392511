"""Unit tests for asset map parsing, lookup and caching."""

from unittest.mock import MagicMock

import pytest

from access_request.services.asset_registry import (
    ASSET_MAP_ERROR_MESSAGE,
    NO_ASSETS_MESSAGE,
    AssetRegistry,
    AssetRegistryCache,
    describe_assets,
    normalize_reader_name,
    parse_asset_map,
)
from access_request.utils.exceptions import AssetMapError

ASSET_MAP = """
frontdoor:
  reader_name: front_reader
  permission_id: main_door
  category: doors
  name: Front Door
  description: Main entrance on Chapel St
laser:
  reader_name: laser_cutter
  category: tools
  display_name: Epilog Laser
  image_url: https://example.org/laser.jpg
bandsaw:
  permission_id: woodshop
  category: tools
101:
  reader_name: printer
broken: just a string
"""


class TestNormalizeReaderName:
    """Test suite for the reader suffix rule."""

    def test_appends_suffix(self):
        assert normalize_reader_name("lathe") == "lathereader"

    def test_keeps_existing_suffix(self):
        assert normalize_reader_name("front_reader") == "front_reader"

    def test_is_idempotent(self):
        once = normalize_reader_name("laser_cutter")
        assert normalize_reader_name(once) == once

    def test_suffix_check_is_case_sensitive(self):
        """'Reader' is not the suffix, so it is appended again."""
        assert normalize_reader_name("FrontReader") == "FrontReaderreader"


class TestParseAssetMap:
    """Test suite for YAML parsing."""

    def test_parses_entries(self):
        assets = parse_asset_map(ASSET_MAP)

        front = assets["frontdoor"]
        assert front.reader_name == "front_reader"
        assert front.permission_id == "main_door"
        assert front.category == "doors"
        assert front.display_name == "Front Door"
        assert front.description == "Main entrance on Chapel St"

        assert assets["laser"].display_name == "Epilog Laser"
        assert assets["laser"].image_url == "https://example.org/laser.jpg"

    def test_numeric_keys_become_strings(self):
        assets = parse_asset_map(ASSET_MAP)
        assert assets["101"].reader_name == "printer"

    def test_non_mapping_entries_are_skipped(self):
        assert "broken" not in parse_asset_map(ASSET_MAP)

    @pytest.mark.parametrize("source", ["", "   \n", "# only a comment\n"])
    def test_empty_documents(self, source):
        assert parse_asset_map(source) == {}

    def test_invalid_yaml_raises(self):
        with pytest.raises(AssetMapError):
            parse_asset_map("frontdoor: [unclosed")

    def test_top_level_list_raises(self):
        with pytest.raises(AssetMapError):
            parse_asset_map("- frontdoor\n- laser\n")


class TestAssetRegistry:
    """Test suite for resolve() and listing."""

    @pytest.fixture
    def registry(self):
        return AssetRegistry.from_yaml(ASSET_MAP)

    @pytest.mark.parametrize("asset_id", ["lathe", "drill_press", "cnc-1"])
    def test_unmapped_asset_defaults(self, registry, asset_id):
        resolved = registry.resolve(asset_id)
        assert resolved.reader_name == asset_id + "reader"
        assert resolved.permission_id == asset_id

    def test_unmapped_asset_already_suffixed(self, registry):
        resolved = registry.resolve("backdoorreader")
        assert resolved.reader_name == "backdoorreader"
        assert resolved.permission_id == "backdoorreader"

    def test_mapped_reader_with_suffix_is_unchanged(self, registry):
        resolved = registry.resolve("frontdoor")
        assert resolved.reader_name == "front_reader"
        assert resolved.permission_id == "main_door"

    def test_mapped_reader_without_suffix_is_normalized(self, registry):
        resolved = registry.resolve("laser")
        assert resolved.reader_name == "laser_cutterreader"
        # permission defaults to the asset id when the entry has none
        assert resolved.permission_id == "laser"

    def test_mapping_without_reader_falls_back_to_asset_id(self, registry):
        resolved = registry.resolve("bandsaw")
        assert resolved.reader_name == "bandsawreader"
        assert resolved.permission_id == "woodshop"

    def test_skipped_entry_resolves_with_defaults(self, registry):
        resolved = registry.resolve("broken")
        assert resolved.reader_name == "brokenreader"
        assert resolved.permission_id == "broken"

    def test_unparsable_map_gives_empty_registry(self):
        log = MagicMock()
        registry = AssetRegistry.from_yaml("frontdoor: [unclosed", log=log)

        assert len(registry) == 0
        assert registry.resolve("frontdoor").reader_name == "frontdoorreader"
        log.error.assert_called_once()
        assert log.error.call_args[0][0] == "asset_map_parse_failed"

    def test_list_assets_by_category(self, registry):
        tools = [a.asset_id for a in registry.list_assets("tools")]
        assert tools == ["laser", "bandsaw"]

    def test_list_all_assets(self, registry):
        assert [a.asset_id for a in registry.list_assets()] == ["frontdoor", "laser", "bandsaw", "101"]


class TestDescribeAssets:
    """Test suite for the asset listing helper."""

    def test_lists_assets(self):
        assets, message = describe_assets(ASSET_MAP, "doors")
        assert [a.asset_id for a in assets] == ["frontdoor"]
        assert message is None

    def test_empty_map_message(self):
        assets, message = describe_assets("")
        assert assets == []
        assert message == NO_ASSETS_MESSAGE

    def test_parse_error_message(self):
        assets, message = describe_assets("frontdoor: [unclosed", log=MagicMock())
        assert assets == []
        assert message == ASSET_MAP_ERROR_MESSAGE


class FakeClock:
    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now


class TestAssetRegistryCache:
    """Test suite for the TTL cache of parsed maps."""

    def test_disabled_cache_reparses_every_call(self):
        cache = AssetRegistryCache(ttl_seconds=0)
        assert cache.load(ASSET_MAP) is not cache.load(ASSET_MAP)

    def test_serves_cached_registry_within_ttl(self):
        clock = FakeClock()
        cache = AssetRegistryCache(ttl_seconds=30, clock=clock)

        first = cache.load(ASSET_MAP)
        clock.now = 29.9
        assert cache.load(ASSET_MAP) is first

    def test_never_serves_entry_older_than_ttl(self):
        clock = FakeClock()
        cache = AssetRegistryCache(ttl_seconds=30, clock=clock)

        first = cache.load(ASSET_MAP)
        clock.now = 30.0
        assert cache.load(ASSET_MAP) is not first

    def test_changed_map_invalidates_immediately(self):
        clock = FakeClock()
        cache = AssetRegistryCache(ttl_seconds=300, clock=clock)

        cache.load(ASSET_MAP)
        updated = cache.load("lathe:\n  reader_name: big_lathe\n")

        assert updated.resolve("lathe").reader_name == "big_lathereader"
        assert "frontdoor" not in updated
