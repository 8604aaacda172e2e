"""Tests for the persisted config record."""

import json
from pathlib import Path

import pytest

from zoho_mail.config.store import DEFAULT_USER_ID, REGIONS, ConfigStore, ZohoConfig, validate_region
from zoho_mail.errors import ValidationError


@pytest.fixture
def store(tmp_path: Path) -> ConfigStore:
    return ConfigStore(tmp_path / "nested" / "config.json")


class TestGet:
    def test_missing_file_gives_defaults(self, store: ConfigStore) -> None:
        assert store.get() == ZohoConfig()
        assert store.get().default_folder == "Inbox"

    def test_corrupt_file_gives_defaults(self, store: ConfigStore) -> None:
        store.path.parent.mkdir(parents=True)
        store.path.write_text("{not json")
        assert store.get() == ZohoConfig()

    def test_non_object_gives_defaults(self, store: ConfigStore) -> None:
        store.path.parent.mkdir(parents=True)
        store.path.write_text("[1, 2]")
        assert store.get() == ZohoConfig()

    def test_partial_file_fills_missing_fields(self, store: ConfigStore) -> None:
        store.path.parent.mkdir(parents=True)
        store.path.write_text(json.dumps({"accountId": "123", "region": 7}))
        config = store.get()
        assert config.account_id == "123"
        assert config.region == "zoho.com"


class TestSet:
    def test_merges_and_persists_camel_case(self, store: ConfigStore) -> None:
        store.set(user_id="u1")
        store.set(account_id="123", region="zoho.eu")
        on_disk = json.loads(store.path.read_text())
        assert on_disk == {"region": "zoho.eu", "accountId": "123", "userId": "u1", "defaultFolder": "Inbox"}
        assert store.get().base_url == "https://mail.zoho.eu/api"

    def test_invalid_region_leaves_file_untouched(self, store: ConfigStore) -> None:
        store.set(region="zoho.in")
        with pytest.raises(ValidationError, match="Valid options"):
            store.set(region="zoho.mars")
        assert store.get().region == "zoho.in"

    @pytest.mark.parametrize("value", ["", "   "])
    def test_blank_ids_rejected(self, store: ConfigStore, value: str) -> None:
        with pytest.raises(ValidationError):
            store.set(account_id=value)
        assert not store.path.exists()

    def test_ids_are_stripped(self, store: ConfigStore) -> None:
        assert store.set(user_id="  me ").user_id == "me"


class TestClearAndHelpers:
    def test_clear_resets_to_defaults(self, store: ConfigStore) -> None:
        store.set(account_id="123", user_id="u1")
        assert store.is_configured()
        store.clear()
        assert store.get() == ZohoConfig()
        assert not store.is_configured()

    def test_clear_without_file(self, store: ConfigStore) -> None:
        store.clear()

    def test_user_id_or_default(self, store: ConfigStore) -> None:
        assert store.user_id_or_default() == DEFAULT_USER_ID
        store.set(user_id="u1")
        assert store.user_id_or_default() == "u1"


class TestRegions:
    @pytest.mark.parametrize("region", REGIONS)
    def test_known_regions(self, region: str) -> None:
        assert validate_region(region) == region
        assert ZohoConfig(region=region).base_url == f"https://mail.{region}/api"
