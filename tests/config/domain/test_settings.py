"""Tests for TOML settings and environment overlays."""

from decimal import Decimal

import pytest
from pydantic import ValidationError
from storefront.config import load_settings

CONFIG = """
[pricing]
tax_rate = "0.18"

[store]
adapter = "memory"

[[pickup_locations]]
id = 9
name = "Harbour"
address = "1 Dock Lane"

[production.store]
adapter = "http"
base_url = "https://api.example.com"
"""


@pytest.fixture()
def config_file(tmp_path):
    path = tmp_path / "storefront.toml"
    path.write_text(CONFIG, encoding="utf-8")
    return path


def test_bundled_defaults():
    settings = load_settings(env="development")
    assert settings.pricing.tax_rate == Decimal("0.10")
    assert settings.pricing.free_shipping_threshold == Decimal("500")
    assert settings.loyalty.currency_units_per_point == 10
    assert [loc.id for loc in settings.pickup_locations] == [1, 2, 3]


def test_test_overlay_uses_memory_session_cache():
    assert load_settings(env="test").session.cache == "memory"
    assert load_settings(env="development").session.cache == "file"


def test_overlay_is_merged_over_defaults(config_file):
    settings = load_settings(config_file, env="production")
    assert settings.store.adapter == "http"
    assert settings.store.base_url == "https://api.example.com"
    assert settings.pricing.tax_rate == Decimal("0.18")


def test_env_variables_select_file_and_overlay(config_file, monkeypatch):
    monkeypatch.setenv("STOREFRONT_CONFIG", str(config_file))
    monkeypatch.setenv("STOREFRONT_ENV", "production")
    assert load_settings().store.adapter == "http"


def test_pickup_location_lookup(config_file):
    settings = load_settings(config_file, env="test")
    assert settings.pickup_location(9).name == "Harbour"
    assert settings.pickup_location(1) is None


def test_out_of_range_value(tmp_path):
    path = tmp_path / "bad.toml"
    path.write_text('[pricing]\ntax_rate = "-1"\n', encoding="utf-8")
    with pytest.raises(ValidationError):
        load_settings(path, env="test")
