"""Configuration loading.

Settings come from ``storefront.toml`` (or the file named by
``STOREFRONT_CONFIG``). The table matching ``STOREFRONT_ENV`` is merged over
the defaults, so ``[test.session]`` overrides ``[session]`` under test.
"""

import os
import tomllib
from decimal import Decimal
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field

DEFAULT_CONFIG_PATH = Path(__file__).parent / "storefront.toml"
ENVIRONMENTS = ("development", "test", "staging", "production")


class PricingSettings(BaseModel):
    tax_rate: Decimal = Field(default=Decimal("0.10"), ge=0)
    shipping_fee: Decimal = Field(default=Decimal("50"), ge=0)
    free_shipping_threshold: Decimal = Field(default=Decimal("500"), ge=0)
    currency: str = "INR"


class LoyaltySettings(BaseModel):
    currency_units_per_point: int = Field(default=10, ge=1)
    award_retries: int = Field(default=3, ge=0)
    lock_timeout: float = Field(default=5.0, gt=0)


class CartSettings(BaseModel):
    enforce_stock: bool = True


class StoreSettings(BaseModel):
    adapter: Literal["memory", "http"] = "memory"
    base_url: str = "http://localhost:3001"
    timeout: float = Field(default=10.0, gt=0)


class SessionSettings(BaseModel):
    cache: Literal["memory", "file"] = "memory"
    cache_dir: str = ".storefront/sessions"


class PickupLocation(BaseModel):
    """A physical store where customers collect pickup orders."""

    id: int
    name: str
    address: str


class Settings(BaseModel):
    pricing: PricingSettings = Field(default_factory=PricingSettings)
    loyalty: LoyaltySettings = Field(default_factory=LoyaltySettings)
    cart: CartSettings = Field(default_factory=CartSettings)
    store: StoreSettings = Field(default_factory=StoreSettings)
    session: SessionSettings = Field(default_factory=SessionSettings)
    pickup_locations: list[PickupLocation] = Field(default_factory=list)

    def pickup_location(self, location_id: int) -> PickupLocation | None:
        return next((loc for loc in self.pickup_locations if loc.id == location_id), None)


def _deep_merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in overlay.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def current_env() -> str:
    return os.getenv("STOREFRONT_ENV", "development").lower()


def load_settings(path: str | Path | None = None, env: str | None = None) -> Settings:
    """Load settings from TOML and apply the environment overlay.

    Args:
        path: Config file. Defaults to ``STOREFRONT_CONFIG`` or the bundled file.
        env: Overlay table to apply. Defaults to ``STOREFRONT_ENV``.

    Raises:
        FileNotFoundError: If the config file does not exist.
        pydantic.ValidationError: If a setting is out of range.
    """
    path = Path(path or os.getenv("STOREFRONT_CONFIG") or DEFAULT_CONFIG_PATH)
    env = (env or current_env()).lower()

    with path.open("rb") as fh:
        raw = tomllib.load(fh)

    overlays = {name: raw.pop(name) for name in ENVIRONMENTS if name in raw}
    return Settings.model_validate(_deep_merge(raw, overlays.get(env, {})))


_settings: Settings | None = None


def get_settings() -> Settings:
    """Return the process-wide settings, loading them on first use."""
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def reset_settings() -> None:
    global _settings
    _settings = None
