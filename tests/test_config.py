from pathlib import Path

import pytest

from tamkeen_cart.config import StorefrontConfig
from tamkeen_cart.exceptions import ConfigurationError
from tamkeen_cart.storefront import Storefront


def test_defaults():
    config = StorefrontConfig()
    assert config.api_base_url == "https://api.tamkeen.center"
    assert config.media_base_url == config.api_base_url
    assert config.checkout_scope == "separate"
    assert config.min_search_length == 2


def test_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("TAMKEEN_API_URL", "https://staging.example.test")
    monkeypatch.setenv("TAMKEEN_STORAGE_DIR", str(tmp_path))
    monkeypatch.setenv("TAMKEEN_TIMEOUT", "5")
    monkeypatch.setenv("TAMKEEN_CHECKOUT_SCOPE", "combined")
    monkeypatch.delenv("TAMKEEN_MEDIA_URL", raising=False)

    config = StorefrontConfig.from_env()
    assert config.api_base_url == "https://staging.example.test"
    assert config.media_base_url == "https://staging.example.test"
    assert config.storage_dir == Path(tmp_path)
    assert config.request_timeout == 5.0
    assert config.checkout_scope == "combined"


def test_invalid_env_value(monkeypatch):
    monkeypatch.setenv("TAMKEEN_CHECKOUT_SCOPE", "everything")
    with pytest.raises(ConfigurationError):
        StorefrontConfig.from_env()


def test_storefront_from_env(monkeypatch, tmp_path, shirt):
    monkeypatch.setenv("TAMKEEN_STORAGE_DIR", str(tmp_path))
    shop = Storefront.from_env()
    shop.cart.add(shirt)
    assert (tmp_path / "cart.json").exists()
