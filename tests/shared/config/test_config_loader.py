# -*- coding: utf-8 -*-
import pytest

from app.shared.config.config_loader import get_settings
from app.shared.config.settings_dev import DevSettings
from app.shared.config.settings_prod import ProdSettings
from app.shared.config.settings_testing import EnvTestingSettings


def test_loader_returns_dev_by_default(monkeypatch):
    monkeypatch.delenv("PYTHON_ENV", raising=False)
    get_settings.cache_clear()
    s = get_settings()
    assert isinstance(s, DevSettings)
    assert s.is_dev is True
    assert s.python_env == "development"


def test_loader_selects_test(monkeypatch):
    monkeypatch.setenv("PYTHON_ENV", "test")
    get_settings.cache_clear()
    s = get_settings()
    assert isinstance(s, EnvTestingSettings)
    assert s.is_test is True


def test_loader_selects_prod(monkeypatch):
    monkeypatch.setenv("PYTHON_ENV", "production")
    monkeypatch.setenv("JWT_SECRET_KEY", "X" * 40)
    get_settings.cache_clear()
    s = get_settings()
    assert isinstance(s, ProdSettings)
    assert s.is_prod is True


def test_loader_caches_singleton():
    get_settings.cache_clear()
    assert get_settings() is get_settings()


def test_prod_requires_jwt_secret(monkeypatch):
    monkeypatch.setenv("PYTHON_ENV", "production")
    get_settings.cache_clear()
    with pytest.raises(ValueError) as ei:
        get_settings()
    assert "JWT_SECRET_KEY" in str(ei.value)
# Fin del archivo backend/tests/shared/config/test_config_loader.py
