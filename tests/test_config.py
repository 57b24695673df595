from __future__ import annotations

from pansou.gateway.config import DEFAULT_TEMPLATES_DIR, GatewaySettings, get_settings


def test_settings_read_environment(monkeypatch) -> None:
    monkeypatch.setenv("TOKEN", "  s3cret ")
    monkeypatch.setenv("CHANNELS", " tgsearchers3, ,yunpanx,")
    monkeypatch.setenv("ASYNC_PLUGIN_ENABLED", "false")
    monkeypatch.setenv("IMAGE_ALLOWED_DOMAINS", "Douban.com, DOUBANIO.COM")
    monkeypatch.setenv("UPSTREAM_TIMEOUT", "3.5")

    settings = GatewaySettings()

    assert settings.api_token == "s3cret"
    assert settings.default_channels == ["tgsearchers3", "yunpanx"]
    assert settings.async_plugin_enabled is False
    assert settings.image_allowed_domains == ["douban.com", "doubanio.com"]
    assert settings.upstream_timeout == 3.5


def test_settings_defaults(monkeypatch) -> None:
    for name in ("TOKEN", "CHANNELS", "ASYNC_PLUGIN_ENABLED", "TEMPLATES_DIR", "DOUBAN_BASE_URL"):
        monkeypatch.delenv(name, raising=False)

    settings = GatewaySettings()

    assert settings.api_token == ""
    assert settings.default_channels == ["tgsearchers3"]
    assert settings.async_plugin_enabled is True
    assert settings.douban_base_url == "https://movie.douban.com"
    assert settings.templates_dir == DEFAULT_TEMPLATES_DIR


def test_get_settings_is_cached(monkeypatch) -> None:
    get_settings.cache_clear()
    monkeypatch.setenv("TOKEN", "first")
    first = get_settings()
    monkeypatch.setenv("TOKEN", "second")
    try:
        assert get_settings() is first
        assert get_settings().api_token == "first"
    finally:
        get_settings.cache_clear()
