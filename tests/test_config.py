from mantle_context.config import Settings, get_settings


def test_defaults():
    settings = Settings()
    assert settings.NETWORK == "Mantle"
    assert settings.network_slug() == "mantle"
    assert settings.HTTP_TIMEOUT_SECONDS == 10.0
    assert settings.TRACKED_STABLECOINS == {"USDT": 1, "USDC": 2}


def test_price_key():
    assert Settings().price_key(" 0xabc ") == "mantle:0xabc"


def test_env_override(monkeypatch):
    monkeypatch.setenv("NETWORK", "Arbitrum")
    monkeypatch.setenv("TRACKED_STABLECOINS", '{"DAI": 5}')
    get_settings.cache_clear()

    settings = get_settings()

    assert settings.network_slug() == "arbitrum"
    assert settings.TRACKED_STABLECOINS == {"DAI": 5}
