from stockwise.config.settings import get_settings
from stockwise.tools.registry import build_tool_services


def test_settings_defaults(monkeypatch) -> None:
    for name in ("RECOMMENDATIONS_LIMIT", "DASHBOARD_RECOMMENDATIONS_LIMIT", "SAVINGS_AFFORDABILITY_THRESHOLD", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    settings = get_settings()
    assert settings.recommendations_limit == 10
    assert settings.dashboard_recommendations_limit == 3
    assert settings.savings_affordability_threshold == 50.0
    assert settings.log_level == "INFO"


def test_settings_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("RECOMMENDATIONS_LIMIT", "5")
    monkeypatch.setenv("DASHBOARD_RECOMMENDATIONS_LIMIT", "not-a-number")
    monkeypatch.setenv("SAVINGS_AFFORDABILITY_THRESHOLD", "35.5")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    settings = get_settings()
    assert settings.recommendations_limit == 5
    assert settings.dashboard_recommendations_limit == 3
    assert settings.savings_affordability_threshold == 35.5
    assert settings.log_level == "DEBUG"


def test_build_tool_services_applies_settings(monkeypatch) -> None:
    monkeypatch.setenv("RECOMMENDATIONS_LIMIT", "7")
    services = build_tool_services(get_settings())
    assert services.portfolio.recommendations_limit == 7
    assert services.portfolio.dashboard()["ok"] is True
