"""Unit tests for YAMLConfigLoader and load_settings."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from httprelay.config.loader import ConfigLoadError, YAMLConfigLoader, load_settings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in list(os.environ):
        if key.startswith("HTTPRELAY_"):
            monkeypatch.delenv(key, raising=False)


def test_resolve_path_uses_env_first(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("HTTPRELAY_CONFIG", "/tmp/from-env.yaml")
    resolved = YAMLConfigLoader.resolve_path("/tmp/from-cli.yaml")
    assert str(resolved).endswith("from-env.yaml")


def test_resolve_path_uses_cli_when_env_missing() -> None:
    resolved = YAMLConfigLoader.resolve_path("/tmp/from-cli.yaml")
    assert str(resolved).endswith("from-cli.yaml")


def test_resolve_path_defaults_to_cwd(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)
    assert YAMLConfigLoader.resolve_path() == tmp_path / "httprelay.yaml"


def test_load_dict_missing_file_returns_empty(tmp_path: Path) -> None:
    assert YAMLConfigLoader.load_dict(tmp_path / "missing.yaml") == {}


def test_load_dict_yaml_error_has_location(tmp_path: Path) -> None:
    target = tmp_path / "httprelay.yaml"
    target.write_text("processor:\n  url: [\n", encoding="utf-8")
    with pytest.raises(ConfigLoadError) as exc_info:
        YAMLConfigLoader.load_dict(target)
    assert "httprelay.yaml:" in str(exc_info.value)


def test_load_dict_non_mapping_root_raises(tmp_path: Path) -> None:
    target = tmp_path / "httprelay.yaml"
    target.write_text("- invalid\n- root\n", encoding="utf-8")
    with pytest.raises(ConfigLoadError, match="root must be mapping"):
        YAMLConfigLoader.load_dict(target)


def test_load_settings_accepts_camel_case_keys(tmp_path: Path) -> None:
    target = tmp_path / "httprelay.yaml"
    target.write_text(
        "processor:\n"
        "  urlExpr: \"'http://localhost:' + env['port'] + '/' + payload\"\n"
        "  httpMethod: post\n"
        "  expectedResponseType: json\n"
        "  retry:\n"
        "    enabled: true\n"
        "    maxAttempts: 4\n"
        "properties:\n"
        "  port: 8080\n",
        encoding="utf-8",
    )
    settings = load_settings(target)

    assert settings.processor.url_expr == "'http://localhost:' + env['port'] + '/' + payload"
    assert settings.processor.http_method == "POST"
    assert settings.processor.expected_response_type.value == "json"
    assert settings.processor.retry.max_attempts == 4
    assert settings.properties == {"port": "8080"}


def test_load_settings_replaces_env_placeholders(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("TARGET_HOST", "svc.local")
    target = tmp_path / "httprelay.yaml"
    target.write_text("processor:\n  url: http://${TARGET_HOST}/greet\n", encoding="utf-8")

    settings = load_settings(target)

    assert settings.processor.url == "http://svc.local/greet"


def test_env_overrides_win_over_yaml(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    target = tmp_path / "httprelay.yaml"
    target.write_text(
        "processor:\n  url: http://svc.local/greet\n  retry:\n    max_attempts: 3\nchannel:\n  concurrency: 2\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("HTTPRELAY_PROCESSOR__RETRY__MAX_ATTEMPTS", "5")
    monkeypatch.setenv("HTTPRELAY_CHANNEL__CONCURRENCY", "8")
    monkeypatch.setenv("HTTPRELAY_PROPERTIES__PORT", "9090")

    settings = load_settings(target)

    assert settings.processor.retry.max_attempts == 5
    assert settings.channel.concurrency == 8
    assert settings.properties["port"] == "9090"


def test_explicit_overrides_win_over_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    target = tmp_path / "httprelay.yaml"
    target.write_text("processor:\n  url: http://svc.local/greet\n", encoding="utf-8")
    monkeypatch.setenv("HTTPRELAY_LOG_LEVEL", "DEBUG")

    settings = load_settings(target, overrides={"log_level": "ERROR", "processor": {"timeout_seconds": 2}})

    assert settings.log_level == "ERROR"
    assert settings.processor.timeout_seconds == 2
    assert settings.processor.url == "http://svc.local/greet"


def test_property_env_overrides_are_kept_verbatim(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    target = tmp_path / "httprelay.yaml"
    target.write_text("processor:\n  url: http://svc.local/greet\n", encoding="utf-8")
    monkeypatch.setenv("HTTPRELAY_PROPERTIES__VERSION", "1.10")
    monkeypatch.setenv("HTTPRELAY_PROPERTIES__ENABLED", "true")
    monkeypatch.setenv("HTTPRELAY_PROCESSOR__TIMEOUT_SECONDS", "2.5")

    settings = load_settings(target)

    assert settings.properties == {"version": "1.10", "enabled": "true"}
    assert settings.processor.timeout_seconds == 2.5
