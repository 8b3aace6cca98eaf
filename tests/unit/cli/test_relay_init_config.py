"""Unit tests for httprelay init config generation."""

from __future__ import annotations

from pathlib import Path

import pytest

from httprelay.cli.init_config import init_config_command
from httprelay.config.loader import load_settings


def test_init_config_command_generates_yaml(tmp_path: Path) -> None:
    out = init_config_command(path=str(tmp_path))
    assert out.exists()
    text = out.read_text(encoding="utf-8")
    assert "processor:" in text
    assert "retry:" in text


def test_generated_config_loads(tmp_path: Path) -> None:
    out = init_config_command(path=str(tmp_path))
    settings = load_settings(out)
    assert settings.processor.url == "http://localhost:8080/greet"
    assert settings.properties["port"] == "8080"


def test_init_config_command_refuses_overwrite_without_force(tmp_path: Path) -> None:
    target = tmp_path / "httprelay.yaml"
    target.write_text("existing", encoding="utf-8")
    with pytest.raises(FileExistsError):
        init_config_command(path=str(tmp_path))


def test_init_config_command_overwrites_with_force(tmp_path: Path) -> None:
    target = tmp_path / "httprelay.yaml"
    target.write_text("existing", encoding="utf-8")
    init_config_command(path=str(tmp_path), force=True)
    assert "processor:" in target.read_text(encoding="utf-8")
