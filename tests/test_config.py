"""Tests for phonebook.config -- XDG data dir and transport precedence."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from phonebook.config import get_data_dir, load_project_config, resolve_transport_config
from phonebook.exceptions import ConfigError


def _write_project(directory: Path, data: object) -> None:
    (directory / "phonebook.json").write_text(json.dumps(data), encoding="utf-8")


class TestDataDir:
    def test_xdg_data_home(self, isolated_env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("phonebook.config._is_xdg_platform", lambda: True)
        path = get_data_dir()
        assert path == isolated_env / "data" / "phonebook"
        assert path.is_dir()

    def test_non_xdg_fallback(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("phonebook.config._is_xdg_platform", lambda: False)
        monkeypatch.setattr("phonebook.config.Path.home", lambda: tmp_path)
        assert get_data_dir() == tmp_path / ".phonebook"


class TestProjectConfig:
    def test_missing_file(self, isolated_env: Path) -> None:
        assert load_project_config() is None

    def test_valid_file(self, isolated_env: Path) -> None:
        _write_project(isolated_env, {"transport": {"base_url": "https://p.example.com"}})
        config = load_project_config()
        assert config is not None
        assert config.transport.base_url == "https://p.example.com"

    def test_invalid_json(self, isolated_env: Path) -> None:
        (isolated_env / "phonebook.json").write_text("{nope", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid project config"):
            load_project_config()

    def test_invalid_shape(self, isolated_env: Path) -> None:
        _write_project(isolated_env, {"transport": {"timeout": "soon"}})
        with pytest.raises(ConfigError):
            load_project_config()


class TestResolveTransportConfig:
    def test_defaults(self, isolated_env: Path) -> None:
        config = resolve_transport_config()
        assert config.base_url is None
        assert config.timeout == 30
        assert config.verify_ssl is True
        assert config.headers == {}

    def test_project_file(self, isolated_env: Path) -> None:
        _write_project(
            isolated_env,
            {"transport": {"base_url": "https://p.example.com", "headers": {"A": "1"}}},
        )
        config = resolve_transport_config()
        assert config.base_url == "https://p.example.com"
        assert config.headers == {"A": "1"}

    def test_env_over_project(self, isolated_env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        _write_project(isolated_env, {"transport": {"base_url": "https://p.example.com"}})
        monkeypatch.setenv("PHONEBOOK_BASE_URL", "https://env.example.com")
        monkeypatch.setenv("PHONEBOOK_TIMEOUT", "2.5")
        monkeypatch.setenv("PHONEBOOK_VERIFY_SSL", "no")
        config = resolve_transport_config()
        assert config.base_url == "https://env.example.com"
        assert config.timeout == 2.5
        assert config.verify_ssl is False

    def test_cli_over_env(self, isolated_env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PHONEBOOK_BASE_URL", "https://env.example.com")
        config = resolve_transport_config(cli_base_url="https://cli.example.com", cli_timeout=1)
        assert config.base_url == "https://cli.example.com"
        assert config.timeout == 1

    def test_cli_headers_merged(self, isolated_env: Path) -> None:
        _write_project(isolated_env, {"transport": {"headers": {"A": "1", "B": "1"}}})
        config = resolve_transport_config(cli_headers={"B": "2"})
        assert config.headers == {"A": "1", "B": "2"}

    @pytest.mark.parametrize(
        ("var", "value"),
        [("PHONEBOOK_TIMEOUT", "fast"), ("PHONEBOOK_VERIFY_SSL", "maybe")],
    )
    def test_bad_env_values(
        self, isolated_env: Path, monkeypatch: pytest.MonkeyPatch, var: str, value: str
    ) -> None:
        monkeypatch.setenv(var, value)
        with pytest.raises(ConfigError, match=var):
            resolve_transport_config()
