"""Tests for the command-line interface."""

import pytest
from typer.testing import CliRunner

from page_clipper import cli
from page_clipper.config import AppConfig
from page_clipper.credentials import Credentials, MemoryCredentialStore

runner = CliRunner()


@pytest.fixture
def credential_store(monkeypatch) -> MemoryCredentialStore:
    store = MemoryCredentialStore()
    monkeypatch.setattr(cli, "KeyringCredentialStore", lambda: store)
    answers = iter(["tok", "space-1", "key"])
    monkeypatch.setattr(cli.Prompt, "ask", lambda *args, **kwargs: next(answers))
    return store


def test_configure_saves_credentials(credential_store, tmp_path):
    config_path = tmp_path / "config.toml"

    result = runner.invoke(cli.app, ["configure", "--config", str(config_path)])

    assert result.exit_code == 0, result.output
    assert Credentials.load(credential_store).is_valid
    assert not config_path.exists()


def test_configure_saves_guidance_to_config(credential_store, tmp_path):
    config_path = tmp_path / "page-clipper" / "config.toml"

    result = runner.invoke(
        cli.app, ["configure", "--guidance", "Prefer short titles", "--config", str(config_path)]
    )

    assert result.exit_code == 0, result.output
    assert AppConfig.from_toml(config_path).user_guidance == "Prefer short titles"


def test_configure_keeps_existing_settings(credential_store, tmp_path):
    config_path = tmp_path / "config.toml"
    config_path.write_text("[retry]\nmax_attempts = 5\n")

    result = runner.invoke(cli.app, ["configure", "-g", "Be brief", "-c", str(config_path)])

    assert result.exit_code == 0, result.output
    config = AppConfig.from_toml(config_path)
    assert config.retry.max_attempts == 5
    assert config.user_guidance == "Be brief"
