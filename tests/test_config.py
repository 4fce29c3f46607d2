"""Tests for config loading (YAML + env substitution)."""

from pathlib import Path

import pytest

from servicehooks.config import AppConfig, load_config


def test_missing_file_returns_defaults(tmp_path: Path) -> None:
    config = load_config(tmp_path / "absent.yaml")
    assert isinstance(config, AppConfig)
    assert config.dispatch.slow_hook_seconds == 9.0
    assert config.reporter.collector_url == "http://haystack:80/async"
    assert config.server.port == 8080


def test_yaml_values_and_env_substitution(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TEST_SMTP_HOST", "smtp.internal")
    path = tmp_path / "config.yaml"
    path.write_text(
        "server:\n  port: 9000\n"
        "dispatch:\n  slow_hook_seconds: 3\n"
        "reporter:\n  hostname: sh1.rs.github.com\n"
        "mail:\n  address: ${TEST_SMTP_HOST}\n"
        "logging:\n  level: DEBUG\n"
    )
    config = load_config(path)
    assert config.server.port == 9000
    assert config.dispatch.slow_hook_seconds == 3
    assert config.reporter.hostname == "sh1.rs.github.com"
    assert config.mail.address == "smtp.internal"
    assert config.logging.level == "DEBUG"


def test_mail_password_from_secret_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    secret = tmp_path / "mail_password"
    secret.write_text("s3cret\n")
    monkeypatch.delenv("MAIL_PASSWORD", raising=False)
    monkeypatch.setenv("MAIL_PASSWORD_FILE", str(secret))
    path = tmp_path / "config.yaml"
    path.write_text("mail:\n  password: ${MAIL_PASSWORD}\n")
    config = load_config(path)
    assert config.mail.password_resolved == "s3cret"


def test_example_config_loads() -> None:
    example = Path(__file__).resolve().parent.parent / "config.example.yaml"
    config = load_config(example)
    assert config.reporter.production_host_pattern == r"^sh1\.(rs|stg)\.github\.com$"


def test_inline_env_reference_and_unknown_left_as_is(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TEST_COLLECTOR_HOST", "collector.internal")
    monkeypatch.delenv("TEST_UNSET_VAR", raising=False)
    path = tmp_path / "config.yaml"
    path.write_text(
        "reporter:\n"
        "  collector_url: http://${TEST_COLLECTOR_HOST}:80/async\n"
        "  app: ${TEST_UNSET_VAR}\n"
    )
    config = load_config(path)
    assert config.reporter.collector_url == "http://collector.internal:80/async"
    assert config.reporter.app == "${TEST_UNSET_VAR}"
