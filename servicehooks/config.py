"""Configuration loading from YAML and environment.

Secrets (SMTP password) are taken from environment variables or from files
(Docker secrets). Never put real passwords in config files committed to the
repo.
"""

import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _read_secret(env_key: str, file_env_key: str) -> str | None:
    """Read secret from env var or from file path in env (e.g. Docker
    secrets)."""
    value = _current_env.get(env_key)
    if value:
        return value.strip()
    file_path = _current_env.get(file_env_key)
    if file_path:
        return Path(file_path).read_text().strip()
    return None


# Injected by load_config so validators can read env/file
_current_env: dict[str, str] = {}


class ServerConfig(BaseSettings):
    """HTTP server settings."""

    model_config = SettingsConfigDict(env_prefix="SERVER_", extra="ignore")

    host: str = Field(default="0.0.0.0", description="Bind host")
    port: int = Field(default=8080, ge=0, le=65535, description="Bind port (0 picks a free port)")


class DispatchConfig(BaseSettings):
    """Dispatch engine settings."""

    model_config = SettingsConfigDict(env_prefix="DISPATCH_", extra="ignore")

    # Calls slower than this are reported as "Long Service Hook" (never cancelled)
    slow_hook_seconds: float = Field(default=9.0, gt=0, description="Slow hook threshold in seconds")


class ReporterConfig(BaseSettings):
    """Exception reporter (diagnostics collector) settings."""

    model_config = SettingsConfigDict(env_prefix="REPORTER_", extra="ignore")

    app: str = Field(default="github-services", description="App name sent with each report")
    collector_url: str = Field(default="http://haystack:80/async", description="Collector endpoint")
    production_host_pattern: str = Field(
        default=r"^sh1\.(rs|stg)\.github\.com$",
        description="Regex for hosts that send reports to the collector",
    )
    hostname: str | None = Field(default=None, description="Override for the reported server name")
    timeout: float = Field(default=5.0, gt=0, description="Collector request timeout in seconds")


class MailConfig(BaseSettings):
    """SMTP settings for services that send mail."""

    model_config = SettingsConfigDict(env_prefix="MAIL_", extra="ignore")

    address: str = Field(default="localhost", description="SMTP host")
    port: int = Field(default=25, ge=1, le=65535, description="SMTP port")
    domain: str = Field(default="localhost.localdomain", description="HELO domain")
    user_name: str | None = Field(default=None, description="SMTP login")
    password: str | None = Field(default=None, description="SMTP password; prefer env or secret file")
    enable_starttls_auto: bool = Field(default=False, description="Use STARTTLS when offered")
    noreply_address: str = Field(default="GitHub <noreply@github.com>", description="From / Reply-To")
    timeout: float = Field(default=10.0, gt=0, description="SMTP timeout in seconds")

    @property
    def password_resolved(self) -> str | None:
        """Resolve SMTP password from config, env or Docker secret file."""
        p = self.password
        if p and not p.startswith("${"):
            return p
        return _read_secret("MAIL_PASSWORD", "MAIL_PASSWORD_FILE")


class LoggingConfig(BaseSettings):
    """Logging settings."""

    model_config = SettingsConfigDict(env_prefix="LOGGING_", extra="ignore")

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format",
    )
    loggers: dict[str, str] = Field(
        default_factory=lambda: {"urllib3": "WARNING"},
        description="Per-logger level overrides, e.g. {\"servicehooks.server\": \"DEBUG\"}",
    )


class AppConfig(BaseSettings):
    """Root application config from YAML + env."""

    model_config = SettingsConfigDict(extra="ignore")

    server: ServerConfig = Field(default_factory=ServerConfig)
    dispatch: DispatchConfig = Field(default_factory=DispatchConfig)
    reporter: ReporterConfig = Field(default_factory=ReporterConfig)
    mail: MailConfig = Field(default_factory=MailConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


_ENV_REF = re.compile(r"\$\{([^}]+)\}")


def _substitute_env(value: Any) -> Any:
    """Replace ${VAR} (anywhere in a string) and a bare $VAR value with env values.

    Unknown variables are left as written.
    """
    if isinstance(value, str):
        if value.startswith("$") and not value.startswith("${"):
            return _current_env.get(value[1:].strip(), value)
        return _ENV_REF.sub(lambda m: _current_env.get(m.group(1).strip(), m.group(0)), value)
    if isinstance(value, dict):
        return {k: _substitute_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_substitute_env(v) for v in value]
    return value


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load config from YAML file and environment.

    Secrets: MAIL_PASSWORD or MAIL_PASSWORD_FILE.
    """
    global _current_env
    import os

    _current_env = dict(os.environ)

    path = config_path or Path("config.yaml")
    if not path.is_file():
        return AppConfig()

    raw = yaml.safe_load(path.read_text()) or {}
    raw = _substitute_env(raw)

    return AppConfig(
        server=ServerConfig(**(raw.get("server") or {})),
        dispatch=DispatchConfig(**(raw.get("dispatch") or {})),
        reporter=ReporterConfig(**(raw.get("reporter") or {})),
        mail=MailConfig(**(raw.get("mail") or {})),
        logging=LoggingConfig(**(raw.get("logging") or {})),
    )
