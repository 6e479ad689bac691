"""Settings for the compat-spine watcher.

Every knob the two loops need (storage, producer, delivery sink, safe mode,
intervals, reporting modes) lives on one validated settings object.

Manifesto:
    Configuration should be explicit, validated, and environment-driven.

    - **Pydantic validation:** Type-checked at startup, not mid-tick
    - **Environment-driven:** ``COMPAT_*`` env vars and ``.env`` files
    - **TOML file:** ``compat-spine.toml`` in the working directory, or an
      explicit ``--config`` path which must then exist
    - **Sensible defaults:** Dry-run console reporting with safe mode on

Resolution order (first wins): init kwargs, environment, ``.env``, TOML file,
field defaults.

Tags:
    settings, configuration, pydantic, environment, toml, compat-spine

Doc-Types:
    - API Reference
    - Configuration Guide
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    TomlConfigSettingsSource,
)

from compat_spine.core.errors import MissingConfigError

DEFAULT_CONFIG_FILE = "compat-spine.toml"
DEFAULT_SOURCE_URL = "https://en.cppreference.com/w/cpp/compiler_support"


class CompatSettings(BaseSettings):
    """compat-spine configuration.

    Fields
    ──────
    storage_mode           : ``sqlite`` (durable) or ``memory`` (ephemeral)
    database               : SQLite path or ``sqlite:///`` URL
    source                 : ``cppreference`` (HTTP) or ``file`` (JSON fixture)
    sink                   : ``console`` or ``webhook``
    operator_id            : Recipient of private escalations
    safe_mode_max_reports  : Pending-report cap per notification tick
    suppress_reporting     : Mark changes delivered without sending them
    dry_reporting          : Log reports only, leave them undelivered
    """

    model_config = SettingsConfigDict(
        env_prefix="COMPAT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        toml_file=DEFAULT_CONFIG_FILE,
    )

    # ── Storage ──────────────────────────────────────────────────
    storage_mode: Literal["sqlite", "memory"] = "sqlite"
    database: str = Field(default="./data.db")

    # ── Producer ─────────────────────────────────────────────────
    source: Literal["cppreference", "file"] = "cppreference"
    source_url: str = Field(default=DEFAULT_SOURCE_URL)
    source_file: Path | None = None
    http_timeout_seconds: float = Field(default=30.0, gt=0)

    # ── Delivery ─────────────────────────────────────────────────
    sink: Literal["console", "webhook"] = "console"
    webhook_url: str | None = None
    escalation_url: str | None = None
    operator_id: str = ""

    # ── Safe mode / reporting modes ──────────────────────────────
    safe_mode: bool = True
    safe_mode_max_reports: int = Field(default=5, ge=0)
    suppress_reporting: bool = False
    dry_reporting: bool = True
    narrate_text_changes: bool = True

    # ── Intervals ────────────────────────────────────────────────
    fetch_interval_seconds: float = Field(default=300.0, gt=0)
    report_interval_seconds: float = Field(default=300.0, gt=0)

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    log_format: Literal["console", "json"] = "console"

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            TomlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )


def load_settings(config_file: str | Path | None = None, **overrides) -> CompatSettings:
    """Load settings, optionally from an explicit TOML file.

    A missing default ``compat-spine.toml`` is ignored; a missing explicit
    file raises :class:`MissingConfigError`.
    """
    if config_file is None:
        return CompatSettings(**overrides)

    path = Path(config_file)
    if not path.is_file():
        raise MissingConfigError(f"Config file not found: {path}", key="config")

    class _FileSettings(CompatSettings):
        model_config = SettingsConfigDict(toml_file=path)

    return _FileSettings(**overrides)


__all__ = [
    "CompatSettings",
    "DEFAULT_CONFIG_FILE",
    "DEFAULT_SOURCE_URL",
    "load_settings",
]
