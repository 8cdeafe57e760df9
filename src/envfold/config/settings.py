"""Unified settings: CLI flags, env vars, and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs: CLI flags passed by Click
  2. Env vars: ``ENVFOLD_*`` prefix
  3. TOML file: ``envfold.toml`` discovered via walk-up
  4. Code defaults: baked into the section models

These settings configure envfold itself. They are loaded before the
snapshot is captured and are never part of the logical environment.
"""

from __future__ import annotations

import threading
import tomllib
from pathlib import Path
from typing import Any

import click
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from envfold.config.discovery import ConfigNotFoundError, locate_config
from envfold.config.models import EnvironmentConfig, MatcherConfig, SnapshotConfig


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Read settings from an ``envfold.toml`` file."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path and toml_path.is_file():
            raw = toml_path.read_text(encoding="utf-8")
            try:
                self._data = tomllib.loads(raw)
            except tomllib.TOMLDecodeError as exc:
                msg = f"Invalid TOML in {toml_path}: {exc}"
                raise click.ClickException(msg) from exc

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Return ``(value, field_name, value_is_complex)``."""
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        return self._data


# Thread-local storage for TOML path during construction.
_tls = threading.local()


class EnvfoldSettings(BaseSettings):
    """Unified settings for the envfold CLI, frozen after construction.

    Attributes:
        config_path: The TOML file that was loaded, if any.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "ENVFOLD_",
        "env_nested_delimiter": "__",
    }

    config_path: Path | None = None

    # --- CLI flags ---
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    # --- TOML sections ---
    snapshot: SnapshotConfig = Field(default_factory=SnapshotConfig)
    matcher: MatcherConfig = Field(default_factory=MatcherConfig)
    environment: EnvironmentConfig = Field(default_factory=EnvironmentConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert TOML source between env vars and defaults."""
        toml_path = getattr(_tls, "toml_path", None)
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, toml_path),
        )

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        start: Path | None = None,
        **cli_flags: Any,
    ) -> EnvfoldSettings:
        """Construct settings from a CLI invocation.

        See :func:`~envfold.config.discovery.locate_config` for how the
        TOML file is chosen. *start* is where walk-up discovery begins.
        """
        try:
            toml_path = locate_config(config_path, start)
        except ConfigNotFoundError as exc:
            raise click.ClickException(str(exc)) from exc

        _tls.toml_path = toml_path
        try:
            return cls(config_path=toml_path, **cli_flags)
        except ValidationError as exc:
            source = toml_path if toml_path else "settings"
            msg = f"Invalid config in {source}: {_describe_errors(exc)}"
            raise click.ClickException(msg) from exc
        finally:
            _tls.toml_path = None


def _describe_errors(exc: ValidationError) -> str:
    """Flatten validation errors into ``environment.rules.0: <message>`` pairs."""
    return "; ".join(
        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in exc.errors()
    )
