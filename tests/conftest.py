"""Shared pytest fixtures and test helpers for envfold tests."""

from __future__ import annotations

from collections.abc import Callable, Generator
from pathlib import Path

import pytest
from click.testing import CliRunner

from envfold.config.settings import EnvfoldSettings
from envfold.domain.environment import EnvironmentSnapshot
from envfold.services.resolve import ResolveService
from envfold.services.telemetry import disable_telemetry


@pytest.fixture(autouse=True)
def _isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Run every test from an empty directory with no envfold config in reach."""
    monkeypatch.delenv("ENVFOLD_CONFIG", raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture(autouse=True)
def _reset_telemetry() -> Generator[None]:
    yield
    disable_telemetry()


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def settings(tmp_path: Path) -> EnvfoldSettings:
    """Default settings with no TOML file."""
    return EnvfoldSettings.from_cli(start=tmp_path)


@pytest.fixture
def snapshot() -> EnvironmentSnapshot:
    """A small, fixed base environment."""
    return EnvironmentSnapshot(
        {
            "PATH": "/usr/bin:/bin",
            "HOME": "/home/builder",
            "CARGO_PKG_NAME": "demo",
            "CARGO_PKG_VERSION": "1.2.3",
            "AWS_SECRET_ACCESS_KEY": "hunter2",
        }
    )


@pytest.fixture
def make_service(settings: EnvfoldSettings) -> Callable[..., ResolveService]:
    """Factory for a ResolveService bound to an explicit snapshot."""

    def _make(
        env: dict[str, str] | EnvironmentSnapshot,
        *,
        config: EnvfoldSettings | None = None,
    ) -> ResolveService:
        snap = env if isinstance(env, EnvironmentSnapshot) else EnvironmentSnapshot(env)
        return ResolveService(config or settings, snapshot=snap)

    return _make
