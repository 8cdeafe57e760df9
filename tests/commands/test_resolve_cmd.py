"""Tests for the resolve, get, rules, diff, and explain commands."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from envfold.cli import cli


@pytest.fixture(autouse=True)
def _known_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EFTEST_PATH", "/bin")
    monkeypatch.setenv("EFTEST_CARGO_X", "1")
    monkeypatch.setenv("EFTEST_FOOBAR", "x")


def _json(result_output: str) -> dict:  # type: ignore[type-arg]
    return json.loads(result_output)


class TestResolveCommand:
    def test_no_rules_matches_process_env(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "resolve"])
        assert result.exit_code == 0, result.output
        env = _json(result.stdout)["data"]["environment"]
        assert env["EFTEST_PATH"] == "/bin"
        assert env["EFTEST_CARGO_X"] == "1"

    def test_blacklist_then_set(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(
            cli,
            ["--json", "resolve", "--env-blacklist", ".*", "--env-set", "EFTEST_CARGO_X=kept"],
        )
        assert result.exit_code == 0, result.output
        assert _json(result.stdout)["data"]["environment"] == {"EFTEST_CARGO_X": "kept"}

    def test_interleaved_order_is_preserved(self, cli_runner: CliRunner) -> None:
        # set, then blacklist: FOO must be gone
        first = cli_runner.invoke(
            cli, ["--json", "resolve", "--env-set", "FOO=BAR", "--env-blacklist", "FOO"]
        )
        # blacklist, then set: FOO must be present
        second = cli_runner.invoke(
            cli, ["--json", "resolve", "--env-blacklist", "FOO", "--env-set", "FOO=BAR"]
        )
        assert "FOO" not in _json(first.stdout)["data"]["environment"]
        assert _json(second.stdout)["data"]["environment"]["FOO"] == "BAR"

    def test_whitelist_does_not_restore(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(
            cli,
            ["--json", "resolve", "--env-blacklist", ".*", "--env-whitelist", "EFTEST_.*"],
        )
        assert _json(result.stdout)["data"]["environment"] == {}

    def test_inline_option_values(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(
            cli, ["--json", "resolve", "--env-whitelist=EFTEST_.*", "--env-set=A=b=c"]
        )
        env = _json(result.stdout)["data"]["environment"]
        assert env["A"] == "b=c"
        assert set(env) == {"EFTEST_PATH", "EFTEST_CARGO_X", "EFTEST_FOOBAR", "A"}

    def test_quiet_prints_assignments(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(
            cli, ["-q", "resolve", "--env-whitelist", "EFTEST_(PATH|CARGO_X)"]
        )
        assert result.exit_code == 0
        assert result.stdout.splitlines() == ["EFTEST_CARGO_X=1", "EFTEST_PATH=/bin"]

    def test_human_output(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["resolve", "--env-whitelist", "EFTEST_PATH"])
        assert result.exit_code == 0
        assert "OK" in result.stdout
        assert "EFTEST_PATH" in result.stdout
        assert "fingerprint" in result.stdout

    def test_deterministic_fingerprint(self, cli_runner: CliRunner) -> None:
        args = ["--json", "resolve", "--env-whitelist", "EFTEST_.*"]
        a = _json(cli_runner.invoke(cli, args).stdout)["data"]["fingerprint"]
        b = _json(cli_runner.invoke(cli, args).stdout)["data"]["fingerprint"]
        assert a == b


class TestConfigErrors:
    def test_set_without_equals(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["resolve", "--env-blacklist", "X", "--env-set", "FOO"])
        assert result.exit_code == 1
        assert result.stdout == ""
        assert "--env-set 'FOO'" in result.stderr
        assert "argument 4" in result.stderr

    def test_invalid_regex(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "resolve", "--env-whitelist", "CARGO_("])
        assert result.exit_code == 1
        payload = _json(result.stderr)
        assert payload["ok"] is False
        assert payload["error"]["code"] == "CONFIG_SYNTAX"
        assert payload["error"]["detail"]["option"] == "--env-whitelist"
        assert payload["error"]["detail"]["value"] == "CARGO_("

    def test_oversized_repeat_is_a_syntax_error(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "resolve", "--env-blacklist", "a{4294967296}"])
        assert result.exit_code == 1
        assert result.stdout == ""
        error = _json(result.stderr)["error"]
        assert error["code"] == "CONFIG_SYNTAX"
        assert error["detail"] == {
            "option": "--env-blacklist",
            "value": "a{4294967296}",
            "position": 3,
        }

    def test_position_counts_global_flags(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "-q", "resolve", "--env-set", "FOO"])
        assert result.exit_code == 1
        assert _json(result.stderr)["error"]["detail"]["position"] == 4

    def test_position_after_config_flag(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        (tmp_path / "other.toml").write_text("")
        result = cli_runner.invoke(
            cli, ["-c", str(tmp_path / "other.toml"), "get", "X", "--env-whitelist", "("]
        )
        assert result.exit_code == 1
        assert "--env-whitelist '(' (argument 5)" in result.stderr

    def test_missing_option_value(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["resolve", "--env-set"])
        assert result.exit_code == 2

    def test_bad_preset_rule(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        (tmp_path / "envfold.toml").write_text('[[environment.rules]]\nwhitelist = "("\n')
        result = cli_runner.invoke(cli, ["resolve"])
        assert result.exit_code == 1
        assert "config rule 1" in result.stderr

    def test_malformed_rule_table(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        (tmp_path / "envfold.toml").write_text(
            '[[environment.rules]]\nwhitelist = "A"\nblacklist = "B"\n'
        )
        result = cli_runner.invoke(cli, ["resolve"])
        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)
        assert result.stdout == ""
        assert "Invalid config in" in result.stderr
        assert "environment.rules.0" in result.stderr


class TestPresetRules:
    def test_config_rules_run_first(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        (tmp_path / "envfold.toml").write_text(
            '[[environment.rules]]\nblacklist = ".*"\n'
            '[[environment.rules]]\nset = "FROM_CONFIG=1"\n'
        )
        result = cli_runner.invoke(cli, ["--json", "resolve", "--env-set", "FROM_CLI=2"])
        assert result.exit_code == 0, result.output
        env = _json(result.stdout)["data"]["environment"]
        assert env == {"FROM_CONFIG": "1", "FROM_CLI": "2"}

    def test_explicit_config_flag(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        custom = tmp_path / "profiles" / "hermetic.toml"
        custom.parent.mkdir()
        custom.write_text('[[environment.rules]]\nwhitelist = "EFTEST_PATH"\n')
        result = cli_runner.invoke(cli, ["--json", "-c", str(custom), "resolve"])
        assert _json(result.stdout)["data"]["environment"] == {"EFTEST_PATH": "/bin"}


class TestGetCommand:
    def test_found(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["-q", "get", "EFTEST_PATH"])
        assert result.exit_code == 0
        assert result.stdout.strip() == "/bin"

    def test_set_by_rule(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "get", "FOO", "--env-set", "FOO=BAR"])
        assert _json(result.stdout)["data"]["value"] == "BAR"

    def test_rules_before_name(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["-q", "get", "--env-set", "FOO=BAR", "FOO"])
        assert result.stdout.strip() == "BAR"

    def test_missing(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(
            cli, ["--json", "get", "EFTEST_PATH", "--env-blacklist", "EFTEST_PATH"]
        )
        assert result.exit_code == 1
        assert _json(result.stderr)["error"]["code"] == "NOT_FOUND"


class TestRulesCommand:
    def test_lists_rules(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(
            cli, ["--json", "rules", "--env-blacklist", ".*", "--env-set", "HOME=/tmp"]
        )
        data = _json(result.stdout)["data"]
        assert data["count"] == 2
        assert [r["kind"] for r in data["rules"]] == ["blacklist", "set"]
        assert data["rules"][1]["source"] == "argument 5"

    def test_human(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["rules", "--env-whitelist", "CARGO_.*"])
        assert result.exit_code == 0
        assert "whitelist" in result.stdout


class TestDiffCommand:
    def test_diff(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(
            cli,
            [
                "--json",
                "diff",
                "--env-blacklist",
                "EFTEST_FOOBAR",
                "--env-set",
                "EFTEST_PATH=/usr/bin",
            ],
        )
        data = _json(result.stdout)["data"]
        assert "EFTEST_FOOBAR" in data["removed"]
        assert data["changed"]["EFTEST_PATH"] == {"before": "/bin", "after": "/usr/bin"}


class TestExplainCommand:
    def test_explain(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(
            cli,
            ["--json", "explain", "--env-whitelist", "EFTEST_.*", "--env-blacklist", "EFTEST_FOO"],
        )
        data = _json(result.stdout)["data"]
        assert [s["rule"] for s in data["steps"]] == [
            "--env-whitelist EFTEST_.*",
            "--env-blacklist EFTEST_FOO",
        ]
        # anchored: EFTEST_FOO does not match EFTEST_FOOBAR
        assert data["steps"][1]["removed"] == []
        assert data["count"] == 3

    def test_verbose_shows_timing(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["-v", "explain", "--env-set", "A=1"])
        assert result.exit_code == 0
        assert "ResolveService.explain" in result.stdout
