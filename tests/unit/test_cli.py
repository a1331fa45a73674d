"""Tests for CLI module."""

import argparse
import json
import logging
from pathlib import Path

import pytest
from pydantic import ValidationError

from tap_results.cli import (
    EXIT_FAIL,
    EXIT_PASS,
    EXIT_UNREADABLE,
    build_config,
    log_results_summary,
    main,
    run,
)
from tap_results.config import ReportConfig
from tap_results.parser import parse


@pytest.fixture
def passing_file(tmp_path: Path) -> Path:
    """Write a passing TAP file."""
    path = tmp_path / "passing.tap"
    path.write_text("TAP version 13\n1..2\nok 1\nok 2\n")
    return path


@pytest.fixture
def failing_file(tmp_path: Path) -> Path:
    """Write a failing TAP file."""
    path = tmp_path / "failing.tap"
    path.write_text("TAP version 13\n1..2\nok 1\nnot ok 2 broken\n")
    return path


def test_log_results_summary_pass(caplog: pytest.LogCaptureFixture) -> None:
    """Logs passing files with a checkmark."""
    results = parse(["TAP version 13", "ok", "ok # SKIP"])

    with caplog.at_level(logging.INFO):
        log_results_summary(logging.getLogger(), Path("run.tap"), results)

    assert "✅ run.tap: pass (1/2 passed, 0 failed, 1 skipped, 0 todo)" in caplog.text


def test_log_results_summary_bail_out(caplog: pytest.LogCaptureFixture) -> None:
    """Logs the bail out reason of failing files."""
    results = parse(["TAP version 13", "Bail out! no disk"])

    with caplog.at_level(logging.INFO):
        log_results_summary(logging.getLogger(), Path("run.tap"), results)

    assert "❌ run.tap: fail" in caplog.text
    assert "Bailed out: no disk" in caplog.text


def test_log_results_summary_no_header(caplog: pytest.LogCaptureFixture) -> None:
    """Logs files without a TAP header."""
    with caplog.at_level(logging.INFO):
        log_results_summary(logging.getLogger(), Path("x.txt"), parse(["hello"]))

    assert "No TAP version header found" in caplog.text


class TestRun:
    """Tests for run function."""

    def test_text_report_for_passing_file(
        self, passing_file: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Prints the file name and its report."""
        exit_code = run([passing_file], ReportConfig())

        assert exit_code == EXIT_PASS
        captured = capsys.readouterr()
        assert captured.out == (
            f"{passing_file}\n Overall result: PASS\n   Passed tests: 2\n\n"
        )

    def test_returns_fail_when_any_file_fails(
        self,
        passing_file: Path,
        failing_file: Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """Returns 1 when any file fails its verdict."""
        exit_code = run([passing_file, failing_file], ReportConfig())

        assert exit_code == EXIT_FAIL
        captured = capsys.readouterr()
        assert "   Failed tests: 1\n" in captured.out

    def test_unreadable_file(
        self,
        tmp_path: Path,
        passing_file: Path,
        caplog: pytest.LogCaptureFixture,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """Logs unreadable files, keeps going, and returns 2."""
        missing = tmp_path / "missing.tap"

        exit_code = run([missing, passing_file], ReportConfig())

        assert exit_code == EXIT_UNREADABLE
        assert "Could not open file" in caplog.text
        assert str(passing_file) in capsys.readouterr().out

    def test_json_output(
        self,
        tmp_path: Path,
        failing_file: Path,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """Prints one JSON document covering every file."""
        missing = tmp_path / "missing.tap"
        config = ReportConfig(output_format="json", include_lines=True)

        exit_code = run([failing_file, missing], config)

        assert exit_code == EXIT_UNREADABLE
        document = json.loads(capsys.readouterr().out)
        failing, unreadable = document["files"]
        assert failing["file"] == str(failing_file)
        assert failing["passing"] is False
        assert failing["failed"] == 1
        assert failing["tests"][1]["description"] == "broken"
        assert failing["lines"][0] == "TAP version 13"
        assert unreadable["file"] == str(missing)
        assert "Could not open file" in unreadable["error"]

    def test_edge_case_fixture(
        self, data_dir: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Reports the edge case fixture."""
        exit_code = run([data_dir / "edge_cases.tap13"], ReportConfig())

        assert exit_code == EXIT_PASS
        assert capsys.readouterr().out.endswith(
            " Overall result: PASS\n"
            "Total tests run: 6\n"
            "   Passed tests: 3\n"
            "  Skipped tests: 2\n"
            "     TODO tests: 1\n\n"
        )

    def test_bail_out_fixture(
        self, data_dir: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Reports the bail out fixture."""
        exit_code = run([data_dir / "bail_out.tap"], ReportConfig())

        assert exit_code == EXIT_FAIL
        assert capsys.readouterr().out.endswith(
            " Overall result: FAIL\n"
            " Expected tests: 3\n"
            "  Missing tests: 2\n"
            "   Passed tests: 1\n"
            "     Bailed out: Database unreachable.\n\n"
        )


class TestBuildConfig:
    """Tests for build_config function."""

    @staticmethod
    def namespace(**overrides: object) -> argparse.Namespace:
        """Build parsed arguments with nothing set."""
        values: dict[str, object] = {
            "config": "",
            "format": None,
            "include_lines": None,
            "log_level": None,
        }
        values.update(overrides)
        return argparse.Namespace(**values)

    def test_defaults(self) -> None:
        """Uses the model defaults when nothing is given."""
        assert build_config(self.namespace()) == ReportConfig()

    def test_json_config(self) -> None:
        """Reads settings from the JSON configuration."""
        config = build_config(
            self.namespace(config='{"output_format": "json", "log_level": "INFO"}')
        )

        assert config.output_format == "json"
        assert config.log_level == "INFO"

    def test_flags_override_json(self) -> None:
        """Explicit flags take precedence over the JSON configuration."""
        config = build_config(
            self.namespace(config='{"output_format": "json"}', format="text")
        )

        assert config.output_format == "text"

    def test_invalid_setting(self) -> None:
        """Rejects unknown values."""
        with pytest.raises(ValidationError):
            build_config(self.namespace(config='{"output_format": "xml"}'))

    @pytest.mark.parametrize("raw", ["[]", "1", "\"json\"", "null"])
    def test_non_object_json(self, raw: str) -> None:
        """Rejects JSON that is not an object."""
        with pytest.raises(ValueError, match="must be a JSON object"):
            build_config(self.namespace(config=raw))

    def test_malformed_json(self) -> None:
        """Rejects malformed JSON."""
        with pytest.raises(ValueError, match="Expecting"):
            build_config(self.namespace(config="{not json"))


class TestMain:
    """Tests for main function."""

    def test_exits_with_run_status(
        self, failing_file: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Exits with the status returned by run."""
        with pytest.raises(SystemExit) as exc_info:
            main([str(failing_file)])

        assert exc_info.value.code == EXIT_FAIL
        assert "Overall result: FAIL" in capsys.readouterr().out

    def test_json_flag(
        self, passing_file: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Selects JSON output from the command line."""
        with pytest.raises(SystemExit) as exc_info:
            main([str(passing_file), "--format", "json"])

        assert exc_info.value.code == EXIT_PASS
        document = json.loads(capsys.readouterr().out)
        assert document["files"][0]["passing"] is True

    def test_invalid_config_is_a_usage_error(
        self, passing_file: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Reports invalid configuration as a usage error."""
        with pytest.raises(SystemExit) as exc_info:
            main([str(passing_file), "--config", '{"log_level": "LOUD"}'])

        assert exc_info.value.code == 2
        assert "invalid configuration" in capsys.readouterr().err

    def test_non_object_config_is_a_usage_error(
        self, passing_file: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Reports a non-object configuration as a usage error."""
        with pytest.raises(SystemExit) as exc_info:
            main([str(passing_file), "--config", "[]"])

        assert exc_info.value.code == 2
        assert "must be a JSON object" in capsys.readouterr().err

    def test_requires_a_file(self) -> None:
        """At least one file is required."""
        with pytest.raises(SystemExit) as exc_info:
            main([])

        assert exc_info.value.code == 2
