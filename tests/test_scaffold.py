"""Smoke tests — verify scaffold wiring.

These tests prove that:
* The CLI entry point is importable and callable.
* The exception hierarchy is correctly structured.
* Version is accessible.
* Exit codes are defined and domain errors map onto them.
"""

from __future__ import annotations

from unittest.mock import patch

import pytest

from vidfit import __version__
from vidfit.cli import exit_codes
from vidfit.cli.app import cli, main
from vidfit.exceptions import (
    AnalysisIncompleteError,
    ConversionFailedError,
    EnvironmentCheckError,
    EnvironmentError,
    FfmpegNotFoundError,
    InputFileError,
    InvalidClipError,
    MissingRateControlError,
    PresetNotFoundError,
    ProbeFailedError,
    UnsupportedCodecError,
    VidfitError,
)


# ---------------------------------------------------------------------------
# Version
# ---------------------------------------------------------------------------

class TestVersion:
    def test_version_is_semver_like(self) -> None:
        parts = __version__.split(".")
        assert len(parts) == 3
        assert all(part.isdigit() for part in parts)


# ---------------------------------------------------------------------------
# Exception hierarchy
# ---------------------------------------------------------------------------

class TestExceptions:
    @pytest.mark.parametrize(
        "exc_class",
        [
            InputFileError,
            InvalidClipError,
            AnalysisIncompleteError,
            ProbeFailedError,
            PresetNotFoundError,
            UnsupportedCodecError,
            MissingRateControlError,
            ConversionFailedError,
            EnvironmentError,
            FfmpegNotFoundError,
            EnvironmentCheckError,
        ],
    )
    def test_all_exceptions_inherit_from_base(
        self, exc_class: type[VidfitError]
    ) -> None:
        assert issubclass(exc_class, VidfitError)

    def test_hint_is_stored(self) -> None:
        err = VidfitError("boom", hint="try this")
        assert str(err) == "boom"
        assert err.hint == "try this"

    def test_hint_defaults_to_none(self) -> None:
        assert VidfitError("boom").hint is None

    def test_analysis_error_keeps_lines(self) -> None:
        err = AnalysisIncompleteError("no video", lines=["a", "b"])
        assert err.lines == ("a", "b")


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

class TestExitCodes:
    def test_values(self) -> None:
        assert exit_codes.SUCCESS == 0
        assert exit_codes.GENERAL_ERROR == 1
        assert exit_codes.UNEXPECTED_ERROR == 2
        assert exit_codes.INPUT_ERROR == 3
        assert exit_codes.ENCODER_ERROR == 4
        assert exit_codes.KEYBOARD_INTERRUPT == 130


# ---------------------------------------------------------------------------
# CLI routing
# ---------------------------------------------------------------------------

class TestCLIRouting:
    def test_no_args_returns_success(self, capsys: pytest.CaptureFixture[str]) -> None:
        """No arguments should print help and exit 0."""
        assert main([]) == exit_codes.SUCCESS
        assert "usage: vidfit" in capsys.readouterr().out

    def test_version_flag(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])
        assert exc_info.value.code == 0

    @patch("vidfit.cli.doctor.run_doctor", return_value=exit_codes.SUCCESS)
    def test_doctor_routes(self, mock_doctor: object) -> None:
        assert main(["doctor"]) == exit_codes.SUCCESS

    def test_file_routes_to_convert(self, monkeypatch: pytest.MonkeyPatch) -> None:
        from vidfit.cli import app as app_module

        seen: dict[str, object] = {}

        def _fake(args, settings):  # noqa: ANN001, ANN202
            seen["target"] = args.target
            seen["video"] = args.video
            return exit_codes.SUCCESS

        monkeypatch.setattr(app_module, "_handle_convert", _fake)
        assert main(["clip.mov", "--video", "crf_480p"]) == exit_codes.SUCCESS
        assert seen == {"target": "clip.mov", "video": "crf_480p"}


# ---------------------------------------------------------------------------
# Error boundary
# ---------------------------------------------------------------------------

class TestErrorBoundary:
    @pytest.mark.parametrize(
        ("exc", "code"),
        [
            (InputFileError("missing"), exit_codes.INPUT_ERROR),
            (InvalidClipError("empty clip"), exit_codes.INPUT_ERROR),
            (AnalysisIncompleteError("no video\nline"), exit_codes.INPUT_ERROR),
            (FfmpegNotFoundError("no ffmpeg"), exit_codes.ENCODER_ERROR),
            (ProbeFailedError("timeout"), exit_codes.ENCODER_ERROR),
            (ConversionFailedError("status 1"), exit_codes.ENCODER_ERROR),
            (PresetNotFoundError("size_1mb"), exit_codes.GENERAL_ERROR),
            (UnsupportedCodecError("gif"), exit_codes.GENERAL_ERROR),
            (KeyboardInterrupt(), exit_codes.KEYBOARD_INTERRUPT),
            (RuntimeError("bug"), exit_codes.UNEXPECTED_ERROR),
        ],
    )
    def test_exit_codes(self, exc: BaseException, code: int) -> None:
        with patch("vidfit.cli.app.main", side_effect=exc):
            with pytest.raises(SystemExit) as exc_info:
                cli()
        assert exc_info.value.code == code

    def test_success_exit(self) -> None:
        with patch("vidfit.cli.app.main", return_value=exit_codes.SUCCESS):
            with pytest.raises(SystemExit) as exc_info:
                cli()
        assert exc_info.value.code == exit_codes.SUCCESS

    def test_hint_printed(self) -> None:
        err = PresetNotFoundError("Unknown video preset: x", hint="Available: size_8mb")
        with (
            patch("vidfit.cli.app.main", side_effect=err),
            patch("vidfit.cli.app.console") as mock_console,
            pytest.raises(SystemExit),
        ):
            cli()
        printed = " ".join(str(call.args[0]) for call in mock_console.print.call_args_list)
        assert "Unknown video preset: x" in printed
        assert "Available: size_8mb" in printed

    def test_analysis_error_prints_first_line_only(self) -> None:
        err = AnalysisIncompleteError(
            "Could not analyze video\nInput #0, garbage",
            lines=["Input #0, garbage"],
        )
        with (
            patch("vidfit.cli.app.main", side_effect=err),
            patch("vidfit.cli.app.console") as mock_console,
            pytest.raises(SystemExit),
        ):
            cli()
        printed = " ".join(str(call.args[0]) for call in mock_console.print.call_args_list)
        assert "Could not analyze video" in printed
        assert "garbage" not in printed
