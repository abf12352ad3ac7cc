"""Tests for the ffmpeg probe and encoder adapters (infra/ffmpeg_probe.py,
infra/ffmpeg_worker.py).

``subprocess`` is patched at the module boundary — no real ffmpeg runs.
"""

from __future__ import annotations

import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from vidfit.exceptions import ConversionFailedError, ProbeFailedError
from vidfit.infra.ffmpeg_probe import FfmpegProbeProvider, parse_encoder_list
from vidfit.infra.ffmpeg_worker import FfmpegEncoderWorker, progress_ratio

FFMPEG = Path("/opt/ffmpeg/bin/ffmpeg")

ENCODERS_OUTPUT = """\
Encoders:
 V..... = Video
 A..... = Audio
 ------
 V....D libx264              libx264 H.264 / AVC / MPEG-4 AVC (codec h264)
 A....D libfdk_aac           Fraunhofer FDK AAC (codec aac)
 A....D aac                  AAC (Advanced Audio Coding)
"""


# ---------------------------------------------------------------------------
# Probe
# ---------------------------------------------------------------------------

class TestFfmpegProbeProvider:
    @patch("vidfit.infra.ffmpeg_probe.subprocess.run")
    def test_returns_stderr_lines(self, mock_run: MagicMock) -> None:
        mock_run.return_value = MagicMock(
            returncode=1,
            stderr="  Duration: 00:00:08.00, start: 0.000000\nAt least one output file must be specified\n",
        )
        lines = FfmpegProbeProvider(FFMPEG).probe(Path("clip.mov"))
        assert lines == [
            "  Duration: 00:00:08.00, start: 0.000000",
            "At least one output file must be specified",
        ]

    @patch("vidfit.infra.ffmpeg_probe.subprocess.run")
    def test_command(self, mock_run: MagicMock) -> None:
        mock_run.return_value = MagicMock(returncode=1, stderr="")
        FfmpegProbeProvider(FFMPEG, timeout=5).probe(Path("dir/clip.mov"))
        command = mock_run.call_args.args[0]
        assert command == [str(FFMPEG), "-hide_banner", "-v", "info", "-i", str(Path("dir/clip.mov"))]
        assert mock_run.call_args.kwargs["timeout"] == 5
        assert mock_run.call_args.kwargs["check"] is False

    @patch("vidfit.infra.ffmpeg_probe.subprocess.run")
    def test_timeout(self, mock_run: MagicMock) -> None:
        mock_run.side_effect = subprocess.TimeoutExpired(cmd="ffmpeg", timeout=60)
        with pytest.raises(ProbeFailedError, match="within"):
            FfmpegProbeProvider(FFMPEG).probe(Path("clip.mov"))

    @patch("vidfit.infra.ffmpeg_probe.subprocess.run")
    def test_cannot_start(self, mock_run: MagicMock) -> None:
        mock_run.side_effect = FileNotFoundError("no such file")
        with pytest.raises(ProbeFailedError) as exc_info:
            FfmpegProbeProvider(FFMPEG).probe(Path("clip.mov"))
        assert exc_info.value.hint is not None
        assert "doctor" in exc_info.value.hint

    @patch("vidfit.infra.ffmpeg_probe.subprocess.run")
    def test_encoders(self, mock_run: MagicMock) -> None:
        mock_run.return_value = MagicMock(returncode=0, stdout=ENCODERS_OUTPUT)
        assert FfmpegProbeProvider(FFMPEG).encoders() == frozenset({"libx264", "libfdk_aac", "aac"})
        assert mock_run.call_args.args[0] == [str(FFMPEG), "-hide_banner", "-encoders"]

    @patch("vidfit.infra.ffmpeg_probe.subprocess.run")
    def test_encoders_cannot_start(self, mock_run: MagicMock) -> None:
        mock_run.side_effect = PermissionError("denied")
        with pytest.raises(ProbeFailedError, match="encoders"):
            FfmpegProbeProvider(FFMPEG).encoders()


class TestParseEncoderList:
    def test_legend_skipped(self) -> None:
        names = parse_encoder_list(ENCODERS_OUTPUT.splitlines())
        assert "=" not in names
        assert "libx264" in names

    def test_no_separator(self) -> None:
        assert parse_encoder_list([" V....D libx264 libx264 H.264"]) == frozenset()

    def test_empty(self) -> None:
        assert parse_encoder_list([]) == frozenset()


# ---------------------------------------------------------------------------
# Progress parsing
# ---------------------------------------------------------------------------

class TestProgressRatio:
    def test_stats_line(self) -> None:
        line = "frame=  120 fps=60 q=28.0 size=     256kB time=00:00:04.00 bitrate= 524.3kbits/s speed=2x"
        assert progress_ratio(line, 8) == pytest.approx(0.5)

    def test_padded_time(self) -> None:
        assert progress_ratio("time= 00:01:00.00", 120) == pytest.approx(0.5)

    def test_beyond_duration_not_clamped(self) -> None:
        assert progress_ratio("time=00:00:10.00", 8) == pytest.approx(1.25)

    def test_no_time(self) -> None:
        assert progress_ratio("Press [q] to stop, [?] for help", 8) is None

    def test_unknown_time(self) -> None:
        assert progress_ratio("size=N/A time=N/A bitrate=N/A", 8) is None

    @pytest.mark.parametrize("duration", [0, -1])
    def test_non_positive_duration(self, duration: float) -> None:
        assert progress_ratio("time=00:00:04.00", duration) is None


# ---------------------------------------------------------------------------
# Encoder
# ---------------------------------------------------------------------------

def _process(lines: list[str], returncode: int = 0) -> MagicMock:
    process = MagicMock()
    process.stderr = iter(lines)
    process.wait.return_value = returncode
    process.poll.return_value = returncode
    return process


class TestFfmpegEncoderWorker:
    @patch("vidfit.infra.ffmpeg_worker.subprocess.Popen")
    def test_returns_and_removes_output(self, mock_popen: MagicMock, tmp_path: Path) -> None:
        output = tmp_path / "out.mp4"
        output.write_bytes(b"mp4 data")
        mock_popen.return_value = _process(["time=00:00:02.00\n", "time=00:00:04.00\n"])
        seen: list[float] = []

        payload = FfmpegEncoderWorker(FFMPEG).run(
            ["-i", "in.mov", str(output)],
            output,
            duration=8,
            progress_callback=seen.append,
        )

        assert payload == b"mp4 data"
        assert not output.exists()
        assert seen == [pytest.approx(0.25), pytest.approx(0.5)]
        assert mock_popen.call_args.args[0] == [str(FFMPEG), "-i", "in.mov", str(output)]

    @patch("vidfit.infra.ffmpeg_worker.subprocess.Popen")
    def test_non_zero_exit(self, mock_popen: MagicMock, tmp_path: Path) -> None:
        output = tmp_path / "out.mp4"
        output.write_bytes(b"partial")
        mock_popen.return_value = _process(
            ["Unknown encoder 'libfdk_aac'\n"],
            returncode=1,
        )
        with pytest.raises(ConversionFailedError, match="status 1") as exc_info:
            FfmpegEncoderWorker(FFMPEG).run([str(output)], output, duration=8)
        assert "libfdk_aac" in (exc_info.value.hint or "")
        assert not output.exists()

    @patch("vidfit.infra.ffmpeg_worker.subprocess.Popen")
    def test_hint_keeps_only_tail(self, mock_popen: MagicMock, tmp_path: Path) -> None:
        output = tmp_path / "out.mp4"
        mock_popen.return_value = _process([f"line {i}\n" for i in range(40)], returncode=1)
        with pytest.raises(ConversionFailedError) as exc_info:
            FfmpegEncoderWorker(FFMPEG).run([str(output)], output, duration=8)
        hint = exc_info.value.hint or ""
        assert "line 39" in hint
        assert "line 24" not in hint

    @patch("vidfit.infra.ffmpeg_worker.subprocess.Popen")
    def test_missing_output(self, mock_popen: MagicMock, tmp_path: Path) -> None:
        mock_popen.return_value = _process([])
        with pytest.raises(ConversionFailedError, match="no readable output"):
            FfmpegEncoderWorker(FFMPEG).run([], tmp_path / "out.mp4", duration=8)

    @patch("vidfit.infra.ffmpeg_worker.subprocess.Popen")
    def test_empty_output(self, mock_popen: MagicMock, tmp_path: Path) -> None:
        output = tmp_path / "out.mp4"
        output.write_bytes(b"")
        mock_popen.return_value = _process([])
        with pytest.raises(ConversionFailedError, match="empty"):
            FfmpegEncoderWorker(FFMPEG).run([], output, duration=8)
        assert not output.exists()

    @patch("vidfit.infra.ffmpeg_worker.subprocess.Popen")
    def test_cannot_start(self, mock_popen: MagicMock, tmp_path: Path) -> None:
        mock_popen.side_effect = FileNotFoundError("ffmpeg")
        with pytest.raises(ConversionFailedError, match="Could not start"):
            FfmpegEncoderWorker(FFMPEG).run([], tmp_path / "out.mp4", duration=8)

    @patch("vidfit.infra.ffmpeg_worker.subprocess.Popen")
    def test_interrupted_process_killed(self, mock_popen: MagicMock, tmp_path: Path) -> None:
        process = _process(["time=00:00:01.00\n"])
        process.poll.return_value = None
        mock_popen.return_value = process

        def _interrupt(_ratio: float) -> None:
            raise KeyboardInterrupt

        with pytest.raises(KeyboardInterrupt):
            FfmpegEncoderWorker(FFMPEG).run(
                [], tmp_path / "out.mp4", duration=8, progress_callback=_interrupt,
            )
        process.kill.assert_called_once()

    @patch("vidfit.infra.ffmpeg_worker.subprocess.Popen")
    def test_missing_stderr_pipe(self, mock_popen: MagicMock, tmp_path: Path) -> None:
        process = _process([])
        process.stderr = None
        process.poll.return_value = None
        mock_popen.return_value = process
        with pytest.raises(ConversionFailedError, match="diagnostic stream"):
            FfmpegEncoderWorker(FFMPEG).run([], tmp_path / "out.mp4", duration=8)
        process.kill.assert_called_once()
