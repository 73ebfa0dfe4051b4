"""End-to-end tests for the pipeline and the lamarck CLI.

WHY: The pipeline ties every stage together, and its guarantees only show
up end to end: no request when the configuration is bad, no files when
formatting fails, no overwritten files, correct exit codes.

HOW: A real DeepgramClient is wired to httpx.MockTransport, so everything
from source resolution to file writing runs for real except the network.
CLI tests call main(argv) with the client class monkeypatched.

RULES:
- Media files and outputs live under tmp_path.
- The mock handler counts requests so "no network call" can be asserted.
"""

from __future__ import annotations

import asyncio
import io
from pathlib import Path
from typing import List

import httpx
import pytest

from caption_formatter import EmptyInputError, FormatError, get_preset
from lamarck import cli
from lamarck.api.client import DeepgramClient
from lamarck.core.assembler import ConfidencePolicy
from lamarck.formatters import FORMATTERS
from lamarck.formatters.base import BaseFormatter, FormatterOutput
from lamarck.pipeline import (
    CaptionRequest,
    OutputDirNotExistError,
    RunContext,
    check_output_location,
    resolve_output_path,
    run,
    save_outputs,
)
from lamarck.progress import ProgressReporter

BASE_URL = "https://deepgram.test/v1"


class _FakeDeepgram:
    """MockTransport handler serving one canned JSON body."""

    def __init__(self, body, status_code=200):
        self.body = body
        self.status_code = status_code
        self.requests = []  # type: List[httpx.Request]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if isinstance(self.body, bytes):
            return httpx.Response(self.status_code, content=self.body)
        return httpx.Response(self.status_code, json=self.body)

    def client(self, api_key="test-key") -> DeepgramClient:
        return DeepgramClient(
            api_key=api_key,
            base_url=BASE_URL,
            transport=httpx.MockTransport(self),
        )


@pytest.fixture
def media(tmp_path) -> Path:
    path = tmp_path / "talk.wav"
    path.write_bytes(b"RIFF" + b"\x00" * 2048)
    return path


def _request(media, output_path, formats, **kwargs) -> CaptionRequest:
    return CaptionRequest(
        input=str(media),
        output_path=output_path,
        language="en-US",
        formats=formats,
        caption_config=get_preset("broadcast"),
        **kwargs
    )


# ---------------------------------------------------------------------------
# Output paths
# ---------------------------------------------------------------------------


class TestOutputPaths:

    def test_no_conflict(self, tmp_path):
        assert resolve_output_path("talk", ".txt", tmp_path) == tmp_path / "talk.txt"

    def test_counter_goes_before_extension(self, tmp_path):
        (tmp_path / "talk.txt").write_text("x")
        (tmp_path / "talk-channel-0-alternative-0.srt").write_text("x")
        (tmp_path / "talk.raw.json").write_text("x")

        assert resolve_output_path("talk", ".txt", tmp_path) == tmp_path / "talk-2.txt"
        assert (
            resolve_output_path("talk", "-channel-0-alternative-0.srt", tmp_path)
            == tmp_path / "talk-channel-0-alternative-0-2.srt"
        )
        assert resolve_output_path("talk", ".raw.json", tmp_path) == tmp_path / "talk.raw-2.json"

    def test_counter_increments(self, tmp_path):
        (tmp_path / "talk.md").write_text("x")
        (tmp_path / "talk-2.md").write_text("x")
        assert resolve_output_path("talk", ".md", tmp_path) == tmp_path / "talk-3.md"

    def test_output_location(self, tmp_path):
        assert check_output_location(Path("transcript.srt")) == Path.cwd()
        assert check_output_location(tmp_path / "a.srt") == tmp_path

    def test_missing_output_dir(self, tmp_path):
        with pytest.raises(OutputDirNotExistError, match="doesn't exist"):
            check_output_location(tmp_path / "nope" / "a.srt")

    def test_failed_write_removes_earlier_files(self, tmp_path):
        (tmp_path / "talk.txt").write_text("keep me", encoding="utf-8")
        outputs = [
            FormatterOutput(".txt", "new transcript\n", "text/plain"),
            FormatterOutput(".md", "# Transcript\n", "text/markdown"),
            FormatterOutput("/no-such-dir/talk.srt", "1\n", "application/x-subrip"),
        ]

        with pytest.raises(OSError):
            save_outputs(outputs, "talk", tmp_path)

        assert sorted(p.name for p in tmp_path.iterdir()) == ["talk.txt"]
        assert (tmp_path / "talk.txt").read_text(encoding="utf-8") == "keep me"


# ---------------------------------------------------------------------------
# run()
# ---------------------------------------------------------------------------


class TestRun:

    def test_writes_requested_outputs(self, tmp_path, media, deepgram_response_dict):
        fake = _FakeDeepgram(deepgram_response_dict)
        out_dir = tmp_path / "out"
        out_dir.mkdir()
        request = _request(media, out_dir / "captions.srt", ["srt", "transcript"])

        saved = asyncio.run(run(RunContext(client_factory=fake.client), request))

        assert saved == [
            out_dir / "captions-channel-0-alternative-0.srt",
            out_dir / "captions.txt",
        ]
        assert "Hello world. This is Lamarck." in saved[0].read_text(encoding="utf-8")
        assert saved[1].read_text(encoding="utf-8") == "Hello world.\n\nThis is Lamarck.\n"
        assert len(fake.requests) == 1
        assert fake.requests[0].headers["Content-Type"] == "audio/wav"

    def test_never_overwrites(self, tmp_path, media, deepgram_response_dict):
        existing = tmp_path / "talk-channel-0-alternative-0.srt"
        existing.write_text("keep me", encoding="utf-8")
        fake = _FakeDeepgram(deepgram_response_dict)

        saved = asyncio.run(run(
            RunContext(client_factory=fake.client),
            _request(media, tmp_path / "talk.srt", ["srt"]),
        ))

        assert saved == [tmp_path / "talk-channel-0-alternative-0-2.srt"]
        assert existing.read_text(encoding="utf-8") == "keep me"

    def test_missing_output_dir_makes_no_request(self, tmp_path, media, deepgram_response_dict):
        fake = _FakeDeepgram(deepgram_response_dict)
        request = _request(media, tmp_path / "missing" / "talk.srt", ["srt"])

        with pytest.raises(OutputDirNotExistError):
            asyncio.run(run(RunContext(client_factory=fake.client), request))

        assert fake.requests == []

    def test_empty_transcript_writes_nothing(self, tmp_path, media, deepgram_response_dict):
        deepgram_response_dict["results"]["channels"][0]["alternatives"][0]["words"] = []
        fake = _FakeDeepgram(deepgram_response_dict)

        with pytest.raises(EmptyInputError):
            asyncio.run(run(
                RunContext(client_factory=fake.client),
                _request(media, tmp_path / "talk.srt", ["srt", "raw"]),
            ))

        assert sorted(p.name for p in tmp_path.iterdir()) == ["talk.wav"]

    def test_format_failure_writes_nothing(
        self, tmp_path, media, deepgram_response_dict, monkeypatch
    ):
        class _Exploding(BaseFormatter):

            def __init__(self, config):
                pass

            @property
            def name(self):
                return "Exploding"

            def format(self, transcript):
                raise FormatError("cannot caption this")

        monkeypatch.setitem(FORMATTERS, "srt", _Exploding)
        fake = _FakeDeepgram(deepgram_response_dict)

        with pytest.raises(FormatError, match="cannot caption this"):
            asyncio.run(run(
                RunContext(client_factory=fake.client),
                _request(media, tmp_path / "talk.srt", ["transcript", "srt"]),
            ))

        assert sorted(p.name for p in tmp_path.iterdir()) == ["talk.wav"]

    def test_confidence_policy_reaches_captions(self, tmp_path, media, deepgram_response_dict):
        fake = _FakeDeepgram(deepgram_response_dict)
        request = _request(
            media, tmp_path / "talk.srt", ["srt"],
            confidence_policy=ConfidencePolicy("drop", 0.5),
        )

        saved = asyncio.run(run(RunContext(client_factory=fake.client), request))

        content = saved[0].read_text(encoding="utf-8")
        assert "Hello world. This is" in content
        assert "Lamarck" not in content


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


class TestCLI:

    @pytest.fixture
    def fake(self, monkeypatch, deepgram_response_dict):
        fake = _FakeDeepgram(deepgram_response_dict)
        monkeypatch.setattr(cli, "DeepgramClient", fake.client)
        return fake

    def _main(self, *argv):
        cli.main(["--no-progress", "--deepgram-api-key", "test-key"] + list(argv))

    def test_defaults_to_srt(self, tmp_path, media, fake, capsys):
        self._main("-i", str(media), "-o", str(tmp_path / "talk.srt"))

        assert (tmp_path / "talk-channel-0-alternative-0.srt").exists()
        err = capsys.readouterr().err
        assert "Done! Saved 1 file(s)" in err
        assert "talk-channel-0-alternative-0.srt" in err

    def test_all_outputs(self, tmp_path, media, fake):
        self._main(
            "-i", str(media), "-o", str(tmp_path / "talk.srt"),
            "--raw", "-s", "--vtt", "-b", "-t", "-m",
        )

        names = sorted(p.name for p in tmp_path.iterdir() if p.name != "talk.wav")
        assert names == [
            "talk-channel-0-alternative-0-beast.srt",
            "talk-channel-0-alternative-0.srt",
            "talk-channel-0-alternative-0.vtt",
            "talk.md",
            "talk.raw.json",
            "talk.txt",
        ]

    def test_language_and_preset(self, tmp_path, media, fake):
        self._main(
            "-i", str(media), "-o", str(tmp_path / "talk.srt"),
            "-l", "en_gb", "--preset", "word",
        )

        assert fake.requests[0].url.params["language"] == "en-GB"
        content = (tmp_path / "talk-channel-0-alternative-0.srt").read_text(encoding="utf-8")
        assert content.count(" --> ") == 5

    def test_url_input(self, tmp_path, fake):
        self._main("-i", "https://media.test/talk.mp3", "-o", str(tmp_path / "t.srt"), "-m")

        content = (tmp_path / "t.md").read_text(encoding="utf-8")
        assert "(https://media.test/talk.mp3#t=0)" in content

    def test_missing_api_key(self, tmp_path, media, fake, capsys):
        with pytest.raises(SystemExit) as excinfo:
            cli.main(["--no-progress", "-i", str(media), "-o", str(tmp_path / "t.srt")])

        assert excinfo.value.code == 1
        assert "Error: Deepgram API key not configured" in capsys.readouterr().err
        assert fake.requests == []

    @pytest.mark.parametrize("extra", [
        ["--max-chars-per-line", "0"],
        ["--min-block-duration", "9", "--max-block-duration", "2"],
        ["--low-confidence", "drop"],
        ["--low-confidence", "flag", "--confidence-threshold", "2"],
    ])
    def test_bad_configuration_fails_before_request(self, tmp_path, media, fake, capsys, extra):
        with pytest.raises(SystemExit) as excinfo:
            self._main("-i", str(media), "-o", str(tmp_path / "t.srt"), *extra)

        assert excinfo.value.code == 1
        assert capsys.readouterr().err.startswith("Error: ")
        assert fake.requests == []

    def test_missing_output_dir(self, tmp_path, media, fake, capsys):
        with pytest.raises(SystemExit) as excinfo:
            self._main("-i", str(media), "-o", str(tmp_path / "nope" / "t.srt"))

        assert excinfo.value.code == 1
        assert "doesn't exist" in capsys.readouterr().err

    def test_missing_input(self, tmp_path, fake, capsys):
        with pytest.raises(SystemExit) as excinfo:
            self._main("-i", str(tmp_path / "ghost.wav"), "-o", str(tmp_path / "t.srt"))

        assert excinfo.value.code == 1
        assert "Failed to parse a URL or find a file" in capsys.readouterr().err
        assert fake.requests == []

    def test_api_error(self, tmp_path, media, fake, capsys):
        fake.status_code = 401
        fake.body = {"err_code": "INVALID_AUTH", "err_msg": "Invalid credentials."}

        with pytest.raises(SystemExit) as excinfo:
            self._main("-i", str(media), "-o", str(tmp_path / "t.srt"))

        assert excinfo.value.code == 1
        assert "Error: Deepgram reported an error 401" in capsys.readouterr().err

    @pytest.mark.parametrize("body", [
        {"metadata": {"request_id": "req-9", "duration": 2.5}},
        b"upstream timeout",
    ])
    def test_unreadable_success_body(self, tmp_path, media, fake, capsys, body):
        fake.body = body

        with pytest.raises(SystemExit) as excinfo:
            self._main("-i", str(media), "-o", str(tmp_path / "t.srt"))

        assert excinfo.value.code == 1
        assert "Error: Deepgram returned an unreadable response" in capsys.readouterr().err
        assert sorted(p.name for p in tmp_path.iterdir()) == ["talk.wav"]

    def test_ctrl_c(self, tmp_path, media, monkeypatch, capsys):
        def _interrupted(args):
            raise KeyboardInterrupt

        monkeypatch.setattr(cli, "_run_pipeline", _interrupted)

        with pytest.raises(SystemExit) as excinfo:
            cli.main(["-i", str(media)])

        assert excinfo.value.code == 130
        assert "Cancelled by user." in capsys.readouterr().err

    def test_input_is_required(self):
        with pytest.raises(SystemExit) as excinfo:
            cli.build_parser().parse_args([])
        assert excinfo.value.code == 2

    def test_parser_defaults(self):
        args = cli.build_parser().parse_args(["-i", "talk.wav"])
        assert args.output_path == "transcript.srt"
        assert args.lang == "en_us"
        assert args.low_confidence == "keep"
        assert cli._selected_formats(args) == ["srt"]


# ---------------------------------------------------------------------------
# Progress
# ---------------------------------------------------------------------------


class TestProgressReporter:

    def test_status_lines_without_bar(self):
        stream = io.StringIO()
        progress = ProgressReporter(enabled=False, stream=stream)

        progress.status("Uploading talk.wav to Deepgram...")
        progress.set_total(2048)
        progress.advance(1024)
        progress.close("Done!")
        progress.close("Done!")

        assert stream.getvalue() == "Uploading talk.wav to Deepgram...\nDone!\n"

    def test_bar_counts_bytes(self):
        stream = io.StringIO()
        progress = ProgressReporter(enabled=True, stream=stream)

        progress.set_total(4096)
        progress.advance(1024)
        progress.advance(1024)

        assert progress._bar.n == 2048
        assert progress._bar.total == 4096
        progress.close()
