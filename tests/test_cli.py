"""
Tests for CLI commands — global options, deps, run, info, version.
"""

import json
import textwrap
from pathlib import Path

import pytest
from click.testing import CliRunner

from ytdl_engine.core.config.loader import ENV_BINARIES_DIR, ENV_ROOT_DIR
from ytdl_engine.core.engine.setup import PackageLayout
from ytdl_engine.core.services import download
from ytdl_engine.core.services.updater import UpdateChannel
from ytdl_engine.main import cli, request_from_args


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    monkeypatch.delenv(ENV_ROOT_DIR, raising=False)
    monkeypatch.delenv(ENV_BINARIES_DIR, raising=False)


@pytest.fixture
def config(tmp_path: Path, sh_path: Path, fake_ytdlp: str) -> Path:
    """ytdl.yml for a root with python installed and a runnable fake binary."""
    root = tmp_path / "root"
    binaries = tmp_path / "bin"
    binaries.mkdir()
    PackageLayout(root).python_dir.mkdir(parents=True)

    interpreter = binaries / "libpython.so"
    interpreter.write_text(f'#!{sh_path}\nexec {sh_path} "$@"\n')
    interpreter.chmod(0o755)
    (binaries / "yt-dlp").write_text(fake_ytdlp)

    path = tmp_path / "ytdl.yml"
    path.write_text(textwrap.dedent(f"""\
        root_dir: {root}
        binaries_dir: {binaries}
    """))
    return path


class TestCLIGlobal:
    """Tests for global CLI behavior."""

    def test_help(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "ytdl-engine" in result.output
        for command in ("run", "info", "update", "version", "deps"):
            assert command in result.output

    def test_version(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_missing_config_file(self, tmp_path: Path):
        runner = CliRunner()
        result = runner.invoke(cli, ["--config", str(tmp_path / "nope.yml"), "version"])
        assert result.exit_code == 1
        assert "Config file not found" in result.output


class TestRequestFromArgs:
    def test_options_and_urls(self):
        request = request_from_args(("--format=best", "--no-playlist", "https://example.com/v"))
        assert request.build_command() == ["--format", "best", "--no-playlist", "https://example.com/v"]

    def test_value_taking_flag_consumes_next_token(self):
        request = request_from_args(("-f", "best", "--no-playlist", "https://example.com/v"))

        assert request.urls == ["https://example.com/v"]
        assert request.get_option("-f") == "best"
        assert request.build_command() == ["-f", "best", "--no-playlist", "https://example.com/v"]

    def test_trailing_value_flag_has_no_value(self):
        request = request_from_args(("https://example.com/v", "-o"))
        assert request.urls == ["https://example.com/v"]
        assert request.get_arguments("-o") == [None]

    def test_unknown_flag_stays_a_switch(self):
        request = request_from_args(("--embed-subs", "https://example.com/v"))
        assert request.urls == ["https://example.com/v"]
        assert request.get_arguments("--embed-subs") == [None]


class TestDepsCommands:
    def test_status_json(self, config: Path):
        runner = CliRunner()
        result = runner.invoke(cli, ["--config", str(config), "deps", "status", "--json"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["dependencies"] == {"python": True, "ffmpeg": False, "aria2c": False}
        assert data["missing"] == ["ffmpeg", "aria2c"]

    def test_status_from_env(self, tmp_path: Path):
        runner = CliRunner()
        result = runner.invoke(
            cli,
            ["--config", str(tmp_path / "empty.yml"), "deps", "status"],
            env={ENV_ROOT_DIR: str(tmp_path / "root")},
        )
        # explicit config must exist
        assert result.exit_code == 1

        (tmp_path / "empty.yml").write_text("")
        result = runner.invoke(
            cli,
            ["--config", str(tmp_path / "empty.yml"), "deps", "status"],
            env={ENV_ROOT_DIR: str(tmp_path / "root")},
        )
        assert result.exit_code == 0
        assert "python" in result.output

    def test_install_without_sources_fails(self, config: Path):
        runner = CliRunner()
        result = runner.invoke(cli, ["--config", str(config), "deps", "install"])

        assert result.exit_code == 1
        assert "still missing after the installation: ffmpeg, aria2c" in result.output

    def test_install_malformed_source_fails_cleanly(self, config: Path):
        with config.open("a") as f:
            f.write("downloads:\n  ffmpeg: not a url\n")
        runner = CliRunner()
        result = runner.invoke(cli, ["--config", str(config), "deps", "install"])

        assert result.exit_code == 1
        assert result.exception is None or isinstance(result.exception, SystemExit)
        assert "still missing after the installation: ffmpeg, aria2c" in result.output


class TestRunCommand:
    def test_run_passes_arguments(self, config: Path):
        runner = CliRunner()
        result = runner.invoke(cli, ["--config", str(config), "run", "--format=best", "args"])

        assert result.exit_code == 0, result.output
        assert "--format\nbest\n--no-cache-dir\n--ffmpeg-location\n" in result.output

    def test_run_separate_option_value(self, config: Path):
        runner = CliRunner()
        result = runner.invoke(cli, ["--config", str(config), "run", "-f", "best", "args"])

        assert result.exit_code == 0, result.output
        assert "-f\nbest\n--no-cache-dir\n" in result.output

    def test_run_failure(self, config: Path):
        runner = CliRunner()
        result = runner.invoke(cli, ["--config", str(config), "run", "fail"])

        assert result.exit_code == 1
        assert "Unsupported URL" in result.output

    def test_run_without_config(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        runner = CliRunner()
        result = runner.invoke(cli, ["run", "progress"])

        assert result.exit_code == 1
        assert "not configured" in result.output


class TestInfoCommand:
    def test_info_json(self, config: Path):
        runner = CliRunner()
        result = runner.invoke(cli, ["--config", str(config), "info", "json", "--json"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["id"] == "abc"
        assert data["title"] == "Test video"

    def test_info_text(self, config: Path):
        runner = CliRunner()
        result = runner.invoke(cli, ["--config", str(config), "info", "json"])

        assert result.exit_code == 0, result.output
        assert "Test video" in result.output
        assert "Formats:  1" in result.output


class TestVersionCommand:
    def test_never_updated(self, config: Path):
        runner = CliRunner()
        result = runner.invoke(cli, ["--config", str(config), "version", "--json"])

        assert result.exit_code == 0, result.output
        assert json.loads(result.output) == {"version": None, "name": None}


class TestUpdateCommand:
    def test_channel_from_config(self, config: Path, monkeypatch):
        requested = []

        def fetch_json(url, *, timeout=15):
            requested.append(url)
            return {
                "tag_name": "2024.09.01",
                "name": "yt-dlp nightly 2024.09.01",
                "assets": [{"name": "yt-dlp", "browser_download_url": "https://example.org/yt-dlp"}],
            }

        def download_file(url, dest, *, progress=None, timeout=60):
            dest.write_text("# nightly\n")
            return 10

        monkeypatch.setattr(download, "fetch_json", fetch_json)
        monkeypatch.setattr(download, "download_file", download_file)
        config.write_text(config.read_text() + "update_channel: nightly\n")

        runner = CliRunner()
        result = runner.invoke(cli, ["--config", str(config), "update"])

        assert result.exit_code == 0, result.output
        assert "updated to yt-dlp nightly 2024.09.01" in result.output
        assert requested == [UpdateChannel.NIGHTLY.api_url]

    def test_unknown_channel_in_config(self, config: Path):
        config.write_text(config.read_text() + "update_channel: beta\n")

        runner = CliRunner()
        result = runner.invoke(cli, ["--config", str(config), "update"])

        assert result.exit_code == 1
        assert "Unknown update channel: beta" in result.output
