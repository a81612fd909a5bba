"""
Shared test fixtures and configuration.

Engine tests do not need a real interpreter or yt-dlp: ``sh`` stands in
for the interpreter and a small shell script for yt-dlp.  The script
picks its behaviour from its last argument (the URL).
"""

import shutil
import textwrap
import zipfile
from pathlib import Path

import pytest

from ytdl_engine.core.engine.executor import YoutubeDL
from ytdl_engine.core.engine.setup import EnginePaths, PackageLayout

FAKE_YTDLP = textwrap.dedent("""\
    for last; do :; done
    case "$last" in
      progress)
        echo "[youtube] abc: Downloading webpage"
        echo "[download]  10.0% of   10.00MiB at    1.00MiB/s ETA 00:09"
        echo "[download]  55.5% of   10.00MiB at    1.00MiB/s ETA 00:04"
        echo "[download] 100.0% of   10.00MiB at    1.00MiB/s ETA 00:00"
        echo "[download] Destination: video.mp4"
        ;;
      fail)
        echo "ERROR: Unsupported URL: fail" >&2
        exit 1
        ;;
      partial)
        echo '{"id": "partial"}'
        echo "ERROR: one playlist entry failed" >&2
        exit 1
        ;;
      sleep)
        exec sleep 30
        ;;
      args)
        for arg; do echo "$arg"; done
        ;;
      lines)
        i=0
        while [ $i -lt 2000 ]; do
          echo "out $i"
          echo "err $i" >&2
          i=$((i + 1))
        done
        ;;
      json)
        echo '{"id": "abc", "title": "Test video", "duration": 12.5, "uploader": "someone", "formats": [{"format_id": "18", "ext": "mp4"}], "not_modelled": 1}'
        ;;
      nulljson)
        echo '{"id": "nul", "title": null, "tags": null, "categories": null, "thumbnails": null, "http_headers": null, "formats": [{"format_id": "18", "http_headers": null}], "requested_formats": null}'
        ;;
      badjson)
        echo 'this is not json'
        ;;
      env)
        echo "$PYTHONHOME"
        echo "$HOME"
        echo "$SSL_CERT_FILE"
        echo "$LD_LIBRARY_PATH"
        echo "$PATH"
        ;;
    esac
""")


@pytest.fixture
def sh_path() -> Path:
    """Path to a POSIX shell."""
    found = shutil.which("sh")
    if found is None:
        pytest.skip("no POSIX shell available")
    return Path(found)


@pytest.fixture
def fake_ytdlp() -> str:
    """Source of the fake yt-dlp script."""
    return FAKE_YTDLP


@pytest.fixture
def layout(tmp_path: Path) -> PackageLayout:
    """Library layout under a temporary application root."""
    return PackageLayout(tmp_path / "root")


@pytest.fixture
def engine_paths(tmp_path: Path, layout: PackageLayout, sh_path: Path) -> EnginePaths:
    """Engine paths that run the fake yt-dlp script with ``sh``."""
    binaries = tmp_path / "bin"
    binaries.mkdir()
    layout.ytdlp_dir.mkdir(parents=True)
    layout.ytdlp_path.write_text(FAKE_YTDLP)

    paths = EnginePaths.from_layout(layout, binaries)
    # python_path is the only field that has to point at something runnable
    return EnginePaths(
        binaries_dir=paths.binaries_dir,
        python_path=sh_path,
        ffmpeg_path=paths.ffmpeg_path,
        ytdlp_path=paths.ytdlp_path,
        state_path=paths.state_path,
        ld_library_path=paths.ld_library_path,
        ssl_cert_file=paths.ssl_cert_file,
        python_home=paths.python_home,
    )


@pytest.fixture
def engine(engine_paths: EnginePaths) -> YoutubeDL:
    """An initialized engine backed by the fake yt-dlp."""
    return YoutubeDL(engine_paths)


def _write_zip(path: Path, files: dict[str, str]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(path, "w") as zf:
        for name, content in files.items():
            zf.writestr(name, content)
    return path


@pytest.fixture
def make_zip():
    """Factory: ``make_zip(path, {name: text})`` writes a zip archive."""
    return _write_zip
