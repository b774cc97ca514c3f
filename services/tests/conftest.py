"""
Top-level test configuration for devcert.

mkcert is replaced by a small script that behaves like it for the flags we
use and appends every invocation to ``calls.jsonl`` next to itself.
"""

from __future__ import annotations

import json
import os
import stat
import sys
from pathlib import Path

import pytest

# Ensure test-friendly defaults
os.environ.setdefault("DEVCERT_JSON_LOGS", "false")
os.environ.setdefault("DEVCERT_LOG_LEVEL", "DEBUG")
os.environ.setdefault("DEVCERT_CONFIG_FILE", os.path.join(os.devnull, "devcert.yaml"))

from devcert.logging_config import configure_logging  # noqa: E402
from devcert.sources import SourceInfo  # noqa: E402

configure_logging(json_logs=False, log_level=os.environ["DEVCERT_LOG_LEVEL"])

FAKE_MKCERT = '''
import json
import os
import sys
import uuid
from pathlib import Path

here = Path(__file__).parent
args = sys.argv[1:]
with open(here / "calls.jsonl", "a") as f:
    f.write(json.dumps({
        "args": args,
        "caroot": os.environ.get("CAROOT"),
        "java_home": os.environ.get("JAVA_HOME"),
    }) + "\\n")

if os.environ.get("FAKE_MKCERT_FAIL"):
    sys.stderr.write("fake mkcert failure\\n")
    sys.exit(1)

if args == ["-CAROOT"]:
    if os.environ.get("FAKE_MKCERT_FAIL_CAROOT"):
        sys.exit(3)
    print(os.environ.get("CAROOT", str(here / "default-caroot")))
    sys.exit(0)

key_file = args[args.index("-key-file") + 1]
cert_file = args[args.index("-cert-file") + 1]
hosts = " ".join(args[args.index("-cert-file") + 2:])

caroot = Path(os.environ["CAROOT"])
caroot.mkdir(parents=True, exist_ok=True)
if not (caroot / "rootCA.pem").exists():
    (caroot / "rootCA.pem").write_text("ca " + uuid.uuid4().hex)
    (caroot / "rootCA-key.pem").write_text("ca key " + uuid.uuid4().hex)

token = uuid.uuid4().hex
Path(key_file).write_text(f"key {token} {hosts}")
if not os.environ.get("FAKE_MKCERT_SKIP_CERT"):
    Path(cert_file).write_text(f"cert {token} {hosts}")
'''


class FakeMkcert:
    """Installs the fake mkcert and reads back its invocation log."""

    def __init__(self, tools_dir: Path) -> None:
        self.tools_dir = tools_dir
        self.script = tools_dir / "fake_mkcert.py"
        self.log = tools_dir / "calls.jsonl"
        tools_dir.mkdir(parents=True, exist_ok=True)
        self.script.write_text(FAKE_MKCERT)

    def write_binary(self, destination: Path) -> Path:
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_text(f'#!/bin/sh\nexec "{sys.executable}" "{self.script}" "$@"\n')
        destination.chmod(destination.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return destination

    @property
    def calls(self) -> list[dict]:
        if not self.log.exists():
            return []
        return [json.loads(line) for line in self.log.read_text().splitlines()]

    @property
    def install_calls(self) -> list[dict]:
        return [c for c in self.calls if "-install" in c["args"]]

    @property
    def caroot_calls(self) -> list[dict]:
        return [c for c in self.calls if c["args"] == ["-CAROOT"]]


class FakeDownloader:
    """Downloader double that "downloads" the fake mkcert."""

    def __init__(self, fake: FakeMkcert) -> None:
        self.fake = fake
        self.calls: list[tuple[str, Path]] = []

    async def download(self, url: str, destination: str | Path) -> None:
        self.calls.append((url, Path(destination)))
        self.fake.write_binary(Path(destination))


class StaticSource:
    """Custom source returning a fixed result."""

    def __init__(self, result: object) -> None:
        self.result = result
        self.calls = 0

    async def get_source_info(self) -> SourceInfo | None:
        self.calls += 1
        return self.result  # type: ignore[return-value]


@pytest.fixture(autouse=True)
def clean_mkcert_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "CAROOT",
        "JAVA_HOME",
        "FAKE_MKCERT_FAIL",
        "FAKE_MKCERT_FAIL_CAROOT",
        "FAKE_MKCERT_SKIP_CERT",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def fake_mkcert(tmp_path: Path) -> FakeMkcert:
    return FakeMkcert(tmp_path / "tools")


@pytest.fixture
def fake_downloader(fake_mkcert: FakeMkcert) -> FakeDownloader:
    return FakeDownloader(fake_mkcert)


@pytest.fixture
def save_path(tmp_path: Path) -> Path:
    return tmp_path / "save"


@pytest.fixture
def mkcert_binary(fake_mkcert: FakeMkcert) -> Path:
    """A user-supplied mkcert binary outside the save directory."""
    return fake_mkcert.write_binary(fake_mkcert.tools_dir / "bin" / "mkcert")


@pytest.fixture
def static_source():
    """Factory for custom sources returning a fixed result."""
    return StaticSource
