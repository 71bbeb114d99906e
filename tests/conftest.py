"""
Pytest configuration and shared fixtures for zvpms tests.
"""

import hashlib
import io
import json
import logging
import random
import tarfile
from pathlib import Path

import pytest
import responses

from zvpms.context import Context
from zvpms.core.directory import ZvpmsPaths
from zvpms.core.platform import PlatformInfo
from zvpms.core.settings import Settings

INDEX_URL = "https://example.com/zig/index.json"
LINUX_X64 = PlatformInfo(os="linux", arch="x86_64")
INDEX_VERSIONS = ("0.11.0", "0.11.2", "0.12.0")


def tarball_url(version: str) -> str:
    return f"https://example.com/zig/{version}/zig-linux-x86_64-{version}.tar.xz"


def build_toolchain_archive(version: str) -> bytes:
    """Build a .tar.xz laid out like a Zig release (single top-level directory)."""
    top = f"zig-linux-x86_64-{version}"
    files = {
        f"{top}/zig": (b"#!/bin/sh\necho zig\n", 0o755),
        f"{top}/lib/std/std.zig": (b"pub const x = 1;\n", 0o644),
        f"{top}/LICENSE": (b"MIT\n", 0o644),
    }

    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:xz") as tar:
        top_info = tarfile.TarInfo(top)
        top_info.type = tarfile.DIRTYPE
        top_info.mode = 0o755
        tar.addfile(top_info)
        for name, (content, mode) in files.items():
            info = tarfile.TarInfo(name)
            info.size = len(content)
            info.mode = mode
            tar.addfile(info, io.BytesIO(content))
    return buffer.getvalue()


def build_corrupt_archive(version: str, payload_size: int = 300_000) -> bytes:
    """Release archive with bytes flipped near the end of the xz stream."""
    top = f"zig-linux-x86_64-{version}"
    payload = random.Random(0).randbytes(payload_size)

    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:xz") as tar:
        info = tarfile.TarInfo(f"{top}/zig")
        info.size = len(payload)
        info.mode = 0o755
        tar.addfile(info, io.BytesIO(payload))

    data = bytearray(buffer.getvalue())
    for offset in range(len(data) - 120, len(data) - 112):
        data[offset] ^= 0xFF
    return bytes(data)


def build_index(versions=INDEX_VERSIONS, archives=None) -> dict:
    """Remote index document offering versions for x86_64-linux only."""
    archives = archives or {}
    index = {
        "master": {
            "version": "0.13.0-dev.100+abcdef",
            "x86_64-linux": {"tarball": "https://example.com/zig/master.tar.xz", "shasum": "00"},
        }
    }
    for version in versions:
        archive = archives.get(version, b"")
        index[version] = {
            "date": "2024-01-01",
            "x86_64-linux": {
                "tarball": tarball_url(version),
                "shasum": hashlib.sha256(archive).hexdigest(),
                "size": str(len(archive)),
            },
        }
    return index


@pytest.fixture(autouse=True)
def restore_logging():
    """Undo logging.basicConfig(force=True) performed by CLI runs."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


@pytest.fixture
def zvpms_paths(tmp_path) -> ZvpmsPaths:
    """Empty zvpms root under a temporary directory."""
    return ZvpmsPaths(tmp_path / "zvpms-home").ensure_structure()


@pytest.fixture
def archives():
    """Release archives keyed by version."""
    return {version: build_toolchain_archive(version) for version in INDEX_VERSIONS}


@pytest.fixture
def index_document(archives):
    return build_index(archives=archives)


@pytest.fixture
def http():
    """Activated responses mock; unmatched URLs raise ConnectionError."""
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        yield rsps


@pytest.fixture
def published(http, index_document, archives):
    """Serve the index and every release archive over mocked HTTP."""
    http.add(responses.GET, INDEX_URL, json=index_document, status=200)
    for version, archive in archives.items():
        http.add(responses.GET, tarball_url(version), body=archive, status=200)
    return http


@pytest.fixture
def settings() -> Settings:
    return Settings(index_url=INDEX_URL)


@pytest.fixture
def context(zvpms_paths, settings) -> Context:
    """Context over the temporary root, using real HTTP code (mock with `http`)."""
    return Context.create(paths=zvpms_paths, settings=settings, platform=LINUX_X64)


@pytest.fixture
def static_index(index_document):
    """Fetcher returning the index document without HTTP."""

    def fetcher(url: str) -> bytes:
        return json.dumps(index_document).encode("utf-8")

    return fetcher


def make_installed(paths: ZvpmsPaths, version: str, with_executable: bool = True) -> Path:
    """Create a version directory as an install would leave it."""
    version_dir = paths.version_dir(version)
    (version_dir / "lib").mkdir(parents=True)
    if with_executable:
        executable = version_dir / "zig"
        executable.write_text("#!/bin/sh\nexit 0\n")
        executable.chmod(0o755)
    return version_dir
