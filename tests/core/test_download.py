"""
Unit tests for download module.

Tests fetch and download functionality with mocked network requests.
"""

import hashlib

import pytest
import responses

from zvpms.core.download import DownloadProgress, download_file, fetch, format_progress
from zvpms.core.exceptions import (
    ChecksumMismatchError,
    HttpRequestFailedError,
    ResponseTooLargeError,
)

URL = "https://example.com/file.tar.xz"


class TestFetch:
    """Test fetch()."""

    @responses.activate
    def test_returns_body(self):
        """Test the response body is returned."""
        responses.add(responses.GET, URL, body=b'{"a": 1}', status=200)
        assert fetch(URL) == b'{"a": 1}'

    @responses.activate
    def test_non_200_status(self):
        """Test a non-200 status raises HttpRequestFailedError."""
        responses.add(responses.GET, URL, status=404)
        with pytest.raises(HttpRequestFailedError, match="status 404") as exc_info:
            fetch(URL)
        assert exc_info.value.url == URL

    @responses.activate
    def test_connection_error(self):
        """Test an unreachable host raises HttpRequestFailedError."""
        with pytest.raises(HttpRequestFailedError):
            fetch("https://unreachable.example.com/index.json")

    @responses.activate
    def test_too_large(self):
        """Test a body over the limit raises ResponseTooLargeError."""
        responses.add(responses.GET, URL, body=b"x" * 2048, status=200)
        with pytest.raises(ResponseTooLargeError):
            fetch(URL, max_bytes=1024)

    @responses.activate
    def test_at_limit(self):
        """Test a body exactly at the limit is accepted."""
        responses.add(responses.GET, URL, body=b"x" * 1024, status=200)
        assert len(fetch(URL, max_bytes=1024)) == 1024


class TestDownloadFile:
    """Test download_file()."""

    @responses.activate
    def test_writes_file(self, tmp_path):
        """Test the body is written to destination."""
        responses.add(responses.GET, URL, body=b"archive", status=200)
        destination = tmp_path / "file.tar.xz"

        result = download_file(URL, destination)

        assert result == destination
        assert destination.read_bytes() == b"archive"

    @responses.activate
    def test_checksum_verified(self, tmp_path):
        """Test a matching checksum passes (case-insensitive)."""
        content = b"archive"
        responses.add(responses.GET, URL, body=content, status=200)
        digest = hashlib.sha256(content).hexdigest().upper()

        download_file(URL, tmp_path / "f", expected_sha256=digest)

        assert (tmp_path / "f").read_bytes() == content

    @responses.activate
    def test_checksum_mismatch(self, tmp_path):
        """Test a wrong checksum raises ChecksumMismatchError."""
        responses.add(responses.GET, URL, body=b"archive", status=200)
        with pytest.raises(ChecksumMismatchError, match="Checksum mismatch"):
            download_file(URL, tmp_path / "f", expected_sha256="0" * 64)

    @responses.activate
    def test_http_error(self, tmp_path):
        """Test HTTP errors raise HttpRequestFailedError without writing."""
        responses.add(responses.GET, URL, status=500)
        with pytest.raises(HttpRequestFailedError):
            download_file(URL, tmp_path / "f")
        assert not (tmp_path / "f").exists()

    @responses.activate
    def test_too_large(self, tmp_path):
        """Test the size limit applies to downloads."""
        responses.add(responses.GET, URL, body=b"x" * 4096, status=200)
        with pytest.raises(ResponseTooLargeError):
            download_file(URL, tmp_path / "f", max_bytes=1024)

    @responses.activate
    def test_progress_callback(self, tmp_path):
        """Test the progress callback reports the final byte count."""
        responses.add(
            responses.GET,
            URL,
            body=b"x" * 1000,
            status=200,
            headers={"content-length": "1000"},
        )
        updates = []

        download_file(URL, tmp_path / "f", progress_callback=updates.append)

        assert updates
        assert updates[-1].bytes_downloaded == 1000
        assert updates[-1].percentage == 100


class TestFormatProgress:
    """Test format_progress()."""

    def test_with_total(self):
        """Test formatting with known total size."""
        progress = DownloadProgress(52428800, 104857600, 50.0, 1048576, 50)
        assert format_progress(progress) == "50.0/100.0 MB (50.0%) at 1.0 MB/s ETA: 50s"

    def test_unknown_total(self):
        """Test formatting without a total size."""
        progress = DownloadProgress(1048576, 0, 0, 1048576, 0)
        assert format_progress(progress) == "1.0 MB at 1.0 MB/s"

    def test_str(self):
        """Test str() uses format_progress."""
        progress = DownloadProgress(1048576, 0, 0, 1048576, 0)
        assert str(progress) == format_progress(progress)
