"""Unit tests for utility functions."""

import pytest

from pyneocities.utils import (
    ALLOWED_FILE_TYPES,
    calculate_sha1,
    format_size,
    get_extension,
    has_allowed_extension,
)


class TestCalculateSha1:
    """Tests for calculate_sha1 function."""

    def test_known_values(self):
        """Test digests against published SHA-1 test vectors."""
        assert calculate_sha1(b"") == "da39a3ee5e6b4b0d3255bfef95601890afd80709"
        assert calculate_sha1(b"abc") == "a9993e364706816aba3e25717850c26c9cd0d89d"

    def test_deterministic(self):
        assert calculate_sha1(b"hello world") == calculate_sha1(b"hello world")

    def test_different_content_different_digest(self):
        assert calculate_sha1(b"hello") != calculate_sha1(b"hello!")

    def test_lowercase_hex(self):
        digest = calculate_sha1(b"\x00\xff" * 100)
        assert len(digest) == 40
        assert digest == digest.lower()
        int(digest, 16)


class TestExtensions:
    """Tests for extension helpers."""

    @pytest.mark.parametrize(
        "path,expected",
        [
            ("index.html", "html"),
            ("css/site.min.css", "css"),
            ("LICENSE", ""),
            (".state", ""),
            ("dir.d/README", ""),
        ],
    )
    def test_get_extension(self, path, expected):
        assert get_extension(path) == expected

    def test_allowed_extension(self):
        assert has_allowed_extension("img/cat.png", ALLOWED_FILE_TYPES)
        assert has_allowed_extension("index.html", ALLOWED_FILE_TYPES)

    def test_disallowed_extension(self):
        assert not has_allowed_extension("setup.exe", ALLOWED_FILE_TYPES)
        assert not has_allowed_extension("video.mp4", ALLOWED_FILE_TYPES)

    def test_file_without_extension_is_disallowed(self):
        assert not has_allowed_extension("Makefile", ALLOWED_FILE_TYPES)

    def test_extension_match_is_case_sensitive(self):
        assert not has_allowed_extension("PHOTO.PNG", ALLOWED_FILE_TYPES)


class TestFormatSize:
    """Tests for format_size function."""

    def test_bytes(self):
        assert format_size(256) == "256 B"

    def test_kilobytes(self):
        assert format_size(1536) == "1.5 KB"

    def test_megabytes(self):
        assert format_size(5 * 1024 * 1024) == "5.0 MB"

    def test_gigabytes(self):
        assert format_size(2 * 1024 * 1024 * 1024) == "2.0 GB"
