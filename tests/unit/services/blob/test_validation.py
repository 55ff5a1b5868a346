"""
Unit tests for TTL validation and blob naming.

Author: azblob-plugin contributors
Date: 2026
"""

import uuid

import pytest

from azblob.services.blob.exceptions import MissingOrInvalidTtl
from azblob.services.blob.validation import (
    generate_blob_name,
    normalize_extension,
    parse_ttl,
)


class TestParseTtl:
    """Test TTL parsing."""

    @pytest.mark.parametrize("raw,expected", [
        ("30", 30.0),
        ("1", 1.0),
        ("0.5", 0.5),
        (" 15 ", 15.0),
        ("525600", 525600.0),
        ("+5", 5.0),
        (".5", 0.5),
        ("1.", 1.0),
        ("1.5e1", 15.0),
    ])
    def test_valid_ttl(self, raw, expected):
        """Test positive numeric TTLs are accepted, including fractions."""
        assert parse_ttl(raw) == expected

    def test_missing_ttl(self):
        """Test a missing TTL is rejected."""
        with pytest.raises(MissingOrInvalidTtl) as exc_info:
            parse_ttl(None)
        assert exc_info.value.message == "TTL is required."
        assert exc_info.value.details["reason"] == "missing"

    @pytest.mark.parametrize("raw", ["", "   "])
    def test_empty_ttl(self, raw):
        """Test an empty TTL counts as missing."""
        with pytest.raises(MissingOrInvalidTtl) as exc_info:
            parse_ttl(raw)
        assert exc_info.value.details["reason"] == "missing"

    @pytest.mark.parametrize("raw", ["abc", "30m", "1e", "nan", "inf", "-inf", "1e400", "0x10", "1 0"])
    def test_non_numeric_ttl(self, raw):
        """Test non-numeric and non-finite TTLs are rejected."""
        with pytest.raises(MissingOrInvalidTtl) as exc_info:
            parse_ttl(raw)
        assert exc_info.value.details["reason"] == "not_numeric"

    @pytest.mark.parametrize("raw", ["1_0", "\u0661\u0662", "\uff13\uff10", "\u00b2"])
    def test_non_ascii_numerals_rejected(self, raw):
        """Test underscores and non-ASCII digits are not read as numbers."""
        with pytest.raises(MissingOrInvalidTtl) as exc_info:
            parse_ttl(raw)
        assert exc_info.value.details["reason"] == "not_numeric"

    @pytest.mark.parametrize("raw", ["0", "-5", "-0.1"])
    def test_non_positive_ttl(self, raw):
        """Test zero and negative TTLs are rejected."""
        with pytest.raises(MissingOrInvalidTtl) as exc_info:
            parse_ttl(raw)
        assert exc_info.value.details["reason"] == "not_positive"

    def test_no_upper_bound_by_default(self):
        """Test long leases are accepted when no maximum is configured."""
        assert parse_ttl("5000000") == 5000000.0

    def test_configured_maximum(self):
        """Test the optional maximum rejects larger values."""
        assert parse_ttl("60", max_ttl_minutes=60) == 60.0
        with pytest.raises(MissingOrInvalidTtl) as exc_info:
            parse_ttl("61", max_ttl_minutes=60)
        assert exc_info.value.details["reason"] == "exceeds_maximum"

    def test_unrepresentable_expiry(self):
        """Test TTLs beyond the datetime range are rejected."""
        with pytest.raises(MissingOrInvalidTtl) as exc_info:
            parse_ttl("1e20")
        assert exc_info.value.details["reason"] == "out_of_range"


class TestNormalizeExtension:
    """Test extension normalization."""

    @pytest.mark.parametrize("extension,expected", [
        ("log", "log"),
        (".log", "log"),
        ("..log", ".log"),
        ("tar.gz", "tar.gz"),
        (".tar.gz", "tar.gz"),
        ("weird ext!", "weird ext!"),
    ])
    def test_strips_one_leading_dot(self, extension, expected):
        """Test exactly one leading dot is removed."""
        assert normalize_extension(extension) == expected

    @pytest.mark.parametrize("extension", [None, "", "."])
    def test_empty_extension(self, extension):
        """Test empty extensions normalize to None."""
        assert normalize_extension(extension) is None


class TestGenerateBlobName:
    """Test blob name generation."""

    def test_bare_name_is_uuid(self):
        """Test a name without extension is a canonical UUID with no dot."""
        name = generate_blob_name()
        assert "." not in name
        assert str(uuid.UUID(name)) == name

    def test_name_with_extension(self):
        """Test the extension is appended after a single dot."""
        name = generate_blob_name(".log")
        stem, suffix = name.split(".", 1)
        assert suffix == "log"
        uuid.UUID(stem)

    def test_name_with_double_dot_extension(self):
        """Test only one leading dot is stripped before re-prefixing."""
        name = generate_blob_name("..log")
        assert name.endswith("..log")
        uuid.UUID(name[:-len("..log")])

    def test_empty_extension_gives_bare_name(self):
        """Test an empty extension does not add a trailing dot."""
        assert "." not in generate_blob_name("")

    def test_names_are_unique(self):
        """Test repeated calls produce distinct names."""
        names = {generate_blob_name(".bin") for _ in range(1000)}
        assert len(names) == 1000
