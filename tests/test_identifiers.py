"""Tests for versioned id normalization."""

from __future__ import annotations

import pytest

from at_realtime.identifiers import strip_version, truncate_at


class TestTruncateAt:
    """Unit tests for truncate_at."""

    def test_truncates_at_separator(self) -> None:
        assert truncate_at("123-v2", "-") == "123"

    def test_no_separator_is_none(self) -> None:
        assert truncate_at("noseparator", "-") is None

    def test_first_occurrence_only(self) -> None:
        assert truncate_at("51100-20240101-extra", "-") == "51100"

    def test_leading_separator_gives_empty(self) -> None:
        assert truncate_at("-20240101", "-") == ""

    def test_multibyte_characters(self) -> None:
        assert truncate_at("Tāmaki–Ōrākei-v1", "-") == "Tāmaki–Ōrākei"

    def test_multibyte_separator(self) -> None:
        assert truncate_at("abc→def", "→") == "abc"

    def test_multi_char_separator_rejected(self) -> None:
        with pytest.raises(ValueError, match="single character"):
            truncate_at("a--b", "--")


class TestStripVersion:
    """Unit tests for strip_version."""

    def test_default_separator(self) -> None:
        assert strip_version("1234-20240101") == "1234"

    def test_none_passthrough(self) -> None:
        assert strip_version(None) is None

    def test_custom_separator(self) -> None:
        assert strip_version("1234_v9", "_") == "1234"
