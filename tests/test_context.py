"""Tests for file-stem analysis, directory context, and key-phrase extraction."""

from pathlib import Path

import pytest

from nameback.context import (
    analyze_stem,
    directory_context,
    extract_key_phrases,
    is_generic_directory,
    top_key_phrase,
)
from nameback.context.stem import classify_token, strip_common_prefixes


def test_installer_name_reduces_to_its_date() -> None:
    analysis = analyze_stem("Adobe_InDesign_CS6_(Windows)_2021-08-23")

    assert analysis.text == "2021-08-23"
    assert analysis.dates == ["2021-08-23"]
    assert analysis.dates_only is True


def test_prefix_and_date_are_removed_from_descriptive_stem() -> None:
    analysis = analyze_stem("IMG_20230415_Birthday_Party")

    assert analysis.text == "Birthday_Party"
    assert analysis.dates == ["2023-04-15"]
    assert analysis.dates_only is False


@pytest.mark.parametrize("stem", ["IMG_0001", "Photoshop_v2_final", "memo", "DSC_1234"])
def test_noise_only_stems_yield_nothing(stem: str) -> None:
    assert analyze_stem(stem).text is None


def test_single_token_needs_five_characters() -> None:
    assert analyze_stem("budget").text == "budget"
    assert analyze_stem("Setup_Project_Plan_1.2.3").text == "Project_Plan"


def test_strip_common_prefixes_repeats() -> None:
    assert strip_common_prefixes("img_Screenshot_foo") == "foo"
    assert strip_common_prefixes("holiday") == "holiday"


@pytest.mark.parametrize(
    ("token", "kind"),
    [
        ("x", "short"),
        ("1.2", "decimal-version"),
        ("42", "number"),
        ("x64", "platform"),
        ("Adobe", "vendor"),
        ("CS6", "product-id"),
        ("Excel", "product-name"),
        ("v3", "version"),
        ("Budget", None),
    ],
)
def test_classify_token(token: str, kind) -> None:
    assert classify_token(token) == kind


def test_directory_context_skips_generic_names(tmp_path: Path) -> None:
    assert directory_context(tmp_path / "Taxes" / "2023" / "file.pdf") == "Taxes"
    assert directory_context(tmp_path / "Projects" / "Apollo" / "f.txt") == "Projects_Apollo"
    assert directory_context(tmp_path / "downloads" / "misc" / "f.txt") is None
    assert directory_context(tmp_path / "Apollo" / "Apollo" / "f.txt") == "Apollo"


def test_is_generic_directory() -> None:
    assert is_generic_directory("Downloads")
    assert is_generic_directory("07")
    assert is_generic_directory("1999")
    assert not is_generic_directory("13")
    assert not is_generic_directory("Receipts")


def test_extract_key_phrases_ranks_by_position_and_length() -> None:
    assert extract_key_phrases("the cat and the hat") == ["cat hat", "cat", "hat"]
    assert extract_key_phrases("the and of") == []
    assert top_key_phrase("") is None


def test_repeated_phrases_accumulate() -> None:
    text = "budget review budget review budget review"
    assert extract_key_phrases(text, 1) == ["budget review"]
