"""Tests for candidate scoring, quality checks, sanitization, and series detection."""

from pathlib import Path

import pytest

from nameback.metadata.quality import is_date_only, is_useful, rejection_reason
from nameback.naming.models import Candidate, NameSource
from nameback.naming.sanitizer import (
    EMPTY_NAME,
    MAX_GRAPHEMES,
    CollisionResolver,
    graphemes,
    sanitize,
)
from nameback.naming.scorer import (
    installer_indicators,
    looks_like_installer,
    looks_like_technical_id,
    make_candidate,
    score,
    select_best,
)
from nameback.naming.series import SeriesPattern, detect_series


def test_score_matches_component_formula() -> None:
    # length 6 -> 0.2 * 2, weight 3.0, one word -> 0.5, six distinct chars -> 1.5
    assert score("Report", NameSource.METADATA) == pytest.approx(5.4)
    assert score("", NameSource.METADATA) == 0.0


def test_score_is_deterministic_and_source_weighted() -> None:
    text = "Quarterly Sales Report"
    assert score(text, NameSource.METADATA) == score(text, NameSource.METADATA)
    ranked = sorted(NameSource, key=lambda source: score(text, source), reverse=True)
    assert ranked[0] is NameSource.METADATA
    assert ranked[-1] is NameSource.FALLBACK


def test_penalties_reduce_score() -> None:
    uuid = "123e4567-e89b-12d3-a456-426614174000"
    assert looks_like_technical_id(uuid)
    assert looks_like_technical_id("a" * 40)
    assert score(uuid, NameSource.METADATA) < 2.0

    assert score("2021-08-23", NameSource.FILENAME_ANALYSIS) < 2.0
    failed = score("Export failed", NameSource.METADATA)
    assert failed < score("Export summary", NameSource.METADATA)


def test_installer_detection_needs_three_indicators() -> None:
    assert installer_indicators("Adobe_Photoshop_2021_Windows_x64") >= 3
    assert looks_like_installer("Adobe_Photoshop_2021_Windows_x64")
    assert not looks_like_installer("Quarterly Sales Report Q3 2023")


def test_select_best_keeps_earliest_on_ties() -> None:
    first = Candidate(text="first", source=NameSource.METADATA, score=4.0)
    second = Candidate(text="second", source=NameSource.TEXT_EXTRACT, score=4.0)
    assert select_best([first, second]) is first


def test_select_best_requires_acceptable_score() -> None:
    weak = Candidate(text="x", source=NameSource.FALLBACK, score=1.99)
    assert select_best([weak]) is None
    assert select_best([]) is None
    assert make_candidate("Holiday Card", NameSource.OCR_IMAGE).is_acceptable


@pytest.mark.parametrize(
    ("value", "reason"),
    [
        (None, "missing"),
        ("ab", "too short"),
        ("Error loading file", "error text"),
        ("Canon MX490", "device name"),
        ("HP Photosmart", "device name"),
        ("Untitled", "placeholder"),
        ("Copy of budget", "placeholder"),
        ("2021-08-23", "date only"),
        ("???ab???", "mostly punctuation"),
        ("Heeeeello", "repetitive"),
    ],
)
def test_rejection_reasons(value, reason) -> None:
    assert rejection_reason(value) == reason


@pytest.mark.parametrize("value", ["", "   ", "Q3", " 7b "])
def test_values_under_three_characters_are_too_short(value: str) -> None:
    assert rejection_reason(value) == "too short"


def test_three_characters_is_long_enough() -> None:
    assert rejection_reason("Q3a") is None


def test_device_words_match_whole_tokens_only() -> None:
    assert is_useful("Dellwood Park")
    assert is_useful("Quarterly Sales Report Q3 2023")


def test_is_date_only_lengths() -> None:
    assert is_date_only("2023")
    assert is_date_only("2023-08")
    assert is_date_only("20230823")
    assert not is_date_only("12345")
    assert not is_date_only("2023 summary")


def test_sanitize_replaces_forbidden_characters() -> None:
    assert sanitize("Invoice #4571 — Acme Corp") == "Invoice_4571_Acme_Corp"
    assert sanitize('a/b\\c:d*e?f"g<h>i|j') == "a_b_c_d_e_f_g_h_i_j"
    assert sanitize("(Draft) [v2] notes") == "Draft_v2_notes"
    assert sanitize("abc\x00def") == "abcdef"
    assert sanitize("Dinner_47.61N_122.33W") == "Dinner_47.61N_122.33W"


def test_sanitize_keeps_unicode_and_normalizes() -> None:
    assert sanitize("Café Noir") == "Café_Noir"
    assert sanitize("会议 记录") == "会议_记录"


def test_sanitize_is_idempotent() -> None:
    samples = ["  spaced  out  ", "a//b", "__x__", "Café (2)", "tab\there", "😀 party"]
    for sample in samples:
        once = sanitize(sample)
        assert sanitize(once) == once


def test_sanitize_never_empty_and_bounded() -> None:
    assert sanitize("") == EMPTY_NAME
    assert sanitize("___ ???") == EMPTY_NAME
    long_name = sanitize("a" * 300)
    assert len(graphemes(long_name)) == MAX_GRAPHEMES


def test_graphemes_group_combining_marks() -> None:
    assert graphemes("éx") == ["é", "x"]


def test_sanitize_grapheme_limit_is_inclusive() -> None:
    at_limit = "a" * MAX_GRAPHEMES
    assert sanitize(at_limit) == at_limit
    assert sanitize(at_limit + "b") == at_limit


def test_sanitize_limit_counts_combining_marks_with_their_base() -> None:
    # "x" plus an acute accent has no precomposed form, so NFC keeps two code points.
    cluster = "x\u0301"
    at_limit = cluster * MAX_GRAPHEMES

    assert sanitize(at_limit) == at_limit
    cut = sanitize(cluster * (MAX_GRAPHEMES + 1))
    assert cut == at_limit
    assert len(graphemes(cut)) == MAX_GRAPHEMES
    assert len(cut) == 2 * MAX_GRAPHEMES


def test_collision_resolver_appends_smallest_free_suffix(tmp_path: Path) -> None:
    (tmp_path / "Report.docx").write_text("existing", encoding="utf-8")
    resolver = CollisionResolver()

    assert resolver.claim(tmp_path, "Report", "docx", "a.docx") == "Report_1.docx"
    assert resolver.claim(tmp_path, "Report", "docx", "b.docx") == "Report_2.docx"
    assert resolver.claim(tmp_path, "Summary", "JPG", "c.JPG") == "Summary.JPG"


def test_collision_resolver_ignores_own_name(tmp_path: Path) -> None:
    (tmp_path / "Report.docx").write_text("mine", encoding="utf-8")
    resolver = CollisionResolver()

    assert resolver.claim(tmp_path, "Report", "docx", "Report.docx") == "Report.docx"


def test_collision_resolver_seed(tmp_path: Path) -> None:
    resolver = CollisionResolver()
    resolver.seed(tmp_path, ["Notes.txt"])

    assert resolver.claim(tmp_path, "Notes", "txt", "x.txt") == "Notes_1.txt"


def test_detect_series_groups_three_or_more(tmp_path: Path) -> None:
    paths = [tmp_path / f"IMG_{index:03d}.jpg" for index in (3, 1, 2)]
    paths.append(tmp_path / "other.jpg")

    series = detect_series(paths)

    assert len(series) == 1
    found = series[0]
    assert found.pattern is SeriesPattern.UNDERSCORE
    assert found.base_name == "IMG"
    assert [index for _, index in found.members] == [1, 2, 3]
    assert found.member_name(tmp_path / "IMG_002.jpg", "vacation photos") == "vacation photos_002"
    assert found.member_name(tmp_path / "other.jpg", "x") is None


def test_detect_series_ignores_pairs_and_other_directories(tmp_path: Path) -> None:
    first = tmp_path / "a"
    second = tmp_path / "b"
    paths = [first / "shot-1.png", first / "shot-2.png", second / "shot-3.png"]

    assert detect_series(paths) == []


def test_series_patterns_and_width(tmp_path: Path) -> None:
    paths = [tmp_path / f"Scan ({index}).pdf" for index in (1, 2, 1200)]

    (found,) = detect_series(paths)

    assert found.pattern is SeriesPattern.PARENTHESES
    assert found.width == 4
    assert found.member_name(tmp_path / "Scan (2).pdf", "Lease") == "Lease(0002)"
    assert SeriesPattern.HYPHEN.format("clip", 7, 3) == "clip-007"
    assert SeriesPattern.SPACE.format("clip", 7, 3) == "clip 007"
