"""Tests for directory scanning, type detection, and content hashing."""

from pathlib import Path

import pytest

from nameback.ingestion import DirectoryScanner, FileCategory, HashComputer, TypeDetector
from nameback.ingestion import detectors
from nameback.ingestion.detectors import category_for_extension, category_for_mime


def _tree(root: Path) -> None:
    (root / "b.txt").write_text("b", encoding="utf-8")
    (root / "a.txt").write_text("a", encoding="utf-8")
    (root / ".secret").write_text("s", encoding="utf-8")
    (root / "sub").mkdir()
    (root / "sub" / "c.txt").write_text("c", encoding="utf-8")
    (root / ".git").mkdir()
    (root / ".git" / "config").write_text("x", encoding="utf-8")


def test_scanner_walks_sorted_and_recursive(tmp_path: Path) -> None:
    _tree(tmp_path)

    names = [item.path.name for item in DirectoryScanner(skip_hidden=False).scan(tmp_path)]

    assert names == [".secret", "a.txt", "b.txt", "config", "c.txt"]


def test_scanner_prunes_hidden_entries(tmp_path: Path) -> None:
    _tree(tmp_path)

    found = list(DirectoryScanner(skip_hidden=True).scan(tmp_path))

    assert [item.path.name for item in found] == ["a.txt", "b.txt", "c.txt"]
    assert found[0].size_bytes == 1
    assert found[0].path.is_absolute()


def test_scanner_skips_symlinks_by_default(tmp_path: Path) -> None:
    target = tmp_path / "real.txt"
    target.write_text("real", encoding="utf-8")
    (tmp_path / "link.txt").symlink_to(target)

    names = [item.path.name for item in DirectoryScanner(skip_hidden=False).scan(tmp_path)]

    assert names == ["real.txt"]


@pytest.mark.parametrize(
    ("extension", "category"),
    [
        (".JPG", FileCategory.IMAGE),
        ("docx", FileCategory.DOCUMENT),
        ("eml", FileCategory.EMAIL),
        ("htm", FileCategory.WEB),
        ("tgz", FileCategory.ARCHIVE),
        ("rs", FileCategory.SOURCE_CODE),
        ("flac", FileCategory.AUDIO),
        ("mkv", FileCategory.VIDEO),
        ("bin", FileCategory.UNKNOWN),
    ],
)
def test_category_for_extension(extension: str, category: FileCategory) -> None:
    assert category_for_extension(extension) is category


def test_category_for_mime() -> None:
    assert category_for_mime("image/heic") is FileCategory.IMAGE
    assert category_for_mime("application/pdf") is FileCategory.DOCUMENT
    assert (
        category_for_mime("application/vnd.openxmlformats-officedocument.wordprocessingml.document")
        is FileCategory.DOCUMENT
    )
    assert category_for_mime("message/rfc822") is FileCategory.EMAIL
    assert category_for_mime("application/x-tar") is FileCategory.ARCHIVE
    assert category_for_mime("application/x-executable") is FileCategory.UNKNOWN


def test_detector_prefers_signature_over_extension(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    path = tmp_path / "holiday.txt"
    path.write_bytes(b"\x89PNG\r\n\x1a\n")
    monkeypatch.setattr(TypeDetector, "sniff", lambda self, _: "image/png")

    assert TypeDetector().detect(path) == ("image/png", FileCategory.IMAGE)


def test_detector_trusts_extension_for_weak_signatures(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    path = tmp_path / "report.docx"
    path.write_bytes(b"PK\x03\x04")
    monkeypatch.setattr(TypeDetector, "sniff", lambda self, _: "application/zip")

    assert TypeDetector().detect(path) == ("application/zip", FileCategory.DOCUMENT)


def test_detector_without_libmagic_uses_extension(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    path = tmp_path / "clip.mov"
    path.write_bytes(b"\x00\x00\x00\x14ftypqt  ")
    monkeypatch.setattr(detectors, "magic", None)

    assert TypeDetector().detect(path) == ("", FileCategory.VIDEO)


def test_detector_unreadable_file_is_unknown(tmp_path: Path) -> None:
    assert TypeDetector().detect(tmp_path / "missing.jpg") == ("", FileCategory.UNKNOWN)


def test_hash_changes_with_content(tmp_path: Path) -> None:
    path = tmp_path / "a.bin"
    hasher = HashComputer()
    path.write_bytes(b"first")
    first = hasher.compute(path)

    path.write_bytes(b"second")

    assert len(first) == 16
    assert hasher.compute(path) != first


def test_large_file_hash_samples_head_and_tail(tmp_path: Path) -> None:
    size = detectors.HASH_WHOLE_FILE_LIMIT + 4 * detectors.HASH_CHUNK
    original = bytearray(size)
    path = tmp_path / "big.bin"
    path.write_bytes(bytes(original))
    hasher = HashComputer()
    baseline = hasher.compute(path)

    middle = bytearray(original)
    middle[size // 2] = 1
    path.write_bytes(bytes(middle))
    assert hasher.compute(path) == baseline

    tail = bytearray(original)
    tail[-1] = 1
    path.write_bytes(bytes(tail))
    assert hasher.compute(path) != baseline
