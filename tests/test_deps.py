"""Tests for external tool detection and installation."""

from pathlib import Path
from typing import List

import pytest

from nameback import deps, installer
from nameback.deps import (
    EXIFTOOL,
    FFMPEG,
    IMAGEMAGICK,
    PDFTOPPM,
    TESSERACT,
    detect_needed_dependencies,
    is_available,
)
from nameback.external import ToolError
from nameback.installer import (
    PACKAGE_MANAGERS,
    InstallError,
    detect_package_manager,
    install_dependencies,
)
from nameback.renaming import ProgressEvent


def _available(*names: str):
    return lambda dependency: dependency.name in names


def test_sample_extensions_respects_depth(tmp_path: Path) -> None:
    (tmp_path / "a.JPG").write_text("", encoding="utf-8")
    (tmp_path / "README").write_text("", encoding="utf-8")
    nested = tmp_path / "one" / "two"
    nested.mkdir(parents=True)
    (tmp_path / "one" / "clip.mp4").write_text("", encoding="utf-8")
    (nested / "deep.pdf").write_text("", encoding="utf-8")
    (nested / "three").mkdir()
    (nested / "three" / "hidden.heic").write_text("", encoding="utf-8")

    assert deps.sample_extensions(tmp_path) == {"jpg", "mp4", "pdf"}
    assert deps.sample_extensions(tmp_path, limit=1) <= {"jpg", "mp4", "pdf"}


def test_needs_depend_on_directory_contents(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(deps, "is_available", _available())
    (tmp_path / "notes.txt").write_text("", encoding="utf-8")

    text_only = detect_needed_dependencies(tmp_path)

    assert text_only.missing_required == [EXIFTOOL]
    assert text_only.missing_optional == []

    (tmp_path / "clip.mov").write_text("", encoding="utf-8")
    (tmp_path / "scan.pdf").write_text("", encoding="utf-8")
    (tmp_path / "photo.heic").write_text("", encoding="utf-8")

    mixed = detect_needed_dependencies(tmp_path)

    assert mixed.missing_optional == [TESSERACT, FFMPEG, IMAGEMAGICK, PDFTOPPM]
    assert mixed.has_required_missing


def test_installed_tools_are_not_reported(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(deps, "is_available", _available("ExifTool", "Tesseract OCR"))
    (tmp_path / "photo.png").write_text("", encoding="utf-8")

    needs = detect_needed_dependencies(tmp_path)

    assert needs.is_empty


def test_is_available_tries_each_command(monkeypatch: pytest.MonkeyPatch) -> None:
    attempted: List[str] = []

    def fake_run(args, *, timeout):
        attempted.append(args[0])
        if args[0] == "magick":
            raise ToolError("magick", "not found")

    monkeypatch.setattr(deps, "run", fake_run)

    assert is_available(IMAGEMAGICK) is True
    assert attempted == ["magick", "convert"]


def test_detect_package_manager_prefers_first_on_path(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        installer, "which", lambda name: Path("/usr/bin/dnf") if name == "dnf" else None
    )

    manager = detect_package_manager("Linux")

    assert manager is not None and manager.name == "dnf"
    assert detect_package_manager("Plan9") is None


def test_install_dependencies_runs_manager_commands(monkeypatch: pytest.MonkeyPatch) -> None:
    commands: List[List[str]] = []
    events: List[ProgressEvent] = []
    monkeypatch.setattr(installer, "is_available", _available("ExifTool"))
    monkeypatch.setattr(installer, "run", lambda command, *, timeout: commands.append(command))
    brew = PACKAGE_MANAGERS["Darwin"][0]

    installed = install_dependencies(
        (EXIFTOOL, TESSERACT, FFMPEG), progress=events.append, manager=brew
    )

    assert installed == [TESSERACT, FFMPEG]
    assert commands == [
        ["brew", "install", "tesseract", "tesseract-lang"],
        ["brew", "install", "ffmpeg"],
    ]
    assert events[0].percent == 0
    assert events[-1] == ProgressEvent(percent=100, message="Installation complete")
    assert any(event.message == "Installing FFmpeg with brew" for event in events)


def test_optional_install_failure_is_tolerated(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_run(command, *, timeout):
        if "ffmpeg" in command:
            raise ToolError("apt-get", "exited with status 100")

    monkeypatch.setattr(installer, "is_available", _available())
    monkeypatch.setattr(installer, "run", fake_run)
    apt = PACKAGE_MANAGERS["Linux"][0]

    installed = install_dependencies((TESSERACT, FFMPEG), manager=apt)

    assert installed == [TESSERACT]


def test_required_install_failure_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_run(command, *, timeout):
        raise ToolError("apt-get", "exited with status 100")

    monkeypatch.setattr(installer, "is_available", _available())
    monkeypatch.setattr(installer, "run", fake_run)

    with pytest.raises(InstallError, match="ExifTool"):
        install_dependencies((EXIFTOOL,), manager=PACKAGE_MANAGERS["Linux"][0])


def test_missing_package_manager_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(installer, "detect_package_manager", lambda: None)

    with pytest.raises(InstallError, match="No supported package manager"):
        install_dependencies()
