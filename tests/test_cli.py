"""CLI integration tests for `nameback`."""

from __future__ import annotations

import json
import os
from dataclasses import fields
from pathlib import Path
from typing import List, Optional

import pytest
from click.testing import CliRunner

from nameback.cli import cli
from nameback.config import NamebackConfig
from nameback.deps import EXIFTOOL, FFMPEG, TESSERACT, DependencyNeeds
from nameback.extractors import ContentExtractor
from nameback.installer import InstallError
from nameback.metadata.models import MetadataRecord
from nameback.naming.pipeline import ExtractorSet, NamingPipeline
from nameback.renaming import ProgressEvent, RenameEngine


class _TitleProbe:
    """Use the file's text as its metadata title."""

    def probe(self, path: Path) -> MetadataRecord:
        text = path.read_text(encoding="utf-8").strip()
        return MetadataRecord(title=text or None)


class _NullExtractor(ContentExtractor):
    def extract(self, path: Path) -> Optional[str]:
        return None


def _env_with_home(tmp_path: Path, **extra: str) -> dict[str, str]:
    """Return environment variables pointing HOME to a temp directory."""
    env = dict(os.environ)
    env["HOME"] = str(tmp_path / "home")
    env.update(extra)
    return env


@pytest.fixture
def engines(monkeypatch: pytest.MonkeyPatch) -> List[RenameEngine]:
    """Replace external tooling with in-process fakes and collect created engines."""
    created: List[RenameEngine] = []

    def build(config: NamebackConfig) -> RenameEngine:
        extractors = ExtractorSet(**{item.name: _NullExtractor() for item in fields(ExtractorSet)})
        pipeline = NamingPipeline(
            config.processing, config.enrichment, probe=_TitleProbe(), extractors=extractors
        )
        engine = RenameEngine(config, pipeline=pipeline)
        created.append(engine)
        return engine

    monkeypatch.setattr("nameback.cli.RenameEngine", build)
    monkeypatch.setattr("nameback.cli._running_as_root", lambda: False)
    monkeypatch.setattr("nameback.cli.detect_needed_dependencies", lambda _: DependencyNeeds())
    return created


def _inbox(tmp_path: Path) -> Path:
    root = tmp_path / "inbox"
    root.mkdir()
    (root / "IMG_4312.jpg").write_text("Harbor at Dawn", encoding="utf-8")
    return root


def test_cli_help_describes_usage() -> None:
    result = CliRunner().invoke(cli, ["--help"])

    assert result.exit_code == 0
    assert "Rename the files in DIRECTORY" in result.output
    assert "--dry-run" in result.output


def test_dry_run_json_reports_without_renaming(
    tmp_path: Path, engines: List[RenameEngine]
) -> None:
    root = _inbox(tmp_path)

    result = CliRunner().invoke(
        cli, [str(root), "--dry-run", "--json"], env=_env_with_home(tmp_path)
    )

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["context"]["dry_run"] is True
    assert payload["counts"] == {"files": 1, "renamed": 1, "failed": 0}
    assert payload["files"][0]["proposed_name"] == "Harbor_at_Dawn.jpg"
    assert payload["files"][0]["source"] == "Metadata"
    assert payload["results"][0]["new_name"] == "Harbor_at_Dawn.jpg"
    assert (root / "IMG_4312.jpg").exists()


def test_rename_history_and_undo(tmp_path: Path, engines: List[RenameEngine]) -> None:
    root = _inbox(tmp_path)
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    renamed = runner.invoke(cli, [str(root)], env=env)
    assert renamed.exit_code == 0, renamed.output
    assert "1 of 1 file(s) renamed" in renamed.output
    assert (root / "Harbor_at_Dawn.jpg").exists()

    history = runner.invoke(cli, ["--history", "--json"], env=env)
    assert history.exit_code == 0, history.output
    payload = json.loads(history.stdout)
    assert Path(payload["history"][0]["new_path"]).name == "Harbor_at_Dawn.jpg"
    assert payload["stats"] == {
        "total_operations": 1,
        "undoable_operations": 1,
        "max_entries": 1000,
    }

    undo = runner.invoke(cli, ["--undo"], env=env)
    assert undo.exit_code == 0, undo.output
    assert "Restored Harbor_at_Dawn.jpg -> IMG_4312.jpg" in undo.output
    assert (root / "IMG_4312.jpg").exists()

    again = runner.invoke(cli, ["--undo", "--json"], env=env)
    assert again.exit_code == 1
    assert json.loads(again.stdout)["error"]["code"] == "undo_failed"


def test_flags_become_config_overrides(tmp_path: Path, engines: List[RenameEngine]) -> None:
    root = _inbox(tmp_path)

    result = CliRunner().invoke(
        cli,
        [
            str(root),
            "--dry-run",
            "--skip-hidden",
            "--include-location",
            "--include-timestamp",
            "--no-geocode",
            "--no-cache",
            "--fast-video",
        ],
        env=_env_with_home(tmp_path),
    )

    assert result.exit_code == 0, result.output
    config = engines[0].config
    assert config.processing.skip_hidden is True
    assert config.processing.multiframe_video is False
    assert config.enrichment.include_location is True
    assert config.enrichment.include_timestamp is True
    assert config.enrichment.geocode is False
    assert config.cache.enabled is False


def test_video_default_does_not_override_environment(
    tmp_path: Path, engines: List[RenameEngine]
) -> None:
    root = _inbox(tmp_path)
    env = _env_with_home(tmp_path, NAMEBACK__PROCESSING__MULTIFRAME_VIDEO="false")

    result = CliRunner().invoke(cli, [str(root), "--dry-run"], env=env)

    assert result.exit_code == 0, result.output
    assert engines[0].config.processing.multiframe_video is False


@pytest.mark.parametrize(
    ("args", "message"),
    [
        ([], "Missing argument 'DIRECTORY'"),
        (["does-not-exist"], "does not exist"),
        (["--undo", "--history"], "cannot be combined"),
        (["--cache-stats", "--show-config"], "cannot be combined"),
        (["--bogus"], "No such option"),
    ],
)
def test_usage_errors_exit_with_one(
    tmp_path: Path, engines: List[RenameEngine], args: List[str], message: str
) -> None:
    result = CliRunner().invoke(cli, args, env=_env_with_home(tmp_path))

    assert result.exit_code == 1
    assert message in result.output


def test_refuses_to_run_as_root(
    tmp_path: Path, engines: List[RenameEngine], monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr("nameback.cli._running_as_root", lambda: True)

    result = CliRunner().invoke(cli, [str(_inbox(tmp_path))], env=_env_with_home(tmp_path))

    assert result.exit_code == 2
    assert "root" in result.output
    assert engines == []


def test_missing_required_tool_exits_with_three(
    tmp_path: Path, engines: List[RenameEngine], monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(
        "nameback.cli.detect_needed_dependencies",
        lambda _: DependencyNeeds(missing_required=[EXIFTOOL]),
    )
    root = _inbox(tmp_path)

    result = CliRunner().invoke(cli, [str(root), "--json"], env=_env_with_home(tmp_path))

    assert result.exit_code == 3
    error = json.loads(result.stdout)["error"]
    assert error["code"] == "missing_dependency"
    assert "ExifTool" in error["message"]
    assert (root / "IMG_4312.jpg").exists()


def test_missing_optional_tool_only_warns(
    tmp_path: Path, engines: List[RenameEngine], monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(
        "nameback.cli.detect_needed_dependencies",
        lambda _: DependencyNeeds(missing_optional=[TESSERACT]),
    )

    result = CliRunner().invoke(
        cli, [str(_inbox(tmp_path)), "--dry-run"], env=_env_with_home(tmp_path)
    )

    assert result.exit_code == 0, result.output
    assert "Optional tools missing: Tesseract OCR" in result.output


def test_invalid_config_file(tmp_path: Path, engines: List[RenameEngine]) -> None:
    config_path = tmp_path / "broken.yaml"
    config_path.write_text("processing: [unclosed", encoding="utf-8")

    result = CliRunner().invoke(
        cli,
        [str(_inbox(tmp_path)), "--config", str(config_path), "--json"],
        env=_env_with_home(tmp_path),
    )

    assert result.exit_code == 1
    assert json.loads(result.stdout)["error"]["code"] == "config_error"


def test_check_deps_json(
    tmp_path: Path, engines: List[RenameEngine], monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(
        "nameback.cli.check_dependencies", lambda: [(EXIFTOOL, True), (TESSERACT, False)]
    )

    result = CliRunner().invoke(cli, ["--check-deps", "--json"], env=_env_with_home(tmp_path))

    assert result.exit_code == 0, result.output
    statuses = json.loads(result.stdout)["dependencies"]
    assert [(item["name"], item["required"], item["available"]) for item in statuses] == [
        ("ExifTool", True, True),
        ("Tesseract OCR", False, False),
    ]
    assert engines == []


def test_install_deps_reports_progress(
    tmp_path: Path, engines: List[RenameEngine], monkeypatch: pytest.MonkeyPatch
) -> None:
    def fake_install(*, progress=None):
        progress(ProgressEvent(50, "Installing FFmpeg"))
        return [FFMPEG]

    monkeypatch.setattr("nameback.cli.install_dependencies", fake_install)

    result = CliRunner().invoke(cli, ["--install-deps"], env=_env_with_home(tmp_path))

    assert result.exit_code == 0, result.output
    assert "Installing FFmpeg" in result.output
    assert "Installed 1 tool(s)" in result.output


def test_install_deps_failure(
    tmp_path: Path, engines: List[RenameEngine], monkeypatch: pytest.MonkeyPatch
) -> None:
    def failing_install(*, progress=None):
        raise InstallError("No supported package manager found")

    monkeypatch.setattr("nameback.cli.install_dependencies", failing_install)

    result = CliRunner().invoke(cli, ["--install-deps"], env=_env_with_home(tmp_path))

    assert result.exit_code == 1
    assert "No supported package manager found" in result.output


def test_cache_stats_track_dry_runs_and_renames(
    tmp_path: Path, engines: List[RenameEngine]
) -> None:
    root = _inbox(tmp_path)
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    assert runner.invoke(cli, [str(root), "--dry-run"], env=env).exit_code == 0
    previewed = runner.invoke(cli, ["--cache-stats", "--json"], env=env)
    assert previewed.exit_code == 0, previewed.output
    cache = json.loads(previewed.stdout)["cache"]
    assert cache["total_entries"] == 1
    assert cache["cache_size_bytes"] > 0
    assert cache["path"] == str(tmp_path / "home" / ".nameback" / "cache" / "metadata.json")

    assert runner.invoke(cli, [str(root)], env=env).exit_code == 0
    renamed = runner.invoke(cli, ["--cache-stats"], env=env)
    assert renamed.exit_code == 0, renamed.output
    assert "Metadata cache" in renamed.output
    after = runner.invoke(cli, ["--cache-stats", "--json"], env=env)
    assert json.loads(after.stdout)["cache"]["total_entries"] == 0


def test_show_config_reports_effective_settings(
    tmp_path: Path, engines: List[RenameEngine]
) -> None:
    env = _env_with_home(tmp_path, NAMEBACK__ENRICHMENT__INCLUDE_TIMESTAMP="true")

    result = CliRunner().invoke(cli, ["--show-config", "--no-geocode", "--json"], env=env)

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["path"] == str(tmp_path / "home" / ".nameback" / "config.yaml")
    assert payload["config"]["enrichment"]["include_timestamp"] is True
    assert payload["config"]["enrichment"]["geocode"] is False
    assert payload["changed"] == {
        "NAMEBACK__ENRICHMENT__INCLUDE_TIMESTAMP": "true",
        "NAMEBACK__ENRICHMENT__GEOCODE": "false",
    }
    assert engines == []


def test_show_config_prints_yaml(tmp_path: Path, engines: List[RenameEngine]) -> None:
    result = CliRunner().invoke(cli, ["--show-config"], env=_env_with_home(tmp_path))

    assert result.exit_code == 0, result.output
    assert "Effective configuration" in result.output
    assert "multiframe_video: true" in result.output
