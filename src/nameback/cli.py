"""Command line interface for nameback."""

from __future__ import annotations

import os
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, List

import click
import yaml
from click.core import ParameterSource
from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn
from rich.syntax import Syntax
from rich.table import Table

from nameback.config import ConfigError, ConfigManager, NamebackConfig, as_environment
from nameback.deps import check_dependencies, detect_needed_dependencies
from nameback.installer import InstallError, install_dependencies
from nameback.log_config import configure_logging, resolve_level
from nameback.naming.models import FileAnalysis
from nameback.renaming import DirectoryError, ProgressEvent, RenameEngine, RenameResult
from nameback.state import HistoryError, MetadataCache, UndoError

console = Console()

EXIT_USAGE = 1
EXIT_ROOT = 2
EXIT_MISSING_TOOL = 3


class NamebackCommand(click.Command):
    """Click command that reports invalid arguments with exit status 1."""

    def parse_args(self, ctx: click.Context, args: List[str]) -> List[str]:
        try:
            return super().parse_args(ctx, args)
        except click.UsageError as exc:
            exc.exit_code = EXIT_USAGE
            raise


def _usage_error(message: str, ctx: click.Context) -> click.UsageError:
    error = click.UsageError(message, ctx)
    error.exit_code = EXIT_USAGE
    return error


def _handle_cli_error(
    message: str,
    *,
    code: str,
    json_output: bool,
    exit_code: int = 1,
    details: Any | None = None,
    original: Exception | None = None,
) -> None:
    """Emit a standardized error and terminate the command.

    Args:
        message: Human-readable error message.
        code: Machine-readable error identifier.
        json_output: Indicates whether JSON mode is active.
        exit_code: Process exit status.
        details: Optional structured details to include in the payload.
        original: Original exception for chaining when not using JSON.

    Raises:
        SystemExit: When emitting JSON output or a non-default exit status.
        click.ClickException: For other non-JSON flows to surface the error.
    """

    if json_output:
        payload: dict[str, Any] = {"error": {"code": code, "message": message}}
        if details is not None:
            payload["error"]["details"] = details
        console.print_json(data=payload)
        raise SystemExit(exit_code)

    if exit_code != 1:
        console.print(f"[red]Error:[/red] {message}")
        raise SystemExit(exit_code)

    raise click.ClickException(message) from original


def _running_as_root() -> bool:
    geteuid = getattr(os, "geteuid", None)
    return geteuid is not None and geteuid() == 0


def _cli_overrides(
    ctx: click.Context,
    *,
    skip_hidden: bool,
    multiframe_video: bool,
    include_location: bool,
    include_timestamp: bool,
    no_geocode: bool,
    no_cache: bool,
) -> dict[str, Any]:
    """Translate flags given on the command line into dotted config overrides."""
    overrides: dict[str, Any] = {}
    if skip_hidden:
        overrides["processing.skip_hidden"] = True
    if ctx.get_parameter_source("multiframe_video") == ParameterSource.COMMANDLINE:
        overrides["processing.multiframe_video"] = multiframe_video
    if include_location:
        overrides["enrichment.include_location"] = True
    if include_timestamp:
        overrides["enrichment.include_timestamp"] = True
    if no_geocode:
        overrides["enrichment.geocode"] = False
    if no_cache:
        overrides["cache.enabled"] = False
    return overrides


@contextmanager
def _progress_display(engine: RenameEngine, enabled: bool) -> Iterator[None]:
    """Render engine progress events as a rich progress bar when attached to a terminal."""
    if not enabled or not console.is_terminal:
        yield
        return
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task("Starting", total=100)

        def update(event: ProgressEvent) -> None:
            progress.update(task, completed=event.percent, description=event.message)

        engine.subscribe(update)
        yield


def _analysis_record(analysis: FileAnalysis) -> dict[str, Any]:
    chosen = analysis.chosen_candidate
    return {
        "path": str(analysis.original_path),
        "category": analysis.path_entry.category.value,
        "proposed_name": analysis.proposed_name,
        "source": chosen.source.value if chosen else None,
        "score": round(chosen.score, 3) if chosen else None,
        "from_cache": analysis.from_cache,
    }


def _render_check_deps(json_output: bool) -> None:
    statuses = check_dependencies()
    if json_output:
        console.print_json(
            data={
                "dependencies": [
                    {
                        "name": dependency.name,
                        "required": dependency.required,
                        "available": available,
                        "description": dependency.description,
                    }
                    for dependency, available in statuses
                ]
            }
        )
        return

    table = Table(title="External tools")
    table.add_column("Tool")
    table.add_column("Required")
    table.add_column("Status")
    table.add_column("Used for", overflow="fold")
    for dependency, available in statuses:
        status = "[green]installed[/green]" if available else "[red]missing[/red]"
        table.add_row(
            dependency.name, "yes" if dependency.required else "no", status, dependency.description
        )
    console.print(table)


def _render_history(engine: RenameEngine, limit: int, json_output: bool) -> None:
    operations = engine.history.operations[:limit]
    stats = engine.history.stats()
    if json_output:
        console.print_json(
            data={
                "history": [operation.model_dump(mode="json") for operation in operations],
                "stats": {
                    "total_operations": stats.total_operations,
                    "undoable_operations": stats.undoable_operations,
                    "max_entries": stats.max_entries,
                },
            }
        )
        return
    if not operations:
        console.print("[yellow]No renames recorded.[/yellow]")
        return

    table = Table(
        title=f"Rename history (newest first, {len(operations)} shown)",
        caption=f"{stats.undoable_operations} of {stats.total_operations} recorded renames "
        f"can be undone (keeps up to {stats.max_entries})",
    )
    table.add_column("When")
    table.add_column("Original", overflow="fold")
    table.add_column("Renamed to", overflow="fold")
    table.add_column("Undone")
    for operation in operations:
        table.add_row(
            operation.timestamp.strftime("%Y-%m-%d %H:%M:%S"),
            str(operation.original_path),
            operation.new_path.name,
            "yes" if operation.undone else "",
        )
    console.print(table)


def _render_cache_stats(config: NamebackConfig, json_output: bool) -> None:
    path = Path(config.cache.path).expanduser()
    stats = MetadataCache.load(path).stats()
    if json_output:
        console.print_json(
            data={
                "cache": {
                    "path": str(path),
                    "enabled": config.cache.enabled,
                    "total_entries": stats.total_entries,
                    "cache_size_bytes": stats.cache_size_bytes,
                }
            }
        )
        return

    table = Table(title="Metadata cache")
    table.add_column("Setting")
    table.add_column("Value", overflow="fold")
    table.add_row("Path", str(path))
    table.add_row("Enabled", "yes" if config.cache.enabled else "no")
    table.add_row("Entries", str(stats.total_entries))
    table.add_row("Size", f"{stats.cache_size_bytes:,} bytes")
    console.print(table)


def _render_config(manager: ConfigManager, config: NamebackConfig, json_output: bool) -> None:
    """Print the effective settings after file, environment, and flag overrides."""
    if json_output:
        console.print_json(
            data={
                "path": str(manager.config_path),
                "config": config.model_dump(mode="json"),
                "changed": as_environment(config, baseline=NamebackConfig()),
            }
        )
        return
    yaml_text = yaml.safe_dump(config.model_dump(mode="python"), sort_keys=False)
    console.print(f"[bold]Effective configuration[/bold] ({manager.config_path})")
    console.print(Syntax(yaml_text, "yaml", word_wrap=True))


def _render_results(
    root: Path,
    analyses: List[FileAnalysis],
    results: List[RenameResult],
    *,
    dry_run: bool,
    show_unchanged: bool,
) -> None:
    by_path = {result.original_path: result for result in results}
    title = f"Rename preview for {root}" if dry_run else f"Renames in {root}"
    table = Table(title=title)
    table.add_column("File", overflow="fold")
    table.add_column("New name", overflow="fold")
    table.add_column("Source")
    table.add_column("Status")
    for analysis in analyses:
        result = by_path.get(analysis.original_path)
        if result is None and not show_unchanged:
            continue
        chosen = analysis.chosen_candidate
        if result is None:
            status = "[dim]unchanged[/dim]"
        elif result.success:
            status = "[cyan]would rename[/cyan]" if dry_run else "[green]renamed[/green]"
        else:
            status = f"[red]{result.error}[/red]"
        table.add_row(
            str(analysis.original_path.relative_to(root)),
            analysis.proposed_name or "",
            chosen.source.value if chosen else "",
            status,
        )
    console.print(table)

    succeeded = sum(1 for result in results if result.success)
    failed = len(results) - succeeded
    verb = "would be renamed" if dry_run else "renamed"
    console.print(
        f"[green]{succeeded} of {len(analyses)} file(s) {verb}; {failed} failed.[/green]"
    )


@click.command(
    cls=NamebackCommand,
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.version_option(package_name="nameback")
@click.argument(
    "directory",
    required=False,
    type=click.Path(file_okay=False, path_type=Path),
)
@click.option("-n", "--dry-run", is_flag=True, help="Preview renames without touching files.")
@click.option("-s", "--skip-hidden", is_flag=True, help="Skip dot-prefixed files and folders.")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.option("--install-deps", is_flag=True, help="Install missing external tools and exit.")
@click.option("--check-deps", is_flag=True, help="Report external tool availability and exit.")
@click.option("--include-location", is_flag=True, help="Append a location token from GPS data.")
@click.option("--include-timestamp", is_flag=True, help="Append the capture date.")
@click.option(
    "--multiframe-video/--fast-video",
    default=True,
    help="Sample several video frames for OCR, or only the first second.",
)
@click.option("--no-geocode", is_flag=True, help="Use raw coordinates instead of city names.")
@click.option("--no-cache", is_flag=True, help="Ignore and do not update the metadata cache.")
@click.option("--json", "json_output", is_flag=True, help="Emit JSON instead of tables.")
@click.option("--undo", is_flag=True, help="Revert the most recent rename and exit.")
@click.option("--history", "show_history", is_flag=True, help="Show recent renames and exit.")
@click.option("--cache-stats", is_flag=True, help="Report metadata cache size and exit.")
@click.option("--show-config", is_flag=True, help="Print the effective configuration and exit.")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Configuration file to use instead of ~/.nameback/config.yaml.",
)
@click.pass_context
def cli(
    ctx: click.Context,
    directory: Path | None,
    dry_run: bool,
    skip_hidden: bool,
    verbose: bool,
    install_deps: bool,
    check_deps: bool,
    include_location: bool,
    include_timestamp: bool,
    multiframe_video: bool,
    no_geocode: bool,
    no_cache: bool,
    json_output: bool,
    undo: bool,
    show_history: bool,
    cache_stats: bool,
    show_config: bool,
    config_path: Path | None,
) -> None:
    """Rename the files in DIRECTORY after what they contain."""

    modes = {
        "--install-deps": install_deps,
        "--check-deps": check_deps,
        "--undo": undo,
        "--history": show_history,
        "--cache-stats": cache_stats,
        "--show-config": show_config,
    }
    exclusive = [flag for flag, enabled in modes.items() if enabled]
    if len(exclusive) > 1:
        raise _usage_error(f"{' and '.join(exclusive)} cannot be combined.", ctx)

    if _running_as_root():
        _handle_cli_error(
            "Refusing to run as root.",
            code="running_as_root",
            json_output=json_output,
            exit_code=EXIT_ROOT,
        )

    manager = ConfigManager(config_path)
    try:
        config: NamebackConfig = manager.load(
            cli_overrides=_cli_overrides(
                ctx,
                skip_hidden=skip_hidden,
                multiframe_video=multiframe_video,
                include_location=include_location,
                include_timestamp=include_timestamp,
                no_geocode=no_geocode,
                no_cache=no_cache,
            )
        )
    except ConfigError as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=json_output, original=exc)
        return

    configure_logging(resolve_level(verbose=verbose, configured=config.logging.level))

    if show_config:
        _render_config(manager, config, json_output)
        return

    if cache_stats:
        _render_cache_stats(config, json_output)
        return

    if check_deps:
        _render_check_deps(json_output)
        return

    if install_deps:
        def report(event: ProgressEvent) -> None:
            if not json_output:
                console.print(f"\\[{event.percent:3.0f}%] {event.message}")

        try:
            installed = install_dependencies(progress=report)
        except InstallError as exc:
            _handle_cli_error(
                str(exc), code="install_failed", json_output=json_output, original=exc
            )
            return
        if json_output:
            console.print_json(data={"installed": [dependency.name for dependency in installed]})
        else:
            console.print(f"[green]Installed {len(installed)} tool(s).[/green]")
        return

    engine = RenameEngine(config)

    if show_history or undo:
        try:
            if show_history:
                _render_history(engine, config.cli.history_limit, json_output)
                return
            operation = engine.undo_last()
        except (HistoryError, UndoError) as exc:
            _handle_cli_error(str(exc), code="undo_failed", json_output=json_output, original=exc)
            return
        if json_output:
            console.print_json(data={"undone": operation.model_dump(mode="json")})
        else:
            console.print(
                f"[green]Restored {operation.new_path.name} -> "
                f"{operation.original_path.name}[/green]"
            )
        return

    if directory is None:
        raise _usage_error("Missing argument 'DIRECTORY'.", ctx)
    if not directory.is_dir():
        raise _usage_error(f"Directory '{directory}' does not exist.", ctx)
    root = directory.expanduser().resolve()

    needs = detect_needed_dependencies(root)
    if needs.has_required_missing:
        names = ", ".join(dependency.name for dependency in needs.missing_required)
        _handle_cli_error(
            f"Required tool missing: {names}. Run `nameback --install-deps` to install it.",
            code="missing_dependency",
            json_output=json_output,
            exit_code=EXIT_MISSING_TOOL,
        )
    if needs.missing_optional and not json_output:
        names = ", ".join(dependency.name for dependency in needs.missing_optional)
        console.print(
            f"[yellow]Optional tools missing: {names}. Some files may keep their names.[/yellow]"
        )

    try:
        with _progress_display(engine, enabled=not json_output):
            analyses = engine.analyze_directory(root)
            results = engine.rename_files(analyses, dry_run=dry_run)
    except DirectoryError as exc:
        _handle_cli_error(str(exc), code="directory_error", json_output=json_output, original=exc)
        return

    if json_output:
        console.print_json(
            data={
                "context": {"root": str(root), "dry_run": dry_run},
                "files": [_analysis_record(analysis) for analysis in analyses],
                "results": [result.model_dump(mode="json") for result in results],
                "counts": {
                    "files": len(analyses),
                    "renamed": sum(1 for result in results if result.success),
                    "failed": sum(1 for result in results if not result.success),
                },
            }
        )
        return

    _render_results(
        root, analyses, results, dry_run=dry_run, show_unchanged=config.cli.show_unchanged
    )


def main() -> None:
    """Invoke the Click CLI as the console script entry point."""
    cli()


if __name__ == "__main__":
    main()
