"""Command line interface for trashbin."""

from __future__ import annotations

import difflib
import logging
from pathlib import Path
from typing import Any, Callable, Sequence

import click
import yaml
from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table

from trashbin.config import (
    ConfigError,
    ConfigManager,
    TrashbinConfig,
    resolve_trash_layout,
    resolve_with_precedence,
)
from trashbin.entry import TrashEntry
from trashbin.errors import TrashError
from trashbin.layout import TrashLayout
from trashbin.selection import EntryFilters, MatchMode, parse_ranges
from trashbin.store import BatchResult, EmptyResult, ListedEntry, TrashStore
from trashbin.trashinfo import TrashInfo

console = Console()
LOGGER = logging.getLogger(__name__)

_LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"
_VERBOSITY_LEVELS = {1: "INFO", 2: "DEBUG"}


class AppContext:
    """Per-invocation state shared by subcommands; configuration loads lazily."""

    def __init__(self, *, trash_dir: Path | None, verbose: int) -> None:
        self.trash_dir = trash_dir
        self.verbose = verbose
        self._config: TrashbinConfig | None = None
        self._store: TrashStore | None = None

    @property
    def config(self) -> TrashbinConfig:
        if self._config is None:
            try:
                self._config = ConfigManager().load()
            except ConfigError as exc:
                raise click.ClickException(str(exc)) from exc
            level = _VERBOSITY_LEVELS.get(min(self.verbose, 2), self._config.logging.level)
            logging.getLogger("trashbin").setLevel(level)
        return self._config

    @property
    def store(self) -> TrashStore:
        if self._store is None:
            config = self.config
            if self.trash_dir is not None:
                layout = TrashLayout.at(self.trash_dir)
            else:
                layout = resolve_trash_layout(config)
            LOGGER.debug("Using trash root %s", layout.root)
            self._store = TrashStore(layout, create_missing=config.trash.create_missing)
        return self._store

    def output_flags(self, quiet: bool, summary_mode: bool) -> tuple[bool, bool]:
        """Combine command flags with configured defaults."""
        cli_options = self.config.cli
        return quiet or cli_options.quiet_default, summary_mode or cli_options.summary_default


def _handle_cli_error(
    message: str,
    *,
    code: str,
    json_output: bool,
    details: Any | None = None,
    original: Exception | None = None,
) -> None:
    """Emit a standardized error and terminate the command appropriately.

    Args:
        message: Human-readable error message.
        code: Machine-readable error identifier.
        json_output: Indicates whether JSON mode is active.
        details: Optional structured details to include in the payload.
        original: Original exception for chaining when not using JSON.

    Raises:
        SystemExit: When emitting JSON output to terminate the command.
        click.ClickException: For non-JSON flows to surface the error.
    """
    if json_output:
        payload: dict[str, Any] = {"error": {"code": code, "message": message}}
        if details is not None:
            payload["error"]["details"] = details
        console.print_json(data=payload)
        raise SystemExit(1)

    if isinstance(original, click.ClickException):
        raise original

    raise click.ClickException(message) from original


def _emit_message(message: Any, *, mode: str, quiet: bool, summary_only: bool) -> None:
    """Conditionally print CLI output according to quiet/summary settings.

    Args:
        message: Renderable or string to emit.
        mode: Output mode identifier (`detail`, `summary`, `warning`, or `error`).
        quiet: Whether quiet mode is active.
        summary_only: Whether only summary lines should be emitted.
    """
    if quiet and mode != "error":
        return
    if summary_only and mode not in {"summary", "warning", "error"}:
        return
    console.print(message)


def _format_summary_line(command: str, root: Path | str, metrics: dict[str, Any]) -> str:
    parts = ", ".join(f"{key}={value}" for key, value in metrics.items())
    return f"[green]{command} summary for {escape(str(root))}: {parts}.[/green]"


def _emit_failures(result: BatchResult, *, quiet: bool, summary_only: bool) -> None:
    for failure in result.failures:
        _emit_message(
            f"[red]{escape(failure.target)}: {escape(failure.message)}[/red]",
            mode="error",
            quiet=quiet,
            summary_only=summary_only,
        )


def _display_path(info: TrashInfo) -> str:
    try:
        return str(info.original_path())
    except TrashError:
        return info.percent_path.encoded


def _listing_payload(listing: Sequence[ListedEntry]) -> list[dict[str, Any]]:
    return [
        {
            "index": index,
            "name": entry.name,
            "path": _display_path(info),
            "deleted_at": info.deletion_date_text,
        }
        for index, (entry, info) in enumerate(listing)
    ]


def _selection_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Attach the shared pattern/time/scope options to a command."""
    options = [
        click.argument("patterns", nargs=-1),
        click.option(
            "-m",
            "--match",
            "match_mode",
            type=click.Choice([mode.value for mode in MatchMode]),
            default=None,
            help="How PATTERNS are matched against original paths (default from config).",
        ),
        click.option(
            "--before",
            "--older-than",
            "before",
            type=str,
            help="Only entries deleted before a duration ago (e.g. 30d) or a date.",
        ),
        click.option(
            "--within",
            "--newer-than",
            "within",
            type=str,
            help="Only entries deleted within a duration (e.g. 2h) or after a date.",
        ),
        click.option("-a", "--all", "show_all", is_flag=True, help="Ignore the directory scope."),
        click.option(
            "-p",
            "--path",
            "scope",
            type=click.Path(file_okay=False, path_type=Path),
            help="Only entries originally under this directory (default: current directory).",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _build_filters(
    app: AppContext,
    *,
    patterns: Sequence[str],
    match_mode: str | None,
    before: str | None,
    within: str | None,
    show_all: bool,
    scope: Path | None,
    default_scope: bool,
) -> EntryFilters:
    under: Path | None = None
    if scope is not None:
        under = scope.expanduser().resolve()
    elif default_scope and not show_all:
        under = Path.cwd().resolve()
    return EntryFilters.build(
        patterns=patterns,
        mode=match_mode or app.config.selection.match,
        before=before,
        within=within,
        under=under,
    )


def _select_entries(
    app: AppContext,
    *,
    names: Sequence[str],
    ranges: str | None,
    filters: EntryFilters,
) -> list[TrashEntry]:
    """Resolve explicit names or a filtered, optionally indexed, listing into entries."""
    if names:
        return [app.store.get(name) for name in names]
    listing = filters.apply(app.store.list_with_metadata())
    if ranges is not None:
        listing = parse_ranges(ranges).select(listing)
    return [entry for entry, _ in listing]


def _confirm(app: AppContext, prompt: str, force: bool) -> None:
    if force or not app.config.cli.confirm_default:
        return
    click.confirm(prompt, abort=True)


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="trashbin")
@click.option(
    "--trash-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Trash root to use instead of the configured one.",
)
@click.option("-v", "--verbose", count=True, help="Increase log verbosity (-v info, -vv debug).")
@click.pass_context
def cli(ctx: click.Context, trash_dir: Path | None, verbose: int) -> None:
    """Trashbin moves files into a trash can so they can be restored later.

    Returns:
        None: This function is invoked for its side effects.
    """
    ctx.obj = AppContext(trash_dir=trash_dir, verbose=verbose)


@cli.command()
@click.argument("paths", nargs=-1, required=True, type=click.Path(path_type=Path))
@click.option("-d", "--dir", "_directory", is_flag=True, help="Ignored (rm compatibility).")
@click.option("-f", "--force", "_force", is_flag=True, help="Ignored (rm compatibility).")
@click.option(
    "-i", "--interactive", "_interactive", is_flag=True, help="Ignored (rm compatibility)."
)
@click.option(
    "-r", "-R", "--recursive", "_recursive", is_flag=True, help="Ignored (rm compatibility)."
)
@click.option("--json", "json_output", is_flag=True, help="Emit JSON describing trashed paths.")
@click.option("--summary", "summary_mode", is_flag=True, help="Only emit summary lines.")
@click.option("--quiet", is_flag=True, help="Suppress non-error output.")
@click.pass_context
def put(
    ctx: click.Context,
    paths: tuple[Path, ...],
    _directory: bool,
    _force: bool,
    _interactive: bool,
    _recursive: bool,
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
) -> None:
    """Move PATHS into the trash.

    Args:
        ctx: Click context for the invocation.
        paths: Files, directories or symlinks to trash.
        json_output: Emit JSON instead of human-readable output.
        summary_mode: Only print the summary line.
        quiet: Suppress non-error output.
    """
    app: AppContext = ctx.obj
    try:
        quiet, summary_only = app.output_flags(quiet, summary_mode)
        result = app.store.put_all(paths)
    except TrashError as exc:
        _handle_cli_error(str(exc), code="trash_error", json_output=json_output, original=exc)
        return

    if json_output:
        console.print_json(data=result.model_dump(mode="json"))
    else:
        for name in result.succeeded:
            _emit_message(
                f"Trashed as {escape(name)}", mode="detail", quiet=quiet, summary_only=summary_only
            )
        _emit_failures(result, quiet=quiet, summary_only=summary_only)
        _emit_message(
            _format_summary_line(
                "Put",
                app.store.layout.root,
                {"trashed": len(result.succeeded), "errors": len(result.failures)},
            ),
            mode="summary",
            quiet=quiet,
            summary_only=summary_only,
        )
    if result.failures:
        ctx.exit(1)


@cli.command("list")
@_selection_options
@click.option("--json", "json_output", is_flag=True, help="Emit the listing as JSON.")
@click.pass_obj
def list_command(
    app: AppContext,
    patterns: tuple[str, ...],
    match_mode: str | None,
    before: str | None,
    within: str | None,
    show_all: bool,
    scope: Path | None,
    json_output: bool,
) -> None:
    """List trashed items ordered by deletion date.

    The index column is what `--index` refers to in `restore` and `remove`
    when they are given the same filters.
    """
    try:
        filters = _build_filters(
            app,
            patterns=patterns,
            match_mode=match_mode,
            before=before,
            within=within,
            show_all=show_all,
            scope=scope,
            default_scope=True,
        )
        listing = filters.apply(app.store.list_with_metadata())
    except TrashError as exc:
        _handle_cli_error(str(exc), code="list_error", json_output=json_output, original=exc)
        return

    if json_output:
        payload = {"root": str(app.store.layout.root), "entries": _listing_payload(listing)}
        console.print_json(data=payload)
        return

    if not listing:
        console.print("[yellow]No trashed items match.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("Index", justify="right")
    table.add_column("Deleted")
    table.add_column("Path")
    for index, (_, info) in enumerate(listing):
        table.add_row(
            str(index),
            info.deletion_date.strftime("%Y-%m-%d %H:%M:%S"),
            escape(_display_path(info)),
        )
    console.print(table)


def _emit_batch(
    action: str,
    result: BatchResult,
    *,
    root: Path,
    json_output: bool,
    quiet: bool,
    summary_only: bool,
) -> None:
    """Render a restore/remove batch result."""
    if json_output:
        console.print_json(data=result.model_dump(mode="json"))
        return

    past_tense = f"{action}d"
    for name in result.succeeded:
        _emit_message(
            f"{past_tense.capitalize()} {escape(name)}",
            mode="detail",
            quiet=quiet,
            summary_only=summary_only,
        )
    _emit_failures(result, quiet=quiet, summary_only=summary_only)
    _emit_message(
        _format_summary_line(
            action.capitalize(),
            root,
            {past_tense: len(result.succeeded), "errors": len(result.failures)},
        ),
        mode="summary",
        quiet=quiet,
        summary_only=summary_only,
    )


def _entry_command(action: str, help_text: str) -> click.Command:
    """Build the `restore` / `remove` commands, which share their selection options."""

    @cli.command(action, help=help_text)
    @_selection_options
    @click.option("--index", "ranges", type=str, help="Listing indices such as '0 3..5'.")
    @click.option("-n", "--name", "names", multiple=True, help="Entry name in the trash's files/.")
    @click.option("-f", "--force", is_flag=True, help="Do not ask for confirmation.")
    @click.option("--json", "json_output", is_flag=True, help="Emit JSON describing the result.")
    @click.option("--summary", "summary_mode", is_flag=True, help="Only emit summary lines.")
    @click.option("--quiet", is_flag=True, help="Suppress non-error output.")
    @click.pass_context
    def command(
        ctx: click.Context,
        patterns: tuple[str, ...],
        match_mode: str | None,
        before: str | None,
        within: str | None,
        show_all: bool,
        scope: Path | None,
        ranges: str | None,
        names: tuple[str, ...],
        force: bool,
        json_output: bool,
        summary_mode: bool,
        quiet: bool,
    ) -> None:
        if not (patterns or before or within or scope or show_all or ranges or names):
            raise click.UsageError(
                "Select entries with PATTERNS, --before/--within, --path/--all, --index or --name."
            )

        app: AppContext = ctx.obj
        try:
            quiet, summary_only = app.output_flags(quiet, summary_mode)
            filters = _build_filters(
                app,
                patterns=patterns,
                match_mode=match_mode,
                before=before,
                within=within,
                show_all=show_all,
                scope=scope,
                default_scope=True,
            )
            entries = _select_entries(app, names=names, ranges=ranges, filters=filters)
        except TrashError as exc:
            _handle_cli_error(
                str(exc), code="selection_error", json_output=json_output, original=exc
            )
            return

        if not entries:
            _handle_cli_error(
                "No trashed items match.", code="empty_selection", json_output=json_output
            )
            return

        _confirm(app, f"{action.capitalize()} {len(entries)} item(s)?", force)
        result: BatchResult = getattr(app.store, f"{action}_entries")(entries)
        _emit_batch(
            action,
            result,
            root=app.store.layout.root,
            json_output=json_output,
            quiet=quiet,
            summary_only=summary_only,
        )
        if result.failures:
            ctx.exit(1)

    return command


restore = _entry_command(
    "restore",
    "Restore selected items to their original locations.\n\n"
    "The original parent directory must still exist and the original path must be free.",
)
remove = _entry_command("remove", "Permanently delete selected items from the trash.")


@cli.command()
@_selection_options
@click.option("--keep-strays", is_flag=True, help="Keep files that do not form a complete entry.")
@click.option("-f", "--force", is_flag=True, help="Do not ask for confirmation.")
@click.option("--json", "json_output", is_flag=True, help="Emit JSON describing the result.")
@click.option("--summary", "summary_mode", is_flag=True, help="Only emit summary lines.")
@click.option("--quiet", is_flag=True, help="Suppress non-error output.")
@click.pass_context
def empty(
    ctx: click.Context,
    patterns: tuple[str, ...],
    match_mode: str | None,
    before: str | None,
    within: str | None,
    show_all: bool,
    scope: Path | None,
    keep_strays: bool,
    force: bool,
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
) -> None:
    """Permanently delete everything in the trash, or only matching items.

    Without PATTERNS or time filters the whole trash is emptied, including
    stray files unless --keep-strays is given.
    """
    app: AppContext = ctx.obj
    try:
        quiet, summary_only = app.output_flags(quiet, summary_mode)
        filters = _build_filters(
            app,
            patterns=patterns,
            match_mode=match_mode,
            before=before,
            within=within,
            show_all=show_all,
            scope=scope,
            default_scope=False,
        )
        if filters.is_empty():
            count = sum(1 for _ in app.store.entries())
            _confirm(app, f"Permanently delete all {count} item(s)?", force)
            result: BatchResult = app.store.empty(keep_strays=keep_strays)
        else:
            selected = [entry for entry, _ in filters.apply(app.store.list_with_metadata())]
            _confirm(app, f"Permanently delete {len(selected)} matching item(s)?", force)
            result = app.store.remove_entries(selected)
    except TrashError as exc:
        _handle_cli_error(str(exc), code="empty_error", json_output=json_output, original=exc)
        return

    if json_output:
        console.print_json(data=result.model_dump(mode="json"))
    else:
        _emit_failures(result, quiet=quiet, summary_only=summary_only)
        metrics: dict[str, Any] = {"removed": len(result.succeeded)}
        if isinstance(result, EmptyResult):
            metrics["strays"] = len(result.strays_removed)
        metrics["errors"] = len(result.failures)
        _emit_message(
            _format_summary_line("Empty", app.store.layout.root, metrics),
            mode="summary",
            quiet=quiet,
            summary_only=summary_only,
        )
    if result.failures:
        ctx.exit(1)


@cli.group()
def config() -> None:
    """Manage trashbin configuration files and overrides.

    Returns:
        None: This function is invoked for its side effects.
    """


@config.command("view")
@click.option("--no-env", is_flag=True, help="Ignore environment overrides when displaying output.")
def config_view(no_env: bool) -> None:
    """Display the effective configuration after applying precedence rules.

    Args:
        no_env: If True, ignore environment-derived overrides.

    Raises:
        click.ClickException: If configuration cannot be loaded.
    """
    manager = ConfigManager()
    try:
        loaded = manager.load(include_env=not no_env)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    yaml_text = yaml.safe_dump(loaded.model_dump(mode="python"), sort_keys=False)
    console.print(Syntax(yaml_text, "yaml", word_wrap=True))


@config.command("set")
@click.argument("key")
@click.option("--value", required=True, help="Value to assign to KEY.")
def config_set(key: str, value: str) -> None:
    """Persist a configuration value expressed as a dotted KEY.

    Args:
        key: Dotted path describing the configuration field to update.
        value: YAML-literal value to write into the configuration file.

    Raises:
        click.ClickException: If parsing, assignment, or validation fails.
    """
    manager = ConfigManager()
    manager.ensure_exists()
    before = manager.read_text().splitlines()

    try:
        parsed_value = yaml.safe_load(value)
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Unable to parse value: {exc}") from exc

    try:
        manager.set_value(key, parsed_value)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    after = manager.read_text().splitlines()
    diff = [
        line
        for line in difflib.unified_diff(
            before,
            after,
            fromfile="config.yaml (before)",
            tofile="config.yaml (after)",
            lineterm="",
        )
        if not line[1:].startswith("# Last updated:")
    ]
    if not any(line[:1] in {"+", "-"} and line[:3] not in {"+++", "---"} for line in diff):
        console.print("[yellow]No changes applied; value already up to date.[/yellow]")
        return

    console.print(Syntax("\n".join(diff), "diff", word_wrap=False))
    console.print(f"[green]Updated {escape(key)}.[/green]")


@config.command("edit")
def config_edit() -> None:
    """Open the configuration file in an interactive editor session.

    Raises:
        click.ClickException: If edited content is invalid or cannot be saved.
    """
    manager = ConfigManager()
    manager.ensure_exists()

    original = manager.read_text()
    edited = click.edit(original, extension=".yaml")

    if edited is None:
        console.print("[yellow]Edit cancelled; no changes applied.[/yellow]")
        return
    if edited == original:
        console.print("[yellow]No changes detected.[/yellow]")
        return

    try:
        parsed = yaml.safe_load(edited) or {}
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Invalid YAML: {exc}") from exc
    if not isinstance(parsed, dict):
        raise click.ClickException("Configuration file must contain a top-level mapping.")

    try:
        resolve_with_precedence(defaults=TrashbinConfig(), file_overrides=parsed)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    manager.save(parsed)
    console.print("[green]Configuration updated successfully.[/green]")


def main() -> None:
    """Configure logging and invoke the Click CLI as the console script entry point.

    Returns:
        None: This function is invoked for its side effects.
    """
    logging.basicConfig(format=_LOG_FORMAT, level=logging.WARNING)
    cli()


if __name__ == "__main__":
    main()
