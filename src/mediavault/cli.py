"""Command line interface for mediavault."""

from __future__ import annotations

import difflib
import logging
from typing import Any, Callable

import click
import yaml
from click.core import ParameterSource
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table

from mediavault.config import ConfigError, ConfigManager, MediaVaultConfig
from mediavault.identifiers import IdentifierCodec
from mediavault.ingestion import SIGNATURE_BYTES, TypeSniffer
from mediavault.vault import MediaVault, UploadStatus, VerifyStatus

console = Console()
error_console = Console(stderr=True)

LOGGER = logging.getLogger(__name__)

_UNREADABLE_MESSAGE = "The file is not readable or doesn't exist."
_STATUS_STYLES = {
    UploadStatus.STORED.value: "green",
    UploadStatus.DUPLICATE.value: "yellow",
}


def _handle_cli_error(
    message: str,
    *,
    code: str,
    json_output: bool,
    details: Any | None = None,
    original: Exception | None = None,
) -> None:
    """Emit a standardized error and terminate the command.

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

    raise click.ClickException(message) from original


def _emit_message(message: Any, *, mode: str, quiet: bool) -> None:
    """Print ``message`` unless quiet mode suppresses it.

    Args:
        message: Renderable or string to emit.
        mode: Output mode identifier (``detail``, ``warning``, or ``error``).
        quiet: Whether quiet mode is active.
    """
    if quiet and mode != "error":
        return
    console.print(message, soft_wrap=True)


def _configure_logging(level: str) -> None:
    """Route ``mediavault`` loggers to a Rich handler on stderr."""
    package_logger = logging.getLogger("mediavault")
    if not any(isinstance(handler, RichHandler) for handler in package_logger.handlers):
        handler = RichHandler(console=error_console, show_path=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
        package_logger.addHandler(handler)
    package_logger.setLevel(getattr(logging, level.upper(), logging.WARNING))


def _load_config(ctx: click.Context, *, json_output: bool = False) -> MediaVaultConfig:
    """Load the effective configuration and apply logging settings."""
    try:
        manager = ConfigManager()
        manager.ensure_exists()
        config = manager.load()
    except (ConfigError, OSError) as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=json_output, original=exc)

    level = "DEBUG" if ctx.obj and ctx.obj.get("verbose") else config.logging.level
    _configure_logging(level)
    return config


def _resolve_quiet(ctx: click.Context, quiet: bool, config: MediaVaultConfig) -> bool:
    if ctx.get_parameter_source("quiet") == ParameterSource.COMMANDLINE:
        return quiet
    return config.cli.quiet_default


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="mediavault")
@click.option("-v", "--verbose", is_flag=True, help="Log debug details to stderr.")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """mediavault checks that uploads really are images or videos and content-addresses them."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


@cli.command()
@click.argument("path", type=click.Path(path_type=str))
@click.option(
    "--no-extension-check",
    is_flag=True,
    help="Accept files whose extension disagrees with their content.",
)
@click.option("--json", "json_output", is_flag=True, help="Emit a JSON result.")
@click.option("--quiet", is_flag=True, help="Suppress non-error output.")
@click.pass_context
def check(
    ctx: click.Context, path: str, no_extension_check: bool, json_output: bool, quiet: bool
) -> None:
    """Classify the file at PATH and print its content identifier.

    Exits with status 1 when the file is not an acceptable image or video.
    """
    config = _load_config(ctx, json_output=json_output)
    quiet_enabled = _resolve_quiet(ctx, quiet, config) and not json_output
    sniffer = TypeSniffer(config.upload.extension_aliases)
    enforce = config.upload.enforce_extension and not no_extension_check

    identifier = None
    try:
        with open(path, "rb") as handle:
            kind = sniffer.check_header(path, handle.read(SIGNATURE_BYTES), enforce)
            if kind is not None:
                handle.seek(0)
                identifier = IdentifierCodec().derive_identifier_from_stream(handle)
    except OSError as exc:
        LOGGER.debug("Unable to read %s: %s", path, exc)
        _handle_cli_error(
            _UNREADABLE_MESSAGE,
            code="unreadable",
            json_output=json_output,
            details={"path": path},
            original=exc,
        )

    if json_output:
        console.print_json(
            data={
                "path": path,
                "valid": kind is not None,
                "kind": kind.value if kind else None,
                "identifier": identifier,
            }
        )
    elif kind is None:
        _emit_message("[red]Invalid file content.[/red]", mode="error", quiet=quiet_enabled)
    else:
        _emit_message(
            f"[green]{escape(path)}: {kind.value} {identifier}[/green]",
            mode="detail",
            quiet=quiet_enabled,
        )

    if kind is None:
        ctx.exit(1)


@cli.command()
@click.argument("paths", nargs=-1, required=True, type=click.Path(path_type=str))
@click.option(
    "--no-extension-check",
    is_flag=True,
    help="Accept files whose extension disagrees with their content.",
)
@click.option("--json", "json_output", is_flag=True, help="Emit JSON describing each upload.")
@click.option("--quiet", is_flag=True, help="Suppress non-error output.")
@click.pass_context
def upload(
    ctx: click.Context,
    paths: tuple[str, ...],
    no_extension_check: bool,
    json_output: bool,
    quiet: bool,
) -> None:
    """Register every file in PATHS within one session.

    Files with the same content as an earlier path are reported as duplicates.
    Exits with status 1 if any path was rejected or unreadable.
    """
    config = _load_config(ctx, json_output=json_output)
    quiet_enabled = _resolve_quiet(ctx, quiet, config) and not json_output
    vault = MediaVault(config)
    enforce = False if no_extension_check else None

    rows: list[dict[str, Any]] = []
    failed = False
    for path in paths:
        try:
            result = vault.upload(path, enforce_extension=enforce)
        except OSError as exc:
            LOGGER.debug("Unable to read %s: %s", path, exc)
            rows.append({"path": path, "status": "unreadable", "identifier": None, "kind": None})
            failed = True
            continue
        rows.append(result.json_payload)
        failed = failed or result.status is UploadStatus.REJECTED

    if json_output:
        console.print_json(data={"uploads": rows})
    else:
        table = Table(title="Uploads")
        table.add_column("Path", overflow="fold")
        table.add_column("Status")
        table.add_column("Kind")
        table.add_column("Identifier", no_wrap=True)
        for row in rows:
            style = _STATUS_STYLES.get(row["status"], "red")
            table.add_row(
                escape(row["path"]),
                f"[{style}]{row['status']}[/{style}]",
                row["kind"] or "-",
                row["identifier"] or "-",
            )
        _emit_message(table, mode="detail", quiet=quiet_enabled)
        stored = sum(1 for row in rows if row["status"] == UploadStatus.STORED.value)
        _emit_message(
            f"[green]Upload summary: stored={stored}, total={len(rows)}.[/green]",
            mode="detail",
            quiet=quiet_enabled,
        )

    if failed:
        ctx.exit(1)


@cli.command("check-id")
@click.argument("identifier")
@click.option("--json", "json_output", is_flag=True, help="Emit a JSON result.")
@click.pass_context
def check_id(ctx: click.Context, identifier: str, json_output: bool) -> None:
    """Check that IDENTIFIER has the 8-4-4-4-12 hexadecimal shape."""
    valid = IdentifierCodec.is_well_formed(identifier)
    if json_output:
        console.print_json(data={"identifier": identifier, "valid": valid})
    elif valid:
        console.print(f"[green]{escape(identifier)} is well formed.[/green]", soft_wrap=True)
    else:
        console.print("[red]The provided identifier is not valid.[/red]")
    if not valid:
        ctx.exit(1)


@cli.command("check-url")
@click.argument("url")
@click.option(
    "--tld",
    "tlds",
    multiple=True,
    help="Allowed top-level-domain suffix such as .ch; repeat to allow several.",
)
@click.option("--json", "json_output", is_flag=True, help="Emit a JSON result.")
@click.pass_context
def check_url(ctx: click.Context, url: str, tlds: tuple[str, ...], json_output: bool) -> None:
    """Check that URL is well formed and, if a whitelist applies, ends with an allowed TLD.

    Without --tld the configured urls.tld_whitelist is used.
    """
    config = _load_config(ctx, json_output=json_output)
    vault = MediaVault(config)
    valid = vault.check_url(url, list(tlds) if tlds else None)
    if json_output:
        console.print_json(data={"url": url, "valid": valid})
    elif valid:
        console.print(f"[green]{escape(url)} is valid.[/green]", soft_wrap=True)
    else:
        console.print("[red]The provided URL is not valid.[/red]")
    if not valid:
        ctx.exit(1)


def _shell_upload(vault: MediaVault) -> None:
    path = click.prompt("Path to an image or video file", type=str)
    try:
        result = vault.upload(path)
    except OSError as exc:
        LOGGER.debug("Unable to read %s: %s", path, exc)
        console.print(f"[red]{_UNREADABLE_MESSAGE}[/red]")
        return

    if result.status is UploadStatus.REJECTED:
        console.print("[red]Invalid file content.[/red]")
    elif result.status is UploadStatus.DUPLICATE:
        console.print("[yellow]This file already exists.[/yellow]")
    else:
        console.print(
            f"[green]File uploaded successfully, identifier: {result.identifier}[/green]",
            soft_wrap=True,
        )


def _shell_verify(vault: MediaVault) -> None:
    identifier = click.prompt("Identifier to verify", type=str)
    result = vault.verify(identifier)
    shown = escape(identifier)
    if result.status is VerifyStatus.MALFORMED:
        console.print("[red]The provided identifier is not valid.[/red]")
    elif result.status is VerifyStatus.NOT_FOUND:
        console.print(f"[red]File {shown} doesn't exist.[/red]", soft_wrap=True)
    elif result.status is VerifyStatus.MODIFIED:
        console.print("[red]The file has been modified since it was uploaded.[/red]")
    elif result.status is VerifyStatus.MISSING:
        console.print("[red]The file has been moved or no longer exists.[/red]")
    else:
        kind = result.record.media_kind.value if result.record else "unknown"
        console.print(
            f"[green]File {shown} exists, it is a/an {kind} file.[/green]", soft_wrap=True
        )


def _shell_url(vault: MediaVault) -> None:
    identifier = click.prompt("Identifier to look up", type=str)
    url = vault.resolve_url(identifier)
    if url is None:
        console.print("[red]File not found.[/red]")
    else:
        console.print(escape(url), soft_wrap=True)


_SHELL_ACTIONS: dict[int, Callable[[MediaVault], None]] = {
    1: _shell_upload,
    2: _shell_verify,
    3: _shell_url,
}
_SHELL_MENU = (
    "Select an option:\n"
    "1 - Upload a file\n"
    "2 - Verify a file exists\n"
    "3 - Get file URL\n"
    "0 - Exit\n"
    "Your choice"
)


@cli.command()
@click.pass_context
def shell(ctx: click.Context) -> None:
    """Start an interactive session that uploads, verifies, and resolves files.

    Registrations live in memory for the duration of the session only.
    """
    config = _load_config(ctx)
    vault = MediaVault(config)
    console.print("[bold]Welcome to the mediavault upload shell.[/bold]")
    while True:
        choice = click.prompt(_SHELL_MENU, type=click.IntRange(0, 3))
        if choice == 0:
            console.print("Goodbye!")
            return
        _SHELL_ACTIONS[choice](vault)
        console.print()


@cli.group()
def config() -> None:
    """Manage mediavault configuration files and overrides."""


@config.command("view")
@click.option("--no-env", is_flag=True, help="Ignore environment overrides when displaying output.")
def config_view(no_env: bool) -> None:
    """Display the effective configuration after applying precedence rules.

    Raises:
        click.ClickException: If configuration cannot be loaded.
    """
    manager = ConfigManager()
    try:
        manager.ensure_exists()
        loaded = manager.load(include_env=not no_env)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    yaml_text = yaml.safe_dump(loaded.model_dump(mode="json"), sort_keys=False)
    console.print(Syntax(yaml_text, "yaml", word_wrap=True))


@config.command("set")
@click.argument("key")
@click.option("--value", required=True, help="YAML literal to assign to KEY.")
def config_set(key: str, value: str) -> None:
    """Persist a configuration value addressed by a dotted KEY such as upload.max_file_size_mb.

    Raises:
        click.ClickException: If parsing, assignment, or validation fails.
    """
    try:
        parsed_value = yaml.safe_load(value)
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Unable to parse value: {exc}") from exc

    try:
        change = ConfigManager().set_value(key, parsed_value)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    if change is None:
        console.print("[yellow]No changes applied; value already up to date.[/yellow]")
        return

    before, after = change
    diff = difflib.unified_diff(
        before.splitlines(),
        after.splitlines(),
        fromfile="config.yaml (before)",
        tofile="config.yaml (after)",
        lineterm="",
    )
    console.print(Syntax("\n".join(diff), "diff", word_wrap=False))
    console.print(f"[green]Updated {key.strip()}.[/green]")


def main() -> None:
    """Invoke the Click CLI as the console script entry point."""
    cli()


if __name__ == "__main__":
    main()
