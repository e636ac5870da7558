"""
Android Release CLI - Command-line interface.

Publish release files to Google Play or sign them, from a terminal or a
CI step. Every option can also be supplied as an INPUT_<NAME>
environment variable.
"""

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from android_release.config import Settings
from android_release.core.exceptions import (
    AndroidReleaseError,
    ConfigurationError,
    format_exception,
)
from android_release.core.models import Mode, PublishResult, SigningReport
from android_release.dispatcher import Dispatcher, SignInputs, UploadInputs
from android_release.notes.whatsnew import ReleaseNotesSource
from android_release.orchestrator.core import publish_summary

app = typer.Typer(
    name="android-release",
    help="Android Release - publish to Google Play and sign release files",
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _split_patterns(value: Optional[str]) -> list[str]:
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def _require(value: Optional[str], name: str) -> str:
    if not value:
        raise ConfigurationError(f"Input '{name}' is required", config_key=name)
    return value


@app.command()
def run(
    mode: Mode = typer.Option(
        Mode.UPLOAD, "--type", "-t", envvar="INPUT_TYPE", help="Run mode"
    ),
    service_account_json: Optional[str] = typer.Option(
        None, "--service-account-json", envvar="INPUT_SERVICEACCOUNTJSON",
        help="Path to a service account JSON file",
    ),
    service_account_json_plain_text: Optional[str] = typer.Option(
        None, "--service-account-json-plain-text",
        envvar="INPUT_SERVICEACCOUNTJSONPLAINTEXT",
        help="Service account JSON as plain text", show_default=False,
    ),
    package_name: Optional[str] = typer.Option(
        None, "--package-name", "-p", envvar="INPUT_PACKAGENAME", help="Application id"
    ),
    release_file: Optional[str] = typer.Option(
        None, "--release-file", envvar="INPUT_RELEASEFILE",
        help="Deprecated, use --release-files",
    ),
    release_files: Optional[str] = typer.Option(
        None, "--release-files", "-f", envvar="INPUT_RELEASEFILES",
        help="Comma separated release file paths or glob patterns",
    ),
    release_name: Optional[str] = typer.Option(
        None, "--release-name", envvar="INPUT_RELEASENAME", help="Release name"
    ),
    track: str = typer.Option(
        "production", "--track", envvar="INPUT_TRACK", help="Track to publish to"
    ),
    in_app_update_priority: Optional[int] = typer.Option(
        None, "--in-app-update-priority", envvar="INPUT_INAPPUPDATEPRIORITY",
        help="In-app update priority, 0 to 5",
    ),
    user_fraction: Optional[float] = typer.Option(
        None, "--user-fraction", envvar="INPUT_USERFRACTION",
        help="Staged rollout fraction, strictly between 0 and 1",
    ),
    status: str = typer.Option(
        "completed", "--status", envvar="INPUT_STATUS",
        help="completed, inProgress, halted or draft",
    ),
    whats_new_directory: Optional[Path] = typer.Option(
        None, "--whats-new-directory", envvar="INPUT_WHATSNEWDIRECTORY",
        help="Directory of whatsnew-<locale> files",
    ),
    release_notes_source: ReleaseNotesSource = typer.Option(
        ReleaseNotesSource.NONE, "--release-notes-source",
        envvar="INPUT_RELEASENOTESSOURCE", help="Where release notes come from",
    ),
    release_notes_path: Optional[Path] = typer.Option(
        None, "--release-notes-path", envvar="INPUT_RELEASENOTESPATH",
        help="Release notes file for --release-notes-source file",
    ),
    release_notes: Optional[str] = typer.Option(
        None, "--release-notes", envvar="INPUT_RELEASENOTES",
        help="Release notes text for the default language",
    ),
    mapping_file: Optional[Path] = typer.Option(
        None, "--mapping-file", envvar="INPUT_MAPPINGFILE", help="ProGuard mapping file"
    ),
    debug_symbols: Optional[Path] = typer.Option(
        None, "--debug-symbols", envvar="INPUT_DEBUGSYMBOLS",
        help="Native debug symbols file or directory",
    ),
    changes_not_sent_for_review: bool = typer.Option(
        False, "--changes-not-sent-for-review",
        envvar="INPUT_CHANGESNOTSENTFORREVIEW",
        help="Commit without sending the changes for review",
    ),
    existing_edit_id: Optional[str] = typer.Option(
        None, "--existing-edit-id", envvar="INPUT_EXISTINGEDITID",
        help="Reuse an open edit instead of creating one",
    ),
    release_directory: Optional[Path] = typer.Option(
        None, "--release-directory", "-d", envvar="INPUT_RELEASEDIRECTORY",
        help="Directory of release files to sign",
    ),
    signing_key_base64: Optional[str] = typer.Option(
        None, "--signing-key-base64", envvar="INPUT_SIGNINGKEYBASE64",
        help="Base64 encoded keystore", show_default=False,
    ),
    alias: Optional[str] = typer.Option(
        None, "--alias", envvar="INPUT_ALIAS", help="Key alias"
    ),
    key_store_password: Optional[str] = typer.Option(
        None, "--key-store-password", envvar="INPUT_KEYSTOREPASSWORD",
        help="Keystore password", show_default=False,
    ),
    key_password: Optional[str] = typer.Option(
        None, "--key-password", envvar="INPUT_KEYPASSWORD",
        help="Key password", show_default=False,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    """Publish release files or sign them."""
    _configure_logging(verbose)

    try:
        dispatcher = Dispatcher(settings=Settings.from_env())

        if mode is Mode.UPLOAD:
            inputs = UploadInputs(
                service_account_json=service_account_json,
                service_account_json_plain_text=service_account_json_plain_text,
                package_name=_require(package_name, "packageName"),
                release_file=release_file,
                release_files=_split_patterns(release_files),
                release_name=release_name,
                track=track,
                in_app_update_priority=in_app_update_priority,
                user_fraction=user_fraction,
                status=status,
                whats_new_directory=whats_new_directory,
                release_notes_source=release_notes_source,
                release_notes_path=release_notes_path,
                release_notes=release_notes,
                mapping_file=mapping_file,
                debug_symbols=debug_symbols,
                changes_not_sent_for_review=changes_not_sent_for_review,
                existing_edit_id=existing_edit_id,
            )
            console.print(
                Panel.fit(
                    f"[bold blue]Android Release[/bold blue]\n"
                    f"Package: {inputs.package_name}\n"
                    f"Track: {inputs.track}\n"
                    f"Status: {inputs.status}",
                )
            )
            result = dispatcher.dispatch(mode, upload=inputs)
        else:
            inputs = SignInputs(
                release_directory=_require(
                    str(release_directory) if release_directory else None,
                    "releaseDirectory",
                ),
                signing_key_base64=_require(signing_key_base64, "signingKeyBase64"),
                alias=_require(alias, "alias"),
                key_store_password=_require(key_store_password, "keyStorePassword"),
                key_password=key_password,
            )
            console.print(
                Panel.fit(
                    f"[bold blue]Android Release[/bold blue]\n"
                    f"Signing: {inputs.release_directory}\n"
                    f"Alias: {inputs.alias}",
                )
            )
            result = dispatcher.dispatch(mode, sign=inputs)
    except AndroidReleaseError as e:
        err_console.print(f"[red]Error:[/red] {escape(format_exception(e))}")
        raise typer.Exit(1)

    if isinstance(result, PublishResult):
        console.print(publish_summary(result), markup=False)
        return

    _print_signing_report(result)
    if result.failed:
        raise typer.Exit(1)


def _print_signing_report(report: SigningReport) -> None:
    table = Table(title=f"Signed Release Files ({len(report.results)})")
    table.add_column("#", justify="right")
    table.add_column("Source", style="cyan")
    table.add_column("Result")

    for result in report.results:
        if result.is_success():
            outcome = f"[green]{escape(str(result.signed_path))}[/green]"
        else:
            outcome = f"[red]{escape(result.error_message or 'failed')}[/red]"
        table.add_row(str(result.index), escape(result.source.name), outcome)

    console.print(table)


@app.command()
def version():
    """Show Android Release version."""
    from android_release import __version__

    console.print(f"Android Release v{__version__}")


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
