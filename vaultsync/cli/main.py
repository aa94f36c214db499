"""vaultsync CLI - Password vault sync client."""

from typing import Optional

import typer
from dotenv import find_dotenv, load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .. import __version__
from ..api import ApiClient, login_and_sync
from ..config.settings import get_settings
from ..crypto import CipherString, CipherSuite, CryptoError, DecryptionError
from ..exceptions import ApiError
from ..models import AppData, CipherEntry
from ..storage import clear_app_data, get_app_data_dir, read_app_data
from ..utils.logging import setup_logging

app = typer.Typer(
    name="vaultsync",
    help="Sync and cache an encrypted password vault.",
    no_args_is_help=True,
)

console = Console()


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
):
    """Load .env and configure logging before any command."""
    load_dotenv(find_dotenv(usecwd=True))
    try:
        settings = get_settings()
    except ValueError as e:
        _fail(f"invalid configuration: {e}")
    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_file=settings.log_file,
    )


def _fail(error: object) -> None:
    console.print(f"[red]Error: {escape(str(error))}[/red]")
    raise typer.Exit(1)


def _load_cache() -> AppData:
    try:
        return read_app_data()
    except ApiError as e:
        _fail(e)


def _print_summary(app_data: AppData) -> None:
    vault = app_data.vault
    console.print(f"\n[bold]Account: {vault.profile.email}[/bold]")
    console.print(f"Entries: {len(vault.ciphers)}")
    console.print(f"Folders: {len(vault.folders)}")
    console.print(f"Favorites: {len(vault.favorites())}")


@app.command()
def login(
    email: str = typer.Argument(..., help="Account email"),
    password: str = typer.Option(
        ...,
        "--password", "-p",
        prompt=True,
        hide_input=True,
        help="Master password",
    ),
):
    """
    Log in, download the vault and cache it locally.
    """
    try:
        with ApiClient() as client:
            app_data = login_and_sync(email, password, client=client)
    except (ApiError, CryptoError, ValueError) as e:
        _fail(e)

    console.print("[green]Logged in and synced.[/green]")
    _print_summary(app_data)


@app.command()
def sync(
    email: Optional[str] = typer.Argument(None, help="Account email (default: cached account)"),
    password: str = typer.Option(
        ...,
        "--password", "-p",
        prompt=True,
        hide_input=True,
        help="Master password",
    ),
):
    """
    Re-authenticate and replace the cached vault.

    Tokens are not refreshed, so every sync logs in again.
    """
    if email is None:
        email = _load_cache().email

    try:
        with ApiClient() as client:
            app_data = login_and_sync(email, password, client=client)
    except (ApiError, CryptoError, ValueError) as e:
        _fail(e)

    console.print("[green]Vault synced.[/green]")
    _print_summary(app_data)


@app.command()
def status():
    """
    Show the cached session and vault without unlocking it.
    """
    app_data = _load_cache()
    auth = app_data.auth
    profile = app_data.vault.profile

    _print_summary(app_data)
    console.print(f"Name: {profile.name}")
    console.print(f"Premium: {'yes' if profile.premium else 'no'}")
    console.print(f"Two-factor: {'enabled' if profile.tfa_enabled else 'disabled'}")
    console.print(f"\nToken: {auth.token_type}, issued for {auth.expires_in}s")
    console.print(f"KDF: {auth.kdf} ({auth.kdf_iterations} iterations)")


def _label(cipher: CipherSuite, value: CipherString) -> str:
    try:
        return cipher.decrypt_str(value)
    except DecryptionError:
        return "(undecryptable)"


def _entry_name(cipher: CipherSuite, entry: CipherEntry) -> str:
    # Organization items are protected by organization keys
    if entry.organization_id is not None:
        return "(organization item)"
    return _label(cipher, entry.name)


@app.command(name="list")
def list_entries(
    folder: Optional[str] = typer.Option(
        None,
        "--folder", "-f",
        help="Only show entries in this folder",
    ),
    password: str = typer.Option(
        ...,
        "--password", "-p",
        prompt=True,
        hide_input=True,
        help="Master password",
    ),
):
    """
    Unlock the cached vault and list entry names by folder.
    """
    app_data = _load_cache()

    try:
        cipher = app_data.unlock(password)
    except CryptoError as e:
        _fail(e)

    folder_names = {f.uuid: _label(cipher, f.name) for f in app_data.vault.folders}

    table = Table(title=f"Vault: {app_data.email}")
    table.add_column("Folder", style="cyan")
    table.add_column("Name")
    table.add_column("Fav", justify="center")

    for entry in app_data.vault.ciphers:
        folder_name = folder_names.get(entry.folder_id, "No Folder")
        if folder is not None and folder_name != folder:
            continue
        table.add_row(
            escape(folder_name),
            escape(_entry_name(cipher, entry)),
            "*" if entry.favorite else "",
        )

    console.print(table)


@app.command()
def logout():
    """
    Delete the cached session and vault.
    """
    try:
        removed = clear_app_data()
    except ApiError as e:
        _fail(e)

    console.print(f"Removed {removed} cached file(s).")


@app.command()
def path():
    """Show the data directory used for the cache."""
    try:
        console.print(str(get_app_data_dir(get_settings().data_dir)))
    except OSError as e:
        _fail(e)


@app.command()
def version():
    """Show version information."""
    console.print(f"vaultsync v{__version__}")


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
