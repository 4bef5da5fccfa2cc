"""sealkey — command line access to an encrypted password vault.

Commands
--------
  init      Create a new vault (and make it active if none is)
  use       Set the active vault
  which     Show the active vault
  ls        List the keys in the active vault
  mk        Add a secret
  rm        Remove a secret
  get       Copy a secret to the clipboard (cleared after a delay)
  generate  Generate strong random passwords
  info      Show vault metadata
"""

from __future__ import annotations

import logging
import secrets
import string
from contextlib import contextmanager
from pathlib import Path
from typing import Annotated, Iterator, Optional

import typer
from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table
from rich.theme import Theme

from . import __version__
from .clip import CLEAR_AFTER, copy_then_clear
from .config import default_cost, get_active_vault, set_active_vault
from .crypto import MAX_COST, MIN_COST
from .errors import ClipboardUnavailable, NoActiveVault, VaultError
from .vault import Vault

# ---------------------------------------------------------------------------
# App & consoles
# ---------------------------------------------------------------------------

_THEME = Theme(
    {
        "success": "bold green",
        "warning": "bold yellow",
        "danger": "bold red",
        "muted": "dim",
        "label": "cyan",
        "highlight": "bold white",
    }
)

console = Console(theme=_THEME)
err = Console(stderr=True, theme=_THEME)

app = typer.Typer(
    name="sealkey",
    help="[bold cyan]sealkey[/bold cyan] — a password vault in a single encrypted file.",
    no_args_is_help=True,
    pretty_exceptions_show_locals=False,
    rich_markup_mode="rich",
    add_completion=True,
)


@app.callback()
def _main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log what sealkey is doing.")] = False,
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err, show_path=False)],
        force=True,
    )


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


@contextmanager
def _reporting() -> Iterator[None]:
    """Turn sealkey and I/O errors into a one-line message and exit status 1."""
    try:
        yield
    except VaultError as exc:
        err.print(f"[danger]error:[/danger] {exc}")
        raise typer.Exit(1) from exc
    except OSError as exc:
        err.print(f"[danger]error:[/danger] {exc.strerror or exc}")
        raise typer.Exit(1) from exc


def _ask_password(prompt: str = "Master password") -> str:
    return Prompt.ask(prompt, password=True, console=console)


def _require_vault() -> Path:
    path = get_active_vault()
    if path is None:
        raise NoActiveVault("no active vault — run [bold]sealkey init[/bold] or [bold]sealkey use[/bold] first")
    return path


def _unlock() -> Vault:
    """Prompt for the master password and open the active vault."""
    path = _require_vault()
    return Vault.open(path, _ask_password("Password for active vault"))


def _make_password(length: int, no_symbols: bool = False) -> str:
    charset = string.ascii_letters + string.digits
    if not no_symbols:
        charset += r"!@#$%^&*()-_=+[]{}|;:,.<>?"
    return "".join(secrets.choice(charset) for _ in range(length))


def _render_keys(keys: list[str]) -> None:
    table = Table(
        title=f"Keys ({len(keys)} total)",
        box=box.ROUNDED,
        header_style="bold cyan",
        title_style="bold",
    )
    table.add_column("#", style="muted", justify="right", no_wrap=True)
    table.add_column("Key", style="bold white", min_width=16)
    for i, key in enumerate(sorted(keys, key=str.lower), 1):
        table.add_row(str(i), key)
    console.print(table)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command()
def init(
    path: Annotated[Path, typer.Argument(help="Where to create the vault (.db is appended if missing).")],
    cost: Annotated[
        Optional[int],
        typer.Option("--cost", "-c", min=MIN_COST, max=MAX_COST, help="bcrypt work factor.", show_default=False),
    ] = None,
) -> None:
    """Create a new encrypted vault."""
    if path.suffix != ".db":
        path = path.with_name(path.name + ".db")

    with _reporting():
        if cost is None:
            try:
                cost = default_cost()
            except ValueError as exc:
                err.print(f"[danger]error:[/danger] {exc}")
                raise typer.Exit(1) from exc

        console.print(
            Panel(
                "[bold]New sealkey vault[/bold]\n"
                "[muted]Choose a strong master password — it cannot be recovered if lost.[/muted]",
                border_style="cyan",
                expand=False,
            )
        )
        pw = _ask_password("Password for the new vault")
        if not pw:
            err.print("[danger]Master password cannot be empty.[/danger]")
            raise typer.Exit(1)
        if _ask_password("Confirm password") != pw:
            err.print("[danger]Passwords do not match.[/danger]")
            raise typer.Exit(1)

        Vault.create(path, pw, cost)
        console.print(f"[success]Vault created →[/success] [bold]{path}[/bold]")

        if get_active_vault() is None:
            active = set_active_vault(path)
            console.print(f"[muted]Active vault is now {active}[/muted]")


@app.command()
def use(
    path: Annotated[Path, typer.Argument(help="Vault file to make active.")],
) -> None:
    """Set the active vault."""
    with _reporting():
        active = set_active_vault(path)
    console.print(f"[success]Active vault is now[/success] [bold]{active}[/bold]")


@app.command()
def which() -> None:
    """Show which vault is active."""
    with _reporting():
        path = get_active_vault()
    if path is None:
        console.print("[muted]no active vault[/muted]")
    else:
        console.print(str(path), soft_wrap=True)


@app.command("ls")
def list_keys() -> None:
    """List the keys stored in the active vault."""
    with _reporting(), _unlock() as vault:
        keys = vault.key_ls()

    if not keys:
        console.print("[muted]vault is empty[/muted]")
        return
    _render_keys(keys)


@app.command("mk")
def make_key(
    key: Annotated[str, typer.Argument(help="Name for the new secret.")],
    generate: Annotated[bool, typer.Option("--generate", "-g", help="Auto-generate the secret.")] = False,
    length: Annotated[int, typer.Option("--length", "-l", help="Generated password length.")] = 20,
    no_symbols: Annotated[bool, typer.Option("--no-symbols", help="Exclude symbols from generated password.")] = False,
) -> None:
    """Add a secret to the active vault."""
    with _reporting(), _unlock() as vault:
        if vault.key_get(key) is not None:
            err.print(f"[danger]A key named '[bold]{key}[/bold]' already exists.[/danger]")
            raise typer.Exit(1)

        if generate:
            secret = _make_password(length, no_symbols)
            console.print(f"  [muted]Generated:[/muted] [bold green]{secret}[/bold green]")
        else:
            secret = _ask_password("New password to add")
        vault.key_new(key, secret)

    console.print(f"[success]Added key '[bold]{key}[/bold]'.[/success]")


@app.command("rm")
def remove_key(
    key: Annotated[str, typer.Argument(help="Name of the secret to remove.")],
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip confirmation prompt.")] = False,
) -> None:
    """Permanently remove a secret from the active vault."""
    with _reporting(), _unlock() as vault:
        if not yes:
            confirmed = Confirm.ask(
                f"  Delete '[bold]{key}[/bold]'? [muted]This cannot be undone.[/muted]",
                default=False,
                console=console,
            )
            if not confirmed:
                raise typer.Exit(0)
        vault.key_del(key)

    console.print(f"[danger]Removed key '[bold]{key}[/bold]'.[/danger]")


@app.command()
def get(
    key: Annotated[str, typer.Argument(help="Name of the secret.")],
    show: Annotated[bool, typer.Option("--show", "-s", help="Print the secret instead of copying it.")] = False,
    timeout: Annotated[
        float, typer.Option("--timeout", "-t", help="Seconds before the clipboard is cleared.")
    ] = CLEAR_AFTER,
) -> None:
    """Fetch a secret; it is copied to the clipboard and cleared afterwards."""
    with _reporting(), _unlock() as vault:
        secret = vault.key_get(key)

    if secret is None:
        err.print(f"[danger]key '[bold]{key}[/bold]' not found[/danger]")
        raise typer.Exit(1)

    if show:
        console.print(secret, markup=False, highlight=False, soft_wrap=True)
        return

    console.print(f"[success]Copied to clipboard[/success] [muted](cleared in {timeout:g}s)[/muted]")
    try:
        copy_then_clear(secret, timeout)
    except ClipboardUnavailable as exc:
        err.print("[warning]Could not access clipboard. Use --show to print the secret instead.[/warning]")
        raise typer.Exit(1) from exc


@app.command()
def generate(
    length: Annotated[int, typer.Option("--length", "-l", help="Password length.")] = 20,
    count: Annotated[int, typer.Option("--count", "-c", help="Number of passwords to generate.")] = 1,
    no_symbols: Annotated[bool, typer.Option("--no-symbols", help="Exclude symbols.")] = False,
) -> None:
    """Generate one or more strong random passwords."""
    passwords = [_make_password(length, no_symbols) for _ in range(count)]

    if count == 1:
        console.print(
            Panel(
                f"[bold green]{passwords[0]}[/bold green]",
                title=f"[bold]Generated password ({length} chars)[/bold]",
                border_style="green",
                expand=False,
            )
        )
    else:
        console.print(f"\n[bold]Generated {count} passwords ({length} chars each)[/bold]\n")
        for i, pw in enumerate(passwords, 1):
            console.print(f"  [muted]{i:>3}.[/muted]  [bold green]{pw}[/bold green]")
        console.print()


@app.command()
def info() -> None:
    """Show the active vault's location and metadata."""
    with _reporting():
        path = get_active_vault()

    table = Table(box=box.SIMPLE, show_header=False, padding=(0, 2))
    table.add_column("Key", style="cyan")
    table.add_column("Value", style="white")
    table.add_row("Version", __version__)
    table.add_row("Vault path", str(path) if path else "[muted]none[/muted]")

    if path is not None and path.exists():
        table.add_row("Vault size", f"{path.stat().st_size / 1024:.1f} KB")
        with _reporting(), _unlock() as vault:
            table.add_row("Keys", str(len(vault.key_ls())))
            table.add_row("Cost", str(vault.cost))
    elif path is not None:
        table.add_row("Vault exists", "[red]no[/red]")

    console.print(Panel(table, title="[bold cyan]sealkey info[/bold cyan]", border_style="cyan", expand=False))


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def main() -> None:
    app()


if __name__ == "__main__":
    main()
