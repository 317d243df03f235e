"""Command-line interface for netrcparse."""

from pathlib import Path
import logging
import click

from .authinfo import (
    DEFAULT_BUFFER_SIZE,
    find_credential,
    find_file,
    read_file,
    resolve_path,
)
from .errors import AuthinfoError
from .parser import collect

authinfo_option = click.option(
    "--authinfo",
    type=click.Path(path_type=Path),
    help="Path to .authinfo file (default: $AUTHINFO_FILE, ~/.authinfo, ~/.netrc, /etc/authinfo, /etc/netrc)",
)
max_size_option = click.option(
    "--max-size",
    type=int,
    default=DEFAULT_BUFFER_SIZE,
    show_default=True,
    help="Largest file size accepted, in bytes",
)


def _read(authinfo: Path | None, max_size: int) -> tuple[Path, str]:
    try:
        path = resolve_path(authinfo)
        return path, read_file(path, max_size)
    except AuthinfoError as e:
        raise click.ClickException(str(e))


def _mask(password: str | None) -> str:
    if password is None:
        return "-"
    return "*" * len(password)


def _show(value: str | None) -> str:
    return "-" if value is None else value


@click.group()
@click.version_option(package_name="netrcparse")
@click.option("--verbose", "-v", is_flag=True, help="Log parser activity to stderr")
def main(verbose: bool):
    """netrcparse - Inspect .authinfo / .netrc credential files."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")


@main.command()
def path():
    """Show which authinfo file would be used."""
    try:
        click.echo(find_file())
    except AuthinfoError as e:
        raise click.ClickException(str(e))


@main.command()
@authinfo_option
@max_size_option
@click.option(
    "--strict",
    is_flag=True,
    help="Stop at the first error instead of reporting all of them",
)
def check(authinfo: Path | None, max_size: int, strict: bool):
    """Check an authinfo file for syntax errors."""
    path, text = _read(authinfo, max_size)
    records, errors = collect(text, stop_on_error=strict)

    for error in errors:
        click.echo(f"{path}:{error}")

    if errors:
        raise click.ClickException(f"{len(errors)} error(s) in {path}")

    click.echo(f"{path}: {len(records)} entries, no errors")


@main.command(name="list")
@authinfo_option
@max_size_option
def list_cmd(authinfo: Path | None, max_size: int):
    """Show configured credentials (passwords masked)."""
    path, text = _read(authinfo, max_size)
    click.echo(f"Reading: {path}")
    click.echo()

    records, errors = collect(text)
    if errors:
        click.echo(f"Skipped {len(errors)} error(s); run 'netrcparse check' for details")
    if not records:
        click.echo("No credentials found.")
        return

    for record in records:
        click.echo(f"  {'(default)' if record.is_default else record.host}")
        click.echo(f"    User:     {_show(record.user)}")
        click.echo(f"    Protocol: {_show(record.protocol)}")
        click.echo(f"    Pass:     {_mask(record.password)}")
        if record.force:
            click.echo("    Force:    yes")
        click.echo()


@main.command()
@click.argument("host")
@click.option("--user", "-u", help="Only match entries for this user")
@click.option("--protocol", "-p", help="Only match entries for this port/protocol")
@click.option("--show-password", is_flag=True, help="Print the password in clear text")
@authinfo_option
@max_size_option
def find(
    host: str,
    user: str | None,
    protocol: str | None,
    show_password: bool,
    authinfo: Path | None,
    max_size: int,
):
    """Look up the credentials for HOST."""
    try:
        record = find_credential(
            host, user=user, protocol=protocol, path=authinfo, size=max_size
        )
    except AuthinfoError as e:
        raise click.ClickException(str(e))

    if record is None:
        raise click.ClickException(f"No credentials found for: {host}")

    click.echo(f"  Host:  {'(default)' if record.is_default else record.host}")
    click.echo(f"  User:  {_show(record.user)}")
    if show_password:
        click.echo(f"  Pass:  {_show(record.password)}")
    else:
        click.echo(f"  Pass:  {_mask(record.password)}")


if __name__ == "__main__":
    main()
