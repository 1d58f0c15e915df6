# Simple CLI for the MT5 account monitor
import asyncio
import click

from core.config.settings import Settings
from services.auth.models import Credentials


def _credentials(username: str, password: str, server: str) -> Credentials:
    return Credentials(username=username, password=password, server=server)


@click.group()
def cli():
    """MT5 Account Monitor CLI"""
    pass


@cli.command()
@click.option("--username", "-u", prompt="Account number", help="MT5 account number")
@click.option("--password", "-p", prompt=True, hide_input=True, help="MT5 password")
@click.option("--server", "-s", prompt="Server", default=lambda: Settings().default_server or None,
              help="MT5 server name")
def watch(username, password, server):
    """Log in and print the account every polling tick"""
    from app.main import main as run_app
    click.echo("Starting MT5 account monitor... (Ctrl+C to quit)")
    raise SystemExit(asyncio.run(run_app(_credentials(username, password, server))))


@cli.command()
@click.option("--username", "-u", prompt="Account number", help="MT5 account number")
@click.option("--password", "-p", prompt=True, hide_input=True, help="MT5 password")
@click.option("--server", "-s", prompt="Server", default=lambda: Settings().default_server or None,
              help="MT5 server name")
@click.option("--show-token", is_flag=True, help="Print the session token on success")
def login(username, password, server, show_token):
    """Check credentials against the login endpoint"""
    from services.auth.session_client import login as do_login

    result = asyncio.run(do_login(_credentials(username, password, server), Settings()))
    if not result.success:
        raise click.ClickException(result.error or "Login failed. Please check your credentials.")
    click.echo("Login succeeded.")
    if show_token:
        click.echo(result.token)


@cli.command()
@click.option("--token", "-t", required=True, envvar="MT5_TOKEN", help="Session token from `login`")
def snapshot(token):
    """Print one account snapshot for an existing session token"""
    from app.rendering import format_snapshot
    from services.account_monitor.fetcher import fetch_snapshot

    click.echo(format_snapshot(asyncio.run(fetch_snapshot(token, Settings()))))


if __name__ == "__main__":
    cli()
