"""``auth`` commands — connection management and local configuration."""

from __future__ import annotations

import click
from rich.markup import escape

from zoho_mail.cli.common import AppContext, json_option, reporting
from zoho_mail.config.store import DEFAULT_USER_ID, REGIONS, validate_region
from zoho_mail.errors import ProcessError
from zoho_mail.output.formatter import OutputFormat, console, info, render, render_json, success, warn


@click.group()
def auth() -> None:
    """Manage Zoho Mail authentication."""


@auth.command()
@click.option("--user", "user_id", default=None, help="pdauth user ID for the connection.")
@click.option("--region", default=None, help=f"Zoho region ({', '.join(REGIONS)}).")
@click.pass_obj
def login(app: AppContext, user_id: str | None, region: str | None) -> None:
    """Connect Zoho Mail through the pdauth OAuth proxy."""
    with reporting("Login failed"):
        if region is not None:
            validate_region(region)
        if user_id:
            app.update_config(user_id=user_id)
        elif not app.config.user_id:
            app.update_config(user_id=DEFAULT_USER_ID)

        existing = app.bridge.check_connection(app.user_id)
        if existing is not None:
            success("Already connected to Zoho Mail")
            console.print(f"  [dim]Account:[/dim] {escape(existing.account_name)}")
            console.print(f"  [dim]User ID:[/dim] {escape(app.user_id)}")
        else:
            link = app.bridge.generate_connect_link(app.user_id)
            if link is None:
                raise ProcessError("Failed to generate OAuth link")
            console.print("\n[bold]🔗 Open this link to authorize Zoho Mail:[/bold]\n")
            console.print(f"  [cyan]{escape(link)}[/cyan]\n", soft_wrap=True)
            console.print("[dim]After authorizing, run `zoho-mail auth status` to verify.[/dim]")

        if region is not None:
            app.update_config(region=region)
            info(f"Region set to: {region}")


@auth.command()
@json_option
@click.pass_obj
def status(app: AppContext, as_json: bool) -> None:
    """Show connection status and local configuration."""
    connection = app.bridge.check_connection(app.user_id)
    config = app.config

    if app.output_format(as_json) is OutputFormat.JSON:
        click.echo(render_json({
            "connected": connection is not None,
            "account": connection.account_name if connection else None,
            "healthy": connection.healthy if connection else False,
            "userId": config.user_id,
            "region": config.region,
            "accountId": config.account_id,
            "configPath": str(app.store.path),
        }))
        return

    console.print("\n[bold]Zoho Mail CLI Status[/bold]")
    console.print("[dim]" + "─" * 40 + "[/dim]")
    if connection is not None:
        healthy = "[green]Yes[/green]" if connection.healthy else "[red]No[/red]"
        console.print("[green]●[/green] Connected")
        console.print(f"  [dim]Account:[/dim] {escape(connection.account_name)}")
        console.print(f"  [dim]Healthy:[/dim] {healthy}")
    else:
        console.print("[red]●[/red] Not connected")
        console.print("  Run [cyan]zoho-mail auth login[/cyan] to connect")

    console.print("\n[dim]Configuration:[/dim]")
    console.print(f"  [dim]User ID:[/dim] {escape(config.user_id or '(not set)')}")
    console.print(f"  [dim]Region:[/dim] {escape(config.region)}")
    console.print(f"  [dim]Account ID:[/dim] {escape(config.account_id or '(not set)')}")
    console.print(f"  [dim]Config Path:[/dim] {escape(str(app.store.path))}\n", soft_wrap=True)


@auth.command()
@click.option("--force", is_flag=True, help="Skip confirmation.")
@click.pass_obj
def logout(app: AppContext, force: bool) -> None:
    """Disconnect Zoho Mail from the proxy and clear local config."""
    connection = app.bridge.check_connection(app.user_id)
    if connection is None:
        warn("Not currently connected to Zoho Mail")
        return

    if not force:
        console.print(f"About to disconnect: [cyan]{escape(connection.account_name)}[/cyan]")
        console.print("[yellow]This will remove your Zoho Mail connection from pdauth.[/yellow]")
        console.print("\nRun with --force to confirm.")
        return

    user_id = app.user_id
    with reporting("Failed to disconnect"):
        if not app.bridge.disconnect(user_id):
            raise ProcessError(
                "pdauth could not remove the connection",
                hint=f"Try running: {app.bridge.disconnect_command(user_id)}",
            )
        app.clear_config()
    success("Disconnected from Zoho Mail")


@auth.command("set-region")
@click.argument("region")
@click.pass_obj
def set_region(app: AppContext, region: str) -> None:
    """Set the Zoho data-center region."""
    with reporting("Could not set region"):
        app.update_config(region=region)
    success(f"Region set to: {region}")


@auth.command("set-account")
@click.argument("account_id")
@click.pass_obj
def set_account(app: AppContext, account_id: str) -> None:
    """Set the default Zoho account ID."""
    with reporting("Could not set account"):
        app.update_config(account_id=account_id)
    success(f"Account ID set to: {escape(account_id)}")


@auth.command()
@json_option
@click.pass_obj
def accounts(app: AppContext, as_json: bool) -> None:
    """List the mail accounts on the connection."""
    with reporting("Failed to fetch accounts"):
        app.require_auth()
        found = app.client.list_accounts()
    render(found, app.output_format(as_json))
