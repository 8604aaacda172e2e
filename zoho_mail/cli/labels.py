"""``labels`` commands."""

from __future__ import annotations

import click
from rich.markup import escape

from zoho_mail.cli.common import AppContext, authenticated, confirm_or_warn, json_option, reporting
from zoho_mail.output.formatter import OutputFormat, console, render, render_json, success


@click.group()
def labels() -> None:
    """Manage email labels."""


@labels.command("list")
@click.option("-n", "--limit", type=click.IntRange(min=1), default=None, help="Max labels to show.")
@click.option("--start", type=int, default=None, help="Pagination offset (1-based).")
@json_option
@authenticated("Failed to fetch labels")
def list_labels(app: AppContext, account_id: str, limit: int | None, start: int | None, as_json: bool) -> None:
    """List all labels."""
    found = app.client.list_labels(account_id, limit=limit, start=start)
    fmt = app.output_format(as_json)
    if not found and fmt is OutputFormat.TABLE:
        console.print("[dim]No labels found[/dim]")
        return
    render(found, fmt)


@labels.command()
@click.argument("name")
@click.option("--color", default=None, help="Label colour as a hex code, e.g. #ff0000.")
@json_option
@authenticated("Failed to create label")
def create(app: AppContext, account_id: str, name: str, color: str | None, as_json: bool) -> None:
    """Create a label."""
    created = app.client.create_label(account_id, name, color)
    if app.output_format(as_json) is OutputFormat.JSON:
        click.echo(render_json(created))
        return
    success(f"Created label: {escape(created.label_name)}")
    console.print(f"  [dim]Label ID:[/dim] {escape(created.label_id)}")
    if created.color:
        console.print(f"  [dim]Color:[/dim] {escape(created.color)}")


@labels.command()
@click.argument("label_id")
@click.option("--name", default=None, help="New label name.")
@click.option("--color", default=None, help="New label colour.")
@authenticated("Failed to update label")
def update(app: AppContext, account_id: str, label_id: str, name: str | None, color: str | None) -> None:
    """Rename or recolour a label."""
    app.client.update_label(account_id, label_id, name=name, color=color)
    success("Label updated")


@labels.command()
@click.argument("label_id")
@click.option("--force", is_flag=True, help="Skip confirmation.")
@click.pass_obj
def delete(app: AppContext, label_id: str, force: bool) -> None:
    """Delete a label."""
    if not confirm_or_warn(
        force,
        f"About to delete label: {label_id}",
        "This will remove the label from all emails.",
    ):
        return
    with reporting("Failed to delete label"):
        account_id = app.connect()
        app.client.delete_label(account_id, label_id)
    success("Label deleted")
