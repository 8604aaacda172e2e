"""CLI entry point for the Zoho Mail command-line client."""

import logging

import click
from dotenv import load_dotenv

from zoho_mail.cli.common import AppContext, build_transport, reporting
from zoho_mail.config.settings import Settings
from zoho_mail.config.store import ConfigStore
from zoho_mail.output.formatter import OutputFormat
from zoho_mail.pdauth.auth import AuthBridge

__version__ = "1.0.0"

logger = logging.getLogger(__name__)


@click.group(epilog="""\b
Examples:
  zoho-mail mail list              List inbox emails
  zoho-mail mail list --unread     List unread emails
  zoho-mail mail search "invoice"  Search for emails
  zoho-mail folders list           List all folders
  zoho-mail labels list            List all labels
""")
@click.version_option(__version__, prog_name="zoho-mail")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON.")
@click.option(
    "--format",
    "fmt",
    type=click.Choice([f.value for f in OutputFormat]),
    default=OutputFormat.TABLE.value,
    show_default=True,
    help="Output format for listings.",
)
@click.option("--debug", is_flag=True, help="Log pdauth invocations to stderr.")
@click.pass_context
def cli(ctx: click.Context, as_json: bool, fmt: str, debug: bool) -> None:
    """Command-line client for Zoho Mail — inbox, folders, labels and email operations."""
    load_dotenv()
    with reporting("Invalid environment configuration"):
        settings = Settings.from_env()
    settings.debug = settings.debug or debug
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.WARNING,
        format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
        force=True,
    )
    logger.debug("Settings: %s", settings)

    ctx.obj = AppContext(
        settings=settings,
        store=ConfigStore(settings.config_path),
        bridge=AuthBridge(
            pdauth_bin=settings.pdauth_bin,
            app_slug=settings.app_slug,
            timeout=settings.timeout,
            max_output_bytes=settings.max_output_bytes,
        ),
        transport_factory=build_transport,
        output=OutputFormat.JSON if as_json else OutputFormat(fmt),
    )


# Import and register commands after cli is defined to avoid circular imports.
from zoho_mail.cli.auth import auth  # noqa: E402
from zoho_mail.cli.folders import folders  # noqa: E402
from zoho_mail.cli.labels import labels  # noqa: E402
from zoho_mail.cli.mail import mail  # noqa: E402

cli.add_command(auth)
cli.add_command(folders)
cli.add_command(labels)
cli.add_command(mail)
