"""
Resource Actions - Command Line Interface
=========================================

    resource-actions list APPNAME [--group G] [--kind K] [--namespace N] [--resource-name R] [-o table|json|yaml]
    resource-actions run APPNAME GROUP/KIND/ACTION [--namespace N] [--resource-name R] [--all]

Logs go to stderr; stdout only carries rendered output.
"""

import asyncio
import sys

import click

from shared.constants import Multiplicity, OutputFormat, ServiceName
from shared.utils.logging import new_correlation_id, setup_logging
from src import __version__
from src.config import Settings, get_settings
from src.core.application_client import create_application_client
from src.core.dispatcher import ActionDispatcher
from src.core.errors import ResourceActionError
from src.core.rendering import render_action_listing
from src.core.resource_selector import SelectorCriteria


def _settings_with_overrides(ctx: click.Context) -> Settings:
    overrides = {key: value for key, value in ctx.obj.items() if value is not None}
    return get_settings().model_copy(update=overrides)


async def _list(settings: Settings, app_name: str, criteria: SelectorCriteria):
    backend = create_application_client(settings)
    try:
        return await ActionDispatcher(backend, settings.cli_command).list_actions(app_name, criteria)
    finally:
        await backend.close()


async def _run(settings: Settings, app_name: str, action: str, criteria: SelectorCriteria):
    backend = create_application_client(settings)
    try:
        return await ActionDispatcher(backend, settings.cli_command).run_action(app_name, action, criteria)
    finally:
        await backend.close()


@click.group()
@click.version_option(version=__version__)
@click.option("--server", "server_url", default=None, help="Managing service URL")
@click.option("--auth-token", default=None, help="Bearer token for the managing service")
@click.option("--insecure", is_flag=True, default=False, help="Skip TLS certificate verification")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default=None,
    help="Log level"
)
@click.pass_context
def cli(ctx, server_url, auth_token, insecure, log_level):
    """Manage resource actions of an application's live resources."""
    ctx.obj = {
        "server_url": server_url,
        "auth_token": auth_token,
        "verify_tls": False if insecure else None,
        "log_level": log_level,
    }
    settings = _settings_with_overrides(ctx)
    setup_logging(
        service_name=ServiceName.RESOURCE_ACTIONS_CLI.value,
        log_level=settings.log_level,
        json_output=settings.log_json,
        stream=sys.stderr,
    )
    new_correlation_id()


@cli.command("list")
@click.argument("app_name")
@click.option("--group", default="", help="Group")
@click.option("--kind", default="", help="Kind")
@click.option("--namespace", default="", help="Namespace")
@click.option("--resource-name", default="", help="Name of resource")
@click.option(
    "-o", "--out", "output",
    type=click.Choice([f.value for f in OutputFormat]),
    default=OutputFormat.TABLE.value,
    help="Output format"
)
@click.pass_context
def list_command(ctx, app_name, group, kind, namespace, resource_name, output):
    """Lists available actions on the resources of APP_NAME."""
    settings = _settings_with_overrides(ctx)
    criteria = SelectorCriteria(
        group=group,
        kind=kind,
        namespace=namespace,
        name=resource_name,
        multiplicity=Multiplicity.ANY,
    )

    try:
        listing = asyncio.run(_list(settings, app_name, criteria))
    except ResourceActionError as e:
        raise click.ClickException(str(e)) from e

    click.echo(render_action_listing(listing, OutputFormat(output)))


@cli.command("run")
@click.argument("app_name")
@click.argument("action")
@click.option("--kind", default="", help="Kind (only used by the deprecated 'resume' syntax)")
@click.option("--namespace", default="", help="Namespace")
@click.option("--resource-name", default="", help="Name of resource")
@click.option(
    "--all", "apply_to_all",
    is_flag=True,
    default=False,
    help=(
        "Run the action on every matching resource. Resources are processed in "
        "order and the run stops at the first failure; resources already "
        "processed keep the action."
    )
)
@click.pass_context
def run_command(ctx, app_name, action, kind, namespace, resource_name, apply_to_all):
    """Runs ACTION (GROUP/KIND/ACTION) on resource(s) of APP_NAME."""
    settings = _settings_with_overrides(ctx)
    criteria = SelectorCriteria(
        kind=kind,
        namespace=namespace,
        name=resource_name,
        multiplicity=Multiplicity.ANY if apply_to_all else Multiplicity.SINGLE,
    )

    try:
        result = asyncio.run(_run(settings, app_name, action, criteria))
    except ResourceActionError as e:
        if e.deprecation_notice:
            click.echo(f"\n{e.deprecation_notice}", err=True)
        raise click.ClickException(str(e)) from e

    if result.deprecation_notice:
        click.echo(f"\n{result.deprecation_notice}", err=True)

    for resource in result.targets:
        click.echo(f"{result.action.action}: {resource.describe()}")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
