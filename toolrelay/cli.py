"""ToolRelay CLI - chat with Gemini using tools from MCP servers."""

import asyncio
import logging
import sys
from typing import Optional

import click
from rich.logging import RichHandler

from .client import ConversationClient
from .config import ConfigManager
from .errors import ToolRelayError
from .repl import ChatREPL
from .servers.stdio import ServerEndpoint
from .ui.output import render_catalog, render_connected, render_error
from .ui.theme import console

_log = logging.getLogger(__name__)


def setup_logging(level: str) -> None:
    """Route log records through the shared rich console."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False, rich_tracebacks=True)],
        force=True,
    )


def build_client(
    config: ConfigManager,
    model: Optional[str] = None,
) -> ConversationClient:
    """Create a client from config; raises ConfigurationError without an API key."""
    tools_config = config.get_tools_config()
    return ConversationClient(
        config.get_provider_config(model=model),
        system_prompt=config.get_system_prompt(),
        propagate_required=bool(tools_config["propagate_required"]),
        max_schema_depth=int(tools_config["max_schema_depth"]),
    )


def resolve_endpoints(config: ConfigManager, servers: tuple[str, ...]) -> list[ServerEndpoint]:
    """Command-line servers replace the configured list when given."""
    if servers:
        endpoints = [ServerEndpoint.from_script_path(path) for path in servers]
    else:
        endpoints = config.get_server_endpoints()
    if not endpoints:
        raise click.UsageError(
            "No tool servers configured. Pass --server PATH or add 'servers' to the config."
        )
    return endpoints


async def connect_all(client: ConversationClient, endpoints: list[ServerEndpoint]) -> None:
    """Connect endpoints in order; the first failure aborts."""
    for endpoint in endpoints:
        catalog = await client.connect(endpoint)
        render_connected(endpoint.name, catalog)


async def run_chat(client: ConversationClient, endpoints: list[ServerEndpoint]) -> None:
    try:
        await connect_all(client, endpoints)
        await ChatREPL(client).run()
    finally:
        await client.close()


async def show_tools(
    client: ConversationClient,
    endpoints: list[ServerEndpoint],
    as_json: bool,
) -> None:
    try:
        for endpoint in endpoints:
            await client.connect(endpoint)
        render_catalog(client.catalog, as_json=as_json)
    finally:
        await client.close()


def _prepare(config_path: Optional[str], verbose: bool) -> ConfigManager:
    try:
        config = ConfigManager(config_path)
    except ToolRelayError as e:
        raise click.ClickException(str(e))
    setup_logging("DEBUG" if verbose else config.get_log_level())
    return config


def _run(coro_factory) -> None:
    """Run an async command body, turning ToolRelay errors into exit code 1."""
    try:
        asyncio.run(coro_factory())
    except ToolRelayError as e:
        _log.debug("Command failed", exc_info=True)
        render_error(str(e))
        sys.exit(1)
    except KeyboardInterrupt:
        console.print()
        sys.exit(130)


# CLI Commands
@click.group()
@click.version_option(package_name="toolrelay")
def cli():
    """TOOLRELAY - Gemini chat with tools from MCP servers.

    Connect one or more MCP tool servers and ask questions interactively.
    """
    pass


@cli.command()
@click.option("--server", "-s", "servers", multiple=True, help="Tool server script (.py or .js)")
@click.option("--config", "-c", "config_path", help="Path to config YAML")
@click.option("--model", "-m", help="Gemini model name")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def chat(servers, config_path, model, verbose):
    """Start an interactive chat session."""
    config = _prepare(config_path, verbose)
    try:
        endpoints = resolve_endpoints(config, servers)
        client = build_client(config, model=model)
    except ToolRelayError as e:
        render_error(str(e))
        sys.exit(1)
    _run(lambda: run_chat(client, endpoints))


@cli.command()
@click.option("--server", "-s", "servers", multiple=True, help="Tool server script (.py or .js)")
@click.option("--config", "-c", "config_path", help="Path to config YAML")
@click.option("--json", "as_json", is_flag=True, help="Print Gemini function declarations as JSON")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def tools(servers, config_path, as_json, verbose):
    """List the tools each server exposes, as translated for Gemini."""
    config = _prepare(config_path, verbose)
    try:
        endpoints = resolve_endpoints(config, servers)
        client = build_client(config)
    except ToolRelayError as e:
        render_error(str(e))
        sys.exit(1)
    _run(lambda: show_tools(client, endpoints, as_json))


if __name__ == "__main__":
    cli()
