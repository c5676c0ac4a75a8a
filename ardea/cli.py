"""Ardea CLI - Main Entry Point.

Commands:
    routes  - List the routes and sockets an application registers
    serve   - Assemble an application and run it under uvicorn
"""

import asyncio
import importlib
import logging
import sys
from typing import Any, Optional

import click

from . import __version__
from .config import ConfigError, CreateOptions, ServerSettings
from .factory import ArdeaFactory
from .faults import BootFault
from .testing import RecordingEngine

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def load_target(target: str) -> Any:
    """Import ``package.module:attribute``."""
    module_name, _, attr = target.partition(":")
    if not module_name or not attr:
        raise click.BadParameter(f"Expected 'module:attribute', got '{target}'")

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise click.BadParameter(f"Cannot import module '{module_name}': {e}") from e

    try:
        return getattr(module, attr)
    except AttributeError:
        raise click.BadParameter(f"Module '{module_name}' has no attribute '{attr}'") from None


def load_options(target: Optional[str]) -> CreateOptions:
    if not target:
        return CreateOptions()
    try:
        return CreateOptions.from_mapping(load_target(target))
    except ConfigError as e:
        raise click.BadParameter(str(e)) from e


@click.group()
@click.version_option(version=__version__, prog_name="ardea")
@click.option('--verbose', '-v', is_flag=True, help='Verbose output')
@click.pass_context
def cli(ctx, verbose: bool):
    """Assemble and serve Ardea applications."""
    ctx.ensure_object(dict)
    ctx.obj['verbose'] = verbose


# ============================================================================
# Commands
# ============================================================================

@cli.command('routes')
@click.argument('target')
@click.option('--options', 'options_target', type=str, help='module:attribute holding create options')
@click.pass_context
def routes(ctx, target: str, options_target: Optional[str]):
    """
    List the routes an application registers.

    Examples:
      ardea routes myapp.main:AppModule
      ardea routes myapp.main:AppModule --options myapp.main:OPTIONS
    """
    logging.basicConfig(
        level=logging.DEBUG if ctx.obj['verbose'] else logging.WARNING,
        format=LOG_FORMAT,
    )

    root = load_target(target)
    options = load_options(options_target)
    engine = RecordingEngine()

    try:
        asyncio.run(ArdeaFactory.create(root, options, engine=engine, exit_on_fault=False))
    except BootFault as fault:
        click.echo(f"✗ {fault}", err=True)
        sys.exit(1)

    if not engine.routes and not engine.sockets:
        click.echo("No routes registered")
        return

    width = max([len(r.path) for r in engine.routes] + [len(p) for p in engine.sockets]) + 2
    for registration in engine.routes:
        config = registration.config
        access = "guarded" if config.before_handle else "public"
        mode = "  stream" if config.streaming else ""
        click.echo(
            f"{registration.method.upper():<7} {registration.path:<{width}} "
            f"{access:<8} tags={','.join(config.tags)}{mode}"
        )
    for path, hooks in engine.sockets.items():
        access = "guarded" if hooks.before_handle else "public"
        click.echo(f"{'WS':<7} {path:<{width}} {access}")


@cli.command('serve')
@click.argument('target')
@click.option('--host', type=str, default=None, help='Host to bind to')
@click.option('--port', type=int, default=None, help='Port to bind to')
@click.option('--log-level', type=click.Choice(['debug', 'info', 'warning', 'error']), default=None)
@click.option('--env-file', type=click.Path(), default=None, help='.env file with ARDEA_* settings')
@click.option('--options', 'options_target', type=str, help='module:attribute holding create options')
@click.pass_context
def serve(
    ctx,
    target: str,
    host: Optional[str],
    port: Optional[int],
    log_level: Optional[str],
    env_file: Optional[str],
    options_target: Optional[str],
):
    """
    Assemble an application and serve it.

    Examples:
      ardea serve myapp.main:AppModule
      ardea serve myapp.main:AppModule --port=8080 --env-file=.env
    """
    try:
        settings = ServerSettings.load(
            env_file=env_file,
            overrides={"host": host, "port": port, "log_level": log_level},
        )
    except ConfigError as e:
        raise click.BadParameter(str(e)) from e

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )

    root = load_target(target)
    options = load_options(options_target)

    if options.auth is None and settings.token_secret:
        from .auth import TokenManager, bearer_auth

        options.auth = bearer_auth(TokenManager(settings.token_secret).verify)

    engine = asyncio.run(ArdeaFactory.create(root, options))

    try:
        engine.listen(host=settings.host, port=settings.port, log_level=settings.log_level)
    except KeyboardInterrupt:
        click.echo("✓ Server stopped")


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
