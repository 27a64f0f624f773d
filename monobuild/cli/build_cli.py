#!/usr/bin/env python3
"""
CLI for building all package targets, once or in watch mode
"""

import asyncio
import click
import logging
import sys

from ..build.orchestrator import BuildOrchestrator
from ..config.build_config import BuildConfig, load_build_config
from ..core.exceptions import FatalWarningError, PreconditionError
from ..core.models import ModeFlags


def _load_config(config_path) -> BuildConfig:
    config = load_build_config(config_path)
    issues = config.validate()
    if issues:
        raise PreconditionError("Invalid build configuration:\n  - " + "\n  - ".join(issues))
    return config


def _fail(message: str, code: int = 1):
    click.echo(message, err=True)
    sys.exit(code)


@click.group(invoke_without_command=True)
@click.option('--watch', is_flag=True, help='Rebuild targets when their sources change')
@click.option('--prod', is_flag=True, help='Minify the output')
@click.option('--www', is_flag=True, help='Library deployment build: remap externals and add the license banner')
@click.option('--clean', is_flag=True, help='Remove the distribution directory before building')
@click.option('--config', 'config_path', default=None, help='Path to monobuild.yaml')
@click.option('--log-level', default='INFO',
              type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
              help='Set the logging level')
@click.pass_context
def cli(ctx, watch, prod, www, clean, config_path, log_level):
    """Build every package entry point into a single CommonJS file"""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)]
    )

    ctx.ensure_object(dict)
    ctx.obj['flags'] = ModeFlags(watch=watch, production=prod, library_deployment=www, clean_first=clean)
    ctx.obj['config_path'] = config_path

    if ctx.invoked_subcommand is not None:
        return

    try:
        config = _load_config(config_path)
        orchestrator = BuildOrchestrator(config, ctx.obj['flags'])
        return_code = asyncio.run(orchestrator.run())
    except PreconditionError as e:
        _fail(str(e))
    except FatalWarningError:
        # the policy has already printed the warning
        sys.exit(1)
    except KeyboardInterrupt:
        click.echo("Stopped watching")
        return_code = 0
    sys.exit(return_code or 0)


@cli.command()
@click.pass_context
def targets(ctx):
    """List discovered build targets"""
    try:
        config = _load_config(ctx.obj['config_path'])
        orchestrator = BuildOrchestrator(config, ctx.obj['flags'])
        found, _ = orchestrator.prepare()
    except PreconditionError as e:
        _fail(str(e))

    for target in found:
        click.echo(f"{target.name}")
        click.echo(f"    Input:  {target.input_path}")
        click.echo(f"    Output: {target.output_path}")
    click.echo(f"\nTotal: {len(found)} target(s)")


@cli.command()
@click.pass_context
def externals(ctx):
    """Show external identifiers and the global-name mapping"""
    try:
        config = _load_config(ctx.obj['config_path'])
        orchestrator = BuildOrchestrator(config, ctx.obj['flags'])
        _, table = orchestrator.prepare()
    except PreconditionError as e:
        _fail(str(e))

    click.echo("Externals:")
    for name in sorted(table.externals):
        click.echo(f"  - {name}")
    click.echo("\nGlobal names:")
    for name, global_name in sorted(table.name_mapping.items()):
        click.echo(f"  {name} -> {global_name}")


if __name__ == "__main__":
    cli()
