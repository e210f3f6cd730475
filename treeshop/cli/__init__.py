"""
CLI Module - Command-line interface for TreeShop Ops.

Provides commands for:
- Quotes and rate table maintenance
- Equipment cost calculation
- Running the API server
"""
import logging

import click

from treeshop import __version__
from treeshop.config import get_config
from .pricing_commands import register_commands


@click.group()
@click.version_option(version=__version__)
@click.pass_context
def cli(ctx):
    """TreeShop Ops CLI.

    Price forestry mulching jobs and maintain the rate table.
    """
    config = get_config()
    logging.basicConfig(level=config.logging_level, format=config.logging_format)
    ctx.ensure_object(dict)


register_commands(cli)

__all__ = ['cli', 'register_commands']
