"""
Response cache commands for feedproxy CLI.
"""

import sys
import click
import logging

from ...config import Config
from ...cache.store import create_cache_store

logger = logging.getLogger(__name__)


@click.group()
def cache():
    """Response cache commands"""
    pass


@cache.command()
@click.option('--expired-only', is_flag=True, help='Only remove entries past their max-age')
def purge(expired_only: bool):
    """Remove cached responses"""
    try:
        store = create_cache_store(Config.CACHE_BACKEND, Config.CACHE_URL)
        removed = store.purge(expired_only=expired_only)
        click.echo(f"Removed {removed} cached responses")
    except Exception as e:
        logger.error(f"Error purging cache: {e}")
        click.echo(f"Error: {str(e)}", err=True)
        sys.exit(1)


@cache.command()
def stats():
    """Show cache entry counts"""
    try:
        store = create_cache_store(Config.CACHE_BACKEND, Config.CACHE_URL)
        counts = store.stats()
        click.echo(f"Entries: {counts['entries']} ({counts['fresh']} fresh)")
    except Exception as e:
        logger.error(f"Error reading cache stats: {e}")
        click.echo(f"Error: {str(e)}", err=True)
        sys.exit(1)
