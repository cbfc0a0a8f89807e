"""
Main CLI implementation for feedproxy.
"""

import sys
import json
import click
import logging
import asyncio
from pathlib import Path
from urllib.parse import urlencode

from ..cache.store import create_cache_store
from ..config import Config
from ..gateway import Gateway
from ..logging import COMPONENTS, LogLevelManager, setup_logging
from ..monitoring import SystemMonitoring
from .commands.cache import cache

logger = logging.getLogger(__name__)

# Base for request URLs built by the one-shot commands, only used as the cache key
LOCAL_ORIGIN = "http://localhost/"


@click.group()
@click.option('--debug', is_flag=True, help='Enable debug logging')
def main(debug):
    """feedproxy CLI"""
    if debug:
        logging.basicConfig(level=logging.DEBUG)
        levels = LogLevelManager()
        for component in COMPONENTS:
            levels.set_component_level(component, logging.DEBUG)
    else:
        logging.basicConfig(level=getattr(logging, Config.LOG_LEVEL, logging.INFO))


@main.command()
@click.option('--host', default=None, help='Interface to bind (default from FEEDPROXY_HOST)')
@click.option('--port', type=int, default=None, help='Port to listen on (default from FEEDPROXY_PORT)')
def serve(host, port):
    """Run the proxy HTTP server"""
    import uvicorn
    from ..web import create_app

    try:
        Config.validate()
    except ValueError as e:
        click.echo(f"Error: {str(e)}", err=True)
        sys.exit(1)

    setup_logging(Config.APP_NAME, log_dir=Path(Config.LOG_DIR),
                  console_level=getattr(logging, Config.LOG_LEVEL))
    host = host or Config.HOST
    port = port or Config.PORT
    logger.info(f"Starting feedproxy on {host}:{port}")
    uvicorn.run(create_app(), host=host, port=port, log_config=None)


async def _run_once(param: str, url: str):
    gateway = Gateway.from_config()
    try:
        return await gateway.handle('GET', f"{LOCAL_ORIGIN}?{urlencode({param: url})}")
    finally:
        await gateway.shutdown()


def _print_result(response):
    if response.status != 200:
        click.echo(f"Error: {response.json().get('error', response.status)}", err=True)
        sys.exit(1)
    click.echo(json.dumps(response.json(), indent=2, ensure_ascii=False))


@main.command()
@click.argument('url')
def feed(url: str):
    """Fetch a feed through the proxy pipeline and print its JSON"""
    _print_result(asyncio.run(_run_once('url', url)))


@main.command()
@click.argument('url')
def article(url: str):
    """Extract an article through the proxy pipeline and print its JSON"""
    _print_result(asyncio.run(_run_once('article', url)))


@main.command()
def status():
    """Show process and cache status"""
    try:
        store = create_cache_store(Config.CACHE_BACKEND, Config.CACHE_URL)
        current = SystemMonitoring(cache=store).get_current_status()
        click.echo("\nSystem Status:")
        for name, value in current.items():
            click.echo(f"{name}: {value}")
    except Exception as e:
        logger.error(f"Error getting system status: {e}")
        click.echo(f"Error: {str(e)}", err=True)
        sys.exit(1)


main.add_command(cache)
