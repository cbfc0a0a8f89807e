"""
Command Line Interface for feedproxy.

Commands to run the proxy server, push a single feed or article through the
pipeline, and inspect or clear the response cache.
"""

from .cli import main

__all__ = ['main']
