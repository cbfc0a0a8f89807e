"""
Tests for the feed and article CLI commands.
"""

from unittest.mock import AsyncMock, patch

from feedproxy.responses import json_response, error_response
from .test_base import BaseCliTest


class TestProxyCommands(BaseCliTest):
    """Test cases for one-shot proxy commands."""

    def setUp(self):
        """Set up test environment."""
        super().setUp()
        self.mock_gateway = patch('feedproxy.cli.cli.Gateway').start()
        self.gateway_instance = self.mock_gateway.from_config.return_value
        self.gateway_instance.handle = AsyncMock()
        self.gateway_instance.shutdown = AsyncMock()

    def test_feed(self):
        """Test printing a parsed feed."""
        self.gateway_instance.handle.return_value = json_response({"title": "Example", "items": []})

        result = self.invoke_cli(['feed', 'https://example.com/feed.xml'])

        self.assertEqual(result.exit_code, 0)
        self.assertIn('"title": "Example"', result.output)
        self.assertIn('"items": []', result.output)
        self.gateway_instance.handle.assert_awaited_once_with(
            'GET', 'http://localhost/?url=https%3A%2F%2Fexample.com%2Ffeed.xml'
        )
        self.gateway_instance.shutdown.assert_awaited_once()

    def test_article(self):
        """Test printing an extracted article."""
        self.gateway_instance.handle.return_value = json_response(
            {"title": "Post", "content": "<p>Body</p>", "url": "https://example.com/post"}
        )

        result = self.invoke_cli(['article', 'https://example.com/post'])

        self.assertEqual(result.exit_code, 0)
        self.assertIn('"content": "<p>Body</p>"', result.output)
        self.gateway_instance.handle.assert_awaited_once_with(
            'GET', 'http://localhost/?article=https%3A%2F%2Fexample.com%2Fpost'
        )

    def test_feed_upstream_error(self):
        """Test error reporting when the upstream fetch fails."""
        self.gateway_instance.handle.return_value = error_response("Failed to fetch feed: 503", 502)

        result = self.invoke_cli(['feed', 'https://example.com/feed.xml'])

        self.assertEqual(result.exit_code, 1)
        self.assertIn("Error: Failed to fetch feed: 503", result.output)
        self.gateway_instance.shutdown.assert_awaited_once()
