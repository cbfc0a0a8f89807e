"""
System monitoring implementation.
"""

import psutil
from typing import Dict, Any, Optional


class SystemMonitoring:
    """Process and cache status for the proxy."""

    def __init__(self, cache=None, writer=None):
        self._process = psutil.Process()
        self.cache = cache
        self.writer = writer

    def get_current_status(self) -> Dict[str, Any]:
        """Get current system status."""
        try:
            status = {
                'cpu_percent': psutil.cpu_percent(),
                'memory_percent': psutil.virtual_memory().percent,
                'process_memory_mb': round(self._process.memory_info().rss / (1024 * 1024), 1),
            }
        except psutil.Error as e:
            raise RuntimeError(f"Failed to get system status: {str(e)}") from e

        status.update(self._cache_status())
        if self.writer is not None:
            status.update(self.writer.get_status())
        return status

    def _cache_status(self) -> Dict[str, Optional[int]]:
        if self.cache is None:
            return {}
        stats = self.cache.stats()
        return {
            'cache_entries': stats['entries'],
            'cache_fresh_entries': stats['fresh'],
        }
