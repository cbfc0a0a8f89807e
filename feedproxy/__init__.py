"""Feed-fetching and article-extraction proxy."""

__version__ = "1.0.0"
