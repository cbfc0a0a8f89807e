from .fetcher import Fetcher, FetchedDocument

__all__ = ['Fetcher', 'FetchedDocument']
