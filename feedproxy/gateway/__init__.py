from .background import BackgroundWriter
from .handler import Gateway

__all__ = ['BackgroundWriter', 'Gateway']
