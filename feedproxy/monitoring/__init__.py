from .system import SystemMonitoring

__all__ = ['SystemMonitoring']
