import logging
import logging.handlers
import json
import threading
from pathlib import Path
from datetime import datetime
from functools import wraps
from typing import Dict, Optional

COMPONENTS = ['parsing', 'fetching', 'cache', 'gateway']


class LogLevelManager:
    _instance = None
    _lock = threading.Lock()

    def __new__(cls):
        with cls._lock:
            if cls._instance is None:
                cls._instance = super(LogLevelManager, cls).__new__(cls)
                cls._instance._component_levels = {}
            return cls._instance

    def set_component_level(self, component: str, level: int) -> None:
        """Set logging level for a specific component at runtime"""
        logger = logging.getLogger(f"feedproxy.{component}")
        logger.setLevel(level)
        self._component_levels[component] = level

    def get_component_level(self, component: str) -> int:
        """Get current logging level for a component"""
        return self._component_levels.get(component, logging.INFO)


class StructuredJSONFormatter(logging.Formatter):
    def __init__(self):
        super().__init__()
        self.default_msec_format = '%s.%03d'

    def format(self, record) -> str:
        log_obj = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "thread_name": record.threadName,
            "process": record.process,
            "message": record.getMessage(),
        }

        # Add structured context if available
        if hasattr(record, 'context'):
            log_obj['context'] = record.context

        # Request-scoped fields set by the gateway
        if hasattr(record, 'request_url'):
            log_obj['request'] = {
                'url': record.request_url,
                'method': getattr(record, 'request_method', None),
                'status': getattr(record, 'response_status', None)
            }

        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_obj, default=str)


def setup_logging(
    app_name: str = "feedproxy",
    log_dir: Optional[Path] = None,
    max_bytes: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5,
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG
) -> Dict[str, logging.Logger]:
    """
    Setup console and rotating JSON file logging with per-component loggers.

    Returns the component loggers keyed by component name.
    """
    if log_dir is None:
        log_dir = Path("logs")
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)  # Capture all levels, let handlers filter

    console_handler = logging.StreamHandler()
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter(
        '%(asctime)s.%(msecs)03d - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    ))

    main_file_handler = logging.handlers.RotatingFileHandler(
        filename=log_dir / f"{app_name}.log",
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding='utf-8'
    )
    main_file_handler.setLevel(file_level)
    main_file_handler.setFormatter(StructuredJSONFormatter())

    error_file_handler = logging.handlers.RotatingFileHandler(
        filename=log_dir / f"{app_name}_error.log",
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding='utf-8'
    )
    error_file_handler.setLevel(logging.ERROR)
    error_file_handler.setFormatter(StructuredJSONFormatter())

    root_logger.addHandler(console_handler)
    root_logger.addHandler(main_file_handler)
    root_logger.addHandler(error_file_handler)

    loggers = {}
    levels = LogLevelManager()
    for component in COMPONENTS:
        logger = logging.getLogger(f"{app_name}.{component}")
        logger.setLevel(levels.get_component_level(component))

        component_file_handler = logging.handlers.RotatingFileHandler(
            filename=log_dir / f"{app_name}_{component}.log",
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding='utf-8'
        )
        component_file_handler.setLevel(file_level)
        component_file_handler.setFormatter(StructuredJSONFormatter())
        logger.addHandler(component_file_handler)

        loggers[component] = logger

    return loggers


def log_function_call(logger):
    """Decorator to log function calls with parameters and duration"""
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            func_name = func.__name__
            start_time = datetime.now()

            context = {
                'function_start_time': start_time.isoformat(),
                'args': str(args)[:200],
                'kwargs': str(kwargs)[:200]
            }
            logger.debug(f"Calling {func_name}", extra={'context': context})

            try:
                result = func(*args, **kwargs)
            except Exception as e:
                context.update({
                    'duration_seconds': (datetime.now() - start_time).total_seconds(),
                    'success': False,
                    'error': str(e)
                })
                logger.error(f"Error in {func_name}", exc_info=True, extra={'context': context})
                raise

            context.update({
                'duration_seconds': (datetime.now() - start_time).total_seconds(),
                'success': True
            })
            logger.debug(f"{func_name} completed successfully", extra={'context': context})
            return result

        return wrapper
    return decorator
