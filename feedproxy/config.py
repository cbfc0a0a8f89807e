import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _optional_float(value):
    if value is None or value.strip() == "":
        return None
    return float(value)


class Config:
    APP_NAME = "feedproxy"

    # HTTP server
    HOST = os.getenv('FEEDPROXY_HOST', '127.0.0.1')
    PORT = int(os.getenv('FEEDPROXY_PORT', '8787'))

    # Response cache
    CACHE_TTL = int(os.getenv('FEEDPROXY_CACHE_TTL', '300'))
    CACHE_BACKEND = os.getenv('FEEDPROXY_CACHE_BACKEND', 'memory')
    CACHE_URL = os.getenv('FEEDPROXY_CACHE_URL', 'sqlite:///data/feedproxy_cache.db')

    # Upstream fetching
    USER_AGENT = os.getenv('FEEDPROXY_USER_AGENT', 'feedproxy RSS Reader/1.0')
    # Unset means no timeout, requests waits as long as the socket does
    FETCH_TIMEOUT = _optional_float(os.getenv('FEEDPROXY_FETCH_TIMEOUT'))

    # Logging
    LOG_DIR = os.getenv('FEEDPROXY_LOG_DIR', 'logs')
    LOG_LEVEL = os.getenv('FEEDPROXY_LOG_LEVEL', 'INFO').upper()

    CACHE_BACKENDS = ('memory', 'sqlite')
    LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')

    @classmethod
    def validate(cls) -> None:
        """Validate configuration values loaded from the environment"""
        problems = []
        if cls.CACHE_BACKEND not in cls.CACHE_BACKENDS:
            problems.append(f"FEEDPROXY_CACHE_BACKEND must be one of {', '.join(cls.CACHE_BACKENDS)}")
        if cls.CACHE_TTL <= 0:
            problems.append("FEEDPROXY_CACHE_TTL must be positive")
        if not 0 < cls.PORT < 65536:
            problems.append("FEEDPROXY_PORT must be a valid TCP port")
        if cls.FETCH_TIMEOUT is not None and cls.FETCH_TIMEOUT <= 0:
            problems.append("FEEDPROXY_FETCH_TIMEOUT must be positive when set")
        if cls.LOG_LEVEL not in cls.LOG_LEVELS:
            problems.append(f"FEEDPROXY_LOG_LEVEL must be one of {', '.join(cls.LOG_LEVELS)}")

        if problems:
            raise ValueError(f"Invalid configuration: {'; '.join(problems)}")
