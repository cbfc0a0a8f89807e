from pathlib import Path
import logging

import uvicorn

from feedproxy.config import Config
from feedproxy.logging import setup_logging
from feedproxy.web import create_app


def main():
    Config.validate()
    setup_logging(Config.APP_NAME, log_dir=Path(Config.LOG_DIR))
    logger = logging.getLogger(Config.APP_NAME)
    logger.info("Starting feedproxy")

    try:
        uvicorn.run(create_app(), host=Config.HOST, port=Config.PORT, log_config=None)
    except Exception:
        logger.error("Application error", exc_info=True)
        raise


if __name__ == "__main__":
    main()
