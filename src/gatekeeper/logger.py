import logging
from typing import List, Optional

import notifiers.logging

from gatekeeper import config

LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s - %(message)s"


def get_log_handlers(logger: logging.Logger) -> List[logging.Handler]:
    """Forward warnings and errors to Telegram when a bot token is set."""
    if config.TELEGRAM_TOKEN is None:
        return []
    handler = notifiers.logging.NotificationHandler(
        "telegram",
        defaults={
            "token": config.TELEGRAM_TOKEN,
            "chat_id": config.TELEGRAM_CHAT_ID,
        },
    )
    handler.setLevel(logging.WARNING)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    return [handler]


def configure_logging(level: Optional[int] = None) -> logging.Logger:
    level = config.OVERRIDE_LOGGING if level is None else level
    logging.basicConfig(format=LOG_FORMAT, level=level)
    logging.getLogger().setLevel(level)

    logger = logging.getLogger("gatekeeper")
    logger.setLevel(level)
    if not any(
        isinstance(h, notifiers.logging.NotificationHandler) for h in logger.handlers
    ):
        get_log_handlers(logger)
    return logger
