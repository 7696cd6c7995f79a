import os
import dotenv
import logging

dotenv.load_dotenv()

OVERRIDE_LOGGING = logging.getLevelName(os.environ.get("OVERRIDE_LOGGING", "INFO"))

GITHUB_API_URL = os.environ.get("GITHUB_API_URL", "https://api.github.com")

HTTP_CACHE_SIZE = int(os.environ.get("HTTP_CACHE_SIZE", 500))

TELEGRAM_TOKEN = os.environ.get("TELEGRAM_TOKEN")
TELEGRAM_CHAT_ID = os.environ.get("TELEGRAM_CHAT_ID")

PUSH_GATEWAY = os.environ.get("PUSH_GATEWAY")

PER_PAGE = 100
