"""Application configuration"""

import logging
from dotenv import load_dotenv

from .loader import load_raw_config
from .session import Session
from .cache import Cache
from .storage import Storage
from .history import History

load_dotenv()

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s]: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

logging.basicConfig(format=LOG_FORMAT, datefmt=DATE_FORMAT, level=logging.INFO)
logging.getLogger("aiohttp").setLevel(logging.WARNING)

_RAW_CONFIG = load_raw_config()

session = Session(_RAW_CONFIG)
cache = Cache(_RAW_CONFIG)
storage = Storage(_RAW_CONFIG)
history = History(_RAW_CONFIG)


class Config:
    session = session
    cache = cache
    storage = storage
    history = history


__all__ = ["session", "cache", "storage", "history", "Config"]
