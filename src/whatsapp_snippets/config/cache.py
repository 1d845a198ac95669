import os

from .loader import section


class Cache:
    def __init__(self, config: dict | None = None) -> None:
        cache_cfg = section(config, "cache")
        self.STORE_FILE: str = str(cache_cfg.get("store_file", os.getenv("STORE_FILE", "./storage/store.json.gz")))
        self.FLUSH_INTERVAL: float = float(cache_cfg.get("flush_interval", os.getenv("FLUSH_INTERVAL", "60")))
