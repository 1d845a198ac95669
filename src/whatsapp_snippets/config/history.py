import os

from .loader import section


class History:
    def __init__(self, config: dict | None = None) -> None:
        cfg = section(config, "history")
        self.BATCH_SIZE: int = int(cfg.get("batch_size", os.getenv("HISTORY_BATCH_SIZE", "5")))
        self.BATCH_DELAY: float = float(cfg.get("batch_delay", os.getenv("HISTORY_BATCH_DELAY", "2.0")))
        self.DEFAULT_LIMIT: int = int(cfg.get("default_limit", os.getenv("HISTORY_DEFAULT_LIMIT", "50")))
