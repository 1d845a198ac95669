import os

from .loader import section


class Session:
    def __init__(self, config: dict | None = None) -> None:
        cfg = section(config, "session")
        self.SESSION_DIR: str = str(cfg.get("session_dir", os.getenv("SESSION_DIR", "./storage/sessions")))
        self.RECONNECT_BASE_DELAY: float = float(
            cfg.get("reconnect_base_delay", os.getenv("RECONNECT_BASE_DELAY", "1.0"))
        )
        self.RECONNECT_MAX_DELAY: float = float(
            cfg.get("reconnect_max_delay", os.getenv("RECONNECT_MAX_DELAY", "60.0"))
        )
        # 0 disables the retry ceiling.
        self.RECONNECT_MAX_ATTEMPTS: int = int(
            cfg.get("reconnect_max_attempts", os.getenv("RECONNECT_MAX_ATTEMPTS", "10"))
        )
