import os

from .loader import section


class Storage:
    def __init__(self, config: dict | None = None) -> None:
        cfg = section(config, "storage")
        url_env = str(cfg.get("url_env", "SUPABASE_URL"))
        key_env = str(cfg.get("key_env", "SUPABASE_KEY"))

        self.SUPABASE_URL: str | None = os.getenv(url_env)
        self.SUPABASE_KEY: str | None = os.getenv(key_env)
        self.MEDIA_BUCKET: str = str(cfg.get("media_bucket", os.getenv("MEDIA_BUCKET", "whatsapp-media")))
        self.SNIPPETS_TABLE: str = str(cfg.get("snippets_table", os.getenv("SNIPPETS_TABLE", "whatsapp_snippets")))
        self.MEDIA_FAILED_SENTINEL: str = str(
            cfg.get("media_failed_sentinel", os.getenv("MEDIA_FAILED_SENTINEL", "media_upload_failed"))
        )

    def require_credentials(self) -> tuple[str, str]:
        """Return ``(url, key)`` or raise when either is unset."""

        required = [
            ("SUPABASE_URL", self.SUPABASE_URL),
            ("SUPABASE_KEY", self.SUPABASE_KEY),
        ]
        missing = [name for name, val in required if not val]
        if missing:
            raise ValueError(f"Missing environment variables: {', '.join(missing)}")
        return self.SUPABASE_URL, self.SUPABASE_KEY  # type: ignore[return-value]
