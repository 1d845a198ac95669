"""
File-backed credential persistence.

Layout under the configured session directory::

    creds.json            top-level authentication state
    keys/<name>.json      one file per signal key (pre-keys, sessions, ...)

Keys arrive nested under ``credentials["keys"]`` and are split into their own
files so a ratchet update rewrites one small file rather than the whole state.
Every write goes to a temp file first and is renamed into place.
"""

from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path
from typing import Any, Dict

from whatsapp_snippets.config import session as session_cfg

logger = logging.getLogger(__name__)

_CREDS_FILE = "creds.json"
_KEYS_DIR = "keys"
_UNSAFE = re.compile(r"[^A-Za-z0-9._-]")


def _file_name(key_name: str) -> str:
    return _UNSAFE.sub("_", key_name) + ".json"


def _write_json(path: Path, payload: Any) -> None:
    tmp = path.with_suffix(path.suffix + ".tmp")
    with tmp.open("w", encoding="utf-8") as f:
        json.dump(payload, f, ensure_ascii=False)
    os.replace(tmp, path)


class CredentialStore:
    """Load and save authentication material for one account."""

    def __init__(self, directory: str | Path | None = None) -> None:
        self._dir = Path(directory if directory is not None else session_cfg.SESSION_DIR)

    @property
    def directory(self) -> Path:
        return self._dir

    def load(self) -> Dict[str, Any] | None:
        """Return stored credentials, or ``None`` when the account is unpaired."""

        creds_path = self._dir / _CREDS_FILE
        if not creds_path.is_file():
            logger.info("No credentials in %s; a pairing token will be required.", self._dir)
            return None

        with creds_path.open("r", encoding="utf-8") as f:
            credentials: Dict[str, Any] = json.load(f)

        keys_dir = self._dir / _KEYS_DIR
        if keys_dir.is_dir():
            keys: Dict[str, Any] = {}
            for key_file in sorted(keys_dir.glob("*.json")):
                with key_file.open("r", encoding="utf-8") as f:
                    record = json.load(f)
                keys[record["name"]] = record["value"]
            if keys:
                credentials["keys"] = keys
        return credentials

    def save(self, credentials: Dict[str, Any]) -> None:
        """Persist ``credentials``; raises on I/O failure."""

        self._dir.mkdir(parents=True, exist_ok=True)
        payload = dict(credentials)
        keys = payload.pop("keys", None) or {}
        _write_json(self._dir / _CREDS_FILE, payload)

        if keys:
            keys_dir = self._dir / _KEYS_DIR
            keys_dir.mkdir(exist_ok=True)
            for name, value in keys.items():
                key_path = keys_dir / _file_name(name)
                if value is None:
                    key_path.unlink(missing_ok=True)
                    continue
                _write_json(key_path, {"name": name, "value": value})

    def clear(self) -> None:
        """Delete stored credentials so the next connect starts a fresh pairing."""

        keys_dir = self._dir / _KEYS_DIR
        if keys_dir.is_dir():
            for key_file in keys_dir.glob("*.json"):
                key_file.unlink(missing_ok=True)
        (self._dir / _CREDS_FILE).unlink(missing_ok=True)
        logger.info("Cleared credentials in %s", self._dir)
