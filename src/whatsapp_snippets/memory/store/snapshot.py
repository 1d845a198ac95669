"""Whole-store snapshot files.

The message store is persisted as one gzipped JSON document:
    {"version": 1,
     "conversations": {jid: {"name": str | None, "is_group": bool,
                             "messages": [Message-as-dict, ...]}, ...}}

Helpers:
    - exists(path)
    - load(path)
    - save(path, snapshot)

``save`` writes to a sibling temp file and renames it over the target so a
crash mid-write never leaves a torn snapshot behind.
"""
from __future__ import annotations

import gzip
import json
import os
from pathlib import Path
from typing import Any, Dict

from .conversation import ConversationEntry

SNAPSHOT_VERSION = 1

Snapshot = Dict[str, Dict[str, Any]]


def exists(path: str | Path) -> bool:
    return Path(path).exists()


def load(path: str | Path) -> Dict[str, ConversationEntry]:
    p = Path(path)
    if not p.exists():
        return {}
    with gzip.open(p, "rt", encoding="utf-8") as f:
        raw = json.load(f)
    conversations = raw.get("conversations", {})
    return {jid: ConversationEntry.from_dict(jid, d) for jid, d in conversations.items()}


def save(path: str | Path, snapshot: Snapshot) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    tmp = p.with_suffix(p.suffix + ".tmp")
    document = {"version": SNAPSHOT_VERSION, "conversations": snapshot}
    with gzip.open(tmp, "wt", encoding="utf-8") as f:
        json.dump(document, f, ensure_ascii=False)
    os.replace(tmp, p)
