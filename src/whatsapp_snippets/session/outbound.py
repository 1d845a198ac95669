"""
Outbound media payloads.

Each variant maps to the single payload shape the protocol client expects for
that kind, e.g. ``{"image": {"url": ...}, "caption": ...}``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Union


def _drop_nones(d: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in d.items() if v is not None}


@dataclass(frozen=True)
class ImageSend:
    source_url: str
    caption: Optional[str] = None
    kind = "image"

    def to_payload(self) -> Dict[str, Any]:
        return _drop_nones({"image": {"url": self.source_url}, "caption": self.caption})


@dataclass(frozen=True)
class VideoSend:
    source_url: str
    caption: Optional[str] = None
    kind = "video"

    def to_payload(self) -> Dict[str, Any]:
        return _drop_nones({"video": {"url": self.source_url}, "caption": self.caption})


@dataclass(frozen=True)
class DocumentSend:
    source_url: str
    caption: Optional[str] = None
    mimetype: Optional[str] = None
    file_name: Optional[str] = None
    kind = "document"

    def to_payload(self) -> Dict[str, Any]:
        return _drop_nones(
            {
                "document": {"url": self.source_url},
                "caption": self.caption,
                "mimetype": self.mimetype,
                "fileName": self.file_name,
            }
        )


MediaSend = Union[ImageSend, VideoSend, DocumentSend]

_VARIANTS = {"image": ImageSend, "video": VideoSend, "document": DocumentSend}


def media_send(kind: str, source_url: str, caption: str | None = None) -> MediaSend:
    """Build the variant for ``kind``; raises ``ValueError`` for other kinds."""

    try:
        variant = _VARIANTS[kind]
    except KeyError as exc:
        raise ValueError(
            f"Invalid media type {kind!r}. Must be one of: image, video, document"
        ) from exc
    return variant(source_url=source_url, caption=caption)


__all__ = ["ImageSend", "VideoSend", "DocumentSend", "MediaSend", "media_send"]
