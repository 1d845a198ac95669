"""
Payload classification.

A message may populate several payload slots at once; exactly one kind is
picked using a fixed precedence::

    conversation -> extended text -> image -> video -> document -> unknown

Empty text slots do not match, so a blank ``conversation`` falls through to
the next slot.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal, Optional

from whatsapp_snippets.memory.store.model import MediaContent, Message

logger = logging.getLogger(__name__)

MessageKind = Literal["text", "image", "video", "document", "unknown"]


@dataclass(frozen=True)
class Classified:
    kind: MessageKind
    text: Optional[str] = None
    media: Optional[MediaContent] = None

    @property
    def is_media(self) -> bool:
        return self.media is not None


UNKNOWN = Classified("unknown")


def classify(message: Message) -> Classified:
    """Return the single kind ``message`` is ingested as."""

    content = message.content
    if content is None:
        result = UNKNOWN
    elif content.conversation:
        result = Classified("text", text=content.conversation)
    elif content.extended_text is not None and content.extended_text.text:
        result = Classified("text", text=content.extended_text.text)
    elif content.image is not None:
        result = Classified("image", media=content.image)
    elif content.video is not None:
        result = Classified("video", media=content.video)
    elif content.document is not None:
        result = Classified("document", media=content.document)
    else:
        result = UNKNOWN

    # classify: 3EB0C4... [4915...@s.whatsapp.net] -> image
    logger.debug("classify: %s [%s] -> %s", message.id, message.chat_id, result.kind)
    return result
