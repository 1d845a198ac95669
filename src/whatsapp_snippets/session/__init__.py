"""Connection lifecycle, credentials and outbound sends."""

from .credentials import CredentialStore
from .manager import SessionManager
from .outbound import DocumentSend, ImageSend, MediaSend, VideoSend, media_send
from .state import Closed, Connecting, LifecycleState, Open, Pairing, Terminal

__all__ = [
    "CredentialStore",
    "SessionManager",
    "ImageSend",
    "VideoSend",
    "DocumentSend",
    "MediaSend",
    "media_send",
    "Pairing",
    "Connecting",
    "Open",
    "Closed",
    "Terminal",
    "LifecycleState",
]
