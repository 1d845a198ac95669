"""
Connection lifecycle states.

Each state carries exactly the data that is valid while it is current, so a
pairing token cannot outlive the pairing phase and a send cannot reach a handle
that is not open::

    Pairing{token?} -> Connecting -> Open{handle} -> Closed{cause}
                                                       |
                                    logout / retries exhausted -> Terminal{cause}
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from whatsapp_snippets.clients.protocol import ConnectionHandle, DisconnectCause


@dataclass(frozen=True)
class Pairing:
    """No valid credentials; waiting for a device to scan ``token``."""

    token: Optional[str] = None
    name = "pairing"


@dataclass(frozen=True)
class Connecting:
    name = "connecting"


@dataclass(frozen=True)
class Open:
    handle: ConnectionHandle
    name = "open"


@dataclass(frozen=True)
class Closed:
    cause: Optional[DisconnectCause] = None
    name = "closed"


@dataclass(frozen=True)
class Terminal:
    """Automatic reconnection is over until ``connect()`` is called again."""

    cause: Optional[DisconnectCause] = None
    name = "terminal"


LifecycleState = Union[Pairing, Connecting, Open, Closed, Terminal]

__all__ = ["Pairing", "Connecting", "Open", "Closed", "Terminal", "LifecycleState"]
