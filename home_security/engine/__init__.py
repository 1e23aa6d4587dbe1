"""Engine: security service, listener registry and write transactions."""

from .listeners import ListenerRegistry
from .service import SecurityService
from .transaction import StateTransaction

__all__ = [
    "ListenerRegistry",
    "SecurityService",
    "StateTransaction",
]
