"""Repository implementations of the SecurityRepository contract."""

from .memory import InMemorySecurityRepository

__all__ = [
    "InMemorySecurityRepository",
]
