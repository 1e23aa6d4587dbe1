from __future__ import annotations

import logging
from types import TracebackType
from typing import Callable, List, Optional, Tuple, Type

logger = logging.getLogger(__name__)


class StateTransaction:
    """
    Applies repository writes in order and remembers how to undo each one.

    Used as a context manager around the write phase of an engine operation.
    If any write raises, the writes that already went through are compensated
    in reverse order and the original exception keeps propagating. A write
    that raised is never compensated, since it is not recorded.

    A compensation step that itself fails is logged and skipped so the
    remaining steps still run; the caller sees the original error, not the
    rollback error.
    """

    def __init__(self, label: str) -> None:
        self._label = label
        self._undo: List[Tuple[str, Callable[[], None]]] = []
        self._committed = False

    @property
    def applied(self) -> int:
        return len(self._undo)

    @property
    def committed(self) -> bool:
        return self._committed

    def apply(
        self,
        description: str,
        do: Callable[[], None],
        undo: Callable[[], None],
    ) -> None:
        do()
        self._undo.append((description, undo))

    def rollback(self) -> None:
        while self._undo:
            description, undo = self._undo.pop()
            try:
                undo()
            except Exception:
                logger.exception(
                    "[%s] rollback of %r failed; repository may be inconsistent",
                    self._label,
                    description,
                )

    def __enter__(self) -> "StateTransaction":
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> bool:
        if exc_type is None:
            self._committed = True
            return False
        if self._undo:
            logger.warning(
                "[%s] write failed (%s); rolling back %d applied write(s)",
                self._label,
                exc,
                len(self._undo),
            )
        self.rollback()
        return False
