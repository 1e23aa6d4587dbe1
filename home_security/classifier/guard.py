from __future__ import annotations

import logging
import time
from typing import Any, Optional

from ..core.interfaces import ImageClassifier

logger = logging.getLogger(__name__)


class ClassifierUnavailableError(RuntimeError):
    """Raised instead of calling the wrapped classifier while the guard is open."""


class GuardedImageClassifier:
    """
    Wraps an ImageClassifier with a consecutive-failure breaker.

    After ``threshold`` failures in a row the guard opens and every call fails
    fast with ClassifierUnavailableError for ``cooldown_seconds``, sparing a
    struggling vision backend from a camera that keeps scanning. Once the
    cooldown elapses the next call goes through again.

    Failures of the wrapped classifier are counted and re-raised unchanged;
    the guard never turns an error into a verdict.
    """

    def __init__(
        self,
        classifier: ImageClassifier,
        threshold: int = 5,
        cooldown_seconds: float = 60.0,
    ) -> None:
        if threshold < 1:
            raise ValueError("threshold must be at least 1")
        self._classifier = classifier
        self._threshold = threshold
        self._cooldown_seconds = cooldown_seconds
        self._consecutive_failures: int = 0
        self._open_at: Optional[float] = None

    # ------------------------------------------------------------------
    # State inspection
    # ------------------------------------------------------------------

    @property
    def is_open(self) -> bool:
        """
        True while calls are being refused. Reading it after the cooldown
        has elapsed closes the guard and returns False.
        """
        if self._open_at is None:
            return False
        if time.monotonic() - self._open_at >= self._cooldown_seconds:
            self._open_at = None
            self._consecutive_failures = 0
            logger.info("Classifier guard closed, resuming image classification")
            return False
        return True

    @property
    def consecutive_failures(self) -> int:
        return self._consecutive_failures

    @property
    def wrapped(self) -> ImageClassifier:
        return self._classifier

    # ------------------------------------------------------------------
    # ImageClassifier
    # ------------------------------------------------------------------

    def contains_threat(self, image: Any, confidence_threshold: float) -> bool:
        if self.is_open:
            raise ClassifierUnavailableError(
                f"image classifier suspended after {self._consecutive_failures} "
                "consecutive failures"
            )
        try:
            detected = self._classifier.contains_threat(image, confidence_threshold)
        except Exception:
            self._record_failure()
            raise
        self._consecutive_failures = 0
        return detected

    def _record_failure(self) -> None:
        self._consecutive_failures += 1
        if self._consecutive_failures >= self._threshold and self._open_at is None:
            self._open_at = time.monotonic()
            logger.warning(
                "Classifier guard opened after %d consecutive failures; suspended for %.0fs",
                self._consecutive_failures,
                self._cooldown_seconds,
            )
