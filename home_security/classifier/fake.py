from __future__ import annotations

import random
from typing import Any, Optional


class FakeImageClassifier:
    """
    Stand-in classifier for demos and manual testing: flags a threat at random.

    Pass a ``seed`` for a reproducible sequence of verdicts. The image is never
    inspected, so any object is accepted; probability 0.0 never detects a
    threat and 1.0 always does.
    """

    def __init__(self, threat_probability: float = 0.5, seed: Optional[int] = None) -> None:
        if not 0.0 <= threat_probability <= 1.0:
            raise ValueError("threat_probability must be between 0.0 and 1.0")
        self._threat_probability = threat_probability
        self._random = random.Random(seed)

    def contains_threat(self, image: Any, confidence_threshold: float) -> bool:
        # threshold ignored: the fake has no confidence to compare against
        return self._random.random() < self._threat_probability
