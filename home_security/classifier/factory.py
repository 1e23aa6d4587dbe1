from __future__ import annotations

from typing import Optional

import anthropic

from ..core.models import SecurityConfig
from .guard import GuardedImageClassifier
from .vision import ClaudeImageClassifier, OllamaImageClassifier


def build_classifier(
    config: SecurityConfig,
    anthropic_client: Optional[anthropic.Anthropic] = None,
) -> GuardedImageClassifier:
    """
    Select the vision backend from ``config.use_cloud_classifier`` and wrap it
    in a GuardedImageClassifier using the configured failure threshold.
    """
    if config.use_cloud_classifier:
        if anthropic_client is None:
            raise ValueError(
                "anthropic_client is required when use_cloud_classifier=True"
            )
        backend: ClaudeImageClassifier | OllamaImageClassifier = ClaudeImageClassifier(
            client=anthropic_client,
            model=config.anthropic_model,
        )
    else:
        backend = OllamaImageClassifier(
            base_url=config.ollama_base_url,
            model=config.ollama_model,
            timeout_seconds=config.classifier_timeout_seconds,
        )

    return GuardedImageClassifier(
        backend,
        threshold=config.classifier_failure_threshold,
        cooldown_seconds=config.classifier_cooldown_seconds,
    )
