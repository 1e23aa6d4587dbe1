"""Image classifiers: cloud (Claude) and local (Ollama) vision, a random fake, and a failure guard."""

from .factory import build_classifier
from .fake import FakeImageClassifier
from .guard import ClassifierUnavailableError, GuardedImageClassifier
from .vision import ASSESSMENT_TOOL_SCHEMA, ClaudeImageClassifier, OllamaImageClassifier

__all__ = [
    "ASSESSMENT_TOOL_SCHEMA",
    "ClassifierUnavailableError",
    "ClaudeImageClassifier",
    "FakeImageClassifier",
    "GuardedImageClassifier",
    "OllamaImageClassifier",
    "build_classifier",
]
