"""Tests for the vision classifiers (home_security.classifier.vision)."""

from __future__ import annotations

import base64
import json
from unittest.mock import MagicMock, patch

import httpx
import pytest
from pydantic import ValidationError

from home_security.classifier import (
    ASSESSMENT_TOOL_SCHEMA,
    ClaudeImageClassifier,
    OllamaImageClassifier,
)

IMAGE = b"\xff\xd8\xff\xe0 jpeg frame"


def make_classifier(
    contains_threat: bool = True,
    confidence: float = 91.0,
    labels: list | None = None,
) -> tuple[ClaudeImageClassifier, MagicMock]:
    if labels is None:
        labels = ["person", "crowbar"]

    tool_block = MagicMock()
    tool_block.type = "tool_use"
    tool_block.input = {
        "contains_threat": contains_threat,
        "confidence": confidence,
        "labels": labels,
    }
    response = MagicMock()
    response.content = [tool_block]
    response.stop_reason = "tool_use"

    mock_client = MagicMock()
    mock_client.messages.create.return_value = response

    return ClaudeImageClassifier(client=mock_client), mock_client


# ---------------------------------------------------------------------------
# ClaudeImageClassifier
# ---------------------------------------------------------------------------


class TestClaudeImageClassifier:
    def test_returns_valid_assessment(self):
        classifier, _ = make_classifier()
        result = classifier.assess(IMAGE)
        assert result.contains_threat is True
        assert result.confidence == 91.0
        assert result.labels == ["person", "crowbar"]

    def test_correct_model_and_tool_choice(self):
        classifier, mock_client = make_classifier()
        classifier.assess(IMAGE)
        kwargs = mock_client.messages.create.call_args.kwargs
        assert kwargs["model"] == ClaudeImageClassifier.DEFAULT_MODEL
        assert kwargs["tools"] == [ASSESSMENT_TOOL_SCHEMA]
        assert kwargs["tool_choice"] == {"type": "tool", "name": "report_threat_assessment"}

    def test_image_sent_base64_encoded(self):
        classifier, mock_client = make_classifier()
        classifier.assess(IMAGE)
        content = mock_client.messages.create.call_args.kwargs["messages"][0]["content"]
        source = content[0]["source"]
        assert source["media_type"] == "image/jpeg"
        assert base64.b64decode(source["data"]) == IMAGE

    @pytest.mark.parametrize(
        "frame, media_type",
        [
            (b"\x89PNG\r\n\x1a\n png frame", "image/png"),
            (b"\xff\xd8\xff\xdb jpeg frame", "image/jpeg"),
            (b"GIF89a gif frame", "image/gif"),
            (b"RIFF\x24\x00\x00\x00WEBPVP8 webp frame", "image/webp"),
        ],
    )
    def test_media_type_follows_frame_format(self, frame, media_type):
        classifier, mock_client = make_classifier()
        classifier.contains_threat(frame, 50.0)
        content = mock_client.messages.create.call_args.kwargs["messages"][0]["content"]
        assert content[0]["source"]["media_type"] == media_type

    def test_rejects_unknown_image_format(self):
        classifier, mock_client = make_classifier()
        with pytest.raises(ValueError, match="PNG, JPEG, GIF or WEBP"):
            classifier.assess(b"demo-frame")
        mock_client.messages.create.assert_not_called()

    @pytest.mark.parametrize(
        "contains_threat, confidence, threshold, expected",
        [
            (True, 91.0, 50.0, True),
            (True, 40.0, 50.0, False),
            (False, 99.0, 50.0, False),
        ],
    )
    def test_contains_threat_applies_threshold(self, contains_threat, confidence, threshold, expected):
        classifier, _ = make_classifier(contains_threat=contains_threat, confidence=confidence)
        assert classifier.contains_threat(IMAGE, threshold) is expected

    def test_raises_when_no_tool_use_block(self):
        classifier, mock_client = make_classifier()
        text_block = MagicMock()
        text_block.type = "text"
        mock_client.messages.create.return_value.content = [text_block]
        with pytest.raises(ValueError, match="tool_use block"):
            classifier.assess(IMAGE)

    def test_raises_on_invalid_schema(self):
        classifier, _ = make_classifier(confidence=250.0)
        with pytest.raises(ValidationError):
            classifier.assess(IMAGE)

    def test_rejects_non_bytes_image(self):
        classifier, mock_client = make_classifier()
        with pytest.raises(ValueError, match="bytes"):
            classifier.assess("not-an-image")
        mock_client.messages.create.assert_not_called()


# ---------------------------------------------------------------------------
# OllamaImageClassifier helpers
# ---------------------------------------------------------------------------


def _make_http_mock(response_body: dict) -> MagicMock:
    """Return a mock httpx.Client whose .post() returns response_body as JSON."""
    mock_response = MagicMock()
    mock_response.json.return_value = response_body
    mock_response.raise_for_status = MagicMock()

    mock_client = MagicMock()
    mock_client.__enter__.return_value = mock_client
    mock_client.__exit__.return_value = False
    mock_client.post.return_value = mock_response
    return mock_client


def _ollama_body(**assessment) -> dict:
    return {"message": {"content": json.dumps(assessment)}}


class TestOllamaImageClassifier:
    def test_returns_valid_assessment(self):
        body = _ollama_body(contains_threat=True, confidence=77.0, labels=["person"])
        with patch("home_security.classifier.vision.httpx.Client", return_value=_make_http_mock(body)):
            result = OllamaImageClassifier().assess(IMAGE)
        assert result.contains_threat is True
        assert result.labels == ["person"]

    def test_clamps_confidence_above_hundred(self):
        body = _ollama_body(contains_threat=True, confidence=140, labels=[])
        with patch("home_security.classifier.vision.httpx.Client", return_value=_make_http_mock(body)):
            result = OllamaImageClassifier().assess(IMAGE)
        assert result.confidence == 100.0

    def test_clamps_confidence_below_zero(self):
        body = _ollama_body(contains_threat=False, confidence=-3, labels=[])
        with patch("home_security.classifier.vision.httpx.Client", return_value=_make_http_mock(body)):
            result = OllamaImageClassifier().assess(IMAGE)
        assert result.confidence == 0.0

    def test_posts_to_correct_url_and_model(self):
        body = _ollama_body(contains_threat=False, confidence=5.0, labels=["sofa"])
        mock_http = _make_http_mock(body)
        with patch("home_security.classifier.vision.httpx.Client", return_value=mock_http):
            OllamaImageClassifier(base_url="http://camera-box:11434/", model="llava:13b").assess(IMAGE)
        args, kwargs = mock_http.post.call_args
        assert args[0] == "http://camera-box:11434/api/chat"
        payload = kwargs["json"]
        assert payload["model"] == "llava:13b"
        assert payload["stream"] is False
        assert base64.b64decode(payload["messages"][0]["images"][0]) == IMAGE

    def test_contains_threat_applies_threshold(self):
        body = _ollama_body(contains_threat=True, confidence=60.0, labels=["cat"])
        with patch("home_security.classifier.vision.httpx.Client", return_value=_make_http_mock(body)):
            assert OllamaImageClassifier().contains_threat(IMAGE, 50.0) is True
        with patch("home_security.classifier.vision.httpx.Client", return_value=_make_http_mock(body)):
            assert OllamaImageClassifier().contains_threat(IMAGE, 75.0) is False

    def test_http_error_propagates(self):
        mock_http = _make_http_mock({})
        mock_http.post.return_value.raise_for_status.side_effect = httpx.HTTPStatusError(
            "503", request=MagicMock(), response=MagicMock()
        )
        with patch("home_security.classifier.vision.httpx.Client", return_value=mock_http):
            with pytest.raises(httpx.HTTPStatusError):
                OllamaImageClassifier().assess(IMAGE)

    def test_raises_on_missing_verdict(self):
        body = _ollama_body(confidence=50.0, labels=[])
        with patch("home_security.classifier.vision.httpx.Client", return_value=_make_http_mock(body)):
            with pytest.raises(ValidationError):
                OllamaImageClassifier().assess(IMAGE)
