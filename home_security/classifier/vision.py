from __future__ import annotations

import base64
import json

import anthropic
import httpx

from ..core.models import ThreatAssessment

# ---------------------------------------------------------------------------
# Tool schema registered with Claude to force structured JSON output.
# Mirrors ThreatAssessment so model_validate() acts as the final gate.
# ---------------------------------------------------------------------------
ASSESSMENT_TOOL_SCHEMA = {
    "name": "report_threat_assessment",
    "description": (
        "Report whether the camera image shows an intruder or other threat to the premises. "
        "You MUST call this tool with your assessment. Do not add free-form text."
    ),
    "input_schema": {
        "type": "object",
        "properties": {
            "contains_threat": {
                "type": "boolean",
                "description": "True if the image shows an intruder, animal or other threat.",
            },
            "confidence": {
                "type": "number",
                "minimum": 0.0,
                "maximum": 100.0,
                "description": "Confidence in the verdict, in percent.",
            },
            "labels": {
                "type": "array",
                "items": {"type": "string"},
                "description": "Short labels for what is visible in the image.",
            },
        },
        "required": ["contains_threat", "confidence", "labels"],
    },
}

_PROMPT = (
    "You are the camera monitor of a home security system. Look at this frame "
    "and decide whether it shows a threat: a person who should not be there, "
    "an animal inside the premises, or signs of forced entry. Empty rooms, "
    "furniture and pets behind glass are not threats."
)


def _encode(image: bytes) -> str:
    if not isinstance(image, (bytes, bytearray)):
        raise ValueError(
            f"image must be encoded bytes (PNG/JPEG), got {type(image).__name__}"
        )
    return base64.b64encode(bytes(image)).decode("ascii")


def _detect_media_type(image: bytes) -> str:
    """Return the MIME type of an encoded frame, read from its magic bytes."""
    head = bytes(image[:12])
    if head.startswith(b"\x89PNG"):
        return "image/png"
    if head.startswith(b"\xff\xd8"):
        return "image/jpeg"
    if head.startswith(b"GIF8"):
        return "image/gif"
    if head.startswith(b"RIFF") and head[8:12] == b"WEBP":
        return "image/webp"
    raise ValueError("image is not a PNG, JPEG, GIF or WEBP frame")


class ClaudeImageClassifier:
    """
    Sends a camera frame to Claude and returns whether it contains a threat.

    Isolated from SecurityService so the vision backend (model, prompt, tool
    schema) can be swapped without touching the alarm rules.
    """

    DEFAULT_MODEL = "claude-opus-4-6"

    def __init__(
        self,
        client: anthropic.Anthropic,
        model: str = DEFAULT_MODEL,
    ) -> None:
        self._client = client
        self._model = model

    def assess(self, image: bytes) -> ThreatAssessment:
        """
        Ask Claude for a structured verdict via forced tool-use.

        The media type sent with the frame is taken from its magic bytes.

        Raises
        ------
        ValueError
            If the image is not bytes or not a PNG/JPEG/GIF/WEBP frame, or
            Claude returns no tool_use block.
        pydantic.ValidationError
            If Claude's JSON violates the ThreatAssessment schema.
        """
        encoded = _encode(image)
        media_type = _detect_media_type(image)
        response = self._client.messages.create(
            model=self._model,
            max_tokens=512,
            tools=[ASSESSMENT_TOOL_SCHEMA],
            tool_choice={"type": "tool", "name": "report_threat_assessment"},
            messages=[
                {
                    "role": "user",
                    "content": [
                        {
                            "type": "image",
                            "source": {
                                "type": "base64",
                                "media_type": media_type,
                                "data": encoded,
                            },
                        },
                        {"type": "text", "text": _PROMPT},
                    ],
                }
            ],
        )

        tool_use_block = next(
            (block for block in response.content if block.type == "tool_use"),
            None,
        )
        if tool_use_block is None:
            raise ValueError(
                "Claude did not return a tool_use block for the camera image. "
                f"stop_reason={response.stop_reason}"
            )

        return ThreatAssessment.model_validate(tool_use_block.input)

    def contains_threat(self, image: bytes, confidence_threshold: float) -> bool:
        return self.assess(image).exceeds(confidence_threshold)


# JSON schema passed to Ollama's structured-output feature (requires Ollama >= 0.5.0).
_LOCAL_OUTPUT_SCHEMA = {
    "type": "object",
    "properties": {
        "contains_threat": {"type": "boolean"},
        "confidence": {
            "type": "number",
            "minimum": 0.0,
            "maximum": 100.0,
        },
        "labels": {
            "type": "array",
            "items": {"type": "string"},
        },
    },
    "required": ["contains_threat", "confidence", "labels"],
    "additionalProperties": False,
}


class OllamaImageClassifier:
    """
    Sends a camera frame to a local Ollama vision model (llava by default).

    Uses Ollama's JSON-schema constrained decoding so the reply is always a
    JSON object of the expected shape. Pydantic validation still runs as the
    final correctness gate.
    """

    DEFAULT_MODEL = "llava"

    def __init__(
        self,
        base_url: str = "http://localhost:11434",
        model: str = DEFAULT_MODEL,
        timeout_seconds: float = 60.0,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._model = model
        self._timeout = timeout_seconds

    def assess(self, image: bytes) -> ThreatAssessment:
        """
        Raises
        ------
        httpx.HTTPError
            If the Ollama server is unreachable or returns a non-2xx status.
        json.JSONDecodeError
            If the model response is not valid JSON.
        pydantic.ValidationError
            If the JSON does not satisfy the ThreatAssessment constraints.
        """
        encoded = _encode(image)
        with httpx.Client(timeout=self._timeout) as client:
            response = client.post(
                f"{self._base_url}/api/chat",
                json={
                    "model": self._model,
                    "messages": [
                        {"role": "user", "content": _PROMPT, "images": [encoded]}
                    ],
                    "format": _LOCAL_OUTPUT_SCHEMA,
                    "stream": False,
                },
            )
            response.raise_for_status()

        data = response.json()
        parsed = json.loads(data["message"]["content"])
        # llava ignores schema min/max constraints, clamp to valid range
        if "confidence" in parsed:
            parsed["confidence"] = max(0.0, min(100.0, float(parsed["confidence"])))
        return ThreatAssessment.model_validate(parsed)

    def contains_threat(self, image: bytes, confidence_threshold: float) -> bool:
        return self.assess(image).exceeds(confidence_threshold)
