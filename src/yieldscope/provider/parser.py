"""Parse generateContent responses into a provider payload."""

import json
import logging

from pydantic import ValidationError

from yieldscope.models import ProviderPayload

logger = logging.getLogger(__name__)


class ResponseFormatError(ValueError):
    """The provider response did not have the expected shape."""


def extract_text(envelope: dict) -> str:
    """Pull the generated text out of a generateContent response envelope."""
    candidates = envelope.get("candidates") or []
    if not candidates:
        feedback = envelope.get("promptFeedback")
        raise ResponseFormatError(f"Response contained no candidates (feedback: {feedback})")
    parts = (candidates[0].get("content") or {}).get("parts") or []
    text = "".join(part.get("text", "") for part in parts if isinstance(part, dict))
    if not text.strip():
        raise ResponseFormatError("Response candidate contained no text")
    return text


def parse_payload(text: str) -> ProviderPayload:
    """Decode and validate the generated JSON document."""
    try:
        document = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ResponseFormatError(f"Response was not valid JSON: {exc}") from exc
    if not isinstance(document, dict) or "suburbs" not in document:
        raise ResponseFormatError("Invalid response structure: missing 'suburbs'")
    try:
        return ProviderPayload.model_validate(document)
    except ValidationError as exc:
        first = exc.errors()[0]
        location = ".".join(str(p) for p in first["loc"])
        raise ResponseFormatError(
            f"Invalid response structure: {location}: {first['msg']}"
        ) from exc


def parse_generate_response(envelope: dict) -> ProviderPayload:
    payload = parse_payload(extract_text(envelope))
    logger.debug("Parsed %d suburbs from provider response", len(payload.suburbs))
    return payload
