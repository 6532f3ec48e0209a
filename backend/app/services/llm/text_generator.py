import json
import logging
import re
from typing import Any, Dict, Optional, Protocol, runtime_checkable

logger = logging.getLogger(__name__)

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


@runtime_checkable
class TextGenerator(Protocol):
    """
    Best-effort text generation collaborator.

    Implementations return None on any failure (no credentials, timeout,
    non-2xx, unparseable body) rather than raising.
    """

    async def generate_json(self, prompt: str, *, timeout: float) -> Optional[Dict[str, Any]]:
        ...

    async def generate_text(self, prompt: str, *, timeout: float) -> Optional[str]:
        ...


def extract_json_object(text: Optional[str]) -> Optional[Dict[str, Any]]:
    """
    Pull the first {...} block out of model output (handles ```json fences and
    leading prose). Returns None when no JSON object can be decoded.
    """
    if not text:
        return None
    match = _JSON_OBJECT.search(text)
    if not match:
        return None
    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError:
        logger.warning("LLM returned malformed JSON (%d chars)", len(text))
        return None
    return data if isinstance(data, dict) else None
