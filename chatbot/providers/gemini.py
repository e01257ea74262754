import logging
import httpx
from typing import Any, Dict, List, Optional
from chatbot.providers.base import AIServiceError, ContentPart
from chatbot.core import config

logger = logging.getLogger(__name__)


def _apply_defaults(options: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    opts: Dict[str, Any] = dict(options or {})
    opts.setdefault("temperature", config.TEMPERATURE)
    opts.setdefault("maxOutputTokens", config.MAX_OUTPUT_TOKENS)
    return opts


def extract_text(data: Any) -> Optional[str]:
    """
    Pull the reply text out of a generateContent payload.
    Returns None when the response carries no text parts (empty candidates,
    safety stop, image-only output, ...); callers decide on a fallback.
    """
    if not isinstance(data, dict):
        return None
    candidates = data.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        return None
    content = candidates[0].get("content") if isinstance(candidates[0], dict) else None
    parts = content.get("parts") if isinstance(content, dict) else None
    if not isinstance(parts, list):
        return None
    texts = [p["text"] for p in parts if isinstance(p, dict) and isinstance(p.get("text"), str)]
    text = "".join(texts)
    return text if text.strip() else None


async def generate(
    parts: List[ContentPart],
    *,
    model: str,
    options: Optional[Dict[str, Any]] = None,
) -> Optional[str]:
    payload = {
        "contents": [{"role": "user", "parts": parts}],
        "generationConfig": _apply_defaults(options),
    }
    url = f"{config.GEMINI_API_BASE}/models/{model}:generateContent"
    headers = {"x-goog-api-key": config.GEMINI_API_KEY}
    try:
        timeout = httpx.Timeout(config.AI_TIMEOUT_SECONDS, connect=10.0)
        async with httpx.AsyncClient(timeout=timeout) as client:
            r = await client.post(url, json=payload, headers=headers)
            r.raise_for_status()
            data = r.json()
    except httpx.HTTPError as e:
        raise AIServiceError(f"Gemini HTTP error: {e}") from e
    except ValueError as e:
        # invalid JSON or undecodable bytes
        raise AIServiceError("Malformed response from Gemini.") from e

    if not isinstance(data, dict):
        raise AIServiceError("Unexpected response type from Gemini.")
    err = data.get("error")
    if err:
        message = err.get("message") if isinstance(err, dict) else str(err)
        raise AIServiceError(f"Gemini error: {message}")
    feedback = data.get("promptFeedback")
    block = feedback.get("blockReason") if isinstance(feedback, dict) else None
    if block:
        raise AIServiceError(f"Gemini blocked the prompt: {block}")

    text = extract_text(data)
    if text is None:
        logger.info("gemini returned no text (model=%s)", model)
    return text
