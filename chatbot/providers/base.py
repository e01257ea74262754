# lets us swap/add model providers without touching the pipeline or endpoint logic
# declares the provider contract (generate(...)) that every provider implements

from typing import Any, Awaitable, Callable, Dict, List, Optional, TypedDict

from chatbot.core.errors import AIServiceError


class InlineData(TypedDict):
    mime_type: str
    data: str  # base64


class ContentPart(TypedDict, total=False):
    # exactly one of the two keys is set
    text: str
    inline_data: InlineData


# returns the generated text, or None when the model produced nothing usable
GenerateFn = Callable[..., Awaitable[Optional[str]]]


async def generate(
    parts: List[ContentPart],
    *,
    model: str,
    options: Optional[Dict[str, Any]] = None,
) -> Optional[str]:
    """Abstract provider interface. Single turn: no history is ever sent."""
    raise NotImplementedError


__all__ = ["AIServiceError", "ContentPart", "GenerateFn", "InlineData", "generate"]
