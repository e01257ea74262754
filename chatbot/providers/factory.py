from typing import Any, Optional
from chatbot.core import config
from chatbot.providers.base import AIServiceError, GenerateFn


async def _not_implemented(*args: Any, **kwargs: Any) -> Optional[str]:
    raise AIServiceError(f"Unknown provider: {config.PROVIDER}")


def get_generate() -> GenerateFn:
    if config.PROVIDER == "gemini":
        from chatbot.providers.gemini import generate
        return generate
    return _not_implemented
