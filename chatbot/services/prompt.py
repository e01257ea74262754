import base64
from typing import List

from chatbot.core import config
from chatbot.providers.base import ContentPart
from chatbot.schemas.chat import ChatRequest


def build_parts(req: ChatRequest) -> List[ContentPart]:
    # single turn: only the current message (and image) goes to the model
    parts: List[ContentPart] = []
    if req.message:
        parts.append({"text": req.message})
    elif req.image is not None:
        parts.append({"text": config.IMAGE_ONLY_PROMPT})
    if req.image is not None:
        parts.append({
            "inline_data": {
                "mime_type": req.image.mime_type,
                "data": base64.b64encode(req.image.buffer).decode("ascii"),
            }
        })
    return parts
