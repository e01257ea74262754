"""
Request validation for POST /api/chat.

Two policies have been used by this service over time:
- message_or_image: a request needs a message, an image, or both
- message_required: a non-empty message is always required
Both also cap the message length. The policy is an object passed in,
so handlers and tests pick it explicitly.
"""
from dataclasses import dataclass, field
from typing import Any, FrozenSet, Optional

from chatbot.core import config
from chatbot.core.errors import ValidationError
from chatbot.schemas.chat import ChatRequest, UploadedMedia

POLICY_MESSAGE_OR_IMAGE = "message_or_image"
POLICY_MESSAGE_REQUIRED = "message_required"

DEFAULT_IMAGE_TYPES = frozenset({
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/webp",
    "image/gif",
    "image/heic",
    "image/heif",
})


@dataclass(frozen=True)
class ValidationPolicy:
    require_message: bool = False
    max_length: Optional[int] = 500  # None or 0 = unlimited
    max_image_bytes: Optional[int] = 20 * 1024 * 1024
    allowed_image_types: FrozenSet[str] = field(default=DEFAULT_IMAGE_TYPES)

    @classmethod
    def from_config(cls) -> "ValidationPolicy":
        if config.MESSAGE_POLICY not in {POLICY_MESSAGE_OR_IMAGE, POLICY_MESSAGE_REQUIRED}:
            raise ValueError(f"Unknown MESSAGE_POLICY: {config.MESSAGE_POLICY}")
        return cls(
            require_message=config.MESSAGE_POLICY == POLICY_MESSAGE_REQUIRED,
            max_length=config.MAX_MESSAGE_LENGTH or None,
            max_image_bytes=config.MAX_IMAGE_BYTES or None,
        )


def validate_chat_request(
    message: Any,
    image: Optional[UploadedMedia],
    policy: ValidationPolicy,
) -> ChatRequest:
    text = message.strip() if isinstance(message, str) else ""

    if image is not None and not image.buffer and not image.original_name:
        # empty file input submitted with the form
        image = None

    if policy.require_message and not text:
        raise ValidationError("No message provided.")
    if not text and image is None:
        raise ValidationError("No message or image provided.")
    if policy.max_length and len(text) > policy.max_length:
        raise ValidationError(f"Message is too long (max {policy.max_length} characters).")

    if image is not None:
        mime = (image.mime_type or "").lower()
        if mime not in policy.allowed_image_types:
            raise ValidationError(f"Unsupported image type: {mime or 'unknown'}.")
        if not image.buffer:
            raise ValidationError("Image is empty.")
        if policy.max_image_bytes and len(image.buffer) > policy.max_image_bytes:
            raise ValidationError("Image is too large.")

    return ChatRequest(message=text, image=image)
