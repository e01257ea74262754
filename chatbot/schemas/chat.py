from dataclasses import dataclass
from pydantic import BaseModel
from typing import Optional


@dataclass(frozen=True)
class UploadedMedia:
    # lives for one request only; the bytes are never written to the record store
    buffer: bytes
    mime_type: str
    original_name: str


@dataclass(frozen=True)
class ChatRequest:
    message: str
    image: Optional[UploadedMedia] = None


@dataclass(frozen=True)
class ChatRecord:
    id: str
    user_message: str
    ai_reply: str
    created_at: Optional[str] = None  # ISO-8601 UTC
    image: Optional[str] = None


class ChatResponse(BaseModel):
    id: str
    userMessage: str
    image: Optional[str] = None
    aiReply: str


class ChatRecordOut(ChatResponse):
    createdAt: Optional[str] = None

    @classmethod
    def from_record(cls, record: ChatRecord) -> "ChatRecordOut":
        return cls(
            id=record.id,
            userMessage=record.user_message,
            image=record.image,
            aiReply=record.ai_reply,
            createdAt=record.created_at,
        )


class ErrorResponse(BaseModel):
    error: str
    aiReply: str
