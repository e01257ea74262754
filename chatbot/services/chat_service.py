"""
One chat exchange, start to finish:
validate -> ask the model -> upload the image (if any) -> persist -> respond.
Each step only runs if the previous one succeeded, so a failed model call
never leaves an uploaded image or a half-written record behind.
"""
import logging
from typing import Any, Dict, List, Optional

from chatbot.core.errors import ChatServiceError, UnknownError
from chatbot.providers.base import GenerateFn
from chatbot.schemas.chat import ChatRecordOut, ChatResponse, UploadedMedia
from chatbot.services.monitoring import ErrorReporter
from chatbot.services.prompt import build_parts
from chatbot.services.records import RecordStore
from chatbot.services.storage import MediaUploader
from chatbot.services.validation import ValidationPolicy, validate_chat_request

logger = logging.getLogger(__name__)


class ChatPipeline:
    def __init__(
        self,
        *,
        generate: GenerateFn,
        records: RecordStore,
        policy: ValidationPolicy,
        model: str,
        fallback_reply: str = "No reply.",
        uploader: Optional[MediaUploader] = None,
        reporter: Optional[ErrorReporter] = None,
        options: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.generate = generate
        self.records = records
        self.policy = policy
        self.model = model
        self.fallback_reply = fallback_reply
        self.uploader = uploader
        self.reporter = reporter or ErrorReporter()
        self.options = dict(options or {})

    async def submit(self, message: Any, image: Optional[UploadedMedia] = None) -> ChatResponse:
        req = validate_chat_request(message, image, self.policy)

        reply = await self._guard("ai", self.generate(build_parts(req), model=self.model, options=self.options))
        if not isinstance(reply, str) or not reply.strip():
            reply = self.fallback_reply

        image_url: Optional[str] = None
        if req.image is not None:
            if self.uploader is None:
                logger.warning("image received but no storage bucket is configured; not storing it")
            else:
                image_url = await self._guard("upload", self.uploader.upload(req.image))

        record_id = await self._guard(
            "persist", self.records.append(req.message, reply, image=image_url)
        )
        return ChatResponse(id=record_id, userMessage=req.message, image=image_url, aiReply=reply)

    async def history(self) -> List[ChatRecordOut]:
        records = await self._guard("list", self.records.list_all())
        return [ChatRecordOut.from_record(r) for r in records]

    async def _guard(self, stage: str, awaitable):
        # collaborator failures are reported once here, then handed to the HTTP layer
        try:
            return await awaitable
        except ChatServiceError as e:
            self.reporter.capture(e, stage=stage)
            raise
        except Exception as e:
            self.reporter.capture(e, stage=stage)
            raise UnknownError(f"{stage} failed: {e}") from e
