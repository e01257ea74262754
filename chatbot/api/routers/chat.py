import logging
from typing import Any, List, Optional, Tuple
from fastapi import APIRouter, Depends, Request
from starlette.datastructures import UploadFile
from chatbot.api.deps import enforce_rate_limit, get_pipeline
from chatbot.core.errors import ValidationError
from chatbot.schemas.chat import ChatRecordOut, ChatResponse, ErrorResponse, UploadedMedia
from chatbot.services.chat_service import ChatPipeline

router = APIRouter(prefix="/api", tags=["chat"])
logger = logging.getLogger(__name__)

POST_ERRORS = {code: {"model": ErrorResponse} for code in (400, 429, 500, 502)}
LIST_ERRORS = {500: {"model": ErrorResponse}}


async def _read_image(field: Any) -> Optional[UploadedMedia]:
    if not isinstance(field, UploadFile):
        return None
    data = await field.read()
    if not data and not field.filename:
        # empty <input type="file"> submitted with the form
        return None
    return UploadedMedia(
        buffer=data,
        mime_type=field.content_type or "",
        original_name=field.filename or "upload",
    )


async def read_chat_body(request: Request) -> Tuple[Any, Optional[UploadedMedia]]:
    """Accept either a JSON body or a (multipart) form with an optional `image` file."""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            body = await request.json()
        except ValueError as e:
            # bad JSON or bytes that are not valid UTF-8
            raise ValidationError("Request body is not valid JSON.") from e
        if not isinstance(body, dict):
            raise ValidationError("Request body must be a JSON object.")
        return body.get("message"), None

    if content_type.startswith(("multipart/form-data", "application/x-www-form-urlencoded")):
        form = await request.form()
        return form.get("message"), await _read_image(form.get("image"))

    # no body at all (or an unknown type): treated like an empty message
    return None, None


@router.post(
    "/chat",
    response_model=ChatResponse,
    response_model_exclude_none=True,
    responses=POST_ERRORS,
    dependencies=[Depends(enforce_rate_limit)],
)
async def post_chat(request: Request, pipeline: ChatPipeline = Depends(get_pipeline)):
    message, image = await read_chat_body(request)
    return await pipeline.submit(message, image)


@router.get(
    "/chat",
    response_model=List[ChatRecordOut],
    response_model_exclude_none=True,
    responses=LIST_ERRORS,
)
async def list_chat(pipeline: ChatPipeline = Depends(get_pipeline)):
    return await pipeline.history()
