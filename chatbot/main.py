# chatbot/main.py
import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from chatbot.core import config
from chatbot.core.errors import ChatServiceError, RateLimitExceeded, UnknownError
from chatbot.api.routers.health import router as health_router
from chatbot.api.routers.chat import router as chat_router
from chatbot.providers.base import GenerateFn
from chatbot.providers.factory import get_generate
from chatbot.services.chat_service import ChatPipeline
from chatbot.services.firebase import init_firebase
from chatbot.services.monitoring import ErrorReporter
from chatbot.services.rate_limit import RateLimiter
from chatbot.services.records import FirestoreRecordStore, InMemoryRecordStore, RecordStore
from chatbot.services.storage import FirebaseBlobStore, MediaUploader
from chatbot.services.validation import ValidationPolicy

logger = logging.getLogger(__name__)


def _error_body(message: str) -> dict:
    # callers of the original API read `aiReply`, newer ones read `error`
    return {"error": message, "aiReply": message}


async def _chat_error_handler(request: Request, exc: ChatServiceError) -> JSONResponse:
    headers = {}
    if isinstance(exc, RateLimitExceeded):
        headers["Retry-After"] = str(max(1, int(exc.retry_after + 0.999)))
    return JSONResponse(status_code=exc.status_code, content=_error_body(exc.public_message), headers=headers)


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content=_error_body(UnknownError.public_message))


def _build_records() -> RecordStore:
    if config.STORE_BACKEND == "memory":
        return InMemoryRecordStore()
    if config.STORE_BACKEND != "firestore":
        raise ValueError(f"Unknown STORE_BACKEND: {config.STORE_BACKEND}")
    init_firebase()
    return FirestoreRecordStore(config.FIRESTORE_COLLECTION, timeout=config.STORE_TIMEOUT_SECONDS)


def _build_uploader() -> Optional[MediaUploader]:
    if not config.FIREBASE_STORAGE_BUCKET:
        return None
    init_firebase()
    return MediaUploader(
        FirebaseBlobStore(config.FIREBASE_STORAGE_BUCKET),
        prefix=config.UPLOAD_PREFIX,
        timeout=config.STORAGE_TIMEOUT_SECONDS,
    )


def create_app(
    *,
    generate: Optional[GenerateFn] = None,
    records: Optional[RecordStore] = None,
    uploader: Optional[MediaUploader] = None,
    rate_limiter: Optional[RateLimiter] = None,
    reporter: Optional[ErrorReporter] = None,
    policy: Optional[ValidationPolicy] = None,
) -> FastAPI:
    """
    Build the app and its process-wide collaborators once.
    Anything passed in replaces the config-driven default (tests hand in fakes).
    """
    app = FastAPI(title="Chat Exchange Service", version="1.0.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # app.state holds the shared collaborators; routers reach them through Depends()
    if rate_limiter is None and config.RATE_LIMIT_ENABLED:
        rate_limiter = RateLimiter(
            limit=config.RATE_LIMIT_MAX_REQUESTS,
            window_seconds=config.RATE_LIMIT_WINDOW_SECONDS,
        )
    app.state.rate_limiter = rate_limiter

    app.state.pipeline = ChatPipeline(
        generate=generate or get_generate(),
        records=records if records is not None else _build_records(),
        policy=policy or ValidationPolicy.from_config(),
        model=config.GEMINI_MODEL,
        fallback_reply=config.FALLBACK_REPLY,
        uploader=uploader if uploader is not None else _build_uploader(),
        reporter=reporter or ErrorReporter(enabled=config.ERROR_MONITORING_ENABLED, dsn=config.SENTRY_DSN),
        options={"temperature": config.TEMPERATURE, "maxOutputTokens": config.MAX_OUTPUT_TOKENS},
    )

    app.add_exception_handler(ChatServiceError, _chat_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)

    # Routers
    app.include_router(health_router)
    app.include_router(chat_router)

    logger.info(
        "chat service ready (provider=%s, store=%s, uploads=%s, rate_limit=%s)",
        config.PROVIDER,
        type(app.state.pipeline.records).__name__,
        app.state.pipeline.uploader is not None,
        rate_limiter is not None,
    )
    return app


app = create_app()
