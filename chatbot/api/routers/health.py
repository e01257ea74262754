from fastapi import APIRouter, Depends
from chatbot.api.deps import get_pipeline
from chatbot.services.chat_service import ChatPipeline

router = APIRouter(tags=["meta"])

@router.get("/health")
def health(pipeline: ChatPipeline = Depends(get_pipeline)):
    # liveness only; does not call the model or the stores
    return {
        "status": "ok",
        "store": type(pipeline.records).__name__,
        "uploads": pipeline.uploader is not None,
    }
