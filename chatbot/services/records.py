# Chat records: one append-only entry per successful exchange.
# The only query is "everything, oldest first".

from __future__ import annotations
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Protocol
import asyncio
import itertools
import logging

from firebase_admin import firestore

from chatbot.core.errors import PersistenceError
from chatbot.schemas.chat import ChatRecord

logger = logging.getLogger(__name__)


def _to_iso(value: Any) -> Optional[str]:
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).isoformat()
    return None


class RecordStore(Protocol):
    async def append(self, user_message: str, ai_reply: str, image: Optional[str] = None) -> str:
        ...

    async def list_all(self) -> List[ChatRecord]:
        ...


class InMemoryRecordStore:
    """
    Process-local store used for local development (STORE_BACKEND=memory) and tests.
    self._records: appended in creation order, so list_all() is already ascending.
    Timestamps are forced to be strictly increasing so two appends in the same
    clock tick still sort deterministically.
    """

    def __init__(self) -> None:
        self._records: List[ChatRecord] = []
        self._lock = asyncio.Lock()
        self._ids = itertools.count(1)
        self._last_ts: Optional[datetime] = None

    async def append(self, user_message: str, ai_reply: str, image: Optional[str] = None) -> str:
        async with self._lock:
            now = datetime.now(timezone.utc)
            if self._last_ts is not None and now <= self._last_ts:
                now = self._last_ts + timedelta(microseconds=1)
            self._last_ts = now
            record_id = f"mem-{next(self._ids)}"
            self._records.append(ChatRecord(
                id=record_id,
                user_message=user_message,
                ai_reply=ai_reply,
                image=image,
                created_at=_to_iso(now),
            ))
            return record_id

    async def list_all(self) -> List[ChatRecord]:
        async with self._lock:
            return list(self._records)

    async def count(self) -> int:
        async with self._lock:
            return len(self._records)


class FirestoreRecordStore:
    def __init__(self, collection: str = "messages", *, client=None, timeout: float = 15.0) -> None:
        if client is None:
            client = firestore.client()
        self._db = client
        self._collection = collection
        self._timeout = timeout

    def _add(self, data: Dict[str, Any]) -> str:
        _update_time, doc_ref = self._db.collection(self._collection).add(data)
        return doc_ref.id

    def _stream(self) -> List[ChatRecord]:
        query = self._db.collection(self._collection).order_by("createdAt", direction=firestore.Query.ASCENDING)
        records: List[ChatRecord] = []
        for doc in query.stream():
            data = doc.to_dict() or {}
            records.append(ChatRecord(
                id=doc.id,
                user_message=data.get("userMessage", ""),
                ai_reply=data.get("aiReply", ""),
                image=data.get("image") or None,
                created_at=_to_iso(data.get("createdAt")),
            ))
        return records

    async def append(self, user_message: str, ai_reply: str, image: Optional[str] = None) -> str:
        data: Dict[str, Any] = {
            "userMessage": user_message,
            "aiReply": ai_reply,
            "createdAt": firestore.SERVER_TIMESTAMP,
        }
        if image:
            data["image"] = image
        try:
            record_id = await asyncio.wait_for(asyncio.to_thread(self._add, data), timeout=self._timeout)
        except asyncio.TimeoutError as e:
            raise PersistenceError(f"firestore write timed out after {self._timeout}s") from e
        except Exception as e:
            raise PersistenceError(f"firestore write failed: {e}") from e
        logger.debug("stored chat record %s", record_id)
        return record_id

    async def list_all(self) -> List[ChatRecord]:
        try:
            return await asyncio.wait_for(asyncio.to_thread(self._stream), timeout=self._timeout)
        except asyncio.TimeoutError as e:
            raise PersistenceError(
                f"firestore read timed out after {self._timeout}s",
                public_message="Failed to fetch messages.",
            ) from e
        except Exception as e:
            raise PersistenceError(
                f"firestore read failed: {e}",
                public_message="Failed to fetch messages.",
            ) from e
