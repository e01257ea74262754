# tests/test_record_store.py
import asyncio
from datetime import datetime, timezone
from unittest.mock import MagicMock
import pytest

from chatbot.core.errors import PersistenceError
from chatbot.services.records import FirestoreRecordStore, InMemoryRecordStore


@pytest.mark.asyncio
async def test_append_returns_id_and_lists_in_order():
    # Records come back oldest first with the fields that were appended
    store = InMemoryRecordStore()
    a = await store.append("u1", "a1")
    b = await store.append("u2", "a2", image="https://img/2.png")
    assert a and b and a != b
    rows = await store.list_all()
    assert [r.id for r in rows] == [a, b]
    assert rows[1].image == "https://img/2.png"
    assert rows[0].image is None


@pytest.mark.asyncio
async def test_created_at_strictly_increases():
    store = InMemoryRecordStore()
    for i in range(50):
        await store.append(f"u{i}", "a")
    stamps = [r.created_at for r in await store.list_all()]
    assert stamps == sorted(stamps)
    assert len(set(stamps)) == len(stamps)


@pytest.mark.asyncio
async def test_concurrent_appends_are_all_kept():
    store = InMemoryRecordStore()
    await asyncio.gather(*(store.append(f"u{i}", "a") for i in range(20)))
    rows = await store.list_all()
    assert len(rows) == 20
    stamps = [r.created_at for r in rows]
    assert stamps == sorted(stamps)


@pytest.mark.asyncio
async def test_list_all_returns_a_copy():
    store = InMemoryRecordStore()
    await store.append("u", "a")
    rows = await store.list_all()
    rows.clear()
    assert await store.count() == 1


def _firestore_client():
    client = MagicMock()
    collection = client.collection.return_value
    doc_ref = MagicMock()
    doc_ref.id = "doc-1"
    collection.add.return_value = (object(), doc_ref)
    return client, collection


@pytest.mark.asyncio
async def test_firestore_append_uses_server_timestamp():
    from firebase_admin import firestore
    client, collection = _firestore_client()
    store = FirestoreRecordStore("messages", client=client)

    record_id = await store.append("hello", "hi there", image="https://img/1.png")

    assert record_id == "doc-1"
    client.collection.assert_called_with("messages")
    data = collection.add.call_args.args[0]
    assert data["userMessage"] == "hello"
    assert data["aiReply"] == "hi there"
    assert data["image"] == "https://img/1.png"
    assert data["createdAt"] is firestore.SERVER_TIMESTAMP


@pytest.mark.asyncio
async def test_firestore_append_omits_missing_image():
    client, collection = _firestore_client()
    store = FirestoreRecordStore("messages", client=client)
    await store.append("hello", "hi")
    assert "image" not in collection.add.call_args.args[0]


@pytest.mark.asyncio
async def test_firestore_list_orders_by_created_at():
    from firebase_admin import firestore
    client, collection = _firestore_client()
    doc = MagicMock()
    doc.id = "doc-1"
    doc.to_dict.return_value = {
        "userMessage": "hello",
        "aiReply": "hi",
        "createdAt": datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
    }
    collection.order_by.return_value.stream.return_value = [doc]
    store = FirestoreRecordStore("messages", client=client)

    rows = await store.list_all()

    collection.order_by.assert_called_once_with("createdAt", direction=firestore.Query.ASCENDING)
    assert len(rows) == 1
    assert rows[0].id == "doc-1"
    assert rows[0].created_at == "2024-05-01T12:00:00+00:00"
    assert rows[0].image is None


@pytest.mark.asyncio
async def test_firestore_failures_become_persistence_errors():
    client, collection = _firestore_client()
    collection.add.side_effect = RuntimeError("permission denied")
    collection.order_by.side_effect = RuntimeError("permission denied")
    store = FirestoreRecordStore("messages", client=client)
    with pytest.raises(PersistenceError):
        await store.append("hello", "hi")
    with pytest.raises(PersistenceError) as info:
        await store.list_all()
    assert info.value.public_message == "Failed to fetch messages."
