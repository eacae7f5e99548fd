"""BillboardService and MarqueeService against mocked collections."""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId

from solestore.billboards.service import BillboardService
from solestore.exceptions import ValidationError
from solestore.marquee.service import MarqueeService
from tests.fakes import FakeCursor, mock_db

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def _collection(docs=()) -> MagicMock:
    collection = MagicMock()
    collection.find = MagicMock(return_value=FakeCursor(docs))
    collection.update_one = AsyncMock()
    collection.update_many = AsyncMock(return_value=MagicMock(modified_count=0))
    return collection


class TestBillboards:
    async def test_reorder_follows_list_position(self):
        billboards = _collection()
        ids = [ObjectId() for _ in range(3)]

        result = await BillboardService(mock_db(billboards=billboards)).reorder([str(i) for i in ids])

        assert result == {"reordered": 3}
        calls = billboards.update_one.await_args_list
        assert [c.args[0] for c in calls] == [{"_id": i} for i in ids]
        assert [c.args[1]["$set"]["sort_order"] for c in calls] == [0, 1, 2]

    async def test_reorder_rejects_bad_id_before_writing(self):
        billboards = _collection()

        with pytest.raises(ValidationError):
            await BillboardService(mock_db(billboards=billboards)).reorder([str(ObjectId()), "nope"])
        billboards.update_one.assert_not_awaited()

    async def test_cleanup_deactivates_past_end_date(self):
        billboards = _collection()
        billboards.update_many = AsyncMock(return_value=MagicMock(modified_count=2))

        assert await BillboardService(mock_db(billboards=billboards)).cleanup_expired() == 2

        flt, update = billboards.update_many.await_args.args
        assert flt["is_active"] is True
        assert set(flt["end_date"]) == {"$lt"}
        assert update["$set"]["is_active"] is False

    async def test_active_billboards_sorted_by_order_then_newest(self):
        docs = [
            {"_id": ObjectId(), "title": "late", "sort_order": 1, "created_at": NOW},
            {"_id": ObjectId(), "title": "old", "sort_order": 0, "created_at": NOW - timedelta(days=1)},
            {"_id": ObjectId(), "title": "new", "sort_order": 0, "created_at": NOW},
        ]
        billboards = _collection(docs)

        active = await BillboardService(mock_db(billboards=billboards)).active_billboards(position="HERO")

        assert [b["title"] for b in active] == ["new", "old", "late"]
        flt = billboards.find.call_args.args[0]
        assert flt["is_active"] is True
        assert flt["position"] == "HERO"


class TestMarquee:
    async def test_active_messages_by_priority(self):
        docs = [
            {"_id": ObjectId(), "title": "promo", "priority": 3, "created_at": NOW - timedelta(hours=2)},
            {"_id": ObjectId(), "title": "stock", "priority": 4, "created_at": NOW - timedelta(hours=5)},
            {"_id": ObjectId(), "title": "sale", "priority": 3, "created_at": NOW},
            {"_id": ObjectId(), "title": "order", "priority": 2, "created_at": NOW},
        ]
        messages = _collection(docs)

        active = await MarqueeService(mock_db(marquee_messages=messages)).active_messages()

        assert [m["title"] for m in active] == ["stock", "sale", "promo", "order"]
        assert all(isinstance(m["_id"], str) for m in active)

    async def test_active_messages_use_display_window(self):
        messages = _collection()

        await MarqueeService(mock_db(marquee_messages=messages)).active_messages()

        flt = messages.find.call_args.args[0]
        assert flt["is_active"] is True
        assert len(flt["$and"]) == 2

    async def test_alert_is_stored_with_its_priority(self):
        messages = _collection()
        messages.insert_one = AsyncMock(return_value=MagicMock(inserted_id=ObjectId()))

        message = await MarqueeService(mock_db(marquee_messages=messages)).create_alert(
            "inventory", {"product_name": "Air Runner", "stock": 2}, created_by="ext_mgr"
        )

        assert message["priority"] == 4
        assert message["created_by"] == "ext_mgr"
        messages.insert_one.assert_awaited_once()
