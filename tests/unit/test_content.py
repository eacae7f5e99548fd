"""Order status stamping, marquee alerts and billboard windows."""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError as PydanticValidationError

from solestore.billboards.schemas import CreateBillboardRequest
from solestore.exceptions import ValidationError
from solestore.marquee.schemas import AlertKindEnum
from solestore.marquee.service import ALERT_PRIORITIES, build_alert
from solestore.orders.service import stamp_status_dates

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class TestStampStatusDates:
    def test_shipped(self):
        stamped = stamp_status_dates({"status": "SHIPPED"}, NOW)
        assert stamped["shipped_at"] == NOW
        assert "delivered_at" not in stamped

    def test_delivered_via_shipping_status(self):
        stamped = stamp_status_dates({"shipping_status": "DELIVERED"}, NOW)
        assert stamped["delivered_at"] == NOW

    def test_explicit_timestamp_wins(self):
        earlier = NOW - timedelta(days=2)
        stamped = stamp_status_dates({"status": "SHIPPED", "shipped_at": earlier}, NOW)
        assert stamped["shipped_at"] == earlier

    def test_input_is_not_mutated(self):
        data = {"status": "DELIVERED"}
        stamp_status_dates(data, NOW)
        assert data == {"status": "DELIVERED"}

    def test_other_statuses(self):
        assert stamp_status_dates({"status": "PROCESSING"}, NOW) == {"status": "PROCESSING"}


class TestBuildAlert:
    def test_inventory(self):
        alert = build_alert("inventory", {"product_name": "Runner 9/Black", "stock": 2})
        assert alert["type"] == "INVENTORY"
        assert alert["priority"] == 4
        assert "Runner 9/Black" in alert["message"]
        assert alert["is_active"] is True

    def test_order_accepts_enum_kind(self):
        alert = build_alert(AlertKindEnum.ORDER, {"order_number": "ORD-1001", "amount": 149.5})
        assert alert["message"] == "Order ORD-1001 received: $149.50"
        assert alert["priority"] == ALERT_PRIORITIES["order"] == 2

    def test_promotion_keeps_title(self):
        alert = build_alert("promotion", {"title": "Spring sale", "message": "20% off"})
        assert alert["title"] == "Spring sale"
        assert alert["priority"] == 3

    @pytest.mark.parametrize(
        "kind,data",
        [
            ("system", {}),
            ("inventory", {"product_name": "Runner"}),
            ("order", {"amount": 10}),
            ("promotion", {"title": "No message"}),
            ("weather", {"message": "rain"}),
        ],
    )
    def test_incomplete_alerts(self, kind, data):
        with pytest.raises(ValidationError):
            build_alert(kind, data)


class TestBillboardWindow:
    def test_end_before_start_is_rejected(self):
        with pytest.raises(PydanticValidationError):
            CreateBillboardRequest(
                title="Launch",
                image_url="https://cdn.solestore.test/launch.jpg",
                start_date=NOW,
                end_date=NOW - timedelta(days=1),
            )

    def test_open_window(self):
        billboard = CreateBillboardRequest(title="Launch", image_url="https://cdn.solestore.test/launch.jpg")
        assert billboard.start_date is None and billboard.end_date is None
