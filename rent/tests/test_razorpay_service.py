import hashlib
import hmac
import pytest
from decimal import Decimal
from unittest.mock import MagicMock

import razorpay
import requests

from rent.exceptions import GatewayError
from rent.razorpay_service import RazorpayService


@pytest.fixture
def service(settings):
    settings.RAZORPAY_KEY_ID = "rzp_test_key"
    settings.RAZORPAY_KEY_SECRET = "secret"
    settings.RAZORPAY_WEBHOOK_SECRET = "whsecret"
    settings.RAZORPAY_CURRENCY = "INR"
    return RazorpayService()


class TestRazorpayService:

    def test_create_order_for_cycle(self, service):
        service.client.order = MagicMock()
        service.client.order.create.return_value = {"id": "order_1", "amount": 150050, "currency": "INR"}

        order = service.create_order(Decimal("1500.50"), rent_cycle_id=42, user_id=7)

        assert order["id"] == "order_1"
        service.client.order.create.assert_called_once_with(data={
            "amount": 150050,
            "currency": "INR",
            "receipt": "rc_42",
            "notes": {"rent_cycle_id": "42", "user_id": "7"},
        })

    def test_create_order_without_cycle_uses_multi_receipt(self, service):
        service.client.order = MagicMock()
        service.client.order.create.return_value = {"id": "order_2"}

        service.create_order(Decimal("100"), user_id=7)

        payload = service.client.order.create.call_args.kwargs["data"]
        assert payload["receipt"].startswith("multi_")
        assert payload["notes"]["rent_cycle_id"] == ""

    @pytest.mark.parametrize("error", [
        razorpay.errors.BadRequestError("Authentication failed"),
        requests.exceptions.ConnectionError("connection refused"),
    ])
    def test_create_order_errors_become_gateway_error(self, service, error):
        service.client.order = MagicMock()
        service.client.order.create.side_effect = error

        with pytest.raises(GatewayError):
            service.create_order(Decimal("100"))

    def test_payment_signature(self, service):
        good = hmac.new(b"secret", b"order_1|pay_1", hashlib.sha256).hexdigest()

        assert service.verify_payment_signature("order_1", "pay_1", good) is True
        assert service.verify_payment_signature("order_1", "pay_2", good) is False
        assert service.verify_payment_signature("order_1", "pay_1", "") is False

    def test_webhook_signature(self, service):
        body = b'{"event":"payment.captured"}'
        good = hmac.new(b"whsecret", body, hashlib.sha256).hexdigest()

        assert service.verify_webhook_signature(body, good) is True
        assert service.verify_webhook_signature(body + b" ", good) is False
        assert service.verify_webhook_signature(body, None) is False

    def test_paise_conversion(self):
        assert RazorpayService.to_paise(Decimal("499.99")) == 49999
        assert RazorpayService.from_paise(49999) == Decimal("499.99")

    @pytest.mark.parametrize("setting", ["RAZORPAY_KEY_SECRET", "RAZORPAY_WEBHOOK_SECRET"])
    def test_empty_secret_rejects_everything(self, settings, setting):
        settings.RAZORPAY_KEY_SECRET = "secret"
        settings.RAZORPAY_WEBHOOK_SECRET = "whsecret"
        setattr(settings, setting, "")
        service = RazorpayService()
        body = b'{"event":"payment.captured"}'
        checkout = hmac.new(b"", b"order_1|pay_1", hashlib.sha256).hexdigest()
        webhook = hmac.new(b"", body, hashlib.sha256).hexdigest()

        if setting == "RAZORPAY_KEY_SECRET":
            assert service.verify_payment_signature("order_1", "pay_1", checkout) is False
        else:
            assert service.verify_webhook_signature(body, webhook) is False

    def test_fetch_order(self, service):
        service.client.order = MagicMock()
        service.client.order.fetch.return_value = {"id": "order_1", "amount": 50000}

        assert service.fetch_order("order_1")["amount"] == 50000
        service.client.order.fetch.assert_called_once_with("order_1")

    def test_fetch_order_error_becomes_gateway_error(self, service):
        service.client.order = MagicMock()
        service.client.order.fetch.side_effect = razorpay.errors.BadRequestError("The id provided does not exist")

        with pytest.raises(GatewayError):
            service.fetch_order("order_missing")
