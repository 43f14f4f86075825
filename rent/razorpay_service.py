# rent/razorpay_service.py

import logging
import time
from decimal import Decimal

import razorpay
import requests
from django.conf import settings

from .exceptions import GatewayError
from .utils import to_money


logger = logging.getLogger(__name__)


class RazorpayService:
    """
    Razorpay Payment Gateway Integration Service
    Order creation for tenant checkout plus checkout and webhook signature checks.
    """

    def __init__(self):
        self.key_id = getattr(settings, 'RAZORPAY_KEY_ID', '')
        self.key_secret = getattr(settings, 'RAZORPAY_KEY_SECRET', '')
        self.webhook_secret = getattr(settings, 'RAZORPAY_WEBHOOK_SECRET', '')
        self.currency = getattr(settings, 'RAZORPAY_CURRENCY', 'INR')
        self.client = razorpay.Client(auth=(self.key_id, self.key_secret))

    @staticmethod
    def to_paise(amount):
        return int(to_money(amount) * 100)

    @staticmethod
    def from_paise(paise):
        return to_money(Decimal(paise) / 100)

    def create_order(self, amount, rent_cycle_id=None, user_id=None):
        """
        Create a Razorpay order for a rent payment

        Args:
            amount: Amount in rupees (Decimal)
            rent_cycle_id: Target rent cycle, None for oldest-first allocation
            user_id: Paying user, echoed back in the order notes

        Returns:
            dict: the Razorpay order (id, amount in paise, currency, ...)

        Raises:
            GatewayError: when Razorpay rejects the call or cannot be reached
        """
        receipt = f"rc_{rent_cycle_id}" if rent_cycle_id else f"multi_{int(time.time() * 1000)}"
        payload = {
            'amount': self.to_paise(amount),
            'currency': self.currency,
            'receipt': receipt,
            'notes': {
                'rent_cycle_id': str(rent_cycle_id) if rent_cycle_id else '',
                'user_id': str(user_id) if user_id else '',
            },
        }

        try:
            order = self.client.order.create(data=payload)
        except (razorpay.errors.BadRequestError,
                razorpay.errors.ServerError,
                razorpay.errors.GatewayError) as e:
            logger.error(f"[Razorpay] Order creation rejected (receipt={receipt}): {str(e)}")
            raise GatewayError(str(e))
        except requests.exceptions.RequestException as e:
            logger.error(f"[Razorpay] Order creation failed (receipt={receipt}): {str(e)}")
            raise GatewayError(str(e))

        logger.info(f"[Razorpay] Order created: {order.get('id')} receipt={receipt} amount={payload['amount']}")
        return order

    def fetch_order(self, order_id):
        """
        Fetch an order back from Razorpay.

        Raises:
            GatewayError: when Razorpay rejects the call or cannot be reached
        """
        try:
            return self.client.order.fetch(order_id)
        except (razorpay.errors.BadRequestError,
                razorpay.errors.ServerError,
                razorpay.errors.GatewayError) as e:
            logger.error(f"[Razorpay] Order fetch rejected ({order_id}): {str(e)}")
            raise GatewayError(str(e))
        except requests.exceptions.RequestException as e:
            logger.error(f"[Razorpay] Order fetch failed ({order_id}): {str(e)}")
            raise GatewayError(str(e))

    def verify_payment_signature(self, order_id, payment_id, signature):
        """
        HMAC-SHA256(key_secret, "order_id|payment_id") against the checkout signature.
        Always False while RAZORPAY_KEY_SECRET is unset.

        Returns:
            bool
        """
        if not self.key_secret:
            logger.error("[Razorpay] RAZORPAY_KEY_SECRET is not configured, rejecting checkout signature")
            return False
        if not (order_id and payment_id and signature):
            return False
        try:
            self.client.utility.verify_payment_signature({
                'razorpay_order_id': order_id,
                'razorpay_payment_id': payment_id,
                'razorpay_signature': signature,
            })
        except razorpay.errors.SignatureVerificationError:
            logger.warning(f"[Razorpay] Invalid checkout signature for order {order_id}, payment {payment_id}")
            return False
        return True

    def verify_webhook_signature(self, body, signature):
        """
        HMAC-SHA256(webhook_secret, raw body) against the X-Razorpay-Signature header.
        Always False while RAZORPAY_WEBHOOK_SECRET is unset.

        Returns:
            bool
        """
        if not self.webhook_secret:
            logger.error("[Razorpay] RAZORPAY_WEBHOOK_SECRET is not configured, rejecting webhook")
            return False
        if not signature:
            return False
        if isinstance(body, bytes):
            body = body.decode('utf-8', errors='replace')
        try:
            self.client.utility.verify_webhook_signature(body, signature, self.webhook_secret)
        except razorpay.errors.SignatureVerificationError:
            logger.warning("[Razorpay] Invalid webhook signature")
            return False
        return True
