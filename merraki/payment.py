"""Payment signature checks."""

from __future__ import annotations

import hashlib
import hmac

from merraki.errors import AppError


def sign(secret: str, message: str) -> str:
    """Return the hex HMAC-SHA256 of ``message`` under ``secret``."""
    return hmac.new(secret.encode(), message.encode(), hashlib.sha256).hexdigest()


class PaymentService:
    """Verifies payment and webhook signatures issued by the payment gateway."""

    def __init__(self, key_id: str, key_secret: str, webhook_secret: str) -> None:
        self.key_id = key_id
        self._key_secret = key_secret
        self._webhook_secret = webhook_secret

    def verify_signature(self, order_id: str, payment_id: str, signature: str) -> None:
        """Raise AppError unless ``signature`` signs ``order_id|payment_id``."""
        expected = sign(self._key_secret, f"{order_id}|{payment_id}")
        if not hmac.compare_digest(expected, signature):
            raise AppError("INVALID_SIGNATURE", "Payment signature verification failed", 400)

    def verify_webhook_signature(self, payload: str, signature: str) -> None:
        """Raise AppError unless ``signature`` signs the webhook ``payload``."""
        expected = sign(self._webhook_secret, payload)
        if not hmac.compare_digest(expected, signature):
            raise AppError("INVALID_SIGNATURE", "Webhook signature verification failed", 400)