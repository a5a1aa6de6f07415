"""Newsletter subscriptions."""

from __future__ import annotations

import contextlib
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from merraki.errors import AppError, NotFoundError, wrap


@dataclass
class SubscribeRequest:
    """A request to join the newsletter."""

    email: str
    name: str = ""
    source: str = ""
    ip_address: str = ""


class NewsletterService:
    """Subscribes and unsubscribes newsletter readers."""

    def __init__(self, newsletter_repo: Any, email_service: Any) -> None:
        self.newsletter_repo = newsletter_repo
        self.email_service = email_service

    def _find(self, email: str, message: str) -> dict | None:
        try:
            return self.newsletter_repo.find_by_email(email)
        except Exception as exc:
            raise wrap(exc, "DATABASE_ERROR", message, 500) from exc

    def subscribe(self, request: SubscribeRequest) -> dict:
        """Add an active subscriber and send a welcome e-mail."""
        if self._find(request.email, "Failed to check subscription") is not None:
            raise AppError("ALREADY_SUBSCRIBED", "Email already subscribed", 200)
        subscriber: dict[str, Any] = {
            "email": request.email,
            "name": request.name,
            "status": "active",
            "source": request.source,
            "ip_address": request.ip_address,
        }
        try:
            self.newsletter_repo.create(subscriber)
        except Exception as exc:
            raise wrap(exc, "DATABASE_ERROR", "Failed to create subscription", 500) from exc
        with contextlib.suppress(Exception):
            self.email_service.send_newsletter_confirmation(request.email, request.name)
        return subscriber

    def unsubscribe(self, email: str) -> None:
        if self._find(email, "Failed to find subscriber") is None:
            raise NotFoundError()
        try:
            self.newsletter_repo.unsubscribe(email)
        except Exception as exc:
            raise wrap(exc, "DATABASE_ERROR", "Failed to unsubscribe", 500) from exc

    def get_all_subscribers(
        self, filters: Mapping[str, Any] | None, limit: int, offset: int
    ) -> tuple[list[dict], int]:
        return self.newsletter_repo.get_all(filters, limit, offset)

    def delete_subscriber(self, subscriber_id: int) -> None:
        self.newsletter_repo.delete(subscriber_id)

    def get_analytics(self) -> dict[str, Any]:
        return self.newsletter_repo.get_analytics()