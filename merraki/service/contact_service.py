"""Contact-form messages and the replies sent to them."""

from __future__ import annotations

import contextlib
from collections.abc import Mapping, MutableMapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from merraki.errors import NotFoundError, wrap


@dataclass
class CreateContactRequest:
    """A message submitted through the public contact form."""

    name: str
    email: str
    subject: str
    message: str
    phone: str = ""
    ip_address: str = ""


class ContactService:
    """Stores contact messages, replies to them and logs admin actions."""

    def __init__(self, contact_repo: Any, log_repo: Any, email_service: Any) -> None:
        self.contact_repo = contact_repo
        self.log_repo = log_repo
        self.email_service = email_service

    def _log(self, admin_id: int, action: str, entity_id: Any, details: dict) -> None:
        with contextlib.suppress(Exception):
            self.log_repo.create(
                {
                    "admin_id": admin_id,
                    "action": action,
                    "entity_type": "contact",
                    "entity_id": entity_id,
                    "details": details,
                }
            )

    def _find(self, contact_id: int) -> dict | None:
        try:
            return self.contact_repo.find_by_id(contact_id)
        except Exception as exc:
            raise wrap(exc, "DATABASE_ERROR", "Failed to find contact", 500) from exc

    def _update(self, contact: Mapping[str, Any]) -> None:
        try:
            self.contact_repo.update(contact)
        except Exception as exc:
            raise wrap(exc, "DATABASE_ERROR", "Failed to update contact", 500) from exc

    def create_contact(self, request: CreateContactRequest) -> dict:
        """Store a new message with status ``new``."""
        contact: dict[str, Any] = {
            "name": request.name,
            "email": request.email,
            "phone": request.phone,
            "subject": request.subject,
            "message": request.message,
            "status": "new",
            "ip_address": request.ip_address,
        }
        try:
            self.contact_repo.create(contact)
        except Exception as exc:
            raise wrap(exc, "DATABASE_ERROR", "Failed to create contact", 500) from exc
        return contact

    def get_contact_by_id(self, contact_id: int) -> dict:
        contact = self._find(contact_id)
        if contact is None:
            raise NotFoundError()
        return contact

    def get_all_contacts(
        self, filters: Mapping[str, Any] | None, limit: int, offset: int
    ) -> tuple[list[dict], int]:
        return self.contact_repo.get_all(filters, limit, offset)

    def update_contact(
        self, contact: MutableMapping[str, Any], updated_by: int
    ) -> MutableMapping[str, Any]:
        if self._find(contact["id"]) is None:
            raise NotFoundError()
        self._update(contact)
        self._log(updated_by, "update_contact", contact["id"], {"status": contact.get("status")})
        return contact

    def reply_to_contact(self, contact_id: int, reply_message: str, replied_by: int) -> dict:
        """Mark a message replied, record the reply and e-mail it to the sender."""
        contact = self._find(contact_id)
        if contact is None:
            raise NotFoundError()
        contact["status"] = "replied"
        contact["replied_by"] = replied_by
        contact["replied_at"] = datetime.now()
        contact["reply_notes"] = reply_message
        self._update(contact)
        try:
            self.email_service.send_contact_reply(
                contact["email"], contact.get("name", ""), reply_message
            )
        except Exception as exc:
            raise wrap(exc, "EMAIL_ERROR", "Failed to send reply email", 500) from exc
        self._log(replied_by, "reply_contact", contact_id, {"email": contact["email"]})
        return contact

    def delete_contact(self, contact_id: int, deleted_by: int) -> None:
        contact = self._find(contact_id)
        if contact is None:
            raise NotFoundError()
        try:
            self.contact_repo.delete(contact_id)
        except Exception as exc:
            raise wrap(exc, "DATABASE_ERROR", "Failed to delete contact", 500) from exc
        self._log(deleted_by, "delete_contact", contact_id, {"email": contact.get("email")})

    def get_analytics(self) -> dict[str, Any]:
        return self.contact_repo.get_analytics()