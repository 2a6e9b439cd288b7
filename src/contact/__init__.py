from src.contact.models import ContactMessage, NewContactMessage
from src.contact.repository import (
    count_contact_messages,
    create_contact_message,
    get_contact_message_by_id,
    hard_delete_contact_message,
    list_contact_messages,
    soft_delete_contact_message,
)

__all__ = [
    "ContactMessage", "NewContactMessage",
    "create_contact_message", "get_contact_message_by_id", "list_contact_messages",
    "count_contact_messages", "soft_delete_contact_message", "hard_delete_contact_message",
]
