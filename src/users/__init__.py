from src.users.audit import list_audit, record_audit
from src.users.models import NewUser, User, UserAuditEntry
from src.users.purge import PURGE_RETENTION, is_purge_eligible, list_purge_eligible_user_ids, purge_cutoff
from src.users.repository import (
    count_users,
    create_user,
    get_user_by_email,
    get_user_by_id,
    soft_delete_user,
    update_user,
    user_exists,
)

__all__ = [
    "NewUser", "User", "UserAuditEntry",
    "create_user", "get_user_by_id", "get_user_by_email", "user_exists", "count_users",
    "update_user", "soft_delete_user",
    "record_audit", "list_audit",
    "PURGE_RETENTION", "purge_cutoff", "is_purge_eligible", "list_purge_eligible_user_ids",
]
