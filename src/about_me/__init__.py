from src.about_me.models import AboutMe, NewAboutMe
from src.about_me.repository import (
    create_about_me,
    create_about_me_with_retry,
    get_about_me_by_id,
    get_current_about_me,
    get_latest_revision,
    hard_delete_about_me,
    list_revisions,
    revise_about_me,
    soft_delete_about_me,
)

__all__ = [
    "AboutMe", "NewAboutMe",
    "create_about_me", "create_about_me_with_retry", "revise_about_me",
    "get_about_me_by_id", "get_current_about_me", "get_latest_revision", "list_revisions",
    "soft_delete_about_me", "hard_delete_about_me",
]
