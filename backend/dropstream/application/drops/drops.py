from typing import Any, Dict, Optional

from flask import current_app

from dropstream.errors import ValidationError
from dropstream.extensions import db
from dropstream.models.base import utc_now
from dropstream.models.drop import Drop
from dropstream.utils.optimistic_lock import enforce_optimistic_lock
from dropstream.utils.transaction import transactional
from .access import get_owned_drop


def create_drop(*, user, data: Dict[str, Any]) -> Drop:
    """
    Create a new drop in DRAFT state, owned by `user`.
    """
    title = data.get("title")
    description = data.get("description")

    if not isinstance(title, str) or not title.strip():
        raise ValidationError("Title is required")
    if description is not None and not isinstance(description, str):
        raise ValidationError("description must be a string")

    drop = Drop(
        title=title.strip(),
        description=description,
        status="draft",
        created_by=user.id,
    )

    with transactional():
        db.session.add(drop)

    return drop


def publish_drop(*, drop_id: str, user) -> Drop:
    """
    Make a drop visible to everyone. Publishing twice keeps the first
    published_at.
    """
    drop = get_owned_drop(drop_id, user)

    if drop.status == "published":
        return drop

    with transactional():
        drop.status = "published"
        drop.published_at = utc_now()

    current_app.logger.info(f"Drop {drop.id} published by {user.id}")
    return drop


def update_drop(
    *,
    drop_id: str,
    user,
    data: Dict[str, Any],
    if_unmodified_since: Optional[str] = None,
) -> Drop:
    """
    Edit a drop's title and description. A blank description clears it.
    """
    drop = get_owned_drop(drop_id, user)
    enforce_optimistic_lock(drop, if_unmodified_since)

    changes: Dict[str, Any] = {}

    if "title" in data:
        title = data["title"]
        if not isinstance(title, str) or not title.strip():
            raise ValidationError("Title cannot be empty")
        changes["title"] = title.strip()

    if "description" in data:
        description = data["description"]
        if description is not None and not isinstance(description, str):
            raise ValidationError("description must be a string")
        changes["description"] = (description or "").strip() or None

    if not changes:
        raise ValidationError("No fields to update")

    with transactional():
        for field, value in changes.items():
            setattr(drop, field, value)

    return drop


def delete_drop(*, drop_id: str, user) -> None:
    """Delete a drop; its blocks and their gallery images go with it."""
    drop = get_owned_drop(drop_id, user)

    with transactional("drop.delete"):
        db.session.delete(drop)

    current_app.logger.info(f"Drop {drop_id} deleted by {user.id}")
