# dropstream/application/admin/users.py
from typing import Any, Dict, Optional

from flask import current_app
from sqlalchemy.exc import NoResultFound, SQLAlchemyError

from dropstream.domain.roles import PLATFORM_ROLES, is_owner
from dropstream.errors import CriticalError, Forbidden, InternalError, NotFound, ValidationError
from dropstream.extensions import db
from dropstream.models.asset import Asset
from dropstream.models.bookmark import StreamBookmark
from dropstream.models.drop import Drop
from dropstream.models.stream import AssetStream, StreamMember
from dropstream.models.user import User
from dropstream.normalizers.pagination import normalize_pagination
from dropstream.normalizers.user import normalize_user
from dropstream.utils.compensation import Outcome, run_compensated
from dropstream.utils.transaction import transactional
from ..assets import delete_assets
from ..streams.bookmarks import stream_bookmarks


def _set_platform_role(user_id: str, role: str) -> None:
    updated = User.query.filter_by(id=user_id).update(
        {User.platform_role: role},
        synchronize_session="fetch",
    )
    if not updated:
        raise NoResultFound(f"User {user_id} not found while setting role {role}")


def list_users(
    *,
    search: str = "",
    role: Optional[str] = None,
    page: int = 1,
    per_page: int = 20,
) -> Dict[str, Any]:
    if role is not None and role not in PLATFORM_ROLES:
        raise ValidationError("Invalid role. Must be user, admin, or owner")

    query = User.query
    if search:
        pattern = f"%{search}%"
        query = query.filter(
            db.or_(
                User.username.ilike(pattern),
                User.display_name.ilike(pattern),
                User.email.ilike(pattern),
            )
        )
    if role:
        query = query.filter(User.platform_role == role)

    pagination = query.order_by(User.created_at.desc()).paginate(
        page=page, per_page=per_page, error_out=False
    )

    return normalize_pagination(
        pagination.items,
        lambda u: normalize_user(u, admin=True),
        key="users",
        page=page,
        per_page=per_page,
        total=pagination.total,
    )


def _transfer_ownership(owner: User, target: User) -> User:
    """
    Demote the current owner, then promote the target.

    The promotion is the risky step and runs last. If it fails the demotion
    is undone with a compensating write; if that write fails too the
    platform has no owner and the error is reported as critical.
    """
    owner_id, target_id = owner.id, target.id

    try:
        with transactional("ownership.transfer demote"):
            _set_platform_role(owner_id, "admin")
    except SQLAlchemyError as exc:
        current_app.logger.error(f"[ownership.transfer] demoting owner {owner_id} failed: {exc}")
        raise InternalError("Failed to transfer ownership: could not demote current owner")

    outcome = run_compensated(
        lambda: _set_platform_role(target_id, "owner"),
        lambda: _set_platform_role(owner_id, "owner"),
        label="ownership.transfer",
    )

    if outcome is Outcome.CRITICAL:
        raise CriticalError(
            "Critical error during ownership transfer. Please contact support immediately.",
            payload={"outcome": outcome.value}
        )

    if outcome is Outcome.ROLLED_BACK:
        raise InternalError(
            "Failed to transfer ownership: could not promote new owner. Changes rolled back.",
            payload={"outcome": outcome.value}
        )

    current_app.logger.info(f"Ownership transferred from {owner_id} to {target_id}")
    return db.session.get(User, target_id)


def change_role(*, actor: User, target_user_id: str, new_role: Any) -> User:
    """
    Change a user's platform role. Only the owner may call this.

    Promoting someone to owner is an ownership transfer; the owner can
    never be demoted directly.
    """
    if not is_owner(actor.platform_role):
        raise Forbidden("Only the platform owner can change user roles")

    if new_role not in PLATFORM_ROLES:
        raise ValidationError("Invalid role. Must be user, admin, or owner")

    target = db.session.get(User, target_user_id)
    if target is None:
        raise NotFound("User not found")

    if target.platform_role == "owner" and new_role != "owner":
        raise ValidationError("Cannot demote the platform owner. Transfer ownership first.")

    if new_role == "owner" and target.platform_role != "owner":
        return _transfer_ownership(actor, target)

    if target.platform_role == new_role:
        return target

    with transactional():
        _set_platform_role(target.id, new_role)

    return target


def delete_user(*, actor: User, target_user_id: str) -> User:
    """
    Admins may delete regular users; only the owner may delete admins.
    Nobody deletes the owner or themselves.

    The user's drops, assets, bookmarks and memberships go with them. Other
    people's drops, galleries and streams that showed their content are
    re-compacted in the same transaction.
    """
    if target_user_id == actor.id:
        raise ValidationError("Cannot delete your own account from admin panel")

    target = db.session.get(User, target_user_id)
    if target is None:
        raise NotFound("User not found")

    if target.platform_role == "owner":
        raise ValidationError("Cannot delete the platform owner")

    if target.platform_role == "admin" and not is_owner(actor.platform_role):
        raise Forbidden("Only the owner can delete admin accounts")

    with transactional("user.delete"):
        for drop in Drop.query.filter_by(created_by=target.id).all():
            db.session.delete(drop)
        db.session.flush()

        uploaded = db.session.query(Asset.id).filter_by(uploader_id=target.id).all()
        delete_assets([asset_id for (asset_id,) in uploaded])

        bookmarks = StreamBookmark.query.filter_by(created_by=target.id).all()
        touched_streams = {bookmark.stream_id for bookmark in bookmarks}
        for bookmark in bookmarks:
            db.session.delete(bookmark)
        db.session.flush()
        for stream_id in touched_streams:
            stream_bookmarks(stream_id).compact()

        StreamMember.query.filter_by(user_id=target.id).delete(synchronize_session="fetch")
        AssetStream.query.filter_by(added_by=target.id).update(
            {AssetStream.added_by: None},
            synchronize_session="fetch",
        )

        db.session.delete(target)

    current_app.logger.info(f"User {target_user_id} deleted by {actor.id}")
    return target
