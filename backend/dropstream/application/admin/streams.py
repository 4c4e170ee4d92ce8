# dropstream/application/admin/streams.py
from typing import Any, Dict, Optional

from flask import current_app

from dropstream.domain.streams import STREAM_STATUSES, is_valid_stream_name, normalize_stream_name
from dropstream.errors import Conflict, NotFound, ValidationError
from dropstream.extensions import db
from dropstream.models.bookmark import StreamBookmark
from dropstream.models.stream import Stream, StreamMember
from dropstream.models.user import User
from dropstream.normalizers.pagination import normalize_pagination
from dropstream.normalizers.stream import normalize_stream
from dropstream.normalizers.user import normalize_user
from dropstream.utils.positions import PositionedCollection
from dropstream.utils.transaction import transactional
from ..assets import delete_assets
from ..streams.streams import count_assets, count_members, get_stream


def list_streams(
    *,
    search: str = "",
    status: str = "all",
    page: int = 1,
    per_page: int = 20,
) -> Dict[str, Any]:
    """
    Admin listing with owner details and derived asset/member counts.
    """
    if status != "all" and status not in STREAM_STATUSES:
        raise ValidationError("status must be one of all, active, archived")

    query = Stream.query
    if search:
        query = query.filter(Stream.name.ilike(f"%{search}%"))
    if status != "all":
        query = query.filter(Stream.status == status)

    pagination = query.order_by(Stream.created_at.desc()).paginate(
        page=page, per_page=per_page, error_out=False
    )
    streams = pagination.items
    stream_ids = [s.id for s in streams]

    user_owner_ids = {s.owner_id for s in streams if s.owner_type == "user"}
    owners = {
        u.id: normalize_user(u)
        for u in (User.query.filter(User.id.in_(user_owner_ids)).all() if user_owner_ids else [])
    }
    asset_counts = count_assets(stream_ids)
    member_counts = count_members(stream_ids)

    return normalize_pagination(
        streams,
        lambda s: normalize_stream(
            s,
            asset_count=asset_counts.get(s.id, 0),
            member_count=member_counts.get(s.id, 0),
            owner=owners.get(s.owner_id) if s.owner_type == "user" else None,
        ),
        key="streams",
        page=page,
        per_page=per_page,
        total=pagination.total,
    )


def rename_stream(*, stream_id: str, name: Any) -> Stream:
    """
    Rename a stream to the slug form of `name`.

    A name held by another stream is a NAME_CONFLICT carrying that stream,
    so the caller can offer a merge instead.
    """
    if not name or not isinstance(name, str):
        raise ValidationError("Name is required")

    normalized = normalize_stream_name(name)
    if not is_valid_stream_name(normalized):
        raise ValidationError("Name must be between 2 and 50 characters")

    stream = get_stream(stream_id)
    if stream.name == normalized:
        return stream

    existing = Stream.query.filter(Stream.name == normalized, Stream.id != stream.id).first()
    if existing:
        raise Conflict(
            "Name already exists",
            code="NAME_CONFLICT",
            payload={"existing_stream": {"id": existing.id, "name": existing.name}}
        )

    with transactional():
        stream.name = normalized

    return stream


def delete_stream(*, stream_id: str, delete_assets_too: bool = False) -> Dict[str, int]:
    """
    Delete a stream. Its asset tags, members and bookmarks go with it;
    with `delete_assets_too` the tagged assets themselves are deleted as well.
    """
    stream = get_stream(stream_id)

    with transactional("stream.delete"):
        asset_ids = [link.asset_id for link in stream.asset_links]
        # tags go with the stream before any asset is deleted
        db.session.delete(stream)
        db.session.flush()

        deleted_assets = delete_assets(asset_ids) if delete_assets_too else 0

    return {"deleted_assets": deleted_assets}


def merge_streams(*, source_id: Any, target_id: Any, actor_id: Optional[str] = None) -> Dict[str, Any]:
    """
    Fold `source` into `target`, then delete `source`.

    - assets: re-tagged to target unless target already has them
    - members: added to target unless already there; owners join as members
    - bookmarks: appended after target's own, keeping their order

    One transaction: on any failure neither stream changes.
    """
    if not all(isinstance(i, str) and i for i in (source_id, target_id)):
        raise ValidationError("source_id and target_id are required")

    if source_id == target_id:
        raise ValidationError("Cannot merge stream into itself")

    streams = {s.id: s for s in Stream.query.filter(Stream.id.in_([source_id, target_id])).all()}
    if len(streams) != 2:
        raise NotFound("One or both streams not found")

    source, target = streams[source_id], streams[target_id]
    summary = {
        "source": {"id": source.id, "name": source.name},
        "target": {"id": target.id, "name": target.name},
    }

    with transactional("stream.merge"):
        target_asset_ids = {link.asset_id for link in target.asset_links}
        assets_moved = 0
        for link in list(source.asset_links):
            if link.asset_id in target_asset_ids:
                # delete-orphan removes the duplicate tag
                source.asset_links.remove(link)
            else:
                link.stream = target
                assets_moved += 1

        target_member_ids = {member.user_id for member in target.members}
        members_added = 0
        for member in source.members:
            if member.user_id in target_member_ids:
                continue
            db.session.add(StreamMember(
                stream=target,
                user_id=member.user_id,
                role="member" if member.role == "owner" else member.role,
            ))
            members_added += 1

        start = PositionedCollection(StreamBookmark, "stream_id", target.id).next_position()
        moved_bookmarks = sorted(source.bookmarks, key=lambda b: b.position)
        for offset, bookmark in enumerate(moved_bookmarks):
            bookmark.stream = target
            bookmark.position = start + offset

        db.session.flush()
        db.session.delete(source)

    current_app.logger.info(
        f"Merged stream {summary['source']['id']} into {summary['target']['id']} (actor {actor_id})"
    )

    summary.update({
        "assets_moved": assets_moved,
        "members_added": members_added,
        "bookmarks_moved": len(moved_bookmarks),
    })
    return summary
