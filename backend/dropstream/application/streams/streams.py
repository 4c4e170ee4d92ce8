# dropstream/application/streams/streams.py
from typing import Any, Dict, Iterable, List, Optional, Tuple

from dropstream.domain.streams import is_valid_stream_name, normalize_stream_name
from dropstream.errors import NotFound, ValidationError
from dropstream.extensions import db
from dropstream.models.asset import Asset
from dropstream.models.stream import AssetStream, Stream, StreamMember
from dropstream.utils.pagination import CursorMeta, apply_cursor, paginate_cursor
from dropstream.utils.transaction import transactional


def get_stream(stream_id: str) -> Stream:
    stream = db.session.get(Stream, stream_id)
    if stream is None:
        raise NotFound("Stream not found")
    return stream


def create_stream(*, user, data: Dict[str, Any]) -> Tuple[Stream, bool]:
    """
    Create a stream owned by `user`.

    The name is stored in slug form. If a stream already holds that name it
    is returned unchanged instead.
    """
    name = data.get("name")
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("Name is required")

    normalized = normalize_stream_name(name)
    if not is_valid_stream_name(normalized):
        raise ValidationError("Stream name must be between 2 and 50 characters")

    description = data.get("description")
    if description is not None and not isinstance(description, str):
        raise ValidationError("description must be a string")

    is_private = data.get("is_private", False)
    if not isinstance(is_private, bool):
        raise ValidationError("is_private must be a boolean")

    existing = Stream.query.filter_by(name=normalized).first()
    if existing is not None:
        return existing, False

    stream = Stream(
        name=normalized,
        description=(description or "").strip() or None,
        owner_type="user",
        owner_id=user.id,
        is_private=is_private,
        status="active",
    )
    with transactional("stream.create"):
        db.session.add(stream)
        db.session.add(StreamMember(stream=stream, user_id=user.id, role="owner"))

    return stream, True


def _count_by_stream(model, stream_ids: Iterable[str]) -> Dict[str, int]:
    stream_ids = list(stream_ids)
    if not stream_ids:
        return {}

    rows = (
        db.session.query(model.stream_id, db.func.count(model.id))
        .filter(model.stream_id.in_(stream_ids))
        .group_by(model.stream_id)
        .all()
    )
    return {stream_id: count for stream_id, count in rows}


def count_assets(stream_ids: Iterable[str]) -> Dict[str, int]:
    return _count_by_stream(AssetStream, stream_ids)


def count_members(stream_ids: Iterable[str]) -> Dict[str, int]:
    return _count_by_stream(StreamMember, stream_ids)


def get_stream_with_counts(stream_id: str) -> Tuple[Stream, int, int]:
    stream = get_stream(stream_id)
    return (
        stream,
        count_assets([stream.id]).get(stream.id, 0),
        count_members([stream.id]).get(stream.id, 0),
    )


def list_stream_assets(
    *,
    stream_id: str,
    cursor: Optional[str],
    limit: int,
) -> Tuple[List[AssetStream], CursorMeta]:
    """
    Assets tagged to a stream, newest tag first.
    """
    stream = get_stream(stream_id)

    query = AssetStream.query.filter(AssetStream.stream_id == stream.id)
    query = apply_cursor(query, model=AssetStream, cursor=cursor, order_field="added_at")

    return paginate_cursor(query, model=AssetStream, limit=limit, order_field="added_at")


def add_asset_to_stream(*, stream_id: str, user, asset_id) -> Tuple[AssetStream, bool]:
    """
    Tag an asset to a stream. Tagging twice returns the existing link.
    """
    if not isinstance(asset_id, str) or not asset_id:
        raise ValidationError("asset_id is required")

    stream = get_stream(stream_id)
    if db.session.get(Asset, asset_id) is None:
        raise NotFound("Asset not found")

    link = AssetStream.query.filter_by(stream_id=stream.id, asset_id=asset_id).first()
    if link is not None:
        return link, False

    link = AssetStream(stream_id=stream.id, asset_id=asset_id, added_by=user.id)
    with transactional():
        db.session.add(link)

    return link, True


def list_members(*, stream_id: str) -> List[StreamMember]:
    stream = get_stream(stream_id)
    return (
        StreamMember.query
        .filter_by(stream_id=stream.id)
        .order_by(StreamMember.created_at.asc())
        .all()
    )


def join_stream(*, stream_id: str, user) -> Tuple[StreamMember, bool]:
    stream = get_stream(stream_id)

    member = StreamMember.query.filter_by(stream_id=stream.id, user_id=user.id).first()
    if member is not None:
        return member, False

    role = "owner" if stream.is_owned_by(user) else "member"
    member = StreamMember(stream_id=stream.id, user_id=user.id, role=role)
    with transactional():
        db.session.add(member)

    return member, True
