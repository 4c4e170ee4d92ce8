# dropstream/application/streams/bookmarks.py
from typing import Any, List
from urllib.parse import urlparse

from dropstream.errors import Forbidden, NotFound, ValidationError
from dropstream.models.bookmark import StreamBookmark
from dropstream.utils.positions import PositionedCollection
from dropstream.utils.transaction import transactional
from .streams import get_stream


def stream_bookmarks(stream_id: str) -> PositionedCollection:
    return PositionedCollection(StreamBookmark, "stream_id", stream_id, label="stream bookmark")


def _validate_url(url: Any) -> str:
    if not isinstance(url, str) or not url.strip():
        raise ValidationError("URL is required")

    parsed = urlparse(url.strip())
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValidationError("Invalid URL format")

    return url.strip()


def list_bookmarks(*, stream_id: str) -> List[StreamBookmark]:
    stream = get_stream(stream_id)
    return (
        stream_bookmarks(stream.id)
        .query()
        .order_by(StreamBookmark.position.asc(), StreamBookmark.created_at.asc())
        .all()
    )


def add_bookmark(*, stream_id: str, user, url: Any, title: Any = None) -> StreamBookmark:
    """
    Append a bookmark. Any signed-in user may contribute one.
    """
    url = _validate_url(url)
    if title is not None and not isinstance(title, str):
        raise ValidationError("title must be a string")

    stream = get_stream(stream_id)
    bookmark = StreamBookmark(url=url, title=title or None, created_by=user.id)

    with transactional():
        stream_bookmarks(stream.id).insert(bookmark)

    return bookmark


def delete_bookmark(*, stream_id: str, bookmark_id: str, user) -> None:
    """
    Only the bookmark's creator or the stream's owner may delete it.
    """
    stream = get_stream(stream_id)
    collection = stream_bookmarks(stream.id)

    bookmark = collection.query().filter(StreamBookmark.id == bookmark_id).first()
    if bookmark is None:
        raise NotFound("Bookmark not found")

    if bookmark.created_by != user.id and not stream.is_owned_by(user):
        raise Forbidden("You do not have permission to delete this bookmark")

    with transactional():
        collection.remove(bookmark)

    collection.check()


def reorder_bookmarks(*, stream_id: str, user, bookmark_ids: Any) -> List[StreamBookmark]:
    if not isinstance(bookmark_ids, list):
        raise ValidationError("bookmark_ids must be an array")

    stream = get_stream(stream_id)
    if not stream.is_owned_by(user):
        raise Forbidden("Only the stream owner can reorder bookmarks")

    collection = stream_bookmarks(stream.id)
    with transactional():
        collection.reorder(bookmark_ids)

    collection.check()
    return collection.ordered()
