# dropstream/normalizers/stream.py
from __future__ import annotations

from typing import Any, Dict, Optional


def normalize_stream(
    stream,
    *,
    asset_count: Optional[int] = None,
    member_count: Optional[int] = None,
    owner: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    asset_count / member_count are derived by the caller; they are never
    stored on the stream row.
    """
    data: Dict[str, Any] = {
        "id": stream.id,
        "name": stream.name,
        "description": stream.description,
        "owner_type": stream.owner_type,
        "owner_id": stream.owner_id,
        "is_private": stream.is_private,
        "status": stream.status,
        "cover_image_url": stream.cover_image_url,
        "created_at": stream.created_at.isoformat() if stream.created_at else None,
        "updated_at": stream.updated_at.isoformat() if stream.updated_at else None,
    }

    if asset_count is not None:
        data["asset_count"] = asset_count
    if member_count is not None:
        data["member_count"] = member_count
    if owner is not None:
        data["owner"] = owner

    return data


def normalize_stream_asset(link) -> Dict[str, Any]:
    asset = link.asset
    return {
        "id": asset.id,
        "title": asset.title,
        "url": asset.url,
        "asset_type": asset.asset_type,
        "uploader_id": asset.uploader_id,
        "added_by": link.added_by,
        "added_at": link.added_at.isoformat(),
    }


def normalize_member(member) -> Dict[str, Any]:
    return {
        "stream_id": member.stream_id,
        "user_id": member.user_id,
        "role": member.role,
        "joined_at": member.created_at.isoformat() if member.created_at else None,
    }


def normalize_bookmark(bookmark) -> Dict[str, Any]:
    return {
        "id": bookmark.id,
        "stream_id": bookmark.stream_id,
        "url": bookmark.url,
        "title": bookmark.title,
        "created_by": bookmark.created_by,
        "position": bookmark.position,
        "created_at": bookmark.created_at.isoformat() if bookmark.created_at else None,
    }
