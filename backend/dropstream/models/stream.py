from dropstream.extensions import db
from .base import BaseModel, utc_now

class Stream(BaseModel):
    __tablename__ = "streams"

    name = db.Column(db.String(50), unique=True, nullable=False, index=True)
    description = db.Column(db.Text, nullable=True)
    owner_type = db.Column(db.String(10), nullable=False, default="user")  # user | team
    owner_id = db.Column(db.String(36), nullable=False, index=True)
    is_private = db.Column(db.Boolean, nullable=False, default=False)
    status = db.Column(db.String(20), nullable=False, default="active", index=True)  # active | archived
    cover_image_url = db.Column(db.String(1024), nullable=True)

    asset_links = db.relationship(
        "AssetStream",
        back_populates="stream",
        cascade="all, delete-orphan"
    )
    members = db.relationship(
        "StreamMember",
        back_populates="stream",
        cascade="all, delete-orphan"
    )
    bookmarks = db.relationship(
        "StreamBookmark",
        back_populates="stream",
        order_by="StreamBookmark.position",
        cascade="all, delete-orphan"
    )

    def is_owned_by(self, user) -> bool:
        return self.owner_type == "user" and self.owner_id == user.id


class AssetStream(BaseModel):
    """Asset ↔ stream tag. Ordered by added_at, never by position."""
    __tablename__ = "asset_streams"

    asset_id = db.Column(db.String(36), db.ForeignKey("assets.id", ondelete="CASCADE"), nullable=False, index=True)
    stream_id = db.Column(db.String(36), db.ForeignKey("streams.id", ondelete="CASCADE"), nullable=False, index=True)
    added_by = db.Column(db.String(36), db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    added_at = db.Column(db.DateTime, nullable=False, default=utc_now, index=True)

    asset = db.relationship("Asset", back_populates="stream_links")
    stream = db.relationship("Stream", back_populates="asset_links")

    __table_args__ = (
        db.UniqueConstraint("asset_id", "stream_id", name="uq_asset_stream"),
        db.Index("ix_asset_streams_cursor", "stream_id", "added_at", "id"),
    )


class StreamMember(BaseModel):
    __tablename__ = "stream_members"

    stream_id = db.Column(db.String(36), db.ForeignKey("streams.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = db.Column(db.String(36), db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    role = db.Column(db.String(20), nullable=False, default="member")  # owner | admin | member

    stream = db.relationship("Stream", back_populates="members")

    __table_args__ = (
        db.UniqueConstraint("stream_id", "user_id", name="uq_stream_member"),
    )
