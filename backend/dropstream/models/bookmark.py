from dropstream.extensions import db
from .base import BaseModel

class StreamBookmark(BaseModel):
    __tablename__ = "stream_bookmarks"

    stream_id = db.Column(db.String(36), db.ForeignKey("streams.id", ondelete="CASCADE"), nullable=False, index=True)
    url = db.Column(db.String(2048), nullable=False)
    title = db.Column(db.String(255), nullable=True)  # UI falls back to the domain
    created_by = db.Column(db.String(36), db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    position = db.Column(db.Integer, nullable=False, default=0)

    stream = db.relationship("Stream", back_populates="bookmarks")

    __table_args__ = (
        db.UniqueConstraint("stream_id", "position", name="uq_stream_bookmark_position"),
    )
