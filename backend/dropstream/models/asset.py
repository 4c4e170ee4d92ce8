from dropstream.extensions import db
from .base import BaseModel

class Asset(BaseModel):
    __tablename__ = "assets"

    title = db.Column(db.String(255), nullable=False)
    url = db.Column(db.String(1024), nullable=False)
    asset_type = db.Column(db.String(20), nullable=False, default="image")  # image, video, embed
    uploader_id = db.Column(db.String(36), db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    stream_links = db.relationship(
        "AssetStream",
        back_populates="asset",
        cascade="all, delete-orphan"
    )
