from dropstream.extensions import db
from .base import BaseModel

class GalleryImage(BaseModel):
    __tablename__ = "drop_block_gallery_images"

    block_id = db.Column(db.String(36), db.ForeignKey("drop_blocks.id", ondelete="CASCADE"), nullable=False)
    asset_id = db.Column(db.String(36), db.ForeignKey("assets.id", ondelete="CASCADE"), nullable=False)
    position = db.Column(db.Integer, nullable=False, default=0)

    block = db.relationship("DropBlock", back_populates="gallery_images")
    asset = db.relationship("Asset")

    __table_args__ = (
        db.UniqueConstraint("block_id", "asset_id", name="uq_gallery_block_asset"),
        db.UniqueConstraint("block_id", "position", name="uq_gallery_block_position"),
        db.Index("idx_gallery_block_position", "block_id", "position"),
    )
