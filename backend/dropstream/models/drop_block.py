from dropstream.extensions import db
from .base import BaseModel

class DropBlock(BaseModel):
    __tablename__ = "drop_blocks"

    drop_id = db.Column(db.String(36), db.ForeignKey("drops.id", ondelete="CASCADE"), nullable=False)
    type = db.Column(db.String(20), nullable=False)  # see dropstream.domain.blocks
    position = db.Column(db.Integer, nullable=False, default=0)

    content = db.Column(db.Text, nullable=True)
    heading_level = db.Column(db.Integer, nullable=True)

    asset_id = db.Column(db.String(36), db.ForeignKey("assets.id", ondelete="CASCADE"), nullable=True, index=True)
    display_mode = db.Column(db.String(10), nullable=True)
    crop_position_x = db.Column(db.Float, nullable=True)
    crop_position_y = db.Column(db.Float, nullable=True)

    gallery_layout = db.Column(db.String(10), nullable=True)
    gallery_featured_index = db.Column(db.Integer, nullable=True)

    drop = db.relationship("Drop", back_populates="blocks")
    asset = db.relationship("Asset")
    gallery_images = db.relationship(
        "GalleryImage",
        back_populates="block",
        order_by="GalleryImage.position",
        cascade="all, delete-orphan"
    )

    __table_args__ = (
        db.UniqueConstraint("drop_id", "position", name="uq_drop_block_position"),
        db.Index("idx_drop_block_drop_position", "drop_id", "position"),
    )
