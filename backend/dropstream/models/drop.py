from dropstream.extensions import db
from .base import BaseModel

class Drop(BaseModel):
    __tablename__ = "drops"

    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    status = db.Column(db.String(20), nullable=False, default="draft", index=True)  # draft | published
    created_by = db.Column(db.String(36), db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    published_at = db.Column(db.DateTime, nullable=True)

    # One-way switch to the block editor; set on first block insert
    use_blocks = db.Column(db.Boolean, nullable=False, default=False)

    blocks = db.relationship(
        "DropBlock",
        back_populates="drop",
        order_by="DropBlock.position",
        cascade="all, delete-orphan"
    )

    def is_visible_to(self, user) -> bool:
        return self.status == "published" or self.created_by == user.id
