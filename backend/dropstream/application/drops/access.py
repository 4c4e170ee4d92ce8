from dropstream.errors import Forbidden, NotFound
from dropstream.extensions import db
from dropstream.models.drop import Drop
from dropstream.models.drop_block import DropBlock


def get_visible_drop(drop_id: str, user) -> Drop:
    """Published drops are readable by anyone signed in; drafts by their creator."""
    drop = db.session.get(Drop, drop_id)
    if drop is None:
        raise NotFound("Drop not found")
    if not drop.is_visible_to(user):
        raise Forbidden("Forbidden")
    return drop


def get_owned_drop(drop_id: str, user) -> Drop:
    drop = db.session.get(Drop, drop_id)
    if drop is None:
        raise NotFound("Drop not found")
    if drop.created_by != user.id:
        raise Forbidden("Forbidden")
    return drop


def get_drop_block(drop: Drop, block_id: str) -> DropBlock:
    block = DropBlock.query.filter_by(id=block_id, drop_id=drop.id).first()
    if block is None:
        raise NotFound("Block not found")
    return block
