# dropstream/application/drops/blocks.py
from typing import Any, Dict, List, Optional

from flask import current_app

from dropstream.domain.blocks import PAYLOAD_COLUMNS, PostBlock, parse_block, parse_block_update
from dropstream.errors import NotFound, ValidationError
from dropstream.extensions import db
from dropstream.models.asset import Asset
from dropstream.models.drop_block import DropBlock
from dropstream.utils.optimistic_lock import enforce_optimistic_lock
from dropstream.utils.positions import PositionedCollection
from dropstream.utils.transaction import transactional
from .access import get_drop_block, get_owned_drop, get_visible_drop


def drop_blocks(drop_id: str) -> PositionedCollection:
    return PositionedCollection(DropBlock, "drop_id", drop_id, label="drop block")


def list_blocks(*, drop_id: str, user) -> List[DropBlock]:
    drop = get_visible_drop(drop_id, user)
    return drop_blocks(drop.id).ordered()


def add_block(*, drop_id: str, user, data: Dict[str, Any]) -> DropBlock:
    """
    Insert a block into a drop.

    Responsibilities:
    - Validate the block variant before touching the store
    - Shift later blocks when an explicit position is given
    - Flip the drop over to the block editor on first insert
    """
    payload = parse_block(data)
    drop = get_owned_drop(drop_id, user)

    if isinstance(payload, PostBlock) and db.session.get(Asset, payload.asset_id) is None:
        raise NotFound("Asset not found")

    block = DropBlock(type=payload.type)
    for column in PAYLOAD_COLUMNS:
        setattr(block, column, None)
    for column, value in payload.columns().items():
        setattr(block, column, value)

    collection = drop_blocks(drop.id)
    with transactional():
        collection.insert(block, data.get("position"))

        if not drop.use_blocks:
            drop.use_blocks = True

    collection.check()
    current_app.logger.debug(f"Inserted {block.type} block {block.id} at {block.position} in drop {drop.id}")
    return block


def update_block(
    *,
    drop_id: str,
    block_id: str,
    user,
    data: Dict[str, Any],
    if_unmodified_since: Optional[str] = None,
) -> DropBlock:
    drop = get_owned_drop(drop_id, user)
    block = get_drop_block(drop, block_id)
    enforce_optimistic_lock(block, if_unmodified_since)

    changes = parse_block_update(block.type, data)

    with transactional():
        for field, value in changes.items():
            setattr(block, field, value)

    return block


def delete_block(*, drop_id: str, block_id: str, user) -> None:
    """
    Delete a block and pull every later block up by one.
    """
    drop = get_owned_drop(drop_id, user)
    block = get_drop_block(drop, block_id)

    collection = drop_blocks(drop.id)
    with transactional():
        collection.remove(block)

    collection.check()


def reorder_blocks(*, drop_id: str, user, block_ids: Any) -> List[DropBlock]:
    if not isinstance(block_ids, list):
        raise ValidationError("block_ids must be an array")

    drop = get_owned_drop(drop_id, user)

    collection = drop_blocks(drop.id)
    with transactional():
        collection.reorder(block_ids)

    collection.check()
    return collection.ordered()
